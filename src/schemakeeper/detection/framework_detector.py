#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Framework detector

Inspects marker files in a project root and identifies the application
framework the project is built on. Checks run in a fixed order and the
first match wins: Laravel, Rails, Django, Express.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union
from dataclasses import dataclass

from ..utils.constants import ERROR_MESSAGES


class FrameworkType(Enum):
    """Supported framework tags"""
    LARAVEL = "laravel"
    RAILS = "rails"
    DJANGO = "django"
    EXPRESS = "express"
    UNKNOWN = "unknown"


# Rails and Django detection does not parse a real version
DETECTED_VERSION = "detected"


@dataclass(frozen=True)
class FrameworkInfo:
    """Result of framework detection"""
    type: FrameworkType
    version: Optional[str] = None
    error: Optional[str] = None

    @property
    def name(self) -> str:
        return self.type.value

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'type': self.type.value, 'version': self.version}
        if self.error:
            data['error'] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FrameworkInfo':
        return cls(
            type=FrameworkType(data.get('type', 'unknown')),
            version=data.get('version'),
            error=data.get('error')
        )

    @classmethod
    def from_name(cls, name: str) -> 'FrameworkInfo':
        """
        Build an override from a framework name

        Raises:
            ValueError: If the name is not a known framework tag
        """
        try:
            return cls(type=FrameworkType(name.strip().lower()))
        except ValueError:
            raise ValueError(ERROR_MESSAGES['invalid_framework'].format(name))


class FrameworkDetector:
    """
    Marker-file based framework detector

    detect() never raises: I/O and parse failures degrade to an
    unknown result carrying the error message.
    """

    LARAVEL_MARKERS = ('artisan', 'composer.json')
    LARAVEL_PACKAGE = 'laravel/framework'
    RAILS_MARKERS = ('Gemfile', 'config/application.rb')
    DJANGO_MARKERS = ('manage.py', 'requirements.txt')
    EXPRESS_MANIFEST = 'package.json'
    EXPRESS_PACKAGE = 'express'

    def __init__(self):
        self.logger = logging.getLogger('schemakeeper.detector')

    def detect(self, project_root: Union[str, Path]) -> FrameworkInfo:
        """
        Detect the framework of a project

        Args:
            project_root: Project root directory

        Returns:
            FrameworkInfo for the first matching framework, or unknown
        """
        root = Path(project_root)

        try:
            # Laravel
            if self._all_exist(root, self.LARAVEL_MARKERS):
                composer_content = (root / 'composer.json').read_text(encoding='utf-8')
                if self.LARAVEL_PACKAGE in composer_content:
                    return FrameworkInfo(FrameworkType.LARAVEL, self._extract_laravel_version(composer_content))

            # Rails
            if self._all_exist(root, self.RAILS_MARKERS):
                return FrameworkInfo(FrameworkType.RAILS, DETECTED_VERSION)

            # Django
            if self._all_exist(root, self.DJANGO_MARKERS):
                return FrameworkInfo(FrameworkType.DJANGO, DETECTED_VERSION)

            # Express
            manifest = root / self.EXPRESS_MANIFEST
            if manifest.exists():
                package = json.loads(manifest.read_text(encoding='utf-8'))
                version = self._express_version(package)
                if version is not None:
                    return FrameworkInfo(FrameworkType.EXPRESS, version)

            return FrameworkInfo(FrameworkType.UNKNOWN)

        except (OSError, ValueError, AttributeError) as e:
            self.logger.warning(f"Framework detection failed for {root}: {e}")
            return FrameworkInfo(FrameworkType.UNKNOWN, error=str(e))

    def _all_exist(self, root: Path, markers) -> bool:
        return all((root / marker).exists() for marker in markers)

    def _extract_laravel_version(self, composer_content: str) -> str:
        """Version constraint of laravel/framework from composer.json require"""
        try:
            composer = json.loads(composer_content)
        except ValueError:
            return 'unknown'
        require = composer.get('require') if isinstance(composer, dict) else None
        if isinstance(require, dict) and require.get(self.LARAVEL_PACKAGE):
            return str(require[self.LARAVEL_PACKAGE])
        return 'unknown'

    def _express_version(self, package: Dict[str, Any]) -> Optional[str]:
        """Declared express range from dependencies, then devDependencies"""
        for section in ('dependencies', 'devDependencies'):
            deps = package.get(section) or {}
            if isinstance(deps, dict) and deps.get(self.EXPRESS_PACKAGE):
                return str(deps[self.EXPRESS_PACKAGE])
        return None
