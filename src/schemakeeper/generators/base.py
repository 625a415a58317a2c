#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Schema generator base classes
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..detection.framework_detector import FrameworkInfo, FrameworkType
from ..utils.config import Config
from ..utils.constants import SCHEMA_NAMES, SCHEMA_TYPE_TAGS
from ..utils.process import ProcessRunner


class SchemaGenerator(ABC):
    """
    Produces the four schema documents for one project

    Implementations must return every name in SCHEMA_NAMES and isolate
    failures per document.
    """

    def __init__(self, project_root: Union[str, Path], framework: FrameworkInfo):
        self.project_root = Path(project_root)
        self.framework = framework
        self.logger = logging.getLogger(f'schemakeeper.generator.{framework.name}')

    @classmethod
    def from_config(cls, project_root: Union[str, Path], framework: FrameworkInfo,
                    config: Config, runner: Optional[ProcessRunner] = None) -> 'SchemaGenerator':
        """Build a generator from the generation settings; plain construction by default"""
        return cls(project_root, framework)

    @abstractmethod
    def generate(self) -> Dict[str, Dict[str, Any]]:
        """Return {schema name: document} for all four schema names"""

    def new_document(self, schema_name: str, **sections: Any) -> Dict[str, Any]:
        """Document skeleton carrying the type and framework tags"""
        document: Dict[str, Any] = {
            'type': SCHEMA_TYPE_TAGS[schema_name],
            'framework': self.framework.name,
        }
        document.update(sections)
        return document


# Human-readable framework names used in placeholder notes
FRAMEWORK_LABELS = {
    FrameworkType.LARAVEL: 'Laravel',
    FrameworkType.RAILS: 'Rails',
    FrameworkType.DJANGO: 'Django',
    FrameworkType.EXPRESS: 'Express',
    FrameworkType.UNKNOWN: 'Framework-agnostic',
}

# Note fragment per schema name
PLACEHOLDER_SUBJECTS = {
    'database': 'schema',
    'api': 'API schema',
    'businessLogic': 'business logic schema',
    'componentArchitecture': 'component schema',
}


class PlaceholderGenerator(SchemaGenerator):
    """Stub documents for frameworks without extraction support"""

    def generate(self) -> Dict[str, Dict[str, Any]]:
        label = FRAMEWORK_LABELS.get(self.framework.type, self.framework.name)
        self.logger.info(f"No extractor for {self.framework.name}, writing placeholder schemas")
        return {
            name: self.new_document(
                name,
                note=f"{label} {PLACEHOLDER_SUBJECTS[name]} generation implementation pending"
            )
            for name in SCHEMA_NAMES
        }
