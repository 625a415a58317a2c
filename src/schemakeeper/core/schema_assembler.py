#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Schema assembler

Resolves the project framework, dispatches to the matching generator and
stamps the resulting four documents with generation metadata. Persisting
the result is delegated to SchemaStore.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..detection.framework_detector import FrameworkDetector, FrameworkInfo
from ..generators import SchemaGenerator, generator_class_for
from ..storage.schema_store import SchemaStore
from ..utils.config import Config
from ..utils.constants import SCHEMA_NAMES, METADATA_NAME, SCHEMA_FORMAT_VERSION
from ..utils.helpers import iso_timestamp
from ..utils.process import ProcessRunner


@dataclass
class GenerationResult:
    """Documents produced by one generation run"""
    framework: FrameworkInfo
    schemas: Dict[str, Dict[str, Any]]
    metadata: Dict[str, Any]

    @property
    def generated_at(self) -> str:
        return self.metadata['generatedAt']

    @property
    def schema_names(self) -> List[str]:
        return list(self.schemas)

    def documents(self) -> Dict[str, Any]:
        """The four documents plus metadata, as persisted"""
        documents: Dict[str, Any] = dict(self.schemas)
        documents[METADATA_NAME] = self.metadata
        return documents


class SchemaAssembler:
    """
    Schema generation for one project root

    Each assembler is confined to its project root; no state is shared
    across roots.
    """

    def __init__(self, project_root: Union[str, Path] = '.', config: Optional[Config] = None,
                 detector: Optional[FrameworkDetector] = None,
                 runner: Optional[ProcessRunner] = None,
                 store: Optional[SchemaStore] = None):
        """
        Initialize assembler

        Args:
            project_root: Project root directory
            config: Configuration, defaults are used when None
            detector: Framework detector
            runner: Process runner for framework consoles
            store: Schema store, one bound to the project root is created when None
        """
        self.project_root = Path(project_root).resolve()
        self.config = config or Config()
        self.detector = detector or FrameworkDetector()
        self.runner = runner or ProcessRunner()
        self.store = store or SchemaStore(
            self.project_root,
            schema_dir=self.config.generation.schema_dir,
            history_limit=self.config.persistence.history_limit,
            line_width=self.config.persistence.line_width,
            info_version_limit=self.config.persistence.info_version_limit
        )
        self.logger = logging.getLogger('schemakeeper.assembler')

    def resolve_framework(self, framework_override: Union[str, FrameworkInfo, None] = None) -> FrameworkInfo:
        """
        Framework to generate for; an override wins over detection

        Raises:
            ValueError: If the override names an unknown framework
        """
        if isinstance(framework_override, FrameworkInfo):
            return framework_override
        if framework_override:
            return FrameworkInfo.from_name(framework_override)
        return self.detector.detect(self.project_root)

    def build_generator(self, framework: FrameworkInfo) -> SchemaGenerator:
        generator_class = generator_class_for(framework.type)
        return generator_class.from_config(self.project_root, framework, self.config, runner=self.runner)

    def generate(self, framework_override: Union[str, FrameworkInfo, None] = None) -> GenerationResult:
        """
        Produce the four schema documents and metadata without saving them

        Args:
            framework_override: Framework name or info to use instead of detection

        Returns:
            GenerationResult
        """
        framework = self.resolve_framework(framework_override)
        self.logger.info(f"Generating schemas for {self.project_root} ({framework.name})")

        schemas = self.build_generator(framework).generate()

        # Every run yields all four documents in a fixed order
        schemas = {name: schemas[name] for name in SCHEMA_NAMES}
        for name, document in schemas.items():
            if 'error' in document:
                self.logger.warning(f"{name} schema generated with error: {document['error']}")

        metadata = {
            'framework': framework.to_dict(),
            'generatedAt': iso_timestamp(),
            'schemaFormatVersion': SCHEMA_FORMAT_VERSION,
            'projectRoot': str(self.project_root),
        }
        return GenerationResult(framework=framework, schemas=schemas, metadata=metadata)

    def generate_and_save(self, framework_override: Union[str, FrameworkInfo, None] = None) -> Dict[str, Any]:
        """
        Generate and persist schemas

        Returns:
            {success, framework, schemas, timestamp, location, version}

        Raises:
            SchemaPersistenceError: If writing the documents fails
        """
        result = self.generate(framework_override)
        saved = self.store.save(result.documents())

        return {
            'success': True,
            'framework': result.framework.to_dict(),
            'schemas': result.schema_names,
            'timestamp': result.generated_at,
            'location': saved.location,
            'version': saved.version,
        }
