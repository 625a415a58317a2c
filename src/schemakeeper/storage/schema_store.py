#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Schema persistence module

Owns the on-disk layout under a project's schema root:

    <root>/current/<name>-schema.yml   latest documents (overwritten each run)
    <root>/current/metadata.yml
    <root>/versions/v<timestamp>/      one snapshot per run, never pruned
    <root>/history/changes.yml         newest-first ledger, bounded length
    <root>/integration.log             JSON lines of tool-driven runs
"""

import json
import logging
from datetime import datetime, timezone
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..utils.constants import (
    SCHEMA_NAMES,
    METADATA_NAME,
    DEFAULT_SCHEMA_DIR,
    CURRENT_DIR_NAME,
    VERSIONS_DIR_NAME,
    HISTORY_DIR_NAME,
    HISTORY_FILE_NAME,
    INTEGRATION_LOG_NAME,
    SCHEMA_FILE_SUFFIX,
    YAML_EXTENSION,
    HISTORY_LIMIT,
    YAML_LINE_WIDTH,
    ERROR_MESSAGES,
)
from ..utils.helpers import ensure_directory, iso_timestamp, utc_now, version_key


class SchemaPersistenceError(Exception):
    """Writing schemas to disk failed"""


@dataclass
class SaveResult:
    """Location handle returned by a successful save"""
    location: str
    version: str
    version_path: str
    timestamp: str


class SchemaStore:
    """
    Schema persistence bound to one project root

    Concurrent saves against the same root are not coordinated; callers
    must serialize generation per project root.
    """

    CHANGE_LOG = 'Schema generation completed successfully'

    def __init__(self, project_root: Union[str, Path], schema_dir: str = DEFAULT_SCHEMA_DIR,
                 history_limit: int = HISTORY_LIMIT, line_width: int = YAML_LINE_WIDTH,
                 info_version_limit: int = 10):
        """
        Initialize schema store

        Args:
            project_root: Project root directory
            schema_dir: Schema root, relative to the project root
            history_limit: Maximum number of history ledger entries
            line_width: Preferred YAML line width
            info_version_limit: Versions reported by get_schema_info
        """
        self.project_root = Path(project_root).resolve()
        self.schema_dir = self.project_root / schema_dir
        self.current_dir = self.schema_dir / CURRENT_DIR_NAME
        self.versions_dir = self.schema_dir / VERSIONS_DIR_NAME
        self.history_dir = self.schema_dir / HISTORY_DIR_NAME
        self.history_file = self.history_dir / HISTORY_FILE_NAME
        self.integration_log = self.schema_dir / INTEGRATION_LOG_NAME
        self.metadata_file = self.current_dir / f'{METADATA_NAME}{YAML_EXTENSION}'

        self.history_limit = history_limit
        self.line_width = line_width
        self.info_version_limit = info_version_limit
        self.logger = logging.getLogger('schemakeeper.schema_store')

    # ==================== Serialization ====================

    def dump_yaml(self, data: Any) -> str:
        """
        Block-style, key-order-preserving YAML

        Non-ASCII characters are written as escapes in double-quoted
        scalars; raw NEL and LS/PS characters would be folded on reload.
        """
        return yaml.safe_dump(
            data,
            default_flow_style=False,
            sort_keys=False,
            width=self.line_width
        )

    @staticmethod
    def load_yaml(text: str) -> Any:
        return yaml.safe_load(text)

    def _write(self, path: Path, data: Any):
        path.write_text(self.dump_yaml(data), encoding='utf-8')

    def schema_file(self, name: str) -> Path:
        return self.current_dir / f'{name}{SCHEMA_FILE_SUFFIX}'

    # ==================== Save ====================

    def ensure_directories(self):
        """Create schema root, current, versions and history directories"""
        for directory in (self.schema_dir, self.current_dir, self.versions_dir, self.history_dir):
            ensure_directory(directory)

    def save(self, schemas: Dict[str, Any]) -> SaveResult:
        """
        Persist one generation run

        Args:
            schemas: {schema name: document} plus a 'metadata' entry

        Returns:
            SaveResult with the current location and the version key

        Raises:
            SchemaPersistenceError: If any directory or file cannot be written
        """
        metadata = schemas.get(METADATA_NAME) or {}
        timestamp = metadata.get('generatedAt') or iso_timestamp()
        schema_names = [name for name in schemas if name != METADATA_NAME]

        try:
            self.ensure_directories()

            # Current documents, overwriting the previous run
            for name in schema_names:
                self._write(self.schema_file(name), schemas[name])
            self._write(self.metadata_file, metadata)

            # Version snapshot
            version_dir = self._new_version_dir(version_key(str(timestamp)))
            for name, document in schemas.items():
                self._write(version_dir / f'{name}{YAML_EXTENSION}', document)

            # History ledger
            self.append_history({
                'timestamp': timestamp,
                'version': version_dir.name,
                'framework': metadata.get('framework'),
                'schemas': schema_names,
                'changeLog': self.CHANGE_LOG,
            })

        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to persist schemas under {self.schema_dir}: {e}")
            raise SchemaPersistenceError(ERROR_MESSAGES['persistence_failed'].format(e)) from e

        self.logger.info(f"Schemas saved to {self.current_dir} (version {version_dir.name})")
        return SaveResult(
            location=str(self.current_dir),
            version=version_dir.name,
            version_path=str(version_dir),
            timestamp=str(timestamp)
        )

    def _new_version_dir(self, key: str) -> Path:
        """Create a snapshot directory that does not exist yet"""
        candidate = self.versions_dir / key
        suffix = 1
        while candidate.exists():
            candidate = self.versions_dir / f'{key}-{suffix}'
            suffix += 1
        candidate.mkdir(parents=True)
        return candidate

    # ==================== History ====================

    def read_history(self) -> List[Dict[str, Any]]:
        """Ledger entries newest-first; a missing or corrupt ledger reads as empty"""
        try:
            history = self.load_yaml(self.history_file.read_text(encoding='utf-8'))
        except FileNotFoundError:
            return []
        except (OSError, ValueError, yaml.YAMLError) as e:
            self.logger.warning(f"History ledger unreadable, starting a new one: {e}")
            return []

        if not isinstance(history, list):
            if history is not None:
                self.logger.warning("History ledger is not a list, starting a new one")
            return []
        return history

    def append_history(self, entry: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Prepend an entry and rewrite the ledger, keeping the newest history_limit"""
        history = self.read_history()
        history.insert(0, entry)
        history = history[:self.history_limit]
        ensure_directory(self.history_dir)
        self._write(self.history_file, history)
        return history

    # ==================== Load ====================

    def load_metadata(self) -> Optional[Dict[str, Any]]:
        """
        Current generation metadata

        Returns:
            Metadata mapping, or None if nothing has been generated yet

        Raises:
            OSError, yaml.YAMLError: If the metadata file exists but cannot be read
        """
        if not self.metadata_file.exists():
            return None
        metadata = self.load_yaml(self.metadata_file.read_text(encoding='utf-8'))
        return metadata if isinstance(metadata, dict) else None

    def load_schema(self, name: str) -> Optional[Dict[str, Any]]:
        """Current document for a schema name, None if absent"""
        path = self.schema_file(name)
        if not path.exists():
            return None
        return self.load_yaml(path.read_text(encoding='utf-8'))

    def load_current(self) -> Dict[str, Any]:
        """All current documents that exist, keyed by schema name"""
        documents = {}
        for name in SCHEMA_NAMES:
            document = self.load_schema(name)
            if document is not None:
                documents[name] = document
        return documents

    def available_schemas(self) -> List[str]:
        if not self.current_dir.is_dir():
            return []
        return sorted(
            path.name[:-len(SCHEMA_FILE_SUFFIX)]
            for path in self.current_dir.iterdir()
            if path.name.endswith(SCHEMA_FILE_SUFFIX)
        )

    def list_versions(self) -> List[str]:
        """Version keys, latest first"""
        if not self.versions_dir.is_dir():
            return []
        return sorted((path.name for path in self.versions_dir.iterdir() if path.is_dir()), reverse=True)

    def get_schema_info(self) -> Dict[str, Any]:
        """
        Summary of the current schemas

        "No schemas yet" is reported as success False, not raised.
        """
        try:
            metadata = self.load_metadata()
            if metadata is None:
                return {
                    'success': False,
                    'error': ERROR_MESSAGES['no_schemas'],
                    'location': str(self.schema_dir)
                }

            return {
                'success': True,
                'current': metadata,
                'availableSchemas': self.available_schemas(),
                'versions': self.list_versions()[:self.info_version_limit],
                'location': str(self.schema_dir)
            }
        except (OSError, ValueError, yaml.YAMLError) as e:
            return {
                'success': False,
                'error': str(e),
                'location': str(self.schema_dir)
            }

    def get_statistics(self) -> Dict[str, Any]:
        """Per-schema file statistics of the current documents"""
        stats = {}
        for name in SCHEMA_NAMES:
            path = self.schema_file(name)
            try:
                content = path.read_text(encoding='utf-8')
                file_stat = path.stat()
                stats[name] = {
                    'exists': True,
                    'size': file_stat.st_size,
                    'lines': len(content.split('\n')),
                    'lastModified': iso_timestamp(datetime.fromtimestamp(file_stat.st_mtime, tz=timezone.utc)),
                }
            except OSError as e:
                stats[name] = {'exists': False, 'error': str(e)}
        return stats

    # ==================== Integration Log ====================

    def log_generation_event(self, event: Dict[str, Any]):
        """Append one JSON line to the integration log; failures only warn"""
        entry = {'timestamp': iso_timestamp(utc_now()), **event}
        try:
            ensure_directory(self.schema_dir)
            with open(self.integration_log, 'a', encoding='utf-8') as f:
                f.write(json.dumps(entry, ensure_ascii=False, default=str) + '\n')
        except OSError as e:
            self.logger.warning(f"Failed to log schema generation event: {e}")
