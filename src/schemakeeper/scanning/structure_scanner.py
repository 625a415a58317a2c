#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Structural directory scanner

Walks a directory tree and records each matching file as a FileRecord
(relative path, size, modification time, truncated content). Empty
sub-directories are pruned from the result.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..utils.constants import CONTENT_LIMIT
from ..utils.helpers import iso_timestamp


# Extension filters meaning "every file"
WILDCARD_FILTERS = ('', '*')


class StructureScanner:
    """
    Recursive file scanner bound to one project root

    Missing directories scan as an empty mapping; an unreadable file is
    recorded as {'error': message} and the scan continues.
    """

    def __init__(self, project_root: Union[str, Path], content_limit: int = CONTENT_LIMIT):
        """
        Initialize scanner

        Args:
            project_root: Project root; FileRecord paths are relative to it
            content_limit: Maximum number of characters kept per file
        """
        self.project_root = Path(project_root)
        self.content_limit = content_limit
        self.logger = logging.getLogger('schemakeeper.scanner')

    def scan(self, dir_path: Union[str, Path], extension: str = '') -> Dict[str, Any]:
        """
        Scan a directory relative to the project root

        Args:
            dir_path: Directory to scan, relative to the project root
            extension: Filename suffix filter ('' or '*' matches everything)

        Returns:
            Mapping of entry name to FileRecord or nested mapping
        """
        full_path = self.project_root / dir_path
        if not full_path.is_dir():
            return {}
        return self._scan_dir(full_path, extension)

    def _scan_dir(self, directory: Path, extension: str) -> Dict[str, Any]:
        files: Dict[str, Any] = {}

        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            self.logger.warning(f"Cannot list directory {directory}: {e}")
            return {'error': str(e)}

        for entry in entries:
            # Symlinked directories are not followed
            if entry.is_symlink() and entry.is_dir():
                continue

            if entry.is_file():
                if self._matches(entry.name, extension):
                    files[entry.name] = self.read_record(entry)
            elif entry.is_dir():
                sub_files = self._scan_dir(entry, extension)
                if sub_files:
                    files[entry.name] = sub_files

        return files

    def _matches(self, name: str, extension: str) -> bool:
        return extension in WILDCARD_FILTERS or name.endswith(extension)

    def read_record(self, file_path: Path, limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Build a FileRecord for one file

        Args:
            file_path: Absolute file path
            limit: Content cap, defaults to the scanner's content_limit

        Returns:
            FileRecord dictionary, or {'error': message} if the file is unreadable
        """
        limit = self.content_limit if limit is None else limit
        try:
            raw = file_path.read_bytes()
            stats = file_path.stat()
        except OSError as e:
            self.logger.warning(f"Cannot read {file_path}: {e}")
            return {'error': str(e)}

        content = raw.decode('utf-8', errors='replace')
        return {
            'path': self._relative(file_path),
            'size': len(raw),
            'lastModified': iso_timestamp(datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc)),
            'content': content[:limit],
        }

    def _relative(self, file_path: Path) -> str:
        try:
            return file_path.relative_to(self.project_root).as_posix()
        except ValueError:
            return file_path.as_posix()


def iter_file_records(tree: Dict[str, Any], prefix: str = ''):
    """
    Flatten a scan result into (relative name, FileRecord) pairs

    Nested directories are joined with '/'; error entries are skipped.
    """
    for name, value in tree.items():
        if not isinstance(value, dict):
            continue
        if 'content' in value:
            yield prefix + name, value
        elif 'error' not in value or len(value) > 1:
            yield from iter_file_records(value, f"{prefix}{name}/")
