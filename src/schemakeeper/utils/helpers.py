#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Common utility functions
Provides logging setup, timestamp formatting and directory helpers
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union
from datetime import datetime, timezone


def setup_logging(verbose: bool = False, log_dir: Optional[str] = None,
                  level: str = "INFO") -> logging.Logger:
    """
    Setup logging system

    Args:
        verbose: Whether to enable verbose logging mode
        log_dir: Optional directory for a dated log file
        level: Log level name used when not verbose

    Returns:
        Configured logger object
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    # Create log format
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Configure root logger
    logger = logging.getLogger('schemakeeper')
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        # Console output goes to stderr; stdout belongs to the stdio transport
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        # File output (optional)
        if log_dir:
            log_path = Path(log_dir).expanduser()
            log_path.mkdir(parents=True, exist_ok=True)

            log_file = log_path / f'schemakeeper_{datetime.now().strftime("%Y%m%d")}.log'
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format a moment as an ISO 8601 UTC string with millisecond precision

    Example: 2024-01-01T10:00:00.123Z
    """
    moment = moment or utc_now()
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f'{moment.microsecond // 1000:03d}Z'


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse a timestamp produced by iso_timestamp (or already loaded by YAML)

    Naive values are treated as UTC.
    """
    if isinstance(value, datetime):
        moment = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def version_key(timestamp: str) -> str:
    """Versions-archive key for a timestamp: colons and dots become dashes"""
    return 'v' + timestamp.replace(':', '-').replace('.', '-')


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if it doesn't

    Raises:
        OSError: If the directory cannot be created
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
