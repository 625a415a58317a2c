#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Constants definition module
Defines schema names, persistence layout and update-advisor rule tables
"""

import re
from typing import Dict, List, Any

# ==================== Schema Documents ====================

# The four schema documents, in generation order
SCHEMA_NAMES: List[str] = [
    'database',
    'api',
    'businessLogic',
    'componentArchitecture',
]

# `type` tag carried by each document
SCHEMA_TYPE_TAGS: Dict[str, str] = {
    'database': 'database',
    'api': 'api',
    'businessLogic': 'business_logic',
    'componentArchitecture': 'component_architecture',
}

METADATA_NAME = 'metadata'

# Format version stamped into generation metadata
SCHEMA_FORMAT_VERSION = '1.0.0'

# ==================== Persistence Layout ====================

DEFAULT_SCHEMA_DIR = '.taskmaster/schemas'
CURRENT_DIR_NAME = 'current'
VERSIONS_DIR_NAME = 'versions'
HISTORY_DIR_NAME = 'history'
HISTORY_FILE_NAME = 'changes.yml'
INTEGRATION_LOG_NAME = 'integration.log'
SCHEMA_FILE_SUFFIX = '-schema.yml'
YAML_EXTENSION = '.yml'

HISTORY_LIMIT = 50
YAML_LINE_WIDTH = 120

# ==================== Scanning ====================

CONTENT_LIMIT = 5000          # FileRecord content cap (characters)
CONFIG_SNIPPET_LIMIT = 1000   # Config snippet cap (characters)

# ==================== Freshness ====================

DEFAULT_MAX_AGE_MINUTES = 60
GENERATE_COOLDOWN_MINUTES = 5
UPDATE_THRESHOLD = 0.5

# ==================== Update Advisor Rules ====================

# Task type -> affected schemas and confidence
TASK_TYPE_RULES: Dict[str, Dict[str, Any]] = {
    'database': {'schemas': ['database'], 'confidence': 0.9},
    'migration': {'schemas': ['database'], 'confidence': 0.95},
    'model': {'schemas': ['database', 'businessLogic'], 'confidence': 0.8},
    'controller': {'schemas': ['api', 'businessLogic'], 'confidence': 0.8},
    'api': {'schemas': ['api'], 'confidence': 0.9},
    'route': {'schemas': ['api'], 'confidence': 0.9},
    'middleware': {'schemas': ['api', 'businessLogic'], 'confidence': 0.7},
    'service': {'schemas': ['businessLogic'], 'confidence': 0.6},
    'config': {'schemas': ['componentArchitecture'], 'confidence': 0.5},
    'test': {'schemas': [], 'confidence': 0.1},
}

# Changed-file path pattern -> affected schemas and confidence (checked in order)
FILE_PATTERN_RULES: List[Dict[str, Any]] = [
    {'pattern': re.compile(r'database/migrations/'), 'schemas': ['database'], 'confidence': 0.95},
    {'pattern': re.compile(r'app/Models/'), 'schemas': ['database', 'businessLogic'], 'confidence': 0.8},
    {'pattern': re.compile(r'app/Http/Controllers/'), 'schemas': ['api', 'businessLogic'], 'confidence': 0.8},
    {'pattern': re.compile(r'routes/'), 'schemas': ['api'], 'confidence': 0.9},
    {'pattern': re.compile(r'app/Http/Middleware/'), 'schemas': ['api', 'businessLogic'], 'confidence': 0.7},
    {'pattern': re.compile(r'app/Services/'), 'schemas': ['businessLogic'], 'confidence': 0.6},
    {'pattern': re.compile(r'composer\.json$'), 'schemas': ['componentArchitecture'], 'confidence': 0.6},
    {'pattern': re.compile(r'config/'), 'schemas': ['componentArchitecture'], 'confidence': 0.4},
]

# Task types accepted by the auto-update check
TASK_TYPES: List[str] = [
    'database', 'migration', 'model', 'controller', 'api', 'route',
    'middleware', 'service', 'test', 'config', 'frontend', 'other',
]

# Contexts that may trigger a generation run
TRIGGER_CONTEXTS: List[str] = ['task-completion', 'build', 'manual', 'parse-prd', 'file-change']

# Trigger context that always bypasses the generation cooldown
COOLDOWN_BYPASS_CONTEXT = 'parse-prd'

# ==================== Error Messages ====================

ERROR_MESSAGES = {
    'no_schemas': 'No schemas exist',
    'invalid_framework': 'Invalid framework: {}',
    'unknown_tool': 'Unknown tool: {}',
    'persistence_failed': 'Failed to persist schemas: {}',
}
