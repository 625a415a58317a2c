#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
schemakeeper - Project Schema Generator
Detects a project's framework and keeps versioned YAML schemas of its
database, API, business logic and component architecture up to date

Version: 1.0.0
"""

__version__ = "1.0.0"
__description__ = "Project schema generation with freshness and auto-update advice"

# Export main classes
from .core.schema_assembler import SchemaAssembler
from .core.freshness import FreshnessAdvisor
from .storage.schema_store import SchemaStore

__all__ = [
    "SchemaAssembler",
    "FreshnessAdvisor",
    "SchemaStore",
]
