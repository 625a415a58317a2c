#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Storage module
Persists schema documents, version snapshots and the change history ledger
"""

from .schema_store import SchemaStore, SaveResult, SchemaPersistenceError

__all__ = [
    'SchemaStore',
    'SaveResult',
    'SchemaPersistenceError',
]
