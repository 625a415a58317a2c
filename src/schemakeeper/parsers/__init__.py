#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Source pattern extractors

Provides regex-based extractors that pull structural facts out of source text
"""

from .php_parser import (
    PhpParser,
    TableInfo,
    ColumnInfo,
    ForeignKeyInfo,
    RouteDef,
    MiddlewareEntry,
    MethodInfo,
    ClassInfo,
)

__all__ = [
    'PhpParser',
    'TableInfo',
    'ColumnInfo',
    'ForeignKeyInfo',
    'RouteDef',
    'MiddlewareEntry',
    'MethodInfo',
    'ClassInfo',
]
