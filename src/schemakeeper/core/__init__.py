#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core module
Schema assembly, freshness advice and structural diffing
"""

from .schema_assembler import SchemaAssembler, GenerationResult
from .freshness import FreshnessAdvisor, UpdateRecommendation
from .schema_diff import diff_schemas, structural_keys

__all__ = [
    'SchemaAssembler',
    'GenerationResult',
    'FreshnessAdvisor',
    'UpdateRecommendation',
    'diff_schemas',
    'structural_keys',
]
