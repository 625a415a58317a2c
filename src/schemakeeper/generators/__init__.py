#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Schema generators

Maps each framework tag to the generator that produces its four schema
documents. Frameworks without an entry use the placeholder generator.
"""

from typing import Dict, Type

from ..detection.framework_detector import FrameworkType
from .base import SchemaGenerator, PlaceholderGenerator
from .laravel import LaravelSchemaGenerator

GENERATORS: Dict[FrameworkType, Type[SchemaGenerator]] = {
    FrameworkType.LARAVEL: LaravelSchemaGenerator,
}


def generator_class_for(framework_type: FrameworkType) -> Type[SchemaGenerator]:
    """Generator class for a framework, placeholder when unsupported"""
    return GENERATORS.get(framework_type, PlaceholderGenerator)


__all__ = [
    'SchemaGenerator',
    'PlaceholderGenerator',
    'LaravelSchemaGenerator',
    'GENERATORS',
    'generator_class_for',
]
