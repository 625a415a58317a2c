#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Directory scanning module
"""

from .structure_scanner import StructureScanner, iter_file_records

__all__ = [
    'StructureScanner',
    'iter_file_records',
]
