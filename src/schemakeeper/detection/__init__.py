#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Framework detection module
"""

from .framework_detector import FrameworkDetector, FrameworkInfo, FrameworkType

__all__ = [
    'FrameworkDetector',
    'FrameworkInfo',
    'FrameworkType',
]
