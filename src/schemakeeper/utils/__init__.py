#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared utilities: configuration, constants, logging and process helpers
"""
