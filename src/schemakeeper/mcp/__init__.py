#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
schemakeeper MCP Server Module
Provides Model Context Protocol support, letting IDE assistants and task workflows invoke schema generation
"""

from .server import SchemaMCPServer, ToolCallError, run_server

__all__ = ['SchemaMCPServer', 'ToolCallError', 'run_server']
