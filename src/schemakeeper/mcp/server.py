#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
schemakeeper MCP Server Main Module
Implemented using official MCP SDK, exposing schema generation tools to IDEs
and task workflows: generation, schema info, freshness checks, auto-update
advice, structural diff and integration status
"""

import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

# Official MCP SDK
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from .. import __version__
from ..core.schema_assembler import SchemaAssembler
from ..core.freshness import FreshnessAdvisor
from ..core.schema_diff import diff_schemas
from ..storage.schema_store import SchemaPersistenceError
from ..utils.config import Config
from ..utils.constants import (
    TASK_TYPES,
    TRIGGER_CONTEXTS,
    COOLDOWN_BYPASS_CONTEXT,
    ERROR_MESSAGES,
)
from ..utils.helpers import iso_timestamp, setup_logging
from ..utils.process import ProcessRunner, get_changed_files


SERVER_NAME = "schemakeeper"

FRAMEWORK_CHOICES = ['laravel', 'rails', 'django', 'express']

PROJECT_ROOT_PROPERTY = {
    "type": "string",
    "description": "Project root directory path. Defaults to current directory.",
    "default": "."
}


class ToolCallError(Exception):
    """
    Failed tool call

    Raised out of call_tool so the SDK marks the result with isError; the
    message is the JSON error payload.
    """

    def __init__(self, payload: Dict[str, Any]):
        self.payload = payload
        super().__init__(json.dumps(payload, ensure_ascii=False))


class SchemaMCPServer:
    """
    schemakeeper MCP Server

    Every tool returns a JSON object with an explicit `success` flag.
    Expected failures (persistence, bad framework names, missing schemas)
    are reported as data. Unknown tools and unexpected errors raise
    ToolCallError, which the SDK returns as an isError result.
    """

    def __init__(self, config: Optional[Config] = None, runner: Optional[ProcessRunner] = None):
        """
        Initialize MCP Server

        Args:
            config: schemakeeper configuration object, uses default configuration when None
            runner: Process runner shared by framework consoles and git lookups
        """
        self.config = config or Config()
        self.runner = runner or ProcessRunner()
        self.logger = logging.getLogger('schemakeeper.mcp_server')

        # Create MCP Server instance
        self.server = Server(SERVER_NAME)

        # Register handlers
        self._register_handlers()

        self.logger.info("schemakeeper MCP Server initialization completed")

    def _register_handlers(self):
        """Register all MCP handlers"""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            """Return available tools list"""
            return self._get_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            """Handle tool calls"""
            return await self._handle_tool_call(name, arguments)

    def _get_tools(self) -> List[Tool]:
        """Get tools list"""
        return [
            Tool(
                name="generate_schemas",
                description="""Generate project schemas (database, API, business logic, architecture) with framework auto-detection.

Skips generation when schemas were generated within the cooldown window, unless
`force` is set or the trigger context is parse-prd.""",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectRoot": PROJECT_ROOT_PROPERTY,
                        "framework": {
                            "type": "string",
                            "description": "Force a specific framework instead of auto-detection",
                            "enum": FRAMEWORK_CHOICES
                        },
                        "force": {
                            "type": "boolean",
                            "description": "Force regeneration even if recent schemas exist",
                            "default": False
                        },
                        "triggerContext": {
                            "type": "string",
                            "description": "Context that triggered schema generation",
                            "enum": TRIGGER_CONTEXTS,
                            "default": "manual"
                        },
                        "taskId": {
                            "type": "string",
                            "description": "Task ID that triggered this schema update (for tracking purposes)"
                        }
                    }
                }
            ),
            Tool(
                name="get_schema_info",
                description="Get information about current schemas, versions, and generation status",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectRoot": PROJECT_ROOT_PROPERTY,
                        "includeStats": {
                            "type": "boolean",
                            "description": "Include per-schema file statistics",
                            "default": False
                        }
                    }
                }
            ),
            Tool(
                name="check_schema_freshness",
                description="Check whether the current schemas are older than the allowed age",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectRoot": PROJECT_ROOT_PROPERTY,
                        "maxAge": {
                            "type": "number",
                            "description": "Maximum age in minutes before schemas are considered stale",
                            "default": self.config.freshness.max_age_minutes
                        }
                    }
                }
            ),
            Tool(
                name="auto_update_check",
                description="""Decide whether schemas should be regenerated after a task.

Uses the task type and the changed files; the stronger of the two signals wins.""",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectRoot": PROJECT_ROOT_PROPERTY,
                        "completedTaskId": {
                            "type": "string",
                            "description": "ID of the task that was just completed"
                        },
                        "taskType": {
                            "type": "string",
                            "description": "Type of task completed",
                            "enum": TASK_TYPES
                        },
                        "changedFiles": {
                            "type": "array",
                            "description": "List of files that were changed",
                            "items": {"type": "string"}
                        },
                        "detectChanges": {
                            "type": "boolean",
                            "description": "Ask git for changed files when changedFiles is empty",
                            "default": False
                        }
                    }
                }
            ),
            Tool(
                name="schema_diff",
                description="Compare the current project state with the last generated schemas",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectRoot": PROJECT_ROOT_PROPERTY
                    }
                }
            ),
            Tool(
                name="integration_status",
                description="Get status of the schema server and its workflow integration",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectRoot": PROJECT_ROOT_PROPERTY
                    }
                }
            ),
        ]

    async def _handle_tool_call(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """Dispatch a tool call and serialize its result"""
        arguments = arguments or {}
        handlers = {
            "generate_schemas": self._tool_generate_schemas,
            "get_schema_info": self._tool_get_schema_info,
            "check_schema_freshness": self._tool_check_schema_freshness,
            "auto_update_check": self._tool_auto_update_check,
            "schema_diff": self._tool_schema_diff,
            "integration_status": self._tool_integration_status,
        }

        handler = handlers.get(name)
        if handler is None:
            raise ToolCallError({"success": False, "error": ERROR_MESSAGES['unknown_tool'].format(name)})

        try:
            result = await handler(arguments)
            return [TextContent(type="text", text=json.dumps(result, ensure_ascii=False, indent=2, default=str))]
        except Exception as e:
            self.logger.error(f"Tool call failed: {name}, error: {e}")
            raise ToolCallError({"success": False, "error": str(e)}) from e

    # ==================== Helpers ====================

    def _assembler(self, args: Dict[str, Any]) -> SchemaAssembler:
        return SchemaAssembler(args.get("projectRoot") or ".", config=self.config, runner=self.runner)

    def _advisor(self, assembler: SchemaAssembler) -> FreshnessAdvisor:
        return FreshnessAdvisor(assembler.store, update_threshold=self.config.freshness.update_threshold)

    # ==================== Tools ====================

    async def _tool_generate_schemas(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Generate and save schemas"""
        framework = args.get("framework")
        force = bool(args.get("force", False))
        trigger_context = args.get("triggerContext") or "manual"
        task_id = args.get("taskId")

        assembler = self._assembler(args)

        # Cooldown protection
        if not force:
            cooldown = self.config.freshness.generate_cooldown_minutes
            freshness = self._advisor(assembler).check_freshness(cooldown)
            if freshness["isFresh"] and trigger_context != COOLDOWN_BYPASS_CONTEXT:
                return {
                    "success": True,
                    "skipped": True,
                    "reason": f"Schemas are fresh (generated less than {cooldown:g} minutes ago)",
                    "lastGenerated": freshness["lastGenerated"],
                    "ageMinutes": freshness["ageMinutes"]
                }

        try:
            result = assembler.generate_and_save(framework)
        except (SchemaPersistenceError, ValueError) as e:
            self.logger.error(f"Schema generation failed: {e}")
            assembler.store.log_generation_event({
                "triggerContext": trigger_context,
                "taskId": task_id,
                "framework": framework,
                "schemas": [],
                "success": False
            })
            return {"success": False, "error": str(e), "triggerContext": trigger_context, "taskId": task_id}

        assembler.store.log_generation_event({
            "triggerContext": trigger_context,
            "taskId": task_id,
            "framework": result["framework"],
            "schemas": result["schemas"],
            "success": result["success"]
        })

        return {
            **result,
            "triggerContext": trigger_context,
            "taskId": task_id
        }

    async def _tool_get_schema_info(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Get current schema information"""
        assembler = self._assembler(args)
        info = assembler.store.get_schema_info()

        if args.get("includeStats", False) and info["success"]:
            info["statistics"] = assembler.store.get_statistics()

        return info

    async def _tool_check_schema_freshness(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Check schema freshness"""
        max_age = args.get("maxAge", self.config.freshness.max_age_minutes)
        freshness = self._advisor(self._assembler(args)).check_freshness(float(max_age))
        return {"success": True, **freshness}

    async def _tool_auto_update_check(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Recommend whether schemas should be regenerated"""
        task_type = args.get("taskType") or "other"
        changed_files = list(args.get("changedFiles") or [])
        assembler = self._assembler(args)

        if not changed_files and args.get("detectChanges", False):
            changed_files = get_changed_files(assembler.project_root, runner=self.runner)

        advisor = self._advisor(assembler)
        recommendation = advisor.should_auto_update(task_type, changed_files)

        result = {
            "success": True,
            "updateNeeded": recommendation.required,
            "reason": recommendation.reason,
            "confidence": recommendation.confidence,
            "affectedSchemas": recommendation.affectedSchemas,
            "completedTaskId": args.get("completedTaskId"),
            "taskType": task_type,
            "changedFiles": changed_files
        }

        # If update is needed, also return freshness info
        if recommendation.required:
            result["currentStatus"] = advisor.check_freshness(self.config.freshness.generate_cooldown_minutes)

        return result

    async def _tool_schema_diff(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Compare saved schemas with the live project"""
        assembler = self._assembler(args)
        saved = assembler.store.load_current()

        if not saved:
            return {
                "success": False,
                "hasChanges": True,
                "reason": ERROR_MESSAGES['no_schemas'],
                "recommendation": "Run generate_schemas to create the initial schemas"
            }

        fresh = assembler.generate()
        diff = diff_schemas(saved, fresh.schemas)

        return {
            "success": True,
            **diff,
            "framework": fresh.framework.to_dict(),
            "recommendation": (
                "Run generate_schemas to bring schemas up to date"
                if diff["hasChanges"] else "Schemas match the project structure"
            )
        }

    async def _tool_integration_status(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Report server and integration status"""
        assembler = self._assembler(args)
        store = assembler.store
        taskmaster_dir = assembler.project_root / ".taskmaster"

        return {
            "success": True,
            "mcpServer": {
                "running": True,
                "name": SERVER_NAME,
                "version": __version__,
                "capabilities": [tool.name for tool in self._get_tools()]
            },
            "taskMasterIntegration": {
                "available": True,
                "initialized": taskmaster_dir.exists(),
                "hooks": ["task-completion", "parse-prd", "build"],
                "configPath": str(taskmaster_dir / "config.json")
            },
            "schemaDirectory": str(store.schema_dir),
            "schemasGenerated": store.metadata_file.exists(),
            "lastActivity": iso_timestamp()
        }

    async def run(self):
        """Run MCP Server"""
        self.logger.info("Starting schemakeeper MCP Server...")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )


async def run_server(config: Optional[Config] = None):
    """Start MCP Server"""
    config = config or Config()
    setup_logging(level=config.logging.level, log_dir=config.logging.log_dir)

    server = SchemaMCPServer(config)
    await server.run()


def main():
    """MCP server entry point"""
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
