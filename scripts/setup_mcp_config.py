#!/usr/bin/env python3
"""schemakeeper project MCP configuration script

Usage: setup_mcp_config.py [PROJECT_DIR]
"""

import json
import sys
from pathlib import Path

SCHEMAKEEPER_TOOLS = [
    "generate_schemas",
    "get_schema_info",
    "check_schema_freshness",
    "auto_update_check",
    "schema_diff",
    "integration_status",
]


def load_json(path: Path) -> dict:
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def write_json(path: Path, data: dict):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def main():
    project_dir = Path(sys.argv[1] if len(sys.argv) > 1 else ".").resolve()

    # Use sys.executable to get the actual Python path currently running
    python_path = sys.executable

    # 1. Register the server in the project-scoped MCP config
    mcp_config_path = project_dir / ".mcp.json"
    config = load_json(mcp_config_path)
    config.setdefault("mcpServers", {})
    config["mcpServers"]["schemakeeper"] = {
        "command": python_path,
        "args": ["-m", "schemakeeper.mcp.server"],
        "env": {}
    }
    write_json(mcp_config_path, config)

    # 2. Allow the schema tools in the project settings
    settings_path = project_dir / ".claude" / "settings.json"
    settings = load_json(settings_path)
    allow = settings.setdefault("permissions", {}).setdefault("allow", [])

    existing = set(allow)
    tool_names = [f"mcp__schemakeeper__{tool}" for tool in SCHEMAKEEPER_TOOLS]
    for tool in tool_names:
        if tool not in existing:
            allow.append(tool)
    write_json(settings_path, settings)

    print(f"  [OK] schemakeeper MCP server registered in {mcp_config_path}")
    print(f"  [OK] Added {len(tool_names)} schemakeeper tool permissions")
    return 0


if __name__ == "__main__":
    sys.exit(main())
