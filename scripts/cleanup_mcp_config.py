#!/usr/bin/env python3
"""schemakeeper project MCP uninstallation script

Usage: cleanup_mcp_config.py [PROJECT_DIR]
"""

import json
import sys
from pathlib import Path


def main():
    project_dir = Path(sys.argv[1] if len(sys.argv) > 1 else ".").resolve()

    # Remove schemakeeper from .mcp.json
    mcp_config_path = project_dir / ".mcp.json"
    if mcp_config_path.exists():
        try:
            with open(mcp_config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
            if "schemakeeper" in config.get("mcpServers", {}):
                del config["mcpServers"]["schemakeeper"]
                with open(mcp_config_path, "w", encoding="utf-8") as f:
                    json.dump(config, f, indent=2, ensure_ascii=False)
                print("  [OK] schemakeeper MCP configuration removed")
            else:
                print("  [INFO] No schemakeeper MCP configuration found")
        except (OSError, ValueError) as e:
            print(f"  [ERROR] Failed to remove MCP config: {e}")

    # Remove schemakeeper tool permissions
    settings_path = project_dir / ".claude" / "settings.json"
    if settings_path.exists():
        try:
            with open(settings_path, "r", encoding="utf-8") as f:
                settings = json.load(f)

            allow = settings.get("permissions", {}).get("allow")
            if allow is not None:
                kept = [tool for tool in allow if "mcp__schemakeeper__" not in tool]
                removed = len(allow) - len(kept)
                settings["permissions"]["allow"] = kept
                if removed > 0:
                    print(f"  [OK] Removed {removed} schemakeeper permissions")

            with open(settings_path, "w", encoding="utf-8") as f:
                json.dump(settings, f, indent=2, ensure_ascii=False)

        except (OSError, ValueError) as e:
            print(f"  [ERROR] Failed to clean settings: {e}")

    print("  [OK] schemakeeper cleanup completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
