#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test MCP client configuration scripts
"""

import importlib.util
import json
import pytest
import sys
from pathlib import Path

SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"


def load_script(name: str):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestMcpConfigScripts:
    """Test registering and removing the schemakeeper server"""

    def setup_method(self):
        self.setup_script = load_script("setup_mcp_config")
        self.cleanup_script = load_script("cleanup_mcp_config")

    def test_setup_registers_server_and_permissions(self, tmp_path, monkeypatch):
        (tmp_path / ".mcp.json").write_text(json.dumps({"mcpServers": {"other": {"command": "node"}}}))
        monkeypatch.setattr(sys, "argv", ["setup_mcp_config.py", str(tmp_path)])

        assert self.setup_script.main() == 0
        assert self.setup_script.main() == 0

        config = json.loads((tmp_path / ".mcp.json").read_text())
        assert set(config["mcpServers"]) == {"other", "schemakeeper"}
        assert config["mcpServers"]["schemakeeper"]["args"] == ["-m", "schemakeeper.mcp.server"]

        settings = json.loads((tmp_path / ".claude" / "settings.json").read_text())
        assert len(settings["permissions"]["allow"]) == 6
        assert "mcp__schemakeeper__generate_schemas" in settings["permissions"]["allow"]

    def test_cleanup_removes_only_schemakeeper(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["script", str(tmp_path)])
        self.setup_script.main()

        settings_path = tmp_path / ".claude" / "settings.json"
        settings = json.loads(settings_path.read_text())
        settings["permissions"]["allow"].append("Bash(ls:*)")
        settings_path.write_text(json.dumps(settings))

        assert self.cleanup_script.main() == 0

        config = json.loads((tmp_path / ".mcp.json").read_text())
        assert config["mcpServers"] == {}
        assert json.loads(settings_path.read_text())["permissions"]["allow"] == ["Bash(ls:*)"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
