#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test timestamp helpers and process utilities
"""

import subprocess
import pytest
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schemakeeper.utils.helpers import iso_timestamp, parse_timestamp, version_key, ensure_directory
from schemakeeper.utils.process import ProcessResult, get_changed_files


class TestTimestamps:
    """Test ISO timestamp formatting and parsing"""

    def test_iso_timestamp_has_milliseconds(self):
        moment = datetime(2024, 1, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)
        assert iso_timestamp(moment) == '2024-01-01T10:00:00.123Z'

    def test_parse_round_trip(self):
        moment = datetime(2024, 3, 5, 8, 30, 15, 250000, tzinfo=timezone.utc)
        assert parse_timestamp(iso_timestamp(moment)) == moment

    def test_naive_values_are_utc(self):
        assert parse_timestamp(datetime(2024, 1, 1)).tzinfo == timezone.utc
        assert parse_timestamp('2024-01-01T10:00:00').tzinfo == timezone.utc

    def test_version_key(self):
        assert version_key('2024-01-01T10:00:00.123Z') == 'v2024-01-01T10-00-00-123Z'

    def test_ensure_directory(self, tmp_path):
        target = ensure_directory(tmp_path / 'a' / 'b')
        assert target.is_dir()
        assert ensure_directory(target) == target


class ScriptedRunner:
    """Process runner replaying results per git subcommand"""

    def __init__(self, results):
        self.results = results

    def run(self, command, args=None, cwd=None, timeout=None):
        outcome = self.results[args[0]]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class TestChangedFiles:
    """Test git change discovery"""

    def test_results_are_merged_and_deduplicated(self):
        runner = ScriptedRunner({
            'diff': ProcessResult('routes/web.php\napp/Models/User.php\n', '', 0),
            'diff-tree': ProcessResult('app/Models/User.php\ncomposer.json\n', '', 0),
        })

        assert get_changed_files('.', runner=runner) == [
            'routes/web.php', 'app/Models/User.php', 'composer.json'
        ]

    def test_failed_command_is_skipped(self):
        runner = ScriptedRunner({
            'diff': ProcessResult('', 'fatal: not a git repository', 128),
            'diff-tree': ProcessResult('config/app.php\n', '', 0),
        })

        assert get_changed_files('.', runner=runner) == ['config/app.php']

    def test_missing_git_returns_empty(self):
        runner = ScriptedRunner({'diff': FileNotFoundError('git')})
        assert get_changed_files('.', runner=runner) == []

    def test_timeout_returns_collected_files(self):
        runner = ScriptedRunner({
            'diff': ProcessResult('routes/api.php\n', '', 0),
            'diff-tree': subprocess.TimeoutExpired('git', 10),
        })

        assert get_changed_files('.', runner=runner) == ['routes/api.php']

    def test_process_result_ok(self):
        assert ProcessResult('', '', 0).ok is True
        assert ProcessResult('', 'boom', 1).ok is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
