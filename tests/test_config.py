#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test configuration loading
"""

import pytest
import sys
from pathlib import Path

import yaml

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schemakeeper.utils.config import Config, ConfigError


class TestConfig:
    """Test defaults and deep merge of the YAML config file"""

    def test_defaults_when_file_missing(self, tmp_path):
        config = Config(str(tmp_path / 'config.yaml'))

        assert config.generation.schema_dir == '.taskmaster/schemas'
        assert config.generation.content_limit == 5000
        assert config.persistence.history_limit == 50
        assert config.freshness.max_age_minutes == 60
        assert config.freshness.generate_cooldown_minutes == 5
        assert config.logging.level == 'INFO'
        assert not (tmp_path / 'config.yaml').exists()

    def test_partial_file_is_merged(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump({
            'persistence': {'history_limit': 10},
            'freshness': {'max_age_minutes': 15},
        }), encoding='utf-8')

        config = Config(str(path))

        assert config.persistence.history_limit == 10
        assert config.persistence.line_width == 120
        assert config.freshness.max_age_minutes == 15
        assert config.freshness.update_threshold == 0.5

    def test_invalid_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text('- not\n- a mapping\n', encoding='utf-8')

        config = Config(str(path))

        assert config.persistence.history_limit == 50

    def test_unknown_keys_fall_back_to_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text('generation:\n  no_such_option: 1\n', encoding='utf-8')

        config = Config(str(path))

        assert config.generation.content_limit == 5000

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / 'nested' / 'config.yaml'
        config = Config(str(path))
        config.generation.use_tinker = False
        config.save()

        reloaded = Config(str(path))

        assert reloaded.generation.use_tinker is False
        assert reloaded.to_dict() == config.to_dict()

    def test_save_failure_raises_config_error(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('a file, not a directory')
        config = Config(str(blocker / 'config.yaml'))

        with pytest.raises(ConfigError, match='Failed to save configuration'):
            config.save()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
