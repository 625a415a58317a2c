#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test staleness checks and auto-update advice
"""

import pytest
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schemakeeper.core.freshness import FreshnessAdvisor, UpdateRecommendation
from schemakeeper.storage.schema_store import SchemaStore
from schemakeeper.utils.constants import TASK_TYPE_RULES
from schemakeeper.utils.helpers import iso_timestamp


GENERATED_AT = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


class TestCheckFreshness:
    """Test the age check against current metadata"""

    def make_advisor(self, root: Path, generated_at: datetime = GENERATED_AT) -> FreshnessAdvisor:
        store = SchemaStore(root)
        store.save({
            'database': {'type': 'database', 'framework': 'unknown'},
            'metadata': {'framework': {'type': 'unknown', 'version': None},
                         'generatedAt': iso_timestamp(generated_at)},
        })
        return FreshnessAdvisor(store)

    def test_no_metadata(self, tmp_path):
        """Nothing generated yet is stale with a distinct reason"""
        advisor = FreshnessAdvisor(SchemaStore(tmp_path))

        assert advisor.check_freshness(max_age_minutes=60) == {
            'isFresh': False,
            'reason': 'No schemas exist',
            'lastGenerated': None,
            'ageMinutes': None,
        }

    def test_fresh(self, tmp_path):
        advisor = self.make_advisor(tmp_path)

        result = advisor.check_freshness(60, now=GENERATED_AT + timedelta(minutes=10))

        assert result['isFresh'] is True
        assert result['reason'] == 'Schemas are fresh'
        assert result['lastGenerated'] == '2024-01-01T10:00:00.000Z'
        assert result['ageMinutes'] == 10.0

    def test_stale(self, tmp_path):
        advisor = self.make_advisor(tmp_path)

        result = advisor.check_freshness(60, now=GENERATED_AT + timedelta(minutes=90, seconds=30))

        assert result['isFresh'] is False
        assert result['reason'] == 'Schemas are stale'
        assert result['ageMinutes'] == 90.5

    def test_age_equal_to_limit_is_stale(self, tmp_path):
        advisor = self.make_advisor(tmp_path)

        assert advisor.check_freshness(5, now=GENERATED_AT + timedelta(minutes=5))['isFresh'] is False

    def test_unreadable_metadata(self, tmp_path):
        """A corrupt metadata file is reported, never raised"""
        store = SchemaStore(tmp_path)
        store.ensure_directories()
        store.metadata_file.write_text('generatedAt: [broken', encoding='utf-8')

        result = FreshnessAdvisor(store).check_freshness()

        assert result['isFresh'] is False
        assert result['reason'].startswith('Error checking freshness:')
        assert result['lastGenerated'] is None


class TestShouldAutoUpdate:
    """Test task-type and changed-file recommendations"""

    def setup_method(self):
        self.advisor = FreshnessAdvisor(SchemaStore(Path('.')))

    def test_migration_file_dominates_other_task(self):
        """A migration change outweighs an unlisted task type"""
        result = self.advisor.should_auto_update('other', ['database/migrations/2024_01_01_create_x.php'])

        assert result.required is True
        assert result.confidence == 0.95
        assert result.affectedSchemas == ['database']

    def test_task_type_seeds_recommendation(self):
        result = self.advisor.should_auto_update('controller', [])

        assert result.required is True
        assert result.confidence == 0.8
        assert result.affectedSchemas == ['api', 'businessLogic']
        assert "controller" in result.reason

    def test_low_confidence_task_type(self):
        """Test tasks do not require an update"""
        result = self.advisor.should_auto_update('test')

        assert result.required is False
        assert result.confidence == 0.1
        assert result.affectedSchemas == []

    def test_threshold_is_strict(self):
        """Confidence exactly at the threshold does not require an update"""
        result = self.advisor.should_auto_update('config')

        assert result.confidence == 0.5
        assert result.required is False

    def test_file_result_replaces_task_result(self):
        """The stronger file evidence leaves no trace of the task-type tuple"""
        result = self.advisor.should_auto_update('service', ['routes/api.php'])

        file_only = self.advisor.should_auto_update(None, ['routes/api.php'])
        assert result.to_dict() == file_only.to_dict()
        assert 'businessLogic' not in result.affectedSchemas
        assert "Task type" not in result.reason

    def test_task_result_kept_when_files_are_weaker(self):
        """Equal or lower file confidence never replaces the task type"""
        result = self.advisor.should_auto_update('migration', ['app/Services/Billing.php'])

        assert result.confidence == TASK_TYPE_RULES['migration']['confidence']
        assert result.affectedSchemas == ['database']

    def test_union_of_matched_schemas(self):
        """Matched schema sets are merged in first-seen order"""
        result = self.advisor.should_auto_update(None, [
            'app/Models/User.php',
            'app/Http/Controllers/UserController.php',
            'composer.json',
        ])

        assert result.confidence == 0.8
        assert result.affectedSchemas == ['database', 'businessLogic', 'api', 'componentArchitecture']
        assert result.reason.count(';') == 2
        assert 'composer.json affects componentArchitecture' in result.reason

    def test_windows_paths_are_normalized(self):
        result = self.advisor.should_auto_update(None, ['database\\migrations\\2024_create_posts.php'])

        assert result.confidence == 0.95

    def test_no_evidence(self):
        """Neither source matching yields the default recommendation"""
        result = self.advisor.should_auto_update('frontend', ['resources/js/app.js'])

        assert result == UpdateRecommendation()
        assert result.to_dict() == {
            'required': False,
            'reason': 'No schema-affecting changes detected',
            'confidence': 0.0,
            'affectedSchemas': [],
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
