#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Staleness and auto-update advisor

Decides whether schemas should be regenerated, from the age of the last
generation run and from the evidence of a finished task (its type and the
files it changed).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import yaml

from ..storage.schema_store import SchemaStore
from ..utils.constants import (
    TASK_TYPE_RULES,
    FILE_PATTERN_RULES,
    DEFAULT_MAX_AGE_MINUTES,
    UPDATE_THRESHOLD,
    ERROR_MESSAGES,
)
from ..utils.helpers import parse_timestamp, utc_now


@dataclass
class UpdateRecommendation:
    """Whether to regenerate, and which documents are affected"""
    required: bool = False
    reason: str = 'No schema-affecting changes detected'
    confidence: float = 0.0
    affectedSchemas: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'required': self.required,
            'reason': self.reason,
            'confidence': self.confidence,
            'affectedSchemas': list(self.affectedSchemas),
        }


class FreshnessAdvisor:
    """
    Freshness checks and update recommendations for one project

    Only reads the metadata timestamp owned by SchemaStore.
    """

    def __init__(self, store: SchemaStore, update_threshold: float = UPDATE_THRESHOLD,
                 task_rules: Optional[Dict[str, Dict[str, Any]]] = None,
                 file_rules: Optional[List[Dict[str, Any]]] = None):
        self.store = store
        self.update_threshold = update_threshold
        self.task_rules = task_rules if task_rules is not None else TASK_TYPE_RULES
        self.file_rules = file_rules if file_rules is not None else FILE_PATTERN_RULES
        self.logger = logging.getLogger('schemakeeper.freshness')

    def check_freshness(self, max_age_minutes: float = DEFAULT_MAX_AGE_MINUTES,
                        now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Compare the last generation time with the allowed age

        Never raises: missing and unreadable metadata both report stale.

        Args:
            max_age_minutes: Maximum age before schemas count as stale
            now: Reference time, defaults to the current UTC time

        Returns:
            {isFresh, reason, lastGenerated, ageMinutes}
        """
        try:
            metadata = self.store.load_metadata()
            if not metadata or not metadata.get('generatedAt'):
                return {
                    'isFresh': False,
                    'reason': ERROR_MESSAGES['no_schemas'],
                    'lastGenerated': None,
                    'ageMinutes': None
                }

            generated_at = parse_timestamp(metadata['generatedAt'])
            age_minutes = ((now or utc_now()) - generated_at).total_seconds() / 60
            is_fresh = age_minutes < max_age_minutes

            return {
                'isFresh': is_fresh,
                'reason': 'Schemas are fresh' if is_fresh else 'Schemas are stale',
                'lastGenerated': str(metadata['generatedAt']),
                'ageMinutes': round(age_minutes, 1)
            }

        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            self.logger.warning(f"Error checking freshness: {e}")
            return {
                'isFresh': False,
                'reason': f"Error checking freshness: {e}",
                'lastGenerated': None,
                'ageMinutes': None
            }

    def should_auto_update(self, task_type: Optional[str] = None,
                           changed_files: Optional[Sequence[str]] = None) -> UpdateRecommendation:
        """
        Recommend regeneration from task type and changed files

        The task-type table seeds the recommendation. The changed-file
        rules produce a second candidate; when its maximum confidence is
        strictly higher it replaces the task-type result outright, with no
        merging of the two.

        Args:
            task_type: Type of the finished task
            changed_files: Paths changed by the task

        Returns:
            UpdateRecommendation
        """
        recommendation = UpdateRecommendation()

        rule = self.task_rules.get(task_type or '')
        if rule:
            recommendation = UpdateRecommendation(
                required=rule['confidence'] > self.update_threshold,
                reason=f"Task type '{task_type}' affects schemas: {', '.join(rule['schemas'])}",
                confidence=rule['confidence'],
                affectedSchemas=list(rule['schemas'])
            )

        if changed_files:
            file_recommendation = self._match_files(changed_files)
            if file_recommendation.confidence > recommendation.confidence:
                recommendation = file_recommendation

        self.logger.debug(
            f"Auto-update check: task_type={task_type}, files={len(changed_files or [])}, "
            f"required={recommendation.required}, confidence={recommendation.confidence}"
        )
        return recommendation

    def _match_files(self, changed_files: Sequence[str]) -> UpdateRecommendation:
        max_confidence = 0.0
        affected: List[str] = []
        reasons: List[str] = []

        for changed_file in changed_files:
            normalized = changed_file.replace('\\', '/')
            for rule in self.file_rules:
                if rule['pattern'].search(normalized):
                    max_confidence = max(max_confidence, rule['confidence'])
                    for schema in rule['schemas']:
                        if schema not in affected:
                            affected.append(schema)
                    reasons.append(f"{changed_file} affects {', '.join(rule['schemas'])}")

        return UpdateRecommendation(
            required=max_confidence > self.update_threshold,
            reason='; '.join(reasons),
            confidence=max_confidence,
            affectedSchemas=affected
        )
