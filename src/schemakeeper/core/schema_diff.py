#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Structural comparison of saved schemas with the live project

Only structural keys are compared (table names, route signatures,
file names, dependency names), so timestamps and truncated file content
never register as changes.
"""

from typing import Any, Dict, List, Set

from ..scanning.structure_scanner import iter_file_records
from ..utils.constants import SCHEMA_NAMES


def _route_signatures(routes: Dict[str, Any]) -> Set[str]:
    signatures = set()
    for route_file, definitions in (routes or {}).items():
        for route in definitions or []:
            method = str(route.get('method', 'unknown')).upper()
            signatures.add(f"{route_file}: {method} {route.get('path', 'unknown')}")
    return signatures


def _file_names(sections: Dict[str, Any], keys) -> Set[str]:
    names = set()
    for key in keys:
        tree = sections.get(key)
        if isinstance(tree, dict):
            names.update(f"{key}/{name}" for name, _ in iter_file_records(tree))
    return names


def structural_keys(name: str, document: Dict[str, Any]) -> Set[str]:
    """Comparable structural facts of one schema document"""
    if not document:
        return set()

    if name == 'database':
        keys = {f"table:{table}" for table in (document.get('tables') or {})}
        keys.update(
            f"column:{table}.{column}"
            for table, info in (document.get('tables') or {}).items()
            if isinstance(info, dict)
            for column in (info.get('columns') or {})
        )
        return keys

    if name == 'api':
        keys = {f"route:{signature}" for signature in _route_signatures(document.get('routes'))}
        keys.update(f"controller:{controller}" for controller in (document.get('controllers') or {}))
        keys.update(
            f"middleware:{entry.get('name')}"
            for entry in (document.get('middleware') or [])
            if isinstance(entry, dict)
        )
        return keys

    if name == 'businessLogic':
        sections = [key for key in document if key not in ('type', 'framework', 'error', 'note')]
        return {f"file:{entry}" for entry in _file_names(document, sections)}

    if name == 'componentArchitecture':
        structure = document.get('structure') or {}
        keys = {f"file:{entry}" for entry in _file_names(structure, list(structure))}
        dependencies = document.get('dependencies') or {}
        for section in ('require', 'requireDev'):
            keys.update(f"package:{package}" for package in (dependencies.get(section) or {}))
        return keys

    return set()


def diff_schemas(saved: Dict[str, Any], fresh: Dict[str, Any]) -> Dict[str, Any]:
    """
    Compare saved documents with freshly generated ones

    Returns:
        {hasChanges, changes: {schema name: {added, removed}}}
    """
    changes: Dict[str, Dict[str, List[str]]] = {}
    for name in SCHEMA_NAMES:
        old_keys = structural_keys(name, saved.get(name) or {})
        new_keys = structural_keys(name, fresh.get(name) or {})
        added = sorted(new_keys - old_keys)
        removed = sorted(old_keys - new_keys)
        if added or removed:
            changes[name] = {'added': added, 'removed': removed}

    return {'hasChanges': bool(changes), 'changes': changes}
