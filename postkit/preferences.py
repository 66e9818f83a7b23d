"""Versioned JSON preferences with schema migrations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable

import platformdirs

_U32_MAX = 2**32 - 1


@dataclass
class PrefsMigration:
    """A migration that upgrades preferences from ``version - 1`` to ``version``."""

    version: int
    description: str
    apply: Callable[[str], str]


def _dumps(value: Any) -> str:
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False)


def prefs_version(json_text: str) -> int:
    """Return the ``version`` field of a preferences document, or 0 if absent or invalid."""
    try:
        data = json.loads(json_text)
    except ValueError:
        return 0
    if not isinstance(data, dict):
        return 0
    version = data.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int):
        return 0
    if not 0 <= version <= _U32_MAX:
        return 0
    return version


def prefs_set_version(json_text: str, version: int) -> str:
    """Return the document with its ``version`` field set, pretty-printed."""
    try:
        data = json.loads(json_text)
    except ValueError:
        data = None
    if isinstance(data, dict):
        data["version"] = version
    return _dumps(data)


def migrate_preferences(json_text: str, migrations: Iterable[PrefsMigration]) -> str:
    """Apply, in ascending order, every migration newer than the document's version."""
    current = prefs_version(json_text)
    result = json_text
    latest = current
    for migration in sorted(migrations, key=lambda m: m.version):
        if migration.version > current:
            result = migration.apply(result)
            latest = migration.version
    return prefs_set_version(result, latest)


def json_insert_if_missing(json_text: str, key: str, value: str) -> str:
    """Insert ``key`` with the JSON literal ``value`` if the object lacks it.

    Text that is not valid JSON is returned unchanged; a ``value`` that is not
    valid JSON is inserted as null.
    """
    try:
        data = json.loads(json_text)
    except ValueError:
        return json_text
    if isinstance(data, dict) and key not in data:
        try:
            data[key] = json.loads(value)
        except ValueError:
            data[key] = None
    return _dumps(data)


def config_dir(app_name: str) -> Path:
    """Return the platform's per-user configuration directory for an app."""
    return Path(platformdirs.user_config_dir(app_name, appauthor=False, roaming=True))