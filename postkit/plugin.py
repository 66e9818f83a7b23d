"""Discover plugins and run their lifecycle hook scripts."""

from __future__ import annotations

import logging
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

_CONTEXT_FILE_NAME = "postkit_plugin_ctx.json"


class PluginHook(Enum):
    """Plugin lifecycle hooks; each value is the hook script's base name."""

    PRE_ENCODE = "pre_encode"
    POST_ENCODE = "post_encode"
    PRE_WRAP = "pre_wrap"
    POST_WRAP = "post_wrap"
    PRE_VALIDATE = "pre_validate"
    POST_VALIDATE = "post_validate"
    PRE_CREATE = "pre_create"
    POST_CREATE = "post_create"


@dataclass
class PluginInfo:
    """A plugin found in a plugins directory."""

    name: str
    version: str
    description: str
    author: str
    path: Path


def _extract_json_string(text: str, key: str) -> str | None:
    pattern = f'"{key}"'
    pos = text.find(pattern)
    if pos < 0:
        return None
    colon = text.find(":", pos + len(pattern))
    if colon < 0:
        return None
    quote1 = text.find('"', colon)
    if quote1 < 0:
        return None
    quote2 = text.find('"', quote1 + 1)
    if quote2 < 0:
        return None
    return text[quote1 + 1 : quote2]


def _plugin_dirs(plugins_dir: Path) -> list[Path]:
    try:
        return sorted(p for p in Path(plugins_dir).iterdir() if p.is_dir())
    except OSError:
        return []


def discover_plugins(plugins_dir: Path) -> list[PluginInfo]:
    """Return the plugins in subdirectories of ``plugins_dir`` that have a named plugin.json."""
    plugins: list[PluginInfo] = []
    for path in _plugin_dirs(plugins_dir):
        try:
            content = (path / "plugin.json").read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        name = _extract_json_string(content, "name") or ""
        if not name:
            continue
        plugins.append(
            PluginInfo(
                name=name,
                version=_extract_json_string(content, "version") or "",
                description=_extract_json_string(content, "description") or "",
                author=_extract_json_string(content, "author") or "",
                path=path,
            )
        )
    return plugins


def execute_hook(hook: PluginHook, plugins_dir: Path, context_json: str) -> bool:
    """Run every plugin's script for ``hook``; return True if all of them succeeded."""
    hook_name = hook.value
    all_ok = True
    for path in _plugin_dirs(plugins_dir):
        script = path / "hooks" / f"{hook_name}.py"
        if not script.exists():
            continue

        plugin_name = path.name
        logger.info("Plugin: executing %s/%s", plugin_name, hook_name)

        ctx_file = Path(tempfile.gettempdir()) / _CONTEXT_FILE_NAME
        try:
            ctx_file.write_text(context_json, encoding="utf-8")
        except OSError:
            logger.error("Failed to write plugin context file")
            all_ok = False
            continue

        try:
            completed = subprocess.run([sys.executable, str(script), str(ctx_file)], check=False)
        except OSError as exc:
            logger.error("Failed to execute plugin %s: %s", plugin_name, exc)
            all_ok = False
            continue
        finally:
            ctx_file.unlink(missing_ok=True)

        if completed.returncode != 0:
            logger.error(
                "Plugin %s hook %s failed with exit code %s",
                plugin_name,
                hook_name,
                completed.returncode,
            )
            all_ok = False
    return all_ok