# Shared file helpers for the per-app config writers
import json
import logging
from pathlib import Path
from typing import Any, cast

import tomli
import tomli_w

from ccswitch.utils.env import merge_env_text, parse_env_text

logger = logging.getLogger(__name__)


def read_json_file(path: Path) -> dict[str, Any]:
    """Read a JSON object from disk.

    ABOUTME: Returns empty dict if file doesn't exist or can't be parsed
    ABOUTME: Read failures are logged, never raised (the file is treated as absent)
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            result = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable JSON file %s: %s", path, e)
        return {}

    if not isinstance(result, dict):
        logger.warning("Ignoring %s: top-level value is not an object", path)
        return {}
    return cast(dict[str, Any], result)


def write_json_file(path: Path, data: dict[str, Any]) -> None:
    """Write JSON file, replacing it entirely.

    ABOUTME: Creates parent directories if needed
    ABOUTME: Uses 2-space indentation and keeps non-ASCII text readable
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")  # Add trailing newline


def read_toml_file(path: Path) -> dict[str, Any]:
    """Read a TOML document, or {} if missing or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, "rb") as f:
            return tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable TOML file %s: %s", path, e)
        return {}


def write_toml_file(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def parse_toml_text(text: str, source: str) -> dict[str, Any]:
    """Parse TOML text supplied by a provider.

    Raises:
        ValueError: If the text is not valid TOML
    """
    try:
        return tomli.loads(text)
    except tomli.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {source}: {e}") from e


def read_env_text(path: Path) -> str:
    if not path.exists():
        return ""

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable env file %s: %s", path, e)
        return ""


def read_env_file(path: Path) -> dict[str, str]:
    return parse_env_text(read_env_text(path))


def update_env_file(path: Path, updates: dict[str, Any]) -> None:
    """Set variables in a .env file, keeping all of its other lines."""
    text = read_env_text(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(merge_env_text(text, updates), encoding="utf-8")


def copy_present(source: dict[str, Any], target: dict[str, Any], keys: tuple[str, ...]) -> list[str]:
    """Copy allow-listed keys that have a non-empty value.

    ABOUTME: Additive merge, keys absent or empty in source leave target untouched

    Returns:
        Names of the keys that were copied
    """
    copied = []
    for key in keys:
        value = source.get(key)
        if value not in (None, ""):
            target[key] = value
            copied.append(key)
    return copied
