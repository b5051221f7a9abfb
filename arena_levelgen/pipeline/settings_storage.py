"""
Settings persistence layer for generation presets.

Handles save/load of PipelineSettings presets to
~/.config/arena_levelgen/presets/ as JSON.
"""

from __future__ import annotations
import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import List, Optional, Dict, Any

from .automated_pipeline import PipelineSettings, PipelineError

logger = logging.getLogger(__name__)


def get_presets_dir(base_dir: Optional[Path] = None) -> Path:
    """
    Get the directory for storing presets.

    Args:
        base_dir: Override for the default location

    Returns:
        Path to ~/.config/arena_levelgen/presets/ (or base_dir).
        Creates the directory if it doesn't exist.
    """
    presets_dir = base_dir or Path.home() / ".config" / "arena_levelgen" / "presets"
    presets_dir.mkdir(parents=True, exist_ok=True)
    return presets_dir


def settings_to_dict(settings: PipelineSettings, name: Optional[str] = None) -> Dict[str, Any]:
    """Convert settings to a JSON-serializable dictionary."""
    data: Dict[str, Any] = {}
    if name is not None:
        data["name"] = name
    data["settings"] = settings.to_dict()
    return data


def dict_to_settings(data: Dict[str, Any]) -> PipelineSettings:
    """
    Create settings from a dictionary.

    Accepts either a preset document ({"name": ..., "settings": {...}}) or a
    bare settings mapping. Unknown keys are ignored with a warning; missing
    keys keep their defaults.
    """
    values = data.get("settings", data)
    if not isinstance(values, dict):
        raise TypeError("settings must be a JSON object")

    known = {f.name for f in fields(PipelineSettings)}
    unknown = sorted(set(values) - known - {"name"})
    if unknown:
        logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))
    return PipelineSettings(**{k: v for k, v in values.items() if k in known})


def _sanitize_filename(name: str) -> str:
    """
    Sanitize a preset name for use as a filename.

    Args:
        name: The preset name

    Returns:
        A safe filename (lowercase, spaces replaced with underscores, special chars removed)
    """
    safe = name.lower().replace(" ", "_")
    safe = "".join(c for c in safe if c.isalnum() or c in "_-")
    return safe or "preset"


def save_settings(settings: PipelineSettings, name: str, base_dir: Optional[Path] = None) -> Path:
    """
    Save settings as a named preset.

    Returns:
        Path to the saved file

    Raises:
        OSError: If the file cannot be written
    """
    file_path = get_presets_dir(base_dir) / (_sanitize_filename(name) + ".json")
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(settings_to_dict(settings, name), f, indent=2, ensure_ascii=False)
    logger.info("Saved preset '%s' to %s", name, file_path)
    return file_path


def load_settings_from_path(file_path: Path) -> Optional[PipelineSettings]:
    """
    Load settings from a specific JSON file.

    Returns:
        PipelineSettings, or None if the file does not exist

    Raises:
        PipelineError: If the file exists but is not a valid settings document
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return None

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return dict_to_settings(data)
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        raise PipelineError(f"Invalid settings file {file_path}: {e}") from e


def load_settings(name: str, base_dir: Optional[Path] = None) -> Optional[PipelineSettings]:
    """Load a preset by name, None if no such preset exists"""
    file_path = get_presets_dir(base_dir) / (_sanitize_filename(name) + ".json")
    return load_settings_from_path(file_path)


def list_saved_settings(base_dir: Optional[Path] = None) -> List[str]:
    """
    List all saved preset names.

    Unreadable files are skipped.

    Returns:
        Sorted list of preset names
    """
    names = []
    for file_path in get_presets_dir(base_dir).glob("*.json"):
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.warning("Skipping unreadable preset %s", file_path)
            continue
        if isinstance(data, dict):
            names.append(data.get("name", file_path.stem))
    return sorted(names)


def delete_settings(name: str, base_dir: Optional[Path] = None) -> bool:
    """
    Delete a saved preset by name.

    Returns:
        True if deleted, False if not found
    """
    file_path = get_presets_dir(base_dir) / (_sanitize_filename(name) + ".json")
    if file_path.exists():
        file_path.unlink()
        return True
    return False
