"""
Pipeline Settings

JSON-backed defaults for the post-processing pipeline. The file holds
the keys read by PipelineConfig.from_settings() plus the debug flag;
command-line values are layered on top with apply_overrides().
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Looked up relative to the working directory
SETTINGS_FILE = Path("config.json")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "model": "g1",
    "confidence_threshold": 0.25,
    "nms_threshold": 0.5,
    "input_size": 640,
    "line_tolerance_factor": 0.8,
    "word_spacing_factor": 1.5,
    "braille_map_path": None,
    "debug_enabled": False,
}

# Keys accepted in addition to the defaults
OPTIONAL_KEYS = frozenset({"class_offset"})


def _known(key: str) -> bool:
    return key in DEFAULT_SETTINGS or key in OPTIONAL_KEYS


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read pipeline settings, filling gaps from DEFAULT_SETTINGS.

    Unknown keys are logged and dropped. A missing, unreadable or
    non-object file yields the defaults.

    Args:
        path: Settings file, defaults to SETTINGS_FILE

    Returns:
        Settings dictionary
    """
    path = Path(path) if path is not None else SETTINGS_FILE
    settings = dict(DEFAULT_SETTINGS)

    if not path.exists():
        logger.debug(f"No settings file at {path}, using defaults")
        return settings

    try:
        with open(path, 'r', encoding='utf-8') as f:
            stored = json.load(f)
        if not isinstance(stored, dict):
            raise ValueError("top level must be an object")
    except (ValueError, OSError) as e:
        logger.warning(f"Ignoring settings file {path}: {e}")
        return settings

    for key, value in stored.items():
        if _known(key):
            settings[key] = value
        else:
            logger.warning(f"Unknown setting {key!r} in {path}")

    logger.debug(f"Settings loaded from {path}: {settings}")
    return settings


def apply_overrides(settings: Dict[str, Any], **overrides: Any) -> Dict[str, Any]:
    """
    Layer explicit values over loaded settings.

    Overrides that are None are skipped, so unset command-line flags
    keep the file's value.

    Returns:
        New settings dictionary
    """
    merged = dict(settings)
    for key, value in overrides.items():
        if not _known(key):
            raise ValueError(f"Unknown setting: {key}")
        if value is not None:
            merged[key] = value
    return merged


def save_settings(settings: Dict[str, Any], path: Optional[Path] = None) -> None:
    """
    Write the known settings keys as indented JSON.

    Args:
        settings: Settings dictionary
        path: Settings file, defaults to SETTINGS_FILE
    """
    path = Path(path) if path is not None else SETTINGS_FILE
    known = {key: value for key, value in settings.items() if _known(key)}

    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(known, f, indent=2)
        logger.debug(f"Settings saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save settings to {path}: {e}")
