from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from puzzlepath.core.progress import default_progress_path

logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    return Path.home() / ".puzzlepath" / "config.yaml"


@dataclass(frozen=True)
class EngineConfig:
    check_delay_ms: int = 600
    lives: int = 3
    progress_path: Path = field(default_factory=default_progress_path)
    unlock_all: bool = False


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """Read ~/.puzzlepath/config.yaml if present; fall back to defaults on any problem."""
    config = EngineConfig()
    config_path = path or default_config_path()
    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Could not load config from %s: %s", config_path, e)
            raw = None
        if isinstance(raw, dict):
            config = _apply(config, raw, config_path)
        elif raw is not None:
            logger.warning("Ignoring %s: expected a YAML mapping", config_path)

    if os.environ.get("PUZZLEPATH_UNLOCK_ALL") == "1":
        config = replace(config, unlock_all=True)
    return config


def _apply(config: EngineConfig, raw: Dict[str, Any], source: Path) -> EngineConfig:
    updates: Dict[str, Any] = {}
    for key in ("check_delay_ms", "lives"):
        if key not in raw:
            continue
        value = raw[key]
        if isinstance(value, bool) or not isinstance(value, int) or value < (1 if key == "lives" else 0):
            logger.warning("%s: ignoring invalid %s=%r", source, key, value)
            continue
        updates[key] = value
    if "progress_path" in raw and raw["progress_path"]:
        updates["progress_path"] = Path(str(raw["progress_path"])).expanduser()
    if "unlock_all" in raw:
        updates["unlock_all"] = bool(raw["unlock_all"])
    return replace(config, **updates)
