"""
ConfigManager: dot-notation access to game balance configuration.

Purpose
-------
- Provide hierarchical, dot-notation access to tunable progression values.
- Back configuration with built-in defaults deep-merged with YAML files.

Responsibilities
----------------
- Load and merge every YAML file under the config directory.
- Serve reads with a fallback to built-in defaults.
- Allow runtime overrides (used by tests and balance tooling).

Key Design Decisions
--------------------
- Built-in defaults mirror `config/progression.yaml` so the engine behaves
  identically when the directory is missing.
- Later files win on key conflicts; dictionaries merge recursively.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional

import yaml

from realmforge.core.config.config import Config
from realmforge.core.logging.logger import get_logger

logger = get_logger(__name__)


_BUILTIN_DEFAULTS: Dict[str, Any] = {
    "scoring": {
        "time_bonus_max": 0.5,
        "time_bonus_weight": 0.5,
        "difficulty_step": 0.1,
        "hint_penalty": 0.1,
        "min_correct_score": 1,
        "max_raw_score": 100,
    },
    "rewards": {
        "xp_per_difficulty": 10,
        "gold_per_difficulty": 5,
        "perfect_score_threshold": 100,
        "perfect_bonus_ratio": 0.5,
        "experience_divisor": 10,
    },
    "leveling": {
        "xp_per_level_unit": 100,
        "level_up_gold_per_level": 50,
        "badge_level_interval": 5,
        "realm_unlocks": {
            1: ["mathmage-trials"],
            3: ["memory-labyrinth"],
            5: ["virtual-apprentice"],
            7: ["seers-challenge"],
            10: ["cartographers-gauntlet"],
            15: ["forest-of-isomers"],
        },
    },
    "attempts": {
        "stats_window": 500,
    },
    "difficulty": {
        "min": 1,
        "max": 5,
    },
    "event_bus": {
        "listener_timeout_seconds": 5.0,
    },
}


class ConfigManager:
    """
    Class-level access to balance configuration.

    Examples
    --------
    >>> ConfigManager.get("rewards.xp_per_difficulty")
    10
    >>> ConfigManager.get("missing.key", 7)
    7
    """

    _initialized: bool = False
    _defaults: Dict[str, Any] = copy.deepcopy(_BUILTIN_DEFAULTS)
    _overrides: Dict[str, Any] = {}
    _loaded_files: List[str] = []

    # =========================================================================
    # YAML LOADING & DEFAULTS
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = value

    @classmethod
    def _load_yaml_configs(cls, config_dir: Path) -> None:
        """Load all YAML config files from `config_dir` into `_defaults`."""
        if not config_dir.exists():
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return

        yaml_files = sorted(config_dir.rglob("*.yaml")) + sorted(config_dir.rglob("*.yml"))
        for yaml_file in yaml_files:
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                logger.warning(
                    "Failed to load YAML config",
                    extra={
                        "file": str(yaml_file),
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                )
                continue

            if isinstance(data, dict):
                cls._deep_merge_dict(cls._defaults, data)
                cls._loaded_files.append(str(yaml_file.relative_to(config_dir)))
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={"file": str(yaml_file), "root_type": type(data).__name__},
                )

        logger.info(
            "YAML configs loaded",
            extra={"yaml_file_count": len(cls._loaded_files)},
        )

    @classmethod
    def initialize(cls, config_dir: Optional[Path] = None) -> None:
        """(Re)load defaults and YAML files. Safe to call more than once."""
        cls._defaults = copy.deepcopy(_BUILTIN_DEFAULTS)
        cls._loaded_files = []
        cls._load_yaml_configs(Path(config_dir) if config_dir else Config.CONFIG_DIR)
        cls._initialized = True

    # =========================================================================
    # READ API
    # =========================================================================

    @staticmethod
    def _traverse(root: Any, key: str) -> Any:
        value: Any = root
        for part in key.split("."):
            if not isinstance(value, dict):
                return None
            if part in value:
                value = value[part]
            elif part.isdigit() and int(part) in value:
                value = value[int(part)]
            else:
                return None
        return value

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Overrides win over YAML, YAML wins over built-in defaults.

        Examples
        --------
        >>> ConfigManager.get("leveling.level_up_gold_per_level")
        50
        """
        if not cls._initialized:
            cls.initialize()

        if key in cls._overrides:
            return cls._overrides[key]

        value = cls._traverse(cls._defaults, key)
        return default if value is None else value

    @classmethod
    def set_override(cls, key: str, value: Any) -> None:
        """Override a single dot key at runtime."""
        cls._overrides[key] = value
        logger.info("Config override applied", extra={"config_key": key})

    @classmethod
    def clear_overrides(cls) -> None:
        cls._overrides.clear()

    @classmethod
    def health_snapshot(cls) -> Dict[str, Any]:
        return {
            "initialized": cls._initialized,
            "yaml_files": list(cls._loaded_files),
            "override_count": len(cls._overrides),
            "top_level_keys": sorted(cls._defaults.keys()),
        }
