"""Loader for ``key = value`` configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from .logging_utils import get_module_logger

logger = get_module_logger("ConfigLoader")

_TRUE_WORDS = ("true", "yes", "on", "1")
_BOOL_WORDS = _TRUE_WORDS + ("false", "no", "off", "0")


class ConfigLoader:
    """Parses flat config files.

    Blank lines and ``#`` comments are skipped, values may be quoted, and
    each value is converted to the type of its entry in ``defaults`` when
    one exists. Unknown keys are kept as parsed values unless ``strict``.
    """

    @staticmethod
    def load(
        config_path: Path,
        defaults: Optional[Dict[str, Any]] = None,
        strict: bool = False,
    ) -> Dict[str, Any]:
        config_path = Path(config_path)
        if not config_path.exists():
            logger.debug("Config file not found at %s, using defaults", config_path)
            return dict(defaults or {})

        with open(config_path, "r", encoding="utf-8") as fh:
            lines = fh.readlines()

        config = ConfigLoader.parse_lines(lines, defaults, strict)
        logger.info("Loaded config from %s (%d values)", config_path, len(config))
        return config

    @staticmethod
    def parse_lines(
        lines: Iterable[str],
        defaults: Optional[Dict[str, Any]] = None,
        strict: bool = False,
    ) -> Dict[str, Any]:
        config = dict(defaults or {})

        for line_num, raw_line in enumerate(lines, 1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                logger.warning("Invalid config line %d (missing '='): %s", line_num, line)
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.split("#", 1)[0].strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]

            if strict and defaults is not None and key not in defaults:
                logger.warning("Unknown config key '%s' (line %d) - ignored in strict mode", key, line_num)
                continue

            if defaults and key in defaults and defaults[key] is not None:
                config[key] = ConfigLoader._parse_value_with_type(value, type(defaults[key]))
            else:
                config[key] = ConfigLoader._parse_value(value)

        return config

    @staticmethod
    def _parse_value(value: str) -> Any:
        value_lower = value.lower()
        if value_lower in _BOOL_WORDS:
            return value_lower in _TRUE_WORDS

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    @staticmethod
    def _parse_value_with_type(value: str, target_type: type) -> Any:
        if target_type is bool:
            return value.lower() in _TRUE_WORDS

        # Sentinel words such as "camera_default" are resolved by the caller.
        if target_type in (int, float):
            try:
                return target_type(value)
            except ValueError:
                return value

        return value


__all__ = ["ConfigLoader"]
