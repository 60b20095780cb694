"""Reading benchmark settings from the environment or from a JSON file."""

from __future__ import annotations

import json
import logging
import math
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

_TRUE_WORDS = frozenset({"YES", "yes", "ON", "on", "1", "true"})

_INT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_HEX_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?)"
)
_DEC_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)
_SPECIAL_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?)(infinity|inf|nan)", re.IGNORECASE
)


class ConfigError(Exception):
    """A required setting is missing or the configuration cannot be read."""


class ConfigReader(Protocol):
    def get(self, name: str) -> str | None: ...


class EnvConfigReader:
    """Looks settings up in a mapping of environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def get(self, name: str) -> str | None:
        value = self._environ.get(name)
        logger.info("CFG: %s = %s", name, "<EMPTY>" if value is None else value)
        return value


class JsonConfigReader:
    """Looks settings up in a parsed JSON object."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise ConfigError("JSON configuration must be an object")
        self._data = data

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "JsonConfigReader":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Unable to read configuration file {path}") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Error before: {text[exc.pos:]}") from exc
        return cls(data)

    def get(self, name: str) -> str | None:
        value = self._data.get(name)
        if isinstance(value, str):
            result = value
        elif isinstance(value, bool):
            result = "true" if value else "false"
        elif isinstance(value, (int, float)):
            result = str(_json_int(value))
        else:
            return None
        logger.info("CFG: %s = %s", name, result)
        return result


def _json_int(value: int | float) -> int:
    """Integer view of a JSON number, saturated to the 32-bit range."""
    if isinstance(value, float):
        if math.isnan(value):
            return 0
        if math.isinf(value):
            return 2**31 - 1 if value > 0 else -(2**31)
        value = int(value)
    return max(-(2**31), min(2**31 - 1, value))


def atoi(text: str) -> int:
    """Parse a leading integer like C's atoi; return 0 if there is none."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def atof(text: str) -> float:
    """Parse a leading floating-point number like C's atof; return 0.0 if none."""
    match = _HEX_FLOAT_PREFIX.match(text)
    if match:
        return float.fromhex(match.group(1))
    match = _SPECIAL_FLOAT_PREFIX.match(text)
    if match:
        sign, word = match.groups()
        value = math.nan if word.lower() == "nan" else math.inf
        return -value if sign == "-" else value
    match = _DEC_FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _required(reader: ConfigReader, name: str) -> str:
    value = reader.get(name)
    if value is None:
        raise ConfigError(f"Required environment variable {name} is not set")
    return value


def get_str(reader: ConfigReader, name: str) -> str:
    """Return a mandatory string setting."""
    return _required(reader, name)


def get_opt_str(reader: ConfigReader, name: str, default: str) -> str:
    """Return a string setting, or ``default`` if it is not set."""
    value = reader.get(name)
    return default if value is None else value


def get_opt_bool(reader: ConfigReader, name: str, default: bool) -> bool:
    """Return a boolean setting, or ``default`` if it is not set."""
    value = reader.get(name)
    return default if value is None else value in _TRUE_WORDS


def get_int(reader: ConfigReader, name: str) -> int:
    """Return a mandatory integer setting."""
    return atoi(_required(reader, name))


def get_float(reader: ConfigReader, name: str) -> float:
    """Return a mandatory floating-point setting."""
    return atof(_required(reader, name))


def get_bool(reader: ConfigReader, name: str) -> bool:
    """Return an optional boolean setting; unset counts as false."""
    value = reader.get(name)
    return value is not None and value in _TRUE_WORDS


def alter_str(value: str | None, default: str) -> str:
    """Return ``value`` unless it is unset."""
    return default if value is None else value


def alter_int(value: str | None, default: int | str) -> int:
    """Parse ``value`` as an integer, falling back to ``default`` when unset."""
    if value is not None:
        return atoi(value)
    return atoi(default) if isinstance(default, str) else int(default)


def alter_float(value: str | None, default: float | str) -> float:
    """Parse ``value`` as a float, falling back to ``default`` when unset."""
    if value is not None:
        return atof(value)
    return atof(default) if isinstance(default, str) else float(default)