"""Declarative config loading and strict validation helpers.

Config files are JSON or YAML documents whose root is an object mapping. The
helpers below are shared by the simulation and fitting config parsers so every
error message names the offending field path.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

SUPPORTED_CONFIG_SUFFIXES: tuple[str, ...] = (".json", ".yaml", ".yml")


def load_config_mapping(path: str | Path) -> dict[str, Any]:
    """Load one JSON/YAML config file whose root is an object mapping.

    Parameters
    ----------
    path : str | pathlib.Path
        Config file path with suffix `.json`, `.yaml`, or `.yml`.

    Returns
    -------
    dict[str, Any]
        Parsed config mapping.

    Raises
    ------
    ValueError
        If the suffix is unsupported or the document root is not a mapping.
    """

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        supported = ", ".join(SUPPORTED_CONFIG_SUFFIXES)
        raise ValueError(
            f"unsupported config file extension {suffix!r}; expected one of {supported}"
        )

    with config_path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle) if suffix == ".json" else yaml.safe_load(handle)

    if not isinstance(raw, dict):
        raise ValueError("config root must be a JSON/YAML object")
    return raw


def validate_allowed_keys(
    mapping: Mapping[str, Any],
    *,
    field_name: str,
    allowed_keys: Iterable[str],
) -> None:
    """Raise ``ValueError`` when ``mapping`` holds keys outside ``allowed_keys``."""

    allowed = {str(key) for key in allowed_keys}
    unknown = sorted(str(key) for key in mapping if str(key) not in allowed)
    if unknown:
        raise ValueError(f"{field_name} has unknown keys: {unknown}")


def validate_required_keys(
    mapping: Mapping[str, Any],
    *,
    field_name: str,
    required_keys: Iterable[str],
) -> None:
    """Raise ``ValueError`` when any of ``required_keys`` is missing."""

    missing = sorted(str(key) for key in required_keys if str(key) not in mapping)
    if missing:
        raise ValueError(f"{field_name} is missing required keys: {missing}")


def require_mapping(raw: Any, *, field_name: str) -> dict[str, Any]:
    """Require an object-valued config entry."""

    if not isinstance(raw, Mapping):
        raise ValueError(f"{field_name} must be an object")
    return dict(raw)


def require_sequence(raw: Any, *, field_name: str) -> list[Any]:
    """Require an array-valued config entry."""

    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"{field_name} must be an array")
    return list(raw)


def coerce_float_mapping(raw: Any, *, field_name: str) -> dict[str, float]:
    """Coerce a ``name -> number`` config mapping."""

    mapping = require_mapping(raw, field_name=field_name)
    out: dict[str, float] = {}
    for key, value in mapping.items():
        try:
            out[str(key)] = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{field_name}.{key} must be a number") from exc
    return out


def coerce_bounds_mapping(
    raw: Any,
    *,
    field_name: str,
) -> dict[str, tuple[float | None, float | None]]:
    """Coerce a ``name -> [lower, upper]`` mapping where either end may be null."""

    mapping = require_mapping(raw, field_name=field_name)
    out: dict[str, tuple[float | None, float | None]] = {}
    for key, value in mapping.items():
        pair = require_sequence(value, field_name=f"{field_name}.{key}")
        if len(pair) != 2:
            raise ValueError(f"{field_name}.{key} must have exactly two entries")
        lower, upper = pair
        out[str(key)] = (
            float(lower) if lower is not None else None,
            float(upper) if upper is not None else None,
        )
    return out


def coerce_non_empty_str(raw: Any, *, field_name: str) -> str:
    """Coerce a non-empty string with explicit field context."""

    if raw is None:
        raise ValueError(f"{field_name} must be a non-empty string")
    value = str(raw).strip()
    if not value:
        raise ValueError(f"{field_name} must be a non-empty string")
    return value


__all__ = [
    "SUPPORTED_CONFIG_SUFFIXES",
    "coerce_bounds_mapping",
    "coerce_float_mapping",
    "coerce_non_empty_str",
    "load_config_mapping",
    "require_mapping",
    "require_sequence",
    "validate_allowed_keys",
    "validate_required_keys",
]
