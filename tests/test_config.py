"""Tests for JSON/YAML config loading and validation helpers."""

from __future__ import annotations

import json

import pytest

from ibl_lnr.core import load_config_mapping, validate_allowed_keys, validate_required_keys
from ibl_lnr.core.config import (
    coerce_bounds_mapping,
    coerce_float_mapping,
    coerce_non_empty_str,
    require_sequence,
)


def test_load_config_mapping_accepts_json_and_yaml(tmp_path) -> None:
    """JSON and YAML documents load to the same mapping."""

    json_path = tmp_path / "config.json"
    json_path.write_text(json.dumps({"model": "ibl", "fixed": {"noise_scale": 0.2}}), encoding="utf-8")
    yaml_path = tmp_path / "config.yml"
    yaml_path.write_text("model: ibl\nfixed:\n  noise_scale: 0.2\n", encoding="utf-8")

    assert load_config_mapping(json_path) == load_config_mapping(yaml_path)


def test_load_config_mapping_rejects_unsupported_extension(tmp_path) -> None:
    """Unknown suffixes fail before reading."""

    path = tmp_path / "config.toml"
    path.write_text("model = 'ibl'\n", encoding="utf-8")

    with pytest.raises(ValueError, match="unsupported config file extension"):
        load_config_mapping(path)


def test_load_config_mapping_requires_mapping_root(tmp_path) -> None:
    """A list at the document root is rejected."""

    path = tmp_path / "config.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ValueError, match="config root must be a JSON/YAML object"):
        load_config_mapping(path)


def test_key_validation_names_field() -> None:
    """Unknown and missing keys are reported with the field path."""

    with pytest.raises(ValueError, match=r"sampler has unknown keys: \['n_sample'\]"):
        validate_allowed_keys({"n_sample": 3}, field_name="sampler", allowed_keys=("n_samples",))
    with pytest.raises(ValueError, match=r"config is missing required keys: \['priors'\]"):
        validate_required_keys({"model": "ibl"}, field_name="config", required_keys=("model", "priors"))


def test_coercion_helpers() -> None:
    """Numbers, bounds and strings are coerced with explicit errors."""

    assert coerce_float_mapping({"decay": "0.5"}, field_name="fixed") == {"decay": 0.5}
    assert coerce_bounds_mapping({"decay": [0, None]}, field_name="bounds") == {"decay": (0.0, None)}
    assert coerce_non_empty_str("  ibl ", field_name="model") == "ibl"

    with pytest.raises(ValueError, match="fixed.decay must be a number"):
        coerce_float_mapping({"decay": "slow"}, field_name="fixed")
    with pytest.raises(ValueError, match="exactly two entries"):
        coerce_bounds_mapping({"decay": [0.0]}, field_name="bounds")
    with pytest.raises(ValueError, match="must be an array"):
        require_sequence("abc", field_name="options")
    with pytest.raises(ValueError, match="non-empty string"):
        coerce_non_empty_str("  ", field_name="model")
