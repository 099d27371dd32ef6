"""Tests for config-driven posterior fitting."""

from __future__ import annotations

import numpy as np
import pytest

from ibl_lnr.core.data import RetrievalTrial
from ibl_lnr.generators import simulate_gamble_set
from ibl_lnr.inference import (
    InstanceBasedLearningLikelihood,
    LognormalRaceLikelihood,
    MultiChainPosteriorResult,
    RetrievalRaceLikelihood,
    fit_config_from_mapping,
    fit_posterior_from_config,
    likelihood_program_from_config,
)
from ibl_lnr.models import InstanceBasedLearningConfig
from ibl_lnr.problems import default_gamble_set


def _ibl_mapping() -> dict:
    return {
        "model": "ibl",
        "fixed": {"noise_scale": 0.25},
        "options": [
            {"a": 1, "b": 0},
            {"a": {"outcomes": [3, 0], "probabilities": [0.8, 0.2]}, "b": 3},
        ],
        "priors": {
            "decay": {"distribution": "beta", "alpha": 10, "beta": 10},
            "decision_noise": {"distribution": "truncated_normal", "mean": 0.2, "std": 0.2, "lower": 0},
        },
        "sampler": {
            "initial_params": {"decay": 0.5, "decision_noise": 0.3},
            "n_samples": 30,
            "n_warmup": 10,
            "n_chains": 2,
            "proposal_scales": {"decay": 0.05, "decision_noise": 0.05},
            "bounds": {"decay": [0, 1], "decision_noise": [0, None]},
            "random_seed": 3,
        },
    }


def test_fit_config_parses_ibl_mapping() -> None:
    """All sections are parsed into typed settings."""

    config = fit_config_from_mapping(_ibl_mapping())

    assert config.model == "ibl"
    assert config.fixed == {"noise_scale": 0.25}
    assert config.free_parameters == ("decay", "decision_noise")
    assert len(config.options) == 2
    assert config.options[1].expected_values() == pytest.approx({"a": 2.4, "b": 3.0})
    assert config.sampler.n_chains == 2
    assert config.sampler.bounds == {"decay": (0.0, 1.0), "decision_noise": (0.0, None)}
    assert isinstance(likelihood_program_from_config(config), InstanceBasedLearningLikelihood)


def test_sampler_defaults() -> None:
    """Omitted sampler settings take the documented defaults."""

    mapping = {
        "model": "retrieval_race",
        "priors": {"base_level_constant": {"distribution": "normal", "mean": 1.0, "std": 1.0}},
        "sampler": {"initial_params": {"base_level_constant": 1.0}},
    }

    config = fit_config_from_mapping(mapping)

    assert (config.sampler.n_chains, config.sampler.n_samples, config.sampler.n_warmup) == (4, 2000, 1000)
    assert config.sampler.thin == 1
    assert config.sampler.random_seed is None
    assert isinstance(likelihood_program_from_config(config), RetrievalRaceLikelihood)


def test_lognormal_race_config_requires_accumulators() -> None:
    """The generic race needs an accumulator count."""

    mapping = {
        "model": "lognormal_race",
        "n_accumulators": 2,
        "fixed": {"non_decision_time": 0.2},
        "priors": {
            "mu_0": {"distribution": "normal", "mean": 0, "std": 2},
            "mu_1": {"distribution": "normal", "mean": 0, "std": 2},
            "sigma": {"distribution": "half_cauchy", "scale": 1},
        },
        "sampler": {"initial_params": {"mu_0": 0.0, "mu_1": 0.0, "sigma": 1.0}},
    }

    program = likelihood_program_from_config(fit_config_from_mapping(mapping))

    assert isinstance(program, LognormalRaceLikelihood)
    assert program.n_accumulators == 2

    del mapping["n_accumulators"]
    with pytest.raises(ValueError, match="n_accumulators"):
        fit_config_from_mapping(mapping)


@pytest.mark.parametrize(
    ("update", "match"),
    [
        ({"model": "rescorla_wagner"}, "config.model"),
        ({"solver": "nuts"}, "unknown keys"),
        ({"n_accumulators": 3}, "only valid for lognormal_race"),
        ({"fixed": {"decay": 0.5}}, "both fixed and sampled"),
        ({"options": {"a": 1}}, "must be an array"),
        ({"sampler": {"initial_params": {"decay": 0.5}, "n_samples": 0}}, "n_samples"),
        ({"sampler": {"initial_params": {"decay": 0.5}, "steps": 3}}, "sampler has unknown keys"),
    ],
)
def test_invalid_fit_configs_raise(update: dict, match: str) -> None:
    """Invalid configs fail with field-specific messages."""

    mapping = _ibl_mapping()
    mapping.update(update)

    with pytest.raises(ValueError, match=match):
        fit_config_from_mapping(mapping)


def test_missing_required_section_raises() -> None:
    """``model``, ``priors`` and ``sampler`` are required."""

    mapping = _ibl_mapping()
    del mapping["priors"]

    with pytest.raises(ValueError, match="missing required keys"):
        fit_config_from_mapping(mapping)


def test_fit_posterior_from_ibl_config() -> None:
    """A short IBL fit returns one chain per configured chain count."""

    blocks = simulate_gamble_set(
        default_gamble_set(),
        n_trials=20,
        config=InstanceBasedLearningConfig(decay=0.5, decision_noise=0.3, noise_scale=0.25),
        rng=np.random.default_rng(12),
    )

    result = fit_posterior_from_config(blocks, fit_config_from_mapping(_ibl_mapping()))

    assert isinstance(result, MultiChainPosteriorResult)
    assert result.n_chains == 2
    assert result.posterior_samples.n_draws == 60
    assert result.parameter_names == ("decay", "decision_noise")
    decay = result.posterior_samples.draws("decay")
    assert np.all((decay >= 0.0) & (decay <= 1.0))


def test_fit_posterior_from_retrieval_config() -> None:
    """Retrieval fits run on response-time trials."""

    trials = tuple(RetrievalTrial(index, index % 2, 0.8 + 0.1 * (index % 3)) for index in range(12))
    mapping = {
        "model": "retrieval_race",
        "fixed": {"noise_scale": 0.3, "non_decision_time": 0.3},
        "priors": {
            "base_level_constant": {"distribution": "normal", "mean": 0.5, "std": 1.0},
            "retrieval_threshold": {"distribution": "normal", "mean": 0.0, "std": 1.0},
        },
        "sampler": {
            "initial_params": {"base_level_constant": 0.5, "retrieval_threshold": 0.0},
            "n_samples": 20,
            "n_warmup": 5,
            "n_chains": 1,
            "random_seed": 0,
        },
    }

    result = fit_posterior_from_config(trials, fit_config_from_mapping(mapping))

    assert result.posterior_samples.n_draws == 20
    assert result.pointwise_log_likelihood_draws.shape == (20, 12)
