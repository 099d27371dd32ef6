"""Tests for posterior predictive simulation."""

from __future__ import annotations

import numpy as np
import pytest

from ibl_lnr.analysis import posterior_a_rates, posterior_predictive
from ibl_lnr.inference import PosteriorSamples
from ibl_lnr.problems import default_gamble_set


def _samples() -> PosteriorSamples:
    return PosteriorSamples(
        parameter_draws={
            "decay": np.asarray([0.4, 0.5, 0.6]),
            "decision_noise": np.asarray([0.2, 0.3, 0.4]),
        }
    )


def test_posterior_predictive_passes_sampled_parameters() -> None:
    """Each simulation receives one stored posterior draw."""

    seen: list[dict[str, float]] = []

    def simulate(params: dict[str, float], rng: np.random.Generator) -> float:
        seen.append(params)
        return params["decay"] + params["decision_noise"]

    results = posterior_predictive(simulate, _samples(), n_draws=20, rng=np.random.default_rng(0))

    assert len(results) == 20
    assert set(np.round(results, 6)) <= {0.6, 0.8, 1.0}
    assert all(params in [_samples().draw(index) for index in range(3)] for params in seen)


def test_posterior_predictive_applies_summary() -> None:
    """The summary statistic replaces the raw dataset."""

    results = posterior_predictive(
        lambda params, rng: rng.normal(size=5),
        _samples(),
        n_draws=4,
        rng=np.random.default_rng(1),
        summary=len,
    )

    assert results == [5, 5, 5, 5]


def test_posterior_predictive_requires_positive_draws() -> None:
    """At least one dataset is simulated."""

    with pytest.raises(ValueError, match="n_draws"):
        posterior_predictive(lambda params, rng: None, _samples(), n_draws=0, rng=np.random.default_rng(0))


def test_posterior_a_rates_shape_and_range() -> None:
    """One a-rate per draw and gamble problem, each in ``[0, 1]``."""

    rates = posterior_a_rates(
        _samples(),
        default_gamble_set(),
        n_trials=30,
        n_draws=5,
        rng=np.random.default_rng(2),
        fixed={"noise_scale": 0.25},
    )

    assert rates.shape == (5, 3)
    assert np.all((rates >= 0.0) & (rates <= 1.0))


def test_posterior_a_rates_reproducible() -> None:
    """The same generator seed reproduces the predictive draws."""

    first = posterior_a_rates(_samples(), default_gamble_set(), n_trials=20, n_draws=3, rng=np.random.default_rng(5))
    second = posterior_a_rates(_samples(), default_gamble_set(), n_trials=20, n_draws=3, rng=np.random.default_rng(5))

    np.testing.assert_array_equal(first, second)
