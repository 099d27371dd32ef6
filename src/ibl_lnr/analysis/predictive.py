"""Posterior predictive simulation."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

import numpy as np

from ibl_lnr.generators.simulation import simulate_gamble_set
from ibl_lnr.inference.posterior import PosteriorSamples
from ibl_lnr.models.ibl import InstanceBasedLearningConfig
from ibl_lnr.problems.gambles import GambleProblem

from .choice_dynamics import a_rate

T = TypeVar("T")


def posterior_predictive(
    simulate: Callable[[dict[str, float], np.random.Generator], T],
    samples: PosteriorSamples,
    n_draws: int,
    rng: np.random.Generator,
    summary: Callable[[T], Any] | None = None,
) -> list[Any]:
    """Simulate one dataset per randomly chosen posterior draw.

    Parameters
    ----------
    simulate : Callable[[dict[str, float], numpy.random.Generator], T]
        Called with one posterior parameter set and ``rng``.
    samples : PosteriorSamples
        Posterior draws; indices are sampled uniformly with replacement.
    n_draws : int
        Number of simulated datasets.
    rng : numpy.random.Generator
        Generator for draw selection and simulation.
    summary : Callable[[T], Any] | None, optional
        Statistic applied to each simulated dataset.

    Returns
    -------
    list[Any]
        Simulated datasets, or their summaries when ``summary`` is given.
    """

    if n_draws <= 0:
        raise ValueError("n_draws must be > 0")

    indices = rng.integers(0, samples.n_draws, size=n_draws)
    results: list[Any] = []
    for index in indices:
        dataset = simulate(samples.draw(int(index)), rng)
        results.append(summary(dataset) if summary is not None else dataset)
    return results


def posterior_a_rates(
    samples: PosteriorSamples,
    gamble_set: Sequence[GambleProblem],
    *,
    n_trials: int,
    n_draws: int,
    rng: np.random.Generator,
    fixed: Mapping[str, float] | None = None,
) -> np.ndarray:
    """Return posterior predictive a-rates of an IBL agent.

    Returns
    -------
    numpy.ndarray
        Shape ``(n_draws, len(gamble_set))``; one simulated a-rate per
        posterior draw and gamble problem.
    """

    base = dict(fixed) if fixed is not None else {}

    def _simulate(params: dict[str, float], generator: np.random.Generator) -> list[float]:
        config = InstanceBasedLearningConfig(**{**base, **params})
        blocks = simulate_gamble_set(gamble_set, n_trials=n_trials, config=config, rng=generator)
        return [a_rate(block) for block in blocks]

    rates = posterior_predictive(_simulate, samples, n_draws, rng)
    return np.asarray(rates, dtype=float)


__all__ = ["posterior_a_rates", "posterior_predictive"]
