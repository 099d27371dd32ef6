"""Choice-probability utilities shared by simulation and likelihood replay.

Simulation and replay both route model output through
:func:`normalize_distribution`, so a dataset is scored with exactly the
probabilities that would have generated it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np


def softmax(values: Sequence[float] | np.ndarray, noise: float) -> np.ndarray:
    """Return ``exp(v / noise) / sum(exp(v / noise))``.

    Parameters
    ----------
    values : Sequence[float] | numpy.ndarray
        Finite utilities, one per option.
    noise : float
        Decision noise ``phi``; must be positive.

    Returns
    -------
    numpy.ndarray
        Probabilities summing to one.

    Raises
    ------
    ValueError
        If ``values`` is empty or non-finite, or ``noise`` is not positive.
    """

    if not np.isfinite(noise) or noise <= 0.0:
        raise ValueError("noise must be finite and > 0")
    utilities = np.asarray(values, dtype=float)
    if utilities.ndim != 1 or utilities.size == 0:
        raise ValueError("values must be a non-empty 1D sequence")
    if not np.all(np.isfinite(utilities)):
        raise ValueError("values must be finite")

    # The largest logit is exactly 0 for any positive noise.
    logits = (utilities - float(np.max(utilities))) / float(noise)
    weights = np.exp(logits)
    return weights / float(np.sum(weights))


def normalize_distribution(
    raw_distribution: Mapping[Any, float],
    available_actions: tuple[Any, ...],
) -> dict[Any, float]:
    """Validate and normalize action probabilities.

    Parameters
    ----------
    raw_distribution : Mapping[Any, float]
        Model-emitted action weights.
    available_actions : tuple[Any, ...]
        Legal actions for the trial.

    Returns
    -------
    dict[Any, float]
        Normalized probabilities over ``available_actions``.

    Raises
    ------
    ValueError
        If the model emits unknown actions, negative or non-finite weights, or
        zero total weight.
    """

    unknown_actions = set(raw_distribution.keys()) - set(available_actions)
    if unknown_actions:
        raise ValueError(f"distribution contains unknown actions: {sorted(map(str, unknown_actions))!r}")

    weights: dict[Any, float] = {}
    for action in available_actions:
        value = float(raw_distribution.get(action, 0.0))
        if not np.isfinite(value) or value < 0:
            raise ValueError(f"distribution contains invalid weight for action {action!r}")
        weights[action] = value

    total = float(sum(weights.values()))
    if total <= 0:
        raise ValueError("distribution sum must be > 0 for available actions")

    return {action: value / total for action, value in weights.items()}


def sample_action(distribution: Mapping[Any, float], rng: np.random.Generator) -> Any:
    """Sample one action from a normalized distribution."""

    actions = tuple(distribution.keys())
    probs = np.asarray(tuple(distribution.values()), dtype=float)
    return actions[int(rng.choice(len(actions), p=probs))]


__all__ = ["normalize_distribution", "sample_action", "softmax"]
