"""Sequential statistics of choice sequences."""

from __future__ import annotations

from collections.abc import Hashable, Sequence

import numpy as np

from ibl_lnr.core.data import ChoiceBlock


def _as_choices(choices: Sequence[Hashable] | ChoiceBlock) -> tuple[Hashable, ...]:
    if isinstance(choices, ChoiceBlock):
        return choices.choices
    return tuple(choices)


def a_rate(choices: Sequence[Hashable] | ChoiceBlock) -> float:
    """Return the alternation rate ``Pr(y_i != y_{i+1})``.

    Parameters
    ----------
    choices : Sequence[Hashable] | ChoiceBlock
        Choice sequence in trial order.

    Returns
    -------
    float
        Share of adjacent trial pairs with different choices. High values
        mean frequent switching; low values mean a settled preference.

    Raises
    ------
    ValueError
        If fewer than two choices are given.
    """

    values = _as_choices(choices)
    if len(values) < 2:
        raise ValueError("a_rate requires at least 2 choices")
    switches = sum(1 for current, following in zip(values[:-1], values[1:]) if current != following)
    return float(switches / (len(values) - 1))


def recurrence_rate(choices: Sequence[Hashable] | ChoiceBlock) -> float:
    """Return ``RR = sum_{i != j} [y_i == y_j] / (N^2 - N)``.

    Raises
    ------
    ValueError
        If fewer than two choices are given.
    """

    values = _as_choices(choices)
    n = len(values)
    if n < 2:
        raise ValueError("recurrence_rate requires at least 2 choices")
    return float(len(recurrence_indices(values)[0]) / (n * n - n))


def recurrence_indices(choices: Sequence[Hashable] | ChoiceBlock) -> tuple[np.ndarray, np.ndarray]:
    """Return zero-based ``(i, j)`` pairs with ``i != j`` and ``y_i == y_j``.

    Returns
    -------
    tuple[numpy.ndarray, numpy.ndarray]
        Row and column indices of the recurrence plot, ordered by ``i`` then
        ``j``. Pairs are listed in both orders.
    """

    values = _as_choices(choices)
    rows: list[int] = []
    cols: list[int] = []
    for i, left in enumerate(values):
        for j, right in enumerate(values):
            if i != j and left == right:
                rows.append(i)
                cols.append(j)
    return np.asarray(rows, dtype=int), np.asarray(cols, dtype=int)


def recurrence_counts(
    index_pairs: Sequence[tuple[np.ndarray, np.ndarray]],
    n_trials: int,
) -> np.ndarray:
    """Accumulate recurrence pairs from many sequences into a count matrix.

    Entry ``[i, j]`` counts how many sequences recur at ``(i, j)``; dividing
    by ``len(index_pairs)`` gives the posterior predictive recurrence
    frequency.
    """

    if n_trials <= 0:
        raise ValueError("n_trials must be > 0")
    counts = np.zeros((n_trials, n_trials), dtype=int)
    for rows, cols in index_pairs:
        np.add.at(counts, (np.asarray(rows, dtype=int), np.asarray(cols, dtype=int)), 1)
    return counts


__all__ = ["a_rate", "recurrence_counts", "recurrence_indices", "recurrence_rate"]
