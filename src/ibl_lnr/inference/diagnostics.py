"""Numeric convergence diagnostics for MCMC chains.

Thin wrappers around ArviZ: autocorrelation via :func:`arviz.autocorr`,
effective sample size of the mean via ``arviz.ess(method="mean")`` and split
``R-hat`` via ``arviz.rhat(method="split")``. Inputs are validated here, and
a parameter with zero within-chain variance has undefined diagnostics and
reports NaN.
"""

from __future__ import annotations

from collections.abc import Sequence

import arviz as az
import numpy as np

from .mcmc import MultiChainPosteriorResult

_MIN_DRAWS = 4


def autocorrelation(draws: Sequence[float] | np.ndarray, max_lag: int | None = None) -> np.ndarray:
    """Return the sample autocorrelation of one chain.

    Parameters
    ----------
    draws : Sequence[float] | numpy.ndarray
        1D chain.
    max_lag : int | None, optional
        Largest lag to return; defaults to ``len(draws) - 1``.

    Returns
    -------
    numpy.ndarray
        Autocorrelation at lags ``0 .. max_lag``; lag 0 is ``1``. A constant
        chain gives ``1`` at lag 0 and ``0`` elsewhere.
    """

    x = np.asarray(draws, dtype=float)
    if x.ndim != 1 or x.size < 2:
        raise ValueError("draws must be a 1D chain with at least 2 values")
    n = int(x.size)
    lag_limit = n - 1 if max_lag is None else int(max_lag)
    if lag_limit < 0 or lag_limit >= n:
        raise ValueError(f"max_lag must be in [0, {n - 1}]")

    if float(np.var(x)) <= 0.0:
        result = np.zeros(lag_limit + 1, dtype=float)
        result[0] = 1.0
        return result
    return np.asarray(az.autocorr(x), dtype=float)[: lag_limit + 1]


def effective_sample_size(chains: Sequence[Sequence[float]] | np.ndarray) -> float:
    """Return the multi-chain effective sample size of the posterior mean.

    Parameters
    ----------
    chains : array-like
        Shape ``(n_chains, n_draws)``; a 1D array is one chain.

    Returns
    -------
    float
        Effective number of independent draws across all chains.
    """

    array = _as_chains(chains)
    if not _has_within_chain_variance(array):
        return float("nan")
    return float(az.ess(array, method="mean"))


def split_rhat(chains: Sequence[Sequence[float]] | np.ndarray) -> float:
    """Return the split potential scale reduction factor.

    Each chain is cut in half (the middle draw of an odd-length chain is
    dropped) and ``R-hat`` is computed over the halves, so a single chain
    still detects drift. Values near ``1`` indicate agreement; above about
    ``1.01``-``1.1`` chains have not mixed.
    """

    array = _as_chains(chains)
    if not _has_within_chain_variance(array):
        return float("nan")
    return float(az.rhat(array, method="split"))


def convergence_table(result: MultiChainPosteriorResult) -> list[dict[str, float | str]]:
    """Return one record per parameter with pooled moments, ESS and split R-hat."""

    rows: list[dict[str, float | str]] = []
    acceptance = float(np.mean(result.acceptance_rates))
    for name in result.parameter_names:
        chains = result.chain_draws(name)
        rows.append(
            {
                "parameter_name": name,
                "mean": float(np.mean(chains)),
                "std": float(np.std(chains, ddof=1)) if chains.size > 1 else 0.0,
                "ess": effective_sample_size(chains),
                "rhat": split_rhat(chains),
                "n_chains": float(result.n_chains),
                "mean_acceptance_rate": acceptance,
            }
        )
    return rows


def _has_within_chain_variance(array: np.ndarray) -> bool:
    half = array.shape[1] // 2
    split = np.vstack([array[:, :half], array[:, array.shape[1] - half :]])
    return float(np.mean(np.var(split, axis=1, ddof=1))) > 0.0


def _as_chains(chains: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
    array = np.asarray(chains, dtype=float)
    if array.ndim == 1:
        array = array[np.newaxis, :]
    if array.ndim != 2:
        raise ValueError("chains must have shape (n_chains, n_draws)")
    if array.shape[1] < _MIN_DRAWS:
        raise ValueError(f"each chain needs at least {_MIN_DRAWS} draws")
    if not np.all(np.isfinite(array)):
        raise ValueError("chains must be finite")
    return array


__all__ = ["autocorrelation", "convergence_table", "effective_sample_size", "split_rhat"]
