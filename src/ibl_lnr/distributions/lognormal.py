"""Lognormal density, distribution, and survivor functions.

All functions broadcast over numpy arrays and return a Python ``float`` for
scalar inputs. Finishing times ``t <= 0`` lie outside the support: densities
are zero there, the CDF is zero, and the survivor function is one.
"""

from __future__ import annotations

from math import log, pi, sqrt

import numpy as np
from scipy.special import erfc, log_ndtr

_LOG_SQRT_2PI = 0.5 * log(2.0 * pi)
_SQRT2 = sqrt(2.0)


def lognormal_logpdf(t, mu, sigma: float):
    """Return the lognormal log-density ``log g(t | mu, sigma)``.

    Parameters
    ----------
    t : float | array-like
        Finishing times.
    mu : float | array-like
        Location parameter in log space.
    sigma : float
        Positive scale parameter in log space.

    Returns
    -------
    float | numpy.ndarray
        Log-density, ``-inf`` where ``t <= 0``.
    """

    scale = _validate_sigma(sigma)
    t_arr, z, log_t = _standardize(t, mu, scale)
    values = -log_t - log(scale) - _LOG_SQRT_2PI - 0.5 * z * z
    return _as_output(np.where(t_arr > 0.0, values, -np.inf))


def lognormal_pdf(t, mu, sigma: float):
    """Return the lognormal density ``g(t | mu, sigma)``."""

    return _as_output(np.exp(np.asarray(lognormal_logpdf(t, mu, sigma), dtype=float)))


def lognormal_cdf(t, mu, sigma: float):
    """Return ``G(t | mu, sigma) = 1/2 + 1/2 erf((log t - mu) / (sqrt(2) sigma))``."""

    scale = _validate_sigma(sigma)
    t_arr, z, _ = _standardize(t, mu, scale)
    # 0.5 * erfc(-x) == 0.5 + 0.5 * erf(x), without cancellation in the lower tail.
    values = 0.5 * erfc(-z / _SQRT2)
    return _as_output(np.where(t_arr > 0.0, values, 0.0))


def lognormal_survivor(t, mu, sigma: float):
    """Return ``1 - G(t | mu, sigma)``, the probability of finishing after ``t``."""

    scale = _validate_sigma(sigma)
    t_arr, z, _ = _standardize(t, mu, scale)
    values = 0.5 * erfc(z / _SQRT2)
    return _as_output(np.where(t_arr > 0.0, values, 1.0))


def lognormal_log_survivor(t, mu, sigma: float):
    """Return ``log(1 - G(t | mu, sigma))``, finite deep into the upper tail."""

    scale = _validate_sigma(sigma)
    t_arr, z, _ = _standardize(t, mu, scale)
    values = log_ndtr(-z)
    return _as_output(np.where(t_arr > 0.0, values, 0.0))


def _validate_sigma(sigma: float) -> float:
    value = float(sigma)
    if not np.isfinite(value) or value <= 0.0:
        raise ValueError("sigma must be finite and > 0")
    return value


def _standardize(t, mu, sigma: float) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(t, z, log t)`` with out-of-support entries given a dummy log."""

    t_arr = np.asarray(t, dtype=float)
    mu_arr = np.asarray(mu, dtype=float)
    log_t = np.log(np.where(t_arr > 0.0, t_arr, 1.0))
    z = (log_t - mu_arr) / sigma
    t_arr, z, log_t = np.broadcast_arrays(t_arr, z, log_t)
    return t_arr, z, log_t


def _as_output(values: np.ndarray):
    array = np.asarray(values, dtype=float)
    if array.ndim == 0:
        return float(array)
    return array


__all__ = [
    "lognormal_cdf",
    "lognormal_log_survivor",
    "lognormal_logpdf",
    "lognormal_pdf",
    "lognormal_survivor",
]
