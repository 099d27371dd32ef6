"""Tests for lognormal density and distribution primitives."""

from __future__ import annotations

from math import erf, exp, log, pi, sqrt

import numpy as np
import pytest
from scipy.integrate import quad

from ibl_lnr.distributions import (
    lognormal_cdf,
    lognormal_log_survivor,
    lognormal_logpdf,
    lognormal_pdf,
    lognormal_survivor,
)


def test_pdf_matches_closed_form() -> None:
    """Density should equal the textbook lognormal formula."""

    t, mu, sigma = 0.7, -0.3, 0.6
    expected = 1.0 / (t * sigma * sqrt(2.0 * pi)) * exp(-((log(t) - mu) ** 2) / (2.0 * sigma**2))

    assert lognormal_pdf(t, mu, sigma) == pytest.approx(expected)
    assert lognormal_logpdf(t, mu, sigma) == pytest.approx(log(expected))


def test_cdf_matches_erf_form() -> None:
    """CDF should equal ``1/2 + 1/2 erf((ln t - mu) / (sqrt(2) sigma))``."""

    t, mu, sigma = 1.3, 0.1, 0.4
    expected = 0.5 + 0.5 * erf((log(t) - mu) / (sqrt(2.0) * sigma))

    assert lognormal_cdf(t, mu, sigma) == pytest.approx(expected)
    assert lognormal_survivor(t, mu, sigma) == pytest.approx(1.0 - expected)
    assert lognormal_log_survivor(t, mu, sigma) == pytest.approx(log(1.0 - expected))


def test_non_positive_times_have_zero_density() -> None:
    """Times at or below zero carry no probability mass."""

    assert lognormal_pdf(0.0, 0.0, 1.0) == 0.0
    assert lognormal_pdf(-1.0, 0.0, 1.0) == 0.0
    assert lognormal_logpdf(-1.0, 0.0, 1.0) == float("-inf")
    assert lognormal_cdf(0.0, 0.0, 1.0) == 0.0
    assert lognormal_survivor(-2.0, 0.0, 1.0) == 1.0


def test_bounds_and_monotone_cdf_on_grid() -> None:
    """Density is non-negative and CDF is a non-decreasing probability."""

    grid = np.linspace(-0.5, 8.0, 400)
    for mu, sigma in [(-1.0, 0.3), (0.0, 1.0), (1.5, 2.0)]:
        pdf = np.asarray(lognormal_pdf(grid, mu, sigma))
        cdf = np.asarray(lognormal_cdf(grid, mu, sigma))

        assert np.all(pdf >= 0.0)
        assert np.all((cdf >= 0.0) & (cdf <= 1.0))
        assert np.all(np.diff(cdf) >= 0.0)


def test_log_survivor_is_finite_far_in_tail() -> None:
    """Log-survivor should stay finite where ``1 - cdf`` underflows."""

    value = lognormal_log_survivor(1e6, 0.0, 0.2)

    assert np.isfinite(value)
    assert value < -1000.0


def test_pdf_integrates_to_one() -> None:
    """Numerical integral of the density over ``(0, inf)`` should be ~1."""

    area, _ = quad(lambda t: float(lognormal_pdf(t, 0.2, 0.5)), 0.0, np.inf)

    assert area == pytest.approx(1.0, abs=1e-6)


def test_vector_inputs_broadcast() -> None:
    """Vector locations should broadcast against scalar times."""

    values = lognormal_cdf(1.0, np.array([-1.0, 0.0, 1.0]), 1.0)

    assert np.asarray(values).shape == (3,)
    assert float(np.asarray(values)[1]) == pytest.approx(0.5)


@pytest.mark.parametrize("sigma", [0.0, -1.0, float("nan")])
def test_invalid_sigma_raises(sigma: float) -> None:
    """Scale must be finite and positive."""

    with pytest.raises(ValueError, match="sigma"):
        lognormal_pdf(1.0, 0.0, sigma)
