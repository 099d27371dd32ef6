"""Prior programs and posterior candidates."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from math import lgamma, log, log1p, pi
from typing import Any, Protocol, runtime_checkable

import numpy as np
from scipy.stats import truncnorm

from ibl_lnr.core.config import coerce_non_empty_str, require_mapping, validate_allowed_keys


@runtime_checkable
class PriorProgram(Protocol):
    """Protocol for parameter prior evaluators."""

    def log_prior(self, params: Mapping[str, float]) -> float:
        """Return total log-prior density for one parameter mapping."""


@dataclass(frozen=True, slots=True)
class PosteriorCandidate:
    """One evaluated parameter state.

    Parameters
    ----------
    params : dict[str, float]
        Evaluated parameter set.
    log_likelihood : float
        Log-likelihood term for ``params``.
    log_prior : float
        Log-prior term for ``params``.
    log_posterior : float
        Unnormalized ``log_likelihood + log_prior``.
    """

    params: dict[str, float]
    log_likelihood: float
    log_prior: float
    log_posterior: float


@dataclass(frozen=True, slots=True)
class IndependentPriorProgram:
    """Independent per-parameter prior program.

    Parameters
    ----------
    log_pdf_by_param : Mapping[str, Callable[[float], float]]
        Mapping from parameter name to scalar log-density callable.
    require_all : bool, optional
        If ``True``, every parameter in evaluated ``params`` must have a prior.

    Notes
    -----
    ``log p(theta) = sum_i log p_i(theta_i)``.
    """

    log_pdf_by_param: Mapping[str, Callable[[float], float]]
    require_all: bool = True

    def log_prior(self, params: Mapping[str, float]) -> float:
        """Return the summed log-prior, or ``-inf`` outside any support.

        Raises
        ------
        ValueError
            If ``require_all`` is ``True`` and any parameter lacks a prior.
        """

        if self.require_all:
            missing = sorted(set(params) - set(self.log_pdf_by_param))
            if missing:
                raise ValueError(f"missing priors for parameters: {missing}")

        total = 0.0
        for name, value in params.items():
            log_pdf = self.log_pdf_by_param.get(name)
            if log_pdf is None:
                continue
            logp = float(log_pdf(float(value)))
            if not np.isfinite(logp):
                return float(-np.inf)
            total += logp
        return float(total)


def normal_log_prior(*, mean: float, std: float) -> Callable[[float], float]:
    """Build a Normal prior log-density function."""

    sigma = float(std)
    if sigma <= 0.0:
        raise ValueError("std must be > 0")
    mu = float(mean)
    log_norm = -0.5 * log(2.0 * pi * sigma * sigma)

    def log_pdf(value: float) -> float:
        z = (float(value) - mu) / sigma
        return float(log_norm - 0.5 * z * z)

    return log_pdf


def uniform_log_prior(
    *,
    lower: float | None = None,
    upper: float | None = None,
) -> Callable[[float], float]:
    """Build a uniform prior log-density function.

    Parameters
    ----------
    lower : float | None, optional
        Lower support bound.
    upper : float | None, optional
        Upper support bound.

    Returns
    -------
    Callable[[float], float]
        Log-density returning ``-inf`` outside support. With an open side the
        density is improper and evaluates to ``0``.
    """

    lo = float(lower) if lower is not None else None
    hi = float(upper) if upper is not None else None
    if lo is not None and hi is not None and lo >= hi:
        raise ValueError("uniform prior requires lower < upper when both are provided")

    log_density = -log(hi - lo) if lo is not None and hi is not None else 0.0

    def log_pdf(value: float) -> float:
        v = float(value)
        if lo is not None and v < lo:
            return float(-np.inf)
        if hi is not None and v > hi:
            return float(-np.inf)
        return float(log_density)

    return log_pdf


def beta_log_prior(*, alpha: float, beta: float) -> Callable[[float], float]:
    """Build a Beta prior log-density function on ``(0, 1)``.

    ``Beta(10, 10)`` is the usual prior for the decay ``d``.
    """

    a = float(alpha)
    b = float(beta)
    if a <= 0.0 or b <= 0.0:
        raise ValueError("alpha and beta must be > 0")

    log_norm = lgamma(a + b) - lgamma(a) - lgamma(b)

    def log_pdf(value: float) -> float:
        x = float(value)
        if x <= 0.0 or x >= 1.0:
            return float(-np.inf)
        return float(log_norm + (a - 1.0) * log(x) + (b - 1.0) * log1p(-x))

    return log_pdf


def truncated_normal_log_prior(
    *,
    mean: float,
    std: float,
    lower: float | None = None,
    upper: float | None = None,
) -> Callable[[float], float]:
    """Build a truncated Normal prior log-density function.

    Parameters
    ----------
    mean, std : float
        Location and positive scale of the untruncated Normal.
    lower, upper : float | None, optional
        Truncation bounds; ``None`` leaves that side open. ``lower=0``
        gives the positive-only prior used for noise parameters.

    Returns
    -------
    Callable[[float], float]
        Log-density renormalized over ``[lower, upper]``.
    """

    sigma = float(std)
    if sigma <= 0.0:
        raise ValueError("std must be > 0")
    mu = float(mean)
    lo = float(lower) if lower is not None else -np.inf
    hi = float(upper) if upper is not None else np.inf
    if lo >= hi:
        raise ValueError("truncated normal prior requires lower < upper")

    distribution = truncnorm(a=(lo - mu) / sigma, b=(hi - mu) / sigma, loc=mu, scale=sigma)

    def log_pdf(value: float) -> float:
        return float(distribution.logpdf(float(value)))

    return log_pdf


def half_cauchy_log_prior(*, scale: float) -> Callable[[float], float]:
    """Build a half-Cauchy prior log-density function on ``[0, inf)``."""

    gamma = float(scale)
    if gamma <= 0.0:
        raise ValueError("scale must be > 0")
    log_norm = log(2.0 / (pi * gamma))

    def log_pdf(value: float) -> float:
        x = float(value)
        if x < 0.0:
            return float(-np.inf)
        return float(log_norm - log1p((x / gamma) ** 2))

    return log_pdf


def log_normal_log_prior(*, mean_log: float, std_log: float) -> Callable[[float], float]:
    """Build a log-normal prior log-density function on positive reals."""

    sigma = float(std_log)
    if sigma <= 0.0:
        raise ValueError("std_log must be > 0")
    mu = float(mean_log)
    log_norm = -0.5 * log(2.0 * pi * sigma * sigma)

    def log_pdf(value: float) -> float:
        x = float(value)
        if x <= 0.0:
            return float(-np.inf)
        z = (log(x) - mu) / sigma
        return float(log_norm - log(x) - 0.5 * z * z)

    return log_pdf


_PRIOR_KEYS: dict[str, tuple[str, ...]] = {
    "normal": ("mean", "std"),
    "uniform": ("lower", "upper"),
    "beta": ("alpha", "beta"),
    "truncated_normal": ("mean", "std", "lower", "upper"),
    "half_cauchy": ("scale",),
    "log_normal": ("mean_log", "std_log"),
}


def prior_from_config(prior_cfg: Mapping[str, Any]) -> IndependentPriorProgram:
    """Parse a prior mapping into an :class:`IndependentPriorProgram`.

    Accepted shapes are ``{"parameters": {name: spec}, "require_all": bool}``
    or a flat ``{name: spec}`` mapping. Each ``spec`` names a
    ``distribution`` (one of ``normal``, ``uniform``, ``beta``,
    ``truncated_normal``, ``half_cauchy``, ``log_normal``) plus its
    arguments.

    Examples
    --------
    >>> program = prior_from_config({
    ...     "decay": {"distribution": "beta", "alpha": 10, "beta": 10},
    ...     "decision_noise": {"distribution": "truncated_normal", "mean": 0.2, "std": 0.2, "lower": 0},
    ... })
    """

    prior = require_mapping(prior_cfg, field_name="priors")
    if "parameters" in prior:
        validate_allowed_keys(prior, field_name="priors", allowed_keys=("parameters", "require_all"))
        parameters = require_mapping(prior["parameters"], field_name="priors.parameters")
    else:
        parameters = {key: value for key, value in prior.items() if key != "require_all"}

    if not parameters:
        raise ValueError("priors must include at least one parameter prior")

    log_pdf_by_param = {
        str(name): _prior_log_pdf_from_config(raw, field_name=f"priors.{name}")
        for name, raw in parameters.items()
    }
    return IndependentPriorProgram(
        log_pdf_by_param=log_pdf_by_param,
        require_all=bool(prior.get("require_all", True)),
    )


def _prior_log_pdf_from_config(raw: Any, *, field_name: str) -> Callable[[float], float]:
    spec = require_mapping(raw, field_name=field_name)
    distribution = coerce_non_empty_str(
        spec.get("distribution"),
        field_name=f"{field_name}.distribution",
    )
    if distribution == "lognormal":
        distribution = "log_normal"
    if distribution not in _PRIOR_KEYS:
        raise ValueError(
            f"unsupported prior distribution {distribution!r}; expected one of {sorted(_PRIOR_KEYS)}"
        )
    validate_allowed_keys(
        spec,
        field_name=field_name,
        allowed_keys=("distribution", *_PRIOR_KEYS[distribution]),
    )
    kwargs = {key: float(spec[key]) for key in _PRIOR_KEYS[distribution] if spec.get(key) is not None}

    try:
        if distribution == "normal":
            return normal_log_prior(**kwargs)
        if distribution == "uniform":
            return uniform_log_prior(**kwargs)
        if distribution == "beta":
            return beta_log_prior(**kwargs)
        if distribution == "truncated_normal":
            return truncated_normal_log_prior(**kwargs)
        if distribution == "half_cauchy":
            return half_cauchy_log_prior(**kwargs)
        return log_normal_log_prior(**kwargs)
    except TypeError as exc:
        raise ValueError(f"{field_name} is missing arguments for {distribution!r} prior") from exc


__all__ = [
    "IndependentPriorProgram",
    "PosteriorCandidate",
    "PriorProgram",
    "beta_log_prior",
    "half_cauchy_log_prior",
    "log_normal_log_prior",
    "normal_log_prior",
    "prior_from_config",
    "truncated_normal_log_prior",
    "uniform_log_prior",
]
