"""Lognormal race distribution over (winner, response time) pairs."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy.integrate import quad

from .lognormal import lognormal_log_survivor, lognormal_logpdf


@dataclass(frozen=True, slots=True)
class LognormalRace:
    """Independent race of lognormal accumulators.

    Each accumulator ``k`` finishes at ``T_k ~ Lognormal(mu[k], sigma)``. The
    earliest finisher wins and the observed response time is
    ``min_k T_k + non_decision_time``.

    Model Contract
    --------------
    Joint density
        For winner ``r`` and decision time ``t = rt - non_decision_time > 0``:
        ``g(t | mu[r], sigma) * prod_{k != r} [1 - G(t | mu[k], sigma)]``,
        where ``g``/``G`` are the lognormal PDF/CDF. The density is zero for
        ``t <= 0``.

    Parameters
    ----------
    mu : tuple[float, ...]
        Log-space locations, one per accumulator. For memory retrieval these
        are negated mean activations.
    sigma : float
        Shared positive log-space scale.
    non_decision_time : float, optional
        Perceptual-motor time added to every finishing time.

    Raises
    ------
    ValueError
        If no accumulator is given, a location is non-finite, ``sigma`` is not
        positive, or ``non_decision_time`` is negative.
    """

    mu: tuple[float, ...]
    sigma: float
    non_decision_time: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "mu", tuple(float(value) for value in self.mu))
        if len(self.mu) == 0:
            raise ValueError("mu must contain at least one accumulator")
        if not all(np.isfinite(value) for value in self.mu):
            raise ValueError("mu values must be finite")
        if not np.isfinite(self.sigma) or self.sigma <= 0.0:
            raise ValueError("sigma must be finite and > 0")
        if not np.isfinite(self.non_decision_time) or self.non_decision_time < 0.0:
            raise ValueError("non_decision_time must be finite and >= 0")

    @property
    def n_accumulators(self) -> int:
        """Return number of racing accumulators."""

        return len(self.mu)

    def logpdf(self, choice: int, rt: float) -> float:
        """Return the joint log-density of ``choice`` winning at ``rt``."""

        index = self._check_choice(choice)
        return self._log_density_at(index, float(rt) - self.non_decision_time)

    def _log_density_at(self, index: int, t: float) -> float:
        """Return the joint log-density at decision time ``t``."""

        if t <= 0.0:
            return float(-np.inf)

        mu = np.asarray(self.mu, dtype=float)
        winner = float(lognormal_logpdf(t, mu[index], self.sigma))
        losers = np.delete(mu, index)
        survivors = np.asarray(lognormal_log_survivor(t, losers, self.sigma), dtype=float)
        return float(winner + np.sum(survivors))

    def pdf(self, choice: int, rt: float) -> float:
        """Return the joint density of ``choice`` winning at ``rt``."""

        return float(np.exp(self.logpdf(choice, rt)))

    def loglikelihood(self, choices: Sequence[int], rts: Sequence[float]) -> float:
        """Return the summed log-density of independent ``(choice, rt)`` pairs."""

        if len(choices) != len(rts):
            raise ValueError("choices and rts must have equal length")
        return float(sum(self.logpdf(int(c), float(rt)) for c, rt in zip(choices, rts)))

    def choice_probability(self, choice: int) -> float:
        """Return the marginal probability that ``choice`` wins the race."""

        index = self._check_choice(choice)
        if self.n_accumulators == 1:
            return 1.0

        # Integrate in log time, where the winner's density is a normal curve
        # centred on mu[index]; mass beyond 12 sigma is negligible.
        def integrand(log_t: float) -> float:
            t = float(np.exp(log_t))
            return float(np.exp(self._log_density_at(index, t))) * t

        center = self.mu[index]
        half_width = 12.0 * self.sigma
        value, _ = quad(integrand, center - half_width, center + half_width, limit=200)
        return float(min(max(value, 0.0), 1.0))

    def mean_finishing_times(self) -> np.ndarray:
        """Return ``E[T_k] = exp(mu_k + sigma^2 / 2)`` for each accumulator."""

        return np.exp(np.asarray(self.mu, dtype=float) + 0.5 * self.sigma**2)

    def sample(
        self,
        rng: np.random.Generator,
        size: int = 1,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Sample winners and response times.

        Parameters
        ----------
        rng : numpy.random.Generator
            Random generator.
        size : int, optional
            Number of independent races.

        Returns
        -------
        tuple[numpy.ndarray, numpy.ndarray]
            Zero-based winner indices and response times, each of length
            ``size``.
        """

        if size <= 0:
            raise ValueError("size must be > 0")
        finishing = rng.lognormal(
            mean=np.asarray(self.mu, dtype=float),
            sigma=self.sigma,
            size=(int(size), self.n_accumulators),
        )
        choices = np.argmin(finishing, axis=1)
        rts = finishing[np.arange(int(size)), choices] + self.non_decision_time
        return choices.astype(int), rts.astype(float)

    def _check_choice(self, choice: int) -> int:
        index = int(choice)
        if index < 0 or index >= self.n_accumulators:
            raise ValueError(
                f"choice must be in [0, {self.n_accumulators - 1}], got {choice!r}"
            )
        return index


__all__ = ["LognormalRace"]
