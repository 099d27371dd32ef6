"""Random-walk Metropolis posterior sampling.

The sampler works on any :class:`LikelihoodProgram` and
:class:`PriorProgram`, so the same code fits IBL choice data and Lognormal
Race response times.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from .bayes import PosteriorCandidate, PriorProgram
from .likelihood import LikelihoodProgram
from .posterior import PosteriorSamples

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MCMCDraw:
    """One retained MCMC draw.

    Parameters
    ----------
    candidate : PosteriorCandidate
        Chain state at this draw.
    accepted : bool
        Whether the proposal at this iteration was accepted.
    iteration : int
        Zero-based iteration index including warmup.
    """

    candidate: PosteriorCandidate
    accepted: bool
    iteration: int


@dataclass(frozen=True, slots=True)
class MCMCDiagnostics:
    """Run statistics for one chain.

    Parameters
    ----------
    method : str
        Sampler identifier.
    n_iterations : int
        Total iterations including warmup.
    n_warmup : int
        Discarded warmup iterations.
    n_kept_draws : int
        Retained draws after thinning.
    thin : int
        Thinning interval.
    n_accepted : int
        Accepted proposals over all iterations.
    acceptance_rate : float
        ``n_accepted / n_iterations``.
    random_seed : int | None
        Seed used for this chain.
    """

    method: str
    n_iterations: int
    n_warmup: int
    n_kept_draws: int
    thin: int
    n_accepted: int
    acceptance_rate: float
    random_seed: int | None


@dataclass(frozen=True, slots=True)
class MCMCPosteriorResult:
    """Single-chain sampling result.

    Parameters
    ----------
    draws : tuple[MCMCDraw, ...]
        Retained post-warmup draws.
    posterior_samples : PosteriorSamples
        Parameter-wise draws derived from ``draws``.
    diagnostics : MCMCDiagnostics
        Run statistics.
    pointwise_log_likelihood_draws : numpy.ndarray
        Shape ``(n_draws, n_observations)``, aligned with ``draws``.
    """

    draws: tuple[MCMCDraw, ...]
    posterior_samples: PosteriorSamples
    diagnostics: MCMCDiagnostics
    pointwise_log_likelihood_draws: np.ndarray

    @property
    def map_candidate(self) -> PosteriorCandidate:
        """Return the highest-posterior retained draw."""

        return max(self.draws, key=lambda draw: draw.candidate.log_posterior).candidate


@dataclass(frozen=True, slots=True)
class MultiChainPosteriorResult:
    """Independent chains run on the same data.

    Parameters
    ----------
    chains : tuple[MCMCPosteriorResult, ...]
        Per-chain results in chain order.
    """

    chains: tuple[MCMCPosteriorResult, ...]

    def __post_init__(self) -> None:
        if not self.chains:
            raise ValueError("chains must not be empty")

    @property
    def n_chains(self) -> int:
        """Return number of chains."""

        return len(self.chains)

    @property
    def posterior_samples(self) -> PosteriorSamples:
        """Return draws pooled across chains."""

        return PosteriorSamples.concatenate([chain.posterior_samples for chain in self.chains])

    @property
    def parameter_names(self) -> tuple[str, ...]:
        """Return sampled parameter names."""

        return self.chains[0].posterior_samples.parameter_names

    def chain_draws(self, parameter_name: str) -> np.ndarray:
        """Return draws of one parameter with shape ``(n_chains, n_draws)``."""

        return np.vstack([chain.posterior_samples.draws(parameter_name) for chain in self.chains])

    @property
    def pointwise_log_likelihood_draws(self) -> np.ndarray:
        """Return pooled pointwise log-likelihood draws."""

        return np.vstack([chain.pointwise_log_likelihood_draws for chain in self.chains])

    @property
    def acceptance_rates(self) -> tuple[float, ...]:
        """Return per-chain acceptance rates."""

        return tuple(chain.diagnostics.acceptance_rate for chain in self.chains)

    @property
    def map_candidate(self) -> PosteriorCandidate:
        """Return the highest-posterior retained draw over all chains."""

        return max(
            (chain.map_candidate for chain in self.chains),
            key=lambda candidate: candidate.log_posterior,
        )


@dataclass(frozen=True, slots=True)
class _EvaluatedState:
    """Evaluated parameter state with pointwise likelihood values."""

    candidate: PosteriorCandidate
    pointwise_log_likelihood: tuple[float, ...]


def posterior_samples_from_draws(draws: Sequence[MCMCDraw]) -> PosteriorSamples:
    """Build :class:`PosteriorSamples` from retained draws.

    Raises
    ------
    ValueError
        If ``draws`` is empty or parameter keys differ between draws.
    """

    if not draws:
        raise ValueError("draws must not be empty")

    reference_names = tuple(sorted(draws[0].candidate.params))
    if not reference_names:
        raise ValueError("draw candidates must contain at least one parameter")

    parameter_draws: dict[str, list[float]] = {name: [] for name in reference_names}
    for draw in draws:
        if tuple(sorted(draw.candidate.params)) != reference_names:
            raise ValueError("all draw candidates must share identical parameter keys")
        for name in reference_names:
            parameter_draws[name].append(float(draw.candidate.params[name]))

    return PosteriorSamples(
        parameter_draws={name: np.asarray(values, dtype=float) for name, values in parameter_draws.items()}
    )


class RandomWalkMetropolisEstimator:
    """Random-walk Metropolis posterior sampler.

    Parameters
    ----------
    likelihood_program : LikelihoodProgram
        Evaluator called as ``evaluate(data, params)``.
    prior_program : PriorProgram
        Prior evaluator.
    default_proposal_scale : float, optional
        Gaussian proposal standard deviation for parameters without an
        explicit scale.

    Notes
    -----
    Proposals are made in the natural parameter space. Hard bounds and
    zero-prior proposals are rejected without evaluating the likelihood.
    """

    def __init__(
        self,
        *,
        likelihood_program: LikelihoodProgram,
        prior_program: PriorProgram,
        default_proposal_scale: float = 0.1,
    ) -> None:
        if default_proposal_scale <= 0.0:
            raise ValueError("default_proposal_scale must be > 0")

        self._likelihood_program = likelihood_program
        self._prior_program = prior_program
        self._default_proposal_scale = float(default_proposal_scale)

    def fit(
        self,
        data: Any,
        *,
        initial_params: Mapping[str, float],
        n_samples: int,
        n_warmup: int = 1000,
        thin: int = 1,
        proposal_scales: Mapping[str, float] | None = None,
        bounds: Mapping[str, tuple[float | None, float | None]] | None = None,
        random_seed: int | None = None,
    ) -> MCMCPosteriorResult:
        """Sample one chain.

        Parameters
        ----------
        data : Any
            Dataset accepted by the likelihood program.
        initial_params : Mapping[str, float]
            Starting values of the free parameters.
        n_samples : int
            Retained draws after warmup and thinning.
        n_warmup : int, optional
            Discarded warmup iterations.
        thin : int, optional
            Keep every ``thin``-th post-warmup iteration.
        proposal_scales : Mapping[str, float] | None, optional
            Per-parameter Gaussian proposal scales.
        bounds : Mapping[str, tuple[float | None, float | None]] | None, optional
            Hard bounds by parameter name.
        random_seed : int | None, optional
            Seed for the chain's generator.

        Returns
        -------
        MCMCPosteriorResult
            Retained draws and run statistics.

        Raises
        ------
        ValueError
            If settings are invalid or the initial state has non-finite
            posterior density.
        """

        names = tuple(sorted(initial_params))
        if not names:
            raise ValueError("initial_params must include at least one parameter")
        if n_samples <= 0:
            raise ValueError("n_samples must be > 0")
        if n_warmup < 0:
            raise ValueError("n_warmup must be >= 0")
        if thin <= 0:
            raise ValueError("thin must be > 0")

        rng = np.random.default_rng(random_seed)
        scales = _resolve_proposal_scales(
            names=names,
            proposal_scales=proposal_scales,
            default_scale=self._default_proposal_scale,
        )
        normalized_bounds = _normalize_bounds(names, bounds)
        if not _within_bounds(initial_params, normalized_bounds):
            raise ValueError("initial_params violate bounds")

        current = self._evaluate_state(data, dict(initial_params))
        if not np.isfinite(current.candidate.log_posterior):
            raise ValueError("initial_params produce non-finite log posterior")
        n_observations = len(current.pointwise_log_likelihood)

        n_iterations = int(n_warmup + n_samples * thin)
        accepted_total = 0
        retained: list[MCMCDraw] = []
        retained_pointwise: list[np.ndarray] = []

        for iteration in range(n_iterations):
            proposal_params = _propose(
                current.candidate.params,
                names=names,
                scales=scales,
                rng=rng,
            )
            if _within_bounds(proposal_params, normalized_bounds):
                proposal = self._evaluate_state(data, proposal_params, n_observations=n_observations)
            else:
                proposal = _rejected_state(proposal_params, n_observations)

            accepted = _metropolis_accept(
                current_log_posterior=current.candidate.log_posterior,
                proposal_log_posterior=proposal.candidate.log_posterior,
                rng=rng,
            )
            if accepted:
                current = proposal
                accepted_total += 1

            if iteration >= n_warmup and (iteration - n_warmup) % thin == 0:
                retained.append(MCMCDraw(candidate=current.candidate, accepted=accepted, iteration=iteration))
                retained_pointwise.append(np.asarray(current.pointwise_log_likelihood, dtype=float))

        draws = tuple(retained)
        diagnostics = MCMCDiagnostics(
            method="random_walk_metropolis",
            n_iterations=n_iterations,
            n_warmup=n_warmup,
            n_kept_draws=len(draws),
            thin=thin,
            n_accepted=accepted_total,
            acceptance_rate=float(accepted_total / n_iterations),
            random_seed=random_seed,
        )
        return MCMCPosteriorResult(
            draws=draws,
            posterior_samples=posterior_samples_from_draws(draws),
            diagnostics=diagnostics,
            pointwise_log_likelihood_draws=np.vstack(retained_pointwise),
        )

    def _evaluate_state(
        self,
        data: Any,
        params: dict[str, float],
        *,
        n_observations: int | None = None,
    ) -> _EvaluatedState:
        log_prior = float(self._prior_program.log_prior(params))
        if not np.isfinite(log_prior) and n_observations is not None:
            return _rejected_state(params, n_observations)

        result = self._likelihood_program.evaluate(data, params)
        log_likelihood = float(result.total_log_likelihood)
        return _EvaluatedState(
            candidate=PosteriorCandidate(
                params=dict(params),
                log_likelihood=log_likelihood,
                log_prior=log_prior,
                log_posterior=float(log_likelihood + log_prior),
            ),
            pointwise_log_likelihood=tuple(float(value) for value in result.pointwise),
        )


def sample_posterior_chains(
    data: Any,
    *,
    likelihood_program: LikelihoodProgram,
    prior_program: PriorProgram,
    initial_params: Mapping[str, float],
    n_chains: int = 4,
    n_samples: int = 2000,
    n_warmup: int = 1000,
    thin: int = 1,
    proposal_scales: Mapping[str, float] | None = None,
    bounds: Mapping[str, tuple[float | None, float | None]] | None = None,
    random_seed: int | None = None,
) -> MultiChainPosteriorResult:
    """Run ``n_chains`` independent Metropolis chains.

    Chain seeds are spawned from ``random_seed`` with
    :class:`numpy.random.SeedSequence`, so a fixed seed reproduces every
    chain. All chains start at ``initial_params``.

    Returns
    -------
    MultiChainPosteriorResult
        Per-chain results; pooled draws via ``posterior_samples``.
    """

    if n_chains <= 0:
        raise ValueError("n_chains must be > 0")

    estimator = RandomWalkMetropolisEstimator(
        likelihood_program=likelihood_program,
        prior_program=prior_program,
    )
    children = np.random.SeedSequence(random_seed).spawn(n_chains)
    chains: list[MCMCPosteriorResult] = []
    for chain_index, child in enumerate(children):
        chain_seed = int(child.generate_state(1)[0])
        logger.info(
            "chain %d/%d: %d warmup + %d x %d iterations (seed=%d)",
            chain_index + 1,
            n_chains,
            n_warmup,
            n_samples,
            thin,
            chain_seed,
        )
        chain = estimator.fit(
            data,
            initial_params=initial_params,
            n_samples=n_samples,
            n_warmup=n_warmup,
            thin=thin,
            proposal_scales=proposal_scales,
            bounds=bounds,
            random_seed=chain_seed,
        )
        logger.info(
            "chain %d/%d finished: acceptance rate %.3f",
            chain_index + 1,
            n_chains,
            chain.diagnostics.acceptance_rate,
        )
        chains.append(chain)
    return MultiChainPosteriorResult(chains=tuple(chains))


def _rejected_state(params: Mapping[str, float], n_observations: int) -> _EvaluatedState:
    return _EvaluatedState(
        candidate=PosteriorCandidate(
            params=dict(params),
            log_likelihood=float("-inf"),
            log_prior=float("-inf"),
            log_posterior=float("-inf"),
        ),
        pointwise_log_likelihood=tuple(float("-inf") for _ in range(n_observations)),
    )


def _resolve_proposal_scales(
    *,
    names: tuple[str, ...],
    proposal_scales: Mapping[str, float] | None,
    default_scale: float,
) -> np.ndarray:
    provided = dict(proposal_scales) if proposal_scales is not None else {}
    unknown = sorted(set(provided) - set(names))
    if unknown:
        raise ValueError(f"proposal_scales contains unknown parameters: {unknown}")

    scales = np.asarray([float(provided.get(name, default_scale)) for name in names], dtype=float)
    if np.any(scales <= 0.0):
        raise ValueError("all proposal scales must be > 0")
    return scales


def _normalize_bounds(
    names: tuple[str, ...],
    bounds: Mapping[str, tuple[float | None, float | None]] | None,
) -> dict[str, tuple[float | None, float | None]]:
    provided = dict(bounds) if bounds is not None else {}
    unknown = sorted(set(provided) - set(names))
    if unknown:
        raise ValueError(f"bounds contains unknown parameters: {unknown}")

    normalized: dict[str, tuple[float | None, float | None]] = {}
    for name in names:
        lower, upper = provided.get(name, (None, None))
        if lower is not None and upper is not None and float(lower) > float(upper):
            raise ValueError(f"invalid bounds for parameter {name!r}: lower={lower} > upper={upper}")
        normalized[name] = (
            float(lower) if lower is not None else None,
            float(upper) if upper is not None else None,
        )
    return normalized


def _within_bounds(
    params: Mapping[str, float],
    bounds: Mapping[str, tuple[float | None, float | None]],
) -> bool:
    for name, value in params.items():
        lower, upper = bounds[name]
        if lower is not None and float(value) < lower:
            return False
        if upper is not None and float(value) > upper:
            return False
    return True


def _propose(
    current_params: Mapping[str, float],
    *,
    names: tuple[str, ...],
    scales: np.ndarray,
    rng: np.random.Generator,
) -> dict[str, float]:
    current = np.asarray([float(current_params[name]) for name in names], dtype=float)
    proposal = current + rng.normal(loc=0.0, scale=scales, size=len(names))
    return {name: float(value) for name, value in zip(names, proposal, strict=True)}


def _metropolis_accept(
    *,
    current_log_posterior: float,
    proposal_log_posterior: float,
    rng: np.random.Generator,
) -> bool:
    if not np.isfinite(proposal_log_posterior):
        return False
    if proposal_log_posterior >= current_log_posterior:
        return True
    return bool(np.log(rng.uniform(0.0, 1.0)) < proposal_log_posterior - current_log_posterior)


__all__ = [
    "MCMCDiagnostics",
    "MCMCDraw",
    "MCMCPosteriorResult",
    "MultiChainPosteriorResult",
    "RandomWalkMetropolisEstimator",
    "posterior_samples_from_draws",
    "sample_posterior_chains",
]
