"""Config-driven posterior fitting.

A fit config is a JSON/YAML mapping::

    model: ibl                  # ibl | lognormal_race | retrieval_race
    fixed: {noise_scale: 0.2}
    priors:
      decay: {distribution: beta, alpha: 10, beta: 10}
      decision_noise: {distribution: truncated_normal, mean: 0.2, std: 0.2, lower: 0}
    sampler:
      initial_params: {decay: 0.5, decision_noise: 0.2}
      n_samples: 2000
      n_warmup: 1000
      n_chains: 4
      proposal_scales: {decay: 0.05, decision_noise: 0.05}
      bounds: {decay: [0, 1], decision_noise: [0, null]}
      random_seed: 7

``lognormal_race`` additionally requires ``n_accumulators``. ``ibl`` may
list ``options``: one gamble problem per block, used for posterior
predictive checks.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from ibl_lnr.core.config import (
    coerce_bounds_mapping,
    coerce_float_mapping,
    coerce_non_empty_str,
    require_mapping,
    require_sequence,
    validate_allowed_keys,
    validate_required_keys,
)
from ibl_lnr.problems.gambles import GambleProblem, gamble_problem_from_config

from .bayes import IndependentPriorProgram, prior_from_config
from .likelihood import (
    InstanceBasedLearningLikelihood,
    LikelihoodProgram,
    LognormalRaceLikelihood,
    RetrievalRaceLikelihood,
)
from .mcmc import MultiChainPosteriorResult, sample_posterior_chains

ModelKind = Literal["ibl", "lognormal_race", "retrieval_race"]
MODEL_KINDS: tuple[str, ...] = ("ibl", "lognormal_race", "retrieval_race")


@dataclass(frozen=True, slots=True)
class SamplerSpec:
    """Parsed sampler settings; see :func:`sample_posterior_chains`."""

    initial_params: dict[str, float]
    n_samples: int = 2000
    n_warmup: int = 1000
    thin: int = 1
    n_chains: int = 4
    proposal_scales: dict[str, float] | None = None
    bounds: dict[str, tuple[float | None, float | None]] | None = None
    random_seed: int | None = None

    def __post_init__(self) -> None:
        if not self.initial_params:
            raise ValueError("sampler.initial_params must include at least one parameter")
        if self.n_samples <= 0:
            raise ValueError("sampler.n_samples must be > 0")
        if self.n_warmup < 0:
            raise ValueError("sampler.n_warmup must be >= 0")
        if self.thin <= 0:
            raise ValueError("sampler.thin must be > 0")
        if self.n_chains <= 0:
            raise ValueError("sampler.n_chains must be > 0")


@dataclass(frozen=True, slots=True)
class FitConfig:
    """Parsed fit configuration.

    Parameters
    ----------
    model : {"ibl", "lognormal_race", "retrieval_race"}
        Likelihood family.
    priors : IndependentPriorProgram
        Priors over the free parameters.
    sampler : SamplerSpec
        Sampler settings.
    fixed : dict[str, float]
        Parameters held constant.
    n_accumulators : int | None
        Accumulator count for ``lognormal_race``.
    options : tuple[GambleProblem, ...]
        Gamble problems per block for ``ibl`` predictive checks.
    """

    model: ModelKind
    priors: IndependentPriorProgram
    sampler: SamplerSpec
    fixed: dict[str, float] = field(default_factory=dict)
    n_accumulators: int | None = None
    options: tuple[GambleProblem, ...] = ()

    def __post_init__(self) -> None:
        if self.model not in MODEL_KINDS:
            raise ValueError(f"model must be one of {MODEL_KINDS}")
        if self.model == "lognormal_race":
            if self.n_accumulators is None or self.n_accumulators <= 0:
                raise ValueError("lognormal_race requires n_accumulators > 0")
        elif self.n_accumulators is not None:
            raise ValueError("n_accumulators is only valid for lognormal_race")
        if self.options and self.model != "ibl":
            raise ValueError("options is only valid for ibl")
        overlap = sorted(set(self.fixed) & set(self.sampler.initial_params))
        if overlap:
            raise ValueError(f"parameters cannot be both fixed and sampled: {overlap}")

    @property
    def free_parameters(self) -> tuple[str, ...]:
        """Return sampled parameter names."""

        return tuple(sorted(self.sampler.initial_params))


def fit_config_from_mapping(raw: Mapping[str, Any]) -> FitConfig:
    """Parse and validate a fit config mapping.

    Raises
    ------
    ValueError
        If keys are unknown or missing, or values are invalid.
    """

    cfg = require_mapping(raw, field_name="config")
    validate_allowed_keys(
        cfg,
        field_name="config",
        allowed_keys=("model", "options", "n_accumulators", "fixed", "priors", "sampler"),
    )
    validate_required_keys(cfg, field_name="config", required_keys=("model", "priors", "sampler"))

    model = coerce_non_empty_str(cfg["model"], field_name="config.model")
    if model not in MODEL_KINDS:
        raise ValueError(f"config.model must be one of {MODEL_KINDS}, got {model!r}")

    options: tuple[GambleProblem, ...] = ()
    if cfg.get("options") is not None:
        options = tuple(
            gamble_problem_from_config(require_mapping(item, field_name=f"config.options[{index}]"))
            for index, item in enumerate(require_sequence(cfg["options"], field_name="config.options"))
        )

    n_accumulators = int(cfg["n_accumulators"]) if cfg.get("n_accumulators") is not None else None
    fixed = coerce_float_mapping(cfg.get("fixed", {}), field_name="config.fixed")

    return FitConfig(
        model=model,  # type: ignore[arg-type]
        priors=prior_from_config(cfg["priors"]),
        sampler=sampler_spec_from_config(cfg["sampler"]),
        fixed=fixed,
        n_accumulators=n_accumulators,
        options=options,
    )


def sampler_spec_from_config(raw: Any) -> SamplerSpec:
    """Parse the ``sampler`` section."""

    sampler = require_mapping(raw, field_name="sampler")
    validate_allowed_keys(
        sampler,
        field_name="sampler",
        allowed_keys=(
            "initial_params",
            "n_samples",
            "n_warmup",
            "thin",
            "n_chains",
            "proposal_scales",
            "bounds",
            "random_seed",
        ),
    )
    validate_required_keys(sampler, field_name="sampler", required_keys=("initial_params",))

    return SamplerSpec(
        initial_params=coerce_float_mapping(sampler["initial_params"], field_name="sampler.initial_params"),
        n_samples=int(sampler.get("n_samples", 2000)),
        n_warmup=int(sampler.get("n_warmup", 1000)),
        thin=int(sampler.get("thin", 1)),
        n_chains=int(sampler.get("n_chains", 4)),
        proposal_scales=(
            coerce_float_mapping(sampler["proposal_scales"], field_name="sampler.proposal_scales")
            if sampler.get("proposal_scales") is not None
            else None
        ),
        bounds=(
            coerce_bounds_mapping(sampler["bounds"], field_name="sampler.bounds")
            if sampler.get("bounds") is not None
            else None
        ),
        random_seed=int(sampler["random_seed"]) if sampler.get("random_seed") is not None else None,
    )


def likelihood_program_from_config(config: FitConfig) -> LikelihoodProgram:
    """Build the likelihood program named by ``config.model``."""

    if config.model == "ibl":
        return InstanceBasedLearningLikelihood(fixed=config.fixed)
    if config.model == "lognormal_race":
        if config.n_accumulators is None:
            raise ValueError("config.n_accumulators is required for lognormal_race")
        return LognormalRaceLikelihood(config.n_accumulators, fixed=config.fixed)
    return RetrievalRaceLikelihood(fixed=config.fixed)


def fit_posterior_from_config(data: Any, config: FitConfig) -> MultiChainPosteriorResult:
    """Sample the posterior of ``data`` as described by ``config``."""

    sampler = config.sampler
    return sample_posterior_chains(
        data,
        likelihood_program=likelihood_program_from_config(config),
        prior_program=config.priors,
        initial_params=sampler.initial_params,
        n_chains=sampler.n_chains,
        n_samples=sampler.n_samples,
        n_warmup=sampler.n_warmup,
        thin=sampler.thin,
        proposal_scales=sampler.proposal_scales,
        bounds=sampler.bounds,
        random_seed=sampler.random_seed,
    )


__all__ = [
    "FitConfig",
    "MODEL_KINDS",
    "SamplerSpec",
    "fit_config_from_mapping",
    "fit_posterior_from_config",
    "likelihood_program_from_config",
    "sampler_spec_from_config",
]
