"""Likelihoods, priors, posterior sampling and diagnostics."""

from .bayes import (
    IndependentPriorProgram,
    PosteriorCandidate,
    PriorProgram,
    beta_log_prior,
    half_cauchy_log_prior,
    log_normal_log_prior,
    normal_log_prior,
    prior_from_config,
    truncated_normal_log_prior,
    uniform_log_prior,
)
from .config import (
    MODEL_KINDS,
    FitConfig,
    SamplerSpec,
    fit_config_from_mapping,
    fit_posterior_from_config,
    likelihood_program_from_config,
    sampler_spec_from_config,
)
from .diagnostics import autocorrelation, convergence_table, effective_sample_size, split_rhat
from .likelihood import (
    InstanceBasedLearningLikelihood,
    LikelihoodProgram,
    LikelihoodResult,
    LognormalRaceLikelihood,
    RetrievalRaceLikelihood,
    replay_choice_block,
    sum_log_likelihood,
)
from .mcmc import (
    MCMCDiagnostics,
    MCMCDraw,
    MCMCPosteriorResult,
    MultiChainPosteriorResult,
    RandomWalkMetropolisEstimator,
    posterior_samples_from_draws,
    sample_posterior_chains,
)
from .posterior import (
    PosteriorParameterSummary,
    PosteriorSamples,
    PosteriorSummary,
    posterior_summary_records,
    summarize_posterior,
    write_posterior_summary_csv,
)

__all__ = [
    "FitConfig",
    "IndependentPriorProgram",
    "InstanceBasedLearningLikelihood",
    "LikelihoodProgram",
    "LikelihoodResult",
    "LognormalRaceLikelihood",
    "MCMCDiagnostics",
    "MCMCDraw",
    "MCMCPosteriorResult",
    "MODEL_KINDS",
    "MultiChainPosteriorResult",
    "PosteriorCandidate",
    "PosteriorParameterSummary",
    "PosteriorSamples",
    "PosteriorSummary",
    "PriorProgram",
    "RandomWalkMetropolisEstimator",
    "RetrievalRaceLikelihood",
    "SamplerSpec",
    "autocorrelation",
    "beta_log_prior",
    "convergence_table",
    "effective_sample_size",
    "fit_config_from_mapping",
    "fit_posterior_from_config",
    "half_cauchy_log_prior",
    "likelihood_program_from_config",
    "log_normal_log_prior",
    "normal_log_prior",
    "posterior_samples_from_draws",
    "posterior_summary_records",
    "prior_from_config",
    "replay_choice_block",
    "sample_posterior_chains",
    "sampler_spec_from_config",
    "split_rhat",
    "sum_log_likelihood",
    "summarize_posterior",
    "truncated_normal_log_prior",
    "uniform_log_prior",
    "write_posterior_summary_csv",
]
