"""Likelihood programs for choice and retrieval-time data.

Every program maps ``(data, params)`` to a :class:`LikelihoodResult`. Parameter
values outside a model's domain score ``-inf`` rather than raising, so a
sampler can propose them and simply reject.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from math import log
from typing import Any, Protocol, runtime_checkable

import numpy as np

from ibl_lnr.core.contracts import AgentModel, DecisionContext
from ibl_lnr.core.data import ChoiceBlock, RetrievalTrial
from ibl_lnr.distributions import LognormalRace
from ibl_lnr.models.ibl import InstanceBasedLearningConfig, InstanceBasedLearningModel
from ibl_lnr.models.retrieval import RetrievalRaceConfig, RetrievalRaceModel
from ibl_lnr.runtime.probabilities import normalize_distribution


@dataclass(frozen=True, slots=True)
class LikelihoodResult:
    """Log-likelihood of one dataset under one parameter set.

    Parameters
    ----------
    total_log_likelihood : float
        Sum of ``pointwise``; ``-inf`` when any observation is impossible.
    pointwise : tuple[float, ...]
        Per-observation log-likelihood in data order.
    """

    total_log_likelihood: float
    pointwise: tuple[float, ...]

    @classmethod
    def impossible(cls, n_observations: int) -> "LikelihoodResult":
        """Return a result scoring every observation as ``-inf``."""

        return cls(
            total_log_likelihood=float("-inf"),
            pointwise=tuple(float("-inf") for _ in range(n_observations)),
        )

    @classmethod
    def from_pointwise(cls, values: Sequence[float]) -> "LikelihoodResult":
        """Build a result by summing ``values``."""

        pointwise = tuple(float(value) for value in values)
        return cls(total_log_likelihood=sum_log_likelihood(pointwise), pointwise=pointwise)


@runtime_checkable
class LikelihoodProgram(Protocol):
    """Protocol for dataset likelihood evaluators."""

    def evaluate(self, data: Any, params: Mapping[str, float]) -> LikelihoodResult:
        """Return the log-likelihood of ``data`` under ``params``."""


def sum_log_likelihood(values: Sequence[float] | np.ndarray) -> float:
    """Sum independent log-probabilities.

    Returns ``-inf`` when any term is ``-inf`` and ``0.0`` for no terms.

    Raises
    ------
    ValueError
        If a term is NaN or ``+inf``.
    """

    array = np.asarray(values, dtype=float)
    if array.size == 0:
        return 0.0
    if np.any(np.isnan(array)) or np.any(array == np.inf):
        raise ValueError("log-likelihood terms must not be NaN or +inf")
    if np.any(np.isneginf(array)):
        return float("-inf")
    return float(np.sum(array))


def replay_choice_block(model: AgentModel, block: ChoiceBlock) -> tuple[float, ...]:
    """Replay observed choices through ``model``.

    The model is reset, then for each trial the observed choice is scored
    under the model's current distribution and the observed outcome is
    stored, exactly as during simulation.

    Parameters
    ----------
    model : AgentModel
        Choice model.
    block : ChoiceBlock
        Observed block.

    Returns
    -------
    tuple[float, ...]
        ``log Pr(choice)`` per trial; a zero probability gives ``-inf``.
    """

    model.start_episode()
    log_probs: list[float] = []
    for trial in block.trials:
        context = DecisionContext(trial_index=trial.trial_index, available_actions=block.options)
        distribution = normalize_distribution(
            model.action_distribution(None, context=context),
            block.options,
        )
        probability = float(distribution[trial.choice])
        log_probs.append(log(probability) if probability > 0.0 else float("-inf"))
        model.update(None, trial.choice, trial.outcome, context=context)
    return tuple(log_probs)


class InstanceBasedLearningLikelihood:
    """Choice likelihood of IBL over one or more independent blocks.

    Parameters
    ----------
    fixed : Mapping[str, float] | None, optional
        Config values held constant. Evaluated ``params`` override them.
        Either ``noise_scale`` or ``decision_noise`` should be fixed because
        the two are not jointly identifiable.

    Notes
    -----
    Each block is replayed from fresh memory.
    """

    def __init__(self, fixed: Mapping[str, float] | None = None) -> None:
        self._fixed = dict(fixed) if fixed is not None else {}
        _check_field_names(self._fixed, InstanceBasedLearningConfig, field_name="fixed")

    def evaluate(
        self,
        data: Sequence[ChoiceBlock] | ChoiceBlock,
        params: Mapping[str, float],
    ) -> LikelihoodResult:
        """Return the summed choice log-likelihood of ``data``."""

        blocks = (data,) if isinstance(data, ChoiceBlock) else tuple(data)
        n_observations = sum(block.n_trials for block in blocks)
        merged = {**self._fixed, **params}
        _check_field_names(merged, InstanceBasedLearningConfig, field_name="params")
        if not _all_finite(merged):
            return LikelihoodResult.impossible(n_observations)

        try:
            config = InstanceBasedLearningConfig(**merged)
        except ValueError:
            return LikelihoodResult.impossible(n_observations)

        pointwise: list[float] = []
        for block in blocks:
            model = InstanceBasedLearningModel(block.options, config=config)
            pointwise.extend(replay_choice_block(model, block))
        return LikelihoodResult.from_pointwise(pointwise)


class LognormalRaceLikelihood:
    """Choice-and-RT likelihood of a generic Lognormal Race.

    Parameters
    ----------
    n_accumulators : int
        Number of racing accumulators.
    fixed : Mapping[str, float] | None, optional
        Parameters held constant. Parameter names are ``mu_0`` ...
        ``mu_<n-1>``, ``sigma`` and ``non_decision_time`` (default ``0``).
    """

    def __init__(self, n_accumulators: int, fixed: Mapping[str, float] | None = None) -> None:
        if n_accumulators <= 0:
            raise ValueError("n_accumulators must be > 0")
        self.n_accumulators = int(n_accumulators)
        self._fixed = dict(fixed) if fixed is not None else {}
        unknown = sorted(set(self._fixed) - set(self.parameter_names))
        if unknown:
            raise ValueError(f"fixed contains unknown parameters: {unknown}")

    @property
    def parameter_names(self) -> tuple[str, ...]:
        """Return accepted parameter names."""

        return (
            *(f"mu_{index}" for index in range(self.n_accumulators)),
            "sigma",
            "non_decision_time",
        )

    def race_from_params(self, params: Mapping[str, float]) -> LognormalRace:
        """Build the race described by ``params`` merged over ``fixed``.

        Raises
        ------
        ValueError
            If a parameter is unknown or missing, or values are invalid.
        """

        merged = self._merge(params)
        return LognormalRace(
            mu=tuple(merged[f"mu_{index}"] for index in range(self.n_accumulators)),
            sigma=merged["sigma"],
            non_decision_time=merged.get("non_decision_time", 0.0),
        )

    def evaluate(
        self,
        data: Sequence[RetrievalTrial],
        params: Mapping[str, float],
    ) -> LikelihoodResult:
        """Return the joint choice/RT log-likelihood of ``data``."""

        trials = tuple(data)
        for trial in trials:
            if trial.response >= self.n_accumulators:
                raise ValueError(
                    f"response {trial.response} at trial {trial.trial_index} exceeds "
                    f"{self.n_accumulators} accumulators"
                )
        self._merge(params)
        try:
            race = self.race_from_params(params)
        except ValueError:
            return LikelihoodResult.impossible(len(trials))
        return _race_pointwise(race, trials)

    def _merge(self, params: Mapping[str, float]) -> dict[str, float]:
        merged = {name: float(value) for name, value in {**self._fixed, **params}.items()}
        _check_names(merged, self.parameter_names, field_name="params")
        missing = [name for name in self.parameter_names[:-1] if name not in merged]
        if missing:
            raise ValueError(f"params is missing parameters: {missing}")
        return merged


class RetrievalRaceLikelihood:
    """Likelihood of single-chunk retrieval data under ACT-R parameters.

    Parameters are the fields of :class:`RetrievalRaceConfig`:
    ``base_level_constant``, ``retrieval_threshold``, ``noise_scale`` and
    ``non_decision_time``. Missing ones take the config defaults.
    """

    def __init__(self, fixed: Mapping[str, float] | None = None) -> None:
        self._fixed = dict(fixed) if fixed is not None else {}
        _check_field_names(self._fixed, RetrievalRaceConfig, field_name="fixed")

    def evaluate(
        self,
        data: Sequence[RetrievalTrial],
        params: Mapping[str, float],
    ) -> LikelihoodResult:
        """Return the retrieved/failure race log-likelihood of ``data``."""

        trials = tuple(data)
        merged = {**self._fixed, **params}
        _check_field_names(merged, RetrievalRaceConfig, field_name="params")
        if not _all_finite(merged):
            return LikelihoodResult.impossible(len(trials))
        try:
            race = RetrievalRaceModel(RetrievalRaceConfig(**merged)).race()
        except ValueError:
            return LikelihoodResult.impossible(len(trials))
        return _race_pointwise(race, trials)


def _race_pointwise(race: LognormalRace, trials: Sequence[RetrievalTrial]) -> LikelihoodResult:
    return LikelihoodResult.from_pointwise(
        [race.logpdf(trial.response, trial.rt) for trial in trials]
    )


def _all_finite(values: Mapping[str, Any]) -> bool:
    return all(np.isfinite(float(value)) for value in values.values())


def _check_field_names(values: Mapping[str, Any], config_type: type, *, field_name: str) -> None:
    _check_names(values, tuple(item.name for item in fields(config_type)), field_name=field_name)


def _check_names(values: Mapping[str, Any], allowed: Sequence[str], *, field_name: str) -> None:
    unknown = sorted(set(values) - set(allowed))
    if unknown:
        raise ValueError(f"{field_name} contains unknown parameters: {unknown}")


__all__ = [
    "InstanceBasedLearningLikelihood",
    "LikelihoodProgram",
    "LikelihoodResult",
    "LognormalRaceLikelihood",
    "RetrievalRaceLikelihood",
    "replay_choice_block",
    "sum_log_likelihood",
]
