"""Instance-Based Learning (IBL) model of repeated choice from experience."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

from ibl_lnr.core.contracts import DecisionContext
from ibl_lnr.memory import Chunk, DeclarativeMemory, MemoryParameters, chunk_slot_values
from ibl_lnr.runtime.probabilities import softmax


@dataclass(frozen=True, slots=True)
class InstanceBasedLearningConfig:
    """Configuration for :class:`InstanceBasedLearningModel`.

    Parameters
    ----------
    decay : float
        Base-level decay ``d`` in ``[0, 1)``.
    decision_noise : float
        Softmax noise ``phi`` mapping expected utilities to choice
        probabilities. Must be positive.
    noise_scale : float
        Activation noise ``s``; retrieval probabilities use temperature
        ``s * sqrt(2)``. Either ``s`` or ``phi`` must be fixed when fitting
        because they are not jointly identifiable.
    retrieval_threshold : float
        Threshold ``tau``. The default makes retrieval failures negligible.
    prior_outcome : float
        Outcome stored in the initial chunk of every option.
    base_level_constant : float
        Constant added to every activation.

    Raises
    ------
    ValueError
        If ``decay`` is outside ``[0, 1)`` or a noise parameter is not
        positive.
    """

    decay: float = 0.5
    decision_noise: float = 0.2
    noise_scale: float = 0.2
    retrieval_threshold: float = -10.0
    prior_outcome: float = 30.0
    base_level_constant: float = 0.0

    def __post_init__(self) -> None:
        if self.decay < 0.0 or self.decay >= 1.0:
            raise ValueError("decay must be in [0, 1)")
        if self.decision_noise <= 0.0:
            raise ValueError("decision_noise must be > 0")
        if self.noise_scale <= 0.0:
            raise ValueError("noise_scale must be > 0")

    def memory_parameters(self) -> MemoryParameters:
        """Return declarative-memory parameters implied by this config."""

        return MemoryParameters(
            base_level_constant=self.base_level_constant,
            base_level_learning=True,
            decay=self.decay,
            noise_scale=self.noise_scale,
            retrieval_threshold=self.retrieval_threshold,
        )


class InstanceBasedLearningModel:
    """IBL choice model with blended memory-based utilities.

    Model Contract
    --------------
    Memory
        Every experienced ``(choice, outcome)`` pair is a chunk. Memory starts
        with one chunk per option holding ``prior_outcome``, created at time 0.
        Trial ``i`` (zero-based) happens at time ``i + 1``.
    Blended utility
        ``EU[o] = sum_{m in R_o} P(m | choice=o) * outcome_m`` where ``R_o`` are
        chunks with ``choice == o`` and ``P`` is the retrieval probability
        under base-level activation. The retrieval-failure probability is
        computed but not included in the blend.
    Decision rule
        ``P(o) = softmax(EU[o] / phi)`` over the available options.
    Update rule
        Store ``(choice, outcome)`` at the trial time; repeated identical
        experiences strengthen one chunk.

    Parameters
    ----------
    options : Sequence[str]
        Option labels seeded in memory.
    config : InstanceBasedLearningConfig | None, optional
        Hyperparameters. Defaults are used when ``None``.
    outcome_getter : Callable[[Any], float] | None, optional
        Optional custom outcome-to-value extractor.
    """

    def __init__(
        self,
        options: Sequence[str],
        config: InstanceBasedLearningConfig | None = None,
        outcome_getter: Callable[[Any], float] | None = None,
    ) -> None:
        if len(options) == 0:
            raise ValueError("options must not be empty")
        self.options = tuple(str(option) for option in options)
        self.config = config if config is not None else InstanceBasedLearningConfig()
        self._outcome_getter = outcome_getter if outcome_getter is not None else _default_outcome_getter
        self._memory = self._initial_memory()

    def start_episode(self) -> None:
        """Reset memory to the prior chunks."""

        self._memory = self._initial_memory()

    @property
    def memory(self) -> DeclarativeMemory:
        """Return the live declarative memory."""

        return self._memory

    def expected_utility(self, option: str, trial_time: float) -> float:
        """Return the blended utility of ``option`` at ``trial_time``."""

        probabilities, chunks = self._memory.retrieval_probabilities(trial_time, choice=option)
        if not chunks:
            return 0.0
        outcomes = chunk_slot_values(chunks, "outcome")
        return float(np.dot(probabilities[:-1], outcomes))

    def expected_utilities(self, options: Sequence[str], trial_time: float) -> dict[str, float]:
        """Return blended utilities for ``options``."""

        return {option: self.expected_utility(option, trial_time) for option in options}

    def action_distribution(
        self,
        observation: Any,
        *,
        context: DecisionContext,
    ) -> dict[str, float]:
        """Return softmax choice probabilities over the available options."""

        del observation
        actions = context.available_actions
        utilities = self.expected_utilities(actions, context.trial_time)
        probs = softmax([utilities[action] for action in actions], self.config.decision_noise)
        return {action: float(prob) for action, prob in zip(actions, probs, strict=True)}

    def update(
        self,
        observation: Any,
        action: str,
        outcome: Any,
        *,
        context: DecisionContext,
    ) -> None:
        """Encode the experienced outcome of ``action``."""

        del observation
        if action not in context.available_actions:
            raise ValueError(f"action {action!r} not in available actions")
        value = float(self._outcome_getter(outcome))
        self._memory.add(context.trial_time, choice=action, outcome=value)

    def memory_snapshot(self) -> list[dict[str, Any]]:
        """Return a copy of stored chunks as plain records."""

        return [
            {
                **chunk.slots,
                "n_uses": chunk.n_uses,
                "time_created": chunk.time_created,
                "recent": list(chunk.recent),
            }
            for chunk in self._memory.chunks
        ]

    def _initial_memory(self) -> DeclarativeMemory:
        chunks = [
            Chunk(slots={"choice": option, "outcome": float(self.config.prior_outcome)})
            for option in self.options
        ]
        return DeclarativeMemory(chunks, self.config.memory_parameters())


def _default_outcome_getter(outcome: Any) -> float:
    """Extract a scalar outcome.

    Supported forms are numbers, objects with an ``outcome`` attribute, and
    mappings with an ``"outcome"`` key.

    Raises
    ------
    TypeError
        If no scalar outcome can be extracted.
    """

    if isinstance(outcome, (int, float, np.floating, np.integer)):
        return float(outcome)

    if hasattr(outcome, "outcome"):
        return float(getattr(outcome, "outcome"))

    if isinstance(outcome, Mapping) and "outcome" in outcome:
        return float(outcome["outcome"])

    raise TypeError(
        "Outcome must be a number or expose 'outcome' as attribute or mapping key"
    )


def create_instance_based_learning_model(
    options: Sequence[str],
    *,
    decay: float = 0.5,
    decision_noise: float = 0.2,
    noise_scale: float = 0.2,
    retrieval_threshold: float = -10.0,
    prior_outcome: float = 30.0,
    base_level_constant: float = 0.0,
) -> InstanceBasedLearningModel:
    """Build an IBL model from flat keyword parameters."""

    config = InstanceBasedLearningConfig(
        decay=decay,
        decision_noise=decision_noise,
        noise_scale=noise_scale,
        retrieval_threshold=retrieval_threshold,
        prior_outcome=prior_outcome,
        base_level_constant=base_level_constant,
    )
    return InstanceBasedLearningModel(options, config=config)


__all__ = [
    "InstanceBasedLearningConfig",
    "InstanceBasedLearningModel",
    "create_instance_based_learning_model",
]
