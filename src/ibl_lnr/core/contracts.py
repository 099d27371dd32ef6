"""Protocol contracts for repeated-choice tasks and choice models.

A simulation step follows ``observe -> decide -> transition -> update``: the
task exposes its options, the model returns choice probabilities, the task
samples an outcome for the chosen option, and the model stores the experience.
The same contracts drive likelihood replay, where the observed choice and
outcome replace the sampled ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

import numpy as np


@dataclass(frozen=True, slots=True)
class DecisionContext:
    """Per-trial metadata shared by a task and a model.

    Parameters
    ----------
    trial_index : int
        Zero-based trial index within the block.
    available_actions : tuple[str, ...]
        Options that may be chosen on this trial.

    Raises
    ------
    ValueError
        If ``trial_index`` is negative or no option is available.
    """

    trial_index: int
    available_actions: tuple[str, ...]

    def __post_init__(self) -> None:
        if self.trial_index < 0:
            raise ValueError("trial_index must be >= 0")
        if len(self.available_actions) == 0:
            raise ValueError("available_actions must contain at least one action")

    @property
    def trial_time(self) -> float:
        """Return the memory clock for this trial.

        Trials are treated as equally spaced one second apart, starting at
        ``1.0`` so that chunks created at time ``0.0`` have a positive lag.
        """

        return float(self.trial_index + 1)


@runtime_checkable
class DecisionProblem(Protocol):
    """Environment side of a repeated-choice task."""

    def reset(self, *, rng: np.random.Generator) -> None:
        """Reset task state before a new block."""

    def available_actions(self, *, trial_index: int) -> Sequence[str]:
        """Return the options offered on ``trial_index``."""

    def observe(self, *, context: DecisionContext) -> Any:
        """Return the observation presented before the choice."""

    def transition(
        self,
        action: str,
        *,
        context: DecisionContext,
        rng: np.random.Generator,
    ) -> float:
        """Apply the chosen option and return the experienced outcome."""


@runtime_checkable
class AgentModel(Protocol):
    """Model side of a repeated-choice task.

    Notes
    -----
    ``start_episode`` is called once per block, then ``action_distribution``
    and ``update`` alternate for every trial.
    """

    def start_episode(self) -> None:
        """Reset internal state for a new block."""

    def action_distribution(
        self,
        observation: Any,
        *,
        context: DecisionContext,
    ) -> Mapping[str, float]:
        """Return choice probabilities over ``context.available_actions``."""

    def update(
        self,
        observation: Any,
        action: str,
        outcome: Any,
        *,
        context: DecisionContext,
    ) -> None:
        """Store the experienced outcome of ``action``."""


__all__ = ["AgentModel", "DecisionContext", "DecisionProblem"]
