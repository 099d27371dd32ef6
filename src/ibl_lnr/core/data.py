"""Trial and block records for choice and retrieval datasets."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass(frozen=True, slots=True)
class ChoiceTrial:
    """One repeated-choice trial.

    Parameters
    ----------
    trial_index : int
        Zero-based trial index within the block.
    choice : str
        Chosen option.
    outcome : float
        Outcome sampled from the chosen option's payoff distribution.
    """

    trial_index: int
    choice: str
    outcome: float

    def __post_init__(self) -> None:
        if self.trial_index < 0:
            raise ValueError("trial_index must be >= 0")
        if not np.isfinite(self.outcome):
            raise ValueError("outcome must be finite")


@dataclass(frozen=True, slots=True)
class ChoiceBlock:
    """Trials played against one gamble pair.

    Parameters
    ----------
    options : tuple[str, ...]
        Ordered option labels offered on every trial.
    trials : tuple[ChoiceTrial, ...]
        Trials in chronological order.
    block_id : str | int | None, optional
        Optional block identifier.
    metadata : Mapping[str, Any], optional
        Free-form metadata such as generating parameters or seeds.

    Raises
    ------
    ValueError
        If options are empty or duplicated, trial indices are not strictly
        increasing, or a choice is not one of ``options``.
    """

    options: tuple[str, ...]
    trials: tuple[ChoiceTrial, ...]
    block_id: str | int | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.options) == 0:
            raise ValueError("options must not be empty")
        if len(set(self.options)) != len(self.options):
            raise ValueError("options must be unique")

        previous = -1
        for trial in self.trials:
            if trial.trial_index <= previous:
                raise ValueError("trial_index values must be strictly increasing")
            if trial.choice not in self.options:
                raise ValueError(
                    f"choice {trial.choice!r} at trial {trial.trial_index} is not one of {self.options!r}"
                )
            previous = trial.trial_index

    @property
    def n_trials(self) -> int:
        """Return number of trials in the block."""

        return len(self.trials)

    @property
    def choices(self) -> tuple[str, ...]:
        """Return chosen options in trial order."""

        return tuple(trial.choice for trial in self.trials)


@dataclass(frozen=True, slots=True)
class RetrievalTrial:
    """One memory-retrieval response.

    Parameters
    ----------
    trial_index : int
        Zero-based trial index.
    response : int
        Zero-based index of the winning accumulator. For two-accumulator
        retrieval races ``0`` is a retrieved chunk and ``1`` a failure.
    rt : float
        Response time in seconds, including non-decision time.
    """

    trial_index: int
    response: int
    rt: float

    def __post_init__(self) -> None:
        if self.trial_index < 0:
            raise ValueError("trial_index must be >= 0")
        if self.response < 0:
            raise ValueError("response must be >= 0")
        if not np.isfinite(self.rt) or self.rt <= 0.0:
            raise ValueError("rt must be finite and > 0")


__all__ = ["ChoiceBlock", "ChoiceTrial", "RetrievalTrial"]
