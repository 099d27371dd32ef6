"""Repeated binary choice between gambles learned from experience.

Participants do not see the payoff distributions; each choice reveals one
outcome sampled from the chosen gamble.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np

from ibl_lnr.core.contracts import DecisionContext


@dataclass(frozen=True, slots=True)
class Gamble:
    """Discrete payoff distribution.

    Parameters
    ----------
    outcomes : tuple[float, ...]
        Possible outcome values.
    probabilities : tuple[float, ...]
        Probability of each outcome.

    Raises
    ------
    ValueError
        If the sequences are empty or of different length, or probabilities
        are negative or do not sum to one.
    """

    outcomes: tuple[float, ...]
    probabilities: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "outcomes", tuple(float(value) for value in self.outcomes))
        object.__setattr__(self, "probabilities", tuple(float(value) for value in self.probabilities))
        if len(self.outcomes) == 0:
            raise ValueError("gamble must have at least one outcome")
        if len(self.outcomes) != len(self.probabilities):
            raise ValueError("outcomes and probabilities must have equal length")
        if any(value < 0.0 for value in self.probabilities):
            raise ValueError("probabilities must be >= 0")
        if not np.isclose(sum(self.probabilities), 1.0):
            raise ValueError("probabilities must sum to 1")

    @classmethod
    def certain(cls, value: float) -> "Gamble":
        """Return a gamble that always pays ``value``."""

        return cls(outcomes=(float(value),), probabilities=(1.0,))

    @property
    def expected_value(self) -> float:
        """Return ``sum_i p_i * x_i``."""

        return float(np.dot(self.outcomes, self.probabilities))

    def sample(self, rng: np.random.Generator) -> float:
        """Draw one outcome."""

        index = int(rng.choice(len(self.outcomes), p=np.asarray(self.probabilities)))
        return self.outcomes[index]


class GambleProblem:
    """Stationary choice between named gambles.

    Parameters
    ----------
    options : Mapping[str, Gamble]
        Option label to gamble mapping. Insertion order fixes the option order.
    """

    def __init__(self, options: Mapping[str, Gamble]) -> None:
        if len(options) == 0:
            raise ValueError("options must contain at least one gamble")
        self._options = {str(name): gamble for name, gamble in options.items()}

    @property
    def options(self) -> tuple[str, ...]:
        """Return option labels in presentation order."""

        return tuple(self._options)

    def gamble(self, option: str) -> Gamble:
        """Return the gamble behind ``option``."""

        try:
            return self._options[option]
        except KeyError:
            raise KeyError(f"unknown option {option!r}; available: {self.options!r}") from None

    def expected_values(self) -> dict[str, float]:
        """Return the objective expected value of every option."""

        return {name: gamble.expected_value for name, gamble in self._options.items()}

    def reset(self, *, rng: np.random.Generator) -> None:
        """Stationary task; nothing to reset."""

    def available_actions(self, *, trial_index: int) -> tuple[str, ...]:
        """Return every option on every trial."""

        del trial_index
        return self.options

    def observe(self, *, context: DecisionContext) -> None:
        """Choices are made without a stimulus."""

        del context
        return None

    def transition(
        self,
        action: str,
        *,
        context: DecisionContext,
        rng: np.random.Generator,
    ) -> float:
        """Sample the outcome of the chosen gamble."""

        if action not in context.available_actions:
            raise ValueError(f"action {action!r} not in available actions")
        return self.gamble(action).sample(rng)


def default_gamble_set() -> tuple[GambleProblem, ...]:
    """Return the three two-option problems used in the IBL tutorial.

    ============  ===========================  ===========================
    Problem       Option ``a``                 Option ``b``
    ============  ===========================  ===========================
    1             2 (.5), -1 (.5)              0 (1)
    2             3 (.8), 1 (.2)               4 (.5), 2 (.5)
    3             -10 (.5), 0 (.5)             -4 (1)
    ============  ===========================  ===========================
    """

    return (
        GambleProblem({"a": Gamble((2.0, -1.0), (0.5, 0.5)), "b": Gamble.certain(0.0)}),
        GambleProblem({"a": Gamble((3.0, 1.0), (0.8, 0.2)), "b": Gamble((4.0, 2.0), (0.5, 0.5))}),
        GambleProblem({"a": Gamble((-10.0, 0.0), (0.5, 0.5)), "b": Gamble.certain(-4.0)}),
    )


def gamble_problem_from_config(raw: Mapping[str, object]) -> GambleProblem:
    """Build a problem from ``{option: {"outcomes": [...], "probabilities": [...]}}``.

    A bare number is accepted as a certain outcome.
    """

    options: dict[str, Gamble] = {}
    for name, spec in raw.items():
        if isinstance(spec, (int, float)):
            options[str(name)] = Gamble.certain(float(spec))
            continue
        if not isinstance(spec, Mapping):
            raise ValueError(f"gamble {name!r} must be a number or an object")
        outcomes = spec.get("outcomes")
        probabilities = spec.get("probabilities")
        if not isinstance(outcomes, Sequence) or not isinstance(probabilities, Sequence):
            raise ValueError(f"gamble {name!r} requires 'outcomes' and 'probabilities' arrays")
        options[str(name)] = Gamble(tuple(outcomes), tuple(probabilities))
    return GambleProblem(options)


__all__ = ["Gamble", "GambleProblem", "default_gamble_set", "gamble_problem_from_config"]
