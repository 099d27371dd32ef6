"""Tests for gamble problems."""

from __future__ import annotations

import numpy as np
import pytest

from ibl_lnr.core.contracts import DecisionContext, DecisionProblem
from ibl_lnr.problems import Gamble, GambleProblem, default_gamble_set, gamble_problem_from_config


def test_gamble_expected_value_and_sampling() -> None:
    """Sampled outcomes come from the support with the right mean."""

    gamble = Gamble((3.0, 1.0), (0.8, 0.2))
    rng = np.random.default_rng(5)
    draws = np.array([gamble.sample(rng) for _ in range(5000)])

    assert gamble.expected_value == pytest.approx(2.6)
    assert set(np.unique(draws)) <= {1.0, 3.0}
    assert draws.mean() == pytest.approx(2.6, abs=0.05)


@pytest.mark.parametrize(
    ("outcomes", "probabilities"),
    [((), ()), ((1.0, 2.0), (1.0,)), ((1.0, 2.0), (0.6, 0.6)), ((1.0, 2.0), (1.2, -0.2))],
)
def test_invalid_gamble_raises(outcomes: tuple, probabilities: tuple) -> None:
    """Malformed payoff distributions are rejected."""

    with pytest.raises(ValueError):
        Gamble(outcomes, probabilities)


def test_default_gamble_set_expected_values() -> None:
    """The built-in set has the documented expected values."""

    problems = default_gamble_set()

    assert len(problems) == 3
    assert problems[0].expected_values() == {"a": 0.5, "b": 0.0}
    assert problems[1].expected_values() == pytest.approx({"a": 2.6, "b": 3.0})
    assert problems[2].expected_values() == {"a": -5.0, "b": -4.0}


def test_gamble_problem_follows_decision_problem_protocol() -> None:
    """Gamble problems plug into the generic simulation contract."""

    problem = GambleProblem({"safe": Gamble.certain(1.0), "risky": Gamble((0.0, 2.0), (0.5, 0.5))})
    rng = np.random.default_rng(0)
    context = DecisionContext(trial_index=0, available_actions=problem.available_actions(trial_index=0))

    assert isinstance(problem, DecisionProblem)
    assert problem.options == ("safe", "risky")
    assert problem.observe(context=context) is None
    assert problem.transition("safe", context=context, rng=rng) == 1.0


def test_transition_rejects_unavailable_action() -> None:
    """Only offered options can be chosen."""

    problem = default_gamble_set()[0]
    context = DecisionContext(trial_index=0, available_actions=("a",))

    with pytest.raises(ValueError, match="not in available actions"):
        problem.transition("b", context=context, rng=np.random.default_rng(0))


def test_unknown_gamble_option_raises_key_error() -> None:
    """Looking up an unknown option names the available ones."""

    with pytest.raises(KeyError, match="unknown option"):
        default_gamble_set()[0].gamble("z")


def test_gamble_problem_from_config() -> None:
    """Config mappings accept full gambles and bare certain outcomes."""

    problem = gamble_problem_from_config(
        {"a": {"outcomes": [2, -1], "probabilities": [0.5, 0.5]}, "b": 0}
    )

    assert problem.options == ("a", "b")
    assert problem.gamble("b") == Gamble.certain(0.0)


def test_gamble_problem_from_config_rejects_bad_entry() -> None:
    """Entries must be numbers or objects with outcomes and probabilities."""

    with pytest.raises(ValueError, match="requires"):
        gamble_problem_from_config({"a": {"outcomes": [1.0]}})
