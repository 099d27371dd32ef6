"""Tests for dataset simulation."""

from __future__ import annotations

import numpy as np
import pytest

from ibl_lnr.core.data import ChoiceBlock
from ibl_lnr.generators import simulate_choice_block, simulate_gamble_set, simulate_retrieval_trials
from ibl_lnr.models import InstanceBasedLearningConfig, InstanceBasedLearningModel, RetrievalRaceConfig
from ibl_lnr.problems import Gamble, GambleProblem, default_gamble_set


def test_simulate_choice_block_records_every_trial() -> None:
    """Each trial stores the chosen option and its sampled outcome."""

    problem = GambleProblem({"a": Gamble.certain(1.0), "b": Gamble.certain(-1.0)})
    block = simulate_choice_block(
        problem=problem,
        model=InstanceBasedLearningModel(problem.options),
        n_trials=25,
        rng=np.random.default_rng(0),
        block_id="p1",
    )

    assert isinstance(block, ChoiceBlock)
    assert block.block_id == "p1"
    assert block.options == ("a", "b")
    assert [trial.trial_index for trial in block.trials] == list(range(25))
    for trial in block.trials:
        assert trial.outcome == (1.0 if trial.choice == "a" else -1.0)


def test_single_trial_block_keeps_problem_options() -> None:
    """Block options come from the problem even for a one-trial block."""

    problem = GambleProblem({"safe": Gamble.certain(1.0), "risky": Gamble((4.0, 0.0), (0.25, 0.75))})

    block = simulate_choice_block(
        problem=problem,
        model=InstanceBasedLearningModel(problem.options),
        n_trials=1,
        rng=np.random.default_rng(3),
    )

    assert block.options == ("safe", "risky")
    assert block.n_trials == 1
    assert block.trials[0].choice in block.options


def test_simulation_is_reproducible_with_seed() -> None:
    """The same seed yields the same dataset."""

    config = InstanceBasedLearningConfig(decay=0.5, decision_noise=0.5)
    first = simulate_gamble_set(default_gamble_set(), n_trials=20, config=config, rng=np.random.default_rng(9))
    second = simulate_gamble_set(default_gamble_set(), n_trials=20, config=config, rng=np.random.default_rng(9))

    assert [block.choices for block in first] == [block.choices for block in second]


def test_simulate_gamble_set_returns_one_block_per_problem() -> None:
    """Blocks are indexed by problem position."""

    blocks = simulate_gamble_set(
        default_gamble_set(),
        n_trials=10,
        config=InstanceBasedLearningConfig(),
        rng=np.random.default_rng(1),
    )

    assert [block.block_id for block in blocks] == [0, 1, 2]
    assert all(block.n_trials == 10 for block in blocks)


def test_ibl_agent_learns_dominant_option() -> None:
    """With low noise the agent settles on the better sure option."""

    problem = GambleProblem({"good": Gamble.certain(25.0), "bad": Gamble.certain(0.0)})
    blocks = simulate_gamble_set(
        [problem],
        n_trials=60,
        config=InstanceBasedLearningConfig(decision_noise=0.5),
        rng=np.random.default_rng(4),
    )

    late_choices = blocks[0].choices[30:]

    assert late_choices.count("good") / len(late_choices) > 0.95


def test_simulate_retrieval_trials_delegates_to_model() -> None:
    """Retrieval simulation produces the requested number of trials."""

    trials = simulate_retrieval_trials(RetrievalRaceConfig(), n_trials=30, rng=np.random.default_rng(3))

    assert len(trials) == 30


def test_invalid_simulation_arguments_raise() -> None:
    """Trial counts must be positive and gamble sets non-empty."""

    with pytest.raises(ValueError, match="n_trials"):
        simulate_choice_block(
            problem=default_gamble_set()[0],
            model=InstanceBasedLearningModel(("a", "b")),
            n_trials=0,
            rng=np.random.default_rng(0),
        )
    with pytest.raises(ValueError, match="gamble_set"):
        simulate_gamble_set([], n_trials=5, config=InstanceBasedLearningConfig(), rng=np.random.default_rng(0))
