"""Dataset simulation for choice and retrieval tasks."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from ibl_lnr.core.contracts import AgentModel, DecisionContext, DecisionProblem
from ibl_lnr.core.data import ChoiceBlock, ChoiceTrial, RetrievalTrial
from ibl_lnr.models.ibl import InstanceBasedLearningConfig, InstanceBasedLearningModel
from ibl_lnr.models.retrieval import RetrievalRaceConfig, RetrievalRaceModel
from ibl_lnr.problems.gambles import GambleProblem
from ibl_lnr.runtime.probabilities import normalize_distribution, sample_action

logger = logging.getLogger(__name__)


def simulate_choice_block(
    *,
    problem: DecisionProblem,
    model: AgentModel,
    n_trials: int,
    rng: np.random.Generator,
    block_id: str | int | None = None,
) -> ChoiceBlock:
    """Simulate one block of repeated choices.

    Each trial runs ``observe -> decide -> transition -> update``.

    Parameters
    ----------
    problem : DecisionProblem
        Task providing options and outcomes.
    model : AgentModel
        Choice model; ``start_episode`` is called before the first trial.
    n_trials : int
        Number of trials.
    rng : numpy.random.Generator
        Random generator used for choices and outcomes.
    block_id : str | int | None, optional
        Identifier stored on the block.

    Returns
    -------
    ChoiceBlock
        Simulated trials.
    """

    if n_trials <= 0:
        raise ValueError("n_trials must be > 0")

    problem.reset(rng=rng)
    model.start_episode()

    options = tuple(problem.available_actions(trial_index=0))
    trials: list[ChoiceTrial] = []
    for trial_index in range(n_trials):
        available = tuple(problem.available_actions(trial_index=trial_index))
        context = DecisionContext(trial_index=trial_index, available_actions=available)
        observation = problem.observe(context=context)
        distribution = normalize_distribution(
            model.action_distribution(observation, context=context),
            available,
        )
        action = sample_action(distribution, rng)
        outcome = problem.transition(action, context=context, rng=rng)
        model.update(observation, action, outcome, context=context)
        trials.append(ChoiceTrial(trial_index=trial_index, choice=str(action), outcome=float(outcome)))

    return ChoiceBlock(options=options, trials=tuple(trials), block_id=block_id)


def simulate_gamble_set(
    gamble_set: Sequence[GambleProblem],
    *,
    n_trials: int,
    config: InstanceBasedLearningConfig,
    rng: np.random.Generator,
) -> tuple[ChoiceBlock, ...]:
    """Simulate an IBL agent on each gamble problem with fresh memory.

    Returns
    -------
    tuple[ChoiceBlock, ...]
        One block per problem, with ``block_id`` equal to the problem's
        zero-based position.
    """

    if len(gamble_set) == 0:
        raise ValueError("gamble_set must contain at least one problem")

    blocks: list[ChoiceBlock] = []
    for block_index, problem in enumerate(gamble_set):
        model = InstanceBasedLearningModel(problem.options, config=config)
        block = simulate_choice_block(
            problem=problem,
            model=model,
            n_trials=n_trials,
            rng=rng,
            block_id=block_index,
        )
        blocks.append(block)
    logger.debug(
        "simulated %d IBL blocks of %d trials (decay=%s, decision_noise=%s)",
        len(blocks),
        n_trials,
        config.decay,
        config.decision_noise,
    )
    return tuple(blocks)


def simulate_retrieval_trials(
    config: RetrievalRaceConfig,
    *,
    n_trials: int,
    rng: np.random.Generator,
    deterministic_threshold: bool = False,
) -> tuple[RetrievalTrial, ...]:
    """Simulate single-chunk retrieval responses; see :class:`RetrievalRaceModel`."""

    return RetrievalRaceModel(config).simulate(
        n_trials,
        rng,
        deterministic_threshold=deterministic_threshold,
    )


__all__ = ["simulate_choice_block", "simulate_gamble_set", "simulate_retrieval_trials"]
