"""Top-level package for ``ibl_lnr``.

Two models of ACT-R declarative memory:

1. :class:`~ibl_lnr.models.ibl.InstanceBasedLearningModel` chooses between
   gambles by blending remembered outcomes, weighted by retrieval
   probability, and
2. :class:`~ibl_lnr.distributions.race.LognormalRace` gives the joint
   likelihood of which chunk is retrieved and when.

Both share :mod:`ibl_lnr.memory`. Datasets are simulated with
:mod:`ibl_lnr.generators` and fitted with the Metropolis sampler in
:mod:`ibl_lnr.inference`.
"""

from .core.contracts import AgentModel, DecisionContext, DecisionProblem
from .core.data import ChoiceBlock, ChoiceTrial, RetrievalTrial
from .distributions import LognormalRace
from .generators import simulate_choice_block, simulate_gamble_set, simulate_retrieval_trials
from .models import (
    InstanceBasedLearningConfig,
    InstanceBasedLearningModel,
    RetrievalRaceConfig,
    RetrievalRaceModel,
)

__all__ = [
    "AgentModel",
    "ChoiceBlock",
    "ChoiceTrial",
    "DecisionContext",
    "DecisionProblem",
    "InstanceBasedLearningConfig",
    "InstanceBasedLearningModel",
    "LognormalRace",
    "RetrievalRaceConfig",
    "RetrievalRaceModel",
    "RetrievalTrial",
    "simulate_choice_block",
    "simulate_gamble_set",
    "simulate_retrieval_trials",
]
