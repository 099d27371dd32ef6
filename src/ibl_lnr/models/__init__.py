"""Choice and retrieval models."""

from .ibl import (
    InstanceBasedLearningConfig,
    InstanceBasedLearningModel,
    create_instance_based_learning_model,
)
from .retrieval import (
    FAILURE,
    RETRIEVED,
    RetrievalRaceConfig,
    RetrievalRaceModel,
    lognormal_race_from_memory,
    lognormal_sigma,
)

__all__ = [
    "FAILURE",
    "InstanceBasedLearningConfig",
    "InstanceBasedLearningModel",
    "RETRIEVED",
    "RetrievalRaceConfig",
    "RetrievalRaceModel",
    "create_instance_based_learning_model",
    "lognormal_race_from_memory",
    "lognormal_sigma",
]
