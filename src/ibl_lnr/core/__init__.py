"""Core contracts, records, and config helpers."""

from .config import (
    SUPPORTED_CONFIG_SUFFIXES,
    load_config_mapping,
    validate_allowed_keys,
    validate_required_keys,
)
from .contracts import AgentModel, DecisionContext, DecisionProblem
from .data import ChoiceBlock, ChoiceTrial, RetrievalTrial

__all__ = [
    "AgentModel",
    "ChoiceBlock",
    "ChoiceTrial",
    "DecisionContext",
    "DecisionProblem",
    "RetrievalTrial",
    "SUPPORTED_CONFIG_SUFFIXES",
    "load_config_mapping",
    "validate_allowed_keys",
    "validate_required_keys",
]
