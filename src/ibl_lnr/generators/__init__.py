"""Dataset generators."""

from .simulation import simulate_choice_block, simulate_gamble_set, simulate_retrieval_trials

__all__ = ["simulate_choice_block", "simulate_gamble_set", "simulate_retrieval_trials"]
