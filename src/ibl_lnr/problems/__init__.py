"""Decision problems under the generic ``DecisionProblem`` protocol."""

from .gambles import Gamble, GambleProblem, default_gamble_set, gamble_problem_from_config

__all__ = ["Gamble", "GambleProblem", "default_gamble_set", "gamble_problem_from_config"]
