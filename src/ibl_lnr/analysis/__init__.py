"""Choice-sequence statistics and posterior predictive checks."""

from .choice_dynamics import a_rate, recurrence_counts, recurrence_indices, recurrence_rate
from .predictive import posterior_a_rates, posterior_predictive

__all__ = [
    "a_rate",
    "posterior_a_rates",
    "posterior_predictive",
    "recurrence_counts",
    "recurrence_indices",
    "recurrence_rate",
]
