"""Runtime helpers for choice probabilities."""

from .probabilities import normalize_distribution, sample_action, softmax

__all__ = ["normalize_distribution", "sample_action", "softmax"]
