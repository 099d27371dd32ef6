"""Lognormal primitives and the Lognormal Race distribution."""

from .lognormal import (
    lognormal_cdf,
    lognormal_log_survivor,
    lognormal_logpdf,
    lognormal_pdf,
    lognormal_survivor,
)
from .race import LognormalRace

__all__ = [
    "LognormalRace",
    "lognormal_cdf",
    "lognormal_log_survivor",
    "lognormal_logpdf",
    "lognormal_pdf",
    "lognormal_survivor",
]
