"""Tabular dataset I/O."""

from .tabular import (
    read_choice_blocks_csv,
    read_retrieval_trials_csv,
    write_choice_blocks_csv,
    write_retrieval_trials_csv,
)

__all__ = [
    "read_choice_blocks_csv",
    "read_retrieval_trials_csv",
    "write_choice_blocks_csv",
    "write_retrieval_trials_csv",
]
