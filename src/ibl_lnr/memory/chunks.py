"""Chunk records stored in declarative memory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Chunk:
    """One declarative-memory record.

    Parameters
    ----------
    slots : dict[str, Any]
        Slot name to value mapping, for example ``{"choice": "a", "outcome": 2.0}``.
    n_uses : int, optional
        Number of presentations (creation plus re-encodings).
    time_created : float, optional
        Time at which the chunk was first encoded.
    recent : list[float], optional
        Times of the most recent uses, oldest first. Defaults to
        ``[time_created]``.

    Raises
    ------
    ValueError
        If ``n_uses`` is smaller than the number of recorded use times or any
        recorded use precedes ``time_created``.
    """

    slots: dict[str, Any]
    n_uses: int = 1
    time_created: float = 0.0
    recent: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.slots = dict(self.slots)
        self.recent = [float(value) for value in self.recent] or [float(self.time_created)]
        if self.n_uses < len(self.recent):
            raise ValueError("n_uses must be >= number of recorded use times")
        if min(self.recent) < self.time_created:
            raise ValueError("recorded use times must not precede time_created")

    def matches(self, **request: Any) -> bool:
        """Return whether every requested slot holds the requested value."""

        return all(
            name in self.slots and self.slots[name] == value
            for name, value in request.items()
        )

    def n_mismatches(self, **request: Any) -> int:
        """Return number of requested slots whose value differs."""

        return sum(
            1
            for name, value in request.items()
            if name not in self.slots or self.slots[name] != value
        )

    def lifetime(self, cur_time: float) -> float:
        """Return time elapsed since creation."""

        return float(cur_time) - float(self.time_created)

    def record_use(self, cur_time: float, *, n_recent: int) -> None:
        """Register one more use at ``cur_time``, keeping ``n_recent`` exact times."""

        self.n_uses += 1
        self.recent.append(float(cur_time))
        if len(self.recent) > n_recent:
            del self.recent[: len(self.recent) - n_recent]


__all__ = ["Chunk"]
