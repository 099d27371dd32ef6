"""Declarative memory with base-level learning, partial matching, and retrieval.

This is the subset of ACT-R's declarative module used by the Instance-Based
Learning and Lognormal Race models.

Activation of chunk ``m`` for request ``r`` at time ``t``::

    a_m = blc + bll_m(t) - delta * mismatches(m, r) + eps_m

where ``bll_m`` is the hybrid base-level approximation (Petrov, 2006), the
mismatch term applies only with partial matching, and ``eps_m`` is logistic
noise with scale ``s`` when a random generator is supplied.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from math import log, sqrt
from typing import Any

import numpy as np

from .chunks import Chunk


@dataclass(frozen=True, slots=True)
class MemoryParameters:
    """Declarative-memory parameters.

    Parameters
    ----------
    base_level_constant : float
        Constant added to every activation (``blc``).
    base_level_learning : bool
        Whether the decaying base-level term is included.
    decay : float
        Base-level decay ``d`` in ``[0, 1)``.
    noise_scale : float
        Logistic activation-noise scale ``s``; must be positive.
    retrieval_threshold : float
        Retrieval threshold ``tau``.
    partial_matching : bool
        Whether mismatching chunks compete with a penalty.
    mismatch_penalty : float
        Penalty ``delta`` per mismatched request slot.
    n_recent : int
        Number of exact use times kept by the hybrid approximation (``k``).
    latency_factor : float
        Scale ``F`` in retrieval time ``F * exp(-a)``.
    """

    base_level_constant: float = 0.0
    base_level_learning: bool = False
    decay: float = 0.5
    noise_scale: float = 0.2
    retrieval_threshold: float = 0.0
    partial_matching: bool = False
    mismatch_penalty: float = 1.0
    n_recent: int = 1
    latency_factor: float = 1.0

    def __post_init__(self) -> None:
        if self.decay < 0.0 or self.decay >= 1.0:
            raise ValueError("decay must be in [0, 1)")
        if self.noise_scale <= 0.0:
            raise ValueError("noise_scale must be > 0")
        if self.mismatch_penalty < 0.0:
            raise ValueError("mismatch_penalty must be >= 0")
        if self.n_recent < 1:
            raise ValueError("n_recent must be >= 1")
        if self.latency_factor <= 0.0:
            raise ValueError("latency_factor must be > 0")

    @property
    def retrieval_temperature(self) -> float:
        """Return ``s * sqrt(2)``, the softmax temperature of retrieval probabilities."""

        return float(self.noise_scale * sqrt(2.0))


class DeclarativeMemory:
    """Chunk store with ACT-R activation and retrieval dynamics.

    Parameters
    ----------
    chunks : Iterable[Chunk], optional
        Initial chunks. They are used as given, not copied.
    parameters : MemoryParameters | None, optional
        Memory parameters. Defaults are used when ``None``.
    """

    def __init__(
        self,
        chunks: Iterable[Chunk] = (),
        parameters: MemoryParameters | None = None,
    ) -> None:
        self.parameters = parameters if parameters is not None else MemoryParameters()
        self._chunks: list[Chunk] = list(chunks)

    @property
    def chunks(self) -> tuple[Chunk, ...]:
        """Return stored chunks in insertion order."""

        return tuple(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def add(self, cur_time: float, **slots: Any) -> Chunk:
        """Encode a chunk at ``cur_time``.

        An existing chunk with identical slots is strengthened (one more use);
        otherwise a new chunk is created.

        Returns
        -------
        Chunk
            The created or strengthened chunk.
        """

        for chunk in self._chunks:
            if chunk.slots == slots:
                chunk.record_use(cur_time, n_recent=self.parameters.n_recent)
                return chunk

        chunk = Chunk(slots=dict(slots), time_created=float(cur_time), recent=[float(cur_time)])
        self._chunks.append(chunk)
        return chunk

    def get(self, **request: Any) -> list[Chunk]:
        """Return chunks whose slots match every requested value."""

        return [chunk for chunk in self._chunks if chunk.matches(**request)]

    def retrieval_set(self, **request: Any) -> list[Chunk]:
        """Return chunks competing for ``request``.

        With partial matching every chunk competes; otherwise only exact
        matches do.
        """

        if self.parameters.partial_matching:
            return list(self._chunks)
        return self.get(**request)

    def base_level(self, chunk: Chunk, cur_time: float) -> float:
        """Return the hybrid base-level approximation for ``chunk``.

        ``log( sum_j t_j^-d + (N - k)(L^(1-d) - t_k^(1-d)) / ((1 - d)(L - t_k)) )``
        where ``t_j`` are lags of the ``k`` retained uses, ``t_k`` the oldest of
        them, ``N`` the number of uses and ``L`` the chunk lifetime.

        Raises
        ------
        ValueError
            If a retained use does not strictly precede ``cur_time``.
        """

        d = self.parameters.decay
        lags = float(cur_time) - np.asarray(chunk.recent, dtype=float)
        if np.any(lags <= 0.0):
            raise ValueError("chunk use times must precede the current time")

        total = float(np.sum(lags ** (-d)))
        n_exact = len(chunk.recent)
        if chunk.n_uses > n_exact:
            lifetime = chunk.lifetime(cur_time)
            oldest_lag = float(lags[0])
            if lifetime <= oldest_lag:
                raise ValueError("chunk lifetime must exceed the lag of its oldest retained use")
            total += (
                (chunk.n_uses - n_exact)
                * (lifetime ** (1.0 - d) - oldest_lag ** (1.0 - d))
                / ((1.0 - d) * (lifetime - oldest_lag))
            )
        return float(log(total))

    def activation(
        self,
        chunk: Chunk,
        cur_time: float,
        request: dict[str, Any] | None = None,
        *,
        rng: np.random.Generator | None = None,
    ) -> float:
        """Return the activation of ``chunk``; noisy when ``rng`` is given."""

        params = self.parameters
        value = params.base_level_constant
        if params.base_level_learning:
            value += self.base_level(chunk, cur_time)
        if params.partial_matching and request:
            value -= params.mismatch_penalty * chunk.n_mismatches(**request)
        if rng is not None:
            value += float(rng.logistic(loc=0.0, scale=params.noise_scale))
        return float(value)

    def activations(self, cur_time: float, **request: Any) -> np.ndarray:
        """Return mean activations over the retrieval set of ``request``."""

        return np.asarray(
            [self.activation(chunk, cur_time, request) for chunk in self.retrieval_set(**request)],
            dtype=float,
        )

    def retrieval_probabilities(
        self,
        cur_time: float,
        **request: Any,
    ) -> tuple[np.ndarray, list[Chunk]]:
        """Return retrieval probabilities for ``request``.

        Returns
        -------
        tuple[numpy.ndarray, list[Chunk]]
            Probabilities for each chunk in the retrieval set followed by a
            final entry for retrieval failure, and the retrieval-set chunks.
            The failure competes with mean activation ``retrieval_threshold``;
            all terms share the temperature ``s * sqrt(2)``.
        """

        chunks = self.retrieval_set(**request)
        means = [self.activation(chunk, cur_time, request) for chunk in chunks]
        means.append(self.parameters.retrieval_threshold)
        logits = np.asarray(means, dtype=float) / self.parameters.retrieval_temperature
        logits -= float(np.max(logits))
        weights = np.exp(logits)
        return weights / float(np.sum(weights)), chunks

    def retrieve(
        self,
        cur_time: float,
        rng: np.random.Generator,
        **request: Any,
    ) -> tuple[Chunk | None, float]:
        """Retrieve the most active chunk above threshold.

        Returns
        -------
        tuple[Chunk | None, float]
            Retrieved chunk (``None`` on failure) and its noisy activation. On
            failure the activation is ``retrieval_threshold``.
        """

        best: Chunk | None = None
        best_activation = float(-np.inf)
        for chunk in self.retrieval_set(**request):
            value = self.activation(chunk, cur_time, request, rng=rng)
            if value > best_activation:
                best, best_activation = chunk, value

        if best is None or best_activation < self.parameters.retrieval_threshold:
            return None, float(self.parameters.retrieval_threshold)
        return best, best_activation

    def retrieval_time(self, activation: float) -> float:
        """Return ``F * exp(-activation)``."""

        return float(self.parameters.latency_factor * np.exp(-float(activation)))


def chunk_slot_values(chunks: Sequence[Chunk], slot: str) -> np.ndarray:
    """Return one slot's values across ``chunks`` as a float array."""

    return np.asarray([float(chunk.slots[slot]) for chunk in chunks], dtype=float)


__all__ = ["DeclarativeMemory", "MemoryParameters", "chunk_slot_values"]
