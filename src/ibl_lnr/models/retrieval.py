"""ACT-R memory retrieval expressed as a Lognormal Race.

Each eligible chunk is an accumulator whose finishing time is
``Lognormal(-mu_m, sigma)`` with ``mu_m`` its mean activation, so retrieval
time ``exp(-a_m)`` is recovered when activation noise is Gaussian. Retrieval
failure is one more accumulator whose mean activation is the retrieval
threshold ``tau``. Standard ACT-R instead uses logistic noise and a
deterministic deadline; :meth:`RetrievalRaceModel.simulate` can generate from
either process.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import pi, sqrt
from typing import Any

import numpy as np

from ibl_lnr.core.data import RetrievalTrial
from ibl_lnr.distributions import LognormalRace
from ibl_lnr.memory import Chunk, DeclarativeMemory, MemoryParameters

RETRIEVED = 0
FAILURE = 1


def lognormal_sigma(noise_scale: float) -> float:
    """Return ``s * pi / sqrt(3)``, the normal scale matching logistic noise ``s``."""

    if noise_scale <= 0.0:
        raise ValueError("noise_scale must be > 0")
    return float(noise_scale * pi / sqrt(3.0))


@dataclass(frozen=True, slots=True)
class RetrievalRaceConfig:
    """Parameters of a single-chunk retrieval task.

    Parameters
    ----------
    base_level_constant : float
        Mean activation of the target chunk.
    retrieval_threshold : float
        Mean activation of the failure accumulator.
    noise_scale : float
        Logistic activation-noise scale ``s``.
    non_decision_time : float
        Perceptual-motor time ``t_er``.
    """

    base_level_constant: float = 1.5
    retrieval_threshold: float = 0.5
    noise_scale: float = 0.3
    non_decision_time: float = 0.4

    def __post_init__(self) -> None:
        if self.noise_scale <= 0.0:
            raise ValueError("noise_scale must be > 0")
        if self.non_decision_time < 0.0:
            raise ValueError("non_decision_time must be >= 0")


class RetrievalRaceModel:
    """Retrieval of one chunk competing against retrieval failure.

    Parameters
    ----------
    config : RetrievalRaceConfig | None, optional
        Parameters. Defaults are used when ``None``.
    """

    def __init__(self, config: RetrievalRaceConfig | None = None) -> None:
        self.config = config if config is not None else RetrievalRaceConfig()

    def race(self) -> LognormalRace:
        """Return the race with accumulator ``0`` = retrieved, ``1`` = failure."""

        cfg = self.config
        return LognormalRace(
            mu=(-cfg.base_level_constant, -cfg.retrieval_threshold),
            sigma=lognormal_sigma(cfg.noise_scale),
            non_decision_time=cfg.non_decision_time,
        )

    def log_likelihood(self, trials: tuple[RetrievalTrial, ...] | list[RetrievalTrial]) -> float:
        """Return the race log-likelihood of observed responses."""

        race = self.race()
        return race.loglikelihood([trial.response for trial in trials], [trial.rt for trial in trials])

    def simulate(
        self,
        n_trials: int,
        rng: np.random.Generator,
        *,
        deterministic_threshold: bool = False,
    ) -> tuple[RetrievalTrial, ...]:
        """Simulate retrieval responses.

        Parameters
        ----------
        n_trials : int
            Number of retrieval attempts.
        rng : numpy.random.Generator
            Random generator.
        deterministic_threshold : bool, optional
            If ``True``, use standard ACT-R: logistic activation noise, a
            chunk is retrieved when its activation exceeds ``tau``, and a
            failure takes ``exp(-tau)``. Otherwise sample from the race.

        Returns
        -------
        tuple[RetrievalTrial, ...]
            One record per attempt.
        """

        if n_trials <= 0:
            raise ValueError("n_trials must be > 0")

        if not deterministic_threshold:
            responses, rts = self.race().sample(rng, size=n_trials)
            return tuple(
                RetrievalTrial(trial_index=index, response=int(response), rt=float(rt))
                for index, (response, rt) in enumerate(zip(responses, rts, strict=True))
            )

        cfg = self.config
        memory = DeclarativeMemory(
            [Chunk(slots={})],
            MemoryParameters(
                base_level_constant=cfg.base_level_constant,
                noise_scale=cfg.noise_scale,
                retrieval_threshold=cfg.retrieval_threshold,
            ),
        )
        trials: list[RetrievalTrial] = []
        for index in range(n_trials):
            chunk, activation = memory.retrieve(float(index + 1), rng)
            response = FAILURE if chunk is None else RETRIEVED
            rt = memory.retrieval_time(activation) + cfg.non_decision_time
            trials.append(RetrievalTrial(trial_index=index, response=response, rt=rt))
        return tuple(trials)


def lognormal_race_from_memory(
    memory: DeclarativeMemory,
    cur_time: float,
    *,
    non_decision_time: float = 0.0,
    include_failure: bool = False,
    **request: Any,
) -> tuple[LognormalRace, list[Chunk]]:
    """Build the race among chunks competing for ``request``.

    Parameters
    ----------
    memory : DeclarativeMemory
        Memory whose mean activations define the accumulators.
    cur_time : float
        Current time used by base-level learning.
    non_decision_time : float, optional
        Perceptual-motor time added to finishing times.
    include_failure : bool, optional
        Append a failure accumulator at the retrieval threshold.
    **request
        Retrieval request slots.

    Returns
    -------
    tuple[LognormalRace, list[Chunk]]
        The race (accumulators in retrieval-set order, failure last) and the
        competing chunks.
    """

    chunks = memory.retrieval_set(**request)
    means = [memory.activation(chunk, cur_time, request) for chunk in chunks]
    if include_failure:
        means.append(memory.parameters.retrieval_threshold)
    if not means:
        raise ValueError("retrieval request matches no chunk and failure is excluded")
    race = LognormalRace(
        mu=tuple(-float(value) for value in means),
        sigma=lognormal_sigma(memory.parameters.noise_scale),
        non_decision_time=non_decision_time,
    )
    return race, chunks


__all__ = [
    "FAILURE",
    "RETRIEVED",
    "RetrievalRaceConfig",
    "RetrievalRaceModel",
    "lognormal_race_from_memory",
    "lognormal_sigma",
]
