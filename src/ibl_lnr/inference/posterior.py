"""Posterior draw containers and summaries."""

from __future__ import annotations

import csv
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True, slots=True)
class PosteriorSamples:
    """Posterior draws for named parameters.

    Parameters
    ----------
    parameter_draws : Mapping[str, numpy.ndarray]
        Parameter name to 1D draw array. All arrays share one non-zero
        length.
    """

    parameter_draws: Mapping[str, np.ndarray]

    def __post_init__(self) -> None:
        if not self.parameter_draws:
            raise ValueError("parameter_draws must not be empty")

        draw_count: int | None = None
        for name, values in self.parameter_draws.items():
            array = np.asarray(values, dtype=float)
            if array.ndim != 1:
                raise ValueError(f"parameter {name!r} draws must be 1D")
            if array.size == 0:
                raise ValueError(f"parameter {name!r} draws must not be empty")
            if draw_count is None:
                draw_count = int(array.size)
            elif int(array.size) != draw_count:
                raise ValueError("all parameter draw arrays must have equal length")

    @property
    def n_draws(self) -> int:
        """Return number of posterior draws."""

        first = next(iter(self.parameter_draws.values()))
        return int(np.asarray(first).size)

    @property
    def parameter_names(self) -> tuple[str, ...]:
        """Return sorted parameter names."""

        return tuple(sorted(self.parameter_draws))

    def draws(self, parameter_name: str) -> np.ndarray:
        """Return the draw array for one parameter.

        Raises
        ------
        KeyError
            If ``parameter_name`` is not sampled.
        """

        if parameter_name not in self.parameter_draws:
            available = ", ".join(self.parameter_names)
            raise KeyError(f"unknown parameter {parameter_name!r}; available: {available}")
        return np.asarray(self.parameter_draws[parameter_name], dtype=float)

    def draw(self, index: int) -> dict[str, float]:
        """Return the parameter set of draw ``index``."""

        if index < 0 or index >= self.n_draws:
            raise IndexError(f"draw index {index} out of range for {self.n_draws} draws")
        return {name: float(self.draws(name)[index]) for name in self.parameter_names}

    def mean(self, parameter_name: str) -> float:
        """Return posterior mean for one parameter."""

        return float(np.mean(self.draws(parameter_name)))

    def std(self, parameter_name: str, *, ddof: int = 1) -> float:
        """Return posterior standard deviation for one parameter.

        A single draw has zero spread.
        """

        values = self.draws(parameter_name)
        if values.size <= ddof:
            return 0.0
        return float(np.std(values, ddof=ddof))

    def quantile(self, parameter_name: str, q: float) -> float:
        """Return posterior quantile for one parameter."""

        return float(np.quantile(self.draws(parameter_name), q))

    @classmethod
    def concatenate(cls, samples: Sequence["PosteriorSamples"]) -> "PosteriorSamples":
        """Pool draws from several samples with identical parameter names."""

        if not samples:
            raise ValueError("samples must not be empty")
        names = samples[0].parameter_names
        for item in samples[1:]:
            if item.parameter_names != names:
                raise ValueError("all samples must share identical parameter names")
        return cls(
            parameter_draws={
                name: np.concatenate([item.draws(name) for item in samples])
                for name in names
            }
        )


@dataclass(frozen=True, slots=True)
class PosteriorParameterSummary:
    """Posterior summary statistics for one parameter.

    Parameters
    ----------
    parameter_name : str
        Parameter identifier.
    mean : float
        Posterior mean.
    std : float
        Posterior standard deviation.
    quantiles : dict[float, float]
        Quantile values keyed by probability.
    """

    parameter_name: str
    mean: float
    std: float
    quantiles: dict[float, float]


@dataclass(frozen=True, slots=True)
class PosteriorSummary:
    """Posterior summary for all parameters."""

    n_draws: int
    parameters: tuple[PosteriorParameterSummary, ...]

    def by_name(self) -> dict[str, PosteriorParameterSummary]:
        """Return parameter summaries keyed by parameter name."""

        return {item.parameter_name: item for item in self.parameters}


def summarize_posterior(
    samples: PosteriorSamples,
    *,
    quantiles: Sequence[float] = (0.025, 0.5, 0.975),
) -> PosteriorSummary:
    """Summarize posterior draws with moments and quantiles.

    Parameters
    ----------
    samples : PosteriorSamples
        Posterior draw container.
    quantiles : Sequence[float], optional
        Quantiles to report for each parameter. The default brackets a 95%
        credible interval.

    Returns
    -------
    PosteriorSummary
        Summary statistics for all parameters.
    """

    q_values = tuple(float(value) for value in quantiles)
    for value in q_values:
        if value < 0.0 or value > 1.0:
            raise ValueError("quantiles must lie in [0, 1]")

    parameters = tuple(
        PosteriorParameterSummary(
            parameter_name=name,
            mean=samples.mean(name),
            std=samples.std(name),
            quantiles={value: samples.quantile(name, value) for value in q_values},
        )
        for name in samples.parameter_names
    )
    return PosteriorSummary(n_draws=samples.n_draws, parameters=parameters)


def posterior_summary_records(
    summary: PosteriorSummary,
    *,
    extra_columns: Mapping[str, Mapping[str, float]] | None = None,
) -> list[dict[str, float | str]]:
    """Convert a posterior summary into row records.

    Parameters
    ----------
    summary : PosteriorSummary
        Summary to flatten.
    extra_columns : Mapping[str, Mapping[str, float]] | None, optional
        Additional per-parameter columns, keyed by column name then parameter
        name (for example ``{"rhat": {...}, "ess": {...}}``).
    """

    extras = dict(extra_columns) if extra_columns is not None else {}
    rows: list[dict[str, float | str]] = []
    for parameter in summary.parameters:
        row: dict[str, float | str] = {
            "parameter_name": parameter.parameter_name,
            "mean": float(parameter.mean),
            "std": float(parameter.std),
            "n_draws": float(summary.n_draws),
        }
        for quantile, value in sorted(parameter.quantiles.items()):
            row[f"q{quantile:.3f}"] = float(value)
        for column, by_name in extras.items():
            if parameter.parameter_name in by_name:
                row[column] = float(by_name[parameter.parameter_name])
        rows.append(row)
    return rows


def write_posterior_summary_csv(
    summary: PosteriorSummary,
    path: str | Path,
    *,
    extra_columns: Mapping[str, Mapping[str, float]] | None = None,
) -> Path:
    """Write :func:`posterior_summary_records` rows to CSV.

    Returns
    -------
    pathlib.Path
        Output path.
    """

    rows = posterior_summary_records(summary, extra_columns=extra_columns)
    fieldnames: list[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    return output_path


__all__ = [
    "PosteriorParameterSummary",
    "PosteriorSamples",
    "PosteriorSummary",
    "posterior_summary_records",
    "summarize_posterior",
    "write_posterior_summary_csv",
]
