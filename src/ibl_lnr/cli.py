"""Command-line entry point: ``ibl-lnr simulate`` and ``ibl-lnr fit``."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from ibl_lnr.analysis import a_rate, posterior_a_rates
from ibl_lnr.core import load_config_mapping
from ibl_lnr.core.config import require_mapping, require_sequence, validate_allowed_keys
from ibl_lnr.generators import simulate_gamble_set, simulate_retrieval_trials
from ibl_lnr.inference import (
    MultiChainPosteriorResult,
    convergence_table,
    fit_config_from_mapping,
    fit_posterior_from_config,
    summarize_posterior,
    write_posterior_summary_csv,
)
from ibl_lnr.inference.config import FitConfig
from ibl_lnr.io import (
    read_choice_blocks_csv,
    read_retrieval_trials_csv,
    write_choice_blocks_csv,
    write_retrieval_trials_csv,
)
from ibl_lnr.models import InstanceBasedLearningConfig, RetrievalRaceConfig
from ibl_lnr.problems import GambleProblem, default_gamble_set, gamble_problem_from_config

logger = logging.getLogger(__name__)


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Run the ``ibl-lnr`` command.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        CLI argument list. When ``None``, process arguments are used.

    Returns
    -------
    int
        Exit code (``0`` on success).
    """

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "simulate":
        return _run_simulate(args)
    return _run_fit(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ibl-lnr",
        description="Simulate and fit Instance-Based Learning and Lognormal Race models.",
    )
    parser.add_argument(
        "--log-level",
        choices=("debug", "info", "warning", "error"),
        default="warning",
        help="Logging verbosity.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser("simulate", help="Simulate a dataset to CSV.")
    simulate.add_argument("--model", choices=("ibl", "retrieval"), required=True)
    simulate.add_argument("--output-csv", required=True, help="Destination CSV path.")
    simulate.add_argument("--n-trials", type=int, default=50, help="Trials per block.")
    simulate.add_argument("--seed", type=int, default=None, help="Random seed.")
    simulate.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Model parameter override; repeatable.",
    )
    simulate.add_argument(
        "--gambles",
        default=None,
        help="JSON/YAML file with a 'gambles' list (ibl only). Defaults to the built-in set.",
    )
    simulate.add_argument(
        "--deterministic-threshold",
        action="store_true",
        help="Generate retrieval data with logistic noise and a fixed threshold.",
    )

    fit = subparsers.add_parser("fit", help="Sample the posterior of a CSV dataset.")
    fit.add_argument("--config", required=True, help="Path to fit JSON or YAML config.")
    fit.add_argument("--input-csv", required=True, help="Path to input CSV file.")
    fit.add_argument("--output-dir", default=".", help="Directory for outputs.")
    fit.add_argument("--prefix", default="fit", help="Output filename prefix.")
    fit.add_argument(
        "--predictive-draws",
        type=int,
        default=0,
        help="Posterior predictive a-rate draws (ibl only).",
    )
    return parser


def _run_simulate(args: argparse.Namespace) -> int:
    rng = np.random.default_rng(args.seed)
    overrides = _parse_param_overrides(args.param)
    output_path = Path(args.output_csv)

    if args.model == "ibl":
        if args.deterministic_threshold:
            raise ValueError("--deterministic-threshold applies to retrieval only")
        gamble_set = _load_gamble_set(args.gambles) if args.gambles is not None else default_gamble_set()
        config = InstanceBasedLearningConfig(**_known_fields(InstanceBasedLearningConfig, overrides))
        blocks = simulate_gamble_set(gamble_set, n_trials=args.n_trials, config=config, rng=rng)
        write_choice_blocks_csv(blocks, output_path)
        print(f"Simulation complete: model=ibl, blocks={len(blocks)}, trials={args.n_trials}")
    else:
        if args.gambles is not None:
            raise ValueError("--gambles applies to ibl only")
        trials = simulate_retrieval_trials(
            RetrievalRaceConfig(**_known_fields(RetrievalRaceConfig, overrides)),
            n_trials=args.n_trials,
            rng=rng,
            deterministic_threshold=bool(args.deterministic_threshold),
        )
        write_retrieval_trials_csv(trials, output_path)
        print(f"Simulation complete: model=retrieval, trials={len(trials)}")

    print(f"Output CSV: {output_path}")
    return 0


def _run_fit(args: argparse.Namespace) -> int:
    config = fit_config_from_mapping(load_config_mapping(args.config))
    data: Any
    if config.model == "ibl":
        data = read_choice_blocks_csv(args.input_csv)
    else:
        data = read_retrieval_trials_csv(args.input_csv)
    logger.info("fitting %s to %s", config.model, args.input_csv)

    result = fit_posterior_from_config(data, config)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    table = convergence_table(result)
    csv_path = write_posterior_summary_csv(
        summarize_posterior(result.posterior_samples),
        output_dir / f"{args.prefix}_posterior.csv",
        extra_columns={
            "ess": {str(row["parameter_name"]): float(row["ess"]) for row in table},
            "rhat": {str(row["parameter_name"]): float(row["rhat"]) for row in table},
        },
    )

    summary = _fit_result_summary(result, config)
    summary["convergence"] = table
    if args.predictive_draws > 0:
        if config.model != "ibl":
            raise ValueError("--predictive-draws applies to ibl only")
        summary["posterior_predictive"] = _predictive_a_rates(data, config, result, args.predictive_draws)

    summary_path = output_dir / f"{args.prefix}_summary.json"
    summary_path.write_text(json.dumps(summary, indent=2, sort_keys=True), encoding="utf-8")

    print(f"Fit complete: model={config.model}, chains={result.n_chains}")
    print(f"Posterior CSV: {csv_path}")
    print(f"Summary JSON: {summary_path}")
    return 0


def _fit_result_summary(result: MultiChainPosteriorResult, config: FitConfig) -> dict[str, Any]:
    candidate = result.map_candidate
    return {
        "model": config.model,
        "fixed": dict(config.fixed),
        "n_chains": result.n_chains,
        "n_draws": result.posterior_samples.n_draws,
        "parameter_names": list(result.parameter_names),
        "acceptance_rates": list(result.acceptance_rates),
        "map_log_likelihood": float(candidate.log_likelihood),
        "map_log_prior": float(candidate.log_prior),
        "map_log_posterior": float(candidate.log_posterior),
        "map_params": {key: float(value) for key, value in candidate.params.items()},
    }


def _predictive_a_rates(
    blocks: Sequence[Any],
    config: FitConfig,
    result: MultiChainPosteriorResult,
    n_draws: int,
) -> dict[str, Any]:
    gamble_set = config.options if config.options else default_gamble_set()
    if len(gamble_set) != len(blocks):
        raise ValueError(
            f"posterior predictive needs one gamble problem per block: "
            f"{len(gamble_set)} problems for {len(blocks)} blocks"
        )
    n_trials = max(block.n_trials for block in blocks)
    rates = posterior_a_rates(
        result.posterior_samples,
        gamble_set,
        n_trials=n_trials,
        n_draws=n_draws,
        rng=np.random.default_rng(config.sampler.random_seed),
        fixed=config.fixed,
    )
    return {
        "n_draws": int(n_draws),
        "observed_a_rate": [a_rate(block) for block in blocks],
        "predicted_a_rate_mean": [float(value) for value in np.mean(rates, axis=0)],
        "predicted_a_rate_q025": [float(value) for value in np.quantile(rates, 0.025, axis=0)],
        "predicted_a_rate_q975": [float(value) for value in np.quantile(rates, 0.975, axis=0)],
    }


def _parse_param_overrides(raw_items: Sequence[str]) -> dict[str, float]:
    overrides: dict[str, float] = {}
    for item in raw_items:
        name, sep, value = str(item).partition("=")
        if not sep or not name.strip():
            raise ValueError(f"--param expects NAME=VALUE, got {item!r}")
        try:
            overrides[name.strip()] = float(value)
        except ValueError as exc:
            raise ValueError(f"--param {name.strip()} must be a number") from exc
    return overrides


def _known_fields(config_type: type, overrides: dict[str, float]) -> dict[str, float]:
    allowed = {item.name for item in fields(config_type)}
    unknown = sorted(set(overrides) - allowed)
    if unknown:
        raise ValueError(f"unknown --param names for {config_type.__name__}: {unknown}")
    return overrides


def _load_gamble_set(path: str | Path) -> tuple[GambleProblem, ...]:
    raw = load_config_mapping(path)
    validate_allowed_keys(raw, field_name="gambles config", allowed_keys=("gambles",))
    items = require_sequence(raw.get("gambles"), field_name="gambles")
    if not items:
        raise ValueError("gambles must contain at least one problem")
    return tuple(
        gamble_problem_from_config(require_mapping(item, field_name=f"gambles[{index}]"))
        for index, item in enumerate(items)
    )


def main() -> None:
    """Execute the CLI and exit with its return code."""

    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()


__all__ = ["main", "run_cli"]
