"""Tests for the ``ibl-lnr`` simulate and fit commands."""

from __future__ import annotations

import csv
import json

import pytest

from ibl_lnr.cli import run_cli
from ibl_lnr.io import read_choice_blocks_csv, read_retrieval_trials_csv

_IBL_CONFIG_YAML = """\
model: ibl
fixed:
  noise_scale: 0.25
priors:
  decay: {distribution: beta, alpha: 10, beta: 10}
  decision_noise: {distribution: truncated_normal, mean: 0.2, std: 0.2, lower: 0}
sampler:
  initial_params: {decay: 0.5, decision_noise: 0.3}
  n_samples: 20
  n_warmup: 5
  n_chains: 2
  proposal_scales: {decay: 0.05, decision_noise: 0.05}
  bounds: {decay: [0, 1], decision_noise: [0, null]}
  random_seed: 1
"""


def test_simulate_then_fit_ibl(tmp_path, capsys) -> None:
    """Simulated IBL data can be fitted with a YAML config."""

    data_path = tmp_path / "choices.csv"
    code = run_cli(
        [
            "simulate",
            "--model",
            "ibl",
            "--output-csv",
            str(data_path),
            "--n-trials",
            "15",
            "--seed",
            "4",
            "--param",
            "decay=0.4",
            "--param",
            "noise_scale=0.25",
        ]
    )
    assert code == 0
    assert "Simulation complete: model=ibl, blocks=3, trials=15" in capsys.readouterr().out
    assert [block.n_trials for block in read_choice_blocks_csv(data_path)] == [15, 15, 15]

    config_path = tmp_path / "fit.yaml"
    config_path.write_text(_IBL_CONFIG_YAML, encoding="utf-8")
    code = run_cli(
        [
            "fit",
            "--config",
            str(config_path),
            "--input-csv",
            str(data_path),
            "--output-dir",
            str(tmp_path / "out"),
            "--prefix",
            "ibl",
            "--predictive-draws",
            "3",
        ]
    )
    captured = capsys.readouterr()

    assert code == 0
    assert "Fit complete: model=ibl, chains=2" in captured.out
    summary = json.loads((tmp_path / "out" / "ibl_summary.json").read_text(encoding="utf-8"))
    assert summary["n_draws"] == 40
    assert summary["parameter_names"] == ["decay", "decision_noise"]
    assert summary["fixed"] == {"noise_scale": 0.25}
    assert set(summary["map_params"]) == {"decay", "decision_noise"}
    assert [row["parameter_name"] for row in summary["convergence"]] == ["decay", "decision_noise"]
    assert len(summary["posterior_predictive"]["observed_a_rate"]) == 3
    assert len(summary["posterior_predictive"]["predicted_a_rate_mean"]) == 3

    with (tmp_path / "out" / "ibl_posterior.csv").open("r", encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert [row["parameter_name"] for row in rows] == ["decay", "decision_noise"]
    assert {"ess", "rhat", "q0.025", "q0.975"} <= set(rows[0])


def test_simulate_then_fit_retrieval(tmp_path, capsys) -> None:
    """Retrieval data round-trips through CSV into a race fit."""

    data_path = tmp_path / "rt.csv"
    assert run_cli(
        [
            "simulate",
            "--model",
            "retrieval",
            "--output-csv",
            str(data_path),
            "--n-trials",
            "40",
            "--seed",
            "2",
            "--deterministic-threshold",
        ]
    ) == 0
    assert len(read_retrieval_trials_csv(data_path)) == 40

    config = {
        "model": "retrieval_race",
        "fixed": {"noise_scale": 0.3, "non_decision_time": 0.2},
        "priors": {
            "base_level_constant": {"distribution": "normal", "mean": 1.0, "std": 1.0},
            "retrieval_threshold": {"distribution": "normal", "mean": 0.0, "std": 1.0},
        },
        "sampler": {
            "initial_params": {"base_level_constant": 1.0, "retrieval_threshold": 0.0},
            "n_samples": 10,
            "n_warmup": 5,
            "n_chains": 1,
            "random_seed": 5,
        },
    }
    config_path = tmp_path / "fit.json"
    config_path.write_text(json.dumps(config), encoding="utf-8")

    code = run_cli(
        ["fit", "--config", str(config_path), "--input-csv", str(data_path), "--output-dir", str(tmp_path)]
    )
    captured = capsys.readouterr()

    assert code == 0
    assert "Fit complete: model=retrieval_race, chains=1" in captured.out
    summary = json.loads((tmp_path / "fit_summary.json").read_text(encoding="utf-8"))
    assert summary["model"] == "retrieval_race"
    assert "posterior_predictive" not in summary


def test_simulate_with_gamble_file(tmp_path, capsys) -> None:
    """Custom gamble sets produce one block per problem."""

    gambles_path = tmp_path / "gambles.yaml"
    gambles_path.write_text(
        "gambles:\n  - {safe: 1, risky: {outcomes: [4, 0], probabilities: [0.25, 0.75]}}\n",
        encoding="utf-8",
    )
    output_path = tmp_path / "choices.csv"

    code = run_cli(
        [
            "simulate",
            "--model",
            "ibl",
            "--output-csv",
            str(output_path),
            "--n-trials",
            "5",
            "--gambles",
            str(gambles_path),
        ]
    )

    (block,) = read_choice_blocks_csv(output_path)
    assert code == 0
    assert block.options == ("safe", "risky")
    assert "blocks=1" in capsys.readouterr().out


@pytest.mark.parametrize(
    ("argv", "match"),
    [
        (["--model", "ibl", "--param", "temperature=1"], "unknown --param"),
        (["--model", "ibl", "--param", "decay"], "NAME=VALUE"),
        (["--model", "ibl", "--deterministic-threshold"], "retrieval only"),
        (["--model", "retrieval", "--param", "decay=0.5"], "RetrievalRaceConfig"),
    ],
)
def test_simulate_rejects_invalid_options(tmp_path, argv: list[str], match: str) -> None:
    """Invalid simulate options raise before any output is written."""

    output_path = tmp_path / "out.csv"

    with pytest.raises(ValueError, match=match):
        run_cli(["simulate", "--output-csv", str(output_path), *argv])
    assert not output_path.exists()


def test_predictive_draws_require_ibl(tmp_path) -> None:
    """Posterior predictive a-rates apply to choice data only."""

    data_path = tmp_path / "rt.csv"
    run_cli(["simulate", "--model", "retrieval", "--output-csv", str(data_path), "--n-trials", "10", "--seed", "0"])
    config_path = tmp_path / "fit.yaml"
    config_path.write_text(
        "model: retrieval_race\n"
        "priors:\n  base_level_constant: {distribution: normal, mean: 1.5, std: 1}\n"
        "sampler:\n  initial_params: {base_level_constant: 1.5}\n  n_samples: 5\n  n_warmup: 0\n  n_chains: 1\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="ibl only"):
        run_cli(
            [
                "fit",
                "--config",
                str(config_path),
                "--input-csv",
                str(data_path),
                "--output-dir",
                str(tmp_path),
                "--predictive-draws",
                "2",
            ]
        )
