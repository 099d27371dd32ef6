"""CSV I/O for choice blocks and retrieval trials."""

from __future__ import annotations

import csv
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ibl_lnr.core.data import ChoiceBlock, ChoiceTrial, RetrievalTrial

_CHOICE_COLUMNS = (
    "block_id_json",
    "options_json",
    "trial_index",
    "choice",
    "outcome",
)

_RETRIEVAL_COLUMNS = (
    "trial_index",
    "response",
    "rt",
)


def write_choice_blocks_csv(blocks: Sequence[ChoiceBlock], path: str | Path) -> Path:
    """Write choice blocks to one long-format CSV file.

    Parameters
    ----------
    blocks : Sequence[ChoiceBlock]
        Blocks to write; one row per trial.
    path : str | pathlib.Path
        Destination CSV path.

    Returns
    -------
    pathlib.Path
        Output CSV path.

    Raises
    ------
    ValueError
        If no blocks are provided.
    """

    if not blocks:
        raise ValueError("blocks must not be empty")

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(_CHOICE_COLUMNS))
        writer.writeheader()
        for block in blocks:
            block_id_json = json.dumps(block.block_id)
            options_json = json.dumps(list(block.options))
            for trial in block.trials:
                writer.writerow(
                    {
                        "block_id_json": block_id_json,
                        "options_json": options_json,
                        "trial_index": trial.trial_index,
                        "choice": trial.choice,
                        "outcome": repr(float(trial.outcome)),
                    }
                )
    return output_path


def read_choice_blocks_csv(path: str | Path) -> tuple[ChoiceBlock, ...]:
    """Read choice blocks written by :func:`write_choice_blocks_csv`.

    Rows are grouped by ``block_id_json`` in order of first appearance.

    Raises
    ------
    ValueError
        If columns are missing, a value is malformed, or option lists differ
        within one block.
    """

    input_path = Path(path)
    grouped: dict[str, dict[str, Any]] = {}
    with input_path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        _require_columns(reader.fieldnames, required=_CHOICE_COLUMNS)
        for row_index, raw in enumerate(reader):
            key = str(raw["block_id_json"])
            options = tuple(str(item) for item in _load_json(raw["options_json"], "options_json", row_index))
            entry = grouped.setdefault(
                key,
                {
                    "block_id": _load_json(key, "block_id_json", row_index),
                    "options": options,
                    "trials": [],
                },
            )
            if entry["options"] != options:
                raise ValueError(f"row {row_index}: options differ within block {key}")
            entry["trials"].append(
                ChoiceTrial(
                    trial_index=_parse_int(raw["trial_index"], "trial_index", row_index),
                    choice=str(raw["choice"]),
                    outcome=_parse_float(raw["outcome"], "outcome", row_index),
                )
            )

    if not grouped:
        raise ValueError(f"{input_path} contains no trials")
    return tuple(
        ChoiceBlock(options=entry["options"], trials=tuple(entry["trials"]), block_id=entry["block_id"])
        for entry in grouped.values()
    )


def write_retrieval_trials_csv(trials: Sequence[RetrievalTrial], path: str | Path) -> Path:
    """Write retrieval trials to CSV."""

    if not trials:
        raise ValueError("trials must not be empty")

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(_RETRIEVAL_COLUMNS))
        writer.writeheader()
        for trial in trials:
            writer.writerow(
                {
                    "trial_index": trial.trial_index,
                    "response": trial.response,
                    "rt": repr(float(trial.rt)),
                }
            )
    return output_path


def read_retrieval_trials_csv(path: str | Path) -> tuple[RetrievalTrial, ...]:
    """Read retrieval trials from CSV."""

    input_path = Path(path)
    with input_path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        _require_columns(reader.fieldnames, required=_RETRIEVAL_COLUMNS)
        return tuple(
            RetrievalTrial(
                trial_index=_parse_int(raw["trial_index"], "trial_index", row_index),
                response=_parse_int(raw["response"], "response", row_index),
                rt=_parse_float(raw["rt"], "rt", row_index),
            )
            for row_index, raw in enumerate(reader)
        )


def _load_json(raw: Any, column: str, row_index: int) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ValueError(f"row {row_index}: {column} is not valid JSON") from exc


def _parse_int(raw: Any, column: str, row_index: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"row {row_index}: {column} must be an integer") from exc


def _parse_float(raw: Any, column: str, row_index: int) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"row {row_index}: {column} must be a number") from exc


def _require_columns(fieldnames: Sequence[str] | None, *, required: tuple[str, ...]) -> None:
    """Require all expected columns to exist in the CSV header."""

    if fieldnames is None:
        raise ValueError("CSV file must include a header row")
    missing = [name for name in required if name not in set(fieldnames)]
    if missing:
        raise ValueError(f"CSV file missing required columns: {missing}")


__all__ = [
    "read_choice_blocks_csv",
    "read_retrieval_trials_csv",
    "write_choice_blocks_csv",
    "write_retrieval_trials_csv",
]
