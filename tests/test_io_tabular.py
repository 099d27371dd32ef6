"""Tests for tabular CSV I/O helpers."""

from __future__ import annotations

import pytest

from ibl_lnr.core.data import ChoiceBlock, ChoiceTrial, RetrievalTrial
from ibl_lnr.io import (
    read_choice_blocks_csv,
    read_retrieval_trials_csv,
    write_choice_blocks_csv,
    write_retrieval_trials_csv,
)


def _block(block_id: str | int | None, choices: list[str]) -> ChoiceBlock:
    return ChoiceBlock(
        options=("a", "b"),
        trials=tuple(
            ChoiceTrial(trial_index=index, choice=choice, outcome=0.1 * index - 1.0)
            for index, choice in enumerate(choices)
        ),
        block_id=block_id,
    )


def test_choice_blocks_csv_roundtrip(tmp_path) -> None:
    """Blocks keep ids, options, choices and exact outcomes."""

    blocks = (_block(0, ["a", "b", "b"]), _block("p2", ["b", "a"]), _block(None, ["a"]))

    path = write_choice_blocks_csv(blocks, tmp_path / "out" / "choices.csv")
    loaded = read_choice_blocks_csv(path)

    assert path.exists()
    assert [block.block_id for block in loaded] == [0, "p2", None]
    assert [block.choices for block in loaded] == [("a", "b", "b"), ("b", "a"), ("a",)]
    assert loaded[0].options == ("a", "b")
    assert loaded[0].trials[2].outcome == blocks[0].trials[2].outcome


def test_retrieval_trials_csv_roundtrip(tmp_path) -> None:
    """Retrieval trials keep responses and response times."""

    trials = (RetrievalTrial(0, 0, 0.61), RetrievalTrial(1, 1, 1.4375))

    loaded = read_retrieval_trials_csv(write_retrieval_trials_csv(trials, tmp_path / "rt.csv"))

    assert loaded == trials


def test_read_choice_blocks_rejects_missing_columns(tmp_path) -> None:
    """All choice columns are required."""

    path = tmp_path / "bad.csv"
    path.write_text("block_id_json,trial_index,choice\n0,0,a\n", encoding="utf-8")

    with pytest.raises(ValueError, match="missing required columns"):
        read_choice_blocks_csv(path)


def test_read_choice_blocks_rejects_malformed_values(tmp_path) -> None:
    """Malformed numbers name the offending row and column."""

    path = tmp_path / "bad.csv"
    path.write_text(
        'block_id_json,options_json,trial_index,choice,outcome\n0,"[""a"", ""b""]",zero,a,1.0\n',
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="row 0: trial_index"):
        read_choice_blocks_csv(path)


def test_read_choice_blocks_rejects_inconsistent_options(tmp_path) -> None:
    """Every row of a block must list the same options."""

    path = tmp_path / "bad.csv"
    path.write_text(
        "block_id_json,options_json,trial_index,choice,outcome\n"
        '0,"[""a"", ""b""]",0,a,1.0\n'
        '0,"[""a"", ""c""]",1,a,1.0\n',
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="options differ"):
        read_choice_blocks_csv(path)


def test_empty_inputs_raise(tmp_path) -> None:
    """Writers need data and readers need at least one trial."""

    path = tmp_path / "empty.csv"
    path.write_text("block_id_json,options_json,trial_index,choice,outcome\n", encoding="utf-8")

    with pytest.raises(ValueError, match="blocks"):
        write_choice_blocks_csv([], tmp_path / "x.csv")
    with pytest.raises(ValueError, match="trials"):
        write_retrieval_trials_csv([], tmp_path / "y.csv")
    with pytest.raises(ValueError, match="no trials"):
        read_choice_blocks_csv(path)
