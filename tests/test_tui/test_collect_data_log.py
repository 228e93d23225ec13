"""Tests for collect_data.py log parameter and file output."""

from unittest.mock import MagicMock

import pandas as pd

from src.collect_data import (
    STANDINGS_CSV,
    collect_all,
    collect_results,
    collect_standings,
    standings_frame,
)
from src.league_math import Leaderboards


def test_collect_results_accepts_log(service):
    """collect_results(log=mock_log) invokes mock_log."""
    mock_log = MagicMock()
    results = collect_results(service, log=mock_log)
    assert results.current_week == 6
    calls = [str(c) for c in mock_log.call_args_list]
    assert any("scoreboard" in c.lower() for c in calls)
    assert any("In progress: MIA @ BUF" in c for c in calls)
    assert (service.data_dir / "results.json").exists()


def test_collect_results_defaults_to_print(service, capsys):
    """Without log, collect_results uses print."""
    collect_results(service)
    captured = capsys.readouterr()
    assert "scoreboard" in captured.out.lower()


def test_collect_standings_writes_csv(service):
    lines = []
    collect_standings(service, log=lines.append)
    df = pd.read_csv(service.data_dir / STANDINGS_CSV)
    assert list(df["player_id"]) == ["hot", "cold"]
    assert list(df["loss_rank"]) == [2, 1]
    assert df.loc[0, "teams"] == "KC, DET, BUF, NE"
    assert "  Most wins: Hot Hand (14)" in lines
    assert "  Most losses: Cold Feet (21)" in lines


def test_standings_frame_empty():
    df = standings_frame(Leaderboards(wins=[], losses=[]))
    assert df.empty


def test_collect_all(service):
    lines = []
    out = collect_all(service, log=lines.append)
    assert out["leaderboards"].wins[0].player_id == "hot"
    assert out["narrative"].week == 6
    assert not out["data_quality"].all_passed  # fixture scoreboard has 8 of 32 teams
    assert any("[FAIL] All 32 NFL teams have records" in line for line in lines)
    assert any("[PASS] Every drafted team has a record" in line for line in lines)
