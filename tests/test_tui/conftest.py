"""Shared fixtures for TUI tests: an offline LeagueService."""

import random
from unittest.mock import MagicMock

import pytest

from src.cache import TTLCache
from src.espn_client import ScoreboardSnapshot
from src.league_math import LastGame, LeagueConfig, Player, TeamRecord, win_fraction
from src.league_service import LeagueService
from src.narrative_client import NarrativeError


def make_team(abbr, wins, losses, result=None):
    last_game = LastGame("2025-10-12", "NYJ", result, "20-10", True) if result else None
    return TeamRecord(abbr, abbr, wins, losses, 0, win_fraction(wins, losses), last_game=last_game)


FIXTURE_TEAMS = {
    "KC": make_team("KC", 5, 1, "W"),
    "DET": make_team("DET", 4, 2, "W"),
    "BUF": make_team("BUF", 3, 3, "W"),
    "NE": make_team("NE", 2, 4, "W"),
    "NYG": make_team("NYG", 1, 5, "L"),
    "CAR": make_team("CAR", 1, 5, "L"),
    "TEN": make_team("TEN", 0, 6, "L"),
    "CLE": make_team("CLE", 1, 5, "L"),
}

FIXTURE_CONFIG = LeagueConfig(
    "Test Pool",
    "2025",
    {
        "hot": Player("hot", "Hot Hand", ["KC", "DET", "BUF", "NE"]),
        "cold": Player("cold", "Cold Feet", ["NYG", "CAR", "TEN", "CLE"]),
    },
)


def fixture_snapshot():
    return ScoreboardSnapshot(week=6, teams=dict(FIXTURE_TEAMS), games_in_progress=["MIA @ BUF"])


@pytest.fixture
def service(tmp_path):
    client = MagicMock()
    client.write_recap.side_effect = NarrativeError("no key")
    return LeagueService(
        config=FIXTURE_CONFIG,
        cache=TTLCache(),
        fetch_scoreboard=fixture_snapshot,
        narrative_client=client,
        data_dir=tmp_path,
        rng=random.Random(3),
    )
