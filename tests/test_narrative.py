"""Tests for weekly recap generation. The text API is always mocked."""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.league_math import (
    LastGame,
    LeagueConfig,
    Player,
    TeamRecord,
    calculate_standings,
    win_fraction,
)
from src.narrative import (
    Narrative,
    analyze_week,
    build_narrative_prompt,
    fallback_narrative,
    generate_weekly_narrative,
)
from src.narrative_client import (
    SYSTEM_PROMPT,
    NarrativeClient,
    NarrativeError,
    NarrativeParseError,
    parse_completion,
    parse_narrative_text,
)

TODAY = date(2025, 10, 14)


def _team(abbr, wins, losses, result=None):
    last_game = LastGame("2025-10-12", "NYJ", result, "20-10", True) if result else None
    return TeamRecord(abbr, abbr, wins, losses, 0, win_fraction(wins, losses), last_game=last_game)


@pytest.fixture
def league():
    teams = {
        "KC": _team("KC", 5, 1, "W"),
        "DET": _team("DET", 4, 2, "W"),
        "NYG": _team("NYG", 1, 5, "L"),
        "CAR": _team("CAR", 2, 4, "L"),
    }
    players = {
        "alex": Player("alex", "Alex", ["KC", "DET"]),
        "blair": Player("blair", "Blair", ["NYG", "CAR"]),
    }
    config = LeagueConfig("Sunday Scaries", "2025", players)
    standings = calculate_standings(players, teams).wins
    return config, teams, standings


def _completion(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


class TestParseBoundary:
    def test_parse_completion(self):
        assert parse_completion(_completion("hello")) == "hello"

    @pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": [{}]}, None])
    def test_parse_completion_bad_shape(self, payload):
        with pytest.raises(NarrativeParseError):
            parse_completion(payload)

    def test_parse_completion_non_text(self):
        with pytest.raises(NarrativeParseError):
            parse_completion(_completion(None))

    def test_parse_text_title_and_body(self):
        draft = parse_narrative_text("## **Chaos Reigns**\n\nFirst para.\n\nSecond para.\n")
        assert draft.title == "Chaos Reigns"
        assert draft.content == "First para.\n\nSecond para."
        assert draft.highlights == []

    def test_parse_text_bullets_become_highlights(self):
        draft = parse_narrative_text("Title\nBody.\n- Alex surges\n* Blair sinks")
        assert draft.highlights == ["Alex surges", "Blair sinks"]
        assert draft.content == "Body."

    def test_parse_text_title_only(self):
        draft = parse_narrative_text("# Just a title")
        assert draft.title == "Just a title"
        assert draft.content == "No narrative content generated."

    def test_parse_text_empty(self):
        with pytest.raises(NarrativeParseError):
            parse_narrative_text("  \n\n ")


class TestNarrativeClient:
    def test_requires_key(self):
        client = NarrativeClient(api_key="")
        assert not client.configured
        with pytest.raises(NarrativeError):
            client.complete("hi")

    def test_request_shape(self):
        resp = MagicMock()
        resp.json.return_value = _completion("Title\nBody")
        client = NarrativeClient(api_key="secret", endpoint="https://example.test/v1/chat", model="m1")
        with patch("src.narrative_client.requests.post", return_value=resp) as mock_post:
            assert client.complete("prompt text") == "Title\nBody"

        args, kwargs = mock_post.call_args
        assert args[0] == "https://example.test/v1/chat"
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        body = kwargs["json"]
        assert body["model"] == "m1"
        assert body["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert body["messages"][1] == {"role": "user", "content": "prompt text"}
        assert body["max_tokens"] == 800
        assert body["temperature"] == 0.7

    def test_reads_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("GROK_API_KEY", "from-env")
        assert NarrativeClient().api_key == "from-env"


class TestAnalyzeWeek:
    def test_storylines(self, league):
        config, teams, standings = league
        ctx = analyze_week(config, teams, standings, week=6)
        assert ctx.most_wins.player_id == "alex"
        assert ctx.most_losses.player_id == "blair"
        assert ctx.perfect_weeks == ["Alex"]
        assert ctx.disaster_weeks == ["Blair"]
        assert ctx.tight_race == ""

    def test_tight_race(self, league):
        config, teams, _ = league
        teams["NYG"] = _team("NYG", 5, 1, "L")
        standings = calculate_standings(config.players, teams).wins
        ctx = analyze_week(config, teams, standings, week=6)
        assert "only 2 wins" in ctx.tight_race

    def test_no_standings(self, league):
        config, teams, _ = league
        with pytest.raises(ValueError):
            analyze_week(config, teams, [], week=1)

    def test_prompt_mentions_everything(self, league):
        config, teams, standings = league
        prompt = build_narrative_prompt(analyze_week(config, teams, standings, week=6))
        assert '"Sunday Scaries"' in prompt
        assert "Week 6 of the 2025 season" in prompt
        assert "1. Alex: 9W-3L (75.0%)" in prompt
        assert "Perfect weeks achieved by: Alex" in prompt
        assert "Disaster weeks suffered by: Blair" in prompt


class TestGenerate:
    def test_uses_client_output(self, league):
        config, teams, standings = league
        client = MagicMock()
        client.write_recap.return_value = parse_narrative_text("Alex Rolls\nWhat a week.")
        n = generate_weekly_narrative(config, teams, standings, 6, client=client, today=TODAY)
        assert n.title == "Alex Rolls"
        assert n.content == "What a week."
        assert n.author == "AI Narrator"
        assert n.publish_date == "2025-10-14"
        assert n.highlights
        assert n.next_week_preview == "12 weeks remaining in the regular season."

    @pytest.mark.parametrize("error", [
        NarrativeError("no key"),
        NarrativeParseError("bad"),
        requests.ConnectionError("down"),
    ])
    def test_falls_back_on_failure(self, league, error):
        config, teams, standings = league
        client = MagicMock()
        client.write_recap.side_effect = error
        n = generate_weekly_narrative(config, teams, standings, 6, client=client, today=TODAY)
        assert n == fallback_narrative(config, standings, 6, today=TODAY)
        assert n.author == "Fantasy Bot"

    def test_fallback_text(self, league):
        config, _, standings = league
        n = fallback_narrative(config, standings, 6, today=TODAY)
        assert n.title == "Week 6: Alex Takes The Lead!"
        assert "holds a 6 win advantage" in n.content
        assert "12 weeks remaining" in n.content
        assert n.highlights[1] == "Blair needs to turn things around"
        assert n.word_count == len(n.content.split())

    def test_fallback_after_season(self, league):
        config, _, standings = league
        n = fallback_narrative(config, standings, 20, today=TODAY)
        assert n.highlights[2] == "0 weeks remaining in the season"

    def test_empty_roster_uses_template(self):
        config = LeagueConfig("Empty", "2025", {})
        client = MagicMock()
        n = generate_weekly_narrative(config, {}, [], 3, client=client, today=TODAY)
        assert n.title == "Week 3: Waiting On The Draft"
        assert n.highlights == ["No players yet", "15 weeks remaining in the season"]
        assert n.author == "Fantasy Bot"
        client.write_recap.assert_not_called()

    def test_round_trip(self, league):
        config, _, standings = league
        n = fallback_narrative(config, standings, 6, today=TODAY)
        d = n.to_dict()
        assert d["word_count"] == n.word_count
        assert Narrative.from_dict(d) == n
