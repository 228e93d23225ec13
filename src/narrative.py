"""Weekly recap: week analysis, prompt assembly, and a template fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

import requests

from src.league_math import LeagueConfig, PlayerStanding, TeamRecord
from src.narrative_client import NarrativeClient, NarrativeError

logger = logging.getLogger(__name__)

TIGHT_RACE_MARGIN = 2


@dataclass
class Narrative:
    title: str
    content: str
    highlights: list[str]
    week: int
    season: str
    author: str
    publish_date: str
    next_week_preview: str = ""
    social_share_text: str = ""

    @property
    def word_count(self) -> int:
        return len(self.content.split())

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "content": self.content,
            "highlights": list(self.highlights),
            "next_week_preview": self.next_week_preview,
            "social_share_text": self.social_share_text,
            "word_count": self.word_count,
            "author": self.author,
            "publish_date": self.publish_date,
            "week": self.week,
            "season": self.season,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Narrative":
        return cls(
            title=d.get("title", ""),
            content=d.get("content", ""),
            highlights=list(d.get("highlights", [])),
            week=int(d.get("week", 0) or 0),
            season=str(d.get("season", "")),
            author=d.get("author", ""),
            publish_date=d.get("publish_date", ""),
            next_week_preview=d.get("next_week_preview", ""),
            social_share_text=d.get("social_share_text", ""),
        )


@dataclass
class NarrativeContext:
    week: int
    season: str
    league_name: str
    players: list[PlayerStanding]
    most_wins: PlayerStanding
    most_losses: PlayerStanding
    best_win_rate: PlayerStanding
    worst_win_rate: PlayerStanding
    perfect_weeks: list[str] = field(default_factory=list)
    disaster_weeks: list[str] = field(default_factory=list)
    tight_race: str = ""


def _all_last_results(abbrs: list[str], teams: dict[str, TeamRecord], result: str) -> bool:
    if not abbrs:
        return False
    return all(
        teams.get(a) is not None
        and teams[a].last_game is not None
        and teams[a].last_game.result == result
        for a in abbrs
    )


def analyze_week(
    config: LeagueConfig,
    teams: dict[str, TeamRecord],
    standings: list[PlayerStanding],
    week: int,
) -> NarrativeContext:
    """Pick out the storylines a recap should mention."""
    if not standings:
        raise ValueError("Cannot analyze a week with no standings")
    by_wins = sorted(standings, key=lambda s: -s.total_wins)
    by_losses = sorted(standings, key=lambda s: -s.total_losses)
    by_rate = sorted(standings, key=lambda s: -s.win_percentage)

    def roster(s: PlayerStanding) -> list[str]:
        player = config.players.get(s.player_id)
        return player.teams if player else []

    perfect = [s.player_name for s in standings if _all_last_results(roster(s), teams, "W")]
    disaster = [s.player_name for s in standings if _all_last_results(roster(s), teams, "L")]

    tight_race = ""
    if len(by_wins) > 1:
        gap = by_wins[0].total_wins - by_wins[1].total_wins
        if gap <= TIGHT_RACE_MARGIN:
            tight_race = (
                f"The wins competition is extremely tight with only {gap} wins "
                "separating first and second place!"
            )

    return NarrativeContext(
        week=week,
        season=config.season,
        league_name=config.league_name,
        players=list(standings),
        most_wins=by_wins[0],
        most_losses=by_losses[0],
        best_win_rate=by_rate[0],
        worst_win_rate=by_rate[-1],
        perfect_weeks=perfect,
        disaster_weeks=disaster,
        tight_race=tight_race,
    )


def build_narrative_prompt(context: NarrativeContext) -> str:
    """Assemble the user prompt for the recap writer."""
    standings_lines = "\n".join(
        f"{i}. {p.player_name}: {p.total_wins}W-{p.total_losses}L ({p.win_percentage * 100:.1f}%)"
        for i, p in enumerate(context.players, 1)
    )
    storylines = [
        f"- {context.most_wins.player_name} leads in total wins ({context.most_wins.total_wins})",
        f"- {context.most_losses.player_name} leads in total losses ({context.most_losses.total_losses})",
    ]
    if context.perfect_weeks:
        storylines.append(f"- Perfect weeks achieved by: {', '.join(context.perfect_weeks)}")
    if context.disaster_weeks:
        storylines.append(f"- Disaster weeks suffered by: {', '.join(context.disaster_weeks)}")
    if context.tight_race:
        storylines.append(f"- {context.tight_race}")

    return (
        f'Write a weekly narrative for "{context.league_name}" fantasy NFL league, '
        f"Week {context.week} of the {context.season} season.\n\n"
        f"Current Standings:\n{standings_lines}\n\n"
        f"Key Storylines:\n" + "\n".join(storylines) + "\n\n"
        "Write a compelling 2-3 paragraph narrative with:\n"
        "1. A catchy title (on first line)\n"
        "2. Opening paragraph setting the scene\n"
        "3. Key developments and storylines\n"
        "4. Looking ahead commentary\n\n"
        "Keep it fun, engaging, and around 200-300 words total."
    )


def _weeks_left(config: LeagueConfig, week: int) -> int:
    return max(0, config.total_weeks - week)


def _share_text(config: LeagueConfig, week: int, leader: PlayerStanding) -> str:
    return f"{config.league_name} Week {week}: {leader.player_name} leads with {leader.total_wins} wins 🏈"


def _empty_league_narrative(config: LeagueConfig, week: int, today: date | None) -> Narrative:
    left = _weeks_left(config, week)
    return Narrative(
        title=f"Week {week}: Waiting On The Draft",
        content=(
            f"Week {week} of the {config.season} {config.league_name} season is in the books, "
            f"but no players have drafted teams yet. Once rosters are set the standings "
            f"will start to take shape, with {left} weeks remaining in the regular season."
        ),
        highlights=[
            "No players yet",
            f"{left} weeks remaining in the season",
        ],
        week=week,
        season=config.season,
        author="Fantasy Bot",
        publish_date=(today or date.today()).isoformat(),
        next_week_preview=f"{left} weeks to go.",
        social_share_text=f"{config.league_name} Week {week}: rosters still open 🏈",
    )


def fallback_narrative(
    config: LeagueConfig,
    standings: list[PlayerStanding],
    week: int,
    today: date | None = None,
) -> Narrative:
    """Template recap used when the text API is unavailable."""
    if not standings:
        return _empty_league_narrative(config, week, today)
    leader = standings[0]
    trailer = standings[-1]
    runner_up_wins = standings[1].total_wins if len(standings) > 1 else 0
    left = _weeks_left(config, week)

    content = (
        f"Week {week} of the {config.season} {config.league_name} season has concluded with "
        f"{leader.player_name} sitting atop the wins leaderboard with {leader.total_wins} victories.\n\n"
        f"The competition remains fierce as teams battle for supremacy in both the wins and losses "
        f"competitions. {leader.player_name} currently holds a {leader.total_wins - runner_up_wins} "
        f"win advantage over second place.\n\n"
        f"Meanwhile, the losses competition sees its own drama unfolding. Every week brings new "
        f"surprises as NFL teams deliver unexpected results, keeping our fantasy managers on their toes.\n\n"
        f"Looking ahead, with {left} weeks remaining in the regular season, there's still plenty of "
        f"time for dramatic shifts in the standings. Will {leader.player_name} maintain their lead, "
        f"or will another competitor mount a comeback charge?"
    )
    return Narrative(
        title=f"Week {week}: {leader.player_name} Takes The Lead!",
        content=content,
        highlights=[
            f"{leader.player_name} leads with {leader.total_wins} wins",
            f"{trailer.player_name} needs to turn things around",
            f"{left} weeks remaining in the season",
        ],
        week=week,
        season=config.season,
        author="Fantasy Bot",
        publish_date=(today or date.today()).isoformat(),
        next_week_preview=f"{left} weeks to go. Can anyone catch {leader.player_name}?",
        social_share_text=_share_text(config, week, leader),
    )


def generate_weekly_narrative(
    config: LeagueConfig,
    teams: dict[str, TeamRecord],
    standings: list[PlayerStanding],
    week: int,
    client: NarrativeClient | None = None,
    today: date | None = None,
) -> Narrative:
    """Ask the text API for a recap; fall back to the template on any failure."""
    try:
        context = analyze_week(config, teams, standings, week)
        client = client or NarrativeClient()
        draft = client.write_recap(build_narrative_prompt(context))
    except (NarrativeError, requests.RequestException, ValueError) as e:
        logger.warning("Recap generation failed for week %s, using template: %s", week, e)
        return fallback_narrative(config, standings, week, today=today)

    leader = context.most_wins
    return Narrative(
        title=draft.title,
        content=draft.content,
        highlights=draft.highlights or [
            f"{leader.player_name} leads with {leader.total_wins} wins",
            f"{context.most_losses.player_name} leads the losses race with "
            f"{context.most_losses.total_losses}",
        ],
        week=week,
        season=config.season,
        author="AI Narrator",
        publish_date=(today or date.today()).isoformat(),
        next_week_preview=f"{_weeks_left(config, week)} weeks remaining in the regular season.",
        social_share_text=_share_text(config, week, leader),
    )
