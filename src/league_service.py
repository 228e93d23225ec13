"""League data service: the operations the dashboard and notebooks call.

One LeagueService owns one TTLCache. Live scoreboard data flows through the
cache; when ESPN is unreachable the last saved snapshot is served instead,
flagged ``is_live_data=False``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

import requests

from src.achievements import AchievementsData, calculate_achievements
from src.cache import CacheKeys, TTLCache, config_hash
from src.config import get_cache_ttl_minutes, get_league_config, get_simulation_trials
from src.espn_client import ScoreboardSnapshot, get_scoreboard_snapshot
from src.league_math import (
    LeagueConfig,
    Leaderboards,
    ProbabilityModel,
    Results,
    calculate_standings,
    leaderboards_from_dict,
    previous_leaderboards,
    project_season,
    record_week,
)
from src.narrative import Narrative, generate_weekly_narrative
from src.narrative_client import NarrativeClient
from src.snapshots import (
    ACHIEVEMENTS_FILE,
    CACHED_RESULTS_FILE,
    DATA_DIR,
    HISTORY_FILE,
    NARRATIVES_FILE,
    RESULTS_FILE,
    load_json,
    save_json,
)

logger = logging.getLogger(__name__)

_DERIVED_PREFIXES = ("standings-", "projections-", "achievements-", "narratives-")


class DataUnavailableError(RuntimeError):
    """No live scoreboard and no saved snapshot to fall back on."""


class LeagueService:
    def __init__(
        self,
        config: LeagueConfig | None = None,
        cache: TTLCache | None = None,
        fetch_scoreboard: Callable[[], ScoreboardSnapshot] | None = None,
        narrative_client: NarrativeClient | None = None,
        data_dir: Path = DATA_DIR,
        rng=None,
    ) -> None:
        self.config = config or get_league_config()
        self.cache = cache or TTLCache(default_ttl_minutes=get_cache_ttl_minutes())
        self._fetch_scoreboard = fetch_scoreboard or get_scoreboard_snapshot
        self._narrative_client = narrative_client
        self.data_dir = data_dir
        self.rng = rng
        self.roster_hash = config_hash({pid: p.teams for pid, p in self.config.players.items()})

    # ── Results ─────────────────────────────────────────────────────────

    def _fetch_live_results(self) -> Results:
        snapshot = self._fetch_scoreboard()
        now = datetime.now()
        results = Results(
            last_updated=now.isoformat(timespec="seconds"),
            current_week=snapshot.week,
            teams=snapshot.teams,
            games_in_progress=snapshot.games_in_progress,
            next_update=(now + timedelta(minutes=get_cache_ttl_minutes())).isoformat(timespec="seconds"),
            is_live_data=True,
        )
        save_json(results.to_dict(), CACHED_RESULTS_FILE, self.data_dir)
        return results

    def _saved_results(self) -> Results:
        for filename in (CACHED_RESULTS_FILE, RESULTS_FILE):
            data = load_json(filename, data_dir=self.data_dir)
            if data:
                logger.info("Serving saved scoreboard from %s", filename)
                results = Results.from_dict(data)
                results.is_live_data = False
                return results
        raise DataUnavailableError("Scoreboard unavailable and no saved snapshot found")

    def get_results(self) -> Results:
        """Current scoreboard, live when possible."""
        try:
            return self.cache.get_or_fetch(CacheKeys.NFL_DATA, self._fetch_live_results)
        except (requests.RequestException, ValueError) as e:
            logger.warning("Live scoreboard fetch failed: %s", e)
            return self._saved_results()

    # ── Standings and history ───────────────────────────────────────────

    def get_history(self) -> dict:
        return load_json(HISTORY_FILE, default={"weeks": {}}, data_dir=self.data_dir)

    def _build_standings(self, results: Results) -> Leaderboards:
        previous = previous_leaderboards(self.get_history(), results.current_week)
        boards = calculate_standings(self.config.players, results.teams, previous)
        stored = load_json(ACHIEVEMENTS_FILE, data_dir=self.data_dir)
        if stored:
            earned = AchievementsData.from_dict(stored)
            for s in boards.wins + boards.losses:
                s.achievements = earned.earned_keys(s.player_id)
        return boards

    def get_standings(self) -> Leaderboards:
        """Both leaderboards, with trends against the previous stored week."""
        results = self.get_results()
        return self.cache.get_or_fetch(
            CacheKeys.standings(self.roster_hash),
            lambda: self._build_standings(results),
        )

    def update_history(self) -> dict:
        """Record the current week's leaderboards and persist the history."""
        results = self.get_results()
        history = self.get_history()
        previous = previous_leaderboards(history, results.current_week)
        boards = calculate_standings(self.config.players, results.teams, previous)
        record_week(history, results.current_week, boards, results.teams, self.config.players)
        history["last_updated"] = datetime.now().isoformat(timespec="seconds")
        save_json(history, HISTORY_FILE, self.data_dir)
        return history

    # ── Projections ─────────────────────────────────────────────────────

    def get_projections(self, trials: int | None = None) -> dict[str, ProbabilityModel]:
        results = self.get_results()
        trials = trials or get_simulation_trials()
        key = CacheKeys.projections(
            config_hash({"roster": self.roster_hash, "trials": trials}),
            results.current_week,
        )
        return self.cache.get_or_fetch(
            key,
            lambda: project_season(
                self.config.players,
                results.teams,
                results.current_week,
                trials,
                rng=self.rng,
                total_weeks=self.config.total_weeks,
            ),
        )

    # ── Achievements ────────────────────────────────────────────────────

    def _compute_achievements(self, results: Results) -> AchievementsData:
        stored = load_json(ACHIEVEMENTS_FILE, data_dir=self.data_dir)
        previous = AchievementsData.from_dict(stored) if stored else None
        boards = calculate_standings(
            self.config.players,
            results.teams,
            previous_leaderboards(self.get_history(), results.current_week),
        )
        data = calculate_achievements(
            self.config.players,
            results.teams,
            boards,
            results.current_week,
            previous=previous,
        )
        save_json(data.to_dict(), ACHIEVEMENTS_FILE, self.data_dir)
        return data

    def get_achievements(self) -> AchievementsData:
        results = self.get_results()
        return self.cache.get_or_fetch(
            CacheKeys.achievements(self.roster_hash, results.current_week),
            lambda: self._compute_achievements(results),
        )

    # ── Narratives ──────────────────────────────────────────────────────

    def _stored_narratives(self) -> dict:
        return load_json(NARRATIVES_FILE, default={"narratives": {}}, data_dir=self.data_dir)

    def get_narratives(self) -> list[Narrative]:
        """All stored recaps, newest week first. Writes this week's if missing."""
        results = self.get_results()
        stored = self._stored_narratives()
        if str(results.current_week) not in stored.get("narratives", {}):
            self.generate_narrative(results.current_week)
            stored = self._stored_narratives()
        narratives = [Narrative.from_dict(n) for n in stored.get("narratives", {}).values()]
        return sorted(narratives, key=lambda n: n.week, reverse=True)

    def _standings_for_week(self, week: int, current_week: int) -> Leaderboards:
        """Current leaderboards, or the stored ones for an earlier week."""
        if week != current_week:
            entry = self.get_history().get("weeks", {}).get(str(week), {})
            if "leaderboards" in entry:
                return leaderboards_from_dict(entry["leaderboards"])
            logger.info("No stored leaderboards for week %s, using current standings", week)
        return self.get_standings()

    def generate_narrative(self, week: int | None = None) -> Narrative:
        """(Re)write the recap for ``week`` (default: current week) and store it."""
        results = self.get_results()
        week = results.current_week if week is None else week
        boards = self._standings_for_week(week, results.current_week)
        narrative = generate_weekly_narrative(
            self.config,
            results.teams,
            boards.wins,
            week,
            client=self._narrative_client,
        )
        stored = self._stored_narratives()
        stored.setdefault("narratives", {})[str(week)] = narrative.to_dict()
        stored["last_generated"] = datetime.now().isoformat(timespec="seconds")
        save_json(stored, NARRATIVES_FILE, self.data_dir)
        self.cache.delete(CacheKeys.narratives(week))
        return narrative

    # ── Refresh and cache admin ─────────────────────────────────────────

    def _invalidate(self) -> None:
        self.cache.delete(CacheKeys.NFL_DATA)
        for key in self.cache.keys():
            if key.startswith(_DERIVED_PREFIXES):
                self.cache.delete(key)

    def refresh(self) -> dict:
        """Drop cached scoreboard data and recompute everything downstream."""
        self._invalidate()
        results = self.get_results()
        self.update_history()
        boards = self.get_standings()
        achievements = self.get_achievements()
        self.get_projections()
        return {
            "last_updated": results.last_updated,
            "current_week": results.current_week,
            "is_live_data": results.is_live_data,
            "teams": len(results.teams),
            "players": len(self.config.players),
            "games_in_progress": len(results.games_in_progress),
            "wins_leader": boards.wins[0].player_name if boards.wins else None,
            "losses_leader": boards.losses[0].player_name if boards.losses else None,
            "achievements_earned": sum(
                len(v) for v in achievements.player_achievements.values()
            ),
        }

    def cache_stats(self) -> dict:
        return self.cache.stats()

    def clear_cache(self, key: str | None = None) -> None:
        if key is None:
            self.cache.clear()
            logger.info("Cache cleared")
        else:
            self.cache.delete(key)
            logger.info("Cache entry cleared: %s", key)
