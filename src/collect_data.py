"""Pull the NFL scoreboard and rebuild every derived data file."""

from pathlib import Path

import pandas as pd

from src.league_math import Leaderboards, run_standings_data_quality
from src.league_service import LeagueService
from src.snapshots import DATA_DIR, RESULTS_FILE, save_json

STANDINGS_CSV = "standings.csv"


def collect_results(service: LeagueService, log=print):
    """Fetch the scoreboard (live, or the last saved copy)."""
    log("Collecting NFL scoreboard...")
    service.clear_cache()
    results = service.get_results()
    source = "live" if results.is_live_data else "saved snapshot"
    log(f"  Week {results.current_week}: {len(results.teams)} teams ({source})")
    if results.games_in_progress:
        log(f"  In progress: {', '.join(results.games_in_progress)}")
    if results.is_live_data:
        save_json(results.to_dict(), RESULTS_FILE, service.data_dir)
        log(f"  Saved {RESULTS_FILE}")
    return results


def standings_frame(leaderboards: Leaderboards) -> pd.DataFrame:
    """One row per player with both ranks side by side."""
    wins = pd.DataFrame([s.to_dict() for s in leaderboards.wins])
    if wins.empty:
        return wins
    losses = pd.DataFrame([
        {"player_id": s.player_id, "loss_rank": s.current_rank, "loss_trend": s.trend}
        for s in leaderboards.losses
    ])
    df = wins.rename(columns={"current_rank": "win_rank", "trend": "win_trend"})
    df = df.merge(losses, on="player_id", how="left")
    df["teams"] = df["teams"].apply(", ".join)
    df["win_percentage"] = df["win_percentage"].round(3)
    columns = [
        "win_rank", "loss_rank", "player_id", "player_name", "total_wins",
        "total_losses", "total_ties", "win_percentage", "win_trend", "loss_trend", "teams",
    ]
    return df[columns]


def collect_standings(service: LeagueService, log=print):
    """Record this week in the history and export the leaderboards."""
    log("Building leaderboards...")
    history = service.update_history()
    log(f"  History covers {len(history.get('weeks', {}))} week(s)")

    leaderboards = service.get_standings()
    df = standings_frame(leaderboards)
    path = Path(service.data_dir) / STANDINGS_CSV
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    log(f"  Saved {STANDINGS_CSV} ({len(df)} players)")

    if leaderboards.wins:
        log(f"  Most wins: {leaderboards.wins[0].player_name} ({leaderboards.wins[0].total_wins})")
        log(f"  Most losses: {leaderboards.losses[0].player_name} ({leaderboards.losses[0].total_losses})")
    return leaderboards


def collect_achievements(service: LeagueService, log=print):
    log("Evaluating achievements...")
    data = service.get_achievements()
    total = sum(len(v) for v in data.player_achievements.values())
    log(f"  {total} achievements earned across {len(data.player_achievements)} players")
    return data


def collect_narrative(service: LeagueService, log=print):
    log("Writing weekly recap...")
    narrative = service.generate_narrative()
    log(f"  {narrative.title} ({narrative.word_count} words, by {narrative.author})")
    return narrative


def check_data_quality(service: LeagueService, results, leaderboards, log=print):
    log("Running data quality checks...")
    report = run_standings_data_quality(service.config.players, results.teams, leaderboards)
    for check in report.checks:
        mark = "PASS" if check["passed"] else "FAIL"
        log(f"  [{mark}] {check['name']}: {check['detail']}")
    log(f"  {report.summary}")
    return report


def collect_all(service: LeagueService | None = None, log=print) -> dict:
    """Run every collection step in order."""
    service = service or LeagueService()
    results = collect_results(service, log=log)
    leaderboards = collect_standings(service, log=log)
    achievements = collect_achievements(service, log=log)
    narrative = collect_narrative(service, log=log)
    report = check_data_quality(service, results, leaderboards, log=log)
    return {
        "results": results,
        "leaderboards": leaderboards,
        "achievements": achievements,
        "narrative": narrative,
        "data_quality": report,
    }


if __name__ == "__main__":
    print("=" * 60)
    print("NFL Win Pool Data Collection")
    print("=" * 60)
    collect_all()
    print(f"\nDone! All data saved to {DATA_DIR.name}/")
