import marimo

__generated_with = "0.19.11"
app = marimo.App(width="full", app_title="Season Outlook")


@app.cell
def imports():
    import marimo as mo
    import sys
    from pathlib import Path

    sys.path.insert(0, str(Path(__file__).parent.parent))

    from src.league_math import (
        TOTAL_WEEKS,
        Results,
        calculate_standings,
        project_season,
        run_standings_data_quality,
    )
    from src.config import get_league_config, get_simulation_trials
    from src.snapshots import CACHED_RESULTS_FILE, RESULTS_FILE, load_json

    config = get_league_config()
    _raw = load_json(CACHED_RESULTS_FILE) or load_json(RESULTS_FILE) or {}
    results = Results.from_dict(_raw)

    mo.md(f"# {config.league_name} {config.season}: Season Outlook")
    return (
        TOTAL_WEEKS, calculate_standings, config, get_simulation_trials,
        mo, project_season, results, run_standings_data_quality,
    )


@app.cell
def data_quality(mo, config, results, calculate_standings, run_standings_data_quality):
    leaderboards = calculate_standings(config.players, results.teams)
    _report = run_standings_data_quality(config.players, results.teams, leaderboards)
    _md = f"**Week {results.current_week}** | {len(results.teams)} teams | {_report.summary}"
    if not results.teams:
        _md += "\n\n⚠️ No saved scoreboard. Run `python -m src.collect_data` first."
    for _c in _report.checks:
        if not _c["passed"]:
            _md += f"\n- ⚠️ {_c['name']}: {_c['detail']}"
    mo.md(_md)
    return (leaderboards,)


@app.cell
def leaderboards_view(mo, leaderboards):
    def _rows(board):
        return [
            {
                "Rank": _s.current_rank,
                "Player": _s.player_name,
                "W": _s.total_wins,
                "L": _s.total_losses,
                "Win%": round(_s.win_percentage, 3),
                "Teams": " ".join(_s.teams),
            }
            for _s in board
        ]

    mo.hstack([
        mo.vstack([mo.md("### Most Wins"), mo.ui.table(_rows(leaderboards.wins), selection=None)]),
        mo.vstack([mo.md("### Most Losses"), mo.ui.table(_rows(leaderboards.losses), selection=None)]),
    ])


@app.cell
def controls(mo, get_simulation_trials, results, TOTAL_WEEKS):
    trials = mo.ui.slider(start=100, stop=10000, step=100, value=get_simulation_trials(), label="Trials")
    week = mo.ui.slider(
        start=0, stop=TOTAL_WEEKS, step=1,
        value=min(results.current_week, TOTAL_WEEKS), label="Project from week",
    )
    seed = mo.ui.number(start=0, stop=10**6, value=0, label="Seed (0 = random)")
    mo.hstack([trials, week, seed])
    return seed, trials, week


@app.cell
def projection(mo, config, results, project_season, trials, week, seed):
    import random as _random

    _rng = _random.Random(seed.value) if seed.value else None
    models = project_season(
        config.players, results.teams, week.value, trials.value,
        rng=_rng, total_weeks=config.total_weeks,
    )

    _rows = []
    for _m in sorted(models.values(), key=lambda m: -m.wins.probability_to_win):
        _rows.append({
            "Player": _m.player,
            "Wins rank": _m.wins.current_rank,
            "P(most wins)": f"{_m.wins.probability_to_win:.1%}",
            "Exp. wins": round(_m.wins.expected_final, 1),
            "Wins range": f"{_m.wins.confidence_interval[0]}-{_m.wins.confidence_interval[1]}",
            "Losses rank": _m.losses.current_rank,
            "P(most losses)": f"{_m.losses.probability_to_win:.1%}",
            "Exp. losses": round(_m.losses.expected_final, 1),
            "Magic # (W/L)": f"{_m.wins_to_guarantee_wins_title}/{_m.losses_to_guarantee_losses_title}",
        })

    mo.vstack([
        mo.md(f"### Projection ({trials.value} simulated seasons from week {week.value})"),
        mo.ui.table(_rows, selection=None),
        mo.md(
            "_Each team keeps its current win fraction for every remaining week; "
            "opponents and the real schedule are ignored._"
        ),
    ])
    return (models,)


if __name__ == "__main__":
    app.run()
