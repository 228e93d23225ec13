"""Data Refresh screen — runs the 5-step collection pipeline with live logging."""

from __future__ import annotations

import os
from datetime import datetime

from rich.markup import escape
from textual.app import ComposeResult
from textual.widgets import Button, Footer, Header, RichLog, Static
from textual import work

from src.snapshots import (
    ACHIEVEMENTS_FILE,
    CACHED_RESULTS_FILE,
    HISTORY_FILE,
    NARRATIVES_FILE,
    RESULTS_FILE,
)
from src.tui.screens.base import BaseScreen
from src.tui.screens.help import HelpScreen

DATA_FILES = [
    (RESULTS_FILE, "Scoreboard"),
    (CACHED_RESULTS_FILE, "Cached Scoreboard"),
    (HISTORY_FILE, "History"),
    ("standings.csv", "Standings CSV"),
    (ACHIEVEMENTS_FILE, "Achievements"),
    (NARRATIVES_FILE, "Recaps"),
]

HELP_TEXT = """\
Data Refresh Screen

Runs the full data collection pipeline:
  1. NFL scoreboard from ESPN (falls back to the last saved copy)
  2. Leaderboards + weekly history, exported to standings.csv
  3. Achievements
  4. Weekly recap (text API if GROK_API_KEY is set, template otherwise)
  5. Roster validation

After collection, data quality checks run automatically:
  - Every NFL team has a record
  - Every drafted team has a record
  - Leaderboard totals match the summed team records
  - Both leaderboards rank every player exactly once

Keybindings:
  Enter  Start collection
  ?      Show this help
  Esc    Return to previous screen

Notes:
  - A failure in one step does not block the rest
  - Data freshness shows file modification times
"""


class DataRefreshScreen(BaseScreen):
    """Screen for refreshing the scoreboard and everything derived from it."""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(self._freshness_text(), id="data-freshness")
        yield Button("Start Collection", id="start-collection", variant="primary")
        yield RichLog(highlight=True, markup=True, id="refresh-log")
        yield Footer()

    def _freshness_text(self) -> str:
        data_dir = self.app.service.data_dir
        parts = []
        for filename, label in DATA_FILES:
            path = data_dir / filename
            if path.exists():
                mtime = datetime.fromtimestamp(os.path.getmtime(path))
                age = datetime.now() - mtime
                if age.days > 0:
                    age_str = f"{age.days}d ago"
                elif age.seconds > 3600:
                    age_str = f"{age.seconds // 3600}h ago"
                else:
                    age_str = f"{age.seconds // 60}m ago"
                parts.append(f"{label}: {age_str}")
            else:
                parts.append(f"{label}: [red]missing[/red]")
        return " | ".join(parts)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "start-collection":
            event.button.disabled = True
            self._run_collection()

    @work(exclusive=True, thread=True)
    def _run_collection(self) -> None:
        log = self.query_one("#refresh-log", RichLog)

        def log_fn(msg: str) -> None:
            self.app.call_from_thread(log.write, msg)

        steps = [
            ("NFL Scoreboard", self._step_results),
            ("Leaderboards + History", self._step_standings),
            ("Achievements", self._step_achievements),
            ("Weekly Recap", self._step_narrative),
            ("Roster Validation", self._step_validation),
        ]

        log_fn("[bold]Starting data collection...[/bold]")
        for name, step_fn in steps:
            log_fn(f"\n[bold blue]>>> {name}[/bold blue]")
            try:
                step_fn(log_fn)
                log_fn(f"[green]  ✓ {name} complete[/green]")
            except Exception as e:
                log_fn(f"[red]  ✗ {name} failed: {escape(str(e))}[/red]")

        log_fn("\n[bold green]Collection finished.[/bold green]")

        log_fn("\n[bold blue]>>> Data Quality Checks[/bold blue]")
        self._run_quality_checks(log_fn)

        self.app.call_from_thread(self._on_collection_done)

    def _run_quality_checks(self, log_fn) -> None:
        """Run the standings data quality checks and log results."""
        from src.league_math import run_standings_data_quality

        service = self.app.service
        try:
            results = service.get_results()
            leaderboards = service.get_standings()
            report = run_standings_data_quality(service.config.players, results.teams, leaderboards)
        except Exception as e:
            log_fn(f"[red]  Standings data quality check failed: {escape(str(e))}[/red]")
            return

        if report.all_passed:
            log_fn("[green]  ✓ Standings: all checks passed[/green]")
        else:
            log_fn(f"[yellow]  ⚠ Standings: {report.summary}[/yellow]")
            for check in report.checks:
                status = "[green]✓[/green]" if check["passed"] else "[red]✗[/red]"
                log_fn(f"    {status} {check['name']}: {check.get('detail', '')}")

    def _on_collection_done(self) -> None:
        btn = self.query_one("#start-collection", Button)
        btn.disabled = False
        freshness = self.query_one("#data-freshness", Static)
        freshness.update(self._freshness_text())
        self.notify("Data collection complete", severity="information")

    def _step_results(self, log_fn):
        from src.collect_data import collect_results
        collect_results(self.app.service, log=log_fn)

    def _step_standings(self, log_fn):
        from src.collect_data import collect_standings
        collect_standings(self.app.service, log=log_fn)

    def _step_achievements(self, log_fn):
        from src.collect_data import collect_achievements
        collect_achievements(self.app.service, log=log_fn)

    def _step_narrative(self, log_fn):
        from src.collect_data import collect_narrative
        collect_narrative(self.app.service, log=log_fn)

    def _step_validation(self, log_fn):
        from src.validation import run_validation
        service = self.app.service
        scoreboard_teams = set(service.get_results().teams)
        report = run_validation(
            service.config.players,
            log=lambda msg: None,
            data_dir=service.data_dir,
            known_teams=scoreboard_teams or None,
        )
        counts = report["summary"]["counts"]
        issues = len(report["issues"])
        log_fn(f"  {counts['CLEAN']} clean, {issues} issue(s)")
        for issue in report["issues"]:
            log_fn(f"  [yellow]{issue['status']}[/yellow] {issue['player_name']}: {issue['detail']}")

    def action_show_help(self) -> None:
        self.app.push_screen(HelpScreen("Data Refresh Help", HELP_TEXT))
