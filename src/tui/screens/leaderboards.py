"""Leaderboards screen — most wins and most losses side by side."""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Footer, Header, LoadingIndicator, Static
from textual import work

from src.league_math import Leaderboards, Results
from src.tui.screens.base import BaseScreen
from src.tui.screens.help import HelpScreen
from src.tui.widgets.leaderboard_table import LeaderboardTable

HELP_TEXT = """\
Leaderboards

Two independent competitions over the same rosters:
  Most Wins    ranked by total wins, fewer losses breaks ties
  Most Losses  ranked by total losses, more wins breaks ties

Each player's totals are the sum of their four NFL teams' records.
A team owned by two players counts for both.

Columns:
  #        Current rank
  Trend    Movement since the last recorded week (previous rank shown)
  Badges   Achievements earned so far

Keybindings:
  r      Reload from cache
  ?      Show this help
  Esc    Return home
"""


def status_text(results: Results) -> str:
    source = "[green]live[/green]" if results.is_live_data else "[yellow]saved snapshot[/yellow]"
    parts = [f"Week {results.current_week}", source, f"updated {results.last_updated}"]
    if results.games_in_progress:
        parts.append(f"in progress: {', '.join(results.games_in_progress)}")
    return " | ".join(parts)


class LeaderboardsScreen(BaseScreen):
    """Both leaderboards for the current week."""

    BINDINGS = BaseScreen.BINDINGS + [("r", "reload", "Reload")]

    DEFAULT_CSS = """
    #boards {
        height: 1fr;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._leaderboards: Leaderboards | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield LoadingIndicator(id="leaderboards-loading")
        yield Footer()

    def on_mount(self) -> None:
        self._load_data()

    @work(exclusive=True, thread=True)
    def _load_data(self) -> None:
        try:
            results = self.service.get_results()
            leaderboards = self.service.get_standings()
            self.app.call_from_thread(self._on_data_loaded, results, leaderboards)
        except Exception as e:
            self.app.call_from_thread(self._on_data_error, str(e))

    def _drop(self, selector: str) -> None:
        for widget in self.query(selector):
            widget.remove()

    def _on_data_error(self, error: str) -> None:
        self._drop("#leaderboards-loading")
        self.notify(f"Leaderboards error: {error}", severity="error")
        message = f"No scoreboard data — press [bold]d[/bold] to refresh\n\n{escape(error)}"
        if self.query("#boards"):
            # keep showing the last good boards
            return
        if self.query("#leaderboards-error"):
            self.query_one("#leaderboards-error", Static).update(message)
            return
        self.mount(
            Static(message, id="leaderboards-error", classes="screen-error"),
            before=self.query_one(Footer),
        )

    def _on_data_loaded(self, results: Results, leaderboards: Leaderboards) -> None:
        self._leaderboards = leaderboards
        self._drop("#leaderboards-loading")
        self._drop("#leaderboards-error")
        if self.query("#boards"):
            self.query_one("#leaderboards-status", Static).update(status_text(results))
            self.query_one("#wins-table", LeaderboardTable).update_board(leaderboards.wins)
            self.query_one("#losses-table", LeaderboardTable).update_board(leaderboards.losses)
        else:
            footer = self.query_one(Footer)
            self.mount(Static(status_text(results), id="leaderboards-status", classes="status-line"), before=footer)
            boards = Horizontal(id="boards")
            self.mount(boards, before=footer)
            boards.mount(
                LeaderboardTable("wins", leaderboards.wins, id="wins-table"),
                LeaderboardTable("losses", leaderboards.losses, id="losses-table"),
            )
        if not results.is_live_data:
            self.notify("Showing saved scoreboard (live data unavailable)", severity="warning")

    def action_reload(self) -> None:
        self._load_data()

    def action_show_help(self) -> None:
        self.app.push_screen(HelpScreen("Leaderboards Help", HELP_TEXT))
