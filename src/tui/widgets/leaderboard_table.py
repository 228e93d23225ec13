"""Reusable leaderboard DataTable for the wins and losses boards."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import DataTable, Static

from src.league_math import TREND_DOWN, TREND_UP, PlayerStanding

TREND_MARKS = {
    TREND_UP: "[green]▲[/green]",
    TREND_DOWN: "[red]▼[/red]",
}


def _fmt_trend(standing: PlayerStanding) -> str:
    mark = TREND_MARKS.get(standing.trend, "[dim]–[/dim]")
    if standing.previous_rank is None:
        return mark
    return f"{mark} {standing.previous_rank}"


class LeaderboardTable(Widget):
    """One ranked board. ``competition`` is "wins" or "losses"."""

    DEFAULT_CSS = """
    LeaderboardTable {
        height: auto;
        width: 1fr;
    }
    LeaderboardTable .board-title {
        text-style: bold;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        competition: str,
        board: list[PlayerStanding] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.competition = competition
        self._board = board

    def compose(self) -> ComposeResult:
        title = "Most Wins" if self.competition == "wins" else "Most Losses"
        yield Static(title, classes="board-title")
        yield DataTable(id=f"{self.competition}-board", zebra_stripes=True)

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.add_columns("#", "Player", "W", "L", "T", "Win%", "Trend", "Teams", "Badges")
        if self._board is not None:
            self.update_board(self._board)

    def update_board(self, board: list[PlayerStanding]) -> None:
        """Populate or refresh the table."""
        self._board = board
        table = self.query_one(DataTable)
        table.clear()
        highlight = "green" if self.competition == "wins" else "red"
        for s in board:
            name = f"[bold {highlight}]{s.player_name}[/bold {highlight}]" if s.current_rank == 1 else s.player_name
            table.add_row(
                str(s.current_rank),
                name,
                str(s.total_wins),
                str(s.total_losses),
                str(s.total_ties),
                f"{s.win_percentage:.3f}",
                _fmt_trend(s),
                " ".join(s.teams),
                str(len(s.achievements)) if s.achievements else "",
                key=s.player_id,
            )
