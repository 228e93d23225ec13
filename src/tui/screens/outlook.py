"""Season Outlook screen — Monte Carlo odds for both competitions."""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Footer, Header, Input, LoadingIndicator, Select, Static
from textual import work

from src.league_math import ProbabilityModel
from src.tui.screens.base import BaseScreen
from src.tui.screens.help import HelpScreen

HELP_TEXT = """\
Season Outlook

Simulates the rest of the regular season many times. Every remaining
week each team wins with a fixed probability equal to its current win
fraction (a coin flip before its first game); opponents and the real
schedule are ignored.

Controls:
  Competition   Most Wins or Most Losses
  Trials        Number of simulated seasons (Run to re-simulate)

Columns:
  Rank      Current rank on that leaderboard
  P(1st)    Share of simulations finishing first
  P(Top 3)  Share of simulations finishing in the top three
  Expected  Mean simulated season total
  Range     Lowest and highest simulated totals
  Magic #   Games beyond the best simulated total needed to clinch

If the simulation fails every player is shown with equal odds.

Keybindings:
  ?      Show this help
  Esc    Return home
"""

COMPETITION_OPTIONS = [
    ("Most Wins", "wins"),
    ("Most Losses", "losses"),
]


def outlook_rows(models: dict[str, ProbabilityModel], competition: str) -> list[tuple]:
    """Table rows for one competition, ordered by chance to finish first."""
    rows = []
    for m in models.values():
        outlook = m.wins if competition == "wins" else m.losses
        magic = m.wins_to_guarantee_wins_title if competition == "wins" else m.losses_to_guarantee_losses_title
        low, high = outlook.confidence_interval
        rows.append((
            outlook.probability_to_win,
            (
                str(outlook.current_rank),
                m.player,
                f"{outlook.probability_to_win:.1%}",
                f"{outlook.probability_top3:.1%}",
                f"{outlook.expected_final:.1f}",
                f"{low}–{high}",
                str(magic),
            ),
        ))
    rows.sort(key=lambda r: -r[0])
    return [cells for _, cells in rows]


class OutlookScreen(BaseScreen):
    """Projected odds from the season simulator."""

    DEFAULT_CSS = """
    #outlook-controls {
        height: 3;
        padding: 0 1;
    }
    #outlook-controls Select {
        width: 1fr;
        margin-right: 1;
    }
    #outlook-controls Input {
        width: 14;
        margin-right: 1;
    }
    #outlook-table {
        height: 1fr;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._models: dict[str, ProbabilityModel] | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="outlook-controls"):
            yield Select(COMPETITION_OPTIONS, prompt="Competition", id="competition-select", value="wins")
            yield Input(placeholder="Trials", id="trials-input", type="integer")
            yield Button("Run", id="run-simulation", variant="primary")
        yield Static("", id="outlook-status", classes="status-line")
        yield LoadingIndicator(id="outlook-loading")
        yield DataTable(id="outlook-table", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#outlook-table", DataTable)
        table.add_columns("Rank", "Player", "P(1st)", "P(Top 3)", "Expected", "Range", "Magic #")
        self._load_data()

    def _requested_trials(self) -> int | None:
        value = self.query_one("#trials-input", Input).value
        try:
            trials = int(value) if value else None
        except ValueError:
            return None
        return trials if trials and trials > 0 else None

    @work(exclusive=True, thread=True)
    def _load_data(self, trials: int | None = None) -> None:
        try:
            models = self.service.get_projections(trials)
            self.app.call_from_thread(self._on_data_loaded, models)
        except Exception as e:
            self.app.call_from_thread(self._on_data_error, str(e))

    def _hide_loading(self) -> None:
        for widget in self.query("#outlook-loading"):
            widget.display = False

    def _on_data_error(self, error: str) -> None:
        self._hide_loading()
        self.query_one("#outlook-status", Static).update(
            f"[red]No projection available — press [bold]d[/bold] to refresh[/red]\n{escape(error)}"
        )
        self.notify(f"Outlook error: {error}", severity="error")

    def _on_data_loaded(self, models: dict[str, ProbabilityModel]) -> None:
        self._models = models
        self._hide_loading()
        sims = next(iter(models.values())).simulations if models else 0
        if sims:
            status = f"{sims} simulated seasons"
        else:
            status = "[yellow]Simulation unavailable, showing equal odds[/yellow]"
        self.query_one("#outlook-status", Static).update(status)
        self._refresh_table()

    def _refresh_table(self) -> None:
        if self._models is None:
            return
        competition = self.query_one("#competition-select", Select).value
        if competition is Select.BLANK:
            competition = "wins"
        table = self.query_one("#outlook-table", DataTable)
        table.clear()
        for cells in outlook_rows(self._models, competition):
            table.add_row(*cells)

    def on_select_changed(self, event: Select.Changed) -> None:
        self._refresh_table()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "run-simulation":
            self.query_one("#outlook-loading").display = True
            self._load_data(self._requested_trials())

    def action_show_help(self) -> None:
        self.app.push_screen(HelpScreen("Season Outlook Help", HELP_TEXT))
