"""Achievements screen — badge catalogue and per-player trophy cases."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widgets import DataTable, Footer, Header, LoadingIndicator, Static
from textual import work

from src.achievements import RARITIES, AchievementsData, player_achievement_summary
from src.tui.screens.base import BaseScreen
from src.tui.screens.help import HelpScreen

HELP_TEXT = """\
Achievements

Badges are checked every time data is refreshed. Once earned a badge is
kept for the rest of the season, even if the condition stops holding.

Rarities, rarest first:
  legendary  epic  rare  uncommon  common

Top table:     every badge, who holds it
Bottom table:  each player's badge count by rarity and latest badges

Keybindings:
  ?      Show this help
  Esc    Return home
"""

RARITY_COLORS = {
    "legendary": "bold yellow",
    "epic": "magenta",
    "rare": "cyan",
    "uncommon": "green",
    "common": "white",
}


class AchievementsScreen(BaseScreen):
    """Achievement definitions and who has earned them."""

    DEFAULT_CSS = """
    #badge-table {
        height: 1fr;
    }
    #player-badges-table {
        height: 1fr;
    }
    """

    def compose(self) -> ComposeResult:
        yield Header()
        yield LoadingIndicator(id="achievements-loading")
        yield Static("Badges", classes="panel-title")
        yield DataTable(id="badge-table", zebra_stripes=True)
        yield Static("Trophy cases", classes="panel-title")
        yield DataTable(id="player-badges-table", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#badge-table", DataTable).add_columns("", "Badge", "Rarity", "Description", "Holders")
        self.query_one("#player-badges-table", DataTable).add_columns(
            "Player", "Total", *[r.title() for r in RARITIES], "Latest",
        )
        self._load_data()

    @work(exclusive=True, thread=True)
    def _load_data(self) -> None:
        try:
            data = self.service.get_achievements()
            self.app.call_from_thread(self._on_data_loaded, data)
        except Exception as e:
            self.app.call_from_thread(self._on_data_error, str(e))

    def _hide_loading(self) -> None:
        for widget in self.query("#achievements-loading"):
            widget.display = False

    def _on_data_error(self, error: str) -> None:
        self._hide_loading()
        self.notify(f"Achievements error: {error}", severity="error")

    def _on_data_loaded(self, data: AchievementsData) -> None:
        self._hide_loading()
        names = {pid: p.name for pid, p in self.service.config.players.items()}

        badges = self.query_one("#badge-table", DataTable)
        badges.clear()
        for key, a in data.achievements.items():
            style = RARITY_COLORS.get(a.rarity, "white")
            holders = ", ".join(names.get(pid, pid) for pid in a.holders) or "[dim]none yet[/dim]"
            badges.add_row(a.icon, a.name, f"[{style}]{a.rarity}[/{style}]", a.description, holders, key=key)

        cases = self.query_one("#player-badges-table", DataTable)
        cases.clear()
        for pid in self.service.config.players:
            summary = player_achievement_summary(pid, data)
            latest = ", ".join(
                data.achievements[a.achievement].name
                for a in summary["recent"]
                if a.achievement in data.achievements
            )
            cases.add_row(
                names[pid],
                str(summary["total"]),
                *[str(summary["by_rarity"][r]) for r in RARITIES],
                latest,
                key=pid,
            )

    def action_show_help(self) -> None:
        self.app.push_screen(HelpScreen("Achievements Help", HELP_TEXT))
