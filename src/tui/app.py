"""NFL Win Pool TUI — main application."""

from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Static

from src.league_service import LeagueService
from src.tui.screens.achievements import AchievementsScreen
from src.tui.screens.data_refresh import DataRefreshScreen
from src.tui.screens.leaderboards import LeaderboardsScreen
from src.tui.screens.outlook import OutlookScreen
from src.tui.screens.recap import RecapScreen

APP_HELP = (
    "Keybindings:\n"
    "  d  Data Refresh\n"
    "  l  Leaderboards (most wins / most losses)\n"
    "  o  Season Outlook (Monte Carlo)\n"
    "  a  Achievements\n"
    "  n  Weekly Recap\n"
    "  q  Quit\n"
    "  ?  This help screen\n"
)


class WinPoolApp(App):
    """A keyboard-driven dashboard for the NFL win pool."""

    TITLE = "NFL Win Pool"
    CSS_PATH = "styles/app.tcss"

    BINDINGS = [
        ("d", "goto('data_refresh')", "Data Refresh"),
        ("l", "goto('leaderboards')", "Leaderboards"),
        ("o", "goto('outlook')", "Outlook"),
        ("a", "goto('achievements')", "Achievements"),
        ("n", "goto('recap')", "Recap"),
        ("q", "quit", "Quit"),
        ("question_mark", "help", "Help"),
    ]

    SCREEN_TITLES = {
        "data_refresh": "Data Refresh",
        "leaderboards": "Leaderboards",
        "outlook": "Season Outlook",
        "achievements": "Achievements",
        "recap": "Weekly Recap",
    }

    def __init__(self, service: LeagueService | None = None) -> None:
        super().__init__()
        self.service = service or LeagueService()

    def on_mount(self) -> None:
        self.sub_title = self.service.config.league_name
        # install_screen preserves instances between switches
        self.install_screen(DataRefreshScreen(), name="data_refresh")
        self.install_screen(LeaderboardsScreen(), name="leaderboards")
        self.install_screen(OutlookScreen(), name="outlook")
        self.install_screen(AchievementsScreen(), name="achievements")
        self.install_screen(RecapScreen(), name="recap")

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(
            f"{self.service.config.league_name} {self.service.config.season}\n\n{APP_HELP}",
            id="home-text",
        )
        yield Footer()

    def action_goto(self, screen_name: str) -> None:
        while len(self.screen_stack) > 1:
            self.pop_screen()
        self.sub_title = self.SCREEN_TITLES.get(screen_name, screen_name)
        self.push_screen(screen_name)

    def action_help(self) -> None:
        from src.tui.screens.help import HelpScreen
        self.push_screen(HelpScreen("NFL Win Pool Help", APP_HELP))


def main() -> None:
    app = WinPoolApp()
    app.run()


if __name__ == "__main__":
    main()
