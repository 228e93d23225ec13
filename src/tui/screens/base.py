"""Base screen with shared navigation bindings and footer."""

from textual.screen import Screen


class BaseScreen(Screen):
    """Base class for all TUI screens — provides navigation keybindings."""

    BINDINGS = [
        ("escape", "go_home", "Home"),
        ("d", "goto('data_refresh')", "Data Refresh"),
        ("l", "goto('leaderboards')", "Leaderboards"),
        ("o", "goto('outlook')", "Outlook"),
        ("a", "goto('achievements')", "Achievements"),
        ("n", "goto('recap')", "Recap"),
        ("q", "quit", "Quit"),
        ("question_mark", "show_help", "Help"),
    ]

    @property
    def service(self):
        """The LeagueService owned by the app."""
        return self.app.service

    def action_go_home(self) -> None:
        """Pop back to the default (home) screen."""
        while len(self.app.screen_stack) > 1:
            self.app.pop_screen()
        self.app.sub_title = self.service.config.league_name

    def action_goto(self, screen_name: str) -> None:
        """Switch to a named screen."""
        while len(self.app.screen_stack) > 1:
            self.app.pop_screen()
        from src.tui.app import WinPoolApp
        self.app.sub_title = WinPoolApp.SCREEN_TITLES.get(screen_name, screen_name)
        self.app.push_screen(screen_name)

    def action_show_help(self) -> None:
        """Override in subclasses to show screen-specific help."""
        pass
