"""Tests for app instantiation, screen switching, keybindings."""

import pytest
from textual.widgets import Footer, Static

from src.tui.app import WinPoolApp
from src.tui.screens.achievements import AchievementsScreen
from src.tui.screens.data_refresh import DataRefreshScreen
from src.tui.screens.leaderboards import LeaderboardsScreen
from src.tui.screens.outlook import OutlookScreen
from src.tui.screens.recap import RecapScreen


@pytest.mark.asyncio
async def test_app_instantiates(service):
    """WinPoolApp instantiates without error using run_test pilot."""
    app = WinPoolApp(service=service)
    async with app.run_test() as pilot:
        assert app.title == "NFL Win Pool"
        assert app.sub_title == "Test Pool"
        home = app.query_one("#home-text", Static)
        assert home is not None


@pytest.mark.asyncio
async def test_keybinding_d_switches_to_data_refresh(service):
    app = WinPoolApp(service=service)
    async with app.run_test() as pilot:
        await pilot.press("d")
        assert isinstance(app.screen, DataRefreshScreen)
        assert app.sub_title == "Data Refresh"


@pytest.mark.asyncio
async def test_keybinding_q_quits(service):
    """Pressing q exits the app."""
    app = WinPoolApp(service=service)
    async with app.run_test() as pilot:
        await pilot.press("q")
        # If we reach here without hanging, the app exited


@pytest.mark.asyncio
async def test_all_screen_keybindings(service):
    """All screen keybindings switch to the correct screen type."""
    bindings = {
        "d": DataRefreshScreen,
        "l": LeaderboardsScreen,
        "o": OutlookScreen,
        "a": AchievementsScreen,
        "n": RecapScreen,
    }
    app = WinPoolApp(service=service)
    async with app.run_test() as pilot:
        for key, screen_class in bindings.items():
            await pilot.press(key)
            assert isinstance(app.screen, screen_class), (
                f"Key '{key}' should switch to {screen_class.__name__}, "
                f"got {type(app.screen).__name__}"
            )


@pytest.mark.asyncio
async def test_escape_returns_home(service):
    app = WinPoolApp(service=service)
    async with app.run_test() as pilot:
        await pilot.press("d")
        await pilot.press("escape")
        assert len(app.screen_stack) == 1
        assert app.sub_title == "Test Pool"


@pytest.mark.asyncio
async def test_help_overlay_from_app(service):
    """Pressing ? on the app shows a help modal."""
    from src.tui.screens.help import HelpScreen

    app = WinPoolApp(service=service)
    async with app.run_test() as pilot:
        await pilot.press("question_mark")
        assert isinstance(app.screen, HelpScreen)
        await pilot.press("escape")
        assert not isinstance(app.screen, HelpScreen)


@pytest.mark.asyncio
async def test_footer_shows_keybindings(service):
    app = WinPoolApp(service=service)
    async with app.run_test() as pilot:
        footer = app.query_one(Footer)
        assert footer is not None
