"""Tests for the Season Outlook screen."""

import random

import pytest
from unittest.mock import patch

from textual.widgets import DataTable, Input, Select

from src.league_math import project_season
from src.tui.app import WinPoolApp
from src.tui.screens.help import HelpScreen
from src.tui.screens.outlook import OutlookScreen, outlook_rows


def _models(service, trials=40):
    results = service.get_results()
    return project_season(
        service.config.players, results.teams, results.current_week, trials,
        rng=random.Random(5),
    )


def _mock_load(screen, trials=None):
    screen._on_data_loaded(_models(screen.service, trials or 40))


class TestOutlookRows:
    def test_rows_sorted_by_first_place_odds(self, service):
        rows = outlook_rows(_models(service), "wins")
        assert [r[1] for r in rows] == ["Hot Hand", "Cold Feet"]
        assert rows[0][2] == "100.0%"

    def test_losses_competition(self, service):
        rows = outlook_rows(_models(service), "losses")
        assert rows[0][1] == "Cold Feet"
        assert rows[0][0] == "1"

    def test_range_and_magic_columns(self, service):
        row = outlook_rows(_models(service), "wins")[0]
        low, high = row[5].split("–")
        assert int(low) <= int(high)
        assert row[6].lstrip("-").isdigit()


class TestOutlookScreen:
    @pytest.mark.asyncio
    async def test_loads_from_service(self, service):
        app = WinPoolApp(service=service)
        async with app.run_test() as pilot:
            await pilot.press("o")
            await app.workers.wait_for_complete()
            await pilot.pause()
            assert isinstance(app.screen, OutlookScreen)
            table = app.screen.query_one("#outlook-table", DataTable)
            assert table.row_count == 2

    @pytest.mark.asyncio
    async def test_switch_competition(self, service):
        app = WinPoolApp(service=service)
        async with app.run_test() as pilot:
            with patch(
                "src.tui.screens.outlook.OutlookScreen._load_data",
                lambda self, trials=None: _mock_load(self, trials),
            ):
                await pilot.press("o")
                await pilot.pause()
                table = app.screen.query_one("#outlook-table", DataTable)
                assert table.get_row_at(0)[1] == "Hot Hand"
                app.screen.query_one("#competition-select", Select).value = "losses"
                await pilot.pause()
                assert table.get_row_at(0)[1] == "Cold Feet"

    @pytest.mark.asyncio
    async def test_run_passes_trials(self, service):
        seen = []

        def fake_load(self, trials=None):
            seen.append(trials)
            _mock_load(self, trials)

        app = WinPoolApp(service=service)
        async with app.run_test() as pilot:
            with patch("src.tui.screens.outlook.OutlookScreen._load_data", fake_load):
                await pilot.press("o")
                await pilot.pause()
                app.screen.query_one("#trials-input", Input).value = "25"
                await pilot.click("#run-simulation")
                await pilot.pause()
                assert seen == [None, 25]

    @pytest.mark.asyncio
    async def test_uniform_fallback_shows_equal_odds(self, service):
        from src.league_math import uniform_probabilities

        app = WinPoolApp(service=service)
        async with app.run_test() as pilot:
            with patch(
                "src.tui.screens.outlook.OutlookScreen._load_data",
                lambda self, trials=None: self._on_data_loaded(
                    uniform_probabilities(self.service.config.players, self.service.get_results().teams)
                ),
            ):
                await pilot.press("o")
                await pilot.pause()
                table = app.screen.query_one("#outlook-table", DataTable)
                assert table.get_row_at(0)[2] == "50.0%"
                assert table.get_row_at(1)[2] == "50.0%"

    @pytest.mark.asyncio
    async def test_help_overlay(self, service):
        app = WinPoolApp(service=service)
        async with app.run_test() as pilot:
            with patch(
                "src.tui.screens.outlook.OutlookScreen._load_data",
                lambda self, trials=None: _mock_load(self, trials),
            ):
                await pilot.press("o")
                await pilot.pause()
                await pilot.press("question_mark")
                assert isinstance(app.screen, HelpScreen)
