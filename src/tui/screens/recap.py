"""Weekly Recap screen — generated commentary for each week."""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Footer, Header, LoadingIndicator, Select, Static
from textual import work

from src.narrative import Narrative
from src.tui.screens.base import BaseScreen
from src.tui.screens.help import HelpScreen

HELP_TEXT = """\
Weekly Recap

A short write-up of the week's standings. When GROK_API_KEY is set (in
the environment or .env) the recap is written by the text API;
otherwise, or if the API call fails, a template recap is used.

Controls:
  Week         Pick a stored recap
  Regenerate   Rewrite the selected week's recap

Keybindings:
  ?      Show this help
  Esc    Return home
"""


def render_narrative(n: Narrative) -> str:
    lines = [f"[bold]{escape(n.title)}[/bold]", f"[dim]{n.author} · {n.publish_date} · {n.word_count} words[/dim]", ""]
    lines.append(escape(n.content))
    if n.highlights:
        lines.append("")
        lines.append("[bold]Highlights[/bold]")
        lines.extend(f"  • {escape(h)}" for h in n.highlights)
    if n.next_week_preview:
        lines.append("")
        lines.append(f"[italic]{escape(n.next_week_preview)}[/italic]")
    return "\n".join(lines)


class RecapScreen(BaseScreen):
    """Browse and regenerate weekly recaps."""

    DEFAULT_CSS = """
    #recap-controls {
        height: 3;
        padding: 0 1;
    }
    #week-select {
        width: 24;
        margin-right: 1;
    }
    #recap-body {
        height: 1fr;
        padding: 1 2;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._narratives: dict[int, Narrative] = {}
        self._loading = True

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="recap-controls"):
            yield Select([], prompt="Week", id="week-select")
            yield Button("Regenerate", id="regenerate", variant="warning", disabled=True)
        yield LoadingIndicator(id="recap-loading")
        with VerticalScroll(id="recap-body"):
            yield Static("", id="recap-text")
        yield Footer()

    def on_mount(self) -> None:
        self._load_data()

    @work(exclusive=True, thread=True)
    def _load_data(self) -> None:
        try:
            narratives = self.service.get_narratives()
            self.app.call_from_thread(self._on_data_loaded, narratives)
        except Exception as e:
            self.app.call_from_thread(self._on_data_error, str(e))

    @work(exclusive=True, thread=True)
    def _regenerate(self, week: int) -> None:
        try:
            narrative = self.service.generate_narrative(week)
            self.app.call_from_thread(self._on_regenerated, narrative)
        except Exception as e:
            self.app.call_from_thread(self._on_data_error, str(e))

    def _hide_loading(self) -> None:
        for widget in self.query("#recap-loading"):
            widget.display = False

    def _on_data_error(self, error: str) -> None:
        self._hide_loading()
        self.query_one("#regenerate", Button).disabled = False
        self.query_one("#recap-text", Static).update(
            f"[red]No recap available — press [bold]d[/bold] to refresh[/red]\n\n{escape(error)}"
        )
        self.notify(f"Recap error: {error}", severity="error")

    def _on_data_loaded(self, narratives: list[Narrative]) -> None:
        self._hide_loading()
        self._narratives = {n.week: n for n in narratives}
        select = self.query_one("#week-select", Select)
        select.set_options([(f"Week {w}", w) for w in sorted(self._narratives, reverse=True)])
        self._loading = False
        if narratives:
            select.value = narratives[0].week
            self._show(narratives[0].week)
        self.query_one("#regenerate", Button).disabled = not narratives

    def _on_regenerated(self, narrative: Narrative) -> None:
        self._hide_loading()
        self._narratives[narrative.week] = narrative
        self._show(narrative.week)
        self.query_one("#regenerate", Button).disabled = False
        self.notify(f"Week {narrative.week} recap rewritten", severity="information")

    def _show(self, week: int) -> None:
        narrative = self._narratives.get(week)
        if narrative is not None:
            self.query_one("#recap-text", Static).update(render_narrative(narrative))

    def on_select_changed(self, event: Select.Changed) -> None:
        if not self._loading and event.value is not Select.BLANK:
            self._show(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "regenerate":
            week = self.query_one("#week-select", Select).value
            if week is Select.BLANK:
                return
            event.button.disabled = True
            self.query_one("#recap-loading").display = True
            self._regenerate(week)

    def action_show_help(self) -> None:
        self.app.push_screen(HelpScreen("Weekly Recap Help", HELP_TEXT))
