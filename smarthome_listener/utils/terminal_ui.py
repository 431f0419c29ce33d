"""Terminal status display using Rich.

A transient status panel at the bottom of the terminal shows what the
listener is doing. Recognised commands, assistant replies and system
messages scroll above it as they happen. Commands and replies are printed
separately because replies arrive asynchronously from the dispatch thread.
"""

import threading
from datetime import datetime

from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from smarthome_listener.listener.state_machine import ListenState
from smarthome_listener.listener.wake_word import DEFAULT_WAKE_PHRASE

# state -> (panel colour, status label)
_STATE_STYLES = {
    ListenState.WAITING: ("yellow", "Paused"),
    ListenState.LISTENING_FOR_WAKE: ("green", "Listening for the wake phrase..."),
    ListenState.LISTENING_FOR_COMMAND: ("bright_green", "Listening for a command..."),
}


def _timestamp() -> str:
    return datetime.now().strftime("[%H:%M:%S] ")


class TerminalUI:
    """Rich-based status panel for the listener.

    Safe to call from the listening thread and the dispatch thread.

    Usage::

        with TerminalUI(wake_phrase="hey smart home") as ui:
            ui.set_state(ListenState.LISTENING_FOR_COMMAND)
            ui.show_command("turn on the kitchen lights")
            ui.show_reply("Kitchen lights are on.")
    """

    def __init__(self, wake_phrase: str = DEFAULT_WAKE_PHRASE, console: Console | None = None):
        self.console = console or Console()
        self.wake_phrase = wake_phrase
        self._state = ListenState.LISTENING_FOR_WAKE
        self._commands = 0
        self._replies = 0
        self._lock = threading.Lock()
        self._live: Live | None = None

    def __enter__(self) -> "TerminalUI":
        self._live = Live(
            self._render(),
            console=self.console,
            refresh_per_second=4,
            transient=True,
        )
        self._live.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
        return None

    @property
    def state(self) -> ListenState:
        return self._state

    def set_state(self, state: ListenState) -> None:
        with self._lock:
            self._state = state
            self._refresh()

    def show_command(self, text: str) -> None:
        """Print a recognised command above the panel."""
        line = Text(_timestamp(), style="dim")
        line.append("You: ", style="bold green")
        line.append(text)
        with self._lock:
            self._commands += 1
            self._print(line)
            self._refresh()

    def show_reply(self, text: str) -> None:
        """Print an assistant reply (rendered as Markdown) above the panel."""
        header = Text(_timestamp(), style="dim")
        header.append("Assistant:", style="bold cyan")
        with self._lock:
            self._replies += 1
            self._print(header)
            self._print(Markdown(text))
            self._print()
            self._refresh()

    def log(self, message: str) -> None:
        """Print a dim system message above the panel (only while live)."""
        if self._live is None:
            return
        with self._lock:
            self._print(Text(_timestamp() + message, style="dim"))

    def _print(self, *renderables) -> None:
        console = self._live.console if self._live is not None else self.console
        console.print(*renderables)

    def _refresh(self) -> None:
        if self._live is not None:
            self._live.update(self._render())

    def _render(self) -> Panel:
        color, label = _STATE_STYLES[self._state]

        content = Text()
        content.append("Status: ", style="bold")
        content.append(label, style=f"bold {color}")
        content.append(f"\nWake phrase: \"{self.wake_phrase}\"", style="dim")
        content.append(f"  Commands: {self._commands}  Replies: {self._replies}", style="dim")

        return Panel(
            content,
            title="[bold]Smart Home Listener[/bold]",
            border_style=color,
        )
