"""Terminal loop for hn-tui: keys in, commands dispatched, events applied."""

import logging
import sys

from rich.console import Console
from rich.live import Live

from .bookmarks import BookmarkError
from .commands import Command
from .executor import EffectExecutor
from .render import render
from .state import State

logger = logging.getLogger(__name__)

_SEQUENCES = {
    "[A": "up",
    "[B": "down",
    "[C": "right",
    "[D": "left",
    "OA": "up",
    "OB": "down",
    "OC": "right",
    "OD": "left",
    "[H": "home",
    "[F": "end",
    "OH": "home",
    "OF": "end",
    "[1~": "home",
    "[4~": "end",
    "[7~": "home",
    "[8~": "end",
    "[5~": "pageup",
    "[6~": "pagedown",
    "[3~": "delete",
}

_CONTROL = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
}


def decode_key(raw: str) -> str | None:
    """Turn raw terminal input into a key name, or a printable character.

    Example: "\\x1b[A" -> "up", "\\x04" -> "ctrl+d", "j" -> "j"
    """
    if not raw:
        return None
    if raw == "\x1b":
        return "esc"
    if raw.startswith("\x1b"):
        rest = raw[1:]
        if rest in _SEQUENCES:
            return _SEQUENCES[rest]
        if len(rest) == 1 and rest.isprintable():
            return f"alt+{rest}"
        return None
    if raw in _CONTROL:
        return _CONTROL[raw]
    if len(raw) == 1 and ord(raw) < 32:
        return f"ctrl+{chr(ord(raw) + 96)}"
    return raw


class KeyReader:
    """Keyboard reader for Unix terminals in cbreak mode."""

    def __init__(self):
        self._old_settings = None
        self._fd = sys.stdin.fileno()

    def __enter__(self):
        import termios
        import tty

        self._old_settings = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        return self

    def __exit__(self, *args):
        import termios

        if self._old_settings:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)

    def _ready(self, timeout: float) -> bool:
        import select

        return bool(select.select([sys.stdin], [], [], timeout)[0])

    def read_key(self, timeout: float = 0.0) -> str | None:
        """Wait up to timeout seconds for a key; None if nothing arrived."""
        if not self._ready(timeout):
            return None
        raw = sys.stdin.read(1)
        if raw == "\x1b" and self._ready(0.05):
            raw += sys.stdin.read(1)
            if raw[-1] in "[O":
                # CSI/SS3: read until the final byte
                while self._ready(0.01):
                    char = sys.stdin.read(1)
                    raw += char
                    if char.isalpha() or char == "~":
                        break
        return decode_key(raw)


class App:
    """Owns the interaction loop. State is only touched from this thread."""

    def __init__(
        self,
        state: State,
        executor: EffectExecutor,
        poll_interval: float = 0.2,
        console: Console | None = None,
    ):
        self.state = state
        self.executor = executor
        self.poll_interval = poll_interval
        self.console = console or Console()

    def apply_events(self) -> None:
        for event in self.executor.drain():
            self.state.apply_event(event)

    def handle_key(self, key: str) -> bool:
        """Process one key. Returns True when the app should exit."""
        command = self.state.translate_key(key)
        if command is Command.NONE:
            return False
        logger.debug(f"Key {key!r} -> {command.name}")
        try:
            dispatch = self.state.dispatch(command)
        except BookmarkError as e:
            logger.warning(f"Bookmark update failed: {e}")
            self.state.clear_pending_effects()
            self.state.set_transient_message(f"error: {e}")
            return False
        self.executor.run(dispatch.effects)
        return dispatch.should_exit

    def _render(self):
        size = self.console.size
        return render(self.state, size.height, size.width)

    def run(self) -> None:
        """Run until a quit command or Ctrl+C."""
        self.executor.run(self.state.initial_effects())

        with KeyReader() as keys:
            with Live(
                self._render(),
                console=self.console,
                refresh_per_second=4,
                screen=True,
                auto_refresh=False,
            ) as live:
                while True:
                    self.apply_events()
                    try:
                        key = keys.read_key(timeout=self.poll_interval)
                    except KeyboardInterrupt:
                        break
                    if key is not None and self.handle_key(key):
                        break
                    self.apply_events()
                    self.state.update_transient_message()
                    live.update(self._render(), refresh=True)
