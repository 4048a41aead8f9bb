"""Status line bookkeeping: transient messages and the help overlay."""

import time
from dataclasses import dataclass, field

LIST_STATUS = "↑/k up • ↓/j down • enter comments • o open • b bookmark • / search • ? help"
COMMENTS_STATUS = "↑/k up • ↓/j down • ←/h collapse • →/l expand • enter toggle • esc back"
HELP_STATUS = "Press ? or esc to close help"
LOADING_ENTRIES_STATUS = "Loading more entries..."
LOADING_COMMENTS_STATUS = "Loading comments..."


@dataclass
class TransientMessage:
    """A status message that reverts to `original` once it expires."""

    current: str
    original: str
    duration: float = 3.0
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self, now: float | None = None) -> bool:
        if now is None:
            now = time.monotonic()
        return now >= self.created_at + self.duration


class HelpView:
    """Help overlay visibility, remembering the status line it covered."""

    def __init__(self) -> None:
        self._visible = False
        self._message_backup: str | None = None

    def is_visible(self) -> bool:
        return self._visible

    def show(self, message: str) -> str:
        """Show the overlay; returns the new status line."""
        if self._visible:
            return message
        self._message_backup = message
        self._visible = True
        return HELP_STATUS

    def hide(self, message: str) -> str:
        """Hide the overlay; returns the restored status line."""
        if not self._visible:
            return message
        self._visible = False
        restored = self._message_backup or LIST_STATUS
        self._message_backup = None
        return restored
