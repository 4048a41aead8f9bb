"""User intents and the key bindings that produce them.

Keys are plain strings: a printable character ("j", "?", " ") or a named
key ("up", "pagedown", "enter", "esc", "ctrl+d", ...), as produced by
tui.KeyReader.
"""

from enum import Enum


class ViewMode(Enum):
    """Which view model currently owns the screen."""
    LIST = "list"
    TREE = "tree"


class Command(Enum):
    NONE = "none"
    QUIT = "quit"
    SHOW_HELP = "show_help"
    HIDE_HELP = "hide_help"
    START_SEARCH = "start_search"
    SUBMIT_SEARCH = "submit_search"
    CANCEL_SEARCH = "cancel_search"
    SWITCH_TAB_LEFT = "switch_tab_left"
    SWITCH_TAB_RIGHT = "switch_tab_right"
    SELECT_NEXT = "select_next"
    SELECT_PREVIOUS = "select_previous"
    SELECT_FIRST = "select_first"
    SELECT_LAST = "select_last"
    PAGE_DOWN = "page_down"
    PAGE_UP = "page_up"
    OPEN_COMMENTS = "open_comments"
    CLOSE_COMMENTS = "close_comments"
    OPEN_CURRENT_IN_BROWSER = "open_current_in_browser"
    OPEN_COMMENT_LINK = "open_comment_link"
    EXPAND_SELECTED = "expand_selected"
    COLLAPSE_SELECTED = "collapse_selected"
    TOGGLE_SELECTED = "toggle_selected"
    TOGGLE_BOOKMARK = "toggle_bookmark"


# Shared by both modes
_NAVIGATION = {
    "j": Command.SELECT_NEXT,
    "down": Command.SELECT_NEXT,
    "k": Command.SELECT_PREVIOUS,
    "up": Command.SELECT_PREVIOUS,
    "pagedown": Command.PAGE_DOWN,
    "ctrl+d": Command.PAGE_DOWN,
    "pageup": Command.PAGE_UP,
    "ctrl+u": Command.PAGE_UP,
    "home": Command.SELECT_FIRST,
    "end": Command.SELECT_LAST,
    "?": Command.SHOW_HELP,
    "b": Command.TOGGLE_BOOKMARK,
    "q": Command.QUIT,
    "Q": Command.QUIT,
    "ctrl+c": Command.QUIT,
}

LIST_BINDINGS: dict[str, Command] = {
    **_NAVIGATION,
    "esc": Command.QUIT,
    "h": Command.SWITCH_TAB_LEFT,
    "left": Command.SWITCH_TAB_LEFT,
    "l": Command.SWITCH_TAB_RIGHT,
    "right": Command.SWITCH_TAB_RIGHT,
    "enter": Command.OPEN_COMMENTS,
    "o": Command.OPEN_CURRENT_IN_BROWSER,
    "O": Command.OPEN_CURRENT_IN_BROWSER,
    "/": Command.START_SEARCH,
}

TREE_BINDINGS: dict[str, Command] = {
    **_NAVIGATION,
    "esc": Command.CLOSE_COMMENTS,
    "h": Command.COLLAPSE_SELECTED,
    "left": Command.COLLAPSE_SELECTED,
    "l": Command.EXPAND_SELECTED,
    "right": Command.EXPAND_SELECTED,
    "enter": Command.TOGGLE_SELECTED,
    " ": Command.TOGGLE_SELECTED,
    "o": Command.OPEN_COMMENT_LINK,
    "O": Command.OPEN_COMMENT_LINK,
    "/": Command.START_SEARCH,
}

HELP_BINDINGS: dict[str, Command] = {
    "?": Command.HIDE_HELP,
    "esc": Command.HIDE_HELP,
    "q": Command.QUIT,
    "Q": Command.QUIT,
    "ctrl+c": Command.QUIT,
}


def help_command(key: str) -> Command:
    return HELP_BINDINGS.get(key, Command.NONE)


def mode_command(mode: ViewMode, key: str) -> Command:
    """Translate a key against the active view's own bindings."""
    bindings = LIST_BINDINGS if mode is ViewMode.LIST else TREE_BINDINGS
    return bindings.get(key, Command.NONE)


HELP_TEXT = """\
Navigation:
  ← / h   previous tab
  → / l   next tab
  ↑ / k   move selection up
  ↓ / j   move selection down
  pg↓     page down
  pg↑     page up
  ctrl+d  page down
  ctrl+u  page up
  home    jump to first item
  end     jump to last item

Actions:
  enter   view comments for the selected item
  o       open the selected item in your browser
  b       toggle bookmark for the selection
  /       search stories
  q       quit
  esc     close help or quit from the list
  scroll  keep going past the end to load more stories
  ?       toggle this help

Comments:
  ↑ / k   move selection up
  ↓ / j   move selection down
  pg↓     page down
  pg↑     page up
  ← / h   collapse or go to parent
  → / l   expand or go to first child
  enter   toggle collapse or expand
  o       open the selected comment in your browser
  esc     return to the story list
"""
