"""Rich renderables for the hn-tui screen.

Everything here reads State and writes back only scroll geometry: the
page height used for paging and the per-view scroll offsets.
"""

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .commands import HELP_TEXT, ViewMode
from .list_view import scroll_offset
from .state import State
from .utils import wrap_text

# Tab bar, blank line and status line
_CHROME_HEIGHT = 3
_PREVIEW_LINES = 6


def render_tabs(state: State) -> Text:
    """One line: every tab label, the active one highlighted."""
    text = Text(" ")
    active = state.active_tab
    for index, tab in enumerate(state.tabs):
        label = f" {tab.label} "
        if state.tab_loading[index]:
            label = f" {tab.label}… "
        if index == active:
            text.append(label, style="bold reverse")
        else:
            text.append(label, style="dim")
        text.append(" ")
    return text


def render_status(state: State) -> Text:
    style = "bold green" if state.search_active else "dim"
    return Text(f" {state.message}", style=style, no_wrap=True, overflow="ellipsis")


def render_help() -> Panel:
    return Panel(Text(HELP_TEXT.rstrip()), title="Help", border_style="cyan")


def render_list(state: State, height: int) -> Group:
    view = state.active_list
    if view.is_empty():
        active = state.active_tab
        loading = active is not None and state.tab_loading[active]
        placeholder = "Loading..." if loading else "Nothing here yet."
        return Group(Text(f"  {placeholder}", style="dim"))

    selected = view.selected_index()
    view.set_offset(scroll_offset(view.offset(), selected, height))
    offset = view.offset()

    rows = []
    bookmarks = state.bookmarks
    for index, entry in enumerate(view.items[offset:offset + height], start=offset):
        is_selected = index == selected
        row = Text(no_wrap=True, overflow="ellipsis")
        row.append(f"{index + 1:>4}. ", style="dim")
        row.append(entry.title, style="bold" if is_selected else "")
        if entry.id in bookmarks:
            row.append(" ★", style="yellow")
        if entry.detail:
            row.append(f"  {entry.detail}", style="dim")
        if is_selected:
            row.stylize("reverse")
        rows.append(row)
    return Group(*rows)


def render_comments(state: State, height: int, width: int) -> Group:
    view = state.comments
    if view is None:
        return Group()

    parts: list = [Text(f" {view.title}", style="bold", no_wrap=True, overflow="ellipsis")]
    if view.is_empty():
        parts.append(Text("  No comments yet.", style="dim"))
        return Group(*parts)

    visible, position = view.visible_with_selection()
    view.offset = scroll_offset(view.offset, position, height)

    for row_index, node_index in enumerate(
        visible[view.offset:view.offset + height], start=view.offset
    ):
        node = view.nodes[node_index]
        marker = "   "
        if node.has_children:
            marker = "[-]" if node.expanded else "[+]"
        row = Text(no_wrap=True, overflow="ellipsis")
        row.append("  " * node.depth)
        row.append(f"{marker} ", style="dim")
        row.append(node.header(), style="cyan")
        row.append(f"  {node.body}")
        if row_index == position:
            row.stylize("reverse")
        parts.append(row)

    node = view.selected_node()
    if node is not None and node.body:
        lines = wrap_text(node.body, max(width - 4, 10))[:_PREVIEW_LINES]
        parts.append(Panel(Text("\n".join(lines)), title=node.header(), border_style="dim"))
    return Group(*parts)


def render(state: State, height: int, width: int) -> Group:
    """Render the whole screen and record the body height on state."""
    if state.mode is ViewMode.TREE:
        # Title line plus the preview panel and its border
        body_height = max(height - _CHROME_HEIGHT - 1 - (_PREVIEW_LINES + 2), 1)
    else:
        body_height = max(height - _CHROME_HEIGHT, 1)
    state.set_list_height(body_height)

    parts: list = [render_tabs(state), Text("")]
    if state.help_visible:
        parts.append(render_help())
    elif state.mode is ViewMode.TREE:
        parts.append(render_comments(state, body_height, width))
    else:
        parts.append(render_list(state, body_height))
    parts.append(render_status(state))
    return Group(*parts)
