"""Tests for screen rendering and the scroll geometry it writes back."""

from rich.console import Console

from hn_tui.bookmarks import Bookmarks
from hn_tui.commands import Command
from hn_tui.events import CommentsLoaded, TabItemsLoaded
from hn_tui.models import NEW, TOP, Comment, CommentThread, Entry, Tab
from hn_tui.render import render
from hn_tui.state import State


def _state(tmp_path, count: int = 30) -> State:
    tabs = [Tab(category=TOP, label="top"), Tab(category=NEW, label="new")]
    state = State(tabs, Bookmarks(tmp_path / "b.json"), batch_size=30)
    entries = [Entry(id=str(i), title=f"Story {i}", detail=f"{i} points") for i in range(count)]
    state.apply_event(TabItemsLoaded(0, result=entries))
    return state


def _text(renderable) -> str:
    console = Console(width=80, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestRender:

    def test_list_screen(self, tmp_path):
        state = _state(tmp_path)
        output = _text(render(state, 10, 80))

        assert "top" in output
        assert "new" in output
        assert "Story 0" in output
        assert "Story 9" not in output
        assert state.list_height == 7

    def test_offset_follows_selection(self, tmp_path):
        state = _state(tmp_path)
        render(state, 10, 80)
        for _ in range(10):
            state.dispatch(Command.SELECT_NEXT)

        output = _text(render(state, 10, 80))

        assert state.active_list.offset() == 4
        assert "Story 10" in output
        assert "Story 3 " not in output

    def test_help_overlay(self, tmp_path):
        state = _state(tmp_path)
        state.dispatch(Command.SHOW_HELP)
        output = _text(render(state, 40, 80))
        assert "toggle this help" in output

    def test_comment_tree(self, tmp_path):
        state = _state(tmp_path)
        state.dispatch(Command.OPEN_COMMENTS)
        thread = CommentThread(
            roots=[Comment(id=1, author="alice", text="parent", children=[
                Comment(id=2, author="bob", text="child"),
            ])],
            title="Discussion",
        )
        state.apply_event(CommentsLoaded(0, result=thread))
        state.dispatch(Command.COLLAPSE_SELECTED)

        output = _text(render(state, 30, 80))

        assert "Discussion" in output
        assert "[+]" in output
        assert "bob" not in output

    def test_empty_tab_placeholder(self, tmp_path):
        state = _state(tmp_path)
        state.dispatch(Command.SWITCH_TAB_RIGHT)
        output = _text(render(state, 10, 80))
        assert "Loading..." in output
