"""Collapsible comment tree stored as a flat pre-order arena."""

from .models import CommentNode, CommentThread
from .utils import item_url


class CommentView:
    """View model for one opened discussion.

    nodes is in pre-order, so the visible rows are always the arena order
    filtered by visibility and expand/collapse never reorders siblings.
    selected is an arena index, not a position among visible rows.
    """

    def __init__(
        self,
        nodes: list[CommentNode],
        link: str,
        title: str,
        selected: int | None = None,
    ) -> None:
        self.nodes = nodes
        self.link = link
        self.title = title
        self.offset = 0
        self.selected = selected
        if self.selected is None and self.nodes:
            self.selected = 0

    @classmethod
    def from_thread(
        cls, thread: CommentThread, fallback_title: str, fallback_link: str
    ) -> "CommentView":
        """Flatten a fetched thread in one top-down pass.

        Each node gets depth = parent depth + 1 and starts expanded. If the
        thread has a focus id, that node is pre-selected.
        """
        nodes: list[CommentNode] = []
        selected: int | None = None

        # (comment, parent index, depth); reversed so roots pop in order
        stack = [(comment, None, 0) for comment in reversed(thread.roots)]
        while stack:
            comment, parent, depth = stack.pop()
            if comment.deleted:
                body = "[deleted]"
            elif comment.dead:
                body = "[dead]"
            else:
                body = comment.text or ""

            index = len(nodes)
            nodes.append(CommentNode(
                id=comment.id,
                author=comment.author,
                body=body,
                depth=depth,
                dead=comment.dead,
                deleted=comment.deleted,
                parent=parent,
            ))
            if parent is not None:
                nodes[parent].children.append(index)

            if selected is None and thread.focus is not None and comment.id == thread.focus:
                selected = index

            for child in reversed(comment.children):
                stack.append((child, index, depth + 1))

        if thread.focus is not None or not thread.title.strip():
            title = fallback_title
        else:
            title = thread.title

        return cls(nodes, link=thread.url or fallback_link, title=title, selected=selected)

    def is_empty(self) -> bool:
        return not self.nodes

    def is_visible(self, index: int) -> bool:
        """A node is visible iff every ancestor is expanded."""
        parent = self.nodes[index].parent
        while parent is not None:
            node = self.nodes[parent]
            if not node.expanded:
                return False
            parent = node.parent
        return True

    def visible_indexes(self) -> list[int]:
        return [i for i in range(len(self.nodes)) if self.is_visible(i)]

    def visible_with_selection(self) -> tuple[list[int], int | None]:
        """Visible arena indices plus the selection's position among them."""
        visible = self.visible_indexes()
        position = None
        if self.selected is not None:
            try:
                position = visible.index(self.selected)
            except ValueError:
                position = None
        return visible, position

    def selected_node(self) -> CommentNode | None:
        if self.selected is None or not 0 <= self.selected < len(self.nodes):
            return None
        return self.nodes[self.selected]

    def selected_comment_link(self) -> str | None:
        node = self.selected_node()
        return None if node is None else item_url(node.id)

    def ensure_selection_visible(self) -> None:
        """Walk up from the selection to the nearest visible ancestor."""
        current = self.selected
        while current is not None:
            if self.is_visible(current):
                self.selected = current
                return
            current = self.nodes[current].parent
        visible = self.visible_indexes()
        self.selected = visible[0] if visible else None

    def toggle_selected(self) -> None:
        node = self.selected_node()
        if node is not None and node.has_children:
            node.expanded = not node.expanded
        self.ensure_selection_visible()

    def expand_selected(self) -> None:
        """Expand a collapsed node, or step into the first child of an expanded one."""
        node = self.selected_node()
        if node is None or not node.has_children:
            return
        if node.expanded:
            self.selected = node.children[0]
        else:
            node.expanded = True
        self.ensure_selection_visible()

    def collapse_selected(self) -> None:
        """Collapse an expanded node, or step up to the parent."""
        node = self.selected_node()
        if node is not None:
            if node.expanded and node.has_children:
                node.expanded = False
            elif node.parent is not None:
                self.selected = node.parent
        self.ensure_selection_visible()

    def move_by(self, delta: int) -> None:
        visible, position = self.visible_with_selection()
        if not visible:
            self.selected = None
            return
        target = (position or 0) + delta
        target = max(0, min(target, len(visible) - 1))
        self.selected = visible[target]

    def select_next(self) -> None:
        self.move_by(1)

    def select_previous(self) -> None:
        self.move_by(-1)

    def page_down(self, page_size: int) -> None:
        self.move_by(max(page_size - 1, 1))

    def page_up(self, page_size: int) -> None:
        self.move_by(-max(page_size - 1, 1))

    def select_visible_at(self, position: int) -> None:
        """Select by position in visible order, clamped."""
        visible = self.visible_indexes()
        if not visible:
            self.selected = None
            return
        self.selected = visible[max(0, min(position, len(visible) - 1))]

    def select_first(self) -> None:
        self.select_visible_at(0)

    def select_last(self) -> None:
        self.select_visible_at(len(self.nodes))
