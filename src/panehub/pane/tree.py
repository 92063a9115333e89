"""Pane tree algorithms

Pure functions over the persistent pane tree. Nodes are frozen, so every
mutation rebuilds the path from the root to the mutation site and returns a
new tree; untouched subtrees are shared. When nothing changes the original
tree object is returned as-is.
"""

from dataclasses import replace

from ..config import (
    AGENT_COMMAND,
    DEFAULT_SPLIT_RATIO,
    MAX_PANES,
    MAX_SPLIT_RATIO,
    MIN_SPLIT_RATIO,
)
from .types import (
    FocusDirection,
    PaneLeaf,
    PaneNode,
    PaneRect,
    PaneSplit,
    SplitDirection,
    SplitDivider,
)


def create_leaf(
    initial_command: str | None = None,
    external_session_id: str | None = None,
) -> PaneLeaf:
    """Create a fresh leaf with a new id and no session."""
    return PaneLeaf(
        initial_command=initial_command or None,
        external_session_id=external_session_id or None,
    )


# === Queries ===


def count_leaves(node: PaneNode) -> int:
    if isinstance(node, PaneLeaf):
        return 1
    return count_leaves(node.first) + count_leaves(node.second)


def collect_leaf_ids(node: PaneNode) -> list[str]:
    """Leaf ids in traversal order (first child before second)."""
    if isinstance(node, PaneLeaf):
        return [node.id]
    return collect_leaf_ids(node.first) + collect_leaf_ids(node.second)


def find_pane(node: PaneNode, pane_id: str) -> PaneLeaf | None:
    """Find a leaf by id."""
    if isinstance(node, PaneLeaf):
        return node if node.id == pane_id else None
    return find_pane(node.first, pane_id) or find_pane(node.second, pane_id)


def find_node(node: PaneNode, node_id: str) -> PaneNode | None:
    """Find any node (leaf or split) by id."""
    if node.id == node_id:
        return node
    if isinstance(node, PaneLeaf):
        return None
    return find_node(node.first, node_id) or find_node(node.second, node_id)


def is_agent_command(cmd: str | None) -> bool:
    """Whether a command launches the coding agent.

    Matches the bare command or any invocation with arguments,
    e.g. "claude" and "claude --resume".
    """
    if not cmd:
        return False
    return cmd == AGENT_COMMAND or f"{AGENT_COMMAND} " in cmd


def count_agent_panes(node: PaneNode) -> int:
    if isinstance(node, PaneLeaf):
        return 1 if is_agent_command(node.initial_command) else 0
    return count_agent_panes(node.first) + count_agent_panes(node.second)


def clamp_ratio(ratio: float) -> float:
    return max(MIN_SPLIT_RATIO, min(MAX_SPLIT_RATIO, ratio))


# === Structural operations ===


def replace_node(tree: PaneNode, target_id: str, replacement: PaneNode) -> PaneNode:
    """Replace the node with target_id anywhere in the tree."""
    if tree.id == target_id:
        return replacement
    if isinstance(tree, PaneLeaf):
        return tree
    first = replace_node(tree.first, target_id, replacement)
    second = replace_node(tree.second, target_id, replacement)
    if first is tree.first and second is tree.second:
        return tree
    return replace(tree, children=(first, second))


def split_pane(
    tree: PaneNode,
    target_leaf_id: str,
    direction: SplitDirection,
) -> tuple[PaneNode, str] | None:
    """Split a leaf in two.

    The target leaf is replaced by a split (ratio 0.5) holding a copy of the
    target first and a fresh leaf second. The caller makes the new leaf active
    and clears zoom.

    Returns:
        (new_tree, new_leaf_id), or None when the tree is at MAX_PANES or the
        target leaf does not exist
    """
    if count_leaves(tree) >= MAX_PANES:
        return None

    target = find_pane(tree, target_leaf_id)
    if target is None:
        return None

    new_leaf = create_leaf()
    split = PaneSplit(
        direction=SplitDirection(direction),
        children=(replace(target), new_leaf),
        ratio=DEFAULT_SPLIT_RATIO,
    )
    return replace_node(tree, target_leaf_id, split), new_leaf.id


def remove_leaf(tree: PaneNode, leaf_id: str) -> PaneNode | None:
    """Remove a leaf, promoting its sibling into the parent's place.

    Returns:
        The new tree, or None when the tree was the target leaf itself
        (tree now empty; the owning tab must be closed)
    """
    if isinstance(tree, PaneLeaf):
        return None if tree.id == leaf_id else tree

    first, second = tree.children
    if first.id == leaf_id:
        return second
    if second.id == leaf_id:
        return first

    new_first = remove_leaf(first, leaf_id)
    new_second = remove_leaf(second, leaf_id)
    if new_first is None:
        return second
    if new_second is None:
        return first
    if new_first is first and new_second is second:
        return tree
    return replace(tree, children=(new_first, new_second))


def resize_pane(tree: PaneNode, split_id: str, ratio: float) -> PaneNode:
    """Set a split's ratio, clamped to [MIN_SPLIT_RATIO, MAX_SPLIT_RATIO].

    Unknown split ids leave the tree unchanged.
    """
    target = find_node(tree, split_id)
    if not isinstance(target, PaneSplit):
        return tree
    return replace_node(tree, split_id, replace(target, ratio=clamp_ratio(ratio)))


def set_session_id(tree: PaneNode, leaf_id: str, session_id: str) -> PaneNode:
    """Bind a terminal session to a leaf."""
    target = find_pane(tree, leaf_id)
    if target is None:
        return tree
    return replace_node(tree, leaf_id, replace(target, session_id=session_id))


# === Geometry ===


def compute_pane_rects(
    node: PaneNode,
    x: float = 0.0,
    y: float = 0.0,
    w: float = 1.0,
    h: float = 1.0,
) -> list[PaneRect]:
    """Partition the region among the leaves.

    The returned rectangles tile the region exactly: they never overlap and
    their union is the input rectangle.
    """
    if isinstance(node, PaneLeaf):
        return [PaneRect(leaf_id=node.id, x=x, y=y, w=w, h=h)]

    if node.direction == SplitDirection.HORIZONTAL:
        first_w = w * node.ratio
        return compute_pane_rects(node.first, x, y, first_w, h) + compute_pane_rects(
            node.second, x + first_w, y, w - first_w, h
        )

    first_h = h * node.ratio
    return compute_pane_rects(node.first, x, y, w, first_h) + compute_pane_rects(
        node.second, x, y + first_h, w, h - first_h
    )


def compute_split_dividers(
    node: PaneNode,
    x: float = 0.0,
    y: float = 0.0,
    w: float = 1.0,
    h: float = 1.0,
) -> list[SplitDivider]:
    """One zero-thickness divider per split, parent before children."""
    if isinstance(node, PaneLeaf):
        return []

    if node.direction == SplitDirection.HORIZONTAL:
        first_w = w * node.ratio
        divider = SplitDivider(
            split_id=node.id, direction=node.direction, x=x + first_w, y=y, w=0.0, h=h
        )
        return [
            divider,
            *compute_split_dividers(node.first, x, y, first_w, h),
            *compute_split_dividers(node.second, x + first_w, y, w - first_w, h),
        ]

    first_h = h * node.ratio
    divider = SplitDivider(
        split_id=node.id, direction=node.direction, x=x, y=y + first_h, w=w, h=0.0
    )
    return [
        divider,
        *compute_split_dividers(node.first, x, y, w, first_h),
        *compute_split_dividers(node.second, x, y + first_h, w, h - first_h),
    ]


def focus_direction(
    tree: PaneNode,
    active_leaf_id: str,
    direction: FocusDirection,
) -> str:
    """Find the nearest leaf in a direction from the active one.

    Candidates are leaves whose center lies strictly in the requested
    half-plane; the closest by Manhattan distance wins, the first encountered
    on ties.

    Returns:
        The new active leaf id, or active_leaf_id when nothing qualifies
    """
    direction = FocusDirection(direction)
    rects = compute_pane_rects(tree)
    current = next((r for r in rects if r.leaf_id == active_leaf_id), None)
    if current is None:
        return active_leaf_id

    cx, cy = current.center
    best_id = active_leaf_id
    best_dist = float("inf")

    for rect in rects:
        if rect.leaf_id == current.leaf_id:
            continue
        rx, ry = rect.center

        if direction == FocusDirection.LEFT:
            valid = rx < cx
        elif direction == FocusDirection.RIGHT:
            valid = rx > cx
        elif direction == FocusDirection.UP:
            valid = ry < cy
        else:
            valid = ry > cy

        if not valid:
            continue
        dist = abs(rx - cx) + abs(ry - cy)
        if dist < best_dist:
            best_dist = dist
            best_id = rect.leaf_id

    return best_id


# === Serialization ===


def tree_to_dict(node: PaneNode) -> dict:
    """转换为可序列化的字典"""
    if isinstance(node, PaneLeaf):
        return {
            "type": "leaf",
            "id": node.id,
            "session_id": node.session_id,
            "initial_command": node.initial_command,
            "external_session_id": node.external_session_id,
        }
    return {
        "type": "split",
        "id": node.id,
        "direction": node.direction.value,
        "ratio": node.ratio,
        "children": [tree_to_dict(node.first), tree_to_dict(node.second)],
    }

