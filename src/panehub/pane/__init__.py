"""Pane 模块

提供 pane 树的核心组件：
- types: 数据类型定义（PaneLeaf, PaneSplit, PaneRect 等）
- tree: 纯函数树算法（split / remove / resize / 几何 / 方向焦点）
"""

from .types import (
    FocusDirection,
    PaneLeaf,
    PaneNode,
    PaneRect,
    PaneSplit,
    SplitDirection,
    SplitDivider,
)
from .tree import (
    collect_leaf_ids,
    compute_pane_rects,
    compute_split_dividers,
    count_agent_panes,
    count_leaves,
    create_leaf,
    find_node,
    find_pane,
    focus_direction,
    is_agent_command,
    remove_leaf,
    replace_node,
    resize_pane,
    set_session_id,
    split_pane,
    tree_to_dict,
)

__all__ = [
    # Types
    "FocusDirection",
    "PaneLeaf",
    "PaneNode",
    "PaneRect",
    "PaneSplit",
    "SplitDirection",
    "SplitDivider",
    # Tree
    "collect_leaf_ids",
    "compute_pane_rects",
    "compute_split_dividers",
    "count_agent_panes",
    "count_leaves",
    "create_leaf",
    "find_node",
    "find_pane",
    "focus_direction",
    "is_agent_command",
    "remove_leaf",
    "replace_node",
    "resize_pane",
    "set_session_id",
    "split_pane",
    "tree_to_dict",
]
