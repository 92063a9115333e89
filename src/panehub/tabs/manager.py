"""TabManager - Tab 管理器

职责：
- 管理有序 tab 列表与激活 tab
- 通过 pane 树算法修改 tab 的 pane 树，并在同一操作内修复 active/zoom 指针
- workspace 范围内的导航
- 创建/关闭时通知外部协作者（agent 计数、任务看板）

所有操作同步执行：读取当前状态，计算新状态，一次提交。
未知 id 一律为 no-op，不抛异常。
"""

from collections.abc import Callable
from typing import Any

from ..config import DEFAULT_TAB_LABEL, DUPLICATE_LABEL_PREFIX, MAX_PANES, VIEW_ONLY_TAB_COLOR
from ..core.ids import short_id
from ..pane import tree as pane_tree
from ..pane.types import (
    FocusDirection,
    PaneRect,
    PaneSplit,
    SplitDirection,
    SplitDivider,
)
from ..telemetry import get_logger, metrics
from .collaborators import AgentTracker, NullAgentTracker, NullTaskTracker, TaskTracker
from .types import TabManagerState, TerminalTab

logger = get_logger(__name__)

# 回调类型
OnChangeCallback = Callable[[TabManagerState], Any]


class TabManager:
    """Tab 管理器

    Pane 树和 tab 列表由 TabManager 独占；外部协作者只接收通知。

    Attributes:
        state: 当前 TabManagerState
    """

    def __init__(
        self,
        agent_tracker: AgentTracker | None = None,
        task_tracker: TaskTracker | None = None,
        state: TabManagerState | None = None,
    ):
        """初始化

        Args:
            agent_tracker: agent pane 计数协作者，缺省为 no-op
            task_tracker: 任务看板协作者，缺省为 no-op
            state: 初始状态（测试或恢复用）
        """
        self._agent_tracker = agent_tracker or NullAgentTracker()
        self._task_tracker = task_tracker or NullTaskTracker()
        self.state = state or TabManagerState()
        self._next_tab_number = 1
        self._on_change: OnChangeCallback | None = None

    # === 配置 ===

    def set_on_change(self, callback: OnChangeCallback | None) -> None:
        """设置状态变化回调（每次提交后调用）"""
        self._on_change = callback

    # === 查询 ===

    @property
    def tabs(self) -> list[TerminalTab]:
        return self.state.tabs

    @property
    def active_tab_id(self) -> str | None:
        return self.state.active_tab_id

    @property
    def active_tab(self) -> TerminalTab | None:
        if self.state.active_tab_id is None:
            return None
        return self.get_tab(self.state.active_tab_id)

    def get_tab(self, tab_id: str) -> TerminalTab | None:
        return next((t for t in self.state.tabs if t.id == tab_id), None)

    def tabs_in_workspace(self, workspace_id: str) -> list[TerminalTab]:
        """workspace 内的 tab，保持全局相对顺序"""
        return [t for t in self.state.tabs if t.workspace_id == workspace_id]

    def can_split(self, tab_id: str) -> bool:
        """UI 用于禁用 split 操作"""
        tab = self.get_tab(tab_id)
        return tab is not None and pane_tree.count_leaves(tab.pane_tree) < MAX_PANES

    def pane_rects(self, tab_id: str) -> list[PaneRect]:
        tab = self.get_tab(tab_id)
        return pane_tree.compute_pane_rects(tab.pane_tree) if tab else []

    def split_dividers(self, tab_id: str) -> list[SplitDivider]:
        tab = self.get_tab(tab_id)
        return pane_tree.compute_split_dividers(tab.pane_tree) if tab else []

    # === Tab 创建 ===

    def create_tab(
        self,
        workspace_id: str,
        cwd: str,
        label: str | None = None,
        initial_command: str | None = None,
    ) -> str:
        """创建单 pane tab 并激活

        Returns:
            新 tab id
        """
        leaf = pane_tree.create_leaf(initial_command)
        if not label:
            label = f"{DEFAULT_TAB_LABEL} {self._next_tab_number}"
            self._next_tab_number += 1
        tab = TerminalTab(
            label=label,
            pane_tree=leaf,
            active_pane_id=leaf.id,
            workspace_id=workspace_id,
            cwd=cwd,
            initial_command=initial_command or None,
        )
        return self._append_tab(tab)

    def create_split_tab(
        self,
        workspace_id: str,
        cwd: str,
        label: str,
        left_command: str | None,
        right_command: str | None,
    ) -> str:
        """创建左右分屏 tab（ratio 0.5，右侧 pane 激活）"""
        left = pane_tree.create_leaf(left_command)
        right = pane_tree.create_leaf(right_command)
        split = PaneSplit(direction=SplitDirection.HORIZONTAL, children=(left, right))
        tab = TerminalTab(
            label=label,
            pane_tree=split,
            active_pane_id=right.id,
            workspace_id=workspace_id,
            cwd=cwd,
        )
        return self._append_tab(tab)

    def create_view_only_tab(
        self,
        workspace_id: str,
        cwd: str,
        label: str,
        external_session_id: str,
    ) -> str:
        """创建绑定外部 session 的只读 tab"""
        leaf = pane_tree.create_leaf(external_session_id=external_session_id)
        tab = TerminalTab(
            label=label,
            pane_tree=leaf,
            active_pane_id=leaf.id,
            workspace_id=workspace_id,
            cwd=cwd,
            color=VIEW_ONLY_TAB_COLOR,
        )
        return self._append_tab(tab)

    def _append_tab(self, tab: TerminalTab) -> str:
        self.state.tabs.append(tab)
        self.state.active_tab_id = tab.id
        metrics.inc("tab.created")
        logger.info(
            f"[TabManager] Created tab {short_id(tab.id)} '{tab.label}' in {tab.workspace_id}"
        )
        for _ in range(pane_tree.count_agent_panes(tab.pane_tree)):
            self._notify_agent_increment(tab.workspace_id)
        self._commit()
        return tab.id

    # === Tab 关闭 ===

    def close_tab(self, tab_id: str) -> None:
        """关闭 tab

        关闭的是激活 tab 时：优先选同一下标的 tab，越界则选最后一个，无 tab 则为 None。
        """
        tab = self.get_tab(tab_id)
        if tab is None:
            return
        index = self.state.tabs.index(tab)

        self._notify_tab_removed(tab)

        new_tabs = [t for t in self.state.tabs if t.id != tab_id]
        new_active_id = self.state.active_tab_id
        if new_active_id == tab_id:
            if not new_tabs:
                new_active_id = None
            elif index >= len(new_tabs):
                new_active_id = new_tabs[-1].id
            else:
                new_active_id = new_tabs[index].id

        self.state.tabs = new_tabs
        self.state.active_tab_id = new_active_id
        self._commit()

    def close_other_tabs(self, tab_id: str) -> None:
        """关闭除 tab_id 外的所有 tab（全局顺序，不按 workspace）"""
        anchor = self.get_tab(tab_id)
        if anchor is None:
            return
        for tab in self.state.tabs:
            if tab.id != tab_id:
                self._notify_tab_removed(tab)
        self.state.tabs = [anchor]
        self.state.active_tab_id = anchor.id
        self._commit()

    def close_tabs_to_right(self, tab_id: str) -> None:
        """关闭 tab_id 右侧的所有 tab（全局顺序）

        原激活 tab 仍存在则保持，否则激活 anchor。
        """
        anchor = self.get_tab(tab_id)
        if anchor is None:
            return
        index = self.state.tabs.index(anchor)
        for tab in self.state.tabs[index + 1:]:
            self._notify_tab_removed(tab)

        kept = self.state.tabs[: index + 1]
        if not any(t.id == self.state.active_tab_id for t in kept):
            self.state.active_tab_id = anchor.id
        self.state.tabs = kept
        self._commit()

    def _notify_tab_removed(self, tab: TerminalTab) -> None:
        for _ in range(pane_tree.count_agent_panes(tab.pane_tree)):
            self._notify_agent_decrement(tab.workspace_id)
        self._notify_task_closed(tab.id)
        metrics.inc("tab.closed")
        logger.info(f"[TabManager] Closed tab {short_id(tab.id)} '{tab.label}'")

    # === Tab 属性 ===

    def set_active_tab(self, tab_id: str) -> None:
        """激活 tab 并清除其 has_activity"""
        tab = self.get_tab(tab_id)
        if tab is None:
            return
        self.state.active_tab_id = tab.id
        tab.has_activity = False
        self._commit()

    def rename_tab(self, tab_id: str, label: str) -> None:
        tab = self.get_tab(tab_id)
        if tab is None:
            return
        tab.label = label
        self._commit()

    def set_tab_color(self, tab_id: str, color: str | None) -> None:
        tab = self.get_tab(tab_id)
        if tab is None:
            return
        tab.color = color
        self._commit()

    def set_tab_activity(self, tab_id: str, has_activity: bool) -> None:
        """标记未查看输出（激活 tab 不标记）"""
        if tab_id == self.state.active_tab_id:
            return
        tab = self.get_tab(tab_id)
        if tab is None:
            return
        tab.has_activity = has_activity
        self._commit()

    def reorder_tabs(self, from_index: int, to_index: int) -> None:
        """拖拽排序：全局数组移动，与 workspace 分组无关"""
        tabs = self.state.tabs
        if not 0 <= from_index < len(tabs):
            return
        new_tabs = list(tabs)
        moved = new_tabs.pop(from_index)
        new_tabs.insert(max(0, min(to_index, len(new_tabs))), moved)
        self.state.tabs = new_tabs
        self._commit()

    def duplicate_tab(self, tab_id: str) -> str | None:
        """复制 tab：相同 workspace/cwd，新建单 pane（不复制布局），插入到源 tab 之后

        Returns:
            新 tab id，源 tab 不存在时返回 None
        """
        source = self.get_tab(tab_id)
        if source is None:
            return None
        leaf = pane_tree.create_leaf()
        tab = TerminalTab(
            label=f"{DUPLICATE_LABEL_PREFIX}{source.label}",
            pane_tree=leaf,
            active_pane_id=leaf.id,
            workspace_id=source.workspace_id,
            cwd=source.cwd,
        )
        index = self.state.tabs.index(source)
        self.state.tabs.insert(index + 1, tab)
        self.state.active_tab_id = tab.id
        metrics.inc("tab.created")
        logger.info(f"[TabManager] Duplicated tab {short_id(source.id)} -> {short_id(tab.id)}")
        self._commit()
        return tab.id

    # === 导航 ===

    def _scoped_tabs(self, workspace_id: str | None) -> list[TerminalTab]:
        # 未指定 workspace 时作用于全局列表（向后兼容）
        if workspace_id is None:
            return self.state.tabs
        return self.tabs_in_workspace(workspace_id)

    def _scoped_index(self, scoped: list[TerminalTab]) -> int | None:
        return next(
            (i for i, t in enumerate(scoped) if t.id == self.state.active_tab_id),
            None,
        )

    def activate_next(self, workspace_id: str | None = None) -> None:
        scoped = self._scoped_tabs(workspace_id)
        if len(scoped) <= 1:
            return
        index = self._scoped_index(scoped)
        next_index = 0 if index is None else (index + 1) % len(scoped)
        self.set_active_tab(scoped[next_index].id)

    def activate_prev(self, workspace_id: str | None = None) -> None:
        scoped = self._scoped_tabs(workspace_id)
        if len(scoped) <= 1:
            return
        index = self._scoped_index(scoped)
        prev_index = len(scoped) - 1 if index is None else (index - 1) % len(scoped)
        self.set_active_tab(scoped[prev_index].id)

    def activate_by_index(self, index: int, workspace_id: str | None = None) -> None:
        scoped = self._scoped_tabs(workspace_id)
        if 0 <= index < len(scoped):
            self.set_active_tab(scoped[index].id)

    def activate_first_in_workspace(self, workspace_id: str) -> None:
        scoped = self.tabs_in_workspace(workspace_id)
        if scoped:
            self.set_active_tab(scoped[0].id)

    # === Pane 操作 ===

    def split_pane(self, tab_id: str, pane_id: str, direction: SplitDirection | str) -> str | None:
        """分割 pane

        Returns:
            新 pane id；tab/pane 不存在或已达 MAX_PANES 时返回 None
        """
        tab = self.get_tab(tab_id)
        if tab is None:
            return None

        result = pane_tree.split_pane(tab.pane_tree, pane_id, SplitDirection(direction))
        if result is None:
            if pane_tree.count_leaves(tab.pane_tree) >= MAX_PANES:
                metrics.inc("pane.split.rejected")
                logger.debug(f"[TabManager] Split rejected, tab {short_id(tab_id)} is full")
            return None

        new_tree, new_pane_id = result
        tab.pane_tree = new_tree
        tab.active_pane_id = new_pane_id
        tab.zoomed_pane_id = None
        metrics.inc("pane.split")
        self._commit()
        return new_pane_id

    def close_pane(self, tab_id: str, pane_id: str) -> None:
        """关闭 pane（最后一个 pane 时关闭整个 tab）"""
        tab = self.get_tab(tab_id)
        if tab is None:
            return

        if pane_tree.count_leaves(tab.pane_tree) <= 1:
            # 未知 pane id 与其他操作一致为 no-op，不关闭 tab
            if pane_tree.find_pane(tab.pane_tree, pane_id) is not None:
                self.close_tab(tab_id)
            return

        closed = pane_tree.find_pane(tab.pane_tree, pane_id)
        if closed is None:
            return
        if pane_tree.is_agent_command(closed.initial_command):
            self._notify_agent_decrement(tab.workspace_id)

        new_tree = pane_tree.remove_leaf(tab.pane_tree, pane_id)
        if new_tree is None:
            return

        tab.pane_tree = new_tree
        if tab.active_pane_id == pane_id:
            tab.active_pane_id = pane_tree.collect_leaf_ids(new_tree)[0]
        if tab.zoomed_pane_id == pane_id:
            tab.zoomed_pane_id = None
        metrics.inc("pane.closed")
        self._commit()

    def set_active_pane(self, tab_id: str, pane_id: str) -> None:
        tab = self.get_tab(tab_id)
        if tab is None or pane_tree.find_pane(tab.pane_tree, pane_id) is None:
            return
        tab.active_pane_id = pane_id
        self._commit()

    def set_pane_session_id(self, tab_id: str, pane_id: str, session_id: str) -> None:
        """终端 runtime 启动进程后回填 session id"""
        tab = self.get_tab(tab_id)
        if tab is None:
            return
        new_tree = pane_tree.set_session_id(tab.pane_tree, pane_id, session_id)
        if new_tree is tab.pane_tree:
            return
        tab.pane_tree = new_tree
        logger.debug(
            f"[TabManager] Bound session {short_id(session_id)} to pane {short_id(pane_id)}"
        )
        self._commit()

    def resize_pane(self, tab_id: str, split_id: str, ratio: float) -> None:
        tab = self.get_tab(tab_id)
        if tab is None:
            return
        new_tree = pane_tree.resize_pane(tab.pane_tree, split_id, ratio)
        if new_tree is tab.pane_tree:
            return
        tab.pane_tree = new_tree
        self._commit()

    def toggle_zoom_pane(self, tab_id: str, pane_id: str) -> None:
        """切换放大，同时激活该 pane"""
        tab = self.get_tab(tab_id)
        if tab is None or pane_tree.find_pane(tab.pane_tree, pane_id) is None:
            return
        tab.zoomed_pane_id = None if tab.zoomed_pane_id == pane_id else pane_id
        tab.active_pane_id = pane_id
        self._commit()

    def focus_direction(self, tab_id: str, direction: FocusDirection | str) -> None:
        tab = self.get_tab(tab_id)
        if tab is None:
            return
        new_active = pane_tree.focus_direction(
            tab.pane_tree, tab.active_pane_id, FocusDirection(direction)
        )
        if new_active != tab.active_pane_id:
            self.set_active_pane(tab_id, new_active)

    # === 通知 ===

    def _notify_agent_increment(self, workspace_id: str) -> None:
        try:
            self._agent_tracker.increment(workspace_id)
        except Exception as e:
            logger.error(f"[TabManager] Agent increment failed for {workspace_id}: {e}")
            metrics.inc("notify.error", {"target": "agent"})

    def _notify_agent_decrement(self, workspace_id: str) -> None:
        try:
            self._agent_tracker.decrement(workspace_id)
        except Exception as e:
            logger.error(f"[TabManager] Agent decrement failed for {workspace_id}: {e}")
            metrics.inc("notify.error", {"target": "agent"})

    def _notify_task_closed(self, tab_id: str) -> None:
        try:
            self._task_tracker.notify_tab_closed(tab_id)
        except Exception as e:
            logger.error(f"[TabManager] Task tracker failed for tab {short_id(tab_id)}: {e}")
            metrics.inc("notify.error", {"target": "task"})

    def _commit(self) -> None:
        metrics.gauge("tabs.open", len(self.state.tabs))
        if self._on_change is None:
            return
        try:
            self._on_change(self.state)
        except Exception as e:
            logger.error(f"[TabManager] Change callback failed: {e}")
