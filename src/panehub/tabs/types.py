"""Tab 数据类型定义"""

from dataclasses import dataclass, field

from ..core.ids import IdKind, generate_id
from ..pane.tree import tree_to_dict
from ..pane.types import PaneNode


@dataclass
class TerminalTab:
    """终端 Tab

    包装一棵 pane 树及 tab 级元数据。

    Attributes:
        label: 显示名称
        pane_tree: pane 树（由 TabManager 独占）
        active_pane_id: 当前激活 pane，始终指向树中存在的叶子
        workspace_id: 所属 workspace
        cwd: 工作目录
        color: tab 颜色
        has_activity: 有未查看的输出
        zoomed_pane_id: 放大显示的 pane
        initial_command: 创建 tab 时的启动命令
    """
    label: str
    pane_tree: PaneNode
    active_pane_id: str
    workspace_id: str
    cwd: str
    color: str | None = None
    has_activity: bool = False
    zoomed_pane_id: str | None = None
    initial_command: str | None = None
    id: str = field(default_factory=lambda: generate_id(IdKind.TAB))

    def to_dict(self) -> dict:
        """转换为可序列化的字典"""
        return {
            "id": self.id,
            "label": self.label,
            "color": self.color,
            "has_activity": self.has_activity,
            "pane_tree": tree_to_dict(self.pane_tree),
            "active_pane_id": self.active_pane_id,
            "zoomed_pane_id": self.zoomed_pane_id,
            "workspace_id": self.workspace_id,
            "cwd": self.cwd,
            "initial_command": self.initial_command,
        }


@dataclass
class TabManagerState:
    """Tab 集合状态

    tabs 的顺序即拖拽排序后的全局顺序（不按 workspace 分组）。
    """
    tabs: list[TerminalTab] = field(default_factory=list)
    active_tab_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "tabs": [tab.to_dict() for tab in self.tabs],
            "active_tab_id": self.active_tab_id,
        }
