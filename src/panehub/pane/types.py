"""Pane 模块数据类型定义

包含：
- PaneLeaf: 单个终端面
- PaneSplit: 两个子节点之间的分割
- PaneNode: PaneLeaf | PaneSplit
- PaneRect / SplitDivider: 归一化几何（0..1）
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..core.ids import IdKind, generate_id


class SplitDirection(Enum):
    """分割方向

    - HORIZONTAL: 左右排列（沿 X 轴分割）
    - VERTICAL: 上下排列（沿 Y 轴分割）
    """
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class FocusDirection(Enum):
    """方向焦点移动"""
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class PaneLeaf:
    """Pane 叶子节点

    Attributes:
        id: 唯一标识
        session_id: 终端 runtime 绑定的 session（进程启动后设置一次）
        initial_command: 启动命令
        external_session_id: 外部 session（存在时为只读 pane，无本地进程）
    """
    id: str = field(default_factory=lambda: generate_id(IdKind.PANE))
    session_id: str | None = None
    initial_command: str | None = None
    external_session_id: str | None = None

    @property
    def is_view_only(self) -> bool:
        return self.external_session_id is not None


@dataclass(frozen=True)
class PaneSplit:
    """Split 节点

    Attributes:
        direction: 分割方向
        children: (first, second) 恰好两个子节点
        ratio: first 沿分割轴所占比例
        id: 唯一标识
    """
    direction: SplitDirection
    children: tuple["PaneNode", "PaneNode"]
    ratio: float = 0.5
    id: str = field(default_factory=lambda: generate_id(IdKind.SPLIT))

    @property
    def first(self) -> "PaneNode":
        return self.children[0]

    @property
    def second(self) -> "PaneNode":
        return self.children[1]


PaneNode = Union[PaneLeaf, PaneSplit]


@dataclass(frozen=True)
class PaneRect:
    """叶子 pane 的归一化矩形"""
    leaf_id: str
    x: float
    y: float
    w: float
    h: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.w / 2, self.y + self.h / 2

    def to_dict(self) -> dict:
        return {"leaf_id": self.leaf_id, "x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True)
class SplitDivider:
    """Split 分隔条（零宽，仅用于渲染拖拽手柄）"""
    split_id: str
    direction: SplitDirection
    x: float
    y: float
    w: float
    h: float

    def to_dict(self) -> dict:
        return {
            "split_id": self.split_id,
            "direction": self.direction.value,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
        }
