"""HTTP 请求/响应模型"""

from typing import Literal

from pydantic import BaseModel

from panehub.pane.types import FocusDirection, SplitDirection


class ActionResponse(BaseModel):
    """操作响应

    未知 id 不报错，success=False 表示状态未变化。
    """

    success: bool
    id: str | None = None


class CreateTabRequest(BaseModel):
    """创建 tab 请求体"""

    kind: Literal["plain", "split", "view_only"] = "plain"
    workspace_id: str
    cwd: str = ""
    label: str | None = None
    initial_command: str | None = None  # plain
    left_command: str | None = None  # split
    right_command: str | None = None  # split
    external_session_id: str | None = None  # view_only


class RenameRequest(BaseModel):
    label: str


class ColorRequest(BaseModel):
    color: str | None = None


class ActivityRequest(BaseModel):
    has_activity: bool


class ReorderRequest(BaseModel):
    from_index: int
    to_index: int


class NavigateRequest(BaseModel):
    """Tab 导航请求体（不传 workspace_id 时作用于全局列表）"""

    action: Literal["next", "prev", "index", "first"]
    workspace_id: str | None = None
    index: int | None = None


class SplitRequest(BaseModel):
    direction: SplitDirection


class ResizeRequest(BaseModel):
    split_id: str
    ratio: float


class FocusRequest(BaseModel):
    direction: FocusDirection


class SessionBindRequest(BaseModel):
    session_id: str
