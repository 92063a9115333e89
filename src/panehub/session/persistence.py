"""Session 持久化

提供会话保存/恢复功能：
- 快照：每个 tab 只保存 {workspace, cwd, label, is_split, left/right command}
- 恢复：通过 create_tab / create_split_tab 重放
- 原子写入（temp + rename）
- checksum 校验（sha256）
- version 版本控制
- 损坏文件跳过告警
"""

import hashlib
import json
import os
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import PERSIST_FILE, PERSIST_VERSION
from ..pane.types import PaneLeaf, PaneSplit
from ..telemetry import get_logger, metrics

if TYPE_CHECKING:
    from ..tabs.manager import TabManager
    from ..tabs.types import TerminalTab

logger = get_logger(__name__)


@dataclass
class SessionTab:
    """单个 tab 的持久化形式

    分屏 tab 只保存根节点两个直接子叶子的命令，不保存之后再分屏的完整树。
    """
    workspace_id: str
    cwd: str
    label: str
    is_split: bool = False
    left_command: str | None = None
    right_command: str | None = None

    def to_dict(self) -> dict:
        return {
            "workspaceId": self.workspace_id,
            "cwd": self.cwd,
            "label": self.label,
            "isSplit": self.is_split,
            "leftCommand": self.left_command,
            "rightCommand": self.right_command,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionTab":
        return cls(
            workspace_id=data["workspaceId"],
            cwd=data.get("cwd", ""),
            label=data.get("label", ""),
            is_split=bool(data.get("isSplit", False)),
            left_command=data.get("leftCommand"),
            right_command=data.get("rightCommand"),
        )


@dataclass
class SessionData:
    """会话数据"""
    tabs: list[SessionTab] = field(default_factory=list)
    active_workspace_id: str | None = None
    saved_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "activeWorkspaceId": self.active_workspace_id,
            "tabs": [tab.to_dict() for tab in self.tabs],
            "savedAt": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionData":
        return cls(
            tabs=[SessionTab.from_dict(t) for t in data.get("tabs", [])],
            active_workspace_id=data.get("activeWorkspaceId"),
            saved_at=data.get("savedAt", 0.0),
        )


def _leaf_command(node) -> str | None:
    return node.initial_command if isinstance(node, PaneLeaf) else None


def snapshot_tab(tab: "TerminalTab") -> SessionTab:
    """tab → SessionTab"""
    root = tab.pane_tree
    if isinstance(root, PaneSplit):
        return SessionTab(
            workspace_id=tab.workspace_id,
            cwd=tab.cwd,
            label=tab.label,
            is_split=True,
            left_command=_leaf_command(root.first),
            right_command=_leaf_command(root.second),
        )
    return SessionTab(
        workspace_id=tab.workspace_id,
        cwd=tab.cwd,
        label=tab.label,
        left_command=_leaf_command(root),
    )


def snapshot_tabs(tabs: list["TerminalTab"]) -> list[SessionTab]:
    return [snapshot_tab(tab) for tab in tabs]


def snapshot(manager: "TabManager", active_workspace_id: str | None = None) -> SessionData:
    """从 TabManager 构建 SessionData"""
    if active_workspace_id is None and manager.active_tab is not None:
        active_workspace_id = manager.active_tab.workspace_id
    return SessionData(
        tabs=snapshot_tabs(manager.tabs),
        active_workspace_id=active_workspace_id,
    )


def restore_tabs(manager: "TabManager", tabs: list[SessionTab]) -> list[str]:
    """重放 SessionTab 列表

    Returns:
        新建的 tab id 列表（与输入顺序一致）
    """
    tab_ids = []
    for tab in tabs:
        if tab.is_split:
            tab_id = manager.create_split_tab(
                tab.workspace_id, tab.cwd, tab.label, tab.left_command, tab.right_command
            )
        else:
            tab_id = manager.create_tab(tab.workspace_id, tab.cwd, tab.label, tab.left_command)
        tab_ids.append(tab_id)
    logger.info(f"[Persist] Restored {len(tab_ids)} tabs")
    return tab_ids


def _calculate_checksum(data: bytes) -> str:
    """计算 SHA256 checksum"""
    return hashlib.sha256(data).hexdigest()


def _encode(data: dict) -> bytes:
    return json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8")


def save(
    session: SessionData,
    path: Path | None = None,
    version: int = PERSIST_VERSION,
) -> bool:
    """保存会话到文件

    使用 temp + rename 原子写入，包含 checksum 校验。

    Returns:
        是否成功
    """
    path = path or PERSIST_FILE

    try:
        data = {"version": version, **session.to_dict()}
        data["checksum"] = _calculate_checksum(_encode(data))
        json_bytes = _encode(data)

        path.parent.mkdir(parents=True, exist_ok=True)

        # 原子写入：先写临时文件，再 rename
        fd, temp_path = tempfile.mkstemp(prefix="panehub_session_", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(json_bytes)
            os.replace(temp_path, path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        logger.info(f"[Persist] Saved {len(session.tabs)} tabs to {path}")
        return True

    except Exception as e:
        logger.error(f"[Persist] Save failed: {e}")
        metrics.inc("persist.error", {"op": "save"})
        return False


def load(
    path: Path | None = None,
    version: int = PERSIST_VERSION,
) -> SessionData | None:
    """加载会话文件

    校验 version 和 checksum，失败时返回 None。
    """
    path = path or PERSIST_FILE

    if not path.exists():
        logger.debug(f"[Persist] File not found: {path}")
        return None

    try:
        data = json.loads(path.read_bytes().decode("utf-8"))

        file_version = data.get("version", 1)
        if file_version != version:
            logger.warning(f"[Persist] Version mismatch: file={file_version}, expected={version}")
            metrics.inc("persist.error", {"op": "load", "reason": "version"})
            return None

        stored_checksum = data.pop("checksum", None)
        if stored_checksum and _calculate_checksum(_encode(data)) != stored_checksum:
            logger.warning("[Persist] Checksum mismatch")
            metrics.inc("persist.error", {"op": "load", "reason": "checksum"})
            return None

        session = SessionData.from_dict(data)
        logger.info(f"[Persist] Loaded {len(session.tabs)} tabs")
        return session

    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"[Persist] Invalid JSON: {e}")
        metrics.inc("persist.error", {"op": "load", "reason": "json"})
        return None

    except (KeyError, TypeError, AttributeError) as e:
        logger.warning(f"[Persist] Malformed session: {e}")
        metrics.inc("persist.error", {"op": "load", "reason": "schema"})
        return None

    except OSError as e:
        logger.error(f"[Persist] Load failed: {e}")
        metrics.inc("persist.error", {"op": "load", "reason": "io"})
        return None


def clear(path: Path | None = None) -> bool:
    """删除会话文件"""
    path = path or PERSIST_FILE

    try:
        if path.exists():
            os.unlink(path)
            logger.info(f"[Persist] Deleted: {path}")
        return True
    except OSError as e:
        logger.error(f"[Persist] Delete failed: {e}")
        return False
