"""WebSocket 消息处理器

键盘快捷键等高频操作通过 WebSocket 发送，格式：
    {"action": "next", "workspace_id": "ws1"}
    {"action": "focus", "tab_id": "...", "direction": "left"}
状态变化由 TabManager 的 on_change 回调统一广播，这里只回复操作结果。
"""

import json
from dataclasses import dataclass

from fastapi import WebSocket

from panehub.pane.tree import find_pane
from panehub.pane.types import FocusDirection, SplitDirection
from panehub.tabs.manager import TabManager
from panehub.telemetry import get_logger

logger = get_logger(__name__)


@dataclass
class MessageHandler:
    """WebSocket 消息处理器"""

    manager: TabManager

    async def handle(self, websocket: WebSocket, data: str):
        """处理 WebSocket 消息"""
        try:
            msg = json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"[MessageHandler] Invalid message: {data[:80]}")
            return
        if not isinstance(msg, dict):
            return

        action = msg.get("action", "")
        try:
            success = self.dispatch(msg)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"[MessageHandler] Bad {action} message: {e}")
            success = False

        await websocket.send_json({"type": f"{action}_result", "success": success})

    def dispatch(self, msg: dict) -> bool:
        """执行单个动作

        Returns:
            目标存在且已执行返回 True
        """
        action = msg.get("action")
        workspace_id = msg.get("workspace_id")

        if action == "next":
            self.manager.activate_next(workspace_id)
            return True
        if action == "prev":
            self.manager.activate_prev(workspace_id)
            return True
        if action == "index":
            self.manager.activate_by_index(int(msg["index"]), workspace_id)
            return True

        tab_id = msg.get("tab_id", "")
        tab = self.manager.get_tab(tab_id)
        if tab is None:
            return False

        if action == "activate_tab":
            self.manager.set_active_tab(tab_id)
            return True
        if action == "close_tab":
            self.manager.close_tab(tab_id)
            return True
        if action == "focus":
            self.manager.focus_direction(tab_id, FocusDirection(msg["direction"]))
            return True

        pane_id = msg.get("pane_id") or tab.active_pane_id
        if find_pane(tab.pane_tree, pane_id) is None:
            return False
        if action == "split":
            return (
                self.manager.split_pane(tab_id, pane_id, SplitDirection(msg["direction"]))
                is not None
            )
        if action == "close_pane":
            self.manager.close_pane(tab_id, pane_id)
            return True
        if action == "zoom":
            self.manager.toggle_zoom_pane(tab_id, pane_id)
            return True

        logger.debug(f"[MessageHandler] Unknown action: {action}")
        return False
