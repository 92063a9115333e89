"""Web 服务器

REST 接口暴露 TabManager 全部操作和只读几何查询，WebSocket 推送状态。
"""

import asyncio

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse, Response

from panehub.pane.tree import find_pane
from panehub.render import LayoutPreview
from panehub.tabs.collaborators import AgentCounter
from panehub.tabs.manager import TabManager
from panehub.tabs.types import TabManagerState
from panehub.telemetry import get_logger, metrics
from panehub.web.handlers import MessageHandler
from panehub.web.models import (
    ActionResponse,
    ActivityRequest,
    ColorRequest,
    CreateTabRequest,
    FocusRequest,
    NavigateRequest,
    RenameRequest,
    ReorderRequest,
    ResizeRequest,
    SessionBindRequest,
    SplitRequest,
)

logger = get_logger(__name__)


def _not_found(tab_id: str) -> JSONResponse:
    return JSONResponse({"detail": f"Tab not found: {tab_id}"}, status_code=404)


class WebServer:
    """HTTP + WebSocket 服务器"""

    def __init__(self, manager: TabManager, agent_counter: AgentCounter | None = None):
        self.app = FastAPI(title="panehub")
        self.manager = manager
        self.agent_counter = agent_counter
        self.clients: list[WebSocket] = []
        self._preview = LayoutPreview()
        self._pending: set[asyncio.Task] = set()

        self._handler = MessageHandler(manager=manager)

        self._setup_routes()
        manager.set_on_change(self._on_state_change)

    def state_payload(self) -> dict:
        payload = {"type": "state", **self.manager.state.to_dict()}
        if self.agent_counter is not None:
            payload["agents"] = self.agent_counter.to_dict()
        return payload

    def _on_state_change(self, state: TabManagerState) -> None:
        """状态变化回调 -> 广播到前端"""
        if not self.clients:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.broadcast(self.state_payload()))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _has_pane(self, tab_id: str, pane_id: str) -> bool:
        tab = self.manager.get_tab(tab_id)
        return tab is not None and find_pane(tab.pane_tree, pane_id) is not None

    def _setup_routes(self):
        manager = self.manager

        # === 查询 ===

        @self.app.get("/api/state")
        async def get_state():
            return self.state_payload()

        @self.app.get("/api/metrics")
        async def get_metrics():
            """调试用：当前计数器快照"""
            return {"counters": metrics.get_all_counters()}

        @self.app.get("/api/tabs/{tab_id}/layout")
        async def get_layout(tab_id: str):
            """获取 tab 的 pane 矩形和分隔条（归一化 0..1）"""
            tab = manager.get_tab(tab_id)
            if tab is None:
                return _not_found(tab_id)
            return {
                "tab_id": tab.id,
                "rects": [r.to_dict() for r in manager.pane_rects(tab_id)],
                "dividers": [d.to_dict() for d in manager.split_dividers(tab_id)],
                "active_pane_id": tab.active_pane_id,
                "zoomed_pane_id": tab.zoomed_pane_id,
                "can_split": manager.can_split(tab_id),
            }

        @self.app.get("/api/tabs/{tab_id}/preview.svg")
        async def get_preview(tab_id: str):
            """获取 tab 布局的 SVG 预览"""
            tab = manager.get_tab(tab_id)
            if tab is None:
                return Response(content="Tab not found", status_code=404, media_type="text/plain")
            return Response(
                content=self._preview.render_svg(tab),
                media_type="image/svg+xml",
                headers={"Cache-Control": "no-cache"},
            )

        # === Tab 操作 ===

        @self.app.post("/api/tabs", response_model=ActionResponse)
        async def create_tab(request: CreateTabRequest):
            if request.kind == "split":
                tab_id = manager.create_split_tab(
                    request.workspace_id,
                    request.cwd,
                    request.label or "",
                    request.left_command,
                    request.right_command,
                )
            elif request.kind == "view_only":
                if not request.external_session_id:
                    return ActionResponse(success=False)
                tab_id = manager.create_view_only_tab(
                    request.workspace_id,
                    request.cwd,
                    request.label or "",
                    request.external_session_id,
                )
            else:
                tab_id = manager.create_tab(
                    request.workspace_id, request.cwd, request.label, request.initial_command
                )
            return ActionResponse(success=True, id=tab_id)

        @self.app.delete("/api/tabs/{tab_id}", response_model=ActionResponse)
        async def close_tab(tab_id: str):
            if manager.get_tab(tab_id) is None:
                return ActionResponse(success=False)
            manager.close_tab(tab_id)
            return ActionResponse(success=True, id=tab_id)

        @self.app.post("/api/tabs/reorder", response_model=ActionResponse)
        async def reorder_tabs(request: ReorderRequest):
            if not 0 <= request.from_index < len(manager.tabs):
                return ActionResponse(success=False)
            manager.reorder_tabs(request.from_index, request.to_index)
            return ActionResponse(success=True)

        @self.app.post("/api/navigate", response_model=ActionResponse)
        async def navigate(request: NavigateRequest):
            before = manager.active_tab_id
            if request.action == "next":
                manager.activate_next(request.workspace_id)
            elif request.action == "prev":
                manager.activate_prev(request.workspace_id)
            elif request.action == "index":
                if request.index is None:
                    return ActionResponse(success=False)
                manager.activate_by_index(request.index, request.workspace_id)
            elif request.workspace_id:
                manager.activate_first_in_workspace(request.workspace_id)
            else:
                return ActionResponse(success=False)
            return ActionResponse(
                success=manager.active_tab_id != before, id=manager.active_tab_id
            )

        @self.app.post("/api/tabs/{tab_id}/activate", response_model=ActionResponse)
        async def activate_tab(tab_id: str):
            if manager.get_tab(tab_id) is None:
                return ActionResponse(success=False)
            manager.set_active_tab(tab_id)
            return ActionResponse(success=True, id=tab_id)

        @self.app.post("/api/tabs/{tab_id}/rename", response_model=ActionResponse)
        async def rename_tab(tab_id: str, request: RenameRequest):
            if manager.get_tab(tab_id) is None:
                return ActionResponse(success=False)
            manager.rename_tab(tab_id, request.label)
            return ActionResponse(success=True, id=tab_id)

        @self.app.post("/api/tabs/{tab_id}/color", response_model=ActionResponse)
        async def set_tab_color(tab_id: str, request: ColorRequest):
            if manager.get_tab(tab_id) is None:
                return ActionResponse(success=False)
            manager.set_tab_color(tab_id, request.color)
            return ActionResponse(success=True, id=tab_id)

        @self.app.post("/api/tabs/{tab_id}/activity", response_model=ActionResponse)
        async def set_tab_activity(tab_id: str, request: ActivityRequest):
            if manager.get_tab(tab_id) is None or tab_id == manager.active_tab_id:
                return ActionResponse(success=False)
            manager.set_tab_activity(tab_id, request.has_activity)
            return ActionResponse(success=True, id=tab_id)

        @self.app.post("/api/tabs/{tab_id}/duplicate", response_model=ActionResponse)
        async def duplicate_tab(tab_id: str):
            new_id = manager.duplicate_tab(tab_id)
            return ActionResponse(success=new_id is not None, id=new_id)

        @self.app.post("/api/tabs/{tab_id}/close-others", response_model=ActionResponse)
        async def close_other_tabs(tab_id: str):
            if manager.get_tab(tab_id) is None:
                return ActionResponse(success=False)
            manager.close_other_tabs(tab_id)
            return ActionResponse(success=True, id=tab_id)

        @self.app.post("/api/tabs/{tab_id}/close-right", response_model=ActionResponse)
        async def close_tabs_to_right(tab_id: str):
            if manager.get_tab(tab_id) is None:
                return ActionResponse(success=False)
            manager.close_tabs_to_right(tab_id)
            return ActionResponse(success=True, id=tab_id)

        # === Pane 操作 ===

        @self.app.post("/api/tabs/{tab_id}/panes/{pane_id}/split", response_model=ActionResponse)
        async def split_pane(tab_id: str, pane_id: str, request: SplitRequest):
            new_pane_id = manager.split_pane(tab_id, pane_id, request.direction)
            return ActionResponse(success=new_pane_id is not None, id=new_pane_id)

        @self.app.delete("/api/tabs/{tab_id}/panes/{pane_id}", response_model=ActionResponse)
        async def close_pane(tab_id: str, pane_id: str):
            if not self._has_pane(tab_id, pane_id):
                return ActionResponse(success=False)
            manager.close_pane(tab_id, pane_id)
            return ActionResponse(success=True, id=pane_id)

        @self.app.post("/api/tabs/{tab_id}/panes/{pane_id}/activate", response_model=ActionResponse)
        async def set_active_pane(tab_id: str, pane_id: str):
            if not self._has_pane(tab_id, pane_id):
                return ActionResponse(success=False)
            manager.set_active_pane(tab_id, pane_id)
            return ActionResponse(success=True, id=pane_id)

        @self.app.post("/api/tabs/{tab_id}/panes/{pane_id}/zoom", response_model=ActionResponse)
        async def toggle_zoom_pane(tab_id: str, pane_id: str):
            if not self._has_pane(tab_id, pane_id):
                return ActionResponse(success=False)
            manager.toggle_zoom_pane(tab_id, pane_id)
            return ActionResponse(success=True, id=pane_id)

        @self.app.post("/api/tabs/{tab_id}/panes/{pane_id}/session", response_model=ActionResponse)
        async def set_pane_session_id(tab_id: str, pane_id: str, request: SessionBindRequest):
            if not self._has_pane(tab_id, pane_id):
                return ActionResponse(success=False)
            manager.set_pane_session_id(tab_id, pane_id, request.session_id)
            return ActionResponse(success=True, id=pane_id)

        @self.app.post("/api/tabs/{tab_id}/resize", response_model=ActionResponse)
        async def resize_pane(tab_id: str, request: ResizeRequest):
            tab = manager.get_tab(tab_id)
            if tab is None:
                return ActionResponse(success=False)
            before = tab.pane_tree
            manager.resize_pane(tab_id, request.split_id, request.ratio)
            return ActionResponse(success=tab.pane_tree is not before, id=request.split_id)

        @self.app.post("/api/tabs/{tab_id}/focus", response_model=ActionResponse)
        async def focus_direction(tab_id: str, request: FocusRequest):
            tab = manager.get_tab(tab_id)
            if tab is None:
                return ActionResponse(success=False)
            before = tab.active_pane_id
            manager.focus_direction(tab_id, request.direction)
            return ActionResponse(success=tab.active_pane_id != before, id=tab.active_pane_id)

        # === WebSocket ===

        @self.app.websocket("/ws")
        async def websocket_endpoint(websocket: WebSocket):
            await websocket.accept()
            self.clients.append(websocket)
            try:
                await websocket.send_json(self.state_payload())
                while True:
                    data = await websocket.receive_text()
                    await self._handler.handle(websocket, data)
            except WebSocketDisconnect:
                logger.debug("[WebServer] Client disconnected")
            finally:
                # broadcast() may already have dropped this client
                if websocket in self.clients:
                    self.clients.remove(websocket)

    async def broadcast(self, data: dict):
        """广播消息给所有客户端"""
        for client in list(self.clients):
            try:
                await client.send_json(data)
            except Exception as e:
                logger.debug(f"[WebServer] Broadcast failed, dropping client: {e}")
                if client in self.clients:
                    self.clients.remove(client)
