"""FastAPI 应用初始化"""

import asyncio

import uvicorn

from panehub import config
from panehub.session import persistence
from panehub.tabs.collaborators import AgentCounter, TaskTracker
from panehub.tabs.manager import TabManager
from panehub.telemetry import get_logger, setup_logging
from panehub.web.server import WebServer

logger = get_logger(__name__)


def create_app(
    manager: TabManager | None = None,
    task_tracker: TaskTracker | None = None,
) -> WebServer:
    """创建 Web 应用

    未传入 manager 时使用 AgentCounter 作为 agent 计数协作者。
    """
    agent_counter = None
    if manager is None:
        agent_counter = AgentCounter()
        manager = TabManager(agent_tracker=agent_counter, task_tracker=task_tracker)
    return WebServer(manager, agent_counter=agent_counter)


def restore_session(manager: TabManager) -> int:
    """恢复上次会话

    Returns:
        恢复的 tab 数量
    """
    session = persistence.load()
    if session is None:
        return 0
    tab_ids = persistence.restore_tabs(manager, session.tabs)
    if session.active_workspace_id:
        manager.activate_first_in_workspace(session.active_workspace_id)
    return len(tab_ids)


def save_session(manager: TabManager) -> bool:
    """保存当前会话（无 tab 时清除会话文件）"""
    if not manager.tabs:
        return persistence.clear()
    return persistence.save(persistence.snapshot(manager))


async def start_server(host: str = config.SERVER_HOST, port: int = config.SERVER_PORT):
    """启动服务器"""
    server = create_app()
    restored = restore_session(server.manager)
    if restored:
        logger.info(f"[App] Restored {restored} tabs from last session")

    uvicorn_config = uvicorn.Config(server.app, host=host, port=port, log_level="info")
    uvicorn_server = uvicorn.Server(uvicorn_config)

    logger.info(f"[App] panehub server starting at http://{host}:{port}")

    try:
        await uvicorn_server.serve()
    finally:
        save_session(server.manager)


def main():
    """入口函数"""
    setup_logging()
    try:
        asyncio.run(start_server())
    except KeyboardInterrupt:
        print("\nServer stopped")
