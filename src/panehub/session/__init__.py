"""Session 模块 - 会话快照与持久化"""

from . import persistence
from .persistence import SessionData, SessionTab, restore_tabs, snapshot, snapshot_tabs

__all__ = [
    "SessionData",
    "SessionTab",
    "persistence",
    "restore_tabs",
    "snapshot",
    "snapshot_tabs",
]
