"""Tab 模块

- types: TerminalTab, TabManagerState
- collaborators: 外部协作者接口（agent 计数、任务看板）
- manager: TabManager
"""

from .collaborators import (
    AgentCounter,
    AgentTracker,
    NullAgentTracker,
    NullTaskTracker,
    TaskTracker,
)
from .manager import TabManager
from .types import TabManagerState, TerminalTab

__all__ = [
    "AgentCounter",
    "AgentTracker",
    "NullAgentTracker",
    "NullTaskTracker",
    "TaskTracker",
    "TabManager",
    "TabManagerState",
    "TerminalTab",
]
