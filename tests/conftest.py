"""Pytest 配置"""

import pytest

from panehub.tabs import AgentTracker, TabManager, TaskTracker
from panehub.telemetry import metrics


class RecordingAgentTracker(AgentTracker):
    """记录 increment/decrement 调用"""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def increment(self, workspace_id: str) -> None:
        self.calls.append(("increment", workspace_id))

    def decrement(self, workspace_id: str) -> None:
        self.calls.append(("decrement", workspace_id))

    def count(self, op: str, workspace_id: str | None = None) -> int:
        return sum(
            1 for o, ws in self.calls if o == op and (workspace_id is None or ws == workspace_id)
        )


class RecordingTaskTracker(TaskTracker):
    """记录关闭的 tab id"""

    def __init__(self):
        self.closed: list[str] = []

    def notify_tab_closed(self, tab_id: str) -> None:
        self.closed.append(tab_id)


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def agent_tracker():
    return RecordingAgentTracker()


@pytest.fixture
def task_tracker():
    return RecordingTaskTracker()


@pytest.fixture
def manager(agent_tracker, task_tracker):
    """带记录协作者的 TabManager"""
    return TabManager(agent_tracker=agent_tracker, task_tracker=task_tracker)
