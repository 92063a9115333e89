"""External collaborator interfaces

The tab manager only notifies these about lifecycle events; they never hold a
reference into the pane tree.

- AgentTracker: counts running coding-agent panes per workspace
- TaskTracker: task board that reacts to terminal tabs closing
"""

from abc import ABC, abstractmethod


class AgentTracker(ABC):
    """Agent pane counter, keyed by workspace."""

    @abstractmethod
    def increment(self, workspace_id: str) -> None:
        """An agent pane was created in the workspace."""

    @abstractmethod
    def decrement(self, workspace_id: str) -> None:
        """An agent pane was closed in the workspace."""


class TaskTracker(ABC):
    """Task board notified when a tab closes."""

    @abstractmethod
    def notify_tab_closed(self, tab_id: str) -> None:
        """Fire-and-forget; the return value is ignored."""


class NullAgentTracker(AgentTracker):
    """Used when no agent tracker is wired in."""

    def increment(self, workspace_id: str) -> None:
        pass

    def decrement(self, workspace_id: str) -> None:
        pass


class NullTaskTracker(TaskTracker):
    """Used when no task tracker is wired in."""

    def notify_tab_closed(self, tab_id: str) -> None:
        pass


class AgentCounter(AgentTracker):
    """In-memory agent pane counter.

    Does not clamp at zero; a negative count means a caller decremented
    more than it incremented.
    """

    def __init__(self):
        self._counts: dict[str, int] = {}

    def increment(self, workspace_id: str) -> None:
        self._counts[workspace_id] = self._counts.get(workspace_id, 0) + 1

    def decrement(self, workspace_id: str) -> None:
        self._counts[workspace_id] = self._counts.get(workspace_id, 0) - 1

    def count(self, workspace_id: str) -> int:
        return self._counts.get(workspace_id, 0)

    def to_dict(self) -> dict[str, int]:
        return dict(self._counts)
