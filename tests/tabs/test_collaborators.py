"""Tests for external collaborator implementations"""

from unittest.mock import MagicMock

import pytest

from panehub.tabs import (
    AgentCounter,
    AgentTracker,
    NullAgentTracker,
    NullTaskTracker,
    TabManager,
    TaskTracker,
)


class TestAgentCounter:
    """Tests for AgentCounter"""

    def test_counts_per_workspace(self):
        counter = AgentCounter()
        counter.increment("ws1")
        counter.increment("ws1")
        counter.increment("ws2")
        counter.decrement("ws1")

        assert counter.count("ws1") == 1
        assert counter.count("ws2") == 1
        assert counter.count("ws3") == 0
        assert counter.to_dict() == {"ws1": 1, "ws2": 1}

    def test_does_not_clamp(self):
        counter = AgentCounter()
        counter.decrement("ws1")
        assert counter.count("ws1") == -1

    def test_tracks_manager_lifecycle(self):
        counter = AgentCounter()
        manager = TabManager(agent_tracker=counter)

        solo = manager.create_tab("ws1", "/", initial_command="claude")
        pair = manager.create_split_tab("ws1", "/", "pair", "claude", "claude --continue")
        assert counter.count("ws1") == 3

        left = manager.get_tab(pair).pane_tree.first.id
        manager.close_pane(pair, left)
        assert counter.count("ws1") == 2

        manager.close_other_tabs(solo)
        assert counter.count("ws1") == 1

        manager.close_tab(solo)
        assert counter.count("ws1") == 0


class TestNullCollaborators:
    """Tests for no-op collaborators"""

    def test_null_trackers_accept_calls(self):
        NullAgentTracker().increment("ws1")
        NullAgentTracker().decrement("ws1")
        NullTaskTracker().notify_tab_closed("tab-1")

    def test_abstract_interfaces(self):
        with pytest.raises(TypeError):
            AgentTracker()
        with pytest.raises(TypeError):
            TaskTracker()


class TestMockCollaborators:
    """Collaborators are duck-typed capability objects"""

    def test_task_tracker_mock(self):
        task_tracker = MagicMock(spec=TaskTracker)
        manager = TabManager(task_tracker=task_tracker)
        a = manager.create_tab("ws1", "/")
        b = manager.create_tab("ws1", "/")

        manager.close_tabs_to_right(a)

        task_tracker.notify_tab_closed.assert_called_once_with(b)
