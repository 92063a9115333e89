"""Tests for LayoutPreview"""

from panehub.render import LayoutPreview
from panehub.tabs import TabManager


def _split_tab(manager: TabManager):
    tab_id = manager.create_split_tab("ws1", "/", "pair", "npm test", None)
    return manager.get_tab(tab_id)


class TestLayoutPreview:
    """Tests for text/SVG layout preview"""

    def test_single_pane_box(self):
        manager = TabManager()
        tab = manager.get_tab(manager.create_tab("ws1", "/", initial_command="htop"))

        lines = LayoutPreview(width=20, height=5).render_plain(tab).splitlines()

        assert len(lines) == 5
        assert all(len(line) == 20 for line in lines)
        # active pane uses the heavy border
        assert lines[0].startswith("┏") and lines[0].endswith("┓")
        assert lines[-1].startswith("┗") and lines[-1].endswith("┛")
        assert "htop" in lines[1]

    def test_split_draws_two_boxes(self):
        manager = TabManager()
        tab = _split_tab(manager)

        lines = LayoutPreview(width=20, height=4).render_plain(tab).splitlines()

        # left pane inactive (light), right pane active (heavy)
        assert lines[0][0] == "┌"
        assert lines[0][9] == "┐"
        assert lines[0][10] == "┏"
        assert lines[0][19] == "┓"
        assert "npm test"[:8] in lines[1]

    def test_zoomed_pane_fills_preview(self):
        manager = TabManager()
        tab = _split_tab(manager)
        left = tab.pane_tree.first.id
        manager.toggle_zoom_pane(tab.id, left)

        lines = LayoutPreview(width=20, height=4).render_plain(tab).splitlines()

        assert lines[0].startswith("┏") and lines[0].endswith("┓")
        assert lines[0].count("┓") == 1

    def test_tiny_panes_still_render(self):
        manager = TabManager()
        tab = _split_tab(manager)
        text = LayoutPreview(width=3, height=1).render_plain(tab)
        assert len(text.splitlines()[0]) == 3

    def test_view_only_label(self):
        manager = TabManager()
        tab = manager.get_tab(manager.create_view_only_tab("ws1", "/", "remote", "ext-abcdef12"))
        plain = LayoutPreview(width=30, height=4).render_plain(tab)
        assert "view abcdef12" in plain

    def test_render_svg(self):
        manager = TabManager()
        tab = _split_tab(manager)
        svg = LayoutPreview(width=20, height=4).render_svg(tab)
        assert "<svg" in svg
        assert "pair" in svg
