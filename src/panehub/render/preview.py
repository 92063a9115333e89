"""Tab layout preview using Rich library.

Rasterizes a tab's normalized pane rectangles onto a character grid with
box-drawing borders. Used for the SVG preview endpoint and for debugging
layouts in a terminal.
"""

import io

from rich.console import Console
from rich.style import Style
from rich.text import Text

from ..config import PREVIEW_HEIGHT, PREVIEW_WIDTH
from ..core.ids import short_id
from ..pane.tree import compute_pane_rects, find_pane
from ..pane.types import PaneLeaf, PaneRect
from ..tabs.types import TerminalTab

ACTIVE_STYLE = Style(color="bright_green", bold=True)
PANE_STYLE = Style(color="bright_black")
VIEW_ONLY_STYLE = Style(color="rgb(250,179,135)")
LABEL_STYLE = Style(color="white")

# (top-left, top-right, bottom-left, bottom-right, horizontal, vertical)
_BOX = ("┌", "┐", "└", "┘", "─", "│")
_HEAVY_BOX = ("┏", "┓", "┗", "┛", "━", "┃")

Cell = tuple[str, Style | None]


def _pane_label(leaf: PaneLeaf | None) -> str:
    if leaf is None:
        return ""
    if leaf.external_session_id:
        return f"view {short_id(leaf.external_session_id)}"
    return leaf.initial_command or short_id(leaf.id)


class LayoutPreview:
    """Layout preview renderer."""

    def __init__(self, width: int = PREVIEW_WIDTH, height: int = PREVIEW_HEIGHT):
        """
        Args:
            width: grid width in characters
            height: grid height in lines
        """
        self.width = width
        self.height = height

    def _to_cells(self, rect: PaneRect) -> tuple[int, int, int, int]:
        """Normalized rect -> (col0, row0, col1, row1), end exclusive."""
        col0 = round(rect.x * self.width)
        row0 = round(rect.y * self.height)
        col1 = round((rect.x + rect.w) * self.width)
        row1 = round((rect.y + rect.h) * self.height)
        return col0, row0, col1, row1

    def _draw_pane(
        self,
        grid: list[list[Cell]],
        rect: PaneRect,
        label: str,
        style: Style,
        heavy: bool,
    ) -> None:
        col0, row0, col1, row1 = self._to_cells(rect)
        if col1 - col0 < 2 or row1 - row0 < 2:
            # too small for a border
            for row in range(row0, row1):
                for col in range(col0, col1):
                    grid[row][col] = ("▪", style)
            return

        tl, tr, bl, br, hz, vt = _HEAVY_BOX if heavy else _BOX
        right, bottom = col1 - 1, row1 - 1
        for col in range(col0 + 1, right):
            grid[row0][col] = (hz, style)
            grid[bottom][col] = (hz, style)
        for row in range(row0 + 1, bottom):
            grid[row][col0] = (vt, style)
            grid[row][right] = (vt, style)
        grid[row0][col0] = (tl, style)
        grid[row0][right] = (tr, style)
        grid[bottom][col0] = (bl, style)
        grid[bottom][right] = (br, style)

        if row0 + 1 < bottom:
            inner = label[: max(0, right - col0 - 1)]
            for i, char in enumerate(inner):
                grid[row0 + 1][col0 + 1 + i] = (char, LABEL_STYLE)

    def render_text(self, tab: TerminalTab) -> Text:
        """Render a tab's layout to Rich Text."""
        grid: list[list[Cell]] = [[(" ", None)] * self.width for _ in range(self.height)]

        if tab.zoomed_pane_id:
            rects = [PaneRect(leaf_id=tab.zoomed_pane_id, x=0.0, y=0.0, w=1.0, h=1.0)]
        else:
            rects = compute_pane_rects(tab.pane_tree)

        for rect in rects:
            leaf = find_pane(tab.pane_tree, rect.leaf_id)
            is_active = rect.leaf_id == tab.active_pane_id
            if is_active:
                style = ACTIVE_STYLE
            elif leaf is not None and leaf.is_view_only:
                style = VIEW_ONLY_STYLE
            else:
                style = PANE_STYLE
            self._draw_pane(grid, rect, _pane_label(leaf), style, heavy=is_active)

        text = Text()
        for row in grid:
            for char, style in row:
                text.append(char, style=style)
            text.append("\n")
        return text

    def render_plain(self, tab: TerminalTab) -> str:
        """Render without styles."""
        return self.render_text(tab).plain

    def render_svg(self, tab: TerminalTab) -> str:
        """Render to SVG."""
        console = Console(
            record=True,
            width=self.width,
            height=self.height,
            file=io.StringIO(),
            force_terminal=True,
            color_system="truecolor",
        )
        console.print(self.render_text(tab), end="")
        return console.export_svg(title=tab.label)
