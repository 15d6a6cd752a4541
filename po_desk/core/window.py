"""Windowed rendering for the order table.

Rows have a fixed height, so the visible range is a direct function of the
scroll offset. A few extra rows are rendered above and below the viewport to
avoid flicker while scrolling; the skipped rows are replaced by padding.
"""
import math

from pydantic import BaseModel

ROW_HEIGHT = 68
OVERSCAN_COUNT = 5
DEFAULT_WINDOW_HEIGHT = 900
# Used when the client does not report its viewport (70vh)
FALLBACK_VIEWPORT_RATIO = 0.7


class Window(BaseModel):
    start: int
    end: int
    padding_top: int
    padding_bottom: int


def visible_window(
    total: int,
    scroll_top: float,
    viewport_height: float | None = None,
    row_height: int = ROW_HEIGHT,
    overscan: int = OVERSCAN_COUNT,
) -> Window:
    if not viewport_height:
        viewport_height = DEFAULT_WINDOW_HEIGHT * FALLBACK_VIEWPORT_RATIO

    start = min(total, max(0, math.floor(scroll_top / row_height) - overscan))
    visible_count = math.ceil(viewport_height / row_height) + 2 * overscan
    end = min(total, start + visible_count)

    return Window(
        start=start,
        end=end,
        padding_top=start * row_height,
        padding_bottom=max(0, (total - end) * row_height),
    )


def centered_scroll_top(index: int, viewport_height: float, row_height: int = ROW_HEIGHT) -> float:
    """Scroll offset that brings row `index` to the middle of the viewport."""
    target = index * row_height
    return max(0, target - viewport_height / 2 + row_height / 2)
