"""
Curses-based rendering engine.

The screen is split vertically into three regions:
  - List: fixed height, bordered "Conversations" box, one line per record
  - Detail: takes the remaining space (minimum 8 rows), word-wrapped details
    of the selected record scrolled by the vertical offset, with a
    scrollbar on its right border
  - Command bar: up to 3 rows, static bordered label row

Rendering Strategy:
  - Windows are recreated only when the terminal size changes
  - Every frame redraws all regions (noutrefresh) and flushes once (doupdate)
  - The scrollbar extent is recomputed each frame from the wrapped detail text
  - Writes that fall outside a window are clipped; any other curses failure
    becomes a RenderError

Key Functions:
  - init_colors(): Initialize color pairs
  - compute_layout(): Split the terminal height into the three regions
  - wrap_text(): Word wrap with leading whitespace trimmed
  - draw_list() / draw_details() / draw_scrollbar() / draw_command_bar()
  - Renderer.render(): Draw one frame
"""

import curses
import textwrap
from dataclasses import dataclass
from typing import Dict, List, Optional

from .model import NavigationState, Record, format_details
from .terminal import RenderError

LIST_HEIGHT = 8
DETAIL_MIN_HEIGHT = 8
COMMAND_BAR_MAX_HEIGHT = 3
MIN_WIDTH = 10

COMMAND_BAR_TEXT = "History    |     Config    |     History    |     New    |     Shared"

SCROLLBAR_BEGIN = "↑"
SCROLLBAR_END = "↓"
SCROLLBAR_TRACK = "|"
SCROLLBAR_THUMB = "#"
# Drawn instead of the arrows when the locale cannot encode them
ASCII_FALLBACK = {SCROLLBAR_BEGIN: "^", SCROLLBAR_END: "v"}


@dataclass(frozen=True)
class Region:
    y: int
    height: int


@dataclass(frozen=True)
class Layout:
    list_pane: Region
    detail: Region
    command_bar: Region


@dataclass
class ScrollbarState:
    content_length: int = 0
    position: int = 0
    viewport_length: int = 0


def init_colors():
    if not curses.has_colors():
        return
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(1, curses.COLOR_WHITE, -1)    # Default
    curses.init_pair(4, curses.COLOR_CYAN, -1)     # Titles / borders
    curses.init_pair(7, curses.COLOR_BLACK, curses.COLOR_CYAN)  # Selection


def compute_layout(height: int, width: int) -> Optional[Layout]:
    """Return None when the terminal cannot fit a usable detail pane."""
    if height < LIST_HEIGHT + 3 or width < MIN_WIDTH:
        return None
    remaining = height - LIST_HEIGHT
    # The command bar gives way first on short terminals
    bar_h = min(COMMAND_BAR_MAX_HEIGHT, max(0, remaining - DETAIL_MIN_HEIGHT))
    detail_h = remaining - bar_h
    return Layout(
        list_pane=Region(0, LIST_HEIGHT),
        detail=Region(LIST_HEIGHT, detail_h),
        command_bar=Region(LIST_HEIGHT + detail_h, bar_h),
    )


def wrap_text(text: str, width: int) -> List[str]:
    lines = []
    for raw in text.split("\n"):
        stripped = raw.strip()
        if not stripped:
            lines.append("")
            continue
        lines.extend(textwrap.wrap(stripped, max(1, width)))
    return lines


def clamp_scroll(offset: int, content_length: int) -> int:
    return max(0, min(offset, content_length - 1))


def _addstr(win, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
    try:
        win.addstr(y, x, text, attr)
    except curses.error:
        # Clipped at the window edge
        pass
    except UnicodeEncodeError:
        ascii_text = "".join(ASCII_FALLBACK.get(ch, ch if ord(ch) < 128 else "?") for ch in text)
        _addstr(win, y, x, ascii_text, attr)


def _draw_box(win, title: str) -> None:
    win.erase()
    win.attron(curses.color_pair(4))
    win.box()
    win.attroff(curses.color_pair(4))
    _addstr(win, 0, 2, f" {title} ", curses.A_BOLD | curses.color_pair(4))


def draw_list(win, records: List[Record], selected_index: int, highlight: bool = True) -> None:
    h, w = win.getmaxyx()
    _draw_box(win, "Conversations")
    for i, record in enumerate(records[:max(0, h - 2)]):
        line = f"Title: {record.title} ID: {record.id}"
        style = curses.color_pair(7) if highlight and i == selected_index else curses.A_NORMAL
        _addstr(win, 1 + i, 1, line[:w - 2].ljust(w - 2), style)
    win.noutrefresh()


def draw_details(win, record: Optional[Record], vertical_scroll: int) -> ScrollbarState:
    """Draw the detail box and return the scrollbar state for this frame."""
    h, w = win.getmaxyx()
    _draw_box(win, "Conversation Details")
    viewport = max(0, h - 2)
    if record is None:
        win.noutrefresh()
        return ScrollbarState(viewport_length=viewport)

    lines = wrap_text(format_details(record), w - 2)
    offset = clamp_scroll(vertical_scroll, len(lines))
    for i, line in enumerate(lines[offset:offset + viewport]):
        _addstr(win, 1 + i, 1, line[:w - 2])
    win.noutrefresh()
    return ScrollbarState(content_length=len(lines), position=offset, viewport_length=viewport)


def scrollbar_thumb(track_length: int, scrollbar: ScrollbarState):
    """Return (start, size) of the thumb within a track of `track_length` cells."""
    if track_length <= 0:
        return 0, 0
    if scrollbar.content_length <= 1:
        return 0, track_length
    size = track_length * scrollbar.viewport_length // (scrollbar.content_length + scrollbar.viewport_length)
    size = max(1, min(track_length, size))
    start = (track_length - size) * scrollbar.position // (scrollbar.content_length - 1)
    return start, size


def draw_scrollbar(win, scrollbar: ScrollbarState) -> None:
    """Vertical scrollbar over the right border of `win`, inside the corners."""
    h, w = win.getmaxyx()
    if h < 4:
        return
    x = w - 1
    top, bottom = 1, h - 2
    _addstr(win, top, x, SCROLLBAR_BEGIN)
    _addstr(win, bottom, x, SCROLLBAR_END)
    track_length = bottom - top - 1
    start, size = scrollbar_thumb(track_length, scrollbar)
    for i in range(track_length):
        ch = SCROLLBAR_THUMB if start <= i < start + size else SCROLLBAR_TRACK
        _addstr(win, top + 1 + i, x, ch)
    win.noutrefresh()


def draw_command_bar(win) -> None:
    h, w = win.getmaxyx()
    if h < 3:
        return
    _draw_box(win, "Cmd:")
    _addstr(win, 1, 1, COMMAND_BAR_TEXT[:w - 2])
    win.noutrefresh()


class Renderer:
    """Draws frames onto stdscr, recreating windows on resize."""

    def __init__(self, stdscr, highlight_selection: bool = True):
        self.stdscr = stdscr
        self.highlight_selection = highlight_selection
        self.scrollbar = ScrollbarState()
        self._size = (-1, -1)
        self._layout: Optional[Layout] = None
        self._windows: Dict[str, "curses._CursesWindow"] = {}

    def _resize(self, h: int, w: int) -> None:
        self.stdscr.clear()
        self._size = (h, w)
        self._layout = compute_layout(h, w)
        self._windows = {}
        if self._layout is None:
            _addstr(self.stdscr, 0, 0, "Terminal too small!")
        else:
            for name in ("list_pane", "detail", "command_bar"):
                region = getattr(self._layout, name)
                if region.height > 0:
                    self._windows[name] = curses.newwin(region.height, w, region.y, 0)
        self.stdscr.noutrefresh()

    def render(self, state: NavigationState, records: List[Record]) -> None:
        try:
            h, w = self.stdscr.getmaxyx()
            if (h, w) != self._size:
                self._resize(h, w)

            if self._layout is not None:
                record = records[state.selected_index] if state.selected_index < len(records) else None
                draw_list(self._windows["list_pane"], records, state.selected_index, self.highlight_selection)
                detail_win = self._windows["detail"]
                self.scrollbar = draw_details(detail_win, record, state.vertical_scroll)
                draw_scrollbar(detail_win, self.scrollbar)
                if "command_bar" in self._windows:
                    draw_command_bar(self._windows["command_bar"])

            curses.doupdate()
        except curses.error as e:
            raise RenderError(f"Failed to draw frame: {e}") from e
