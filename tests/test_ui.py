import curses

import pytest
from unittest.mock import MagicMock

from convbrowse.backend import StubRecordSource
from convbrowse.model import NavigationState, Record, format_details
from convbrowse.terminal import RenderError
from convbrowse.ui import (
    COMMAND_BAR_TEXT, Renderer, ScrollbarState, clamp_scroll, compute_layout,
    draw_command_bar, draw_details, draw_list, draw_scrollbar, scrollbar_thumb,
    wrap_text,
)


@pytest.fixture(autouse=True)
def mock_curses_colors(mocker):
    mocker.patch('curses.color_pair', side_effect=lambda n: n << 8)
    return mocker


def make_win(h, w):
    win = MagicMock()
    win.getmaxyx.return_value = (h, w)
    return win


def written(win):
    """Map (y, x) -> text for every addstr call on a mock window."""
    return {(c.args[0], c.args[1]): c.args[2] for c in win.addstr.call_args_list}


def test_layout_standard_terminal():
    layout = compute_layout(24, 80)
    assert (layout.list_pane.y, layout.list_pane.height) == (0, 8)
    assert (layout.detail.y, layout.detail.height) == (8, 13)
    assert (layout.command_bar.y, layout.command_bar.height) == (21, 3)


@pytest.mark.parametrize("height", range(11, 60))
def test_layout_fills_height_exactly(height):
    layout = compute_layout(height, 80)
    total = layout.list_pane.height + layout.detail.height + layout.command_bar.height
    assert total == height
    assert layout.list_pane.height == 8
    assert layout.command_bar.height <= 3
    assert layout.detail.height >= min(8, height - 8)


def test_layout_short_terminal_shrinks_command_bar_first():
    layout = compute_layout(17, 80)
    assert layout.detail.height == 8
    assert layout.command_bar.height == 1


@pytest.mark.parametrize("size", [(10, 80), (24, 9), (0, 0)])
def test_layout_too_small(size):
    assert compute_layout(*size) is None


def test_wrap_text_trims_and_keeps_blank_lines():
    lines = wrap_text("  first line here\n\n        second", 10)
    assert lines == ["first line", "here", "", "second"]


def test_wrap_text_breaks_long_words():
    lines = wrap_text("-" * 25, 10)
    assert lines == ["-" * 10, "-" * 10, "-" * 5]


def test_clamp_scroll():
    assert clamp_scroll(0, 0) == 0
    assert clamp_scroll(5, 3) == 2
    assert clamp_scroll(1, 3) == 1


def test_draw_list_lines_and_selection():
    win = make_win(8, 60)
    records = StubRecordSource().fetch_page(0)

    draw_list(win, records, selected_index=2)

    text = written(win)
    assert text[(1, 1)].startswith("Title: Conversation 1 ID: conv-1")
    assert text[(5, 1)].startswith("Title: Conversation 5 ID: conv-5")
    selected_call = [c for c in win.addstr.call_args_list if c.args[:2] == (3, 1)][0]
    assert selected_call.args[3] == 7 << 8
    other_call = [c for c in win.addstr.call_args_list if c.args[:2] == (2, 1)][0]
    assert other_call.args[3] == curses.A_NORMAL
    win.box.assert_called_once()
    assert " Conversations " in text[(0, 2)]


def test_draw_list_without_highlight():
    win = make_win(8, 60)
    draw_list(win, StubRecordSource().fetch_page(0), selected_index=0, highlight=False)
    first = [c for c in win.addstr.call_args_list if c.args[:2] == (1, 1)][0]
    assert first.args[3] == curses.A_NORMAL


def test_draw_list_truncates_to_window():
    win = make_win(4, 12)
    draw_list(win, StubRecordSource().fetch_page(0), selected_index=0)
    text = written(win)
    assert (3, 1) not in text  # only 2 inner rows
    assert len(text[(1, 1)]) == 10


def test_draw_details_scrolls_and_reports_length():
    win = make_win(10, 40)
    record = StubRecordSource().fetch_page(0)[0]
    expected = wrap_text(format_details(record), 38)

    sb = draw_details(win, record, vertical_scroll=0)
    assert written(win)[(1, 1)] == "Conversation Title: Conversation 1"
    assert sb.content_length == len(expected)
    assert sb.position == 0
    assert sb.viewport_length == 8

    win.reset_mock()
    sb = draw_details(win, record, vertical_scroll=1)
    assert written(win)[(1, 1)] == "Conversation ID: conv-1"
    assert sb.position == 1


def test_draw_details_clamps_runaway_scroll():
    win = make_win(10, 40)
    record = Record(title="t", id="i", body="short")
    lines = wrap_text(format_details(record), 38)

    sb = draw_details(win, record, vertical_scroll=10_000)

    assert sb.position == len(lines) - 1
    assert written(win)[(1, 1)] == "short"


def test_draw_details_empty_page():
    win = make_win(10, 40)
    sb = draw_details(win, None, vertical_scroll=30)

    assert sb.content_length == 0
    assert list(written(win)) == [(0, 2)]  # title only
    win.noutrefresh.assert_called_once()


def test_scrollbar_thumb_positions():
    assert scrollbar_thumb(0, ScrollbarState(100, 0, 8)) == (0, 0)
    assert scrollbar_thumb(6, ScrollbarState(0, 0, 8)) == (0, 6)

    start, size = scrollbar_thumb(6, ScrollbarState(100, 0, 8))
    assert start == 0 and size >= 1
    start, size = scrollbar_thumb(6, ScrollbarState(100, 99, 8))
    assert start + size == 6


def test_draw_scrollbar_on_right_border():
    win = make_win(10, 40)
    draw_scrollbar(win, ScrollbarState(content_length=50, position=0, viewport_length=8))

    text = written(win)
    assert text[(1, 39)] == "↑"
    assert text[(8, 39)] == "↓"
    assert text[(2, 39)] == "#"
    assert all(x == 39 for (_, x) in text)


def test_draw_scrollbar_falls_back_to_ascii_arrows():
    def ascii_only(y, x, text, attr=0):
        text.encode("ascii")

    win = make_win(10, 40)
    win.addstr.side_effect = ascii_only
    draw_scrollbar(win, ScrollbarState(content_length=50, position=0, viewport_length=8))

    text = written(win)
    assert text[(1, 39)] == "^"
    assert text[(8, 39)] == "v"


def test_draw_scrollbar_skips_tiny_window():
    win = make_win(3, 40)
    draw_scrollbar(win, ScrollbarState(10, 0, 1))
    win.addstr.assert_not_called()


def test_draw_command_bar():
    win = make_win(3, 100)
    draw_command_bar(win)
    text = written(win)
    assert text[(1, 1)] == COMMAND_BAR_TEXT
    assert "Cmd:" in text[(0, 2)]


def test_clipped_writes_are_ignored():
    win = make_win(3, 100)
    win.addstr.side_effect = curses.error("out of window")
    draw_command_bar(win)
    win.noutrefresh.assert_called_once()


class TestRenderer:
    @pytest.fixture
    def screen(self, mocker):
        stdscr = make_win(24, 80)
        windows = []

        def newwin(h, w, y, x):
            win = make_win(h, w)
            windows.append(win)
            return win

        mocker.patch('curses.newwin', side_effect=newwin)
        doupdate = mocker.patch('curses.doupdate')
        return stdscr, windows, doupdate

    def test_renders_three_regions(self, screen):
        stdscr, windows, doupdate = screen
        renderer = Renderer(stdscr)
        records = StubRecordSource().fetch_page(0)

        renderer.render(NavigationState(selected_index=1), records)

        assert [w.getmaxyx() for w in windows] == [(8, 80), (13, 80), (3, 80)]
        assert written(windows[1])[(1, 1)] == "Conversation Title: Conversation 2"
        assert renderer.scrollbar.content_length > 0
        doupdate.assert_called_once()

    def test_windows_recreated_only_on_resize(self, screen):
        stdscr, windows, _ = screen
        renderer = Renderer(stdscr)
        records = StubRecordSource().fetch_page(0)

        renderer.render(NavigationState(), records)
        renderer.render(NavigationState(), records)
        assert len(windows) == 3

        stdscr.getmaxyx.return_value = (30, 100)
        renderer.render(NavigationState(), records)
        assert len(windows) == 6
        assert stdscr.clear.call_count == 2

    def test_scrollbar_recomputed_per_frame(self, screen):
        stdscr, _, _ = screen
        renderer = Renderer(stdscr)
        long_record = [Record(title="a", id="1", body="x\n" * 50)]
        short_record = [Record(title="b", id="2", body="y")]

        renderer.render(NavigationState(), long_record)
        long_len = renderer.scrollbar.content_length
        renderer.render(NavigationState(), short_record)
        assert renderer.scrollbar.content_length < long_len

    def test_empty_page_renders_without_detail(self, screen):
        stdscr, windows, doupdate = screen
        renderer = Renderer(stdscr)

        renderer.render(NavigationState(), [])

        assert renderer.scrollbar.content_length == 0
        doupdate.assert_called_once()

    def test_too_small_terminal(self, screen):
        stdscr, windows, doupdate = screen
        stdscr.getmaxyx.return_value = (6, 80)

        Renderer(stdscr).render(NavigationState(), StubRecordSource().fetch_page(0))

        assert windows == []
        stdscr.addstr.assert_called_once_with(0, 0, "Terminal too small!", curses.A_NORMAL)
        doupdate.assert_called_once()

    def test_failed_update_raises_render_error(self, screen):
        stdscr, _, doupdate = screen
        doupdate.side_effect = curses.error("device gone")

        with pytest.raises(RenderError):
            Renderer(stdscr).render(NavigationState(), StubRecordSource().fetch_page(0))
