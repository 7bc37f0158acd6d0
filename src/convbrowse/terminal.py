"""
Terminal lifecycle management.

TerminalManager puts the terminal into the state the UI needs and guarantees
it is put back:

  - setup(): curses.initscr() (switches to the alternate screen through the
    terminal's smcup capability), raw input, no echo, keypad translation,
    hidden cursor
  - shutdown(): restores cooked input and leaves the alternate screen. Each
    step is attempted on its own and failures are only reported, so it is
    safe to call from a crash handler. Runs at most once per setup().
  - session(): context manager pairing setup() with a guaranteed shutdown()
  - install_crash_handler(): sys.excepthook that restores the terminal before
    reporting an uncaught exception, as a second line of defense behind the
    error boundary in main.py

Errors:
  - TerminalInitError: terminal could not be put in raw/alternate-screen mode
  - RenderError: drawing to the terminal failed mid-frame
  - UnrecoverablePanic: unexpected fault caught at the top of the program
"""

import curses
import logging
import sys
import traceback
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

logger = logging.getLogger(__name__)


class ConvBrowseError(Exception):
    """Base class for convbrowse errors."""


class TerminalInitError(ConvBrowseError):
    pass


class RenderError(ConvBrowseError):
    pass


class UnrecoverablePanic(ConvBrowseError):
    pass


def attached_to_terminal() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def log_eprint(message: str, stream: Optional[TextIO] = None) -> None:
    """Send a message to both the log and the error stream."""
    logger.error(message)
    print(message, file=stream or sys.stderr)


def report_crash(exc: BaseException, trace: str, stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stderr
    message = f"panic: {exc!r}"
    logger.critical(f"{message}\ntrace:\n{trace}")
    print(message, file=stream)
    print(f"trace:\n{trace}", file=stream, end="" if trace.endswith("\n") else "\n")


class TerminalManager:
    """Owns the terminal between setup() and shutdown()."""

    def __init__(self):
        self.stdscr: Optional["curses._CursesWindow"] = None
        self._active = False
        self._previous_hook = None

    @property
    def active(self) -> bool:
        return self._active

    def setup(self) -> "curses._CursesWindow":
        if self._active:
            return self.stdscr
        if not attached_to_terminal():
            raise TerminalInitError("stdin/stdout is not attached to a terminal")

        try:
            stdscr = curses.initscr()
        except curses.error as e:
            raise TerminalInitError(f"could not enter alternate screen: {e}") from e
        self.stdscr = stdscr
        self._active = True

        try:
            curses.noecho()
            curses.raw()
            stdscr.keypad(True)
        except curses.error as e:
            self.shutdown()
            raise TerminalInitError(f"could not enable raw mode: {e}") from e

        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("Terminal cannot hide the cursor")

        logger.info("Terminal set up (raw mode, alternate screen)")
        return stdscr

    def shutdown(self) -> bool:
        """Restore the terminal. Returns False if there was nothing to restore."""
        if not self._active:
            return False
        self._active = False

        # Never raises: this runs from finally blocks and the crash hook
        try:
            if self.stdscr is not None:
                self.stdscr.keypad(False)
            curses.noraw()
            curses.echo()
        except Exception as e:
            log_eprint(f"leave_raw_mode failed:\n{e}")

        try:
            curses.endwin()
        except Exception as e:
            log_eprint(f"leave_screen failed:\n{e}")

        self.stdscr = None
        logger.info("Terminal restored")
        return True

    @contextmanager
    def session(self) -> Iterator["curses._CursesWindow"]:
        stdscr = self.setup()
        try:
            yield stdscr
        finally:
            self.shutdown()

    def install_crash_handler(self) -> None:
        if self._previous_hook is not None:
            return
        self._previous_hook = sys.excepthook
        sys.excepthook = self._crash_hook

    def uninstall_crash_handler(self) -> None:
        if self._previous_hook is None:
            return
        sys.excepthook = self._previous_hook
        self._previous_hook = None

    def _crash_hook(self, exc_type, exc, tb) -> None:
        trace = "".join(traceback.format_exception(exc_type, exc, tb))
        self.shutdown()
        report_crash(exc, trace)
