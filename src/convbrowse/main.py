"""
Main event loop and orchestration for convbrowse.

This module ties together:
  - TerminalManager (terminal.py): raw mode / alternate screen lifecycle
  - StateManager (state.py): navigation state machine over a record source
  - Renderer (ui.py): curses drawing of the list, detail and command bar

Architecture:
  1. Load configuration, set up file logging, install the crash handler
  2. Enter the terminal session and draw the first frame
  3. Main loop:
     - Poll for a key with a timeout (poll_interval_ms), so the loop ticks
       even without input
     - Translate the key through the keymap and apply it to the state
     - Redraw unconditionally
  4. Leave the session (terminal restored exactly once) and return an exit code

Error boundary:
  main() catches everything that escapes the loop after the terminal has been
  restored, reports it on stderr and in the log, and returns a non-zero exit
  code. The sys.excepthook installed by TerminalManager covers anything that
  escapes main() itself.
"""

import curses
import locale
import logging
import traceback
from typing import Dict

from . import get_log_path
from .backend import StubRecordSource
from .config import ConfigManager
from .model import Action
from .state import StateManager
from .terminal import (
    RenderError, TerminalInitError, TerminalManager, UnrecoverablePanic,
    log_eprint, report_crash,
)
from .ui import Renderer, init_colors

logger = logging.getLogger(__name__)


def setup_logging(config_mgr: ConfigManager) -> None:
    log_path = get_log_path(config_mgr.get_custom_log_path())
    level = getattr(logging, config_mgr.get_log_level(), logging.INFO)
    logging.basicConfig(filename=log_path, level=level,
                        format='%(asctime)s - %(levelname)s - %(message)s')


def run_loop(stdscr, state_mgr: StateManager, keymap: Dict[int, Action],
             poll_interval_ms: int = 100, highlight_selection: bool = True) -> None:
    stdscr.timeout(poll_interval_ms)
    renderer = Renderer(stdscr, highlight_selection)
    renderer.render(state_mgr.get_snapshot(), state_mgr.records)

    while True:
        key = stdscr.getch()
        if key != curses.ERR:
            action = keymap.get(key)
            logger.debug(f"Key {key} -> {action}")
            if not state_mgr.handle_action(action):
                logger.info("Quitting")
                break
        renderer.render(state_mgr.get_snapshot(), state_mgr.records)


def main() -> int:
    config_mgr = ConfigManager()
    setup_logging(config_mgr)
    config = config_mgr.get_config()
    logger.info("Main started")

    # curses encodes wide characters (scrollbar arrows) through the user locale
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as e:
        logger.warning(f"Could not set locale: {e}")

    terminal = TerminalManager()
    terminal.install_crash_handler()

    try:
        state_mgr = StateManager(StubRecordSource(),
                                 scroll_step=config.ui.scroll_step,
                                 reset_scroll_on_navigate=config.ui.reset_scroll_on_navigate)
        with terminal.session() as stdscr:
            init_colors()
            run_loop(stdscr, state_mgr, config_mgr.get_keymap(),
                     poll_interval_ms=config_mgr.get_poll_interval(),
                     highlight_selection=config.ui.highlight_selection)
    except TerminalInitError as e:
        log_eprint(f"Failed to initialize terminal: {e}")
        return 1
    except RenderError as e:
        log_eprint(f"Render failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt caught, exiting...")
        return 130
    except Exception as e:
        report_crash(UnrecoverablePanic(f"{type(e).__name__}: {e}"), traceback.format_exc())
        return 1

    logger.info("Exited normally")
    return 0
