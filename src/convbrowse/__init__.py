"""
convbrowse - A terminal browser for paginated conversation records.

This module provides a curses-based, keyboard-driven viewer with a master list
of conversations, a scrollable detail pane and a command bar.

Features:
  - Paginated conversation list (Page Up / Page Down)
  - Selection with arrow keys, clamped to the current page
  - Independent vertical/horizontal scrolling of the detail pane (j/k/h/l)
  - Terminal is always restored on quit or crash

Main Components:
  - main.py: Event loop, logging setup and error boundary
  - terminal.py: Raw mode / alternate screen lifecycle and crash handler
  - backend.py: Record source (stub that synthesizes conversations)
  - state.py: Navigation state machine
  - ui.py: Curses rendering engine
  - model.py: Data structures (Record, NavigationState, Action)

Usage:
  python -m convbrowse

Dependencies:
  - PyYAML (configuration file)
  - Python 3.10+
  - curses (built-in, not available on Windows natively)
"""

import os
from pathlib import Path
from typing import Optional

__version__ = "0.1.0"


def get_log_path(custom_path: Optional[str] = None) -> str:
    """
    Get the log file path.

    A configured `custom_path` wins; otherwise follows the XDG Base Directory
    spec: XDG_DATA_HOME/convbrowse/logs/convbrowse.log. The parent directory
    is created in either case.

    Returns:
        str: Path to log file (/tmp/convbrowse.log if the directory cannot be created)
    """
    if custom_path:
        log_file = Path(custom_path).expanduser()
    else:
        data_home = Path(os.environ.get('XDG_DATA_HOME') or Path.home() / '.local' / 'share')
        log_file = data_home / 'convbrowse' / 'logs' / 'convbrowse.log'

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return '/tmp/convbrowse.log'
    return str(log_file)
