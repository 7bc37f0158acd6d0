"""
Data models for convbrowse.

This module defines the dataclasses shared by the record source, the
navigation state machine and the renderer:
  - Record: one conversation as returned by a record source (immutable)
  - NavigationState: selection, current page and detail-pane scroll offsets
  - Action: the set of inputs the state machine understands

Pages are plain lists of Records. Page p holds the records with logical
indices [p * PAGE_SIZE, (p + 1) * PAGE_SIZE).
"""

import enum
from dataclasses import dataclass

PAGE_SIZE = 5


@dataclass(frozen=True)
class Record:
    title: str
    id: str
    body: str = ""


@dataclass
class NavigationState:
    selected_index: int = 0
    current_page: int = 0
    vertical_scroll: int = 0
    horizontal_scroll: int = 0


class Action(enum.Enum):
    QUIT = "quit"
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    SCROLL_LEFT = "scroll_left"
    SCROLL_RIGHT = "scroll_right"


def format_details(record: Record) -> str:
    """Full text shown in the detail pane for a record."""
    return (f"Conversation Title: {record.title}\n"
            f"Conversation ID: {record.id}\n\n"
            f"Conversation Details:\n{record.body}")
