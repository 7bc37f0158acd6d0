"""
Navigation state machine.

StateManager owns the NavigationState and the records of the current page.
It interprets Actions coming from the main loop:

  - UP / DOWN: move the selection, clamped to the current page
  - PAGE_UP / PAGE_DOWN: refetch a whole page from the record source and
    reset the selection to the first record
  - SCROLL_*: adjust the detail pane scroll offsets by `scroll_step`,
    saturating at 0
  - QUIT: tells the loop to stop

Scroll offsets are unbounded here; the renderer clamps them against the
content length. By default they are kept when the selection or the page
changes. Pass reset_scroll_on_navigate=True to zero them whenever a
different record becomes selected.

Everything runs on the main loop thread, so there is no locking.
"""

import logging
from dataclasses import replace
from typing import List, Optional

from .backend import RecordSource
from .model import Action, NavigationState, Record

logger = logging.getLogger(__name__)


class StateManager:
    """Selection, pagination and scroll tracking for one record source."""

    def __init__(self, source: RecordSource, scroll_step: int = 10,
                 reset_scroll_on_navigate: bool = False):
        self.source = source
        self.scroll_step = scroll_step
        self.reset_scroll_on_navigate = reset_scroll_on_navigate
        self._state = NavigationState()
        self._records: List[Record] = list(source.fetch_page(0))

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    def get_snapshot(self) -> NavigationState:
        return replace(self._state)

    def selected_record(self) -> Optional[Record]:
        idx = self._state.selected_index
        if idx < len(self._records):
            return self._records[idx]
        return None

    def move_selection(self, delta: int) -> None:
        if not self._records:
            self._state.selected_index = 0
            return
        new_idx = max(0, min(self._state.selected_index + delta, len(self._records) - 1))
        if new_idx != self._state.selected_index:
            self._state.selected_index = new_idx
            self._on_record_changed()

    def next_page(self) -> None:
        self._load_page(self._state.current_page + 1)

    def prev_page(self) -> None:
        if self._state.current_page > 0:
            self._load_page(self._state.current_page - 1)

    def _load_page(self, page: int) -> None:
        records = list(self.source.fetch_page(page))
        logger.info(f"Page {self._state.current_page} -> {page} ({len(records)} records)")
        # Swap only after a successful fetch so state stays consistent on error
        self._records = records
        self._state.current_page = page
        self._state.selected_index = 0
        self._on_record_changed()

    def _on_record_changed(self) -> None:
        if self.reset_scroll_on_navigate:
            self._state.vertical_scroll = 0
            self._state.horizontal_scroll = 0

    def scroll_vertical(self, steps: int) -> None:
        self._state.vertical_scroll = max(0, self._state.vertical_scroll + steps * self.scroll_step)

    def scroll_horizontal(self, steps: int) -> None:
        self._state.horizontal_scroll = max(0, self._state.horizontal_scroll + steps * self.scroll_step)

    def handle_action(self, action: Optional[Action]) -> bool:
        """Apply an action. Returns False when the loop should stop."""
        if action is Action.QUIT:
            return False
        if action is Action.DOWN:
            self.move_selection(1)
        elif action is Action.UP:
            self.move_selection(-1)
        elif action is Action.PAGE_DOWN:
            self.next_page()
        elif action is Action.PAGE_UP:
            self.prev_page()
        elif action is Action.SCROLL_DOWN:
            self.scroll_vertical(1)
        elif action is Action.SCROLL_UP:
            self.scroll_vertical(-1)
        elif action is Action.SCROLL_RIGHT:
            self.scroll_horizontal(1)
        elif action is Action.SCROLL_LEFT:
            self.scroll_horizontal(-1)
        return True
