"""
Record source backends.

The navigation state machine only depends on the page-based contract of
RecordSource: given a zero-based page index, return the records of that page.
A source is treated as blocking and total; it may return a short or empty
page and the caller copes with it.

Key Classes:
  - RecordSource: Protocol with a single fetch_page() method
  - StubRecordSource: Deterministic source that synthesizes conversations
    from the page index (no I/O)
"""

import logging
from typing import List, Protocol

from .model import PAGE_SIZE, Record

logger = logging.getLogger(__name__)

FILLER_LINE = "Some details about the conversation..."
FILLER_LINES_PER_BLOCK = 8
FILLER_BLOCKS = 6
RULE = "-" * 149 + ">"


class RecordSource(Protocol):
    def fetch_page(self, page_index: int) -> List[Record]:
        ...


def _filler_body() -> str:
    block = "\n\n".join([FILLER_LINE] * FILLER_LINES_PER_BLOCK)
    return "\n\n".join(f"{block}\n\n{RULE}" for _ in range(FILLER_BLOCKS))


class StubRecordSource:
    """Synthesizes `page_size` conversations for any page index."""

    def __init__(self, page_size: int = PAGE_SIZE):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self._body = _filler_body()

    def fetch_page(self, page_index: int) -> List[Record]:
        if page_index < 0:
            raise ValueError(f"page index must be non-negative, got {page_index}")
        start = page_index * self.page_size
        logger.debug(f"Fetching page {page_index} (records {start}..{start + self.page_size - 1})")
        return [
            Record(title=f"Conversation {i + 1}", id=f"conv-{i + 1}", body=self._body)
            for i in range(start, start + self.page_size)
        ]
