"""Call stack of pages under active resolution.

The stack records which pages are currently being filtered, in order, so a
page requesting its own content transitively can be detected and reported.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .page import Page


class CallStack:
    """Ordered sequence of pages currently being resolved.

    Membership is by identity: two pages with equal attributes are still
    different entries.
    """

    def __init__(self):
        self._pages: list[Page] = []

    def push(self, page: Page) -> None:
        self._pages.append(page)

    def pop(self) -> Page:
        return self._pages.pop()

    def contains(self, page: Page) -> bool:
        return any(entry is page for entry in self._pages)

    @contextmanager
    def pushing(self, page: Page) -> Iterator[Page]:
        """Keep ``page`` pushed for the duration of the ``with`` block.

        The page is popped on every exit path, including exceptions.
        """
        self.push(page)
        try:
            yield page
        finally:
            self.pop()

    def snapshot(self) -> tuple[Page, ...]:
        return tuple(self._pages)

    def trace_from(self, page: Page) -> list[Page]:
        """Return the part of the stack from ``page`` up to the top.

        Returns the whole stack if ``page`` is not on it.
        """
        for index, entry in enumerate(self._pages):
            if entry is page:
                return self._pages[index:]
        return list(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(list(self._pages))

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"CallStack({len(self._pages)} pages)"
