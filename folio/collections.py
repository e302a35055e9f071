from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from .page import Page
from .proxies import PageDrop, PageProxy


class PageSet(Sequence[Page]):
    """All pages known to one build, in insertion order."""

    def __init__(self, pages: Iterable[Page] = ()):
        self._pages = list(pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        return self._pages[item]

    def append(self, page: Page) -> None:
        self._pages.append(page)

    def proxies(self, safe: bool = False) -> ProxyCollection:
        return ProxyCollection(p.to_proxy(safe=safe) for p in self._pages)

    def drops(self) -> list[PageDrop]:
        # chevron only iterates real lists in sections
        return [p.to_drop() for p in self._pages]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageSet({len(self._pages)} pages)"


class ProxyCollection(Sequence[PageProxy]):
    """Lightweight helper for working with page proxies in filters and templates."""

    def __init__(self, proxies: Iterable[PageProxy]):
        self._proxies = list(proxies)

    def __iter__(self) -> Iterator[PageProxy]:
        return iter(self._proxies)

    def __len__(self) -> int:
        return len(self._proxies)

    def __getitem__(self, item):
        return self._proxies[item]

    def where(self, key: str, value: Any) -> ProxyCollection:
        return ProxyCollection(p for p in self._proxies if p.get(key) == value)

    def find(self, path: str) -> PageProxy | None:
        """Return the first page whose ``path`` attribute equals ``path``."""
        for proxy in self._proxies:
            if proxy.get("path") == path:
                return proxy
        return None

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"ProxyCollection({len(self._proxies)} pages)"
