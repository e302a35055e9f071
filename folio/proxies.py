"""Read-only views of pages for filters and templates.

Filters and layouts never touch ``Page`` objects directly. They get one of
two projections:

- PageProxy: attribute and item access (``page.title``, ``page["title"]``),
  used by filters and by Jinja-based layouts.
- PageDrop: a read-only mapping, used by logic-less Mustache layouts.

Reading ``content`` through either view resolves the underlying page, except
on the proxy a filter receives for its own page, which returns the content
as it currently stands.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from markupsafe import Markup

if TYPE_CHECKING:
    from .page import Page

_MISSING = object()


class PageProxy:
    """Attribute-style read-only view of a page."""

    __slots__ = ("_page", "_resolve_content", "_safe")

    def __init__(self, page: Page, resolve_content: bool = True, safe: bool = False):
        object.__setattr__(self, "_page", page)
        object.__setattr__(self, "_resolve_content", resolve_content)
        object.__setattr__(self, "_safe", safe)

    @property
    def attributes(self) -> Mapping[str, Any]:
        return MappingProxyType(self._page.attributes)

    @property
    def output_path(self) -> str:
        return str(self._page.output_path)

    @property
    def source(self) -> str:
        return self._page.source

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key, default)
        return default if value is _MISSING else value

    def _lookup(self, key: str, default: Any = _MISSING) -> Any:
        if key == "content":
            if self._resolve_content:
                content = self._page.content
            else:
                content = self._page.attributes.get("content")
            if self._safe and content is not None:
                return Markup(content)
            return content
        return self._page.attributes.get(key, default)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        value = self._lookup(name)
        if value is _MISSING:
            raise AttributeError(name)
        return value

    def __getitem__(self, key: str) -> Any:
        value = self._lookup(key)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return key == "content" or key in self._page.attributes

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("page proxies are read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("page proxies are read-only")

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageProxy({self._page.source})"


class PageDrop(Mapping[str, Any]):
    """Mapping view of a page for logic-less templates."""

    def __init__(self, page: Page):
        self._page = page

    def __getitem__(self, key: str) -> Any:
        if key == "content":
            return self._page.content
        return self._page.attributes[key]

    def __contains__(self, key: object) -> bool:
        return key == "content" or key in self._page.attributes

    def __iter__(self) -> Iterator[str]:
        keys = list(self._page.attributes)
        if "content" not in keys:
            keys.append("content")
        return iter(keys)

    def __len__(self) -> int:
        return len(self._page.attributes) + (
            0 if "content" in self._page.attributes else 1
        )

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageDrop({self._page.source})"
