"""Filter registry and built-in filters for Folio.

A filter is any callable taking ``(page, pages, config)`` and returning the
page's new content. Filters are looked up by name when a page is filtered,
so a registry can be extended (for example by project plugins) until the
build starts.

Key classes:
- Filter: Protocol every filter satisfies.
- FilterRegistry: Name to filter mapping.

Key functions:
- create_default_registry: Registry preloaded with the built-in filters.
- load_filter_plugins: Import project plugin modules that register filters.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import re
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import chevron
import mistune
from jinja2 import Environment
from markupsafe import escape
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)


@runtime_checkable
class Filter(Protocol):
    """Protocol for content filters.

    Filters receive a read-only view of the page being filtered (whose
    ``content`` is the current, partially filtered text), views of all pages
    of the build, and the build configuration.
    """

    def __call__(
        self, page: Any, pages: Sequence[Any], config: Mapping[str, Any]
    ) -> str:
        ...


class FilterRegistry:
    """Registry of named filters.

    This registry allows adding filters without modifying the filter chain,
    following the Open/Closed Principle.
    """

    def __init__(self):
        self._filters: dict[str, Filter] = {}

    def register(self, name: str, filter_fn: Filter) -> None:
        """Register ``filter_fn`` under ``name``, replacing any previous filter."""
        self._filters[name] = filter_fn

    def filter(self, name: str) -> Callable[[Filter], Filter]:
        """Decorator form of ``register``."""

        def decorator(filter_fn: Filter) -> Filter:
            self.register(name, filter_fn)
            return filter_fn

        return decorator

    def lookup(self, name: str) -> Filter | None:
        return self._filters.get(name)

    def names(self) -> list[str]:
        return sorted(self._filters)

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    def __len__(self) -> int:
        return len(self._filters)


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text."""
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _HighlightRenderer(mistune.HTMLRenderer):
    """Markdown renderer with heading anchors and syntax highlighting."""

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments when the language is known."""
        if info:
            try:
                lexer = get_lexer_by_name(info, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        lang_class = f' class="language-{info}"' if info else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]


def jinja_filter(page, pages, config) -> str:
    """Render the page content as a Jinja template."""
    template = Environment().from_string(page.content or "")
    return template.render(page=page, pages=pages, config=config)


def markdown_filter(page, pages, config) -> str:
    """Convert Markdown content to HTML."""
    markdown = mistune.create_markdown(
        renderer=_HighlightRenderer(), plugins=MARKDOWN_PLUGINS
    )
    return markdown(page.content or "")


def mustache_filter(page, pages, config) -> str:
    """Render the page content as a Mustache template."""
    return chevron.render(
        page.content or "", {"page": page, "pages": list(pages), "config": dict(config)}
    )


def escape_filter(page, pages, config) -> str:
    """Escape HTML special characters in the content."""
    return str(escape(page.content or ""))


def create_default_registry() -> FilterRegistry:
    """Create a registry with the built-in filters.

    Returns:
        Configured FilterRegistry.
    """
    registry = FilterRegistry()
    registry.register("jinja", jinja_filter)
    registry.register("markdown", markdown_filter)
    registry.register("mustache", mustache_filter)
    registry.register("escape", escape_filter)
    return registry


def load_filter_plugins(registry: FilterRegistry, lib_dir: Path) -> list[str]:
    """Import every ``*.py`` file in ``lib_dir`` and let it register filters.

    A plugin module registers its filters from a ``register(registry)``
    function. Modules without one are imported and otherwise ignored.

    Args:
        registry: Registry the plugins add filters to.
        lib_dir: Directory holding plugin modules.

    Returns:
        Names of the plugin modules that were loaded, in load order.
    """
    loaded: list[str] = []
    if not lib_dir.is_dir():
        return loaded
    for module_path in sorted(lib_dir.glob("*.py")):
        module_path = module_path.resolve()
        path_hash = hashlib.sha1(str(module_path).encode("utf-8")).hexdigest()[:16]
        module_name = f"folio_plugin_{module_path.stem}_{path_hash}"
        spec = importlib.util.spec_from_file_location(module_name, str(module_path))
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot create module spec for {module_path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(module_name, None)
            raise
        register = getattr(module, "register", None)
        if callable(register):
            register(registry)
        else:
            logger.debug("Plugin %s defines no register() function", module_path.name)
        loaded.append(module_path.stem)
    return loaded
