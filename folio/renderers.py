"""Layout renderers for Folio.

Each renderer handles one layout format and implements a single
``render(template, bindings, options)`` contract. Renderers also decide how
pages are projected into the template: Jinja-based formats get attribute
style ``PageProxy`` views, the logic-less Mustache format gets mapping style
``PageDrop`` views.

Key classes:
- LayoutRenderer: Base class for layout renderers.
- JinjaLayoutRenderer: Embedded scripting with Jinja2 (no autoescape).
- HTMLLayoutRenderer: HTML with embedded Jinja2, autoescaped.
- MarkdownLayoutRenderer: Markdown with embedded Jinja2, converted by mistune.
- MustacheLayoutRenderer: Logic-less tag substitution with chevron.
- RendererRegistry: Format tag to renderer mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import chevron
import mistune
from jinja2 import Environment, FileSystemLoader

if TYPE_CHECKING:
    from .collections import PageSet
    from .page import Page

DEFAULT_MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]


class LayoutRenderer(ABC):
    """Base class for layout renderers.

    Subclasses set ``format`` to the tag they handle. The default ``bind``
    uses the attribute-style proxy projection.
    """

    format: str = ""
    safe_content: bool = False

    @abstractmethod
    def render(
        self, template: str, bindings: dict[str, Any], options: Mapping[str, Any]
    ) -> str:
        """Render ``template`` with ``bindings``.

        Args:
            template: Raw layout template text.
            bindings: Variables available to the template.
            options: Format specific options declared by the page.

        Returns:
            Rendered text.
        """
        ...

    def bind(
        self, page: Page, pages: PageSet, config: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Build the template variables for ``page``."""
        return {
            "page": page.to_proxy(safe=self.safe_content),
            "pages": pages.proxies(safe=self.safe_content),
            "config": config,
        }


class JinjaLayoutRenderer(LayoutRenderer):
    """Renders Jinja2 layouts without autoescaping.

    Attributes:
        search_path: Directory used to resolve ``{% include %}`` and
            ``{% extends %}`` inside layouts.
    """

    format = "jinja"
    autoescape = False

    def __init__(self, search_path: Path | None = None):
        self.search_path = search_path
        self._env = self.environment({})

    def environment(self, options: Mapping[str, Any]) -> Environment:
        """Create a Jinja environment, ``options`` overriding the defaults."""
        kwargs: dict[str, Any] = {"autoescape": self.autoescape}
        if self.search_path is not None:
            kwargs["loader"] = FileSystemLoader(str(self.search_path))
        kwargs.update(options)
        return Environment(**kwargs)

    def render(
        self, template: str, bindings: dict[str, Any], options: Mapping[str, Any]
    ) -> str:
        env = self.environment(options) if options else self._env
        return env.from_string(template).render(**bindings)


class HTMLLayoutRenderer(JinjaLayoutRenderer):
    """Renders HTML layouts with Jinja2 and autoescaping.

    Page content is already markup, so it is exposed as ``Markup`` and not
    escaped again; every other value is escaped.
    """

    format = "html"
    autoescape = True
    safe_content = True


class MarkdownLayoutRenderer(JinjaLayoutRenderer):
    """Expands Jinja2 in a Markdown layout, then converts it to HTML.

    Options:
        plugins: mistune plugin names (defaults to DEFAULT_MARKDOWN_PLUGINS).
        escape: Whether mistune escapes raw HTML (defaults to False).
        jinja: Jinja ``Environment`` keyword arguments.
    """

    format = "markdown"

    def render(
        self, template: str, bindings: dict[str, Any], options: Mapping[str, Any]
    ) -> str:
        expanded = super().render(template, bindings, options.get("jinja") or {})
        markdown = mistune.create_markdown(
            escape=bool(options.get("escape", False)),
            plugins=list(options.get("plugins", DEFAULT_MARKDOWN_PLUGINS)),
        )
        return markdown(expanded)


class MustacheLayoutRenderer(LayoutRenderer):
    """Renders logic-less Mustache layouts with chevron.

    Pages are exposed as read-only mappings. Options are passed to
    ``chevron.render`` (for example ``def_ldel``/``def_rdel`` or ``warn``).
    """

    format = "mustache"

    def __init__(self, search_path: Path | None = None):
        self.search_path = search_path

    def bind(
        self, page: Page, pages: PageSet, config: Mapping[str, Any]
    ) -> dict[str, Any]:
        return {"page": page.to_drop(), "pages": pages.drops(), "config": dict(config)}

    def render(
        self, template: str, bindings: dict[str, Any], options: Mapping[str, Any]
    ) -> str:
        kwargs = dict(options)
        if self.search_path is not None:
            kwargs.setdefault("partials_path", str(self.search_path))
        return chevron.render(template, bindings, **kwargs)


class RendererRegistry:
    """Registry of layout renderers keyed by format tag.

    This registry allows adding renderers without modifying the layout
    step, following the Open/Closed Principle.
    """

    def __init__(self):
        self._renderers: dict[str, LayoutRenderer] = {}

    def register(self, renderer: LayoutRenderer) -> None:
        self._renderers[renderer.format] = renderer

    def get(self, layout_format: str | None) -> LayoutRenderer | None:
        if layout_format is None:
            return None
        return self._renderers.get(layout_format)

    def formats(self) -> list[str]:
        return sorted(self._renderers)


def create_default_renderers(layouts_dir: Path | None = None) -> RendererRegistry:
    """Create a registry with the built-in layout renderers.

    Args:
        layouts_dir: Directory for template includes and partials.

    Returns:
        Configured RendererRegistry.
    """
    registry = RendererRegistry()
    registry.register(JinjaLayoutRenderer(layouts_dir))
    registry.register(HTMLLayoutRenderer(layouts_dir))
    registry.register(MarkdownLayoutRenderer(layouts_dir))
    registry.register(MustacheLayoutRenderer(layouts_dir))
    return registry
