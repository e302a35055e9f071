"""Page resolution: filtering and layout for a single page.

Key class:
- PageResolver: Resolves a page's content and wraps it in its layout.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from jinja2 import TemplateSyntaxError

from .chain import FilterChain
from .errors import BuildError, UnrecognizedLayoutFormat
from .layouts import DEFAULT_LAYOUT, LayoutResolver

if TYPE_CHECKING:
    from .context import BuildContext
    from .page import Page

logger = logging.getLogger(__name__)


class PageResolver:
    """Resolves page content and layouts within one build.

    ``resolve_content`` is re-entrant: filters and layouts may read other
    pages' content, which resolves those pages first. Cycles are caught by
    the filter chain.

    Attributes:
        context: The build context.
        filter_chain: Runs filters for a page's current phase.
        layout_resolver: Finds the layout for a page.
    """

    def __init__(self, context: BuildContext):
        self.context = context
        self.filter_chain = FilterChain(context)
        self.layout_resolver = LayoutResolver(context.layout_source)

    def resolve_content(self, page: Page) -> str | None:
        """Filter ``page`` if needed and return its content."""
        self.filter_chain.apply(page)
        return page.attributes.get("content")

    def resolve_layout(self, page: Page) -> str | None:
        """Render ``page`` through its layout and store the result as its content.

        Layout rendering is not memoized; every call renders again. A page
        without a declared layout keeps its filtered content unchanged, and
        per-format options are ignored for it.

        Returns:
            The laid out content, or None when the layout format has no
            renderer.

        Raises:
            AmbiguousOrMissingLayout: The page's layout name is not unique.
            UnrecognizedLayoutFormat: Unknown format with ``strict_layout_formats``.
            BuildError: The layout template failed to render.
        """
        self.resolve_content(page)
        layout = self.layout_resolver.resolve(page)
        if layout is DEFAULT_LAYOUT:
            return page.attributes.get("content")

        renderer = self.context.renderers.get(layout.format)
        if renderer is None:
            if self.context.config.get("strict_layout_formats"):
                raise UnrecognizedLayoutFormat(layout.name, layout.format)
            self.context.warn(
                f"Unrecognized layout format {layout.format!r} in {layout.name}; "
                f"{page.source} has no output"
            )
            page.attributes["content"] = None
            return None

        options = page.attributes.get(f"{renderer.format}_options") or {}
        bindings = renderer.bind(page, self.context.pages, self.context.config)
        logger.debug("Laying out %s with %s", page.source, layout.name)
        try:
            content = renderer.render(layout.content, bindings, options)
        except BuildError:
            raise
        except TemplateSyntaxError as exc:
            raise BuildError(
                layout.name,
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except Exception as exc:
            raise BuildError(
                layout.name,
                f"failed to lay out page '{page.source}': {_format_error_message(exc)}",
                exc,
            ) from exc
        page.attributes["content"] = content
        return content


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message."""
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"
