"""Filter chain: runs a page's filters for its current phase.

Filtering is lazy and happens at most once per page per phase. Because a
filter may read other pages' content, filtering one page can recursively
filter others; a page that is reached again while it is still being
filtered is a cycle and aborts the build.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .errors import BuildError, FilterExecutionFailure, RecursionDetected
from .page import Phase, ResolutionState

if TYPE_CHECKING:
    from .context import BuildContext
    from .page import Page

logger = logging.getLogger(__name__)


def select_filters(attributes: Mapping[str, Any], phase: Phase | None) -> list[str]:
    """Pick the filter names to run for ``phase``.

    The first list present wins; lists are never merged.

    Args:
        attributes: Page attributes.
        phase: Filtering phase, or None when no phase has started.

    Returns:
        Ordered filter names.
    """
    if phase is Phase.PRE:
        candidates = ("filters_pre", "filters")
    elif phase is Phase.POST:
        candidates = ("filters_post",)
    else:
        return []
    for key in candidates:
        names = attributes.get(key)
        if names is not None:
            return list(names)
    return []


class FilterChain:
    """Applies a page's filters in order, feeding each output to the next filter.

    Attributes:
        context: Build context providing the stack, registry, pages and config.
    """

    def __init__(self, context: BuildContext):
        self.context = context

    def apply(self, page: Page) -> None:
        """Filter ``page`` for its current phase unless already done.

        Raises:
            RecursionDetected: ``page`` is already being filtered.
            FilterExecutionFailure: A filter raised.
        """
        stack = self.context.stack
        if page.state is ResolutionState.RESOLVING or stack.contains(page):
            trace = [entry.source for entry in stack.trace_from(page)]
            raise RecursionDetected(trace)
        if page.state is ResolutionState.RESOLVED:
            return

        names = select_filters(page.attributes, page.stage)
        with stack.pushing(page):
            page.state = ResolutionState.RESOLVING
            resolved = False
            try:
                self._run(page, names)
                resolved = True
            finally:
                page.state = (
                    ResolutionState.RESOLVED if resolved else ResolutionState.UNRESOLVED
                )

    def _run(self, page: Page, names: list[str]) -> None:
        content = self._load_source(page)
        page.attributes["content"] = content
        if content is None or not names:
            return

        own_view = page.to_proxy(resolve_content=False)
        views = self.context.pages.proxies()
        config = self.context.config
        for name in names:
            filter_fn = self.context.filters.lookup(name)
            if filter_fn is None:
                self.context.warn(f"Unknown filter: {name}")
                continue
            logger.debug("Filtering %s with %s", page.source, name)
            try:
                page.attributes["content"] = filter_fn(own_view, views, config)
            except BuildError:
                raise
            except Exception as exc:
                raise FilterExecutionFailure(page.source, exc) from exc
            page.filtered = True

    @staticmethod
    def _load_source(page: Page) -> str | None:
        # a None content set by the layout step means "no output"
        if "content" in page.attributes:
            return page.attributes["content"]
        if page.content_filename is None:
            return ""
        try:
            return page.content_filename.read_text(encoding="utf-8")
        except OSError as exc:
            raise BuildError(page.source, f"cannot read page source: {exc}", exc) from exc
