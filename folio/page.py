"""Pages and their resolution state.

A page is a mutable bag of attributes plus a small state machine that the
filter chain drives once per phase. Reading ``Page.content`` resolves the
page through its build context, so filters and layouts that read other pages
trigger those pages' filtering on demand.

Key classes:
- Phase: The filtering phase a page is in (pre or post layout).
- ResolutionState: Unresolved, resolving or resolved for the current phase.
- Page: A single content unit of the build.

Key functions:
- output_path: Compute the path a page would be written to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .proxies import PageDrop, PageProxy

if TYPE_CHECKING:
    from .context import BuildContext


class Phase(str, Enum):
    """Filtering phase: ``pre`` runs before the layout, ``post`` after it."""

    PRE = "pre"
    POST = "post"


class ResolutionState(Enum):
    """Where a page is in the filtering of its current phase."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


@dataclass(eq=False)
class Page:
    """A content unit with attributes and raw content.

    Attributes:
        attributes: Page attributes, including ``content`` once materialized.
        context: The build context this page belongs to.
        content_filename: Backing file read when ``content`` is not set.
        stage: Current filtering phase, or None before the first phase.
        filtered: True once at least one filter ran in the current phase.
        state: Resolution state for the current phase.
    """

    attributes: dict[str, Any]
    context: BuildContext = field(repr=False)
    content_filename: Path | None = None
    stage: Phase | None = None
    filtered: bool = False
    state: ResolutionState = ResolutionState.UNRESOLVED

    @property
    def content(self) -> str | None:
        """Return the page content, filtering it first if needed."""
        return self.context.resolver.resolve_content(self)

    @property
    def source(self) -> str:
        """Describe where this page comes from, for error reports."""
        if self.content_filename is not None:
            return str(self.content_filename)
        path = str(self.attributes.get("path") or "")
        filename = self.attributes.get("filename")
        if filename:
            return f"{path}{filename}"
        return path or "<inline page>"

    @property
    def output_path(self) -> Path:
        return output_path(self)

    def begin_phase(self, phase: Phase) -> None:
        """Enter ``phase`` so the page is filtered again with that phase's filters."""
        self.stage = phase
        self.filtered = False
        self.state = ResolutionState.UNRESOLVED

    def layout(self) -> str | None:
        """Wrap the page content in its layout."""
        return self.context.resolver.resolve_layout(self)

    def to_proxy(self, resolve_content: bool = True, safe: bool = False) -> PageProxy:
        return PageProxy(self, resolve_content=resolve_content, safe=safe)

    def to_drop(self) -> PageDrop:
        return PageDrop(self)


def output_path(page: Page) -> Path:
    """Compute the output path for a page.

    ``custom_path`` wins when set; otherwise the path is built from the
    ``path``, ``filename`` and ``extension`` attributes.

    Args:
        page: Page whose output path to compute.

    Returns:
        Path below the build's output directory.
    """
    attrs = page.attributes
    output_dir = Path(page.context.output_dir)
    custom_path = attrs.get("custom_path")
    if custom_path is not None:
        return output_dir / str(custom_path).lstrip("/")
    folder = str(attrs.get("path") or "").strip("/")
    filename = f"{attrs.get('filename', 'index')}.{attrs.get('extension', 'html')}"
    return output_dir / folder / filename
