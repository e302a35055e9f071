"""Layout lookup for Folio.

A page names its layout by base name (``layout: default``). The layout
source lists the files matching that name in any extension; exactly one
must match. The matched file's extension decides the template format.

Key classes:
- Layout: A resolved template (format tag plus raw template text).
- LayoutFile: A candidate file returned by a layout source.
- FileLayoutSource: Lists candidates from a layouts directory.
- LayoutResolver: Picks the layout for a page.
"""

from __future__ import annotations

import glob
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .errors import AmbiguousOrMissingLayout

if TYPE_CHECKING:
    from .page import Page

FILE_TYPES: dict[str, str] = {
    ".jinja": "jinja",
    ".j2": "jinja",
    ".html": "html",
    ".htm": "html",
    ".md": "markdown",
    ".markdown": "markdown",
    ".mustache": "mustache",
}


@dataclass(frozen=True)
class Layout:
    """A resolved layout template.

    Attributes:
        format: Format tag selecting the renderer, or None when the file's
            extension is not a known format.
        content: Raw template text.
        name: Layout name or file the template came from.
    """

    format: str | None
    content: str
    name: str = "<default>"


# Passthrough: the page keeps its filtered content as is.
DEFAULT_LAYOUT = Layout(format="passthrough", content="")


@dataclass(frozen=True)
class LayoutFile:
    """A layout file matching a layout name."""

    name: str
    extension: str
    content: str


@runtime_checkable
class LayoutSource(Protocol):
    """Protocol for listing layout candidates by name."""

    def list_candidates(self, layout_name: str) -> list[LayoutFile]:
        ...


class FileLayoutSource:
    """Lists layout candidates from a directory.

    Attributes:
        layouts_dir: Directory containing layout files.
    """

    def __init__(self, layouts_dir: Path):
        self.layouts_dir = layouts_dir

    def list_candidates(self, layout_name: str) -> list[LayoutFile]:
        """Return every ``<layout_name>.*`` file, skipping ``~`` backups.

        Args:
            layout_name: Layout base name, optionally with subfolders.

        Returns:
            Matching layout files sorted by name.
        """
        if not self.layouts_dir.is_dir():
            return []
        candidates: list[LayoutFile] = []
        for path in sorted(self.layouts_dir.glob(f"{glob.escape(layout_name)}.*")):
            if path.name.endswith("~") or not path.is_file():
                continue
            candidates.append(
                LayoutFile(
                    name=path.relative_to(self.layouts_dir).as_posix(),
                    extension=path.suffix,
                    content=path.read_text(encoding="utf-8"),
                )
            )
        return candidates


class LayoutResolver:
    """Resolves the layout template for a page.

    Attributes:
        source: Where layout candidates come from.
        file_types: Extension to format tag mapping.
    """

    def __init__(self, source: LayoutSource, file_types: dict[str, str] | None = None):
        self.source = source
        self.file_types = FILE_TYPES if file_types is None else file_types

    def resolve(self, page: Page) -> Layout:
        """Return the layout for ``page``.

        Pages without a ``layout`` attribute get ``DEFAULT_LAYOUT``.

        Raises:
            AmbiguousOrMissingLayout: Zero or several files match the name.
        """
        layout_name = page.attributes.get("layout")
        if layout_name is None:
            return DEFAULT_LAYOUT

        layout_name = str(layout_name)
        candidates = [
            c for c in self.source.list_candidates(layout_name) if not c.name.endswith("~")
        ]
        if len(candidates) != 1:
            raise AmbiguousOrMissingLayout(layout_name, [c.name for c in candidates])

        match = candidates[0]
        return Layout(
            format=self.file_types.get(match.extension.lower()),
            content=match.content,
            name=match.name,
        )
