"""Build context for Folio.

One ``BuildContext`` is created per build and handed to every page and
resolver. It owns the pages, the call stack, the filter registry, the layout
source and renderers, and the diagnostics of the build.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .collections import PageSet
from .config import load_config, merge_config
from .filters import FilterRegistry, create_default_registry, load_filter_plugins
from .layouts import FileLayoutSource, LayoutSource
from .page import Page, Phase
from .renderers import RendererRegistry, create_default_renderers
from .resolver import PageResolver
from .stack import CallStack

logger = logging.getLogger(__name__)


class BuildContext:
    """State shared by all pages of one build.

    Attributes:
        config: Read-only build configuration.
        output_dir: Directory output paths are computed against.
        pages: All pages of the build.
        stack: Pages currently being filtered.
        filters: Filter registry.
        layout_source: Where layout candidates come from.
        renderers: Layout renderers by format tag.
        quiet: Suppress warning output (warnings are still recorded).
        warnings: Warning messages recorded during the build.
        resolver: Page resolver bound to this context.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        output_dir: Path | None = None,
        filters: FilterRegistry | None = None,
        layout_source: LayoutSource | None = None,
        renderers: RendererRegistry | None = None,
        quiet: bool = False,
    ):
        merged = merge_config(config)
        self.config: Mapping[str, Any] = MappingProxyType(merged)
        self.output_dir = Path(
            output_dir if output_dir is not None else merged["output_dir"]
        )
        layouts_dir = Path(merged["layouts_dir"])

        self.pages = PageSet()
        self.stack = CallStack()
        self.filters = filters if filters is not None else create_default_registry()
        self.layout_source = (
            layout_source if layout_source is not None else FileLayoutSource(layouts_dir)
        )
        self.renderers = (
            renderers if renderers is not None else create_default_renderers(layouts_dir)
        )
        self.quiet = quiet
        self.warnings: list[str] = []
        self.resolver = PageResolver(self)

    @classmethod
    def for_project(cls, project_root: Path, quiet: bool = False) -> BuildContext:
        """Create a context from ``folio.yaml`` in ``project_root``.

        Relative directories in the configuration are resolved against
        ``project_root``, and filter plugins in the ``lib_dir`` are loaded.
        """
        config = load_config(project_root)
        return cls.from_config(config, project_root, quiet=quiet)

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], project_root: Path, quiet: bool = False
    ) -> BuildContext:
        """Create a context from a loaded configuration rooted at ``project_root``."""
        resolved = dict(config)
        for key in ("output_dir", "layouts_dir", "lib_dir"):
            if key in resolved:
                resolved[key] = str(project_root / str(resolved[key]))
        context = cls(resolved, quiet=quiet)
        if "lib_dir" in resolved:
            loaded = load_filter_plugins(context.filters, Path(resolved["lib_dir"]))
            if loaded:
                logger.info("Loaded filter plugins: %s", ", ".join(loaded))
        return context

    def add_page(
        self,
        attributes: Mapping[str, Any],
        content_filename: Path | None = None,
    ) -> Page:
        """Create a page owned by this context.

        Args:
            attributes: Page attributes, applied over the configured page defaults.
            content_filename: Backing file read when no ``content`` is given.

        Returns:
            The new page.
        """
        merged = dict(self.config.get("page_defaults") or {})
        merged.update(attributes)
        page = Page(attributes=merged, context=self, content_filename=content_filename)
        self.pages.append(page)
        return page

    def begin_phase(self, phase: Phase) -> None:
        """Move every page into ``phase``."""
        logger.debug("Starting %s phase for %d pages", phase.value, len(self.pages))
        for page in self.pages:
            page.begin_phase(phase)

    def warn(self, message: str) -> None:
        """Record a non-fatal problem and log it unless quiet."""
        self.warnings.append(message)
        if not self.quiet:
            logger.warning(message)
