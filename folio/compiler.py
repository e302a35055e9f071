"""Compile run over all pages of a build.

Key function:
- compile_pages: Pre-filter, lay out and post-filter every page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import BuildError
from .page import Page, Phase

if TYPE_CHECKING:
    from .context import BuildContext

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a compile run.

    Attributes:
        pages: All pages of the build.
        outputs: Final content keyed by output path. None marks a page whose
            layout format had no renderer.
        warnings: Warnings recorded during the run.
    """

    pages: list[Page]
    outputs: dict[Path, str | None]
    warnings: list[str]


def compile_pages(context: BuildContext) -> BuildResult:
    """Resolve every page of ``context`` to its final content.

    Pages are pre-filtered, laid out and post-filtered in three passes, so a
    filter reading another page always sees that page's content for the
    same phase. Nothing is written to disk.

    Args:
        context: Build context holding the pages.

    Returns:
        BuildResult with the final content of each page.

    Raises:
        BuildError: Two pages share an output path, or a page failed to build.
    """
    pages = list(context.pages)

    context.begin_phase(Phase.PRE)
    for page in pages:
        context.resolver.resolve_content(page)

    for page in pages:
        page.layout()

    context.begin_phase(Phase.POST)
    outputs: dict[Path, str | None] = {}
    owners: dict[Path, Page] = {}
    for page in pages:
        output_path = page.output_path
        if output_path in owners:
            raise BuildError(
                page.source,
                f"output path {output_path} is already used by {owners[output_path].source}",
            )
        owners[output_path] = page
        outputs[output_path] = page.content

    logger.info("Compiled %d pages", len(pages))
    return BuildResult(pages=pages, outputs=outputs, warnings=list(context.warnings))
