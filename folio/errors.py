"""Build errors raised by the Folio resolution pipeline.

Every fatal condition in the pipeline is a ``BuildError`` subclass carrying
the source location of the page (or layout) that caused it. Unknown filters
are not errors; they are logged and skipped.

Key classes:
- BuildError: Base error with file context.
- RecursionDetected: A page's content was requested while it was being filtered.
- FilterExecutionFailure: A filter raised while filtering a page.
- AmbiguousOrMissingLayout: Zero or several layout files match a layout name.
- UnrecognizedLayoutFormat: A layout's format has no renderer (strict mode only).
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class BuildError(Exception):
    """Error during a build with file context.

    Attributes:
        source: Source location of the page or layout that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught, if any.
    """

    def __init__(
        self,
        source: str | Path | None,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source = source
        self.message = message
        self.original_error = original_error
        if source is None:
            super().__init__(message)
        else:
            super().__init__(f"{source}: {message}")


class RecursionDetected(BuildError):
    """A page's content was requested again while that page was being filtered.

    Attributes:
        trace: Source locations of the pages on the call stack, from the page
            that recursed to the top of the stack.
    """

    def __init__(self, trace: Sequence[str]):
        self.trace = list(trace)
        source = self.trace[0] if self.trace else None
        super().__init__(source, "Recursive call to page content.")


class FilterExecutionFailure(BuildError):
    """A filter raised an exception while filtering a page."""

    def __init__(self, source: str, original_error: Exception):
        super().__init__(
            source,
            f"failed to filter page '{source}': "
            f"{type(original_error).__name__}: {original_error}",
            original_error,
        )


class AmbiguousOrMissingLayout(BuildError):
    """A declared layout name matched zero or several layout files.

    Attributes:
        layout: The layout name declared by the page.
        candidates: Names of the layout files that matched.
    """

    def __init__(self, layout: str, candidates: Sequence[str]):
        self.layout = layout
        self.candidates = list(candidates)
        if not self.candidates:
            message = f"no layout files found for '{layout}'"
        else:
            found = ", ".join(self.candidates)
            message = f"multiple layout files found for '{layout}': {found}"
        super().__init__(layout, message)


class UnrecognizedLayoutFormat(BuildError):
    """A layout's format tag has no registered renderer."""

    def __init__(self, source: str, layout_format: str | None):
        self.layout_format = layout_format
        super().__init__(source, f"unrecognized layout format: {layout_format!r}")
