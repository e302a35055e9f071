"""Page construction from source files.

Key functions:
- extract_frontmatter: Split YAML front matter from a document.
- load_page: Create a page in a build context from a single source file.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from .context import BuildContext
    from .page import Page

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)


def extract_frontmatter(text: str) -> tuple[dict[str, Any] | None, str]:
    """Extract YAML front matter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (front matter dict, remaining content). The dict is None
        when the text has no usable front matter block.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return None, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        return None, text
    if not isinstance(data, dict):
        return None, text
    return data, text[match.end() :]


def load_page(path: Path, context: BuildContext) -> Page:
    """Create a page for ``path`` in ``context``.

    A file with front matter becomes a page with those attributes and the
    remaining body as its content. A file without front matter only records
    its location; its content is read when the page is first filtered.

    ``filename`` defaults to the file's stem so pages do not all land on
    ``index.<extension>``.

    Args:
        path: Source file.
        context: Build context the page is added to.

    Returns:
        The new page.
    """
    text = path.read_text(encoding="utf-8")
    frontmatter, body = extract_frontmatter(text)
    attributes: dict[str, Any] = {"filename": path.stem}
    if frontmatter is None:
        return context.add_page(attributes, content_filename=path)
    attributes.update(frontmatter)
    attributes["content"] = body
    return context.add_page(attributes, content_filename=path)
