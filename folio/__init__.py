"""Folio page resolution pipeline.

This package resolves the final content of pages in a static content build.
Each page runs through an ordered chain of named filters and then through an
optional layout template, rendered by one of several template backends.

The main entry points are ``folio.context.BuildContext`` (one per build),
``folio.resolver.PageResolver`` and ``folio.compiler.compile_pages``.
The ``folio`` command renders pages from the command line.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
