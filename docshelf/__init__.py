"""Render Markdown documentation trees with labels, references, and annotations.

This package exposes the CLI entry points used by the ``docshelf`` console
script and the document renderer behind them.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``DocumentRenderer``: Markdown-to-HTML renderer with navigation metadata.

Examples
--------
>>> from docshelf import DocumentRenderer
>>> DocumentRenderer().render("# Hello").toc[0].id
'hello'
>>> from docshelf import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main
from .pipeline import DocumentRenderer, RenderedDocument

__all__ = ["DocumentRenderer", "RenderedDocument", "app", "main"]
