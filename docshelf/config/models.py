"""Typed dataclasses describing docshelf viewer configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from docshelf._constants import DEFAULT_NOTES_HEADING


class ViewerConfigError(ValueError):
    """Raised when the viewer configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ThemeConfig:
    """Labels used by the generated HTML pages."""

    site_name: str = "Docs Viewer"
    doc_label: str = "Docs"


@dc.dataclass(slots=True)
class ViewerConfig:
    """Resolved configuration for rendering and building a documentation tree.

    Attributes
    ----------
    docs_root : Path
        Directory holding the Markdown documents.
    output_dir : Path
        Directory the static site is written to.
    pygments_style : str
        Pygments style used for highlighted code blocks.
    notes_heading : str
        Heading text of the notes section appended to annotated documents.
    theme : ThemeConfig
        Page labels.
    """

    docs_root: Path = Path("docs")
    output_dir: Path = Path("public")
    pygments_style: str = "monokai"
    notes_heading: str = DEFAULT_NOTES_HEADING
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)


__all__ = ["ThemeConfig", "ViewerConfig", "ViewerConfigError"]
