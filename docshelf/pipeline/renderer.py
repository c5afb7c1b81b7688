"""Render docshelf Markdown into HTML plus navigation metadata."""

from __future__ import annotations

import logging
import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from docshelf._constants import DEFAULT_NOTES_HEADING
from docshelf.labels import LabelIndex
from docshelf.pipeline.extension import DocshelfExtension, DocumentState
from docshelf.pipeline.models import RenderedDocument
from docshelf.toc import extract_toc

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

    from docshelf.pipeline.math import Typesetter
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any
    Typesetter = typ.Any

logger = logging.getLogger(__name__)

CODE_BLOCK_PATTERN = re.compile(
    r"(?P<fence>`{3,}|~{3,})(?P<lang>[A-Za-z0-9_+#.-]+)?[^\n]*\n.*?(?P=fence)", re.DOTALL
)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


class DocumentRenderer:
    """Convert Markdown documents with the docshelf extension set.

    Every call to :meth:`render` builds a new ``markdown.Markdown`` instance
    and a new :class:`DocumentState`, so renderers can be shared freely.
    """

    def __init__(
        self,
        pygments_style: str = "monokai",
        notes_heading: str = DEFAULT_NOTES_HEADING,
        typesetter: Typesetter | None = None,
    ) -> None:
        """Initialize a renderer.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults
            to ``"monokai"``.
        notes_heading : str, optional
            Heading text of the appended notes section.
        typesetter : Typesetter, optional
            Math typesetter; math source is kept as text when omitted.
        """
        self.pygments_style = pygments_style
        self.notes_heading = notes_heading
        self.typesetter = typesetter
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def render(self, text: str) -> RenderedDocument:
        """Render ``text`` and return the HTML with its TOC, labels, and notes."""
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return RenderedDocument(html="", toc=[], labels=LabelIndex())
        state = DocumentState()
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            "nl2br",
            DocshelfExtension(state, self.notes_heading, self.typesetter),
        ]
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        html = self._annotate_codehilite(md.convert(normalized), normalized)
        logger.debug(
            "Rendered document with %d labels and %d annotations",
            len(state.labels),
            len(state.annotations),
        )
        return RenderedDocument(
            html=html,
            toc=extract_toc(text),
            labels=state.labels,
            annotations=tuple(state.annotations),
        )

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match["lang"] or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            return f"{fence}{language or ''}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


def render_markdown(text: str, **options: typ.Any) -> RenderedDocument:  # noqa: ANN401
    """Render ``text`` with a one-off :class:`DocumentRenderer`."""
    return DocumentRenderer(**options).render(text)


__all__ = ["CODE_BLOCK_PATTERN", "DocumentRenderer", "render_markdown"]
