"""``$…$`` and ``$$…$$`` math syntax with a pluggable typesetter.

Without a typesetter the TeX source is kept verbatim inside the math
element. A typesetter is any callable ``(source, display) -> Element | None``;
the element it returns replaces the source text and the math element gains
the ``typst-doc`` class. Returning ``None`` keeps the source.
"""

from __future__ import annotations

import logging
import typing as typ
import xml.etree.ElementTree as etree

from markdown.blockprocessors import BlockProcessor
from markdown.inlinepatterns import InlineProcessor
from markdown.util import AtomicString

from docshelf.pipeline.tree import add_classes

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import re
    from xml.etree.ElementTree import Element

    from markdown import Markdown
    from markdown.blockparser import BlockParser
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any
    Markdown = typ.Any
    BlockParser = typ.Any

logger = logging.getLogger(__name__)

Typesetter = typ.Callable[[str, bool], "Element | None"]

INLINE_MATH_PATTERN = r"(?<![\\$])\$(?!\s)(?P<source>[^$\n]+?)(?<!\s)\$(?!\d)"
DISPLAY_DELIMITER = "$$"


def typeset(element: Element, source: str, *, display: bool, typesetter: Typesetter | None) -> None:
    """Fill ``element`` with ``source`` or with the typesetter's output."""
    element.text = AtomicString(source)
    if typesetter is None:
        return
    rendered = typesetter(source, display)
    if rendered is None:
        logger.debug("Typesetter declined %s math %r", "display" if display else "inline", source)
        return
    element.text = None
    element.append(rendered)
    add_classes(element, "typst-doc")


class InlineMathProcessor(InlineProcessor):
    def __init__(self, pattern: str, md: Markdown, typesetter: Typesetter | None = None) -> None:
        super().__init__(pattern, md)
        self.typesetter = typesetter

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[Element, int, int]:
        element = etree.Element("span", {"class": "math math-inline"})
        typeset(element, m["source"], display=False, typesetter=self.typesetter)
        return element, m.start(0), m.end(0)


class DisplayMathProcessor(BlockProcessor):
    """Parse ``$$`` delimited blocks, which may span blank lines."""

    def __init__(self, parser: BlockParser, typesetter: Typesetter | None = None) -> None:
        super().__init__(parser)
        self.typesetter = typesetter

    def test(self, parent: Element, block: str) -> bool:
        return block.startswith(DISPLAY_DELIMITER)

    def run(self, parent: Element, blocks: list[str]) -> bool:
        block = blocks.pop(0)[len(DISPLAY_DELIMITER) :]
        collected = list(self._collect(block, blocks))
        element = etree.SubElement(parent, "div", {"class": "math math-display"})
        typeset(
            element,
            "\n\n".join(collected).strip(),
            display=True,
            typesetter=self.typesetter,
        )
        return True

    @staticmethod
    def _collect(block: str, blocks: list[str]) -> cabc.Iterator[str]:
        while True:
            end = block.find(DISPLAY_DELIMITER)
            if end >= 0:
                yield block[:end]
                rest = block[end + len(DISPLAY_DELIMITER) :].lstrip("\n")
                if rest.strip():
                    blocks.insert(0, rest)
                return
            yield block
            if not blocks:
                logger.debug("Display math is not closed; closing it at the end of the document")
                return
            block = blocks.pop(0)


__all__ = [
    "DISPLAY_DELIMITER",
    "INLINE_MATH_PATTERN",
    "DisplayMathProcessor",
    "InlineMathProcessor",
    "Typesetter",
    "typeset",
]
