"""Collect ``(id)=`` label declarations from headings and column directives.

The collector runs on the raw block tree, after the directive transformer and
before inline processing, so heading text and paragraph text are still the
Markdown source. Declarations are removed from the output and recorded in the
document's :class:`~docshelf.labels.LabelIndex`.
"""

from __future__ import annotations

import logging
import typing as typ

from markdown.treeprocessors import Treeprocessor

from docshelf.labels import LabelInfo, LabelKind, normalize_id
from docshelf.pipeline.directives import Directive
from docshelf.pipeline.tree import HEADING_TAGS, directive_name
from docshelf.slugs import plain_heading_text
from docshelf.syntax import LABEL_LINE_RE, LABEL_PREFIX_RE

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from docshelf.labels import LabelIndex
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any
    Markdown = typ.Any

logger = logging.getLogger(__name__)


def split_heading_label(text: str | None) -> tuple[str | None, str | None]:
    """Split a leading ``(id)=`` declaration off heading text.

    Returns
    -------
    tuple[str | None, str | None]
        The raw label id (or ``None``) and the remaining text, which is
        ``None`` rather than an empty string when nothing is left.
    """
    match = LABEL_PREFIX_RE.match(text or "")
    if match is None:
        return None, text
    remainder = (text or "")[match.end() :]
    return match.group(1), remainder or None


class LabelCollector(Treeprocessor):
    """Register heading and column labels and write their anchor ids."""

    def __init__(self, md: Markdown, labels: LabelIndex) -> None:
        super().__init__(md)
        self.labels = labels

    def run(self, root: Element) -> Element:
        for element in list(root.iter()):
            if element.tag in HEADING_TAGS:
                self._collect_heading(element)
            elif element.tag == "div" and directive_name(element) is not None:
                directive = Directive.from_element(element)
                if directive.is_column:
                    self._collect_column(element)
        return root

    def _collect_heading(self, heading: Element) -> None:
        raw_id, remainder = split_heading_label(heading.text)
        if raw_id is None:
            return
        heading.text = remainder
        label_id = normalize_id(raw_id)
        heading.set("id", label_id)
        self.labels.add(
            LabelInfo(
                id=label_id,
                kind=LabelKind.HEADING,
                title=plain_heading_text(remainder or ""),
                element_id=label_id,
            )
        )

    def _collect_column(self, element: Element) -> None:
        line_label = self._take_label_line(element)
        attribute_label = element.attrib.pop("label", None)
        raw_id = attribute_label or line_label
        if not raw_id:
            return
        label_id = normalize_id(raw_id)
        element.set("id", label_id)
        title = element.get("data-title") or label_id
        self.labels.add(
            LabelInfo(
                id=label_id,
                kind=LabelKind.COLUMN,
                title=title,
                element_id=label_id,
            )
        )

    @staticmethod
    def _take_label_line(element: Element) -> str | None:
        """Remove the first standalone ``(id)=`` line of a direct child paragraph."""
        for child in list(element):
            if child.tag != "p" or len(child):
                continue
            lines = (child.text or "").split("\n")
            for index, line in enumerate(lines):
                match = LABEL_LINE_RE.match(line.strip())
                if match is None:
                    continue
                remaining = "\n".join(lines[:index] + lines[index + 1 :]).strip()
                if remaining:
                    child.text = remaining
                else:
                    element.remove(child)
                return match.group(1)
        return None


__all__ = ["LabelCollector", "split_heading_label"]
