"""Resolve ``[text](@id)`` links and bare ``@id`` mentions against the label index.

Resolution runs after every label has been collected, including annotation
labels, so forward references work. Unknown labels never abort a render: the
source text is kept and a warning is logged.
"""

from __future__ import annotations

import logging
import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown.treeprocessors import Treeprocessor
from markdown.util import AtomicString

from docshelf.labels import normalize_id
from docshelf.pipeline.tree import HEADING_TAGS, add_classes
from docshelf.syntax import LABEL_ID_PATTERN

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from docshelf.labels import LabelIndex, LabelInfo
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any
    Markdown = typ.Any

logger = logging.getLogger(__name__)

BARE_REFERENCE_RE = re.compile(rf"(?<![\w.@])@(?P<id>{LABEL_ID_PATTERN})")
SKIPPED_TAGS = frozenset({"a", "code", "pre", "kbd", "samp", "script", "style"}) | HEADING_TAGS
_WORD_CHAR = re.compile(r"\w")


def _reference_attributes(label_id: str, info: LabelInfo) -> dict[str, str]:
    return {
        "href": f"#{info.element_id}",
        "class": "ref-link",
        "data-ref": label_id,
        "data-ref-type": info.kind.value,
        "data-ref-title": info.title,
    }


class ReferenceResolver(Treeprocessor):
    """Turn label references into ``ref-link`` anchors."""

    def __init__(self, md: Markdown, labels: LabelIndex) -> None:
        super().__init__(md)
        self.labels = labels

    def run(self, root: Element) -> Element:
        for link in root.iter("a"):
            self._resolve_link(link)
        self._visit(root)
        return root

    def _resolve_link(self, link: Element) -> None:
        href = link.get("href") or ""
        if not href.startswith("@"):
            return
        label_id = normalize_id(href[1:])
        info = self.labels.get(label_id)
        if info is None:
            logger.warning("Reference not found: %s", href[1:])
            return
        attributes = _reference_attributes(label_id, info)
        link.set("href", attributes.pop("href"))
        add_classes(link, attributes.pop("class"))
        for key, value in attributes.items():
            link.set(key, value)

    def _visit(self, element: Element) -> None:
        if element.tag in SKIPPED_TAGS:
            return
        leading, created = self._split(element.text)
        rebuilt: list[Element] = list(created)
        element.text = leading
        for child in element:
            self._visit(child)
            tail, created = self._split(child.tail)
            child.tail = tail
            rebuilt.append(child)
            rebuilt.extend(created)
        element[:] = rebuilt

    def _split(self, text: str | None) -> tuple[str | None, list[Element]]:
        """Split a text run around resolvable bare references.

        Returns the text before the first link and the created links, each
        carrying the text that follows it as its tail.
        """
        if not text or "@" not in text or isinstance(text, AtomicString):
            return text, []
        leading: list[str] = []
        links: list[Element] = []
        position = 0
        for match in BARE_REFERENCE_RE.finditer(text):
            raw = match["id"].rstrip("-:")
            end = match.start("id") + len(raw)
            if match.end() < len(text) and _WORD_CHAR.match(text[match.end()]):
                continue
            if not raw:
                continue
            label_id = normalize_id(raw)
            info = self.labels.get(label_id)
            if info is None:
                logger.warning("Reference not found: %s", raw)
                continue
            segment = text[position : match.start()]
            if links:
                links[-1].tail = segment or None
            else:
                leading.append(segment)
            link = etree.Element("a", _reference_attributes(label_id, info))
            link.text = info.title
            links.append(link)
            position = end
        if not links:
            return text, []
        links[-1].tail = text[position:] or None
        return "".join(leading) or None, links


__all__ = ["BARE_REFERENCE_RE", "ReferenceResolver"]
