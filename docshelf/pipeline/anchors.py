"""Assign slug anchors to headings that declare no label."""

from __future__ import annotations

import typing as typ

from markdown.blockprocessors import SetextHeaderProcessor
from markdown.treeprocessors import Treeprocessor

from docshelf._constants import SETEXT_ATTR
from docshelf.pipeline.directives import Directive
from docshelf.pipeline.tree import HEADING_TAGS, directive_name
from docshelf.slugs import plain_heading_text, slugify, unique_slug

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from docshelf.labels import LabelIndex
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any
    Markdown = typ.Any


def _continues_outline(element: Element) -> bool:
    # Only non-column directive containers keep their headings in the outline.
    if element.tag != "div" or directive_name(element) is None:
        return False
    return not Directive.from_element(element).is_column


def _is_column(element: Element) -> bool:
    if element.tag != "div" or directive_name(element) is None:
        return False
    return Directive.from_element(element).is_column


def _in_outline(heading: Element) -> bool:
    # The line-based TOC scanner only recognises ATX headings.
    return heading.get(SETEXT_ATTR) is None


class SetextHeadingProcessor(SetextHeaderProcessor):
    """Parse setext headings and mark them as outside the document outline."""

    def run(self, parent: Element, blocks: list[str]) -> None:
        super().run(parent, blocks)
        parent[-1].set(SETEXT_ATTR, "true")


class HeadingAnchorProcessor(Treeprocessor):
    """Give every unlabeled heading an ``id`` derived from its text.

    Headings that belong to the document outline (top level, or nested only
    in non-column directives) reserve their slug so later duplicates get a
    numeric suffix. Headings elsewhere (inside columns, block quotes, list
    items, or written in setext style) are given their slugs once the
    outline is settled, which keeps outline ids identical to the ones
    produced by :func:`docshelf.toc.extract_toc`.

    Label ids declared by outline headings and columns are reserved before
    any slug is handed out, so a slug never repeats a label's anchor.
    """

    def __init__(self, md: Markdown, used_slugs: set[str], labels: LabelIndex) -> None:
        super().__init__(md)
        self.used_slugs = used_slugs
        self.labels = labels

    def run(self, root: Element) -> Element:
        self.used_slugs.update(self._outline_labels(root))
        deferred: list[Element] = []
        self._visit(root, deferred, outline=True)
        # Outline slugs are settled first, so the rest cannot shift them.
        for heading in deferred:
            base = slugify(plain_heading_text(heading.text or ""))
            heading.set("id", unique_slug(base, self.used_slugs))
        return root

    def _outline_labels(self, parent: Element) -> cabc.Iterator[str]:
        for child in parent:
            anchor = child.get("id")
            if anchor is not None and anchor in self.labels:
                if (child.tag in HEADING_TAGS and _in_outline(child)) or _is_column(child):
                    yield anchor
            if _continues_outline(child):
                yield from self._outline_labels(child)

    def _visit(self, parent: Element, deferred: list[Element], *, outline: bool) -> None:
        for child in parent:
            if child.tag in HEADING_TAGS:
                if child.get("id") is not None:
                    continue
                if outline and _in_outline(child):
                    base = slugify(plain_heading_text(child.text or ""))
                    child.set("id", unique_slug(base, self.used_slugs))
                else:
                    deferred.append(child)
                continue
            self._visit(child, deferred, outline=outline and _continues_outline(child))


__all__ = ["HeadingAnchorProcessor", "SetextHeadingProcessor"]
