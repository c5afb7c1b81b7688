"""Hoist footnotes and ``annotation`` directives into a numbered notes section.

Two sources produce annotations:

* classic footnotes, ``[^id]`` references paired with ``[^id]: text``
  definitions, where repeated references share one entry;
* ``annotation`` directives, where every occurrence is a new entry.

Both are numbered in reading order. The reference point keeps a small marker
link, the body is archived as an independent copy, and a notes section is
appended to the end of the document. A cleanup pass then removes stray
``:::`` closer lines left trailing in paragraphs.

Example
-------
>>> from docshelf.pipeline.renderer import DocumentRenderer
>>> html = DocumentRenderer().render("Claim.[^a]\\n\\n[^a]: Source.").html
>>> 'href="#annotation-1"' in html and 'id="annotation-1"' in html
True
"""

from __future__ import annotations

import logging
import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown.blockprocessors import BlockProcessor
from markdown.inlinepatterns import InlineProcessor
from markdown.treeprocessors import Treeprocessor

from docshelf._constants import (
    ANNOTATION_ID_TEMPLATE,
    ANNOTATION_REF_ATTR,
    ANNOTATION_SECTION_ID,
    ANNOTATION_TITLE_TEMPLATE,
    DEFINITION_ATTR,
    JOINED_AFTER_ATTR,
)
from docshelf.labels import LabelInfo, LabelKind
from docshelf.pipeline.directives import Directive, DirectiveKind
from docshelf.pipeline.models import AnnotationInfo
from docshelf.pipeline.tree import (
    append_inline,
    clone_element,
    directive_name,
    has_content,
    iter_with_parents,
    plain_text,
    prepend_inline,
)
from docshelf.syntax import CONTAINER_CLOSE_RE

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from docshelf.pipeline.extension import DocumentState
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any
    Markdown = typ.Any

logger = logging.getLogger(__name__)

DEFINITION_RE = re.compile(
    r"^[ ]{0,3}\[\^(?P<id>[^\]\s]+)\]:[ \t]*(?P<text>.*)$", re.MULTILINE
)
REFERENCE_PATTERN = r"\[\^(?P<id>[^\]\s]+)\]"
_INDENT = "    "
# Blocks whose trailing text can hold a lazily continued closer line.
CLOSER_HOSTS = frozenset({"p", "li", "td", "th"})


def _dedent(text: str) -> str:
    lines = text.split("\n")
    return "\n".join(
        line[len(_INDENT) :] if line.startswith(_INDENT) else line.lstrip("\t")
        for line in lines
    )


class FootnoteDefinitionProcessor(BlockProcessor):
    """Parse ``[^id]: text`` definitions into hidden containers.

    Lines following the definition in the same block, and later blocks
    indented by four spaces, belong to the definition. The container stays in
    the tree only until :class:`AnnotationExtractor` collects it.
    """

    def test(self, parent: Element, block: str) -> bool:
        return DEFINITION_RE.search(block) is not None

    def run(self, parent: Element, blocks: list[str]) -> bool:
        block = blocks.pop(0)
        match = DEFINITION_RE.search(block)
        if match is None:  # pragma: no cover - guarded by test()
            blocks.insert(0, block)
            return False

        before = block[: match.start()].rstrip("\n")
        if before.strip():
            self.parser.parseBlocks(parent, [before])

        rest = block[match.end() :].lstrip("\n")
        following = DEFINITION_RE.search(rest)
        if following is not None:
            blocks.insert(0, rest[following.start() :])
            rest = rest[: following.start()]
        first = "\n".join(part for part in (match["text"], _dedent(rest).strip("\n")) if part)
        chunks = [first]
        if following is None:
            chunks.extend(self._indented_blocks(blocks))

        container = etree.SubElement(parent, "div")
        container.set(DEFINITION_ATTR, match["id"])
        self.parser.parseChunk(container, "\n\n".join(chunks))
        return True

    @staticmethod
    def _indented_blocks(blocks: list[str]) -> list[str]:
        chunks: list[str] = []
        while blocks and blocks[0].startswith((_INDENT, "\t")):
            chunks.append(_dedent(blocks.pop(0)))
        return chunks


class FootnoteReferenceProcessor(InlineProcessor):
    """Replace ``[^id]`` with a placeholder the extractor turns into a marker."""

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[Element, int, int]:
        placeholder = etree.Element("span")
        placeholder.set(ANNOTATION_REF_ATTR, m["id"])
        return placeholder, m.start(0), m.end(0)


def strip_trailing_closers(paragraph: Element) -> bool:
    """Remove a trailing run of ``:::`` lines and the line breaks around them.

    Returns
    -------
    bool
        ``True`` when at least one closer line was removed. Nothing is touched
        otherwise, so paragraphs ending in a plain line break are left alone.
    """
    found = False
    while True:
        owner = paragraph[-1] if len(paragraph) else None
        text = (owner.tail if owner is not None else paragraph.text) or ""
        lines = text.rstrip().split("\n")
        if text.strip() and CONTAINER_CLOSE_RE.match(lines[-1].strip()):
            found = True
            remaining = "\n".join(lines[:-1]).rstrip() or None
            if owner is not None:
                owner.tail = remaining
            else:
                paragraph.text = remaining
            continue
        if found and not text.strip() and owner is not None and owner.tag == "br":
            paragraph.remove(owner)
            continue
        return found


def _nearest_directive_before(parent: Element, child: Element) -> Element | None:
    siblings = list(parent)
    for sibling in reversed(siblings[: siblings.index(child)]):
        if sibling.tag == "div" and directive_name(sibling) is not None:
            return sibling
    return None


def cleanup_closers(root: Element) -> None:
    """Strip dangling closer lines from every text block below ``root``.

    List items and table cells keep whatever is left. A paragraph left empty
    is removed. A paragraph that still has content is moved into the nearest
    preceding sibling directive, when there is one.
    """
    for parent, child in list(iter_with_parents(root)):
        if child.tag not in CLOSER_HOSTS or not strip_trailing_closers(child):
            continue
        if child.tag != "p":
            logger.debug("Removed directive closers trailing a <%s>", child.tag)
            continue
        if not has_content(child):
            logger.debug("Removed a paragraph holding only directive closers")
            parent.remove(child)
            continue
        directive = _nearest_directive_before(parent, child)
        if directive is not None:
            logger.debug("Moved content after a dangling closer into %r", directive_name(directive))
            parent.remove(child)
            child.tail = None
            directive.append(child)


def summarize(content: cabc.Iterable[Element]) -> str:
    """Return the plain text of the first non-empty paragraph in ``content``."""
    for element in content:
        if element.tag == "p":
            text = plain_text(element).strip()
            if text:
                return text
    return ""


class AnnotationExtractor(Treeprocessor):
    """Number annotations, leave marker links, and append the notes section."""

    def __init__(self, md: Markdown, state: DocumentState, notes_heading: str) -> None:
        super().__init__(md)
        self.state = state
        self.notes_heading = notes_heading

    def run(self, root: Element) -> Element:
        self._collect_definitions(root)
        self._rewrite(root)
        cleanup_closers(root)
        if self.state.annotations:
            self._append_notes(root)
        return root

    def _collect_definitions(self, root: Element) -> None:
        for parent, child in list(iter_with_parents(root)):
            identifier = child.get(DEFINITION_ATTR)
            if identifier is None:
                continue
            parent.remove(child)
            if identifier in self.state.definitions:
                logger.debug("Ignoring repeated definition of annotation %r", identifier)
                continue
            self.state.definitions[identifier] = child

    def _rewrite(self, parent: Element) -> None:
        """Replace references and annotation directives below ``parent``."""
        children = list(parent)
        rebuilt: list[Element] = []
        for index, child in enumerate(children):
            identifier = child.get(ANNOTATION_REF_ATTR)
            if identifier is not None:
                marker = self._marker(self._footnote(identifier))
                marker.tail = child.tail
                rebuilt.append(marker)
                continue
            if directive_name(child) is not None:
                directive = Directive.from_element(child)
                if directive.kind is DirectiveKind.ANNOTATION:
                    following = children[index + 1] if index + 1 < len(children) else None
                    self._place_directive(child, rebuilt, following)
                    continue
            self._rewrite(child)
            rebuilt.append(child)
        parent[:] = rebuilt

    def _place_directive(
        self, element: Element, rebuilt: list[Element], following: Element | None
    ) -> None:
        info = self._open(identifier=None)
        self._archive(info, element)
        marker = self._marker(info)
        if element.tag == "span":
            marker.tail = element.tail
            rebuilt.append(marker)
        elif element.get(JOINED_AFTER_ATTR) and following is not None and following.tag == "p":
            prepend_inline(following, marker)
        elif rebuilt and rebuilt[-1].tag == "p":
            append_inline(rebuilt[-1], marker)
        else:
            paragraph = etree.Element("p")
            paragraph.append(marker)
            rebuilt.append(paragraph)

    def _footnote(self, identifier: str) -> AnnotationInfo:
        existing = self.state.footnotes.get(identifier)
        if existing is not None:
            return existing
        info = self._open(identifier=identifier)
        self.state.footnotes[identifier] = info
        definition = self.state.definitions.get(identifier)
        if definition is None:
            logger.warning('Annotation "%s" has no definition', identifier)
            definition = etree.Element("div")
            fallback = etree.SubElement(definition, "p")
            fallback.text = f'Annotation "{identifier}" has no definition.'
        self._archive(info, definition)
        return info

    def _open(self, *, identifier: str | None) -> AnnotationInfo:
        # Reserve the number before the body is walked so nested annotations
        # are numbered after their parent.
        number = len(self.state.annotations) + 1
        info = AnnotationInfo(
            identifier=identifier,
            element_id=ANNOTATION_ID_TEMPLATE.format(number=number),
            number=number,
            title=ANNOTATION_TITLE_TEMPLATE.format(number=number),
        )
        self.state.annotations.append(info)
        return info

    def _archive(self, info: AnnotationInfo, container: Element) -> None:
        self._rewrite(container)
        cleanup_closers(container)
        info.content = tuple(clone_element(node) for node in self._body(container))
        info.summary = summarize(info.content)
        self.state.labels.add(
            LabelInfo(
                id=info.element_id,
                kind=LabelKind.ANNOTATION,
                title=info.title,
                element_id=info.element_id,
                summary=info.summary,
            )
        )

    @staticmethod
    def _body(container: Element) -> list[Element]:
        """Return block content; inline-only containers are wrapped in a paragraph."""
        if (container.text or "").strip() or container.tag == "span":
            paragraph = etree.Element("p")
            paragraph.text = container.text
            paragraph.extend(clone_element(child) for child in container)
            return [paragraph]
        return list(container)

    @staticmethod
    def _marker(info: AnnotationInfo) -> Element:
        marker = etree.Element(
            "a",
            {
                "href": f"#{info.element_id}",
                "class": "ref-link annotation-marker",
                "data-ref": info.element_id,
                "data-ref-type": LabelKind.ANNOTATION.value,
                "data-ref-title": info.title,
            },
        )
        marker.text = str(info.number)
        return marker

    def _append_notes(self, root: Element) -> None:
        etree.SubElement(root, "hr")
        heading = etree.SubElement(
            root, "h2", {"id": ANNOTATION_SECTION_ID, "class": "annotation-heading"}
        )
        heading.text = self.notes_heading
        entries = etree.SubElement(root, "ol", {"class": "annotation-list"})
        for info in self.state.annotations:
            entry = etree.SubElement(
                entries, "li", {"id": info.element_id, "class": "annotation-entry"}
            )
            entry.extend(clone_element(node) for node in info.content)


__all__ = [
    "CLOSER_HOSTS",
    "DEFINITION_RE",
    "REFERENCE_PATTERN",
    "AnnotationExtractor",
    "FootnoteDefinitionProcessor",
    "FootnoteReferenceProcessor",
    "cleanup_closers",
    "strip_trailing_closers",
    "summarize",
]
