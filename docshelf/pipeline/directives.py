"""Parse ``:::name`` directives and tag them with presentation metadata.

Three directive forms are recognised:

* container directives, fenced by an opener line ``:::name[label]{attrs}``
  and a bare ``:::`` closer, which may nest;
* leaf directives, a single ``::name[label]{attrs}`` line;
* text directives, inline ``:name[label]{attrs}`` spans.

Parsing happens while Python-Markdown splits the document into blocks. A
tree processor then runs before inline processing, adds the ``directive`` and
``directive-<name>`` classes, and turns ``@key: value`` metadata lines of
column directives into ``data-<key>`` attributes.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import typing as typ
import xml.etree.ElementTree as etree

from markdown.blockprocessors import BlockProcessor
from markdown.inlinepatterns import InlineProcessor
from markdown.treeprocessors import Treeprocessor

from docshelf._constants import (
    DIRECTIVE_FORM_ATTR,
    DIRECTIVE_NAME_ATTR,
    INTERNAL_ATTR_PREFIX,
    JOINED_AFTER_ATTR,
    METADATA_KEYS,
)
from docshelf.pipeline.tree import class_list, directive_name
from docshelf.slugs import slugify
from docshelf.syntax import (
    CONTAINER_OPEN_RE,
    LEAF_DIRECTIVE_RE,
    METADATA_LINE_RE,
    fence_delta,
    parse_attributes,
)

if typ.TYPE_CHECKING:
    import re
    from xml.etree.ElementTree import Element
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any

logger = logging.getLogger(__name__)


class DirectiveKind(enum.Enum):
    """Directive names the pipeline gives special treatment."""

    COLUMN = "column"
    COLUMN_TOC = "column-toc"
    ANNOTATION = "annotation"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str) -> DirectiveKind:
        match name:
            case "column":
                return cls.COLUMN
            case "column-toc":
                return cls.COLUMN_TOC
            case "annotation":
                return cls.ANNOTATION
            case _:
                return cls.UNKNOWN


class DirectiveForm(enum.StrEnum):
    CONTAINER = "container"
    LEAF = "leaf"
    TEXT = "text"


@dc.dataclass(slots=True, frozen=True)
class Directive:
    """A directive occurrence as written in the source.

    Attributes
    ----------
    kind : DirectiveKind
        Recognised directive kind; ``UNKNOWN`` for any other name.
    name : str
        Name exactly as written after the fence.
    form : DirectiveForm
        Container, leaf, or text directive.
    attributes : dict[str, str]
        Parsed ``{...}`` attributes.
    label : str or None
        Text of the optional ``[...]`` label.
    """

    kind: DirectiveKind
    name: str
    form: DirectiveForm = DirectiveForm.CONTAINER
    attributes: dict[str, str] = dc.field(default_factory=dict)
    label: str | None = None

    @classmethod
    def from_source(
        cls,
        name: str,
        form: DirectiveForm,
        attributes: str | None = None,
        label: str | None = None,
    ) -> Directive:
        """Build a directive from the pieces matched in the source text."""
        return cls(
            kind=DirectiveKind.from_name(name),
            name=name,
            form=form,
            attributes=parse_attributes(attributes),
            label=label,
        )

    @classmethod
    def from_element(cls, element: Element) -> Directive:
        """Rebuild the directive recorded on a parsed element."""
        name = directive_name(element) or ""
        return cls(
            kind=DirectiveKind.from_name(name),
            name=name,
            form=DirectiveForm(element.get(DIRECTIVE_FORM_ATTR, DirectiveForm.CONTAINER)),
            attributes={
                key: value
                for key, value in element.attrib.items()
                if not key.startswith(INTERNAL_ATTR_PREFIX)
            },
        )

    @property
    def base_name(self) -> str:
        """Name used for styling; ``column-toc`` is styled as ``column``."""
        if self.kind is DirectiveKind.COLUMN_TOC:
            return DirectiveKind.COLUMN.value
        return self.name

    @property
    def is_column(self) -> bool:
        return self.kind in {DirectiveKind.COLUMN, DirectiveKind.COLUMN_TOC}

    def classes(self) -> list[str]:
        return ["directive", f"directive-{self.base_name}"]


def apply_directive_classes(element: Element, directive: Directive) -> None:
    """Set the base directive classes ahead of any user supplied classes."""
    classes = directive.classes()
    classes.extend(name for name in class_list(element) if name not in classes)
    element.set("class", " ".join(classes))


def _mark_element(element: Element, directive: Directive) -> None:
    element.set(DIRECTIVE_NAME_ATTR, directive.name)
    element.set(DIRECTIVE_FORM_ATTR, directive.form.value)
    for key, value in directive.attributes.items():
        element.set(key, value)


def split_metadata(text: str) -> tuple[str, list[tuple[str, str]]]:
    """Separate ``@key: value`` lines from the prose of a paragraph.

    Parameters
    ----------
    text : str
        Raw paragraph text.

    Returns
    -------
    tuple[str, list[tuple[str, str]]]
        The remaining prose (non-metadata, non-blank lines newline-joined and
        trimmed) and the recognised ``(key, value)`` pairs in source order.
    """
    content_lines: list[str] = []
    metadata: list[tuple[str, str]] = []
    for line in text.split("\n"):
        trimmed = line.strip()
        match = METADATA_LINE_RE.match(trimmed)
        if match and match["key"] in METADATA_KEYS:
            metadata.append((match["key"], match["value"].strip()))
        elif trimmed:
            content_lines.append(line)
    return "\n".join(content_lines).strip(), metadata


class DirectiveBlockProcessor(BlockProcessor):
    """Turn container and leaf directives into ``div`` elements.

    An opener may appear anywhere inside a block. Text before it is parsed as
    its own block. Text following the closer within the same block is put
    back on the queue and flagged on the element, so the annotation pass can
    place its marker in that following paragraph.
    """

    def test(self, parent: Element, block: str) -> bool:
        return self._first_match(block) is not None

    def run(self, parent: Element, blocks: list[str]) -> bool:
        block = blocks.pop(0)
        match = self._first_match(block)
        if match is None:  # pragma: no cover - guarded by test()
            blocks.insert(0, block)
            return False

        before = block[: match.start()].rstrip("\n")
        if before.strip():
            self.parser.parseBlocks(parent, [before])

        if match.re is LEAF_DIRECTIVE_RE:
            directive = Directive.from_source(
                match["name"], DirectiveForm.LEAF, match["attrs"], match["label"]
            )
            element = etree.SubElement(parent, "div")
            _mark_element(element, directive)
            element.text = directive.label
            after = block[match.end() :].lstrip("\n")
        else:
            directive = Directive.from_source(
                match["name"], DirectiveForm.CONTAINER, match["attrs"], match["label"]
            )
            body, after = self._collect_body(directive, block[match.end() :], blocks)
            element = etree.SubElement(parent, "div")
            _mark_element(element, directive)
            if directive.label:
                caption = etree.SubElement(element, "p")
                caption.set("class", "directive-label")
                caption.text = directive.label
            self.parser.parseChunk(element, body)

        if after.strip():
            element.set(JOINED_AFTER_ATTR, "true")
            blocks.insert(0, after)
        return True

    @staticmethod
    def _first_match(block: str) -> re.Match[str] | None:
        matches = [
            match
            for match in (CONTAINER_OPEN_RE.search(block), LEAF_DIRECTIVE_RE.search(block))
            if match is not None
        ]
        if not matches:
            return None
        return min(matches, key=lambda match: match.start())

    @staticmethod
    def _collect_body(
        directive: Directive, remainder: str, blocks: list[str]
    ) -> tuple[str, str]:
        """Gather body lines up to the matching closer.

        Returns the body text and whatever followed the closer in its block.
        Blank-line boundaries between consumed blocks are kept in the body.
        """
        lines = remainder.split("\n")[1:]
        body: list[str] = []
        depth = 1
        while True:
            for index, line in enumerate(lines):
                depth += fence_delta(line)
                if depth == 0:
                    return "\n".join(body), "\n".join(lines[index + 1 :])
                body.append(line)
            if not blocks:
                logger.debug(
                    "Directive %r is not closed; closing it at the end of the document",
                    directive.name,
                )
                return "\n".join(body), ""
            if body:
                body.append("")
            lines = blocks.pop(0).split("\n")


class TextDirectiveInlineProcessor(InlineProcessor):
    """Render inline ``:name[label]{attrs}`` directives as ``span`` elements."""

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[Element, int, int]:
        directive = Directive.from_source(
            m["name"],
            DirectiveForm.TEXT,
            m["attrs"] if m["attrs"] is not None else m["bare_attrs"],
            m["label"],
        )
        element = etree.Element("span")
        _mark_element(element, directive)
        apply_directive_classes(element, directive)
        element.text = directive.label
        return element, m.start(0), m.end(0)


class DirectiveTransformer(Treeprocessor):
    """Attach classes, metadata attributes, and TOC anchors to directives."""

    def run(self, root: Element) -> Element:
        for element in list(root.iter("div")):
            if directive_name(element) is None:
                continue
            directive = Directive.from_element(element)
            apply_directive_classes(element, directive)
            match directive.kind:
                case DirectiveKind.COLUMN | DirectiveKind.COLUMN_TOC:
                    title = self._extract_metadata(element)
                    if directive.kind is DirectiveKind.COLUMN_TOC and title:
                        element.set("id", slugify(title))
                case DirectiveKind.ANNOTATION | DirectiveKind.UNKNOWN:
                    pass
        return root

    @staticmethod
    def _extract_metadata(element: Element) -> str:
        """Move metadata lines of direct child paragraphs onto ``element``."""
        rebuilt: list[Element] = []
        for child in element:
            if child.tag != "p" or len(child):
                rebuilt.append(child)
                continue
            content, metadata = split_metadata(child.text or "")
            if not metadata:
                rebuilt.append(child)
                continue
            for key, value in metadata:
                element.set(f"data-{key}", value)
            if content:
                child.text = content
                rebuilt.append(child)
        element[:] = rebuilt
        return element.get("data-title", "")


__all__ = [
    "Directive",
    "DirectiveBlockProcessor",
    "DirectiveForm",
    "DirectiveKind",
    "DirectiveTransformer",
    "TextDirectiveInlineProcessor",
    "apply_directive_classes",
    "split_metadata",
]
