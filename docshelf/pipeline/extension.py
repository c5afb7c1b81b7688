"""Python-Markdown extension wiring the docshelf passes into one pipeline.

Block parsing recognises display math, directives, and footnote
definitions. Before inline processing the tree is tagged with directive
metadata, labels are collected, and headings receive anchors. After inline
processing annotations are extracted, references are resolved, decorations
are applied, and internal bookkeeping attributes are stripped.

One :class:`DocumentState` belongs to one extension instance, and one
extension instance to one ``markdown.Markdown`` conversion.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from docshelf._constants import DEFAULT_NOTES_HEADING
from docshelf.labels import LabelIndex
from docshelf.pipeline.anchors import HeadingAnchorProcessor, SetextHeadingProcessor
from docshelf.pipeline.annotations import (
    REFERENCE_PATTERN,
    AnnotationExtractor,
    FootnoteDefinitionProcessor,
    FootnoteReferenceProcessor,
)
from docshelf.pipeline.decorations import CheckMarkProcessor, TaskListProcessor
from docshelf.pipeline.directives import (
    DirectiveBlockProcessor,
    DirectiveTransformer,
    TextDirectiveInlineProcessor,
)
from docshelf.pipeline.label_collector import LabelCollector
from docshelf.pipeline.math import (
    INLINE_MATH_PATTERN,
    DisplayMathProcessor,
    InlineMathProcessor,
)
from docshelf.pipeline.references import ReferenceResolver
from docshelf.pipeline.tree import strip_internal_attributes
from docshelf.syntax import TEXT_DIRECTIVE_PATTERN

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from docshelf.pipeline.math import Typesetter
    from docshelf.pipeline.models import AnnotationInfo
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any
    Typesetter = typ.Any


@dc.dataclass(slots=True)
class DocumentState:
    """Mutable state shared by the passes while one document is converted.

    Attributes
    ----------
    labels : LabelIndex
        Labels declared by headings, columns, and annotations.
    used_slugs : set[str]
        Heading slugs and label ids reserved by the document outline.
    annotations : list[AnnotationInfo]
        Annotations in numbering order.
    footnotes : dict[str, AnnotationInfo]
        Footnote identifiers already numbered, for repeated references.
    definitions : dict[str, Element]
        Footnote definition containers keyed by identifier.
    """

    labels: LabelIndex = dc.field(default_factory=LabelIndex)
    used_slugs: set[str] = dc.field(default_factory=set)
    annotations: list[AnnotationInfo] = dc.field(default_factory=list)
    footnotes: dict[str, AnnotationInfo] = dc.field(default_factory=dict)
    definitions: dict[str, Element] = dc.field(default_factory=dict)


class FinalizeTreeprocessor(Treeprocessor):
    """Strip the ``data-docshelf-*`` bookkeeping attributes before output."""

    def run(self, root: Element) -> Element:
        strip_internal_attributes(root)
        return root


class DocshelfExtension(Extension):
    """Register the directive, label, annotation, and reference passes.

    Parameters
    ----------
    state : DocumentState, optional
        State to populate; a fresh one is created when omitted.
    notes_heading : str, optional
        Text of the heading above the appended notes section.
    typesetter : Typesetter, optional
        Callable rendering math sources into elements.
    """

    def __init__(
        self,
        state: DocumentState | None = None,
        notes_heading: str = DEFAULT_NOTES_HEADING,
        typesetter: Typesetter | None = None,
    ) -> None:
        super().__init__()
        self.state = state if state is not None else DocumentState()
        self.notes_heading = notes_heading
        self.typesetter = typesetter

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register every docshelf processor on the Markdown instance."""
        blocks = md.parser.blockprocessors
        # Replaces the stock setext processor under the same name and priority.
        blocks.register(SetextHeadingProcessor(md.parser), "setextheader", 60)
        blocks.register(
            DisplayMathProcessor(md.parser, self.typesetter), "docshelf_display_math", 77
        )
        blocks.register(DirectiveBlockProcessor(md.parser), "docshelf_directive", 75)
        blocks.register(FootnoteDefinitionProcessor(md.parser), "docshelf_footnote_def", 17)

        inline = md.inlinePatterns
        inline.register(
            InlineMathProcessor(INLINE_MATH_PATTERN, md, self.typesetter),
            "docshelf_inline_math",
            185,
        )
        inline.register(
            FootnoteReferenceProcessor(REFERENCE_PATTERN, md), "docshelf_footnote_ref", 175
        )
        inline.register(
            TextDirectiveInlineProcessor(TEXT_DIRECTIVE_PATTERN, md),
            "docshelf_text_directive",
            165,
        )

        trees = md.treeprocessors
        state = self.state
        trees.register(DirectiveTransformer(md), "docshelf_directives", 29)
        trees.register(LabelCollector(md, state.labels), "docshelf_labels", 28)
        trees.register(
            HeadingAnchorProcessor(md, state.used_slugs, state.labels), "docshelf_anchors", 27
        )
        trees.register(
            AnnotationExtractor(md, state, self.notes_heading), "docshelf_annotations", 18
        )
        trees.register(ReferenceResolver(md, state.labels), "docshelf_references", 17)
        trees.register(TaskListProcessor(md), "docshelf_task_lists", 16)
        trees.register(CheckMarkProcessor(md), "docshelf_check_marks", 15)
        trees.register(FinalizeTreeprocessor(md), "docshelf_finalize", 5)


__all__ = ["DocshelfExtension", "DocumentState", "FinalizeTreeprocessor"]
