"""Dataclasses describing the output of the rendering pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from docshelf.labels import LabelIndex
    from docshelf.toc import TocItem


@dc.dataclass(slots=True)
class AnnotationInfo:
    """An aside hoisted into the notes section.

    Attributes
    ----------
    identifier : str or None
        Footnote identifier, or ``None`` for ``annotation`` directives.
    element_id : str
        Anchor of the notes entry, ``annotation-<number>``.
    number : int
        1-based display ordinal in first-appearance order.
    title : str
        ``Note <number>``; used as the marker tooltip.
    content : tuple[Element, ...]
        Structural copy of the annotation body, independent of the tree.
    summary : str
        Plain text of the first non-empty paragraph.
    """

    identifier: str | None
    element_id: str
    number: int
    title: str
    content: tuple[Element, ...] = ()
    summary: str = ""


@dc.dataclass(slots=True)
class RenderedDocument:
    """HTML fragment and the metadata gathered while rendering it."""

    html: str
    toc: list[TocItem]
    labels: LabelIndex
    annotations: tuple[AnnotationInfo, ...] = ()


__all__ = ["AnnotationInfo", "RenderedDocument"]
