"""Label declarations and the per-document label index.

Headings, column directives, and annotations can declare labels that other
parts of the document reference with ``@label`` or ``[text](@label)``. The
collection passes fill a :class:`LabelIndex`; the reference resolver reads it.
A fresh index is created for every rendered document.

Example
-------
>>> from docshelf.labels import LabelIndex, LabelInfo, LabelKind, normalize_id
>>> index = LabelIndex()
>>> index.add(LabelInfo("sec-a", LabelKind.HEADING, "Section A", "sec-a"))
True
>>> index.get(normalize_id("sec:a")).title
'Section A'
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


class LabelKind(enum.StrEnum):
    """Kind of element a label is attached to."""

    HEADING = "heading"
    COLUMN = "column"
    ANNOTATION = "annotation"


@dc.dataclass(slots=True, frozen=True)
class LabelInfo:
    """A declared anchor point.

    Attributes
    ----------
    id : str
        Normalized label identifier, unique within a document.
    kind : LabelKind
        Element kind the label belongs to.
    title : str
        Text used for reference links and tooltips.
    element_id : str
        Anchor the label resolves to in the rendered HTML.
    summary : str or None
        Plain-text excerpt for previews; only set for annotations.
    """

    id: str
    kind: LabelKind
    title: str
    element_id: str
    summary: str | None = None


def normalize_id(raw: str) -> str:
    """Map a raw label token to its anchor form (``sec:intro`` → ``sec-intro``)."""
    return raw.replace(":", "-")


class LabelIndex:
    """Mapping from normalized label ids to :class:`LabelInfo` records.

    The first declaration of an id wins; later ones are reported through the
    module logger and otherwise ignored.
    """

    normalize_id = staticmethod(normalize_id)

    def __init__(self) -> None:
        self._labels: dict[str, LabelInfo] = {}

    def add(self, info: LabelInfo) -> bool:
        """Insert ``info`` unless its id is already taken.

        Returns
        -------
        bool
            ``True`` when the label was stored, ``False`` for a duplicate.
        """
        existing = self._labels.get(info.id)
        if existing is not None:
            logger.warning(
                "Duplicate label %r ignored; first declared as %s %r",
                info.id,
                existing.kind,
                existing.title,
            )
            return False
        self._labels[info.id] = info
        return True

    def get(self, label_id: str) -> LabelInfo | None:
        """Return the label stored under ``label_id``, if any."""
        return self._labels.get(label_id)

    def __contains__(self, label_id: object) -> bool:
        return label_id in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> cabc.Iterator[LabelInfo]:
        return iter(self._labels.values())


__all__ = ["LabelIndex", "LabelInfo", "LabelKind", "normalize_id"]
