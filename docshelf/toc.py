r"""Derive a table of contents directly from Markdown source.

The scanner works line by line, without building the full document tree, but
follows the same rules as the rendering pipeline: the same heading shape,
label syntax, directive fences, and slug registry. The ids it produces match
the anchors found in the rendered HTML.

Example
-------
>>> from docshelf.toc import extract_toc
>>> toc = extract_toc("# Guide\n\n## (sec:setup)= Setup\n\n## Usage\n")
>>> [(item.id, item.level) for item in toc[0].children]
[('sec-setup', 2), ('usage', 2)]
"""

from __future__ import annotations

import dataclasses as dc
import enum
import re
import typing as typ

from docshelf._constants import TOC_DIRECTIVE_LEVEL, TOC_MAX_HEADING_LEVEL
from docshelf.labels import normalize_id
from docshelf.slugs import plain_heading_text, slugify, unique_slug
from docshelf.syntax import (
    CONTAINER_OPEN_RE,
    LABEL_LINE_RE,
    LABEL_PREFIX_RE,
    METADATA_LINE_RE,
    fence_delta,
    is_code_fence,
    parse_attributes,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

# Same shape as Python-Markdown's hash header processor.
HEADING_RE = re.compile(r"^(?P<level>#{1,6})(?P<header>(?:\\.|[^\\])*?)#*$")
COLUMN_DIRECTIVES = frozenset({"column", "column-toc"})


class ScanState(enum.Enum):
    NORMAL = "normal"
    IN_CODE_BLOCK = "in-code-block"
    IN_COLUMN_DIRECTIVE = "in-column-directive"


@dc.dataclass(slots=True)
class TocItem:
    """One entry of the table of contents.

    Attributes
    ----------
    id : str
        Anchor of the heading or column in the rendered document.
    text : str
        Plain text shown in the outline.
    level : int
        Heading level 1-3, or 4 for ``column-toc`` entries.
    children : list[TocItem]
        Entries nested below this one.
    """

    id: str
    text: str
    level: int
    children: list[TocItem] = dc.field(default_factory=list)

    def to_dict(self) -> dict[str, typ.Any]:
        return {
            "id": self.id,
            "text": self.text,
            "level": self.level,
            "children": [child.to_dict() for child in self.children],
        }


@dc.dataclass(slots=True)
class _ColumnScan:
    include_in_toc: bool
    label: str | None = None
    title: str = ""
    depth: int = 1

    def entry(self) -> TocItem | None:
        if not (self.include_in_toc and self.title):
            return None
        anchor = normalize_id(self.label) if self.label else slugify(self.title)
        return TocItem(id=anchor, text=self.title, level=TOC_DIRECTIVE_LEVEL)


@dc.dataclass(slots=True)
class _Scan:
    """Entries in document order plus what slug assignment needs.

    Unlabeled headings are recorded with an empty id, because a label declared
    further down the document still reserves its id ahead of them.
    """

    entries: list[TocItem] = dc.field(default_factory=list)
    unlabeled: list[TocItem] = dc.field(default_factory=list)
    reserved: set[str] = dc.field(default_factory=set)

    def close_column(self, column: _ColumnScan) -> None:
        if column.label:
            self.reserved.add(normalize_id(column.label))
        entry = column.entry()
        if entry is not None:
            self.entries.append(entry)

    def assign_slugs(self) -> list[TocItem]:
        used = set(self.reserved)
        for item in self.unlabeled:
            item.id = unique_slug(slugify(item.text), used)
        return self.entries


def _scan_column_line(column: _ColumnScan, trimmed: str) -> bool:
    """Feed one line to an open column; return True when the column closes."""
    column.depth += fence_delta(trimmed)
    if column.depth <= 0:
        return True
    if column.depth != 1:
        return False
    label_match = LABEL_LINE_RE.match(trimmed)
    if label_match and column.label is None:
        column.label = label_match.group(1)
        return False
    metadata = METADATA_LINE_RE.match(trimmed)
    if column.include_in_toc and metadata and metadata["key"] == "title":
        column.title = metadata["value"].strip()
    return False


def _scan_heading(line: str, scan: _Scan) -> None:
    match = HEADING_RE.match(line)
    if match is None:
        return
    header = match["header"].strip()
    label = LABEL_PREFIX_RE.match(header)
    level = len(match["level"])
    if label is not None:
        item = TocItem(
            id=normalize_id(label.group(1)),
            text=plain_heading_text(header[label.end() :]),
            level=level,
        )
        scan.reserved.add(item.id)
    else:
        item = TocItem(id="", text=plain_heading_text(header), level=level)
        # Deeper headings are not listed but still consume slugs.
        scan.unlabeled.append(item)
    if level <= TOC_MAX_HEADING_LEVEL:
        scan.entries.append(item)


def _scan_lines(markdown: str) -> _Scan:
    scan = _Scan()
    state = ScanState.NORMAL
    column: _ColumnScan | None = None
    for raw_line in markdown.split("\n"):
        line = raw_line.rstrip("\r")
        trimmed = line.strip()
        if is_code_fence(trimmed):
            if state is ScanState.IN_CODE_BLOCK:
                state = ScanState.IN_COLUMN_DIRECTIVE if column else ScanState.NORMAL
            else:
                state = ScanState.IN_CODE_BLOCK
            continue
        if state is ScanState.IN_CODE_BLOCK or trimmed.startswith(">"):
            continue

        if state is ScanState.IN_COLUMN_DIRECTIVE and column is not None:
            if _scan_column_line(column, trimmed):
                scan.close_column(column)
                column = None
                state = ScanState.NORMAL
            continue

        opener = CONTAINER_OPEN_RE.match(line)
        if opener is not None and opener["name"] in COLUMN_DIRECTIVES:
            column = _ColumnScan(
                include_in_toc=opener["name"] == "column-toc",
                label=parse_attributes(opener["attrs"]).get("label") or None,
            )
            state = ScanState.IN_COLUMN_DIRECTIVE
            continue

        _scan_heading(line, scan)

    # The renderer closes unterminated directives at the end of the document.
    if column is not None:
        scan.close_column(column)
    return scan


def build_toc_tree(items: cabc.Iterable[TocItem]) -> list[TocItem]:
    """Nest a flat list of entries by level.

    Each entry becomes a child of the closest preceding entry with a lower
    level; entries with no such predecessor are roots.
    """
    roots: list[TocItem] = []
    stack: list[TocItem] = []
    for item in items:
        while stack and stack[-1].level >= item.level:
            stack.pop()
        if stack:
            stack[-1].children.append(item)
        else:
            roots.append(item)
        stack.append(item)
    return roots


def extract_toc(markdown: str) -> list[TocItem]:
    """Return the table of contents of ``markdown`` as a forest."""
    return build_toc_tree(_scan_lines(markdown).assign_slugs())


__all__ = ["HEADING_RE", "ScanState", "TocItem", "build_toc_tree", "extract_toc"]
