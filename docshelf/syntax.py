r"""Source-level syntax shared by the rendering pipeline and the TOC scanner.

The block processors and the lightweight TOC extractor must agree on what a
label declaration, a directive fence, and a metadata line look like, so the
patterns live here and both sides import them.

Example
-------
>>> from docshelf.syntax import parse_attributes, LABEL_PREFIX_RE
>>> parse_attributes('#intro .wide label=sec:intro note="two words"')
{'id': 'intro', 'label': 'sec:intro', 'note': 'two words', 'class': 'wide'}
>>> LABEL_PREFIX_RE.match("(sec:a)= Section A").group(1)
'sec:a'
"""

from __future__ import annotations

import re

LABEL_ID_PATTERN = r"[a-z][a-z0-9\-:]*"
LABEL_PREFIX_RE = re.compile(rf"^\(({LABEL_ID_PATTERN})\)=\s*")
LABEL_LINE_RE = re.compile(rf"^\(({LABEL_ID_PATTERN})\)=\s*$")

METADATA_LINE_RE = re.compile(r"^@(?P<key>[a-z][a-z-]*):(?P<value>.*)$")

DIRECTIVE_FENCE = ":::"
_DIRECTIVE_TAIL = (
    r"(?P<name>[a-z][a-z0-9_-]*)"
    r"(?:\[(?P<label>[^\]\n]*)\])?"
    r"(?:\{(?P<attrs>[^}\n]*)\})?[ \t]*$"
)
CONTAINER_OPEN_RE = re.compile(rf"^:{{3,}}{_DIRECTIVE_TAIL}", re.MULTILINE)
LEAF_DIRECTIVE_RE = re.compile(rf"^::(?!:){_DIRECTIVE_TAIL}", re.MULTILINE)
TEXT_DIRECTIVE_PATTERN = (
    r"(?<![\w:]):(?P<name>[a-z][a-z0-9_-]*)"
    r"(?:\[(?P<label>[^\]\n]*)\](?:\{(?P<attrs>[^}\n]*)\})?"
    r"|\{(?P<bare_attrs>[^}\n]*)\})"
)
CONTAINER_CLOSE_RE = re.compile(r"^:{3,}[ \t]*$")

FENCED_CODE_MARKERS = ("```", "~~~")

_ATTRIBUTE_TOKEN = re.compile(
    r"""
      \#(?P<id>[^\s\#.}]+)
    | \.(?P<cls>[^\s\#.}]+)
    | (?P<key>[A-Za-z_][\w:.-]*)
      (?:=(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'}]+)))?
    """,
    re.VERBOSE,
)


def parse_attributes(source: str | None) -> dict[str, str]:
    """Parse a directive ``{...}`` attribute list into a mapping.

    Parameters
    ----------
    source : str or None
        Text between the braces, without the braces themselves.

    Returns
    -------
    dict[str, str]
        Attribute values keyed by name. ``#id`` maps to ``id``, ``.name``
        tokens and ``class=`` values are merged into ``class``, and flags
        without a value map to an empty string.
    """
    attributes: dict[str, str] = {}
    classes: list[str] = []
    for match in _ATTRIBUTE_TOKEN.finditer(source or ""):
        if match["id"]:
            attributes["id"] = match["id"]
        elif match["cls"]:
            classes.append(match["cls"])
        else:
            values = (match["dq"], match["sq"], match["bare"])
            value = next((item for item in values if item is not None), "")
            if match["key"] == "class":
                classes.extend(value.split())
            else:
                attributes[match["key"]] = value
    if classes:
        attributes["class"] = " ".join(classes)
    return attributes


def fence_delta(line: str) -> int:
    """Return how a line moves directive nesting depth: +1, -1, or 0.

    A bare closing fence decrements, any other ``:::``-prefixed line opens a
    nested directive. Leading and trailing whitespace is ignored.
    """
    trimmed = line.strip()
    if CONTAINER_CLOSE_RE.match(trimmed):
        return -1
    if trimmed.startswith(DIRECTIVE_FENCE):
        return 1
    return 0


def is_code_fence(line: str) -> bool:
    """Return True when ``line`` opens or closes a fenced code block."""
    return line.strip().startswith(FENCED_CODE_MARKERS)


__all__ = [
    "CONTAINER_CLOSE_RE",
    "CONTAINER_OPEN_RE",
    "DIRECTIVE_FENCE",
    "FENCED_CODE_MARKERS",
    "LABEL_ID_PATTERN",
    "LABEL_LINE_RE",
    "LABEL_PREFIX_RE",
    "LEAF_DIRECTIVE_RE",
    "METADATA_LINE_RE",
    "TEXT_DIRECTIVE_PATTERN",
    "fence_delta",
    "is_code_fence",
    "parse_attributes",
]
