"""ElementTree helpers used by the docshelf tree processors."""

from __future__ import annotations

import typing as typ
import xml.etree.ElementTree as etree

from markdown.treeprocessors import UnescapeTreeprocessor

from docshelf._constants import DIRECTIVE_NAME_ATTR, INTERNAL_ATTR_PREFIX

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

_UNESCAPER = UnescapeTreeprocessor()


def clone_element(element: Element) -> Element:
    """Return a structural copy of ``element`` and its descendants.

    Tag, public attributes, text, tail, and children are copied; internal
    bookkeeping attributes are left behind so archived copies never carry
    pipeline state.
    """
    copy = etree.Element(
        element.tag,
        {
            key: value
            for key, value in element.attrib.items()
            if not key.startswith(INTERNAL_ATTR_PREFIX)
        },
    )
    copy.text = element.text
    copy.tail = element.tail
    copy.extend(clone_element(child) for child in element)
    return copy


def plain_text(element: Element) -> str:
    """Return the visible text of ``element`` with escape placeholders resolved."""
    return _UNESCAPER.unescape("".join(element.itertext()))


def directive_name(element: Element) -> str | None:
    """Return the directive name recorded on ``element``, if it is a directive."""
    return element.get(DIRECTIVE_NAME_ATTR)


def class_list(element: Element) -> list[str]:
    return (element.get("class") or "").split()


def add_classes(element: Element, *classes: str) -> None:
    """Append ``classes`` to the element's class attribute, skipping repeats."""
    current = class_list(element)
    current.extend(name for name in classes if name not in current)
    element.set("class", " ".join(current))


def prepend_inline(paragraph: Element, node: Element) -> None:
    """Insert ``node`` at the start of ``paragraph``.

    The paragraph's leading text becomes the node's tail with its leading
    whitespace trimmed, so no gap is left where removed content used to be.
    """
    node.tail = (paragraph.text or "").lstrip() or None
    paragraph.text = None
    paragraph.insert(0, node)


def append_inline(paragraph: Element, node: Element) -> None:
    """Append ``node`` at the end of ``paragraph`` after trimming trailing space."""
    if len(paragraph):
        last = paragraph[-1]
        last.tail = (last.tail or "").rstrip() or None
    else:
        paragraph.text = (paragraph.text or "").rstrip() or None
    node.tail = None
    paragraph.append(node)


def has_content(element: Element) -> bool:
    """Return True when ``element`` holds child elements or non-blank text."""
    if len(element):
        return True
    return bool((element.text or "").strip())


def strip_internal_attributes(root: Element) -> None:
    """Remove every bookkeeping attribute from ``root`` and its descendants."""
    for element in root.iter():
        for key in [key for key in element.attrib if key.startswith(INTERNAL_ATTR_PREFIX)]:
            del element.attrib[key]


def iter_with_parents(root: Element) -> cabc.Iterator[tuple[Element, Element]]:
    """Yield ``(parent, child)`` pairs for every element below ``root``."""
    for parent in root.iter():
        for child in parent:
            yield parent, child


__all__ = [
    "HEADING_TAGS",
    "add_classes",
    "append_inline",
    "class_list",
    "clone_element",
    "directive_name",
    "has_content",
    "iter_with_parents",
    "plain_text",
    "prepend_inline",
    "strip_internal_attributes",
]
