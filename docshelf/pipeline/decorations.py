"""Presentation touches: task-list checkboxes and check-mark icons."""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown.treeprocessors import Treeprocessor
from markdown.util import AtomicString

from docshelf.pipeline.tree import add_classes

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any

TASK_MARKER_RE = re.compile(r"^\[(?P<state>[ xX])\][ \t]+")
CHECK_MARK = "✅"
_OPAQUE_TAGS = frozenset({"code", "pre", "kbd", "samp", "script", "style"})


class TaskListProcessor(Treeprocessor):
    """Render ``[ ]`` / ``[x]`` list item prefixes as disabled checkboxes."""

    def run(self, root: Element) -> Element:
        for item in root.iter("li"):
            holder = item
            if item.text is None and len(item) and item[0].tag == "p":
                holder = item[0]
            match = TASK_MARKER_RE.match(holder.text or "")
            if match is None:
                continue
            checkbox = etree.Element("input", {"type": "checkbox", "disabled": "disabled"})
            if match["state"] != " ":
                checkbox.set("checked", "checked")
            checkbox.tail = holder.text[match.end() :] or None
            holder.text = None
            holder.insert(0, checkbox)
            add_classes(item, "task-list-item")
        return root


class CheckMarkProcessor(Treeprocessor):
    """Wrap each ``✅`` in prose in ``<span class="check-icon">``."""

    def run(self, root: Element) -> Element:
        self._visit(root)
        return root

    def _visit(self, element: Element) -> None:
        if element.tag in _OPAQUE_TAGS or "check-icon" in (element.get("class") or ""):
            return
        element.text, rebuilt = self._split(element.text)
        for child in element:
            self._visit(child)
            child.tail, icons = self._split(child.tail)
            rebuilt.append(child)
            rebuilt.extend(icons)
        element[:] = rebuilt

    @staticmethod
    def _split(text: str | None) -> tuple[str | None, list[Element]]:
        if not text or CHECK_MARK not in text or isinstance(text, AtomicString):
            return text, []
        leading, *rest = text.split(CHECK_MARK)
        icons: list[Element] = []
        for tail in rest:
            icon = etree.Element("span", {"class": "check-icon"})
            icon.text = CHECK_MARK
            icon.tail = tail or None
            icons.append(icon)
        return leading or None, icons


__all__ = ["CHECK_MARK", "CheckMarkProcessor", "TaskListProcessor"]
