"""Markdown-to-document pipeline built on Python-Markdown."""

from __future__ import annotations

from .extension import DocshelfExtension, DocumentState
from .models import AnnotationInfo, RenderedDocument
from .renderer import DocumentRenderer, render_markdown

__all__ = [
    "AnnotationInfo",
    "DocshelfExtension",
    "DocumentRenderer",
    "DocumentState",
    "RenderedDocument",
    "render_markdown",
]
