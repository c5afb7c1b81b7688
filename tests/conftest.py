"""Shared fixtures for docshelf tests."""

from __future__ import annotations

import typing as typ

import pytest
from bs4 import BeautifulSoup

from docshelf.pipeline import DocumentRenderer

if typ.TYPE_CHECKING:
    from docshelf.pipeline import RenderedDocument


@pytest.fixture
def renderer() -> DocumentRenderer:
    """Return a renderer with default settings."""
    return DocumentRenderer()


@pytest.fixture
def render(renderer: DocumentRenderer) -> typ.Callable[[str], RenderedDocument]:
    """Return a helper rendering Markdown with the default renderer."""

    def _render(text: str) -> RenderedDocument:
        return renderer.render(text)

    return _render


@pytest.fixture
def render_soup(
    render: typ.Callable[[str], RenderedDocument],
) -> typ.Callable[[str], BeautifulSoup]:
    """Return a helper rendering Markdown into a parsed BeautifulSoup tree."""

    def _render_soup(text: str) -> BeautifulSoup:
        return BeautifulSoup(render(text).html, "html.parser")

    return _render_soup
