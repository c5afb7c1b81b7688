"""Tests for footnote and annotation directive extraction."""

from __future__ import annotations

import logging
import typing as typ

import pytest
from bs4 import BeautifulSoup

from docshelf.labels import LabelKind
from docshelf.pipeline import DocumentRenderer

if typ.TYPE_CHECKING:
    from docshelf.pipeline import RenderedDocument


Render = typ.Callable[[str], "RenderedDocument"]
RenderSoup = typ.Callable[[str], BeautifulSoup]


def _markers(soup: BeautifulSoup) -> list[str]:
    return [marker.get_text() for marker in soup.select("a.annotation-marker")]


def test_footnote_becomes_numbered_note(render_soup: RenderSoup) -> None:
    soup = render_soup("Claim.[^a]\n\n[^a]: Source.")
    marker = soup.select_one("a.annotation-marker")
    assert marker is not None
    assert marker["href"] == "#annotation-1"
    assert marker["class"] == ["ref-link", "annotation-marker"]
    assert marker["data-ref-type"] == "annotation"
    assert marker["data-ref-title"] == "Note 1"
    assert marker.get_text() == "1"
    entry = soup.select_one("ol.annotation-list > li#annotation-1")
    assert entry is not None
    assert str(entry.find("p")) == "<p>Source.</p>"
    assert "[^a]" not in soup.get_text(), "the definition must not be rendered inline"


def test_notes_section_layout(render_soup: RenderSoup) -> None:
    soup = render_soup("Text.[^n]\n\n[^n]: Note body.")
    heading = soup.select_one("h2#annotations")
    assert heading is not None
    assert heading["class"] == ["annotation-heading"]
    assert heading.get_text() == "Notes"
    assert heading.find_previous_sibling("hr") is not None
    entry = soup.select_one("li.annotation-entry")
    assert entry is not None


def test_notes_heading_is_configurable() -> None:
    html = DocumentRenderer(notes_heading="Footnotes").render("A[^x]\n\n[^x]: B").html
    soup = BeautifulSoup(html, "html.parser")
    heading = soup.select_one("h2#annotations")
    assert heading is not None
    assert heading.get_text() == "Footnotes"


def test_no_notes_section_without_annotations(render_soup: RenderSoup) -> None:
    soup = render_soup("Plain paragraph.")
    assert soup.select_one("ol.annotation-list") is None
    assert soup.find("hr") is None


def test_repeated_footnote_shares_number(render: Render) -> None:
    doc = render("One[^x] two[^y] three[^x].\n\n[^x]: First.\n\n[^y]: Second.")
    soup = BeautifulSoup(doc.html, "html.parser")
    assert _markers(soup) == ["1", "2", "1"]
    assert len(soup.select("li.annotation-entry")) == 2
    assert [info.identifier for info in doc.annotations] == ["x", "y"]


def test_numbering_follows_reference_order(render_soup: RenderSoup) -> None:
    soup = render_soup("A[^late] B[^early]\n\n[^early]: Early.\n\n[^late]: Late.")
    entries = soup.select("li.annotation-entry")
    assert [entry.get_text(strip=True) for entry in entries] == ["Late.", "Early."]


def test_missing_definition_uses_fallback(
    render_soup: RenderSoup, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="docshelf.pipeline.annotations"):
        soup = render_soup("Dangling.[^ghost]")
    entry = soup.select_one("li#annotation-1")
    assert entry is not None
    assert entry.get_text(strip=True) == 'Annotation "ghost" has no definition.'
    assert 'Annotation "ghost" has no definition' in caplog.text


def test_unreferenced_definition_is_dropped(render_soup: RenderSoup) -> None:
    soup = render_soup("Body.\n\n[^unused]: Never cited.")
    assert "Never cited" not in soup.get_text()
    assert soup.select_one("ol.annotation-list") is None


def test_multi_paragraph_definition(render_soup: RenderSoup) -> None:
    soup = render_soup(
        "Claim.[^long]\n\n[^long]: First paragraph\n    continues here.\n\n    Second paragraph."
    )
    entry = soup.select_one("li#annotation-1")
    assert entry is not None
    paragraphs = [p.get_text() for p in entry.find_all("p")]
    assert paragraphs == ["First paragraph\ncontinues here.", "Second paragraph."]


def test_directive_joined_to_following_text(render_soup: RenderSoup) -> None:
    soup = render_soup("Text\n:::annotation\nNote body\n:::\nAfter text")
    paragraphs = soup.find_all("p", recursive=False)
    assert paragraphs[0].get_text() == "Text"
    second = paragraphs[1]
    assert second.contents[0].name == "a", "the marker opens the joined paragraph"
    assert second.get_text() == "1After text"
    entry = soup.select_one("li#annotation-1")
    assert entry is not None
    assert entry.get_text(strip=True) == "Note body"


def test_directive_after_blank_line_attaches_to_previous(render_soup: RenderSoup) -> None:
    soup = render_soup("A paragraph.\n\n:::annotation\nAside.\n:::\n\nNext paragraph.")
    paragraphs = soup.find_all("p", recursive=False)
    assert paragraphs[0].get_text() == "A paragraph.1"
    assert paragraphs[0].find("a")["href"] == "#annotation-1"
    assert paragraphs[1].get_text() == "Next paragraph."


def test_standalone_directive_gets_own_paragraph(render_soup: RenderSoup) -> None:
    soup = render_soup("## Heading\n\n:::annotation\nAside.\n:::\n")
    first = soup.find("p")
    assert first is not None
    assert [child.name for child in first.children] == ["a"]


def test_directives_never_share_numbers(render: Render) -> None:
    doc = render(
        "One\n:::annotation\nSame\n:::\n\nTwo\n:::annotation\nSame\n:::\n"
    )
    soup = BeautifulSoup(doc.html, "html.parser")
    assert _markers(soup) == ["1", "2"]
    assert [info.identifier for info in doc.annotations] == [None, None]


def test_mixed_sources_number_in_reading_order(render_soup: RenderSoup) -> None:
    soup = render_soup(
        "First[^a].\n\nSecond\n:::annotation\nInline aside\n:::\n\nThird[^b].\n\n"
        "[^a]: Alpha.\n\n[^b]: Beta."
    )
    assert _markers(soup) == ["1", "2", "3"]
    entries = [entry.get_text(strip=True) for entry in soup.select("li.annotation-entry")]
    assert entries == ["Alpha.", "Inline aside", "Beta."]


def test_annotation_labels_and_summary(render: Render) -> None:
    doc = render("Claim.[^a]\n\n[^a]: Source **text**.\n\n    More detail.")
    info = doc.labels.get("annotation-1")
    assert info is not None
    assert info.kind is LabelKind.ANNOTATION
    assert info.title == "Note 1"
    assert info.summary == "Source text."
    assert doc.annotations[0].summary == "Source text."
    assert len(doc.annotations[0].content) == 2


def test_text_annotation_directive(render_soup: RenderSoup) -> None:
    soup = render_soup("A claim :annotation[inline aside] here.")
    paragraph = soup.find("p")
    marker = paragraph.find("a")
    assert marker is not None
    assert marker.get_text() == "1"
    assert paragraph.get_text() == "A claim 1 here."
    entry = soup.select_one("li#annotation-1")
    assert entry is not None
    assert entry.get_text(strip=True) == "inline aside"


def test_stray_closer_is_removed(render_soup: RenderSoup) -> None:
    soup = render_soup("Hello world\n:::")
    assert str(soup.find("p")) == "<p>Hello world</p>"


def test_lone_closer_paragraph_is_removed(render_soup: RenderSoup) -> None:
    soup = render_soup("Before.\n\n:::\n\nAfter.")
    assert [p.get_text() for p in soup.find_all("p")] == ["Before.", "After."]


def test_closer_after_tight_list_item_is_removed(render: Render) -> None:
    html = render("- item\n:::").html
    assert ":::" not in html
    item = BeautifulSoup(html, "html.parser").find("li")
    assert item is not None
    assert item.get_text() == "item"
    assert item.find("br") is None


def test_archived_content_is_independent(render: Render) -> None:
    doc = render("Claim.[^a]\n\n[^a]: Source.")
    first = doc.annotations[0].content[0]
    first.text = "Changed"
    assert "Changed" not in doc.html
