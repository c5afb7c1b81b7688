"""Tests for explicit and bare label references."""

from __future__ import annotations

import logging
import typing as typ

import pytest

from docshelf.pipeline.references import BARE_REFERENCE_RE

if typ.TYPE_CHECKING:
    from bs4 import BeautifulSoup


RenderSoup = typ.Callable[[str], "BeautifulSoup"]

INTRO = "## (sec:intro)= Introduction\n\nText.\n\n"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("see @sec:intro", ["sec:intro"]),
        ("mail me@example.com", []),
        ("@@double", []),
        ("(@fig:a) and @b", ["fig:a", "b"]),
        ("@Upper", []),
    ],
)
def test_bare_reference_pattern(text: str, expected: list[str]) -> None:
    assert [match["id"] for match in BARE_REFERENCE_RE.finditer(text)] == expected


def test_explicit_reference_resolves(render_soup: RenderSoup) -> None:
    soup = render_soup(INTRO + "Read [the intro](@sec:intro) first.")
    link = soup.find("a", string="the intro")
    assert link is not None
    assert link["href"] == "#sec-intro"
    assert "ref-link" in link["class"]
    assert link["data-ref"] == "sec-intro"
    assert link["data-ref-type"] == "heading"
    assert link["data-ref-title"] == "Introduction"


def test_explicit_reference_accepts_normalized_form(render_soup: RenderSoup) -> None:
    soup = render_soup(INTRO + "[again](@sec-intro)")
    link = soup.find("a", string="again")
    assert link is not None
    assert link["href"] == "#sec-intro"


def test_bare_reference_uses_label_title(render_soup: RenderSoup) -> None:
    soup = render_soup(INTRO + "See @sec:intro.")
    paragraph = soup.find_all("p")[-1]
    link = paragraph.find("a")
    assert link is not None
    assert link.get_text() == "Introduction"
    assert link["href"] == "#sec-intro"
    assert paragraph.get_text() == "See Introduction."


def test_bare_reference_strips_trailing_colon(render_soup: RenderSoup) -> None:
    soup = render_soup(INTRO + "As in @sec:intro: details follow.")
    paragraph = soup.find_all("p")[-1]
    assert paragraph.get_text() == "As in Introduction: details follow."


def test_forward_reference_resolves(render_soup: RenderSoup) -> None:
    soup = render_soup("Jump to @sec:later now.\n\n## (sec:later)= Later\n")
    link = soup.find("p").find("a")
    assert link is not None
    assert link["href"] == "#sec-later"


def test_reference_to_column(render_soup: RenderSoup) -> None:
    soup = render_soup(":::column{label=col:a}\n@title: Alpha\nBody\n:::\n\nSee @col:a.")
    link = soup.find_all("p")[-1].find("a")
    assert link is not None
    assert link["href"] == "#col-a"
    assert link["data-ref-type"] == "column"
    assert link.get_text() == "Alpha"


def test_unresolved_references_are_kept(
    render_soup: RenderSoup, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="docshelf.pipeline.references"):
        soup = render_soup("See @sec:missing and [this](@sec:gone).")
    assert "@sec:missing" in soup.get_text()
    link = soup.find("a", string="this")
    assert link is not None
    assert link["href"] == "@sec:gone", "unresolved links keep their source target"
    assert "Reference not found: sec:missing" in caplog.text
    assert "Reference not found: sec:gone" in caplog.text


def test_references_inside_code_are_literal(render_soup: RenderSoup) -> None:
    soup = render_soup(INTRO + "Use `@sec:intro` literally.")
    code = soup.find("code")
    assert code is not None
    assert code.get_text() == "@sec:intro"
    assert code.find("a") is None


def test_email_addresses_are_not_references(render_soup: RenderSoup) -> None:
    soup = render_soup(INTRO + "Write to team@sec:intro.example")
    assert soup.find_all("p")[-1].find("a") is None


def test_annotation_label_is_referenceable(render_soup: RenderSoup) -> None:
    soup = render_soup("Claim.[^a]\n\nSee @annotation-1.\n\n[^a]: Source text.")
    paragraph = soup.find_all("p")[1]
    link = paragraph.find("a")
    assert link is not None
    assert link["href"] == "#annotation-1"
    assert link["data-ref-type"] == "annotation"
    assert link.get_text() == "Note 1"
