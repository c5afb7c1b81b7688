"""Tests for math spans, task lists, and check-mark icons."""

from __future__ import annotations

import typing as typ
import xml.etree.ElementTree as etree

from bs4 import BeautifulSoup

from docshelf.pipeline import DocumentRenderer, render_markdown

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element


RenderSoup = typ.Callable[[str], BeautifulSoup]


def test_inline_math_keeps_source(render_soup: RenderSoup) -> None:
    soup = render_soup("Euler: $e^{i\\pi} + 1 = 0$ holds.")
    span = soup.select_one("span.math.math-inline")
    assert span is not None
    assert span.get_text() == "e^{i\\pi} + 1 = 0"


def test_math_source_is_not_reinterpreted(render_soup: RenderSoup) -> None:
    soup = render_soup("Product $a*b*c$ and $x_1 + y_1$.")
    assert soup.find("em") is None, "math content must not be parsed as emphasis"
    spans = [span.get_text() for span in soup.select("span.math-inline")]
    assert spans == ["a*b*c", "x_1 + y_1"]


def test_currency_is_not_math(render_soup: RenderSoup) -> None:
    soup = render_soup("It costs $5 and $10 today.")
    assert soup.select_one("span.math") is None


def test_display_math_block(render_soup: RenderSoup) -> None:
    soup = render_soup("Before.\n\n$$\n\\int_0^1 x\\,dx\n$$\n\nAfter.")
    block = soup.select_one("div.math.math-display")
    assert block is not None
    assert block.get_text() == "\\int_0^1 x\\,dx"
    assert [p.get_text() for p in soup.find_all("p")] == ["Before.", "After."]


def test_display_math_spanning_blank_lines(render_soup: RenderSoup) -> None:
    soup = render_soup("$$\na = b\n\nc = d\n$$")
    block = soup.select_one("div.math-display")
    assert block is not None
    assert block.get_text() == "a = b\n\nc = d"


def test_typesetter_output_replaces_source() -> None:
    calls: list[tuple[str, bool]] = []

    def typesetter(source: str, display: bool) -> Element:  # noqa: FBT001
        calls.append((source, display))
        svg = etree.Element("svg")
        svg.set("data-source", source)
        return svg

    html = DocumentRenderer(typesetter=typesetter).render("Inline $x$.\n\n$$\ny\n$$").html
    soup = BeautifulSoup(html, "html.parser")
    inline = soup.select_one("span.math-inline")
    display = soup.select_one("div.math-display")
    assert inline is not None
    assert display is not None
    assert "typst-doc" in inline["class"]
    assert "typst-doc" in display["class"]
    assert inline.find("svg")["data-source"] == "x"
    assert sorted(calls) == [("x", False), ("y", True)]


def test_declining_typesetter_keeps_source() -> None:
    renderer = DocumentRenderer(typesetter=lambda source, display: None)
    soup = BeautifulSoup(renderer.render("Inline $x$.").html, "html.parser")
    span = soup.select_one("span.math-inline")
    assert span is not None
    assert span.get_text() == "x"
    assert "typst-doc" not in span["class"]


def test_task_list_items(render_soup: RenderSoup) -> None:
    soup = render_soup("- [ ] open task\n- [x] done task\n- plain item\n")
    items = soup.find_all("li")
    assert [item.get("class") for item in items] == [
        ["task-list-item"],
        ["task-list-item"],
        None,
    ]
    open_box = items[0].find("input")
    done_box = items[1].find("input")
    assert open_box["type"] == "checkbox"
    assert open_box.has_attr("disabled")
    assert not open_box.has_attr("checked")
    assert done_box.has_attr("checked")
    assert items[0].get_text() == "open task"
    assert items[2].find("input") is None


def test_loose_task_list_items(render_soup: RenderSoup) -> None:
    soup = render_soup("- [X] first\n\n- [ ] second\n")
    boxes = soup.select("li.task-list-item > p > input")
    assert len(boxes) == 2
    assert boxes[0].has_attr("checked")


def test_check_marks_become_icons(render_soup: RenderSoup) -> None:
    soup = render_soup("Shipped ✅ and tested ✅.\n\n`✅ in code`")
    icons = soup.select("span.check-icon")
    assert len(icons) == 2
    assert all(icon.get_text() == "✅" for icon in icons)
    code = soup.find("code")
    assert code is not None
    assert code.find("span") is None


def test_code_blocks_are_highlighted(render_soup: RenderSoup) -> None:
    soup = render_soup("```python\nprint('hi')\n```\n")
    block = soup.select_one("div.codehilite")
    assert block is not None
    assert block["data-language"] == "python"


def test_tilde_fences_keep_languages_aligned(render_soup: RenderSoup) -> None:
    soup = render_soup(
        "```python\nx = 1\n```\n\n~~~bash\necho hi\n~~~\n\n```rust\nfn main() {}\n```\n"
    )
    blocks = soup.select("div.codehilite")
    assert [block["data-language"] for block in blocks] == ["python", "bash", "rust"]


def test_stylesheet_targets_codehilite() -> None:
    assert ".codehilite" in DocumentRenderer(pygments_style="default").stylesheet


def test_empty_document_renders_nothing(render: typ.Callable[[str], typ.Any]) -> None:
    doc = render("   \n\n")
    assert doc.html == ""
    assert doc.toc == []
    assert len(doc.labels) == 0
    assert doc.annotations == ()


def test_render_markdown_passes_options() -> None:
    doc = render_markdown("# Title\n\nA[^n]\n\n[^n]: B", notes_heading="Asides")
    assert doc.toc[0].id == "title"
    assert "Asides</h2>" in doc.html
