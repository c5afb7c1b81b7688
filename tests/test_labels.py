"""Unit tests for the label index and identifier normalization."""

from __future__ import annotations

import logging

import pytest

from docshelf.labels import LabelIndex, LabelInfo, LabelKind, normalize_id


def _heading(label_id: str, title: str) -> LabelInfo:
    return LabelInfo(id=label_id, kind=LabelKind.HEADING, title=title, element_id=label_id)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("sec:intro", "sec-intro"),
        ("a:b:c", "a-b-c"),
        ("plain", "plain"),
        ("already-normal", "already-normal"),
    ],
)
def test_normalize_id_replaces_colons(raw: str, expected: str) -> None:
    assert normalize_id(raw) == expected, f"unexpected normalization of {raw!r}"


def test_normalize_id_is_idempotent() -> None:
    once = normalize_id("fig:plot:one")
    assert normalize_id(once) == once, "normalizing twice should not change the id"


def test_first_declaration_wins(caplog: pytest.LogCaptureFixture) -> None:
    index = LabelIndex()
    assert index.add(_heading("sec-a", "First")), "first insert should be stored"
    with caplog.at_level(logging.WARNING, logger="docshelf.labels"):
        assert not index.add(_heading("sec-a", "Second")), "duplicate should be rejected"
    stored = index.get("sec-a")
    assert stored is not None
    assert stored.title == "First", "the first declaration must be kept"
    assert "Duplicate label 'sec-a'" in caplog.text, "duplicates should be reported"


def test_index_lookup_and_iteration_order() -> None:
    index = LabelIndex()
    index.add(_heading("b", "B"))
    index.add(_heading("a", "A"))
    assert "a" in index
    assert "missing" not in index
    assert index.get("missing") is None
    assert len(index) == 2
    assert [info.id for info in index] == ["b", "a"], "iteration follows insertion order"


def test_index_exposes_normalize_id() -> None:
    assert LabelIndex.normalize_id("x:y") == "x-y"
