"""Tests for loading the viewer configuration."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from docshelf.config import (
    DEFAULT_CONFIG_PATH,
    ThemeConfig,
    ViewerConfig,
    ViewerConfigError,
    load_config_or_default,
    load_viewer_config,
)


def _config_file(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "docshelf.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def test_full_configuration(tmp_path: Path) -> None:
    path = _config_file(
        tmp_path,
        """\
        defaults:
          docs_root: handbook
          output_dir: dist
          pygments_style: default
          notes_heading: Footnotes
        theme:
          site_name: Team Handbook
          doc_label: Pages
        """,
    )
    config = load_viewer_config(path)
    assert config.docs_root == Path("handbook")
    assert config.output_dir == Path("dist")
    assert config.pygments_style == "default"
    assert config.notes_heading == "Footnotes"
    assert config.theme == ThemeConfig(site_name="Team Handbook", doc_label="Pages")


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    config = load_viewer_config(_config_file(tmp_path, ""))
    assert config == ViewerConfig()
    assert config.notes_heading == "Notes"
    assert config.theme.site_name == "Docs Viewer"


def test_blank_theme_values_fall_back(tmp_path: Path) -> None:
    path = _config_file(tmp_path, "theme:\n  site_name: '  '\n")
    assert load_viewer_config(path).theme.site_name == "Docs Viewer"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        load_viewer_config(tmp_path / "absent.yaml")


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(TypeError, match="must be a mapping"):
        load_viewer_config(_config_file(tmp_path, "- one\n- two\n"))


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("defaults: [a]\n", "'defaults' must be a mapping"),
        ("defaults:\n  docs_root: 3\n", "'docs_root' must be a non-empty string"),
        ("defaults:\n  notes_heading: ''\n", "'notes_heading' must be a non-empty string"),
        ("defaults:\n  pygments_style: no-such-style\n", "Unknown pygments_style"),
        ("theme: plain\n", "'theme' must be a mapping"),
    ],
)
def test_invalid_values(tmp_path: Path, content: str, message: str) -> None:
    with pytest.raises(ViewerConfigError, match=message):
        load_viewer_config(_config_file(tmp_path, content))


def test_load_config_or_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert load_config_or_default(None) == ViewerConfig()

    DEFAULT_CONFIG_PATH.write_text("defaults:\n  output_dir: site\n", encoding="utf-8")
    assert load_config_or_default(None).output_dir == Path("site")

    explicit = tmp_path / "other.yaml"
    explicit.write_text("defaults:\n  output_dir: elsewhere\n", encoding="utf-8")
    assert load_config_or_default(explicit).output_dir == Path("elsewhere")
