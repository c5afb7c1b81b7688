"""Load viewer configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from docshelf._constants import DEFAULT_NOTES_HEADING

from .helpers import _build_theme_config, _require_str, _validate_pygments_style
from .models import ViewerConfig, ViewerConfigError

DEFAULT_CONFIG_PATH = Path("docshelf.yaml")


def load_viewer_config(path: Path) -> ViewerConfig:
    """Load the YAML configuration describing the documentation tree.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``docshelf.yaml``).

    Returns
    -------
    ViewerConfig
        Parsed configuration with defaults applied for missing keys.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    ViewerConfigError
        If a section or value has the wrong shape, or the Pygments style is
        unknown.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from docshelf.config import load_viewer_config
    >>> config = load_viewer_config(Path("docshelf.yaml"))  # doctest: +SKIP
    >>> config.docs_root  # doctest: +SKIP
    PosixPath('docs')
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    defaults = raw.get("defaults") or {}
    if not isinstance(defaults, dict):
        msg = "'defaults' must be a mapping."
        raise ViewerConfigError(msg)

    base = ViewerConfig()
    pygments_style = _require_str(defaults, "pygments_style", base.pygments_style)
    return ViewerConfig(
        docs_root=Path(_require_str(defaults, "docs_root", str(base.docs_root))),
        output_dir=Path(_require_str(defaults, "output_dir", str(base.output_dir))),
        pygments_style=_validate_pygments_style(pygments_style),
        notes_heading=_require_str(defaults, "notes_heading", DEFAULT_NOTES_HEADING),
        theme=_build_theme_config(raw.get("theme")),
    )


def load_config_or_default(path: Path | None) -> ViewerConfig:
    """Load ``path`` when given or when the default file exists, else use defaults."""
    if path is not None:
        return load_viewer_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_viewer_config(DEFAULT_CONFIG_PATH)
    return ViewerConfig()


__all__ = ["DEFAULT_CONFIG_PATH", "load_config_or_default", "load_viewer_config"]
