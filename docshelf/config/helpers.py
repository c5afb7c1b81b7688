"""Utility helpers shared by the docshelf configuration loader."""

from __future__ import annotations

import typing as typ

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .models import ThemeConfig, ViewerConfigError


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_str(payload: typ.Mapping[str, typ.Any], key: str, default: str) -> str:
    """Return ``payload[key]`` as a non-empty string, or ``default`` when absent."""
    if key not in payload or payload[key] is None:
        return default
    value = payload[key]
    if not isinstance(value, str) or not value.strip():
        msg = f"'{key}' must be a non-empty string."
        raise ViewerConfigError(msg)
    return value.strip()


def _validate_pygments_style(name: str) -> str:
    """Ensure ``name`` is a style Pygments knows about."""
    try:
        get_style_by_name(name)
    except ClassNotFound as exc:
        msg = f"Unknown pygments_style '{name}'."
        raise ViewerConfigError(msg) from exc
    return name


def _build_theme_config(payload: typ.Mapping[str, typ.Any] | None) -> ThemeConfig:
    """Build a ThemeConfig instance from the provided mapping payload."""
    base = ThemeConfig()
    if not payload:
        return base
    if not isinstance(payload, dict):
        msg = "'theme' must be a mapping."
        raise ViewerConfigError(msg)
    return ThemeConfig(
        site_name=_optional_str(payload.get("site_name")) or base.site_name,
        doc_label=_optional_str(payload.get("doc_label")) or base.doc_label,
    )


__all__ = [
    "_build_theme_config",
    "_optional_str",
    "_require_str",
    "_validate_pygments_style",
]
