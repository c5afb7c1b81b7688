r"""Slug and heading-text helpers shared by the pipeline and the TOC scanner.

Heading anchors are generated from the raw Markdown source of a heading in
two places: the anchor pass of the rendering pipeline and the line-based TOC
extractor. Both call the helpers below so the ids they produce agree.

Example
-------
>>> from docshelf.slugs import plain_heading_text, slugify, unique_slug
>>> plain_heading_text("Using **bold** and `code` [links](x.md)")
'Using bold and code links'
>>> slugify("Hello, World!")
'hello-world'
>>> used = set()
>>> unique_slug("intro", used), unique_slug("intro", used)
('intro', 'intro-2')
"""

from __future__ import annotations

import re

_IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_CODE_SPAN_PATTERN = re.compile(r"(`+)(.+?)\1")
_EMPHASIS_PATTERN = re.compile(
    r"(\*{1,3}|~~)(?=\S)(.+?)(?<=\S)\1"
    r"|(?<!\w)(_{1,3})(?=\S)(.+?)(?<=\S)\3(?!\w)"
)
_ESCAPE_PATTERN = re.compile(r"\\(.)")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_SLUG_STRIP_PATTERN = re.compile(r"[^\w\- ]")


def _emphasis_content(match: re.Match[str]) -> str:
    return match.group(2) if match.group(2) is not None else match.group(4)


def plain_heading_text(source: str) -> str:
    """Return the visible text of a heading's raw Markdown source.

    Images collapse to their alt text, links to their label, code spans to
    their content, emphasis markers are dropped, and backslash escapes are
    resolved. Runs of whitespace become single spaces.
    """
    text = _IMAGE_PATTERN.sub(r"\1", source)
    text = _LINK_PATTERN.sub(r"\1", text)
    text = _CODE_SPAN_PATTERN.sub(lambda match: match.group(2).strip(), text)
    previous = None
    while previous != text:
        previous = text
        text = _EMPHASIS_PATTERN.sub(_emphasis_content, text)
    text = _ESCAPE_PATTERN.sub(r"\1", text)
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def slugify(title: str) -> str:
    """Convert heading text into a lowercase hyphen-separated anchor.

    Punctuation is removed rather than replaced, so ``"Hello, World!"``
    becomes ``hello-world``; letters outside ASCII are kept.
    """
    cleaned = _SLUG_STRIP_PATTERN.sub("", title.strip().lower())
    slug = cleaned.replace(" ", "-")
    return slug or "section"


def unique_slug(base: str, used: set[str], *, register: bool = True) -> str:
    """Generate a unique slug, appending numeric suffixes when needed.

    Parameters
    ----------
    base : str
        Preferred slug.
    used : set[str]
        Slugs already taken in the current document.
    register : bool, optional
        When ``False`` the returned slug is not added to ``used``; callers use
        this for anchors that must not shift the numbering of later ones.
    """
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    if register:
        used.add(candidate)
    return candidate


__all__ = ["plain_heading_text", "slugify", "unique_slug"]
