r"""File-backed document store with group listings and prev/next navigation.

Documents live under a root directory. A slug is a tuple of path parts;
``("guide", "setup")`` resolves to ``guide/setup/index.md`` or
``guide/setup.md`` and the empty slug to ``index.md`` or ``README.md``. A
directory holding ``_group.yaml`` is a group: it carries a title,
description, tags, and an ``order`` list that drives listing order and the
previous/next links of its documents.

Example
-------
>>> from pathlib import Path
>>> from docshelf.docs import DocStore
>>> store = DocStore(Path("docs"))  # doctest: +SKIP
>>> store.get("guide/setup").title  # doctest: +SKIP
'Setup'
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from docshelf._constants import GROUP_CONFIG_FILENAME, ROOT_FALLBACK_CANDIDATES
from docshelf.slugs import plain_heading_text
from docshelf.syntax import LABEL_PREFIX_RE
from docshelf.toc import HEADING_RE

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

Slug = tuple[str, ...]
FRONT_MATTER_FENCE = "---"
INDEX_FILENAME = "index.md"


class DocNotFoundError(LookupError):
    """Raised when no document or group exists for a slug."""

    def __init__(self, slug: Slug) -> None:
        self.slug = slug
        super().__init__(f"Document not found for slug: {'/'.join(slug) or '(root)'}")


class PathTraversalError(ValueError):
    """Raised when a slug resolves outside the documents root."""


@dc.dataclass(slots=True)
class GroupConfig:
    """Metadata read from a directory's ``_group.yaml``."""

    title: str
    description: str | None = None
    tags: list[str] = dc.field(default_factory=list)
    order: list[Slug] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class DocRecord:
    """A document loaded from disk.

    Attributes
    ----------
    slug : Slug
        Normalized slug the document was requested with.
    content : str
        Markdown body with any front matter removed.
    path : Path
        Resolved file path.
    title : str
        Front matter title, first heading, or a title derived from the slug.
    tags : list[str]
        Front matter tags.
    last_modified : datetime.datetime
        File modification time in UTC.
    group : GroupConfig or None
        Configuration of the group directory holding the file.
    group_slug : Slug or None
        Slug of that group directory.
    """

    slug: Slug
    content: str
    path: Path
    title: str
    tags: list[str]
    last_modified: dt.datetime
    group: GroupConfig | None = None
    group_slug: Slug | None = None


@dc.dataclass(slots=True)
class NavLink:
    slug: Slug
    title: str


@dc.dataclass(slots=True)
class Navigation:
    previous: NavLink | None = None
    next: NavLink | None = None


@dc.dataclass(slots=True)
class GroupItem:
    slug: Slug
    title: str
    tags: list[str]
    last_modified: dt.datetime


@dc.dataclass(slots=True)
class GroupListing:
    """Documents of a group in display order."""

    slug: Slug
    title: str
    description: str | None
    tags: list[str]
    items: list[GroupItem]
    last_updated: dt.datetime | None


def normalize_slug(raw: str | cabc.Sequence[str] | None) -> Slug:
    """Return the slug parts of ``raw`` with blank parts removed.

    >>> normalize_slug(" guide/ /setup ")
    ('guide', 'setup')
    """
    if raw is None:
        return ()
    parts = raw.split("/") if isinstance(raw, str) else list(raw)
    return tuple(part.strip() for part in parts if part.strip())


def normalize_order_entry(entry: object) -> Slug:
    """Turn an ``order`` entry such as ``"setup.md"`` into slug parts."""
    text = str(entry).strip()
    text = text.removesuffix(".md")
    return normalize_slug(text)


def title_from_slug(slug: Slug) -> str:
    """Derive a display title from the last slug part (``Home`` for the root)."""
    if not slug:
        return "Home"
    return slug[-1].replace("-", " ").replace("_", " ").title()


def _yaml_loader() -> YAML:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    return loader


def split_front_matter(text: str) -> tuple[dict[str, typ.Any], str]:
    """Separate a leading ``---`` fenced YAML block from the Markdown body.

    Text without front matter, or with front matter that is not a mapping,
    is returned unchanged with empty metadata.
    """
    lines = text.split("\n")
    if not lines or lines[0].strip() != FRONT_MATTER_FENCE:
        return {}, text
    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER_FENCE:
            loaded = _yaml_loader().load("\n".join(lines[1:index])) or {}
            if not isinstance(loaded, dict):
                logger.warning("Ignoring front matter that is not a mapping")
                return {}, text
            return dict(loaded), "\n".join(lines[index + 1 :])
    return {}, text


def extract_title(markdown: str) -> str | None:
    """Return the plain text of the first ATX heading, label removed."""
    for line in markdown.split("\n"):
        match = HEADING_RE.match(line.strip())
        if match is None:
            continue
        header = match["header"].strip()
        label = LABEL_PREFIX_RE.match(header)
        if label is not None:
            header = header[label.end() :]
        title = plain_heading_text(header)
        if title:
            return title
    return None


def _string_list(value: object) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def _modified(path: Path) -> dt.datetime:
    return dt.datetime.fromtimestamp(path.stat().st_mtime, tz=dt.UTC)


class DocStore:
    """Read documents and group metadata below ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self._resolved_root = root.resolve()

    def _inside_root(self, candidate: Path) -> Path:
        resolved = candidate.resolve()
        if resolved != self._resolved_root and not resolved.is_relative_to(self._resolved_root):
            msg = f"Invalid path traversal attempt for {candidate}"
            raise PathTraversalError(msg)
        return resolved

    def _candidates(self, slug: Slug) -> list[Path]:
        if not slug:
            return [self.root / name for name in ROOT_FALLBACK_CANDIDATES]
        base = self.root.joinpath(*slug)
        return [base / INDEX_FILENAME, base.with_name(f"{base.name}.md")]

    def find(self, raw_slug: str | cabc.Sequence[str] | None) -> Path | None:
        """Return the file backing ``raw_slug``, or ``None`` when there is none."""
        slug = normalize_slug(raw_slug)
        for candidate in [self._inside_root(path) for path in self._candidates(slug)]:
            if candidate.is_file():
                return candidate
        return None

    def get(self, raw_slug: str | cabc.Sequence[str] | None) -> DocRecord:
        """Load the document for ``raw_slug``.

        Raises
        ------
        DocNotFoundError
            If no candidate file exists.
        PathTraversalError
            If the slug points outside the documents root.
        """
        slug = normalize_slug(raw_slug)
        path = self.find(slug)
        if path is None:
            raise DocNotFoundError(slug)
        metadata, body = split_front_matter(path.read_text(encoding="utf-8"))
        title = (
            str(metadata.get("title") or "").strip()
            or extract_title(body)
            or title_from_slug(slug)
        )
        group_dir = path.parent
        group = self.group_config(group_dir)
        group_slug = group_dir.relative_to(self._resolved_root).parts if group else None
        return DocRecord(
            slug=slug,
            content=body,
            path=path,
            title=title,
            tags=_string_list(metadata.get("tags")),
            last_modified=_modified(path),
            group=group,
            group_slug=group_slug,
        )

    def title_of(self, raw_slug: str | cabc.Sequence[str] | None) -> str:
        return self.get(raw_slug).title

    def group_config(self, directory: Path) -> GroupConfig | None:
        """Return the group configuration of ``directory``, if it has one."""
        config_path = directory / GROUP_CONFIG_FILENAME
        if not config_path.is_file():
            return None
        with config_path.open("r", encoding="utf-8") as handle:
            raw = _yaml_loader().load(handle) or {}
        if not isinstance(raw, dict):
            msg = f"'{config_path}' must contain a mapping."
            raise TypeError(msg)
        order = [normalize_order_entry(entry) for entry in raw.get("order") or []]
        return GroupConfig(
            title=str(raw.get("title") or title_from_slug(directory.parts[-1:])),
            description=raw.get("description"),
            tags=_string_list(raw.get("tags")),
            order=[entry for entry in order if entry],
        )

    def navigation(self, record: DocRecord) -> Navigation:
        """Return the previous/next documents of ``record`` within its group."""
        if record.group is None or record.group_slug is None or not record.group.order:
            return Navigation()
        base = record.group_slug
        relative = record.slug[len(base) :] if record.slug[: len(base)] == base else ()
        if not relative or relative not in record.group.order:
            return Navigation()
        order = record.group.order
        index = order.index(relative)
        return Navigation(
            previous=self._nav_link(base + order[index - 1]) if index > 0 else None,
            next=self._nav_link(base + order[index + 1]) if index + 1 < len(order) else None,
        )

    def _nav_link(self, slug: Slug) -> NavLink | None:
        try:
            return NavLink(slug=slug, title=self.title_of(slug))
        except DocNotFoundError:
            logger.debug("Skipping navigation entry %s: document missing", "/".join(slug))
            return None

    def get_group_listing(self, raw_slug: str | cabc.Sequence[str] | None) -> GroupListing:
        """List the documents of the group at ``raw_slug``.

        Entries named in the group's ``order`` come first, the rest follow
        alphabetically.

        Raises
        ------
        DocNotFoundError
            If the directory is not a group.
        """
        slug = normalize_slug(raw_slug)
        directory = self._inside_root(self.root.joinpath(*slug))
        group = self.group_config(directory) if directory.is_dir() else None
        if group is None:
            raise DocNotFoundError(slug)

        available = sorted(self._child_slugs(directory))
        ordered = [entry for entry in group.order if entry in available]
        ordered.extend(entry for entry in available if entry not in ordered)

        items: list[GroupItem] = []
        for relative in ordered:
            record = self.get(slug + relative)
            items.append(
                GroupItem(
                    slug=record.slug,
                    title=record.title,
                    tags=record.tags,
                    last_modified=record.last_modified,
                )
            )
        last_updated = max((item.last_modified for item in items), default=None)
        return GroupListing(
            slug=slug,
            title=group.title,
            description=group.description,
            tags=group.tags,
            items=items,
            last_updated=last_updated,
        )

    @staticmethod
    def _child_slugs(directory: Path) -> set[Slug]:
        children: set[Slug] = set()
        for entry in directory.iterdir():
            if entry.is_file() and entry.suffix == ".md" and entry.name not in ROOT_FALLBACK_CANDIDATES:
                children.add((entry.stem,))
            elif entry.is_dir() and (entry / INDEX_FILENAME).is_file():
                children.add((entry.name,))
        return children

    def is_group(self, slug: Slug) -> bool:
        return (self.root.joinpath(*slug) / GROUP_CONFIG_FILENAME).is_file()

    def iter_slugs(self) -> cabc.Iterator[Slug]:
        """Yield the slug of every document under the root, sorted."""
        slugs: set[Slug] = set()
        for path in self.root.rglob("*.md"):
            relative = path.relative_to(self.root)
            parent = relative.parent.parts
            if relative.name == INDEX_FILENAME:
                slugs.add(parent)
            elif not parent and relative.name in ROOT_FALLBACK_CANDIDATES:
                slugs.add(())
            elif relative.name not in ROOT_FALLBACK_CANDIDATES:
                slugs.add((*parent, relative.stem))
        yield from sorted(slugs)

    def iter_groups(self) -> cabc.Iterator[Slug]:
        """Yield the slug of every group directory, sorted."""
        groups = {
            config.parent.relative_to(self.root).parts
            for config in self.root.rglob(GROUP_CONFIG_FILENAME)
        }
        yield from sorted(groups)


__all__ = [
    "DocNotFoundError",
    "DocRecord",
    "DocStore",
    "GroupConfig",
    "GroupItem",
    "GroupListing",
    "NavLink",
    "Navigation",
    "PathTraversalError",
    "Slug",
    "extract_title",
    "normalize_order_entry",
    "normalize_slug",
    "split_front_matter",
    "title_from_slug",
]
