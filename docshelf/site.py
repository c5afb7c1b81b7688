"""Build a static HTML site from a documentation tree.

Every document becomes ``<output>/<slug>/index.html`` (the root document
``<output>/index.html``), and every group directory without an index
document gets a listing page instead.
"""

from __future__ import annotations

import datetime as dt
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from docshelf.docs import DocStore
from docshelf.pipeline.renderer import DocumentRenderer

if typ.TYPE_CHECKING:
    from docshelf.config import ViewerConfig
    from docshelf.docs import Slug
    from docshelf.pipeline.math import Typesetter

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def relative_href(current: Slug, target: Slug) -> str:
    """Return a link from the page of ``current`` to the page of ``target``.

    >>> relative_href(("guide", "setup"), ("api",))
    '../../api/'
    >>> relative_href((), ())
    './'
    """
    prefix = "../" * len(current)
    path = "/".join(target)
    if not prefix and not path:
        return "./"
    return f"{prefix}{path}/" if path else prefix


class SiteBuilder:
    """Render every document and group listing of a docs root to HTML."""

    def __init__(
        self,
        config: ViewerConfig,
        *,
        templates_dir: Path | None = None,
        typesetter: Typesetter | None = None,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        config : ViewerConfig
            Viewer configuration naming the docs root and the output directory.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        typesetter : Typesetter, optional
            Math typesetter handed to the renderer.
        """
        self.config = config
        self.store = DocStore(config.docs_root)
        self.renderer = DocumentRenderer(
            config.pygments_style,
            notes_heading=config.notes_heading,
            typesetter=typesetter,
        )
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or DEFAULT_TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals["relative_href"] = relative_href

    def _output_path(self, slug: Slug) -> Path:
        return self.config.output_dir.joinpath(*slug, "index.html")

    def run(self) -> list[Path]:
        """Write the site and return the generated paths in build order."""
        generated_at = dt.datetime.now(dt.UTC)
        written: list[Path] = []
        documents = list(self.store.iter_slugs())
        for slug in documents:
            written.append(self.render_document(slug, generated_at=generated_at))
        for slug in self.store.iter_groups():
            if slug in documents:
                continue
            written.append(self.render_group(slug, generated_at=generated_at))
        return written

    def render_document(self, slug: Slug, *, generated_at: dt.datetime) -> Path:
        record = self.store.get(slug)
        rendered = self.renderer.render(record.content)
        html = self.env.get_template("doc_page.jinja").render(
            doc=record,
            rendered=rendered,
            body=rendered.html,
            navigation=self.store.navigation(record),
            theme=self.config.theme,
            pygments_css=self.renderer.stylesheet,
            generated_at=generated_at,
        )
        return self._write(slug, html)

    def render_group(self, slug: Slug, *, generated_at: dt.datetime) -> Path:
        listing = self.store.get_group_listing(slug)
        html = self.env.get_template("group_page.jinja").render(
            group=listing,
            theme=self.config.theme,
            generated_at=generated_at,
        )
        return self._write(slug, html)

    def _write(self, slug: Slug, html: str) -> Path:
        output_path = self._output_path(slug)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
        logger.debug("Wrote %s", output_path)
        return output_path


__all__ = ["DEFAULT_TEMPLATES_DIR", "SiteBuilder", "relative_href"]
