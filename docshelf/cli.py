"""Cyclopts CLI entrypoint for rendering docshelf documents and sites.

The ``docshelf`` console script renders a single Markdown file to an HTML
fragment, prints the table of contents of a file as JSON, or builds a static
site from a whole documentation tree. Options can also be supplied through
``DOCSHELF_``-prefixed environment variables.

Examples
--------
Render one document to stdout:

>>> from docshelf.cli import app
>>> app.run(["render", "docs/index.md"])  # doctest: +SKIP

Build the site described by ``docshelf.yaml`` into ``dist``:

>>> app.run(["build", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_config_or_default
from .docs import split_front_matter
from .pipeline import DocumentRenderer
from .site import SiteBuilder
from .toc import extract_toc

app = App(name="docshelf", config=cyclopts.config.Env("DOCSHELF_", command=False))  # type: ignore[unknown-argument]


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _read_markdown(path: Path) -> str:
    if not path.is_file():
        msg = f"Markdown file '{path}' not found."
        raise FileNotFoundError(msg)
    _metadata, body = split_front_matter(path.read_text(encoding="utf-8"))
    return body


@app.command(help="Render one Markdown file to an HTML fragment.")
def render(
    path: typ.Annotated[Path, Parameter(help="Markdown file to render")],
    *,
    output: typ.Annotated[
        Path | None, Parameter(help="Write the HTML here instead of stdout")
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to viewer config")
    ] = None,
    pygments_style: typ.Annotated[
        str | None, Parameter(help="Override the Pygments style")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log debug diagnostics")] = False,
) -> None:
    """Render ``path`` with the docshelf pipeline.

    Parameters
    ----------
    path : Path
        Markdown source file; YAML front matter is skipped.
    output : Path or None, optional
        Destination file. When ``None`` (default) the HTML is printed.
    config : Path or None, optional
        Viewer configuration; ``docshelf.yaml`` is used when present.
    pygments_style : str or None, optional
        Pygments style overriding the configured one.
    verbose : bool, optional
        Enable debug logging.
    """
    _configure_logging(verbose=verbose)
    viewer_config = load_config_or_default(config)
    renderer = DocumentRenderer(
        pygments_style or viewer_config.pygments_style,
        notes_heading=viewer_config.notes_heading,
    )
    rendered = renderer.render(_read_markdown(path))
    if output is None:
        print(rendered.html)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rendered.html, encoding="utf-8")
    print(f"wrote {_format_path(output)}")


@app.command(help="Print the table of contents of a Markdown file as JSON.")
def toc(
    path: typ.Annotated[Path, Parameter(help="Markdown file to scan")],
    *,
    verbose: typ.Annotated[bool, Parameter(help="Log debug diagnostics")] = False,
) -> None:
    """Print the TOC forest of ``path`` as indented JSON."""
    _configure_logging(verbose=verbose)
    items = extract_toc(_read_markdown(path))
    print(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))


@app.command(help="Build a static HTML site from a documentation tree.")
def build(
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to viewer config")
    ] = None,
    docs_root: typ.Annotated[
        Path | None, Parameter(help="Override the documents directory")
    ] = None,
    output_dir: typ.Annotated[
        Path | None, Parameter(help="Override the output folder")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log debug diagnostics")] = False,
) -> None:
    """Render every document and group listing to static HTML.

    Parameters
    ----------
    config : Path or None, optional
        Viewer configuration; ``docshelf.yaml`` is used when present and
        built-in defaults otherwise.
    docs_root : Path or None, optional
        Documents directory overriding the configured one.
    output_dir : Path or None, optional
        Output directory overriding the configured one.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    FileNotFoundError
        If the documents directory does not exist.
    """
    _configure_logging(verbose=verbose)
    viewer_config = load_config_or_default(config)
    if docs_root is not None:
        viewer_config.docs_root = docs_root
    if output_dir is not None:
        viewer_config.output_dir = output_dir
    if not viewer_config.docs_root.is_dir():
        msg = f"Documents directory '{viewer_config.docs_root}' not found."
        raise FileNotFoundError(msg)
    for written in SiteBuilder(viewer_config).run():
        print(f"wrote {_format_path(written)}")


def main() -> None:
    """Invoke the Cyclopts application behind the ``docshelf`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
