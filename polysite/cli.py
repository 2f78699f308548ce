"""Command line entry point: static export, dynamic serving and preview."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from polysite.config import SiteSettings
from polysite.main import create_app
from polysite.services.builder import build_from_settings
from polysite.services.errors import BuildError, ExportError, UnsafeDestinationError
from polysite.services.renderer import export_static

logger = logging.getLogger(__name__)

app = typer.Typer(name="polysite", help="Build multilingual websites from translated fragments.")


def _settings(src: Path, languages: Optional[List[str]], **overrides) -> SiteSettings:
    values = {"content_root": src, **overrides}
    if languages:
        values["languages"] = languages
    settings = SiteSettings(**values)
    logging.getLogger().setLevel(settings.log_level)
    return settings


@app.command()
def export(
    src: Path = typer.Argument(..., help="Content root."),
    out: Path = typer.Argument(..., help="Destination directory; its contents are replaced."),
    safe_root: Optional[Path] = typer.Option(None, help="Refuse destinations outside this tree."),
    language: Optional[List[str]] = typer.Option(None, "--language", "-l", help="Output language."),
):
    """Write the site as static HTML files. Symlinks are dereferenced."""
    overrides = {"safe_root": safe_root} if safe_root else {}
    settings = _settings(src, language, **overrides)
    try:
        model = build_from_settings(settings)
        dest = export_static(model, out, settings.safe_root)
    except (BuildError, ExportError, UnsafeDestinationError, ValueError) as exc:
        logger.error("Export failed: %s", exc)
        raise typer.Exit(code=1)
    typer.echo(f"Exported {len(model.dynamic)} pages to {dest}")


@app.command()
def serve(
    src: Path = typer.Argument(..., help="Content root."),
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(8080),
    language: Optional[List[str]] = typer.Option(None, "--language", "-l", help="Output language."),
):
    """Serve the site dynamically, rendering pages per request."""
    settings = _settings(src, language)
    try:
        model = build_from_settings(settings)
    except (BuildError, ValueError) as exc:
        logger.error("Build failed: %s", exc)
        raise typer.Exit(code=1)
    uvicorn.run(create_app(model, rate_limit=settings.rate_limit), host=host, port=port)


@app.command()
def preview(
    directory: Path = typer.Argument(..., help="Exported site directory."),
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(8080),
):
    """Preview a static export with absolute src and href paths."""
    site = FastAPI(docs_url=None, redoc_url=None)
    site.mount("/", StaticFiles(directory=directory, html=True), name="site")
    logger.info("listening to %s:%d", host, port)
    uvicorn.run(site, host=host, port=port)


if __name__ == "__main__":
    app()
