"""Rendering strategies over a WebsiteModel, and the static-export implementation."""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from polysite.models.website import PageEntry, WebsiteModel
from polysite.services.errors import ExportError, UnsafeDestinationError

logger = logging.getLogger(__name__)

DEFAULT_SAFE_ROOT = Path("/tmp")


class Renderer(Protocol):
    """Something a website can be rendered into: an HTTP app or a directory."""

    def add_static(self, name: str) -> None:
        ...

    def add_page(self, path: str, entry: PageEntry) -> None:
        ...


def render(model: WebsiteModel, renderer: Renderer) -> None:
    """Feed every pass-through name and page entry of *model* to *renderer*."""
    for name in model.static:
        renderer.add_static(name)
    for path, entry in model.dynamic.items():
        renderer.add_page(path, entry)


def check_destination(
    out_dir: Path,
    safe_root: Path = DEFAULT_SAFE_ROOT,
    content_root: Optional[Path] = None,
) -> Path:
    """Return *out_dir* with symlinks resolved, if it lies strictly below *safe_root*.

    The destination must also neither be, contain, nor sit inside *content_root*.

    Raises:
        UnsafeDestinationError: otherwise.
    """
    resolved = Path(out_dir).resolve()
    root = Path(safe_root).resolve()
    if resolved == root or not resolved.is_relative_to(root):
        raise UnsafeDestinationError(
            f"Refusing to write to {resolved}: outside of safe root {root}."
        )
    if content_root is not None:
        source = Path(content_root).resolve()
        if resolved.is_relative_to(source) or source.is_relative_to(resolved):
            raise UnsafeDestinationError(
                f"Refusing to write to {resolved}: overlaps content root {source}."
            )
    return resolved


class FileRenderer:
    """Writes a website into a directory.

    Use as a context manager: output goes to a staging directory beside the
    destination and replaces its previous contents only when every page and
    asset was written.
    Any failure removes the staging directory and raises :class:`ExportError`.
    """

    def __init__(
        self, content_root: Path, out_dir: Path, safe_root: Path = DEFAULT_SAFE_ROOT
    ) -> None:
        self.content_root = Path(content_root)
        self.out_dir = check_destination(out_dir, safe_root, self.content_root)
        self._staging: Optional[Path] = None

    def __enter__(self) -> "FileRenderer":
        try:
            self.out_dir.parent.mkdir(parents=True, exist_ok=True)
            self._staging = Path(
                tempfile.mkdtemp(prefix=f".{self.out_dir.name}-", dir=self.out_dir.parent)
            )
        except OSError as exc:
            raise ExportError(f"Cannot prepare destination {self.out_dir}: {exc}") from exc
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        staging, self._staging = self._staging, None
        if exc_type is not None:
            shutil.rmtree(staging, ignore_errors=True)
            return
        try:
            if self.out_dir.exists():
                shutil.rmtree(self.out_dir)
            staging.rename(self.out_dir)
        except OSError as err:
            shutil.rmtree(staging, ignore_errors=True)
            raise ExportError(f"Cannot move output into {self.out_dir}: {err}") from err

    def _target(self, rel: str) -> Path:
        if self._staging is None:
            raise RuntimeError("FileRenderer must be used as a context manager.")
        return self._staging / rel

    def add_static(self, name: str) -> None:
        src = self.content_root / name
        dst = self._target(name)
        try:
            if src.is_dir():
                shutil.copytree(src, dst, symlinks=False)
            else:
                shutil.copy2(src, dst)
        except OSError as exc:
            raise ExportError(f"Error copying {src} to {dst}: {exc}") from exc

    def add_page(self, path: str, entry: PageEntry) -> None:
        dst = self._target(path)
        try:
            html = entry.template.render(entry.data.context())
        except Exception as exc:
            raise ExportError(f"Error executing template for {path}: {exc}") from exc
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            dst.write_text(html, encoding="utf-8")
        except OSError as exc:
            raise ExportError(f"Error writing {dst}: {exc}") from exc


def export_static(
    model: WebsiteModel, out_dir: Path, safe_root: Path = DEFAULT_SAFE_ROOT
) -> Path:
    """Write *model* as static files to *out_dir* and return the resolved destination.

    Symlinks in pass-through assets are dereferenced.

    Raises:
        UnsafeDestinationError: if *out_dir* is not below *safe_root*.
        ExportError: if any page or asset could not be written.
    """
    renderer = FileRenderer(model.content_root, out_dir, safe_root)
    with renderer:
        render(model, renderer)
    logger.info(
        "Static export complete",
        extra={"out_dir": str(renderer.out_dir), "pages": len(model.dynamic)},
    )
    return renderer.out_dir
