"""Content tree scanner: classifies root entries and reads translated page fragments.

The content root may contain:

* skeleton templates (``*.html``) shared by every page,
* one directory per page holding fragments named after their language tag,
  like ``en.md`` or ``de-AT.html``,
* pass-through files and directories listed in the keep allow-list.

Symlinks are followed exactly one level: a link to a directory counts as a
directory and a link to a file as a file.  Chains of links are not resolved.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Sequence

from polysite.models.website import Fragment, Page
from polysite.services.converter import markdown_to_html
from polysite.services.errors import BuildError
from polysite.services.matcher import parse_tag

logger = logging.getLogger(__name__)

KEEP = (
    "ads.txt",
    "app-ads.txt",
    "assets",
    "files",
    "images",
    "sites",
    "static",
)

TEMPLATE_EXTENSIONS = (".html",)
MARKDOWN_EXTENSIONS = (".md",)
FRAGMENT_EXTENSIONS = TEMPLATE_EXTENSIONS + MARKDOWN_EXTENSIONS

_DIR = "dir"
_FILE = "file"


class ScanResult(NamedTuple):
    static: List[str]
    page_names: List[str]
    skeletons: List[str]  # file names of top-level template sources


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _entry_kind(entry: os.DirEntry) -> Optional[str]:
    """Return ``"dir"``, ``"file"`` or *None* (skip) for a directory entry."""
    if not entry.is_symlink():
        if entry.is_dir(follow_symlinks=False):
            return _DIR
        if entry.is_file(follow_symlinks=False):
            return _FILE
        return None

    target = Path(os.path.dirname(entry.path), os.readlink(entry.path))
    try:
        mode = os.lstat(target).st_mode
    except OSError as exc:
        logger.warning("Scanner: skipping dangling symlink %s (%s)", entry.path, exc)
        return None
    if stat.S_ISLNK(mode):
        logger.warning("Scanner: skipping nested symlink %s -> %s", entry.path, target)
        return None
    if stat.S_ISDIR(mode):
        return _DIR
    if stat.S_ISREG(mode):
        return _FILE
    return None


def _sorted_entries(path: Path) -> List[os.DirEntry]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def scan_content_root(root: Path, keep: Sequence[str] = KEEP) -> ScanResult:
    """Classify the top-level entries of *root*.

    Hidden entries are ignored; allow-listed names are pass-through regardless
    of their type; other directories are pages; other ``*.html`` files are
    skeleton templates.

    Raises:
        BuildError: if *root* cannot be read.
    """
    try:
        entries = _sorted_entries(root)
    except OSError as exc:
        raise BuildError(f"Cannot read content root {root}: {exc}") from exc

    static: List[str] = []
    pages: List[str] = []
    skeletons: List[str] = []

    for entry in entries:
        name = entry.name
        if _is_hidden(name):
            continue
        if name in keep:
            static.append(name)
            continue

        kind = _entry_kind(entry)
        if kind == _DIR:
            pages.append(name)
        elif kind == _FILE and os.path.splitext(name)[1] in TEMPLATE_EXTENSIONS:
            skeletons.append(name)
        else:
            logger.debug("Scanner: ignoring %s", entry.path)

    logger.info(
        "Scanned content root",
        extra={"root": str(root), "pages": len(pages), "static": len(static)},
    )
    return ScanResult(static=static, page_names=pages, skeletons=skeletons)


def read_page(root: Path, name: str) -> Page:
    """Read every translatable fragment directly inside the page directory *name*.

    Markdown fragments are converted to HTML here, once per fragment.

    Raises:
        BuildError: if the directory or a fragment cannot be read, or a
            fragment's file name is not a valid BCP-47 tag.
    """
    page_dir = root / name
    try:
        entries = _sorted_entries(page_dir)
    except OSError as exc:
        raise BuildError(f"Cannot read page directory: {exc}", page=name) from exc

    fragments: List[Fragment] = []
    seen: Dict[str, str] = {}
    for entry in entries:
        if _is_hidden(entry.name) or entry.is_dir():
            continue
        stem, ext = os.path.splitext(entry.name)
        if ext not in FRAGMENT_EXTENSIONS:
            continue

        try:
            tag = parse_tag(stem)
        except ValueError as exc:
            raise BuildError(
                "Fragment file name is not a BCP-47 tag", page=name, filename=entry.name
            ) from exc
        if tag in seen:
            raise BuildError(
                f"Duplicate fragment for tag, already provided by {seen[tag]}",
                page=name,
                filename=entry.name,
                tag=tag,
            )
        seen[tag] = entry.name

        try:
            source = Path(entry.path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise BuildError(
                f"Cannot read fragment: {exc}", page=name, filename=entry.name
            ) from exc

        if ext in MARKDOWN_EXTENSIONS:
            source = markdown_to_html(source)
        fragments.append(Fragment(page=name, tag=tag, markup=source, filename=entry.name))

    return Page(name=name, fragments=tuple(fragments))
