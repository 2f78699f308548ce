"""Website assembly: scanner → matcher → composer → WebsiteModel."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Literal, Mapping, Optional, Sequence

from polysite.models.language import LanguageRegistry, select_languages
from polysite.models.website import PageEntry, TemplateData, WebsiteModel
from polysite.services.composer import TemplateComposer
from polysite.services.errors import BuildError
from polysite.services.matcher import resolve_fragments
from polysite.services.scanner import KEEP, read_page, scan_content_root

if TYPE_CHECKING:
    from polysite.config import SiteSettings

logger = logging.getLogger(__name__)

PAGE_EXTENSION = ".html"


def canonical_path(prefix: str, page: str) -> str:
    """Return the output path of *page* in the language with *prefix*."""
    return f"{prefix}/{page}{PAGE_EXTENSION}"


def _read_skeletons(root: Path, names: Sequence[str]) -> Dict[str, str]:
    sources: Dict[str, str] = {}
    for name in names:
        try:
            sources[name] = (root / name).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise BuildError(f"Cannot read skeleton template: {exc}", filename=name) from exc
    return sources


def build_website(
    content_root: Path,
    registry: LanguageRegistry,
    *,
    keep: Sequence[str] = KEEP,
    layout: str = "base.html",
    extra_templates: Optional[Mapping[str, str]] = None,
    empty_pages: Literal["skip", "error"] = "skip",
) -> WebsiteModel:
    """Build the immutable :class:`WebsiteModel` for *content_root*.

    Every page gets one entry per language in *registry*, each with its own
    composed template.  Pages without any fragment are skipped with a warning,
    or rejected when *empty_pages* is ``"error"``.

    Raises:
        BuildError: on any unreadable input, invalid fragment name or template.
    """
    content_root = Path(content_root)
    scan = scan_content_root(content_root, keep)
    composer = TemplateComposer(
        _read_skeletons(content_root, scan.skeletons), layout, extra_templates
    )

    dynamic: Dict[str, PageEntry] = {}
    skipped: List[str] = []
    for name in scan.page_names:
        page = read_page(content_root, name)
        resolved = resolve_fragments(page, registry)
        if not resolved:
            if empty_pages == "error":
                raise BuildError("Page has no translatable fragments", page=name)
            logger.warning("Skipping page without fragments", extra={"page": name})
            skipped.append(name)
            continue

        for lang in registry:
            fragment = resolved[lang.prefix]
            path = canonical_path(lang.prefix, name)
            dynamic[path] = PageEntry(
                template=composer.compose(fragment),
                data=TemplateData(
                    language=lang,
                    languages=select_languages(registry, lang),
                    path=f"{name}{PAGE_EXTENSION}",
                ),
            )

    logger.info(
        "Website built",
        extra={"pages": len(dynamic), "static": len(scan.static), "skipped": len(skipped)},
    )
    return WebsiteModel.create(dynamic, scan.static, content_root)


def build_from_settings(
    settings: "SiteSettings", extra_templates: Optional[Mapping[str, str]] = None
) -> WebsiteModel:
    """Build the website described by a :class:`~polysite.config.SiteSettings`."""
    return build_website(
        settings.content_root,
        settings.registry(),
        keep=settings.keep,
        layout=settings.layout,
        extra_templates=extra_templates,
        empty_pages=settings.empty_pages,
    )
