"""Per-page language negotiation between available fragments and output languages."""

import logging
from typing import Dict, List, Sequence

import langcodes

from polysite.models.language import LanguageRegistry
from polysite.models.website import Fragment, Page

logger = logging.getLogger(__name__)

# Maximum langcodes distance accepted as a fallback (same language, different
# region or script).  Anything further falls back to the default fragment.
MAX_MATCH_DISTANCE = 25


def parse_tag(tag: str) -> str:
    """Return the standardized form of BCP-47 *tag*.

    Raises:
        ValueError: if *tag* is not a valid language tag.
    """
    if not tag or not langcodes.tag_is_valid(tag):
        raise ValueError(f"'{tag}' is not a valid BCP-47 language tag.")
    return langcodes.standardize_tag(tag)


class LanguageMatcher:
    """Resolve requested tags against the tags a page is actually available in.

    Resolution order: exact tag, then the closest tag of the same language
    (``de-AT`` → ``de``, ``en`` → ``en-US``), then the first available tag.
    """

    def __init__(self, available: Sequence[str]) -> None:
        if not available:
            raise ValueError("A matcher needs at least one available tag.")
        self.available: List[str] = [parse_tag(tag) for tag in available]

    def match(self, wanted: str) -> str:
        wanted = parse_tag(wanted)
        if wanted in self.available:
            return wanted

        tag, distance = langcodes.closest_match(
            wanted, self.available, max_distance=MAX_MATCH_DISTANCE
        )
        if tag in self.available and distance <= MAX_MATCH_DISTANCE:
            return tag

        default = self.available[0]
        logger.debug("No close match for %s, using default %s", wanted, default)
        return default


def resolve_fragments(page: Page, registry: LanguageRegistry) -> Dict[str, Fragment]:
    """Return the best fragment of *page* for every output language, keyed by prefix.

    A page without fragments resolves to an empty mapping.
    """
    if not page.fragments:
        return {}

    by_tag = {fragment.tag: fragment for fragment in page.fragments}
    matcher = LanguageMatcher(page.tags)
    return {lang.prefix: by_tag[matcher.match(lang.bcp47)] for lang in registry}
