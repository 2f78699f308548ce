"""Output languages: the immutable registry of tags and URL prefixes a site is built for."""

from typing import Iterator, List, Sequence, Tuple

import langcodes
from pydantic import BaseModel, ConfigDict


class Language(BaseModel):
    """One output language as seen by templates."""

    model_config = ConfigDict(frozen=True)

    bcp47: str
    prefix: str
    name: str
    selected: bool = False


class LanguageRegistry:
    """Ordered, immutable set of output languages, unique by prefix."""

    __slots__ = ("_languages",)

    def __init__(self, languages: Sequence[Language]) -> None:
        prefixes = [lang.prefix for lang in languages]
        if not prefixes:
            raise ValueError("At least one output language is required.")
        if len(set(prefixes)) != len(prefixes):
            raise ValueError(f"Duplicate language prefix in {prefixes}.")
        self._languages: Tuple[Language, ...] = tuple(languages)

    @classmethod
    def from_specs(cls, specs: Sequence[str]) -> "LanguageRegistry":
        """Build a registry from ``"<tag>"`` or ``"<prefix>=<tag>"`` entries.

        The display name defaults to the upper-cased prefix (``"de"`` → ``"DE"``).

        Raises:
            ValueError: on an empty list, an invalid BCP-47 tag, or a duplicate prefix.
        """
        languages: List[Language] = []
        for spec in specs:
            prefix, sep, tag = spec.strip().partition("=")
            if not sep:
                tag = prefix
            prefix, tag = prefix.strip(), tag.strip()
            if not prefix or "/" in prefix or prefix.startswith("."):
                raise ValueError(f"Invalid language prefix in '{spec}'.")
            if not langcodes.tag_is_valid(tag):
                raise ValueError(f"'{tag}' is not a valid BCP-47 language tag.")
            languages.append(Language(bcp47=tag, prefix=prefix, name=prefix.upper()))
        return cls(languages)

    def __iter__(self) -> Iterator[Language]:
        return iter(self._languages)

    def __len__(self) -> int:
        return len(self._languages)

    def __repr__(self) -> str:
        return f"LanguageRegistry({[lang.prefix for lang in self._languages]})"

    @property
    def languages(self) -> Tuple[Language, ...]:
        return self._languages


def select_languages(registry: LanguageRegistry, selected: Language) -> List[Language]:
    """Return the language-switcher list with *selected* flagged.

    The list is empty when only one language is configured, so templates can
    simply test it for truthiness before rendering a switcher.
    """
    if len(registry) <= 1:
        return []
    return [
        lang.model_copy(update={"selected": lang.prefix == selected.prefix})
        for lang in registry
    ]
