"""The immutable build artefact shared by dynamic serving and static export."""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, NamedTuple, Tuple

from jinja2 import Template
from markupsafe import Markup, escape
from pydantic import BaseModel, ConfigDict

from polysite.models.language import Language


class Fragment(NamedTuple):
    """One page's translated content for one language tag, already converted to markup."""

    page: str
    tag: str
    markup: str
    filename: str


class Page(NamedTuple):
    name: str
    fragments: Tuple[Fragment, ...]  # sorted by filename

    @property
    def tags(self) -> List[str]:
        return [f.tag for f in self.fragments]


class TemplateData(BaseModel):
    """Per-page, per-language data every composed template is executed with."""

    model_config = ConfigDict(frozen=True)

    language: Language
    languages: List[Language] = []  # empty if only one language is configured
    path: str  # without language prefix, used for language buttons and hreflang

    def hreflangs(self) -> Markup:
        """Return one ``<link rel="alternate" hreflang>`` element per language.

        The selected language is included.  See
        https://developers.google.com/search/blog/2011/12/new-markup-for-multilingual-content
        """
        lines = [
            f'<link rel="alternate" hreflang="{escape(lang.bcp47)}" '
            f'href="/{escape(lang.prefix)}/{escape(self.path)}">\n'
            for lang in self.languages
        ]
        return Markup("".join(lines))

    def context(self) -> Dict[str, Any]:
        return {
            "lang": self.language,
            "languages": self.languages,
            "path": self.path,
            "hreflangs": self.hreflangs(),
        }


class PageEntry(NamedTuple):
    """A composed template bound to the data it is executed with."""

    template: Template
    data: TemplateData


class WebsiteModel(NamedTuple):
    """Everything needed to serve or export a site.

    ``dynamic`` maps canonical output paths (``<prefix>/<page>.html``) to page
    entries; ``static`` lists pass-through names resolved against
    ``content_root`` at serve/export time.
    """

    dynamic: Mapping[str, PageEntry]
    static: Tuple[str, ...]
    content_root: Path

    @classmethod
    def create(
        cls, dynamic: Mapping[str, PageEntry], static: List[str], content_root: Path
    ) -> "WebsiteModel":
        return cls(
            dynamic=MappingProxyType(dict(dynamic)),
            static=tuple(static),
            content_root=content_root,
        )
