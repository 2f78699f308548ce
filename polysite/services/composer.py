"""Template composition: injects a page fragment into the shared skeleton templates."""

import logging
from typing import Dict, Mapping, Optional, Set

from jinja2 import (
    DictLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateSyntaxError,
    nodes,
)

from polysite.models.website import Fragment
from polysite.services.errors import BuildError

logger = logging.getLogger(__name__)

CONTENT_BLOCK = "content"


class TemplateComposer:
    """Owns the base template set and produces one composed template per page and language.

    The base set is parsed once.  Each call to :meth:`compose` returns a new
    :class:`jinja2.Template` that extends *layout* and overrides its
    ``content`` block; the shared environment is never modified, so composed
    templates are independent of each other and safe to render concurrently.
    """

    def __init__(
        self,
        sources: Mapping[str, str],
        layout: str,
        extra_templates: Optional[Mapping[str, str]] = None,
    ) -> None:
        if '"' in layout or "\\" in layout:
            raise BuildError(f"Invalid layout template name {layout!r}")

        merged: Dict[str, str] = dict(sources)
        merged.update(extra_templates or {})
        self.layout = layout
        self._sources = merged
        self.env = Environment(
            loader=DictLoader(merged),
            undefined=StrictUndefined,
            autoescape=True,
        )

        for name in sorted(merged):
            try:
                self.env.get_template(name)
            except TemplateError as exc:
                raise BuildError(f"Cannot parse base template: {exc}", filename=name) from exc

        if layout not in merged:
            raise BuildError(f"Layout template {layout!r} not found in base templates")
        if not self._defines_block(layout, CONTENT_BLOCK, set()):
            raise BuildError(
                f"Layout does not define a {{% block {CONTENT_BLOCK} %}}", filename=layout
            )

    def _defines_block(self, name: str, block: str, seen: Set[str]) -> bool:
        """Return True if template *name*, or a template it extends, defines *block*."""
        if name in seen or name not in self._sources:
            return False
        seen.add(name)

        ast = self.env.parse(self._sources[name])
        if any(node.name == block for node in ast.find_all(nodes.Block)):
            return True
        for extends in ast.find_all(nodes.Extends):
            parent = extends.template
            if isinstance(parent, nodes.Const) and self._defines_block(parent.value, block, seen):
                return True
        return False

    def compose(self, fragment: Fragment) -> Template:
        """Return a new template rendering the layout with *fragment* as its content.

        Raises:
            BuildError: if the fragment markup is not a valid template.
        """
        source = (
            f'{{% extends "{self.layout}" %}}'
            f"{{% block {CONTENT_BLOCK} %}}{fragment.markup}{{% endblock %}}"
        )
        try:
            return self.env.from_string(source)
        except TemplateSyntaxError as exc:
            raise BuildError(
                f"Cannot compose page: {exc}",
                page=fragment.page,
                filename=fragment.filename,
                tag=fragment.tag,
            ) from exc
