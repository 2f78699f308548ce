"""Tests for TemplateComposer: base-set validation, composition and isolation."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from polysite.models.website import Fragment
from polysite.services.composer import TemplateComposer
from polysite.services.errors import BuildError

_BASE = "<main>{% block content %}{% endblock %}</main>"


def _fragment(markup: str, tag: str = "en") -> Fragment:
    return Fragment(page="about", tag=tag, markup=markup, filename=f"{tag}.html")


class TestBaseTemplateSet:
    def test_layout_must_exist(self):
        with pytest.raises(BuildError, match="not found"):
            TemplateComposer({"other.html": _BASE}, layout="base.html")

    def test_layout_must_define_content_block(self):
        with pytest.raises(BuildError, match="content"):
            TemplateComposer({"base.html": "<main></main>"}, layout="base.html")

    def test_content_block_may_come_from_parent_layout(self):
        sources = {
            "base.html": _BASE,
            "page.html": '{% extends "base.html" %}{% block title %}x{% endblock %}',
        }
        composer = TemplateComposer(sources, layout="page.html")
        html = composer.compose(_fragment("<p>Hi</p>")).render()
        assert html == "<main><p>Hi</p></main>"

    def test_unparsable_skeleton_is_fatal(self):
        with pytest.raises(BuildError) as excinfo:
            TemplateComposer({"base.html": _BASE, "nav.html": "{% if %}"}, layout="base.html")
        assert excinfo.value.filename == "nav.html"

    def test_extra_templates_are_available_to_fragments(self):
        composer = TemplateComposer(
            {"base.html": _BASE},
            layout="base.html",
            extra_templates={"checkout.html": "<form>pay {{ amount }}</form>"},
        )
        template = composer.compose(_fragment('{% include "checkout.html" %}'))
        assert template.render(amount=5) == "<main><form>pay 5</form></main>"


class TestCompose:
    def test_fragment_fills_content_block(self):
        composer = TemplateComposer({"base.html": _BASE}, layout="base.html")
        assert composer.compose(_fragment("<p>Hi</p>")).render() == "<main><p>Hi</p></main>"

    def test_fragment_can_use_template_data(self):
        composer = TemplateComposer({"base.html": _BASE}, layout="base.html")
        template = composer.compose(_fragment("{{ path }}"))
        assert template.render(path="about.html") == "<main>about.html</main>"

    def test_values_are_escaped(self):
        composer = TemplateComposer({"base.html": _BASE}, layout="base.html")
        template = composer.compose(_fragment("{{ name }}"))
        assert template.render(name="<b>") == "<main>&lt;b&gt;</main>"

    def test_composed_templates_are_independent(self):
        composer = TemplateComposer({"base.html": _BASE}, layout="base.html")
        first = composer.compose(_fragment("<p>one</p>"))
        second = composer.compose(_fragment("<p>two</p>"))
        same_content = composer.compose(_fragment("<p>one</p>"))

        assert first is not same_content
        assert first.render() == "<main><p>one</p></main>"
        assert second.render() == "<main><p>two</p></main>"
        assert composer.env.get_template("base.html").render() == "<main></main>"

    def test_invalid_fragment_markup_is_fatal(self):
        composer = TemplateComposer({"base.html": _BASE}, layout="base.html")
        with pytest.raises(BuildError) as excinfo:
            composer.compose(_fragment("{% for %}", tag="de"))
        assert excinfo.value.page == "about"
        assert excinfo.value.tag == "de"

    def test_concurrent_rendering_does_not_leak_data(self):
        composer = TemplateComposer({"base.html": _BASE}, layout="base.html")
        template = composer.compose(_fragment("{{ user }}:{{ user }}"))

        def render(i: int) -> str:
            return template.render(user=f"user{i}")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(render, range(200)))

        for i, html in enumerate(results):
            assert html == f"<main>user{i}:user{i}</main>"
