"""Tests for build_website: one entry per page and language, empty-page policy."""

from pathlib import Path

import pytest

from polysite.config import SiteSettings
from polysite.models.language import LanguageRegistry
from polysite.services.builder import build_from_settings, build_website, canonical_path
from polysite.services.errors import BuildError

from conftest import write


class TestBuildWebsite:
    def test_one_entry_per_page_and_language(self, site_root: Path, registry: LanguageRegistry):
        model = build_website(site_root, registry)
        assert sorted(model.dynamic) == [
            "de/about.html",
            "de/imprint.html",
            "en/about.html",
            "en/imprint.html",
        ]

    def test_entry_count_excludes_empty_pages(self, site_root: Path):
        (site_root / "drafts").mkdir()
        registry = LanguageRegistry.from_specs(["de", "en", "fr"])
        model = build_website(site_root, registry)
        assert len(model.dynamic) == 2 * 3
        assert not any("drafts" in path for path in model.dynamic)

    def test_static_entries_are_names_only(self, site_root: Path, registry: LanguageRegistry):
        model = build_website(site_root, registry)
        assert model.static == ("ads.txt", "assets")
        assert model.content_root == site_root

    def test_missing_translation_uses_available_fragment(
        self, site_root: Path, registry: LanguageRegistry
    ):
        model = build_website(site_root, registry)
        for path in ("de/imprint.html", "en/imprint.html"):
            entry = model.dynamic[path]
            assert "<p>Impressum</p>" in entry.template.render(entry.data.context())

    def test_template_data(self, site_root: Path, registry: LanguageRegistry):
        entry = build_website(site_root, registry).dynamic["en/about.html"]
        assert entry.data.language.prefix == "en"
        assert entry.data.path == "about.html"
        assert [lang.selected for lang in entry.data.languages] == [False, True]

    def test_single_language_has_no_siblings(self, site_root: Path):
        model = build_website(site_root, LanguageRegistry.from_specs(["en"]))
        assert model.dynamic["en/about.html"].data.languages == []

    def test_templates_never_shared_between_paths(
        self, site_root: Path, registry: LanguageRegistry
    ):
        model = build_website(site_root, registry)
        templates = [entry.template for entry in model.dynamic.values()]
        assert len({id(t) for t in templates}) == len(templates)

    def test_model_is_read_only(self, site_root: Path, registry: LanguageRegistry):
        model = build_website(site_root, registry)
        with pytest.raises(TypeError):
            model.dynamic["en/new.html"] = model.dynamic["en/about.html"]

    def test_empty_page_error_policy(self, site_root: Path, registry: LanguageRegistry):
        write(site_root / "drafts" / "notes.txt", "nothing translatable")
        with pytest.raises(BuildError) as excinfo:
            build_website(site_root, registry, empty_pages="error")
        assert excinfo.value.page == "drafts"

    def test_missing_layout_is_fatal(self, site_root: Path, registry: LanguageRegistry):
        with pytest.raises(BuildError):
            build_website(site_root, registry, layout="main.html")

    def test_canonical_path(self):
        assert canonical_path("de", "about") == "de/about.html"


class TestBuildFromSettings:
    def test_uses_settings(self, site_root: Path):
        settings = SiteSettings(content_root=site_root, languages=["en"], keep=["ads.txt"])
        model = build_from_settings(settings)
        assert sorted(model.dynamic) == ["en/about.html", "en/imprint.html"]
        assert model.static == ("ads.txt",)
        assert "assets" not in model.static

    def test_reads_environment(self, site_root: Path, monkeypatch):
        monkeypatch.setenv("POLYSITE_CONTENT_ROOT", str(site_root))
        monkeypatch.setenv("POLYSITE_LANGUAGES", '["en", "de"]')
        settings = SiteSettings()
        assert settings.content_root == site_root
        assert [lang.prefix for lang in settings.registry()] == ["en", "de"]
