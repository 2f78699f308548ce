"""Shared content-tree fixtures."""

from pathlib import Path

import pytest

from polysite.models.language import LanguageRegistry

LAYOUT = """<!DOCTYPE html>
<html lang="{{ lang.bcp47 }}">
<head>
<title>{% block title %}Example{% endblock %}</title>
{{ hreflangs }}</head>
<body>
{% block content %}{% endblock %}
</body>
</html>
"""


def write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def registry() -> LanguageRegistry:
    return LanguageRegistry.from_specs(["de", "en"])


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """A small content tree: two pages, a skeleton and two pass-through entries.

    * ``about`` is translated to German (markdown) and English (HTML).
    * ``imprint`` exists in German only.
    """
    root = tmp_path / "content"
    write(root / "base.html", LAYOUT)
    write(root / "about" / "de.md", "# Über uns\n\nWir sind *da*.\n")
    write(root / "about" / "en.html", "<h1>About us</h1>")
    write(root / "imprint" / "de.md", "Impressum\n")
    write(root / "ads.txt", "example.com, pub-0000, DIRECT\n")
    write(root / "assets" / "site.css", "body { color: black; }\n")
    write(root / ".git" / "HEAD", "ref: refs/heads/main\n")
    return root
