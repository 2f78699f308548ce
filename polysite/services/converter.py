"""Markdown to HTML conversion for page fragments."""

from markdown_it import MarkdownIt

# CommonMark with raw HTML passed through; bare URLs are not auto-linked.
_md = MarkdownIt("commonmark", {"html": True, "linkify": False})


def markdown_to_html(text: str) -> str:
    """Render *text* as HTML."""
    return _md.render(text)
