"""Exceptions raised while building or exporting a site."""

from typing import Optional


class BuildError(RuntimeError):
    """The content tree cannot be assembled into a website; nothing is usable."""

    def __init__(
        self,
        message: str,
        *,
        page: Optional[str] = None,
        filename: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> None:
        self.page = page
        self.filename = filename
        self.tag = tag
        context = ", ".join(
            f"{key}={value!r}"
            for key, value in (("page", page), ("file", filename), ("tag", tag))
            if value is not None
        )
        super().__init__(f"{message} ({context})" if context else message)


class ExportError(RuntimeError):
    """A static export failed; the destination holds no partial output."""


class UnsafeDestinationError(ValueError):
    """The export destination does not resolve below the allowed safe root."""
