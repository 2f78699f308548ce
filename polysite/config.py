"""Site configuration.

Values come from keyword arguments, then ``POLYSITE_*`` environment variables
(e.g. ``POLYSITE_LANGUAGES='["de", "en"]'``), then the defaults below.
"""

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from polysite.models.language import LanguageRegistry
from polysite.services.scanner import KEEP


class SiteSettings(BaseSettings):
    content_root: Path = Field(default=Path("."), description="Root of the content tree.")
    languages: List[str] = Field(
        default=["de", "en"],
        min_length=1,
        description="Output languages as '<tag>' or '<prefix>=<tag>'.",
    )
    keep: List[str] = Field(
        default=list(KEEP), description="Root entries served and copied verbatim."
    )
    layout: str = Field(default="base.html", description="Skeleton template pages extend.")
    safe_root: Path = Field(
        default=Path("/tmp"), description="Static export refuses destinations outside this tree."
    )
    empty_pages: Literal["skip", "error"] = "skip"
    rate_limit: Optional[str] = Field(
        default="120/minute", description="Per-client request limit; unset to disable."
    )
    log_level: str = "INFO"

    model_config = SettingsConfigDict(extra="ignore", env_prefix="POLYSITE_")

    def registry(self) -> LanguageRegistry:
        return LanguageRegistry.from_specs(self.languages)
