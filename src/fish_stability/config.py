"""
Application settings.

Values come from environment variables prefixed with ``FISH_STABILITY_``
(or a local ``.env`` file), e.g.::

    FISH_STABILITY_DATA_DIR=/srv/lter/data
    FISH_STABILITY_WINDOW_WIDTHS='[5, 10, 15]'
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the cleaning and analysis flows."""

    model_config = SettingsConfigDict(
        env_prefix="FISH_STABILITY_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "lter-fish-stability"
    app_env: str = "development"
    debug: bool = False

    data_dir: Path = Path("data")

    # Biomass column fed to pivots and the variability partition
    value_column: str = "dry_biomass"
    # Rolling-window widths in years
    window_widths: list[int] = Field(default_factory=lambda: [5, 10])
    # Taxon metadata column used for subsets
    subset_column: str = "Coarse_Trophic"


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
