"""
Domain models for LTER fish stability.

Pydantic models describing the raw survey contracts and operation results.
Survey schemas define the canonical mapping - the normalizer translates
each upstream extract to the long-format columns through one of these.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# =============================================================================
# Core
# =============================================================================


class Result(BaseModel):
    """Generic result wrapper for operations."""

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None


# =============================================================================
# Survey schemas
# =============================================================================


class SurveySchema(BaseModel):
    """Column contract for one upstream survey extract.

    Column names are the data provider's, verbatim. Optional columns set to
    ``None`` are absent from that dataset and become NaN in the long table.
    """

    model_config = {"frozen": True}

    dataset: str = Field(..., description="Short dataset tag (SBC, MCR)")
    year: str
    date: str
    site: str
    transect: str
    taxon: str
    wet_biomass: str | None = None
    dry_biomass: str | None = None
    month: str | None = None
    common_name: str | None = None
    visibility: str | None = None
    habitat: str | None = None
    default_habitat: str = "Reef"

    category_column: str | None = Field(
        default=None, description="Coarse grouping column used to keep one category"
    )
    category: str | None = Field(default=None, description="Category to keep, e.g. FISH")

    missing_value: float = Field(..., description="Sentinel used for unmeasured biomass")
    min_year: int = Field(..., description="First year with reliable biomass fields")
    site_prefix: str = Field(
        default="", description="Prefix stripped from site labels (MCR 'LTER 1' -> '1')"
    )
    attribute_columns: list[str] = Field(
        default_factory=list, description="Per-taxon metadata carried in the extract"
    )

    @property
    def biomass_columns(self) -> list[str]:
        """Raw biomass columns present in this extract."""
        return [c for c in (self.wet_biomass, self.dry_biomass) if c is not None]

    @property
    def required_columns(self) -> list[str]:
        """Every raw column the normalizer reads."""
        cols = [self.year, self.date, self.site, self.transect, self.taxon]
        optional = (
            self.month,
            self.common_name,
            self.visibility,
            self.habitat,
            self.category_column,
        )
        cols.extend(c for c in optional if c is not None)
        cols.extend(self.biomass_columns)
        return cols
