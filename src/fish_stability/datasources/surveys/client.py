"""Survey column contracts and the canonical long-format schema.

Upstream data packages:
  - SBC LTER: Annual fish survey biomass at transects (Reed & Miller)
  - MCR LTER: Reef fish survey biomass (Brooks)

Column names below are the providers' and must stay verbatim.
"""

from fish_stability.schemas import SurveySchema

SBC_FISH = SurveySchema(
    dataset="SBC",
    year="YEAR",
    month="MONTH",
    date="DATE",
    site="SITE",
    transect="TRANSECT",
    visibility="VIS",
    taxon="SCIENTIFIC_NAME",
    common_name="COMMON_NAME",
    category_column="COARSE_GROUPING",
    category="FISH",
    wet_biomass="WM_GM2",
    dry_biomass="DRY_GM2",
    default_habitat="Reef",
    missing_value=-99999,
    # Biomass conversions were not applied to the first survey seasons
    min_year=2001,
)

MCR_FISH = SurveySchema(
    dataset="MCR",
    year="Year",
    date="Date",
    site="Site",
    habitat="Habitat",
    transect="Transect",
    taxon="Taxonomy",
    wet_biomass="Biomass",
    missing_value=-1,
    min_year=2006,
    site_prefix="LTER ",
    attribute_columns=["Family", "Fine_Trophic", "Coarse_Trophic"],
)

SCHEMAS: dict[str, SurveySchema] = {s.dataset: s for s in (SBC_FISH, MCR_FISH)}

# Canonical long table, in column order
LONG_COLUMNS = [
    "dataset",
    "site",
    "habitat",
    "plot",
    "transect",
    "year",
    "month",
    "day",
    "taxon",
    "common_name",
    "coarse_grouping",
    "wet_biomass",
    "dry_biomass",
    "visibility",
]

# One sample = one site x habitat x plot x year
SAMPLE_KEY = ["dataset", "site", "habitat", "plot", "year"]

BIOMASS_COLUMNS = ["wet_biomass", "dry_biomass"]

# Column types for reading a cleaned long table back from CSV
LONG_DTYPES = {
    "dataset": str,
    "site": str,
    "habitat": str,
    "plot": str,
    "transect": str,
    "year": int,
    "month": "Int64",
    "day": "Int64",
    "taxon": str,
    "common_name": str,
    "coarse_grouping": str,
    "wet_biomass": float,
    "dry_biomass": float,
    "visibility": float,
}
