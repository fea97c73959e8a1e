"""LTER reef fish biomass surveys.

Normalizes raw annual fish survey extracts into the canonical long table.

Public API:
  - client: SurveySchema instances (SBC, MCR), LONG_COLUMNS, SAMPLE_KEY
  - normalize: normalize_survey, combine_surveys
  - taxa: load_taxon_table, taxon_table_from_survey
"""

from fish_stability.datasources.surveys.client import (
    LONG_COLUMNS,
    LONG_DTYPES,
    MCR_FISH,
    SAMPLE_KEY,
    SBC_FISH,
    SCHEMAS,
)
from fish_stability.datasources.surveys.normalize import combine_surveys, normalize_survey
from fish_stability.datasources.surveys.taxa import load_taxon_table, taxon_table_from_survey

__all__ = [
    "LONG_COLUMNS",
    "LONG_DTYPES",
    "MCR_FISH",
    "SAMPLE_KEY",
    "SBC_FISH",
    "SCHEMAS",
    "combine_surveys",
    "load_taxon_table",
    "normalize_survey",
    "taxon_table_from_survey",
]
