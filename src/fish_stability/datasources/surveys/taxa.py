"""Taxon metadata tables (trophic groups, families) keyed by taxon name."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pandas as pd

from fish_stability.errors import SchemaError
from fish_stability.schemas import SurveySchema


def _tidy(table: pd.DataFrame, taxon_column: str) -> pd.DataFrame:
    if taxon_column not in table.columns:
        msg = f"Taxon metadata has no {taxon_column!r} column"
        raise SchemaError(msg)
    out = table.rename(columns={taxon_column: "taxon"})
    out["taxon"] = out["taxon"].astype(str).str.strip()
    # One metadata row per taxon so joins stay many-to-one
    out = out.drop_duplicates(subset="taxon", keep="first")
    return out.reset_index(drop=True)


def load_taxon_table(
    source: Path | str | pd.DataFrame, taxon_column: str = "taxon"
) -> pd.DataFrame:
    """Load a taxon metadata table and key it by ``taxon``.

    Args:
        source: CSV path or an already-loaded DataFrame.
        taxon_column: Column holding the scientific name.
    """
    table = source if isinstance(source, pd.DataFrame) else pd.read_csv(source)
    return _tidy(table, taxon_column)


def taxon_table_from_survey(raw: pd.DataFrame, schema: SurveySchema) -> pd.DataFrame:
    """Build a metadata table from the per-taxon attributes carried in an extract.

    MCR ships family and trophic groups on every record; SBC carries none
    and needs a separate table.
    """
    if not schema.attribute_columns:
        msg = f"{schema.dataset} extract carries no taxon attributes"
        raise SchemaError(msg)
    columns = [schema.taxon, *schema.attribute_columns]
    missing = [c for c in columns if c not in raw.columns]
    if missing:
        msg = f"{schema.dataset} extract is missing taxon columns: {missing}"
        raise SchemaError(msg)
    return _tidy(raw[columns], schema.taxon)
