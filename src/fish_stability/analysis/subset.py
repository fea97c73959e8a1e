"""Species matrices restricted to taxa sharing one metadata attribute.

Subsets are re-pivoted against a fixed reference key: every valid sample
appears exactly once, with zeros when none of its taxa match. Columns cover
the whole reference taxon list, so all subsets have the same width.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import pandas as pd

from fish_stability.analysis.pivot import pivot_species, taxon_columns
from fish_stability.datasources.surveys.client import SAMPLE_KEY
from fish_stability.errors import SchemaError

# Attribute value meaning "does not belong to any group"
NOT_APPLICABLE = "not applicable"


def _attribute(long: pd.DataFrame, taxa: pd.DataFrame, column: str) -> pd.Series:
    """Metadata value for each row of ``long`` (NaN where unmatched or not applicable)."""
    if column not in taxa.columns:
        msg = f"Taxon metadata has no {column!r} column"
        raise SchemaError(msg)
    meta = taxa[["taxon", column]].drop_duplicates(subset="taxon")
    joined = long[["taxon"]].merge(meta, on="taxon", how="left", validate="many_to_one")
    values = joined[column].set_axis(long.index)
    inapplicable = values.astype(str).str.strip().str.lower() == NOT_APPLICABLE
    return values.mask(inapplicable)


def subset_by_attribute(
    long: pd.DataFrame,
    taxa: pd.DataFrame,
    column: str,
    target: Any,
    value: str,
    reference_key: pd.DataFrame,
    reference_taxa: Iterable[str] | None = None,
    key: Sequence[str] = SAMPLE_KEY,
) -> pd.DataFrame:
    """Species matrix of the taxa whose ``column`` equals ``target``.

    Args:
        long: Canonical long table.
        taxa: Taxon metadata keyed by ``taxon``.
        column: Metadata column to filter on (e.g. ``Coarse_Trophic``).
        target: Value to keep.
        value: Biomass column to average.
        reference_key: Every valid sample (see :func:`~fish_stability.analysis.pivot.sample_key`).
        reference_taxa: Taxa that always get a column.
        key: Sample key columns.

    Returns:
        One row per ``reference_key`` sample, zero-filled where nothing matched.
        Samples absent from ``reference_key`` are not reported.
    """
    key = list(key)
    attribute = _attribute(long, taxa, column)
    selected = long[attribute.notna() & (attribute == target)]
    wide = pivot_species(selected, value, key=key, taxa=reference_taxa)

    # Explicit outer join from the reference key, then default the taxon cells
    reference = reference_key[key].drop_duplicates()
    out = reference.merge(wide, on=key, how="left", validate="one_to_one")
    columns = taxon_columns(out, key)
    if columns:
        out[columns] = out[columns].fillna(0.0).astype(float)
    return out.sort_values(key).reset_index(drop=True)


def subset_all_values(
    long: pd.DataFrame,
    taxa: pd.DataFrame,
    column: str,
    value: str,
    reference_key: pd.DataFrame,
    reference_taxa: Iterable[str] | None = None,
    key: Sequence[str] = SAMPLE_KEY,
) -> dict[str, pd.DataFrame]:
    """Subset matrices for every distinct valid value of ``column``."""
    reference_taxa = list(reference_taxa or [])
    attribute = _attribute(long, taxa, column)
    values = sorted(attribute.dropna().unique(), key=str)
    return {
        str(v): subset_by_attribute(
            long, taxa, column, v, value, reference_key, reference_taxa, key=key
        )
        for v in values
    }
