"""Long table <-> sample-by-taxon species matrix.

A zero cell in a species matrix means the taxon was looked for and not
found in that sample. Samples that were never surveyed have no row at all.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from fish_stability.datasources.surveys.client import BIOMASS_COLUMNS, SAMPLE_KEY
from fish_stability.errors import SchemaError


def fill_value_column(
    long: pd.DataFrame, value: str, fallbacks: Sequence[str] = BIOMASS_COLUMNS
) -> tuple[pd.DataFrame, dict[str, str]]:
    """Fill ``value`` per dataset from the first fallback that dataset measured.

    MCR extracts carry wet biomass only, so their ``dry_biomass`` is entirely
    NaN. A dataset that has any ``value`` measurement keeps its own values,
    including individual NaNs.

    Returns:
        The long table with ``value`` filled, and the column actually used
        for each dataset.

    Raises:
        SchemaError: ``value`` is not a column, or a dataset has no measured
            biomass column at all.
    """
    if value not in long.columns:
        msg = f"Long table has no {value!r} column"
        raise SchemaError(msg)
    out = long.copy()
    used: dict[str, str] = {}
    for dataset, rows in long.groupby("dataset", sort=True):
        candidates = [value, *(c for c in fallbacks if c != value and c in rows.columns)]
        source = next((c for c in candidates if rows[c].notna().any()), None)
        if source is None:
            msg = f"{dataset} has no measured values in any of {candidates}"
            raise SchemaError(msg)
        used[str(dataset)] = source
        if source != value:
            out.loc[rows.index, value] = rows[source]
    return out, used


def sample_key(long: pd.DataFrame, key: Sequence[str] = SAMPLE_KEY) -> pd.DataFrame:
    """Distinct samples in ``long``, sorted, as a key-only frame."""
    return long[list(key)].drop_duplicates().sort_values(list(key)).reset_index(drop=True)


def taxon_columns(wide: pd.DataFrame, key: Sequence[str] = SAMPLE_KEY) -> list[str]:
    """Taxon columns of a species matrix (everything after the key prefix)."""
    return [c for c in wide.columns if c not in key]


def pivot_species(
    long: pd.DataFrame,
    value: str,
    key: Sequence[str] = SAMPLE_KEY,
    taxa: Iterable[str] | None = None,
) -> pd.DataFrame:
    """Average ``value`` per sample and taxon, then spread taxa into columns.

    Args:
        long: Canonical long table (or any table with ``key``, ``taxon`` and ``value``).
        value: Biomass column to average across replicate records.
        key: Columns identifying a sample.
        taxa: Reference taxon list. Every listed taxon gets a column even if
            absent from ``long``, so repeated calls over different subsets
            return matrices of the same width.

    Returns:
        One row per distinct key tuple; key columns first, then one column
        per taxon (sorted), zero where the taxon was not recorded.
    """
    key = list(key)
    reference = set(taxa or [])
    records = long.dropna(subset=[value])
    if records.empty:
        empty = records[key].reset_index(drop=True)
        for taxon in sorted(reference):
            empty[taxon] = 0.0
        return empty
    means = records.groupby([*key, "taxon"], sort=True)[value].mean()
    wide = means.unstack("taxon", fill_value=0.0)

    observed = [str(c) for c in wide.columns]
    all_taxa = sorted(set(observed) | reference)
    wide = wide.reindex(columns=all_taxa, fill_value=0.0).astype(float)
    wide.columns.name = None
    return wide.reset_index()


def melt_species(
    wide: pd.DataFrame,
    key: Sequence[str] = SAMPLE_KEY,
    value: str = "biomass",
    drop_zeros: bool = False,
) -> pd.DataFrame:
    """Inverse of :func:`pivot_species`: one row per sample and taxon."""
    key = list(key)
    long = wide.melt(id_vars=key, var_name="taxon", value_name=value)
    if drop_zeros:
        long = long[long[value] != 0]
    return long.sort_values([*key, "taxon"]).reset_index(drop=True)
