"""
Prefect flow for the analysis stage.

Builds the species matrix, diversity indices, taxon-group subsets and the
community variability partitions from the combined cleaned table.

Run locally:
    python -m fish_stability.flows.analyze
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
from prefect import flow, task, unmapped

from fish_stability.analysis import (
    DecompositionOutcome,
    community_matrices,
    diversity_indices,
    fill_value_column,
    outcomes_to_frame,
    partition,
    pivot_species,
    sample_key,
    subset_all_values,
    taxon_columns,
)
from fish_stability.config import get_settings
from fish_stability.datasources.surveys import LONG_DTYPES, SAMPLE_KEY, SCHEMAS, load_taxon_table
from fish_stability.store import DataStore

# Store and output paths
store = DataStore(get_settings().data_dir)

# Paths matching what clean.py writes
COMBINED_PATH = Path("cleaned/fish_long.csv")
SPECIES_MATRIX_PATH = Path("derived/species_matrix.csv")
DIVERSITY_PATH = Path("derived/diversity.csv")
ALL_YEARS_PATH = Path("derived/variability_all_years.csv")


def rolling_path(width: int) -> Path:
    return Path(f"derived/variability_rolling_{width}yr.csv")


def subset_path(column: str, value: str) -> Path:
    safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in value)
    return Path(f"derived/subsets/{column}/{safe}.csv")


# =============================================================================
# Data loading tasks
# =============================================================================


@task(name="load-cleaned")
def load_cleaned() -> pd.DataFrame | None:
    """Load the combined cleaned long table from store."""
    return store.read_table(COMBINED_PATH, dtype=LONG_DTYPES)


@task(name="load-taxa")
def load_taxa(taxa_file: Path | None = None, taxon_column: str = "taxon") -> pd.DataFrame | None:
    """Load taxon metadata.

    An explicit file wins; otherwise the tables the clean flow extracted from
    the surveys themselves are combined.
    """
    if taxa_file is not None:
        return load_taxon_table(taxa_file, taxon_column)
    tables = [store.read_table(Path(f"cleaned/{dataset.lower()}_taxa.csv")) for dataset in SCHEMAS]
    found = [t for t in tables if t is not None]
    if not found:
        return None
    return load_taxon_table(pd.concat(found, ignore_index=True))


# =============================================================================
# Analysis tasks
# =============================================================================


@task(name="fill-value-column")
def fill_values(long: pd.DataFrame, value: str) -> tuple[pd.DataFrame, dict[str, str]]:
    """Fill the value column per dataset from a measured biomass column."""
    return fill_value_column(long, value)


@task(name="build-species-matrix")
def build_species_matrix(long: pd.DataFrame, value: str) -> pd.DataFrame:
    """Pivot the long table to the sample-by-taxon matrix."""
    return pivot_species(long, value)


@task(name="compute-diversity")
def compute_diversity(wide: pd.DataFrame) -> pd.DataFrame:
    """Per-sample diversity indices."""
    return diversity_indices(wide)


@task(name="build-subsets")
def build_subsets(
    long: pd.DataFrame, wide: pd.DataFrame, taxa: pd.DataFrame, column: str, value: str
) -> dict[str, pd.DataFrame]:
    """Species matrices per value of a taxon-metadata column.

    Subsets share the samples and taxon columns of the full species matrix.
    """
    return subset_all_values(
        long,
        taxa,
        column,
        value,
        reference_key=wide[SAMPLE_KEY],
        reference_taxa=taxon_columns(wide),
    )


@task(name="partition-community")
def partition_task(
    community: str, matrix: pd.DataFrame, width: int | None
) -> list[DecompositionOutcome]:
    """Variability partition of one community (whole record or rolling)."""
    return partition(community, matrix, width)


@task(name="save-table")
def save_table(
    path: Path, table: pd.DataFrame, source: str, params: dict[str, Any] | None = None
) -> Path:
    """Write a derived table via store."""
    return store.write_table(path, table, source=source, **(params or {}))


def run_partitions(matrices: dict[str, pd.DataFrame], width: int | None) -> pd.DataFrame:
    """Fan out over communities, then assemble one deterministic table."""
    names = list(matrices)
    futures = partition_task.map(names, [matrices[n] for n in names], unmapped(width))
    outcomes = [outcome for future in futures for outcome in future.result()]
    return outcomes_to_frame(outcomes)


# =============================================================================
# Main flow
# =============================================================================


@flow(name="analyze-surveys", log_prints=True)
def analyze_all(
    value_column: str | None = None,
    window_widths: list[int] | None = None,
    taxa_file: Path | None = None,
    subset_column: str | None = None,
) -> dict[str, Any]:
    """
    Build every derived table from the cleaned surveys.

    Parameters left as None fall back to the application settings.
    """
    settings = get_settings()
    value = value_column or settings.value_column
    widths = window_widths if window_widths is not None else settings.window_widths
    column = subset_column or settings.subset_column

    print("Loading cleaned survey table...")
    long = load_cleaned()
    if long is None or long.empty:
        print("No cleaned survey table found. Run the clean flow first.")
        return {"error": "no data"}

    results: dict[str, Any] = {"value_column": value}

    long, used = fill_values(long, value)
    for dataset, source in used.items():
        if source != value:
            print(f"Warning: {dataset} has no {value} values; using {source} instead.")
    results["value_columns"] = used
    meta = {"value_column": value, "value_columns": used}

    print(f"Building species matrix on {value}...")
    wide = build_species_matrix(long, value)
    save_table(SPECIES_MATRIX_PATH, wide, "pivot_species", meta)
    results["samples"] = len(wide)
    dropped = len(sample_key(long)) - len(wide)
    if dropped:
        print(f"Warning: dropped {dropped} samples with no {value} values.")
    results["samples_dropped"] = dropped

    print("Computing diversity indices...")
    diversity = compute_diversity(wide)
    save_table(DIVERSITY_PATH, diversity, "diversity_indices", meta)

    matrices = community_matrices(wide)
    results["communities"] = len(matrices)
    print(f"Partitioning variability for {len(matrices)} communities...")

    table = run_partitions(matrices, None)
    save_table(ALL_YEARS_PATH, table, "partition_community", meta)
    results["all_years_failed"] = int(table["failed"].sum())

    for width in widths:
        table = run_partitions(matrices, width)
        if table.empty:
            print(f"Warning: no community has {width} years of data; rolling table is empty.")
        save_table(
            rolling_path(width),
            table,
            "partition_rolling",
            {**meta, "window_width": width},
        )
        results[f"rolling_{width}yr_windows"] = len(table)
        print(f"{len(table)} {width}-year windows, {int(table['failed'].sum())} flagged")

    results["subsets"] = []
    taxa = load_taxa(taxa_file)
    if taxa is None:
        print("Warning: No taxon metadata found. Skipping taxon subsets.")
    elif column not in taxa.columns:
        print(f"Warning: Taxon metadata has no {column!r} column. Skipping taxon subsets.")
    else:
        print(f"Building subsets by {column}...")
        subsets = build_subsets(long, wide, taxa, column, value)
        for group, matrix in subsets.items():
            save_table(
                subset_path(column, group),
                matrix,
                "subset_by_attribute",
                {**meta, "column": column, "group": group},
            )
        results["subsets"] = sorted(subsets)

    return results


if __name__ == "__main__":
    result = analyze_all()
    print(f"Flow complete: {result}")
