"""
Prefect flow for cleaning raw survey extracts.

Normalizes each upstream extract into the canonical long table and writes
one cleaned table per dataset plus the combined table the analysis flow reads.

Run locally:
    python -m fish_stability.flows.clean SBC=path/to/sbc.csv MCR=path/to/mcr.csv

Run with Prefect dashboard:
    prefect server start &
    python -m fish_stability.flows.clean SBC=path/to/sbc.csv
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pandas as pd
from prefect import flow, task

from fish_stability.config import get_settings
from fish_stability.datasources.surveys import (
    LONG_DTYPES,
    SCHEMAS,
    combine_surveys,
    normalize_survey,
    taxon_table_from_survey,
)
from fish_stability.errors import SchemaError
from fish_stability.store import DataStore, input_mtime

# Data store with tiered directories
store = DataStore(get_settings().data_dir)

# Relative paths within the store
COMBINED_PATH = Path("cleaned/fish_long.csv")


def raw_path(dataset: str) -> Path:
    return Path(f"raw/{dataset.lower()}_fish.csv")


def cleaned_path(dataset: str) -> Path:
    return Path(f"cleaned/{dataset.lower()}_fish.csv")


def taxa_path(dataset: str) -> Path:
    return Path(f"cleaned/{dataset.lower()}_taxa.csv")


@task(name="load-raw")
def load_raw(path: Path) -> pd.DataFrame:
    """Read an upstream extract as delivered."""
    return pd.read_csv(path, low_memory=False)


@task(name="archive-raw")
def archive_raw(dataset: str, path: Path) -> Path:
    """Copy the extract into the raw tier with its provenance."""
    return store.write_file(raw_path(dataset), path, source=str(path), dataset=dataset)


@task(name="normalize-survey")
def normalize(raw: pd.DataFrame, dataset: str) -> pd.DataFrame:
    """Map an extract to the canonical long table."""
    return normalize_survey(raw, SCHEMAS[dataset])


@task(name="save-cleaned")
def save_cleaned(table: pd.DataFrame, dataset: str, src: Path) -> Path:
    """Save a cleaned long table via store."""
    return store.write_table(
        cleaned_path(dataset),
        table,
        source="normalize_survey",
        dataset=dataset,
        input=str(src),
        input_mtime=input_mtime(src),
    )


@task(name="save-taxa")
def save_taxa(raw: pd.DataFrame, dataset: str) -> Path | None:
    """Save the taxon metadata an extract carries, if any."""
    schema = SCHEMAS[dataset]
    if not schema.attribute_columns:
        return None
    taxa = taxon_table_from_survey(raw, schema)
    return store.write_table(
        taxa_path(dataset),
        taxa,
        source="taxon_table_from_survey",
        dataset=dataset,
    )


@task(name="save-combined")
def save_combined(datasets: list[str]) -> Path:
    """Combine every cleaned dataset into the table the analysis flow reads."""
    frames = []
    found = []
    for dataset in datasets:
        table = store.read_table(cleaned_path(dataset), dtype=LONG_DTYPES)
        if table is not None:
            frames.append(table)
            found.append(dataset)
    combined = combine_surveys(frames)
    return store.write_table(
        COMBINED_PATH,
        combined,
        source="combine_surveys",
        datasets=found,
    )


@flow(name="clean-surveys", log_prints=True)
def clean_all(sources: dict[str, Path], force: bool = False) -> dict[str, Any]:
    """
    Clean every supplied extract.

    This is the main Prefect flow for the cleaning stage. Extracts whose
    cleaned table was produced from the same file version are skipped
    unless ``force`` is set.

    Args:
        sources: Dataset tag (``SBC``, ``MCR``) -> extract path.
        force: Re-normalize even when the cleaned table is current.
    """
    unknown = sorted(set(sources) - set(SCHEMAS))
    if unknown:
        msg = f"Unknown datasets {unknown}; expected some of {sorted(SCHEMAS)}"
        raise SchemaError(msg)

    results: dict[str, Any] = {"datasets": {}}
    for dataset, src in sources.items():
        src = Path(src)
        if not force and store.is_current(cleaned_path(dataset), src):
            print(f"{dataset} cleaned table is current, skipping.")
            rows = store.read_meta(cleaned_path(dataset)).get("rows", 0)
            results["datasets"][dataset] = rows
            continue

        print(f"Loading {dataset} extract from {src}...")
        raw = load_raw(src)
        archive_raw(dataset, src)

        table = normalize(raw, dataset)
        output_path = save_cleaned(table, dataset, src)
        print(f"Saved {len(table)} {dataset} records ({len(raw)} raw) to {output_path}")

        taxa_output = save_taxa(raw, dataset)
        if taxa_output is not None:
            print(f"Saved {dataset} taxon metadata to {taxa_output}")

        results["datasets"][dataset] = len(table)

    # Include datasets cleaned by earlier runs
    combined_path = save_combined(list(SCHEMAS))
    print(f"Combined table written to {combined_path}")
    results["output"] = str(combined_path)
    return results


if __name__ == "__main__":
    pairs = dict(arg.split("=", 1) for arg in sys.argv[1:])
    result = clean_all({name.upper(): Path(path) for name, path in pairs.items()})
    print(f"Flow complete: {result}")
