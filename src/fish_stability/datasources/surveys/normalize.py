"""Map raw survey extracts onto the canonical long table.

The normalizer only filters and renames. Missing biomass is dropped, never
estimated, and anything invalid that survives the filters stops the run.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pandas as pd

from fish_stability.datasources.surveys.client import BIOMASS_COLUMNS, LONG_COLUMNS
from fish_stability.errors import InvalidValueError, SchemaError
from fish_stability.schemas import SurveySchema


def _check_columns(raw: pd.DataFrame, schema: SurveySchema) -> None:
    missing = [c for c in schema.required_columns if c not in raw.columns]
    if missing:
        msg = f"{schema.dataset} extract is missing required columns: {missing}"
        raise SchemaError(msg)


def _keep_category(raw: pd.DataFrame, schema: SurveySchema) -> pd.DataFrame:
    if schema.category_column is None:
        return raw
    categories = raw[schema.category_column].astype(str).str.strip()
    keep = categories == schema.category
    if not keep.any():
        msg = (
            f"{schema.dataset} extract has no {schema.category!r} rows "
            f"in column {schema.category_column!r}"
        )
        raise SchemaError(msg)
    return raw[keep]


def _numeric(series: pd.Series, sentinel: float) -> tuple[pd.Series, int]:
    """Coerce to float with the sentinel as NaN; also count unparseable values."""
    values = pd.to_numeric(series, errors="coerce")
    unparseable = int((values.isna() & series.notna()).sum())
    values = values.mask(values == sentinel)
    return values.astype(float), unparseable


def _site_ids(sites: pd.Series, prefix: str) -> pd.Series:
    cleaned = sites.astype(str).str.strip()
    if prefix:
        cleaned = cleaned.str.removeprefix(prefix).str.strip()
    return cleaned


def normalize_survey(raw: pd.DataFrame, schema: SurveySchema) -> pd.DataFrame:
    """Normalize one raw survey extract into the canonical long table.

    Keeps rows of the schema's category (e.g. only fish), at or after the
    schema's year cutoff, and with at least one measured biomass value.
    Sentinel values become NaN; rows where every biomass field is missing
    are dropped.

    Args:
        raw: Upstream extract with the provider's column names.
        schema: Column contract for the extract.

    Returns:
        DataFrame with ``LONG_COLUMNS``.

    Raises:
        SchemaError: A required column or the expected category is absent.
        InvalidValueError: Negative or unparseable biomass survived filtering.
    """
    _check_columns(raw, schema)
    df = _keep_category(raw, schema)

    years = pd.to_numeric(df[schema.year], errors="coerce")
    df = df[years >= schema.min_year]
    years = years[df.index].astype(int)

    biomass: dict[str, pd.Series] = {}
    unparseable = 0
    for name in BIOMASS_COLUMNS:
        column = getattr(schema, name)
        if column is None:
            biomass[name] = pd.Series(np.nan, index=df.index, dtype=float)
            continue
        biomass[name], bad = _numeric(df[column], schema.missing_value)
        unparseable += bad

    measured = pd.concat(biomass.values(), axis=1).notna().any(axis=1)
    negative = sum(int((values[measured] < 0).sum()) for values in biomass.values())
    invalid = negative + unparseable
    if invalid:
        msg = (
            f"{schema.dataset}: {invalid} biomass values are negative or unparseable "
            "after removing sentinels"
        )
        raise InvalidValueError(msg, count=invalid)

    df = df[measured]
    years = years[measured]
    dates = pd.to_datetime(df[schema.date], errors="coerce")

    if schema.month is not None:
        month = pd.to_numeric(df[schema.month], errors="coerce").astype("Int64")
    else:
        month = dates.dt.month.astype("Int64")

    site = _site_ids(df[schema.site], schema.site_prefix)
    if schema.habitat is not None:
        habitat = df[schema.habitat].astype(str).str.strip()
    else:
        habitat = pd.Series(schema.default_habitat, index=df.index)

    def _optional(column: str | None) -> pd.Series:
        if column is None:
            return pd.Series(np.nan, index=df.index)
        return df[column]

    visibility, _ = _numeric(_optional(schema.visibility), schema.missing_value)

    out = pd.DataFrame(
        {
            "dataset": schema.dataset,
            "site": site,
            "habitat": habitat,
            "plot": schema.dataset + "_" + site + "_" + habitat,
            "transect": df[schema.transect],
            "year": years,
            "month": month,
            "day": dates.dt.day.astype("Int64"),
            "taxon": df[schema.taxon].astype(str).str.strip(),
            "common_name": _optional(schema.common_name),
            "coarse_grouping": _optional(schema.category_column),
            "wet_biomass": biomass["wet_biomass"][measured],
            "dry_biomass": biomass["dry_biomass"][measured],
            "visibility": visibility,
        },
        index=df.index,
    )
    return out[LONG_COLUMNS].reset_index(drop=True)


def combine_surveys(frames: Iterable[pd.DataFrame]) -> pd.DataFrame:
    """Concatenate normalized tables from several datasets."""
    frames = list(frames)
    for i, frame in enumerate(frames):
        if list(frame.columns) != LONG_COLUMNS:
            msg = f"Table {i} does not have the canonical long columns: {list(frame.columns)}"
            raise SchemaError(msg)
    if not frames:
        return pd.DataFrame(columns=LONG_COLUMNS)
    return pd.concat(frames, ignore_index=True)
