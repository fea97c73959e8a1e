"""Shared fixtures: small canonical long tables."""

from __future__ import annotations

from collections.abc import Callable

import pandas as pd
import pytest


def _long_records(rows: list[tuple[str, int, str, float]], dataset: str = "MCR") -> pd.DataFrame:
    """Canonical-looking long table from (site_habitat, year, taxon, biomass) tuples.

    ``site_habitat`` is ``"<site>_<habitat>"``; the plot name is built from it.
    Only SBC rows get a dry biomass; MCR extracts never carry one.
    """
    records = []
    for site_habitat, year, taxon, biomass in rows:
        site, habitat = site_habitat.split("_", 1)
        records.append(
            {
                "dataset": dataset,
                "site": site,
                "habitat": habitat,
                "plot": f"{dataset}_{site}_{habitat}",
                "year": year,
                "taxon": taxon,
                "wet_biomass": biomass,
                "dry_biomass": biomass / 4 if dataset == "SBC" else float("nan"),
            }
        )
    return pd.DataFrame.from_records(records)


@pytest.fixture
def make_long() -> Callable[..., pd.DataFrame]:
    """Factory for small long tables, see :func:`_long_records`."""
    return _long_records


@pytest.fixture
def survey_long() -> pd.DataFrame:
    """Three samples at one plot; taxon B recorded twice in 2010."""
    return _long_records(
        [
            ("1_Backreef", 2010, "A", 10.0),
            ("1_Backreef", 2010, "B", 4.0),
            ("1_Backreef", 2010, "B", 6.0),
            ("1_Backreef", 2011, "A", 5.0),
            ("1_Backreef", 2012, "C", 0.0),
        ]
    )


@pytest.fixture
def survey_taxa() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "taxon": ["A", "B", "C"],
            "Coarse_Trophic": ["Planktivore", "Primary Consumer", "not applicable"],
        }
    )
