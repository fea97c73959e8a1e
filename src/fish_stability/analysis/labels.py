"""Assemble decomposition outcomes into a labelled results table.

Community names follow ``<dataset>_<site>_<habitat>`` (e.g. ``MCR_1_Backreef``);
site and habitat labels are read back out of that name.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from fish_stability.analysis.decomposition import METRIC_NAMES, DecompositionOutcome
from fish_stability.reference import site_label

DELIMITER = "_"

RESULT_COLUMNS = [
    "community",
    "dataset",
    "site",
    "habitat",
    "site_label",
    "habitat_label",
    "window_start",
    "window_end",
    "n_years",
    "n_taxa",
    *METRIC_NAMES,
    "failed",
    "warnings",
]


@dataclass(frozen=True)
class CommunityLabel:
    """Parsed parts of a community name."""

    dataset: str
    site: str
    habitat: str

    @property
    def site_label(self) -> str:
        return site_label(self.dataset, self.site)

    @property
    def habitat_label(self) -> str:
        return self.habitat.replace(DELIMITER, " ")


def parse_community_name(name: str) -> CommunityLabel:
    """Split ``<dataset>_<site>_<habitat>`` into its parts.

    Only the first two delimiters split, so a habitat may itself contain
    underscores (``MCR_1_Outer_10m`` -> habitat ``Outer_10m``).

    Raises:
        ValueError: Fewer than three non-empty segments.
    """
    parts = str(name).split(DELIMITER, 2)
    if len(parts) != 3 or not all(parts):
        msg = f"Community name {name!r} is not of the form <dataset>_<site>_<habitat>"
        raise ValueError(msg)
    return CommunityLabel(*parts)


def outcomes_to_frame(outcomes: Iterable[DecompositionOutcome]) -> pd.DataFrame:
    """One row per outcome, labelled and sorted by community then window start."""
    records = []
    for outcome in outcomes:
        label = parse_community_name(outcome.community)
        records.append(
            {
                **outcome.as_record(),
                "dataset": label.dataset,
                "site": label.site,
                "habitat": label.habitat,
                "site_label": label.site_label,
                "habitat_label": label.habitat_label,
            }
        )
    if not records:
        return pd.DataFrame(columns=RESULT_COLUMNS)

    table = pd.DataFrame.from_records(records, columns=RESULT_COLUMNS)
    table["window_start"] = table["window_start"].astype("Int64")
    table["window_end"] = table["window_end"].astype("Int64")
    return table.sort_values(["community", "window_start"], kind="stable").reset_index(drop=True)
