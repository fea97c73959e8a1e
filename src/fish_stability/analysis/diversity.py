"""Per-sample community diversity from a species matrix."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from fish_stability.analysis.pivot import taxon_columns
from fish_stability.datasources.surveys.client import SAMPLE_KEY


def diversity_indices(wide: pd.DataFrame, key: Sequence[str] = SAMPLE_KEY) -> pd.DataFrame:
    """Richness, Shannon, Pielou evenness, Gini-Simpson and total biomass per sample.

    Zero-biomass taxa contribute nothing to Shannon (0 * ln 0 is taken as 0),
    so an all-zero sample has Shannon 0. Evenness is NaN when richness <= 1.

    Args:
        wide: Species matrix with ``key`` columns first.
        key: Sample key columns.

    Returns:
        The key columns plus ``richness``, ``shannon``, ``evenness``,
        ``simpson`` and ``total_biomass``.
    """
    key = list(key)
    values = wide[taxon_columns(wide, key)].to_numpy(dtype=float)

    total = values.sum(axis=1)
    richness = (values > 0).sum(axis=1)

    with np.errstate(divide="ignore", invalid="ignore"):
        p = np.where(total[:, None] > 0, values / total[:, None], 0.0)
        plogp = np.where(p > 0, p * np.log(p), 0.0)
    shannon = -plogp.sum(axis=1)
    simpson = np.where(total > 0, 1.0 - (p**2).sum(axis=1), 0.0)

    with np.errstate(divide="ignore", invalid="ignore"):
        evenness = np.where(richness > 1, shannon / np.log(richness), np.nan)

    out = wide[key].reset_index(drop=True).copy()
    out["richness"] = richness.astype(int)
    out["shannon"] = shannon + 0.0  # avoid -0.0
    out["evenness"] = evenness
    out["simpson"] = simpson
    out["total_biomass"] = total
    return out
