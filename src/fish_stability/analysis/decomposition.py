"""Multi-species decomposition of community temporal variability.

The partitioner talks to a decomposition through a narrow interface: a
callable taking a frame with a ``year`` column followed by one column per
taxon, returning a mapping of metric name to value. It may raise
:class:`~fish_stability.errors.DecompositionError` for degenerate input and
may emit :class:`~fish_stability.errors.DecompositionWarning`. Any backend
with that shape can replace :func:`decompose_variability`.

The default backend combines the usual partitions of community CV. With
species means and standard deviations mu_i, sd_i and community total
mean/standard deviation mu_T, sd_T::

    cv_com      = sd_T / mu_T                  total community CV
    cv_com_ip   = sqrt(sum sd_i^2) / mu_T      CV if species fluctuated independently
    cv_sp       = sum sd_i / mu_T              abundance-weighted species-average CV
    dominance   = cv_com_ip / cv_sp            realized dominance, in [1/sqrt(S), 1]
    synchrony   = sd_T^2 / (sum sd_i)^2        Loreau & de Mazancourt phi

so that ``cv_com = cv_sp * dominance * asynchrony_effect``. The log ratios of
successive terms measure how much dominance structure and asynchrony
stabilize the community. Taylor's power law (log variance against log mean
across species) is fitted alongside.

References:
  - Thibaut & Connolly (2013) Ecol. Lett. 16:140-150
  - Loreau & de Mazancourt (2008) Am. Nat. 172:E48-E66
  - Segrestin & Lepš (2021) Ecology 102:e03343
"""

from __future__ import annotations

import math
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import numpy as np
import pandas as pd

from fish_stability.errors import DecompositionError, DecompositionWarning

METRIC_NAMES: tuple[str, ...] = (
    "cv_com",
    "cv_com_ip",
    "cv_sp",
    "dominance",
    "asynchrony_effect",
    "synchrony",
    "stab_dominance",
    "stab_asynchrony",
    "rel_dominance",
    "rel_asynchrony",
    "taylor_z",
    "taylor_intercept",
)


class Decomposer(Protocol):
    """Callable decomposing one year-by-taxon frame into named metrics."""

    def __call__(self, frame: pd.DataFrame) -> Mapping[str, float]: ...


@dataclass
class DecompositionOutcome:
    """One decomposition call: a whole community record or a single window."""

    community: str
    window_start: int | None
    window_end: int | None
    n_years: int
    n_taxa: int
    metrics: dict[str, float] = field(default_factory=lambda: dict.fromkeys(METRIC_NAMES, math.nan))
    warnings: str = ""
    failed: bool = False

    def as_record(self) -> dict[str, Any]:
        """Flat dict for one results-table row."""
        return {
            "community": self.community,
            "window_start": self.window_start,
            "window_end": self.window_end,
            "n_years": self.n_years,
            "n_taxa": self.n_taxa,
            **{name: self.metrics.get(name, math.nan) for name in METRIC_NAMES},
            "failed": self.failed,
            "warnings": self.warnings,
        }


def _taylor_fit(mean: np.ndarray, var: np.ndarray) -> tuple[float, float]:
    """Slope and intercept of log10(var) ~ log10(mean) across species."""
    usable = (mean > 0) & (var > 0)
    if usable.sum() < 2:
        warnings.warn(
            "power-law fit needs 2 species with positive mean and variance, "
            f"got {int(usable.sum())}",
            DecompositionWarning,
            stacklevel=3,
        )
        return math.nan, math.nan
    log_mean = np.log10(mean[usable])
    if np.ptp(log_mean) == 0:
        warnings.warn(
            "power-law fit undefined: all species have the same mean",
            DecompositionWarning,
            stacklevel=3,
        )
        return math.nan, math.nan
    slope, intercept = np.polyfit(log_mean, np.log10(var[usable]), 1)
    return float(slope), float(intercept)


def decompose_variability(frame: pd.DataFrame, time_column: str = "year") -> dict[str, float]:
    """Partition a community's temporal CV into dominance and asynchrony components.

    Args:
        frame: One row per time step; ``time_column`` plus one biomass column per taxon.
        time_column: Name of the time column (excluded from the computation).

    Returns:
        Mapping with every name in ``METRIC_NAMES``; metrics that cannot be
        computed are NaN and come with a ``DecompositionWarning``.

    Raises:
        DecompositionError: Fewer than 2 time steps, fewer than 2 taxa with
            nonzero biomass, or no temporal variance at all.
    """
    x = frame.drop(columns=[time_column]).to_numpy(dtype=float)
    n_steps = x.shape[0]
    if n_steps < 2:
        msg = f"need at least 2 years, got {n_steps}"
        raise DecompositionError(msg)

    present = (x > 0).any(axis=0)
    if present.sum() < 2:
        msg = f"need at least 2 taxa with nonzero biomass, got {int(present.sum())}"
        raise DecompositionError(msg)
    x = x[:, present]

    mean = x.mean(axis=0)
    sd = x.std(axis=0, ddof=1)
    total = x.sum(axis=1)
    mean_t = total.mean()
    sd_t = total.std(ddof=1)
    sum_sd = sd.sum()
    if sum_sd == 0:
        msg = "no temporal variance in any taxon"
        raise DecompositionError(msg)

    cv_com = sd_t / mean_t
    cv_com_ip = math.sqrt((sd**2).sum()) / mean_t
    cv_sp = sum_sd / mean_t

    metrics = dict.fromkeys(METRIC_NAMES, math.nan)
    metrics.update(
        cv_com=float(cv_com),
        cv_com_ip=float(cv_com_ip),
        cv_sp=float(cv_sp),
        dominance=float(cv_com_ip / cv_sp),
        asynchrony_effect=float(cv_com / cv_com_ip),
        synchrony=float(sd_t**2 / sum_sd**2),
        stab_dominance=math.log(cv_sp / cv_com_ip),
    )

    if cv_com > 0:
        metrics["stab_asynchrony"] = math.log(cv_com_ip / cv_com)
        spread = abs(metrics["stab_dominance"]) + abs(metrics["stab_asynchrony"])
        if spread > 0:
            metrics["rel_dominance"] = metrics["stab_dominance"] / spread
            metrics["rel_asynchrony"] = metrics["stab_asynchrony"] / spread
        else:
            warnings.warn(
                "relative effects undefined: no stabilization by dominance or asynchrony",
                DecompositionWarning,
                stacklevel=2,
            )
    else:
        warnings.warn(
            "community total is constant; asynchrony stabilization is unbounded",
            DecompositionWarning,
            stacklevel=2,
        )

    metrics["taylor_z"], metrics["taylor_intercept"] = _taylor_fit(mean, sd**2)
    return metrics
