"""Community variability partitioning over whole records and rolling windows.

For each community (one plot tracked over years) the year-by-taxon matrix
is handed to a decomposition backend, either once for the full record or
once per fixed-width window sliding one year at a time. Each call yields a
:class:`~fish_stability.analysis.decomposition.DecompositionOutcome`;
warnings and failures are recorded on the outcome instead of stopping the
batch, so a degenerate window leaves a flagged row with NaN metrics.
"""

from __future__ import annotations

import math
import warnings
from collections.abc import Iterable, Mapping, Sequence

import pandas as pd

from fish_stability.analysis.decomposition import (
    METRIC_NAMES,
    Decomposer,
    DecompositionOutcome,
    decompose_variability,
)
from fish_stability.analysis.labels import outcomes_to_frame
from fish_stability.analysis.pivot import pivot_species, taxon_columns
from fish_stability.datasources.surveys.client import SAMPLE_KEY

WARNING_SEPARATOR = "; "


def community_matrices(
    wide: pd.DataFrame,
    key: Sequence[str] = SAMPLE_KEY,
    community: str = "plot",
    time: str = "year",
) -> dict[str, pd.DataFrame]:
    """Split a species matrix into year-indexed matrices, one per community.

    Raises:
        ValueError: A community has more than one row for the same year.
    """
    taxa = taxon_columns(wide, key)
    matrices: dict[str, pd.DataFrame] = {}
    for name, group in wide.groupby(community, sort=True):
        matrix = group.set_index(time)[taxa].sort_index()
        if matrix.index.has_duplicates:
            msg = f"Community {name!r} has repeated {time} rows; check the sample key"
            raise ValueError(msg)
        matrices[str(name)] = matrix
    return matrices


def run_decomposition(
    community: str,
    matrix: pd.DataFrame,
    decomposer: Decomposer = decompose_variability,
) -> DecompositionOutcome:
    """Decompose one year-indexed matrix, capturing warnings and failures.

    Taxa with zero biomass throughout ``matrix`` are dropped before the call.
    """
    matrix = matrix.sort_index()
    kept = matrix.loc[:, (matrix > 0).any(axis=0)]
    outcome = DecompositionOutcome(
        community=community,
        window_start=int(matrix.index[0]) if len(matrix) else None,
        window_end=int(matrix.index[-1]) if len(matrix) else None,
        n_years=len(matrix),
        n_taxa=kept.shape[1],
    )

    frame = kept.rename_axis("year").reset_index()
    messages: list[str] = []
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            result = decomposer(frame)
        except (ValueError, ArithmeticError) as exc:
            outcome.failed = True
            failure = f"decomposition failed: {exc}"
        else:
            failure = None
            for name in METRIC_NAMES:
                outcome.metrics[name] = float(result.get(name, math.nan))
    messages.extend(str(w.message) for w in caught)
    if failure is not None:
        messages.append(failure)
    outcome.warnings = WARNING_SEPARATOR.join(messages)
    return outcome


def rolling_windows(n_years: int, width: int) -> list[slice]:
    """Row slices of every ``width``-long window over ``n_years`` rows.

    Returns ``n_years - width + 1`` slices, or none when the record is
    shorter than one window.
    """
    if width < 1:
        msg = f"Window width must be at least 1, got {width}"
        raise ValueError(msg)
    return [slice(start, start + width) for start in range(n_years - width + 1)]


def partition_community(
    community: str,
    matrix: pd.DataFrame,
    decomposer: Decomposer = decompose_variability,
) -> DecompositionOutcome:
    """Whole-history mode: one outcome over the full year range."""
    return run_decomposition(community, matrix, decomposer)


def partition_rolling(
    community: str,
    matrix: pd.DataFrame,
    width: int,
    decomposer: Decomposer = decompose_variability,
) -> list[DecompositionOutcome]:
    """Rolling-window mode: one outcome per window, in increasing start year."""
    matrix = matrix.sort_index()
    return [
        run_decomposition(community, matrix.iloc[window], decomposer)
        for window in rolling_windows(len(matrix), width)
    ]


def partition(
    community: str,
    matrix: pd.DataFrame,
    width: int | None = None,
    decomposer: Decomposer = decompose_variability,
) -> list[DecompositionOutcome]:
    """Outcomes for one community; whole record when ``width`` is None."""
    if width is None:
        return [partition_community(community, matrix, decomposer)]
    return partition_rolling(community, matrix, width, decomposer)


def partition_communities(
    matrices: Mapping[str, pd.DataFrame],
    width: int | None = None,
    decomposer: Decomposer = decompose_variability,
) -> list[DecompositionOutcome]:
    """Partition every community in the order supplied."""
    outcomes: list[DecompositionOutcome] = []
    for community, matrix in matrices.items():
        outcomes.extend(partition(community, matrix, width, decomposer))
    return outcomes


def variability_table(
    long: pd.DataFrame,
    value: str,
    width: int | None = None,
    key: Sequence[str] = SAMPLE_KEY,
    taxa: Iterable[str] | None = None,
    decomposer: Decomposer = decompose_variability,
) -> pd.DataFrame:
    """Long table in, labelled variability results out.

    Pivots ``long`` on ``value``, splits the matrix by community and
    partitions each one (whole record when ``width`` is None, otherwise
    rolling windows of ``width`` years).
    """
    wide = pivot_species(long, value, key=key, taxa=taxa)
    matrices = community_matrices(wide, key=key)
    return outcomes_to_frame(partition_communities(matrices, width, decomposer))
