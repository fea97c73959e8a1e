"""Reshaping, diversity and variability partitioning of survey tables.

Each module is a set of pure functions over pandas frames built from the
canonical long table. This is the domain logic layer.

Dependency rule: analysis/ imports from datasources/ constants only.
It never reads or writes files and carries no Prefect decorators.

Modules:
  - pivot: long table -> sample-by-taxon species matrix (and back), with a
    per-dataset fallback for a biomass column a dataset never measured
  - subset: species matrices restricted to one taxon-metadata group
  - diversity: richness, Shannon, evenness, Simpson, total biomass
  - decomposition: CV decomposition backend and its outcome type
  - partition: whole-record and rolling-window variability partitioning
  - labels: results table assembly and community-name parsing

Adding an analysis module
-------------------------
1. Create ``analysis/{name}.py`` with a pure function::

       from fish_stability.datasources.surveys.client import SAMPLE_KEY

       def summarize_something(wide: pd.DataFrame, key=SAMPLE_KEY) -> pd.DataFrame:
           ...

2. Rules:
   - Take and return DataFrames or dataclasses.
   - No I/O, no Prefect decorators.
   - Raise on malformed input; record per-community problems on the result.

3. Wire into the pipeline (see ``flows/analyze.py``):
   - Call your function after loading the cleaned table from the store.
   - Write its output with ``store.write_table``.

4. Re-export in ``__init__.py`` and add tests in ``tests/test_{name}.py``.
"""

from fish_stability.analysis.decomposition import (
    METRIC_NAMES,
    DecompositionOutcome,
    decompose_variability,
)
from fish_stability.analysis.diversity import diversity_indices
from fish_stability.analysis.labels import CommunityLabel, outcomes_to_frame, parse_community_name
from fish_stability.analysis.partition import (
    community_matrices,
    partition,
    partition_communities,
    partition_community,
    partition_rolling,
    rolling_windows,
    run_decomposition,
    variability_table,
)
from fish_stability.analysis.pivot import (
    fill_value_column,
    melt_species,
    pivot_species,
    sample_key,
    taxon_columns,
)
from fish_stability.analysis.subset import subset_all_values, subset_by_attribute

__all__ = [
    "METRIC_NAMES",
    "CommunityLabel",
    "DecompositionOutcome",
    "community_matrices",
    "decompose_variability",
    "diversity_indices",
    "fill_value_column",
    "melt_species",
    "outcomes_to_frame",
    "parse_community_name",
    "partition",
    "partition_communities",
    "partition_community",
    "partition_rolling",
    "pivot_species",
    "rolling_windows",
    "run_decomposition",
    "sample_key",
    "subset_all_values",
    "subset_by_attribute",
    "taxon_columns",
    "variability_table",
]
