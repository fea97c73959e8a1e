"""LTER fish stability - community variability of reef fish surveys.

Architecture::

    datasources/   Raw survey schemas, normalizer, taxon metadata (SBC, MCR)
    store.py       Tiered table store with sidecar metadata (raw → cleaned → derived)
    analysis/      Pivots, taxon subsets, diversity, CV partitioning
    flows/         Prefect orchestration (clean normalizes raw extracts, analyze builds tables)
    reference/     Static site and habitat constants

Data flow: raw CSV → datasources (normalize) → store/cleaned → analysis → store/derived

Extension points (see each package's docstring for step-by-step guides):
  - New survey dataset:  datasources/__init__.py
  - New analysis:        analysis/__init__.py
"""

__version__ = "0.1.0"

from fish_stability.config import Settings
from fish_stability.schemas import SurveySchema

__all__ = ["Settings", "SurveySchema", "__version__"]
