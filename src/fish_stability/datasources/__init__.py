"""Upstream survey data sources.

Each subdirectory is one family of upstream extracts with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # Column contracts, sentinels, canonical schema
    └── {feature}.py      # Normalization and metadata functions

Adding a new survey dataset
---------------------------
1. Describe its extract with a ``SurveySchema`` in ``surveys/client.py``
   (verbatim column names, missing-value sentinel, year cutoff) and add it
   to ``SCHEMAS``.

2. ``normalize_survey(raw, schema)`` maps it to the canonical long table;
   no new code is needed unless the extract has an unusual date or site
   encoding.

3. Add its site names to ``reference/sites.py``.

4. Add tests in ``tests/test_normalize.py`` with a few hand-written rows
   in the upstream column layout.
"""
