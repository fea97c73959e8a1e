"""Static survey constants.

Reference data that doesn't change between runs: site names and habitat
categories for the LTER programmes.

Adding a new module:
1. Create ``reference/{name}.py`` with constants/dataclasses
2. Re-export from this ``__init__.py``
"""

from fish_stability.reference.sites import HABITATS as HABITATS
from fish_stability.reference.sites import SITE_NAMES as SITE_NAMES
from fish_stability.reference.sites import site_label as site_label
