"""Survey site names and habitat categories."""

from __future__ import annotations

# (dataset, site id) -> display name
SITE_NAMES: dict[tuple[str, str], str] = {
    ("SBC", "ABUR"): "Arroyo Burro",
    ("SBC", "AHND"): "Arroyo Hondo",
    ("SBC", "AQUE"): "Arroyo Quemado",
    ("SBC", "BULL"): "Bulito",
    ("SBC", "CARP"): "Carpinteria",
    ("SBC", "GOLB"): "Goleta Bay",
    ("SBC", "IVEE"): "Isla Vista",
    ("SBC", "MOHK"): "Mohawk",
    ("SBC", "NAPL"): "Naples",
    ("SBC", "SCDI"): "Santa Cruz Island, Diablo",
    ("SBC", "SCTW"): "Santa Cruz Island, Twin Harbor West",
    ("MCR", "1"): "LTER 1",
    ("MCR", "2"): "LTER 2",
    ("MCR", "3"): "LTER 3",
    ("MCR", "4"): "LTER 4",
    ("MCR", "5"): "LTER 5",
    ("MCR", "6"): "LTER 6",
}

# Habitat categories per dataset. SBC transects are all rocky reef.
HABITATS: dict[str, tuple[str, ...]] = {
    "SBC": ("Reef",),
    "MCR": ("Fringing", "Backreef", "Forereef"),
}


def site_label(dataset: str, site: str) -> str:
    """Human-readable site name, falling back to the raw site id."""
    return SITE_NAMES.get((dataset, site), site)
