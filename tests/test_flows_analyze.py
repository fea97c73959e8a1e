"""
Tests for the analyze flow module.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path  # noqa: TC003

import pandas as pd
import pytest

from fish_stability.analysis.labels import RESULT_COLUMNS
from fish_stability.config import Settings
from fish_stability.datasources.surveys import (
    LONG_COLUMNS,
    MCR_FISH,
    SAMPLE_KEY,
    normalize_survey,
    taxon_table_from_survey,
)
from fish_stability.flows import analyze
from fish_stability.store import DataStore


@pytest.fixture
def store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> DataStore:
    ds = DataStore(tmp_path / "data")
    monkeypatch.setattr(analyze, "store", ds)
    return ds


@pytest.fixture
def cleaned(store: DataStore, make_long: Callable[..., pd.DataFrame]) -> pd.DataFrame:
    """Seven years at one MCR plot and three years at another, written as the combined table."""
    rows = []
    for i, year in enumerate(range(2006, 2013)):
        rows.append(("1_Backreef", year, "Chromis viridis", 2.0 + i))
        rows.append(("1_Backreef", year, "Zebrasoma scopas", 9.0 - i % 3))
        rows.append(("1_Backreef", year, "Scarus psittacus", 4.0 + (i * 7) % 5))
    for year in range(2010, 2013):
        rows.append(("2_Forereef", year, "Chromis viridis", 1.0 + year % 2))
    long = make_long(rows).reindex(columns=LONG_COLUMNS)
    store.write_table(analyze.COMBINED_PATH, long, source="test")
    return long


@pytest.fixture
def taxa_file(tmp_path: Path) -> Path:
    path = tmp_path / "taxa.csv"
    pd.DataFrame(
        {
            "Taxonomy": ["Chromis viridis", "Zebrasoma scopas", "Scarus psittacus"],
            "Coarse_Trophic": ["Planktivore", "Primary Consumer", "Primary Consumer"],
        }
    ).to_csv(path, index=False)
    return path


@pytest.fixture
def default_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    for name in ("VALUE_COLUMN", "WINDOW_WIDTHS", "SUBSET_COLUMN"):
        monkeypatch.delenv(f"FISH_STABILITY_{name}", raising=False)
    settings = Settings(_env_file=None)
    monkeypatch.setattr(analyze, "get_settings", lambda: settings)
    return settings


@pytest.fixture
def mcr_cleaned(store: DataStore) -> pd.DataFrame:
    """A seven-year MCR extract run through the normalizer, with its taxon table."""
    n = 7
    raw = pd.DataFrame(
        {
            "Year": [year for year in range(2006, 2006 + n) for _ in range(2)],
            "Date": [f"{year}-04-10" for year in range(2006, 2006 + n) for _ in range(2)],
            "Site": "LTER 1",
            "Habitat": "Backreef",
            "Transect": 1,
            "Taxonomy": ["Chromis viridis", "Scarus psittacus"] * n,
            "Biomass": [v for i in range(n) for v in (2.0 + i, 9.0 - i % 3)],
            "Family": ["Pomacentridae", "Scaridae"] * n,
            "Fine_Trophic": ["Planktivore", "Herbivore"] * n,
            "Coarse_Trophic": ["Planktivore", "Primary Consumer"] * n,
        }
    )
    long = normalize_survey(raw, MCR_FISH)
    store.write_table(analyze.COMBINED_PATH, long, source="test")
    store.write_table(
        Path("cleaned/mcr_taxa.csv"), taxon_table_from_survey(raw, MCR_FISH), source="test"
    )
    return long


class TestPaths:
    """Test derived-table path helpers."""

    def test_rolling_path(self) -> None:
        assert str(analyze.rolling_path(5)) == "derived/variability_rolling_5yr.csv"

    def test_subset_path_sanitized(self) -> None:
        path = analyze.subset_path("Coarse_Trophic", "Primary Consumer")
        assert str(path) == "derived/subsets/Coarse_Trophic/Primary_Consumer.csv"


class TestAnalyzeTasks:
    """Test the individual tasks."""

    def test_load_cleaned_missing(self, store: DataStore) -> None:
        assert analyze.load_cleaned() is None

    def test_load_cleaned_keeps_types(self, cleaned: pd.DataFrame) -> None:
        long = analyze.load_cleaned()
        assert long is not None
        assert long["site"].tolist()[0] == "1"
        assert long["year"].dtype.kind == "i"

    def test_load_taxa_from_file(self, taxa_file: Path) -> None:
        taxa = analyze.load_taxa(taxa_file, taxon_column="Taxonomy")
        assert taxa is not None
        assert taxa["taxon"].tolist()[0] == "Chromis viridis"

    def test_load_taxa_from_cleaned_tables(self, store: DataStore) -> None:
        store.write_table(
            Path("cleaned/mcr_taxa.csv"),
            pd.DataFrame({"taxon": ["A", "A"], "Coarse_Trophic": ["Planktivore", "Other"]}),
            source="test",
        )
        taxa = analyze.load_taxa()
        assert taxa is not None
        assert taxa["Coarse_Trophic"].tolist() == ["Planktivore"]

    def test_load_taxa_none(self, store: DataStore) -> None:
        assert analyze.load_taxa() is None

    def test_build_species_matrix(self, cleaned: pd.DataFrame) -> None:
        wide = analyze.build_species_matrix(cleaned, "wet_biomass")
        assert list(wide.columns[: len(SAMPLE_KEY)]) == SAMPLE_KEY
        assert len(wide) == 10


class TestAnalyzeAll:
    """Test the analyze flow end to end."""

    def test_no_data(self, store: DataStore) -> None:
        result = analyze.analyze_all(value_column="wet_biomass", window_widths=[5])
        assert result == {"error": "no data"}

    def test_writes_derived_tables(
        self, store: DataStore, cleaned: pd.DataFrame, taxa_file: Path
    ) -> None:
        # Taxon column already renamed in a standalone metadata file
        pd.read_csv(taxa_file).rename(columns={"Taxonomy": "taxon"}).to_csv(taxa_file, index=False)

        result = analyze.analyze_all(
            value_column="wet_biomass",
            window_widths=[5],
            taxa_file=taxa_file,
            subset_column="Coarse_Trophic",
        )

        assert result["samples"] == 10
        assert result["communities"] == 2
        assert result["rolling_5yr_windows"] == 3
        assert result["subsets"] == ["Planktivore", "Primary Consumer"]

        diversity = store.read_table(analyze.DIVERSITY_PATH)
        assert diversity is not None
        assert len(diversity) == 10

        all_years = store.read_table(analyze.ALL_YEARS_PATH)
        assert all_years is not None
        assert list(all_years.columns) == RESULT_COLUMNS
        assert all_years["community"].tolist() == ["MCR_1_Backreef", "MCR_2_Forereef"]
        # Only one taxon at the forereef plot
        assert all_years["failed"].tolist() == [False, True]
        assert result["all_years_failed"] == 1

        rolling = store.read_table(analyze.rolling_path(5))
        assert rolling is not None
        assert rolling["window_start"].tolist() == [2006, 2007, 2008]

        planktivores = store.read_table(analyze.subset_path("Coarse_Trophic", "Planktivore"))
        assert planktivores is not None
        assert len(planktivores) == 10
        assert (planktivores["Zebrasoma scopas"] == 0.0).all()

        meta = store.read_meta(analyze.rolling_path(5))
        assert meta["window_width"] == 5
        assert meta["value_column"] == "wet_biomass"

    def test_empty_rolling_table(self, store: DataStore, cleaned: pd.DataFrame) -> None:
        result = analyze.analyze_all(value_column="wet_biomass", window_widths=[20])
        assert result["rolling_20yr_windows"] == 0
        rolling = store.read_table(analyze.rolling_path(20))
        assert rolling is not None
        assert list(rolling.columns) == RESULT_COLUMNS

    def test_missing_subset_column_skipped(
        self, store: DataStore, cleaned: pd.DataFrame, taxa_file: Path
    ) -> None:
        pd.read_csv(taxa_file).rename(columns={"Taxonomy": "taxon"}).to_csv(taxa_file, index=False)
        result = analyze.analyze_all(
            value_column="wet_biomass",
            window_widths=[],
            taxa_file=taxa_file,
            subset_column="Family",
        )
        assert result["subsets"] == []

    def test_no_taxa_records_empty_subsets(self, store: DataStore, cleaned: pd.DataFrame) -> None:
        result = analyze.analyze_all(value_column="wet_biomass", window_widths=[])
        assert result["subsets"] == []

    def test_defaults_keep_wet_only_dataset(
        self, store: DataStore, mcr_cleaned: pd.DataFrame, default_settings: Settings
    ) -> None:
        assert mcr_cleaned["dry_biomass"].isna().all()

        result = analyze.analyze_all(window_widths=[5])

        assert result["value_column"] == default_settings.value_column == "dry_biomass"
        assert result["value_columns"] == {"MCR": "wet_biomass"}
        assert result["samples"] == 7
        assert result["samples_dropped"] == 0
        assert result["communities"] == 1
        assert result["rolling_5yr_windows"] == 3
        assert result["subsets"] == ["Planktivore", "Primary Consumer"]

        meta = store.read_meta(analyze.SPECIES_MATRIX_PATH)
        assert meta["value_columns"] == {"MCR": "wet_biomass"}

        planktivores = store.read_table(analyze.subset_path("Coarse_Trophic", "Planktivore"))
        assert planktivores is not None
        assert planktivores["Chromis viridis"].tolist() == [2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]
        assert (planktivores["Scarus psittacus"] == 0.0).all()

    def test_subsets_match_species_matrix_samples(
        self, store: DataStore, cleaned: pd.DataFrame, taxa_file: Path
    ) -> None:
        # A surveyed sample whose only record has no wet biomass
        unmeasured = cleaned.iloc[[0]].assign(year=2013, wet_biomass=float("nan"))
        long = pd.concat([cleaned, unmeasured], ignore_index=True)
        store.write_table(analyze.COMBINED_PATH, long, source="test")
        pd.read_csv(taxa_file).rename(columns={"Taxonomy": "taxon"}).to_csv(taxa_file, index=False)

        result = analyze.analyze_all(
            value_column="wet_biomass",
            window_widths=[],
            taxa_file=taxa_file,
            subset_column="Coarse_Trophic",
        )

        assert result["samples"] == 10
        assert result["samples_dropped"] == 1
        wide = store.read_table(analyze.SPECIES_MATRIX_PATH)
        planktivores = store.read_table(analyze.subset_path("Coarse_Trophic", "Planktivore"))
        assert wide is not None
        assert planktivores is not None
        assert 2013 not in planktivores["year"].tolist()
        assert planktivores["year"].tolist() == wide["year"].tolist()
        assert list(planktivores.columns) == list(wide.columns)
