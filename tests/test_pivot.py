"""Tests for the long <-> species matrix reshaping."""

from __future__ import annotations

from collections.abc import Callable

import pandas as pd
import pytest

from fish_stability.analysis import (
    fill_value_column,
    melt_species,
    pivot_species,
    sample_key,
    taxon_columns,
)
from fish_stability.datasources.surveys import SAMPLE_KEY
from fish_stability.errors import SchemaError


class TestSampleKey:
    """Test distinct sample extraction."""

    def test_distinct_sorted(self, survey_long: pd.DataFrame) -> None:
        key = sample_key(survey_long)
        assert list(key.columns) == SAMPLE_KEY
        assert key["year"].tolist() == [2010, 2011, 2012]


class TestPivotSpecies:
    """Test pivoting to a sample-by-taxon matrix."""

    def test_one_row_per_sample(self, survey_long: pd.DataFrame) -> None:
        wide = pivot_species(survey_long, "wet_biomass")
        assert len(wide) == 3
        assert list(wide.columns) == [*SAMPLE_KEY, "A", "B", "C"]

    def test_replicates_are_averaged(self, survey_long: pd.DataFrame) -> None:
        wide = pivot_species(survey_long, "wet_biomass")
        row = wide[wide["year"] == 2010].iloc[0]
        assert row["B"] == 5.0
        assert row["A"] == 10.0

    def test_absent_taxa_are_zero(self, survey_long: pd.DataFrame) -> None:
        wide = pivot_species(survey_long, "wet_biomass")
        row = wide[wide["year"] == 2011].iloc[0]
        assert row["B"] == 0.0
        assert row["C"] == 0.0

    def test_matches_groupby_mean(self, survey_long: pd.DataFrame) -> None:
        """Melting the matrix back recovers the per-sample mean of every recorded taxon."""
        wide = pivot_species(survey_long, "wet_biomass")
        melted = melt_species(wide, value="wet_biomass")
        expected = (
            survey_long.groupby([*SAMPLE_KEY, "taxon"])["wet_biomass"].mean().reset_index()
        )
        merged = expected.merge(melted, on=[*SAMPLE_KEY, "taxon"], suffixes=("", "_wide"))
        assert len(merged) == len(expected)
        assert (merged["wet_biomass"] == merged["wet_biomass_wide"]).all()

    def test_reference_taxa_get_columns(self, survey_long: pd.DataFrame) -> None:
        wide = pivot_species(survey_long, "wet_biomass", taxa=["A", "Z"])
        assert taxon_columns(wide) == ["A", "B", "C", "Z"]
        assert (wide["Z"] == 0.0).all()

    def test_missing_values_ignored(self, make_long: Callable[..., pd.DataFrame]) -> None:
        long = make_long(
            [("ABUR_Reef", 2010, "A", 2.0), ("ABUR_Reef", 2010, "B", 1.0)], dataset="SBC"
        )
        long.loc[1, "dry_biomass"] = float("nan")
        wide = pivot_species(long, "dry_biomass")
        assert taxon_columns(wide) == ["A"]

    def test_empty_input_keeps_reference_columns(self, survey_long: pd.DataFrame) -> None:
        wide = pivot_species(survey_long.iloc[0:0], "wet_biomass", taxa=["B", "A"])
        assert wide.empty
        assert list(wide.columns) == [*SAMPLE_KEY, "A", "B"]

    def test_separate_plots(self, make_long: Callable[..., pd.DataFrame]) -> None:
        long = make_long([("1_Backreef", 2010, "A", 2.0), ("2_Forereef", 2010, "A", 3.0)])
        wide = pivot_species(long, "wet_biomass")
        assert wide["plot"].tolist() == ["MCR_1_Backreef", "MCR_2_Forereef"]


class TestFillValueColumn:
    """Test the per-dataset fallback for an unmeasured value column."""

    def test_unmeasured_dataset_falls_back(self, survey_long: pd.DataFrame) -> None:
        filled, used = fill_value_column(survey_long, "dry_biomass")
        assert used == {"MCR": "wet_biomass"}
        assert filled["dry_biomass"].tolist() == survey_long["wet_biomass"].tolist()
        assert survey_long["dry_biomass"].isna().all()

    def test_measured_dataset_keeps_its_values(
        self, make_long: Callable[..., pd.DataFrame]
    ) -> None:
        sbc = make_long([("ABUR_Reef", 2010, "A", 8.0), ("ABUR_Reef", 2010, "B", 4.0)], "SBC")
        sbc.loc[1, "dry_biomass"] = float("nan")
        mcr = make_long([("1_Backreef", 2010, "A", 3.0)])
        long = pd.concat([sbc, mcr], ignore_index=True)

        filled, used = fill_value_column(long, "dry_biomass")

        assert used == {"MCR": "wet_biomass", "SBC": "dry_biomass"}
        assert filled.loc[0, "dry_biomass"] == 2.0
        assert pd.isna(filled.loc[1, "dry_biomass"])
        assert filled.loc[2, "dry_biomass"] == 3.0

    def test_all_samples_survive_pivot(self, survey_long: pd.DataFrame) -> None:
        filled, _ = fill_value_column(survey_long, "dry_biomass")
        wide = pivot_species(filled, "dry_biomass")
        assert len(wide) == len(sample_key(survey_long))

    def test_missing_column(self, survey_long: pd.DataFrame) -> None:
        with pytest.raises(SchemaError, match="length_mm"):
            fill_value_column(survey_long, "length_mm")

    def test_no_measured_column(self, survey_long: pd.DataFrame) -> None:
        survey_long["wet_biomass"] = float("nan")
        with pytest.raises(SchemaError, match="MCR"):
            fill_value_column(survey_long, "dry_biomass")


class TestMeltSpecies:
    """Test melting a matrix back to long form."""

    def test_drop_zeros(self, survey_long: pd.DataFrame) -> None:
        wide = pivot_species(survey_long, "wet_biomass")
        melted = melt_species(wide, value="wet_biomass", drop_zeros=True)
        assert len(melted) == 3
        assert set(melted["taxon"]) == {"A", "B"}
