"""Tests for the cleaning transforms and the DataCleaner chain."""

import pandas as pd
import pytest

from phone_tlbx.data import CleaningConfig, DataCleaner, PhoneCol
from phone_tlbx.data.cleaning import (
    coerce_categorical,
    deduplicate,
    filter_placeholders,
    merge_levels,
    rescale_memory,
)
from phone_tlbx.errors import DataError


def test_rescale_memory_multiplies_fractional_values() -> None:
    """Values below 1 are fractional TB encodings and become GB."""
    df = pd.DataFrame({"memory": [0.004, 0.128, 4, 64]})

    out = rescale_memory(df)

    assert out["memory"].tolist() == [4.0, 128.0, 4.0, 64.0]
    assert df["memory"].tolist() == [0.004, 0.128, 4, 64]


def test_filter_placeholders_drops_non_positive_rows() -> None:
    """Rows with zero in any positive-only column are removed."""
    df = pd.DataFrame({"core": [0, 4, 8], "memory": [16, 0, 32]})

    out = filter_placeholders(df, ("core", "memory"))

    assert out.index.tolist() == [2]


def test_coerce_categorical_uses_sorted_integer_levels() -> None:
    """Observed levels become the sorted category set, as plain ints."""
    df = pd.DataFrame({"core": [8.0, 2.0, 4.0, 8.0]})

    out = coerce_categorical(df, ("core",))

    assert isinstance(out["core"].dtype, pd.CategoricalDtype)
    assert out["core"].cat.categories.tolist() == [2, 4, 8]
    assert not out["core"].cat.ordered


def test_merge_levels_folds_level_and_drops_it_from_categories() -> None:
    """The merged-away level disappears from both values and categories."""
    df = coerce_categorical(pd.DataFrame({"core": [2, 6, 8, 6]}), ("core",))

    out = merge_levels(df, {"core": {6: 8}})

    assert out["core"].tolist() == [2, 8, 8, 8]
    assert out["core"].cat.categories.tolist() == [2, 8]


def test_merge_levels_requires_categorical_column() -> None:
    """Merging on a plain numeric column is a data error."""
    with pytest.raises(DataError, match="non-categorical"):
        merge_levels(pd.DataFrame({"core": [2, 6]}), {"core": {6: 8}})


def test_deduplicate_keeps_first_occurrence() -> None:
    df = pd.DataFrame({"a": [1, 1, 2], "b": [3, 3, 4]})

    assert deduplicate(df).index.tolist() == [0, 2]


def test_clean_postconditions(raw_dataset) -> None:
    """Cleaned data satisfies every post-cleaning invariant."""
    cleaned = DataCleaner().clean(raw_dataset.df)

    for col in CleaningConfig().drop_columns:
        assert col not in cleaned.columns
    assert (cleaned[PhoneCol.MEMORY].astype(float) >= 1).all()
    assert (cleaned[PhoneCol.CORE].astype(float) > 0).all()
    assert 6 not in cleaned[PhoneCol.CORE].cat.categories
    assert 6 not in set(cleaned[PhoneCol.CORE])
    assert not cleaned.duplicated().any()
    assert len(cleaned) < len(raw_dataset.df)


def test_clean_rescales_fractional_memory_into_existing_levels(raw_dataset) -> None:
    """Fractional memory values land on the same GB levels as the rest."""
    cleaned = DataCleaner().clean(raw_dataset.df)

    assert cleaned[PhoneCol.MEMORY].cat.categories.tolist() == [4, 8, 16, 32, 64]


def test_clean_is_idempotent(raw_dataset) -> None:
    """Cleaning already cleaned data returns the same frame."""
    cleaner = DataCleaner()
    once = cleaner.clean(raw_dataset.df)
    twice = cleaner.clean(once)

    pd.testing.assert_frame_equal(once, twice)


def test_clean_does_not_mutate_input(raw_dataset) -> None:
    before = raw_dataset.df.copy()

    DataCleaner().clean(raw_dataset.df)

    pd.testing.assert_frame_equal(raw_dataset.df, before)


def test_clean_rejects_missing_columns(raw_dataset) -> None:
    """A raw frame without a required column fails with a named error."""
    with pytest.raises(DataError, match="missing required columns"):
        DataCleaner().clean(raw_dataset.df.drop(columns=[PhoneCol.MEMORY]))


def test_clean_rejects_empty_input(raw_dataset) -> None:
    with pytest.raises(DataError, match="empty"):
        DataCleaner().clean(raw_dataset.df.iloc[0:0])


def test_clean_reports_step_that_emptied_data(raw_dataset) -> None:
    """All-placeholder data is reported against the filter step."""
    raw = raw_dataset.df.assign(**{PhoneCol.CORE: 0})

    with pytest.raises(DataError, match="filter_placeholders"):
        DataCleaner().clean(raw)


def test_custom_config_skips_level_merge(raw_dataset) -> None:
    """Disabling merges keeps the sparse core level."""
    cleaned = DataCleaner(CleaningConfig(level_merges={})).clean(raw_dataset.df)

    assert 6 in cleaned[PhoneCol.CORE].cat.categories
