"""Tests for the exploratory correlation analysis."""

import matplotlib.pyplot as plt
import numpy as np
import pytest

from phone_tlbx.analysis.correlation_analyzer import CorrelationAnalyzer, group_summary
from phone_tlbx.plotting import plot_correlation_heatmap, plot_price_by_level


@pytest.fixture(scope="module")
def corr_result(cleaned_dataset):
    return cleaned_dataset.make_correlation_analyzer().fit().result(top_n_pairs=5)


def test_matrix_covers_numeric_columns(corr_result, phone_view) -> None:
    """Only the target and continuous covariates enter the matrix."""
    assert corr_result.matrix.columns.tolist() == phone_view.numeric_cols
    assert "core" not in corr_result.matrix.columns
    np.testing.assert_allclose(np.diag(corr_result.matrix), 1.0)


def test_battery_weight_pair_is_strong(corr_result) -> None:
    pairs = corr_result.feature_pairs

    assert len(pairs) == 5
    assert pairs["abs_correlation"].is_monotonic_decreasing
    covariate_pairs = pairs[(pairs["feature_a"] != "price") & (pairs["feature_b"] != "price")]
    assert "battery" in set(covariate_pairs.iloc[0][["feature_a", "feature_b"]])


def test_target_correlations_exclude_target(corr_result) -> None:
    target = corr_result.target_correlations

    assert "price" not in target["feature"].tolist()
    assert target["correlation"].is_monotonic_decreasing


def test_level_summaries(corr_result, cleaned_dataset) -> None:
    summary = corr_result.level_summaries["core"]

    assert summary.index.tolist() == [2, 4, 8]
    assert summary["count"].sum() == len(cleaned_dataset.df)
    assert summary.loc[8, "mean"] > summary.loc[2, "mean"]


def test_group_summary_rejects_continuous(phone_view) -> None:
    with pytest.raises(ValueError, match="not a categorical"):
        group_summary(phone_view, "ppi")


def test_result_requires_fit(phone_view) -> None:
    with pytest.raises(ValueError, match="fit"):
        CorrelationAnalyzer(phone_view).result()


def test_correlation_plots(corr_result) -> None:
    fig = plot_correlation_heatmap(corr_result)
    assert fig.axes
    plt.close(fig)

    _, ax = plt.subplots()
    ax = plot_price_by_level(corr_result, "memory", ax=ax)
    assert ax.get_ylabel() == "Mean price"
    plt.close(ax.figure)
