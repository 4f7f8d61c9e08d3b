"""Tests for generalized VIF scoring and iterative collinearity pruning."""

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm
from statsmodels.stats.outliers_influence import variance_inflation_factor

from phone_tlbx.analysis.collinearity import CollinearityFilter, compute_gvif, filter_collinear
from phone_tlbx.analysis.ols_helper import fit_model
from phone_tlbx.data import ContinuousCovariate, CovariateSet
from phone_tlbx.data.views import ModelView


def test_gvif_matches_classical_vif_for_continuous(cleaned_dataset) -> None:
    """With one column per covariate GVIF reduces to 1 / (1 - R_j^2)."""
    cols = ["weight", "ppi", "battery", "thickness"]
    view = cleaned_dataset.model_view(columns=cols)

    scores = compute_gvif(fit_model(view, view.all_covariates()))

    exog = sm.add_constant(view.df[cols]).to_numpy()
    expected = [variance_inflation_factor(exog, i + 1) for i in range(len(cols))]
    np.testing.assert_allclose(scores["gvif"].to_numpy(), expected, rtol=1e-6)
    np.testing.assert_allclose(scores["gvif_adj"].to_numpy(), np.sqrt(expected), rtol=1e-6)


def test_gvif_single_covariate_is_one(phone_view) -> None:
    scores = compute_gvif(fit_model(phone_view, CovariateSet.of(["memory"])))

    assert scores.loc["memory", "gvif"] == 1.0
    assert scores.loc["memory", "df"] == 4


def test_gvif_of_empty_model_is_empty(phone_view) -> None:
    assert compute_gvif(fit_model(phone_view, CovariateSet())).empty


def test_gvif_invariant_to_reference_level(cleaned_dataset) -> None:
    """Recoding a categorical against another baseline leaves every GVIF unchanged."""
    cols = ["ppi", "core", "freq", "memory"]
    default = cleaned_dataset.model_view(columns=cols)
    recoded = cleaned_dataset.model_view(columns=cols, reference_levels={"core": 8, "memory": 64})

    a = compute_gvif(fit_model(default, default.all_covariates()))
    b = compute_gvif(fit_model(recoded, recoded.all_covariates()))

    np.testing.assert_allclose(a["gvif"].to_numpy(), b["gvif"].to_numpy(), rtol=1e-6)


def test_gvif_at_least_one(phone_view) -> None:
    scores = compute_gvif(fit_model(phone_view, phone_view.all_covariates()))

    assert (scores["gvif"] >= 1 - 1e-9).all()
    assert scores.index.tolist() == list(phone_view.all_covariates())


def test_filter_removes_battery_first(phone_view) -> None:
    """Battery is nearly a combination of weight and thickness and goes first."""
    result = filter_collinear(phone_view, threshold=3.0)

    assert result.removed == ["battery"]
    assert result.history[0].removed_score > 3.0
    assert "battery" not in result.covariates
    assert len(result.covariates) == len(phone_view.covariates) - 1


def test_filter_reaches_fixed_point(phone_view) -> None:
    """Re-scoring the surviving set finds nothing above the threshold."""
    result = filter_collinear(phone_view, threshold=3.0)

    rescored = compute_gvif(fit_model(phone_view, result.covariates))
    assert (rescored["gvif"] <= 3.0).all()
    assert result.scores.equals(result.history[-1].scores)


def test_filter_records_visited_sets(phone_view) -> None:
    result = filter_collinear(phone_view, threshold=3.0)

    assert result.visited[0] == phone_view.all_covariates()
    assert result.visited[-1] == result.covariates
    table = result.summary_table()
    assert set(table["round"]) == {0, 1}
    assert table.loc[table["round"] == 0, "removed"].eq("battery").all()


def test_filter_keeps_last_covariate() -> None:
    """A single covariate is never removed, whatever its score."""
    df = pd.DataFrame({"y": [1.0, 2.0, 3.5, 4.0], "x": [0.5, 1.0, 2.0, 2.5]})
    view = ModelView(df=df, target_col="y", covariates={"x": ContinuousCovariate("x")})

    result = filter_collinear(view, threshold=1.0)

    assert result.removed == []
    assert result.covariates.names == ("x",)


def test_filter_with_adjusted_score(phone_view) -> None:
    """The per-dimension score is also accepted as the pruning statistic."""
    result = filter_collinear(phone_view, threshold=2.0, score="gvif_adj")

    assert result.removed == ["battery"]
    assert (result.scores["gvif_adj"] <= 2.0).all()


def test_filter_validates_arguments(phone_view) -> None:
    with pytest.raises(ValueError):
        CollinearityFilter(phone_view, phone_view.all_covariates(), threshold=0.5)
    with pytest.raises(ValueError):
        CollinearityFilter(phone_view, phone_view.all_covariates(), score="vif")
    with pytest.raises(ValueError, match="fit"):
        CollinearityFilter(phone_view, phone_view.all_covariates()).result()


def test_dataset_factory(cleaned_dataset) -> None:
    result = cleaned_dataset.make_collinearity_filter(threshold=3.0).fit().result()

    assert result.removed == ["battery"]
