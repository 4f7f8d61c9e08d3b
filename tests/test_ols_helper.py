"""Tests for design-matrix construction and OLS fitting."""

import numpy as np
import pandas as pd
import pytest

from phone_tlbx.analysis.ols_helper import INTERCEPT, build_design_matrix, coefficient_table, fit_model
from phone_tlbx.data import ContinuousCovariate, CovariateSet, PhoneDataset
from phone_tlbx.data.views import ModelView
from phone_tlbx.errors import DataError, RankDeficiencyError


def test_design_matrix_treatment_coding(phone_view) -> None:
    """Categoricals expand to one indicator per non-reference level, in set order."""
    covs = CovariateSet.of(["ppi", "core", "freq"])

    y, x, term_columns, coef_keys = build_design_matrix(phone_view, covs)

    assert x.columns.tolist() == [INTERCEPT, "ppi", "core[T.4]", "core[T.8]", "freq"]
    assert term_columns["core"] == ("core[T.4]", "core[T.8]")
    assert coef_keys[2] == ("core", 4)
    assert len(y) == len(x) == phone_view.n_obs
    expected = (phone_view.df["core"] == 4).astype(float).to_numpy()
    np.testing.assert_array_equal(x["core[T.4]"].to_numpy(), expected)


def test_design_matrix_respects_reference_level(cleaned_dataset) -> None:
    view = cleaned_dataset.model_view(columns=["core"], reference_levels={"core": 8})

    _, x, _, _ = build_design_matrix(view, view.all_covariates())

    assert x.columns.tolist() == [INTERCEPT, "core[T.2]", "core[T.4]"]


def test_fit_model_matches_direct_statsmodels(phone_view) -> None:
    """Coefficients and criteria agree with a plain statsmodels fit."""
    import statsmodels.api as sm

    covs = CovariateSet.of(["ppi", "freq"])
    model = fit_model(phone_view, covs)

    direct = sm.OLS(phone_view.y, sm.add_constant(phone_view.df[["ppi", "freq"]])).fit()
    np.testing.assert_allclose(model.params.to_numpy(), direct.params.to_numpy(), rtol=1e-8)
    assert model.aic == pytest.approx(direct.aic)
    assert model.r2 == pytest.approx(direct.rsquared)
    assert model.n_params == 3
    assert model.df_resid == phone_view.n_obs - 3


def test_intercept_only_model(phone_view) -> None:
    """The empty set fits the mean."""
    model = fit_model(phone_view, CovariateSet())

    assert model.n_params == 1
    assert model.params.iloc[0] == pytest.approx(phone_view.y.mean())
    assert model.r2 == pytest.approx(0.0, abs=1e-12)


def test_adjusted_r2_not_above_r2(phone_view) -> None:
    model = fit_model(phone_view, phone_view.all_covariates())

    assert 0 < model.r2 < 1
    assert model.adj_r2 <= model.r2


def test_refit_is_deterministic(phone_view) -> None:
    """Fitting the same set twice gives identical results."""
    covs = CovariateSet.of(["ppi", "core", "memory"])

    first = fit_model(phone_view, covs)
    second = fit_model(phone_view, covs)

    pd.testing.assert_frame_equal(first.coefficients, second.coefficients)
    assert first.aic == second.aic


def test_rank_deficiency_from_linear_combination(collinear_view) -> None:
    with pytest.raises(RankDeficiencyError) as excinfo:
        fit_model(collinear_view, collinear_view.all_covariates())

    assert excinfo.value.rank == 3
    assert excinfo.value.n_columns == 4


def test_rank_deficiency_from_empty_level(cleaned_dataset) -> None:
    """A level with no observations yields an all-zero indicator column."""
    df = cleaned_dataset.df.assign(core=cleaned_dataset.df["core"].cat.add_categories([16]))
    view = PhoneDataset(df=df).model_view(columns=["ppi", "core"])

    with pytest.raises(RankDeficiencyError):
        fit_model(view, view.all_covariates())


def test_too_few_observations() -> None:
    """n <= p leaves no residual degrees of freedom."""
    df = pd.DataFrame({"y": [1.0, 2.0, 4.0], "x1": [1.0, 2.0, 3.0], "x2": [1.0, 0.0, 4.0]})
    view = ModelView(df=df, target_col="y", covariates={c: ContinuousCovariate(c) for c in ("x1", "x2")})

    with pytest.raises(DataError, match="cannot support"):
        fit_model(view, view.all_covariates())


def test_categorical_tag_requires_categorical_dtype(cleaned_dataset) -> None:
    view = cleaned_dataset.model_view(columns=["core"])
    broken = ModelView(
        df=view.df.assign(core=view.df["core"].astype(int)),
        target_col=view.target_col,
        covariates=view.covariates,
    )

    with pytest.raises(DataError, match="tagged categorical"):
        fit_model(broken, broken.all_covariates())


def test_unknown_covariate(phone_view) -> None:
    with pytest.raises(KeyError):
        fit_model(phone_view, CovariateSet.of(["ram"]))


def test_cv_scores_are_optional(phone_view) -> None:
    covs = CovariateSet.of(["ppi", "freq"])

    assert fit_model(phone_view, covs).metrics.cv_scores is None
    with_cv = fit_model(phone_view, covs, cv_folds=5)
    assert len(with_cv.metrics.cv_scores) == 5
    assert with_cv.metrics.cv_rmse > 0


def test_coefficient_table_labels(phone_view) -> None:
    model = fit_model(phone_view, CovariateSet.of(["ppi", "core", "freq", "memory", "thickness", "weight"]))

    table = coefficient_table(model, phone_view.pretty_by_col)

    assert table["term"].tolist()[:3] == [INTERCEPT, "Pixel Density (PPI)", "CPU Cores = 4"]
    assert table.loc[1, "covariate"] == "ppi"
    assert table.loc[1, "signif"] == "***"
    # weight has no fitted effect in the fixture
    assert table.loc[table["covariate"] == "weight", "signif"].tolist() == [""]


def test_significance_markers_follow_p_value_bands(phone_view) -> None:
    model = fit_model(phone_view, CovariateSet.of(["ppi", "core", "freq", "memory", "thickness", "weight"]))

    table = coefficient_table(model)

    for p_value, marker in zip(table["p_value"], table["signif"], strict=True):
        if p_value < 0.001:
            assert marker == "***"
        elif p_value < 0.01:
            assert marker == "**"
        elif p_value < 0.05:
            assert marker == "*"
        elif p_value < 0.1:
            assert marker == "."
        else:
            assert marker == ""


def test_accessors_return_copies(phone_view) -> None:
    """Mutating ``params`` or ``p_values`` leaves the fitted model untouched."""
    model = fit_model(phone_view, CovariateSet.of(["ppi", "core"]))
    coef_before = model.coefficients["coef"].copy()
    p_before = model.coefficients["p_value"].copy()

    params = model.params
    params.iloc[:] = 0.0
    p_values = model.p_values
    p_values.iloc[:] = 1.0
    model.significant()["coef"] = 0.0

    pd.testing.assert_series_equal(model.coefficients["coef"], coef_before)
    pd.testing.assert_series_equal(model.coefficients["p_value"], p_before)
