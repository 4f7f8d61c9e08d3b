"""OLS model fitting on tagged covariate sets.

Builds a treatment-coded design matrix from a :class:`ModelView` and a
:class:`CovariateSet`, hands the least-squares solve to statsmodels, and
packages the result as an immutable :class:`FittedModel`. Continuous covariates
enter as one column each; a categorical covariate with levels :math:`L`
contributes :math:`|L| - 1` indicator columns against its reference level.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from patsy import EvalFactor, dmatrices
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_absolute_error, mean_squared_error
from sklearn.model_selection import KFold, cross_val_score

from phone_tlbx.data.covariates import CategoricalCovariate, CovariateSet, resolve_covariates
from phone_tlbx.data.views import ModelView
from phone_tlbx.errors import DataError, RankDeficiencyError


logger = logging.getLogger(__name__)

INTERCEPT = "Intercept"
_COEF_INDEX_NAMES = ["covariate", "level"]


@dataclass(frozen=True)
class MetricsResult:
    r"""Fit and generalization metrics for OLS models.

    Key equations (with :math:`n` observations and :math:`k` regressors
    besides the intercept):

    - :math:`R^2 = 1 - \frac{SS_{res}}{SS_{tot}}`
    - :math:`\bar{R}^2 = 1 - (1 - R^2)\frac{n-1}{n-k-1}`
    - :math:`\text{RMSE} = \sqrt{\frac{1}{n}\sum_i (y_i - \hat{y}_i)^2}`
    - :math:`\text{AIC} = 2(k+1) - 2\log L`, :math:`\text{BIC} = (k+1)\log n - 2\log L`

    Information criteria are only comparable across models fit to the same
    response on the same rows (lower is better).
    """

    r2: float
    adj_r2: float
    rmse: float
    """Root mean squared in-sample error (price units)."""
    mae: float
    aic: float
    bic: float
    loglik: float
    n_obs: int
    cv_scores: list[float] | None = None
    """Raw cross-validation RMSE scores (if enabled)."""
    cv_rmse: float | None = None

    def __repr__(self) -> str:
        def fmt(value: float | None, decimals: int = 3) -> str:
            if value is None:
                return "nan"
            return f"{value:.{decimals}f}"

        fit_block = (
            "Fit["
            f"r2={fmt(self.r2, 4)}, "
            f"adj_r2={fmt(self.adj_r2, 4)}, "
            f"rmse={fmt(self.rmse)}, "
            f"mae={fmt(self.mae)}, "
            f"aic={fmt(self.aic)}, "
            f"bic={fmt(self.bic)}"
            "]"
        )
        cv_block = ""
        if self.cv_scores is not None:
            cv_block = f" CV[rmse={fmt(self.cv_rmse)}, folds={len(self.cv_scores)}]"
        return f"MetricsResult({fit_block}{cv_block} n={self.n_obs})"


@dataclass(frozen=True)
class FittedModel:
    """Immutable OLS fit of the response on one covariate set.

    The coefficient table is indexed by ``(covariate, level)``; ``level`` is
    the empty string for the intercept and continuous covariates, and the
    non-reference level for categorical indicators.

    The frame and series fields are shared with the selection path and the
    diagnostics, so treat them as read-only; ``params``, ``p_values`` and
    ``significant`` hand out copies.
    """

    covariates: CovariateSet
    coefficients: pd.DataFrame
    """Columns ``coef``, ``std_err``, ``t``, ``p_value``, ``ci_lower``, ``ci_upper``."""
    design_matrix: pd.DataFrame
    term_columns: Mapping[str, tuple[str, ...]]
    """Design-matrix columns contributed by each covariate."""
    y: pd.Series
    fitted: pd.Series
    residuals: pd.Series
    metrics: MetricsResult
    model: sm.regression.linear_model.RegressionResultsWrapper

    @property
    def n_obs(self) -> int:
        return self.metrics.n_obs

    @property
    def n_params(self) -> int:
        """Number of estimated coefficients, intercept included."""
        return self.design_matrix.shape[1]

    @property
    def df_resid(self) -> int:
        return self.n_obs - self.n_params

    @property
    def rss(self) -> float:
        """Residual sum of squares."""
        return float(np.sum(self.residuals.to_numpy() ** 2))

    @property
    def mse_resid(self) -> float:
        """Unbiased residual variance estimate ``RSS / (n - p)``."""
        return self.rss / self.df_resid

    @property
    def r2(self) -> float:
        return self.metrics.r2

    @property
    def adj_r2(self) -> float:
        return self.metrics.adj_r2

    @property
    def aic(self) -> float:
        return self.metrics.aic

    @property
    def bic(self) -> float:
        return self.metrics.bic

    @property
    def params(self) -> pd.Series:
        """Copy of the coefficient estimates."""
        return self.coefficients["coef"].copy()

    @property
    def p_values(self) -> pd.Series:
        return self.coefficients["p_value"].copy()

    def score(self, criterion: str) -> float:
        """Information-criterion value used by model selection (lower is better)."""
        if criterion == "aic":
            return self.aic
        if criterion == "bic":
            return self.bic
        raise ValueError(f"Unsupported criterion '{criterion}'.")

    def significant(self, alpha: float = 0.05) -> pd.DataFrame:
        """Coefficients whose two-sided p-value is below ``alpha``."""
        return self.coefficients.loc[self.coefficients["p_value"] < alpha].copy()

    def print_summary(self) -> None:
        """Print the statsmodels summary to stdout."""
        print(self.model.summary())


def build_design_matrix(
    view: ModelView,
    covariates: CovariateSet,
) -> tuple[pd.Series, pd.DataFrame, dict[str, tuple[str, ...]], list[tuple[str, object]]]:
    """Build the response vector and treatment-coded design matrix.

    Returns:
        ``(y, X, term_columns, coef_keys)`` where ``coef_keys`` holds the
        ``(covariate, level)`` key of every column of ``X``.

    Raises:
        DataError: If a categorical-tagged column lacks a categorical dtype.
    """
    specs = resolve_covariates(list(covariates), view.covariates)
    for spec in specs:
        if isinstance(spec, CategoricalCovariate) and not isinstance(view.df[spec.name].dtype, pd.CategoricalDtype):
            dtype = view.df[spec.name].dtype
            raise DataError(f"fit: covariate '{spec.name}' is tagged categorical but has dtype {dtype}")

    rhs = " + ".join(spec.term() for spec in specs) if specs else "1"
    y_frame, x_frame = dmatrices(f"{view.target_col} ~ {rhs}", view.df, return_type="dataframe", NA_action="raise")
    design_info = x_frame.design_info
    # patsy groups categorical-only terms before numeric ones, so look terms up by factor
    term_by_factor = {term.factors[0]: term for term in design_info.terms if term.factors}

    blocks: list[np.ndarray] = [x_frame.iloc[:, design_info.slice(INTERCEPT)].to_numpy()]
    columns: list[str] = [INTERCEPT]
    coef_keys: list[tuple[str, object]] = [(INTERCEPT, "")]
    term_columns: dict[str, tuple[str, ...]] = {}
    for spec in specs:
        block = x_frame.iloc[:, design_info.slice(term_by_factor[EvalFactor(spec.term())])].to_numpy()
        if isinstance(spec, CategoricalCovariate):
            levels = spec.contrast_levels
            if len(levels) != block.shape[1]:
                raise DataError(f"fit: '{spec.name}' expanded to {block.shape[1]} columns, expected {len(levels)}")
            names = tuple(f"{spec.name}[T.{level}]" for level in levels)
            coef_keys.extend((spec.name, level) for level in levels)
        else:
            names = (spec.name,)
            coef_keys.append((spec.name, ""))
        blocks.append(block)
        columns.extend(names)
        term_columns[spec.name] = names

    x_matrix = pd.DataFrame(np.hstack(blocks), index=x_frame.index, columns=columns)
    y = pd.Series(y_frame.iloc[:, 0].to_numpy(), index=y_frame.index, name=view.target_col)
    return y, x_matrix, term_columns, coef_keys


def fit_model(
    view: ModelView,
    covariates: CovariateSet,
    *,
    alpha: float = 0.05,
    cv_folds: int | None = None,
    shuffle_cv: bool = False,
    random_state: int | None = None,
) -> FittedModel:
    """Fit OLS of the view's response on ``covariates``.

    Args:
        view: Frozen cleaned dataset with tagged covariates.
        covariates: Covariates to include; empty means intercept only.
        alpha: Significance level for the coefficient confidence intervals.
        cv_folds: Optional K for K-fold CV RMSE.
        shuffle_cv: Whether to shuffle during CV.
        random_state: Random seed used when shuffling CV splits.

    Raises:
        RankDeficiencyError: If the design matrix is not of full column rank.
        DataError: If there are no residual degrees of freedom.
    """
    y, x_matrix, term_columns, coef_keys = build_design_matrix(view, covariates)

    rank = int(np.linalg.matrix_rank(x_matrix.to_numpy()))
    if rank < x_matrix.shape[1]:
        raise RankDeficiencyError(covariates.names, rank, x_matrix.shape[1])
    if len(y) <= x_matrix.shape[1]:
        raise DataError(f"fit: {len(y)} observations cannot support {x_matrix.shape[1]} coefficients")

    model = sm.OLS(y, x_matrix).fit()
    logger.debug("fitted %s: aic=%.3f r2=%.4f", covariates, model.aic, model.rsquared)

    conf_int = model.conf_int(alpha=alpha)
    coefficients = pd.DataFrame(
        {
            "coef": model.params.to_numpy(),
            "std_err": model.bse.to_numpy(),
            "t": model.tvalues.to_numpy(),
            "p_value": model.pvalues.to_numpy(),
            "ci_lower": conf_int.iloc[:, 0].to_numpy(),
            "ci_upper": conf_int.iloc[:, 1].to_numpy(),
        },
        index=pd.MultiIndex.from_tuples(coef_keys, names=_COEF_INDEX_NAMES),
    )
    fitted = pd.Series(model.fittedvalues.to_numpy(), index=y.index, name="fitted")
    residuals = pd.Series(model.resid.to_numpy(), index=y.index, name="residual")

    metrics = compute_metrics(
        model=model,
        y_true=y,
        y_pred=fitted,
        design_matrix=x_matrix,
        cv_folds=cv_folds,
        shuffle_cv=shuffle_cv,
        random_state=random_state,
    )
    return FittedModel(
        covariates=covariates,
        coefficients=coefficients,
        design_matrix=x_matrix,
        term_columns=term_columns,
        y=y,
        fitted=fitted,
        residuals=residuals,
        metrics=metrics,
        model=model,
    )


def compute_cv_scores(
    design_matrix: pd.DataFrame,
    y: pd.Series,
    *,
    cv_folds: int,
    shuffle: bool = False,
    random_state: int | None = None,
) -> list[float]:
    """Compute cross-validation RMSE scores for the same linear specification."""
    # the design matrix already carries the intercept column
    lr = LinearRegression(fit_intercept=False)
    splitter = KFold(
        n_splits=cv_folds,
        shuffle=shuffle,
        random_state=(random_state if shuffle else None),
    )
    scores = cross_val_score(
        lr,
        design_matrix,
        y,
        cv=splitter,
        scoring="neg_root_mean_squared_error",
        error_score="raise",
    )
    return list(-np.asarray(scores))


def compute_metrics(
    model: sm.regression.linear_model.RegressionResultsWrapper,
    y_true: pd.Series,
    y_pred: pd.Series,
    design_matrix: pd.DataFrame,
    *,
    cv_folds: int | None = None,
    shuffle_cv: bool = False,
    random_state: int | None = None,
) -> MetricsResult:
    """Compute fit, information criteria, and optional CV scores.

    :math:`R^2` is computed directly as :math:`1 - SS_{res}/SS_{tot}`; the
    adjusted value and the information criteria come from the statsmodels fit.
    """
    resid = y_true.to_numpy() - y_pred.to_numpy()
    centered = y_true.to_numpy() - y_true.mean()
    r2 = float(1.0 - np.sum(resid**2) / np.sum(centered**2))

    cv_scores: list[float] | None = None
    cv_rmse: float | None = None
    if cv_folds and cv_folds > 1:
        cv_scores = compute_cv_scores(
            design_matrix,
            y_true,
            cv_folds=cv_folds,
            shuffle=shuffle_cv,
            random_state=random_state,
        )
        cv_rmse = float(np.mean(cv_scores))

    return MetricsResult(
        r2=r2,
        adj_r2=float(model.rsquared_adj),
        rmse=float(np.sqrt(mean_squared_error(y_true, y_pred))),
        mae=float(mean_absolute_error(y_true, y_pred)),
        aic=float(model.aic),
        bic=float(model.bic),
        loglik=float(model.llf),
        n_obs=int(model.nobs),
        cv_scores=cv_scores,
        cv_rmse=cv_rmse,
    )


def coefficient_table(model: FittedModel, pretty_by_col: Mapping[str, str] | None = None) -> pd.DataFrame:
    """Tidy coefficient table for reporting, one row per design column.

    Adds a ``term`` label such as ``CPU Cores = 4`` and a significance marker
    in the usual ``*** / ** / * / .`` notation.
    """
    pretty_by_col = pretty_by_col or {}

    def label(covariate: str, level: object) -> str:
        name = pretty_by_col.get(covariate, covariate)
        return name if level == "" else f"{name} = {level}"

    def stars(p_value: float) -> str:
        for cutoff, marker in ((0.001, "***"), (0.01, "**"), (0.05, "*"), (0.1, ".")):
            if p_value < cutoff:
                return marker
        return ""

    table = model.coefficients.reset_index()
    return table.assign(
        term=[label(cov, lvl) for cov, lvl in zip(table["covariate"], table["level"], strict=True)],
        signif=table["p_value"].map(stars),
    )[["term", "covariate", "level", "coef", "std_err", "t", "p_value", "signif", "ci_lower", "ci_upper"]]
