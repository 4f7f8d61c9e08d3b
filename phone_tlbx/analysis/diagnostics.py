"""Goodness-of-fit and residual diagnostics for a selected model.

The helpers here only read :class:`FittedModel` artifacts. Tests are
*diagnostic* rather than definitive: small p-values indicate evidence against
the null (e.g. heteroscedasticity or non-normal residuals), but with a few
dozen observations they should be read alongside the residual plots.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy import stats
from statsmodels.stats import diagnostic as sm_diagnostic
from statsmodels.stats.stattools import durbin_watson, jarque_bera

from .ols_helper import FittedModel


_SMALL_SAMPLE_N = 10


@dataclass(frozen=True)
class AssumptionCheckResult:
    """Regression assumption diagnostics with canonical test references.

    - Independence (autocorrelation): Durbin-Watson.
    - Normality of residuals: Jarque-Bera, Shapiro-Wilk.
    - Homoscedasticity: Breusch-Pagan.
    - Conditioning and influence: condition number, leverage, Cook's distance.
    """

    durbin_watson: float
    r"""Durbin-Watson statistic in :math:`[0, 4]`; values near 2 mean no autocorrelation."""

    jarque_bera_statistic: float
    jarque_bera_pvalue: float
    """Jarque-Bera p-value for residual normality (small => non-normality)."""

    shapiro_statistic: float
    shapiro_pvalue: float
    """Shapiro-Wilk p-value for residual normality (small => non-normality)."""

    breusch_pagan_statistic: float
    breusch_pagan_pvalue: float
    """Breusch-Pagan p-value (small => heteroscedasticity)."""

    condition_number: float
    """Condition number of the design matrix (large => collinearity risk)."""

    leverage: np.ndarray
    r"""Diagonal of the hat matrix; common heuristics flag :math:`h_{ii} > 2p/n`."""

    cooks_distance: np.ndarray
    """Cook's distance per observation; heuristic flags often use ``4/n``."""

    def __repr__(self) -> str:
        alpha = 0.05

        def fmt(value: float, decimals: int = 3) -> str:
            return f"{value:.{decimals}f}"

        def decision(p_value: float) -> str:
            return "FAIL" if p_value < alpha else "OK"

        n_obs = len(self.cooks_distance)
        cooks_exceed = int(np.sum(self.cooks_distance > 4 / n_obs)) if n_obs else 0
        return (
            "AssumptionCheckResult(\n"
            f"  Normality: JB(p={fmt(self.jarque_bera_pvalue)}, {decision(self.jarque_bera_pvalue)}); "
            f"Shapiro(p={fmt(self.shapiro_pvalue)}, {decision(self.shapiro_pvalue)})\n"
            f"  Homoscedasticity: BP(p={fmt(self.breusch_pagan_pvalue)}, {decision(self.breusch_pagan_pvalue)})\n"
            f"  Autocorrelation: Durbin-Watson={fmt(self.durbin_watson, 2)}\n"
            f"  Influence: max_leverage={fmt(float(np.max(self.leverage)))}, "
            f"max_cook={fmt(float(np.max(self.cooks_distance)))}, cooks>4/n={cooks_exceed}\n"
            ")"
        )


@dataclass(frozen=True)
class DiagnosticsReport:
    """Fit quality of the selected model relative to a reference model.

    Attributes:
        r2: :math:`R^2` of the selected model.
        adj_r2: Adjusted :math:`R^2` of the selected model.
        cp: Mallows' :math:`C_p` of the selected model against the reference.
        expected_cp: Parameter count :math:`k` of the selected model; a
            well-calibrated model has :math:`C_p \\approx k`.
        residual_pairs: ``fitted`` / ``residual`` columns for homoscedasticity plots.
        qq_pairs: ``theoretical`` / ``sample`` normal quantiles for Q-Q plots.
        assumptions: Formal residual tests of the selected model.

    Each report owns freshly built ``residual_pairs`` and ``qq_pairs`` frames,
    independent of the fitted model; treat them as read-only.
    """

    r2: float
    adj_r2: float
    cp: float
    expected_cp: int
    n_obs: int
    residual_pairs: pd.DataFrame
    qq_pairs: pd.DataFrame
    assumptions: AssumptionCheckResult

    @property
    def cp_gap(self) -> float:
        """``cp - expected_cp``; large positive values point to omitted-variable bias."""
        return self.cp - self.expected_cp

    def summary(self) -> pd.Series:
        return pd.Series(
            {
                "r2": self.r2,
                "adj_r2": self.adj_r2,
                "cp": self.cp,
                "expected_cp": self.expected_cp,
                "n_obs": self.n_obs,
                "shapiro_pvalue": self.assumptions.shapiro_pvalue,
                "breusch_pagan_pvalue": self.assumptions.breusch_pagan_pvalue,
            },
        )

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_residuals_vs_fitted(self, **kwargs: object):
        r"""Plot residuals against fitted values.

        A random cloud centred on 0 with constant spread is the desired
        picture; a funnel suggests heteroscedasticity and curvature suggests a
        missing term or a wrong functional form.
        """
        from phone_tlbx.plotting.regression_plots import plot_residuals_vs_fitted  # noqa: PLC0415

        return plot_residuals_vs_fitted(self, **kwargs)

    def plot_qq(self, **kwargs: object):
        """Normal Q-Q plot; points close to the line mean approximately normal residuals."""
        from phone_tlbx.plotting.regression_plots import plot_qq  # noqa: PLC0415

        return plot_qq(self, **kwargs)


def compute_mallows_cp(full_model: FittedModel, model: FittedModel) -> float:
    r"""Compute Mallows' :math:`C_p` for a candidate model.

    Uses the residual variance of the reference model to penalize model size:

    :math:`C_p = \frac{RSS}{\hat{\sigma}^2_{full}} - (n - 2k)`

    where :math:`k` is the number of parameters of the candidate including the
    intercept and :math:`RSS` its residual sum of squares. A model without
    substantial bias yields :math:`C_p \approx k`.
    """
    if full_model.n_obs != model.n_obs:
        raise ValueError(
            f"Models were fit on different rows ({full_model.n_obs} vs {model.n_obs} observations).",
        )
    n = float(model.n_obs)
    k = float(model.n_params)
    return model.rss / full_model.mse_resid - (n - 2.0 * k)


def residual_pairs(model: FittedModel) -> pd.DataFrame:
    """(fitted, residual) pairs aligned by observation."""
    return pd.DataFrame({"fitted": model.fitted, "residual": model.residuals}, copy=True)


def qq_pairs(model: FittedModel) -> pd.DataFrame:
    """Theoretical normal quantiles against sorted residuals.

    Plotting positions are :math:`(i - a) / (n + 1 - 2a)` with :math:`a = 3/8`
    for :math:`n \\le 10` and :math:`a = 1/2` otherwise.
    """
    resid = model.residuals.to_numpy()
    a = 3.0 / 8.0 if len(resid) <= _SMALL_SAMPLE_N else 0.5
    probplot = sm.ProbPlot(resid, dist=stats.norm, a=a)
    return pd.DataFrame(
        {
            "theoretical": probplot.theoretical_quantiles,
            "sample": probplot.sample_quantiles,
        },
    )


def compute_assumptions(model: FittedModel) -> AssumptionCheckResult:
    """Run key regression assumption checks and return structured results."""
    resid = model.residuals.to_numpy()
    design = model.design_matrix.to_numpy()

    jb_stat, jb_pvalue, _, _ = jarque_bera(resid)
    shapiro_stat, shapiro_pvalue = stats.shapiro(resid)
    if design.shape[1] > 1:
        bp_stat, bp_pvalue, _, _ = sm_diagnostic.het_breuschpagan(resid, design)
    else:
        # intercept-only model: nothing to regress the squared residuals on
        bp_stat, bp_pvalue = 0.0, 1.0

    influence = model.model.get_influence()
    return AssumptionCheckResult(
        durbin_watson=float(durbin_watson(resid)),
        jarque_bera_statistic=float(jb_stat),
        jarque_bera_pvalue=float(jb_pvalue),
        shapiro_statistic=float(shapiro_stat),
        shapiro_pvalue=float(shapiro_pvalue),
        breusch_pagan_statistic=float(bp_stat),
        breusch_pagan_pvalue=float(bp_pvalue),
        condition_number=float(np.linalg.cond(design)),
        leverage=np.asarray(influence.hat_matrix_diag),
        cooks_distance=np.asarray(influence.cooks_distance[0]),
    )


def diagnose(full_model: FittedModel, reduced_model: FittedModel) -> DiagnosticsReport:
    """Assemble the diagnostics report of ``reduced_model`` against ``full_model``."""
    return DiagnosticsReport(
        r2=reduced_model.r2,
        adj_r2=reduced_model.adj_r2,
        cp=compute_mallows_cp(full_model, reduced_model),
        expected_cp=reduced_model.n_params,
        n_obs=reduced_model.n_obs,
        residual_pairs=residual_pairs(reduced_model),
        qq_pairs=qq_pairs(reduced_model),
        assumptions=compute_assumptions(reduced_model),
    )
