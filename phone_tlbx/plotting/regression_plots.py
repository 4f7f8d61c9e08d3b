"""Plotting helpers for model selection and regression diagnostics.

Every helper reads a result artifact and draws it; none of them recomputes
anything the analysis stages already produced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import seaborn as sns
from statsmodels.graphics.gofplots import qqline


if TYPE_CHECKING:
    from matplotlib.figure import Figure

    from phone_tlbx.analysis.collinearity import CollinearityResult
    from phone_tlbx.analysis.diagnostics import DiagnosticsReport
    from phone_tlbx.analysis.model_selection import SelectionPathResult


def plot_residuals_vs_fitted(
    report: DiagnosticsReport,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Residuals vs fitted values with LOESS smooth.

    Wraps [:func:`seaborn.residplot`](https://seaborn.pydata.org/generated/seaborn.residplot.html)
    on the ``residual_pairs`` of a diagnostics report.
    """
    ax = ax or plt.gca()
    pairs = report.residual_pairs
    sns.residplot(x=pairs["fitted"], y=pairs["residual"], lowess=True, ax=ax, scatter_kws={"alpha": 0.45})
    ax.set_xlabel("Fitted values")
    ax.set_ylabel("Residuals")
    ax.set_title("Residuals vs Fitted")
    return ax


def plot_qq(
    report: DiagnosticsReport,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Normal Q-Q plot of the residual quantile pairs.

    The reference line is the regression of sample on theoretical quantiles
    (:func:`statsmodels.graphics.gofplots.qqline` with ``line="r"``).
    """
    ax = ax or plt.gca()
    pairs = report.qq_pairs
    ax.scatter(pairs["theoretical"], pairs["sample"], alpha=0.6)
    qqline(ax, "r", x=pairs["theoretical"].to_numpy(), y=pairs["sample"].to_numpy(), fmt="r-", linewidth=1.5)
    ax.set_xlabel("Theoretical quantiles")
    ax.set_ylabel("Sample quantiles")
    ax.set_title("Normal Q-Q")
    return ax


def plot_residual_diags(
    report: DiagnosticsReport,
    *,
    figsize: tuple[int, int] = (12, 5),
) -> Figure:
    """Side-by-side residual-vs-fitted and Q-Q panels."""
    fig, axes = plt.subplots(1, 2, figsize=figsize)
    plot_residuals_vs_fitted(report, ax=axes[0])
    plot_qq(report, ax=axes[1])
    fig.suptitle(
        f"R² = {report.r2:.4f}, adj. R² = {report.adj_r2:.4f}, Cp = {report.cp:.2f} (k = {report.expected_cp})",
    )
    fig.tight_layout()
    return fig


def plot_gvif(
    result: CollinearityResult,
    *,
    figsize: tuple[int, int] = (10, 5),
) -> Figure:
    """Grouped bars of every covariate's score in each pruning round."""
    table = result.summary_table()
    fig, ax = plt.subplots(figsize=figsize)
    sns.barplot(data=table, x="covariate", y=result.score, hue="round", ax=ax)
    ax.axhline(result.threshold, color="tab:red", linestyle="--", linewidth=1.5, label="threshold")
    ax.set_ylabel(result.score.upper())
    ax.set_title("Collinearity pruning")
    ax.legend(title="round")
    fig.tight_layout()
    return fig


def plot_selection_path(
    result: SelectionPathResult,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Criterion value per accepted step, labelled with the step's action."""
    ax = ax or plt.gca()
    table = result.summary_table()
    ax.plot(table.index, table[result.criterion], marker="o")
    for step, row in table.iterrows():
        ax.annotate(
            row["action"], (step, row[result.criterion]), textcoords="offset points", xytext=(0, 8), ha="center"
        )
    ax.set_xticks(table.index)
    ax.set_xlabel("Step")
    ax.set_ylabel(result.criterion.upper())
    ax.set_title(f"{result.direction.title()} selection path")
    return ax
