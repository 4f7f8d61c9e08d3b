"""Correlation analysis visualization functions."""

import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.figure import Figure

from phone_tlbx.analysis.correlation_analyzer import CorrelationResult


def plot_correlation_heatmap(
    result: CorrelationResult,
    figsize: tuple[int, int] = (8, 7),
    **kwargs: object,
) -> Figure:
    """Plot correlation heatmap of price and the continuous covariates."""
    fig, ax = plt.subplots(figsize=figsize)

    label_map = {col: result.pretty_by_col.get(col, col) for col in result.matrix.columns}

    sns.heatmap(
        result.matrix.rename(index=label_map, columns=label_map),
        annot=True,
        fmt=".2f",
        cmap="coolwarm",
        vmin=-1,
        vmax=1,
        ax=ax,
        square=True,
        cbar_kws={"shrink": 0.8},
        **kwargs,  # type: ignore[arg-type]
    )

    ax.set_xticklabels(
        ax.get_xticklabels(),
        rotation=45,
        ha="right",
        rotation_mode="anchor",
    )
    ax.tick_params(axis="y", rotation=0)
    ax.set_title("Correlation Heatmap")
    fig.tight_layout()

    return fig


def plot_price_by_level(
    result: CorrelationResult,
    column: str,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Mean price per level of a categorical covariate, annotated with counts."""
    summary = result.level_summaries[column].reset_index()
    ax = ax or plt.gca()
    sns.barplot(data=summary, x="level", y="mean", color="tab:blue", ax=ax)
    for i, count in enumerate(summary["count"]):
        ax.annotate(f"n={count}", (i, 0), textcoords="offset points", xytext=(0, 4), ha="center", fontsize=8)
    ax.set_xlabel(result.pretty_by_col.get(column, column))
    ax.set_ylabel("Mean price")
    return ax
