"""Pairwise exploration of phone specifications against price."""

from dataclasses import dataclass
from typing import Self

import numpy as np
import pandas as pd

from phone_tlbx.data.views import ModelView

from .base_analyser import BaseAnalyser


@dataclass(frozen=True)
class CorrelationResult:
    """Correlation analysis outputs grouped for plotting and reporting.

    Attributes:
        matrix: Pearson correlation matrix over the target and continuous covariates.
        pretty_by_col: Mapping from raw column names to presentation labels.
        feature_pairs: DataFrame with columns `feature_a`, `feature_b`, `correlation`,
            `abs_correlation`, `pair`; sorted by strongest absolute correlations.
        target_correlations: DataFrame with columns `feature`, `correlation`
            for covariate-vs-price correlations (sorted descending).
        level_summaries: Price statistics per level of every categorical covariate.
    """

    matrix: pd.DataFrame
    pretty_by_col: dict[str, str]
    feature_pairs: pd.DataFrame
    target_correlations: pd.DataFrame
    level_summaries: dict[str, pd.DataFrame]

    def plot_heatmap(self, **kwargs: object):
        """Plot correlation heatmap using the plotting helper."""
        from phone_tlbx.plotting.correlation_plots import plot_correlation_heatmap  # noqa: PLC0415

        return plot_correlation_heatmap(self, **kwargs)


def group_summary(view: ModelView, column: str) -> pd.DataFrame:
    """Count, mean, median, min and max price per level of a categorical covariate.

    Empty levels are kept with a count of 0 so sparse levels (the reason for
    merging ``core == 6`` into ``8``) stay visible.
    """
    if column not in view.categorical_cols:
        raise ValueError(f"'{column}' is not a categorical covariate of this view.")
    return (
        view.df.groupby(column, observed=False)[view.target_col]
        .agg(["count", "mean", "median", "min", "max"])
        .rename_axis("level")
    )


class CorrelationAnalyzer(BaseAnalyser):
    """Analyzer for pairwise relationships between covariates and price.

    Example:
        >>> from phone_tlbx.data import PhoneDataset
        >>> ds = PhoneDataset.from_csv().cleaned()
        >>> corr = ds.make_correlation_analyzer().fit().result()
        >>> corr.target_correlations.head()
        >>> corr.level_summaries["core"]
    """

    def __init__(self, view: ModelView):
        """Initialize the correlation analyzer with a model view."""
        self._view = view
        self._corr_mat: pd.DataFrame | None = None

    def get_correlation_matrix(self) -> pd.DataFrame:
        """Compute the Pearson correlation matrix via :meth:`pandas.DataFrame.corr`."""
        if self._corr_mat is None:
            self._corr_mat = self._view.df[self._view.numeric_cols].corr()
        return self._corr_mat

    def get_top_correlated_pairs(self, n: int = 20) -> pd.DataFrame:
        """Return the strongest absolute Pearson correlations between column pairs.

        The upper triangle (excluding the diagonal) is masked with :func:`np.triu`
        and melted into long format for sorting.
        """
        corr_matrix = self.get_correlation_matrix()
        mask = np.triu(np.ones(corr_matrix.shape, dtype=bool), k=1)

        return (
            corr_matrix.where(mask)
            .melt(ignore_index=False, var_name="feature_b", value_name="correlation")
            .dropna()
            .reset_index(names="feature_a")
            .assign(
                abs_correlation=lambda d: d.correlation.abs(),
                pair=lambda d: d.feature_a + " vs " + d.feature_b,
            )
            .sort_values("abs_correlation", ascending=False)
            .head(n)
            .reset_index(drop=True)
        )

    def get_target_correlations(self) -> pd.DataFrame:
        """Return Pearson correlations between each continuous covariate and price."""
        target = self._view.target_col
        return (
            self.get_correlation_matrix()
            .loc[target]
            .drop(target)
            .sort_values(ascending=False)
            .to_frame(name="correlation")
            .assign(feature=lambda d: d.index)
            .reset_index(drop=True)
        )

    def fit(self) -> Self:
        """Compute correlation matrix."""
        self.get_correlation_matrix()
        return self

    def result(self, *, top_n_pairs: int = 20) -> CorrelationResult:
        if self._corr_mat is None:
            raise ValueError("Call fit() first")
        return CorrelationResult(
            matrix=self._corr_mat,
            pretty_by_col=dict(self._view.pretty_by_col),
            feature_pairs=self.get_top_correlated_pairs(n=top_n_pairs),
            target_correlations=self.get_target_correlations(),
            level_summaries={col: group_summary(self._view, col) for col in self._view.categorical_cols},
        )
