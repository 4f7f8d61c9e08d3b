"""Plotting utilities for the reporting layer."""

from .correlation_plots import plot_correlation_heatmap, plot_price_by_level
from .regression_plots import (
    plot_gvif,
    plot_qq,
    plot_residual_diags,
    plot_residuals_vs_fitted,
    plot_selection_path,
)


__all__ = [
    "plot_correlation_heatmap",
    "plot_gvif",
    "plot_price_by_level",
    "plot_qq",
    "plot_residual_diags",
    "plot_residuals_vs_fitted",
    "plot_selection_path",
]
