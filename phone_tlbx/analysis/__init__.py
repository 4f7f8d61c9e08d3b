"""Analysis modules: model fitting, collinearity pruning, selection, and diagnostics."""

from .collinearity import CollinearityFilter, CollinearityResult, compute_gvif, filter_collinear
from .correlation_analyzer import CorrelationAnalyzer, CorrelationResult, group_summary
from .diagnostics import AssumptionCheckResult, DiagnosticsReport, compute_mallows_cp, diagnose
from .model_selection import SelectionPathResult, SelectionStep, StepwiseSelector, compare_models, select
from .ols_helper import FittedModel, MetricsResult, coefficient_table, fit_model


__all__ = [
    "AssumptionCheckResult",
    "CollinearityFilter",
    "CollinearityResult",
    "CorrelationAnalyzer",
    "CorrelationResult",
    "DiagnosticsReport",
    "FittedModel",
    "MetricsResult",
    "SelectionPathResult",
    "SelectionStep",
    "StepwiseSelector",
    "coefficient_table",
    "compare_models",
    "compute_gvif",
    "compute_mallows_cp",
    "diagnose",
    "filter_collinear",
    "fit_model",
    "group_summary",
    "select",
]
