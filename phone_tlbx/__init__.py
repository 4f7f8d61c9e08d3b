"""Toolbox for selecting and diagnosing a linear model of cellphone prices."""

from .errors import ConvergenceExhaustionWarning, DataError, RankDeficiencyError
from .pipeline import PipelineConfig, PipelineResult, run_pipeline


__all__ = [
    "ConvergenceExhaustionWarning",
    "DataError",
    "PipelineConfig",
    "PipelineResult",
    "RankDeficiencyError",
    "run_pipeline",
]
