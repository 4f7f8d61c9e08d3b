"""End-to-end phone price analysis: clean, prune, select, fit, diagnose.

Every stage consumes the previous stage's artifact and returns a new one;
:class:`PipelineResult` bundles all of them for the reporting layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .analysis.collinearity import CollinearityResult, ScoreKind, filter_collinear
from .analysis.diagnostics import DiagnosticsReport, diagnose
from .analysis.model_selection import Criterion, SelectionPathResult, StepwiseSelector
from .analysis.ols_helper import FittedModel
from .data.cleaning import CleaningConfig
from .data.covariates import CovariateSet
from .data.phone_dataset import PhoneDataset
from .data.views import ModelView
from .errors import DataError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """Tunable parameters of the analysis.

    Attributes:
        cleaning: Dataset-specific cleaning rules.
        covariates: Starting covariates (defaults to every tagged covariate).
        reference_levels: Baseline level per categorical covariate.
        gvif_threshold: Collinearity pruning threshold.
        gvif_score: Which GVIF flavour is compared to the threshold.
        criterion: Information criterion driving the stepwise search.
        step_threshold: Minimum criterion improvement to accept a step.
        max_iter: Iteration limit of the stepwise search.
    """

    cleaning: CleaningConfig = field(default_factory=CleaningConfig)
    covariates: tuple[str, ...] | None = None
    reference_levels: dict[str, object] | None = None
    gvif_threshold: float = 3.0
    gvif_score: ScoreKind = "gvif"
    criterion: Criterion = "aic"
    step_threshold: float = 0.0
    max_iter: int = 100


@dataclass(frozen=True)
class PipelineResult:
    """All artifacts produced by one run.

    ``reference_model`` is the model on the post-pruning covariate set; it is
    the larger model whose residual variance calibrates Mallows' Cp.
    """

    view: ModelView
    collinearity: CollinearityResult
    selection: SelectionPathResult
    reference_model: FittedModel
    final_model: FittedModel
    diagnostics: DiagnosticsReport

    @property
    def visited(self) -> list[CovariateSet]:
        """Every covariate set adopted along the way, in order, without repeats."""
        sets = [*self.collinearity.visited, *self.selection.visited]
        return list(dict.fromkeys(sets))


def run_pipeline(dataset: PhoneDataset, config: PipelineConfig | None = None) -> PipelineResult:
    """Run the full analysis on a raw or already-cleaned dataset.

    Raises:
        DataError: On malformed or empty input, or when no covariate survives.
        RankDeficiencyError: If the starting model cannot be estimated.
    """
    config = config or PipelineConfig()

    if not dataset.is_cleaned:
        logger.info("cleaning %d raw records", len(dataset.df))
        dataset = dataset.cleaned(config.cleaning)
    view = dataset.model_view(columns=config.covariates, reference_levels=config.reference_levels)
    if not view.covariates:
        raise DataError("select: no usable covariates in the cleaned dataset")

    collinearity = filter_collinear(
        view,
        view.all_covariates(),
        threshold=config.gvif_threshold,
        score=config.gvif_score,
    )
    logger.info("collinearity pruning kept %s, removed %s", collinearity.covariates, collinearity.removed)

    selection = (
        StepwiseSelector(
            view,
            collinearity.covariates,
            criterion=config.criterion,
            threshold=config.step_threshold,
            max_iter=config.max_iter,
        )
        .fit()
        .result()
    )
    final_model = selection.final_model
    logger.info("selected %s (%s=%.3f)", final_model.covariates, config.criterion, selection.steps[-1].score)

    # step 0 of the path is the fit on the post-pruning set
    reference_model = selection.steps[0].model
    diagnostics = diagnose(reference_model, final_model)
    logger.info(
        "R2=%.4f adj_R2=%.4f Cp=%.2f (k=%d)",
        diagnostics.r2,
        diagnostics.adj_r2,
        diagnostics.cp,
        diagnostics.expected_cp,
    )

    return PipelineResult(
        view=view,
        collinearity=collinearity,
        selection=selection,
        reference_model=reference_model,
        final_model=final_model,
        diagnostics=diagnostics,
    )
