"""Information-criterion driven covariate selection for OLS models."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal, Self

import numpy as np
import pandas as pd

from phone_tlbx.data.covariates import CovariateSet
from phone_tlbx.data.views import ModelView
from phone_tlbx.errors import ConvergenceExhaustionWarning, RankDeficiencyError

from .base_analyser import BaseAnalyser
from .ols_helper import FittedModel, fit_model


logger = logging.getLogger(__name__)

Direction = Literal["forward", "backward", "stepwise"]
Criterion = Literal["aic", "bic"]


@dataclass(frozen=True)
class SelectionStep:
    """Single accepted step in a model selection path.

    Stores the fitted model and its criterion value for a particular covariate
    set. This keeps the selection logic independent from plotting/reporting and
    enables later inspection of how the criterion evolves across steps.
    """

    step: int
    covariates: CovariateSet
    action: str
    """``"start"``, ``"+ name"`` or ``"- name"``."""
    model: FittedModel
    score: float


@dataclass(frozen=True)
class SelectionPathResult:
    """Results from a greedy model-selection path.

    The path is the sequence of models accepted by forward, backward, or
    stepwise search under an information criterion (AIC by default). Because
    selection is data-adaptive, in-sample fit metrics of the final model are
    optimistic and do not account for selection uncertainty.
    """

    steps: list[SelectionStep]
    criterion: str
    direction: str
    converged: bool
    """False when the iteration limit stopped the search with an improving move left."""
    skipped: list[CovariateSet] = field(default_factory=list)
    """Distinct candidate sets excluded because their design matrix was rank deficient."""
    n_evaluated: int = 0

    @property
    def best_index(self) -> int:
        return int(np.argmin([step.score for step in self.steps]))

    def best_step(self) -> SelectionStep:
        """Return the best step according to the selection criterion."""
        return self.steps[self.best_index]

    @property
    def final_model(self) -> FittedModel:
        """Model at the end of the path (also the best, since steps only improve)."""
        return self.steps[-1].model

    @property
    def visited(self) -> list[CovariateSet]:
        """Covariate sets adopted by the search, in order."""
        return [step.covariates for step in self.steps]

    def summary_table(self) -> pd.DataFrame:
        """Return a tidy summary table for plotting and reporting."""
        rows: list[dict[str, float | int | str]] = []
        for step in self.steps:
            rows.append(
                {
                    "step": step.step,
                    "action": step.action,
                    "n_covariates": len(step.covariates),
                    "covariates": str(step.covariates),
                    self.criterion: step.score,
                    "adj_r2": step.model.adj_r2,
                    "rmse": step.model.metrics.rmse,
                },
            )
        return pd.DataFrame(rows).set_index("step")

    def plot(self, **kwargs: object):
        """Plot the criterion along the path."""
        from phone_tlbx.plotting.regression_plots import plot_selection_path  # noqa: PLC0415

        return plot_selection_path(self, **kwargs)


@dataclass(frozen=True)
class _Candidate:
    action: str
    covariates: CovariateSet
    model: FittedModel
    score: float

    def rank_key(self) -> tuple[float, int, tuple[str, ...]]:
        # lowest score, then fewer covariates, then sorted names
        return (self.score, *self.covariates.sort_key())


def compare_models(models: dict[str, FittedModel]) -> pd.DataFrame:
    """Tabulate AIC/BIC, adj R², and RMSE for multiple fitted models.

    Information criteria are most meaningful for comparing models fit to the
    same response on the same data; lower values indicate a better trade-off of
    fit and complexity.
    """
    rows = []
    for name, model in models.items():
        rows.append(
            {
                "model": name,
                "n_params": model.n_params,
                "aic": model.aic,
                "bic": model.bic,
                "r2": model.r2,
                "adj_r2": model.adj_r2,
                "rmse": model.metrics.rmse,
            },
        )
    return pd.DataFrame(rows).sort_values("aic").reset_index(drop=True)


class StepwiseSelector(BaseAnalyser):
    """Greedy add/drop search over covariate sets driven by AIC or BIC.

    Starting from ``initial``, every round fits the whole neighbourhood (each
    single addition of an excluded candidate and each single removal of an
    included covariate, restricted by ``direction``) and moves to the best
    neighbour if it beats the current criterion by more than ``threshold``.
    Ties are broken towards the smaller covariate set, then by sorted names.

    Candidates whose design matrix is rank deficient are skipped. If an
    improving move is still available after ``max_iter`` accepted steps, the
    search emits :class:`ConvergenceExhaustionWarning` and keeps the best
    model found so far.

    Notes:
        Selection is a greedy heuristic and only guarantees a local optimum:
        no single add or drop improves the criterion on the returned set.
    """

    def __init__(  # noqa: PLR0913
        self,
        view: ModelView,
        initial: CovariateSet,
        *,
        candidates: Iterable[str] | None = None,
        base_terms: Iterable[str] | None = None,
        direction: Direction = "stepwise",
        criterion: Criterion = "aic",
        threshold: float = 0.0,
        max_iter: int = 100,
    ) -> None:
        """Configure the search.

        Args:
            view: Frozen dataset with tagged covariates.
            initial: Covariate set the search starts from.
            candidates: Pool from which additions are drawn (defaults to ``initial``).
            base_terms: Covariates that are never removed.
            direction: "forward", "backward", or "stepwise" (both directions).
            criterion: "aic" or "bic"; lower is better.
            threshold: Minimum improvement required to accept a step.
            max_iter: Maximum number of accepted steps.
        """
        direction = direction.lower()
        criterion = criterion.lower()
        if direction not in {"forward", "backward", "stepwise"}:
            raise ValueError("direction must be one of: forward, backward, stepwise")
        if criterion not in {"aic", "bic"}:
            raise ValueError("criterion must be one of: aic, bic")
        if threshold < 0:
            raise ValueError("threshold must be non-negative")
        if max_iter < 0:
            raise ValueError("max_iter must be non-negative")

        self._view = view
        self._initial = initial
        self.base_terms = tuple(base_terms or ())
        pool = list(candidates) if candidates is not None else list(initial)
        self.candidates = tuple(name for name in dict.fromkeys([*pool, *initial]) if name not in self.base_terms)
        self.direction = direction
        self.criterion = criterion
        self.threshold = threshold
        self.max_iter = max_iter
        self._result: SelectionPathResult | None = None

    def _neighbours(self, current: CovariateSet) -> list[tuple[str, CovariateSet]]:
        moves: list[tuple[str, CovariateSet]] = []
        if self.direction in {"forward", "stepwise"}:
            moves.extend((f"+ {name}", current.add(name)) for name in self.candidates if name not in current)
        if self.direction in {"backward", "stepwise"}:
            moves.extend((f"- {name}", current.remove(name)) for name in current if name not in self.base_terms)
        return moves

    def fit(self) -> Self:
        """Run the search from the initial set."""
        start = fit_model(self._view, self._initial)
        steps = [SelectionStep(0, self._initial, "start", start, start.score(self.criterion))]
        logger.info("stepwise start %s: %s=%.3f", self._initial, self.criterion, steps[0].score)
        # keyed by name set: the same candidate can be reached by an add in one round and a drop in another
        skipped: dict[frozenset[str], CovariateSet] = {}
        n_evaluated = 0
        converged = False

        # one round more than max_iter: the last round only checks whether a move is left
        for _ in range(self.max_iter + 1):
            current = steps[-1]
            evaluated: list[_Candidate] = []
            for action, covariates in self._neighbours(current.covariates):
                try:
                    model = fit_model(self._view, covariates)
                except RankDeficiencyError as exc:
                    logger.warning("skipping candidate %s: %s", covariates, exc)
                    skipped.setdefault(frozenset(covariates), covariates)
                    continue
                score = model.score(self.criterion)
                logger.debug("candidate %s %s: %s=%.3f", action, covariates, self.criterion, score)
                evaluated.append(_Candidate(action, covariates, model, score))
            n_evaluated += len(evaluated)

            if not evaluated:
                converged = True
                break
            best = min(evaluated, key=_Candidate.rank_key)
            if not best.score < current.score - self.threshold:
                converged = True
                break
            if len(steps) > self.max_iter:
                break
            logger.info(
                "step %d: %s -> %s (%s=%.3f)", len(steps), best.action, best.covariates, self.criterion, best.score
            )
            steps.append(SelectionStep(len(steps), best.covariates, best.action, best.model, best.score))

        if not converged:
            warnings.warn(
                f"stepwise search stopped after {self.max_iter} steps without reaching a local optimum; "
                f"returning {steps[-1].covariates}",
                ConvergenceExhaustionWarning,
                stacklevel=2,
            )

        self._result = SelectionPathResult(
            steps=steps,
            criterion=self.criterion,
            direction=self.direction,
            converged=converged,
            skipped=list(skipped.values()),
            n_evaluated=n_evaluated,
        )
        return self

    def result(self) -> SelectionPathResult:
        if self._result is None:
            raise ValueError("Call fit() first")
        return self._result


def select(
    view: ModelView,
    initial: CovariateSet,
    criterion: Criterion = "aic",
    *,
    max_iter: int = 100,
    threshold: float = 0.0,
) -> SelectionPathResult:
    """Bidirectional stepwise search from ``initial``; the final model is ``.final_model``."""
    return (
        StepwiseSelector(view, initial, criterion=criterion, max_iter=max_iter, threshold=threshold)
        .fit()
        .result()
    )


def stepwise_aic(
    view: ModelView,
    base_terms: list[str],
    candidates: list[str],
    *,
    threshold: float = 1.0,
) -> tuple[CovariateSet, FittedModel]:
    """Forward search that keeps adding terms while AIC improves by ``threshold``.

    This is a greedy heuristic: it evaluates candidate additions one at a time
    and does not guarantee a global optimum.
    """
    path = (
        StepwiseSelector(
            view,
            CovariateSet.of(base_terms),
            candidates=candidates,
            base_terms=base_terms,
            direction="forward",
            threshold=threshold,
        )
        .fit()
        .result()
    )
    return path.steps[-1].covariates, path.final_model


__all__ = [
    "SelectionPathResult",
    "SelectionStep",
    "StepwiseSelector",
    "compare_models",
    "select",
    "stepwise_aic",
]
