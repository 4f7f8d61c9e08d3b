r"""Generalized variance inflation factors and iterative collinearity pruning.

For a covariate :math:`j` spanning design columns :math:`J`, the generalized
VIF (Fox & Monette, 1992) is

:math:`GVIF_j = \frac{\det R_{JJ} \, \det R_{-J,-J}}{\det R}`

where :math:`R` is the correlation matrix of all non-intercept design columns.
For a continuous covariate this is the classical :math:`1 / (1 - R_j^2)`; a
categorical covariate gets one score for all its indicators, and that score
does not depend on the choice of reference level. ``GVIF^(1/(2 df))`` rescales
the score to a per-dimension factor comparable across covariates of different
size.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Self

import numpy as np
import pandas as pd

from phone_tlbx.data.covariates import CovariateSet
from phone_tlbx.data.views import ModelView

from .base_analyser import BaseAnalyser
from .ols_helper import INTERCEPT, FittedModel, fit_model


logger = logging.getLogger(__name__)

ScoreKind = Literal["gvif", "gvif_adj"]


def compute_gvif(model: FittedModel) -> pd.DataFrame:
    r"""Compute one generalized VIF per covariate of a fitted model.

    Returns:
        DataFrame indexed by covariate with columns ``gvif``, ``df`` and
        ``gvif_adj`` (:math:`GVIF^{1/(2\,df)}`), in model covariate order.
    """
    term_columns = dict(model.term_columns)
    if not term_columns:
        return pd.DataFrame(columns=["gvif", "df", "gvif_adj"], dtype=float)

    x = model.design_matrix.drop(columns=[INTERCEPT])
    dfs = {name: len(cols) for name, cols in term_columns.items()}
    if len(term_columns) == 1:
        gvif = dict.fromkeys(term_columns, 1.0)
    else:
        corr = np.corrcoef(x.to_numpy(), rowvar=False)
        det_all = np.linalg.det(corr)
        gvif = {}
        for name, cols in term_columns.items():
            idx = [x.columns.get_loc(col) for col in cols]
            rest = [i for i in range(x.shape[1]) if i not in idx]
            det_own = np.linalg.det(corr[np.ix_(idx, idx)])
            det_rest = np.linalg.det(corr[np.ix_(rest, rest)])
            gvif[name] = float(det_own * det_rest / det_all)

    table = pd.DataFrame({"gvif": pd.Series(gvif), "df": pd.Series(dfs)})
    table["gvif_adj"] = table["gvif"] ** (1.0 / (2.0 * table["df"]))
    table.index.name = "covariate"
    return table.loc[list(term_columns)]


@dataclass(frozen=True)
class CollinearityStep:
    """One fit-and-score round of the collinearity filter."""

    covariates: CovariateSet
    scores: pd.DataFrame
    removed: str | None
    """Covariate dropped after this round, ``None`` on the final round."""
    removed_score: float | None = None


@dataclass(frozen=True)
class CollinearityResult:
    """Outcome of iterative GVIF pruning.

    Attributes:
        covariates: Surviving covariate set.
        scores: GVIF table of the surviving set.
        history: Every round in order, the last one being the accepted set.
        threshold: Score above which a covariate was removed.
        score: Which column of the GVIF table was compared to ``threshold``.
    """

    covariates: CovariateSet
    scores: pd.DataFrame
    history: list[CollinearityStep]
    threshold: float
    score: ScoreKind

    @property
    def removed(self) -> list[str]:
        """Removed covariates in removal order."""
        return [step.removed for step in self.history if step.removed is not None]

    @property
    def visited(self) -> list[CovariateSet]:
        return [step.covariates for step in self.history]

    def summary_table(self) -> pd.DataFrame:
        """Long-format table of every round's scores for reporting."""
        frames = [
            step.scores.reset_index().assign(round=i, removed=step.removed) for i, step in enumerate(self.history)
        ]
        return pd.concat(frames, ignore_index=True)

    def plot(self, **kwargs: object):
        """Bar chart of the GVIF scores per round."""
        from phone_tlbx.plotting.regression_plots import plot_gvif  # noqa: PLC0415

        return plot_gvif(self, **kwargs)


class CollinearityFilter(BaseAnalyser):
    """Remove the worst-scoring covariate until every GVIF is within ``threshold``.

    Each round refits OLS of the response on the current set, scores all
    covariates, and drops the maximum if it exceeds the threshold. Removing one
    covariate changes every other score, so the result is a local fixed point:
    re-scoring the returned set gives no score above the threshold.

    Example:
        >>> flt = CollinearityFilter(view, view.all_covariates(), threshold=3.0)
        >>> res = flt.fit().result()
        >>> res.removed, res.scores["gvif"].max()
    """

    def __init__(
        self,
        view: ModelView,
        covariates: CovariateSet,
        *,
        threshold: float = 3.0,
        score: ScoreKind = "gvif",
    ) -> None:
        if threshold < 1.0:
            raise ValueError("threshold must be >= 1 (a GVIF is never below 1)")
        if score not in {"gvif", "gvif_adj"}:
            raise ValueError("score must be one of: gvif, gvif_adj")
        self._view = view
        self._initial = covariates
        self.threshold = threshold
        self.score = score
        self._history: list[CollinearityStep] | None = None

    def fit(self) -> Self:
        """Run the prune loop."""
        current = self._initial
        history: list[CollinearityStep] = []
        while True:
            scores = compute_gvif(fit_model(self._view, current))
            if len(current) <= 1 or scores.empty:
                history.append(CollinearityStep(current, scores, removed=None))
                break
            worst = str(scores[self.score].idxmax())
            worst_score = float(scores.loc[worst, self.score])
            logger.debug("gvif scores for %s: %s", current, scores[self.score].round(3).to_dict())
            if worst_score <= self.threshold:
                history.append(CollinearityStep(current, scores, removed=None))
                break
            logger.info("removing '%s' (%s=%.3f > %.3f)", worst, self.score, worst_score, self.threshold)
            history.append(CollinearityStep(current, scores, removed=worst, removed_score=worst_score))
            current = current.remove(worst)
        self._history = history
        return self

    def result(self) -> CollinearityResult:
        if self._history is None:
            raise ValueError("Call fit() first")
        final = self._history[-1]
        return CollinearityResult(
            covariates=final.covariates,
            scores=final.scores,
            history=list(self._history),
            threshold=self.threshold,
            score=self.score,
        )


def filter_collinear(
    view: ModelView,
    covariates: CovariateSet | None = None,
    threshold: float = 3.0,
    *,
    score: ScoreKind = "gvif",
) -> CollinearityResult:
    """Functional wrapper around :class:`CollinearityFilter`."""
    covariates = covariates if covariates is not None else view.all_covariates()
    return CollinearityFilter(view, covariates, threshold=threshold, score=score).fit().result()
