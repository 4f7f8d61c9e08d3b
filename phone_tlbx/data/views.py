"""Task-specific views over dataset content."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import pandas as pd

from .covariates import CategoricalCovariate, ContinuousCovariate, Covariate, CovariateSet


@dataclass(frozen=True)
class ModelView:
    """Immutable snapshot of a cleaned dataset ready for model selection.

    Attributes:
        df: Cleaned frame with the target and every covariate column.
        target_col: Name of the response variable.
        covariates: Tagged specification of every covariate, keyed by name.
        pretty_by_col: Mapping from column names to display-friendly labels.
    """

    df: pd.DataFrame
    """Cleaned frame with the target and every covariate column."""
    target_col: str
    covariates: Mapping[str, Covariate]
    """Tagged specification (continuous or categorical) of every covariate."""
    pretty_by_col: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # private copy so later edits to the caller's frame cannot leak in
        object.__setattr__(self, "df", self.df.copy())
        object.__setattr__(self, "covariates", dict(self.covariates))

    @property
    def n_obs(self) -> int:
        return len(self.df)

    @property
    def y(self) -> pd.Series:
        return self.df[self.target_col]

    @property
    def numeric_cols(self) -> list[str]:
        """Target plus continuous covariates, for correlation-style analyses."""
        cont = [name for name, spec in self.covariates.items() if isinstance(spec, ContinuousCovariate)]
        return [self.target_col, *cont]

    @property
    def categorical_cols(self) -> list[str]:
        return [name for name, spec in self.covariates.items() if isinstance(spec, CategoricalCovariate)]

    def all_covariates(self) -> CovariateSet:
        """Covariate set containing every tagged covariate in declaration order."""
        return CovariateSet.of(self.covariates)
