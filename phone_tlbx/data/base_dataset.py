"""Base dataset class for all dataset implementations."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd


if TYPE_CHECKING:
    from phone_tlbx.analysis.collinearity import CollinearityFilter
    from phone_tlbx.analysis.correlation_analyzer import CorrelationAnalyzer

from .base_columns import BaseColumn, ColumnKind
from .covariates import CategoricalCovariate, ContinuousCovariate, Covariate
from .views import ModelView


class BaseDataset(ABC):
    """Abstract base class for dataset handlers.

    A dataset wraps one DataFrame and never mutates it: every transform
    (e.g. :meth:`PhoneDataset.cleaned`) returns a new instance.
    """

    Col: type[BaseColumn]

    def __init__(self, df: pd.DataFrame | None = None) -> None:
        """Initialize the base dataset.

        Args:
            df: Pre-loaded DataFrame (optional)
        """
        self._df: pd.DataFrame | None = df

    @classmethod
    @abstractmethod
    def from_csv(cls, filepath: str | Path, **kwargs: object) -> "BaseDataset":
        """Load dataset from CSV file.

        Args:
            filepath: Path to the CSV file
            **kwargs: Additional loading parameters

        Returns:
            Dataset instance with loaded data
        """
        ...

    @property
    def df(self) -> pd.DataFrame:
        """Get the raw/cleaned DataFrame.

        Raises:
            ValueError: If dataset not loaded
        """
        if self._df is None:
            raise ValueError("Dataset not loaded. Use from_csv() to load data.")
        return self._df

    @property
    def df_pretty(self) -> pd.DataFrame:
        """Get the DataFrame with pretty column names."""
        return self.df.rename(columns={col: self.get_pretty_name(col) for col in self.df.columns})

    def get_pretty_name(self, column_name: str) -> str:
        """Convert column name to pretty name for tables and plots."""
        try:
            col_enum = self.Col(column_name)
        except ValueError:
            # Fallback: capitalize and replace underscores if not in enum
            return column_name.replace("_", " ").title()
        else:
            return str(col_enum.pretty_name)

    def covariate_specs(self, reference_levels: dict[str, object] | None = None) -> dict[str, Covariate]:
        """Tag every covariate present in the frame as continuous or categorical.

        Categorical covariates must already carry a pandas ``Categorical`` dtype
        (set by the cleaner); their level set is frozen here.

        Args:
            reference_levels: Optional baseline level per categorical column.
        """
        reference_levels = reference_levels or {}
        specs: dict[str, Covariate] = {}
        for name in self.Col.covariate_columns():
            if name not in self.df.columns:
                continue
            if self.Col(name).kind == ColumnKind.CATEGORICAL:
                series = self.df[name]
                if not isinstance(series.dtype, pd.CategoricalDtype):
                    raise ValueError(f"Column '{name}' is not categorical yet; clean the dataset first.")
                specs[name] = CategoricalCovariate(
                    name=name,
                    levels=tuple(series.cat.categories.tolist()),
                    reference=reference_levels.get(name),
                )
            else:
                specs[name] = ContinuousCovariate(name)
        return specs

    def model_view(
        self,
        columns: Iterable[str] | None = None,
        reference_levels: dict[str, object] | None = None,
    ) -> ModelView:
        """Build the frozen view consumed by the model-selection stages.

        Args:
            columns: Covariates to include (defaults to all tagged covariates).
            reference_levels: Optional baseline level per categorical column.
        """
        specs = self.covariate_specs(reference_levels)
        if columns is not None:
            selected = list(columns)
            unknown = [col for col in selected if col not in specs]
            if unknown:
                raise KeyError(f"Unknown covariates {unknown}")
            specs = {name: specs[name] for name in selected}
        target = str(self.Col.TARGET)
        frame = self.df.loc[:, [target, *specs]]
        return ModelView(
            df=frame,
            target_col=target,
            covariates=specs,
            pretty_by_col={col: self.get_pretty_name(col) for col in frame.columns},
        )

    def make_correlation_analyzer(self, columns: Iterable[str] | None = None) -> "CorrelationAnalyzer":
        """Instantiate a correlation analyzer configured for this dataset."""
        from phone_tlbx.analysis.correlation_analyzer import CorrelationAnalyzer

        return CorrelationAnalyzer(self.model_view(columns=columns))

    def make_collinearity_filter(
        self,
        columns: Iterable[str] | None = None,
        threshold: float = 3.0,
    ) -> "CollinearityFilter":
        """Instantiate a GVIF-based collinearity filter for this dataset.

        Example:
            >>> ds = PhoneDataset.from_csv("cellphone.csv").cleaned()
            >>> result = ds.make_collinearity_filter(threshold=3.0).fit().result()
            >>> result.removed
            ['battery']
        """
        from phone_tlbx.analysis.collinearity import CollinearityFilter

        view = self.model_view(columns=columns)
        return CollinearityFilter(view, view.all_covariates(), threshold=threshold)
