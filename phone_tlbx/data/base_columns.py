"""Base column definitions and metadata structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ColumnKind(StrEnum):
    """How a column enters the model once the dataset is cleaned."""

    RESPONSE = "response"
    CONTINUOUS = "continuous"
    CATEGORICAL = "categorical"
    DROPPED = "dropped"
    """Identifier or ambiguous-unit column removed during cleaning."""


@dataclass(frozen=True)
class ColumnMetadata:
    """Metadata for a dataset column.

    Attributes:
        cleaned_name: Standardized column name used in DataFrames.
        kind: Role of the column after cleaning.
        pretty_name: Human-readable name for use in plots and tables.
    """

    original_name: str
    """Column name as it appears in the raw CSV file."""
    cleaned_name: str
    kind: ColumnKind
    pretty_name: str


class BaseColumn(StrEnum):
    """Base class for dataset column enums.

    Members are declared in the positional order of the raw file, so iterating
    the enum yields the labels used to relabel an unnamed CSV. Derived enums
    must define a ``TARGET`` member and implement :meth:`metadata`.
    """

    TARGET: str

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement metadata() method")

    @classmethod
    def raw_order(cls) -> list[str]:
        """Cleaned column names in the positional order of the raw file."""
        return [str(col) for col in cls]

    @classmethod
    def columns_of_kind(cls, kind: ColumnKind) -> list[str]:
        """Return the cleaned names of all columns with the given kind."""
        return [str(col) for col in cls if col.metadata().kind == kind]

    @classmethod
    def covariate_columns(cls) -> list[str]:
        """Continuous and categorical columns, in raw order."""
        return [
            str(col) for col in cls if col.metadata().kind in {ColumnKind.CONTINUOUS, ColumnKind.CATEGORICAL}
        ]

    @property
    def pretty_name(self) -> str:
        """Get the human-readable name for plots and tables."""
        return self.metadata().pretty_name

    @property
    def original_name(self) -> str:
        """Get the original column name from the CSV file."""
        return self.metadata().original_name

    @property
    def kind(self) -> ColumnKind:
        """Get the modelling role of this column."""
        return self.metadata().kind
