"""Loading and cleaning of the cellphone specification and price dataset."""

from pathlib import Path

import pandas as pd

from phone_tlbx.errors import DataError
from phone_tlbx.utils.paths import get_dataset_path

from .base_dataset import BaseDataset
from .cleaning import CleaningConfig, DataCleaner
from .phone_columns import PhoneColumn as Col


class PhoneDataset(BaseDataset):
    """Loading and cleaning for the cellphone price dataset.

    The raw file carries 14 columns in a fixed order; they are relabelled by
    position to the names in :class:`PhoneColumn`, so header spelling in the
    source file (``resoloution``, ``cpu core``) does not matter.

    **Example workflow**:
    >>> from phone_tlbx.data import PhoneDataset
    >>> ds = PhoneDataset.from_csv().cleaned()
    >>> view = ds.model_view()
    >>> sorted(view.covariates)
    ['battery', 'core', 'freq', 'memory', 'ppi', 'thickness', 'weight']
    """

    Col = Col

    @classmethod
    def from_csv(cls, csv_path: str | Path | None = None, **read_kwargs: object) -> "PhoneDataset":
        """Load the raw dataset from a CSV file and relabel its columns.

        Args:
            csv_path: Path to the CSV file (defaults to the bundled data directory).
            **read_kwargs: Forwarded to :func:`pandas.read_csv`.

        Raises:
            DataError: If the file does not have the expected column count.
        """
        csv_path = get_dataset_path("phones") if csv_path is None else Path(csv_path)
        raw = pd.read_csv(csv_path, **read_kwargs)
        return cls.from_frame(raw)

    @classmethod
    def from_frame(cls, raw: pd.DataFrame) -> "PhoneDataset":
        """Wrap an already-loaded raw frame, relabelling and typing its columns."""
        df = raw.pipe(cls._relabel_columns).pipe(cls._convert_data_types)
        return cls(df=df)

    @staticmethod
    def _relabel_columns(df: pd.DataFrame) -> pd.DataFrame:
        """Replace the raw headers positionally with the cleaned column names."""
        expected = Col.raw_order()
        if df.shape[1] != len(expected):
            raise DataError(
                f"load: expected {len(expected)} columns ({', '.join(expected)}), got {df.shape[1]}",
            )
        return df.set_axis(expected, axis=1)

    @staticmethod
    def _convert_data_types(df: pd.DataFrame) -> pd.DataFrame:
        """Coerce every column to numeric; unparsable cells become NaN and the row is dropped."""
        converted = df.apply(pd.to_numeric, errors="coerce")
        n_bad = int(converted.isna().any(axis=1).sum())
        if n_bad == len(converted):
            raise DataError("load: no row could be parsed as numeric")
        return converted.dropna(axis=0, how="any")

    def cleaned(self, config: CleaningConfig | None = None) -> "PhoneDataset":
        """Return a new dataset with the cleaning steps applied."""
        return PhoneDataset(df=DataCleaner(config).clean(self.df))

    @property
    def is_cleaned(self) -> bool:
        return all(
            isinstance(self.df[col].dtype, pd.CategoricalDtype)
            for col in (Col.CORE, Col.MEMORY)
            if col in self.df.columns
        )
