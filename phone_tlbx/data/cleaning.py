"""Cleaning transforms that turn the raw phone table into a model-ready frame.

Each step is a pure function ``DataFrame -> DataFrame`` returning a new frame;
:class:`DataCleaner` chains them with :meth:`pandas.DataFrame.pipe`. The
dataset-specific rules (which columns to drop, the memory rescale rule, which
levels to merge) live in :class:`CleaningConfig` rather than in the steps.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

import pandas as pd

from ..errors import DataError
from .phone_columns import PhoneColumn as Col


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleaningConfig:
    """Dataset-specific cleaning rules.

    Attributes:
        drop_columns: Identifier / ambiguous-unit columns removed up front.
        rescale_column: Column holding a mix of GB and fractional-TB encodings.
        rescale_below: Values strictly below this are rescaled.
        rescale_factor: Multiplier applied to rescaled values.
        positive_columns: Rows with a value ``<= 0`` in any of these are
            treated as placeholders and dropped.
        categorical_columns: Columns coerced to unordered categoricals.
        level_merges: ``{column: {old_level: new_level}}`` recodes applied
            after coercion.
    """

    drop_columns: tuple[str, ...] = (
        Col.ID,
        Col.SALES_NUMBER,
        Col.RESOLUTION,
        Col.RAM,
        Col.REAR_CAM,
        Col.FRONT_CAM,
    )
    rescale_column: str = Col.MEMORY
    rescale_below: float = 1.0
    rescale_factor: float = 1000.0
    positive_columns: tuple[str, ...] = (Col.MEMORY, Col.CORE)
    categorical_columns: tuple[str, ...] = (Col.CORE, Col.MEMORY)
    level_merges: Mapping[str, Mapping[object, object]] = field(
        default_factory=lambda: {Col.CORE: {6: 8}},
    )


def drop_columns(df: pd.DataFrame, columns: tuple[str, ...]) -> pd.DataFrame:
    """Drop the configured columns; columns already absent are ignored."""
    return df.drop(columns=[col for col in columns if col in df.columns])


def rescale_memory(
    df: pd.DataFrame,
    column: str = Col.MEMORY,
    *,
    below: float = 1.0,
    factor: float = 1000.0,
) -> pd.DataFrame:
    """Multiply every value of ``column`` below ``below`` by ``factor``.

    >>> rescale_memory(pd.DataFrame({"memory": [0.004, 0.128, 4, 64]}))["memory"].tolist()
    [4.0, 128.0, 4.0, 64.0]
    """
    values = _as_numeric(df[column])
    rescaled = values.where(values >= below, values * factor)
    # float noise from 0.004 * 1000 would otherwise split one level into two
    return df.assign(**{column: rescaled.round(6)})


def filter_placeholders(df: pd.DataFrame, columns: tuple[str, ...]) -> pd.DataFrame:
    """Drop rows where any of ``columns`` is ``<= 0`` (imputed placeholders)."""
    mask = pd.Series(True, index=df.index)
    for col in columns:
        mask &= _as_numeric(df[col]) > 0
    return df.loc[mask]


def coerce_categorical(df: pd.DataFrame, columns: tuple[str, ...]) -> pd.DataFrame:
    """Convert ``columns`` to unordered categoricals over their sorted observed levels."""
    converted = {}
    for col in columns:
        values = _as_numeric(df[col])
        levels = sorted(_to_python(level) for level in values.dropna().unique())
        converted[col] = pd.Categorical(values.map(_to_python), categories=levels, ordered=False)
    return df.assign(**converted)


def merge_levels(df: pd.DataFrame, merges: Mapping[str, Mapping[object, object]]) -> pd.DataFrame:
    """Recode categorical levels, e.g. fold the sparse ``core == 6`` level into ``8``.

    Merged-away levels are removed from the category set so they cannot
    produce empty indicator columns later on.
    """
    recoded = {}
    for col, mapping in merges.items():
        if col not in df.columns:
            continue
        series = df[col]
        if not isinstance(series.dtype, pd.CategoricalDtype):
            raise DataError(f"clean: cannot merge levels of non-categorical column '{col}'")
        present = {old: new for old, new in mapping.items() if old in series.cat.categories}
        levels = sorted({*(lvl for lvl in series.cat.categories if lvl not in present), *present.values()})
        values = series.astype(object).map(lambda v: present.get(v, v))
        recoded[col] = pd.Categorical(values, categories=levels, ordered=False)
    return df.assign(**recoded)


def deduplicate(df: pd.DataFrame) -> pd.DataFrame:
    """Collapse rows that are identical across all retained columns."""
    return df.drop_duplicates(keep="first")


class DataCleaner:
    """Apply the cleaning steps in a fixed order.

    Example:
        >>> from phone_tlbx.data import PhoneDataset
        >>> raw = PhoneDataset.from_csv("cellphone.csv")
        >>> cleaned = DataCleaner().clean(raw.df)
        >>> 6 in cleaned["core"].cat.categories
        False
    """

    def __init__(self, config: CleaningConfig | None = None) -> None:
        self.config = config or CleaningConfig()

    def steps(self) -> list[tuple[str, Callable[[pd.DataFrame], pd.DataFrame]]]:
        """Named cleaning steps in application order."""
        cfg = self.config
        return [
            ("drop_columns", lambda d: drop_columns(d, cfg.drop_columns)),
            (
                "rescale_memory",
                lambda d: rescale_memory(d, cfg.rescale_column, below=cfg.rescale_below, factor=cfg.rescale_factor),
            ),
            ("filter_placeholders", lambda d: filter_placeholders(d, cfg.positive_columns)),
            ("coerce_categorical", lambda d: coerce_categorical(d, cfg.categorical_columns)),
            ("merge_levels", lambda d: merge_levels(d, cfg.level_merges)),
            # last, so a merge that creates identical rows is still collapsed
            ("deduplicate", deduplicate),
        ]

    def clean(self, raw: pd.DataFrame) -> pd.DataFrame:
        """Return a cleaned copy of ``raw``.

        Raises:
            DataError: If a required column is missing or a step empties the data.
        """
        required = {
            self.config.rescale_column,
            *self.config.positive_columns,
            *self.config.categorical_columns,
        }
        missing = sorted(required - set(raw.columns))
        if missing:
            raise DataError(f"clean: missing required columns {missing}")
        if raw.empty:
            raise DataError("clean: input dataset is empty")

        df = raw.copy()
        for name, step in self.steps():
            n_before = len(df)
            df = df.pipe(step)
            logger.debug("clean step %s: %d -> %d rows", name, n_before, len(df))
            if df.empty:
                raise DataError(f"clean: no records left after step '{name}'")
        logger.info("cleaned dataset: %d of %d rows kept", len(df), len(raw))
        return df


def _as_numeric(series: pd.Series) -> pd.Series:
    if isinstance(series.dtype, pd.CategoricalDtype):
        series = series.astype(object)
    return pd.to_numeric(series, errors="coerce")


def _to_python(value: object) -> object:
    """Turn numpy scalars into plain ints/floats; integral floats become ints."""
    if hasattr(value, "item"):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
