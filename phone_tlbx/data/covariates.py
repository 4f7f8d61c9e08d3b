"""Covariate specifications and immutable covariate sets.

Every covariate is tagged exactly once, during cleaning, as either continuous
or categorical. The design-matrix builder reads the tag instead of inspecting
dtypes at fit time, so a column can never silently switch encoding between two
candidate models.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class ContinuousCovariate:
    """Covariate entering the design matrix as a single numeric column."""

    name: str

    @property
    def df(self) -> int:
        """Number of design-matrix columns contributed by this covariate."""
        return 1

    def term(self) -> str:
        """Patsy term for this covariate."""
        return self.name


@dataclass(frozen=True)
class CategoricalCovariate:
    """Covariate expanded into ``len(levels) - 1`` treatment indicators.

    Attributes:
        name: Column name.
        levels: Ordered, fixed level set.
        reference: Baseline level absorbed by the intercept. Defaults to the
            smallest level.
    """

    name: str
    levels: tuple
    reference: object = None

    def __post_init__(self) -> None:
        if not self.levels:
            raise ValueError(f"Categorical covariate '{self.name}' needs at least one level.")
        if self.reference is None:
            object.__setattr__(self, "reference", min(self.levels))
        elif self.reference not in self.levels:
            raise ValueError(f"Reference level {self.reference!r} not in levels of '{self.name}'.")

    @property
    def df(self) -> int:
        return len(self.levels) - 1

    @property
    def contrast_levels(self) -> tuple:
        """Non-reference levels in design-matrix column order."""
        return tuple(level for level in self.levels if level != self.reference)

    def term(self) -> str:
        return f"C({self.name}, Treatment(reference={self.reference!r}))"


Covariate = ContinuousCovariate | CategoricalCovariate


@dataclass(frozen=True)
class CovariateSet:
    """Ordered, immutable set of covariate names currently in a model.

    ``add`` and ``remove`` return new sets so each selection stage leaves an
    auditable trail of the sets it visited.
    """

    names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(set(self.names)) != len(self.names):
            raise ValueError(f"Duplicate covariates in {self.names}.")

    @classmethod
    def of(cls, names: Iterable[str]) -> CovariateSet:
        return cls(tuple(str(name) for name in names))

    def add(self, name: str) -> CovariateSet:
        if name in self.names:
            raise ValueError(f"Covariate '{name}' already in set.")
        return CovariateSet((*self.names, name))

    def remove(self, name: str) -> CovariateSet:
        if name not in self.names:
            raise KeyError(f"Covariate '{name}' not in set.")
        return CovariateSet(tuple(n for n in self.names if n != name))

    def sort_key(self) -> tuple[int, tuple[str, ...]]:
        """Ordering used to break ties: smaller sets first, then by sorted names."""
        return len(self.names), tuple(sorted(self.names))

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __str__(self) -> str:
        return "{" + ", ".join(self.names) + "}"


def resolve_covariates(names: Sequence[str], specs: dict[str, Covariate]) -> list[Covariate]:
    """Look up the tagged specification of every name, in order."""
    missing = [name for name in names if name not in specs]
    if missing:
        raise KeyError(f"Unknown covariates {missing}; known: {sorted(specs)}")
    return [specs[name] for name in names]
