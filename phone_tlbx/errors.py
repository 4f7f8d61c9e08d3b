"""Exception and warning types raised by the phone price pipeline."""


class DataError(ValueError):
    """Malformed, incomplete, or empty input data.

    Messages are prefixed with the stage that detected the problem
    (``load:``, ``clean:``, ``fit:``) so a failed run points at its origin.
    """


class RankDeficiencyError(ValueError):
    """The design matrix of a candidate model is not of full column rank."""

    def __init__(self, covariates: tuple[str, ...], rank: int, n_columns: int) -> None:
        self.covariates = covariates
        self.rank = rank
        self.n_columns = n_columns
        super().__init__(
            f"fit: design matrix for {list(covariates)} has rank {rank} < {n_columns} columns",
        )


class ConvergenceExhaustionWarning(UserWarning):
    """Stepwise search hit its iteration limit before reaching a local optimum."""
