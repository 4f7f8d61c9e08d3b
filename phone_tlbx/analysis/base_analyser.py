"""Base analyzer class for the analysis stages."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Abstract base class for analysis stages.

    All analyzers must:
    1. Accept a ``ModelView`` (plus stage parameters) in their constructor
    2. Implement ``fit()`` to perform the computation and return self for chaining
    3. Implement ``result()`` to return a frozen dataclass with results

    Results are immutable artifacts: a later stage reads them but never
    modifies them, and plotting helpers only consume ``*Result`` objects.

    ```python
    @dataclass(frozen=True)
    class MyResult:
        summary: pd.DataFrame

    class MyAnalyzer(BaseAnalyser):
        def __init__(self, view: ModelView):
            self._view = view
            self._summary = None

        def fit(self) -> "MyAnalyzer":
            self._summary = ...
            return self

        def result(self) -> MyResult:
            if self._summary is None:
                raise ValueError("Call fit() first")
            return MyResult(self._summary)
    ```
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Fit the analyzer to the data.

        Returns:
            Self for method chaining.
        """
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return analysis results as a frozen dataclass instance.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        ...
