"""
Analyzer contract for CoughScan.

The pipeline (Waveform -> AnalysisRecord) and the condition classifier
(AnalysisRecord -> ClassificationResult) share one calling convention:
a name, a version, and analyze(item). Analyzer is the structural type;
BaseAnalyzer is an optional base that adds timing and error wrapping.
"""

import logging
import time
from abc import abstractmethod
from typing import Any, Generic, Protocol, TypeVar

from coughscan.utils.errors import AnalysisError, CoughScanError

InputT = TypeVar('InputT', contravariant=True)
T = TypeVar('T')


class Analyzer(Protocol[InputT, T]):
    """Anything with name, version and analyze(item) -> T."""

    @property
    def name(self) -> str:
        """Stable identifier, e.g. 'audio_pipeline'."""
        ...

    @property
    def version(self) -> str:
        """Reported alongside results so runs can be compared."""
        ...

    def analyze(self, item: InputT) -> T:
        """
        Raises:
            CoughScanError: If the input is malformed or analysis fails
        """
        ...


class BaseAnalyzer(Generic[T]):
    """
    Template method base: subclasses implement _analyze_impl().

    analyze() logs timing at debug level. Deliberate CoughScanErrors
    (InvalidInputError, NotReadyError, ...) reach the caller unchanged;
    any other exception is logged and re-raised as AnalysisError with
    the original attached.
    """

    def __init__(self, name: str, version: str):
        self._name = name
        self._version = version
        self.logger = logging.getLogger(f"analyzer.{name}")

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    def analyze(self, item: Any) -> T:
        started = time.perf_counter()
        try:
            result = self._analyze_impl(item)
        except CoughScanError:
            raise
        except Exception as e:
            self.logger.error(f"{self.name} failed on {type(item).__name__}: {e}")
            raise AnalysisError(
                f"{self.name} analysis failed: {e}",
                analyzer_name=self.name,
                original_error=e
            ) from e

        self.logger.debug(f"{self.name} v{self.version} took {time.perf_counter() - started:.3f}s")
        return result

    @abstractmethod
    def _analyze_impl(self, item: Any) -> T:
        raise NotImplementedError
