"""
Screening engine for CoughScan.

Main orchestration: load a recording, run the audio analysis pipeline,
and classify the resulting record.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

from coughscan.analyzers.classifier import (
    RuleBasedConditionClassifier,
    create_condition_classifier,
)
from coughscan.core.loader import AudioLoader, create_audio_loader
from coughscan.core.models import ScreeningResult, Waveform
from coughscan.core.pipeline import AudioAnalysisPipeline
from coughscan.utils.errors import CoughScanError


class ScreeningEngine:
    """
    Main screening engine - orchestrates all components.

    Design:
    - Dependency Injection: loader, pipeline and classifier are injected
    - Parallel batches: recordings are independent and run on a pool
    - Errors: single-recording calls raise; analyze_batch collects
    """

    def __init__(
        self,
        loader: AudioLoader,
        pipeline: AudioAnalysisPipeline,
        classifier: RuleBasedConditionClassifier,
        max_workers: int = 4,
    ):
        """
        Initialize screening engine.

        Args:
            loader: AudioLoader instance
            pipeline: Waveform -> AnalysisRecord pipeline
            classifier: Ready condition classifier
            max_workers: Max parallel workers for analyze_batch
        """
        self.loader = loader
        self.pipeline = pipeline
        self.classifier = classifier
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.logger = logging.getLogger('engine')

    @property
    def analyzer_versions(self) -> Dict[str, str]:
        """Versions of the pipeline and classifier."""
        return {
            self.pipeline.name: self.pipeline.version,
            self.classifier.name: self.classifier.version,
        }

    def analyze(self, file_path: Path) -> ScreeningResult:
        """
        Screen one audio file.

        Raises:
            FileNotFoundError, AudioLoadError: If the file cannot be decoded
            InvalidInputError: If the decoded waveform is unusable
        """
        file_path = Path(file_path)
        start_time = time.perf_counter()

        self.logger.info(f"Loading audio: {file_path}")
        waveform = self.loader.load(file_path)

        return self._screen(waveform, str(file_path), start_time)

    def analyze_waveform(self, waveform: Waveform, source: str = "<waveform>") -> ScreeningResult:
        """Screen an already decoded waveform."""
        return self._screen(waveform, source, time.perf_counter())

    def _screen(self, waveform: Waveform, source: str, start_time: float) -> ScreeningResult:
        record = self.pipeline.analyze(waveform)
        classification = self.classifier.classify(record)

        processing_time = time.perf_counter() - start_time
        self.logger.info(
            f"{source}: {classification.dominant_condition} "
            f"({classification.overall_confidence}) in {processing_time:.3f}s"
        )

        return ScreeningResult(
            source=source,
            analysis=record,
            classification=classification,
            processing_time=processing_time,
            sample_rate=waveform.sample_rate,
        )

    def analyze_batch(self, file_paths: List[Path]) -> List[Optional[ScreeningResult]]:
        """
        Screen multiple files in parallel.

        Returns:
            Results in the same order as input; None where a file failed
        """
        self.logger.info(f"Screening batch of {len(file_paths)} files")

        futures = [self.executor.submit(self.analyze, path) for path in file_paths]

        results: List[Optional[ScreeningResult]] = []
        for path, future in zip(file_paths, futures):
            try:
                results.append(future.result())
            except (CoughScanError, OSError) as e:
                self.logger.error(f"Failed to screen {path}: {e}")
                results.append(None)

        return results

    def shutdown(self) -> None:
        """Shutdown thread pool gracefully."""
        self.logger.info("Shutting down screening engine")
        self.executor.shutdown(wait=True)

    def __enter__(self) -> "ScreeningEngine":
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Cleanup on context exit."""
        self.shutdown()


def create_screening_engine(config: Optional[Dict[str, Any]] = None) -> ScreeningEngine:
    """
    Factory function to create a fully configured screening engine.

    Args:
        config: Configuration dict (see get_default_config())

    Returns:
        ScreeningEngine: Ready engine
    """
    config = config or {}

    loader = create_audio_loader(config.get('audio') or {})
    pipeline = AudioAnalysisPipeline()
    classifier = create_condition_classifier(config)

    max_workers = (config.get('performance') or {}).get('max_workers', 4)

    return ScreeningEngine(
        loader=loader,
        pipeline=pipeline,
        classifier=classifier,
        max_workers=max_workers,
    )
