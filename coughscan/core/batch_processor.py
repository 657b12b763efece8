"""
Batch processor for screening multiple recordings.

Failures are collected per item: one bad recording is reported in
BatchResult.failed and never stops or alters the items after it.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, List, Optional, Union

from coughscan.core.models import ScreeningResult
from coughscan.utils.errors import CoughScanError
from coughscan.utils.logging import create_logger_with_context


@dataclass
class BatchResult:
    """
    Result of a batch operation.

    Keys are whatever identifies an item: an input index for record
    batches, a Path for file batches. `order` preserves input order.
    """
    successful: Dict[Hashable, Any] = field(default_factory=dict)
    failed: Dict[Hashable, str] = field(default_factory=dict)
    order: List[Hashable] = field(default_factory=list)
    total_files: int = 0
    total_time: float = 0.0

    @property
    def success_count(self) -> int:
        """Number of successfully processed items."""
        return len(self.successful)

    @property
    def failure_count(self) -> int:
        """Number of failed items."""
        return len(self.failed)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total_files == 0:
            return 0.0
        return (self.success_count / self.total_files) * 100

    def results_in_order(self) -> List[Optional[Any]]:
        """Results aligned with the input; None where an item failed."""
        return [self.successful.get(key) for key in self.order]


class BatchProcessor:
    """
    Screens multiple audio files using a screening engine.

    Only handles batch orchestration; loading, analysis and
    classification are delegated to the engine.
    """

    def __init__(
        self,
        engine,
        supported_formats: Optional[List[str]] = None,
        progress_callback: Optional[Callable[[int, int, Path], None]] = None
    ):
        """
        Initialize batch processor.

        Args:
            engine: Screening engine instance (dependency injection)
            supported_formats: File suffixes to pick up from directories
                (defaults to the engine loader's formats)
            progress_callback: Optional callback(current, total, file_path)
        """
        self.engine = engine
        if supported_formats is None:
            supported_formats = sorted(engine.loader.supported_suffixes)
        self.audio_extensions = {s.lower() for s in supported_formats}
        self.progress_callback = progress_callback
        self.logger = logging.getLogger("batch_processor")

    def process(
        self,
        inputs: Union[Path, List[Path]],
        recursive: bool = False
    ) -> BatchResult:
        """
        Screen one or more audio files or directories.

        Args:
            inputs: Single path or list of paths (files or directories)
            recursive: If True, search directories recursively

        Returns:
            BatchResult keyed by file path
        """
        start_time = time.perf_counter()

        files = self._collect_files(inputs, recursive)

        if not files:
            self.logger.warning("No audio files found to process")
            return BatchResult(total_files=0, total_time=0.0)

        self.logger.info(f"Screening {len(files)} audio files")

        result = self._process_files(files)
        result.total_time = time.perf_counter() - start_time

        self.logger.info(
            f"Batch complete: {result.success_count}/{result.total_files} succeeded "
            f"in {result.total_time:.2f}s"
        )

        return result

    def _collect_files(
        self,
        inputs: Union[Path, List[Path]],
        recursive: bool
    ) -> List[Path]:
        """Collect audio files from inputs, de-duplicated and sorted."""
        if isinstance(inputs, (str, Path)):
            inputs = [inputs]

        files = []
        for path in map(Path, inputs):
            if path.is_file():
                if self._is_audio_file(path):
                    files.append(path)
                else:
                    self.logger.warning(f"Skipping non-audio file: {path}")
            elif path.is_dir():
                pattern = "**/*" if recursive else "*"
                files.extend(
                    p for p in path.glob(pattern)
                    if p.is_file() and self._is_audio_file(p)
                )
            else:
                self.logger.warning(f"Path not found: {path}")

        return sorted(set(files))

    def _is_audio_file(self, path: Path) -> bool:
        return path.suffix.lower() in self.audio_extensions

    def _process_files(self, files: List[Path]) -> BatchResult:
        """Screen files sequentially, collecting failures per file."""
        result = BatchResult(total_files=len(files), order=list(files))

        for processed, file_path in enumerate(files, start=1):
            if self.progress_callback:
                self.progress_callback(processed, len(files), file_path)

            item_logger = create_logger_with_context(
                "batch_processor", {"item": processed, "file": str(file_path)}
            )
            try:
                screening: ScreeningResult = self.engine.analyze(file_path)
                result.successful[file_path] = screening
                item_logger.debug(f"Screened: {file_path}")
            except (CoughScanError, OSError) as e:
                result.failed[file_path] = str(e)
                item_logger.error(f"Failed to screen {file_path}: {e}")

        return result
