"""
Screening report writers.

Each writer turns {path: ScreeningResult} plus optional failures
({path: error message}) into one report file. Add a format by
subclassing ResultWriter and registering it in WRITERS.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type

from coughscan.core.models import ScreeningResult

DISCLAIMER = "Screening aid only - not a medical diagnosis."

RULE_WIDTH = 70


class ResultWriter(ABC):
    """Strategy interface for report formats."""

    format_name = "base"

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"result_writer.{self.format_name}")

    def write(
        self,
        results: Mapping[Any, ScreeningResult],
        output_path: Path,
        failed: Optional[Mapping[Any, str]] = None
    ) -> None:
        """Render the report and write it to output_path (parents are created)."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(results, failed or {}), encoding='utf-8')
        self.logger.info(f"Wrote {len(results)} result(s) to {output_path}")

    @abstractmethod
    def render(self, results: Mapping[Any, ScreeningResult], failed: Mapping[Any, str]) -> str:
        """Report body as a string."""


class TextResultWriter(ResultWriter):
    """Plain-text report, one block per recording."""

    format_name = "text"

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def render(self, results: Mapping[Any, ScreeningResult], failed: Mapping[Any, str]) -> str:
        heavy, light = "=" * RULE_WIDTH, "-" * RULE_WIDTH

        lines = [heavy, "COUGHSCAN SCREENING RESULTS", heavy]
        if self.include_timestamp:
            lines.append(f"Generated: {datetime.now():%Y-%m-%d %H:%M:%S}")
        lines.append(f"Recordings Screened: {len(results)}")
        if failed:
            lines.append(f"Recordings Failed: {len(failed)}")
        lines += [DISCLAIMER, heavy, ""]

        for path, result in results.items():
            lines += [light, *self._result_lines(Path(path), result), ""]

        if failed:
            lines += [light, "FAILED", light]
            lines += [f"{Path(path).name}: {error}" for path, error in failed.items()]
            lines.append("")

        lines += [heavy, "END OF REPORT", heavy]
        return "\n".join(lines) + "\n"

    @staticmethod
    def _result_lines(path: Path, result: ScreeningResult) -> List[str]:
        analysis = result.analysis
        classification = result.classification
        lines = [
            f"FILE: {path.name}",
            f"PATH: {path}",
            "-" * RULE_WIDTH,
            f"Processing Time: {result.processing_time:.3f}s",
            f"Duration: {analysis.duration:.2f}s",
            f"RMS: {analysis.rms:.4f}",
            f"Zero-Crossing Rate: {analysis.zero_crossing_rate:.4f}",
            f"Spectral Centroid: {analysis.spectral_centroid:.1f} Hz",
            f"MFCC Frames: {analysis.num_frames}",
            "",
            f"Dominant Condition: {classification.dominant_condition} "
            f"({classification.overall_confidence} confidence)",
        ]
        lines += [
            f"  {c.name:<12} {c.probability:6.2f}%  score={c.score:.2f}  {c.confidence}"
            for c in classification.conditions
        ]
        return lines


class JSONResultWriter(ResultWriter):
    """Single JSON document keyed by recording path."""

    format_name = "json"

    def __init__(self, indent: int = 2):
        super().__init__()
        self.indent = indent

    def render(self, results: Mapping[Any, ScreeningResult], failed: Mapping[Any, str]) -> str:
        document: Dict[str, Any] = {
            "generated": datetime.now().isoformat(),
            "disclaimer": DISCLAIMER,
            "total_files": len(results),
            "results": {str(path): result.to_dict() for path, result in results.items()},
            "failed": {str(path): error for path, error in failed.items()},
        }
        return json.dumps(document, indent=self.indent, default=str)


WRITERS: Dict[str, Type[ResultWriter]] = {
    "text": TextResultWriter,
    "txt": TextResultWriter,
    "json": JSONResultWriter,
}


def create_result_writer(format: str = "text", **kwargs) -> ResultWriter:
    """
    Writer for a format name ("text", "txt" or "json"); kwargs go to its constructor.

    Raises:
        ValueError: If the format is unknown
    """
    try:
        writer_class = WRITERS[format.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown report format: {format}. Supported: {', '.join(WRITERS)}"
        ) from None
    return writer_class(**kwargs)
