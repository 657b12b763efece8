"""
CoughScan - cough recording screening CLI

This module provides the command-line interface. It can be invoked as
'coughscan' from anywhere after installation.

Example usage:
    # Single file
    coughscan path/to/cough.wav
    coughscan --output result.json path/to/cough.wav

    # Batch processing
    coughscan --batch path/to/directory/
    coughscan --batch --recursive path/to/directory/
    coughscan --batch a.wav b.wav c.wav --output-file report.txt
"""

import argparse
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from coughscan import __version__
from coughscan.core.engine import create_screening_engine
from coughscan.core.models import ScreeningResult
from coughscan.core.result_writer import DISCLAIMER, TextResultWriter, create_result_writer
from coughscan.utils.config import load_config
from coughscan.utils.errors import ConfigurationError, CoughScanError
from coughscan.utils.logging import setup_logging


def print_single_result(file_path: Path, result: ScreeningResult) -> None:
    """Print screening results for a single file to console."""
    analysis = result.analysis
    classification = result.classification

    print("\n" + "=" * 60)
    print("COUGHSCAN SCREENING RESULTS")
    print("=" * 60)
    print(f"File: {file_path.name}")
    print(f"Processing Time: {result.processing_time:.3f}s")
    print("-" * 60)
    print(result.get_summary())
    print("-" * 60)

    print("\nAudio Features:")
    print(f"  Duration: {analysis.duration:.2f}s")
    print(f"  RMS: {analysis.rms:.4f}")
    print(f"  Zero-Crossing Rate: {analysis.zero_crossing_rate:.4f}")
    print(f"  Spectral Centroid: {analysis.spectral_centroid:.1f} Hz")
    print(f"  MFCC Frames: {analysis.num_frames}")

    print("\nConditions:")
    for condition in classification.conditions:
        print(
            f"  {condition.name:<12} {condition.probability:6.2f}%  "
            f"({condition.confidence})"
        )
    print(f"\n{DISCLAIMER}")


def analyze_single_file(
    audio_file: Path,
    config: Dict[str, Any],
    output_json: Optional[Path] = None,
    output_txt: Optional[Path] = None,
    verbose: bool = False
) -> int:
    """
    Screen a single audio file.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if not audio_file.exists():
        print(f"Error: Audio file not found: {audio_file}")
        return 1

    print(f"Screening: {audio_file}")

    with create_screening_engine(config) as engine:
        try:
            result = engine.analyze(audio_file)
        except (CoughScanError, OSError) as e:
            print(f"Error during screening: {e}")
            if verbose:
                traceback.print_exc()
            return 1

    print_single_result(audio_file, result)

    if output_json:
        with open(output_json, 'w', encoding='utf-8') as f:
            f.write(result.to_json(indent=2))
        print(f"\nJSON results saved to: {output_json}")

    if output_txt:
        TextResultWriter().write({audio_file: result}, output_txt)
        print(f"Text results saved to: {output_txt}")

    return 0


def analyze_batch(
    inputs: List[Path],
    config: Dict[str, Any],
    recursive: bool = False,
    output_txt: Optional[Path] = None,
    output_json: Optional[Path] = None
) -> int:
    """
    Screen multiple audio files in batch mode.

    Returns:
        Exit code (0 if every file succeeded, 1 otherwise)
    """
    from coughscan.core.batch_processor import BatchProcessor

    def progress_callback(current: int, total: int, file_path: Path) -> None:
        print(f"[{current}/{total}] Screening: {file_path.name}")

    with create_screening_engine(config) as engine:
        processor = BatchProcessor(
            engine=engine,
            supported_formats=config.get('audio', {}).get('supported_formats'),
            progress_callback=progress_callback
        )
        batch_result = processor.process(inputs, recursive=recursive)

    print("\n" + "=" * 60)
    print("BATCH SCREENING COMPLETE")
    print("=" * 60)
    print(f"Total Files: {batch_result.total_files}")
    print(f"Successful: {batch_result.success_count}")
    print(f"Failed: {batch_result.failure_count}")
    print(f"Success Rate: {batch_result.success_rate:.1f}%")
    print(f"Total Time: {batch_result.total_time:.2f}s")

    if batch_result.failed:
        print("\nFailed Files:")
        for path, error in batch_result.failed.items():
            print(f"  {Path(path).name}: {error}")

    # Text report is the default output
    if output_txt or (not output_json and batch_result.successful):
        txt_path = output_txt or Path(
            f"coughscan_results_{datetime.now().strftime('%Y%m%d_%H%M%S')}.txt"
        )
        create_result_writer("text").write(batch_result.successful, txt_path, failed=batch_result.failed)
        print(f"\nText results saved to: {txt_path}")

    if output_json:
        create_result_writer("json").write(batch_result.successful, output_json, failed=batch_result.failed)
        print(f"JSON results saved to: {output_json}")

    if batch_result.total_files == 0:
        return 1
    return 0 if batch_result.failure_count == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the coughscan command."""
    parser = argparse.ArgumentParser(
        prog="coughscan",
        description="Screen cough recordings with MFCC features and rule-based condition scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Single file:
    coughscan cough.wav
    coughscan --output result.json cough.wav

  Batch processing:
    coughscan --batch recordings/
    coughscan --batch --recursive recordings/
    coughscan --batch a.wav b.wav --output-file report.txt
        """
    )

    parser.add_argument(
        "inputs",
        type=Path,
        nargs="+",
        help="Audio file(s) or directory to screen"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"coughscan {__version__}"
    )
    parser.add_argument(
        "--batch",
        "-b",
        action="store_true",
        help="Enable batch mode for multiple files or directories"
    )
    parser.add_argument(
        "--recursive",
        "-r",
        action="store_true",
        help="Search directories recursively (only with --batch)"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to save JSON output (single file mode)"
    )
    parser.add_argument(
        "--output-file",
        "-o",
        type=Path,
        default=None,
        help="Path to save text results file (.txt)"
    )
    parser.add_argument(
        "--output-json",
        type=Path,
        default=None,
        help="Path to save JSON results file (batch mode)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for coughscan."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(str(args.config) if args.config else None)
        logging_config = config.get("logging", {})
        setup_logging(
            level="DEBUG" if args.verbose else logging_config.get("level", "INFO"),
            log_format=logging_config.get("format", "text"),
            log_file=logging_config.get("file"),
            colored=True,
            console_enabled=True
        )
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1

    is_batch = args.batch or len(args.inputs) > 1 or args.inputs[0].is_dir()

    try:
        if is_batch:
            return analyze_batch(
                inputs=args.inputs,
                config=config,
                recursive=args.recursive,
                output_txt=args.output_file,
                output_json=args.output_json
            )

        return analyze_single_file(
            audio_file=args.inputs[0],
            config=config,
            output_json=args.output,
            output_txt=args.output_file,
            verbose=args.verbose
        )
    except ConfigurationError as e:
        # Raised while building the engine (e.g. unknown condition names)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
