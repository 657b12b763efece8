"""
Recording loader for CoughScan.

Checks a file before decoding it (existence, suffix, size), decodes it
with soundfile (librosa for containers libsndfile cannot read), keeps
the first channel, and checks the decoded signal (non-empty, finite,
within the duration cap) before wrapping it in a Waveform.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Set, Tuple

import librosa
import numpy as np
import soundfile as sf

from coughscan.core.models import Waveform
from coughscan.utils.errors import AudioLoadError, FileTooLargeError, UnsupportedFormatError


SUPPORTED_FORMATS: Tuple[str, ...] = ('.wav', '.flac', '.aif', '.aiff', '.ogg', '.mp3')

MAX_FILE_SIZE: int = 104857600  # 100 MB
# The whole-signal transform is O(N^2); keep recordings cough-length
MAX_DURATION: float = 10.0  # seconds

# Below this RMS a recording is logged as silent (still screened)
SILENCE_RMS = 1e-6

logger = logging.getLogger("loader")


def _megabytes(num_bytes: float) -> str:
    return f"{num_bytes / 1024 / 1024:.1f} MB"


class AudioLoader:
    """
    File -> Waveform.

    Holds only its limits, so one instance can serve every worker
    thread of the screening engine.
    """

    def __init__(
        self,
        target_sr: Optional[int] = None,
        max_file_size: int = MAX_FILE_SIZE,
        max_duration: float = MAX_DURATION,
        supported_formats: Iterable[str] = SUPPORTED_FORMATS
    ):
        """
        Args:
            target_sr: Resample to this rate; None keeps the file's own rate
            max_file_size: Largest accepted file, in bytes
            max_duration: Longest accepted recording, in seconds
            supported_formats: Accepted suffixes (case-insensitive)
        """
        self.target_sr = target_sr
        self.max_file_size = max_file_size
        self.max_duration = max_duration
        self.supported_suffixes: Set[str] = {s.lower() for s in supported_formats}

    def load(self, file_path: Path) -> Waveform:
        """
        Decode a recording into a single-channel Waveform.

        Raises:
            FileNotFoundError: No such file
            UnsupportedFormatError: Suffix not in supported_suffixes
            FileTooLargeError: File over max_file_size, or recording over max_duration
            AudioLoadError: Undecodable, empty, or non-finite audio
        """
        path = Path(file_path)
        self._check_file(path)

        samples, sample_rate = self._decode(path)
        self._check_signal(samples, sample_rate, path)

        if self.target_sr and sample_rate != self.target_sr:
            samples = self._resample(samples, sample_rate, path)
            sample_rate = self.target_sr

        logger.info(f"Loaded {path.name}: {sample_rate} Hz, {samples.size / sample_rate:.2f}s")
        return Waveform(samples=samples, sample_rate=sample_rate)

    def _check_file(self, path: Path) -> None:
        if not path.is_file():
            raise FileNotFoundError(f"Audio file not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in self.supported_suffixes:
            raise UnsupportedFormatError(
                f"Unsupported audio format '{suffix}' for {path.name}. "
                f"Accepted: {', '.join(sorted(self.supported_suffixes))}",
                format=suffix
            )

        size = path.stat().st_size
        if size > self.max_file_size:
            raise FileTooLargeError(
                f"{path.name} is {_megabytes(size)}, limit is {_megabytes(self.max_file_size)}",
                file_size=size,
                max_size=self.max_file_size
            )

    def _decode(self, path: Path) -> Tuple[np.ndarray, int]:
        """First channel as float64, plus the native sample rate."""
        try:
            # (frames, channels)
            data, sample_rate = sf.read(str(path), dtype='float64', always_2d=True)
            first = data[:, 0]
        except RuntimeError as sf_error:
            logger.debug(f"soundfile cannot read {path.name} ({sf_error}); trying librosa")
            try:
                # (channels, samples) when multi-channel
                data, sample_rate = librosa.load(str(path), sr=None, mono=False)
            except Exception as e:
                raise AudioLoadError(
                    f"Could not decode {path}: {e}",
                    file_path=str(path)
                ) from e
            first = data[0] if data.ndim > 1 else data

        return np.asarray(first, dtype=np.float64), int(sample_rate)

    def _resample(self, samples: np.ndarray, sample_rate: int, path: Path) -> np.ndarray:
        try:
            resampled = librosa.resample(samples, orig_sr=sample_rate, target_sr=self.target_sr)
        except Exception as e:
            raise AudioLoadError(
                f"Could not resample {path.name} from {sample_rate} Hz to {self.target_sr} Hz: {e}",
                file_path=str(path)
            ) from e
        return np.asarray(resampled, dtype=np.float64)

    def _check_signal(self, samples: np.ndarray, sample_rate: int, path: Path) -> None:
        """Runs on the decoded signal at its native rate, before any resampling."""
        if samples.size == 0:
            raise AudioLoadError(f"{path.name} contains no samples", file_path=str(path))

        duration = samples.size / sample_rate
        if duration > self.max_duration:
            raise FileTooLargeError(
                f"{path.name} is {duration:.1f}s long, limit is {self.max_duration:.1f}s",
                file_size=int(samples.size),
                max_size=int(self.max_duration * sample_rate)
            )

        if not np.isfinite(samples).all():
            raise AudioLoadError(f"{path.name} contains NaN or infinite samples",
                                 file_path=str(path))

        if np.sqrt(np.mean(samples * samples)) < SILENCE_RMS:
            logger.warning(f"{path.name} appears to be silent")


def create_audio_loader(config: Optional[Dict[str, Any]] = None) -> AudioLoader:
    """Build a loader from the "audio" configuration section."""
    config = config or {}
    return AudioLoader(
        target_sr=config.get('target_sample_rate'),
        max_file_size=config.get('max_file_size', MAX_FILE_SIZE),
        max_duration=config.get('max_duration', MAX_DURATION),
        supported_formats=config.get('supported_formats', SUPPORTED_FORMATS)
    )
