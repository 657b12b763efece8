"""Shared fixtures for CoughScan tests."""

import logging
from datetime import datetime
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from coughscan.core.models import N_COEFFICIENTS, AnalysisRecord, Waveform


# ---------------------------------------------------------------------------
# Signal helpers
# ---------------------------------------------------------------------------


def sine(freq: float, sample_rate: int, num_samples: int, amplitude: float = 0.5) -> np.ndarray:
    """Pure tone sampled at sample_rate."""
    t = np.arange(num_samples) / sample_rate
    return amplitude * np.sin(2 * np.pi * freq * t)


def make_record(
    duration: float = 1.0,
    rms: float = 0.05,
    zero_crossing_rate: float = 0.05,
    spectral_centroid: float = 1800.0,
    mfcc_features=None,
    num_frames: int = 4,
) -> AnalysisRecord:
    """AnalysisRecord with explicit scalars and an inert feature set by default."""
    if mfcc_features is None:
        mfcc_features = np.zeros(num_frames * N_COEFFICIENTS)
    return AnalysisRecord(
        duration=duration,
        rms=rms,
        zero_crossing_rate=zero_crossing_rate,
        spectral_centroid=spectral_centroid,
        mfcc_features=mfcc_features,
        timestamp=datetime(2026, 1, 1, 0, 0, 0),
    )


def wheeze_features(num_frames: int, matching: int) -> np.ndarray:
    """Feature set where the first `matching` frames carry the wheeze pattern."""
    frames = np.zeros((num_frames, N_COEFFICIENTS))
    frames[:matching, 2] = 1.0
    frames[:matching, 3] = -1.0
    return frames.reshape(-1)


def write_wav(path: Path, samples: np.ndarray, sample_rate: int, subtype: str = "PCM_16") -> Path:
    """Write float samples (mono or (frames, channels)); subtype="FLOAT" keeps NaN and inf."""
    path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(path), samples, sample_rate, subtype=subtype)
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def silence_1s():
    """One second of digital silence at 44.1 kHz."""
    return Waveform(samples=np.zeros(44100), sample_rate=44100)


@pytest.fixture
def tone_waveform():
    """Half a second of a 440 Hz tone at 8 kHz (four MFCC frames)."""
    return Waveform(samples=sine(440.0, 8000, 4000), sample_rate=8000)


@pytest.fixture
def record_factory():
    """Factory for AnalysisRecords."""
    return make_record


@pytest.fixture
def cough_wav(tmp_path):
    """Short tone written to a WAV file."""
    return write_wav(tmp_path / "cough.wav", sine(440.0, 8000, 4000), 8000)


@pytest.fixture
def empty_wav(tmp_path):
    """WAV file with no samples."""
    return write_wav(tmp_path / "empty.wav", np.zeros(0), 8000)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Drop handlers installed by setup_logging() during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        # pytest's own capture handlers are managed by pytest
        if not type(handler).__module__.startswith("_pytest"):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
