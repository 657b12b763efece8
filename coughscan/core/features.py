"""
Frame feature extractor for CoughScan.

Turns a waveform into the per-frame cepstral feature set used by the
condition classifier. The cepstral step is a direct cosine projection
over the log power spectrum; there is no mel filter bank. The rule
thresholds in the classifier are tuned against this exact shape.
"""

from typing import TYPE_CHECKING, Union

import numpy as np

from coughscan.core.models import N_COEFFICIENTS
from coughscan.core.spectral import dft_frames, power_spectrum
from coughscan.utils.errors import FeatureExtractionError, InvalidInputError

if TYPE_CHECKING:
    from coughscan.core.models import Waveform


PRE_EMPHASIS = 0.97
WINDOW_SIZE = 2048
HOP_SIZE = 512
LOG_FLOOR = 1e-10


def pre_emphasis(signal: np.ndarray, alpha: float = PRE_EMPHASIS) -> np.ndarray:
    """
    First-order high-pass filter: y[0] = x[0], y[i] = x[i] - alpha * x[i-1].
    """
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    emphasized = np.empty_like(x)
    emphasized[0] = x[0]
    emphasized[1:] = x[1:] - alpha * x[:-1]
    return emphasized


def frame_count(num_samples: int, window_size: int = WINDOW_SIZE, hop_size: int = HOP_SIZE) -> int:
    """Number of full frames; the trailing partial frame is dropped."""
    if num_samples < window_size:
        return 0
    return (num_samples - window_size) // hop_size + 1


def frame_signal(
    signal: np.ndarray,
    window_size: int = WINDOW_SIZE,
    hop_size: int = HOP_SIZE
) -> np.ndarray:
    """
    Split a signal into overlapping frames.

    Returns:
        np.ndarray: Shape (n_frames, window_size); (0, window_size) for
        signals shorter than one window
    """
    x = np.asarray(signal, dtype=np.float64)
    n_frames = frame_count(x.size, window_size, hop_size)
    if n_frames == 0:
        return np.empty((0, window_size), dtype=np.float64)

    starts = np.arange(n_frames) * hop_size
    return x[starts[:, None] + np.arange(window_size)[None, :]]


def hamming_window(size: int) -> np.ndarray:
    """w[n] = 0.54 - 0.46 * cos(2*pi*n / (N-1))."""
    if size == 1:
        return np.ones(1)
    n = np.arange(size)
    return 0.54 - 0.46 * np.cos(2 * np.pi * n / (size - 1))


def cepstral_projection(power: np.ndarray, n_coefficients: int = N_COEFFICIENTS) -> np.ndarray:
    """
    Project log power onto cosines.

    coefficient[c] = sum_j log(power[j] + 1e-10) * cos(pi * c * (j + 0.5) / M)
    where M is the number of power bins. Accepts one spectrum (M,) or a
    stack (n_frames, M).
    """
    power = np.asarray(power, dtype=np.float64)
    n_bins = power.shape[-1]
    j = np.arange(n_bins)
    c = np.arange(n_coefficients)
    basis = np.cos(np.pi * np.outer(c, j + 0.5) / n_bins)
    return np.log(power + LOG_FLOOR) @ basis.T


class FeatureExtractor:
    """
    Stateless MFCC extraction.

    All methods are static - no instance state needed.
    """

    @staticmethod
    def extract_frame(frame: np.ndarray) -> np.ndarray:
        """
        Cepstral vector of one already pre-emphasized frame.

        Args:
            frame: Frame samples (any length >= 1)

        Returns:
            np.ndarray: 13 coefficients
        """
        frame = np.asarray(frame, dtype=np.float64)
        if frame.ndim != 1 or frame.size == 0:
            raise InvalidInputError(
                f"Frame must be a non-empty 1-D array, got shape {frame.shape}",
                field="frame"
            )
        return FeatureExtractor._project(frame[None, :])[0]

    @staticmethod
    def extract_mfcc(samples: Union[np.ndarray, "Waveform"]) -> np.ndarray:
        """
        Extract the full MFCC feature set of a signal.

        Args:
            samples: Raw samples or a Waveform

        Returns:
            np.ndarray: Flat array of n_frames * 13 coefficients in frame order

        Raises:
            FeatureExtractionError: If the signal yields non-finite coefficients

        Time: one batched O(N^2) transform per frame
        """
        signal = getattr(samples, 'samples', samples)
        emphasized = pre_emphasis(signal)
        frames = frame_signal(emphasized)
        if frames.shape[0] == 0:
            return np.empty(0, dtype=np.float64)
        features = FeatureExtractor._project(frames).reshape(-1)
        if not np.all(np.isfinite(features)):
            raise FeatureExtractionError(
                "MFCC feature set contains non-finite values",
                feature_name="mfcc"
            )
        return features

    @staticmethod
    def _project(frames: np.ndarray) -> np.ndarray:
        windowed = frames * hamming_window(frames.shape[1])
        power = power_spectrum(dft_frames(windowed))
        return cepstral_projection(power)
