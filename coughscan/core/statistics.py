"""
Whole-signal statistics for CoughScan: RMS energy, zero-crossing rate
and spectral centroid.
"""

import numpy as np

from coughscan.core.spectral import dft, magnitude_spectrum
from coughscan.utils.errors import InvalidInputError


def _require_samples(signal) -> np.ndarray:
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        raise InvalidInputError("Signal is empty", field="samples")
    return x.reshape(-1)


def rms(signal) -> float:
    """Root mean square energy."""
    x = _require_samples(signal)
    return float(np.sqrt(np.mean(x * x)))


def zero_crossing_rate(signal) -> float:
    """
    Fraction of samples at which the sign flips.

    A sample counts as non-negative when x >= 0, so zeros never
    start a crossing against positive neighbours. The count is divided
    by the total sample count, not the number of pairs.
    """
    x = _require_samples(signal)
    non_negative = x >= 0
    crossings = np.count_nonzero(non_negative[1:] != non_negative[:-1])
    return crossings / x.size


def spectral_centroid(signal, sample_rate: int) -> float:
    """
    Magnitude-weighted mean frequency over the whole signal.

    The transform runs over every sample at once (no framing). Bin i maps
    to i * sample_rate / (2 * M) with M the number of bins. Returns 0.0
    when the total magnitude is zero.
    """
    x = _require_samples(signal)
    magnitude = magnitude_spectrum(dft(x))
    n_bins = magnitude.size
    frequencies = np.arange(n_bins) * sample_rate / (2 * n_bins)

    total = magnitude.sum()
    if total <= 0:
        return 0.0
    return float(np.dot(frequencies, magnitude) / total)
