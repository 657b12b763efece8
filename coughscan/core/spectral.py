"""
Direct discrete Fourier transform for CoughScan.

Every coefficient is evaluated from the defining sum, without a fast
transform, so the spectra match the reference screening behavior.
Outputs are interleaved: [re(X0), im(X0), re(X1), im(X1), ...].
"""

from functools import lru_cache

import numpy as np

from coughscan.utils.errors import InvalidInputError

# Rows evaluated by recurrence before the twiddles are recomputed exactly
_RESEED_INTERVAL = 256


def _as_frame(frame) -> np.ndarray:
    x = np.asarray(frame, dtype=np.float64)
    if x.ndim != 1:
        raise InvalidInputError(
            f"Transform input must be one-dimensional, got shape {x.shape}",
            field="frame"
        )
    if x.size == 0:
        raise InvalidInputError("Cannot transform an empty frame", field="frame")
    return x


def _interleave(spectrum: np.ndarray) -> np.ndarray:
    """Pack complex coefficients as alternating real/imaginary values."""
    out = np.empty(spectrum.shape[:-1] + (2 * spectrum.shape[-1],), dtype=np.float64)
    out[..., 0::2] = spectrum.real
    out[..., 1::2] = spectrum.imag
    return out


def dft(frame) -> np.ndarray:
    """
    Compute the DFT of a real frame by direct summation.

    X[k] = sum_n x[n] * exp(-2j*pi*k*n/N) for k in [0, N). Rows are
    advanced by multiplying the twiddle vector by exp(-2j*pi*n/N);
    the upper half of the spectrum is the conjugate mirror of the lower.

    Args:
        frame: Real-valued samples, length N >= 1

    Returns:
        np.ndarray: 2N interleaved real/imaginary values

    Raises:
        InvalidInputError: If the frame is empty or not one-dimensional

    Time: O(N^2)
    """
    x = _as_frame(frame)
    # Complex copy once, not per row
    xc = x.astype(np.complex128)
    n_samples = x.size
    n = np.arange(n_samples)
    step = np.exp(-2j * np.pi * n / n_samples)

    half = n_samples // 2 + 1
    spectrum = np.empty(n_samples, dtype=np.complex128)
    twiddle = np.ones(n_samples, dtype=np.complex128)

    for k in range(half):
        if k % _RESEED_INTERVAL == 0:
            twiddle = np.exp(-2j * np.pi * ((k * n) % n_samples) / n_samples)
        spectrum[k] = twiddle @ xc
        twiddle = twiddle * step

    # Real input: X[N-k] = conj(X[k])
    spectrum[half:] = np.conj(spectrum[1:n_samples - half + 1][::-1])

    return _interleave(spectrum)


@lru_cache(maxsize=4)
def _dft_basis(n_samples: int) -> np.ndarray:
    """Complex DFT matrix W[k, n] = exp(-2j*pi*k*n/N), read-only."""
    n = np.arange(n_samples)
    basis = np.exp(-2j * np.pi * (np.outer(n, n) % n_samples) / n_samples)
    basis.setflags(write=False)
    return basis


def dft_frames(frames) -> np.ndarray:
    """
    Direct DFT of a stack of equal-length frames.

    Args:
        frames: Array of shape (n_frames, N)

    Returns:
        np.ndarray: Shape (n_frames, 2N), one interleaved spectrum per row
    """
    x = np.asarray(frames, dtype=np.float64)
    if x.ndim != 2 or x.shape[1] == 0:
        raise InvalidInputError(
            f"Frames must have shape (n_frames, N) with N >= 1, got {x.shape}",
            field="frames"
        )
    if x.shape[0] == 0:
        return np.empty((0, 2 * x.shape[1]), dtype=np.float64)

    spectrum = x @ _dft_basis(x.shape[1]).T
    return _interleave(spectrum)


def power_spectrum(interleaved: np.ndarray) -> np.ndarray:
    """real^2 + imag^2 per bin (half the interleaved length)."""
    interleaved = np.asarray(interleaved, dtype=np.float64)
    real = interleaved[..., 0::2]
    imag = interleaved[..., 1::2]
    return real * real + imag * imag


def magnitude_spectrum(interleaved: np.ndarray) -> np.ndarray:
    """sqrt(real^2 + imag^2) per bin."""
    return np.sqrt(power_spectrum(interleaved))
