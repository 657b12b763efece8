"""Tests for pre-emphasis, framing, windowing and the cepstral projection."""

import numpy as np
import pytest

from coughscan.core.features import (
    HOP_SIZE,
    LOG_FLOOR,
    WINDOW_SIZE,
    FeatureExtractor,
    cepstral_projection,
    frame_count,
    frame_signal,
    hamming_window,
    pre_emphasis,
)
from coughscan.core.models import N_COEFFICIENTS, Waveform
from coughscan.utils.errors import FeatureExtractionError, InvalidInputError


def _reference_frame_coefficients(frame):
    """Loop-form cepstral vector of one frame, spectrum via numpy's FFT."""
    n = len(frame)
    window = 0.54 - 0.46 * np.cos(2 * np.pi * np.arange(n) / (n - 1))
    spectrum = np.fft.fft(frame * window)
    power = spectrum.real ** 2 + spectrum.imag ** 2
    m = power.size
    coefficients = []
    for c in range(13):
        total = 0.0
        for j in range(m):
            total += np.log(power[j] + 1e-10) * np.cos(np.pi * c * (j + 0.5) / m)
        coefficients.append(total)
    return np.array(coefficients)


class TestPreEmphasis:
    def test_first_sample_kept(self):
        y = pre_emphasis(np.array([0.5, 1.0, 0.0]))
        assert y[0] == 0.5

    def test_difference_equation(self):
        x = np.array([1.0, 2.0, -1.0, 0.5])
        y = pre_emphasis(x)
        assert np.allclose(y, [1.0, 2.0 - 0.97, -1.0 - 1.94, 0.5 + 0.97])

    def test_empty_signal(self):
        assert pre_emphasis(np.array([])).size == 0


class TestFraming:
    @pytest.mark.parametrize("num_samples,expected", [
        (0, 0),
        (2047, 0),
        (2048, 1),
        (2559, 1),
        (2560, 2),
        (44100, 83),
    ])
    def test_frame_count(self, num_samples, expected):
        assert frame_count(num_samples) == expected

    @pytest.mark.parametrize("num_samples", [2048, 3000, 5000, 22050, 44100])
    def test_frame_count_formula(self, num_samples):
        assert frame_count(num_samples) == (num_samples - WINDOW_SIZE) // HOP_SIZE + 1

    def test_frames_overlap_by_hop(self):
        x = np.arange(3000, dtype=float)
        frames = frame_signal(x)
        assert frames.shape == (2, WINDOW_SIZE)
        assert frames[0, 0] == 0
        assert frames[1, 0] == HOP_SIZE
        assert frames[1, -1] == HOP_SIZE + WINDOW_SIZE - 1

    def test_short_signal_has_no_frames(self):
        assert frame_signal(np.zeros(100)).shape == (0, WINDOW_SIZE)


class TestHammingWindow:
    def test_matches_formula(self):
        assert np.allclose(hamming_window(64), np.hamming(64))

    def test_endpoints(self):
        w = hamming_window(WINDOW_SIZE)
        assert w[0] == pytest.approx(0.08)
        assert w[-1] == pytest.approx(0.08)

    def test_single_sample(self):
        assert np.array_equal(hamming_window(1), [1.0])


class TestCepstralProjection:
    def test_flat_spectrum_only_has_c0(self):
        power = np.full(32, 4.0)
        coefficients = cepstral_projection(power)
        assert coefficients.shape == (N_COEFFICIENTS,)
        assert coefficients[0] == pytest.approx(32 * np.log(4.0 + LOG_FLOOR))
        assert np.allclose(coefficients[1:], 0.0, atol=1e-9)

    def test_stack_of_spectra(self):
        power = np.ones((3, 16))
        assert cepstral_projection(power).shape == (3, N_COEFFICIENTS)

    def test_zero_power_uses_log_floor(self):
        coefficients = cepstral_projection(np.zeros(8))
        assert coefficients[0] == pytest.approx(8 * np.log(1e-10))


class TestFeatureExtractor:
    def test_frame_matches_loop_reference(self):
        rng = np.random.default_rng(11)
        frame = rng.uniform(-1, 1, 64)
        assert np.allclose(
            FeatureExtractor.extract_frame(frame),
            _reference_frame_coefficients(frame),
            rtol=1e-9,
            atol=1e-6,
        )

    def test_empty_frame_rejected(self):
        with pytest.raises(InvalidInputError):
            FeatureExtractor.extract_frame(np.array([]))

    def test_feature_set_length(self):
        rng = np.random.default_rng(5)
        signal = rng.uniform(-0.5, 0.5, 5000)
        features = FeatureExtractor.extract_mfcc(signal)
        assert features.shape == (frame_count(5000) * N_COEFFICIENTS,)

    def test_short_signal_gives_empty_feature_set(self):
        assert FeatureExtractor.extract_mfcc(np.zeros(2047)).size == 0

    def test_accepts_waveform(self, tone_waveform):
        features = FeatureExtractor.extract_mfcc(tone_waveform)
        assert features.size == 4 * N_COEFFICIENTS

    def test_frames_concatenated_in_order(self):
        rng = np.random.default_rng(9)
        signal = rng.uniform(-0.5, 0.5, 3000)
        features = FeatureExtractor.extract_mfcc(signal).reshape(-1, N_COEFFICIENTS)
        emphasized = pre_emphasis(signal)
        for index, frame in enumerate(frame_signal(emphasized)):
            assert np.allclose(features[index], FeatureExtractor.extract_frame(frame))

    def test_silence(self):
        features = FeatureExtractor.extract_mfcc(np.zeros(WINDOW_SIZE)).reshape(-1, N_COEFFICIENTS)
        assert features.shape == (1, N_COEFFICIENTS)
        assert features[0, 0] == pytest.approx(WINDOW_SIZE * np.log(1e-10))
        assert np.allclose(features[0, 1:], 0.0, atol=1e-6)

    def test_waveform_input_is_not_modified(self):
        waveform = Waveform(samples=np.ones(WINDOW_SIZE), sample_rate=8000)
        FeatureExtractor.extract_mfcc(waveform)
        assert np.all(waveform.samples == 1.0)

    def test_non_finite_signal_rejected(self):
        signal = np.zeros(WINDOW_SIZE)
        signal[10] = np.nan
        with pytest.raises(FeatureExtractionError) as exc_info:
            FeatureExtractor.extract_mfcc(signal)
        assert exc_info.value.feature_name == "mfcc"
