"""Tests for the core data models."""

import json
from datetime import datetime

import numpy as np
import pytest

from conftest import make_record
from coughscan.core.models import (
    ClassificationResult,
    ConditionScore,
    ScreeningResult,
    Waveform,
    validate_analysis_record,
    validate_confidence_band,
)
from coughscan.utils.errors import InvalidInputError


class TestWaveform:
    def test_properties(self):
        waveform = Waveform(samples=np.zeros(16000), sample_rate=8000)
        assert waveform.num_samples == 16000
        assert waveform.duration == pytest.approx(2.0)
        assert not waveform.is_empty

    def test_samples_are_read_only_copy(self):
        source = np.ones(10)
        waveform = Waveform(samples=source, sample_rate=8000)
        source[0] = 5.0
        assert waveform.samples[0] == 1.0
        with pytest.raises(ValueError):
            waveform.samples[0] = 2.0

    def test_list_input_converted(self):
        waveform = Waveform(samples=[0, 1, -1], sample_rate=3)
        assert waveform.samples.dtype == np.float64

    def test_empty_allowed(self):
        assert Waveform(samples=np.zeros(0), sample_rate=8000).is_empty

    def test_multichannel_rejected(self):
        with pytest.raises(InvalidInputError):
            Waveform(samples=np.zeros((2, 100)), sample_rate=8000)

    @pytest.mark.parametrize("sample_rate", [0, -8000])
    def test_invalid_sample_rate(self, sample_rate):
        with pytest.raises(InvalidInputError):
            Waveform(samples=np.zeros(10), sample_rate=sample_rate)


class TestAnalysisRecord:
    def test_frame_vectors(self):
        features = np.arange(26, dtype=float)
        record = make_record(mfcc_features=features)
        assert record.num_frames == 2
        assert record.frame_vectors().shape == (2, 13)
        assert record.frame_vectors()[1, 0] == 13.0

    def test_feature_set_is_read_only(self):
        record = make_record()
        with pytest.raises(ValueError):
            record.mfcc_features[0] = 1.0

    def test_to_json(self):
        record = make_record(num_frames=1)
        data = json.loads(record.to_json())
        assert data['num_frames'] == 1
        assert len(data['mfcc_features']) == 13
        assert data['timestamp'] == "2026-01-01T00:00:00"


class TestClassificationModels:
    def test_invalid_band_rejected(self):
        with pytest.raises(ValueError):
            ConditionScore(name="Asthma", score=0.5, confidence="certain")
        with pytest.raises(ValueError):
            ClassificationResult(conditions=[], dominant_condition="Unknown",
                                 overall_confidence="very high")

    def test_validate_confidence_band(self):
        for band in ("low", "medium", "high"):
            validate_confidence_band(band)

    def test_lookup_and_probabilities(self):
        result = ClassificationResult(
            conditions=[
                ConditionScore("COVID-19", 0.5, "medium", 62.5),
                ConditionScore("Asthma", 0.3, "low", 37.5),
            ],
            dominant_condition="COVID-19",
            overall_confidence="medium",
            timestamp=datetime(2026, 1, 1),
        )
        assert result.get("Asthma").score == 0.3
        assert result.get("Pneumonia") is None
        assert result.probabilities == {"COVID-19": 62.5, "Asthma": 37.5}
        summary = result.get_summary()
        assert summary.startswith("Dominant: COVID-19 (medium)")
        assert "Asthma: 37.5%" in summary

    def test_empty_summary(self):
        result = ClassificationResult([], "Unknown", "low")
        assert result.get_summary() == "No conditions scored"

    def test_screening_result_omits_feature_set(self):
        classification = ClassificationResult([], "Unknown", "low", datetime(2026, 1, 1))
        result = ScreeningResult(
            source="a.wav",
            analysis=make_record(),
            classification=classification,
            processing_time=0.1,
            sample_rate=8000,
        )
        data = json.loads(result.to_json())
        assert "mfcc_features" not in data['analysis']
        assert data['analysis']['num_frames'] == 4
        assert data['sample_rate'] == 8000
        assert data['classification']['dominant_condition'] == "Unknown"


class TestValidateAnalysisRecord:
    def test_valid_record_returned(self):
        record = make_record()
        assert validate_analysis_record(record) is record

    def test_empty_feature_set_is_valid(self):
        validate_analysis_record(make_record(num_frames=0))

    def test_wrong_type(self):
        with pytest.raises(InvalidInputError):
            validate_analysis_record({"duration": 1.0})

    @pytest.mark.parametrize("field,value", [
        ("duration", float("nan")),
        ("rms", float("inf")),
        ("rms", -0.1),
        ("zero_crossing_rate", 1.5),
        ("spectral_centroid", -1.0),
    ])
    def test_bad_scalars(self, field, value):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_analysis_record(make_record(**{field: value}))
        assert exc_info.value.field == field

    def test_truncated_feature_set(self):
        record = make_record(mfcc_features=np.zeros(20))
        with pytest.raises(InvalidInputError) as exc_info:
            validate_analysis_record(record)
        assert exc_info.value.field == "mfcc_features"
