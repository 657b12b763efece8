"""Tests for the exception hierarchy."""

import pytest

from coughscan.utils.errors import (
    AnalysisError,
    AudioLoadError,
    ConfigurationError,
    CoughScanError,
    FeatureExtractionError,
    FileTooLargeError,
    InvalidInputError,
    NotReadyError,
    UnsupportedFormatError,
)


class TestHierarchy:
    @pytest.mark.parametrize("error", [
        InvalidInputError("bad"),
        NotReadyError("not ready"),
        AudioLoadError("load"),
        UnsupportedFormatError("fmt", format=".xyz"),
        FileTooLargeError("big", file_size=10, max_size=5),
        AnalysisError("failed"),
        FeatureExtractionError("features"),
        ConfigurationError("config"),
    ])
    def test_all_derive_from_base(self, error):
        assert isinstance(error, CoughScanError)

    def test_load_errors(self):
        assert issubclass(UnsupportedFormatError, AudioLoadError)
        assert issubclass(FileTooLargeError, AudioLoadError)

    def test_feature_extraction_is_analysis_error(self):
        error = FeatureExtractionError("no frames", feature_name="mfcc")
        assert isinstance(error, AnalysisError)
        assert error.analyzer_name == "feature_extractor"
        assert error.details["feature_name"] == "mfcc"


class TestMessages:
    def test_details_appended(self):
        error = InvalidInputError("Signal is empty", field="samples")
        assert str(error) == "Signal is empty (Details: {'field': 'samples'})"
        assert error.field == "samples"

    def test_no_details(self):
        assert str(InvalidInputError("Signal is empty")) == "Signal is empty"

    def test_analysis_error_keeps_cause(self):
        cause = ValueError("boom")
        error = AnalysisError("wrapped", analyzer_name="audio_pipeline", original_error=cause)
        assert error.original_error is cause
        assert error.details["original_error"] == "boom"

    def test_file_too_large_sizes(self):
        error = FileTooLargeError("big", file_size=10, max_size=5)
        assert (error.file_size, error.max_size) == (10, 5)
