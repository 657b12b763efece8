"""Tests for text and JSON result writers."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from conftest import make_record
from coughscan.core.models import ClassificationResult, ConditionScore, ScreeningResult
from coughscan.core.result_writer import (
    DISCLAIMER,
    JSONResultWriter,
    TextResultWriter,
    create_result_writer,
)


@pytest.fixture
def results():
    classification = ClassificationResult(
        conditions=[
            ConditionScore("Pneumonia", 0.7, "high", 70.0),
            ConditionScore("COVID-19", 0.3, "low", 30.0),
        ],
        dominant_condition="Pneumonia",
        overall_confidence="high",
        timestamp=datetime(2026, 1, 1),
    )
    result = ScreeningResult(
        source="recordings/a.wav",
        analysis=make_record(duration=1.25, rms=0.2),
        classification=classification,
        processing_time=0.05,
        sample_rate=8000,
    )
    return {Path("recordings/a.wav"): result}


class TestTextResultWriter:
    def test_report_contents(self, results, tmp_path):
        output = tmp_path / "out" / "report.txt"
        TextResultWriter().write(results, output, failed={Path("b.wav"): "Audio file is empty"})

        text = output.read_text(encoding="utf-8")
        assert "COUGHSCAN SCREENING RESULTS" in text
        assert DISCLAIMER in text
        assert "FILE: a.wav" in text
        assert "Duration: 1.25s" in text
        assert "Dominant Condition: Pneumonia (high confidence)" in text
        assert "70.00%" in text
        assert "FAILED" in text
        assert "b.wav: Audio file is empty" in text
        assert text.rstrip().endswith("=" * 70)

    def test_without_timestamp(self, results, tmp_path):
        output = tmp_path / "report.txt"
        TextResultWriter(include_timestamp=False).write(results, output)
        text = output.read_text(encoding="utf-8")
        assert "Generated:" not in text
        assert "FAILED" not in text


class TestJSONResultWriter:
    def test_structure(self, results, tmp_path):
        output = tmp_path / "report.json"
        JSONResultWriter().write(results, output, failed={"b.wav": "boom"})

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["disclaimer"] == DISCLAIMER
        assert data["total_files"] == 1
        entry = data["results"][str(Path("recordings/a.wav"))]
        assert entry["classification"]["dominant_condition"] == "Pneumonia"
        assert entry["analysis"]["duration"] == 1.25
        assert "mfcc_features" not in entry["analysis"]
        assert data["failed"] == {"b.wav": "boom"}


class TestCreateResultWriter:
    @pytest.mark.parametrize("fmt,cls", [
        ("text", TextResultWriter),
        ("TXT", TextResultWriter),
        ("json", JSONResultWriter),
    ])
    def test_known_formats(self, fmt, cls):
        assert isinstance(create_result_writer(fmt), cls)

    def test_kwargs_forwarded(self):
        assert create_result_writer("json", indent=4).indent == 4

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            create_result_writer("csv")
