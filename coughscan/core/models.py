"""
Core data models for CoughScan.

Immutable domain models for decoded waveforms, per-recording analysis
records, and condition classification results.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np

from coughscan.utils.errors import InvalidInputError

# Coefficients per frame in the MFCC feature set
N_COEFFICIENTS = 13

CONFIDENCE_BANDS = ("low", "medium", "high")

UNKNOWN_CONDITION = "Unknown"


@dataclass(frozen=True, eq=False)
class Waveform:
    """
    Immutable single-channel audio buffer.

    Samples are stored as a read-only float64 array in nominal
    range [-1, 1]. Emptiness is not rejected here; the pipeline
    raises InvalidInputError when it receives an empty waveform.
    """

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        """Normalize and validate fields."""
        samples = np.array(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise InvalidInputError(
                f"Waveform must be single-channel, got shape {samples.shape}",
                field="samples"
            )
        samples.setflags(write=False)
        object.__setattr__(self, 'samples', samples)

        if self.sample_rate <= 0:
            raise InvalidInputError(
                f"Sample rate must be positive, got {self.sample_rate}",
                field="sample_rate"
            )

    @property
    def num_samples(self) -> int:
        """Number of samples."""
        return int(self.samples.size)

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.num_samples / self.sample_rate

    @property
    def is_empty(self) -> bool:
        """True if the waveform holds no samples."""
        return self.num_samples == 0


@dataclass(frozen=True)
class AnalysisRecord:
    """
    Whole-recording analysis produced by the audio analysis pipeline.

    The MFCC feature set is the concatenation of 13-coefficient frame
    vectors in frame order.
    """

    duration: float  # seconds
    rms: float
    zero_crossing_rate: float  # [0.0, 1.0]
    spectral_centroid: float  # Hz
    mfcc_features: np.ndarray = field(compare=False)  # Shape: (n_frames * 13,)
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        """Freeze the feature set."""
        features = np.array(self.mfcc_features, dtype=np.float64)
        features.setflags(write=False)
        object.__setattr__(self, 'mfcc_features', features)

    @property
    def num_frames(self) -> int:
        """Number of frames in the MFCC feature set."""
        return int(np.asarray(self.mfcc_features).size) // N_COEFFICIENTS

    def frame_vectors(self) -> np.ndarray:
        """MFCC feature set reshaped to (n_frames, 13)."""
        features = np.asarray(self.mfcc_features, dtype=np.float64)
        return features[:self.num_frames * N_COEFFICIENTS].reshape(-1, N_COEFFICIENTS)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'duration': self.duration,
            'rms': self.rms,
            'zero_crossing_rate': self.zero_crossing_rate,
            'spectral_centroid': self.spectral_centroid,
            'num_frames': self.num_frames,
            'mfcc_features': np.asarray(self.mfcc_features).tolist(),
            'timestamp': self.timestamp.isoformat(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)


@dataclass
class ConditionScore:
    """Score for one respiratory condition."""

    name: str
    score: float  # raw rule score [0.0, 0.95]
    confidence: str  # band of the raw score
    probability: float = 0.0  # percentage of the raw-score total

    def __post_init__(self) -> None:
        """Validate fields."""
        validate_confidence_band(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'name': self.name,
            'score': self.score,
            'probability': self.probability,
            'confidence': self.confidence,
        }


@dataclass
class ClassificationResult:
    """Ranked condition scores for one analysis record."""

    conditions: List[ConditionScore]
    dominant_condition: str
    overall_confidence: str
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        """Validate fields."""
        validate_confidence_band(self.overall_confidence)

    @property
    def probabilities(self) -> Dict[str, float]:
        """Condition name to normalized probability."""
        return {c.name: c.probability for c in self.conditions}

    def get(self, name: str) -> Optional[ConditionScore]:
        """Return the score for a condition, if present."""
        for condition in self.conditions:
            if condition.name == name:
                return condition
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'conditions': [c.to_dict() for c in self.conditions],
            'dominant_condition': self.dominant_condition,
            'overall_confidence': self.overall_confidence,
            'timestamp': self.timestamp.isoformat(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def get_summary(self) -> str:
        """Get human-readable summary."""
        if not self.conditions:
            return "No conditions scored"

        parts = [f"Dominant: {self.dominant_condition} ({self.overall_confidence})"]
        parts.extend(
            f"{c.name}: {c.probability:.1f}%" for c in self.conditions
        )
        return " | ".join(parts)


@dataclass
class ScreeningResult:
    """Analysis and classification of a single recording."""

    source: str  # file path or caller-supplied label
    analysis: AnalysisRecord
    classification: ClassificationResult
    processing_time: float  # seconds
    sample_rate: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        analysis = self.analysis.to_dict()
        # Feature sets run to thousands of values; keep the report readable
        analysis.pop('mfcc_features')
        return {
            'source': self.source,
            'sample_rate': self.sample_rate,
            'processing_time': self.processing_time,
            'analysis': analysis,
            'classification': self.classification.to_dict(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def get_summary(self) -> str:
        """Get human-readable summary."""
        return self.classification.get_summary()


# Validation helpers

def validate_confidence_band(band: str) -> None:
    """Validate a confidence band label."""
    if band not in CONFIDENCE_BANDS:
        raise ValueError(
            f"Invalid confidence band: {band}. Must be one of {CONFIDENCE_BANDS}"
        )


def validate_analysis_record(record: Any) -> AnalysisRecord:
    """
    Check that a record is well-formed enough to classify.

    Raises:
        InvalidInputError: If the record is missing, has non-finite or
            out-of-range scalars, or a truncated feature set
    """
    if not isinstance(record, AnalysisRecord):
        raise InvalidInputError(
            f"Expected AnalysisRecord, got {type(record).__name__}",
            field="record"
        )

    scalars = {
        'duration': record.duration,
        'rms': record.rms,
        'zero_crossing_rate': record.zero_crossing_rate,
        'spectral_centroid': record.spectral_centroid,
    }
    for name, value in scalars.items():
        if not math.isfinite(value):
            raise InvalidInputError(f"{name} must be finite, got {value}", field=name)
        if value < 0:
            raise InvalidInputError(f"{name} must be non-negative, got {value}", field=name)

    if record.zero_crossing_rate > 1.0:
        raise InvalidInputError(
            f"zero_crossing_rate must be in [0, 1], got {record.zero_crossing_rate}",
            field="zero_crossing_rate"
        )

    features = np.asarray(record.mfcc_features)
    if features.ndim != 1 or features.size % N_COEFFICIENTS != 0:
        raise InvalidInputError(
            f"MFCC feature set must be a flat multiple of {N_COEFFICIENTS}, "
            f"got shape {features.shape}",
            field="mfcc_features"
        )

    return record
