"""
Rule tables for the respiratory condition classifier.

Each condition is a list of (predicate, weight) rules over an
AnalysisRecord. A condition's raw score is the sum of the weights of
the rules that fire, capped at MAX_SCORE. New conditions are added by
appending a ConditionRules entry; the scoring loop does not change.
"""

from dataclasses import dataclass
from typing import Callable, List, Tuple

import numpy as np

from coughscan.core.models import N_COEFFICIENTS, AnalysisRecord

MAX_SCORE = 0.95

# Wheeze indicator thresholds on MFCC coefficients 2 and 3
WHEEZE_C2_MIN = 0.5
WHEEZE_C3_MAX = -0.3


@dataclass(frozen=True)
class Rule:
    """One additive scoring rule."""

    description: str
    weight: float
    predicate: Callable[[AnalysisRecord], bool]

    def applies(self, record: AnalysisRecord) -> bool:
        """True if the rule fires for the record."""
        return bool(self.predicate(record))


@dataclass(frozen=True)
class ConditionRules:
    """Scoring rules for one named condition."""

    name: str
    pattern: str
    rules: Tuple[Rule, ...]
    cap: float = MAX_SCORE

    def fired(self, record: AnalysisRecord) -> List[Rule]:
        """Rules that fire for the record, in table order."""
        return [rule for rule in self.rules if rule.applies(record)]

    def score(self, record: AnalysisRecord) -> float:
        """Capped sum of fired rule weights."""
        total = 0.0
        for rule in self.fired(record):
            total += rule.weight
        return min(total, self.cap)


def count_wheeze_indicators(mfcc_features: np.ndarray) -> int:
    """Frames whose coefficient 2 > 0.5 and coefficient 3 < -0.3."""
    features = np.asarray(mfcc_features, dtype=np.float64)
    n_frames = features.size // N_COEFFICIENTS
    frames = features[:n_frames * N_COEFFICIENTS].reshape(n_frames, N_COEFFICIENTS)
    matches = (frames[:, 2] > WHEEZE_C2_MIN) & (frames[:, 3] < WHEEZE_C3_MAX)
    return int(np.count_nonzero(matches))


def detect_wheezing(mfcc_features: np.ndarray) -> bool:
    """
    Wheeze heuristic: strictly more than half of all frames match.

    Compared as indicators > len(features) / 26, i.e. frames / 2.
    """
    size = np.asarray(mfcc_features).size
    return count_wheeze_indicators(mfcc_features) > size / (2 * N_COEFFICIENTS)


COVID_19 = ConditionRules(
    name="COVID-19",
    pattern="dry, persistent",
    rules=(
        Rule("0.5s < duration < 2.0s", 0.3, lambda r: 0.5 < r.duration < 2.0),
        Rule("rms < 0.1 (dry)", 0.2, lambda r: r.rms < 0.1),
        Rule("zero-crossing rate > 0.1", 0.2, lambda r: r.zero_crossing_rate > 0.1),
        Rule("spectral centroid > 2000 Hz", 0.3, lambda r: r.spectral_centroid > 2000),
    ),
)

ASTHMA = ConditionRules(
    name="Asthma",
    pattern="wheezing, longer duration",
    rules=(
        Rule("duration > 1.0s", 0.3, lambda r: r.duration > 1.0),
        Rule("spectral centroid < 1500 Hz", 0.3, lambda r: r.spectral_centroid < 1500),
        Rule("wheeze pattern in MFCC frames", 0.4, lambda r: detect_wheezing(r.mfcc_features)),
    ),
)

BRONCHITIS = ConditionRules(
    name="Bronchitis",
    pattern="wet, productive",
    rules=(
        Rule("rms > 0.15 (wet)", 0.3, lambda r: r.rms > 0.15),
        Rule("duration > 0.8s", 0.2, lambda r: r.duration > 0.8),
        Rule("spectral centroid < 2000 Hz", 0.3, lambda r: r.spectral_centroid < 2000),
    ),
)

PNEUMONIA = ConditionRules(
    name="Pneumonia",
    pattern="strong, short",
    rules=(
        Rule("rms > 0.12", 0.2, lambda r: r.rms > 0.12),
        Rule("duration < 1.5s", 0.2, lambda r: r.duration < 1.5),
        Rule("zero-crossing rate < 0.08", 0.3, lambda r: r.zero_crossing_rate < 0.08),
    ),
)

DEFAULT_CONDITIONS: Tuple[ConditionRules, ...] = (COVID_19, ASTHMA, BRONCHITIS, PNEUMONIA)
