"""
Rule-based respiratory condition classifier for CoughScan.

Scores an AnalysisRecord against the condition rule tables, ranks the
conditions, and normalizes raw scores to percentages.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from coughscan.analyzers.rules import DEFAULT_CONDITIONS, ConditionRules
from coughscan.core.analyzer_base import BaseAnalyzer
from coughscan.core.batch_processor import BatchResult
from coughscan.core.models import (
    UNKNOWN_CONDITION,
    AnalysisRecord,
    ClassificationResult,
    ConditionScore,
    validate_analysis_record,
)
from coughscan.utils.errors import ConfigurationError, CoughScanError, NotReadyError

HIGH_THRESHOLD = 0.6
MEDIUM_THRESHOLD = 0.3


def confidence_band(score: float) -> str:
    """'high' above 0.6, 'medium' above 0.3, otherwise 'low' (strict)."""
    if score > HIGH_THRESHOLD:
        return "high"
    if score > MEDIUM_THRESHOLD:
        return "medium"
    return "low"


def normalize_scores(conditions: List[ConditionScore]) -> None:
    """Set each probability to its share of the raw-score total, in percent."""
    total = sum(c.score for c in conditions)
    for condition in conditions:
        condition.probability = (condition.score / total) * 100 if total > 0 else 0.0


class RuleBasedConditionClassifier(BaseAnalyzer[ClassificationResult]):
    """
    Deterministic, stateless condition scorer.

    Bands are derived from raw scores before normalization. Conditions
    with equal raw scores keep rule-table order.
    """

    def __init__(self, conditions: Optional[Sequence[ConditionRules]] = None):
        """
        Args:
            conditions: Rule tables to score, in tie-break order
                (defaults to the four built-in conditions)
        """
        super().__init__("rule_based_conditions", "1.0.0")
        self._conditions = tuple(DEFAULT_CONDITIONS if conditions is None else conditions)

    @property
    def conditions(self) -> List[str]:
        """Names of the scored conditions, in table order."""
        return [c.name for c in self._conditions]

    @property
    def is_ready(self) -> bool:
        """True once a non-empty rule table is installed."""
        return bool(self._conditions)

    def score(self, record: AnalysisRecord) -> List[ConditionScore]:
        """Raw scores in table order (probabilities not yet set)."""
        scores = []
        for condition in self._conditions:
            raw = condition.score(record)
            scores.append(ConditionScore(
                name=condition.name,
                score=raw,
                confidence=confidence_band(raw),
            ))
        return scores

    def classify(self, record: AnalysisRecord) -> ClassificationResult:
        """Classify a single analysis record."""
        return self.analyze(record)

    def _analyze_impl(self, record: AnalysisRecord) -> ClassificationResult:
        if not self.is_ready:
            raise NotReadyError(
                "Classifier has no condition rules installed",
                component=self.name
            )
        validate_analysis_record(record)

        # sorted() is stable: ties stay in table order
        ranked = sorted(self.score(record), key=lambda c: c.score, reverse=True)
        normalize_scores(ranked)

        if ranked and ranked[0].score > 0:
            dominant, overall = ranked[0].name, ranked[0].confidence
        else:
            dominant, overall = UNKNOWN_CONDITION, "low"

        self.logger.debug(
            "Scores: " + ", ".join(f"{c.name}={c.score:.2f}" for c in ranked)
        )

        return ClassificationResult(
            conditions=ranked,
            dominant_condition=dominant,
            overall_confidence=overall,
            timestamp=datetime.now(),
        )

    def classify_batch(self, records: Iterable[Any]) -> BatchResult:
        """
        Classify records independently, in input order.

        A record that fails is recorded under its index in
        BatchResult.failed; the remaining records are still classified.
        Readiness is checked once up front and raises NotReadyError.
        """
        if not self.is_ready:
            raise NotReadyError(
                "Classifier has no condition rules installed",
                component=self.name
            )

        result: BatchResult = BatchResult()
        for index, record in enumerate(records):
            result.order.append(index)
            try:
                result.successful[index] = self.classify(record)
            except CoughScanError as e:
                result.failed[index] = str(e)
                self.logger.error(f"Failed to classify record {index}: {e}")

        result.total_files = len(result.order)
        return result


def create_condition_classifier(
    config: Optional[Dict[str, Any]] = None
) -> RuleBasedConditionClassifier:
    """
    Factory function to create a ready classifier from configuration.

    Reads classifier.conditions, a list of built-in condition names.
    Scoring order follows the built-in table, not the list order.

    Raises:
        ConfigurationError: If a name is unknown or the list is empty
    """
    config = config or {}
    names = (config.get('classifier') or {}).get('conditions')
    if names is None:
        return RuleBasedConditionClassifier()

    known = {c.name: c for c in DEFAULT_CONDITIONS}
    unknown = [name for name in names if name not in known]
    if unknown:
        raise ConfigurationError(
            f"Unknown conditions: {', '.join(unknown)}. "
            f"Available: {', '.join(known)}",
            config_key="classifier.conditions"
        )
    if not names:
        raise ConfigurationError(
            "At least one condition must be configured",
            config_key="classifier.conditions"
        )

    selected = [c for c in DEFAULT_CONDITIONS if c.name in names]
    return RuleBasedConditionClassifier(selected)
