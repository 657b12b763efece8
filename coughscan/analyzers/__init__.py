"""
Condition classification over analysis records.
"""

from coughscan.analyzers.classifier import (
    RuleBasedConditionClassifier,
    confidence_band,
    create_condition_classifier,
)
from coughscan.analyzers.rules import (
    DEFAULT_CONDITIONS,
    ConditionRules,
    Rule,
    detect_wheezing,
)

__all__ = [
    "RuleBasedConditionClassifier",
    "confidence_band",
    "create_condition_classifier",
    "DEFAULT_CONDITIONS",
    "ConditionRules",
    "Rule",
    "detect_wheezing",
]
