"""Rule-based product classification."""
from emdn_matching.services.classification.classifier import (
    ClassificationResult,
    RuleClassifier,
    UNCLASSIFIED,
)
from emdn_matching.services.classification.decision import ReclassificationOutcome, decide
from emdn_matching.services.classification.patterns import (
    PatternMatcher,
    RegexPattern,
    SubstringPattern,
    compile_pattern,
)
from emdn_matching.services.classification.rules import CategoryRule, DEFAULT_RULES, rule

__all__ = [
    "CategoryRule",
    "ClassificationResult",
    "DEFAULT_RULES",
    "PatternMatcher",
    "ReclassificationOutcome",
    "RegexPattern",
    "RuleClassifier",
    "SubstringPattern",
    "UNCLASSIFIED",
    "compile_pattern",
    "decide",
    "rule",
]
