"""Ordered decision-list classifier for product names."""
from dataclasses import dataclass
from typing import List, Optional, Sequence

import structlog

from emdn_matching.errors.exceptions import ConfigError
from emdn_matching.services.classification.rules import CategoryRule, DEFAULT_RULES
from emdn_matching.services.taxonomy.tree import CategoryTree

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one product name.

    ``category_code`` and ``rule_name`` are None when no rule fired.
    """
    category_code: Optional[str] = None
    rule_name: Optional[str] = None
    matched_pattern: Optional[str] = None

    @property
    def is_classified(self) -> bool:
        return self.category_code is not None


UNCLASSIFIED = ClassificationResult()


class RuleClassifier:
    """First-applicable-wins classifier over an ordered rule list.

    Rules are evaluated strictly in declared order. A rule whose exclude
    patterns match the name is skipped entirely; otherwise the first include
    match makes it win and evaluation stops.
    """

    def __init__(self, tree: CategoryTree, rules: Sequence[CategoryRule] = DEFAULT_RULES):
        self.rules = tuple(rules)
        self.tree = tree
        self._log = logger.bind(component="RuleClassifier")
        self._validate()

    def _validate(self) -> None:
        """Check every rule against the category index.

        Raises:
            ConfigError: Listing every rule with a missing target code or an
                empty include-pattern set
        """
        problems: List[str] = []
        for rule in self.rules:
            if not rule.include_patterns:
                problems.append(f"{rule.name}: no include patterns")
            if not self.tree.has_code(rule.target_code):
                problems.append(f"{rule.name}: unknown category code {rule.target_code}")

        if problems:
            self._log.error("rule_validation_failed", problems=problems)
            raise ConfigError(
                f"{len(problems)} classification rule(s) are invalid",
                problems=problems,
            )
        self._log.info("rules_validated", rules=len(self.rules))

    def classify(self, name: Optional[str]) -> ClassificationResult:
        """Return the first rule applicable to ``name``."""
        if not name:
            return UNCLASSIFIED

        for rule in self.rules:
            if rule.is_excluded(name):
                continue
            pattern = rule.first_include_match(name)
            if pattern is not None:
                return ClassificationResult(
                    category_code=rule.target_code,
                    rule_name=rule.name,
                    matched_pattern=pattern.source,
                )

        return UNCLASSIFIED
