"""Case-insensitive text matchers used by classification rules.

Rules only depend on the ``PatternMatcher`` interface, so the concrete
dialect can change without touching the classifier.
"""
import re
from abc import ABC, abstractmethod
from typing import Union


class PatternMatcher(ABC):
    """Case-insensitive text matcher."""

    @abstractmethod
    def matches(self, text: str) -> bool:
        """Return True if the pattern occurs anywhere in ``text``."""
        pass

    @property
    @abstractmethod
    def source(self) -> str:
        """Pattern text for reports."""
        pass


class RegexPattern(PatternMatcher):
    """Regular expression searched with IGNORECASE.

    Supports word boundaries (``\\b``), alternation and repetition.
    """

    def __init__(self, pattern: str):
        self._regex = re.compile(pattern, re.IGNORECASE)

    def matches(self, text: str) -> bool:
        return self._regex.search(text) is not None

    @property
    def source(self) -> str:
        return self._regex.pattern

    def __repr__(self) -> str:
        return f"RegexPattern({self._regex.pattern!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RegexPattern) and other.source == self.source

    def __hash__(self) -> int:
        return hash(("regex", self.source))


class SubstringPattern(PatternMatcher):
    """Plain case-insensitive substring."""

    def __init__(self, text: str):
        self._text = text
        self._folded = text.casefold()

    def matches(self, text: str) -> bool:
        return self._folded in text.casefold()

    @property
    def source(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"SubstringPattern({self._text!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SubstringPattern) and other.source == self.source

    def __hash__(self) -> int:
        return hash(("substring", self.source))


def compile_pattern(pattern: Union[str, PatternMatcher]) -> PatternMatcher:
    """Turn rule-table entries into matchers; strings are regexes."""
    if isinstance(pattern, PatternMatcher):
        return pattern
    return RegexPattern(pattern)
