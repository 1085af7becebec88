"""Unit tests for patterns, rules and the ordered rule classifier."""
import pytest

from emdn_matching.errors import ConfigError
from emdn_matching.services.classification import (
    DEFAULT_RULES,
    RegexPattern,
    RuleClassifier,
    SubstringPattern,
    compile_pattern,
    rule,
)
from emdn_matching.services.taxonomy import CategoryTree
from tests.helpers import category_records


class TestPatterns:
    """Tests for PatternMatcher implementations."""

    def test_regex_is_case_insensitive(self):
        assert RegexPattern(r"\bcup\b").matches("DELTA CUP 50/28")

    def test_regex_word_boundary(self):
        pattern = RegexPattern(r"\bpe\b")
        assert pattern.matches("cup PE 50/28")
        assert not pattern.matches("Pinnacle shell")

    def test_substring_is_case_insensitive(self):
        assert SubstringPattern("Trilogy").matches("TRILOGY shell")
        assert not SubstringPattern("trilogy").matches("pinnacle")

    def test_compile_pattern_passes_matchers_through(self):
        matcher = SubstringPattern("cup")
        assert compile_pattern(matcher) is matcher
        assert compile_pattern(r"cup") == RegexPattern(r"cup")


@pytest.fixture
def narrow_broad_tree() -> CategoryTree:
    return CategoryTree.from_records(
        category_records(["P", "P09", "P0908", "P090803", "P0908030101"])
    )


class TestRuleClassifier:
    """Tests for first-applicable-wins evaluation."""

    def test_earlier_narrow_rule_wins_over_broad(self, narrow_broad_tree):
        rules = [
            rule("Cemented cup", "P0908030101", [r"cup.*cem"]),
            rule("Hip general", "P0908", [r"cup", r"\bhip\b"]),
        ]
        classifier = RuleClassifier(narrow_broad_tree, rules)

        result = classifier.classify("Hip cup cemented 50mm")

        assert result.category_code == "P0908030101"
        assert result.rule_name == "Cemented cup"
        assert result.matched_pattern == "cup.*cem"

    def test_order_decides_not_specificity(self, narrow_broad_tree):
        rules = [
            rule("Hip general", "P0908", [r"cup"]),
            rule("Cemented cup", "P0908030101", [r"cup.*cem"]),
        ]
        classifier = RuleClassifier(narrow_broad_tree, rules)

        assert classifier.classify("cup cemented").category_code == "P0908"

    def test_exclude_skips_whole_rule(self, narrow_broad_tree):
        rules = [
            rule("Cemented cup", "P0908030101", [r"cup", r"cem"], exclude=[r"uncement"]),
            rule("Acetabular", "P090803", [r"cup"]),
        ]
        classifier = RuleClassifier(narrow_broad_tree, rules)

        result = classifier.classify("Uncemented cup")

        assert result.rule_name == "Acetabular"

    def test_no_match_is_unclassified(self, narrow_broad_tree):
        classifier = RuleClassifier(narrow_broad_tree, [rule("Hip", "P0908", [r"\bhip\b"])])

        result = classifier.classify("Sterile drape")

        assert not result.is_classified
        assert result.category_code is None
        assert result.rule_name is None

    def test_empty_name_is_unclassified(self, narrow_broad_tree):
        classifier = RuleClassifier(narrow_broad_tree, [rule("Hip", "P0908", [r"\bhip\b"])])
        assert not classifier.classify("").is_classified

    def test_unknown_target_code_is_config_error(self, narrow_broad_tree):
        rules = [
            rule("Hip", "P0908", [r"\bhip\b"]),
            rule("Knee", "P0909", [r"\bknee\b"]),
            rule("Ankle", "P0905", [r"\bankle\b"]),
        ]
        with pytest.raises(ConfigError) as exc_info:
            RuleClassifier(narrow_broad_tree, rules)

        assert len(exc_info.value.problems) == 2
        assert any("P0909" in p for p in exc_info.value.problems)

    def test_empty_include_set_is_config_error(self, narrow_broad_tree):
        with pytest.raises(ConfigError):
            RuleClassifier(narrow_broad_tree, [rule("Empty", "P0908", [])])


class TestDefaultRules:
    """Tests for the curated rule list."""

    @pytest.fixture
    def classifier(self, tree):
        return RuleClassifier(tree)

    def test_all_target_codes_validate(self, classifier):
        assert len(classifier.rules) == len(DEFAULT_RULES)

    def test_every_rule_has_include_patterns(self):
        assert all(r.include_patterns for r in DEFAULT_RULES)

    def test_delta_cup_cemented_hits_general_cemented_cup(self, classifier):
        result = classifier.classify("DELTA CUP 50/28 cem.")
        assert result.rule_name == "Hip - Cemented acetabular cups (general)"
        assert result.category_code == "P0908030101"

    def test_pe_cemented_cup_hits_pe_rule(self, classifier):
        result = classifier.classify("CCB full-profile cup PE 50/28 cem.")
        assert result.category_code == "P090803010102"

    @pytest.mark.parametrize(
        "name",
        [
            "Lubinus cup UHMWPE cem.",
            "Acetabular cup cemented PE 50/28",
            "CCB cup Xlpe 48",
        ],
    )
    def test_pe_anywhere_after_cup_hits_pe_rule(self, classifier, name):
        assert classifier.classify(name).category_code == "P090803010102"

    def test_rmer_abbreviation_is_not_a_reamer(self, classifier):
        result = classifier.classify("RMER 52mm")
        assert result.category_code != "P091301"

    def test_uncemented_shell(self, classifier):
        result = classifier.classify("Trilogy Acetabular Shell 54mm")
        assert result.category_code == "P090803010201"

    @pytest.mark.parametrize(
        "name,expected_code",
        [
            ("Palacos R+G 40g bone cement", "P099001"),
            ("Cerclage cable 1.8mm", "P09120302"),
            ("Glenosphere 36mm", "P09010303"),
            ("BIOLOX delta ceramic head 32mm", "P090804050201"),
            ("Oxford cemented femoral component", "P0909040101"),
            ("Knee tibial insert 10mm", "P0909030202"),
            ("Ankle prosthesis talar component", "P0905"),
            ("Hip implant kit", "P0908"),
        ],
    )
    def test_representative_products(self, classifier, name, expected_code):
        assert classifier.classify(name).category_code == expected_code

    def test_saw_blade_for_stem_is_not_instrument(self, classifier):
        result = classifier.classify("Oscillating saw blade stem rasp")
        assert not result.category_code.startswith("P0913")
