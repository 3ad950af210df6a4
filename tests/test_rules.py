"""
Test Rules Engine Module
=======================

Unit tests for the rule bank and pattern matching.
"""

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from rules.engine import RuleBank, Rule, MatchType
from rules.bank import DEFAULT_RULES, default_rule_bank, load_rule_bank
from core.exceptions import RuleError


def catch_all(replies=None):
    return Rule(name="fallback", match_type=MatchType.ALWAYS, replies=replies or ["Tell me more."])


class TestRule:
    """Tests for Rule class."""

    def test_exact_match(self):
        """Test exact string matching."""
        rule = Rule(name="test", patterns=["hello"], match_type=MatchType.EXACT, replies=["Hi!"])

        assert rule.matches("hello")
        assert not rule.matches("hello world")

    def test_contains_match(self):
        """Test contains matching."""
        rule = Rule(name="test", patterns=["hello"], match_type=MatchType.CONTAINS, replies=["Hi!"])

        assert rule.matches("hello world")
        assert rule.matches("say hello please")
        assert not rule.matches("goodbye")

    def test_regex_match(self):
        """Test regex matching respects word boundaries."""
        rule = Rule(
            name="test",
            patterns=[r"\b(sad|down)\b"],
            match_type=MatchType.REGEX,
            replies=["Want to talk?"]
        )

        assert rule.matches("feeling down today")
        assert not rule.matches("downtown was busy")

    def test_keywords_match(self):
        """Test keywords matching."""
        rule = Rule(
            name="test",
            patterns=["work job deadline"],
            match_type=MatchType.KEYWORDS,
            replies=["Busy day?"]
        )

        assert rule.matches("big deadline tomorrow")
        assert not rule.matches("relaxing weekend")

    def test_always_match(self):
        assert catch_all().matches("anything at all")
        assert catch_all().is_catch_all

    def test_custom_predicate(self):
        """Test a custom predicate replaces pattern matching."""
        rule = Rule(name="question", predicate=lambda text: text.endswith("?"), replies=["Good question!"])

        assert rule.matches("what now?")
        assert not rule.matches("nothing")
        assert not rule.is_catch_all

    def test_invalid_regex(self):
        with pytest.raises(RuleError):
            Rule(name="broken", patterns=["(unclosed"], match_type=MatchType.REGEX, replies=["x"])

    def test_from_dict(self):
        rule = Rule.from_dict({
            "name": "work",
            "match_type": "keywords",
            "patterns": ["work job"],
            "replies": ["Busy?"],
        })

        assert rule.match_type == MatchType.KEYWORDS
        assert rule.matches("new job")

    def test_from_dict_unknown_match_type(self):
        with pytest.raises(RuleError):
            Rule.from_dict({"name": "odd", "match_type": "telepathy"})

    def test_custom_predicate_not_serialisable(self):
        rule = Rule(name="question", predicate=lambda text: True, replies=["?"])
        with pytest.raises(RuleError):
            rule.to_dict()


class TestRuleBank:
    """Tests for RuleBank class."""

    def test_first_match_wins(self):
        """Test that earlier rules outrank later ones."""
        bank = RuleBank([
            Rule(name="first", patterns=["test"], replies=["First"]),
            Rule(name="second", patterns=["test"], replies=["Second"]),
            catch_all(),
        ])

        assert bank.match("a test").name == "first"

    def test_catch_all_used_when_nothing_matches(self):
        bank = RuleBank([Rule(name="greet", patterns=["hello"], replies=["Hi"]), catch_all()])
        assert bank.match("weather report").name == "fallback"

    def test_match_is_case_insensitive(self):
        bank = RuleBank([Rule(name="greet", patterns=["hello"], replies=["Hi"]), catch_all()])
        assert bank.match("HELLO THERE").name == "greet"

    def test_requires_catch_all_last(self):
        with pytest.raises(RuleError):
            RuleBank([catch_all(), Rule(name="greet", patterns=["hello"], replies=["Hi"])])

    def test_rejects_empty_bank(self):
        with pytest.raises(RuleError):
            RuleBank([])

    def test_rejects_duplicate_names(self):
        with pytest.raises(RuleError):
            RuleBank([
                Rule(name="greet", patterns=["hi"], replies=["Hi"]),
                Rule(name="greet", patterns=["hello"], replies=["Hello"]),
                catch_all(),
            ])

    def test_get_rule(self):
        bank = default_rule_bank()
        assert bank.get_rule("gratitude") is not None
        assert bank.get_rule("missing") is None

    def test_yaml_round_trip(self, tmp_path):
        """Test saving and loading the built-in bank keeps order and replies."""
        path = default_rule_bank().save_yaml(str(tmp_path / "rules.yaml"))

        loaded = RuleBank.from_yaml(str(path))

        assert [rule.name for rule in loaded] == [rule.name for rule in DEFAULT_RULES]
        assert loaded.match("hello").replies == DEFAULT_RULES[0].replies
        assert loaded.catch_all.is_catch_all

    def test_yaml_without_catch_all(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(
            "rules:\n"
            "  - name: greet\n"
            "    match_type: contains\n"
            "    patterns: [hello]\n"
            "    replies: [Hi]\n"
        )

        with pytest.raises(RuleError):
            RuleBank.from_yaml(str(path))

    def test_yaml_missing_rules_list(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("greeting: hello\n")

        with pytest.raises(RuleError):
            RuleBank.from_yaml(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleError):
            load_rule_bank(str(tmp_path / "absent.yaml"))


class TestDefaultBank:
    """Tests for the built-in rule bank."""

    @pytest.mark.parametrize("utterance, expected", [
        ("hello", "greeting"),
        ("Hey, how are you", "greeting"),
        ("thanks a lot", "gratitude"),
        ("thank you so much", "gratitude"),
        ("I really appreciate it", "gratitude"),
        ("I'm so tired", "low_mood"),
        ("feeling awesome", "high_mood"),
        ("the deadline is friday", "work"),
        ("the weather is mild", "fallback"),
    ])
    def test_topics(self, utterance, expected):
        assert default_rule_bank().match(utterance).name == expected

    def test_greeting_outranks_topics(self):
        assert default_rule_bank().match("hi, work was awesome").name == "greeting"

    @pytest.mark.parametrize("utterance", [
        "his deadline is friday",
        "hiking made me happy",
        "heyday of my job",
    ])
    def test_greeting_matches_word_prefix(self, utterance):
        """Test words starting with hi/hello/hey count as greetings."""
        assert default_rule_bank().match(utterance).name == "greeting"

    def test_greeting_needs_word_start(self):
        assert default_rule_bank().match("this chair is fine").name == "fallback"

    def test_every_rule_has_replies(self):
        assert all(rule.replies for rule in default_rule_bank())


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
