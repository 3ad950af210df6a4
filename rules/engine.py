"""
Rules Engine - Ordered pattern matching over a fixed rule bank
==============================================================

This module implements the rule bank that maps an utterance to a reply
set. Rules are evaluated in declaration order and the first match wins;
the last rule must be a catch-all so a match always exists.
"""

import re
import yaml
from pathlib import Path
from typing import Optional, List, Dict, Any, Callable, Iterator, Sequence, Tuple
from dataclasses import dataclass, field
from enum import Enum

from core.exceptions import RuleError
from core.logging import get_logger

logger = get_logger("rules.engine")


class MatchType(Enum):
    """Types of pattern matching."""
    EXACT = "exact"           # Exact string match
    CONTAINS = "contains"     # Contains substring
    KEYWORDS = "keywords"     # Contains any whitespace-separated keyword
    REGEX = "regex"           # Regular expression search
    ALWAYS = "always"         # Catch-all


@dataclass
class Rule:
    """
    A single entry of the rule bank.

    The predicate is built from ``patterns`` and ``match_type``, or
    supplied directly as ``predicate`` for matching that does not fit a
    pattern. Either way it is called with the lowercase utterance.

    Attributes:
        name (str): Unique rule name
        replies (list): Candidate replies, in preference order
        patterns (list): Patterns to match
        match_type (MatchType): How to match patterns
        predicate (callable): Optional custom matcher
    """
    name: str
    replies: List[str] = field(default_factory=list)
    patterns: List[str] = field(default_factory=list)
    match_type: MatchType = MatchType.CONTAINS
    predicate: Optional[Callable[[str], bool]] = None

    _compiled: List["re.Pattern"] = field(default_factory=list, init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.match_type == MatchType.REGEX:
            for pattern in self.patterns:
                try:
                    self._compiled.append(re.compile(pattern, re.IGNORECASE))
                except re.error as e:
                    raise RuleError(
                        f"Invalid regex in rule '{self.name}': {e}",
                        {"pattern": pattern}
                    )

    @property
    def is_catch_all(self) -> bool:
        """True if this rule matches every utterance."""
        return self.match_type == MatchType.ALWAYS and self.predicate is None

    def matches(self, utterance: str) -> bool:
        """
        Check if this rule matches an utterance.

        Args:
            utterance: Lowercase-normalised utterance

        Returns:
            True if the rule applies
        """
        if self.predicate is not None:
            return bool(self.predicate(utterance))

        if self.match_type == MatchType.ALWAYS:
            return True

        if self.match_type == MatchType.REGEX:
            return any(regex.search(utterance) for regex in self._compiled)

        return any(self._match_pattern(pattern.lower(), utterance) for pattern in self.patterns)

    def _match_pattern(self, pattern: str, utterance: str) -> bool:
        if self.match_type == MatchType.EXACT:
            return utterance.strip() == pattern

        if self.match_type == MatchType.CONTAINS:
            return pattern in utterance

        if self.match_type == MatchType.KEYWORDS:
            return any(keyword in utterance for keyword in pattern.split())

        return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert rule to dictionary."""
        if self.predicate is not None:
            raise RuleError(f"Rule '{self.name}' uses a custom predicate and cannot be serialised")

        return {
            "name": self.name,
            "match_type": self.match_type.value,
            "patterns": list(self.patterns),
            "replies": list(self.replies),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        """
        Create rule from dictionary.

        Raises:
            RuleError: If the entry is malformed
        """
        if not isinstance(data, dict) or "name" not in data:
            raise RuleError("Rule entry must be a mapping with a 'name'", {"entry": data})

        try:
            match_type = MatchType(data.get("match_type", "contains"))
        except ValueError:
            raise RuleError(
                f"Unknown match_type for rule '{data['name']}'",
                {"match_type": data.get("match_type")}
            )

        return cls(
            name=str(data["name"]),
            replies=[str(reply) for reply in data.get("replies") or []],
            patterns=[str(pattern) for pattern in data.get("patterns") or []],
            match_type=match_type,
        )


class RuleBank:
    """
    Ordered, immutable collection of rules.

    Declaration order is priority order. Construction fails unless the
    final rule is a catch-all, which guarantees ``match`` always returns
    a rule.

    Example:
        bank = RuleBank([
            Rule(name="greeting", patterns=[r"\\bhello\\b"],
                 match_type=MatchType.REGEX, replies=["Hi!"]),
            Rule(name="fallback", match_type=MatchType.ALWAYS,
                 replies=["Tell me more."]),
        ])

        bank.match("hello there").name   # "greeting"
    """

    def __init__(self, rules: Sequence[Rule]):
        """
        Build a rule bank.

        Args:
            rules: Rules in priority order, catch-all last

        Raises:
            RuleError: If the bank is empty, names repeat, or the last
                rule is not a catch-all
        """
        self._rules: Tuple[Rule, ...] = tuple(rules)
        self._validate()

    def _validate(self) -> None:
        if not self._rules:
            raise RuleError("Rule bank cannot be empty")

        seen = set()
        for rule in self._rules:
            if rule.name in seen:
                raise RuleError(f"Duplicate rule name: {rule.name}")
            seen.add(rule.name)

            if not rule.replies:
                logger.warning(f"Rule '{rule.name}' has no replies")

        if not self._rules[-1].is_catch_all:
            raise RuleError(
                "The last rule must be a catch-all",
                {"last_rule": self._rules[-1].name}
            )

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    @property
    def catch_all(self) -> Rule:
        return self._rules[-1]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def get_rule(self, name: str) -> Optional[Rule]:
        """Get a rule by name."""
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None

    def match(self, utterance: str) -> Rule:
        """
        Find the first rule matching an utterance.

        Args:
            utterance: Raw utterance; lowercased before matching

        Returns:
            The matching rule (the catch-all if nothing else applies)
        """
        normalized = utterance.lower()
        for rule in self._rules:
            if rule.matches(normalized):
                return rule
        return self.catch_all

    @classmethod
    def from_yaml(cls, path: str) -> "RuleBank":
        """
        Load a rule bank from a YAML file with a top-level ``rules`` list.

        Raises:
            RuleError: If the file cannot be read or describes an invalid bank
        """
        rules_file = Path(path)

        try:
            with open(rules_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RuleError(f"Failed to parse rules file: {e}", {"path": str(rules_file)})
        except IOError as e:
            raise RuleError(f"Failed to read rules file: {e}", {"path": str(rules_file)})

        entries = data.get("rules") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise RuleError("Rules file must contain a 'rules' list", {"path": str(rules_file)})

        bank = cls([Rule.from_dict(entry) for entry in entries])
        logger.info(f"Loaded {len(bank)} rules from {rules_file}")
        return bank

    def save_yaml(self, path: str) -> Path:
        """
        Write the bank to a YAML file.

        Args:
            path: Destination file

        Returns:
            Path written
        """
        rules_file = Path(path)
        rules_file.parent.mkdir(parents=True, exist_ok=True)

        data = {"rules": [rule.to_dict() for rule in self._rules]}
        with open(rules_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

        return rules_file
