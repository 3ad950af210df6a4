"""
Rules Module - Ordered rule bank for reply selection
====================================================

This module provides the rule-based matching that decides which reply
set answers an utterance:
- Keyword, substring, exact and regex matching
- First-match-wins evaluation with a mandatory catch-all
- YAML loading and saving of rule banks
"""

from .engine import RuleBank, Rule, MatchType
from .bank import DEFAULT_RULES, default_rule_bank, load_rule_bank

__all__ = [
    "RuleBank",
    "Rule",
    "MatchType",
    "DEFAULT_RULES",
    "default_rule_bank",
    "load_rule_bank",
]
