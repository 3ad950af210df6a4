"""
Default rule bank for the cozy chat companion.

Order matters: a greeting outranks gratitude, which outranks the mood
and work topics. The fallback rule is always last.
"""

from .engine import Rule, RuleBank, MatchType


DEFAULT_RULES = [
    Rule(
        name="greeting",
        # Prefix match: "hiking" and "heyday" also count as greetings
        patterns=[r"\b(hi|hello|hey)"],
        match_type=MatchType.REGEX,
        replies=[
            "Hi! What's the vibe today?",
            "Hello hello! How's it going?",
            "Hey there! Anything fun happening?",
        ],
    ),
    Rule(
        name="gratitude",
        patterns=[r"\b(thank(s| you)|appreciate)\b"],
        match_type=MatchType.REGEX,
        replies=[
            "Anytime! I'm just happy to be here with you.",
            "You're super welcome. Want to keep chatting?",
        ],
    ),
    Rule(
        name="low_mood",
        patterns=[r"\b(sad|down|blue|tired|exhausted)\b"],
        match_type=MatchType.REGEX,
        replies=[
            "I'm sorry it's feeling heavy right now. Want to talk it through?",
            "That sounds rough. I'm here for whatever you need to unpack.",
        ],
    ),
    Rule(
        name="high_mood",
        patterns=[r"\b(happy|excited|great|awesome|amazing)\b"],
        match_type=MatchType.REGEX,
        replies=[
            "Love that energy! What made it so good?",
            "That sounds awesome. Share the highlight with me!",
        ],
    ),
    Rule(
        name="work",
        patterns=[r"\b(work|job|project|deadline)\b"],
        match_type=MatchType.REGEX,
        replies=[
            "Work can be a ride. What's happening on your plate?",
            "Let it all out—what's the latest from the grind?",
        ],
    ),
    Rule(
        name="fallback",
        match_type=MatchType.ALWAYS,
        replies=[
            "I'm listening. Tell me more.",
            "Got it. Where should we take this next?",
            "Mhmm, I'm following along. What's the next chapter?",
        ],
    ),
]


def default_rule_bank() -> RuleBank:
    """Return the built-in rule bank."""
    return RuleBank(DEFAULT_RULES)


def load_rule_bank(rules_file: str = "") -> RuleBank:
    """
    Load the rule bank named by configuration.

    Args:
        rules_file: YAML rules file; empty selects the built-in bank
    """
    if rules_file:
        return RuleBank.from_yaml(rules_file)
    return default_rule_bank()
