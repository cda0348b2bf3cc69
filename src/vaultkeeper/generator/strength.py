"""Heuristic password strength scoring.

Pure and deterministic: fixed bonuses for length thresholds and character
classes, fixed penalties for repeated runs and common substrings, clamped
to 0..100.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List

from .password_generator import SYMBOLS

LENGTH_BONUSES = ((8, 10), (12, 15), (16, 15), (20, 10))

LOWERCASE_BONUS = 10
UPPERCASE_BONUS = 10
DIGIT_BONUS = 10
SYMBOL_BONUS = 15

REPEAT_PENALTY = 10
COMMON_PATTERN_PENALTY = 15

COMMON_PATTERNS = ("123", "abc", "qwerty", "password", "admin")

MSG_TOO_SHORT = "Password is too short"
MSG_ADD_LOWERCASE = "Add lowercase letters"
MSG_ADD_UPPERCASE = "Add uppercase letters"
MSG_ADD_DIGITS = "Add numbers"
MSG_ADD_SYMBOLS = "Add symbols"
MSG_REPEATS = "Avoid repeating the same character"
MSG_COMMON = "Avoid common patterns"
MSG_STRONG = "Strong password"

_LOWER_RE = re.compile(r"[a-z]")
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SYMBOL_RE = re.compile("[" + re.escape(SYMBOLS) + "]")
_REPEAT_RE = re.compile(r"(.)\1{2,}")


@dataclass
class StrengthResult:
    score: int
    level: str  # weak | fair | good | strong
    feedback: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {"score": self.score, "level": self.level, "feedback": list(self.feedback)}


def _level_for(score: int) -> str:
    if score < 30:
        return "weak"
    if score < 50:
        return "fair"
    if score < 75:
        return "good"
    return "strong"


def evaluate_strength(password: str) -> StrengthResult:
    """Score ``password`` and explain what would improve it."""
    score = 0
    feedback: List[str] = []

    for threshold, bonus in LENGTH_BONUSES:
        if len(password) >= threshold:
            score += bonus

    for pattern, bonus, message in (
        (_LOWER_RE, LOWERCASE_BONUS, MSG_ADD_LOWERCASE),
        (_UPPER_RE, UPPERCASE_BONUS, MSG_ADD_UPPERCASE),
        (_DIGIT_RE, DIGIT_BONUS, MSG_ADD_DIGITS),
        (_SYMBOL_RE, SYMBOL_BONUS, MSG_ADD_SYMBOLS),
    ):
        if pattern.search(password):
            score += bonus
        else:
            feedback.append(message)

    if _REPEAT_RE.search(password):
        score -= REPEAT_PENALTY
        feedback.append(MSG_REPEATS)

    lowered = password.lower()
    if any(common in lowered for common in COMMON_PATTERNS):
        score -= COMMON_PATTERN_PENALTY
        feedback.append(MSG_COMMON)

    score = max(0, min(100, score))
    level = _level_for(score)

    if level == "weak" and len(password) < 8:
        feedback.insert(0, MSG_TOO_SHORT)
    elif level == "strong" and not feedback:
        feedback.append(MSG_STRONG)

    return StrengthResult(score=score, level=level, feedback=feedback)
