"""Random credential generation from a character-class policy.

One character from every enabled class is always included; the rest are
drawn uniformly from the union of enabled classes. The result is then
Fisher-Yates shuffled so the guaranteed characters are not at the front.
All randomness comes from :mod:`secrets`.
"""

import secrets
import string
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..vault.exceptions import PolicyError

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

DEFAULT_LENGTH = 16


@dataclass
class PasswordPolicy:
    """Which character classes to use, and the requested length.

    The generated password is ``max(length, enabled_class_count)`` long.
    """

    length: int = DEFAULT_LENGTH
    lowercase: bool = True
    uppercase: bool = True
    digits: bool = True
    symbols: bool = True

    def enabled_classes(self) -> List[str]:
        """Alphabets of the enabled classes, in a fixed order."""
        classes: List[Tuple[bool, str]] = [
            (self.lowercase, LOWERCASE),
            (self.uppercase, UPPERCASE),
            (self.digits, DIGITS),
            (self.symbols, SYMBOLS),
        ]
        return [alphabet for enabled, alphabet in classes if enabled]


def _shuffle(chars: List[str]) -> None:
    """In-place Fisher-Yates shuffle driven by the secure random source."""
    for i in range(len(chars) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        chars[i], chars[j] = chars[j], chars[i]


def generate_password(policy: Optional[PasswordPolicy] = None) -> str:
    """
    Generate a password satisfying ``policy`` (default: 16 chars, all classes).

    Raises:
        PolicyError: If no character class is enabled or the length is
            not an integer.
    """
    policy = policy or PasswordPolicy()
    if isinstance(policy.length, bool) or not isinstance(policy.length, int):
        raise PolicyError(f"length must be an integer, got {policy.length!r}")

    classes = policy.enabled_classes()
    if not classes:
        raise PolicyError("Select at least one character class")

    charset = "".join(classes)
    effective_length = max(policy.length, len(classes))

    chars = [secrets.choice(alphabet) for alphabet in classes]
    chars.extend(secrets.choice(charset) for _ in range(effective_length - len(classes)))
    _shuffle(chars)
    return "".join(chars)
