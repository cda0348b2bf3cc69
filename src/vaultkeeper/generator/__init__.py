# Generator Module - Password generation and strength scoring
#
# Leaf utilities: no dependency on vault storage.

from .password_generator import PasswordPolicy, generate_password
from .strength import StrengthResult, evaluate_strength

__all__ = [
    "PasswordPolicy",
    "StrengthResult",
    "evaluate_strength",
    "generate_password",
]
