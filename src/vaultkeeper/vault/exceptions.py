"""
Vault Exception Classes
"""


class VaultError(Exception):
    """Base exception for vault operations"""
    pass


class AuthenticationError(VaultError):
    """Raised when a blob cannot be decrypted (wrong password or tampered data).

    The two causes are deliberately indistinguishable.
    """

    def __init__(self, message: str = "Incorrect master password"):
        super().__init__(message)


class FormatError(VaultError):
    """Raised when decrypted vault data does not decode to an entry collection"""
    pass


class PolicyError(VaultError):
    """Raised when a password generation policy cannot be satisfied"""
    pass


class VaultAlreadyInitializedError(VaultError):
    """Raised when initializing a vault that already exists"""
    pass


class VaultNotInitializedError(VaultError):
    """Raised when an operation needs a vault that has not been created"""
    pass


class VaultLockedError(VaultError):
    """Raised when a session operation is attempted while locked"""
    pass
