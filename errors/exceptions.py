"""
Custom exception classes for the token holder registry
"""

class RegistryError(Exception):
    """Base exception for registry operations"""
    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code or "REGISTRY_ERROR"

class InvalidArgumentError(RegistryError):
    """Call arguments failed precondition checks; nothing was mutated"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "INVALID_ARGUMENT")
        self.details = details or {}

class BalanceReadError(RegistryError):
    """The external balance source could not answer for (user, token)"""
    def __init__(self, user: str, token: str, reason: str = "balance read failed"):
        message = f"Balance read failed for user {user} token {token}: {reason}"
        super().__init__(message, "BALANCE_READ_ERROR")
        self.user = user
        self.token = token
        self.reason = reason

class TransferError(RegistryError):
    """The external token mover rejected or failed a transfer"""
    def __init__(self, message: str = "Transfer failed"):
        super().__init__(message, "TRANSFER_ERROR")
