"""
Domain errors raised by the store and service layers.
Routers translate them into HTTP responses.
"""


class TransactionError(Exception):
    """Base class for transaction failures."""

    status_code = 500
    message = "Server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class Unauthorized(TransactionError):
    status_code = 401
    message = "Invalid token"


class NotFound(TransactionError):
    status_code = 404
    message = "Transaction not found"


class PersistenceError(TransactionError):
    """Store-level failure. `code` carries the DynamoDB error code when known."""

    status_code = 500
    message = "Failed to access transaction store"

    def __init__(self, message=None, code=None):
        super().__init__(message)
        self.code = code
