"""Exception types raised by the conversation engine."""


class BotError(Exception):
    """Base class for conversation engine errors."""


class StoreError(BotError):
    """A persistence gateway call failed; the current turn is aborted."""

    def __init__(self, operation: str, collection: str, cause: Exception = None):
        self.operation = operation
        self.collection = collection
        self.cause = cause
        message = f"{operation} on '{collection}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
