"""
Common exceptions for Bot Gateway.
"""


class BotGatewayError(Exception):
    """Base exception for all Bot Gateway errors."""
    pass


class ConfigurationError(BotGatewayError):
    """Raised when there are configuration issues."""
    pass


class UpstreamError(BotGatewayError):
    """Raised when a model, retriever or store call fails mid-request."""
    pass


class DatabaseError(UpstreamError):
    """Raised when database operations fail."""
    pass


class StorageError(UpstreamError):
    """Raised when registry or history storage operations fail."""
    pass


class AIError(UpstreamError):
    """Raised when embedding or chat model calls fail."""
    pass


class RetrievalError(UpstreamError):
    """Raised when vector index or retriever operations fail."""
    pass


class DocumentCaptureError(BotGatewayError):
    """Raised when retrieved documents are captured twice or never."""
    pass


class AuthorizationError(BotGatewayError):
    """
    Raised when a request is not allowed to reach a bot.

    Always surfaced to the client as an HTTP status plus message.
    """

    status_code = 403
    message = "Forbidden"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class BotNotFoundError(AuthorizationError):
    """Raised when no bot matches the public identifier."""

    status_code = 404
    message = "Bot not found"


class ForbiddenError(AuthorizationError):
    """Raised when the caller's key does not match the bot's key."""

    status_code = 403
    message = "Forbidden"


class ResolutionMissingError(BotGatewayError):
    """Raised when the bot's embedding or chat model is not in the catalog."""

    status_code = 404

    def __init__(self, kind: str):
        self.kind = kind
        self.message = f"{kind.capitalize()} not found"
        super().__init__(self.message)
