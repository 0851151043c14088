"""Error taxonomy shared by the workspace sandbox and the gateway.

These exceptions are transport-agnostic. The HTTP layer and the FTP
adapter translate them into their own wire-level rejections.
"""


class KernexError(Exception):
    """Base exception for Kernex core operations."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class PathTraversalError(KernexError):
    """Raised when an untrusted path escapes its confinement boundary."""

    def __init__(self, message: str = "Path traversal detected") -> None:
        super().__init__(message)


class NotFoundError(KernexError):
    """Raised when a file or account does not exist."""
    pass


class ConflictError(KernexError):
    """Raised when a target that must not exist already exists."""
    pass


class InvalidCredentialsError(KernexError):
    """Raised for a bad username or password.

    Both cases share this class and message so callers cannot tell
    which one occurred.
    """

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message)


class IOFailureError(KernexError):
    """Raised when the underlying storage fails."""
    pass


class LifecycleError(KernexError):
    """Raised when the gateway listener cannot be bound or closed."""
    pass
