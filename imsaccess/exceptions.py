"""imsaccess exception classes."""


class ImsError(Exception):
    """Base exception for all imsaccess errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(ImsError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ValidationError(ImsError):
    """Raised on malformed account ids or repository names."""

    def __init__(self, message: str) -> None:
        super().__init__("VALIDATION_ERROR", message)


class StoreError(ImsError):
    """Raised when a key-value store read or write fails."""

    pass


class RegistryError(ImsError):
    """Raised when a repository registry call fails."""

    pass


class NotFoundError(RegistryError):
    """Raised when a repository is not found."""

    pass


class EncodingError(ImsError):
    """Raised when a policy document cannot be rendered or parsed."""

    def __init__(self, message: str) -> None:
        super().__init__("ENCODING_ERROR", message)


class DeadlineExceededError(ImsError):
    """Raised when a fan-out runs past its deadline."""

    def __init__(self, message: str) -> None:
        super().__init__("DEADLINE_EXCEEDED", message)


class FanoutError(ImsError):
    """
    Raised when a grant/revoke fan-out aborts part-way.

    Repositories listed in ``completed`` were already rewritten and are not
    rolled back; retrying the whole operation converges them.
    """

    def __init__(
        self,
        repository: str,
        completed: list[str],
        cause: Exception,
    ) -> None:
        self.repository = repository
        self.completed = completed
        self.cause = cause
        super().__init__(
            "FANOUT_ABORTED",
            f"failed updating repository '{repository}' after "
            f"{len(completed)} updated: {cause}",
        )
