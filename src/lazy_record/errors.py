"""
Exception hierarchy for lazy-record.

Loader failures are not wrapped: the exception raised by a loader's
awaitable reaches every waiter of the batch unmodified. Only contract
violations get a dedicated type.
"""


class LazyRecordError(Exception):
    """Base exception for lazy-record errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}. {self.suggestion}"
        return self.message


class LoaderContractError(LazyRecordError, TypeError):
    """The loader did not honour its calling contract.

    Raised when the loader returns something that is not awaitable, raises
    synchronously instead of returning an awaitable, or resolves to a value
    that is not a mapping.
    """

    def __init__(
        self,
        message: str = "load function must return an awaitable",
        suggestion: str | None = None,
        keys: tuple[str, ...] = (),
    ):
        super().__init__(message, suggestion)
        self.keys = keys


class ConfigurationError(LazyRecordError):
    """Configuration error."""
    pass


def describe_error(error: BaseException, operation: str = "load") -> str:
    """
    Build a one-line description of a batch failure for logs and CLI output.

    Args:
        error: The exception a batch was rejected with
        operation: Name of the operation that failed

    Returns:
        Human readable error message
    """
    if isinstance(error, LazyRecordError):
        return f"Error in {operation}: {error}"

    cause = error.__cause__
    if cause is not None:
        return (
            f"Error in {operation}: {type(error).__name__} - {error} "
            f"(caused by {type(cause).__name__}: {cause})"
        )

    return f"Error in {operation}: {type(error).__name__} - {error}"
