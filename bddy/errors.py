from __future__ import annotations


class BddyError(Exception):
    """Base class for exceptions raised by bddy itself."""


class StepException(BddyError):
    """A step behavior raised an unexpected exception.

    The original exception is kept as ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, cause: BaseException):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause


class StepError(AssertionError):
    """A step behavior failed an assertion.

    Derives from AssertionError so test runners show it as a failure rather
    than an error.
    """

    def __init__(self, cause: BaseException):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause


class PendingException(NotImplementedError):
    """Raised when a pending behavior is run."""

    def __init__(self, message: str = "Step is pending"):
        super().__init__(message)
