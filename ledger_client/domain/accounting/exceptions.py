"""Errors raised by the ledger client."""


class LedgerClientError(Exception):
    """Base class for every error raised by the client."""


class LedgerValidationError(LedgerClientError):
    """Local validation failure; never sent to the network."""

    def __init__(self, message: str, field: str | None = None, line_index: int | None = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.line_index = line_index


class IllegalTransitionError(LedgerClientError):
    """Action not offered for the record's current status."""

    def __init__(self, message: str, status=None, action=None):
        super().__init__(message)
        self.status = status
        self.action = action


class SubmissionInProgressError(LedgerClientError):
    """A submit was triggered while another one is still in flight."""


class ApiError(LedgerClientError):
    """Base class for failures talking to the backend."""

    retryable = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BackendRejectedError(ApiError):
    """Backend answered with a non-2xx response."""

    def __init__(self, message: str, status_code: int, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class AuthenticationError(BackendRejectedError):
    """Backend rejected the auth token (HTTP 401)."""

    retryable = False


class TransportError(ApiError):
    """The request never got a response."""

    GENERIC_MESSAGE = "Unable to reach the server. Please check your connection and try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.GENERIC_MESSAGE)
