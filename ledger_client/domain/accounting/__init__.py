"""Accounting domain module."""

from .enums import (
    BeneficiaryType,
    EntryAction,
    EntryKind,
    LedgerGroup,
    LedgerState,
    RegisterEntryType,
    TransactionStatus,
    VoucherType,
)
from .exceptions import (
    ApiError,
    AuthenticationError,
    BackendRejectedError,
    IllegalTransitionError,
    LedgerClientError,
    LedgerValidationError,
    SubmissionInProgressError,
    TransportError,
)

__all__ = [
    "BeneficiaryType",
    "EntryAction",
    "EntryKind",
    "LedgerGroup",
    "LedgerState",
    "RegisterEntryType",
    "TransactionStatus",
    "VoucherType",
    "ApiError",
    "AuthenticationError",
    "BackendRejectedError",
    "IllegalTransitionError",
    "LedgerClientError",
    "LedgerValidationError",
    "SubmissionInProgressError",
    "TransportError",
]
