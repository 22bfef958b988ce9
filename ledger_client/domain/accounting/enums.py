"""Accounting domain enums."""

from enum import Enum as PyEnum


class LedgerGroup(str, PyEnum):
    """Chart of Accounts classification."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    @classmethod
    def _missing_(cls, value):
        # Backend emits INCOME and REVENUE interchangeably
        if isinstance(value, str):
            upper = value.upper()
            if upper == "INCOME":
                return cls.REVENUE
            if upper in cls.__members__:
                return cls[upper]
        return None


class LedgerState(str, PyEnum):
    """Side of a journal line."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class TransactionStatus(str, PyEnum):
    """Status shared by journal entries and vouchers."""
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    POSTED = "POSTED"
    REVERSED = "REVERSED"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            upper = value.upper()
            if upper == "APPROVED":
                return cls.PENDING
            if upper == "CANCELLED":
                return cls.REVERSED
            if upper in cls.__members__:
                return cls[upper]
        return None


class VoucherType(str, PyEnum):
    """Voucher types."""
    PAYMENT = "PAYMENT"
    RECEIPT = "RECEIPT"
    DEPOSIT = "DEPOSIT"


class BeneficiaryType(str, PyEnum):
    """Who a voucher is paid to or received from."""
    CLIENT = "CLIENT"
    VENDOR = "VENDOR"
    STAFF = "STAFF"
    OTHER = "OTHER"


class EntryKind(str, PyEnum):
    """Kind of record moving through the status lifecycle."""
    JOURNAL_ENTRY = "journal_entry"
    VOUCHER = "voucher"


class EntryAction(str, PyEnum):
    """User actions that change a record's status."""
    SAVE = "save"
    SUBMIT_FOR_APPROVAL = "submit_for_approval"
    POST = "post"
    REVERSE = "reverse"
    DELETE = "delete"


class RegisterEntryType(str, PyEnum):
    """Source of a transaction register row."""
    JOURNAL_ENTRY = "JOURNAL_ENTRY"
    PAYMENT = "PAYMENT"
    RECEIPT = "RECEIPT"
    DEPOSIT = "DEPOSIT"
