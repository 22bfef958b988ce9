"""Pydantic schemas for backend requests and responses."""

from .ledger import (
    AccountBalance,
    LedgerAccount,
    LedgerTransaction,
    LedgerTrialBalance,
    Reference,
    TransactionGroup,
    TrialBalanceRow,
)
from .journal import (
    CreditAmount,
    DebitAmount,
    JournalEntryRequest,
    JournalLine,
    Totals,
)
from .register import RegisterFilters, RegisterPage, RegisterRow
from .voucher import (
    ClientBeneficiary,
    OtherBeneficiary,
    StaffBeneficiary,
    VendorBeneficiary,
    Voucher,
    VoucherRequest,
)

__all__ = [
    "AccountBalance",
    "LedgerAccount",
    "LedgerTransaction",
    "LedgerTrialBalance",
    "Reference",
    "TransactionGroup",
    "TrialBalanceRow",
    "CreditAmount",
    "DebitAmount",
    "JournalEntryRequest",
    "JournalLine",
    "Totals",
    "RegisterFilters",
    "RegisterPage",
    "RegisterRow",
    "ClientBeneficiary",
    "OtherBeneficiary",
    "StaffBeneficiary",
    "VendorBeneficiary",
    "Voucher",
    "VoucherRequest",
]
