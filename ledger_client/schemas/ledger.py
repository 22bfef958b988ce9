"""Ledger account and ledger transaction schemas (backend wire format)."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ..domain.accounting.enums import LedgerGroup, LedgerState, TransactionStatus


class WireModel(BaseModel):
    """Base for models exchanged with the backend (camelCase on the wire)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Reference(WireModel):
    """Foreign key reference as the backend nests it: ``{"id": ...}``."""
    id: str
    name: Optional[str] = None
    code: Optional[str] = None


class LedgerAccount(WireModel):
    """Chart of Accounts entry."""
    id: str
    code: str
    name: str
    ledger_group: LedgerGroup
    balance: Decimal = Decimal("0")
    is_active: bool = True
    number: Optional[str] = None
    currency: Optional[str] = None
    description: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.code} - {self.name}"


class AccountBalance(WireModel):
    balance: Decimal


class TrialBalanceRow(WireModel):
    account: LedgerAccount
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")


class LedgerTrialBalance(WireModel):
    """Trial balance computed from ledger accounts."""
    accounts: list[TrialBalanceRow] = Field(default_factory=list)
    total_debits: Decimal = Decimal("0")
    total_credits: Decimal = Decimal("0")

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits


class LedgerTransaction(WireModel):
    """Single ledger transaction (one line of a transaction group)."""
    id: Optional[str] = None
    transaction_number: Optional[str] = None
    transaction_date: Optional[date] = None
    description: Optional[str] = None
    amount: Decimal = Decimal("0")
    reference: Optional[str] = None
    status: Optional[TransactionStatus] = None
    ledger_account: Optional[Reference] = None
    transaction_state: Optional[LedgerState] = None
    journal_entry_type: Optional[str] = None
    ledger_transaction_group: Optional[Reference] = None


class TransactionGroup(WireModel):
    """Balanced multi-line journal entry as stored by the backend."""
    id: str
    description: Optional[str] = None
    group_date: Optional[date] = None
    reference: Optional[str] = None
    balanced: bool = False
    total_debit: Decimal = Decimal("0")
    total_credit: Decimal = Decimal("0")
    status: TransactionStatus = TransactionStatus.DRAFT
    ledger_transaction_list: list[LedgerTransaction] = Field(default_factory=list)
