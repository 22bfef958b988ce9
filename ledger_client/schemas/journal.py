"""Journal entry schemas."""

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..domain.accounting.amounts import ZERO


class DebitAmount(BaseModel):
    side: Literal["DEBIT"] = "DEBIT"
    amount: Decimal = Field(..., gt=0)


class CreditAmount(BaseModel):
    side: Literal["CREDIT"] = "CREDIT"
    amount: Decimal = Field(..., gt=0)


LineAmount = Annotated[Union[DebitAmount, CreditAmount], Field(discriminator="side")]


class JournalLine(BaseModel):
    """One debit or credit line of a journal entry."""
    account_id: Optional[str] = None
    amount: Optional[LineAmount] = None
    description: Optional[str] = None

    @property
    def debit_amount(self) -> Decimal:
        if isinstance(self.amount, DebitAmount):
            return self.amount.amount
        return ZERO

    @property
    def credit_amount(self) -> Decimal:
        if isinstance(self.amount, CreditAmount):
            return self.amount.amount
        return ZERO


class Totals(BaseModel):
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool
    difference: Decimal


class JournalEntryRequest(BaseModel):
    """Validated journal entry ready to be sent to the backend."""
    entry_date: date
    description: str
    reference: Optional[str] = None
    lines: list[JournalLine] = Field(..., min_length=2)

    def to_payload(self) -> dict:
        """Build the ``LedgerTransactionGroup`` JSON body."""
        transactions = []
        for line in self.lines:
            transactions.append({
                "ledgerAccount": {"id": line.account_id},
                "transactionDate": self.entry_date.isoformat(),
                "description": line.description or self.description,
                "amount": str(line.amount.amount),
                "transactionState": line.amount.side,
                "journalEntryType": "SINGLE_ENTRY",
            })
        return {
            "groupDate": self.entry_date.isoformat(),
            "description": self.description,
            "reference": self.reference,
            "ledgerTransactionList": transactions,
        }
