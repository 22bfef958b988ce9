"""Tests for the journal entry builder (no backend involved)."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_client.domain.accounting import (
    IllegalTransitionError,
    LedgerValidationError,
    TransactionStatus,
)
from ledger_client.domain.accounting.journal_builder import JournalEntryBuilder
from ledger_client.schemas.journal import CreditAmount, DebitAmount
from ledger_client.schemas.ledger import TransactionGroup


def make_builder(lines) -> JournalEntryBuilder:
    """Build an entry from (account_id, debit, credit) tuples."""
    builder = JournalEntryBuilder(entry_date=date(2026, 1, 15), description="Test entry")
    while len(builder.lines) < len(lines):
        builder.add_line()
    for index, (account_id, debit, credit) in enumerate(lines):
        builder.set_line_account(index, account_id)
        if debit:
            builder.set_line_debit(index, debit)
        if credit:
            builder.set_line_credit(index, credit)
    return builder


class TestLineEditing:
    """Adding, removing and editing lines."""

    def test_starts_with_two_empty_lines(self):
        builder = JournalEntryBuilder()

        assert len(builder.lines) == 2
        assert all(line.account_id is None and line.amount is None for line in builder.lines)
        assert builder.entry_date == date.today()

    def test_add_line_appends_empty_line(self):
        builder = JournalEntryBuilder()

        index = builder.add_line()

        assert index == 2
        assert len(builder.lines) == 3
        assert builder.lines[2].debit_amount == Decimal("0")
        assert builder.lines[2].credit_amount == Decimal("0")

    def test_remove_line_refused_at_minimum(self):
        builder = make_builder([("acc-cash", "100", None), ("acc-revenue", None, "100")])
        before = list(builder.lines)

        with pytest.raises(LedgerValidationError) as exc_info:
            builder.remove_line(0)

        assert "Minimum 2 lines" in str(exc_info.value)
        assert builder.lines == before

    def test_remove_line_above_minimum(self):
        builder = make_builder([
            ("acc-cash", "100", None),
            ("acc-revenue", None, "60"),
            ("acc-services", None, "40"),
        ])

        builder.remove_line(1)

        assert [line.account_id for line in builder.lines] == ["acc-cash", "acc-services"]

    def test_invalid_index(self):
        builder = JournalEntryBuilder()

        with pytest.raises(IndexError):
            builder.set_line_debit(5, "10")

    def test_debit_clears_credit(self):
        builder = JournalEntryBuilder()
        builder.set_line_credit(0, "250")

        builder.set_line_debit(0, "100")

        assert builder.lines[0].debit_amount == Decimal("100.00")
        assert builder.lines[0].credit_amount == Decimal("0")
        assert isinstance(builder.lines[0].amount, DebitAmount)

    def test_credit_clears_debit(self):
        builder = JournalEntryBuilder()
        builder.set_line_debit(1, "75.5")

        builder.set_line_credit(1, "75.5")

        assert builder.lines[1].credit_amount == Decimal("75.50")
        assert builder.lines[1].debit_amount == Decimal("0")
        assert isinstance(builder.lines[1].amount, CreditAmount)

    def test_zero_on_current_side_clears_amount(self):
        builder = JournalEntryBuilder()
        builder.set_line_debit(0, "100")

        builder.set_line_debit(0, "0")

        assert builder.lines[0].amount is None

    def test_zero_on_other_side_keeps_amount(self):
        builder = JournalEntryBuilder()
        builder.set_line_debit(0, "100")

        builder.set_line_credit(0, 0)

        assert builder.lines[0].debit_amount == Decimal("100.00")

    def test_negative_amount_rejected(self):
        builder = JournalEntryBuilder()

        with pytest.raises(LedgerValidationError) as exc_info:
            builder.set_line_debit(0, "-5")

        assert exc_info.value.line_index == 0
        assert exc_info.value.field == "debit_amount"

    def test_non_numeric_amount_rejected(self):
        builder = JournalEntryBuilder()

        with pytest.raises(LedgerValidationError):
            builder.set_line_credit(1, "abc")

    def test_oversized_amount_rejected_on_its_line(self):
        builder = JournalEntryBuilder()

        with pytest.raises(LedgerValidationError) as exc_info:
            builder.set_line_debit(0, "1e30")

        assert exc_info.value.line_index == 0
        assert exc_info.value.field == "debit_amount"
        assert builder.lines[0].amount is None


class TestTotals:
    """Debit/credit totals use exact decimal equality."""

    def test_balanced_entry(self):
        builder = make_builder([("acc-cash", "1000", None), ("acc-revenue", None, "1000")])

        totals = builder.totals()

        assert totals.total_debit == Decimal("1000")
        assert totals.total_credit == Decimal("1000")
        assert totals.is_balanced
        assert totals.difference == Decimal("0")

    def test_unbalanced_entry(self):
        builder = make_builder([("acc-rent", "2500", None), ("acc-cash", None, "2000")])

        totals = builder.totals()

        assert not totals.is_balanced
        assert totals.difference == Decimal("500")

    def test_float_inputs_sum_exactly(self):
        # 0.1 + 0.2 is not 0.3 in binary floating point
        builder = make_builder([
            ("acc-office", 0.1, None),
            ("acc-rent", 0.2, None),
            ("acc-cash", None, 0.3),
        ])

        assert builder.totals().is_balanced

    def test_one_cent_difference_is_unbalanced(self):
        builder = make_builder([("acc-cash", "100.00", None), ("acc-revenue", None, "99.99")])

        totals = builder.totals()

        assert not totals.is_balanced
        assert totals.difference == Decimal("0.01")

    @pytest.mark.parametrize("debits,credits", [
        (["10", "20"], ["30"]),
        (["0.01"], ["0.01"]),
        (["1234.56", "0.44"], ["1000", "235"]),
        (["5"], ["2", "2"]),
        (["100"], ["99.99"]),
    ])
    def test_is_balanced_iff_sums_equal(self, debits, credits):
        lines = [("acc-cash", d, None) for d in debits] + [("acc-revenue", None, c) for c in credits]
        builder = make_builder(lines)

        expected = (
            sum(Decimal(d).quantize(Decimal("0.01")) for d in debits)
            == sum(Decimal(c).quantize(Decimal("0.01")) for c in credits)
        )
        assert builder.totals().is_balanced == expected


class TestValidation:
    """Local validation before anything is sent."""

    def test_valid_entry_has_no_errors(self):
        builder = make_builder([("acc-cash", "1000", None), ("acc-revenue", None, "1000")])

        assert builder.validate() == []

    def test_unbalanced_message(self):
        builder = make_builder([("acc-rent", "2500", None), ("acc-cash", None, "2000")])

        with pytest.raises(LedgerValidationError) as exc_info:
            builder.to_request()

        assert str(exc_info.value) == "Debits and credits must be equal, difference: 500"

    def test_missing_account_identifies_line(self):
        builder = make_builder([("acc-cash", "10", None), (None, None, "10")])

        errors = builder.validate()

        assert len(errors) == 1
        assert errors[0].field == "account_id"
        assert errors[0].line_index == 1

    def test_zero_amount_line_rejected(self):
        builder = make_builder([
            ("acc-cash", "10", None),
            ("acc-revenue", None, "10"),
            ("acc-office", None, None),
        ])

        errors = builder.validate()

        assert [(e.field, e.line_index) for e in errors] == [("amount", 2)]

    def test_fewer_than_two_lines_always_fails(self):
        builder = make_builder([("acc-cash", "10", None), ("acc-revenue", None, "10")])
        builder.lines = builder.lines[:1]

        messages = [e.message for e in builder.validate()]

        assert "At least 2 lines are required" in messages

    def test_description_required(self):
        builder = make_builder([("acc-cash", "10", None), ("acc-revenue", None, "10")])
        builder.description = "  "

        with pytest.raises(LedgerValidationError) as exc_info:
            builder.to_request()

        assert exc_info.value.field == "description"

    def test_request_payload(self):
        builder = make_builder([("acc-cash", "1000", None), ("acc-revenue", None, "1000")])
        builder.reference = "JE-42"

        payload = builder.to_request().to_payload()

        assert payload["groupDate"] == "2026-01-15"
        assert payload["reference"] == "JE-42"
        assert [t["transactionState"] for t in payload["ledgerTransactionList"]] == ["DEBIT", "CREDIT"]
        assert payload["ledgerTransactionList"][0]["amount"] == "1000.00"
        assert payload["ledgerTransactionList"][1]["ledgerAccount"] == {"id": "acc-revenue"}
        assert payload["ledgerTransactionList"][0]["description"] == "Test entry"


class TestLoadExisting:
    """Editing entries loaded from the backend."""

    def group(self, status: str) -> TransactionGroup:
        return TransactionGroup.model_validate({
            "id": "jeg-1",
            "description": "Rent for January",
            "groupDate": "2026-01-31",
            "status": status,
            "ledgerTransactionList": [
                {"amount": "2500.00", "transactionState": "DEBIT", "ledgerAccount": {"id": "acc-rent"}},
                {"amount": "2500.00", "transactionState": "CREDIT", "ledgerAccount": {"id": "acc-cash"}},
            ],
        })

    def test_from_group(self):
        builder = JournalEntryBuilder.from_group(self.group("DRAFT"))

        assert builder.record_id == "jeg-1"
        assert builder.status == TransactionStatus.DRAFT
        assert builder.lines[0].debit_amount == Decimal("2500")
        assert builder.lines[1].credit_amount == Decimal("2500")
        assert builder.totals().is_balanced

    def test_posted_entry_is_read_only(self):
        builder = JournalEntryBuilder.from_group(self.group("POSTED"))

        assert builder.is_read_only
        assert not builder.can_submit
        with pytest.raises(IllegalTransitionError):
            builder.add_line()
        with pytest.raises(IllegalTransitionError):
            builder.set_line_debit(0, "1")

    def test_line_without_side_loads_empty(self):
        """A backend row with no debit/credit side must not be guessed as a debit."""
        group = TransactionGroup.model_validate({
            "id": "jeg-2",
            "description": "Imported entry",
            "groupDate": "2026-01-31",
            "ledgerTransactionList": [
                {"amount": "300.00", "ledgerAccount": {"id": "acc-rent"}},
                {"amount": "300.00", "transactionState": "CREDIT", "ledgerAccount": {"id": "acc-cash"}},
            ],
        })

        builder = JournalEntryBuilder.from_group(group)

        assert builder.lines[0].amount is None
        assert builder.totals().total_debit == Decimal("0")
        assert not builder.totals().is_balanced
        errors = builder.validate()
        assert errors[0].line_index == 0
        assert errors[0].field == "amount"
