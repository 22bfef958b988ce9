"""
Transaction register: journal entries and vouchers listed line by line.

Each saved journal entry contributes one row per ledger line and each voucher
one row per side (cash/bank and its counter account). Rows are newest first
and can be searched, filtered, paged and selected for bulk actions through
``EntryWorkflow.post_many`` / ``delete_many``.
"""

import math
from datetime import date
from typing import Iterable, Optional

import structlog

from ..domain.accounting.amounts import ZERO, format_amount
from ..domain.accounting.enums import EntryKind, LedgerState, RegisterEntryType
from ..domain.accounting.voucher_builder import POLARITY
from ..schemas.ledger import TransactionGroup
from ..schemas.register import RegisterFilters, RegisterPage, RegisterRow
from ..schemas.voucher import Voucher
from .entry_workflow import RecordRef
from .ledger_api import LedgerApi

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 10
FETCH_LIMIT = 500


def group_rows(group: TransactionGroup) -> list[RegisterRow]:
    """One row per line of a journal entry."""
    transaction_id = group.reference or f"JE-{group.id[:5].upper()}"
    rows = []
    for index, transaction in enumerate(group.ledger_transaction_list):
        account = transaction.ledger_account
        rows.append(RegisterRow(
            id=f"{group.id}-{index}",
            source_id=group.id,
            kind=EntryKind.JOURNAL_ENTRY,
            entry_type=RegisterEntryType.JOURNAL_ENTRY,
            entry_date=group.group_date or transaction.transaction_date,
            transaction_id=transaction_id,
            description=transaction.description or group.description or "",
            account_id=account.id if account else None,
            account_code=(account.code if account else None) or "",
            account_name=(account.name if account else None) or "",
            debit_amount=transaction.amount if transaction.transaction_state == LedgerState.DEBIT else ZERO,
            credit_amount=transaction.amount if transaction.transaction_state == LedgerState.CREDIT else ZERO,
            status=group.status,
        ))
    return rows


def voucher_rows(voucher: Voucher) -> list[RegisterRow]:
    """Debit row then credit row of a voucher; sides without an account are left out."""
    prefix = {"PAYMENT": "PV", "RECEIPT": "RV", "DEPOSIT": "DV"}[voucher.voucher_type.value]
    transaction_id = voucher.voucher_number or f"{prefix}-{voucher.id[:5].upper()}"
    debit_field, credit_field = POLARITY[voucher.voucher_type]

    rows = []
    for account_field, state in ((debit_field, LedgerState.DEBIT), (credit_field, LedgerState.CREDIT)):
        account = getattr(voucher, account_field.removesuffix("_id"))
        if account is None:
            continue
        rows.append(RegisterRow(
            id=f"{voucher.id}-{account_field.removesuffix('_account_id')}",
            source_id=voucher.id,
            kind=EntryKind.VOUCHER,
            entry_type=RegisterEntryType(voucher.voucher_type.value),
            entry_date=voucher.voucher_date,
            transaction_id=transaction_id,
            description=voucher.description or "",
            account_id=account.id,
            account_code=account.code or "",
            account_name=account.name or "",
            debit_amount=voucher.amount if state == LedgerState.DEBIT else ZERO,
            credit_amount=voucher.amount if state == LedgerState.CREDIT else ZERO,
            status=voucher.status,
        ))
    return rows


def matches(row: RegisterRow, filters: RegisterFilters) -> bool:
    if filters.search:
        query = filters.search.strip().lower()
        haystack = [row.transaction_id, row.description, row.account_code, row.account_name]
        haystack += [format_amount(a) for a in (row.debit_amount, row.credit_amount) if a > 0]
        if not any(query in value.lower() for value in haystack):
            return False
    if filters.status and row.status != filters.status:
        return False
    if filters.entry_type and row.entry_type != filters.entry_type:
        return False
    if filters.start_date and (row.entry_date is None or row.entry_date < filters.start_date):
        return False
    if filters.end_date and (row.entry_date is None or row.entry_date > filters.end_date):
        return False
    if filters.account_id and row.account_id != filters.account_id:
        return False
    if filters.min_amount is not None and row.amount < filters.min_amount:
        return False
    if filters.max_amount is not None and row.amount > filters.max_amount:
        return False
    return True


class TransactionRegister:
    """Unified, filterable list of journal entry and voucher lines."""

    def __init__(self, api: LedgerApi):
        self.api = api
        self._rows: list[RegisterRow] = []

    def refresh(self, fetch_limit: int = FETCH_LIMIT) -> list[RegisterRow]:
        """Reload journal entries and vouchers and rebuild the rows, newest first."""
        groups = self.api.list_transaction_groups(max=fetch_limit)
        vouchers = self.api.list_vouchers(max=fetch_limit)

        rows = [row for group in groups for row in group_rows(group)]
        rows += [row for voucher in vouchers for row in voucher_rows(voucher)]
        rows.sort(key=lambda row: row.entry_date or date.min, reverse=True)
        self._rows = rows

        logger.info("Loaded transaction register", groups=len(groups), vouchers=len(vouchers), rows=len(rows))
        return rows

    @property
    def rows(self) -> list[RegisterRow]:
        return list(self._rows)

    def filter(self, filters: Optional[RegisterFilters] = None) -> list[RegisterRow]:
        filters = filters or RegisterFilters()
        return [row for row in self._rows if matches(row, filters)]

    def page(
        self,
        filters: Optional[RegisterFilters] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> RegisterPage:
        """
        Return one page of filtered rows (pages start at 1).

        Raises:
            ValueError: If page or page_size is below 1
        """
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be at least 1")
        rows = self.filter(filters)
        start = (page - 1) * page_size
        return RegisterPage(
            rows=rows[start:start + page_size],
            page=page,
            page_size=page_size,
            total=len(rows),
            total_pages=math.ceil(len(rows) / page_size),
        )

    def selected_records(self, row_ids: Iterable[str]) -> list[RecordRef]:
        """Distinct source records behind the selected rows, in register order."""
        wanted = set(row_ids)
        records = {}
        for row in self._rows:
            if row.id in wanted and row.source_id not in records:
                records[row.source_id] = RecordRef(row.kind, row.source_id, row.status)
        return list(records.values())
