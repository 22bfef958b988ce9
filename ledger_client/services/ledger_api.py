"""
General Ledger REST endpoints.

Maps to the backend's ``/ledgerAccount``, ``/ledgerTransaction``,
``/ledgerTransactionGroup`` and ``/voucher`` controllers. Save and update
calls first fetch a CSRF synchronizer token and merge it into the body.
"""

from datetime import date
from typing import Optional

import structlog

from ..domain.accounting.enums import LedgerGroup, VoucherType
from ..schemas.journal import JournalEntryRequest
from ..schemas.ledger import (
    AccountBalance,
    LedgerAccount,
    LedgerTransaction,
    LedgerTrialBalance,
    TransactionGroup,
)
from ..schemas.voucher import Voucher, VoucherRequest
from .api_client import ApiClient

logger = structlog.get_logger()


class LedgerApi:
    """Typed access to the ledger endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    # =========================================================================
    # Ledger accounts (Chart of Accounts)
    # =========================================================================

    def list_ledger_accounts(
        self,
        max: Optional[int] = None,
        offset: Optional[int] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
        ledger_group: Optional[LedgerGroup] = None,
    ) -> list[LedgerAccount]:
        """GET /ledgerAccount/index.json"""
        data = self.client.get("/ledgerAccount/index.json", params={
            "max": max,
            "offset": offset,
            "sort": sort,
            "order": order,
            "ledgerGroup": ledger_group,
        })
        return [LedgerAccount.model_validate(item) for item in data or []]

    def get_ledger_account(self, account_id: str) -> LedgerAccount:
        """GET /ledgerAccount/show/{id}.json"""
        return LedgerAccount.model_validate(self.client.get(f"/ledgerAccount/show/{account_id}.json"))

    def delete_ledger_account(self, account_id: str) -> None:
        """DELETE /ledgerAccount/delete/{id}.json"""
        self.client.delete(f"/ledgerAccount/delete/{account_id}.json")
        logger.info("Deleted ledger account", account_id=account_id)

    def get_account_balance(self, account_id: str, as_of: Optional[date] = None) -> AccountBalance:
        """GET /ledgerAccount/balance/{id}.json?asOf="""
        data = self.client.get(f"/ledgerAccount/balance/{account_id}.json", params={"asOf": as_of})
        return AccountBalance.model_validate(data)

    def get_trial_balance(self, as_of: Optional[date] = None) -> LedgerTrialBalance:
        """GET /ledgerAccount/trialBalance.json?asOf="""
        data = self.client.get("/ledgerAccount/trialBalance.json", params={"asOf": as_of})
        return LedgerTrialBalance.model_validate(data)

    # =========================================================================
    # Ledger transactions
    # =========================================================================

    def list_ledger_transactions(
        self,
        max: Optional[int] = None,
        offset: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[str] = None,
    ) -> list[LedgerTransaction]:
        """GET /ledgerTransaction/index.json"""
        data = self.client.get("/ledgerTransaction/index.json", params={
            "max": max,
            "offset": offset,
            "startDate": start_date,
            "endDate": end_date,
            "accountId": account_id,
        })
        return [LedgerTransaction.model_validate(item) for item in data or []]

    def list_transactions_by_account(
        self,
        account_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[LedgerTransaction]:
        """GET /ledgerTransaction/byAccount/{id}.json"""
        data = self.client.get(f"/ledgerTransaction/byAccount/{account_id}.json", params={
            "startDate": start_date,
            "endDate": end_date,
        })
        return [LedgerTransaction.model_validate(item) for item in data or []]

    # =========================================================================
    # Journal entries (ledger transaction groups)
    # =========================================================================

    def list_transaction_groups(
        self,
        max: Optional[int] = None,
        offset: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
    ) -> list[TransactionGroup]:
        """GET /ledgerTransactionGroup/index.json"""
        data = self.client.get("/ledgerTransactionGroup/index.json", params={
            "max": max,
            "offset": offset,
            "startDate": start_date,
            "endDate": end_date,
            "status": status,
        })
        return [TransactionGroup.model_validate(item) for item in data or []]

    def get_transaction_group(self, group_id: str) -> TransactionGroup:
        """GET /ledgerTransactionGroup/show/{id}.json"""
        return TransactionGroup.model_validate(
            self.client.get(f"/ledgerTransactionGroup/show/{group_id}.json")
        )

    def create_transaction_group(self, request: JournalEntryRequest) -> TransactionGroup:
        """POST /ledgerTransactionGroup/save.json"""
        body = request.to_payload()
        body.update(self.client.csrf_token("ledgerTransactionGroup"))
        data = self.client.post("/ledgerTransactionGroup/save.json", json=body)
        group = TransactionGroup.model_validate(data)
        logger.info("Created journal entry", group_id=group.id, lines=len(request.lines))
        return group

    def update_transaction_group(self, group_id: str, request: JournalEntryRequest) -> TransactionGroup:
        """PUT /ledgerTransactionGroup/update/{id}.json"""
        body = request.to_payload()
        body["id"] = group_id
        body.update(self.client.csrf_token("ledgerTransactionGroup", group_id))
        data = self.client.put(f"/ledgerTransactionGroup/update/{group_id}.json", json=body)
        return TransactionGroup.model_validate(data)

    def post_transaction_group(self, group_id: str) -> TransactionGroup:
        """POST /ledgerTransactionGroup/post/{id}.json"""
        data = self.client.post(f"/ledgerTransactionGroup/post/{group_id}.json")
        logger.info("Posted journal entry", group_id=group_id)
        return TransactionGroup.model_validate(data)

    def reverse_transaction_group(self, group_id: str) -> TransactionGroup:
        """POST /ledgerTransactionGroup/reverse/{id}.json"""
        data = self.client.post(f"/ledgerTransactionGroup/reverse/{group_id}.json")
        logger.info("Reversed journal entry", group_id=group_id)
        return TransactionGroup.model_validate(data)

    def delete_transaction_group(self, group_id: str) -> None:
        """DELETE /ledgerTransactionGroup/delete/{id}.json"""
        self.client.delete(f"/ledgerTransactionGroup/delete/{group_id}.json")
        logger.info("Deleted journal entry", group_id=group_id)

    # =========================================================================
    # Vouchers (payment / receipt / deposit)
    # =========================================================================

    def list_vouchers(
        self,
        max: Optional[int] = None,
        offset: Optional[int] = None,
        voucher_type: Optional[VoucherType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
    ) -> list[Voucher]:
        """GET /voucher/index.json"""
        data = self.client.get("/voucher/index.json", params={
            "max": max,
            "offset": offset,
            "voucherType": voucher_type,
            "startDate": start_date,
            "endDate": end_date,
            "status": status,
        })
        return [Voucher.model_validate(item) for item in data or []]

    def get_voucher(self, voucher_id: str) -> Voucher:
        """GET /voucher/show/{id}.json"""
        return Voucher.model_validate(self.client.get(f"/voucher/show/{voucher_id}.json"))

    def create_voucher(self, request: VoucherRequest) -> Voucher:
        """POST /voucher/save.json"""
        body = request.to_payload()
        body.update(self.client.csrf_token("voucher"))
        voucher = Voucher.model_validate(self.client.post("/voucher/save.json", json=body))
        logger.info(
            "Created voucher",
            voucher_id=voucher.id,
            voucher_type=voucher.voucher_type.value,
            amount=str(voucher.amount),
        )
        return voucher

    def update_voucher(self, voucher_id: str, request: VoucherRequest) -> Voucher:
        """PUT /voucher/update/{id}.json"""
        body = request.to_payload()
        body["id"] = voucher_id
        body.update(self.client.csrf_token("voucher", voucher_id))
        return Voucher.model_validate(self.client.put(f"/voucher/update/{voucher_id}.json", json=body))

    def submit_voucher_for_approval(self, voucher_id: str) -> Voucher:
        """POST /voucher/approve/{id}.json"""
        data = self.client.post(f"/voucher/approve/{voucher_id}.json")
        logger.info("Submitted voucher for approval", voucher_id=voucher_id)
        return Voucher.model_validate(data)

    def post_voucher(self, voucher_id: str) -> Voucher:
        """POST /voucher/post/{id}.json"""
        data = self.client.post(f"/voucher/post/{voucher_id}.json")
        logger.info("Posted voucher", voucher_id=voucher_id)
        return Voucher.model_validate(data)

    def cancel_voucher(self, voucher_id: str) -> Voucher:
        """POST /voucher/cancel/{id}.json"""
        data = self.client.post(f"/voucher/cancel/{voucher_id}.json")
        logger.info("Cancelled voucher", voucher_id=voucher_id)
        return Voucher.model_validate(data)

    def delete_voucher(self, voucher_id: str) -> None:
        """DELETE /voucher/delete/{id}.json"""
        self.client.delete(f"/voucher/delete/{voucher_id}.json")
        logger.info("Deleted voucher", voucher_id=voucher_id)
