"""
In-memory ledger backend for development and tests.

Serves the same REST surface as the real backend under ``/rest``: chart of
accounts, ledger transactions, journal entries (transaction groups) and
vouchers. It enforces the balance rule, the status transitions and the CSRF
synchronizer token, and books posted entries into account balances.

Usage:
    app = create_mock_backend()
    client = TestClient(app, base_url="http://testserver/rest")
    api = LedgerApi(ApiClient(http_client=client))
"""

import itertools
import logging
import secrets
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Query, Request, status

from ..core.logging import configure_logging
from .fixtures import sample_accounts

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DEBIT_NORMAL_GROUPS = {"ASSET", "EXPENSE"}

VOUCHER_PREFIX = {"PAYMENT": "PV", "RECEIPT": "RV", "DEPOSIT": "DV"}
# voucher type -> (debit account key, credit account key)
VOUCHER_POLARITY = {
    "PAYMENT": ("expenseAccount", "cashAccount"),
    "RECEIPT": ("cashAccount", "incomeAccount"),
    "DEPOSIT": ("bankAccount", "cashAccount"),
}


def _money(amount: Decimal) -> str:
    return str(amount.quantize(CENT))


def _parse_amount(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(CENT)
    except (InvalidOperation, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid amount: {value}")


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _not_found(what: str, record_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} {record_id} not found")


class MockLedgerStore:
    """State of the mock backend."""

    def __init__(self, accounts: Optional[list[dict]] = None, auth_token: Optional[str] = None):
        self.accounts: dict[str, dict] = {a["id"]: a for a in (accounts or sample_accounts())}
        for account in self.accounts.values():
            account["balance"] = Decimal(str(account.get("balance", "0")))
        self.groups: dict[str, dict] = {}
        self.vouchers: dict[str, dict] = {}
        self.auth_token = auth_token
        self.request_log: list[tuple[str, str]] = []
        self._csrf_tokens: set[str] = set()
        self._ids = itertools.count(1)

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    # ------------------------------------------------------------------
    # CSRF synchronizer tokens
    # ------------------------------------------------------------------

    def issue_token(self, uri: str) -> dict:
        token = secrets.token_hex(8)
        self._csrf_tokens.add(token)
        return {"SYNCHRONIZER_TOKEN": token, "SYNCHRONIZER_URI": uri}

    def consume_token(self, payload: dict) -> None:
        token = payload.get("SYNCHRONIZER_TOKEN")
        if not token or token not in self._csrf_tokens:
            raise _bad_request("Invalid or missing synchronizer token")
        self._csrf_tokens.discard(token)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def account(self, account_id: Optional[str]) -> dict:
        account = self.accounts.get(account_id or "")
        if not account:
            raise _bad_request(f"Ledger account {account_id} not found")
        return account

    def account_view(self, account: dict) -> dict:
        return {**account, "balance": _money(account["balance"])}

    def account_ref(self, account: dict) -> dict:
        return {"id": account["id"], "name": account["name"], "code": account["code"]}

    def book(self, lines: list[dict], sign: int = 1) -> None:
        """Apply posted lines to account balances (sign=-1 undoes them)."""
        for line in lines:
            account = self.accounts[line["ledgerAccount"]["id"]]
            amount = Decimal(line["amount"]) * sign
            debit_normal = account["ledgerGroup"] in DEBIT_NORMAL_GROUPS
            if (line["transactionState"] == "DEBIT") == debit_normal:
                account["balance"] += amount
            else:
                account["balance"] -= amount

    def all_transactions(self) -> list[dict]:
        transactions = []
        for group in self.groups.values():
            transactions.extend(group["ledgerTransactionList"])
        for voucher in self.vouchers.values():
            transactions.extend(voucher["lines"])
        return transactions


def get_store(request: Request) -> MockLedgerStore:
    return request.app.state.store


def require_auth(request: Request, store: MockLedgerStore = Depends(get_store)) -> None:
    if store.auth_token and request.headers.get("X-Auth-Token") != store.auth_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")


def _page(items: list, max: Optional[int], offset: Optional[int]) -> list:
    start = offset or 0
    end = start + max if max else None
    return items[start:end]


def _in_range(value: Optional[str], start_date: Optional[date], end_date: Optional[date]) -> bool:
    if value is None:
        return True
    day = date.fromisoformat(value)
    if start_date and day < start_date:
        return False
    if end_date and day > end_date:
        return False
    return True


router = APIRouter()


# =============================================================================
# Ledger accounts
# =============================================================================

@router.get("/ledgerAccount/index.json")
def list_accounts(
    ledger_group: Optional[str] = Query(None, alias="ledgerGroup"),
    max: Optional[int] = None,
    offset: Optional[int] = None,
    store: MockLedgerStore = Depends(get_store),
):
    accounts = sorted(store.accounts.values(), key=lambda a: a["code"])
    if ledger_group:
        wanted = {"REVENUE", "INCOME"} if ledger_group in ("REVENUE", "INCOME") else {ledger_group}
        accounts = [a for a in accounts if a["ledgerGroup"] in wanted]
    return [store.account_view(a) for a in _page(accounts, max, offset)]


@router.get("/ledgerAccount/show/{account_id}.json")
def show_account(account_id: str, store: MockLedgerStore = Depends(get_store)):
    account = store.accounts.get(account_id)
    if not account:
        raise _not_found("Ledger account", account_id)
    return store.account_view(account)


@router.delete("/ledgerAccount/delete/{account_id}.json", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(account_id: str, store: MockLedgerStore = Depends(get_store)):
    account = store.accounts.get(account_id)
    if not account:
        raise _not_found("Ledger account", account_id)
    in_use = any(t["ledgerAccount"]["id"] == account_id for t in store.all_transactions())
    if in_use:
        raise _bad_request(f"Ledger account {account['code']} has transactions and cannot be deleted")
    del store.accounts[account_id]


@router.get("/ledgerAccount/balance/{account_id}.json")
def account_balance(
    account_id: str,
    as_of: Optional[date] = Query(None, alias="asOf"),
    store: MockLedgerStore = Depends(get_store),
):
    account = store.accounts.get(account_id)
    if not account:
        raise _not_found("Ledger account", account_id)
    return {"balance": _money(account["balance"])}


@router.get("/ledgerAccount/trialBalance.json")
def trial_balance(
    as_of: Optional[date] = Query(None, alias="asOf"),
    store: MockLedgerStore = Depends(get_store),
):
    rows = []
    total_debits = Decimal("0")
    total_credits = Decimal("0")
    for account in sorted(store.accounts.values(), key=lambda a: a["code"]):
        balance = account["balance"]
        if balance == 0:
            continue
        debit_normal = account["ledgerGroup"] in DEBIT_NORMAL_GROUPS
        on_debit_side = (balance > 0) == debit_normal
        debit = abs(balance) if on_debit_side else Decimal("0")
        credit = Decimal("0") if on_debit_side else abs(balance)
        total_debits += debit
        total_credits += credit
        rows.append({"account": store.account_view(account), "debit": _money(debit), "credit": _money(credit)})
    return {"accounts": rows, "totalDebits": _money(total_debits), "totalCredits": _money(total_credits)}


# =============================================================================
# Ledger transactions
# =============================================================================

@router.get("/ledgerTransaction/index.json")
def list_transactions(
    account_id: Optional[str] = Query(None, alias="accountId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    max: Optional[int] = None,
    offset: Optional[int] = None,
    store: MockLedgerStore = Depends(get_store),
):
    transactions = [
        t for t in store.all_transactions()
        if (not account_id or t["ledgerAccount"]["id"] == account_id)
        and _in_range(t.get("transactionDate"), start_date, end_date)
    ]
    return _page(transactions, max, offset)


@router.get("/ledgerTransaction/byAccount/{account_id}.json")
def transactions_by_account(
    account_id: str,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    store: MockLedgerStore = Depends(get_store),
):
    if account_id not in store.accounts:
        raise _not_found("Ledger account", account_id)
    return [
        t for t in store.all_transactions()
        if t["ledgerAccount"]["id"] == account_id
        and _in_range(t.get("transactionDate"), start_date, end_date)
    ]


# =============================================================================
# Journal entries (transaction groups)
# =============================================================================

def _build_group_lines(store: MockLedgerStore, group_id: str, payload: dict) -> list[dict]:
    items = payload.get("ledgerTransactionList") or []
    if len(items) < 2:
        raise _bad_request("At least 2 lines are required")

    lines = []
    total_debit = Decimal("0")
    total_credit = Decimal("0")
    for item in items:
        account = store.account((item.get("ledgerAccount") or {}).get("id"))
        amount = _parse_amount(item.get("amount"))
        if amount <= 0:
            raise _bad_request("Amount must be greater than 0")
        state = item.get("transactionState")
        if state == "DEBIT":
            total_debit += amount
        elif state == "CREDIT":
            total_credit += amount
        else:
            raise _bad_request(f"Invalid transaction state: {state}")
        lines.append({
            "id": store.next_id("txn"),
            "transactionDate": item.get("transactionDate") or payload.get("groupDate"),
            "description": item.get("description"),
            "amount": _money(amount),
            "ledgerAccount": store.account_ref(account),
            "transactionState": state,
            "journalEntryType": item.get("journalEntryType") or "SINGLE_ENTRY",
            "ledgerTransactionGroup": {"id": group_id},
        })

    if total_debit != total_credit:
        raise _bad_request(
            f"Total debits ({_money(total_debit)}) must equal total credits ({_money(total_credit)})"
        )
    return lines


def _fill_group(store: MockLedgerStore, group: dict, payload: dict) -> None:
    lines = _build_group_lines(store, group["id"], payload)
    total = sum((Decimal(line["amount"]) for line in lines if line["transactionState"] == "DEBIT"), Decimal("0"))
    group.update({
        "description": payload.get("description"),
        "groupDate": payload.get("groupDate"),
        "reference": payload.get("reference"),
        "balanced": True,
        "totalDebit": _money(total),
        "totalCredit": _money(total),
        "ledgerTransactionList": lines,
    })
    for line in lines:
        line["status"] = group["status"]


def _group(store: MockLedgerStore, group_id: str) -> dict:
    group = store.groups.get(group_id)
    if not group:
        raise _not_found("Transaction group", group_id)
    return group


def _set_group_status(group: dict, new_status: str) -> None:
    group["status"] = new_status
    for line in group["ledgerTransactionList"]:
        line["status"] = new_status


@router.get("/ledgerTransactionGroup/create.json")
def group_create_token(store: MockLedgerStore = Depends(get_store)):
    return store.issue_token("/ledgerTransactionGroup/create")


@router.get("/ledgerTransactionGroup/edit/{group_id}.json")
def group_edit_token(group_id: str, store: MockLedgerStore = Depends(get_store)):
    _group(store, group_id)
    return store.issue_token(f"/ledgerTransactionGroup/edit/{group_id}")


@router.get("/ledgerTransactionGroup/index.json")
def list_groups(
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    max: Optional[int] = None,
    offset: Optional[int] = None,
    store: MockLedgerStore = Depends(get_store),
):
    groups = [
        g for g in store.groups.values()
        if (not status_filter or g["status"] == status_filter)
        and _in_range(g.get("groupDate"), start_date, end_date)
    ]
    return _page(groups, max, offset)


@router.get("/ledgerTransactionGroup/show/{group_id}.json")
def show_group(group_id: str, store: MockLedgerStore = Depends(get_store)):
    return _group(store, group_id)


@router.post("/ledgerTransactionGroup/save.json", status_code=status.HTTP_201_CREATED)
def save_group(payload: dict[str, Any] = Body(...), store: MockLedgerStore = Depends(get_store)):
    store.consume_token(payload)
    group = {"id": store.next_id("jeg"), "status": "DRAFT"}
    _fill_group(store, group, payload)
    store.groups[group["id"]] = group
    logger.info(f"Saved journal entry {group['id']} with {len(group['ledgerTransactionList'])} lines")
    return group


@router.put("/ledgerTransactionGroup/update/{group_id}.json")
def update_group(group_id: str, payload: dict[str, Any] = Body(...), store: MockLedgerStore = Depends(get_store)):
    group = _group(store, group_id)
    store.consume_token(payload)
    if group["status"] != "DRAFT":
        raise _bad_request(f"Journal entry in status {group['status']} cannot be edited")
    _fill_group(store, group, payload)
    return group


@router.post("/ledgerTransactionGroup/post/{group_id}.json")
def post_group(group_id: str, store: MockLedgerStore = Depends(get_store)):
    group = _group(store, group_id)
    if group["status"] not in ("DRAFT", "PENDING"):
        raise _bad_request(f"Journal entry in status {group['status']} cannot be posted")
    store.book(group["ledgerTransactionList"])
    _set_group_status(group, "POSTED")
    logger.info(f"Posted journal entry {group_id}")
    return group


@router.post("/ledgerTransactionGroup/reverse/{group_id}.json")
def reverse_group(group_id: str, store: MockLedgerStore = Depends(get_store)):
    group = _group(store, group_id)
    if group["status"] != "POSTED":
        raise _bad_request(f"Only posted journal entries can be reversed (status {group['status']})")
    store.book(group["ledgerTransactionList"], sign=-1)
    _set_group_status(group, "REVERSED")
    logger.info(f"Reversed journal entry {group_id}")
    return group


@router.delete("/ledgerTransactionGroup/delete/{group_id}.json", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: str, store: MockLedgerStore = Depends(get_store)):
    group = _group(store, group_id)
    if group["status"] not in ("DRAFT", "PENDING"):
        raise _bad_request(f"Journal entry in status {group['status']} cannot be deleted")
    del store.groups[group_id]


# =============================================================================
# Vouchers
# =============================================================================

def _voucher(store: MockLedgerStore, voucher_id: str) -> dict:
    voucher = store.vouchers.get(voucher_id)
    if not voucher:
        raise _not_found("Voucher", voucher_id)
    return voucher


def _fill_voucher(store: MockLedgerStore, voucher: dict, payload: dict) -> None:
    voucher_type = payload.get("voucherType")
    if voucher_type not in VOUCHER_POLARITY:
        raise _bad_request(f"Invalid voucher type: {voucher_type}")
    amount = _parse_amount(payload.get("amount"))
    if amount <= 0:
        raise _bad_request("Amount must be greater than 0")

    voucher_to = payload.get("voucherTo")
    party_key = {"CLIENT": "client", "VENDOR": "vendor", "STAFF": "staff"}.get(voucher_to)
    if voucher_to == "OTHER":
        if not payload.get("beneficiaryName"):
            raise _bad_request("Beneficiary name is required")
    elif party_key is None or not (payload.get(party_key) or {}).get("id"):
        raise _bad_request("Beneficiary is required")

    debit_key, credit_key = VOUCHER_POLARITY[voucher_type]
    debit_account = store.account((payload.get(debit_key) or {}).get("id"))
    credit_account = store.account((payload.get(credit_key) or {}).get("id"))

    voucher_date = payload.get("voucherDate")
    lines = []
    for account, state in ((debit_account, "DEBIT"), (credit_account, "CREDIT")):
        lines.append({
            "id": store.next_id("txn"),
            "transactionDate": voucher_date,
            "description": payload.get("description"),
            "amount": _money(amount),
            "ledgerAccount": store.account_ref(account),
            "transactionState": state,
            "journalEntryType": "SINGLE_ENTRY",
            "status": voucher["status"],
        })

    voucher.update({
        "voucherType": voucher_type,
        "voucherTo": voucher_to,
        "voucherDate": voucher_date,
        "beneficiaryName": payload.get("beneficiaryName"),
        "client": payload.get("client"),
        "vendor": payload.get("vendor"),
        "staff": payload.get("staff"),
        "amount": _money(amount),
        "description": payload.get("description"),
        "reference": payload.get("reference"),
        "lines": lines,
    })
    for key in ("cashAccount", "expenseAccount", "incomeAccount", "bankAccount"):
        ref = payload.get(key)
        voucher[key] = store.account_ref(store.account(ref["id"])) if ref and ref.get("id") else None


def _voucher_view(voucher: dict) -> dict:
    return {key: value for key, value in voucher.items() if key != "lines"}


def _set_voucher_status(voucher: dict, new_status: str) -> None:
    voucher["status"] = new_status
    for line in voucher["lines"]:
        line["status"] = new_status


@router.get("/voucher/create.json")
def voucher_create_token(store: MockLedgerStore = Depends(get_store)):
    return store.issue_token("/voucher/create")


@router.get("/voucher/edit/{voucher_id}.json")
def voucher_edit_token(voucher_id: str, store: MockLedgerStore = Depends(get_store)):
    _voucher(store, voucher_id)
    return store.issue_token(f"/voucher/edit/{voucher_id}")


@router.get("/voucher/index.json")
def list_vouchers(
    voucher_type: Optional[str] = Query(None, alias="voucherType"),
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    max: Optional[int] = None,
    offset: Optional[int] = None,
    store: MockLedgerStore = Depends(get_store),
):
    vouchers = [
        _voucher_view(v) for v in store.vouchers.values()
        if (not voucher_type or v["voucherType"] == voucher_type)
        and (not status_filter or v["status"] == status_filter)
        and _in_range(v.get("voucherDate"), start_date, end_date)
    ]
    return _page(vouchers, max, offset)


@router.get("/voucher/show/{voucher_id}.json")
def show_voucher(voucher_id: str, store: MockLedgerStore = Depends(get_store)):
    return _voucher_view(_voucher(store, voucher_id))


@router.post("/voucher/save.json", status_code=status.HTTP_201_CREATED)
def save_voucher(payload: dict[str, Any] = Body(...), store: MockLedgerStore = Depends(get_store)):
    store.consume_token(payload)
    voucher = {"id": store.next_id("vch"), "status": "DRAFT"}
    _fill_voucher(store, voucher, payload)
    count = sum(1 for v in store.vouchers.values() if v["voucherType"] == voucher["voucherType"]) + 1
    voucher["voucherNumber"] = f"{VOUCHER_PREFIX[voucher['voucherType']]}-{count:04d}"
    store.vouchers[voucher["id"]] = voucher
    logger.info(f"Saved voucher {voucher['voucherNumber']} for {voucher['amount']}")
    return _voucher_view(voucher)


@router.put("/voucher/update/{voucher_id}.json")
def update_voucher(voucher_id: str, payload: dict[str, Any] = Body(...), store: MockLedgerStore = Depends(get_store)):
    voucher = _voucher(store, voucher_id)
    store.consume_token(payload)
    if voucher["status"] != "DRAFT":
        raise _bad_request(f"Voucher in status {voucher['status']} cannot be edited")
    _fill_voucher(store, voucher, payload)
    return _voucher_view(voucher)


@router.post("/voucher/approve/{voucher_id}.json")
def approve_voucher(voucher_id: str, store: MockLedgerStore = Depends(get_store)):
    voucher = _voucher(store, voucher_id)
    if voucher["status"] != "DRAFT":
        raise _bad_request(f"Voucher in status {voucher['status']} cannot be submitted for approval")
    _set_voucher_status(voucher, "APPROVED")
    return _voucher_view(voucher)


@router.post("/voucher/post/{voucher_id}.json")
def post_voucher(voucher_id: str, store: MockLedgerStore = Depends(get_store)):
    voucher = _voucher(store, voucher_id)
    if voucher["status"] not in ("DRAFT", "APPROVED"):
        raise _bad_request(f"Voucher in status {voucher['status']} cannot be posted")
    store.book(voucher["lines"])
    _set_voucher_status(voucher, "POSTED")
    logger.info(f"Posted voucher {voucher_id}")
    return _voucher_view(voucher)


@router.post("/voucher/cancel/{voucher_id}.json")
def cancel_voucher(voucher_id: str, store: MockLedgerStore = Depends(get_store)):
    voucher = _voucher(store, voucher_id)
    if voucher["status"] != "POSTED":
        raise _bad_request(f"Only posted vouchers can be cancelled (status {voucher['status']})")
    store.book(voucher["lines"], sign=-1)
    _set_voucher_status(voucher, "CANCELLED")
    logger.info(f"Cancelled voucher {voucher_id}")
    return _voucher_view(voucher)


@router.delete("/voucher/delete/{voucher_id}.json", status_code=status.HTTP_204_NO_CONTENT)
def delete_voucher(voucher_id: str, store: MockLedgerStore = Depends(get_store)):
    voucher = _voucher(store, voucher_id)
    if voucher["status"] not in ("DRAFT", "APPROVED"):
        raise _bad_request(f"Voucher in status {voucher['status']} cannot be deleted")
    del store.vouchers[voucher_id]


def create_mock_backend(store: Optional[MockLedgerStore] = None) -> FastAPI:
    """Build the mock backend app; routes live under ``/rest``."""
    app = FastAPI(title="Mock Ledger Backend")
    app.state.store = store or MockLedgerStore()

    @app.middleware("http")
    async def record_requests(request: Request, call_next):
        app.state.store.request_log.append((request.method, request.url.path))
        return await call_next(request)

    app.include_router(router, prefix="/rest", dependencies=[Depends(require_auth)])

    @app.on_event("startup")
    async def startup_event():
        configure_logging()
        logger.info(f"Mock ledger backend serving {len(app.state.store.accounts)} accounts")

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "healthy", "mock_mode": True}

    return app
