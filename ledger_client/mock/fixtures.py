"""Sample chart of accounts served by the mock backend."""

from decimal import Decimal

SAMPLE_ACCOUNTS = [
    {"id": "acc-cash", "code": "1000", "name": "Cash", "ledgerGroup": "ASSET"},
    {"id": "acc-bank", "code": "1010", "name": "Bank - Operating", "ledgerGroup": "ASSET"},
    {"id": "acc-petty", "code": "1090", "name": "Old Petty Cash", "ledgerGroup": "ASSET", "isActive": False},
    {"id": "acc-ar", "code": "1200", "name": "Accounts Receivable", "ledgerGroup": "ASSET"},
    {"id": "acc-ap", "code": "2000", "name": "Accounts Payable", "ledgerGroup": "LIABILITY"},
    {"id": "acc-equity", "code": "3000", "name": "Owner's Equity", "ledgerGroup": "EQUITY"},
    {"id": "acc-revenue", "code": "4000", "name": "Sales Revenue", "ledgerGroup": "REVENUE"},
    # Backend still labels some income accounts INCOME
    {"id": "acc-services", "code": "4100", "name": "Service Income", "ledgerGroup": "INCOME"},
    {"id": "acc-rent", "code": "5000", "name": "Rent Expense", "ledgerGroup": "EXPENSE"},
    {"id": "acc-office", "code": "5100", "name": "Office Expenses", "ledgerGroup": "EXPENSE"},
]


def sample_accounts() -> list[dict]:
    """Fresh copies of the sample accounts with zero balances."""
    accounts = []
    for account in SAMPLE_ACCOUNTS:
        record = {"isActive": True, "currency": "USD", **account}
        record["balance"] = Decimal("0.00")
        accounts.append(record)
    return accounts
