"""In-memory registry of the tenant's ledger accounts."""

from typing import Optional

import structlog

from ..domain.accounting.enums import LedgerGroup
from ..schemas.ledger import LedgerAccount
from .ledger_api import LedgerApi

logger = structlog.get_logger()

GROUP_ORDER = (
    LedgerGroup.ASSET,
    LedgerGroup.LIABILITY,
    LedgerGroup.EQUITY,
    LedgerGroup.REVENUE,
    LedgerGroup.EXPENSE,
)


class LedgerAccountRegistry:
    """Accounts fetched from the backend, grouped and formatted for selection."""

    def __init__(self, api: LedgerApi):
        self.api = api
        self._accounts: dict[str, LedgerAccount] = {}

    def refresh(self, **params) -> list[LedgerAccount]:
        """Replace the cached accounts with a fresh listing."""
        accounts = self.api.list_ledger_accounts(**params)
        self._accounts = {account.id: account for account in accounts}
        logger.info("Loaded ledger accounts", count=len(accounts))
        return accounts

    @property
    def accounts(self) -> list[LedgerAccount]:
        return sorted(self._accounts.values(), key=lambda a: a.code)

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, account_id: str) -> bool:
        return account_id in self._accounts

    def get(self, account_id: str) -> Optional[LedgerAccount]:
        return self._accounts.get(account_id)

    def by_group(self, group: LedgerGroup, include_inactive: bool = False) -> list[LedgerAccount]:
        group = LedgerGroup(group)
        return [
            account for account in self.accounts
            if account.ledger_group == group and (include_inactive or account.is_active)
        ]

    def grouped(self, include_inactive: bool = False) -> dict[LedgerGroup, list[LedgerAccount]]:
        """Accounts per classification, in balance-sheet then income-statement order."""
        return {group: self.by_group(group, include_inactive) for group in GROUP_ORDER}

    def options(self, group: Optional[LedgerGroup] = None) -> list[tuple[str, str]]:
        """``(id, "code - name")`` pairs for active accounts."""
        if group is None:
            accounts = [account for account in self.accounts if account.is_active]
        else:
            accounts = self.by_group(group)
        return [(account.id, account.label) for account in accounts]

    def cash_account_options(self) -> list[tuple[str, str]]:
        return self.options(LedgerGroup.ASSET)

    def expense_account_options(self) -> list[tuple[str, str]]:
        return self.options(LedgerGroup.EXPENSE)

    def income_account_options(self) -> list[tuple[str, str]]:
        return self.options(LedgerGroup.REVENUE)
