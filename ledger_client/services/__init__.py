"""Services for talking to the ledger backend."""

from .api_client import ApiClient, to_query_string
from .ledger_api import LedgerApi
from .account_registry import LedgerAccountRegistry
from .entry_workflow import BulkResult, EntryWorkflow, RecordRef
from .transaction_register import TransactionRegister

__all__ = [
    "ApiClient",
    "to_query_string",
    "LedgerApi",
    "LedgerAccountRegistry",
    "EntryWorkflow",
    "BulkResult",
    "RecordRef",
    "TransactionRegister",
]
