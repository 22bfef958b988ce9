"""Tests for the in-memory backend's own rules: auth, CSRF tokens and status guards."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from ledger_client.domain.accounting import AuthenticationError, BackendRejectedError
from ledger_client.domain.accounting.journal_builder import JournalEntryBuilder
from ledger_client.mock.backend import MockLedgerStore, create_mock_backend
from ledger_client.services import ApiClient, LedgerApi


def draft_payload(store: MockLedgerStore, amount: str = "100.00") -> dict:
    return {
        "groupDate": "2026-01-10",
        "description": "Owner contribution",
        "ledgerTransactionList": [
            {"ledgerAccount": {"id": "acc-cash"}, "amount": amount, "transactionState": "DEBIT"},
            {"ledgerAccount": {"id": "acc-equity"}, "amount": amount, "transactionState": "CREDIT"},
        ],
        **store.issue_token("/ledgerTransactionGroup/create"),
    }


class TestAuthentication:

    def test_missing_token_rejected(self):
        store = MockLedgerStore(auth_token="secret")
        with TestClient(create_mock_backend(store), base_url="http://testserver/rest") as http_client:
            client = ApiClient(http_client=http_client, token="wrong")

            with pytest.raises(AuthenticationError) as exc_info:
                LedgerApi(client).list_ledger_accounts()

        assert exc_info.value.message == "Authentication required"
        assert not exc_info.value.retryable
        assert client.token is None

    def test_valid_token_accepted(self):
        store = MockLedgerStore(auth_token="secret")
        with TestClient(create_mock_backend(store), base_url="http://testserver/rest") as http_client:
            accounts = LedgerApi(ApiClient(http_client=http_client, token="secret")).list_ledger_accounts()

        assert len(accounts) == 10

    def test_health_needs_no_token(self):
        store = MockLedgerStore(auth_token="secret")
        with TestClient(create_mock_backend(store)) as http_client:
            response = http_client.get("/health")

        assert response.status_code == 200
        assert response.json()["mock_mode"] is True


class TestSynchronizerToken:

    def test_save_without_token_rejected(self, http_client, store):
        payload = draft_payload(store)
        del payload["SYNCHRONIZER_TOKEN"]

        response = http_client.post("/ledgerTransactionGroup/save.json", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or missing synchronizer token"
        assert store.groups == {}

    def test_token_is_single_use(self, http_client, store):
        payload = draft_payload(store)

        first = http_client.post("/ledgerTransactionGroup/save.json", json=payload)
        second = http_client.post("/ledgerTransactionGroup/save.json", json=payload)

        assert first.status_code == 201
        assert second.status_code == 400

    def test_unbalanced_payload_rejected_server_side(self, http_client, store):
        payload = draft_payload(store)
        payload["ledgerTransactionList"][1]["amount"] = "90.00"

        response = http_client.post("/ledgerTransactionGroup/save.json", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"] == "Total debits (100.00) must equal total credits (90.00)"


class TestStatusGuards:

    def test_posted_entry_cannot_be_deleted(self, api, store):
        builder = JournalEntryBuilder(entry_date=date(2026, 1, 10), description="Owner contribution")
        builder.set_line_account(0, "acc-cash")
        builder.set_line_debit(0, "100")
        builder.set_line_account(1, "acc-equity")
        builder.set_line_credit(1, "100")
        group = builder.submit(api, post=True)

        with pytest.raises(BackendRejectedError) as exc_info:
            api.delete_transaction_group(group.id)

        assert exc_info.value.message == "Journal entry in status POSTED cannot be deleted"
        assert group.id in store.groups

    def test_account_with_transactions_cannot_be_deleted(self, api, http_client, store):
        http_client.post("/ledgerTransactionGroup/save.json", json=draft_payload(store))

        with pytest.raises(BackendRejectedError):
            api.delete_ledger_account("acc-equity")

        api.delete_ledger_account("acc-rent")
        assert "acc-rent" not in store.accounts

    def test_unknown_record_is_not_found(self, api):
        with pytest.raises(BackendRejectedError) as exc_info:
            api.get_voucher("vch-404")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Voucher vch-404 not found"

    def test_requests_are_logged(self, api, store):
        api.get_trial_balance()

        assert store.request_log == [("GET", "/rest/ledgerAccount/trialBalance.json")]
