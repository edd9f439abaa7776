"""Tests for the Plaid HTTP client."""

import json
import pytest
import httpx
from datetime import date

from finance_aggregator.domain.entities import Credential, Provider
from finance_aggregator.domain.errors import ProviderError
from finance_aggregator.domain.sync import SyncService, SyncState
from finance_aggregator.providers.plaid_client import PlaidClient, resolve_environment


def make_client(handler, **kwargs):
    return PlaidClient(
        client_id="client-123",
        secret="secret-456",
        environment=kwargs.pop("environment", "sandbox"),
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        timeout=5,
    )


@pytest.fixture
def credential():
    return Credential(provider=Provider.PLAID, secret="access-sandbox-abc")


def test_resolve_environment():
    assert resolve_environment("sandbox") == "https://sandbox.plaid.com"
    assert resolve_environment(" Production ") == "https://production.plaid.com"
    with pytest.raises(ProviderError):
        resolve_environment("staging")


def test_fetch_accounts(credential, plaid_payloads):
    """Item, institution and accounts are fetched in turn with client credentials."""
    paths = []

    def handler(request):
        body = json.loads(request.content)
        assert body["client_id"] == "client-123"
        assert body["secret"] == "secret-456"
        paths.append(request.url.path)
        if request.url.path == "/item/get":
            assert body["access_token"] == "access-sandbox-abc"
            return httpx.Response(200, json={"item": {"item_id": "item-1", "institution_id": "ins_109508"}})
        if request.url.path == "/institutions/get_by_id":
            assert body["institution_id"] == "ins_109508"
            return httpx.Response(200, json={"institution": plaid_payloads["institution"]})
        return httpx.Response(200, json={"accounts": plaid_payloads["accounts"]})

    feed = make_client(handler).fetch_accounts(credential)

    assert paths == ["/item/get", "/institutions/get_by_id", "/accounts/get"]
    assert [raw.account["account_id"] for raw in feed.accounts] == ["plaid-acc-1", "plaid-acc-2"]
    assert feed.accounts[0].institution["institution_id"] == "ins_109508"


def test_fetch_transactions_paginates(credential, plaid_payloads):
    """Pages are requested by offset until the total is reached."""
    offsets = []
    txns = plaid_payloads["transactions"]

    def handler(request):
        body = json.loads(request.content)
        assert body["start_date"] == "2024-01-01"
        assert body["end_date"] == "2024-03-31"
        offset = body["options"]["offset"]
        offsets.append(offset)
        return httpx.Response(200, json={"transactions": txns[offset:offset + 1], "total_transactions": len(txns)})

    feed = make_client(handler).fetch_transactions(credential, date(2024, 1, 1), date(2024, 3, 31))

    assert offsets == [0, 1]
    assert [raw.record["transaction_id"] for raw in feed.transactions] == ["plaid-txn-1", "plaid-txn-2"]
    assert feed.transactions[0].account_id == "plaid-acc-1"


def test_api_error(credential):
    """Plaid error bodies are surfaced in ProviderError."""

    def handler(request):
        return httpx.Response(
            400,
            json={"error_code": "ITEM_LOGIN_REQUIRED", "error_message": "the login details have changed"},
        )

    with pytest.raises(ProviderError) as exc_info:
        make_client(handler).fetch_accounts(credential)

    assert exc_info.value.status_code == 400
    assert "ITEM_LOGIN_REQUIRED" in str(exc_info.value)


def test_missing_credentials(credential, monkeypatch):
    monkeypatch.delenv("PLAID_CLIENT_ID", raising=False)
    monkeypatch.delenv("PLAID_SECRET", raising=False)
    client = PlaidClient(client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200))))
    with pytest.raises(ProviderError, match="not configured"):
        client.fetch_accounts(credential)


def test_exchange_public_token():
    def handler(request):
        assert json.loads(request.content)["public_token"] == "public-sandbox-1"
        return httpx.Response(200, json={"access_token": "access-1", "item_id": "item-1", "request_id": "r"})

    assert make_client(handler).exchange_public_token("public-sandbox-1") == {
        "access_token": "access-1",
        "item_id": "item-1",
    }


def test_response_missing_key(credential, plaid_payloads):
    """A 200 response without the expected key is a provider failure."""

    def handler(request):
        if request.url.path == "/item/get":
            return httpx.Response(200, json={"item": {"item_id": "item-1", "institution_id": "ins_109508"}})
        if request.url.path == "/institutions/get_by_id":
            return httpx.Response(200, json={"institution": plaid_payloads["institution"]})
        return httpx.Response(200, json={"error": "weird"})

    with pytest.raises(ProviderError, match="'accounts'"):
        make_client(handler).fetch_accounts(credential)


def test_missing_key_fails_account_sync(credential, temp_db):
    def handler(request):
        return httpx.Response(200, json={"error": "weird"})

    result = SyncService(temp_db, make_client(handler), Provider.PLAID).sync_accounts(credential)

    assert result.state == SyncState.FAILED
    assert len(result.errors) == 1
    assert result.errors[0]["context"]["provider"] == "plaid"


def test_create_link_token():
    def handler(request):
        body = json.loads(request.content)
        assert request.url.path == "/link/token/create"
        assert body["user"] == {"client_user_id": "alice"}
        assert body["products"] == ["transactions"]
        return httpx.Response(200, json={"link_token": "link-sandbox-1", "expiration": "2024-01-01T00:00:00Z"})

    assert make_client(handler).create_link_token("alice") == "link-sandbox-1"
