"""Plaid REST API client."""

import os
from datetime import date
from typing import Any, Optional

import httpx

from finance_aggregator.domain.entities import Credential
from finance_aggregator.domain.errors import ProviderError
from finance_aggregator.logger import get_logger
from finance_aggregator.providers.base import AccountFeed, RawAccount, RawTransaction, TransactionFeed

logger = get_logger(__name__)

ENVIRONMENTS = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}

DEFAULT_TIMEOUT_SECONDS = 30.0
TRANSACTIONS_PAGE_SIZE = 500
DEFAULT_COUNTRY_CODES = ("US", "CA")


def resolve_environment(environment: str) -> str:
    """Return the API base URL for an environment name."""
    try:
        return ENVIRONMENTS[environment.strip().lower()]
    except KeyError:
        raise ProviderError(
            f"Unknown Plaid environment '{environment}'. Valid: {', '.join(ENVIRONMENTS)}",
            provider="plaid",
        ) from None


class PlaidClient:
    """Calls Plaid endpoints with client id/secret auth.

    The credential secret is the item's access token.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        secret: Optional[str] = None,
        environment: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ):
        self.client_id = client_id or os.getenv("PLAID_CLIENT_ID")
        self.secret = secret or os.getenv("PLAID_SECRET")
        self.base_url = resolve_environment(environment or os.getenv("PLAID_ENV", "sandbox"))
        self._client = client
        if timeout is None:
            timeout = float(os.getenv("PLAID_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))
        self.timeout = timeout

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client()
        return self._client

    def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            self._client.close()

    def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        if not self.client_id or not self.secret:
            raise ProviderError("Plaid client id and secret are not configured", provider="plaid")
        payload = {"client_id": self.client_id, "secret": self.secret, **body}
        try:
            response = self._get_client().post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise ProviderError(f"Plaid {path} failed: {e}", provider="plaid") from e

        if response.status_code >= 400:
            message = f"HTTP {response.status_code}"
            try:
                error = response.json()
                message = f"{error.get('error_code', message)}: {error.get('error_message', '')}".rstrip(": ")
            except ValueError:
                pass
            raise ProviderError(
                f"Plaid {path} failed: {message}", provider="plaid", status_code=response.status_code
            )
        try:
            result = response.json()
        except ValueError as e:
            raise ProviderError(f"Plaid {path} returned invalid JSON: {e}", provider="plaid") from e
        if not isinstance(result, dict):
            raise ProviderError(f"Plaid {path} returned a non-object response", provider="plaid")
        return result

    def _post_for(self, path: str, body: dict[str, Any], key: str) -> Any:
        """POST and return one top-level key of the response."""
        result = self._post(path, body)
        if key not in result:
            raise ProviderError(f"Plaid {path} response has no '{key}'", provider="plaid")
        return result[key]

    def create_link_token(self, user_id: str, client_name: str = "Finance Aggregator") -> str:
        """Create a link token for initialising Plaid Link in a browser."""
        return self._post_for(
            "/link/token/create",
            {
                "user": {"client_user_id": user_id},
                "client_name": client_name,
                "products": ["transactions"],
                "country_codes": list(DEFAULT_COUNTRY_CODES),
                "language": "en",
            },
            "link_token",
        )

    def exchange_public_token(self, public_token: str) -> dict[str, str]:
        """Exchange a Link public token for ``access_token`` and ``item_id``."""
        result = self._post("/item/public_token/exchange", {"public_token": public_token})
        if "access_token" not in result or "item_id" not in result:
            raise ProviderError("Plaid /item/public_token/exchange response is incomplete", provider="plaid")
        return {"access_token": result["access_token"], "item_id": result["item_id"]}

    def fetch_item(self, access_token: str) -> dict[str, Any]:
        return self._post_for("/item/get", {"access_token": access_token}, "item")

    def fetch_institution(self, institution_id: str) -> dict[str, Any]:
        return self._post_for(
            "/institutions/get_by_id",
            {"institution_id": institution_id, "country_codes": list(DEFAULT_COUNTRY_CODES)},
            "institution",
        )

    def fetch_accounts(self, credential: Credential) -> AccountFeed:
        item = self.fetch_item(credential.secret)
        institution_id = item.get("institution_id")
        if not institution_id:
            raise ProviderError("Plaid item has no institution_id", provider="plaid")
        institution = self.fetch_institution(institution_id)
        accounts = self._post_for("/accounts/get", {"access_token": credential.secret}, "accounts")
        return AccountFeed(accounts=[RawAccount(institution=institution, account=acc) for acc in accounts])

    def fetch_transactions(self, credential: Credential, start_date: date, end_date: date) -> TransactionFeed:
        """Fetch all transactions in the window, following offset pagination."""
        feed = TransactionFeed()
        offset = 0
        while True:
            result = self._post(
                "/transactions/get",
                {
                    "access_token": credential.secret,
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "options": {"count": TRANSACTIONS_PAGE_SIZE, "offset": offset},
                },
            )
            page = result.get("transactions", [])
            for txn in page:
                feed.transactions.append(RawTransaction(account_id=txn.get("account_id"), record=txn))
            offset += len(page)
            total = result.get("total_transactions", offset)
            if not page or offset >= total:
                break
        logger.debug("Fetched %d Plaid transactions", len(feed.transactions))
        return feed
