"""Provider adapters and API clients."""

from finance_aggregator.domain.entities import Provider
from finance_aggregator.providers.base import (
    AccountFeed,
    ProviderAdapter,
    ProviderClient,
    RawAccount,
    RawTransaction,
    TransactionFeed,
)
from finance_aggregator.providers.plaid import PlaidAdapter
from finance_aggregator.providers.simplefin import SimpleFINAdapter

_ADAPTERS = {
    Provider.SIMPLEFIN: SimpleFINAdapter,
    Provider.PLAID: PlaidAdapter,
}


def get_adapter(provider: Provider | str) -> ProviderAdapter:
    """Return the adapter for a provider."""
    try:
        return _ADAPTERS[Provider(provider)]()
    except ValueError:
        raise ValueError(f"Unknown provider '{provider}'. Supported: {', '.join(p.value for p in Provider)}") from None


__all__ = [
    "AccountFeed",
    "PlaidAdapter",
    "ProviderAdapter",
    "ProviderClient",
    "RawAccount",
    "RawTransaction",
    "SimpleFINAdapter",
    "TransactionFeed",
    "get_adapter",
]
