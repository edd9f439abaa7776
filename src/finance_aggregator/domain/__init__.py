"""Domain layer for finance_aggregator application."""

# Services are resolved lazily: the utils and providers packages import
# domain.errors, and the services import them back.
_SERVICES = {
    "AccountService": "finance_aggregator.domain.account",
    "CategoryService": "finance_aggregator.domain.category",
    "StatsService": "finance_aggregator.domain.stats",
    "SyncService": "finance_aggregator.domain.sync",
    "TransactionService": "finance_aggregator.domain.transaction",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
