"""Utility functions for finance_aggregator."""

from finance_aggregator.utils.amount_parser import parse_amount
from finance_aggregator.utils.date_parser import (
    calculate_date_range,
    epoch_to_date,
    month_epoch_bounds,
    parse_date,
    parse_iso_date,
)

__all__ = [
    "parse_amount",
    "calculate_date_range",
    "epoch_to_date",
    "month_epoch_bounds",
    "parse_date",
    "parse_iso_date",
]
