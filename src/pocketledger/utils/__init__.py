"""Utility functions for pocketledger."""

from pocketledger.utils.date_parser import parse_date, get_date_range, month_key, previous_month_key
from pocketledger.utils.amount_parser import parse_amount

__all__ = ["parse_date", "get_date_range", "month_key", "previous_month_key", "parse_amount"]
