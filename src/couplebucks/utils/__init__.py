"""Utility functions for couplebucks."""

from couplebucks.utils.date_parser import parse_date, parse_month
from couplebucks.utils.amount_parser import parse_amount, to_cents

__all__ = ["parse_date", "parse_month", "parse_amount", "to_cents"]
