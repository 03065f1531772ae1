"""Utility functions for statementflow."""

from statementflow.utils.date_parser import parse_statement_date, parse_ofx_date, shift_months
from statementflow.utils.amount_parser import parse_amount

__all__ = ["parse_statement_date", "parse_ofx_date", "shift_months", "parse_amount"]
