"""Helpers for building request paths and query strings."""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from .errors import InputContractError


def join_parameters(separator: str, parameters: Optional[Iterable[str]]) -> Optional[str]:
    """
    Join parameters with a separator, skipping blank entries.

    Each entry is stripped; empty ones are dropped so the result never holds
    doubled or dangling separators.

    >>> join_parameters("&", ["a=1", "", "b=2"])
    'a=1&b=2'

    Returns:
        The joined string, or None when nothing is left to join
    """
    if parameters is None:
        return None

    cleaned = [str(p).strip() for p in parameters if p is not None]
    cleaned = [p for p in cleaned if p]
    if not cleaned:
        return None
    return separator.join(cleaned)


def append_query(path: str, query: Optional[str]) -> str:
    """Append a query string to a path, using '&' if it already has one."""
    if not query:
        return path
    return f"{path}{'&' if '?' in path else '?'}{query}"


def format_amount(value: Union[Decimal, int, float, str]) -> str:
    """Render an amount for the wire without binary float noise."""
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InputContractError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise InputContractError(f"Invalid amount: {value!r}")
    return str(amount)
