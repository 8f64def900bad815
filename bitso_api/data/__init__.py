"""Typed domain models for Bitso API payloads."""

from .models import (
    AccountBalance,
    AccountStatus,
    Balance,
    BalanceUpdate,
    BookInfo,
    CurrencyWithdrawal,
    Fee,
    FeeSchedule,
    Funding,
    FundingDestination,
    LedgerEntry,
    LedgerOperation,
    Order,
    OrderBook,
    OrderSide,
    OrderType,
    PriceLevel,
    PublicTrade,
    Ticker,
    Transfer,
    UserTrade,
    Withdrawal,
    parse_timestamp,
)

__all__ = [
    'AccountBalance',
    'AccountStatus',
    'Balance',
    'BalanceUpdate',
    'BookInfo',
    'CurrencyWithdrawal',
    'Fee',
    'FeeSchedule',
    'Funding',
    'FundingDestination',
    'LedgerEntry',
    'LedgerOperation',
    'Order',
    'OrderBook',
    'OrderSide',
    'OrderType',
    'PriceLevel',
    'PublicTrade',
    'Ticker',
    'Transfer',
    'UserTrade',
    'Withdrawal',
    'parse_timestamp',
]
