"""
Domain models for Bitso API payloads.

Each model is an immutable snapshot built once from a payload JSON object via
``from_json``. ``to_dict`` renders the mapped fields back into JSON-friendly
values (decimals as strings, datetimes as ISO 8601).
"""

import re
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class OrderSide(str, Enum):
    """Order side."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """Order type."""

    MARKET = "market"
    LIMIT = "limit"


class LedgerOperation(str, Enum):
    """Ledger filters accepted by /ledger/<operation>."""

    TRADES = "trades"
    FEES = "fees"
    FUNDINGS = "fundings"
    WITHDRAWALS = "withdrawals"


class CurrencyWithdrawal(str, Enum):
    """Crypto withdrawal kinds, each tagged with its endpoint path segment."""

    BITCOIN = "bitcoin_withdrawal"
    ETHER = "ether_withdrawal"

    @property
    def path_segment(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------

_OFFSET_WITHOUT_COLON = re.compile(r'([+-]\d{2})(\d{2})$')


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse Bitso's ISO 8601 timestamps ('2016-04-08T17:52:31.000+00:00', '...+0000', '...Z')."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    text = _OFFSET_WITHOUT_COLON.sub(r'\1:\2', text)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _decimal(data: Mapping[str, Any], key: str) -> Optional[Decimal]:
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Field '{key}' is not a number: {value!r}")


def _string(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return None if value is None else str(value)


def _integer(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None or value == "":
        return None
    return int(value)


def _details(data: Mapping[str, Any], key: str = 'details') -> Dict[str, Any]:
    # Some endpoints send details as an empty list instead of an object.
    value = data.get(key)
    return dict(value) if isinstance(value, dict) else {}


def _to_json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_to_json_value(v) for v in value]
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _to_json_value(v) for k, v in value.items()}
    return value


class _Model:
    """Shared to_dict for the payload dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: _to_json_value(getattr(self, f.name)) for f in fields(self)}


# ---------------------------------------------------------------------------
# Public market data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BookInfo(_Model):
    """Trading limits of an order book, from /available_books."""

    book: str
    minimum_amount: Optional[Decimal] = None
    maximum_amount: Optional[Decimal] = None
    minimum_price: Optional[Decimal] = None
    maximum_price: Optional[Decimal] = None
    minimum_value: Optional[Decimal] = None
    maximum_value: Optional[Decimal] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'BookInfo':
        return cls(
            book=data['book'],
            minimum_amount=_decimal(data, 'minimum_amount'),
            maximum_amount=_decimal(data, 'maximum_amount'),
            minimum_price=_decimal(data, 'minimum_price'),
            maximum_price=_decimal(data, 'maximum_price'),
            minimum_value=_decimal(data, 'minimum_value'),
            maximum_value=_decimal(data, 'maximum_value'),
        )


@dataclass(frozen=True)
class Ticker(_Model):
    """Trading statistics of a book over the last 24 hours."""

    book: str
    volume: Optional[Decimal] = None
    high: Optional[Decimal] = None
    last: Optional[Decimal] = None
    low: Optional[Decimal] = None
    vwap: Optional[Decimal] = None
    ask: Optional[Decimal] = None
    bid: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'Ticker':
        return cls(
            book=data['book'],
            volume=_decimal(data, 'volume'),
            high=_decimal(data, 'high'),
            last=_decimal(data, 'last'),
            low=_decimal(data, 'low'),
            vwap=_decimal(data, 'vwap'),
            ask=_decimal(data, 'ask'),
            bid=_decimal(data, 'bid'),
            created_at=parse_timestamp(data.get('created_at')),
        )

    @property
    def spread(self) -> Optional[Decimal]:
        if self.ask is None or self.bid is None:
            return None
        return self.ask - self.bid


@dataclass(frozen=True)
class PriceLevel(_Model):
    """One entry of an order book side."""

    book: Optional[str]
    price: Decimal
    amount: Decimal
    oid: Optional[str] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'PriceLevel':
        return cls(
            book=_string(data, 'book'),
            price=_decimal(data, 'price'),
            amount=_decimal(data, 'amount'),
            oid=_string(data, 'oid'),
        )


@dataclass(frozen=True)
class OrderBook(_Model):
    """Order book snapshot. Bids are sorted best first, as are asks."""

    asks: Tuple[PriceLevel, ...] = ()
    bids: Tuple[PriceLevel, ...] = ()
    updated_at: Optional[datetime] = None
    sequence: Optional[int] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'OrderBook':
        return cls(
            asks=tuple(PriceLevel.from_json(level) for level in data.get('asks', [])),
            bids=tuple(PriceLevel.from_json(level) for level in data.get('bids', [])),
            updated_at=parse_timestamp(data.get('updated_at')),
            sequence=_integer(data, 'sequence'),
        )

    @property
    def best_ask(self) -> Optional[PriceLevel]:
        return self.asks[0] if self.asks else None

    @property
    def best_bid(self) -> Optional[PriceLevel]:
        return self.bids[0] if self.bids else None


@dataclass(frozen=True)
class PublicTrade(_Model):
    """A trade from the public trade history of a book."""

    book: str
    tid: Optional[int]
    amount: Optional[Decimal]
    price: Optional[Decimal]
    maker_side: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'PublicTrade':
        return cls(
            book=data['book'],
            tid=_integer(data, 'tid'),
            amount=_decimal(data, 'amount'),
            price=_decimal(data, 'price'),
            maker_side=_string(data, 'maker_side'),
            created_at=parse_timestamp(data.get('created_at')),
        )


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AccountStatus(_Model):
    """Verification state and limits of the account."""

    client_id: Optional[str]
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: Optional[str] = None
    daily_limit: Optional[Decimal] = None
    monthly_limit: Optional[Decimal] = None
    daily_remaining: Optional[Decimal] = None
    monthly_remaining: Optional[Decimal] = None
    cellphone_number: Optional[str] = None
    cellphone_number_stored: Optional[str] = None
    email_stored: Optional[str] = None
    official_id: Optional[str] = None
    proof_of_residency: Optional[str] = None
    signed_contract: Optional[str] = None
    origin_of_funds: Optional[str] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'AccountStatus':
        return cls(
            client_id=_string(data, 'client_id'),
            first_name=_string(data, 'first_name'),
            last_name=_string(data, 'last_name'),
            status=_string(data, 'status'),
            daily_limit=_decimal(data, 'daily_limit'),
            monthly_limit=_decimal(data, 'monthly_limit'),
            daily_remaining=_decimal(data, 'daily_remaining'),
            monthly_remaining=_decimal(data, 'monthly_remaining'),
            cellphone_number=_string(data, 'cellphone_number'),
            cellphone_number_stored=_string(data, 'cellphone_number_stored'),
            email_stored=_string(data, 'email_stored'),
            official_id=_string(data, 'official_id'),
            proof_of_residency=_string(data, 'proof_of_residency'),
            signed_contract=_string(data, 'signed_contract'),
            origin_of_funds=_string(data, 'origin_of_funds'),
        )


@dataclass(frozen=True)
class Balance(_Model):
    """Balance of a single currency."""

    currency: str
    total: Decimal
    locked: Decimal
    available: Decimal

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'Balance':
        return cls(
            currency=data['currency'],
            total=_decimal(data, 'total'),
            locked=_decimal(data, 'locked'),
            available=_decimal(data, 'available'),
        )


@dataclass(frozen=True)
class AccountBalance(_Model):
    """All currency balances of the account."""

    balances: Tuple[Balance, ...] = ()

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'AccountBalance':
        return cls(balances=tuple(Balance.from_json(b) for b in data.get('balances', [])))

    def get(self, currency: str) -> Optional[Balance]:
        currency = currency.lower()
        for balance in self.balances:
            if balance.currency.lower() == currency:
                return balance
        return None

    @property
    def currencies(self) -> List[str]:
        return [b.currency for b in self.balances]


@dataclass(frozen=True)
class Fee(_Model):
    """Trading fee charged on a book."""

    book: str
    fee_decimal: Decimal
    fee_percent: Decimal

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'Fee':
        return cls(
            book=data['book'],
            fee_decimal=_decimal(data, 'fee_decimal'),
            fee_percent=_decimal(data, 'fee_percent'),
        )


@dataclass(frozen=True)
class FeeSchedule(_Model):
    """Trading fees per book plus flat withdrawal fees per currency."""

    fees: Tuple[Fee, ...] = ()
    withdrawal_fees: Dict[str, Decimal] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'FeeSchedule':
        withdrawal_fees = data.get('withdrawal_fees') or {}
        return cls(
            fees=tuple(Fee.from_json(f) for f in data.get('fees', [])),
            withdrawal_fees={currency: Decimal(str(amount)) for currency, amount in withdrawal_fees.items()},
        )

    def fee_for(self, book: str) -> Optional[Fee]:
        for fee in self.fees:
            if fee.book == book:
                return fee
        return None


# ---------------------------------------------------------------------------
# Ledger, fundings and withdrawals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BalanceUpdate(_Model):
    """Change applied to one currency by a ledger operation."""

    currency: str
    amount: Decimal

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'BalanceUpdate':
        return cls(currency=data['currency'], amount=_decimal(data, 'amount'))


@dataclass(frozen=True)
class LedgerEntry(_Model):
    """A single ledger operation (trade, fee, funding or withdrawal)."""

    eid: str
    operation: str
    created_at: Optional[datetime] = None
    balance_updates: Tuple[BalanceUpdate, ...] = ()
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'LedgerEntry':
        return cls(
            eid=data['eid'],
            operation=data['operation'],
            created_at=parse_timestamp(data.get('created_at')),
            balance_updates=tuple(BalanceUpdate.from_json(u) for u in data.get('balance_updates', [])),
            details=_details(data),
        )


@dataclass(frozen=True)
class Withdrawal(_Model):
    """A withdrawal from the account."""

    wid: str
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    currency: Optional[str] = None
    method: Optional[str] = None
    amount: Optional[Decimal] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'Withdrawal':
        return cls(
            wid=data['wid'],
            status=_string(data, 'status'),
            created_at=parse_timestamp(data.get('created_at')),
            currency=_string(data, 'currency'),
            method=_string(data, 'method'),
            amount=_decimal(data, 'amount'),
            details=_details(data),
        )


@dataclass(frozen=True)
class Funding(_Model):
    """A deposit into the account."""

    fid: str
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    currency: Optional[str] = None
    method: Optional[str] = None
    amount: Optional[Decimal] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'Funding':
        return cls(
            fid=data['fid'],
            status=_string(data, 'status'),
            created_at=parse_timestamp(data.get('created_at')),
            currency=_string(data, 'currency'),
            method=_string(data, 'method'),
            amount=_decimal(data, 'amount'),
            details=_details(data),
        )


@dataclass(frozen=True)
class FundingDestination(_Model):
    """Where to send funds to credit a currency to the account."""

    account_identifier_name: Optional[str]
    account_identifier: Optional[str]

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'FundingDestination':
        return cls(
            account_identifier_name=_string(data, 'account_identifier_name'),
            account_identifier=_string(data, 'account_identifier'),
        )


@dataclass(frozen=True)
class Transfer(_Model):
    """Status of a transfer."""

    transfer_id: str
    status: Optional[str] = None
    currency: Optional[str] = None
    amount: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'Transfer':
        return cls(
            transfer_id=str(data['id']),
            status=_string(data, 'status'),
            currency=_string(data, 'currency'),
            amount=_decimal(data, 'amount'),
            created_at=parse_timestamp(data.get('created_at')),
            details=_details(data, 'fields'),
        )


# ---------------------------------------------------------------------------
# Trading
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserTrade(_Model):
    """A fill of one of the account's orders."""

    book: str
    tid: Optional[int]
    oid: Optional[str]
    side: Optional[str]
    major: Optional[Decimal]
    minor: Optional[Decimal]
    price: Optional[Decimal]
    fees_amount: Optional[Decimal] = None
    fees_currency: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'UserTrade':
        return cls(
            book=data['book'],
            tid=_integer(data, 'tid'),
            oid=_string(data, 'oid'),
            side=_string(data, 'side'),
            major=_decimal(data, 'major'),
            minor=_decimal(data, 'minor'),
            price=_decimal(data, 'price'),
            fees_amount=_decimal(data, 'fees_amount'),
            fees_currency=_string(data, 'fees_currency'),
            created_at=parse_timestamp(data.get('created_at')),
        )


@dataclass(frozen=True)
class Order(_Model):
    """An order as reported by /open_orders or /orders."""

    oid: str
    book: str
    side: Optional[OrderSide]
    type: Optional[OrderType]
    status: Optional[str] = None
    price: Optional[Decimal] = None
    original_amount: Optional[Decimal] = None
    unfilled_amount: Optional[Decimal] = None
    original_value: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> 'Order':
        side = data.get('side')
        order_type = data.get('type')
        return cls(
            oid=data['oid'],
            book=data['book'],
            side=OrderSide(side) if side else None,
            type=OrderType(order_type) if order_type else None,
            status=_string(data, 'status'),
            price=_decimal(data, 'price'),
            original_amount=_decimal(data, 'original_amount'),
            unfilled_amount=_decimal(data, 'unfilled_amount'),
            original_value=_decimal(data, 'original_value'),
            created_at=parse_timestamp(data.get('created_at')),
            updated_at=parse_timestamp(data.get('updated_at')),
        )

    @property
    def filled_amount(self) -> Optional[Decimal]:
        if self.original_amount is None or self.unfilled_amount is None:
            return None
        return self.original_amount - self.unfilled_amount
