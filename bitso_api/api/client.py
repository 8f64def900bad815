"""
Bitso API client.

This module provides the client facade for the Bitso REST API: one method per
endpoint, each building the request path, signing private requests, sending
them through the HTTP transport and mapping the unwrapped payload into typed
models.
"""

import json
import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, Union

from ..config.manager import ClientConfig
from ..data.models import (
    AccountBalance,
    AccountStatus,
    BookInfo,
    CurrencyWithdrawal,
    FeeSchedule,
    Funding,
    FundingDestination,
    LedgerEntry,
    LedgerOperation,
    Order,
    OrderBook,
    OrderSide,
    OrderType,
    PublicTrade,
    Ticker,
    Transfer,
    UserTrade,
    Withdrawal,
)
from ..logging.utils import log_api_call
from .auth import Credentials, Signer
from .envelope import payload_array, payload_object
from .errors import InputContractError, MissingPayloadError, ParseError
from .query import append_query, format_amount, join_parameters
from .transport import HttpTransport


logger = logging.getLogger(__name__)

API_PREFIX = "/api/v3"

Amount = Union[Decimal, int, float, str]
Identifiers = Union[str, Sequence[str]]


def _text_value(value: Any, name: str) -> str:
    if isinstance(value, Enum):
        value = value.value
    if value is None or not str(value).strip():
        raise InputContractError(f"{name} is required")
    return str(value).strip()


def _identifier_list(ids: Identifiers, name: str) -> str:
    if isinstance(ids, str):
        ids = [ids]
    joined = join_parameters("-", ids)
    if joined is None:
        raise InputContractError(f"{name} must contain at least one non-empty id")
    return joined


def _mapped(response_text: str, mapper: Callable[[Any], Any], payload: Any) -> Any:
    """Apply mapper to a payload, reporting a payload of the wrong shape as ParseError."""
    try:
        return mapper(payload)
    except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as e:
        logger.error(f"Unexpected payload: {e!r}")
        raise ParseError(f"Unexpected payload: {e!r}", body=response_text) from e


def _model(response_text: str, model: Type[Any]) -> Any:
    return _mapped(response_text, model.from_json, payload_object(response_text))


def _models(response_text: str, model: Type[Any]) -> List[Any]:
    return _mapped(response_text, lambda items: [model.from_json(item) for item in items],
                   payload_array(response_text))


class BitsoAPIClient:
    """
    Bitso API client.

    Public market data endpoints work without credentials; account, trading,
    funding and withdrawal endpoints need an API key and secret. Each call is
    a single blocking round trip with no retries; failures surface as
    subclasses of BitsoError.
    """

    def __init__(self, api_key: Optional[str] = None, api_secret: Optional[str] = None,
                 production: bool = True, config: Optional[ClientConfig] = None,
                 transport: Optional[HttpTransport] = None):
        """
        Initialize the client.

        Args:
            api_key: Bitso API key (public part)
            api_secret: Bitso API secret
            production: Use the production origin, otherwise the development one
            config: Full configuration; when given, the other settings are ignored
            transport: Custom transport, mainly for tests
        """
        if config is None:
            config = ClientConfig(api_key=api_key, api_secret=api_secret, production=production)

        self._signer: Optional[Signer] = None
        if config.has_credentials:
            credentials = Credentials(config.api_key, config.api_secret)
            if not credentials.validate():
                raise InputContractError("API key must not be blank")
            self._signer = Signer(credentials)

        self.config = config
        self.base_url = config.base_url
        self.transport = transport or HttpTransport(
            timeout=config.timeout,
            min_request_interval=config.min_request_interval
        )

    @classmethod
    def from_config(cls, config: ClientConfig, transport: Optional[HttpTransport] = None) -> 'BitsoAPIClient':
        return cls(config=config, transport=transport)

    @classmethod
    def from_env(cls, transport: Optional[HttpTransport] = None) -> 'BitsoAPIClient':
        """Build a client from BITSO_* environment variables."""
        return cls(config=ClientConfig.from_env(), transport=transport)

    @property
    def authenticated(self) -> bool:
        return self._signer is not None

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> 'BitsoAPIClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _public_get(self, request_path: str, timeout: Optional[float] = None) -> str:
        """Send an unauthenticated GET request and return the body."""
        logger.debug(f"GET {request_path}")
        headers = {'User-Agent': self.config.user_agent}
        return self.transport.request('GET', self.base_url + request_path, headers=headers, timeout=timeout)

    def _private_request(self, method: str, request_path: str,
                         parameters: Optional[Dict[str, Any]] = None,
                         timeout: Optional[float] = None) -> str:
        """
        Send a signed request and return the body.

        Args:
            method: HTTP method
            request_path: Path with query string, relative to the base URL
            parameters: JSON body fields
            timeout: Per-call timeout in seconds

        Returns:
            str: Response body text
        """
        signer = self._require_signer()

        body = None
        if parameters is not None:
            body = json.dumps(parameters, separators=(',', ':'))

        headers = {
            'Authorization': signer.sign(method, request_path, body),
            'User-Agent': self.config.user_agent
        }
        if body is not None:
            headers['Content-Type'] = 'application/json'

        logger.debug(f"{method} {request_path}")
        return self.transport.request(method, self.base_url + request_path,
                                      headers=headers, body=body, timeout=timeout)

    def _require_signer(self) -> Signer:
        if self._signer is None:
            raise InputContractError("API credentials not set")
        return self._signer

    @staticmethod
    def _ids_or_query(request_path: str, ids: Optional[Identifiers],
                      query_parameters: Sequence[str], name: str) -> str:
        """Append either an id list path segment or a query string, never both."""
        if ids is not None and len(query_parameters) > 0:
            raise InputContractError(f"Pass either {name} or query parameters, not both")

        if ids is not None:
            request_path += "/" + _identifier_list(ids, name)

        return append_query(request_path, join_parameters("&", query_parameters))

    # ------------------------------------------------------------------
    # Public endpoints
    # ------------------------------------------------------------------

    @log_api_call("available_books")
    def get_available_books(self, *, timeout: Optional[float] = None) -> List[BookInfo]:
        """List the books available for trading with their limits."""
        response = self._public_get(f"{API_PREFIX}/available_books", timeout)
        return _models(response, BookInfo)

    @log_api_call("ticker")
    def get_ticker(self, book: Optional[Union[str, Enum]] = None, *,
                   timeout: Optional[float] = None) -> Union[List[Ticker], Ticker]:
        """
        Get ticker snapshots.

        Args:
            book: Book to query; all books when omitted

        Returns:
            A single Ticker when book is given, otherwise a list of tickers
        """
        if book is None:
            response = self._public_get(f"{API_PREFIX}/ticker", timeout)
            return _models(response, Ticker)

        request_path = f"{API_PREFIX}/ticker?book={_text_value(book, 'book')}"
        return _model(self._public_get(request_path, timeout), Ticker)

    @log_api_call("order_book")
    def get_order_book(self, book: Union[str, Enum], aggregate: Optional[bool] = None, *,
                       timeout: Optional[float] = None) -> OrderBook:
        """
        Get the order book of a book.

        Args:
            book: Book to query, e.g. 'btc_mxn'
            aggregate: Aggregate orders by price; server default when None
        """
        request_path = f"{API_PREFIX}/order_book?book={_text_value(book, 'book')}"
        if aggregate is not None:
            request_path += "&aggregate=" + ("true" if aggregate else "false")

        return _model(self._public_get(request_path, timeout), OrderBook)

    @log_api_call("trades")
    def get_trades(self, book: Union[str, Enum], *query_parameters: str,
                   timeout: Optional[float] = None) -> List[PublicTrade]:
        """
        Get the public trade history of a book.

        Args:
            book: Book to query
            *query_parameters: Extra 'key=value' filters such as 'limit=50'
        """
        request_path = f"{API_PREFIX}/trades?book={_text_value(book, 'book')}"
        request_path = append_query(request_path, join_parameters("&", query_parameters))

        response = self._public_get(request_path, timeout)
        return _models(response, PublicTrade)

    @log_api_call("transfer")
    def get_transfer_status(self, transfer_id: str, *, timeout: Optional[float] = None) -> Transfer:
        """Get the status of a transfer by id."""
        request_path = f"{API_PREFIX}/transfer/{_text_value(transfer_id, 'transfer_id')}"
        return _model(self._public_get(request_path, timeout), Transfer)

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    @log_api_call("account_status")
    def get_account_status(self, *, timeout: Optional[float] = None) -> AccountStatus:
        response = self._private_request('GET', f"{API_PREFIX}/account_status", timeout=timeout)
        return _model(response, AccountStatus)

    @log_api_call("balance")
    def get_account_balance(self, *, timeout: Optional[float] = None) -> AccountBalance:
        response = self._private_request('GET', f"{API_PREFIX}/balance", timeout=timeout)
        return _model(response, AccountBalance)

    @log_api_call("fees")
    def get_fees(self, *, timeout: Optional[float] = None) -> FeeSchedule:
        response = self._private_request('GET', f"{API_PREFIX}/fees", timeout=timeout)
        return _model(response, FeeSchedule)

    @log_api_call("ledger")
    def get_ledger(self, operation: Optional[Union[str, LedgerOperation]] = None,
                   *query_parameters: str, timeout: Optional[float] = None) -> List[LedgerEntry]:
        """
        Get ledger entries, optionally restricted to one kind of operation.

        Args:
            operation: 'trades', 'fees', 'fundings' or 'withdrawals'; all when None
            *query_parameters: Extra 'key=value' filters such as 'limit=25'
        """
        request_path = f"{API_PREFIX}/ledger"
        if operation is not None:
            segment = str(getattr(operation, 'value', operation)).strip()
            if segment:
                request_path += "/" + segment
        request_path = append_query(request_path, join_parameters("&", query_parameters))

        response = self._private_request('GET', request_path, timeout=timeout)
        return _models(response, LedgerEntry)

    # ------------------------------------------------------------------
    # Fundings and withdrawals history
    # ------------------------------------------------------------------

    @log_api_call("withdrawals")
    def get_withdrawals(self, withdrawal_ids: Optional[Identifiers] = None, *query_parameters: str,
                        timeout: Optional[float] = None) -> List[Withdrawal]:
        """
        Get withdrawals either by id or with free-form filters.

        Args:
            withdrawal_ids: Ids to look up; mutually exclusive with query_parameters
            *query_parameters: 'key=value' filters such as 'limit=10'
        """
        request_path = self._ids_or_query(f"{API_PREFIX}/withdrawals", withdrawal_ids,
                                          query_parameters, 'withdrawal_ids')
        response = self._private_request('GET', request_path, timeout=timeout)
        return _models(response, Withdrawal)

    @log_api_call("fundings")
    def get_fundings(self, funding_ids: Optional[Identifiers] = None, *query_parameters: str,
                     timeout: Optional[float] = None) -> List[Funding]:
        """
        Get fundings either by id or with free-form filters.

        Args:
            funding_ids: Ids to look up; mutually exclusive with query_parameters
            *query_parameters: 'key=value' filters such as 'limit=10'
        """
        request_path = self._ids_or_query(f"{API_PREFIX}/fundings", funding_ids,
                                          query_parameters, 'funding_ids')
        response = self._private_request('GET', request_path, timeout=timeout)
        return _models(response, Funding)

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    @log_api_call("user_trades")
    def get_user_trades(self, trade_ids: Optional[Identifiers] = None, *query_parameters: str,
                        timeout: Optional[float] = None) -> List[UserTrade]:
        """
        Get the account's trades either by id or with free-form filters.

        Args:
            trade_ids: Trade ids to look up; mutually exclusive with query_parameters
            *query_parameters: 'key=value' filters such as 'book=btc_mxn'
        """
        request_path = self._ids_or_query(f"{API_PREFIX}/user_trades", trade_ids,
                                          query_parameters, 'trade_ids')
        response = self._private_request('GET', request_path, timeout=timeout)
        return _models(response, UserTrade)

    @log_api_call("order_trades")
    def get_order_trades(self, order_id: str, *, timeout: Optional[float] = None) -> List[UserTrade]:
        """Get the trades that filled one order."""
        request_path = f"{API_PREFIX}/order_trades/{_text_value(order_id, 'order_id')}"
        response = self._private_request('GET', request_path, timeout=timeout)
        return _models(response, UserTrade)

    @log_api_call("open_orders")
    def get_open_orders(self, book: Union[str, Enum], *query_parameters: str,
                        timeout: Optional[float] = None) -> List[Order]:
        """Get the account's open orders on a book."""
        request_path = f"{API_PREFIX}/open_orders?book={_text_value(book, 'book')}"
        request_path = append_query(request_path, join_parameters("&", query_parameters))

        response = self._private_request('GET', request_path, timeout=timeout)
        return _models(response, Order)

    @log_api_call("lookup_orders")
    def lookup_orders(self, *order_ids: str, timeout: Optional[float] = None) -> List[Order]:
        """Get orders by id."""
        request_path = f"{API_PREFIX}/orders/" + _identifier_list(order_ids, 'order_ids')
        response = self._private_request('GET', request_path, timeout=timeout)
        return _models(response, Order)

    @log_api_call("place_order")
    def place_order(self, book: Union[str, Enum], side: Union[str, OrderSide],
                    order_type: Union[str, OrderType], major: Optional[Amount] = None,
                    minor: Optional[Amount] = None, price: Optional[Amount] = None, *,
                    timeout: Optional[float] = None) -> str:
        """
        Place an order.

        The size is given in exactly one of major (base currency) or minor
        (quote currency). Market orders take no price; limit orders need one.

        Args:
            book: Book to trade on
            side: 'buy' or 'sell'
            order_type: 'market' or 'limit'
            major: Amount of the major currency
            minor: Amount of the minor currency
            price: Limit price

        Returns:
            str: Id of the new order
        """
        if (major is None) == (minor is None):
            raise InputContractError("An order must be specified in major or minor, never both or neither")

        try:
            side = OrderSide(getattr(side, 'value', side))
            order_type = OrderType(getattr(order_type, 'value', order_type))
        except ValueError as e:
            raise InputContractError(str(e)) from e

        if order_type is OrderType.MARKET and price is not None:
            raise InputContractError("A market order must not specify a price")
        if order_type is OrderType.LIMIT and price is None:
            raise InputContractError("A limit order requires a price")

        parameters = {
            'book': _text_value(book, 'book').lower(),
            'side': side.value,
            'type': order_type.value
        }
        if price is not None:
            parameters['price'] = format_amount(price)
        if major is not None:
            parameters['major'] = format_amount(major)
        else:
            parameters['minor'] = format_amount(minor)

        response = self._private_request('POST', f"{API_PREFIX}/orders", parameters, timeout=timeout)
        payload = payload_object(response)
        if 'oid' not in payload:
            raise MissingPayloadError("Order placement response does not contain an order id")
        return str(payload['oid'])

    @log_api_call("cancel_order")
    def cancel_order(self, *order_ids: str, timeout: Optional[float] = None) -> List[str]:
        """
        Cancel orders by id. Pass 'all' to cancel every open order.

        Returns:
            List[str]: Ids of the cancelled orders
        """
        request_path = f"{API_PREFIX}/orders/" + _identifier_list(order_ids, 'order_ids')
        response = self._private_request('DELETE', request_path, timeout=timeout)
        return [str(oid) for oid in payload_array(response)]

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    @log_api_call("funding_destination")
    def get_funding_destination(self, currency: str, *,
                                timeout: Optional[float] = None) -> FundingDestination:
        """Get the address or account to send a currency to for funding."""
        request_path = f"{API_PREFIX}/funding_destination?fund_currency={_text_value(currency, 'currency').lower()}"
        response = self._private_request('GET', request_path, timeout=timeout)
        return _model(response, FundingDestination)

    @log_api_call("deposit_address")
    def get_deposit_address(self, currency: str = "btc", *, timeout: Optional[float] = None) -> str:
        """Get the deposit address for a currency."""
        destination = self.get_funding_destination(currency, timeout=timeout)
        if not destination.account_identifier:
            raise MissingPayloadError(f"No deposit address returned for {currency}")
        return destination.account_identifier

    # ------------------------------------------------------------------
    # Withdrawals
    # ------------------------------------------------------------------

    @log_api_call("currency_withdrawal")
    def currency_withdrawal(self, withdrawal: CurrencyWithdrawal, amount: Amount, address: str, *,
                            timeout: Optional[float] = None) -> Withdrawal:
        """
        Withdraw crypto to an external address.

        Args:
            withdrawal: Kind of withdrawal, which selects the endpoint
            amount: Amount to withdraw
            address: Destination address
        """
        if not isinstance(withdrawal, CurrencyWithdrawal):
            raise InputContractError(f"Unsupported withdrawal kind: {withdrawal!r}")

        parameters = {
            'amount': format_amount(amount),
            'address': _text_value(address, 'address')
        }
        request_path = f"{API_PREFIX}/{withdrawal.path_segment}"
        response = self._private_request('POST', request_path, parameters, timeout=timeout)
        return _model(response, Withdrawal)

    def bitcoin_withdrawal(self, amount: Amount, address: str, *,
                           timeout: Optional[float] = None) -> Withdrawal:
        return self.currency_withdrawal(CurrencyWithdrawal.BITCOIN, amount, address, timeout=timeout)

    def ether_withdrawal(self, amount: Amount, address: str, *,
                         timeout: Optional[float] = None) -> Withdrawal:
        return self.currency_withdrawal(CurrencyWithdrawal.ETHER, amount, address, timeout=timeout)

    @log_api_call("spei_withdrawal")
    def spei_withdrawal(self, amount: Amount, recipient_given_names: str, recipient_family_names: str,
                        clabe: str, notes_reference: str = "", numeric_reference: str = "", *,
                        timeout: Optional[float] = None) -> Withdrawal:
        """
        Withdraw MXN by SPEI bank transfer.

        Args:
            amount: Amount in MXN
            recipient_given_names: Recipient first names
            recipient_family_names: Recipient last names
            clabe: 18-digit CLABE of the destination account
            notes_reference: Free-text reference shown to the recipient
            numeric_reference: Numeric reference
        """
        parameters = {
            'amount': format_amount(amount),
            'recipient_given_names': _text_value(recipient_given_names, 'recipient_given_names'),
            'recipient_family_names': _text_value(recipient_family_names, 'recipient_family_names'),
            'clabe': _text_value(clabe, 'clabe'),
            'notes_ref': notes_reference,
            'numeric_ref': numeric_reference
        }
        response = self._private_request('POST', f"{API_PREFIX}/spei_withdrawal", parameters, timeout=timeout)
        return _model(response, Withdrawal)

    @log_api_call("mx_bank_codes")
    def get_bank_codes(self, *, timeout: Optional[float] = None) -> Dict[str, str]:
        """Get the directory of Mexican bank codes, mapping code to bank name."""
        response = self._private_request('GET', f"{API_PREFIX}/mx_bank_codes", timeout=timeout)
        return _mapped(response, lambda banks: {str(bank['code']): bank['name'] for bank in banks},
                       payload_array(response))

    @log_api_call("debit_card_withdrawal")
    def debit_card_withdrawal(self, amount: Amount, recipient_given_names: str,
                              recipient_family_names: str, card_number: str, bank_code: str, *,
                              timeout: Optional[float] = None) -> Withdrawal:
        """Withdraw MXN to a debit card."""
        parameters = {
            'amount': format_amount(amount),
            'recipient_given_names': _text_value(recipient_given_names, 'recipient_given_names'),
            'recipient_family_names': _text_value(recipient_family_names, 'recipient_family_names'),
            'card_number': _text_value(card_number, 'card_number'),
            'bank_code': _text_value(bank_code, 'bank_code')
        }
        response = self._private_request('POST', f"{API_PREFIX}/debit_card_withdrawal",
                                         parameters, timeout=timeout)
        return _model(response, Withdrawal)

    @log_api_call("phone_withdrawal")
    def phone_withdrawal(self, amount: Amount, recipient_given_names: str,
                         recipient_family_names: str, phone_number: str, bank_code: str, *,
                         timeout: Optional[float] = None) -> Withdrawal:
        """Withdraw MXN to an account linked to a phone number."""
        parameters = {
            'amount': format_amount(amount),
            'recipient_given_names': _text_value(recipient_given_names, 'recipient_given_names'),
            'recipient_family_names': _text_value(recipient_family_names, 'recipient_family_names'),
            'phone_number': _text_value(phone_number, 'phone_number'),
            'bank_code': _text_value(bank_code, 'bank_code')
        }
        response = self._private_request('POST', f"{API_PREFIX}/phone_withdrawal",
                                         parameters, timeout=timeout)
        return _model(response, Withdrawal)
