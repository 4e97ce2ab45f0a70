"""
Binance Spot REST Client

Implements ExchangeGateway and PortfolioGateway over the Binance Spot API:
- HMAC-SHA256 signed requests (timestamp + recvWindow + signature)
- Response normalization to OrderResult / AssetBalance
- Provider errors mapped to ExchangeRejectedError / ExchangeUnavailableError

Endpoints used:
  POST   /api/v3/order
  DELETE /api/v3/order
  GET    /api/v3/order
  GET    /api/v3/account
"""

import hashlib
import hmac
import logging
import time
from decimal import Decimal
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from trading_bot.exceptions import ExchangeRejectedError, ExchangeUnavailableError
from trading_bot.exchange_clients.base import (
    AssetBalance,
    ExchangeGateway,
    OrderResult,
    OrderSide,
    OrderType,
    PortfolioGateway,
)
from trading_bot.precision import to_decimal

logger = logging.getLogger(__name__)

# Binance answers 418/429 when the IP is rate-limited or banned
_RATE_LIMIT_STATUSES = (418, 429)


def format_decimal(value: Decimal) -> str:
    """Plain (non-scientific) decimal string without trailing zeros."""
    return format(value.normalize(), "f")


def _to_order_result(data: Dict[str, Any]) -> OrderResult:
    price = data.get("price")
    executed = data.get("executedQty")
    return OrderResult(
        exchange_order_id=str(data.get("orderId")),
        symbol=data.get("symbol", ""),
        side=OrderSide(data.get("side", "BUY")),
        order_type=OrderType(data.get("type", "MARKET")),
        status=data.get("status", "UNKNOWN"),
        quantity=to_decimal(data.get("origQty", "0")),
        executed_quantity=to_decimal(executed) if executed is not None else None,
        price=to_decimal(price) if price is not None and to_decimal(price) > 0 else None,
    )


class BinanceClient(ExchangeGateway, PortfolioGateway):
    """
    Async Binance Spot client.

    Every call is a single request: failures surface immediately as
    ExchangeError subclasses and are never retried here.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str,
        recv_window_ms: int = 5000,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.recv_window_ms = recv_window_ms
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"X-MBX-APIKEY": api_key},
            transport=transport,
        )
        logger.info(f"BinanceClient initialized (base_url={self.base_url})")

    async def close(self):
        await self._client.aclose()

    # ----------------------------------------------------------
    # Signing / transport
    # ----------------------------------------------------------

    def sign(self, params: Dict[str, Any]) -> str:
        """Return the urlencoded query string with the HMAC signature appended."""
        query = urlencode(params)
        signature = hmac.new(
            self._api_secret.encode("utf-8"),
            query.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return f"{query}&signature={signature}"

    async def _signed_request(self, method: str, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        payload = {k: v for k, v in params.items() if v is not None}
        payload["recvWindow"] = self.recv_window_ms
        payload["timestamp"] = int(time.time() * 1000)
        url = f"{path}?{self.sign(payload)}"

        try:
            resp = await self._client.request(method, url)
        except httpx.TimeoutException as e:
            logger.error(f"Binance {method} {path} timed out: {e}")
            raise ExchangeUnavailableError(f"Binance request timed out: {path}") from e
        except httpx.TransportError as e:
            logger.error(f"Binance {method} {path} transport error: {e}")
            raise ExchangeUnavailableError(f"Binance unreachable: {e}") from e

        return self._check_response(resp, path)

    @staticmethod
    def _check_response(resp: httpx.Response, path: str) -> Dict[str, Any]:
        """Raise on error responses, return the JSON body otherwise."""
        try:
            body = resp.json()
        except ValueError:
            body = {}

        if resp.status_code < 400:
            return body

        code = body.get("code") if isinstance(body, dict) else None
        # Sanitize: don't leak oversized provider payloads
        msg = (body.get("msg") if isinstance(body, dict) else None) or resp.text[:200] or "Unknown Binance error"

        if resp.status_code >= 500 or resp.status_code in _RATE_LIMIT_STATUSES:
            logger.error(f"Binance API unavailable on {path} (HTTP {resp.status_code}, code={code}): {msg}")
            raise ExchangeUnavailableError(f"Binance API unavailable ({resp.status_code}): {msg}", code=code)

        logger.error(f"Binance API error on {path}: {msg} (code={code})")
        raise ExchangeRejectedError(f"Binance API error ({code}): {msg}", code=code)

    # ----------------------------------------------------------
    # Orders
    # ----------------------------------------------------------

    async def place_order(
        self,
        symbol: str,
        side: OrderSide,
        order_type: OrderType,
        quantity: Decimal,
        price: Optional[Decimal] = None,
    ) -> OrderResult:
        logger.info(f"Placing order: {symbol} {side.value} {order_type.value} qty={quantity} price={price}")

        params: Dict[str, Any] = {
            "symbol": symbol,
            "side": side.value,
            "type": order_type.value,
            "quantity": format_decimal(quantity),
            "newOrderRespType": "RESULT",
        }
        if order_type == OrderType.LIMIT:
            if price is None:
                raise ExchangeRejectedError("LIMIT orders require a price")
            params["price"] = format_decimal(price)
            params["timeInForce"] = "GTC"

        data = await self._signed_request("POST", "/api/v3/order", params)
        result = _to_order_result(data)
        logger.info(f"Order placed: exchangeOrderId={result.exchange_order_id}, status={result.status}")
        return result

    async def cancel_order(self, symbol: str, order_id: str) -> OrderResult:
        logger.info(f"Cancelling order: symbol={symbol}, orderId={order_id}")
        data = await self._signed_request("DELETE", "/api/v3/order", {"symbol": symbol, "orderId": order_id})
        return _to_order_result(data)

    async def get_order(self, symbol: str, order_id: str) -> OrderResult:
        data = await self._signed_request("GET", "/api/v3/order", {"symbol": symbol, "orderId": order_id})
        return _to_order_result(data)

    # ----------------------------------------------------------
    # Account / Balance
    # ----------------------------------------------------------

    async def get_balances(self) -> List[AssetBalance]:
        data = await self._signed_request("GET", "/api/v3/account", {"omitZeroBalances": "true"})
        balances = []
        for entry in data.get("balances", []):
            free = to_decimal(entry.get("free", "0"))
            locked = to_decimal(entry.get("locked", "0"))
            if free > 0 or locked > 0:
                balances.append(AssetBalance(asset=entry.get("asset", "").upper(), free=free, locked=locked))
        return balances
