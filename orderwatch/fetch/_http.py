"""
HTTP fetcher: httpx adapter over the storefront orders API.

    GET {base}/orders/{id}  → one order
    GET {base}/orders       → the caller's orders, newest first
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx
from combinators import lift as L, timeout, TimeoutError as DeadlineExceeded
from kungfu import LazyCoroResult, Result, Ok, Error

from orderwatch._types import OrderId
from orderwatch.config import Settings
from orderwatch.fetch._types import FetchError, FetchFailure, FetchFailureKind, raised_failure
from orderwatch.order import DecodeError, MalformedOrder, Order, decode_order, decode_orders

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Error Mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _transport_failure(exc: Exception) -> FetchError:
    if isinstance(exc, httpx.TimeoutException):
        return FetchFailure(FetchFailureKind.TIMEOUT, str(exc) or "request timed out")
    return raised_failure(exc)


def _deadline_failure(err: FetchError | DeadlineExceeded) -> FetchError:
    if isinstance(err, DeadlineExceeded):
        return FetchFailure(FetchFailureKind.TIMEOUT, str(err))
    return err


def _error_message(response: httpx.Response) -> str:
    # The API answers errors with {"message": ...}; fall back to the reason phrase.
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.reason_phrase or f"HTTP {response.status_code}"


async def _read_json(response: httpx.Response) -> Result[object, FetchError]:
    if response.is_error:
        return Error(FetchFailure(
            FetchFailureKind.HTTP,
            _error_message(response),
            status_code=response.status_code,
        ))
    try:
        return Ok(response.json())
    except ValueError:
        return Error(MalformedOrder("response body is not JSON"))


def _decoding[T](
    decode: Callable[[object], Result[T, DecodeError]],
) -> Callable[[object], LazyCoroResult[T, FetchError]]:
    def step(payload: object) -> LazyCoroResult[T, FetchError]:
        return L.from_result(decode(payload))
    return step


# ═══════════════════════════════════════════════════════════════════════════════
# HttpOrderFetcher
# ═══════════════════════════════════════════════════════════════════════════════


class HttpOrderFetcher:
    """
    OrderFetcher over an httpx.AsyncClient.

    The client carries base URL and auth; this class only knows the paths.
    No retries: a failed request is returned as Error(FetchFailure).

    Example:
        async with httpx.AsyncClient(base_url="http://shop/api") as client:
            fetcher = HttpOrderFetcher(client, deadline=5.0)
            result = await fetcher.fetch_one(42)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        deadline: float | None = None,
        owns_client: bool = False,
    ) -> None:
        self._client = client
        self._deadline = deadline
        self._owns_client = owns_client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        token: str | None = None,
    ) -> HttpOrderFetcher:
        """Build a fetcher that owns its client. Close it with aclose()."""
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        client = httpx.AsyncClient(
            base_url=settings.API_BASE,
            headers=headers,
            timeout=settings.REQUEST_TIMEOUT_S,
        )
        return cls(client, deadline=settings.REQUEST_TIMEOUT_S, owns_client=True)

    def _get(self, path: str) -> LazyCoroResult[object, FetchError]:
        client = self._client

        async def send() -> httpx.Response:
            logger.debug("GET %s", path)
            return await client.get(path)

        request = L.catching_async(send, on_error=_transport_failure).then(_read_json)
        if self._deadline is None:
            return request
        return timeout(request, seconds=self._deadline).map_err(_deadline_failure)

    def fetch_one(self, order_id: OrderId) -> LazyCoroResult[Order, FetchError]:
        return self._get(f"/orders/{order_id}").then(_decoding(decode_order))

    def fetch_many(self) -> LazyCoroResult[tuple[Order, ...], FetchError]:
        return self._get("/orders").then(_decoding(decode_orders))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpOrderFetcher:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


__all__ = ("HttpOrderFetcher",)
