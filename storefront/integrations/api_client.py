"""
REST backend client for the storefront.

Wraps the catalog, cart, address and auth endpoints:

- GET    /products
- GET    /cart                      (bearer)
- POST   /cart/checkout             (bearer)
- GET    /user/addresses            (bearer)
- POST   /user/addresses            (bearer)
- DELETE /user/addresses/{id}       (bearer)
- POST   /auth/login

Failures are split in two: ``BackendError`` when the server answered with an
error status (its ``message`` is kept verbatim) and ``TransportError`` when
there was no usable answer at all.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from storefront.core.exceptions import BackendError, TransportError
from storefront.domain.models import (
    Address,
    LoginResponse,
    Product,
    RawCartEntry,
    parse_addresses,
    parse_cart,
    parse_products,
)

logger = logging.getLogger(__name__)


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return fallback


class StorefrontApiClient:
    """Async client for the storefront REST API.

    One ``aiohttp.ClientSession`` is created lazily and reused; call
    :meth:`close` (or use ``async with``) when done.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = 30.0,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> StorefrontApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        payload: dict[str, Any] | None = None,
        expect_json: bool = True,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        With ``expect_json=False`` a 2xx reply is accepted on its status alone
        and an undecodable body comes back as None.
        """
        headers = {"Accept": "application/json"}
        if token:
            headers.update(_bearer(token))

        logger.debug("%s %s", method, path)
        session = await self._get_session()
        try:
            async with session.request(method, self.url(path), json=payload, headers=headers) as resp:
                raw = await resp.read()
                status = resp.status
                reason = resp.reason or f"HTTP {status}"
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("%s %s failed without a response: %r", method, path, exc)
            raise TransportError(f"{method} {path}: no response from backend") from exc

        body: Any = None
        if raw:
            try:
                body = json.loads(raw.decode("utf-8"))
            except ValueError:
                # UnicodeDecodeError is a ValueError as well
                body = None
                if expect_json and 200 <= status < 300:
                    raise TransportError(f"{method} {path}: backend returned invalid JSON")

        if status >= 400:
            message = _error_message(body, reason)
            logger.info("%s %s -> %s: %s", method, path, status, message)
            raise BackendError(message, status=status)

        return body

    async def login(self, username: str, password: str) -> LoginResponse:
        body = await self._request(
            "POST", "/auth/login", payload={"username": username, "password": password}
        )
        try:
            return LoginResponse.model_validate(body)
        except ValueError as exc:
            raise TransportError("POST /auth/login: unexpected login response") from exc

    async def get_products(self) -> list[Product]:
        return parse_products(await self._request("GET", "/products"))

    async def get_cart(self, token: str) -> list[RawCartEntry]:
        return parse_cart(await self._request("GET", "/cart", token=token))

    async def get_addresses(self, token: str) -> list[Address]:
        return parse_addresses(await self._request("GET", "/user/addresses", token=token))

    async def add_address(self, token: str, address: str) -> list[Address]:
        body = await self._request(
            "POST", "/user/addresses", token=token, payload={"address": address}
        )
        return parse_addresses(body)

    async def delete_address(self, token: str, address_id: str) -> list[Address]:
        body = await self._request(
            "DELETE", f"/user/addresses/{quote(address_id, safe='')}", token=token
        )
        return parse_addresses(body)

    async def checkout(self, token: str, address_id: str) -> Any:
        """Place the order.

        A 2xx status is the acknowledgement; the body, if it parses, is returned
        as is and may be None.
        """
        return await self._request(
            "POST",
            "/cart/checkout",
            token=token,
            payload={"addressId": address_id},
            expect_json=False,
        )
