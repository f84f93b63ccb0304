"""HTTP transports: the only place where network I/O happens.

RequestsTransport blocks the calling thread; HttpxAsyncTransport is awaited.
Both attach authorization and client identification headers, serialize the
request body and return a RawResponse. Anything implementing the same
``send`` signature can be handed to the dispatcher instead.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Callable
from typing import Any, Protocol

import httpx
import requests
from pydantic import BaseModel

from iamds_client.client.config import Configuration
from iamds_client.client.response import RawResponse
from iamds_client.exceptions import TransportError

logger = logging.getLogger(__name__)

AVALARA_CLIENT_HEADER = "X-Avalara-Client"

# required scope -> access token; token acquisition lives outside this package
TokenProvider = Callable[[str], str]


class Transport(Protocol):
    def send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        query: list[tuple[str, str]],
        body: Any,
        required_scope: str,
        timeout: Any = None,
    ) -> RawResponse: ...


class AsyncTransport(Protocol):
    async def send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        query: list[tuple[str, str]],
        body: Any,
        required_scope: str,
        timeout: Any = None,
    ) -> RawResponse: ...


def encode_body(body: Any) -> bytes | None:
    """Serialize a request body to bytes (JSON unless already raw)."""
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, BaseModel):
        body = body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(body).encode("utf-8")


class BaseTransport:
    """Header and URL handling shared by both transports."""

    def __init__(self, configuration: Configuration | None = None, token_provider: TokenProvider | None = None):
        self.configuration = configuration or Configuration.from_env()
        self.token_provider = token_provider

    def url(self, path: str) -> str:
        return f"{self.configuration.resolved_base_path}{path}"

    def prepare_headers(self, headers: dict[str, str], required_scope: str) -> dict[str, str]:
        prepared = {AVALARA_CLIENT_HEADER: self.configuration.client_header()}
        prepared.update(self.configuration.default_headers)
        authorization = self.authorization(required_scope)
        if authorization:
            prepared["Authorization"] = authorization
        prepared.update(headers)
        return prepared

    def authorization(self, required_scope: str) -> str | None:
        """Authorization header value: token provider, then static token, then basic auth."""
        config = self.configuration
        if self.token_provider is not None:
            return f"Bearer {self.token_provider(required_scope)}"
        if config.access_token:
            return f"Bearer {config.access_token}"
        if config.username or config.password:
            credentials = f"{config.username or ''}:{config.password or ''}".encode("utf-8")
            return "Basic " + base64.b64encode(credentials).decode("ascii")
        return None

    def resolve_timeout(self, timeout: Any) -> Any:
        return self.configuration.timeout if timeout is None else timeout


class RequestsTransport(BaseTransport):
    """Blocking transport on a shared requests.Session.

    Usage:
        transport = RequestsTransport(Configuration(access_token="..."))
        raw = transport.send("GET", "/apps", {}, [], None, "iam")
    """

    def __init__(
        self,
        configuration: Configuration | None = None,
        token_provider: TokenProvider | None = None,
        session: requests.Session | None = None,
    ):
        super().__init__(configuration, token_provider)
        self.session = session or requests.Session()

    def send(self, method, path, headers, query, body, required_scope, timeout=None) -> RawResponse:
        url = self.url(path)
        try:
            resp = self.session.request(
                method,
                url,
                params=query,
                headers=self.prepare_headers(headers, required_scope),
                data=encode_body(body),
                timeout=self.resolve_timeout(timeout),
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url}: {e}") from e
        return RawResponse(resp.status_code, dict(resp.headers), resp.content)

    def close(self) -> None:
        self.session.close()


class HttpxAsyncTransport(BaseTransport):
    """Awaitable transport on a shared httpx.AsyncClient.

    ``timeout`` is forwarded to httpx as-is (seconds or an httpx.Timeout);
    cancelling the awaiting task cancels the request.
    """

    def __init__(
        self,
        configuration: Configuration | None = None,
        token_provider: TokenProvider | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(configuration, token_provider)
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def send(self, method, path, headers, query, body, required_scope, timeout=None) -> RawResponse:
        url = self.url(path)
        try:
            resp = await self.client.request(
                method,
                url,
                params=query,
                headers=self.prepare_headers(headers, required_scope),
                content=encode_body(body),
                timeout=self.resolve_timeout(timeout),
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url}: {e}") from e
        return RawResponse(resp.status_code, dict(resp.headers), resp.content)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
