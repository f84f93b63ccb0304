"""Entry point tying configuration, transports and the dispatcher together."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from iamds_client.client.config import Configuration
from iamds_client.client.dispatcher import RequestDispatcher
from iamds_client.client.response import TypedResponse
from iamds_client.client.transport import HttpxAsyncTransport, RequestsTransport, TokenProvider
from iamds_client.descriptor.base import EndpointDescriptor
from iamds_client.descriptor.table import get_endpoint


class ApiClient:
    """Calls any operation of the endpoint table by name.

    Usage:
        with ApiClient(Configuration(access_token="...")) as client:
            response = client.call("GetApp", app_id="a-1")
            print(response.status_code, response.data)
    """

    def __init__(
        self,
        configuration: Configuration | None = None,
        transport: Any = None,
        async_transport: Any = None,
        token_provider: TokenProvider | None = None,
        dispatcher: RequestDispatcher | None = None,
        endpoints: Mapping[str, EndpointDescriptor] | Iterable[EndpointDescriptor] | None = None,
    ):
        self.configuration = configuration or Configuration.from_env()
        self.token_provider = token_provider
        self.dispatcher = dispatcher or RequestDispatcher()
        self._transport = transport
        self._async_transport = async_transport
        if endpoints is not None and not isinstance(endpoints, Mapping):
            endpoints = {ep.operation_id: ep for ep in endpoints}
        self.endpoints = endpoints

    @property
    def transport(self) -> Any:
        if self._transport is None:
            self._transport = RequestsTransport(self.configuration, self.token_provider)
        return self._transport

    @property
    def async_transport(self) -> Any:
        if self._async_transport is None:
            self._async_transport = HttpxAsyncTransport(self.configuration, self.token_provider)
        return self._async_transport

    def endpoint(self, operation: str | EndpointDescriptor) -> EndpointDescriptor:
        """Resolve a descriptor, or a name in this client's table (the built-in one by default)."""
        if isinstance(operation, EndpointDescriptor):
            return operation
        return get_endpoint(operation, self.endpoints)

    def call(self, operation: str | EndpointDescriptor, **args: Any) -> TypedResponse:
        """Execute an operation (GetApp, get_app or a descriptor) and return the full response."""
        return self.dispatcher.execute(self.endpoint(operation), args, self.transport)

    async def call_async(self, operation: str | EndpointDescriptor, **args: Any) -> TypedResponse:
        return await self.dispatcher.execute_async(self.endpoint(operation), args, self.async_transport)

    def close(self) -> None:
        if self._transport is not None and hasattr(self._transport, "close"):
            self._transport.close()

    async def aclose(self) -> None:
        if self._async_transport is not None and hasattr(self._async_transport, "aclose"):
            await self._async_transport.aclose()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
