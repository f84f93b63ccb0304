"""Generic request dispatcher.

Turns an (EndpointDescriptor, arguments) pair into exactly one transport call
and decodes the result. The blocking and awaitable entry points share every
step except the call into the transport.
"""

import logging
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from iamds_client.client.params import (
    expand_path,
    parameter_to_multimap,
    parameter_to_string,
    select_accept,
    select_content_type,
)
from iamds_client.client.request import RequestParameters
from iamds_client.client.response import RawResponse, TypedResponse
from iamds_client.descriptor.base import EndpointDescriptor, ParamSpec, ResponseKind, ResponseShape
from iamds_client.exceptions import DecodingError, ServiceError, ValidationError

logger = logging.getLogger(__name__)

TIMEOUT_ARG = "timeout"

ExceptionHook = Callable[[str, TypedResponse], Exception | None]


def default_exception_hook(operation_id: str, response: TypedResponse) -> Exception | None:
    """Turn every non-2xx response into a ServiceError."""
    if response.ok:
        return None
    content = response.raw_content.decode("utf-8", errors="replace")
    return ServiceError(response.status_code, f"Error calling {operation_id}: {content}", raw_response=response)


@lru_cache(maxsize=None)
def _adapter(data_type: Any) -> TypeAdapter:
    return TypeAdapter(data_type)


def decode_payload(shape: ResponseShape, raw: RawResponse, operation_id: str = "") -> Any:
    """Decode a success body into the declared shape. An empty body decodes to None."""
    if shape.kind is ResponseKind.NONE or not raw.body:
        return None
    adapter = _adapter(shape.data_type)
    try:
        if shape.kind is ResponseKind.OBJECT or raw.is_json():
            return adapter.validate_json(raw.body)
        return adapter.validate_python(raw.text)
    except PydanticValidationError as e:
        response = TypedResponse(raw.status_code, dict(raw.headers), None, raw.body)
        raise DecodingError(
            raw.status_code,
            f"Cannot decode {operation_id} response as {shape.type_name}: {e.error_count()} error(s)",
            raw_response=response,
        ) from e


class RequestDispatcher:
    """Stateless executor for endpoint descriptors.

    A single instance may be shared by any number of threads or tasks.

    Usage:
        dispatcher = RequestDispatcher()
        response = dispatcher.execute(ENDPOINTS["GetApp"], {"app_id": "a-1"}, transport)
        app = response.data
    """

    def __init__(self, exception_hook: ExceptionHook | None = default_exception_hook):
        self.exception_hook = exception_hook

    @property
    def exception_hook(self) -> ExceptionHook | None:
        return self._exception_hook

    @exception_hook.setter
    def exception_hook(self, hook: ExceptionHook | None) -> None:
        if isinstance(hook, (list, tuple, set, frozenset)):
            raise TypeError("Multiple exception hooks are unsupported; compose them into a single callable.")
        if hook is not None and not callable(hook):
            raise TypeError(f"Exception hook must be callable, got {type(hook).__name__}")
        self._exception_hook = hook

    # -- request building -----------------------------------------------------

    def build_request(self, descriptor: EndpointDescriptor, args: Mapping[str, Any]) -> RequestParameters:
        """Validate arguments and assemble the concrete request. No I/O."""
        self._check_arguments(descriptor, args)

        path_values = {}
        for param in descriptor.path_params:
            value = _lookup(param, args)
            if value is None:
                raise ValidationError(param.alias, descriptor.qualified_name)
            path_values[param.wire_name] = value

        query: list[tuple[str, str]] = []
        for param in descriptor.query_params:
            value = _lookup(param, args)
            if value is not None:
                query.extend(parameter_to_multimap(param.wire_name, value))

        headers: dict[str, str] = {}
        content_type = select_content_type(descriptor.content_types)
        if content_type is not None:
            headers["Content-Type"] = content_type
        accept = select_accept(descriptor.accepts)
        if accept is not None:
            headers["Accept"] = accept
        for param in descriptor.header_params:
            value = _lookup(param, args)
            if value is not None:
                headers[param.wire_name] = parameter_to_string(value)

        body = None
        if descriptor.body_param:
            body = args.get(descriptor.body_param)

        return RequestParameters(
            method=descriptor.method,
            path=expand_path(descriptor.path_template, path_values),
            query=query,
            headers=headers,
            body=body,
            required_scope=descriptor.required_scope,
            timeout=args.get(TIMEOUT_ARG),
        )

    def _check_arguments(self, descriptor: EndpointDescriptor, args: Mapping[str, Any]) -> None:
        known = {TIMEOUT_ARG}
        if descriptor.body_param:
            known.add(descriptor.body_param)
        for param in descriptor.all_params():
            known.update((param.name, param.alias))
        unknown = sorted(set(args) - known)
        if unknown:
            raise TypeError(f"{descriptor.operation_id}() got unexpected argument(s): {', '.join(unknown)}")

    # -- execution --------------------------------------------------------------

    def execute(self, descriptor: EndpointDescriptor, args: Mapping[str, Any], transport: Any) -> TypedResponse:
        """Run one operation through a blocking transport."""
        request = self.build_request(descriptor, args)
        logger.debug("%s: %s %s", descriptor.operation_id, request.method, request.path)
        raw = transport.send(
            request.method,
            request.path,
            request.headers,
            request.query,
            request.body,
            request.required_scope,
            request.timeout,
        )
        return self._complete(descriptor, raw)

    async def execute_async(self, descriptor: EndpointDescriptor, args: Mapping[str, Any], transport: Any) -> TypedResponse:
        """Run one operation through an awaitable transport."""
        request = self.build_request(descriptor, args)
        logger.debug("%s: %s %s (async)", descriptor.operation_id, request.method, request.path)
        raw = await transport.send(
            request.method,
            request.path,
            request.headers,
            request.query,
            request.body,
            request.required_scope,
            request.timeout,
        )
        return self._complete(descriptor, raw)

    def _complete(self, descriptor: EndpointDescriptor, raw: RawResponse) -> TypedResponse:
        logger.debug("%s: status %s", descriptor.operation_id, raw.status_code)
        data = None
        if 200 <= raw.status_code < 300:
            data = decode_payload(descriptor.response, raw, descriptor.operation_id)
        response = TypedResponse(raw.status_code, dict(raw.headers), data, raw.body)

        if self.exception_hook is not None:
            error = self.exception_hook(descriptor.operation_id, response)
            if error is not None:
                raise error
        return response


def _lookup(param: ParamSpec, args: Mapping[str, Any]) -> Any:
    value = args.get(param.name)
    if value is None and param.alias != param.name:
        value = args.get(param.alias)
    return value
