"""Endpoint descriptors: static, immutable declarations of REST operations.

The endpoint table, the OpenAPI loader and the wrapper generator all
produce or consume these models; the dispatcher turns them into requests.
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


def python_name(wire_name: str) -> str:
    """Turn a wire name into a snake_case argument name.

    app-id -> app_id, $orderBy -> order_by, X-Correlation-Id -> x_correlation_id
    """
    name = wire_name.lstrip("$")
    name = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name)
    return re.sub(r"[^0-9a-zA-Z]+", "_", name).strip("_").lower()


def camel_name(name: str) -> str:
    """snake_case -> camelCase (app_id -> appId)."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class ParamSpec(BaseModel):
    """A single operation parameter and the key it travels under."""

    model_config = ConfigDict(frozen=True)

    name: str  # python argument: app_id
    wire_name: str  # app-id / $filter / If-Match
    location: str  # path / query / header
    alias: str = ""  # API name: appId
    type_name: str = "str"

    @model_validator(mode="before")
    @classmethod
    def _default_alias(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("name") and not data.get("alias"):
            data = {**data, "alias": camel_name(data["name"])}
        return data


class ResponseKind(str, Enum):
    NONE = "none"
    SCALAR = "scalar"
    OBJECT = "object"


class ResponseShape(BaseModel):
    """Expected payload of a success response."""

    model_config = ConfigDict(frozen=True)

    kind: ResponseKind = ResponseKind.NONE
    data_type: Any = None

    @classmethod
    def none(cls) -> "ResponseShape":
        return cls()

    @classmethod
    def scalar(cls, data_type: type) -> "ResponseShape":
        return cls(kind=ResponseKind.SCALAR, data_type=data_type)

    @classmethod
    def of(cls, data_type: type) -> "ResponseShape":
        return cls(kind=ResponseKind.OBJECT, data_type=data_type)

    @property
    def type_name(self) -> str:
        if self.kind is ResponseKind.NONE:
            return "None"
        return getattr(self.data_type, "__name__", "Any")


class EndpointDescriptor(BaseModel):
    """A single REST operation with everything needed to call it."""

    model_config = ConfigDict(frozen=True)

    operation_id: str  # GetApp
    api: str  # AppApi
    method: str  # GET / POST / PUT / DELETE / PATCH
    path_template: str  # /apps/{app-id}
    path_params: tuple[ParamSpec, ...] = ()
    query_params: tuple[ParamSpec, ...] = ()
    header_params: tuple[ParamSpec, ...] = ()
    body_param: str | None = None
    body_type: Any = None
    content_types: tuple[str, ...] = ()
    accepts: tuple[str, ...] = ()
    required_scope: str = ""
    response: ResponseShape = ResponseShape()
    summary: str = ""

    @model_validator(mode="after")
    def _check_shape(self) -> "EndpointDescriptor":
        if self.method not in METHODS:
            raise ValueError(f"{self.operation_id}: unsupported method {self.method}")
        placeholders = self.placeholders()
        declared = [p.wire_name for p in self.path_params]
        if sorted(placeholders) != sorted(declared):
            raise ValueError(
                f"{self.operation_id}: path placeholders {placeholders} do not match path parameters {declared}"
            )
        for param in self.all_params():
            if param.location not in ("path", "query", "header"):
                raise ValueError(f"{self.operation_id}: bad location {param.location!r} for {param.name}")
        return self

    def placeholders(self) -> list[str]:
        return PLACEHOLDER.findall(self.path_template)

    def all_params(self) -> tuple[ParamSpec, ...]:
        return self.path_params + self.query_params + self.header_params

    @property
    def required_path_params(self) -> frozenset[str]:
        return frozenset(p.name for p in self.path_params)

    @property
    def method_name(self) -> str:
        """Python method name: GetApp -> get_app."""
        return python_name(self.operation_id)

    @property
    def qualified_name(self) -> str:
        return f"{self.api}->{self.operation_id}"
