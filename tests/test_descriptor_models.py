import pytest
from pydantic import ValidationError as PydanticValidationError

from iamds_client.descriptor.base import (
    EndpointDescriptor,
    ParamSpec,
    ResponseKind,
    ResponseShape,
    camel_name,
    python_name,
)
from iamds_client.models import App


def _path(wire_name: str) -> ParamSpec:
    return ParamSpec(name=python_name(wire_name), wire_name=wire_name, location="path")


class TestNames:
    @pytest.mark.parametrize("wire_name, expected", [
        ("app-id", "app_id"),
        ("$orderBy", "order_by"),
        ("$filter", "filter"),
        ("countOnly", "count_only"),
        ("X-Correlation-Id", "x_correlation_id"),
        ("avalara-version", "avalara_version"),
        ("GetApp", "get_app"),
        ("ListTenantUserGrants", "list_tenant_user_grants"),
    ])
    def test_python_name(self, wire_name, expected):
        assert python_name(wire_name) == expected

    def test_camel_name(self):
        assert camel_name("group_id") == "groupId"
        assert camel_name("if_none_match") == "ifNoneMatch"
        assert camel_name("filter") == "filter"


class TestParamSpec:
    def test_alias_defaults_to_camel_case(self):
        param = ParamSpec(name="app_id", wire_name="app-id", location="path")
        assert param.alias == "appId"

    def test_explicit_alias_kept(self):
        param = ParamSpec(name="top", wire_name="$top", location="query", alias="limit")
        assert param.alias == "limit"

    def test_frozen(self):
        param = ParamSpec(name="app_id", wire_name="app-id", location="path")
        with pytest.raises(PydanticValidationError):
            param.name = "other"


class TestResponseShape:
    def test_none(self):
        shape = ResponseShape.none()
        assert shape.kind is ResponseKind.NONE
        assert shape.type_name == "None"

    def test_scalar(self):
        shape = ResponseShape.scalar(str)
        assert shape.kind is ResponseKind.SCALAR
        assert shape.type_name == "str"

    def test_object(self):
        shape = ResponseShape.of(App)
        assert shape.kind is ResponseKind.OBJECT
        assert shape.data_type is App
        assert shape.type_name == "App"


class TestEndpointDescriptor:
    def test_valid_descriptor(self):
        ep = EndpointDescriptor(
            operation_id="GetApp",
            api="AppApi",
            method="GET",
            path_template="/apps/{app-id}",
            path_params=(_path("app-id"),),
        )
        assert ep.placeholders() == ["app-id"]
        assert ep.required_path_params == frozenset({"app_id"})
        assert ep.method_name == "get_app"
        assert ep.qualified_name == "AppApi->GetApp"

    def test_undeclared_placeholder_rejected(self):
        with pytest.raises(PydanticValidationError, match="placeholders"):
            EndpointDescriptor(
                operation_id="GetApp",
                api="AppApi",
                method="GET",
                path_template="/apps/{app-id}",
            )

    def test_unused_path_param_rejected(self):
        with pytest.raises(PydanticValidationError, match="placeholders"):
            EndpointDescriptor(
                operation_id="ListApps",
                api="AppApi",
                method="GET",
                path_template="/apps",
                path_params=(_path("app-id"),),
            )

    def test_unsupported_method_rejected(self):
        with pytest.raises(PydanticValidationError, match="unsupported method"):
            EndpointDescriptor(operation_id="Trace", api="AppApi", method="TRACE", path_template="/apps")

    def test_bad_location_rejected(self):
        with pytest.raises(PydanticValidationError, match="bad location"):
            EndpointDescriptor(
                operation_id="ListApps",
                api="AppApi",
                method="GET",
                path_template="/apps",
                query_params=(ParamSpec(name="session", wire_name="session", location="cookie"),),
            )

    def test_all_params_order(self):
        ep = EndpointDescriptor(
            operation_id="ListAppGrants",
            api="AppApi",
            method="GET",
            path_template="/apps/{app-id}/grants",
            path_params=(_path("app-id"),),
            query_params=(ParamSpec(name="top", wire_name="$top", location="query"),),
            header_params=(ParamSpec(name="if_match", wire_name="If-Match", location="header"),),
        )
        assert [p.name for p in ep.all_params()] == ["app_id", "top", "if_match"]
