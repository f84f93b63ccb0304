from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from iamds_client import models
from iamds_client.descriptor.base import ResponseKind
from iamds_client.descriptor.openapi import parse_document, parse_openapi

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="module")
def endpoints():
    return {ep.operation_id: ep for ep in parse_openapi(FIXTURES / "iam.yaml")}


class TestParseOpenapi:
    def test_endpoint_count(self, endpoints):
        assert len(endpoints) == 6

    def test_list_apps(self, endpoints):
        ep = endpoints["ListApps"]
        assert ep.api == "AppApi"
        assert ep.method == "GET"
        assert ep.path_template == "/apps"
        assert ep.summary == "List all apps"
        assert [(p.name, p.wire_name, p.type_name) for p in ep.query_params] == [
            ("filter", "$filter", "str"),
            ("top", "$top", "int"),
            ("count", "count", "bool"),
        ]
        assert [p.wire_name for p in ep.header_params] == ["X-Correlation-Id"]
        assert ep.response.data_type is models.AppList

    def test_accepts_only_success_media_types(self, endpoints):
        assert endpoints["ListApps"].accepts == ("application/json", "text/plain")

    def test_document_level_scope(self, endpoints):
        assert endpoints["ListApps"].required_scope == "iam"

    def test_operation_scope_overrides(self, endpoints):
        assert endpoints["CreateApp"].required_scope == "iam TestScope"

    def test_empty_security(self, endpoints):
        assert endpoints["Health"].required_scope == ""

    def test_request_body(self, endpoints):
        ep = endpoints["CreateApp"]
        assert ep.body_param == "app"
        assert ep.body_type is models.App
        assert ep.content_types == ("application/json",)
        assert ep.response.data_type is models.App

    def test_path_level_parameters_and_response_ref(self, endpoints):
        ep = endpoints["GetApp"]
        assert [p.wire_name for p in ep.path_params] == ["app-id"]
        assert ep.path_params[0].name == "app_id"
        assert ep.path_params[0].alias == "appId"
        assert [p.wire_name for p in ep.header_params] == ["If-None-Match"]
        assert ep.accepts == ("application/json",)
        assert ep.response.data_type is models.App

    def test_no_content_response(self, endpoints):
        ep = endpoints["DeleteApp"]
        assert ep.response.kind is ResponseKind.NONE
        assert ep.accepts == ()
        assert ep.summary == ""

    def test_missing_operation_id_is_synthesized(self, endpoints):
        ep = endpoints["post_apps_app_id_secret"]
        assert ep.method_name == "post_apps_app_id_secret"
        assert ep.response.kind is ResponseKind.SCALAR
        assert ep.response.data_type is str

    def test_untagged_operation(self, endpoints):
        ep = endpoints["Health"]
        assert ep.api == "DefaultApi"
        assert ep.response.kind is ResponseKind.OBJECT
        assert ep.response.data_type is dict


class TestParseDocument:
    def test_empty_document(self):
        assert parse_document({"openapi": "3.0.1"}) == []

    def test_unknown_schema_falls_back_to_dict(self):
        doc = {
            "paths": {
                "/widgets": {
                    "post": {
                        "operationId": "CreateWidget",
                        "requestBody": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Widget"}}}},
                        "responses": {"201": {"description": "ok"}},
                    }
                }
            }
        }
        [ep] = parse_document(doc)
        assert ep.body_param == "widget"
        assert ep.body_type is dict

    def test_undeclared_path_parameter_rejected(self):
        doc = {"paths": {"/apps/{app-id}": {"get": {"operationId": "GetApp", "responses": {}}}}}
        with pytest.raises(PydanticValidationError, match="placeholders"):
            parse_document(doc)

    def test_operation_parameter_overrides_path_level(self):
        doc = {
            "paths": {
                "/apps/{app-id}": {
                    "parameters": [
                        {"name": "app-id", "in": "path", "required": True, "schema": {"type": "string"}},
                        {"name": "X-Correlation-Id", "in": "header", "schema": {"type": "string"}},
                    ],
                    "get": {
                        "operationId": "GetApp",
                        "parameters": [
                            {"name": "app-id", "in": "path", "required": True, "schema": {"type": "integer"}},
                            {"name": "app-id", "in": "query", "schema": {"type": "string"}},
                        ],
                        "responses": {},
                    },
                }
            }
        }
        [ep] = parse_document(doc)
        assert [(p.wire_name, p.type_name) for p in ep.path_params] == [("app-id", "int")]
        assert [p.wire_name for p in ep.query_params] == ["app-id"]
        assert [p.wire_name for p in ep.header_params] == ["X-Correlation-Id"]

    def test_shared_parameter_ref_overridden(self):
        doc = {
            "components": {"parameters": {"appId": {"name": "app-id", "in": "path", "schema": {"type": "string"}}}},
            "paths": {
                "/apps/{app-id}": {
                    "parameters": [{"$ref": "#/components/parameters/appId"}],
                    "delete": {
                        "operationId": "DeleteApp",
                        "parameters": [{"name": "app-id", "in": "path", "schema": {"type": "string"}}],
                        "responses": {},
                    },
                }
            },
        }
        [ep] = parse_document(doc)
        assert ep.required_path_params == frozenset({"app_id"})
