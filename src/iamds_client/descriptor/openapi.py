"""OpenAPI 3 document loader.

Builds EndpointDescriptors from an API description (YAML or JSON), so an
endpoint table can be derived from the document instead of written by hand.
"""

from pathlib import Path
from typing import Any

import yaml

from iamds_client.descriptor.base import METHODS, EndpointDescriptor, ParamSpec, ResponseShape, python_name
from iamds_client.models import MODELS

SCALAR_TYPES = {"string": str, "integer": int, "number": float, "boolean": bool}
TYPE_NAMES = {"string": "str", "integer": "int", "number": "float", "boolean": "bool", "array": "list"}


def parse_openapi(file_path: Path) -> list[EndpointDescriptor]:
    """Parse an OpenAPI file into a list of EndpointDescriptor."""
    text = file_path.read_text(encoding="utf-8")
    doc = yaml.safe_load(text)
    return parse_document(doc)


def parse_document(doc: dict) -> list[EndpointDescriptor]:
    endpoints = []
    for path, methods in doc.get("paths", {}).items():
        shared = methods.get("parameters", [])
        for method, operation in methods.items():
            if method.upper() not in METHODS:
                continue

            params = _parse_parameters(_merge_parameters(shared, operation.get("parameters", []), doc), doc)
            body_param, body_type, content_types = _parse_request_body(operation.get("requestBody"), doc)
            tags = operation.get("tags", [])

            endpoints.append(
                EndpointDescriptor(
                    operation_id=operation.get("operationId") or f"{method.lower()}_{python_name(path)}",
                    api=f"{tags[0]}Api" if tags else "DefaultApi",
                    method=method.upper(),
                    path_template=path,
                    path_params=tuple(p for p in params if p.location == "path"),
                    query_params=tuple(p for p in params if p.location == "query"),
                    header_params=tuple(p for p in params if p.location == "header"),
                    body_param=body_param,
                    body_type=body_type,
                    content_types=content_types,
                    accepts=_parse_accepts(operation.get("responses", {}), doc),
                    required_scope=_parse_scope(operation.get("security", doc.get("security", []))),
                    response=_parse_response_shape(operation.get("responses", {}), doc),
                    summary=operation.get("summary", ""),
                )
            )

    return endpoints


def _resolve(doc: dict, item: dict) -> dict:
    """Follow a local $ref (#/components/...)."""
    ref = item.get("$ref")
    if not ref:
        return item
    node: Any = doc
    for part in ref.lstrip("#/").split("/"):
        node = node[part]
    return node


def _merge_parameters(shared: list[dict], own: list[dict], doc: dict) -> list[dict]:
    """Path-level parameters overridden by operation parameters with the same name and location."""
    merged = {}
    for p in shared + own:
        p = _resolve(doc, p)
        merged[(p["name"], p.get("in", "query"))] = p
    return list(merged.values())


def _ref_name(schema: dict) -> str | None:
    ref = schema.get("$ref")
    return ref.rsplit("/", 1)[-1] if ref else None


def _parse_parameters(params: list[dict], doc: dict) -> list[ParamSpec]:
    result = []
    for p in params:
        p = _resolve(doc, p)
        location = p.get("in", "query")
        if location not in ("path", "query", "header"):
            continue
        schema = p.get("schema", {})
        result.append(
            ParamSpec(
                name=python_name(p["name"]),
                wire_name=p["name"],
                location=location,
                type_name=TYPE_NAMES.get(schema.get("type", "string"), "str"),
            )
        )
    return result


def _parse_request_body(body: dict | None, doc: dict) -> tuple[str | None, Any, tuple[str, ...]]:
    if not body:
        return None, None, ()
    body = _resolve(doc, body)
    content = body.get("content", {})
    content_types = tuple(content)
    for media in content.values():
        name = _ref_name(media.get("schema", {}))
        if name:
            return python_name(name), MODELS.get(name, dict), content_types
    return "body", dict, content_types


def _parse_accepts(responses: dict, doc: dict) -> tuple[str, ...]:
    accepts: list[str] = []
    for status_code, resp in responses.items():
        if not str(status_code).startswith("2"):
            continue
        for media_type in _resolve(doc, resp).get("content", {}):
            if media_type not in accepts:
                accepts.append(media_type)
    return tuple(accepts)


def _parse_scope(security: list[dict]) -> str:
    for requirement in security:
        for scopes in requirement.values():
            if scopes:
                return " ".join(scopes)
    return ""


def _parse_response_shape(responses: dict, doc: dict) -> ResponseShape:
    for status_code, resp in responses.items():
        if not str(status_code).startswith("2"):
            continue
        resp = _resolve(doc, resp)
        for media in resp.get("content", {}).values():
            schema = media.get("schema", {})
            name = _ref_name(schema)
            if name:
                return ResponseShape.of(MODELS.get(name, dict))
            if schema.get("type") in SCALAR_TYPES:
                return ResponseShape.scalar(SCALAR_TYPES[schema["type"]])
            if schema.get("type") == "array":
                return ResponseShape.of(list)
            return ResponseShape.of(dict)
    return ResponseShape.none()
