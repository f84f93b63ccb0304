"""Wrapper generator: renders endpoint descriptors as typed Python functions.

Each generated function is a one-liner over ``ApiClient.call``; the output is
plain source that can be written next to an application and type-checked.
Operations of the built-in table are called by name; any other descriptor
(e.g. one loaded from an OpenAPI document) is rendered into the module and
passed to the client directly.
"""

import logging
from collections.abc import Iterable

from iamds_client import models
from iamds_client.descriptor.base import EndpointDescriptor, ParamSpec, ResponseKind, python_name
from iamds_client.descriptor.table import ENDPOINTS
from iamds_client.generator.validator import validate_files

logger = logging.getLogger(__name__)

BUILTIN_TYPES = {str, int, float, bool, dict, list}


class WrapperGenerator:
    """Generates one module of wrapper functions per api.

    Usage:
        files = WrapperGenerator().generate(ENDPOINTS.values())
        # {"app_api.py": "...", "group_api.py": "...", ...}
    """

    def __init__(self, include_async: bool = True):
        self.include_async = include_async

    def generate(self, descriptors: Iterable[EndpointDescriptor]) -> dict[str, str]:
        """Render wrapper modules.

        Returns a dict of {filename: source}. Raises ValueError if any
        rendered module fails validation.
        """
        files = {}
        for api, group in self._group_by_api(descriptors).items():
            files[f"{python_name(api)}.py"] = self._render_module(api, group)

        errors = validate_files(files)
        if errors:
            details = "; ".join(f"{name}: {msg}" for name, msg in errors.items())
            raise ValueError(f"Generated wrappers are invalid: {details}")

        logger.debug("Rendered %d wrapper module(s)", len(files))
        return files

    def _group_by_api(self, descriptors: Iterable[EndpointDescriptor]) -> dict[str, list[EndpointDescriptor]]:
        groups: dict[str, list[EndpointDescriptor]] = {}
        for ep in descriptors:
            groups.setdefault(ep.api, []).append(ep)
        return groups

    def _render_module(self, api: str, descriptors: list[EndpointDescriptor]) -> str:
        imported = sorted({
            name
            for ep in descriptors
            for name in (_model_name(ep.body_type), _model_name(ep.response.data_type))
            if name
        })

        lines = [
            f'"""Typed wrappers for {api}. Generated from endpoint descriptors; do not edit."""',
            "",
            "from typing import Any",
            "",
            "from iamds_client.client.api_client import ApiClient",
        ]
        embedded = [ep for ep in descriptors if not _is_builtin(ep)]
        if embedded:
            lines.append("from iamds_client.descriptor.base import EndpointDescriptor, ParamSpec, ResponseShape")
        if imported:
            lines.append(f"from iamds_client.models import {', '.join(imported)}")
        for ep in embedded:
            lines += ["", ""] + _render_descriptor(ep)

        for ep in descriptors:
            lines += ["", ""] + self._render_function(ep, asynchronous=False)
            if self.include_async:
                lines += ["", ""] + self._render_function(ep, asynchronous=True)
        return "\n".join(lines) + "\n"

    def _render_function(self, ep: EndpointDescriptor, asynchronous: bool) -> list[str]:
        params = ["client: ApiClient"]
        params += [f"{p.name}: {p.type_name}" for p in ep.path_params]
        if ep.body_param:
            params.append(f"{ep.body_param}: {_body_annotation(ep.body_type)} = None")
        keyword = [f"{p.name}: {_param_annotation(p)} = None" for p in ep.query_params + ep.header_params]
        params += ["*"] + keyword + ["timeout: Any = None"]

        call_args = [f"{name}={name}" for name in _argument_names(ep)]
        target = f'"{ep.operation_id}"' if _is_builtin(ep) else _constant_name(ep)
        call = f"client.call({target}, {', '.join(call_args)})"
        if asynchronous:
            call = f"(await client.call_async({target}, {', '.join(call_args)}))"

        name = ep.method_name + ("_async" if asynchronous else "")
        prefix = "async def" if asynchronous else "def"
        lines = [f"{prefix} {name}("]
        lines += [f"    {param}," for param in params]
        lines.append(f") -> {_return_annotation(ep)}:")
        lines.append(f'    """{ep.summary or ep.operation_id}.')
        lines.append("")
        lines.append(f"    {ep.method} {ep.path_template}")
        lines.append('    """')
        lines.append(f"    return {call}.data")
        return lines


def _is_builtin(ep: EndpointDescriptor) -> bool:
    return ENDPOINTS.get(ep.operation_id) == ep


def _constant_name(ep: EndpointDescriptor) -> str:
    return f"_{ep.method_name.upper()}"


def _type_source(data_type) -> str:
    return "None" if data_type is None else _annotation(data_type)


def _param_source(param: ParamSpec) -> str:
    return (
        f"ParamSpec(name={param.name!r}, wire_name={param.wire_name!r}, location={param.location!r}, "
        f"alias={param.alias!r}, type_name={param.type_name!r})"
    )


def _response_source(ep: EndpointDescriptor) -> str:
    shape = ep.response
    if shape.kind is ResponseKind.NONE:
        return "ResponseShape.none()"
    if shape.kind is ResponseKind.SCALAR:
        return f"ResponseShape.scalar({_type_source(shape.data_type)})"
    return f"ResponseShape.of({_type_source(shape.data_type)})"


def _render_descriptor(ep: EndpointDescriptor) -> list[str]:
    """Module-level constant for a descriptor that is not in the built-in table."""
    lines = [f"{_constant_name(ep)} = EndpointDescriptor("]
    lines += [
        f"    operation_id={ep.operation_id!r},",
        f"    api={ep.api!r},",
        f"    method={ep.method!r},",
        f"    path_template={ep.path_template!r},",
    ]
    for field in ("path_params", "query_params", "header_params"):
        params = getattr(ep, field)
        if params:
            lines.append(f"    {field}=(")
            lines += [f"        {_param_source(p)}," for p in params]
            lines.append("    ),")
    lines += [
        f"    body_param={ep.body_param!r},",
        f"    body_type={_type_source(ep.body_type)},",
        f"    content_types={ep.content_types!r},",
        f"    accepts={ep.accepts!r},",
        f"    required_scope={ep.required_scope!r},",
        f"    response={_response_source(ep)},",
        f"    summary={ep.summary!r},",
        ")",
    ]
    return lines


def _argument_names(ep: EndpointDescriptor) -> list[str]:
    names = [p.name for p in ep.path_params]
    if ep.body_param:
        names.append(ep.body_param)
    names += [p.name for p in ep.query_params + ep.header_params]
    names.append("timeout")
    return names


def _model_name(data_type) -> str | None:
    name = getattr(data_type, "__name__", None)
    if name and models.MODELS.get(name) is data_type:
        return name
    return None


def _annotation(data_type) -> str:
    if data_type in BUILTIN_TYPES:
        return data_type.__name__
    return _model_name(data_type) or "Any"


def _body_annotation(data_type) -> str:
    annotation = _annotation(data_type)
    if annotation == "Any":
        return annotation
    if annotation == "dict":
        return "dict | None"
    return f"{annotation} | dict | None"


def _param_annotation(param: ParamSpec) -> str:
    if param.location == "query":
        return f"{param.type_name} | list | None"
    return f"{param.type_name} | None"


def _return_annotation(ep: EndpointDescriptor) -> str:
    if ep.response.kind is ResponseKind.NONE:
        return "None"
    annotation = _annotation(ep.response.data_type)
    return annotation if annotation == "Any" else f"{annotation} | None"
