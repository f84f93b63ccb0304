"""Endpoint table for the IAM directory service.

Descriptors are generated from a resource/verb matrix: every resource gets
the CRUD set, relationships get add/remove/list edges, and a handful of
per-resource quirks are applied on top.
"""

from collections.abc import Mapping

from iamds_client.descriptor.base import PLACEHOLDER, EndpointDescriptor, ParamSpec, ResponseShape
from iamds_client import models

IAM_SCOPE = "iam TestScope TestScope1"

JSON = "application/json"
TEXT = "text/plain"

BODY_ACCEPTS = (JSON, TEXT)
EMPTY_ACCEPTS = (TEXT,)


def _query(name: str, wire_name: str, type_name: str = "str") -> ParamSpec:
    return ParamSpec(name=name, wire_name=wire_name, location="query", type_name=type_name)


def _header(name: str, wire_name: str) -> ParamSpec:
    return ParamSpec(name=name, wire_name=wire_name, location="header")


def _path(wire_name: str) -> ParamSpec:
    name = wire_name.replace("-", "_")
    return ParamSpec(name=name, wire_name=wire_name, location="path")


LIST_QUERY = (
    _query("filter", "$filter"),
    _query("top", "$top"),
    _query("skip", "$skip"),
    _query("order_by", "$orderBy"),
    _query("count", "count", "bool"),
    _query("count_only", "countOnly", "bool"),
)

COMMON_HEADERS = (
    _header("avalara_version", "avalara-version"),
    _header("x_correlation_id", "X-Correlation-Id"),
)
IF_MATCH = _header("if_match", "If-Match")
IF_NONE_MATCH = _header("if_none_match", "If-None-Match")


# name -> (collection, path id, model, list model, scope)
RESOURCES = {
    "App": ("apps", "app-id", models.App, models.AppList, IAM_SCOPE),
    "Device": ("devices", "device-id", models.Device, models.DeviceList, IAM_SCOPE),
    "Entitlement": ("entitlements", "entitlement-id", models.Entitlement, models.EntitlementList, ""),
    "Feature": ("features", "feature-id", models.Feature, models.FeatureList, ""),
    "Grant": ("grants", "grant-id", models.Grant, models.GrantList, IAM_SCOPE),
    "Group": ("groups", "group-id", models.Group, models.GroupList, IAM_SCOPE),
    "Organization": ("organizations", "organization-id", models.Organization, models.OrganizationList, ""),
    "Permission": ("permissions", "permission-id", models.Permission, models.PermissionList, IAM_SCOPE),
    "Resource": ("resources", "resource-id", models.Resource, models.ResourceList, IAM_SCOPE),
    "Tenant": ("tenants", "tenant-id", models.Tenant, models.TenantList, ""),
    "User": ("users", "user-id", models.User, models.UserList, IAM_SCOPE),
}

# (parent, child chain) -> edge operations; the last resource of the chain is the one attached
EDGES = [
    ("App", ("Grant",), ("add", "remove", "list")),
    ("Feature", ("Grant",), ("list",)),
    ("Group", ("Device",), ("add", "remove", "list")),
    ("Group", ("Grant",), ("add", "remove", "list")),
    ("Group", ("User",), ("add", "remove", "list")),
    ("Organization", ("App",), ("list",)),
    ("Organization", ("Tenant",), ("list",)),
    ("Organization", ("User",), ("list",)),
    ("Resource", ("Permission",), ("list",)),
    ("Tenant", ("Device",), ("add", "remove", "list")),
    ("Tenant", ("Entitlement",), ("list",)),
    ("Tenant", ("Group",), ("list",)),
    ("Tenant", ("User",), ("add", "remove", "list")),
    ("Tenant", ("User", "Grant"), ("add", "remove", "list")),
    ("Tenant", ("User", "Group"), ("list",)),
]


def _descriptor(resource: str, operation_id: str, method: str, path: str, **fields) -> EndpointDescriptor:
    scope = RESOURCES[resource][4]
    path_params = tuple(_path(p) for p in PLACEHOLDER.findall(path))
    return EndpointDescriptor(
        operation_id=operation_id,
        api=f"{resource}Api",
        method=method,
        path_template=path,
        path_params=path_params,
        required_scope=scope,
        **fields,
    )


def crud_endpoints(resource: str) -> list[EndpointDescriptor]:
    """create / get / list / patch / replace / delete for one resource."""
    collection, id_name, model, list_model, _ = RESOURCES[resource]
    body_param = resource.lower()
    item = f"/{collection}/{{{id_name}}}"
    write = dict(
        body_param=body_param,
        body_type=model,
        content_types=(JSON,),
        accepts=EMPTY_ACCEPTS,
        header_params=COMMON_HEADERS + (IF_MATCH,),
    )
    return [
        _descriptor(
            resource, f"Create{resource}", "POST", f"/{collection}",
            body_param=body_param, body_type=model, content_types=(JSON,), accepts=BODY_ACCEPTS,
            header_params=COMMON_HEADERS, response=ResponseShape.of(model),
            summary=f"Create a new {resource.lower()}",
        ),
        _descriptor(
            resource, f"Get{resource}", "GET", item,
            accepts=BODY_ACCEPTS, header_params=COMMON_HEADERS + (IF_NONE_MATCH,),
            response=ResponseShape.of(model), summary=f"Retrieve a {resource.lower()}",
        ),
        _descriptor(
            resource, f"List{collection.title()}", "GET", f"/{collection}",
            accepts=BODY_ACCEPTS, query_params=LIST_QUERY, header_params=COMMON_HEADERS,
            response=ResponseShape.of(list_model), summary=f"List all {collection}",
        ),
        _descriptor(resource, f"Patch{resource}", "PATCH", item, summary=f"Update a {resource.lower()}", **write),
        _descriptor(resource, f"Replace{resource}", "PUT", item, summary=f"Replace a {resource.lower()}", **write),
        _descriptor(
            resource, f"Delete{resource}", "DELETE", item,
            accepts=EMPTY_ACCEPTS, header_params=COMMON_HEADERS + (IF_MATCH,),
            summary=f"Delete a {resource.lower()}",
        ),
    ]


def edge_endpoints(parent: str, chain: tuple[str, ...], verbs: tuple[str, ...]) -> list[EndpointDescriptor]:
    """Relationship operations such as AddGrantToApp or ListGroupUsers."""
    collection, id_name = RESOURCES[parent][:2]
    path = f"/{collection}/{{{id_name}}}"
    for link in chain[:-1]:
        link_collection, link_id = RESOURCES[link][:2]
        path += f"/{link_collection}/{{{link_id}}}"
    child = chain[-1]
    child_collection, child_id, _, child_list, _ = RESOURCES[child]
    owner = parent + "".join(chain[:-1])
    children = f"{path}/{child_collection}"

    endpoints = []
    for verb in verbs:
        if verb == "list":
            endpoints.append(_descriptor(
                parent, f"List{owner}{child_collection.title()}", "GET", children,
                accepts=BODY_ACCEPTS, query_params=LIST_QUERY, header_params=COMMON_HEADERS,
                response=ResponseShape.of(child_list),
                summary=f"List all {child_collection} of a {owner.lower()}",
            ))
        elif verb == "add":
            endpoints.append(_descriptor(
                parent, f"Add{child}To{owner}", "PUT", f"{children}/{{{child_id}}}",
                accepts=EMPTY_ACCEPTS, header_params=COMMON_HEADERS,
                summary=f"Add a {child.lower()} to a {owner.lower()}",
            ))
        elif verb == "remove":
            endpoints.append(_descriptor(
                parent, f"Remove{child}From{owner}", "DELETE", f"{children}/{{{child_id}}}",
                accepts=EMPTY_ACCEPTS, header_params=COMMON_HEADERS,
                summary=f"Remove a {child.lower()} from a {owner.lower()}",
            ))
        else:
            raise ValueError(f"Unknown edge verb: {verb}")
    return endpoints


def _resource_overrides(endpoints: list[EndpointDescriptor]) -> list[EndpointDescriptor]:
    """GetResource also takes If-Match; DeleteResource takes no precondition."""
    result = []
    for ep in endpoints:
        if ep.operation_id == "GetResource":
            ep = ep.model_copy(update={"header_params": COMMON_HEADERS + (IF_NONE_MATCH, IF_MATCH)})
        elif ep.operation_id == "DeleteResource":
            ep = ep.model_copy(update={"header_params": COMMON_HEADERS})
        result.append(ep)
    return result


def build_endpoints() -> dict[str, EndpointDescriptor]:
    """Build the full table, keyed by operation id."""
    endpoints: list[EndpointDescriptor] = []
    for resource in RESOURCES:
        endpoints.extend(crud_endpoints(resource))
    for parent, chain, verbs in EDGES:
        endpoints.extend(edge_endpoints(parent, chain, verbs))
    endpoints.append(_descriptor(
        "App", "CreateAppSecret", "POST", "/apps/{app-id}/secret",
        accepts=BODY_ACCEPTS, header_params=COMMON_HEADERS, response=ResponseShape.scalar(str),
        summary="Create or recreate the secret of an app",
    ))
    endpoints = _resource_overrides(endpoints)

    table: dict[str, EndpointDescriptor] = {}
    for ep in endpoints:
        if ep.operation_id in table:
            raise ValueError(f"Duplicate operation id: {ep.operation_id}")
        table[ep.operation_id] = ep
    return table


ENDPOINTS = build_endpoints()


def get_endpoint(operation_id: str, table: Mapping[str, EndpointDescriptor] | None = None) -> EndpointDescriptor:
    """Look up a descriptor by operation id (GetApp) or method name (get_app).

    Searches the built-in table unless another one is given.
    """
    table = ENDPOINTS if table is None else table
    if operation_id in table:
        return table[operation_id]
    for ep in table.values():
        if ep.method_name == operation_id:
            return ep
    raise KeyError(f"Unknown operation: {operation_id}")


def endpoints_for(api: str) -> list[EndpointDescriptor]:
    """All descriptors of one api (AppApi), in table order."""
    return [ep for ep in ENDPOINTS.values() if ep.api == api]


def api_names() -> list[str]:
    return sorted({ep.api for ep in ENDPOINTS.values()})
