"""Typed resources of the IAM directory service.

Field names are snake_case in Python and camelCase on the wire. Unknown
fields returned by the service are kept rather than rejected.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IamdsModel(BaseModel):
    """Base for every resource model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Reference(IamdsModel):
    identifier: str
    display_name: str | None = None
    location: str | None = None


class InstanceMeta(IamdsModel):
    created: str | None = None
    created_by: str | None = None
    last_modified: str | None = None
    modified_by: str | None = None
    location: str | None = None
    version: str | None = None


class Aspect(IamdsModel):
    namespace: str | None = None
    identifier: str | None = None
    display_name: str | None = None
    location: str | None = None


class Tag(IamdsModel):
    name: str
    value: str | None = None


class Instance(IamdsModel):
    """Fields shared by every top-level resource."""

    id: str | None = None
    meta: InstanceMeta | None = None
    aspects: list[Aspect] | None = None
    tags: list[Tag] | None = None


class App(Instance):
    type: str | None = None
    display_name: str | None = None
    organization: Reference | None = None
    is_tenant_agnostic: bool | None = None
    is_org_agnostic: bool | None = None
    tenants: list[Reference] | None = None
    client_id: str | None = None
    redirect_uris: list[str] | None = None
    grants: list[Reference] | None = None


class Device(Instance):
    display_name: str | None = None
    tenant: Reference | None = None
    identity: str | None = None
    active: bool | None = None
    grants: list[Reference] | None = None
    groups: list[Reference] | None = None


class Entitlement(Instance):
    display_name: str | None = None
    system: Reference | None = None
    tenant: Reference | None = None
    active: bool | None = None
    features: list[Reference] | None = None
    custom_grants: list[Reference] | None = None


class Feature(Instance):
    display_name: str | None = None
    description: str | None = None
    system: Reference | None = None
    grants: list[Reference] | None = None


class Grant(Instance):
    display_name: str | None = None
    type: str | None = None
    system: Reference | None = None
    role: Reference | None = None


class Group(Instance):
    external_id: str | None = None
    display_name: str | None = None
    tenant: Reference | None = None
    members: list[Reference] | None = None
    grants: list[Reference] | None = None


class Organization(Instance):
    display_name: str | None = None
    parent: Reference | None = None


class Permission(Instance):
    display_name: str | None = None
    description: str | None = None
    system: Reference | None = None
    resource: Reference | None = None


class Resource(Instance):
    namespace: str | None = None
    display_name: str | None = None
    system: Reference | None = None
    properties: list[str] | None = None


class Tenant(Instance):
    display_name: str | None = None
    organization: Reference | None = None


class User(Instance):
    external_id: str | None = None
    user_name: str | None = None
    organization: Reference | None = None
    display_name: str | None = None
    nick_name: str | None = None
    title: str | None = None
    user_type: str | None = None
    preferred_language: str | None = None
    locale: str | None = None
    timezone: str | None = None
    active: bool | None = None
    password: str | None = None
    emails: list[dict] | None = None
    phone_numbers: list[dict] | None = None
    default_tenant: Reference | None = None


# -- paged lists --------------------------------------------------------------

ItemT = TypeVar("ItemT")


class PagedList(IamdsModel, Generic[ItemT]):
    """One page of a list operation."""

    recordset_count: int | None = Field(default=None, alias="@recordsetCount")
    next_link: str | None = Field(default=None, alias="@nextLink")
    page_key: str | None = None
    items: list[ItemT] = []


class AppList(PagedList[App]):
    pass


class DeviceList(PagedList[Device]):
    pass


class EntitlementList(PagedList[Entitlement]):
    pass


class FeatureList(PagedList[Feature]):
    pass


class GrantList(PagedList[Grant]):
    pass


class GroupList(PagedList[Group]):
    pass


class OrganizationList(PagedList[Organization]):
    pass


class PermissionList(PagedList[Permission]):
    pass


class ResourceList(PagedList[Resource]):
    pass


class TenantList(PagedList[Tenant]):
    pass


class UserList(PagedList[User]):
    pass


MODELS: dict[str, type[IamdsModel]] = {
    cls.__name__: cls
    for cls in (
        Reference, InstanceMeta, Aspect, Tag,
        App, Device, Entitlement, Feature, Grant, Group, Organization, Permission, Resource, Tenant, User,
        AppList, DeviceList, EntitlementList, FeatureList, GrantList, GroupList,
        OrganizationList, PermissionList, ResourceList, TenantList, UserList,
    )
}
