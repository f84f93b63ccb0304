"""Per-resource API classes.

Methods are bound from the endpoint table when each class is created: one
blocking method per operation (``get_app``) and an awaitable twin
(``get_app_async``). Positional arguments fill the path parameters in
template order, then the request body. Methods return the decoded data; use
``ApiClient.call`` to get status code and headers as well.
"""

from typing import Any

from iamds_client.client.api_client import ApiClient
from iamds_client.descriptor.base import EndpointDescriptor
from iamds_client.descriptor.table import endpoints_for


def _binder(descriptor: EndpointDescriptor):
    positional = [p.name for p in descriptor.path_params]
    if descriptor.body_param:
        positional.append(descriptor.body_param)

    def bind(args: tuple, kwargs: dict[str, Any]) -> dict[str, Any]:
        if len(args) > len(positional):
            raise TypeError(
                f"{descriptor.method_name}() takes at most {len(positional)} positional arguments ({len(args)} given)"
            )
        bound = dict(kwargs)
        for name, value in zip(positional, args):
            if name in bound:
                raise TypeError(f"{descriptor.method_name}() got multiple values for argument '{name}'")
            bound[name] = value
        return bound

    return bind


def operation(descriptor: EndpointDescriptor, asynchronous: bool = False):
    """Build the wrapper method for one descriptor."""
    bind = _binder(descriptor)

    if asynchronous:
        async def method(self, *args, **kwargs):
            response = await self.api_client.call_async(descriptor.operation_id, **bind(args, kwargs))
            return response.data
    else:
        def method(self, *args, **kwargs):
            return self.api_client.call(descriptor.operation_id, **bind(args, kwargs)).data

    method.__name__ = descriptor.method_name + ("_async" if asynchronous else "")
    method.__qualname__ = f"{descriptor.api}.{method.__name__}"
    method.__doc__ = f"{descriptor.summary}.\n\n{descriptor.method} {descriptor.path_template}"
    method.descriptor = descriptor
    return method


class ApiBase:
    """Base class; subclasses named after an api (AppApi) get its operations."""

    api_name = ""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.api_name = cls.__name__
        for descriptor in endpoints_for(cls.api_name):
            setattr(cls, descriptor.method_name, operation(descriptor))
            setattr(cls, f"{descriptor.method_name}_async", operation(descriptor, asynchronous=True))

    def __init__(self, api_client: ApiClient | None = None):
        self.api_client = api_client or ApiClient()


class AppApi(ApiBase):
    """Apps, their secrets and the grants attached to them."""


class DeviceApi(ApiBase):
    """Devices."""


class EntitlementApi(ApiBase):
    """Entitlements."""


class FeatureApi(ApiBase):
    """Features and the grants they bundle."""


class GrantApi(ApiBase):
    """Grants."""


class GroupApi(ApiBase):
    """Groups and their device, grant and user membership."""


class OrganizationApi(ApiBase):
    """Organizations and their apps, tenants and users."""


class PermissionApi(ApiBase):
    """Permissions."""


class ResourceApi(ApiBase):
    """Resources and their permissions."""


class TenantApi(ApiBase):
    """Tenants, their members and per-user grants."""


class UserApi(ApiBase):
    """Users."""
