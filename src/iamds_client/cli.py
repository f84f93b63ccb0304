"""CLI entry point for iamds-client."""

import json
import logging
from fnmatch import fnmatchcase
from pathlib import Path

import click
from pydantic import BaseModel

from iamds_client.client.api_client import ApiClient
from iamds_client.client.config import Configuration
from iamds_client.descriptor.base import EndpointDescriptor
from iamds_client.descriptor.openapi import parse_openapi
from iamds_client.descriptor.table import ENDPOINTS
from iamds_client.exceptions import OperationError
from iamds_client.generator.wrappers import WrapperGenerator


def _filter_endpoints(endpoints: list[EndpointDescriptor], patterns: tuple[str, ...]) -> list[EndpointDescriptor]:
    """Keep endpoints matching any "METHOD /path/*" or "/path/*" pattern."""
    result = []
    for ep in endpoints:
        for pattern in patterns:
            method, _, path = pattern.strip().rpartition(" ")
            if method and method.upper() != ep.method:
                continue
            if fnmatchcase(ep.path_template, path):
                result.append(ep)
                break
    return result


def _select(endpoints: list[EndpointDescriptor], api: str | None, patterns: tuple[str, ...]) -> list[EndpointDescriptor]:
    if api:
        endpoints = [ep for ep in endpoints if ep.api == api]
    if patterns:
        endpoints = _filter_endpoints(endpoints, patterns)
    return endpoints


def _parse_params(pairs: tuple[str, ...]) -> dict:
    """name=value pairs; a repeated name collects its values into a list."""
    args: dict = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"Expected name=value, got {pair!r}", param_hint="--param")
        if name in args:
            previous = args[name]
            args[name] = (previous if isinstance(previous, list) else [previous]) + [value]
        else:
            args[name] = value
    return args


def _render(data) -> str:
    if isinstance(data, BaseModel):
        return data.model_dump_json(by_alias=True, exclude_none=True, indent=2)
    if isinstance(data, (dict, list)):
        return json.dumps(data, indent=2)
    return str(data)


def _echo_endpoints(endpoints: list[EndpointDescriptor]) -> None:
    for ep in endpoints:
        click.echo(f"{ep.method:<7} {ep.path_template:<60} {ep.operation_id} ({ep.api})")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """IAM directory service client."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")


@main.command()
@click.option("--api", default=None, help="Only endpoints of this api, e.g. AppApi.")
@click.option("-m", "--match", "patterns", multiple=True, help='Filter like "GET /apps/*" or "/groups/*".')
def endpoints(api: str | None, patterns: tuple[str, ...]):
    """List the operations of the endpoint table."""
    selected = _select(list(ENDPOINTS.values()), api, patterns)
    _echo_endpoints(selected)
    click.echo(f"{len(selected)} endpoints.")


@main.command()
@click.argument("operation")
@click.option("-p", "--param", "params", multiple=True, help="Argument as name=value; repeat for lists.")
@click.option("--body", "body_path", default=None, type=click.Path(exists=True, path_type=Path), help="JSON file sent as the request body.")
@click.option("--base-path", default=None, help="Service base URL (overrides IAMDS_BASE_PATH).")
@click.option("--token", default=None, help="Bearer token (overrides IAMDS_ACCESS_TOKEN).")
def call(operation: str, params: tuple[str, ...], body_path: Path | None, base_path: str | None, token: str | None):
    """Call one operation, e.g. GetApp -p app_id=a-1."""
    if operation not in ENDPOINTS and not any(ep.method_name == operation for ep in ENDPOINTS.values()):
        raise click.BadParameter(f"Unknown operation: {operation}", param_hint="OPERATION")

    args = _parse_params(params)
    if body_path is not None:
        descriptor = next(ep for ep in ENDPOINTS.values() if operation in (ep.operation_id, ep.method_name))
        if not descriptor.body_param:
            raise click.UsageError(f"{descriptor.operation_id} takes no request body")
        args[descriptor.body_param] = json.loads(body_path.read_text(encoding="utf-8"))

    configuration = Configuration.from_env(base_path=base_path, access_token=token)
    try:
        with ApiClient(configuration) as client:
            response = client.call(operation, **args)
    except OperationError as e:
        raise click.ClickException(str(e)) from e
    except TypeError as e:
        raise click.UsageError(str(e)) from e

    click.echo(f"HTTP {response.status_code}")
    if response.data is not None:
        click.echo(_render(response.data))


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-m", "--match", "patterns", multiple=True, help='Filter like "GET /apps/*" or "/groups/*".')
def inspect(doc_path: Path, patterns: tuple[str, ...]):
    """Show the endpoints an OpenAPI document describes."""
    click.echo(f"Parsing {doc_path}...")
    try:
        found = parse_openapi(doc_path)
    except ValueError as e:
        raise click.ClickException(f"Invalid document: {e}") from e
    selected = _select(found, None, patterns)
    _echo_endpoints(selected)
    click.echo(f"Found {len(selected)} endpoints.")


@main.command()
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for generated modules.")
@click.option("--api", default=None, help="Only generate this api, e.g. GroupApi.")
@click.option("--doc", "doc_path", default=None, type=click.Path(exists=True, path_type=Path), help="Generate from an OpenAPI document instead of the built-in table.")
@click.option("--no-async", is_flag=True, help="Skip the async twins.")
def gen_wrappers(output: Path, api: str | None, doc_path: Path | None, no_async: bool):
    """Generate typed wrapper modules."""
    descriptors = parse_openapi(doc_path) if doc_path else list(ENDPOINTS.values())
    descriptors = _select(descriptors, api, ())
    if not descriptors:
        raise click.ClickException("No endpoints selected.")

    try:
        files = WrapperGenerator(include_async=not no_async).generate(descriptors)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    output.mkdir(parents=True, exist_ok=True)
    for filename, content in files.items():
        file_path = output / filename
        file_path.write_text(content, encoding="utf-8")
        click.echo(f"  Created {file_path}")

    click.echo(f"Generated {len(files)} files in {output}")
