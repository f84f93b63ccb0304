import json
from unittest.mock import MagicMock

import httpx
import pytest
import requests
import respx

from iamds_client.client.config import Configuration
from iamds_client.client.transport import (
    AVALARA_CLIENT_HEADER,
    HttpxAsyncTransport,
    RequestsTransport,
    encode_body,
)
from iamds_client.exceptions import TransportError
from iamds_client.models import App


def _config(**kwargs) -> Configuration:
    values = dict(
        base_path="https://example.test/iam/",
        machine_name="host1",
        app_name="payroll",
        app_version="1.0",
    )
    values.update(kwargs)
    return Configuration(**values)


def _session(status_code=200, headers=None, content=b"{}") -> MagicMock:
    session = MagicMock()
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = headers or {"Content-Type": "application/json"}
    resp.content = content
    session.request.return_value = resp
    return session


class TestEncodeBody:
    def test_none(self):
        assert encode_body(None) is None

    def test_bytes_and_str_sent_as_is(self):
        assert encode_body(b"raw") == b"raw"
        assert encode_body("text") == b"text"

    def test_model_dumped_by_alias_without_none(self):
        assert json.loads(encode_body(App(display_name="Payroll"))) == {"displayName": "Payroll"}

    def test_dict_json_encoded(self):
        assert json.loads(encode_body({"displayName": "A", "tags": []})) == {"displayName": "A", "tags": []}


class TestRequestsTransport:
    def test_send(self):
        session = _session(content=b'{"id": "a"}')
        transport = RequestsTransport(_config(access_token="tok"), session=session)

        raw = transport.send("GET", "/apps/a", {"Accept": "text/plain"}, [("$top", "1")], None, "iam")

        assert raw.status_code == 200
        assert raw.body == b'{"id": "a"}'
        args, kwargs = session.request.call_args
        assert args == ("GET", "https://example.test/iam/apps/a")
        assert kwargs["params"] == [("$top", "1")]
        assert kwargs["data"] is None
        assert kwargs["timeout"] == 100.0
        assert kwargs["headers"]["Accept"] == "text/plain"
        assert kwargs["headers"]["Authorization"] == "Bearer tok"
        assert kwargs["headers"][AVALARA_CLIENT_HEADER] == "payroll; 1.0; PythonRestClient; 2.4.34; host1"

    def test_body_and_timeout(self):
        session = _session(status_code=201)
        transport = RequestsTransport(_config(), session=session)

        transport.send("POST", "/apps", {}, [], {"displayName": "A"}, "iam", timeout=3)

        kwargs = session.request.call_args.kwargs
        assert json.loads(kwargs["data"]) == {"displayName": "A"}
        assert kwargs["timeout"] == 3

    def test_token_provider_wins(self):
        session = _session()
        scopes = []

        def provider(scope):
            scopes.append(scope)
            return f"t-{len(scopes)}"

        transport = RequestsTransport(_config(access_token="static"), token_provider=provider, session=session)
        transport.send("GET", "/apps", {}, [], None, "iam TestScope TestScope1")

        assert scopes == ["iam TestScope TestScope1"]
        assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer t-1"

    def test_basic_auth(self):
        session = _session()
        transport = RequestsTransport(_config(username="u", password="p"), session=session)
        transport.send("GET", "/apps", {}, [], None, "")
        assert session.request.call_args.kwargs["headers"]["Authorization"] == "Basic dTpw"

    def test_no_credentials(self):
        session = _session()
        transport = RequestsTransport(_config(), session=session)
        transport.send("GET", "/apps", {}, [], None, "")
        assert "Authorization" not in session.request.call_args.kwargs["headers"]

    def test_request_headers_override_defaults(self):
        session = _session()
        transport = RequestsTransport(_config(default_headers={"X-Team": "a", "Accept": "*/*"}), session=session)
        transport.send("GET", "/apps", {"Accept": "text/plain"}, [], None, "")
        headers = session.request.call_args.kwargs["headers"]
        assert headers["X-Team"] == "a"
        assert headers["Accept"] == "text/plain"

    def test_library_error_becomes_transport_error(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("refused")
        transport = RequestsTransport(_config(), session=session)

        with pytest.raises(TransportError) as exc_info:
            transport.send("GET", "/apps", {}, [], None, "")

        assert exc_info.value.status_code == 0
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    def test_close(self):
        session = MagicMock()
        RequestsTransport(_config(), session=session).close()
        session.close.assert_called_once()


class TestHttpxAsyncTransport:
    @pytest.mark.asyncio
    async def test_send(self):
        with respx.mock() as router:
            route = router.route(method="GET", host="example.test", path="/iam/apps/a").mock(
                return_value=httpx.Response(200, json={"id": "a"})
            )
            transport = HttpxAsyncTransport(_config(access_token="tok"))

            raw = await transport.send("GET", "/apps/a", {"Accept": "application/json"}, [("$top", "1")], None, "iam")
            await transport.aclose()

        assert raw.status_code == 200
        assert json.loads(raw.body) == {"id": "a"}
        assert raw.is_json()
        request = route.calls.last.request
        assert request.url.params["$top"] == "1"
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.headers["Accept"] == "application/json"
        assert request.headers[AVALARA_CLIENT_HEADER].startswith("payroll; 1.0; PythonRestClient")

    @pytest.mark.asyncio
    async def test_repeated_query_keys(self):
        with respx.mock() as router:
            route = router.route(method="GET", host="example.test", path="/iam/apps").mock(
                return_value=httpx.Response(200, json={"items": []})
            )
            transport = HttpxAsyncTransport(_config())
            await transport.send("GET", "/apps", {}, [("$filter", "a"), ("$filter", "b")], None, "")
            await transport.aclose()

        assert route.calls.last.request.url.params.get_list("$filter") == ["a", "b"]

    @pytest.mark.asyncio
    async def test_body_sent_as_json(self):
        with respx.mock() as router:
            route = router.route(method="POST", host="example.test", path="/iam/apps").mock(
                return_value=httpx.Response(201, json={"id": "a"})
            )
            transport = HttpxAsyncTransport(_config())
            await transport.send("POST", "/apps", {"Content-Type": "application/json"}, [], App(display_name="A"), "")
            await transport.aclose()

        assert json.loads(route.calls.last.request.content) == {"displayName": "A"}

    @pytest.mark.asyncio
    async def test_library_error_becomes_transport_error(self):
        with respx.mock() as router:
            router.route(method="GET", host="example.test").mock(side_effect=httpx.ConnectError("refused"))
            transport = HttpxAsyncTransport(_config())
            with pytest.raises(TransportError) as exc_info:
                await transport.send("GET", "/apps", {}, [], None, "")
            await transport.aclose()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_injected_client_is_used(self):
        client = MagicMock()
        transport = HttpxAsyncTransport(_config(), client=client)
        assert transport.client is client
