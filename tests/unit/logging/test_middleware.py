"""Tests for the access-log helpers."""

from unittest.mock import patch

import pytest
from starlette.requests import Request

from leaselink.core.logging.middleware import get_client_ip, route_template


pytestmark = pytest.mark.unit


def make_request(
    headers: dict[str, str] | None = None,
    client: tuple[str, int] | None = ("10.0.0.5", 4321),
    path: str = "/api/v1/properties",
    route: object | None = None,
) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
        "server": ("test", 80),
        "scheme": "http",
    }
    if route is not None:
        scope["route"] = route
    return Request(scope)


class TestGetClientIp:
    """Tests for get_client_ip."""

    def test_uses_socket_peer_by_default(self):
        request = make_request(headers={"X-Forwarded-For": "203.0.113.9"})

        assert get_client_ip(request) == "10.0.0.5"

    def test_honours_forwarded_for_when_trusted(self):
        request = make_request(headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

        with patch("leaselink.core.logging.middleware.settings") as mock_settings:
            mock_settings.trust_forwarded_for = True
            assert get_client_ip(request) == "203.0.113.9"

    def test_falls_back_to_real_ip_when_trusted(self):
        request = make_request(headers={"X-Real-IP": " 198.51.100.7 "})

        with patch("leaselink.core.logging.middleware.settings") as mock_settings:
            mock_settings.trust_forwarded_for = True
            assert get_client_ip(request) == "198.51.100.7"

    def test_no_client(self):
        assert get_client_ip(make_request(client=None)) is None


class TestRouteTemplate:
    """Tests for route_template."""

    def test_prefers_matched_route(self):
        class Route:
            path = "/api/v1/properties/{property_id}"

        request = make_request(path="/api/v1/properties/abc", route=Route())

        assert route_template(request) == "/api/v1/properties/{property_id}"

    def test_falls_back_to_raw_path(self):
        assert route_template(make_request(path="/nowhere")) == "/nowhere"
