"""
Tests for administrative HTTP calls.
"""

import httpx
import pytest

from sonarqube_fixture.admin_client import AdminClient, form_encode
from sonarqube_fixture.errors import AdminClientError

BASE_URL = "http://127.0.0.1:9000/"


class TestProjectUrl:
    """Test cases for project creation URL construction."""

    def test_name_parameter_carries_the_key(self, mock_http_client):
        client = AdminClient(BASE_URL, mock_http_client())

        url = client.project_url("k", "n")

        assert url == "http://127.0.0.1:9000/api/projects/create?key=k&name=k"

    def test_query_is_form_encoded(self, mock_http_client):
        client = AdminClient(BASE_URL, mock_http_client())

        url = client.project_url("my project", "My Project")

        assert url.endswith("?key=my+project&name=my+project")

    def test_reserved_characters_are_percent_encoded(self, mock_http_client):
        client = AdminClient(BASE_URL, mock_http_client())

        url = client.project_url("org:proj&x=1/ü", "ignored")

        assert url.endswith("?key=org%3Aproj%26x%3D1%2F%C3%BC&name=org%3Aproj%26x%3D1%2F%C3%BC")

    def test_base_url_callable(self, mock_http_client):
        ports = iter([9000, 9001])
        client = AdminClient(lambda: f"http://localhost:{next(ports)}/", mock_http_client())

        assert client.base_url == "http://localhost:9000"
        assert client.base_url == "http://localhost:9001"

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("a*b", "a*b"),
            ("a~b", "a%7Eb"),
            ("a.b-c_d", "a.b-c_d"),
            ("a b+c", "a+b%2Bc"),
        ],
    )
    def test_form_encode_matches_url_encoder(self, value, expected):
        assert form_encode(value) == expected


class TestCreateProject:
    """Test cases for project creation."""

    def test_success(self, mock_http_client):
        http_client = mock_http_client(200)

        assert AdminClient(BASE_URL, http_client).create_project("my project", "My Project")

        request = http_client.requests[0]
        assert request.method == "POST"
        assert request.content == b""
        assert str(request.url) == (
            "http://127.0.0.1:9000/api/projects/create?key=my+project&name=my+project"
        )

    @pytest.mark.parametrize("status", [201, 204, 400, 401, 403, 500])
    def test_other_status_is_false(self, mock_http_client, status):
        client = AdminClient(BASE_URL, mock_http_client(status))

        assert client.create_project("key", "name") is False

    def test_transport_failure_raises(self, mock_http_client):
        client = AdminClient(BASE_URL, mock_http_client(httpx.ConnectError("Connection refused")))

        with pytest.raises(AdminClientError, match="Request failed") as exc_info:
            client.create_project("key", "name")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_decoding_failure_raises(self, mock_http_client):
        client = AdminClient(BASE_URL, mock_http_client(httpx.DecodingError("Malformed body")))

        with pytest.raises(AdminClientError, match="Request failed"):
            client.create_project("key", "name")
