"""
Tests for the provider connection check.
"""
import pytest

from iptv_ingest.services.connection_service import check_connection


class TestCheckConnection:
    """Settings validation and response classification."""

    @pytest.mark.parametrize(
        "field,value,details",
        [
            ("server", "", "Server is empty"),
            ("port", 0, "Port is invalid"),
            ("username", " ", "Username is empty"),
            ("password", "", "Password is empty"),
        ],
    )
    def test_invalid_settings_skip_request(self, transport, provider, field, value, details):
        setattr(provider, field, value)
        result = check_connection(transport, provider)
        assert not result.ok
        assert result.details == details
        assert transport.calls == []

    def test_user_info_marker(self, transport, provider):
        transport.add("player_api.php", b'{"user_info":{"auth":1},"server_info":{}}', protocol="")
        result = check_connection(transport, provider)
        assert result.ok
        assert result.details == "OK"
        assert transport.calls[0][0] == "http://provider.example:8080/player_api.php?username=user&password=secret"

    def test_status_200_without_markers(self, transport, provider):
        transport.add("player_api.php", b"<html>hello</html>")
        result = check_connection(transport, provider)
        assert result.ok
        assert result.details == "HTTP/1.1 200 OK"

    def test_transport_failure(self, transport, provider):
        transport.add("player_api.php", b"", protocol="HTTP/1.1 401 Unauthorized", ok=False)
        result = check_connection(transport, provider)
        assert not result.ok
        assert result.details == "HTTP/1.1 401 Unauthorized"

    def test_transport_failure_without_status(self, transport, provider):
        assert check_connection(transport, provider).details == "Failed to open URL"

    def test_unrecognised_body(self, transport, provider):
        transport.add("player_api.php", b"nothing useful", protocol="")
        result = check_connection(transport, provider)
        assert not result.ok
        assert result.details == "Unexpected response"

    def test_empty_body(self, transport, provider):
        transport.add("player_api.php", b"", protocol="")
        assert check_connection(transport, provider).details == "Empty response"

    def test_body_over_cap(self, transport, provider):
        provider.max_response_bytes = 10
        transport.add("player_api.php", b'{"user_info":{"auth":1}}')
        result = check_connection(transport, provider)
        assert not result.ok
        assert result.details == "Body too large"
