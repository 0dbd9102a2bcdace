"""
Tests for the shared HTTP session helpers.
"""

import pytest
import requests
import responses

from vksdk.core.http import MAX_REDIRECTS, USER_AGENT, create_session, get_json


class TestCreateSession:
    """Test create_session()."""

    def test_headers(self):
        """Test user agent and keep-alive headers."""
        session = create_session()

        assert session.headers["User-Agent"] == USER_AGENT
        assert session.headers["Connection"] == "close"

    def test_redirect_limit(self):
        """Test redirects are limited."""
        assert create_session().max_redirects == MAX_REDIRECTS


class TestGetJson:
    """Test get_json()."""

    @responses.activate
    def test_decodes_body(self):
        """Test JSON body is decoded."""
        url = "https://vulkan.lunarg.com/sdk/latest.json"
        responses.add(responses.GET, url, json={"linux": "1.3.250.1"}, status=200)

        assert get_json(create_session(), url) == {"linux": "1.3.250.1"}

    @responses.activate
    def test_error_status_raises(self):
        """Test HTTP errors are raised."""
        url = "https://vulkan.lunarg.com/sdk/latest.json"
        responses.add(responses.GET, url, status=503)

        with pytest.raises(requests.HTTPError):
            get_json(create_session(), url)

    @responses.activate
    def test_invalid_json_raises_value_error(self):
        """Test non-JSON bodies raise ValueError."""
        url = "https://vulkan.lunarg.com/sdk/latest.json"
        responses.add(responses.GET, url, body="<html>", status=200)

        with pytest.raises(ValueError):
            get_json(create_session(), url)
