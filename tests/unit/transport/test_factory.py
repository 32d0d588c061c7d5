"""Tests for the default HTTP transport factory."""

import httpx
import pytest

from service_client_core.transport.factory import HTTPTransportFactory, TransportDefaults
from service_client_core.transport.selection import TransportFactory


class TestHTTPTransportFactory:
    """Test HTTPTransportFactory."""

    @pytest.mark.unit
    def test_satisfies_protocol(self):
        assert isinstance(HTTPTransportFactory(), TransportFactory)

    @pytest.mark.unit
    async def test_builds_new_transport_each_call(self):
        factory = HTTPTransportFactory(max_connections=5)

        first = factory.build()
        second = factory.build()

        assert isinstance(first, httpx.AsyncHTTPTransport)
        assert first is not second

        await first.aclose()
        await second.aclose()

    @pytest.mark.unit
    def test_unset_fields_take_service_defaults(self):
        defaults = TransportDefaults(max_connections=8, http2=True, verify=False)

        settings = HTTPTransportFactory().settings_with_defaults(defaults)

        assert settings == defaults

    @pytest.mark.unit
    def test_set_fields_win_over_service_defaults(self):
        defaults = TransportDefaults(max_connections=8, connect_retries=2)

        settings = HTTPTransportFactory(max_connections=3, verify=False).settings_with_defaults(defaults)

        assert settings.max_connections == 3
        assert settings.verify is False
        assert settings.connect_retries == 2

    @pytest.mark.unit
    async def test_build_with_defaults_returns_http_transport(self):
        transport = HTTPTransportFactory().build_with_defaults(TransportDefaults(max_connections=4))

        assert isinstance(transport, httpx.AsyncHTTPTransport)
        await transport.aclose()
