"""Tests for the ownership-enforcing transport wrapper."""

import httpx
import pytest

from service_client_core.transport.ownership import OwnershipTransport


class TestOwnershipTransport:
    """Close is forwarded only when the wrapper owns the transport."""

    @pytest.mark.unit
    async def test_forwards_requests(self, shared_transport):
        wrapper = OwnershipTransport(shared_transport, owns_transport=False)

        async with httpx.AsyncClient(transport=wrapper) as client:
            response = await client.get("https://api.example.com/ping")

        assert response.status_code == 200
        assert len(shared_transport.requests) == 1

    @pytest.mark.unit
    async def test_does_not_close_unowned_transport(self, shared_transport):
        wrapper = OwnershipTransport(shared_transport, owns_transport=False)

        await wrapper.aclose()

        assert wrapper.closed
        assert shared_transport.close_count == 0

    @pytest.mark.unit
    async def test_closes_owned_transport_exactly_once(self, shared_transport):
        wrapper = OwnershipTransport(shared_transport, owns_transport=True)

        await wrapper.aclose()
        await wrapper.aclose()

        assert shared_transport.close_count == 1

    @pytest.mark.unit
    def test_exposes_wrapped_transport(self, shared_transport):
        wrapper = OwnershipTransport(shared_transport, owns_transport=True)

        assert wrapper.transport is shared_transport
        assert wrapper.owns_transport is True
        assert not wrapper.closed
