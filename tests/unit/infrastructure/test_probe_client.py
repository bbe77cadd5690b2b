"""
Unit tests for the HTTP probe client.

Probes run against throwaway loopback servers; nothing leaves the host.
"""

import time

import httpx
import pytest

from browser_runner.infrastructure.http.probe_client import HttpProbeClient
from support import closed_ports, serve_status, silent_listener


@pytest.mark.unit
class TestHttpProbeClient:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 301, 404])
    async def test_answer_below_500_is_reachable(self, status):
        with serve_status(status) as port:
            async with HttpProbeClient(host="127.0.0.1", timeout=1.0) as client:
                result = await client.probe(port)

        assert result.reachable is True
        assert result.status_code == status
        assert result.url == f"http://localhost:{port}"

    @pytest.mark.asyncio
    async def test_server_error_is_unreachable(self):
        with serve_status(503) as port:
            async with HttpProbeClient(host="127.0.0.1", timeout=1.0) as client:
                result = await client.probe(port)

        assert result.reachable is False
        assert result.status_code == 503

    @pytest.mark.asyncio
    async def test_refused_connection_is_unreachable(self):
        port = closed_ports(1)[0]

        async with HttpProbeClient(host="127.0.0.1", timeout=0.5) as client:
            result = await client.probe(port)

        assert result.reachable is False
        assert result.status_code is None

    @pytest.mark.asyncio
    async def test_silent_listener_times_out(self):
        with silent_listener() as port:
            started = time.monotonic()
            async with HttpProbeClient(host="127.0.0.1", timeout=0.2) as client:
                result = await client.probe(port)
            elapsed = time.monotonic() - started

        assert result.reachable is False
        assert elapsed < 2.0

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200))
        shared = httpx.AsyncClient(transport=transport)
        probe = HttpProbeClient(client=shared)

        result = await probe.probe(4321)
        await probe.close()

        assert result.reachable is True
        assert result.port == 4321
        assert not shared.is_closed
        await shared.aclose()

    @pytest.mark.asyncio
    async def test_probe_sends_head_to_root(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, str(request.url)))
            return httpx.Response(204)

        shared = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        probe = HttpProbeClient(client=shared)

        await probe.probe(5173)
        await shared.aclose()

        assert seen == [("HEAD", "http://localhost:5173/")]
