"""
Integration tests for dev-server detection and link checking against real
loopback sockets.
"""

import time

import pytest

from browser_runner import helpers
from browser_runner.application.services.detector_service import DetectorService
from browser_runner.infrastructure.http.probe_client import HttpProbeClient
from support import closed_ports, serve_status, silent_listener


@pytest.mark.integration
class TestDetection:

    @pytest.mark.asyncio
    async def test_finds_running_server_among_dead_ports(self):
        dead = closed_ports(3)
        with serve_status(200) as live:
            async with HttpProbeClient(host="127.0.0.1", timeout=0.5) as client:
                detector = DetectorService(client, dead + [live])
                urls = await detector.detect()

        assert urls == [f"http://localhost:{live}"]

    @pytest.mark.asyncio
    async def test_silent_port_does_not_stall_scan(self):
        with silent_listener() as silent, serve_status(404) as live:
            started = time.monotonic()
            async with HttpProbeClient(host="127.0.0.1", timeout=0.2) as client:
                detector = DetectorService(client, [silent, live], probe_timeout=0.2, grace=0.1)
                results = await detector.scan()
            elapsed = time.monotonic() - started

        assert [r.reachable for r in results] == [False, True]
        assert elapsed < 2.0

    @pytest.mark.asyncio
    async def test_server_errors_are_not_reported(self):
        with serve_status(500) as broken:
            async with HttpProbeClient(host="127.0.0.1", timeout=0.5) as client:
                urls = await DetectorService(client, [broken]).detect()

        assert urls == []

    @pytest.mark.asyncio
    async def test_out_of_range_ports_do_not_abort_scan(self):
        with serve_status(200) as live:
            async with HttpProbeClient(host="127.0.0.1", timeout=0.5) as client:
                urls = await DetectorService(client, [], 0.2).detect([0, 70000, live])

        assert urls == [f"http://localhost:{live}"]

    @pytest.mark.asyncio
    async def test_helper_reports_nothing_found(self, monkeypatch, capsys):
        monkeypatch.setattr(helpers.get_settings(), "dev_server_ports", closed_ports(2))

        servers = await helpers.detect_dev_servers(timeout=0.2)

        assert servers == []
        out = capsys.readouterr().out
        assert "Checking for running dev servers..." in out
        assert "No dev servers detected" in out


@pytest.mark.integration
class TestCheckLinks:

    @pytest.mark.asyncio
    async def test_mixed_links(self):
        dead = closed_ports(1)[0]
        with serve_status(200) as good, serve_status(404) as missing:
            urls = [
                f"http://127.0.0.1:{good}/",
                f"http://127.0.0.1:{missing}/gone",
                f"http://127.0.0.1:{good}/",
                f"http://127.0.0.1:{dead}/",
                "mailto:someone@example.com",
            ]
            results = await helpers.check_links(urls, timeout=1.0)

        assert [r.url for r in results] == [
            f"http://127.0.0.1:{good}/",
            f"http://127.0.0.1:{missing}/gone",
            f"http://127.0.0.1:{dead}/",
        ]
        assert [r.ok for r in results] == [True, False, False]
        assert results[1].status_code == 404
        assert results[2].error is not None
