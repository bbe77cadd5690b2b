"""
Unit tests for DetectorService.

The probe port is replaced with async doubles so timing and ordering are
fully controlled.
"""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from browser_runner.application.services.detector_service import DetectorService
from browser_runner.domain.value_objects import ProbeResult


class ScriptedProbe:
    """Probe double answering from a table of reachable ports."""

    def __init__(self, reachable=(), hanging=(), failing=()):
        self.reachable = set(reachable)
        self.hanging = set(hanging)
        self.failing = set(failing)
        self.probed = []

    async def probe(self, port: int) -> ProbeResult:
        self.probed.append(port)
        if port in self.hanging:
            await asyncio.sleep(30)
        if port in self.failing:
            raise RuntimeError("socket exploded")
        return ProbeResult(port=port, reachable=port in self.reachable, status_code=200 if port in self.reachable else None)


@pytest.mark.unit
class TestDetectorService:
    """Tests for DetectorService."""

    @pytest.mark.asyncio
    async def test_single_server_on_3000(self):
        probe = ScriptedProbe(reachable={3000})
        detector = DetectorService(probe, [3000, 3001, 5173, 8080])

        assert await detector.detect() == ["http://localhost:3000"]

    @pytest.mark.asyncio
    async def test_nothing_running_is_empty_list(self):
        detector = DetectorService(ScriptedProbe(), [3000, 5173])

        assert await detector.detect() == []

    @pytest.mark.asyncio
    async def test_results_follow_candidate_order(self):
        probe = ScriptedProbe(reachable={8080, 3000, 9999})
        detector = DetectorService(probe, [3000, 5173, 8080])

        urls = await detector.detect(extra_ports=[9999, 3000])

        assert urls == ["http://localhost:3000", "http://localhost:8080", "http://localhost:9999"]
        assert sorted(probe.probed) == [3000, 5173, 8080, 9999]

    @pytest.mark.asyncio
    async def test_scan_returns_one_result_per_candidate(self):
        detector = DetectorService(ScriptedProbe(reachable={5173}), [3000, 5173, 3000])

        results = await detector.scan()

        assert [r.port for r in results] == [3000, 5173]
        assert [r.reachable for r in results] == [False, True]

    @pytest.mark.asyncio
    async def test_hanging_probe_is_bounded(self):
        probe = ScriptedProbe(reachable={3000}, hanging={5173})
        detector = DetectorService(probe, [3000, 5173], probe_timeout=0.1, grace=0.05)

        started = time.monotonic()
        urls = await detector.detect()
        elapsed = time.monotonic() - started

        assert urls == ["http://localhost:3000"]
        assert elapsed < 1.0

    @pytest.mark.asyncio
    async def test_probes_run_concurrently(self):
        probe = ScriptedProbe(hanging={3000, 3001, 3002, 5173, 8080})
        detector = DetectorService(probe, [3000, 3001, 3002, 5173, 8080], probe_timeout=0.1, grace=0.05)

        started = time.monotonic()
        await detector.scan()

        assert time.monotonic() - started < 0.5

    @pytest.mark.asyncio
    async def test_probe_exception_counts_as_unreachable(self):
        probe = ScriptedProbe(reachable={8000}, failing={3000})
        detector = DetectorService(probe, [3000, 8000])

        assert await detector.detect() == ["http://localhost:8000"]

    @pytest.mark.asyncio
    async def test_works_with_mock_port(self):
        mock_probe = AsyncMock()
        mock_probe.probe.side_effect = lambda port: ProbeResult(port=port, reachable=True)
        detector = DetectorService(mock_probe, [4200])

        assert await detector.detect() == ["http://localhost:4200"]
        mock_probe.probe.assert_awaited_once_with(4200)

    @pytest.mark.asyncio
    async def test_invalid_ports_are_skipped(self):
        probe = ScriptedProbe(reachable={3000})
        detector = DetectorService(probe, [3000])

        assert await detector.detect([0, 70000]) == ["http://localhost:3000"]
        assert probe.probed == [3000]

    @pytest.mark.asyncio
    async def test_only_invalid_ports_is_empty_scan(self):
        detector = DetectorService(ScriptedProbe(), [])

        assert await detector.scan([0, 70000]) == []
