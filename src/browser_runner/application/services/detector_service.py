"""
Dev-Server Detector Service

Scatter/gather probing of local ports for running development servers.
"""

import asyncio
from typing import Iterable, List, Optional, Sequence

from browser_runner.domain.ports import IProbePort
from browser_runner.domain.services import build_candidate_ports
from browser_runner.domain.value_objects import ProbeResult
from browser_runner.infrastructure.logging import get_logger


logger = get_logger(__name__)


class DetectorService:
    """
    Finds locally running dev servers.

    Every candidate port is probed concurrently and each probe carries its
    own deadline, so a port that hangs or refuses cannot hold up or fail the
    scan of the others. Nothing is raised for an unreachable port.
    """

    def __init__(
        self,
        probe_port: IProbePort,
        baseline_ports: Sequence[int],
        probe_timeout: float = 0.5,
        grace: float = 0.25,
    ):
        """
        Initialize the detector.

        Args:
            probe_port: Port used to probe a single candidate
            baseline_ports: Common development ports always scanned
            probe_timeout: Per-probe timeout in seconds
            grace: Extra time allowed past probe_timeout before a probe is abandoned
        """
        self._probe_port = probe_port
        self._baseline_ports = list(baseline_ports)
        self._deadline = probe_timeout + grace

    async def _bounded_probe(self, port: int) -> ProbeResult:
        try:
            return await asyncio.wait_for(self._probe_port.probe(port), timeout=self._deadline)
        except asyncio.TimeoutError:
            logger.debug("Probe abandoned after deadline", port=port)
        except Exception as e:
            logger.debug("Probe failed", port=port, error=str(e))
        return ProbeResult(port=port, reachable=False)

    async def scan(self, extra_ports: Optional[Iterable[int]] = None) -> List[ProbeResult]:
        """
        Probe every candidate port.

        Args:
            extra_ports: Ports to check in addition to the baseline

        Returns:
            One ProbeResult per candidate, in candidate order
        """
        ports = build_candidate_ports(self._baseline_ports, extra_ports)
        logger.info("Checking for running dev servers", ports=ports)
        results = list(await asyncio.gather(*(self._bounded_probe(port) for port in ports)))
        for result in results:
            logger.debug("Probe finished", **result.to_dict())
        return results

    async def detect(self, extra_ports: Optional[Iterable[int]] = None) -> List[str]:
        """
        Return the base URLs of reachable dev servers.

        An empty list means nothing was found; more than one result is not
        an error and is left for the caller to choose from.
        """
        results = await self.scan(extra_ports)
        urls = [result.url for result in results if result.reachable]
        for url in urls:
            logger.info("Found server", url=url)
        if not urls:
            logger.info("No dev servers detected")
        return urls
