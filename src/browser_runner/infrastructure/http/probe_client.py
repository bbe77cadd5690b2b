"""
HTTP probe client for local dev servers.

Implements IProbePort with a HEAD request per port. Any answer below 500
means something HTTP-speaking is listening; refused, reset or timed-out
connections are reported as unreachable and never raised.
"""

import httpx
from typing import Optional

from browser_runner.domain.ports import IProbePort
from browser_runner.domain.value_objects import ProbeResult
from browser_runner.infrastructure.logging import get_logger


logger = get_logger(__name__)


class HttpProbeClient(IProbePort):
    """
    Async HEAD prober for ``http://<host>:<port>/``.

    A single ``httpx.AsyncClient`` is shared by concurrent probes; it holds
    no per-probe state.
    """

    def __init__(
        self,
        host: str = "localhost",
        timeout: float = 0.5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the probe client.

        Args:
            host: Host to probe
            timeout: Per-request timeout in seconds (connect, read and pool)
            client: Optional preconfigured client, mainly for tests
        """
        self.host = host
        self.timeout = httpx.Timeout(timeout)
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Proxies from the environment must not intercept localhost probes.
            self._client = httpx.AsyncClient(timeout=self.timeout, trust_env=False)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "HttpProbeClient":
        await self._get_client()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def probe(self, port: int) -> ProbeResult:
        url = f"http://{self.host}:{port}/"
        try:
            client = await self._get_client()
            response = await client.head(url, timeout=self.timeout)
        except (httpx.HTTPError, OSError) as e:
            logger.debug("Port unreachable", port=port, error=type(e).__name__)
            return ProbeResult(port=port, reachable=False)

        reachable = response.status_code < 500
        logger.debug("Port answered", port=port, status_code=response.status_code, reachable=reachable)
        return ProbeResult(port=port, reachable=reachable, status_code=response.status_code)
