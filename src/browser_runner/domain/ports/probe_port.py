"""
Probe Port Interface

Defines the contract for checking whether a local port serves HTTP.
"""

from abc import ABC, abstractmethod

from browser_runner.domain.value_objects import ProbeResult


class IProbePort(ABC):
    """
    Port interface for dev-server probes.

    Implementations must absorb every transport failure and report it as
    an unreachable result; ``probe`` never raises.
    """

    @abstractmethod
    async def probe(self, port: int) -> ProbeResult:
        """
        Probe a single localhost port.

        Args:
            port: Candidate port

        Returns:
            ProbeResult classifying the port
        """
        pass
