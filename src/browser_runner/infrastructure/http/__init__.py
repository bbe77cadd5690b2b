"""
HTTP Infrastructure

Local dev-server probing.
"""

from .probe_client import HttpProbeClient

__all__ = ["HttpProbeClient"]
