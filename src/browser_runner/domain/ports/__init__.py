"""
Domain Ports

Port interfaces defining contracts between layers.
All dependencies on external systems are abstracted through ports.
"""

from .toolkit_port import IToolkitPort
from .workspace_port import IWorkspacePort
from .module_runner_port import IModuleRunnerPort
from .probe_port import IProbePort

__all__ = [
    "IToolkitPort",
    "IWorkspacePort",
    "IModuleRunnerPort",
    "IProbePort",
]
