"""
Contract tests for domain ports and their adapters.

Each port must stay abstract, and each adapter must implement it fully so
the services can be wired with either the real adapter or a test double.
"""

from abc import ABC

import pytest

from browser_runner.domain.ports import IModuleRunnerPort, IProbePort, IToolkitPort, IWorkspacePort
from browser_runner.infrastructure import (
    HttpProbeClient,
    InProcessModuleRunner,
    PlaywrightToolkit,
    TempWorkspace,
)
from support import FakeToolkit


PORTS_AND_ADAPTERS = [
    (IToolkitPort, PlaywrightToolkit),
    (IWorkspacePort, TempWorkspace),
    (IModuleRunnerPort, InProcessModuleRunner),
    (IProbePort, HttpProbeClient),
]


@pytest.mark.contract
class TestPortContracts:

    @pytest.mark.parametrize("port", [port for port, _ in PORTS_AND_ADAPTERS])
    def test_port_is_abstract(self, port):
        assert issubclass(port, ABC)
        with pytest.raises(TypeError):
            port()

    @pytest.mark.parametrize("port, adapter", PORTS_AND_ADAPTERS)
    def test_adapter_implements_port(self, port, adapter):
        assert issubclass(adapter, port)
        assert not adapter.__abstractmethods__

    def test_partial_implementation_is_rejected(self):
        class HalfToolkit(IToolkitPort):
            def is_installed(self) -> bool:
                return True

        with pytest.raises(TypeError):
            HalfToolkit()

    def test_test_double_honours_toolkit_contract(self):
        toolkit = FakeToolkit(installed=False)

        assert isinstance(toolkit, IToolkitPort)
        toolkit.install()
        assert toolkit.is_installed()

    def test_workspace_round_trip(self, work_dir):
        workspace: IWorkspacePort = TempWorkspace(work_dir)

        path = workspace.allocate_path()
        workspace.write_unit(path, "print(1)\n")

        assert workspace.list_units() == [path]
        assert workspace.cleanup_stale() == 1
        assert workspace.list_units() == []
