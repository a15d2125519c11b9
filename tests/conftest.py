"""Test configuration for dvs_nioc package."""

import copy
import logging
from types import SimpleNamespace

import pytest


def make_entry(key, level="normal", shares=50, limit=-1, reservation=0):
    """Build a stand-in for vim.DistributedVirtualSwitch.HostInfrastructureTrafficResource."""
    return SimpleNamespace(
        key=key,
        allocationInfo=SimpleNamespace(
            shares=SimpleNamespace(level=level, shares=shares),
            limit=limit,
            reservation=reservation,
        ),
    )


def make_switch(name="dvs01", config_version="7"):
    """Build a stand-in for a distributed switch with the nine default NIOC entries."""
    entries = [
        make_entry("management"),
        make_entry("faultTolerance"),
        make_entry("vmotion"),
        make_entry("virtualMachine", level="high", shares=100),
        make_entry("iSCSI"),
        make_entry("nfs"),
        make_entry("hbr"),
        make_entry("vsan"),
        make_entry("vdp"),
    ]
    return SimpleNamespace(
        name=name,
        config=SimpleNamespace(configVersion=config_version, infrastructureTrafficResourceConfig=entries),
    )


class FakeClient:
    """In-memory replacement for VSphereClient that records every call."""

    def __init__(self, switches=None, reconfigure_error=None, lookup_error=None):
        self.switches = list(switches or [])
        self.reconfigure_error = reconfigure_error
        self.lookup_error = lookup_error
        self.lookups = []
        self.reconfigure_calls = []
        self.entered = False
        self.exited = False

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exited = True

    def find_switches(self, name):
        self.lookups.append(name)
        if self.lookup_error is not None:
            raise self.lookup_error
        return [sw for sw in self.switches if sw.name == name]

    def reconfigure_traffic_resources(self, switch, config_version, entries):
        self.reconfigure_calls.append(
            {"switch": switch, "config_version": config_version, "entries": copy.deepcopy(entries)}
        )
        if self.reconfigure_error is not None:
            raise self.reconfigure_error
        # vCenter bumps the version on every successful reconfigure.
        switch.config.configVersion = str(int(config_version) + 1)

    def submitted_entry(self, key, call=-1):
        for entry in self.reconfigure_calls[call]["entries"]:
            if entry.key == key:
                return entry
        raise KeyError(key)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() replaces root handlers; put pytest's back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def switch():
    return make_switch()


@pytest.fixture
def client(switch):
    return FakeClient([switch])
