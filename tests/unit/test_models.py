"""Unit tests for dvs_nioc.models module."""

import pytest
from pyVmomi import vim

from dvs_nioc.models import (
    ErrorKind,
    ShareError,
    ShareLevel,
    ShareResult,
    SwitchHandle,
    SwitchName,
    TrafficType,
    as_switch_ref,
    parse_share_level,
    parse_traffic_type,
)


class TestTrafficType:

    def test_vsphere_keys(self):
        assert [t.value for t in TrafficType] == [
            "management", "faultTolerance", "vmotion", "virtualMachine",
            "iSCSI", "nfs", "hbr", "vsan", "vdp",
        ]

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("vMotion", TrafficType.VMOTION),
            ("ISCSI", TrafficType.ISCSI),
            ("FaultTolerance", TrafficType.FAULT_TOLERANCE),
            ("vSAN", TrafficType.VSAN),
            ("replication", TrafficType.HBR),
            ("Backup", TrafficType.VDP),
            (" vm ", TrafficType.VIRTUAL_MACHINE),
            (TrafficType.NFS, TrafficType.NFS),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_traffic_type(raw) is expected

    @pytest.mark.parametrize("raw", ["storage", "", None, 1])
    def test_parse_rejects(self, raw):
        assert parse_traffic_type(raw) is None


class TestShareLevel:

    def test_levels(self):
        assert [level.value for level in ShareLevel] == ["low", "normal", "high", "custom"]

    def test_parse_case_insensitive(self):
        assert parse_share_level("Normal") is ShareLevel.NORMAL
        assert parse_share_level("CUSTOM") is ShareLevel.CUSTOM

    def test_parse_rejects(self):
        assert parse_share_level("medium") is None
        assert parse_share_level(3) is None


class TestSwitchRef:

    def test_name(self):
        assert as_switch_ref("dvs01") == SwitchName("dvs01")

    def test_blank_name(self):
        assert as_switch_ref("") is None

    def test_passthrough(self):
        ref = SwitchName("dvs01")
        assert as_switch_ref(ref) is ref

    def test_managed_object_becomes_handle(self):
        dvs = vim.dvs.VmwareDistributedVirtualSwitch("dvs-21")
        ref = as_switch_ref(dvs)
        assert isinstance(ref, SwitchHandle)
        assert ref.switch is dvs

    def test_other_managed_object_rejected(self):
        assert as_switch_ref(vim.VirtualMachine("vm-1")) is None

    def test_unrecognized(self):
        assert as_switch_ref(object()) is None


class TestShareResult:

    def test_ok_without_error(self):
        result = ShareResult(switch="sw")
        assert result.ok
        result.raise_for_error()

    def test_raises_share_error(self):
        result = ShareResult(error=ShareError(ErrorKind.NOT_FOUND, "gone"))
        with pytest.raises(ShareError) as excinfo:
            result.raise_for_error()
        assert excinfo.value.kind == ErrorKind.NOT_FOUND
        assert str(excinfo.value) == "gone"

    def test_remote_cause_raised_verbatim(self):
        cause = vim.fault.NoPermission(msg="denied")
        result = ShareResult(error=ShareError(ErrorKind.REMOTE, "failed", cause))
        with pytest.raises(vim.fault.NoPermission) as excinfo:
            result.raise_for_error()
        assert excinfo.value is cause
