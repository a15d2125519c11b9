from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union

from pyVmomi import vim


class TrafficType(str, Enum):
    """NIOC infrastructure traffic classes, valued by their vSphere resource key."""

    MANAGEMENT = "management"
    FAULT_TOLERANCE = "faultTolerance"
    VMOTION = "vmotion"
    VIRTUAL_MACHINE = "virtualMachine"
    ISCSI = "iSCSI"
    NFS = "nfs"
    HBR = "hbr"
    VSAN = "vsan"
    VDP = "vdp"


class ShareLevel(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CUSTOM = "custom"


# Extra spellings accepted on input, lowercased.
_TRAFFIC_ALIASES = {
    "ft": TrafficType.FAULT_TOLERANCE,
    "fault-tolerance": TrafficType.FAULT_TOLERANCE,
    "vm": TrafficType.VIRTUAL_MACHINE,
    "virtual-machine": TrafficType.VIRTUAL_MACHINE,
    "replication": TrafficType.HBR,
    "host-based-replication": TrafficType.HBR,
    "virtual-san": TrafficType.VSAN,
    "backup": TrafficType.VDP,
}


def parse_traffic_type(value: object) -> Optional[TrafficType]:
    """Map user input like 'vMotion', 'vSAN' or 'backup' to a TrafficType (case-insensitive)."""
    if isinstance(value, TrafficType):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip().lower()
    for t in TrafficType:
        if t.value.lower() == s:
            return t
    return _TRAFFIC_ALIASES.get(s)


def parse_share_level(value: object) -> Optional[ShareLevel]:
    if isinstance(value, ShareLevel):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip().lower()
    for level in ShareLevel:
        if level.value == s:
            return level
    return None


@dataclass(frozen=True)
class SwitchName:
    """Reference to a distributed switch by its inventory name."""

    name: str


@dataclass(frozen=True)
class SwitchHandle:
    """Reference to an already-resolved distributed switch managed object."""

    switch: Any

    @property
    def name(self) -> str:
        return self.switch.name


SwitchRef = Union[SwitchName, SwitchHandle]


def as_switch_ref(value: object) -> Optional[SwitchRef]:
    """Convert a raw switch argument into a SwitchRef, or None if its shape is not recognized."""
    if isinstance(value, (SwitchName, SwitchHandle)):
        return value
    if isinstance(value, str):
        return SwitchName(value) if value.strip() else None
    if isinstance(value, vim.DistributedVirtualSwitch):
        return SwitchHandle(value)
    return None


class ErrorKind(str, Enum):
    USAGE = "usage"
    NOT_FOUND = "not_found"
    REMOTE = "remote"
    INTERNAL = "internal"


class ShareError(Exception):
    """
    Failure of a traffic share operation.

    For ErrorKind.REMOTE, `cause` holds the exception raised by vCenter/pyVmomi, unchanged.
    """

    def __init__(self, kind: ErrorKind, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause


@dataclass
class TrafficShare:
    """Normalized view of one infrastructure traffic resource entry."""

    key: str
    level: Optional[str]
    shares: Optional[int]
    limit: Optional[int] = None
    reservation: Optional[int] = None


@dataclass
class ShareResult:
    """
    Outcome of a traffic share operation.

    - switch: refreshed switch handle (set_traffic_share) or the resolved switch (get_traffic_shares)
    - applied: True only when a reconfigure task was submitted and completed
    - description: the change that was (or would have been) applied
    - shares: traffic entries, filled by get_traffic_shares
    - error: set when the operation failed; switch is then None
    """

    switch: Any = None
    applied: bool = False
    description: Optional[str] = None
    shares: List[TrafficShare] = field(default_factory=list)
    error: Optional[ShareError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is None:
            return
        if self.error.kind == ErrorKind.REMOTE and self.error.cause is not None:
            raise self.error.cause
        raise self.error
