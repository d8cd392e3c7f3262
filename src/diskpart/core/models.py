"""
diskpart data models.

Defines block devices, external operation descriptors and command outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Any


class ExitCode(IntEnum):
    """Process exit codes."""

    OK = 0
    FATAL = 1
    CMD_ARG = 2
    FILE = 3
    SERVICE = 4
    SYNTAX = 5


class DeviceKind(Enum):
    """Kinds of storage objects the shell can enumerate and select."""

    DISK = "disk"
    PARTITION = "partition"
    VOLUME = "volume"
    VDISK = "vdisk"

    @classmethod
    def parse(cls, value: str) -> DeviceKind | None:
        value_lower = value.lower()
        for kind in cls:
            if kind.value == value_lower:
                return kind
        return None


class OutcomeKind(Enum):
    """Result classes of a dispatched command line."""

    OK = auto()
    NOT_IMPLEMENTED = auto()  # Recognized verb without an effect
    EXIT = auto()
    SYNTAX = auto()
    SERVICE = auto()
    DEVICE_NOT_FOUND = auto()


@dataclass(frozen=True)
class Outcome:
    """Outcome of a single command line."""

    kind: OutcomeKind
    message: str = ""

    @property
    def is_error(self) -> bool:
        return self.kind in (
            OutcomeKind.SYNTAX,
            OutcomeKind.SERVICE,
            OutcomeKind.DEVICE_NOT_FOUND,
        )

    @property
    def exit_code(self) -> ExitCode:
        if self.kind == OutcomeKind.SYNTAX:
            return ExitCode.SYNTAX
        if self.kind in (OutcomeKind.SERVICE, OutcomeKind.DEVICE_NOT_FOUND):
            return ExitCode.SERVICE
        return ExitCode.OK

    @classmethod
    def ok(cls, message: str = "") -> Outcome:
        return cls(OutcomeKind.OK, message)


@dataclass
class BlockDevice:
    """A block device as reported by the enumerator."""

    path: str
    name: str
    kind: DeviceKind
    size_bytes: int = 0
    device_type: str = ""
    parent: str | None = None
    fstype: str | None = None
    label: str | None = None
    mountpoint: str | None = None
    readonly: bool = False
    partition_table: str | None = None
    table_id: str | None = None
    partition_type: str | None = None


class OperationKind(Enum):
    """External disk-management operations."""

    CREATE_PARTITION = "create_partition"
    DELETE_PARTITION = "delete_partition"
    RESIZE_PARTITION = "resize_partition"
    SET_PARTITION_TYPE = "set_partition_type"
    SET_BOOT_FLAG = "set_boot_flag"
    SET_GPT_ATTRIBUTES = "set_gpt_attributes"
    CREATE_PARTITION_TABLE = "create_partition_table"
    WIPE_SIGNATURES = "wipe_signatures"
    DISCARD = "discard"
    ZERO_FILL = "zero_fill"
    FORMAT = "format"
    CHECK_FILESYSTEM = "check_filesystem"
    MOUNT = "mount"
    UNMOUNT = "unmount"
    SET_READONLY = "set_readonly"
    SET_DISK_STATE = "set_disk_state"
    SET_DISK_ID = "set_disk_id"
    CREATE_VDISK = "create_vdisk"
    EXPAND_VDISK = "expand_vdisk"
    ATTACH_VDISK = "attach_vdisk"
    DETACH_VDISK = "detach_vdisk"
    RAID_ADD = "raid_add"
    RAID_REMOVE = "raid_remove"
    RESCAN = "rescan"


@dataclass(frozen=True)
class Operation:
    """
    Structured request for an external operation.

    The dispatcher fills in typed parameters; the platform backend decides
    which tools to run for them.
    """

    kind: OperationKind
    target: str
    params: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)

    def describe(self) -> str:
        if not self.params:
            return f"{self.kind.value} {self.target}"
        args = ", ".join(f"{key}={value}" for key, value in self.params.items())
        return f"{self.kind.value} {self.target} ({args})"


# GPT partition type GUIDs used when marking special partitions
EFI_SYSTEM_PARTITION_GUID = "C12A7328-F81F-11D2-BA4B-00A0C93EC93B"
MICROSOFT_RESERVED_GUID = "E3C9E316-0B5C-4DB8-817D-F92DF00215AE"
