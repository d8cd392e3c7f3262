"""
Linux output parsers.

Parsers for lsblk, sfdisk and losetup output.
"""

from __future__ import annotations

import json
import re
from typing import Any

from diskpart.core.models import BlockDevice, DeviceKind

# Whole-disk names that are never listed as disks
EXCLUDED_DISK_PREFIXES = ("loop", "ram")

# Filesystem signatures that mark a member device rather than a volume
MEMBER_FSTYPES = {"linux_raid_member", "lvm2_member", "crypto_luks"}


def parse_lsblk_json(output: str) -> list[dict[str, Any]]:
    """Parse JSON output from lsblk."""
    try:
        data = json.loads(output)
        return data.get("blockdevices", [])
    except json.JSONDecodeError:
        return []


def parse_bool(value: Any) -> bool:
    """lsblk reports flags as booleans or as "0"/"1" depending on version."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip() in ("1", "true")


def parse_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def matches_kind(entry: dict[str, Any], kind: DeviceKind) -> bool:
    """Check whether an lsblk entry belongs to a device kind."""
    block_type = (entry.get("type") or "").lower()
    name = entry.get("name") or ""

    if kind == DeviceKind.DISK:
        return block_type == "disk" and not name.startswith(EXCLUDED_DISK_PREFIXES)

    if kind == DeviceKind.PARTITION:
        return block_type == "part"

    if kind == DeviceKind.VDISK:
        return block_type == "loop"

    fstype = (entry.get("fstype") or "").lower()
    if block_type.startswith("raid") or block_type in ("lvm", "crypt"):
        return True
    return bool(fstype) and fstype not in MEMBER_FSTYPES


def rebase_path(path: str, device_root: str = "/dev") -> str:
    """Move a path lsblk reports under /dev to the configured device root."""
    if device_root == "/dev" or not path.startswith("/dev/"):
        return path
    root = device_root.rstrip("/")
    return f"{root}{path[4:]}"


def build_block_device(
    entry: dict[str, Any],
    kind: DeviceKind,
    mounts: dict[str, str],
    device_root: str = "/dev",
) -> BlockDevice:
    """Build a BlockDevice from a flat lsblk entry."""
    name = entry.get("name") or ""
    reported = entry.get("path") or f"/dev/{name}"
    path = rebase_path(reported, device_root)
    parent_name = entry.get("pkname")

    return BlockDevice(
        path=path,
        name=name,
        kind=kind,
        size_bytes=parse_int(entry.get("size")),
        device_type=entry.get("type") or "",
        parent=rebase_path(f"/dev/{parent_name}", device_root) if parent_name else None,
        fstype=entry.get("fstype") or None,
        label=entry.get("label") or None,
        mountpoint=mounts.get(reported) or entry.get("mountpoint") or None,
        readonly=parse_bool(entry.get("ro")),
        partition_table=entry.get("pttype") or None,
        table_id=entry.get("ptuuid") or None,
        partition_type=entry.get("parttype") or None,
    )


def classify_block_devices(
    entries: list[dict[str, Any]],
    kind: DeviceKind,
    mounts: dict[str, str],
    device_root: str = "/dev",
) -> list[BlockDevice]:
    """Filter lsblk entries to one kind, keeping enumerator order."""
    return [
        build_block_device(entry, kind, mounts, device_root)
        for entry in entries
        if matches_kind(entry, kind)
    ]


def parse_sfdisk_json(output: str) -> dict[str, Any]:
    """
    Parse `sfdisk --json` output.

    Returns the partition table dictionary or an empty dict.
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError:
        return {}
    return data.get("partitiontable", {})


def partition_number(node: str) -> int | None:
    """Extract the partition number from a partition node name."""
    match = re.search(r"(\d+)$", node)
    if not match:
        return None
    return int(match.group(1))


def find_partition_at(table: dict[str, Any], start_bytes: int) -> int | None:
    """Find the number of the partition starting at a byte offset."""
    sector_size = parse_int(table.get("sectorsize")) or 512
    start_sector = start_bytes // sector_size

    for part in table.get("partitions", []):
        if parse_int(part.get("start")) == start_sector:
            return partition_number(part.get("node", ""))
    return None


def parse_losetup_associations(output: str) -> list[str]:
    """
    Parse `losetup -j <file>` output.

    Example input:
    /dev/loop0: [2049]:1835 (/srv/images/disk.img)
    """
    devices = []
    for line in output.strip().split("\n"):
        if ":" not in line:
            continue
        device = line.split(":", 1)[0].strip()
        if device:
            devices.append(device)
    return devices
