"""
diskpart Linux Platform Backend.

Implements disk operations using standard Linux tools:
- lsblk and sysfs for inventory
- parted/sfdisk/sgdisk for partitioning
- mkfs.* and fsck for filesystems
- losetup for virtual disks, mdadm for RAID membership
"""

from diskpart.platform.linux.backend import LinuxBackend
from diskpart.platform.linux.parsers import (
    classify_block_devices,
    parse_losetup_associations,
    parse_lsblk_json,
    parse_sfdisk_json,
)

__all__ = [
    "LinuxBackend",
    "classify_block_devices",
    "parse_losetup_associations",
    "parse_lsblk_json",
    "parse_sfdisk_json",
]
