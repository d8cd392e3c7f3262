"""
Linux Platform Backend Implementation.

Implements enumeration and disk operations using standard Linux tools.
"""

from __future__ import annotations

import os
import subprocess
import time
from pathlib import Path
from typing import Callable

import psutil

from diskpart.core.errors import ServiceError
from diskpart.core.logging import get_logger
from diskpart.core.models import BlockDevice, DeviceKind, Operation, OperationKind
from diskpart.platform.base import CommandResult, PlatformBackend
from diskpart.platform.linux.parsers import (
    build_block_device,
    classify_block_devices,
    find_partition_at,
    matches_kind,
    parse_losetup_associations,
    parse_lsblk_json,
    parse_sfdisk_json,
    rebase_path,
)

logger = get_logger(__name__)

MIB = 1024 * 1024

LSBLK_COLUMNS = "NAME,PATH,SIZE,TYPE,FSTYPE,LABEL,MOUNTPOINT,RO,PTTYPE,PTUUID,PARTTYPE,PKNAME"


class LinuxBackend(PlatformBackend):
    """Linux implementation of disk operations."""

    # Tool paths (can be overridden for testing)
    LSBLK = "lsblk"
    SFDISK = "sfdisk"
    SGDISK = "sgdisk"
    PARTED = "parted"
    PARTPROBE = "partprobe"
    WIPEFS = "wipefs"
    BLKDISCARD = "blkdiscard"
    BLOCKDEV = "blockdev"
    SHRED = "shred"
    MOUNT = "mount"
    UMOUNT = "umount"
    FSCK = "fsck"
    LOSETUP = "losetup"
    MDADM = "mdadm"
    FALLOCATE = "fallocate"
    TRUNCATE = "truncate"

    # Filesystem tools
    MKFS_EXT4 = "mkfs.ext4"
    MKFS_EXT3 = "mkfs.ext3"
    MKFS_EXT2 = "mkfs.ext2"
    MKFS_XFS = "mkfs.xfs"
    MKFS_BTRFS = "mkfs.btrfs"
    MKFS_VFAT = "mkfs.vfat"
    MKFS_NTFS = "mkfs.ntfs"
    MKFS_EXFAT = "mkfs.exfat"
    MKSWAP = "mkswap"

    def __init__(
        self,
        timeout: int = 3600,
        device_root: str = "/dev",
        sysfs_root: Path = Path("/sys"),
    ) -> None:
        self.timeout = timeout
        self.device_root = device_root.rstrip("/") or "/"
        self.sysfs_root = sysfs_root
        self._handlers: dict[OperationKind, Callable[[Operation], CommandResult]] = {
            OperationKind.CREATE_PARTITION: self._create_partition,
            OperationKind.DELETE_PARTITION: self._delete_partition,
            OperationKind.RESIZE_PARTITION: self._resize_partition,
            OperationKind.SET_PARTITION_TYPE: self._set_partition_type,
            OperationKind.SET_BOOT_FLAG: self._set_boot_flag,
            OperationKind.SET_GPT_ATTRIBUTES: self._set_gpt_attributes,
            OperationKind.CREATE_PARTITION_TABLE: self._create_partition_table,
            OperationKind.WIPE_SIGNATURES: self._wipe_signatures,
            OperationKind.DISCARD: self._discard,
            OperationKind.ZERO_FILL: self._zero_fill,
            OperationKind.FORMAT: self._format,
            OperationKind.CHECK_FILESYSTEM: self._check_filesystem,
            OperationKind.MOUNT: self._mount,
            OperationKind.UNMOUNT: self._unmount,
            OperationKind.SET_READONLY: self._set_readonly,
            OperationKind.SET_DISK_STATE: self._set_disk_state,
            OperationKind.SET_DISK_ID: self._set_disk_id,
            OperationKind.CREATE_VDISK: self._create_vdisk,
            OperationKind.EXPAND_VDISK: self._expand_vdisk,
            OperationKind.ATTACH_VDISK: self._attach_vdisk,
            OperationKind.DETACH_VDISK: self._detach_vdisk,
            OperationKind.RAID_ADD: self._raid_add,
            OperationKind.RAID_REMOVE: self._raid_remove,
            OperationKind.RESCAN: self._rescan,
        }

    @property
    def name(self) -> str:
        return "linux"

    def is_admin(self) -> bool:
        return os.geteuid() == 0

    def run_command(
        self,
        command: list[str],
        timeout: int | None = None,
        check: bool = True,
        input_text: str | None = None,
    ) -> CommandResult:
        """Run a system command."""
        timeout = timeout or self.timeout
        logger.debug("Running command", command=command)
        start_time = time.time()

        try:
            result = subprocess.run(
                command,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
            cmd_result = CommandResult(
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                command=command,
                duration_seconds=time.time() - start_time,
            )

            if check and result.returncode != 0:
                logger.info(
                    "Command failed",
                    command=command,
                    returncode=result.returncode,
                    stderr=result.stderr[:500] if result.stderr else "",
                )

            return cmd_result

        except subprocess.TimeoutExpired:
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
                command=command,
                duration_seconds=timeout,
            )
        except OSError as e:
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=str(e),
                command=command,
                duration_seconds=time.time() - start_time,
            )

    # ==================== Inventory Operations ====================

    def _lsblk(self, device_path: str | None = None) -> list[dict]:
        command = [self.LSBLK, "-J", "-b", "-l", "-o", LSBLK_COLUMNS]
        if device_path:
            command.append(device_path)

        result = self.run_command(command, timeout=60, check=False)
        if not result.success:
            raise ServiceError(f"Device enumeration failed: {result.stderr.strip()}")
        return parse_lsblk_json(result.stdout)

    def _get_mounts(self) -> dict[str, str]:
        """Get current mounts keyed by device."""
        mounts: dict[str, str] = {}
        for part in psutil.disk_partitions(all=True):
            mounts.setdefault(part.device, part.mountpoint)
        return mounts

    def list_devices(self, kind: DeviceKind) -> list[BlockDevice]:
        """List devices of one kind using lsblk."""
        entries = self._lsblk()
        return classify_block_devices(entries, kind, self._get_mounts(), self.device_root)

    def describe(self, device_path: str) -> BlockDevice | None:
        """Get information about a specific device."""
        if not self.device_exists(device_path):
            return None

        target = self.canonicalize(device_path)
        mounts = self._get_mounts()
        for entry in self._lsblk(target):
            path = rebase_path(entry.get("path") or "", self.device_root)
            if self.canonicalize(path) != target:
                continue
            for kind in (DeviceKind.DISK, DeviceKind.PARTITION, DeviceKind.VDISK):
                if matches_kind(entry, kind):
                    return build_block_device(entry, kind, mounts, self.device_root)
            return build_block_device(entry, DeviceKind.VOLUME, mounts, self.device_root)
        return None

    def partition_parent(self, partition_path: str) -> tuple[str, int] | None:
        """Look up parent disk and partition number through sysfs."""
        name = os.path.basename(os.path.realpath(partition_path))
        sys_entry = self.sysfs_root / "class" / "block" / name
        number_file = sys_entry / "partition"

        try:
            number = int(number_file.read_text().strip())
        except (OSError, ValueError):
            return None

        parent_name = Path(os.path.realpath(sys_entry)).parent.name
        if not parent_name:
            return None
        return rebase_path(f"/dev/{parent_name}", self.device_root), number

    def device_exists(self, device_path: str) -> bool:
        return os.path.exists(device_path)

    def canonicalize(self, device_path: str) -> str:
        """Resolve /dev/disk/by-*, /dev/mapper and other symlinks to the device node."""
        return os.path.realpath(device_path)

    # ==================== Operations ====================

    def execute(self, operation: Operation) -> CommandResult:
        """Run an external operation to completion."""
        handler = self._handlers.get(operation.kind)
        if handler is None:
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=f"Unsupported operation: {operation.kind.value}",
                command=operation.describe(),
            )
        return handler(operation)

    def _reread(self, disk_path: str) -> None:
        self.run_command([self.PARTPROBE, disk_path], timeout=60, check=False)

    def _create_partition(self, op: Operation) -> CommandResult:
        end_mib = op.get("end_mib")
        end = f"{end_mib}MiB" if end_mib is not None else "100%"
        result = self.run_command(
            [
                self.PARTED,
                "-s",
                "-a",
                "optimal",
                op.target,
                "mkpart",
                op.get("partition_kind", "primary"),
                f"{op.get('start_mib')}MiB",
                end,
            ],
            timeout=120,
        )
        if result.success:
            self._reread(op.target)
        return result

    def _delete_partition(self, op: Operation) -> CommandResult:
        result = self.run_command(
            [self.SFDISK, "--delete", op.target, str(op.get("number"))],
            timeout=60,
        )
        if result.success:
            self._reread(op.target)
        return result

    def _resize_partition(self, op: Operation) -> CommandResult:
        size_mib = op.get("size_mib")
        size_spec = f"{size_mib}MiB" if size_mib is not None else "+"
        result = self.run_command(
            [self.SFDISK, "--no-reread", "-N", str(op.get("number")), op.target],
            timeout=120,
            input_text=f", {size_spec}\n",
        )
        if result.success:
            self._reread(op.target)
        return result

    def _set_partition_type(self, op: Operation) -> CommandResult:
        number = op.get("number")
        if number is None:
            dump = self.run_command([self.SFDISK, "--json", op.target], timeout=60)
            if not dump.success:
                return dump
            number = find_partition_at(parse_sfdisk_json(dump.stdout), op.get("start_mib") * MIB)
            if number is None:
                return CommandResult(
                    returncode=1,
                    stdout="",
                    stderr=f"No partition starts at {op.get('start_mib')} MiB on {op.target}",
                    command=dump.command,
                )

        return self.run_command(
            [self.SFDISK, "--part-type", op.target, str(number), op.get("type_code")],
            timeout=60,
        )

    def _set_boot_flag(self, op: Operation) -> CommandResult:
        state = "on" if op.get("enabled") else "off"
        return self.run_command(
            [self.PARTED, "-s", op.target, "set", str(op.get("number")), "boot", state],
            timeout=60,
        )

    def _set_gpt_attributes(self, op: Operation) -> CommandResult:
        return self.run_command(
            [self.SGDISK, f"--attributes={op.get('number')}:=:{op.get('attributes')}", op.target],
            timeout=60,
        )

    def _create_partition_table(self, op: Operation) -> CommandResult:
        result = self.run_command(
            [self.PARTED, "-s", op.target, "mklabel", op.get("label")],
            timeout=60,
        )
        if result.success:
            self._reread(op.target)
        return result

    def _wipe_signatures(self, op: Operation) -> CommandResult:
        return self.run_command([self.WIPEFS, "-a", op.target], timeout=120)

    def _discard(self, op: Operation) -> CommandResult:
        return self.run_command([self.BLKDISCARD, op.target], check=False)

    def _zero_fill(self, op: Operation) -> CommandResult:
        return self.run_command([self.SHRED, "-n", "0", "-z", op.target])

    def _format(self, op: Operation) -> CommandResult:
        mkfs_map = {
            "ext4": (self.MKFS_EXT4, ["-F"]),
            "ext3": (self.MKFS_EXT3, ["-F"]),
            "ext2": (self.MKFS_EXT2, ["-F"]),
            "xfs": (self.MKFS_XFS, ["-f"]),
            "btrfs": (self.MKFS_BTRFS, ["-f"]),
            "fat32": (self.MKFS_VFAT, ["-F", "32"]),
            "ntfs": (self.MKFS_NTFS, ["-F"]),
            "exfat": (self.MKFS_EXFAT, []),
            "swap": (self.MKSWAP, ["-f"]),
        }
        filesystem = op.get("filesystem")
        if filesystem not in mkfs_map:
            return CommandResult(
                returncode=1,
                stdout="",
                stderr=f"Unsupported filesystem: {filesystem}",
                command=op.describe(),
            )

        mkfs_tool, default_args = mkfs_map[filesystem]
        cmd = [mkfs_tool, *default_args]

        label = op.get("label")
        if label:
            if filesystem in ("fat32", "exfat"):
                cmd.extend(["-n", label])
            else:
                cmd.extend(["-L", label])

        if op.get("quick"):
            if filesystem == "ntfs":
                cmd.append("-f")
        elif filesystem in ("ext2", "ext3", "ext4"):
            cmd.append("-c")  # Scan for bad blocks like a full format

        cmd.append(op.target)
        return self.run_command(cmd)

    def _check_filesystem(self, op: Operation) -> CommandResult:
        result = self.run_command([self.FSCK, "-y", op.target], check=False)
        # fsck exit status 1 means errors were found and corrected
        if result.returncode == 1:
            result.returncode = 0
        return result

    def _mount(self, op: Operation) -> CommandResult:
        mountpoint = op.get("mountpoint")
        try:
            Path(mountpoint).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return CommandResult(
                returncode=1,
                stdout="",
                stderr=f"Cannot create mount point {mountpoint}: {e}",
                command=op.describe(),
            )
        return self.run_command([self.MOUNT, op.target, mountpoint], timeout=120)

    def _unmount(self, op: Operation) -> CommandResult:
        return self.run_command([self.UMOUNT, op.get("mountpoint") or op.target], timeout=120)

    def _set_readonly(self, op: Operation) -> CommandResult:
        flag = "--setro" if op.get("enabled") else "--setrw"
        return self.run_command([self.BLOCKDEV, flag, op.target], timeout=60)

    def _set_disk_state(self, op: Operation) -> CommandResult:
        name = os.path.basename(os.path.realpath(op.target))
        state_file = self.sysfs_root / "block" / name / "device" / "state"
        state = "running" if op.get("online") else "offline"
        start_time = time.time()

        try:
            state_file.write_text(f"{state}\n")
        except OSError as e:
            return CommandResult(
                returncode=1,
                stdout="",
                stderr=f"Cannot write {state_file}: {e}",
                command=f"echo {state} > {state_file}",
            )

        return CommandResult(
            returncode=0,
            stdout="",
            stderr="",
            command=f"echo {state} > {state_file}",
            duration_seconds=time.time() - start_time,
        )

    def _set_disk_id(self, op: Operation) -> CommandResult:
        return self.run_command(
            [self.SFDISK, "--disk-id", op.target, op.get("disk_id")],
            timeout=60,
        )

    def _create_vdisk(self, op: Operation) -> CommandResult:
        size = f"{op.get('size_mib')}M"
        if op.get("fixed"):
            return self.run_command([self.FALLOCATE, "-l", size, op.target])
        return self.run_command([self.TRUNCATE, "-s", size, op.target], timeout=60)

    def _expand_vdisk(self, op: Operation) -> CommandResult:
        result = self.run_command(
            [self.TRUNCATE, "-s", f"{op.get('size_mib')}M", op.target],
            timeout=60,
        )
        if not result.success:
            return result

        # Let attached loop devices pick up the new capacity
        for device in self._loop_devices_for(op.target):
            self.run_command([self.LOSETUP, "-c", device], timeout=60, check=False)
        return result

    def _loop_devices_for(self, file_path: str) -> list[str]:
        result = self.run_command([self.LOSETUP, "-j", file_path], timeout=60, check=False)
        if not result.success:
            return []
        return parse_losetup_associations(result.stdout)

    def _attach_vdisk(self, op: Operation) -> CommandResult:
        cmd = [self.LOSETUP, "-f", "-P", "--show"]
        if op.get("readonly"):
            cmd.append("-r")
        cmd.append(op.target)
        return self.run_command(cmd, timeout=60)

    def _detach_vdisk(self, op: Operation) -> CommandResult:
        devices = self._loop_devices_for(op.target)
        if not devices:
            return CommandResult(
                returncode=1,
                stdout="",
                stderr=f"{op.target} is not attached",
                command=[self.LOSETUP, "-j", op.target],
            )

        return self.run_command([self.LOSETUP, "-d", *devices], timeout=60)

    def _raid_add(self, op: Operation) -> CommandResult:
        return self.run_command(
            [self.MDADM, "--manage", op.target, "--add", op.get("member")],
            timeout=120,
        )

    def _raid_remove(self, op: Operation) -> CommandResult:
        member = op.get("member")
        result = self.run_command(
            [self.MDADM, "--manage", op.target, "--fail", member],
            timeout=120,
        )
        if not result.success:
            return result
        return self.run_command(
            [self.MDADM, "--manage", op.target, "--remove", member],
            timeout=120,
        )

    def _rescan(self, op: Operation) -> CommandResult:
        cmd = [self.PARTPROBE]
        if op.target:
            cmd.append(op.target)
        return self.run_command(cmd, timeout=120)
