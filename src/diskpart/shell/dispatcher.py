"""
Command dispatcher.

Maps verbs to handlers. Each handler checks its preconditions in a fixed
order (selection, arguments, privilege, device lookup) before it submits
operations to the platform backend.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import humanize
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from diskpart.core.config import SUPPORTED_FILESYSTEMS
from diskpart.core.errors import (
    CommandSyntaxError,
    DeviceNotFoundError,
    DiskPartError,
    ServiceError,
)
from diskpart.core.logging import OperationLogger, get_logger
from diskpart.core.models import (
    EFI_SYSTEM_PARTITION_GUID,
    MICROSOFT_RESERVED_GUID,
    BlockDevice,
    DeviceKind,
    Operation,
    OperationKind,
    Outcome,
    OutcomeKind,
)
from diskpart.core.session import SELECTABLE_KINDS, Session
from diskpart.platform.base import CommandResult
from diskpart.shell.arguments import Arguments
from diskpart.shell.resolver import DeviceResolver
from diskpart.shell.tokenizer import tokenize
from diskpart.shell.verbs import Verb, render_full_help, render_verb_help

logger = get_logger(__name__)

PRIVILEGE_HINT = "Run diskpart as root, for example: sudo diskpart"

# (default start MiB, default size MiB) per partition style
PARTITION_DEFAULTS: dict[str, tuple[int, int | None]] = {
    "primary": (1, None),
    "logical": (1, None),
    "extended": (1, None),
    "efi": (1, 100),
    "msr": (101, 16),
}

PARTITION_TYPE_ALIASES = {
    "efi": EFI_SYSTEM_PARTITION_GUID,
    "msr": MICROSOFT_RESERVED_GUID,
}

FILESYSTEM_ALIASES = {"fat": "fat32", "vfat": "fat32"}

TABLE_STYLES = {"gpt": "gpt", "mbr": "msdos"}


def parse_mib(value: str, key: str, minimum: int = 1) -> int:
    """Parse a size or offset given in MiB."""
    try:
        number = int(value)
    except ValueError:
        raise CommandSyntaxError(f"Invalid value for {key.upper()}: {value}") from None
    if number < minimum:
        raise CommandSyntaxError(f"{key.upper()} must be at least {minimum}")
    return number


class Dispatcher:
    """Dispatches command lines against a session."""

    def __init__(
        self,
        session: Session,
        console: Console | None = None,
        resolver: DeviceResolver | None = None,
    ) -> None:
        self.session = session
        self.console = console or Console()
        self.backend = session.platform
        self.resolver = resolver or DeviceResolver(
            self.backend, session.config.shell.device_root
        )
        self._registry: dict[Verb, Callable[[Arguments], Outcome]] = {
            Verb.ACTIVE: lambda args: self._set_active(args, True),
            Verb.INACTIVE: lambda args: self._set_active(args, False),
            Verb.ADD: lambda args: self._raid_membership(args, True),
            Verb.BREAK: lambda args: self._raid_membership(args, False),
            Verb.ATTACH: lambda args: self._vdisk_attachment(args, True),
            Verb.DETACH: lambda args: self._vdisk_attachment(args, False),
            Verb.ONLINE: lambda args: self._set_online(args, True),
            Verb.OFFLINE: lambda args: self._set_online(args, False),
            Verb.EXTEND: lambda args: self._resize(args, shrink=False),
            Verb.SHRINK: lambda args: self._resize(args, shrink=True),
            Verb.ASSIGN: self._assign,
            Verb.ATTRIBUTES: self._attributes,
            Verb.CLEAN: self._clean,
            Verb.CONVERT: self._convert,
            Verb.CREATE: self._create,
            Verb.DELETE: self._delete,
            Verb.DETAIL: self._detail,
            Verb.EXPAND: self._expand,
            Verb.FILESYSTEMS: self._filesystems,
            Verb.FORMAT: self._format,
            Verb.GPT: self._gpt,
            Verb.LIST: self._list,
            Verb.REMOVE: self._remove,
            Verb.REPAIR: self._repair,
            Verb.RESCAN: self._rescan,
            Verb.SELECT: self._select,
            Verb.SETID: self._setid,
            Verb.UNIQUEID: self._uniqueid,
        }

    @property
    def max_tokens(self) -> int:
        return self.session.config.shell.max_tokens

    def dispatch(self, line: str) -> Outcome:
        """Run one command line and return its outcome."""
        tokens = tokenize(line, self.max_tokens)
        if not tokens:
            return Outcome.ok()

        args = Arguments(tokens)
        verb = Verb.parse(args.verb)

        if verb == Verb.REM:
            return Outcome.ok()
        if verb == Verb.EXIT:
            return Outcome(OutcomeKind.EXIT)
        if verb == Verb.HELP:
            return self._help(args)
        if verb is None:
            return Outcome(OutcomeKind.SYNTAX, f"Unknown command: {args.verb}")

        handler = self._registry.get(verb)
        if handler is None:
            return Outcome(
                OutcomeKind.NOT_IMPLEMENTED,
                f"Command '{verb.value}' is recognized but not yet implemented on Linux.",
            )

        try:
            return handler(args)
        except DiskPartError as e:
            logger.info("Command failed", command=args.argv, kind=e.kind.name, error=e.message)
            return e.to_outcome()
        except Exception as e:
            logger.exception("Unexpected error while handling command", command=args.argv)
            return Outcome(OutcomeKind.SERVICE, f"Unexpected error: {e}")

    # ==================== Preconditions ====================

    def _require_selection(self, kind: DeviceKind) -> str:
        path = self.session.selected(kind)
        if not path:
            raise CommandSyntaxError(
                f"There is no {kind.value} selected. Select a {kind.value} and try again."
            )
        return path

    def _require_filesystem_target(self) -> str:
        path = self.session.selected(DeviceKind.VOLUME) or self.session.selected(
            DeviceKind.PARTITION
        )
        if not path:
            raise CommandSyntaxError(
                "There is no volume selected. Select a volume or partition and try again."
            )
        return path

    def _require_value(self, args: Arguments, key: str) -> str:
        value = args.lookup(key)
        if value is None or value == "":
            raise CommandSyntaxError(f"Missing required argument {key.upper()}=.")
        return value

    def _optional_mib(self, args: Arguments, key: str, minimum: int = 1) -> int | None:
        value = args.lookup(key)
        if value is None:
            return None
        return parse_mib(value, key, minimum)

    def _require_subverb(self, args: Arguments, *choices: str) -> str:
        value = args.positional(0)
        if value is None or value.lower() not in choices:
            usage = "|".join(choices)
            raise CommandSyntaxError(f"Usage: {args.verb.lower()} {usage}")
        return value.lower()

    def _require_admin(self) -> None:
        if not self.backend.is_admin():
            raise ServiceError(
                "Access denied: this operation requires administrator privileges.",
                hint=PRIVILEGE_HINT,
            )

    def _require_exists(self, path: str) -> str:
        if not self.resolver.exists(path):
            raise DeviceNotFoundError(f"Device not found: {path}")
        return path

    def _require_location(self, partition_path: str) -> tuple[str, int]:
        location = self.resolver.parent_and_number(partition_path)
        if location is None:
            raise ServiceError(
                f"Cannot determine the disk and partition number of {partition_path}."
            )
        return location

    def _is_child(self, device: BlockDevice, disk_path: str) -> bool:
        if not device.parent:
            return False
        return self.resolver.canonicalize(device.parent) == disk_path

    def _resolve_existing(self, kind: DeviceKind, reference: str) -> str:
        path = self.resolver.resolve(kind, reference)
        if path is None:
            raise DeviceNotFoundError(f"The {kind.value} you specified is not valid: {reference}")
        return self.resolver.canonicalize(self._require_exists(path))

    # ==================== Operation submission ====================

    def _run(self, operation: Operation) -> CommandResult:
        with OperationLogger(operation) as audit:
            result = self.backend.execute(operation)
            audit.record(result)
        return result

    def _submit(self, operation: Operation) -> CommandResult:
        result = self._run(operation)
        if not result.success:
            detail = (result.stderr or result.stdout).strip()
            message = (
                f"{operation.describe()} failed (exit code {result.returncode})"
            )
            if detail:
                message = f"{message}: {detail[:500]}"
            raise ServiceError(message)
        return result

    # ==================== Help ====================

    def _help(self, args: Arguments) -> Outcome:
        if len(args) == 1:
            self.console.print(render_full_help(), markup=False, highlight=False)
            return Outcome.ok()

        verb = Verb.parse(args.argv[1])
        if verb is None:
            return Outcome(OutcomeKind.SYNTAX, f"Unknown command for help: {args.argv[1]}")

        self.console.print(render_verb_help(verb), markup=False, highlight=False)
        return Outcome.ok()

    # ==================== Inventory ====================

    def _list(self, args: Arguments) -> Outcome:
        kind = DeviceKind.parse(self._require_subverb(args, "disk", "partition", "volume", "vdisk"))
        devices = list(enumerate(self.backend.list_devices(kind), start=1))

        selected_disk = self.session.selected(DeviceKind.DISK)
        if kind == DeviceKind.PARTITION and selected_disk:
            devices = [
                (index, dev)
                for index, dev in devices
                if self._is_child(dev, selected_disk)
            ]

        if not devices:
            return Outcome.ok(f"There are no {kind.value}s to show.")

        selected = self.session.selected(kind)
        table = Table(title=f"{kind.value.capitalize()}s")
        table.add_column("", style="bold")
        table.add_column("#", style="dim")
        table.add_column("Device", style="cyan")
        table.add_column("Size", style="green")
        table.add_column("Type", style="yellow")
        table.add_column("FS", style="magenta")
        table.add_column("Label", style="white")
        table.add_column("Mount", style="blue")

        for index, device in devices:
            table.add_row(
                "*" if selected and self.resolver.canonicalize(device.path) == selected else "",
                str(index),
                device.path,
                humanize.naturalsize(device.size_bytes, binary=True),
                device.device_type,
                device.fstype or "",
                escape(device.label or ""),
                device.mountpoint or "",
            )

        self.console.print(table)
        return Outcome.ok()

    def _select(self, args: Arguments) -> Outcome:
        kind = DeviceKind.parse(self._require_subverb(args, "disk", "partition", "volume"))
        reference = args.positional(1)
        if reference is None:
            raise CommandSyntaxError(f"Usage: select {kind.value} <n|name>")

        path = self._resolve_existing(kind, reference)
        self.session.select(kind, path)
        return Outcome.ok(f"{path} is now the selected {kind.value}.")

    def _detail(self, args: Arguments) -> Outcome:
        kind = DeviceKind.parse(self._require_subverb(args, "disk", "partition", "volume"))
        path = self._require_selection(kind)

        device = self.backend.describe(path)
        if device is None:
            raise DeviceNotFoundError(f"Device not found: {path}")

        lines = [
            f"[cyan]Device:[/cyan] {device.path}",
            f"[cyan]Type:[/cyan] {device.device_type or '(unknown)'}",
            f"[cyan]Size:[/cyan] {humanize.naturalsize(device.size_bytes, binary=True)}",
            f"[cyan]Read-only:[/cyan] {'Yes' if device.readonly else 'No'}",
        ]
        if kind == DeviceKind.DISK:
            lines.append(f"[cyan]Partition Style:[/cyan] {device.partition_table or '(none)'}")
            lines.append(f"[cyan]Disk ID:[/cyan] {device.table_id or '(none)'}")
        elif kind == DeviceKind.PARTITION:
            location = self.resolver.parent_and_number(path)
            if location:
                lines.append(f"[cyan]Disk:[/cyan] {location[0]}")
                lines.append(f"[cyan]Number:[/cyan] {location[1]}")
            lines.append(f"[cyan]Partition Type:[/cyan] {device.partition_type or '(unknown)'}")
        lines.append(f"[cyan]Filesystem:[/cyan] {device.fstype or '(none)'}")
        lines.append(f"[cyan]Label:[/cyan] {escape(device.label) if device.label else '(none)'}")
        lines.append(f"[cyan]Mountpoint:[/cyan] {device.mountpoint or '(not mounted)'}")

        self.console.print(Panel("\n".join(lines), title=f"{kind.value.capitalize()} Information"))

        if kind == DeviceKind.DISK:
            self._print_children(path)
        return Outcome.ok()

    def _print_children(self, disk_path: str) -> None:
        children: list[BlockDevice] = [
            dev
            for dev in self.backend.list_devices(DeviceKind.PARTITION)
            if self._is_child(dev, disk_path)
        ]
        if not children:
            return

        table = Table(title=f"Partitions on {disk_path}")
        table.add_column("Device", style="cyan")
        table.add_column("Size", style="green")
        table.add_column("FS", style="yellow")
        table.add_column("Mount", style="blue")
        for child in children:
            table.add_row(
                child.path,
                humanize.naturalsize(child.size_bytes, binary=True),
                child.fstype or "",
                child.mountpoint or "",
            )
        self.console.print(table)

    def _filesystems(self, args: Arguments) -> Outcome:
        default = self.session.config.shell.default_filesystem
        self.console.print("Supported filesystems:", highlight=False)
        for name in SUPPORTED_FILESYSTEMS:
            suffix = " (default)" if name == default else ""
            self.console.print(f"  {name}{suffix}", markup=False, highlight=False)
        return Outcome.ok()

    # ==================== Partitions ====================

    def _create(self, args: Arguments) -> Outcome:
        target = self._require_subverb(args, "partition", "vdisk")
        if target == "vdisk":
            return self._create_vdisk(args)
        return self._create_partition(args)

    def _create_partition(self, args: Arguments) -> Outcome:
        disk = self._require_selection(DeviceKind.DISK)

        style = (args.positional(1) or "").lower()
        if style not in PARTITION_DEFAULTS:
            raise CommandSyntaxError(
                "Usage: create partition primary|logical|extended|efi|msr [size=<MiB>] [start=<MiB>]"
            )
        size = self._optional_mib(args, "size")
        start = self._optional_mib(args, "start", minimum=0)

        self._require_admin()
        self._require_exists(disk)

        type_code = PARTITION_TYPE_ALIASES.get(style)
        if type_code:
            device = self.backend.describe(disk)
            if device is None:
                raise DeviceNotFoundError(f"Device not found: {disk}")
            if device.partition_table != "gpt":
                raise ServiceError(
                    f"An {style.upper()} partition needs a GPT disk; {disk} uses "
                    f"{device.partition_table or 'no'} partition table.",
                    hint="Run 'convert gpt' on the disk first.",
                )

        default_start, default_size = PARTITION_DEFAULTS[style]
        start = default_start if start is None else start
        size = default_size if size is None else size
        end = start + size if size is not None else None

        self._submit(
            Operation(
                OperationKind.CREATE_PARTITION,
                disk,
                {
                    "start_mib": start,
                    "end_mib": end,
                    "partition_kind": style if style in ("logical", "extended") else "primary",
                },
            )
        )

        if type_code:
            self._submit(
                Operation(
                    OperationKind.SET_PARTITION_TYPE,
                    disk,
                    {"number": None, "start_mib": start, "type_code": type_code},
                )
            )

        extent = f"{end} MiB" if end is not None else "the end of the disk"
        return Outcome.ok(
            f"Created {style} partition on {disk} from {start} MiB to {extent}."
        )

    def _delete(self, args: Arguments) -> Outcome:
        self._require_subverb(args, "partition")
        partition = self._require_selection(DeviceKind.PARTITION)
        self._require_admin()
        disk, number = self._require_location(partition)

        self._submit(Operation(OperationKind.DELETE_PARTITION, disk, {"number": number}))
        return Outcome.ok(f"Deleted partition {number} on {disk}.")

    def _resize(self, args: Arguments, shrink: bool) -> Outcome:
        partition = self._require_selection(DeviceKind.PARTITION)
        size = self._optional_mib(args, "size")
        if shrink and size is None:
            raise CommandSyntaxError("Missing required argument SIZE=.")
        self._require_admin()
        disk, number = self._require_location(partition)

        self._submit(
            Operation(
                OperationKind.RESIZE_PARTITION,
                disk,
                {"number": number, "size_mib": size},
            )
        )
        target = f"{size} MiB" if size is not None else "all available space"
        return Outcome.ok(f"Resized partition {number} on {disk} to {target}.")

    def _set_active(self, args: Arguments, enabled: bool) -> Outcome:
        partition = self._require_selection(DeviceKind.PARTITION)
        self._require_admin()
        disk, number = self._require_location(partition)

        self._submit(
            Operation(OperationKind.SET_BOOT_FLAG, disk, {"number": number, "enabled": enabled})
        )
        state = "active" if enabled else "inactive"
        return Outcome.ok(f"Partition {number} on {disk} is now {state}.")

    def _setid(self, args: Arguments) -> Outcome:
        partition = self._require_selection(DeviceKind.PARTITION)
        value = self._require_value(args, "id")
        type_code = PARTITION_TYPE_ALIASES.get(value.lower(), value)
        self._require_admin()
        disk, number = self._require_location(partition)

        self._submit(
            Operation(
                OperationKind.SET_PARTITION_TYPE,
                disk,
                {"number": number, "start_mib": None, "type_code": type_code},
            )
        )
        return Outcome.ok(f"Partition {number} on {disk} now has type {type_code}.")

    def _gpt(self, args: Arguments) -> Outcome:
        partition = self._require_selection(DeviceKind.PARTITION)
        value = self._require_value(args, "attributes")
        try:
            mask = int(value, 16)
        except ValueError:
            raise CommandSyntaxError(f"Invalid value for ATTRIBUTES: {value}") from None
        if mask < 0 or mask >= 1 << 64:
            raise CommandSyntaxError(f"Invalid value for ATTRIBUTES: {value}")
        self._require_admin()
        disk, number = self._require_location(partition)

        attributes = f"{mask:016x}"
        self._submit(
            Operation(
                OperationKind.SET_GPT_ATTRIBUTES,
                disk,
                {"number": number, "attributes": attributes},
            )
        )
        return Outcome.ok(f"Partition {number} on {disk} attributes set to 0x{attributes}.")

    # ==================== Disks ====================

    def _clean(self, args: Arguments) -> Outcome:
        disk = self._require_selection(DeviceKind.DISK)
        self._require_admin()
        self._require_exists(disk)

        self._submit(Operation(OperationKind.WIPE_SIGNATURES, disk))
        if not args.has("all"):
            return Outcome.ok(f"Cleaned {disk}.")

        discard = self._run(Operation(OperationKind.DISCARD, disk))
        if not discard.success:
            logger.info("Discard unsupported, zero filling", disk=disk, stderr=discard.stderr)
            self._submit(Operation(OperationKind.ZERO_FILL, disk))
        return Outcome.ok(f"Cleaned and zeroed {disk}.")

    def _convert(self, args: Arguments) -> Outcome:
        disk = self._require_selection(DeviceKind.DISK)
        style = self._require_subverb(args, *TABLE_STYLES)
        self._require_admin()
        self._require_exists(disk)

        self._submit(
            Operation(OperationKind.CREATE_PARTITION_TABLE, disk, {"label": TABLE_STYLES[style]})
        )
        return Outcome.ok(f"Converted {disk} to {style.upper()}.")

    def _set_online(self, args: Arguments, online: bool) -> Outcome:
        target = args.positional(0)
        if target is not None and target.lower() != "disk":
            raise CommandSyntaxError(f"Usage: {args.verb.lower()} [disk]")
        disk = self._require_selection(DeviceKind.DISK)
        self._require_admin()
        self._require_exists(disk)

        self._submit(Operation(OperationKind.SET_DISK_STATE, disk, {"online": online}))
        state = "online" if online else "offline"
        return Outcome.ok(f"{disk} is now {state}.")

    def _uniqueid(self, args: Arguments) -> Outcome:
        self._require_subverb(args, "disk")
        disk = self._require_selection(DeviceKind.DISK)
        disk_id = args.lookup("id")

        if disk_id is None:
            device = self.backend.describe(disk)
            if device is None:
                raise DeviceNotFoundError(f"Device not found: {disk}")
            return Outcome.ok(f"Disk ID: {device.table_id or '(none)'}")

        if not disk_id:
            raise CommandSyntaxError("Missing required argument ID=.")
        self._require_admin()
        self._require_exists(disk)

        self._submit(Operation(OperationKind.SET_DISK_ID, disk, {"disk_id": disk_id}))
        return Outcome.ok(f"Disk ID of {disk} set to {disk_id}.")

    def _attributes(self, args: Arguments) -> Outcome:
        words = [word.lower() for word in args.positionals]
        kind = DeviceKind.DISK
        if words and DeviceKind.parse(words[0]) in SELECTABLE_KINDS:
            kind = DeviceKind.parse(words.pop(0))
        path = self._require_selection(kind)

        if not words:
            device = self.backend.describe(path)
            if device is None:
                raise DeviceNotFoundError(f"Device not found: {path}")
            return Outcome.ok(
                f"Current read-only state of {path}: {'Yes' if device.readonly else 'No'}"
            )

        action = words[0]
        if action not in ("set", "clear") or words[1:] != ["readonly"]:
            raise CommandSyntaxError(
                "Usage: attributes [disk|volume|partition] set|clear readonly"
            )
        self._require_admin()
        self._require_exists(path)

        enabled = action == "set"
        self._submit(Operation(OperationKind.SET_READONLY, path, {"enabled": enabled}))
        state = "set" if enabled else "cleared"
        return Outcome.ok(f"Read-only attribute {state} on {path}.")

    def _rescan(self, args: Arguments) -> Outcome:
        self._require_admin()
        self._submit(Operation(OperationKind.RESCAN, ""))
        return Outcome.ok("Rescan complete.")

    # ==================== Volumes ====================

    def _format(self, args: Arguments) -> Outcome:
        target = self._require_filesystem_target()

        filesystem = (args.lookup("fs") or self.session.config.shell.default_filesystem).lower()
        filesystem = FILESYSTEM_ALIASES.get(filesystem, filesystem)
        if filesystem not in SUPPORTED_FILESYSTEMS:
            raise CommandSyntaxError(
                f"Unsupported filesystem: {filesystem}. Use FILESYSTEMS to list supported ones."
            )
        label = args.lookup("label")

        self._require_admin()
        self._require_exists(target)

        self._submit(
            Operation(
                OperationKind.FORMAT,
                target,
                {"filesystem": filesystem, "label": label, "quick": args.has("quick")},
            )
        )
        return Outcome.ok(f"Formatted {target} as {filesystem}.")

    def _repair(self, args: Arguments) -> Outcome:
        target = self._require_filesystem_target()
        self._require_admin()
        self._require_exists(target)

        self._submit(Operation(OperationKind.CHECK_FILESYSTEM, target))
        return Outcome.ok(f"Filesystem check of {target} complete.")

    def _assign(self, args: Arguments) -> Outcome:
        target = self._require_filesystem_target()
        mountpoint = self._require_value(args, "mount")
        self._require_admin()
        self._require_exists(target)

        self._submit(Operation(OperationKind.MOUNT, target, {"mountpoint": mountpoint}))
        return Outcome.ok(f"Mounted {target} at {mountpoint}.")

    def _remove(self, args: Arguments) -> Outcome:
        target = self._require_filesystem_target()
        mountpoint = args.lookup("mount")
        self._require_admin()

        self._submit(Operation(OperationKind.UNMOUNT, target, {"mountpoint": mountpoint}))
        return Outcome.ok(f"Unmounted {mountpoint or target}.")

    def _raid_membership(self, args: Arguments, add: bool) -> Outcome:
        volume = self._require_selection(DeviceKind.VOLUME)
        reference = self._require_value(args, "disk")
        self._require_admin()
        member = self._resolve_existing(DeviceKind.DISK, reference)

        kind = OperationKind.RAID_ADD if add else OperationKind.RAID_REMOVE
        self._submit(Operation(kind, volume, {"member": member}))
        if add:
            return Outcome.ok(f"Added {member} to {volume}.")
        return Outcome.ok(f"Removed {member} from {volume}.")

    # ==================== Virtual disks ====================

    def _create_vdisk(self, args: Arguments) -> Outcome:
        file_path = self._require_value(args, "file")
        maximum = parse_mib(self._require_value(args, "maximum"), "maximum")
        vdisk_type = (args.lookup("type") or "expandable").lower()
        if vdisk_type not in ("fixed", "expandable"):
            raise CommandSyntaxError(f"Invalid value for TYPE: {vdisk_type}")

        if Path(file_path).exists():
            raise ServiceError(f"The file already exists: {file_path}")

        self._submit(
            Operation(
                OperationKind.CREATE_VDISK,
                file_path,
                {"size_mib": maximum, "fixed": vdisk_type == "fixed"},
            )
        )
        return Outcome.ok(f"Created {vdisk_type} virtual disk {file_path} ({maximum} MiB).")

    def _expand(self, args: Arguments) -> Outcome:
        self._require_subverb(args, "vdisk")
        file_path = self._require_value(args, "file")
        maximum = parse_mib(self._require_value(args, "maximum"), "maximum")
        if not Path(file_path).exists():
            raise DeviceNotFoundError(f"Virtual disk file not found: {file_path}")

        self._submit(Operation(OperationKind.EXPAND_VDISK, file_path, {"size_mib": maximum}))
        return Outcome.ok(f"Expanded {file_path} to {maximum} MiB.")

    def _vdisk_attachment(self, args: Arguments, attach: bool) -> Outcome:
        self._require_subverb(args, "vdisk")
        file_path = self._require_value(args, "file")
        self._require_admin()

        if not attach:
            self._submit(Operation(OperationKind.DETACH_VDISK, file_path))
            return Outcome.ok(f"Detached {file_path}.")

        if not Path(file_path).exists():
            raise DeviceNotFoundError(f"Virtual disk file not found: {file_path}")
        result = self._submit(
            Operation(OperationKind.ATTACH_VDISK, file_path, {"readonly": args.has("readonly")})
        )
        device = result.stdout.strip()
        if device:
            return Outcome.ok(f"Attached {file_path} as {device}.")
        return Outcome.ok(f"Attached {file_path}.")
