"""
Verb catalog and help text.

Every verb of the diskpart command surface is listed here, including
verbs that are accepted without an effect on Linux.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Verb(Enum):
    """Closed set of command verbs."""

    ACTIVE = "active"
    ADD = "add"
    ASSIGN = "assign"
    ATTACH = "attach"
    ATTRIBUTES = "attributes"
    AUTOMOUNT = "automount"
    BREAK = "break"
    CLEAN = "clean"
    COMPACT = "compact"
    CONVERT = "convert"
    CREATE = "create"
    DELETE = "delete"
    DETACH = "detach"
    DETAIL = "detail"
    DUMP = "dump"
    EXIT = "exit"
    EXPAND = "expand"
    EXTEND = "extend"
    FILESYSTEMS = "filesystems"
    FORMAT = "format"
    GPT = "gpt"
    HELP = "help"
    IMPORT = "import"
    INACTIVE = "inactive"
    LIST = "list"
    MERGE = "merge"
    OFFLINE = "offline"
    ONLINE = "online"
    RECOVER = "recover"
    REM = "rem"
    REMOVE = "remove"
    REPAIR = "repair"
    RESCAN = "rescan"
    RETAIN = "retain"
    SAN = "san"
    SELECT = "select"
    SETID = "setid"
    SHRINK = "shrink"
    UNIQUEID = "uniqueid"

    @classmethod
    def parse(cls, token: str) -> Verb | None:
        """Case-insensitive lookup; ``?`` is an alias for ``help``."""
        token_lower = token.lower()
        if token_lower == "?":
            return cls.HELP
        try:
            return cls(token_lower)
        except ValueError:
            return None

    @property
    def implemented(self) -> bool:
        return self not in UNIMPLEMENTED_VERBS


# Accepted so that scripts written for diskpart keep running
UNIMPLEMENTED_VERBS = frozenset(
    {
        Verb.AUTOMOUNT,
        Verb.COMPACT,
        Verb.DUMP,
        Verb.IMPORT,
        Verb.MERGE,
        Verb.RECOVER,
        Verb.RETAIN,
        Verb.SAN,
    }
)


@dataclass(frozen=True)
class VerbHelp:
    summary: str
    usage: tuple[str, ...]
    details: str = ""

    def render(self, verb: Verb) -> str:
        lines = [f"{verb.value.upper()} - {self.summary}", ""]
        lines.extend(f"Usage: {usage}" for usage in self.usage)
        if self.details:
            lines.append("")
            lines.append(self.details)
        if not verb.implemented:
            lines.append("")
            lines.append("This command is recognized but not implemented on Linux.")
        return "\n".join(lines)


HELP: dict[Verb, VerbHelp] = {
    Verb.ACTIVE: VerbHelp(
        "Mark the selected partition as active (bootable).",
        ("active",),
    ),
    Verb.ADD: VerbHelp(
        "Add a disk to the selected RAID volume.",
        ("add disk=<n|name>",),
    ),
    Verb.ASSIGN: VerbHelp(
        "Mount the selected volume or partition.",
        ("assign mount=<directory>",),
    ),
    Verb.ATTACH: VerbHelp(
        "Attach a virtual disk file as a loop device.",
        ("attach vdisk file=<path> [readonly]",),
    ),
    Verb.ATTRIBUTES: VerbHelp(
        "Display or change the read-only attribute of a device.",
        (
            "attributes [disk|volume|partition]",
            "attributes [disk|volume|partition] set|clear readonly",
        ),
        "Without a target the selected disk is used.",
    ),
    Verb.AUTOMOUNT: VerbHelp("Enable or disable automatic mounting.", ("automount",)),
    Verb.BREAK: VerbHelp(
        "Remove a disk from the selected RAID volume.",
        ("break disk=<n|name>",),
    ),
    Verb.CLEAN: VerbHelp(
        "Remove partition and filesystem signatures from the selected disk.",
        ("clean [all]",),
        "With ALL the whole disk is zeroed: a discard is tried first and a\n"
        "full zero fill is used when the device does not support discard.",
    ),
    Verb.COMPACT: VerbHelp("Reduce the size of a virtual disk file.", ("compact vdisk",)),
    Verb.CONVERT: VerbHelp(
        "Write a new, empty partition table to the selected disk.",
        ("convert gpt|mbr",),
    ),
    Verb.CREATE: VerbHelp(
        "Create a partition on the selected disk, or a virtual disk file.",
        (
            "create partition primary|logical|extended [size=<MiB>] [start=<MiB>]",
            "create partition efi [size=<MiB>] [start=<MiB>]",
            "create partition msr [size=<MiB>] [start=<MiB>]",
            "create vdisk file=<path> maximum=<MiB> [type=fixed|expandable]",
        ),
        "Partitions start at 1 MiB and fill the disk unless SIZE is given.\n"
        "EFI partitions default to 100 MiB; MSR partitions default to 16 MiB\n"
        "starting at 101 MiB.",
    ),
    Verb.DELETE: VerbHelp("Delete the selected partition.", ("delete partition [override]",)),
    Verb.DETACH: VerbHelp(
        "Detach the loop devices backed by a virtual disk file.",
        ("detach vdisk file=<path>",),
    ),
    Verb.DETAIL: VerbHelp(
        "Show details of the selected disk, partition or volume.",
        ("detail disk|partition|volume",),
    ),
    Verb.DUMP: VerbHelp("Write a crash dump.", ("dump",)),
    Verb.EXIT: VerbHelp("Exit the interpreter.", ("exit",)),
    Verb.EXPAND: VerbHelp(
        "Grow a virtual disk file to a new maximum size.",
        ("expand vdisk file=<path> maximum=<MiB>",),
    ),
    Verb.EXTEND: VerbHelp(
        "Grow the selected partition.",
        ("extend [size=<MiB>]",),
        "SIZE is the new total size; without it all following free space is used.",
    ),
    Verb.FILESYSTEMS: VerbHelp("List the filesystems FORMAT can create.", ("filesystems",)),
    Verb.FORMAT: VerbHelp(
        "Create a filesystem on the selected volume or partition.",
        ("format [fs=<filesystem>] [label=<label>] [quick]",),
        "Use FILESYSTEMS to list the supported filesystems.",
    ),
    Verb.GPT: VerbHelp(
        "Set the GPT attribute bits of the selected partition.",
        ("gpt attributes=<hex>",),
    ),
    Verb.HELP: VerbHelp("Display the list of commands or help for one command.", ("help [command]",)),
    Verb.IMPORT: VerbHelp("Import a foreign disk group.", ("import",)),
    Verb.INACTIVE: VerbHelp(
        "Clear the active (bootable) flag of the selected partition.",
        ("inactive",),
    ),
    Verb.LIST: VerbHelp(
        "List disks, partitions, volumes or virtual disks.",
        ("list disk|partition|volume|vdisk",),
        "With a disk selected, LIST PARTITION shows only that disk's partitions.",
    ),
    Verb.MERGE: VerbHelp("Merge a child disk with its parents.", ("merge vdisk",)),
    Verb.OFFLINE: VerbHelp("Take the selected disk offline.", ("offline [disk]",)),
    Verb.ONLINE: VerbHelp("Bring the selected disk online.", ("online [disk]",)),
    Verb.RECOVER: VerbHelp("Refresh the state of a disk pack.", ("recover",)),
    Verb.REM: VerbHelp("Comment; the line is ignored.", ("rem <text>",)),
    Verb.REMOVE: VerbHelp(
        "Unmount the selected volume or partition.",
        ("remove [mount=<directory>]",),
    ),
    Verb.REPAIR: VerbHelp(
        "Check and repair the filesystem of the selected volume or partition.",
        ("repair",),
    ),
    Verb.RESCAN: VerbHelp("Re-read the partition tables of all disks.", ("rescan",)),
    Verb.RETAIN: VerbHelp("Prepare a volume for use as a boot volume.", ("retain",)),
    Verb.SAN: VerbHelp("Display or set the SAN policy.", ("san",)),
    Verb.SELECT: VerbHelp(
        "Select a disk, partition or volume.",
        (
            "select disk <n|name>",
            "select partition <n|name>",
            "select volume <n|name>",
        ),
        "N is the number shown by LIST; a name is taken relative to /dev.",
    ),
    Verb.SETID: VerbHelp(
        "Change the partition type of the selected partition.",
        ("setid id=<type> [override]",),
    ),
    Verb.SHRINK: VerbHelp(
        "Shrink the selected partition to a new total size.",
        ("shrink size=<MiB>",),
    ),
    Verb.UNIQUEID: VerbHelp(
        "Display or set the identifier of the selected disk.",
        ("uniqueid disk [id=<identifier>]",),
    ),
}


def render_full_help() -> str:
    lines = ["Available commands:", ""]
    for verb in Verb:
        lines.append(f"  {verb.value.upper():<12} {HELP[verb].summary}")
    return "\n".join(lines)


def render_verb_help(verb: Verb) -> str:
    return HELP[verb].render(verb)
