"""
Pytest configuration and fixtures for DiskPart tests.
"""

import io
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from rich.console import Console

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from diskpart.core.config import DiskPartConfig, LoggingConfig  # noqa: E402
from diskpart.core.models import BlockDevice, DeviceKind, Operation  # noqa: E402
from diskpart.core.session import Session  # noqa: E402
from diskpart.platform.base import CommandResult, PlatformBackend  # noqa: E402


def make_device(
    name: str,
    kind: DeviceKind,
    size_bytes: int = 0,
    parent: str | None = None,
    **fields: object,
) -> BlockDevice:
    return BlockDevice(
        path=f"/dev/{name}",
        name=name,
        kind=kind,
        size_bytes=size_bytes,
        device_type={"disk": "disk", "partition": "part", "vdisk": "loop"}.get(kind.value, "raid1"),
        parent=parent,
        **fields,
    )


class FakeBackend(PlatformBackend):
    """
    In-memory backend with canned devices.

    Records every submitted operation; individual operation kinds can be
    made to fail by listing them in ``failing``.
    """

    def __init__(self) -> None:
        self.admin = True
        self.devices: dict[DeviceKind, list[BlockDevice]] = {
            DeviceKind.DISK: [
                make_device(
                    "sda",
                    DeviceKind.DISK,
                    500 * 1024**3,
                    partition_table="gpt",
                    table_id="0D3A6F1C-1111-2222-3333-444455556666",
                ),
                make_device("sdb", DeviceKind.DISK, 1024**4, partition_table="dos"),
            ],
            DeviceKind.PARTITION: [
                make_device("sda1", DeviceKind.PARTITION, 512 * 1024**2, "/dev/sda", fstype="vfat"),
                make_device(
                    "sda2",
                    DeviceKind.PARTITION,
                    100 * 1024**3,
                    "/dev/sda",
                    fstype="ext4",
                    label="root",
                    mountpoint="/",
                ),
                make_device("sdb1", DeviceKind.PARTITION, 1024**3, "/dev/sdb", fstype="xfs"),
            ],
            DeviceKind.VOLUME: [
                make_device("md0", DeviceKind.VOLUME, 2 * 1024**3, fstype="ext4"),
            ],
            DeviceKind.VDISK: [],
        }
        self.parents: dict[str, tuple[str, int]] = {
            "/dev/sda1": ("/dev/sda", 1),
            "/dev/sda2": ("/dev/sda", 2),
            "/dev/sdb1": ("/dev/sdb", 1),
        }
        self.existing: set[str] = {
            device.path for devices in self.devices.values() for device in devices
        }
        # alias path -> device node, as /dev/disk/by-id links resolve
        self.aliases: dict[str, str] = {}
        self.operations: list[Operation] = []
        self.failing: set = set()
        self.stdout: dict = {}

    @property
    def name(self) -> str:
        return "fake"

    def is_admin(self) -> bool:
        return self.admin

    def list_devices(self, kind: DeviceKind) -> list[BlockDevice]:
        return list(self.devices[kind])

    def describe(self, device_path: str) -> BlockDevice | None:
        for devices in self.devices.values():
            for device in devices:
                if device.path == device_path:
                    return device
        return None

    def partition_parent(self, partition_path: str) -> tuple[str, int] | None:
        return self.parents.get(partition_path)

    def device_exists(self, device_path: str) -> bool:
        return device_path in self.existing

    def canonicalize(self, device_path: str) -> str:
        return self.aliases.get(device_path, device_path)

    def execute(self, operation: Operation) -> CommandResult:
        self.operations.append(operation)
        if operation.kind in self.failing:
            return CommandResult(1, "", f"{operation.kind.value} failed", operation.describe())
        return CommandResult(0, self.stdout.get(operation.kind, ""), "", operation.describe())

    def kinds(self) -> list:
        return [operation.kind for operation in self.operations]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config(temp_dir: Path) -> DiskPartConfig:
    """Create a sample configuration for testing."""
    return DiskPartConfig(
        logging=LoggingConfig(
            file_enabled=False,
            console_enabled=False,
            log_directory=temp_dir / "logs",
        ),
    )


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def session(sample_config: DiskPartConfig, fake_backend: FakeBackend) -> Session:
    return Session(config=sample_config, backend=fake_backend, session_id="test-session-id")


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> Console:
    return Console(file=output, width=200, color_system=None)


@pytest.fixture
def dispatcher(session: Session, console: Console):
    from diskpart.shell.dispatcher import Dispatcher

    return Dispatcher(session, console=console)


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
