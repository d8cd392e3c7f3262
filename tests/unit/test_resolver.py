"""
Tests for diskpart.shell.resolver module.
"""

import pytest

from diskpart.core.models import DeviceKind
from diskpart.shell.resolver import DeviceResolver, parse_index


class TestParseIndex:
    """Tests for parse_index."""

    def test_integer(self) -> None:
        assert parse_index("3") == 3
        assert parse_index("-1") == -1

    def test_name(self) -> None:
        assert parse_index("sda") is None


class TestDeviceResolver:
    """Tests for DeviceResolver."""

    @pytest.fixture
    def resolver(self, fake_backend) -> DeviceResolver:
        return DeviceResolver(fake_backend, "/dev")

    def test_index_is_one_based(self, resolver: DeviceResolver) -> None:
        assert resolver.resolve(DeviceKind.DISK, "1") == "/dev/sda"
        assert resolver.resolve(DeviceKind.DISK, "2") == "/dev/sdb"

    def test_index_out_of_range(self, resolver: DeviceResolver) -> None:
        assert resolver.resolve(DeviceKind.DISK, "3") is None
        assert resolver.resolve(DeviceKind.DISK, "99") is None

    @pytest.mark.parametrize("reference", ["0", "-1"])
    def test_index_not_positive(self, resolver: DeviceResolver, reference: str) -> None:
        assert resolver.resolve(DeviceKind.DISK, reference) is None

    def test_partition_index_uses_partition_enumeration(self, resolver: DeviceResolver) -> None:
        assert resolver.resolve(DeviceKind.PARTITION, "3") == "/dev/sdb1"

    def test_bare_name_gets_device_root(self, resolver: DeviceResolver) -> None:
        assert resolver.resolve(DeviceKind.DISK, "nvme0n1") == "/dev/nvme0n1"

    def test_absolute_path_used_as_given(self, resolver: DeviceResolver) -> None:
        assert resolver.resolve(DeviceKind.DISK, "/dev/sdz") == "/dev/sdz"
        assert resolver.resolve(DeviceKind.DISK, "/dev/mapper/vg-lv") == "/dev/mapper/vg-lv"

    def test_resolution_does_not_check_existence(self, resolver: DeviceResolver) -> None:
        path = resolver.resolve(DeviceKind.DISK, "sdz")
        assert path == "/dev/sdz"
        assert resolver.exists(path) is False

    def test_custom_device_root(self, fake_backend) -> None:
        resolver = DeviceResolver(fake_backend, "/srv/dev/")
        assert resolver.canonical_path("sda") == "/srv/dev/sda"

    def test_parent_and_number(self, resolver: DeviceResolver) -> None:
        assert resolver.parent_and_number("/dev/sda2") == ("/dev/sda", 2)

    def test_parent_and_number_unavailable(self, resolver: DeviceResolver) -> None:
        assert resolver.parent_and_number("/dev/sda") is None

    def test_parent_and_number_rejects_zero(self, resolver: DeviceResolver, fake_backend) -> None:
        fake_backend.parents["/dev/sda9"] = ("/dev/sda", 0)
        assert resolver.parent_and_number("/dev/sda9") is None

    def test_parent_and_number_is_not_cached(self, resolver: DeviceResolver, fake_backend) -> None:
        assert resolver.parent_and_number("/dev/sda2") == ("/dev/sda", 2)
        fake_backend.parents["/dev/sda2"] = ("/dev/sda", 5)
        assert resolver.parent_and_number("/dev/sda2") == ("/dev/sda", 5)

    def test_canonicalize_follows_backend_aliases(self, resolver: DeviceResolver, fake_backend) -> None:
        fake_backend.aliases["/dev/disk/by-uuid/1234"] = "/dev/sdb"
        assert resolver.canonicalize("/dev/disk/by-uuid/1234") == "/dev/sdb"
        assert resolver.canonicalize("/dev/sda") == "/dev/sda"
