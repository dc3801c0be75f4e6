import os

import pytest

from diskmaker.errors import StableIdNotFoundError
from diskmaker.resolver import StableIdResolver


def test_list_ids_is_sorted(dev_tree):
    dev_tree.add_device("sdb", "wwn-0x200", "ata-DISK_B")
    dev_tree.add_device("sdc", "scsi-0SDC")

    resolver = StableIdResolver(str(dev_tree.by_id_dir))
    assert resolver.list_ids() == [
        dev_tree.id_path("ata-DISK_B"),
        dev_tree.id_path("scsi-0SDC"),
        dev_tree.id_path("wwn-0x200"),
    ]


def test_list_ids_missing_directory(tmp_path):
    assert StableIdResolver(str(tmp_path / "missing")).list_ids() == []


def test_resolve_by_name_first_alias_wins(dev_tree):
    dev_tree.add_device("sdb", "wwn-0x200", "ata-DISK_B")
    resolver = StableIdResolver(str(dev_tree.by_id_dir))

    disk_id = resolver.resolve_by_name("sdb", resolver.list_ids())
    assert disk_id == dev_tree.id_path("ata-DISK_B")
    assert os.path.basename(os.path.realpath(disk_id)) == "sdb"


def test_resolve_by_name_uses_supplied_order(dev_tree):
    dev_tree.add_device("sdb", "wwn-0x200", "ata-DISK_B")
    resolver = StableIdResolver(str(dev_tree.by_id_dir))

    listing = [dev_tree.id_path("wwn-0x200"), dev_tree.id_path("ata-DISK_B")]
    assert resolver.resolve_by_name("sdb", listing) == dev_tree.id_path("wwn-0x200")


def test_resolve_by_name_skips_dangling_links(dev_tree):
    os.symlink("../../gone", dev_tree.by_id_dir / "wwn-0xdead")
    dev_tree.add_device("sdb", "wwn-0x200")
    resolver = StableIdResolver(str(dev_tree.by_id_dir))

    assert resolver.resolve_by_name("sdb", resolver.list_ids()) == dev_tree.id_path("wwn-0x200")


def test_resolve_by_name_not_found(dev_tree):
    dev_tree.add_device("sdc", "wwn-0x300")
    resolver = StableIdResolver(str(dev_tree.by_id_dir))

    with pytest.raises(StableIdNotFoundError):
        resolver.resolve_by_name("sdb", resolver.list_ids())


def test_resolve_by_id(dev_tree):
    dev_tree.add_device("sdc", "wwn-0x123")
    resolver = StableIdResolver(str(dev_tree.by_id_dir))

    assert resolver.resolve_by_id("wwn-0x123") == (dev_tree.id_path("wwn-0x123"), "sdc")


@pytest.mark.parametrize("device_id", ["wwn-0xmissing", "", "../sdc", ".", ".."])
def test_resolve_by_id_failures(dev_tree, device_id):
    dev_tree.add_device("sdc", "wwn-0x123")
    resolver = StableIdResolver(str(dev_tree.by_id_dir))

    with pytest.raises(StableIdNotFoundError):
        resolver.resolve_by_id(device_id)


def test_resolve_by_id_dangling_link(dev_tree):
    os.symlink("../../gone", dev_tree.by_id_dir / "wwn-0xdead")
    resolver = StableIdResolver(str(dev_tree.by_id_dir))

    with pytest.raises(StableIdNotFoundError):
        resolver.resolve_by_id("wwn-0xdead")
