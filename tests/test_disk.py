import json

import pytest

from hwscan.context import UNKNOWN
from hwscan.disk import (
    Disk,
    DriveType,
    Partition,
    StorageController,
    disk_from_dict,
    drive_type_from_string,
    storage_controller_from_string,
)


def _sample_disk():
    disk = Disk(
        name="sda",
        size_bytes=4096 * 1024,
        physical_block_size_bytes=512,
        drive_type=DriveType.HDD,
        is_removable=True,
        storage_controller=StorageController.SCSI,
        bus_path="pci-0000:00:1f.2-ata-1",
        vendor="ACME",
        model="Model-X",
        serial_number="SERIAL-PLACEHOLDER",
        wwn="wwn-placeholder",
    )
    part = Partition(
        name="sda1",
        label="root",
        mount_point="/",
        size_bytes=2048 * 1024,
        type="ext4",
        is_read_only=False,
        uuid="11111111-1111-1111-1111-111111111111",
        filesystem_label="rootfs",
        disk=disk,
    )
    disk.partitions = [part]
    return disk


@pytest.mark.parametrize(
    "name, expected",
    [("unknown", "Unknown"), ("ssd", "SSD"), ("virtual", "virtual"), ("ODD", "ODD")],
)
def test_drive_type_names(name, expected):
    assert str(drive_type_from_string(name)) == expected


@pytest.mark.parametrize(
    "name, expected",
    [("nvme", "NVMe"), ("virtio", "virtio"), ("loop", "loop"), ("IDE", "IDE")],
)
def test_storage_controller_names(name, expected):
    assert str(storage_controller_from_string(name)) == expected


@pytest.mark.parametrize("dt", list(DriveType))
def test_drive_type_string_round_trip(dt):
    assert drive_type_from_string(str(dt)) is dt
    assert drive_type_from_string(str(dt).upper()) is dt


@pytest.mark.parametrize("sc", list(StorageController))
def test_storage_controller_string_round_trip(sc):
    assert storage_controller_from_string(str(sc).lower()) is sc


def test_unknown_names_raise():
    with pytest.raises(ValueError, match="unknown drive type"):
        drive_type_from_string("tape")
    with pytest.raises(ValueError, match="unknown storage controller"):
        storage_controller_from_string("sata")


def test_partition_str_unknown_size():
    part = Partition(name="sda1", type="ext4", mount_point="/")
    assert str(part) == "sda1 (unknown) [ext4] mounted@/"


def test_partition_str_without_type_or_mount():
    assert str(Partition(name="sdb2")) == "sdb2 (unknown) "


def test_disk_str_minimal():
    disk = Disk(
        name="sda",
        drive_type=DriveType.HDD,
        storage_controller=StorageController.SCSI,
        bus_path="pci-0",
        model=UNKNOWN,
        serial_number=UNKNOWN,
        wwn=UNKNOWN,
    )
    assert str(disk) == "sda HDD (unknown) SCSI [@pci-0]"


def test_disk_str_with_node_and_extras():
    disk = Disk(
        name="nvme0n1",
        size_bytes=3 * 1024 * 1024,
        drive_type=DriveType.SSD,
        storage_controller=StorageController.NVME,
        bus_path="pci-1",
        numa_node_id=0,
        vendor="ACME",
        model=UNKNOWN,
        serial_number=UNKNOWN,
        wwn=UNKNOWN,
        is_removable=True,
    )
    assert str(disk) == (
        "nvme0n1 SSD (3MB) NVMe [@pci-1 (node #0)] vendor=ACME removable=true"
    )


def test_disk_to_dict_lowercases_enums():
    data = _sample_disk().to_dict()
    assert data["drive_type"] == "hdd"
    assert data["storage_controller"] == "scsi"
    assert data["removable"] is True
    assert "numa_node_id" not in data
    assert data["partitions"][0]["read_only"] is False


def test_disk_round_trip_through_json():
    disk = _sample_disk()
    restored = disk_from_dict(json.loads(json.dumps(disk.to_dict())))
    assert restored == disk
    assert restored.partitions[0].disk is restored
    assert restored.numa_node_id == -1


def test_disk_from_dict_rejects_bad_drive_type():
    data = _sample_disk().to_dict()
    data["drive_type"] = "floppy-ish"
    with pytest.raises(ValueError):
        disk_from_dict(data)


def test_partition_to_dict_excludes_disk():
    part = _sample_disk().partitions[0]
    assert set(part.to_dict()) == {
        "name",
        "label",
        "mount_point",
        "size_bytes",
        "type",
        "read_only",
        "uuid",
        "filesystem_label",
    }