from pathlib import Path

import pytest

from hwscan import linuxpath
from hwscan.block_linux import (
    MountEntry,
    disk_fs_label,
    disk_part_label,
    disk_part_type_udev,
    disk_part_uuid,
    disk_types,
    disks,
    load,
    parse_mount_entry,
    partition_info,
)
from hwscan.context import UNKNOWN, Context
from hwscan.disk import DriveType, StorageController


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


@pytest.fixture
def ctx(tmp_path):
    return Context(
        chroot=str(tmp_path),
        snapshot_path="",
        enable_tools=False,
        alerter=lambda message: None,
    )


@pytest.fixture
def paths(ctx):
    return linuxpath.new(ctx)


@pytest.mark.parametrize(
    "line, expected",
    [
        (
            "/dev/sda6 / ext4 rw,relatime,errors=remount-ro,data=ordered 0 0",
            MountEntry(
                "/dev/sda6",
                "/",
                "ext4",
                ["rw", "relatime", "errors=remount-ro", "data=ordered"],
            ),
        ),
        (
            "/dev/sda8 /home/Name\\040with\\040spaces ext4 ro 0 0",
            MountEntry("/dev/sda8", "/home/Name with spaces", "ext4", ["ro"]),
        ),
        (
            "/dev/sda8 /home/Name\\011with\\012tab&newline ext4 ro 0 0",
            MountEntry("/dev/sda8", "/home/Name\twith\ntab&newline", "ext4", ["ro"]),
        ),
        (
            "/dev/sda1 /home/Name\\\\withslash ext4 ro 0 0",
            MountEntry("/dev/sda1", "/home/Name\\withslash", "ext4", ["ro"]),
        ),
        ("Indy, bad dates", None),
    ],
)
def test_parse_mount_entry(line, expected):
    assert parse_mount_entry(line) == expected


def test_parse_mount_entry_too_few_fields():
    assert parse_mount_entry("/dev/sda1 /mnt ext4") is None


@pytest.mark.parametrize(
    "name, drive_type, controller",
    [
        ("sda6", DriveType.HDD, StorageController.SCSI),
        ("nvme0n1", DriveType.SSD, StorageController.NVME),
        ("vda1", DriveType.HDD, StorageController.VIRTIO),
        ("xvda1", DriveType.HDD, StorageController.SCSI),
        ("fda1", DriveType.FDD, StorageController.UNKNOWN),
        ("sr0", DriveType.ODD, StorageController.SCSI),
        ("mmcblk0", DriveType.SSD, StorageController.MMC),
        ("Indy, bad dates", DriveType.UNKNOWN, StorageController.UNKNOWN),
        ("loop0", DriveType.VIRTUAL, StorageController.LOOP),
        ("hdb", DriveType.HDD, StorageController.IDE),
    ],
)
def test_disk_types(name, drive_type, controller):
    assert disk_types(name) == (drive_type, controller)


def _fake_partition(paths, udev_line):
    sys_block = Path(paths.sys_block)
    udev = Path(paths.run_udev_data)
    _write(sys_block / "sda" / "sda1" / "dev", "259:0\n")
    _write(udev / "b259:0", udev_line + "\n")


@pytest.mark.parametrize(
    "func, key, value",
    [
        (disk_part_label, "ID_PART_ENTRY_NAME", "TEST_LABEL_HWSCAN"),
        (disk_fs_label, "ID_FS_LABEL", "TEST_LABEL_HWSCAN"),
        (disk_part_type_udev, "ID_FS_TYPE", "ext4"),
        (disk_part_uuid, "ID_PART_ENTRY_UUID", "11111111-1111-1111-1111-111111111111"),
    ],
)
def test_udev_partition_values(paths, func, key, value):
    _fake_partition(paths, f"E:{key}={value}")
    assert func(paths, "sda", "sda1") == value
    assert func(paths, "sda", "sda2") == UNKNOWN


def test_udev_value_missing_key(paths):
    _fake_partition(paths, "E:ID_FS_TYPE=ext4")
    assert disk_part_label(paths, "sda", "sda1") == UNKNOWN


def test_loop_devices(ctx, paths):
    sys_block = Path(paths.sys_block)
    udev = Path(paths.run_udev_data)
    udev.mkdir(parents=True)
    _write(sys_block / "loop0" / "queue" / "rotational", "1\n")
    _write(sys_block / "loop0" / "size", "62810112\n")
    (sys_block / "loop1" / "queue").mkdir(parents=True)
    _write(sys_block / "loop1" / "size", "0\n")
    _write(sys_block / "loop0" / "loop0p1" / "dev", "259:0\n")
    _write(sys_block / "loop0" / "loop0p1" / "size", "102400\n")
    _write(udev / "b259:0", "E:ID_FS_TYPE=ext4\n")

    found = disks(ctx, paths)
    assert len(found) == 1
    disk = found[0]
    assert disk.name == "loop0"
    assert disk.drive_type == DriveType.VIRTUAL
    assert disk.storage_controller == StorageController.LOOP
    assert [part.name for part in disk.partitions] == ["loop0p1"]
    part = disk.partitions[0]
    assert part.type == "ext4"
    assert part.size_bytes == 102400 * 512
    assert part.disk is disk


def test_partition_info(paths):
    _write(
        Path(paths.proc_mounts),
        "proc /proc proc rw 0 0\n"
        "/dev/sda1 /boot ext4 rw,relatime 0 0\n"
        "/dev/sda2 /mnt/My\\040Data xfs ro,noatime 0 0\n",
    )
    assert partition_info(paths, "sda1") == ("/boot", "ext4", False)
    assert partition_info(paths, "/dev/sda2") == ("/mnt/My Data", "xfs", True)
    assert partition_info(paths, "sda3") == ("", "", True)


def test_partition_info_without_mounts_file(paths):
    assert partition_info(paths, "sda1") == ("", "", True)


def test_disks_full(ctx, paths):
    sys_block = Path(paths.sys_block)
    udev = Path(paths.run_udev_data)
    sda = sys_block / "sda"
    _write(sda / "queue" / "rotational", "1\n")
    _write(sda / "queue" / "physical_block_size", "4096\n")
    _write(sda / "size", "2048\n")
    _write(sda / "dev", "8:0\n")
    _write(sda / "removable", "1\n")
    _write(sda / "device" / "vendor", "ATA     \n")
    _write(sda / "sda1" / "dev", "8:1\n")
    _write(sda / "sda1" / "size", "1024\n")
    _write(
        udev / "b8:0",
        "S:disk/by-id/example\n"
        "E:ID_MODEL=TestModel\n"
        "E:ID_SERIAL=TestModel_SN0001\n"
        "E:ID_SERIAL_SHORT=SN0001\n"
        "E:ID_PATH=pci-0000:00:1f.2-ata-1\n"
        "E:ID_WWN=0x5000000000000001\n",
    )
    _write(
        udev / "b8:1",
        "E:ID_PART_ENTRY_NAME=boot\n"
        "E:ID_PART_ENTRY_UUID=22222222-2222-2222-2222-222222222222\n"
        "E:ID_FS_LABEL=BOOT\n"
        "E:ID_FS_TYPE=vfat\n",
    )
    _write(Path(paths.proc_mounts), "/dev/sda1 /boot ext4 rw,relatime 0 0\n")
    _write(sys_block / "nvme0n1" / "queue" / "rotational", "0\n")
    _write(sys_block / "nvme0n1" / "size", "4\n")

    found = load(ctx)
    assert [disk.name for disk in found] == ["nvme0n1", "sda"]
    nvme, sda_disk = found

    assert nvme.drive_type == DriveType.SSD
    assert nvme.storage_controller == StorageController.NVME
    assert nvme.size_bytes == 2048
    assert nvme.model == UNKNOWN
    assert nvme.vendor == UNKNOWN
    assert nvme.partitions == []

    assert sda_disk.drive_type == DriveType.HDD
    assert sda_disk.storage_controller == StorageController.SCSI
    assert sda_disk.size_bytes == 2048 * 512
    assert sda_disk.physical_block_size_bytes == 4096
    assert sda_disk.is_removable is True
    assert sda_disk.vendor == "ATA"
    assert sda_disk.model == "TestModel"
    assert sda_disk.serial_number == "SN0001"
    assert sda_disk.bus_path == "pci-0000:00:1f.2-ata-1"
    assert sda_disk.wwn == "0x5000000000000001"
    assert sda_disk.numa_node_id == -1

    part = sda_disk.partitions[0]
    assert len(sda_disk.partitions) == 1
    assert part.name == "sda1"
    assert part.size_bytes == 1024 * 512
    assert part.mount_point == "/boot"
    assert part.type == "ext4"
    assert part.is_read_only is False
    assert part.label == "boot"
    assert part.uuid == "22222222-2222-2222-2222-222222222222"
    assert part.filesystem_label == "BOOT"
    assert part.disk is sda_disk


def test_disks_without_sysfs(ctx, paths):
    assert disks(ctx, paths) == []