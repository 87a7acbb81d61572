"""Discovery of disks and partitions from Linux sysfs, udev and mounts."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from hwscan import linuxpath
from hwscan.context import UNKNOWN, Context
from hwscan.disk import Disk, DriveType, Partition, StorageController

SECTOR_SIZE = 512

_MOUNT_ESCAPES = {"\\011": "\t", "\\012": "\n", "\\040": " ", "\\\\": "\\"}
_MOUNT_ESCAPE_RE = re.compile("|".join(re.escape(key) for key in _MOUNT_ESCAPES))

# Checked in order; the first matching device-name prefix wins.
_DISK_PREFIXES = (
    ("fd", DriveType.FDD, StorageController.UNKNOWN),
    ("sd", DriveType.HDD, StorageController.SCSI),
    ("hd", DriveType.HDD, StorageController.IDE),
    ("vd", DriveType.HDD, StorageController.VIRTIO),
    ("nvme", DriveType.SSD, StorageController.NVME),
    ("sr", DriveType.ODD, StorageController.SCSI),
    ("xvd", DriveType.HDD, StorageController.SCSI),
    ("mmc", DriveType.SSD, StorageController.MMC),
    ("loop", DriveType.VIRTUAL, StorageController.LOOP),
)


@dataclass
class MountEntry:
    """One line of a mounts table."""

    partition: str
    mountpoint: str
    filesystem_type: str
    options: list[str] = field(default_factory=list)


def parse_mount_entry(line: str) -> Optional[MountEntry]:
    """Parse a mounts line, decoding octal escapes in the mount point.

    Returns None for lines that do not describe a device mount.
    """
    if not line.startswith("/"):
        return None
    fields = line.split()
    if len(fields) < 4:
        return None
    mountpoint = _MOUNT_ESCAPE_RE.sub(
        lambda match: _MOUNT_ESCAPES[match.group(0)], fields[1]
    )
    return MountEntry(
        partition=fields[0],
        mountpoint=mountpoint,
        filesystem_type=fields[2],
        options=fields[3].split(","),
    )


def disk_types(name: str) -> tuple[DriveType, StorageController]:
    """Guess the drive type and storage controller from a device name."""
    for prefix, drive_type, controller in _DISK_PREFIXES:
        if name.startswith(prefix):
            return drive_type, controller
    return DriveType.UNKNOWN, StorageController.UNKNOWN


def _read_text(path: str) -> Optional[str]:
    try:
        return Path(path).read_text()
    except OSError:
        return None


def _read_uint(path: str) -> Optional[int]:
    text = _read_text(path)
    if text is None:
        return None
    value = text.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def _disk_size_bytes(paths: linuxpath.Paths, disk: str) -> int:
    sectors = _read_uint(os.path.join(paths.sys_block, disk, "size"))
    return 0 if sectors is None else sectors * SECTOR_SIZE


def _disk_physical_block_size_bytes(paths: linuxpath.Paths, disk: str) -> int:
    size = _read_uint(
        os.path.join(paths.sys_block, disk, "queue", "physical_block_size")
    )
    return 0 if size is None else size


def _partition_size_bytes(paths: linuxpath.Paths, disk: str, part: str) -> int:
    sectors = _read_uint(os.path.join(paths.sys_block, disk, part, "size"))
    return 0 if sectors is None else sectors * SECTOR_SIZE


def _disk_numa_node_id(paths: linuxpath.Paths, disk: str) -> int:
    try:
        link = os.readlink(os.path.join(paths.sys_block, disk))
    except OSError:
        return -1
    if not link.startswith("../devices/"):
        return -1
    node_path = os.path.normpath(os.path.join(paths.sys_block, link, "numa_node"))
    text = _read_text(node_path)
    if text is None:
        return -1
    try:
        return int(text.strip())
    except ValueError:
        return -1


def _disk_vendor(paths: linuxpath.Paths, disk: str) -> str:
    text = _read_text(os.path.join(paths.sys_block, disk, "device", "vendor"))
    return UNKNOWN if text is None else text.strip()


def _disk_is_removable(paths: linuxpath.Paths, disk: str) -> bool:
    text = _read_text(os.path.join(paths.sys_block, disk, "removable"))
    return text is not None and text.strip() == "1"


def _disk_is_rotational(ctx: Context, paths: linuxpath.Paths, disk: str) -> bool:
    return ctx.read_int(os.path.join(paths.sys_block, disk, "queue", "rotational")) == 1


def _udev_info(paths: linuxpath.Paths, *device: str) -> Optional[dict[str, str]]:
    dev_no = _read_text(os.path.join(paths.sys_block, *device, "dev"))
    if dev_no is None:
        return None
    data = _read_text(os.path.join(paths.run_udev_data, "b" + dev_no.strip()))
    if data is None:
        return None
    info: dict[str, str] = {}
    for line in data.split("\n"):
        if line.startswith("E:"):
            key, sep, value = line[2:].partition("=")
            if sep:
                info[key] = value
    return info


def _udev_value(paths: linuxpath.Paths, keys: tuple[str, ...], *device: str) -> str:
    info = _udev_info(paths, *device)
    if info is None:
        return UNKNOWN
    return next((info[key] for key in keys if key in info), UNKNOWN)


def _disk_model(paths: linuxpath.Paths, disk: str) -> str:
    return _udev_value(paths, ("ID_MODEL",), disk)


def _disk_serial_number(paths: linuxpath.Paths, disk: str) -> str:
    # ID_SERIAL often repeats the vendor, so the short form is preferred.
    return _udev_value(paths, ("ID_SERIAL_SHORT", "ID_SERIAL"), disk)


def _disk_bus_path(paths: linuxpath.Paths, disk: str) -> str:
    return _udev_value(paths, ("ID_PATH",), disk)


def _disk_wwn(paths: linuxpath.Paths, disk: str) -> str:
    return _udev_value(paths, ("ID_WWN_WITH_EXTENSION", "ID_WWN"), disk)


def disk_part_label(paths: linuxpath.Paths, disk: str, partition: str) -> str:
    """Return the partition entry name recorded by udev, or UNKNOWN."""
    return _udev_value(paths, ("ID_PART_ENTRY_NAME",), disk, partition)


def disk_fs_label(paths: linuxpath.Paths, disk: str, partition: str) -> str:
    """Return the filesystem label recorded by udev, or UNKNOWN."""
    return _udev_value(paths, ("ID_FS_LABEL",), disk, partition)


def disk_part_type_udev(paths: linuxpath.Paths, disk: str, partition: str) -> str:
    """Return the filesystem type recorded by udev, or UNKNOWN."""
    return _udev_value(paths, ("ID_FS_TYPE",), disk, partition)


def disk_part_uuid(paths: linuxpath.Paths, disk: str, partition: str) -> str:
    """Return the partition entry UUID recorded by udev, or UNKNOWN."""
    return _udev_value(paths, ("ID_PART_ENTRY_UUID",), disk, partition)


def partition_info(paths: linuxpath.Paths, part: str) -> tuple[str, str, bool]:
    """Return (mount point, filesystem type, read-only) for a partition.

    Accepts "sda1" or "/dev/sda1". Unmounted partitions give ("", "", True).
    """
    if not part.startswith("/dev"):
        part = "/dev/" + part
    try:
        with open(paths.proc_mounts, encoding="utf-8", errors="replace") as mounts:
            for raw in mounts:
                entry = parse_mount_entry(raw.rstrip("\r\n"))
                if entry is None or entry.partition != part:
                    continue
                return entry.mountpoint, entry.filesystem_type, "rw" not in entry.options
    except OSError:
        pass
    return "", "", True


def _disk_partitions(ctx: Context, paths: linuxpath.Paths, disk: str) -> list[Partition]:
    try:
        names = sorted(os.listdir(os.path.join(paths.sys_block, disk)))
    except OSError as err:
        ctx.warn("failed to read disk partitions: %s\n", err)
        return []
    partitions = []
    for name in names:
        if not name.startswith(disk):
            continue
        mount_point, part_type, read_only = partition_info(paths, name)
        if not part_type:
            part_type = disk_part_type_udev(paths, disk, name)
        partitions.append(
            Partition(
                name=name,
                size_bytes=_partition_size_bytes(paths, disk, name),
                mount_point=mount_point,
                type=part_type,
                is_read_only=read_only,
                uuid=disk_part_uuid(paths, disk, name),
                label=disk_part_label(paths, disk, name),
                filesystem_label=disk_fs_label(paths, disk, name),
            )
        )
    return partitions


def disks(ctx: Context, paths: linuxpath.Paths) -> list[Disk]:
    """Return the disks listed under sysfs, skipping unused loop devices."""
    try:
        names = sorted(os.listdir(paths.sys_block))
    except OSError:
        return []
    result = []
    for name in names:
        drive_type, controller = disk_types(name)
        if not _disk_is_rotational(ctx, paths, name):
            drive_type = DriveType.SSD
        size = _disk_size_bytes(paths, name)
        if controller == StorageController.LOOP and size == 0:
            continue
        disk = Disk(
            name=name,
            size_bytes=size,
            physical_block_size_bytes=_disk_physical_block_size_bytes(paths, name),
            drive_type=drive_type,
            is_removable=_disk_is_removable(paths, name),
            storage_controller=controller,
            bus_path=_disk_bus_path(paths, name),
            numa_node_id=_disk_numa_node_id(paths, name),
            vendor=_disk_vendor(paths, name),
            model=_disk_model(paths, name),
            serial_number=_disk_serial_number(paths, name),
            wwn=_disk_wwn(paths, name),
        )
        disk.partitions = _disk_partitions(ctx, paths, name)
        for part in disk.partitions:
            part.disk = disk
        result.append(disk)
    return result


def load(ctx: Context) -> list[Disk]:
    """Return the disks of the system the context points at."""
    return disks(ctx, linuxpath.new(ctx))