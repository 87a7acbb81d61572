"""Disks, partitions and the categories used to describe them."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from hwscan.context import UNKNOWN

_SIZE_UNITS = (
    ("EB", 1 << 60),
    ("PB", 1 << 50),
    ("TB", 1 << 40),
    ("GB", 1 << 30),
    ("MB", 1 << 20),
)


def _size_string(size: int) -> str:
    if size <= 0:
        return UNKNOWN
    suffix, unit = next(
        ((name, unit) for name, unit in _SIZE_UNITS if size >= unit), ("KB", 1 << 10)
    )
    return f"{-(-size // unit)}{suffix}"


class DriveType(enum.IntEnum):
    """General category of a drive device."""

    UNKNOWN = 0
    HDD = 1
    FDD = 2
    ODD = 3
    SSD = 4
    VIRTUAL = 5

    def __str__(self) -> str:
        return _DRIVE_TYPE_NAMES[self]


_DRIVE_TYPE_NAMES = {
    DriveType.UNKNOWN: "Unknown",
    DriveType.HDD: "HDD",
    DriveType.FDD: "FDD",
    DriveType.ODD: "ODD",
    DriveType.SSD: "SSD",
    DriveType.VIRTUAL: "virtual",
}


class StorageController(enum.IntEnum):
    """Category of block storage controller or driver."""

    UNKNOWN = 0
    IDE = 1
    SCSI = 2
    NVME = 3
    VIRTIO = 4
    MMC = 5
    LOOP = 6

    def __str__(self) -> str:
        return _STORAGE_CONTROLLER_NAMES[self]


_STORAGE_CONTROLLER_NAMES = {
    StorageController.UNKNOWN: "Unknown",
    StorageController.IDE: "IDE",
    StorageController.SCSI: "SCSI",
    StorageController.NVME: "NVMe",
    StorageController.VIRTIO: "virtio",
    StorageController.MMC: "MMC",
    StorageController.LOOP: "loop",
}

_DRIVE_TYPES_BY_NAME = {name.lower(): dt for dt, name in _DRIVE_TYPE_NAMES.items()}
_STORAGE_CONTROLLERS_BY_NAME = {
    name.lower(): sc for sc, name in _STORAGE_CONTROLLER_NAMES.items()
}


def drive_type_from_string(value: str) -> DriveType:
    """Return the drive type named by value, ignoring case."""
    key = value.lower()
    try:
        return _DRIVE_TYPES_BY_NAME[key]
    except KeyError:
        raise ValueError(f"unknown drive type: {key!r}") from None


def storage_controller_from_string(value: str) -> StorageController:
    """Return the storage controller named by value, ignoring case."""
    key = value.lower()
    try:
        return _STORAGE_CONTROLLERS_BY_NAME[key]
    except KeyError:
        raise ValueError(f"unknown storage controller: {key!r}") from None


@dataclass
class Partition:
    """A logical division of a disk."""

    name: str = ""
    label: str = ""
    mount_point: str = ""
    size_bytes: int = 0
    type: str = ""
    is_read_only: bool = False
    uuid: str = ""
    filesystem_label: str = ""
    disk: Optional["Disk"] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        type_str = f"[{self.type}]" if self.type else ""
        mount_str = f" mounted@{self.mount_point}" if self.mount_point else ""
        return f"{self.name} ({_size_string(self.size_bytes)}) {type_str}{mount_str}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "mount_point": self.mount_point,
            "size_bytes": self.size_bytes,
            "type": self.type,
            "read_only": self.is_read_only,
            "uuid": self.uuid,
            "filesystem_label": self.filesystem_label,
        }


@dataclass
class Disk:
    """A single disk drive providing raw block storage."""

    name: str = ""
    size_bytes: int = 0
    physical_block_size_bytes: int = 0
    drive_type: DriveType = DriveType.UNKNOWN
    is_removable: bool = False
    storage_controller: StorageController = StorageController.UNKNOWN
    bus_path: str = ""
    numa_node_id: int = -1
    vendor: str = ""
    model: str = ""
    serial_number: str = ""
    wwn: str = ""
    partitions: list[Partition] = field(default_factory=list)

    def __str__(self) -> str:
        at_node = f" (node #{self.numa_node_id})" if self.numa_node_id >= 0 else ""
        extras = []
        if self.vendor:
            extras.append(" vendor=" + self.vendor)
        if self.model != UNKNOWN:
            extras.append(" model=" + self.model)
        if self.serial_number != UNKNOWN:
            extras.append(" serial=" + self.serial_number)
        if self.wwn != UNKNOWN:
            extras.append(" WWN=" + self.wwn)
        if self.is_removable:
            extras.append(" removable=true")
        return (
            f"{self.name} {self.drive_type} ({_size_string(self.size_bytes)}) "
            f"{self.storage_controller} [@{self.bus_path}{at_node}]{''.join(extras)}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size_bytes": self.size_bytes,
            "physical_block_size_bytes": self.physical_block_size_bytes,
            "drive_type": str(self.drive_type).lower(),
            "removable": self.is_removable,
            "storage_controller": str(self.storage_controller).lower(),
            "bus_path": self.bus_path,
            "vendor": self.vendor,
            "model": self.model,
            "serial_number": self.serial_number,
            "wwn": self.wwn,
            "partitions": [part.to_dict() for part in self.partitions],
        }


def _partition_from_dict(data: Mapping[str, Any], disk: Disk) -> Partition:
    return Partition(
        name=data.get("name", ""),
        label=data.get("label", ""),
        mount_point=data.get("mount_point", ""),
        size_bytes=int(data.get("size_bytes", 0)),
        type=data.get("type", ""),
        is_read_only=bool(data.get("read_only", False)),
        uuid=data.get("uuid", ""),
        filesystem_label=data.get("filesystem_label", ""),
        disk=disk,
    )


def disk_from_dict(data: Mapping[str, Any]) -> Disk:
    """Build a Disk, with its partitions linked back to it, from serialised data."""
    disk = Disk(
        name=data.get("name", ""),
        size_bytes=int(data.get("size_bytes", 0)),
        physical_block_size_bytes=int(data.get("physical_block_size_bytes", 0)),
        drive_type=drive_type_from_string(data.get("drive_type", "unknown")),
        is_removable=bool(data.get("removable", False)),
        storage_controller=storage_controller_from_string(
            data.get("storage_controller", "unknown")
        ),
        bus_path=data.get("bus_path", ""),
        vendor=data.get("vendor", ""),
        model=data.get("model", ""),
        serial_number=data.get("serial_number", ""),
        wwn=data.get("wwn", ""),
    )
    disk.partitions = [
        _partition_from_dict(part, disk) for part in data.get("partitions") or []
    ]
    return disk