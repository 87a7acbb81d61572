"""Discovery of disks on macOS through diskutil and ioreg."""

from __future__ import annotations

import plistlib
import posixpath
import subprocess
import sys
from typing import Any, Mapping, Optional

from hwscan.context import Context
from hwscan.disk import Disk, DriveType, Partition, StorageController


class BlockDiscoveryError(RuntimeError):
    """Raised when the system tools report unusable data."""


def _run(args: list[str]) -> bytes:
    return subprocess.run(args, capture_output=True, check=True).stdout


def _parse_plist(data: bytes, what: str) -> Any:
    try:
        return plistlib.loads(data)
    except (plistlib.InvalidFileException, ValueError) as err:
        raise BlockDiscoveryError(f"{what} plist unmarshal failed: {err}") from err


def _disk_util_list() -> Mapping[str, Any]:
    try:
        out = _run(["diskutil", "list", "-plist"])
    except (OSError, subprocess.CalledProcessError) as err:
        raise BlockDiscoveryError(f"diskutil list failed: {err}") from err
    return _parse_plist(out, "diskutil list")


def _disk_util_info(device: str) -> Mapping[str, Any]:
    try:
        out = _run(["diskutil", "info", "-plist", device])
    except (OSError, subprocess.CalledProcessError) as err:
        raise BlockDiscoveryError(f"diskutil info for {device!r} failed: {err}") from err
    return _parse_plist(out, f"diskutil info for {device!r}")


def _ioreg(device_tree_path: str) -> Optional[Mapping[str, Any]]:
    name = posixpath.basename(device_tree_path)
    try:
        out = _run(["ioreg", "-a", "-d", "1", "-r", "-n", name])
    except (OSError, subprocess.CalledProcessError) as err:
        raise BlockDiscoveryError(
            f"ioreg query for {device_tree_path!r} failed: {err}"
        ) from err
    if not out:
        return None
    nodes = _parse_plist(out, f"ioreg for {device_tree_path!r}")
    if not isinstance(nodes, list) or len(nodes) != 1:
        count = len(nodes) if isinstance(nodes, list) else 0
        raise BlockDiscoveryError(
            f"ioreg unmarshal resulted in {count} I/O device tree nodes (expected 1)"
        )
    return nodes[0]


def drive_type_from_plist(info_plist: Mapping[str, Any]) -> DriveType:
    """Return SSD for solid-state devices and HDD otherwise."""
    return DriveType.SSD if info_plist.get("SolidState", False) else DriveType.HDD


def storage_controller_from_plist(info_plist: Mapping[str, Any]) -> StorageController:
    """Return NVMe when the device tree path ends at an NVMe controller, else SCSI."""
    if str(info_plist.get("DeviceTreePath", "")).endswith("IONVMeController"):
        return StorageController.NVME
    return StorageController.SCSI


def _make_partition(node: Mapping[str, Any], is_apfs: bool, disk: Disk) -> Partition:
    size = int(node.get("Size", 0))
    identifier = node.get("DeviceIdentifier", "")
    if size < 0:
        raise BlockDiscoveryError(f"invalid size {size} of partition {identifier!r}")
    info = _disk_util_info(identifier)
    return Partition(
        name=identifier,
        label=node.get("VolumeName", ""),
        mount_point=node.get("MountPoint", ""),
        size_bytes=size,
        type="APFS Volume" if is_apfs else node.get("Content", ""),
        is_read_only=not info.get("WritableVolume", False),
        uuid=node.get("VolumeUUID", ""),
        disk=disk,
    )


def load(ctx: Context) -> list[Disk]:
    """Return the disks reported by diskutil, each with its partitions."""
    if not ctx.enable_tools:
        raise BlockDiscoveryError(
            "EnableTools=false on darwin disables block support entirely."
        )
    try:
        listing = _disk_util_list()
    except BlockDiscoveryError as err:
        print(err, file=sys.stderr)
        raise

    disks: list[Disk] = []
    for node in listing.get("AllDisksAndPartitions", []):
        identifier = node.get("DeviceIdentifier", "")
        size = int(node.get("Size", 0))
        if size < 0:
            raise BlockDiscoveryError(f"invalid size {size} of disk {identifier!r}")

        info = _disk_util_info(identifier)
        block_size = int(info.get("DeviceBlockSize", 0))
        if block_size < 0:
            raise BlockDiscoveryError(
                f"invalid block size {block_size} of disk {identifier!r}"
            )
        tree_path = str(info.get("DeviceTreePath", ""))
        bus_path = tree_path.removeprefix("IODeviceTree:")

        ioreg = _ioreg(tree_path)
        if ioreg is None:
            continue

        disk = Disk(
            name=identifier,
            size_bytes=size,
            physical_block_size_bytes=block_size,
            drive_type=drive_type_from_plist(info),
            is_removable=bool(info.get("Removable", False)),
            storage_controller=storage_controller_from_plist(info),
            bus_path=bus_path,
            numa_node_id=-1,
            vendor=ioreg.get("Vendor Name", ""),
            model=ioreg.get("Model Number", ""),
            serial_number=ioreg.get("Serial Number", ""),
            wwn="",
        )
        disk.partitions = [
            _make_partition(part, False, disk) for part in node.get("Partitions", [])
        ] + [
            _make_partition(vol, True, disk) for vol in node.get("APFSVolumes", [])
        ]
        disks.append(disk)
    return disks