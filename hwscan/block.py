"""Summary of the block storage on the host."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from hwscan import block_darwin, block_linux
from hwscan.context import Context
from hwscan.disk import Disk, Partition, _size_string, disk_from_dict
from hwscan.marshal import safe_json, safe_yaml


@dataclass
class BlockInfo:
    """All disk drives and partitions on the host."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    total_physical_bytes: int = 0
    disks: list[Disk] = field(default_factory=list)

    @property
    def partitions(self) -> list[Partition]:
        """Every partition of every disk, in disk order."""
        return [part for disk in self.disks for part in disk.partitions]

    def __str__(self) -> str:
        plural = "disk" if len(self.disks) == 1 else "disks"
        return (
            f"block storage ({len(self.disks)} {plural}, "
            f"{_size_string(self.total_physical_bytes)} physical storage)"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_size_bytes": self.total_physical_bytes,
            "disks": [disk.to_dict() for disk in self.disks],
        }

    def yaml_string(self) -> str:
        return safe_yaml(self.ctx, {"block": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        return safe_json(self.ctx, {"block": self.to_dict()}, indent)


def block_info_from_dict(data: Mapping[str, Any]) -> BlockInfo:
    """Build a BlockInfo from the mapping produced by BlockInfo.to_dict."""
    return BlockInfo(
        total_physical_bytes=int(data.get("total_size_bytes", 0)),
        disks=[disk_from_dict(disk) for disk in data.get("disks") or []],
    )


def _load(info: BlockInfo) -> None:
    if sys.platform.startswith("linux"):
        disks = block_linux.load(info.ctx)
    elif sys.platform == "darwin":
        disks = block_darwin.load(info.ctx)
    else:
        raise NotImplementedError(
            f"block information is not supported on {sys.platform}"
        )
    info.disks = disks
    info.total_physical_bytes = sum(disk.size_bytes for disk in disks)


def new(ctx: Optional[Context] = None, **kwargs: Any) -> BlockInfo:
    """Discover the host's block storage."""
    if ctx is None:
        ctx = Context(**kwargs)
    info = BlockInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info