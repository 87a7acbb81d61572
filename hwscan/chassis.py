"""Chassis information."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from hwscan import dmi
from hwscan.context import UNKNOWN, Context
from hwscan.marshal import safe_json, safe_yaml

# SMBIOS chassis type names, in code order starting at 1.
_CHASSIS_TYPE_NAMES = (
    "Other", "Unknown", "Desktop", "Low profile desktop", "Pizza box",
    "Mini tower", "Tower", "Portable", "Laptop", "Notebook", "Hand held",
    "Docking station", "All in one", "Sub notebook", "Space-saving",
    "Lunch box", "Main server chassis", "Expansion chassis", "SubChassis",
    "Bus Expansion chassis", "Peripheral chassis", "RAID chassis",
    "Rack mount chassis", "Sealed-case PC", "Multi-system chassis",
    "Compact PCI", "Advanced TCA", "Blade", "Blade enclosure", "Tablet",
    "Convertible", "Detachable", "IoT gateway", "Embedded PC", "Mini PC",
    "Stick PC",
)

CHASSIS_TYPE_DESCRIPTIONS = {
    str(code): name for code, name in enumerate(_CHASSIS_TYPE_NAMES, start=1)
}


@dataclass
class ChassisInfo:
    """Chassis release information."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    asset_tag: str = ""
    serial_number: str = ""
    type: str = ""
    type_description: str = ""
    vendor: str = ""
    version: str = ""

    def __str__(self) -> str:
        extras = {
            "vendor": self.vendor,
            "serial": "" if self.serial_number == UNKNOWN else self.serial_number,
            "version": self.version,
        }
        suffix = "".join(f" {key}={value}" for key, value in extras.items() if value)
        return f"chassis type={self.type_description}{suffix}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_tag": self.asset_tag,
            "serial_number": self.serial_number,
            "type": self.type,
            "type_description": self.type_description,
            "vendor": self.vendor,
            "version": self.version,
        }

    def yaml_string(self) -> str:
        return safe_yaml(self.ctx, {"chassis": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        return safe_json(self.ctx, {"chassis": self.to_dict()}, indent)


def _load(info: ChassisInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise NotImplementedError(
            f"chassis information is not supported on {sys.platform}"
        )
    ctx = info.ctx
    info.asset_tag = dmi.item(ctx, "chassis_asset_tag")
    info.serial_number = dmi.item(ctx, "chassis_serial")
    info.type = dmi.item(ctx, "chassis_type")
    info.type_description = CHASSIS_TYPE_DESCRIPTIONS.get(info.type, UNKNOWN)
    info.vendor = dmi.item(ctx, "chassis_vendor")
    info.version = dmi.item(ctx, "chassis_version")


def new(ctx: Optional[Context] = None, **kwargs: Any) -> ChassisInfo:
    """Discover the host's chassis information."""
    if ctx is None:
        ctx = Context(**kwargs)
    info = ChassisInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info