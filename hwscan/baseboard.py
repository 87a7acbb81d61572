"""Baseboard (motherboard) information."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from hwscan import dmi
from hwscan.context import UNKNOWN, Context
from hwscan.marshal import safe_json, safe_yaml


@dataclass
class BaseboardInfo:
    """Baseboard release information."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    asset_tag: str = ""
    serial_number: str = ""
    vendor: str = ""
    version: str = ""
    product: str = ""

    def __str__(self) -> str:
        parts = ["baseboard"]
        if self.vendor:
            parts.append(" vendor=" + self.vendor)
        if self.serial_number and self.serial_number != UNKNOWN:
            parts.append(" serial=" + self.serial_number)
        if self.version:
            parts.append(" version=" + self.version)
        if self.product:
            parts.append(" product=" + self.product)
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_tag": self.asset_tag,
            "serial_number": self.serial_number,
            "vendor": self.vendor,
            "version": self.version,
            "product": self.product,
        }

    def yaml_string(self) -> str:
        return safe_yaml(self.ctx, {"baseboard": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        return safe_json(self.ctx, {"baseboard": self.to_dict()}, indent)


def _load(info: BaseboardInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise NotImplementedError(
            f"baseboard information is not supported on {sys.platform}"
        )
    ctx = info.ctx
    info.asset_tag = dmi.item(ctx, "board_asset_tag")
    info.serial_number = dmi.item(ctx, "board_serial")
    info.vendor = dmi.item(ctx, "board_vendor")
    info.version = dmi.item(ctx, "board_version")
    info.product = dmi.item(ctx, "board_name")


def new(ctx: Optional[Context] = None, **kwargs: Any) -> BaseboardInfo:
    """Discover the host's baseboard information."""
    if ctx is None:
        ctx = Context(**kwargs)
    info = BaseboardInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info