"""BIOS release information."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from hwscan import dmi
from hwscan.context import UNKNOWN, Context
from hwscan.marshal import safe_json, safe_yaml


@dataclass
class BiosInfo:
    """BIOS release information."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    vendor: str = ""
    version: str = ""
    date: str = ""

    def __str__(self) -> str:
        parts = ["bios"]
        if self.vendor:
            parts.append(" vendor=" + self.vendor)
        if self.version:
            parts.append(" version=" + self.version)
        if self.date and self.date != UNKNOWN:
            parts.append(" date=" + self.date)
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {"vendor": self.vendor, "version": self.version, "date": self.date}

    def yaml_string(self) -> str:
        return safe_yaml(self.ctx, {"bios": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        return safe_json(self.ctx, {"bios": self.to_dict()}, indent)


def _load(info: BiosInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise NotImplementedError(f"BIOS information is not supported on {sys.platform}")
    ctx = info.ctx
    info.vendor = dmi.item(ctx, "bios_vendor")
    info.version = dmi.item(ctx, "bios_version")
    info.date = dmi.item(ctx, "bios_date")


def new(ctx: Optional[Context] = None, **kwargs: Any) -> BiosInfo:
    """Discover the host's BIOS information."""
    if ctx is None:
        ctx = Context(**kwargs)
    info = BiosInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info