"""Summary of the central processing units on the host."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from hwscan import cpu_linux
from hwscan.context import Context
from hwscan.marshal import safe_json, safe_yaml
from hwscan.processor import Processor


@dataclass
class CpuInfo:
    """All processor packages on the host with their totals."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    total_cores: int = 0
    total_threads: int = 0
    processors: list[Processor] = field(default_factory=list)

    def __str__(self) -> str:
        nps = "package" if len(self.processors) == 1 else "packages"
        ncs = "core" if self.total_cores == 1 else "cores"
        nts = "thread" if self.total_threads == 1 else "threads"
        return (
            f"cpu ({len(self.processors)} physical {nps}, "
            f"{self.total_cores} {ncs}, {self.total_threads} hardware {nts})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_cores": self.total_cores,
            "total_threads": self.total_threads,
            "processors": [proc.to_dict() for proc in self.processors],
        }

    def yaml_string(self) -> str:
        return safe_yaml(self.ctx, {"cpu": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        return safe_json(self.ctx, {"cpu": self.to_dict()}, indent)


def _load(info: CpuInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise NotImplementedError(f"CPU information is not supported on {sys.platform}")
    info.processors = cpu_linux.processors(info.ctx)
    info.total_cores = sum(proc.num_cores for proc in info.processors)
    info.total_threads = sum(proc.num_threads for proc in info.processors)


def new(ctx: Optional[Context] = None, **kwargs: Any) -> CpuInfo:
    """Discover the host's CPU information."""
    if ctx is None:
        ctx = Context(**kwargs)
    info = CpuInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info