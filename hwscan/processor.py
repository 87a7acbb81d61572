"""Physical processor packages and the cores packed onto them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ProcessorCore:
    """A physical core within a processor package.

    The id is the identifier the host gave the core and is not necessarily a
    zero-based index. The logical processors are the zero-based indexes of
    the hardware threads ("thread siblings") running on the core.
    """

    id: int
    num_threads: int = 0
    logical_processors: list[int] = field(default_factory=list)

    def __str__(self) -> str:
        lps = " ".join(str(lp) for lp in self.logical_processors)
        return (
            f"processor core #{self.id} ({self.num_threads} threads), "
            f"logical processors [{lps}]"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "total_threads": self.num_threads,
            "logical_processors": list(self.logical_processors),
        }


@dataclass
class Processor:
    """A physical central processing unit package."""

    id: int
    num_cores: int = 0
    num_threads: int = 0
    vendor: str = ""
    model: str = ""
    capabilities: list[str] = field(default_factory=list)
    cores: list[ProcessorCore] = field(default_factory=list)

    def core_by_id(self, core_id: int) -> Optional[ProcessorCore]:
        """Return the core with the given id, or None."""
        return next((core for core in self.cores if core.id == core_id), None)

    def has_capability(self, find: str) -> bool:
        """Return True if the processor reports the given cpuid capability."""
        return find in self.capabilities

    def __str__(self) -> str:
        ncs = "core" if self.num_cores == 1 else "cores"
        nts = "thread" if self.num_threads == 1 else "threads"
        return (
            f"physical package #{self.id} "
            f"({self.num_cores} {ncs}, {self.num_threads} hardware {nts})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "total_cores": self.num_cores,
            "total_threads": self.num_threads,
            "vendor": self.vendor,
            "model": self.model,
            "capabilities": list(self.capabilities),
            "cores": [core.to_dict() for core in self.cores],
        }