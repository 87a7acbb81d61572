"""Discover CPU, block storage, BIOS, baseboard and chassis information."""

__version__ = "0.1.0"

__all__ = [
    "baseboard",
    "bios",
    "block",
    "block_darwin",
    "block_linux",
    "chassis",
    "cli",
    "context",
    "cpu",
    "cpu_linux",
    "disk",
    "dmi",
    "linuxpath",
    "marshal",
    "processor",
]