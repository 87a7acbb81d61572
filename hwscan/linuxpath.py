"""Filesystem locations of the Linux pseudo-files that are inspected."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from hwscan.context import Context


def _join(*parts: str) -> str:
    joined = posixpath.normpath("/".join(part for part in parts if part))
    if joined.startswith("//"):
        joined = joined[1:]
    return joined


@dataclass(frozen=True)
class PathRoots:
    """Roots of the filesystem subtrees that are read."""

    etc: str = "/etc"
    proc: str = "/proc"
    run: str = "/run"
    sys: str = "/sys"
    var: str = "/var"


def default_path_roots() -> PathRoots:
    """Return the canonical default roots."""
    return PathRoots()


def path_roots_from_context(ctx: Context) -> PathRoots:
    """Return the default roots with the context's overrides applied."""
    defaults = default_path_roots()
    overrides = ctx.path_overrides
    return PathRoots(
        etc=overrides.get("/etc", defaults.etc),
        proc=overrides.get("/proc", defaults.proc),
        run=overrides.get("/run", defaults.run),
        sys=overrides.get("/sys", defaults.sys),
        var=overrides.get("/var", defaults.var),
    )


@dataclass(frozen=True)
class Paths:
    """Concrete paths of the pseudo-files, relative to a context."""

    var_log: str
    proc_meminfo: str
    proc_cpuinfo: str
    proc_mounts: str
    sys_kernel_mm_hugepages: str
    sys_block: str
    sys_devices_system_node: str
    sys_devices_system_memory: str
    sys_devices_system_cpu: str
    sys_bus_pci_devices: str
    sys_class_drm: str
    sys_class_dmi: str
    sys_class_net: str
    run_udev_data: str

    def node_cpu(self, node_id: int, lp_id: int) -> str:
        return _join(self.sys_devices_system_node, f"node{node_id}", f"cpu{lp_id}")

    def node_cpu_cache(self, node_id: int, lp_id: int) -> str:
        return _join(self.node_cpu(node_id, lp_id), "cache")

    def node_cpu_cache_index(self, node_id: int, lp_id: int, cache_index: int) -> str:
        return _join(self.node_cpu_cache(node_id, lp_id), f"index{cache_index}")


def new(ctx: Context) -> Paths:
    """Return the paths for the supplied context."""
    roots = path_roots_from_context(ctx)
    chroot = ctx.chroot
    return Paths(
        var_log=_join(chroot, roots.var, "log"),
        proc_meminfo=_join(chroot, roots.proc, "meminfo"),
        proc_cpuinfo=_join(chroot, roots.proc, "cpuinfo"),
        proc_mounts=_join(chroot, roots.proc, "self", "mounts"),
        sys_kernel_mm_hugepages=_join(chroot, roots.sys, "kernel", "mm", "hugepages"),
        sys_block=_join(chroot, roots.sys, "block"),
        sys_devices_system_node=_join(chroot, roots.sys, "devices", "system", "node"),
        sys_devices_system_memory=_join(chroot, roots.sys, "devices", "system", "memory"),
        sys_devices_system_cpu=_join(chroot, roots.sys, "devices", "system", "cpu"),
        sys_bus_pci_devices=_join(chroot, roots.sys, "bus", "pci", "devices"),
        sys_class_drm=_join(chroot, roots.sys, "class", "drm"),
        sys_class_dmi=_join(chroot, roots.sys, "class", "dmi"),
        sys_class_net=_join(chroot, roots.sys, "class", "net"),
        run_udev_data=_join(chroot, roots.run, "udev", "data"),
    )