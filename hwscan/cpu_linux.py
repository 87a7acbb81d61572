"""Discovery of processors from Linux sysfs and /proc/cpuinfo."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Callable, Optional

from hwscan import linuxpath
from hwscan.context import Context
from hwscan.processor import Processor, ProcessorCore

_CPU_DIR_RE = re.compile(r"cpu([0-9]+)")


def _parse_cpuinfo(
    text: str, warn: Optional[Callable[..., None]] = None
) -> dict[int, dict[str, str]]:
    result: dict[int, dict[str, str]] = {}
    attrs: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            lp_str = attrs.get("processor")
            if lp_str is None:
                if warn is not None:
                    warn("expected to find 'processor' key in /proc/cpuinfo attributes")
                continue
            try:
                lp_id = int(lp_str)
            except ValueError:
                lp_id = 0
            result[lp_id] = attrs
            attrs = {}
            continue
        parts = line.split(":")
        if len(parts) < 2:
            continue
        attrs[parts[0].strip()] = parts[1].strip()
    return result


def parse_cpuinfo(text: str) -> dict[int, dict[str, str]]:
    """Parse /proc/cpuinfo text into attribute maps keyed by logical processor.

    Blocks are separated by blank lines; a block is only recorded once the
    blank line that ends it has been seen.
    """
    return _parse_cpuinfo(text)


def _logical_processors(ctx: Context, paths: linuxpath.Paths) -> dict[int, dict[str, str]]:
    try:
        text = Path(paths.proc_cpuinfo).read_text()
    except OSError:
        return {}
    return _parse_cpuinfo(text, ctx.warn)


def _topology_int(ctx: Context, paths: linuxpath.Paths, lp_id: int, name: str) -> int:
    path = os.path.join(paths.sys_devices_system_cpu, f"cpu{lp_id}", "topology", name)
    return ctx.read_int(path)


def _new_processor(proc_id: int, attrs: dict[str, str]) -> Processor:
    proc = Processor(id=proc_id)
    if attrs.get("flags"):
        proc.capabilities = attrs["flags"].split(" ")
    elif attrs.get("Features"):
        proc.capabilities = attrs["Features"].split(" ")
    if attrs.get("model name"):
        proc.model = attrs["model name"]
    elif attrs.get("uarch"):
        proc.model = attrs["uarch"]
    if attrs.get("vendor_id"):
        proc.vendor = attrs["vendor_id"]
    elif attrs.get("isa"):
        proc.vendor = attrs["isa"]
    return proc


def processors(ctx: Context) -> list[Processor]:
    """Return the processor packages found under sysfs, ordered by id."""
    paths = linuxpath.new(ctx)
    lps = _logical_processors(ctx, paths)
    procs: dict[int, Processor] = {}
    try:
        names = sorted(os.listdir(paths.sys_devices_system_cpu))
    except OSError as err:
        ctx.warn("failed to read /sys/devices/system/cpu: %s", err)
        return []
    for name in names:
        match = _CPU_DIR_RE.fullmatch(name)
        if match is None:
            continue
        lp_id = int(match.group(1))
        proc_id = _topology_int(ctx, paths, lp_id, "physical_package_id")
        proc: Optional[Processor] = procs.get(proc_id)
        if proc is None:
            attrs = lps.get(lp_id)
            if attrs is None:
                ctx.warn("failed to find attributes for logical processor %d", lp_id)
                continue
            proc = _new_processor(proc_id, attrs)
            procs[proc_id] = proc

        core_id = _topology_int(ctx, paths, lp_id, "core_id")
        core = proc.core_by_id(core_id)
        if core is None:
            core = ProcessorCore(id=core_id, num_threads=1)
            proc.cores.append(core)
            proc.num_cores += 1
        else:
            core.num_threads += 1
        proc.num_threads += 1
        core.logical_processors.append(lp_id)
    return [procs[key] for key in sorted(procs)]


def cores_for_node(ctx: Context, node_id: int) -> list[ProcessorCore]:
    """Return the cores whose logical processors belong to a NUMA node.

    Raises OSError when the node directory cannot be read.
    """
    paths = linuxpath.new(ctx)
    node_path = os.path.join(paths.sys_devices_system_node, f"node{node_id}")
    cores: dict[int, ProcessorCore] = {}
    for name in sorted(os.listdir(node_path)):
        if not name.startswith("cpu") or name in ("cpumap", "cpulist"):
            continue
        try:
            lp_id = int(name[3:])
        except ValueError:
            ctx.warn(
                "failed to determine procID from %s. Expected integer after 3rd char.",
                name,
            )
            continue
        core_id = ctx.read_int(os.path.join(node_path, name, "topology", "core_id"))
        core = cores.setdefault(core_id, ProcessorCore(id=core_id))
        core.logical_processors.append(lp_id)
    for core in cores.values():
        core.num_threads = len(core.logical_processors)
    return list(cores.values())