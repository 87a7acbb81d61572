# hwscan

hwscan discovers hardware information about the machine it runs on: CPU
packages, cores and threads; block storage disks and partitions; and the
BIOS, baseboard and chassis details exposed through DMI.

On Linux everything is read from `/proc`, `/sys` and the udev runtime
database, so no root privileges and no external tools are needed. On macOS
only block storage is supported; it is read by running `diskutil` and
`ioreg`. On other platforms, and for the non-block areas on macOS, `new()`
raises `NotImplementedError`.

## Installation

```
pip install .
```

## Command line

```
hwscan                 # block, cpu, chassis, bios and baseboard together
hwscan cpu             # CPU packages, cores and capabilities
hwscan block           # disks and partitions
hwscan bios
hwscan baseboard
hwscan chassis
hwscan version
```

Choose the output format with `-f` / `--format` (`human`, `json` or `yaml`);
add `--pretty` to indent JSON. The options may come before or after the
subcommand:

```
hwscan block --format json --pretty
hwscan -f yaml cpu
```

With `json` or `yaml` and no subcommand, all areas are printed as one
document keyed by `block`, `cpu`, `chassis`, `bios` and `baseboard`. An
unknown format, or an error while gathering information, is printed and the
command exits with status 1.

## Library

The modules `hwscan.cpu`, `hwscan.block`, `hwscan.bios`,
`hwscan.baseboard` and `hwscan.chassis` each have a `new()` function that
returns an info object (`CpuInfo`, `BlockInfo`, `BiosInfo`,
`BaseboardInfo`, `ChassisInfo`). Every info object has a short `str()` form,
a `to_dict()` method, and `json_string(indent)` / `yaml_string()` methods
that wrap the data under a top-level key such as `"cpu"` or `"block"`.

```python
from hwscan import cpu, block, bios

info = cpu.new()
print(info)
for proc in info.processors:
    print(proc, proc.has_capability("sse4_2"))
    for core in proc.cores:
        print(" ", core)

print(block.new().json_string(True))
print(bios.new().yaml_string())
```

`hwscan.disk` defines `Disk`, `Partition` and the `DriveType` and
`StorageController` enums; `hwscan.block.block_info_from_dict` rebuilds a
`BlockInfo` from the mapping `BlockInfo.to_dict()` produces. Lower-level
helpers live in `hwscan.cpu_linux` (`parse_cpuinfo`, `processors`,
`cores_for_node`) and `hwscan.block_linux` (`parse_mount_entry`,
`disk_types`, `partition_info`, `disks`).

### Reading another root

Keyword arguments passed to `new()` configure the
`hwscan.context.Context` the reader works in (or pass a ready `Context`
as the first argument):

- `chroot` – read `/proc`, `/sys` and friends under another directory,
  for example a container host mount.
- `path_overrides` – a mapping such as `{"/proc": "/host-proc"}` that
  relocates single roots (`/etc`, `/proc`, `/run`, `/sys`, `/var`).
- `snapshot_path` – a tar archive (such as `.tar.gz`) of those trees; it is
  unpacked into a temporary directory before reading and removed
  afterwards. With `snapshot_root` it is unpacked there instead and left in
  place; with `snapshot_exclusive` as well, a non-empty `snapshot_root` is
  used as it is, without unpacking.
- `enable_tools` – whether external tools may be run (needed for block
  storage on macOS).
- `alerter` – a callable that receives each warning string; the default
  writes to standard error. `lambda message: None` silences warnings.

```python
from hwscan import chassis

info = chassis.new(chroot="/host")
print(info.type_description, info.vendor)
```

Unset options fall back to the environment: `HWSCAN_CHROOT`,
`HWSCAN_SNAPSHOT_PATH`, `HWSCAN_SNAPSHOT_ROOT`,
`HWSCAN_SNAPSHOT_EXCLUSIVE`, `HWSCAN_DISABLE_TOOLS` and
`HWSCAN_DISABLE_WARNINGS`. `hwscan.context.from_env()` returns a context
built from those alone.

Values that cannot be read are reported as `"unknown"`. A `chroot` together
with a snapshot path is rejected with `ValueError` when reading starts.

## What hwscan does not do

hwscan does not report memory, NUMA topology, network interfaces, GPUs, PCI
devices or product identification, and it has no tool for creating
snapshot archives; snapshots must be made with other means, for example
`tar`. Windows is not supported.