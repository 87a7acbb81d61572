import json
import os
import sys
import tarfile

import pytest
import yaml

from hwscan import cpu


def _make_tree(root, topology, caps="fpu vme sse4_2"):
    cpu_dir = root / "sys" / "devices" / "system" / "cpu"
    for lp, (pkg, core) in topology.items():
        topo = cpu_dir / f"cpu{lp}" / "topology"
        topo.mkdir(parents=True)
        (topo / "physical_package_id").write_text(f"{pkg}\n")
        (topo / "core_id").write_text(f"{core}\n")
    proc = root / "proc"
    proc.mkdir(parents=True)
    blocks = "".join(
        f"processor\t: {lp}\nvendor_id\t: GenuineIntel\nmodel name\t: Test CPU\n"
        f"flags\t\t: {caps}\n\n"
        for lp in topology
    )
    (proc / "cpuinfo").write_text(blocks)


TOPOLOGY = {0: (0, 0), 1: (0, 0), 2: (0, 1), 3: (0, 1)}


@pytest.fixture
def linux(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")


def _check_invariants(info):
    assert len(info.processors) > 0
    for p in info.processors:
        assert p.num_cores > 0
        assert p.num_threads > 0
        assert len(p.capabilities) > 0
        assert p.has_capability(p.capabilities[0])
        assert len(p.cores) > 0
        for c in p.cores:
            assert c.num_threads > 0
            assert len(c.logical_processors) > 0


def test_new_from_chroot(tmp_path, linux):
    _make_tree(tmp_path, TOPOLOGY)
    info = cpu.new(chroot=str(tmp_path), alerter=lambda m: None)
    _check_invariants(info)
    assert info.total_cores == 2
    assert info.total_threads == 4
    assert str(info) == "cpu (1 physical package, 2 cores, 4 hardware threads)"


def test_totals_are_sums(tmp_path, linux):
    _make_tree(tmp_path, {0: (0, 0), 1: (1, 0), 2: (1, 1)})
    info = cpu.new(chroot=str(tmp_path), alerter=lambda m: None)
    assert info.total_cores == sum(p.num_cores for p in info.processors)
    assert info.total_threads == sum(p.num_threads for p in info.processors)
    assert len(info.processors) == 2


def test_json_and_yaml(tmp_path, linux):
    _make_tree(tmp_path, TOPOLOGY)
    info = cpu.new(chroot=str(tmp_path), alerter=lambda m: None)
    compact = json.loads(info.json_string(False))
    indented = json.loads(info.json_string(True))
    assert compact == indented == {"cpu": info.to_dict()}
    assert compact["cpu"]["total_cores"] == 2
    assert yaml.safe_load(info.yaml_string()) == {"cpu": info.to_dict()}


def test_new_from_snapshot_cleans_up(tmp_path, linux):
    tree = tmp_path / "tree"
    _make_tree(tree, TOPOLOGY)
    archive = tmp_path / "snap.tar.gz"
    with tarfile.open(archive, "w:gz") as tar:
        for name in ("sys", "proc"):
            tar.add(tree / name, arcname=name)
    info = cpu.new(chroot="/", snapshot_path=str(archive), alerter=lambda m: None)
    _check_invariants(info)
    assert info.total_threads == 4
    assert info.ctx.chroot != "/"
    assert not os.path.exists(info.ctx.chroot)


def test_unsupported_platform_raises(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")
    with pytest.raises(NotImplementedError):
        cpu.new(chroot=str(tmp_path), alerter=lambda m: None)


def test_str_empty_info():
    info = cpu.CpuInfo()
    assert str(info) == "cpu (0 physical packages, 0 cores, 0 hardware threads)"