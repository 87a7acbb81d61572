"""Execution context shared by the hardware discovery functions."""

from __future__ import annotations

import os
import shutil
import sys
import tarfile
import tempfile
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar

UNKNOWN = "unknown"
DEFAULT_CHROOT = "/"

ENV_CHROOT = "HWSCAN_CHROOT"
ENV_DISABLE_TOOLS = "HWSCAN_DISABLE_TOOLS"
ENV_DISABLE_WARNINGS = "HWSCAN_DISABLE_WARNINGS"
ENV_SNAPSHOT_PATH = "HWSCAN_SNAPSHOT_PATH"
ENV_SNAPSHOT_ROOT = "HWSCAN_SNAPSHOT_ROOT"
ENV_SNAPSHOT_EXCLUSIVE = "HWSCAN_SNAPSHOT_EXCLUSIVE"

Alerter = Callable[[str], None]
T = TypeVar("T")


def _stderr_alerter(message: str) -> None:
    sys.stderr.write(message)


def _env_alerter() -> Optional[Alerter]:
    """Return the alerter chosen by the environment; None silences warnings."""
    if ENV_DISABLE_WARNINGS in os.environ:
        return None
    return _stderr_alerter


def _unpack_into(archive: str, target: Path) -> None:
    target.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive, "r:*") as tar:
        if hasattr(tarfile, "tar_filter"):
            tar.extractall(target, filter="tar")
        else:
            tar.extractall(target)


class Context:
    """Merged configuration used while discovering hardware information."""

    def __init__(
        self,
        chroot: Optional[str] = None,
        enable_tools: Optional[bool] = None,
        snapshot_path: Optional[str] = None,
        snapshot_root: Optional[str] = None,
        snapshot_exclusive: Optional[bool] = None,
        path_overrides: Optional[Mapping[str, str]] = None,
        alerter: Optional[Alerter] = None,
    ) -> None:
        env = os.environ
        self.chroot = chroot if chroot is not None else env.get(ENV_CHROOT, DEFAULT_CHROOT)
        self.enable_tools = (
            enable_tools if enable_tools is not None else ENV_DISABLE_TOOLS not in env
        )
        self.snapshot_path = (
            snapshot_path if snapshot_path is not None else env.get(ENV_SNAPSHOT_PATH, "")
        )
        self.snapshot_root = (
            snapshot_root if snapshot_root is not None else env.get(ENV_SNAPSHOT_ROOT, "")
        )
        self.snapshot_exclusive = (
            snapshot_exclusive
            if snapshot_exclusive is not None
            else ENV_SNAPSHOT_EXCLUSIVE in env
        )
        self.path_overrides = dict(path_overrides or {})
        self._alert: Optional[Alerter] = (
            alerter if alerter is not None else _env_alerter()
        )
        self._unpacked_path = ""
        self._error: Optional[Exception] = None
        if self.snapshot_path and self.chroot != DEFAULT_CHROOT:
            self._error = ValueError(
                f"Conflicting options: chroot {self.chroot!r} "
                f"and snapshot path {self.snapshot_path!r}"
            )

    def setup(self) -> None:
        """Unpack the snapshot, if any, and point the chroot at it."""
        if self._error is not None:
            raise self._error
        if not self.snapshot_path:
            return
        if self.snapshot_root:
            root = Path(self.snapshot_root)
            populated = root.is_dir() and any(root.iterdir())
            if not (self.snapshot_exclusive and populated):
                _unpack_into(self.snapshot_path, root)
            self.chroot = self.snapshot_root
            return
        root_dir = tempfile.mkdtemp(prefix="hwscan-snapshot-")
        try:
            _unpack_into(self.snapshot_path, Path(root_dir))
        except BaseException:
            shutil.rmtree(root_dir, ignore_errors=True)
            raise
        self._unpacked_path = root_dir
        self.chroot = root_dir

    def teardown(self) -> None:
        """Remove a snapshot directory that setup created itself."""
        if not self._unpacked_path:
            return
        path, self._unpacked_path = self._unpacked_path, ""
        shutil.rmtree(path)

    def do(self, fn: Callable[[], T]) -> T:
        """Run fn between setup and teardown, returning its result."""
        self.setup()
        try:
            return fn()
        finally:
            self._safe_teardown()

    def _safe_teardown(self) -> None:
        try:
            self.teardown()
        except OSError as err:
            self.warn("teardown error: %s", err)

    def __enter__(self) -> "Context":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._safe_teardown()

    def warn(self, msg: str, *args: object) -> None:
        """Report a non-fatal problem through the alerter, if there is one."""
        if self._alert is None:
            return
        text = msg % args if args else msg
        self._alert("WARNING: " + text)

    def read_int(self, path: str) -> int:
        """Read an integer from a file, returning -1 when that fails."""
        try:
            text = Path(path).read_text()
        except OSError as err:
            self.warn("failed to read int from file: %s", err)
            return -1
        try:
            return int(text.strip())
        except ValueError as err:
            self.warn("failed to parse int from file: %s", err)
            return -1


def from_env() -> Context:
    """Return a Context populated from the environment or default values."""
    return Context()