from typing import Iterable, List, Optional, Sequence, Tuple

import pytest

from nixos_bootstrap.config import BootstrapConfig
from nixos_bootstrap.errors import ToolFailure
from nixos_bootstrap.lib.storage import FilesystemSpec
from nixos_bootstrap.pipeline import RunContext

DESTRUCTIVE = {"partition", "format", "mount", "make_dirs", "activate_swap", "install", "reboot"}


class FakeExecutor:
    """Records every call; optionally fails one capability."""

    def __init__(
        self,
        *,
        block_devices: Optional[Iterable[str]] = None,
        fail_on: Optional[str] = None,
    ) -> None:
        self.block_devices = set(block_devices or [])
        self.fail_on = fail_on
        self.calls: List[Tuple] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name == self.fail_on:
            raise ToolFailure(f"{name} failed", argv=[name], returncode=1)

    @property
    def names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def destructive_calls(self) -> List[Tuple]:
        return [c for c in self.calls if c[0] in DESTRUCTIVE]

    def is_block_device(self, path: str) -> bool:
        self.calls.append(("is_block_device", path))
        return path in self.block_devices

    def partition(self, disk: str, commands: Sequence[Sequence[str]]) -> None:
        self._record("partition", disk, [list(c) for c in commands])

    def wait_for_device(self, path: str, timeout: float) -> None:
        self._record("wait_for_device", path)

    def format(self, fs: FilesystemSpec) -> None:
        self._record("format", fs.device, fs.fs_type, fs.label)

    def make_dirs(self, path: str) -> None:
        self._record("make_dirs", path)

    def mount(self, device: str, mountpoint: str) -> None:
        self._record("mount", device, mountpoint)

    def activate_swap(self, device: str) -> None:
        self._record("activate_swap", device)

    def generate_hardware_config(self, target_root: str) -> None:
        self._record("generate_hardware_config", target_root)

    def install(self, target_root: str) -> None:
        self._record("install", target_root)

    def reboot(self) -> None:
        self._record("reboot")


@pytest.fixture
def fake_executor():
    return FakeExecutor(block_devices=["/dev/sda"])


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides) -> BootstrapConfig:
        values = dict(disk="/dev/sda", target_root=str(tmp_path / "mnt"), reboot_delay=0)
        values.update(overrides)
        return BootstrapConfig(**values)

    return _make


@pytest.fixture
def make_ctx(make_config, fake_executor):
    def _make(answer: str = "y", **overrides) -> RunContext:
        return RunContext(
            config=make_config(**overrides),
            executor=fake_executor,
            prompt=lambda _msg: answer,
        )

    return _make
