from __future__ import annotations

import logging
from typing import Protocol, Sequence

from .lib import block
from .lib.command import run_cmd
from .lib.storage import FilesystemSpec, mkfs_argv

logger = logging.getLogger(__name__)


class SystemExecutor(Protocol):
    """Every side effect on the host goes through here."""

    def is_block_device(self, path: str) -> bool:
        ...

    def partition(self, disk: str, commands: Sequence[Sequence[str]]) -> None:
        ...

    def wait_for_device(self, path: str, timeout: float) -> None:
        ...

    def format(self, fs: FilesystemSpec) -> None:
        ...

    def make_dirs(self, path: str) -> None:
        ...

    def mount(self, device: str, mountpoint: str) -> None:
        ...

    def activate_swap(self, device: str) -> None:
        ...

    def generate_hardware_config(self, target_root: str) -> None:
        ...

    def install(self, target_root: str) -> None:
        ...

    def reboot(self) -> None:
        ...


class ShellExecutor:
    """Production executor: shells out via run_cmd."""

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def _run(self, argv: Sequence[str]) -> None:
        run_cmd(argv, dry_run=self.dry_run)

    def is_block_device(self, path: str) -> bool:
        return block.is_block_device(path)

    def partition(self, disk: str, commands: Sequence[Sequence[str]]) -> None:
        logger.info("Partitioning %s", disk)
        for argv in commands:
            self._run(argv)

    def wait_for_device(self, path: str, timeout: float) -> None:
        if self.dry_run:
            logger.info("Would wait for %s", path)
            return
        block.wait_for_block_device(path, timeout=timeout)

    def format(self, fs: FilesystemSpec) -> None:
        self._run(mkfs_argv(fs))

    def make_dirs(self, path: str) -> None:
        self._run(["mkdir", "-p", path])

    def mount(self, device: str, mountpoint: str) -> None:
        self._run(["mount", device, mountpoint])

    def activate_swap(self, device: str) -> None:
        self._run(["swapon", device])

    def generate_hardware_config(self, target_root: str) -> None:
        self._run(["nixos-generate-config", "--root", target_root])

    def install(self, target_root: str) -> None:
        self._run(["nixos-install", "--root", target_root, "--no-root-passwd"])

    def reboot(self) -> None:
        self._run(["sync"])
        self._run(["reboot"])
