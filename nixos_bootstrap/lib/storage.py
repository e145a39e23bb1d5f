from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple


_NVME_DISK = re.compile(r"nvme\d+n\d+$")

BOOT_LABEL = "BOOT"
SWAP_LABEL = "SWAP"
ROOT_LABEL = "NIXOS"


@dataclass(frozen=True)
class PartitionSpec:
    number: int
    role: str  # boot|swap|root
    name: str  # parted partition name (gpt) or type (msdos)
    fs_type: str  # parted fs-type hint
    start: str
    end: str
    flag: Optional[str] = None


@dataclass(frozen=True)
class PartitionLayout:
    disk: str
    table: str  # gpt|msdos
    partitions: Tuple[PartitionSpec, ...]

    def path(self, role: str) -> str:
        for p in self.partitions:
            if p.role == role:
                return partition_path(self.disk, p.number)
        raise KeyError(role)

    @property
    def boot_part(self) -> str:
        return self.path("boot")

    @property
    def swap_part(self) -> str:
        return self.path("swap")

    @property
    def root_part(self) -> str:
        return self.path("root")

    @property
    def device_paths(self) -> List[str]:
        return [partition_path(self.disk, p.number) for p in self.partitions]


@dataclass(frozen=True)
class FilesystemSpec:
    device: str
    fs_type: str  # vfat|ext4|swap
    label: str


def is_nvme_disk(disk: str) -> bool:
    return bool(_NVME_DISK.search(disk))


def partition_path(disk: str, n: int) -> str:
    # nvme namespaces need a "p" between the disk name and the partition index
    if is_nvme_disk(disk):
        return f"{disk}p{n}"
    return f"{disk}{n}"


def plan_partitions(
    *,
    disk: str,
    use_uefi: bool,
    boot_size: str,
    swap_size: str,
) -> PartitionLayout:
    """Lay out boot, swap and root on ``disk``.

    ``boot_size`` and ``swap_size`` are parted positions measured from the
    start of the disk, so swap spans ``boot_size``..``swap_size`` and root
    takes the remainder.
    """

    if use_uefi:
        table = "gpt"
        boot = PartitionSpec(1, "boot", "ESP", "fat32", "1MiB", boot_size, flag="esp")
    else:
        table = "msdos"
        boot = PartitionSpec(1, "boot", "primary", "ext4", "1MiB", boot_size, flag="boot")

    swap = PartitionSpec(2, "swap", "primary", "linux-swap", boot_size, swap_size)
    root = PartitionSpec(3, "root", "primary", "ext4", swap_size, "100%")
    return PartitionLayout(disk=disk, table=table, partitions=(boot, swap, root))


def parted_commands(layout: PartitionLayout) -> List[List[str]]:
    """Render the parted invocations that create ``layout``, in order."""

    def parted(*args: str) -> List[str]:
        return ["parted", layout.disk, "--", *args]

    cmds = [parted("mklabel", layout.table)]
    for p in layout.partitions:
        cmds.append(parted("mkpart", p.name, p.fs_type, p.start, p.end))
        if p.flag:
            cmds.append(parted("set", str(p.number), p.flag, "on"))
    return cmds


def filesystem_plan(layout: PartitionLayout) -> List[FilesystemSpec]:
    boot_fs = "vfat" if layout.table == "gpt" else "ext4"
    return [
        FilesystemSpec(layout.boot_part, boot_fs, BOOT_LABEL),
        FilesystemSpec(layout.swap_part, "swap", SWAP_LABEL),
        FilesystemSpec(layout.root_part, "ext4", ROOT_LABEL),
    ]


def mkfs_argv(fs: FilesystemSpec) -> List[str]:
    if fs.fs_type == "vfat":
        return ["mkfs.fat", "-F", "32", "-n", fs.label, fs.device]
    if fs.fs_type == "ext4":
        return ["mkfs.ext4", "-F", "-L", fs.label, fs.device]
    if fs.fs_type == "swap":
        return ["mkswap", "-L", fs.label, fs.device]
    raise ValueError(f"Unsupported filesystem type: {fs.fs_type}")
