from __future__ import annotations

import json
import logging
import os
import stat
import time
from typing import Optional

from ..errors import ToolFailure
from .command import run_cmd

logger = logging.getLogger(__name__)


def detect_first_disk() -> Optional[str]:
    """Return the first block device lsblk reports with TYPE=disk, if any."""

    r = run_cmd(["lsblk", "-J", "-d", "-o", "NAME,TYPE"], check=False)
    if r.returncode != 0 or not r.stdout.strip():
        logger.warning("lsblk unavailable; cannot auto-detect disk")
        return None

    try:
        data = json.loads(r.stdout)
    except ValueError:
        logger.warning("lsblk returned unparseable output")
        return None

    for dev in data.get("blockdevices") or []:
        if dev.get("type") != "disk":
            continue
        return f"/dev/{dev['name']}"
    return None


def is_block_device(path: str) -> bool:
    try:
        st = os.stat(path)
    except OSError:
        return False
    return stat.S_ISBLK(st.st_mode)


def udev_settle() -> None:
    run_cmd(["udevadm", "settle"], check=False)


def wait_for_block_device(
    path: str,
    *,
    timeout: float = 15.0,
    interval: float = 0.1,
    settle: bool = True,
) -> None:
    """Wait until ``path`` resolves to a block device.

    Partition nodes show up asynchronously after parted returns. Poll for up
    to ``timeout`` seconds, asking udev to settle between attempts.
    """

    deadline = time.monotonic() + timeout
    while True:
        if is_block_device(path):
            logger.info("Device ready: %s", path)
            return
        if time.monotonic() >= deadline:
            break
        if settle:
            udev_settle()
        time.sleep(interval)

    if not os.path.exists(path):
        raise ToolFailure(f"Device {path} did not appear within {timeout:.1f}s")
    raise ToolFailure(f"{path} exists but is not a block device")
