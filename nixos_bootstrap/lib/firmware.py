from __future__ import annotations

from pathlib import Path

from .env import PATHS


def detect_uefi(efi_dir: str = PATHS.efi_dir) -> bool:
    """Detect boot mode of the *currently running* environment.

    The installer boots the same way the installed system will, so the
    presence of the firmware interface directory decides UEFI vs legacy BIOS.
    """

    return Path(efi_dir).exists()
