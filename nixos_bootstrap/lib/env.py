from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    target_root: str = "/mnt"
    config_rel: str = "etc/nixos/configuration.nix"
    hostname_rel: str = "etc/hostname"
    efi_dir: str = "/sys/firmware/efi"
    log_default: str = "/var/log/nixos-bootstrap.log"


PATHS = Paths()
