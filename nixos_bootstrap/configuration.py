"""Build and write the bootstrap ``configuration.nix``.

The module is assembled as a structured record (``lib.nixexpr``) and only
serialized at the end. Section order is fixed: hardware import, boot loader,
hostname, timezone, locale, network, SSH, root keys, firewall, packages,
experimental features, state version.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from .config import BootstrapConfig
from .lib import nixexpr as nix
from .lib.nixexpr import Binding

logger = logging.getLogger(__name__)

HARDWARE_CONFIG = "./hardware-configuration.nix"
EXPERIMENTAL_FEATURES = ("nix-command", "flakes")


def boot_loader(cfg: BootstrapConfig) -> nix.AttrSet:
    if cfg.use_uefi:
        return nix.attrs(
            nix.bind("systemd-boot.enable", True),
            nix.bind("efi.canTouchEfiVariables", True),
        )
    return nix.attrs(
        nix.bind(
            "grub",
            nix.attrs(
                nix.bind("enable", True),
                nix.bind("device", cfg.disk),
            ),
        ),
    )


def build_module(cfg: BootstrapConfig, keys: Sequence[str]) -> nix.Module:
    """Assemble the NixOS module for ``cfg`` with root login limited to ``keys``."""

    authorized = [k.strip() for k in keys if k.strip()]

    bindings: List[Binding] = [
        nix.bind("imports", [nix.NixPath(HARDWARE_CONFIG)]),
        nix.bind("boot.loader", boot_loader(cfg), comment="Boot loader"),
        nix.bind("networking.hostName", cfg.hostname, comment="Hostname"),
        nix.bind("time.timeZone", cfg.timezone, comment="Time zone and locale"),
        nix.bind("i18n.defaultLocale", cfg.locale),
        nix.bind("networking.useDHCP", False, comment="Network configuration"),
        nix.Binding(("networking", "interfaces", cfg.network_interface, "useDHCP"), True),
        nix.bind(
            "services.openssh",
            nix.attrs(
                nix.bind("enable", True),
                nix.bind(
                    "settings",
                    nix.attrs(
                        nix.bind("PermitRootLogin", "prohibit-password"),
                        nix.bind("PasswordAuthentication", False),
                        nix.bind("KbdInteractiveAuthentication", False),
                    ),
                ),
            ),
            comment="Enable SSH with key-only authentication",
        ),
        nix.bind(
            "users.users.root.openssh.authorizedKeys.keys",
            nix.NixList(tuple(authorized), multiline=True),
            comment=f"Root SSH keys for {cfg.github_user}",
        ),
        nix.bind(
            "networking.firewall",
            nix.attrs(
                nix.bind("enable", True),
                nix.bind("allowedTCPPorts", [cfg.ssh_port]),
            ),
            comment="Firewall",
        ),
        nix.bind(
            "environment.systemPackages",
            nix.With("pkgs", nix.NixList(tuple(nix.Raw(p) for p in cfg.packages), multiline=True)),
            comment="Minimal packages for bootstrap",
        ),
        nix.bind(
            "nix.settings.experimental-features",
            list(EXPERIMENTAL_FEATURES),
            comment="Enable flakes for Colmena",
        ),
        nix.bind("system.stateVersion", cfg.state_version, comment="System version"),
    ]

    return nix.Module(args=("config", "pkgs"), body=nix.AttrSet(tuple(bindings)))


def render_configuration(cfg: BootstrapConfig, keys: Sequence[str]) -> str:
    return nix.render_module(build_module(cfg, keys))


def write_configuration(cfg: BootstrapConfig, keys: Sequence[str]) -> str:
    """Render and write configuration.nix under the target root; return its path."""

    path = Path(cfg.config_path)
    contents = render_configuration(cfg, keys)

    if cfg.dry_run:
        logger.info("Would write %s (%d bytes)", str(path), len(contents))
        return str(path)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    logger.info("Wrote %s", str(path))
    return str(path)
