from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from .errors import PreconditionFailure
from .lib.block import detect_first_disk
from .lib.env import PATHS
from .lib.firmware import detect_uefi
from .lib.keys import DEFAULT_KEYS_URL
from .lib.nixexpr import is_identifier

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "BOOTSTRAP_CONFIG"

SOURCE_ENV = "env"
SOURCE_FILE = "file"
SOURCE_DETECTED = "detected"
SOURCE_DEFAULT = "default"

_SIZE = re.compile(r"^\d+(\.\d+)?(B|s|kB|KB|KiB|MB|MiB|GB|GiB|TB|TiB|K|M|G|T|%)?$")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_TRUE = {"1", "true", "yes", "on", "y"}
_FALSE = {"0", "false", "no", "off", "n"}


@dataclass(frozen=True)
class BootstrapConfig:
    disk: str
    hostname: str = "nixos"
    swap_size: str = "8G"
    boot_size: str = "512M"
    use_uefi: bool = True
    timezone: str = "America/New_York"
    locale: str = "en_US.UTF-8"
    github_user: str = "logandonley"

    target_root: str = PATHS.target_root
    keys_url: str = DEFAULT_KEYS_URL
    network_interface: str = "eth0"
    ssh_port: int = 22
    packages: Tuple[str, ...] = ("vim", "git", "curl", "wget")
    state_version: str = "25.05"
    write_hostname_file: bool = True
    reboot: bool = True
    reboot_delay: int = 10
    device_wait_timeout: float = 15.0
    dry_run: bool = False

    sources: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    @property
    def boot_mode(self) -> str:
        return "uefi" if self.use_uefi else "legacy"

    @property
    def config_path(self) -> str:
        return str(Path(self.target_root) / PATHS.config_rel)

    @property
    def hostname_path(self) -> str:
        return str(Path(self.target_root) / PATHS.hostname_rel)

    def summary(self) -> List[Tuple[str, Any, str]]:
        """(label, value, source) rows for the operator-facing summary."""

        rows = []
        for f in fields(self):
            if f.name == "sources":
                continue
            rows.append((f.name, getattr(self, f.name), self.sources.get(f.name, SOURCE_DEFAULT)))
        return rows


def _parse_str(value: Any) -> str:
    s = str(value).strip()
    if not s:
        raise ValueError("must not be empty")
    if _CONTROL.search(s):
        raise ValueError(f"must not contain control characters: {s!r}")
    return s


def _parse_size(value: Any) -> str:
    s = _parse_str(value)
    if not _SIZE.match(s):
        raise ValueError(f"not a partition size/position: {s!r}")
    return s


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    n = int(str(value).strip())
    if n < 0:
        raise ValueError(f"must be >= 0: {n}")
    return n


def _parse_port(value: Any) -> int:
    n = _parse_int(value)
    if not 0 < n < 65536:
        raise ValueError(f"not a TCP port: {n}")
    return n


def _parse_seconds(value: Any) -> float:
    n = float(str(value).strip())
    if not math.isfinite(n):
        raise ValueError(f"must be a finite number: {value!r}")
    if n < 0:
        raise ValueError(f"must be >= 0: {n}")
    return n


def _parse_packages(value: Any) -> Tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value]
    else:
        items = re.split(r"[\s,]+", str(value))
    pkgs = tuple(i for i in items if i)
    bad = [p for p in pkgs if not all(is_identifier(seg) for seg in p.split("."))]
    if bad:
        raise ValueError(f"invalid package attribute name(s): {', '.join(bad)}")
    return pkgs


def _parse_keys_url(value: Any) -> str:
    s = _parse_str(value)
    if "{user}" not in s:
        raise ValueError("must contain a {user} placeholder")
    return s


# attribute -> (environment variable, parser)
_FIELDS: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "disk": ("DISK", _parse_str),
    "hostname": ("HOSTNAME", _parse_str),
    "swap_size": ("SWAP_SIZE", _parse_size),
    "boot_size": ("BOOT_SIZE", _parse_size),
    "use_uefi": ("USE_UEFI", _parse_bool),
    "timezone": ("TIMEZONE", _parse_str),
    "locale": ("LOCALE", _parse_str),
    "github_user": ("GITHUB_USER", _parse_str),
    "target_root": ("TARGET_ROOT", _parse_str),
    "keys_url": ("KEYS_URL", _parse_keys_url),
    "network_interface": ("NETWORK_INTERFACE", _parse_str),
    "ssh_port": ("SSH_PORT", _parse_port),
    "packages": ("PACKAGES", _parse_packages),
    "state_version": ("STATE_VERSION", _parse_str),
    "write_hostname_file": ("WRITE_HOSTNAME_FILE", _parse_bool),
    "reboot": ("REBOOT", _parse_bool),
    "reboot_delay": ("REBOOT_DELAY", _parse_int),
    "device_wait_timeout": ("DEVICE_WAIT_TIMEOUT", _parse_seconds),
    "dry_run": ("DRY_RUN", _parse_bool),
}


def load_config_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise PreconditionFailure(f"Config file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise PreconditionFailure("Config file must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise PreconditionFailure(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise PreconditionFailure(f"{path} must contain a mapping/object")

    unknown = sorted(str(k) for k in raw if k not in _FIELDS)
    if unknown:
        raise PreconditionFailure(f"Unknown setting(s) in {path}: {', '.join(unknown)}")
    return raw


def resolve_config(
    environ: Optional[Mapping[str, str]] = None,
    *,
    detect_disk: Callable[[], Optional[str]] = detect_first_disk,
    detect_boot_mode: Callable[[], bool] = detect_uefi,
) -> BootstrapConfig:
    """Resolve every setting once: env > config file > detected > default."""

    env = os.environ if environ is None else environ
    file_values: Dict[str, Any] = {}
    config_file = (env.get(CONFIG_FILE_ENV) or "").strip()
    if config_file:
        file_values = load_config_file(config_file)
        logger.info("Loaded config file %s", config_file)

    detectors: Dict[str, Callable[[], Any]] = {
        "disk": detect_disk,
        "use_uefi": detect_boot_mode,
    }

    values: Dict[str, Any] = {}
    sources: Dict[str, str] = {}

    for name, (env_name, parse) in _FIELDS.items():
        raw: Any = None
        source = None

        # An empty env var counts as unset.
        if env.get(env_name, "") != "":
            raw, source = env[env_name], SOURCE_ENV
        elif file_values.get(name) is not None:
            raw, source = file_values[name], SOURCE_FILE

        if source is not None:
            label = env_name if source == SOURCE_ENV else f"{config_file}:{name}"
            try:
                values[name] = parse(raw)
            except ValueError as e:
                raise PreconditionFailure(f"Invalid {label}: {e}") from e
        elif name in detectors:
            detected = detectors[name]()
            if detected is None:
                if name == "disk":
                    raise PreconditionFailure("No disk found; set DISK explicitly")
                continue
            values[name] = detected
            source = SOURCE_DETECTED
        else:
            continue

        sources[name] = source
        logger.info("Resolved %s=%s (%s)", name, values[name], source)

    for f in fields(BootstrapConfig):
        if f.name not in values and f.name != "sources":
            sources[f.name] = SOURCE_DEFAULT
            logger.info("Resolved %s=%s (%s)", f.name, f.default, SOURCE_DEFAULT)

    return BootstrapConfig(**values, sources=sources)
