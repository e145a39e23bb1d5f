from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, Mapping, Optional

from .config import resolve_config
from .errors import BootstrapError, ConfirmationDeclined
from .executor import ShellExecutor, SystemExecutor
from .logging_utils import DEFAULT_LOG_PATH, LOG_PATH_ENV, configure_logging
from .pipeline import RunContext, run_pipeline
from .steps import (
    ConfirmStep,
    FetchKeysStep,
    FinalizeRebootStep,
    FormatMountStep,
    GenerateConfigStep,
    InstallStep,
    PartitionStep,
    PreflightStep,
)

logger = logging.getLogger(__name__)

EPILOG = """\
All configuration comes from the environment:
  DISK, HOSTNAME, SWAP_SIZE, BOOT_SIZE, USE_UEFI, TIMEZONE, LOCALE,
  GITHUB_USER, TARGET_ROOT, KEYS_URL, NETWORK_INTERFACE, SSH_PORT,
  PACKAGES, STATE_VERSION, WRITE_HOSTNAME_FILE, REBOOT, REBOOT_DELAY,
  DEVICE_WAIT_TIMEOUT, DRY_RUN, BOOTSTRAP_CONFIG (YAML file), BOOTSTRAP_LOG
"""


def build_steps():
    return [
        PreflightStep(),
        FetchKeysStep(),
        ConfirmStep(),
        PartitionStep(),
        FormatMountStep(),
        GenerateConfigStep(),
        InstallStep(),
        FinalizeRebootStep(),
    ]


def run(
    environ: Optional[Mapping[str, str]] = None,
    *,
    executor: Optional[SystemExecutor] = None,
    prompt: Callable[[str], str] = input,
) -> int:
    """Resolve configuration and run the bootstrap; return the exit code."""

    env = os.environ if environ is None else environ
    ctx: Optional[RunContext] = None

    try:
        cfg = resolve_config(env)
        ctx = RunContext(
            config=cfg,
            executor=executor or ShellExecutor(dry_run=cfg.dry_run),
            prompt=prompt,
        )
        result = run_pipeline(ctx=ctx, steps=build_steps())
        logger.info("Ran steps: %s", ", ".join(result.ran_steps))
        return 0
    except ConfirmationDeclined:
        logger.info("Installation cancelled")
        return 0
    except BootstrapError as e:
        step = ctx.current_step if ctx is not None else "resolve_config"
        logger.error("%s (step: %s)", e, step)
        return 1
    except Exception:
        logger.exception("Bootstrap failed")
        raise


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="nixos-bootstrap",
        description="Partition a disk and install a minimal, SSH-reachable NixOS.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.parse_args(argv)

    configure_logging(log_path=os.environ.get(LOG_PATH_ENV) or DEFAULT_LOG_PATH)
    return run()
