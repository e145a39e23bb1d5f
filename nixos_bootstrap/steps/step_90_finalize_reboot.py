from __future__ import annotations

import logging
import time
from pathlib import Path

from ..pipeline import RunContext

logger = logging.getLogger(__name__)


def _write_file(path: str, contents: str, *, dry_run: bool) -> None:
    p = Path(path)
    if dry_run:
        logger.info("Would write %s", str(p))
        return
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")


class FinalizeRebootStep:
    step_id = "90_finalize_reboot"

    def run(self, ctx: RunContext) -> None:
        cfg = ctx.config

        # nixos-install writes this too; keep the record even if it did not
        if cfg.write_hostname_file:
            _write_file(cfg.hostname_path, cfg.hostname + "\n", dry_run=cfg.dry_run)
            ctx.decisions["hostname_file"] = cfg.hostname_path

        logger.info("Finalize summary: %s", ctx.decisions)
        logger.info("Bootstrap installation complete!")
        logger.info("Next steps:")
        logger.info("  1. Reboot the server")
        logger.info("  2. SSH to root@<server-ip>")

        if not cfg.reboot:
            logger.info("Reboot disabled; leaving %s mounted", cfg.target_root)
            return

        logger.info("The server will reboot in %d seconds...", cfg.reboot_delay)
        for remaining in range(cfg.reboot_delay, 0, -1):
            logger.info("Rebooting in %d...", remaining)
            time.sleep(1)

        ctx.executor.reboot()
