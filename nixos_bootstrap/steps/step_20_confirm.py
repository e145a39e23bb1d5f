from __future__ import annotations

import logging

from ..errors import ConfirmationDeclined
from ..pipeline import RunContext

logger = logging.getLogger(__name__)

AFFIRMATIVE = {"y", "yes"}


class ConfirmStep:
    step_id = "20_confirm"

    def run(self, ctx: RunContext) -> None:
        cfg = ctx.config

        logger.info("NixOS Bootstrap Configuration:")
        for name, value, source in cfg.summary():
            logger.info("  %s: %s (%s)", name, value, source)
        if cfg.dry_run:
            logger.warning("Dry run: commands will be logged, not executed")

        try:
            reply = ctx.prompt(f"This will DESTROY all data on {cfg.disk}. Continue? [y/N] ")
        except EOFError:
            reply = ""

        if reply.strip().lower() not in AFFIRMATIVE:
            raise ConfirmationDeclined(cfg.disk)

        ctx.decisions["confirmed"] = True
