from __future__ import annotations

import logging

from ..pipeline import RunContext

logger = logging.getLogger(__name__)


class InstallStep:
    step_id = "60_install"

    def run(self, ctx: RunContext) -> None:
        logger.info("Installing NixOS (this will take a while)...")
        ctx.executor.install(ctx.config.target_root)
        ctx.decisions["installed"] = True
