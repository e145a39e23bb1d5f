from __future__ import annotations

import logging

from ..configuration import write_configuration
from ..pipeline import RunContext

logger = logging.getLogger(__name__)


class GenerateConfigStep:
    step_id = "50_generate_config"

    def run(self, ctx: RunContext) -> None:
        cfg = ctx.config

        logger.info("Generating NixOS hardware configuration...")
        ctx.executor.generate_hardware_config(cfg.target_root)

        logger.info("Creating minimal bootstrap configuration...")
        ctx.config_path = write_configuration(cfg, ctx.keys)
        ctx.decisions["config_path"] = ctx.config_path
