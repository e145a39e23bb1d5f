from __future__ import annotations

import logging
import os

from ..errors import PreconditionFailure
from ..pipeline import RunContext

logger = logging.getLogger(__name__)


def is_root() -> bool:
    return os.geteuid() == 0


class PreflightStep:
    step_id = "10_preflight"

    def run(self, ctx: RunContext) -> None:
        if not is_root():
            raise PreconditionFailure("This script must be run as root")

        disk = ctx.config.disk
        if not ctx.executor.is_block_device(disk):
            raise PreconditionFailure(f"{disk} is not a block device")

        logger.info("Preflight ok (disk=%s, boot_mode=%s)", disk, ctx.config.boot_mode)
