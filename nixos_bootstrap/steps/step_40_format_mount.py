from __future__ import annotations

import logging
from pathlib import Path

from ..errors import BootstrapError
from ..lib.storage import filesystem_plan
from ..pipeline import RunContext

logger = logging.getLogger(__name__)


class FormatMountStep:
    step_id = "40_format_mount"

    def run(self, ctx: RunContext) -> None:
        cfg = ctx.config
        layout = ctx.layout
        if layout is None:
            raise BootstrapError("No partition layout; run partition step first")

        logger.info("Formatting partitions...")
        for fs in filesystem_plan(layout):
            ctx.executor.format(fs)

        logger.info("Mounting partitions...")
        target_root = cfg.target_root
        boot_dir = str(Path(target_root) / "boot")

        ctx.executor.make_dirs(target_root)
        ctx.executor.mount(layout.root_part, target_root)
        ctx.executor.make_dirs(boot_dir)
        ctx.executor.mount(layout.boot_part, boot_dir)
        ctx.executor.activate_swap(layout.swap_part)

        ctx.decisions["target_root"] = target_root
