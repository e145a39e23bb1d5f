from __future__ import annotations

import logging

from ..lib.storage import parted_commands, plan_partitions
from ..pipeline import RunContext

logger = logging.getLogger(__name__)


class PartitionStep:
    step_id = "30_partition"

    def run(self, ctx: RunContext) -> None:
        cfg = ctx.config

        layout = plan_partitions(
            disk=cfg.disk,
            use_uefi=cfg.use_uefi,
            boot_size=cfg.boot_size,
            swap_size=cfg.swap_size,
        )
        ctx.executor.partition(cfg.disk, parted_commands(layout))

        # parted returns before udev has created the partition nodes
        for dev in layout.device_paths:
            ctx.executor.wait_for_device(dev, cfg.device_wait_timeout)

        ctx.layout = layout
        ctx.decisions["partition_table"] = layout.table
        ctx.decisions["partitions"] = {
            "boot": layout.boot_part,
            "swap": layout.swap_part,
            "root": layout.root_part,
        }
        logger.info("Partitioned %s (%s): %s", cfg.disk, layout.table, ", ".join(layout.device_paths))
