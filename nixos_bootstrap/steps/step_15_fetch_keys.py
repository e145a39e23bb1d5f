from __future__ import annotations

from ..lib.keys import fetch_authorized_keys
from ..pipeline import RunContext


class FetchKeysStep:
    step_id = "15_fetch_keys"

    def run(self, ctx: RunContext) -> None:
        cfg = ctx.config
        ctx.keys = fetch_authorized_keys(cfg.github_user, url_template=cfg.keys_url)
        ctx.decisions["authorized_keys"] = len(ctx.keys)
