from __future__ import annotations

from typing import Sequence


class BootstrapError(RuntimeError):
    """Fatal error; the run stops and exits non-zero."""


class PreconditionFailure(BootstrapError):
    pass


class ToolFailure(BootstrapError):
    def __init__(
        self,
        message: str,
        *,
        argv: Sequence[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.argv = list(argv or [])
        self.returncode = returncode
        self.stderr = stderr


class ConfirmationDeclined(Exception):
    """Operator did not confirm the destructive run. Not an error."""
