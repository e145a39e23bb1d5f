"""NixOS bootstrap installer.

Takes a bare disk to a minimal NixOS install that accepts key-only root SSH,
ready to be handed to a configuration-management tool.

Core design goals:
- Configuration resolved once (env > file > detected > default)
- One step per stage, run strictly in order
- All system access behind an injectable executor
- Generated Nix is serialized, never string-templated
- Centralized logging
"""

__all__ = []
