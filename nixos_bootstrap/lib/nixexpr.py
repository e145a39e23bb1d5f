"""Minimal Nix expression writer.

Values are plain Python data wrapped in a few marker types where Nix syntax
has no Python counterpart (paths, ``with`` scopes, raw identifiers). Every
string is escaped on the way out, so untrusted text (hostnames, key
comments) cannot break out of its literal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

INDENT = "  "
INLINE_LIST_MAX = 72

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_'-]*$")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_KEYWORDS = frozenset(
    {"assert", "else", "if", "in", "inherit", "let", "or", "rec", "then", "with"}
)


@dataclass(frozen=True)
class Raw:
    """Expression emitted verbatim (identifiers, attribute paths)."""

    text: str


@dataclass(frozen=True)
class NixPath:
    text: str

    def __post_init__(self) -> None:
        if not re.match(r"^(\.{1,2}|~)?/[A-Za-z0-9._+/-]+$", self.text):
            raise ValueError(f"Not a Nix path literal: {self.text!r}")


@dataclass(frozen=True)
class NixList:
    items: Tuple[Any, ...]
    multiline: bool = False


@dataclass(frozen=True)
class With:
    scope: str
    body: Any


@dataclass(frozen=True)
class Binding:
    path: Tuple[str, ...]
    value: Any
    comment: Optional[str] = None


@dataclass(frozen=True)
class AttrSet:
    bindings: Tuple[Binding, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Module:
    """A NixOS module: ``{ args, ... }:`` followed by an attribute set."""

    args: Tuple[str, ...]
    body: AttrSet


def bind(path: str, value: Any, comment: Optional[str] = None) -> Binding:
    """Build a binding from a dotted attribute path (``a.b.c``)."""

    return Binding(tuple(path.split(".")), value, comment)


def attrs(*bindings: Binding) -> AttrSet:
    return AttrSet(tuple(bindings))


def escape_string(s: str) -> str:
    return (
        s.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("${", "\\${")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def quote_string(s: str) -> str:
    return f'"{escape_string(s)}"'


def is_identifier(name: str) -> bool:
    return bool(_IDENT.match(name)) and name not in _KEYWORDS


def attr_name(name: str) -> str:
    return name if is_identifier(name) else quote_string(name)


def attr_path(path: Sequence[str]) -> str:
    return ".".join(attr_name(p) for p in path)


def render(value: Any, indent: int = 0) -> str:
    """Render ``value`` as a Nix expression starting at ``indent`` levels."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, Raw):
        return value.text
    if isinstance(value, NixPath):
        return value.text
    if isinstance(value, With):
        return f"with {value.scope}; {render(value.body, indent)}"
    if isinstance(value, (list, tuple)):
        return _render_list(NixList(tuple(value)), indent)
    if isinstance(value, NixList):
        return _render_list(value, indent)
    if isinstance(value, dict):
        return _render_attrs(AttrSet(tuple(Binding((k,), v) for k, v in value.items())), indent)
    if isinstance(value, AttrSet):
        return _render_attrs(value, indent)
    if isinstance(value, Module):
        return render_module(value)
    raise TypeError(f"Cannot render {type(value).__name__} as Nix")


def _render_list(lst: NixList, indent: int) -> str:
    if not lst.items:
        return "[ ]"
    parts = [render(item, indent + 1) for item in lst.items]
    inline = "[ " + " ".join(parts) + " ]"
    if not lst.multiline and "\n" not in inline and len(inline) <= INLINE_LIST_MAX:
        return inline
    pad = INDENT * (indent + 1)
    body = "".join(f"{pad}{p}\n" for p in parts)
    return "[\n" + body + INDENT * indent + "]"


def _comment_text(text: str) -> str:
    # A line break would end the comment and start live code.
    return " ".join(_CONTROL.sub(" ", text).split())


def _render_bindings(bindings: Sequence[Binding], indent: int) -> List[str]:
    pad = INDENT * indent
    lines: List[str] = []
    for i, b in enumerate(bindings):
        if b.comment is not None:
            if i > 0:
                lines.append("")
            lines.append(f"{pad}# {_comment_text(b.comment)}")
        lines.append(f"{pad}{attr_path(b.path)} = {render(b.value, indent)};")
    return lines


def _render_attrs(a: AttrSet, indent: int) -> str:
    if not a.bindings:
        return "{ }"
    lines = _render_bindings(a.bindings, indent + 1)
    return "{\n" + "\n".join(lines) + "\n" + INDENT * indent + "}"


def render_module(m: Module) -> str:
    header = "{ " + ", ".join([*m.args, "..."]) + " }:"
    return header + "\n\n" + _render_attrs(m.body, 0) + "\n"
