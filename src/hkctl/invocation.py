"""Parsed form of a single command line invocation."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class GlobalOptions:
    """Options accepted before (or, for ``--home``, after) any command."""

    verbosity: int = 0
    port: Optional[int] = None
    home: Optional[str] = None
    output: Optional[str] = None


@dataclass(frozen=True)
class ParsedInvocation:
    """Result of parsing argv; consumed by exactly one command handler."""

    global_options: GlobalOptions
    command_name: Optional[str] = None
    command_arguments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "command_arguments", MappingProxyType(dict(self.command_arguments)))

    @property
    def home(self) -> Optional[str]:
        return self.global_options.home
