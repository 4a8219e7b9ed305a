"""
Core types and protocols used across modules.

This module provides the enums and protocol definitions shared by the
classifier, the record model and the reporting layer so that every
component agrees on the same vocabulary.
"""

from enum import Enum
from typing import Protocol


class Op(str, Enum):
    """
    Operation that caused an error, modeled after a socket operation.

    The classifier infers one of these for network faults. Path and syscall
    faults carry the name of the failing call instead (e.g. "open"), and
    ``with_op`` accepts any string, so record fields hold plain ``str``.
    An empty string means the operation is unspecified.

    Values:
        DIAL: Establishing a connection (connect, DNS lookup)
        READ: Reading from an established connection
        WRITE: Writing to an established connection
        CLOSE: Tearing a connection down
    """

    DIAL = "dial"
    READ = "read"
    WRITE = "write"
    CLOSE = "close"


OP_UNSPECIFIED = ""


class ProxyType(str, Enum):
    """
    Type of proxy channel a failed request went through.

    Values:
        NONE: Direct access, no proxying at all
        CHAINED: Through a hosted chained server
        FRONTED: Through domain fronting
        DIRECT_FRONTED: Through direct domain fronting
    """

    NONE = "no"
    CHAINED = "chained"
    FRONTED = "fronted"
    DIRECT_FRONTED = "DDF"


class UserConfig(Protocol):
    """
    Protocol for the user identity collaborator.

    Supplied by the settings subsystem to producers such as the config
    poller. The reporting core does not read it; it is declared here so
    producers share one definition.
    """

    def get_user_id(self) -> str:
        ...

    def get_token(self) -> str:
        ...


def op_value(op: "Op | str | None") -> str:
    """Normalize an operation to its wire string ("" when unspecified)."""
    if op is None:
        return OP_UNSPECIFIED
    if isinstance(op, Op):
        return op.value
    return str(op)


__all__ = [
    "Op",
    "OP_UNSPECIFIED",
    "ProxyType",
    "UserConfig",
    "op_value",
]
