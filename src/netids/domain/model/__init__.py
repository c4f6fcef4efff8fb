"""Registry domain model."""

from __future__ import annotations

from .binding import Binding, PinDeclaration
from .changes import RegistryChange
from .enums import (
    BLOCKING_FLAGS,
    STATUS_PRECEDENCE,
    IssueFlag,
    RowState,
    Side,
    SortMode,
    primary_status,
)
from .registry import IdentifierRegistry, RegistrySnapshot
from .signature import (
    ChainedTypeCatalog,
    Signature,
    SignatureEntry,
    TypeHandle,
    resolve_signature,
)

__all__ = [
    "BLOCKING_FLAGS",
    "STATUS_PRECEDENCE",
    "Binding",
    "ChainedTypeCatalog",
    "IdentifierRegistry",
    "IssueFlag",
    "PinDeclaration",
    "RegistryChange",
    "RegistrySnapshot",
    "RowState",
    "Side",
    "Signature",
    "SignatureEntry",
    "SortMode",
    "TypeHandle",
    "primary_status",
    "resolve_signature",
]
