"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import Flag, StrEnum, auto
from typing import Final


class IssueFlag(Flag):
    """Per-binding issue state. A binding may carry several flags at once."""

    NORMAL = 0
    NULL_BINDING = auto()
    NODE_MISSING = auto()
    SIGNATURE_MISSING = auto()
    SIGNATURE_MISMATCH = auto()
    PIN_MISMATCH = auto()
    # informational only
    PERSISTENCE_ENABLED = auto()


STATUS_PRECEDENCE: Final[tuple[IssueFlag, ...]] = (
    IssueFlag.NULL_BINDING,
    IssueFlag.NODE_MISSING,
    IssueFlag.SIGNATURE_MISSING,
    IssueFlag.SIGNATURE_MISMATCH,
    IssueFlag.PIN_MISMATCH,
    IssueFlag.PERSISTENCE_ENABLED,
)

BLOCKING_FLAGS: Final[IssueFlag] = (
    IssueFlag.NULL_BINDING
    | IssueFlag.NODE_MISSING
    | IssueFlag.SIGNATURE_MISSING
    | IssueFlag.SIGNATURE_MISMATCH
    | IssueFlag.PIN_MISMATCH
)


def primary_status(flags: IssueFlag) -> IssueFlag:
    """Collapse a flag set to its highest-priority member."""

    for flag in STATUS_PRECEDENCE:
        if flag in flags:
            return flag
    return IssueFlag.NORMAL


class RowState(StrEnum):
    """Difference between the live and imported side of one merge row."""

    OBJECT_CHANGED = "object_changed"
    NEW_FROM_IMPORT = "new_from_import"
    ID_WILL_CHANGE = "id_will_change"
    NO_CHANGE = "no_change"

    @property
    def color(self) -> str | None:
        return _ROW_COLORS.get(self)


_ROW_COLORS: Final[dict[RowState, str]] = {
    RowState.OBJECT_CHANGED: "red",
    RowState.NEW_FROM_IMPORT: "teal",
    RowState.ID_WILL_CHANGE: "yellow",
}


class Side(StrEnum):
    KEEP_LIVE = "keep_live"
    TAKE_IMPORT = "take_import"


class SortMode(StrEnum):
    STATUS = "status"
    NETWORK_ID = "network_id"
    FILE = "file"
