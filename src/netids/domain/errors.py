"""Error taxonomy for registry operations.

Only parse and allocation failures are fatal to an operation. Unresolved
references and duplicate hierarchy paths are reported as issue flags and
warnings by the conflict detector, never raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from netids.domain.ports.scene import Node


class NetIdError(Exception):
    """Base class for all registry errors."""


class ParseError(NetIdError, ValueError):
    """Malformed interchange text. The whole import is aborted."""

    def __init__(self, message: str, *, remainder: str = "") -> None:
        self.message = message
        self.remainder = remainder
        super().__init__(f"{message} Remaining text:\n{remainder}" if remainder else message)


class AllocationError(NetIdError):
    """Batch assignment stopped; insertions made earlier in the call stand."""


class AllocationExhausted(AllocationError):
    def __init__(self, min_id: int, max_id: int) -> None:
        self.min_id = min_id
        self.max_id = max_id
        super().__init__(f"Ran out of network ids to assign in [{min_id}, {max_id})")


class PinCollision(AllocationError):
    def __init__(self, pinned_id: int, node: Node) -> None:
        self.pinned_id = pinned_id
        self.node = node
        super().__init__(
            f"Cannot assign pinned network id {pinned_id} to {node!r}: id is already in use"
        )


class InvalidPinnedId(AllocationError):
    def __init__(self, pinned_id: int, node: Node) -> None:
        self.pinned_id = pinned_id
        self.node = node
        super().__init__(f"Pinned network id {pinned_id} on {node!r} is outside the valid range")


class AssignmentError(NetIdError):
    """A node could not be attached to an existing binding."""


class NodeAlreadyBound(AssignmentError):
    def __init__(self, node: Node, existing_id: int) -> None:
        self.node = node
        self.existing_id = existing_id
        super().__init__(f"{node!r} already has an assigned network id: {existing_id}")


class BindingOccupied(AssignmentError):
    def __init__(self, binding_id: int) -> None:
        self.binding_id = binding_id
        super().__init__(
            f"Network id {binding_id} already has a node; the assignment can be forced"
        )
