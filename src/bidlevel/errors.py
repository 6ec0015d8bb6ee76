"""Error and warning kinds raised or carried by the leveling engine."""
from __future__ import annotations

from typing import Optional


class BidLevelingError(Exception):
    """Base class for rejected bid leveling mutations."""


class DuplicateIdError(BidLevelingError, ValueError):
    """Raised when a scope item or bidder id is already present."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"Duplicate {kind} id: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvalidAmountError(BidLevelingError, ValueError):
    """Raised for negative manual plug amounts or negative quantities."""

    def __init__(self, field_name: str, value: object) -> None:
        super().__init__(f"{field_name} must be non-negative, got {value!r}")
        self.field_name = field_name
        self.value = value


class PackageFormatError(BidLevelingError):
    """Raised when a bidding package file cannot be read or fails validation."""


class UnresolvedPlugReference(UserWarning):
    """A plug names a bidder that has no bid for the scope item; resolves to 0."""

    def __init__(self, scope_item_id: str, bidder_id: str) -> None:
        super().__init__(
            f"Plug for {scope_item_id} references {bidder_id}, which has no bid for this item"
        )
        self.scope_item_id = scope_item_id
        self.bidder_id = bidder_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnresolvedPlugReference):
            return NotImplemented
        return (self.scope_item_id, self.bidder_id) == (other.scope_item_id, other.bidder_id)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.scope_item_id, self.bidder_id))


class EmptyBidderSetWarning(UserWarning):
    """Cross-bidder statistics were requested with no bidder carrying an included total."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "No bidder has an included total; cross-bidder statistics are undefined")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EmptyBidderSetWarning):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash((type(self).__name__, str(self)))


__all__ = [
    "BidLevelingError",
    "DuplicateIdError",
    "InvalidAmountError",
    "PackageFormatError",
    "UnresolvedPlugReference",
    "EmptyBidderSetWarning",
]
