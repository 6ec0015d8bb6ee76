from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .errors import EmptyBidderSetWarning, InvalidAmountError, UnresolvedPlugReference

# Keep tuple structure to preserve order for UI display
PRIORITY_CHOICES: Tuple[str, ...] = ("critical", "important", "standard", "optional")
SCOPE_STATUS_CHOICES: Tuple[str, ...] = ("active", "clarification-needed", "removed")
PROPOSAL_STATUS_CHOICES: Tuple[str, ...] = (
    "submitted",
    "reviewed",
    "clarification-requested",
    "accepted",
    "rejected",
)

PLUG_NONE = "none"
PLUG_MANUAL = "manual"


def _check_choice(field_name: str, value: str, choices: Tuple[str, ...]) -> None:
    if value not in choices:
        raise ValueError(f"{field_name} must be one of {', '.join(choices)}; got {value!r}")


def _check_amount(field_name: str, value: float) -> None:
    if value is None or math.isnan(value) or value < 0:
        raise InvalidAmountError(field_name, value)


@dataclass(frozen=True)
class ScopeLineItem:
    """One row of the scope of work compared across bidders."""

    id: str
    category: str
    description: str
    unit: str
    quantity: float
    priority: str = "standard"
    status: str = "active"
    specifications: Optional[str] = None
    inclusions: Tuple[str, ...] = ()
    exclusions: Tuple[str, ...] = ()
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        _check_amount("quantity", self.quantity)
        _check_choice("priority", self.priority, PRIORITY_CHOICES)
        _check_choice("status", self.status, SCOPE_STATUS_CHOICES)


@dataclass(frozen=True)
class Alternate:
    description: str
    price: float


@dataclass(frozen=True)
class LineItemBid:
    """A single bidder's answer for a single scope item."""

    unit_price: float
    total_price: float
    included: bool = False
    excluded: bool = False
    clarification_needed: bool = False
    notes: Optional[str] = None
    plug_value: Optional[float] = None
    alternates: Tuple[Alternate, ...] = ()

    def __post_init__(self) -> None:
        if self.included and self.excluded:
            raise ValueError("A line item bid cannot be both included and excluded")

    @property
    def undetermined(self) -> bool:
        return not self.included and not self.excluded


@dataclass(frozen=True)
class GeneralConditions:
    markup: float = 0.0
    bond_rate: float = 0.0
    insurance_rate: float = 0.0
    overhead: float = 0.0


@dataclass(frozen=True)
class BidderProposal:
    """A bidder's full proposal for the package, as received.

    ``total_amount`` is the bidder's declared grand total and may differ from the
    sum of line items (markups and general conditions are not broken out).
    """

    bidder_id: str
    bidder_name: str
    submit_date: str
    total_amount: float
    status: str = "submitted"
    line_items: Mapping[str, LineItemBid] = field(default_factory=dict)
    general_conditions: Optional[GeneralConditions] = None
    inclusions: Tuple[str, ...] = ()
    exclusions: Tuple[str, ...] = ()
    assumptions: Tuple[str, ...] = ()
    clarifications: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _check_choice("status", self.status, PROPOSAL_STATUS_CHOICES)


@dataclass(frozen=True)
class PlugSelection:
    """The estimator's choice of authoritative amount for one scope item."""

    source: str = PLUG_NONE
    manual_amount: float = 0.0

    def __post_init__(self) -> None:
        if not self.source:
            raise ValueError("Plug source must be 'none', 'manual' or a bidder id")
        _check_amount("manual_amount", self.manual_amount)

    @property
    def is_bidder(self) -> bool:
        return self.source not in (PLUG_NONE, PLUG_MANUAL)


@dataclass(frozen=True)
class ResolvedPlug:
    scope_item_id: str
    source: str
    amount: float
    warning: Optional[UnresolvedPlugReference] = None

    @property
    def unresolved(self) -> bool:
        return self.warning is not None


@dataclass(frozen=True)
class BidderAnalysis:
    bidder_id: str
    bidder_name: str
    status: str
    declared_total: float
    included_total: float
    excluded_total: float
    clarification_total: float
    item_count: int
    included_count: int
    avg_unit_price: float


@dataclass(frozen=True)
class BidAnalysis:
    """Derived comparison figures; recomputed on every change and never stored."""

    bidders: Tuple[BidderAnalysis, ...]
    lowest_bid: Optional[BidderAnalysis]
    highest_bid: Optional[BidderAnalysis]
    avg_bid: Optional[float]
    spread: Optional[float]
    spread_percentage: Optional[float]
    plug_total: Optional[float]
    total_scope: int
    warning: Optional[EmptyBidderSetWarning] = None

    def for_bidder(self, bidder_id: str) -> Optional[BidderAnalysis]:
        for entry in self.bidders:
            if entry.bidder_id == bidder_id:
                return entry
        return None


__all__ = [
    "PRIORITY_CHOICES",
    "SCOPE_STATUS_CHOICES",
    "PROPOSAL_STATUS_CHOICES",
    "PLUG_NONE",
    "PLUG_MANUAL",
    "ScopeLineItem",
    "Alternate",
    "LineItemBid",
    "GeneralConditions",
    "BidderProposal",
    "PlugSelection",
    "ResolvedPlug",
    "BidderAnalysis",
    "BidAnalysis",
]
