"""Bid leveling engine: scope catalog, bidder proposals, plug resolution and analysis."""

from .analysis import compute_analysis
from .catalog import ScopeCatalog
from .errors import (
    BidLevelingError,
    DuplicateIdError,
    EmptyBidderSetWarning,
    InvalidAmountError,
    PackageFormatError,
    UnresolvedPlugReference,
)
from .models import (
    Alternate,
    BidAnalysis,
    BidderAnalysis,
    BidderProposal,
    GeneralConditions,
    LineItemBid,
    PlugSelection,
    ResolvedPlug,
    ScopeLineItem,
)
from .package_io import BiddingPackage, load_package, load_selections
from .plugs import PlugBoard, plug_total, resolve_plug, resolved_amounts
from .proposals import ProposalStore
from .viewmodel import ViewModel, project_view_model

__all__ = [
    "Alternate",
    "BidAnalysis",
    "BidLevelingError",
    "BidderAnalysis",
    "BidderProposal",
    "BiddingPackage",
    "DuplicateIdError",
    "EmptyBidderSetWarning",
    "GeneralConditions",
    "InvalidAmountError",
    "LineItemBid",
    "PackageFormatError",
    "PlugBoard",
    "PlugSelection",
    "ProposalStore",
    "ResolvedPlug",
    "ScopeCatalog",
    "ScopeLineItem",
    "UnresolvedPlugReference",
    "ViewModel",
    "compute_analysis",
    "load_package",
    "load_selections",
    "plug_total",
    "project_view_model",
    "resolve_plug",
    "resolved_amounts",
]
