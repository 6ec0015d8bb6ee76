"""Per-bidder totals and cross-bidder statistics for bid leveling.

``compute_analysis`` is a pure function of the scope catalog, the proposal
store and the plug selections. It keeps no state between calls; callers run
it again after every edit.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, List, Mapping, Optional

from .catalog import ScopeCatalog, as_catalog
from .errors import EmptyBidderSetWarning
from .models import BidAnalysis, BidderAnalysis, BidderProposal, ScopeLineItem
from .plugs import plug_total, resolve_plug
from .proposals import ProposalStore, as_store

LOGGER = logging.getLogger(__name__)


def analyze_bidder(catalog: ScopeCatalog, proposal: BidderProposal) -> BidderAnalysis:
    """Accumulate one bidder's totals over the full scope catalog.

    ``clarification_total`` is an independent axis: a clarification item may
    also be counted as included or excluded. ``avg_unit_price`` divides by the
    number of scope items the bidder answered at all, not only included ones.
    """

    included_total = 0.0
    excluded_total = 0.0
    clarification_total = 0.0
    item_count = 0
    included_count = 0

    for item in catalog:
        bid = proposal.line_items.get(item.id)
        if bid is None:
            continue
        item_count += 1
        if bid.included:
            included_total += bid.total_price
            included_count += 1
        if bid.excluded:
            excluded_total += bid.total_price
        if bid.clarification_needed:
            clarification_total += bid.total_price

    avg_unit_price = included_total / item_count if item_count else 0.0
    return BidderAnalysis(
        bidder_id=proposal.bidder_id,
        bidder_name=proposal.bidder_name,
        status=proposal.status,
        declared_total=float(proposal.total_amount),
        included_total=included_total,
        excluded_total=excluded_total,
        clarification_total=clarification_total,
        item_count=item_count,
        included_count=included_count,
        avg_unit_price=avg_unit_price,
    )


def _mean(values: List[float], lower: float, upper: float) -> float:
    # fsum keeps the mean independent of bidder order; clamp absorbs the last ulp.
    mean = math.fsum(values) / len(values)
    return min(max(mean, lower), upper)


def compute_analysis(
    scope: "ScopeCatalog | Iterable[ScopeLineItem]",
    proposals: "ProposalStore | Iterable[BidderProposal]",
    selections: Optional[Mapping] = None,
    resolved: Optional[Mapping] = None,
) -> BidAnalysis:
    """Compute the full :class:`BidAnalysis` for the current package state.

    Cross-bidder statistics cover bidders with at least one included line
    item. When there are none, every statistic is ``None`` and an
    :class:`EmptyBidderSetWarning` is attached instead of raising.

    ``plug_total`` is summed from ``resolved`` when the caller already holds
    the plug resolution, otherwise from ``selections``. With neither it is
    ``None`` and the projector takes the total from the plugs it is given.
    """

    catalog = as_catalog(scope)
    store = as_store(proposals)

    bidders = tuple(analyze_bidder(catalog, proposal) for proposal in store)
    eligible = [entry for entry in bidders if entry.included_count > 0]

    lowest: Optional[BidderAnalysis] = None
    highest: Optional[BidderAnalysis] = None
    avg_bid: Optional[float] = None
    spread: Optional[float] = None
    spread_percentage: Optional[float] = None
    warning: Optional[EmptyBidderSetWarning] = None

    if eligible:
        ranked = sorted(eligible, key=lambda entry: entry.included_total)
        lowest = ranked[0]
        highest = ranked[-1]
        avg_bid = _mean(
            [entry.included_total for entry in eligible],
            lowest.included_total,
            highest.included_total,
        )
        spread = highest.included_total - lowest.included_total
        if lowest.included_total != 0:
            spread_percentage = spread / lowest.included_total * 100
    else:
        warning = EmptyBidderSetWarning()
        LOGGER.info("%s (%d proposals on file)", warning, len(store))

    if resolved is None and selections is not None:
        resolved = resolve_plug(catalog, store, selections)

    return BidAnalysis(
        bidders=bidders,
        lowest_bid=lowest,
        highest_bid=highest,
        avg_bid=avg_bid,
        spread=spread,
        spread_percentage=spread_percentage,
        plug_total=plug_total(resolved) if resolved is not None else None,
        total_scope=len(catalog),
        warning=warning,
    )


__all__ = ["analyze_bidder", "compute_analysis"]
