"""Plug value selection and resolution.

Each scope item carries one :class:`PlugSelection` naming where its
authoritative amount comes from: nothing, a manual entry, or one bidder's
line item price. Resolution is item-by-item; changing the selection for one
item never changes the amount resolved for another.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Dict, Iterable, Iterator, Optional

from .catalog import ScopeCatalog, as_catalog
from .errors import UnresolvedPlugReference
from .models import PLUG_MANUAL, PLUG_NONE, BidderProposal, PlugSelection, ResolvedPlug, ScopeLineItem
from .proposals import ProposalStore, as_store

LOGGER = logging.getLogger(__name__)

DEFAULT_SELECTION = PlugSelection()


def resolve_selection(
    scope_item_id: str,
    selection: Optional[PlugSelection],
    proposals: "ProposalStore | Iterable[BidderProposal]",
) -> ResolvedPlug:
    """Resolve the amount for a single scope item."""

    selection = selection or DEFAULT_SELECTION
    if selection.source == PLUG_NONE:
        return ResolvedPlug(scope_item_id, PLUG_NONE, 0.0)
    if selection.source == PLUG_MANUAL:
        return ResolvedPlug(scope_item_id, PLUG_MANUAL, float(selection.manual_amount))

    store = as_store(proposals)
    bid = store.get_line_item_bid(selection.source, scope_item_id)
    if bid is None:
        warning = UnresolvedPlugReference(scope_item_id, selection.source)
        LOGGER.warning("%s", warning)
        return ResolvedPlug(scope_item_id, selection.source, 0.0, warning=warning)
    return ResolvedPlug(scope_item_id, selection.source, float(bid.total_price))


def resolve_plug(
    scope: "ScopeCatalog | Iterable[ScopeLineItem]",
    proposals: "ProposalStore | Iterable[BidderProposal]",
    selections: Optional[Mapping] = None,
) -> Dict[str, ResolvedPlug]:
    """Resolve every scope item's plug, in catalog order.

    Items without a selection resolve as ``none``. Selections for ids that are
    not in the catalog are ignored.
    """

    catalog = as_catalog(scope)
    store = as_store(proposals)
    selections = selections or {}
    for stale in set(selections) - set(catalog.ids()):
        LOGGER.debug("Ignoring plug selection for unknown scope item %s", stale)
    return {
        item.id: resolve_selection(item.id, selections.get(item.id), store)
        for item in catalog
    }


def resolved_amounts(resolved: Mapping) -> Dict[str, float]:
    return {item_id: plug.amount for item_id, plug in resolved.items()}


def plug_total(resolved: Mapping) -> float:
    """Leveled bid: the sum of every resolved plug amount."""
    return float(sum(plug.amount for plug in resolved.values()))


class PlugBoard(Mapping):
    """Editable plug selections for one bidding package.

    Selections are ephemeral; callers :meth:`reset` the board whenever the
    scope or proposal set is replaced. Mutations that fail validation leave
    the previous selection in place.
    """

    def __init__(self, selections: Optional[Mapping] = None) -> None:
        self._selections: Dict[str, PlugSelection] = dict(selections or {})

    def __getitem__(self, scope_item_id: str) -> PlugSelection:
        return self._selections[scope_item_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._selections)

    def __len__(self) -> int:
        return len(self._selections)

    def selection_for(self, scope_item_id: str) -> PlugSelection:
        return self._selections.get(scope_item_id, DEFAULT_SELECTION)

    def select_source(self, scope_item_id: str, source: str) -> PlugSelection:
        """Point the plug at ``none``, ``manual`` or a bidder id.

        The remembered manual amount survives source changes so switching back
        to ``manual`` restores it.
        """
        updated = replace(self.selection_for(scope_item_id), source=source)
        self._selections[scope_item_id] = updated
        return updated

    def set_manual_amount(self, scope_item_id: str, amount: float) -> PlugSelection:
        updated = replace(self.selection_for(scope_item_id), manual_amount=float(amount))
        self._selections[scope_item_id] = updated
        return updated

    def clear(self, scope_item_id: str) -> None:
        self._selections.pop(scope_item_id, None)

    def reset(self) -> None:
        self._selections.clear()

    def selections(self) -> Dict[str, PlugSelection]:
        return dict(self._selections)


__all__ = [
    "DEFAULT_SELECTION",
    "PlugBoard",
    "plug_total",
    "resolve_plug",
    "resolve_selection",
    "resolved_amounts",
]
