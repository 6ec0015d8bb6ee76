"""Loading bidding packages and plug selections from JSON records.

Packages use the camelCase record shape of the dashboard's data feed. The
document is validated against ``schema/bid_package.schema.json`` first; rows
that are well-formed but break a model invariant are skipped and reported in
:attr:`BiddingPackage.rejected` so one bad row never hides the rest.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from jsonschema import Draft7Validator, ValidationError

from .catalog import ScopeCatalog
from .errors import BidLevelingError, PackageFormatError
from .models import (
    Alternate,
    BidderProposal,
    GeneralConditions,
    LineItemBid,
    PlugSelection,
    ScopeLineItem,
)
from .proposals import ProposalStore

LOGGER = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema" / "bid_package.schema.json"


@dataclass
class BiddingPackage:
    package_id: str
    project_id: str
    scope: ScopeCatalog = field(default_factory=ScopeCatalog)
    proposals: ProposalStore = field(default_factory=ProposalStore)
    rejected: List[str] = field(default_factory=list)


@lru_cache(maxsize=1)
def _validator() -> Draft7Validator:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    return Draft7Validator(schema)


def _strings(raw: Mapping, key: str) -> Tuple[str, ...]:
    return tuple(str(value) for value in raw.get(key) or ())


def scope_item_from_dict(raw: Mapping) -> ScopeLineItem:
    return ScopeLineItem(
        id=str(raw.get("id") or ""),
        category=raw["category"],
        description=raw["description"],
        unit=raw["unit"],
        quantity=float(raw["quantity"]),
        priority=raw.get("priority") or "standard",
        status=raw.get("status") or "active",
        specifications=raw.get("specifications"),
        inclusions=_strings(raw, "inclusions"),
        exclusions=_strings(raw, "exclusions"),
        notes=raw.get("notes"),
    )


def line_item_from_dict(raw: Mapping) -> LineItemBid:
    plug_value = raw.get("plugValue")
    return LineItemBid(
        unit_price=float(raw["unitPrice"]),
        total_price=float(raw["totalPrice"]),
        included=bool(raw.get("included", False)),
        excluded=bool(raw.get("excluded", False)),
        clarification_needed=bool(raw.get("clarificationNeeded", False)),
        notes=raw.get("notes"),
        plug_value=float(plug_value) if plug_value is not None else None,
        alternates=tuple(
            Alternate(description=alt["description"], price=float(alt["price"]))
            for alt in raw.get("alternates") or ()
        ),
    )


def proposal_from_dict(raw: Mapping, rejected: Optional[List[str]] = None) -> BidderProposal:
    """Build a proposal, dropping individual line items that are contradictory."""

    bidder_id = raw["bidderId"]
    line_items: Dict[str, LineItemBid] = {}
    for scope_id, entry in (raw.get("lineItems") or {}).items():
        try:
            line_items[scope_id] = line_item_from_dict(entry)
        except (ValueError, BidLevelingError) as exc:
            message = f"{bidder_id}/{scope_id}: {exc}"
            LOGGER.warning("Skipping line item %s", message)
            if rejected is not None:
                rejected.append(message)

    gc_raw = raw.get("generalConditions")
    general_conditions = None
    if gc_raw:
        general_conditions = GeneralConditions(
            markup=float(gc_raw.get("markup", 0.0)),
            bond_rate=float(gc_raw.get("bondRate", 0.0)),
            insurance_rate=float(gc_raw.get("insuranceRate", 0.0)),
            overhead=float(gc_raw.get("overhead", 0.0)),
        )

    return BidderProposal(
        bidder_id=bidder_id,
        bidder_name=raw["bidderName"],
        submit_date=str(raw.get("submitDate") or ""),
        total_amount=float(raw["totalAmount"]),
        status=raw.get("status") or "submitted",
        line_items=line_items,
        general_conditions=general_conditions,
        inclusions=_strings(raw, "inclusions"),
        exclusions=_strings(raw, "exclusions"),
        assumptions=_strings(raw, "assumptions"),
        clarifications=_strings(raw, "clarifications"),
    )


def package_from_dict(raw: Mapping) -> BiddingPackage:
    try:
        _validator().validate(raw)
    except ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "(root)"
        raise PackageFormatError(f"Schema validation failed at {location}: {exc.message}") from exc

    package = BiddingPackage(
        package_id=str(raw.get("packageId") or ""),
        project_id=str(raw.get("projectId") or ""),
    )

    for index, entry in enumerate(raw["scopeItems"]):
        try:
            package.scope.add_item(scope_item_from_dict(entry))
        except (ValueError, BidLevelingError) as exc:
            message = f"scopeItems[{index}] {entry.get('id') or '(no id)'}: {exc}"
            LOGGER.warning("Skipping scope item %s", message)
            package.rejected.append(message)

    for index, entry in enumerate(raw["bidderProposals"]):
        try:
            package.proposals.add_proposal(proposal_from_dict(entry, package.rejected))
        except (ValueError, BidLevelingError) as exc:
            message = f"bidderProposals[{index}] {entry.get('bidderId')}: {exc}"
            LOGGER.warning("Skipping proposal %s", message)
            package.rejected.append(message)

    return package


def _read_json(path: Path) -> object:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise PackageFormatError(f"{path} is not valid JSON: {exc}") from exc


def load_package(path: Path) -> BiddingPackage:
    """Read and validate a bidding package JSON file."""
    raw = _read_json(Path(path))
    if not isinstance(raw, dict):
        raise PackageFormatError(f"{path} must contain a JSON object")
    package = package_from_dict(raw)
    LOGGER.debug(
        "Loaded package %s: %d scope items, %d proposals, %d rejected rows",
        package.package_id or path,
        len(package.scope),
        len(package.proposals),
        len(package.rejected),
    )
    return package


def selections_from_dict(raw: Mapping) -> Dict[str, PlugSelection]:
    """Parse ``{scopeId: {"source": ..., "manualAmount": ...}}``; invalid entries are dropped."""

    selections: Dict[str, PlugSelection] = {}
    for scope_id, entry in raw.items():
        try:
            if isinstance(entry, str):
                selection = PlugSelection(source=entry)
            else:
                selection = PlugSelection(
                    source=str(entry.get("source") or "none"),
                    manual_amount=float(entry.get("manualAmount") or 0.0),
                )
        except (AttributeError, TypeError, ValueError) as exc:
            LOGGER.warning("Ignoring plug selection for %s: %s", scope_id, exc)
            continue
        selections[str(scope_id)] = selection
    return selections


def load_selections(path: Path) -> Dict[str, PlugSelection]:
    raw = _read_json(Path(path))
    if not isinstance(raw, dict):
        raise PackageFormatError(f"{path} must contain a JSON object")
    return selections_from_dict(raw)


def selections_to_dict(selections: Mapping) -> Dict[str, Dict[str, object]]:
    return {
        scope_id: {"source": selection.source, "manualAmount": selection.manual_amount}
        for scope_id, selection in selections.items()
    }


__all__ = [
    "BiddingPackage",
    "SCHEMA_PATH",
    "load_package",
    "load_selections",
    "line_item_from_dict",
    "package_from_dict",
    "proposal_from_dict",
    "scope_item_from_dict",
    "selections_from_dict",
    "selections_to_dict",
]
