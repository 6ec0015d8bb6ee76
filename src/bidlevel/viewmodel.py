"""Projection of the analysis into the structure the leveling screen renders.

Nothing here decides a number; every figure is copied from the analysis or
the plug resolution so the matrix, the totals row and the headline cards
always agree with :func:`bidlevel.analysis.compute_analysis`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .catalog import ScopeCatalog, as_catalog
from .models import (
    PLUG_MANUAL,
    PLUG_NONE,
    BidAnalysis,
    BidderAnalysis,
    BidderProposal,
    LineItemBid,
    ResolvedPlug,
    ScopeLineItem,
)
from .plugs import plug_total
from .proposals import ProposalStore, as_store

COMPARISON_CHOICES: Tuple[str, ...] = ("all", "included-only", "excluded-only")


@dataclass(frozen=True)
class BidderColumn:
    bidder_id: str
    bidder_name: str
    status: str
    submit_date: str


@dataclass(frozen=True)
class MatrixCell:
    bidder_id: str
    has_bid: bool
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    included: bool = False
    excluded: bool = False
    clarification_needed: bool = False
    notes: Optional[str] = None
    alternate_count: int = 0


@dataclass(frozen=True)
class PlugCell:
    source: str
    source_label: Optional[str]
    amount: float
    unresolved: bool = False


@dataclass(frozen=True)
class MatrixRow:
    item: ScopeLineItem
    cells: Tuple[MatrixCell, ...]
    plug: PlugCell


@dataclass(frozen=True)
class SummaryCell:
    bidder_id: str
    bidder_name: str
    included_total: float
    excluded_total: float
    clarification_total: float
    item_count: int
    avg_unit_price: float
    declared_total: float


@dataclass(frozen=True)
class HeadlineCard:
    label: str
    amount: Optional[float]
    bidder_name: Optional[str] = None


@dataclass(frozen=True)
class HeadlineCards:
    lowest: HeadlineCard
    highest: HeadlineCard
    average: HeadlineCard
    plug_total: HeadlineCard
    spread: Optional[float] = None
    spread_percentage: Optional[float] = None


@dataclass(frozen=True)
class ViewModel:
    columns: Tuple[BidderColumn, ...]
    rows: Tuple[MatrixRow, ...]
    summary: Tuple[SummaryCell, ...]
    headlines: HeadlineCards
    plug_total: float
    total_scope: int
    comparison: str = "all"
    warnings: Tuple[Warning, ...] = ()
    unresolved: Tuple[str, ...] = ()

    @property
    def unresolved_plugs(self) -> List[str]:
        """Every unresolved plug in the scope, including rows the filter hides."""
        return list(self.unresolved)

    def matrix_frame(self) -> pd.DataFrame:
        """Flatten the matrix into one row per scope item for export."""
        records: List[Dict[str, object]] = []
        for row in self.rows:
            record: Dict[str, object] = {
                "SCOPE_ID": row.item.id,
                "CATEGORY": row.item.category,
                "DESCRIPTION": row.item.description,
                "UNIT": row.item.unit,
                "QUANTITY": row.item.quantity,
                "PRIORITY": row.item.priority,
            }
            for column, cell in zip(self.columns, row.cells):
                prefix = column.bidder_id
                record[f"{prefix} TOTAL"] = cell.total_price
                record[f"{prefix} STATUS"] = _cell_flags(cell)
            record["PLUG_SOURCE"] = row.plug.source_label or ""
            record["PLUG_AMOUNT"] = row.plug.amount
            record["PLUG_UNRESOLVED"] = row.plug.unresolved
            records.append(record)
        columns = ["SCOPE_ID", "CATEGORY", "DESCRIPTION", "UNIT", "QUANTITY", "PRIORITY"]
        for column in self.columns:
            columns.extend([f"{column.bidder_id} TOTAL", f"{column.bidder_id} STATUS"])
        columns.extend(["PLUG_SOURCE", "PLUG_AMOUNT", "PLUG_UNRESOLVED"])
        return pd.DataFrame.from_records(records, columns=columns)

    def summary_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "BIDDER_ID": [cell.bidder_id for cell in self.summary],
                "BIDDER_NAME": [cell.bidder_name for cell in self.summary],
                "INCLUDED_TOTAL": [cell.included_total for cell in self.summary],
                "EXCLUDED_TOTAL": [cell.excluded_total for cell in self.summary],
                "CLARIFICATION_TOTAL": [cell.clarification_total for cell in self.summary],
                "ITEM_COUNT": [cell.item_count for cell in self.summary],
                "AVG_UNIT_PRICE": [cell.avg_unit_price for cell in self.summary],
                "DECLARED_TOTAL": [cell.declared_total for cell in self.summary],
            }
        )


def _cell_flags(cell: MatrixCell) -> str:
    if not cell.has_bid:
        return "NO BID"
    flags = []
    if cell.included:
        flags.append("INC")
    if cell.excluded:
        flags.append("EXC")
    if cell.clarification_needed:
        flags.append("CLAR")
    return "/".join(flags)


def _project_cell(bidder_id: str, bid: Optional[LineItemBid]) -> MatrixCell:
    if bid is None:
        return MatrixCell(bidder_id=bidder_id, has_bid=False)
    return MatrixCell(
        bidder_id=bidder_id,
        has_bid=True,
        unit_price=bid.unit_price,
        total_price=bid.total_price,
        included=bid.included,
        excluded=bid.excluded,
        clarification_needed=bid.clarification_needed,
        notes=bid.notes,
        alternate_count=len(bid.alternates),
    )


def _project_plug(plug: Optional[ResolvedPlug], store: ProposalStore) -> PlugCell:
    if plug is None or plug.source == PLUG_NONE:
        return PlugCell(source=PLUG_NONE, source_label=None, amount=0.0)
    if plug.source == PLUG_MANUAL:
        return PlugCell(source=PLUG_MANUAL, source_label="Manual", amount=plug.amount)
    proposal = store.get(plug.source)
    label = proposal.bidder_name if proposal is not None else plug.source
    return PlugCell(source=plug.source, source_label=label, amount=plug.amount, unresolved=plug.unresolved)


def _row_visible(cells: Iterable[MatrixCell], comparison: str) -> bool:
    if comparison == "included-only":
        return any(cell.included for cell in cells)
    if comparison == "excluded-only":
        return any(cell.excluded for cell in cells)
    return True


def _bid_card(label: str, entry: Optional[BidderAnalysis]) -> HeadlineCard:
    if entry is None:
        return HeadlineCard(label=label, amount=None)
    return HeadlineCard(label=label, amount=entry.included_total, bidder_name=entry.bidder_name)


def project_view_model(
    scope: "ScopeCatalog | Iterable[ScopeLineItem]",
    proposals: "ProposalStore | Iterable[BidderProposal]",
    analysis: BidAnalysis,
    resolved: Mapping,
    comparison: str = "all",
) -> ViewModel:
    """Assemble the matrix, totals row and headline cards.

    ``comparison`` only hides matrix rows; totals, cards and unresolved plug
    flags always reflect the whole scope. The plug total comes from the
    analysis; a ``ValueError`` is raised when ``resolved`` adds up to a
    different figure, which means the two were built from different
    selections.
    """

    if comparison not in COMPARISON_CHOICES:
        raise ValueError(f"comparison must be one of {', '.join(COMPARISON_CHOICES)}; got {comparison!r}")

    catalog = as_catalog(scope)
    store = as_store(proposals)
    bidders = list(store)

    columns = tuple(
        BidderColumn(p.bidder_id, p.bidder_name, p.status, p.submit_date) for p in bidders
    )

    rows: List[MatrixRow] = []
    for item in catalog:
        cells = tuple(_project_cell(p.bidder_id, p.line_items.get(item.id)) for p in bidders)
        if not _row_visible(cells, comparison):
            continue
        rows.append(MatrixRow(item=item, cells=cells, plug=_project_plug(resolved.get(item.id), store)))

    summary = tuple(
        SummaryCell(
            bidder_id=entry.bidder_id,
            bidder_name=entry.bidder_name,
            included_total=entry.included_total,
            excluded_total=entry.excluded_total,
            clarification_total=entry.clarification_total,
            item_count=entry.item_count,
            avg_unit_price=entry.avg_unit_price,
            declared_total=entry.declared_total,
        )
        for entry in analysis.bidders
    )

    leveled = plug_total(resolved)
    if analysis.plug_total is not None:
        if analysis.plug_total != leveled:
            raise ValueError(
                f"analysis plug total {analysis.plug_total:,.2f} does not match the resolved plugs "
                f"({leveled:,.2f}); compute the analysis from the same plug selections"
            )
        leveled = analysis.plug_total
    headlines = HeadlineCards(
        lowest=_bid_card("Lowest Bid", analysis.lowest_bid),
        highest=_bid_card("Highest Bid", analysis.highest_bid),
        average=HeadlineCard(label="Average Bid", amount=analysis.avg_bid),
        plug_total=HeadlineCard(label="Plug Total", amount=leveled),
        spread=analysis.spread,
        spread_percentage=analysis.spread_percentage,
    )

    warnings: List[Warning] = []
    if analysis.warning is not None:
        warnings.append(analysis.warning)
    warnings.extend(plug.warning for plug in resolved.values() if plug.warning is not None)

    return ViewModel(
        columns=columns,
        rows=tuple(rows),
        summary=summary,
        headlines=headlines,
        plug_total=leveled,
        total_scope=analysis.total_scope,
        comparison=comparison,
        warnings=tuple(warnings),
        unresolved=tuple(item_id for item_id, plug in resolved.items() if plug.unresolved),
    )


__all__ = [
    "COMPARISON_CHOICES",
    "BidderColumn",
    "HeadlineCard",
    "HeadlineCards",
    "MatrixCell",
    "MatrixRow",
    "PlugCell",
    "SummaryCell",
    "ViewModel",
    "project_view_model",
]
