"""Console, workbook, CSV and PDF renditions of a leveling view model."""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Dict, Iterable, Optional

import pandas as pd
from reportlab.lib.pagesizes import landscape, letter
from reportlab.pdfgen import canvas

from .viewmodel import HeadlineCard, ViewModel

LOGGER = logging.getLogger(__name__)


def _money(amount: Optional[float]) -> str:
    if amount is None:
        return "n/a"
    return f"${amount:,.0f}"


def _card_line(card: HeadlineCard) -> str:
    suffix = f" ({card.bidder_name})" if card.bidder_name else ""
    return f"{card.label}: {_money(card.amount)}{suffix}"


def headlines_frame(view_model: ViewModel) -> pd.DataFrame:
    cards = view_model.headlines
    rows = [cards.lowest, cards.highest, cards.average, cards.plug_total]
    frame = pd.DataFrame(
        {
            "METRIC": [card.label for card in rows],
            "AMOUNT": [card.amount for card in rows],
            "BIDDER": [card.bidder_name or "" for card in rows],
        }
    )
    extra = pd.DataFrame(
        {
            "METRIC": ["Spread", "Spread %"],
            "AMOUNT": [cards.spread, cards.spread_percentage],
            "BIDDER": ["", ""],
        }
    )
    return pd.concat([frame, extra], ignore_index=True)


def make_summary_text(view_model: ViewModel) -> str:
    cards = view_model.headlines
    lines = [
        _card_line(cards.lowest),
        _card_line(cards.highest),
        _card_line(cards.average),
        _card_line(cards.plug_total),
    ]
    if cards.spread is not None:
        pct = f" ({cards.spread_percentage:.2f}%)" if cards.spread_percentage is not None else ""
        lines.append(f"Spread: {_money(cards.spread)}{pct}")
    summary = view_model.summary_frame()
    if not summary.empty:
        table = summary[["BIDDER_NAME", "INCLUDED_TOTAL", "EXCLUDED_TOTAL", "CLARIFICATION_TOTAL", "ITEM_COUNT"]]
        lines.append(f"Bidder totals:\n{table.to_string(index=False)}")
    if view_model.unresolved_plugs:
        lines.append("Unresolved plugs (counted as $0): " + ", ".join(view_model.unresolved_plugs))
    return "\n".join(lines) + "\n"


def write_workbook(view_model: ViewModel, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        view_model.matrix_frame().to_excel(writer, sheet_name="MATRIX", index=False)
        view_model.summary_frame().to_excel(writer, sheet_name="SUMMARY", index=False)
        headlines_frame(view_model).to_excel(writer, sheet_name="HEADLINES", index=False)
    return path


def write_csv(view_model: ViewModel, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    view_model.matrix_frame().to_csv(path, index=False)
    return path


def _draw_lines(c: canvas.Canvas, lines: Iterable[str], x: float, y: float, leading: float = 14) -> float:
    for line in lines:
        for wrapped in textwrap.wrap(line, width=120) or [""]:
            c.drawString(x, y, wrapped)
            y -= leading
    return y


def write_pdf_summary(view_model: ViewModel, path: Path, title: str = "Bid Leveling Summary") -> Path:
    """One landscape page: headline cards, then one line per bidder."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    page_width, page_height = landscape(letter)
    margin = 36
    c = canvas.Canvas(str(path), pagesize=landscape(letter))
    c.setFont("Helvetica-Bold", 16)
    c.drawString(margin, page_height - margin, title)

    cards = view_model.headlines
    c.setFont("Helvetica", 11)
    y = _draw_lines(
        c,
        [
            _card_line(cards.lowest),
            _card_line(cards.highest),
            _card_line(cards.average),
            _card_line(cards.plug_total),
        ],
        margin,
        page_height - margin - 28,
    )

    c.setFont("Helvetica-Bold", 12)
    c.drawString(margin, y - 8, "Bidder totals")
    c.setFont("Helvetica", 10)
    bidder_lines = [
        f"{cell.bidder_name}: included {_money(cell.included_total)} | excluded {_money(cell.excluded_total)}"
        f" | clarification {_money(cell.clarification_total)} | declared {_money(cell.declared_total)}"
        for cell in view_model.summary
    ]
    y = _draw_lines(c, bidder_lines or ["No proposals received."], margin, y - 24, leading=12)

    if view_model.unresolved_plugs:
        c.setFont("Helvetica-Oblique", 10)
        _draw_lines(
            c,
            ["Unresolved plugs counted as $0: " + ", ".join(view_model.unresolved_plugs)],
            margin,
            y - 8,
        )
    c.showPage()
    c.save()
    return path


def write_exports(view_model: ViewModel, formats: Iterable[str], targets: Dict[str, Path]) -> Dict[str, Path]:
    """Write each requested format to ``targets[fmt]``; returns what was written."""

    writers = {"xlsx": write_workbook, "csv": write_csv, "pdf": write_pdf_summary}
    written: Dict[str, Path] = {}
    for fmt in formats:
        writer = writers.get(fmt)
        if writer is None:
            LOGGER.warning("Unknown export format %s; skipping", fmt)
            continue
        written[fmt] = writer(view_model, targets[fmt])
    return written


__all__ = [
    "headlines_frame",
    "make_summary_text",
    "write_csv",
    "write_exports",
    "write_pdf_summary",
    "write_workbook",
]
