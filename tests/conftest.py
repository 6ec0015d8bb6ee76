from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest

from bidlevel.models import BidderProposal, LineItemBid, ScopeLineItem

SAMPLE_DIR = Path(__file__).resolve().parents[1] / "data_sample"


@pytest.fixture
def sample_package_path() -> Path:
    return SAMPLE_DIR / "bid_package.json"


@pytest.fixture
def sample_selections_path() -> Path:
    return SAMPLE_DIR / "plug_selections.json"


@pytest.fixture
def scope_item() -> Callable[..., ScopeLineItem]:
    def _create(item_id: str = "", quantity: float = 1.0, **kwargs) -> ScopeLineItem:
        fields = {
            "category": "General",
            "description": f"Scope {item_id or 'item'}",
            "unit": "LS",
        }
        fields.update(kwargs)
        return ScopeLineItem(id=item_id, quantity=quantity, **fields)

    return _create


@pytest.fixture
def proposal() -> Callable[..., BidderProposal]:
    def _create(bidder_id: str, line_items: Dict[str, LineItemBid], **kwargs) -> BidderProposal:
        fields = {
            "bidder_name": f"Bidder {bidder_id}",
            "submit_date": "2025-01-24",
            "total_amount": sum(bid.total_price for bid in line_items.values()),
        }
        fields.update(kwargs)
        return BidderProposal(bidder_id=bidder_id, line_items=line_items, **fields)

    return _create
