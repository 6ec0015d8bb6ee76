"""Bidder proposals as received; read-only from the analysis side."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import DuplicateIdError
from .models import BidderProposal, LineItemBid

LOGGER = logging.getLogger(__name__)


class ProposalStore:
    def __init__(self, proposals: Iterable[BidderProposal] = ()) -> None:
        self._proposals: Dict[str, BidderProposal] = {}
        for proposal in proposals:
            self.add_proposal(proposal)

    def __iter__(self) -> Iterator[BidderProposal]:
        return iter(list(self._proposals.values()))

    def __len__(self) -> int:
        return len(self._proposals)

    def __contains__(self, bidder_id: object) -> bool:
        return bidder_id in self._proposals

    def bidder_ids(self) -> List[str]:
        return list(self._proposals)

    def get(self, bidder_id: str) -> Optional[BidderProposal]:
        return self._proposals.get(bidder_id)

    def add_proposal(self, proposal: BidderProposal) -> BidderProposal:
        if proposal.bidder_id in self._proposals:
            raise DuplicateIdError("bidder", proposal.bidder_id)
        self._proposals[proposal.bidder_id] = proposal
        LOGGER.debug(
            "Received proposal from %s (%s) with %d line items",
            proposal.bidder_name,
            proposal.bidder_id,
            len(proposal.line_items),
        )
        return proposal

    def replace_proposal(self, proposal: BidderProposal) -> BidderProposal:
        """Store a revised proposal, keeping the bidder's original position."""
        self._proposals[proposal.bidder_id] = proposal
        return proposal

    def remove_proposal(self, bidder_id: str) -> None:
        self._proposals.pop(bidder_id, None)

    def get_line_item_bid(self, bidder_id: str, scope_item_id: str) -> Optional[LineItemBid]:
        proposal = self._proposals.get(bidder_id)
        if proposal is None:
            return None
        return proposal.line_items.get(scope_item_id)


def as_store(proposals: "ProposalStore | Iterable[BidderProposal]") -> ProposalStore:
    if isinstance(proposals, ProposalStore):
        return proposals
    return ProposalStore(proposals)


__all__ = ["ProposalStore", "as_store"]
