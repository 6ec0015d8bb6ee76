from __future__ import annotations

import math

import pytest

from bidlevel.analysis import compute_analysis
from bidlevel.catalog import ScopeCatalog
from bidlevel.errors import EmptyBidderSetWarning
from bidlevel.models import PlugSelection
from bidlevel.package_io import load_package, load_selections
from bidlevel.plugs import resolve_plug
from bidlevel.proposals import ProposalStore

from builders import excluded, included, undetermined


def test_two_bidder_single_item_statistics(scope_item, proposal) -> None:
    scope = [scope_item("s1", quantity=1)]
    proposals = [proposal("A", {"s1": included(100)}), proposal("B", {"s1": included(90)})]

    analysis = compute_analysis(scope, proposals)

    assert analysis.lowest_bid.bidder_id == "B"
    assert analysis.lowest_bid.included_total == 90
    assert analysis.highest_bid.bidder_id == "A"
    assert analysis.highest_bid.included_total == 100
    assert analysis.avg_bid == 95
    assert analysis.spread == 10
    assert analysis.spread_percentage == pytest.approx(11.11, abs=0.01)
    assert analysis.warning is None


def test_empty_bidder_list_leaves_statistics_undefined(scope_item) -> None:
    analysis = compute_analysis([scope_item("s1")], [], {"s1": PlugSelection()})

    assert analysis.lowest_bid is None
    assert analysis.highest_bid is None
    assert analysis.avg_bid is None
    assert analysis.spread is None
    assert analysis.spread_percentage is None
    assert analysis.plug_total == 0
    assert analysis.warning == EmptyBidderSetWarning()


def test_plug_total_computable_without_bidders(scope_item) -> None:
    analysis = compute_analysis(
        [scope_item("s1"), scope_item("s2")],
        [],
        {"s1": PlugSelection("manual", 1200), "s2": PlugSelection("ghost-bidder")},
    )

    assert analysis.plug_total == 1200
    assert analysis.avg_bid is None


def test_plug_total_left_open_without_plug_input(scope_item, proposal) -> None:
    scope = [scope_item("s1")]
    proposals = [proposal("A", {"s1": included(100)})]

    assert compute_analysis(scope, proposals).plug_total is None
    resolved = resolve_plug(scope, proposals, {"s1": PlugSelection("A")})
    assert compute_analysis(scope, proposals, resolved=resolved).plug_total == 100


def test_undetermined_bid_counts_items_but_no_totals(scope_item, proposal) -> None:
    scope = [scope_item("s1"), scope_item("s2")]
    proposals = [proposal("A", {"s1": undetermined(500), "s2": included(100)})]

    entry = compute_analysis(scope, proposals).for_bidder("A")

    assert entry.included_total == 100
    assert entry.excluded_total == 0
    assert entry.item_count == 2
    assert entry.avg_unit_price == 50


def test_clarification_total_is_independent_axis(scope_item, proposal) -> None:
    scope = [scope_item("s1"), scope_item("s2"), scope_item("s3")]
    proposals = [
        proposal(
            "A",
            {
                "s1": included(100, clarification_needed=True),
                "s2": excluded(40, clarification_needed=True),
                "s3": included(10),
            },
        )
    ]

    entry = compute_analysis(scope, proposals).for_bidder("A")

    assert entry.included_total == 110
    assert entry.excluded_total == 40
    assert entry.clarification_total == 140


def test_bids_outside_the_catalog_are_ignored(scope_item, proposal) -> None:
    proposals = [proposal("A", {"s1": included(100), "old-item": included(900)})]

    entry = compute_analysis([scope_item("s1")], proposals).for_bidder("A")

    assert entry.included_total == 100
    assert entry.item_count == 1


def test_bidder_without_any_bid_has_zero_average(scope_item, proposal) -> None:
    analysis = compute_analysis(
        [scope_item("s1")],
        [proposal("A", {"s1": included(80)}), proposal("B", {})],
    )

    entry = analysis.for_bidder("B")
    assert entry.item_count == 0
    assert entry.avg_unit_price == 0
    assert analysis.lowest_bid.bidder_id == "A"
    assert analysis.highest_bid.bidder_id == "A"
    assert analysis.avg_bid == 80


def test_bidders_with_only_exclusions_leave_statistics_undefined(scope_item, proposal) -> None:
    analysis = compute_analysis([scope_item("s1")], [proposal("A", {"s1": excluded(80)})])

    assert analysis.for_bidder("A").excluded_total == 80
    assert analysis.lowest_bid is None
    assert isinstance(analysis.warning, EmptyBidderSetWarning)


def test_ties_keep_proposal_order(scope_item, proposal) -> None:
    proposals = [
        proposal("C", {"s1": included(50)}),
        proposal("A", {"s1": included(50)}),
        proposal("B", {"s1": included(50)}),
    ]

    analysis = compute_analysis([scope_item("s1")], proposals)

    assert analysis.lowest_bid.bidder_id == "C"
    assert analysis.highest_bid.bidder_id == "B"
    assert analysis.spread == 0
    assert analysis.spread_percentage == 0


def test_zero_lowest_bid_leaves_spread_percentage_undefined(scope_item, proposal) -> None:
    proposals = [proposal("A", {"s1": included(0)}), proposal("B", {"s1": included(25)})]

    analysis = compute_analysis([scope_item("s1")], proposals)

    assert analysis.spread == 25
    assert analysis.spread_percentage is None


PROPERTY_CASES = [
    {"A": {"s1": included(0.1)}, "B": {"s1": included(0.1)}, "C": {"s1": included(0.1)}},
    {"A": {"s1": included(120.5), "s2": excluded(30)}, "B": {"s2": included(99.99)}},
    {
        "A": {"s1": included(1e6, clarification_needed=True), "s2": undetermined(5)},
        "B": {"s1": excluded(2e6), "s2": included(7.25)},
        "C": {"s1": included(333.33), "s2": included(666.67), "s3": excluded(1)},
    },
    {"A": {}, "B": {"s3": undetermined(12)}},
]


@pytest.mark.parametrize("bids", PROPERTY_CASES)
def test_analysis_invariants(scope_item, proposal, bids) -> None:
    scope = ScopeCatalog([scope_item("s1"), scope_item("s2"), scope_item("s3")])
    store = ProposalStore([proposal(bidder_id, items) for bidder_id, items in bids.items()])

    analysis = compute_analysis(scope, store)

    for entry in analysis.bidders:
        priced = sum(bid.total_price for bid in store.get(entry.bidder_id).line_items.values())
        assert entry.included_total + entry.excluded_total <= priced + 1e-9
        if entry.item_count:
            assert entry.avg_unit_price == entry.included_total / entry.item_count
        else:
            assert entry.avg_unit_price == 0

    if analysis.lowest_bid is not None:
        assert analysis.lowest_bid.included_total <= analysis.avg_bid <= analysis.highest_bid.included_total
    else:
        assert analysis.avg_bid is None

    assert compute_analysis(scope, store) == analysis


def test_sample_package_analysis(sample_package_path, sample_selections_path) -> None:
    package = load_package(sample_package_path)
    selections = load_selections(sample_selections_path)

    analysis = compute_analysis(package.scope, package.proposals, selections)

    apex = analysis.for_bidder("bidder-001")
    assert apex.included_total == 565000
    assert apex.excluded_total == 189000
    assert apex.item_count == 6
    assert analysis.for_bidder("bidder-002").included_total == 713500
    assert analysis.for_bidder("bidder-003").clarification_total == 282000
    assert analysis.lowest_bid.bidder_name == "Apex Construction LLC"
    assert analysis.highest_bid.bidder_name == "Premier Construction"
    assert analysis.avg_bid == 695750
    assert analysis.spread == 243750
    assert math.isclose(analysis.spread_percentage, 243750 / 565000 * 100)
    assert analysis.plug_total == 725250
    assert analysis.total_scope == 6


def test_full_recompute_after_edit(scope_item, proposal) -> None:
    scope = ScopeCatalog([scope_item("s1")])
    store = ProposalStore([proposal("A", {"s1": included(100), "s2": included(50)})])
    before = compute_analysis(scope, store)

    scope.add_item(scope_item("s2"))
    after = compute_analysis(scope, store)

    assert before.for_bidder("A").included_total == 100
    assert after.for_bidder("A").included_total == 150
    assert after == compute_analysis(ScopeCatalog([scope_item("s1"), scope_item("s2")]), store)
