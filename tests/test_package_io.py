from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from bidlevel.errors import PackageFormatError
from bidlevel.models import PlugSelection
from bidlevel.package_io import (
    load_package,
    load_selections,
    package_from_dict,
    selections_from_dict,
    selections_to_dict,
)


def _minimal_package() -> dict:
    return {
        "packageId": "pkg-1",
        "scopeItems": [
            {"id": "s1", "category": "Concrete", "description": "Footings", "unit": "CY", "quantity": 10},
            {"category": "Concrete", "description": "Walls", "unit": "CY", "quantity": 4},
        ],
        "bidderProposals": [
            {
                "bidderId": "A",
                "bidderName": "Apex",
                "totalAmount": 1000,
                "lineItems": {
                    "s1": {"unitPrice": 50, "totalPrice": 500, "included": True},
                },
            }
        ],
    }


def test_load_sample_package(sample_package_path: Path) -> None:
    package = load_package(sample_package_path)

    assert package.package_id == "pkg-sitework-001"
    assert package.scope.ids() == [f"scope-00{i}" for i in range(1, 7)]
    assert package.proposals.bidder_ids() == ["bidder-001", "bidder-002", "bidder-003"]
    assert package.rejected == []

    apex = package.proposals.get("bidder-001")
    assert apex.general_conditions.bond_rate == 1.5
    assert apex.assumptions == ("Weather delays not included", "Material escalation at 3%")
    assert apex.line_items["scope-005"].notes == "Steel not included - separate contract"
    assert package.scope.get("scope-002").exclusions == ("Rock removal", "Dewatering")


def test_missing_ids_are_generated() -> None:
    package = package_from_dict(_minimal_package())

    assert package.scope.ids() == ["s1", "scope-001"]
    assert package.proposals.get("A").status == "submitted"


def test_schema_failure_raises_package_format_error() -> None:
    raw = _minimal_package()
    raw["bidderProposals"][0]["lineItems"]["s1"]["totalPrice"] = "five hundred"

    with pytest.raises(PackageFormatError) as excinfo:
        package_from_dict(raw)

    assert "bidderProposals/0/lineItems/s1/totalPrice" in str(excinfo.value)


def test_invalid_rows_are_skipped_not_fatal(caplog) -> None:
    raw = _minimal_package()
    raw["scopeItems"].append(
        {"id": "s1", "category": "Dup", "description": "Duplicate", "unit": "LS", "quantity": 1}
    )
    raw["scopeItems"].append(
        {"id": "s9", "category": "Earthwork", "description": "Backfill", "unit": "CY", "quantity": -3}
    )
    raw["bidderProposals"][0]["lineItems"]["s2"] = {
        "unitPrice": 1,
        "totalPrice": 1,
        "included": True,
        "excluded": True,
    }
    raw["bidderProposals"].append(
        {"bidderId": "B", "bidderName": "Bolt", "totalAmount": 5, "status": "lost", "lineItems": {}}
    )

    with caplog.at_level(logging.WARNING, logger="bidlevel.package_io"):
        package = package_from_dict(raw)

    assert package.scope.ids() == ["s1", "scope-001"]
    assert package.proposals.bidder_ids() == ["A"]
    assert set(package.proposals.get("A").line_items) == {"s1"}
    assert len(package.rejected) == 4
    assert "Skipping" in caplog.text


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PackageFormatError):
        load_package(path)
    with pytest.raises(FileNotFoundError):
        load_package(tmp_path / "missing.json")


def test_selections_round_trip_and_invalid_entries(tmp_path: Path) -> None:
    raw = {
        "s1": {"source": "A"},
        "s2": {"source": "manual", "manualAmount": 12.5},
        "s3": "none",
        "s4": {"source": "manual", "manualAmount": -10},
        "s5": 42,
    }
    path = tmp_path / "plugs.json"
    path.write_text(json.dumps(raw), encoding="utf-8")

    selections = load_selections(path)

    assert selections == {
        "s1": PlugSelection("A"),
        "s2": PlugSelection("manual", 12.5),
        "s3": PlugSelection("none"),
    }
    assert selections_from_dict(selections_to_dict(selections)) == selections
