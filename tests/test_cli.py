from __future__ import annotations

import logging
from pathlib import Path

from bidlevel.api import LevelingOptions, level
from bidlevel.cli import main


def test_main_writes_requested_outputs(tmp_path: Path, sample_package_path, sample_selections_path, caplog) -> None:
    out_dir = tmp_path / "outputs"

    with caplog.at_level(logging.INFO):
        rc = main(
            [
                "--package",
                str(sample_package_path),
                "--selections",
                str(sample_selections_path),
                "--output-dir",
                str(out_dir),
                "--formats",
                "xlsx,csv,pdf",
                "--comparison",
                "excluded-only",
            ]
        )

    assert rc == 0
    assert (out_dir / "Bid_Leveling.xlsx").exists()
    assert (out_dir / "Bid_Leveling_Matrix.csv").exists()
    assert (out_dir / "Bid_Leveling_Summary.pdf").exists()
    assert "[leveling:01]" in caplog.text
    assert "Plug Total: $725,250" in caplog.text
    assert "1 of 6 rows shown" in caplog.text


def test_main_reports_bad_package(tmp_path: Path, caplog) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text('{"scopeItems": []}', encoding="utf-8")

    rc = main(["--package", str(broken), "--output-dir", str(tmp_path)])

    assert rc == 1
    assert "Fatal error during bid leveling" in caplog.text


def test_level_api_returns_artifacts(tmp_path: Path, sample_package_path) -> None:
    artifacts = level(
        LevelingOptions(
            package_path=sample_package_path,
            output_dir=tmp_path,
            formats=("csv",),
        )
    )

    assert list(artifacts) == ["csv"]
    assert artifacts["csv"].exists()
