from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .analysis import compute_analysis
from .config import load_config
from .models import BidAnalysis, ResolvedPlug
from .package_io import BiddingPackage
from .plugs import resolve_plug
from .viewmodel import ViewModel, project_view_model


def level_package(
    package: BiddingPackage,
    selections: Optional[Mapping] = None,
    comparison: str = "all",
) -> Tuple[BidAnalysis, Dict[str, ResolvedPlug], ViewModel]:
    """Run resolution, analysis and projection for one package state."""

    resolved = resolve_plug(package.scope, package.proposals, selections)
    analysis = compute_analysis(package.scope, package.proposals, resolved=resolved)
    view_model = project_view_model(package.scope, package.proposals, analysis, resolved, comparison)
    return analysis, resolved, view_model


@dataclass
class LevelingOptions:
    package_path: Optional[Path] = None
    selections_path: Optional[Path] = None
    output_dir: Optional[Path] = None
    formats: Sequence[str] = ("xlsx",)
    comparison: Optional[str] = None


def level(options: LevelingOptions) -> Dict[str, Path]:
    """Programmatic interface to run the leveling pipeline and return artifact paths.

    Returns a dict keyed by export format (xlsx, csv, pdf).
    """
    from .cli import run as run_pipeline

    env = dict(os.environ)
    if options.package_path:
        env["BIDLEVEL_PACKAGE"] = str(options.package_path)
    if options.selections_path:
        env["BIDLEVEL_SELECTIONS"] = str(options.selections_path)
    if options.output_dir:
        env["OUTPUT_DIR"] = str(options.output_dir)
    if options.formats:
        env["BIDLEVEL_EXPORT_FORMATS"] = ",".join(options.formats)
    if options.comparison:
        env["BIDLEVEL_COMPARISON"] = options.comparison

    cfg = load_config(env, None)
    rc = run_pipeline(runtime_config=cfg)
    if rc != 0:
        raise RuntimeError(f"Bid leveling run failed with code {rc}")
    targets = {"xlsx": cfg.output_xlsx, "csv": cfg.output_csv, "pdf": cfg.output_pdf}
    return {fmt: targets[fmt] for fmt in cfg.export_formats}
