import argparse
import logging
import os
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from .api import level_package
from .config import EXPORT_FORMATS, Config
from .config import load_config as load_runtime_config
from .export import make_summary_text, write_exports
from .package_io import load_package, load_selections
from .viewmodel import COMPARISON_CHOICES

BASE_DIR = Path(__file__).resolve().parents[2]

load_dotenv(BASE_DIR / ".env")

DEFAULT_CONFIG = load_runtime_config(os.environ, None)

logger = logging.getLogger(__name__)


def run(runtime_config: Optional[Config] = None) -> int:
    runtime_cfg = runtime_config or DEFAULT_CONFIG

    stage_counter = 0

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    def log_stage(message: str) -> None:
        nonlocal stage_counter
        stage_counter += 1
        logger.info("[leveling:%02d] %s", stage_counter, message)

    def log_detail(message: str) -> None:
        logger.info("             %s", message)

    log_stage(f"Loading bidding package {runtime_cfg.package_path}")
    package = load_package(runtime_cfg.package_path)
    log_detail(f"scope_items={len(package.scope)} | proposals={len(package.proposals)}")
    for message in package.rejected:
        log_detail(f"rejected => {message}")

    selections = {}
    if runtime_cfg.selections_path:
        log_stage(f"Loading plug selections {runtime_cfg.selections_path}")
        selections = load_selections(runtime_cfg.selections_path)
        log_detail(f"selections={len(selections)}")
    else:
        log_stage("No plug selections supplied; every plug defaults to none")

    log_stage("Computing bid analysis")
    analysis, resolved, view_model = level_package(package, selections, runtime_cfg.comparison)
    for entry in analysis.bidders:
        logger.debug(
            "[bidder] %s :: included=$%s excluded=$%s clarification=$%s items=%d",
            entry.bidder_name,
            f"{entry.included_total:,.2f}",
            f"{entry.excluded_total:,.2f}",
            f"{entry.clarification_total:,.2f}",
            entry.item_count,
        )
    for item_id, plug in resolved.items():
        logger.debug("[plug] %s :: source=%s amount=$%s", item_id, plug.source, f"{plug.amount:,.2f}")

    log_stage(f"Writing exports ({', '.join(runtime_cfg.export_formats)})")
    targets = {
        "xlsx": runtime_cfg.output_xlsx,
        "csv": runtime_cfg.output_csv,
        "pdf": runtime_cfg.output_pdf,
    }
    written = write_exports(view_model, runtime_cfg.export_formats, targets)

    logger.info("\n=== SUMMARY ===\n")
    logger.info("%s", make_summary_text(view_model))
    if view_model.comparison != "all":
        logger.info("Matrix filter: %s (%d of %d rows shown)", view_model.comparison, len(view_model.rows), view_model.total_scope)
    logger.info("\nOutputs written:")
    for path in written.values():
        logger.info(" - %s", path)
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Level bidder proposals against a fixed scope of work")
    parser.add_argument("--package", help="Path to the bidding package JSON")
    parser.add_argument("--selections", help="Optional plug selections JSON")
    parser.add_argument("--output-dir", help="Directory for generated outputs")
    parser.add_argument(
        "--formats",
        help=f"Comma separated export formats ({', '.join(EXPORT_FORMATS)})",
    )
    parser.add_argument("--comparison", choices=COMPARISON_CHOICES, help="Matrix row filter")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    try:
        return run(runtime_config=runtime_cfg)
    except Exception:  # pragma: no cover - defensive
        logger.exception("Fatal error during bid leveling")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
