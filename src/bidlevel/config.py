from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional, Tuple

from .viewmodel import COMPARISON_CHOICES

_BOOLEAN_TRUE = {"1", "true", "yes", "on"}

EXPORT_FORMATS: Tuple[str, ...] = ("xlsx", "csv", "pdf")


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    base_dir: Path
    package_path: Path
    selections_path: Optional[Path]
    output_dir: Path
    output_xlsx: Path
    output_csv: Path
    output_pdf: Path
    export_formats: Tuple[str, ...]
    comparison: str = "all"
    verbose: bool = False


def _to_path(value: object | None) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser().resolve()
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser().resolve()


def _flag(value: object | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOLEAN_TRUE


def _formats(value: object | None) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts = [str(part) for part in value]
    else:
        parts = str(value).split(",")
    chosen = []
    for part in parts:
        fmt = part.strip().lower().lstrip(".")
        if fmt in EXPORT_FORMATS and fmt not in chosen:
            chosen.append(fmt)
    return tuple(chosen) or None


def _comparison(value: object | None) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().lower()
    return text if text in COMPARISON_CHOICES else None


def _namespace(cli_args: object | None) -> SimpleNamespace:
    if cli_args is None:
        return SimpleNamespace()
    if isinstance(cli_args, SimpleNamespace):
        return cli_args
    if hasattr(cli_args, "__dict__"):
        return SimpleNamespace(**{k: v for k, v in vars(cli_args).items()})
    return SimpleNamespace()


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options."""

    base_dir = Path(__file__).resolve().parents[2]
    data_dir = base_dir / "data_sample"
    default_package = (data_dir / "bid_package.json").resolve()
    default_output_dir = (base_dir / "outputs").resolve()

    package_path = _to_path(env.get("BIDLEVEL_PACKAGE")) or default_package
    selections_path = _to_path(env.get("BIDLEVEL_SELECTIONS"))
    output_dir = _to_path(env.get("OUTPUT_DIR")) or default_output_dir
    export_formats = _formats(env.get("BIDLEVEL_EXPORT_FORMATS")) or ("xlsx",)
    comparison = _comparison(env.get("BIDLEVEL_COMPARISON")) or "all"
    verbose = _flag(env.get("BIDLEVEL_VERBOSE"))

    cli_ns = _namespace(cli_args)
    if getattr(cli_ns, "package", None):
        package_path = _to_path(cli_ns.package) or package_path
    if getattr(cli_ns, "selections", None):
        selections_path = _to_path(cli_ns.selections)
    if getattr(cli_ns, "output_dir", None):
        output_dir = _to_path(cli_ns.output_dir) or output_dir
    if getattr(cli_ns, "formats", None):
        export_formats = _formats(cli_ns.formats) or export_formats
    if getattr(cli_ns, "comparison", None):
        comparison = _comparison(cli_ns.comparison) or comparison
    if getattr(cli_ns, "verbose", False):
        verbose = True

    return Config(
        base_dir=base_dir,
        package_path=package_path,
        selections_path=selections_path,
        output_dir=output_dir,
        output_xlsx=(output_dir / "Bid_Leveling.xlsx").resolve(),
        output_csv=(output_dir / "Bid_Leveling_Matrix.csv").resolve(),
        output_pdf=(output_dir / "Bid_Leveling_Summary.pdf").resolve(),
        export_formats=export_formats,
        comparison=comparison,
        verbose=verbose,
    )


__all__ = ["Config", "EXPORT_FORMATS", "load_config"]
