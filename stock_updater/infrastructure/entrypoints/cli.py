"""
CLI entry point for the update sweep.

This script is the Composition Root for batch runs: it loads Settings, wires
the adapters through build_components() and sweeps either the symbols given
on the command line or every optionable stock in the reference table.

    export ALPHAVANTAGE_API_KEY=<your-key>
    python -m stock_updater.infrastructure.entrypoints.cli --symbol AAPL --symbol MSFT
    python -m stock_updater.infrastructure.entrypoints.cli --pipeline moving-average
"""

import argparse
import sys
from typing import Optional, Sequence

from stock_updater.domain.entities.fetch_config import ALL_PIPELINES, PipelineKind
from stock_updater.domain.entities.pipeline_report import SweepReport
from stock_updater.domain.errors import PersistenceFailure
from stock_updater.infrastructure.config.settings import Settings
from stock_updater.infrastructure.entrypoints.composition import Components, build_components
from stock_updater.infrastructure.logging_config import setup_logger


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="stock-updater",
        description="Fetch stock details, moving averages and daily prices and upsert them.",
    )
    parser.add_argument(
        "--symbol",
        action="append",
        default=[],
        help="Symbol to update (repeatable). Defaults to every optionable stock.",
    )
    parser.add_argument(
        "--pipeline",
        action="append",
        choices=[kind.value for kind in PipelineKind],
        help="Pipeline to run (repeatable). Defaults to all three.",
    )
    parser.add_argument(
        "--options-indicator",
        default=None,
        help="options_offered value selecting the stocks to sweep.",
    )
    parser.add_argument("--workers", type=int, default=None, help="Symbols processed in parallel.")
    return parser.parse_args(argv)


def format_summary(report: SweepReport) -> str:
    lines = []
    for unit in report.reports:
        line = (
            f"{unit.symbol:<8} {unit.kind.value:<18} {unit.state.value:<7} "
            f"saved={unit.saved} new={unit.created} skipped={unit.skipped}"
        )
        if unit.error:
            line += f" error={unit.error}"
        lines.append(line)
    lines.append(f"{len(report.succeeded)} unit(s) done, {len(report.failed)} failed.")
    return "\n".join(lines)


def main(
    argv: Optional[Sequence[str]] = None,
    settings: Optional[Settings] = None,
    components: Optional[Components] = None,
) -> int:
    args = parse_args(argv)
    settings = settings or Settings.from_env()
    setup_logger("stock_updater", level=settings.log_level, log_dir=settings.log_dir)

    owned = components is None
    components = components or build_components(settings)
    kinds = [PipelineKind(value) for value in args.pipeline] if args.pipeline else list(ALL_PIPELINES)
    profile = settings.profile()

    try:
        if args.symbol:
            symbols = [symbol.upper().strip() for symbol in args.symbol]
            report = components.orchestrator.sweep(symbols, profile, kinds, max_workers=args.workers)
        else:
            indicator = args.options_indicator or settings.options_indicator
            report = components.orchestrator.sweep_optionable(
                components.stock_repository, profile, indicator, kinds, max_workers=args.workers
            )
    except PersistenceFailure as exc:
        print(f"Could not load the stocks to sweep: {exc}", file=sys.stderr)
        return 2
    finally:
        if owned:
            components.close()

    print(format_summary(report))
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
