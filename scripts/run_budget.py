#!/usr/bin/env python3
"""
Process a budget file: normalize, validate, calculate amounts and totals.

Usage:
    python3 scripts/run_budget.py --file <path> [options]

Examples:
    # Validate and print errors plus totals
    python3 scripts/run_budget.py --file presupuesto.csv

    # Spanish formatting, statistics and the row tree
    python3 scripts/run_budget.py --file budget.xlsx --preset spanish_standard --stats --tree

    # Machine-readable result
    python3 scripts/run_budget.py --file budget.csv --json

    # Probe source file (row count, columns, sample) without processing
    python3 scripts/run_budget.py --file budget.csv --probe-only

    # Re-export the calculated rows as an English template
    python3 scripts/run_budget.py --file presupuesto.csv --export english

Exit status is 0 when the budget may be saved, 1 otherwise.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the budget pipeline: normalize -> validate -> amounts -> totals.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--file", required=True, type=Path, help="Path to source file (CSV, TSV, TXT or XLSX).")
    parser.add_argument("--preset", default=None, help="Calculation preset (default: config default_preset).")
    parser.add_argument("--config", type=Path, default=None, help="Override path to the engine config YAML.")
    parser.add_argument("--decimals", type=int, default=None, help="Override display decimal places.")
    parser.add_argument("--currency-symbol", default=None, help="Override display currency symbol.")
    parser.add_argument("--stats", action="store_true", help="Print budget statistics.")
    parser.add_argument("--tree", action="store_true", help="Print the row hierarchy.")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON.")
    parser.add_argument(
        "--export",
        choices=("english", "spanish"),
        default=None,
        help="Print the rows as an import template in the given language.",
    )
    parser.add_argument("--probe-only", action="store_true", help="Probe source file and exit.")
    parser.add_argument(
        "--block-on-warnings",
        action="store_true",
        help="Treat warnings as blocking for the exit status (default: config policy).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Structured log level written to stderr.")
    return parser.parse_args()


def _print_tree(nodes, indent: int = 0) -> None:
    for node in nodes:
        row = node.row
        marker = "" if row.trusted else "  [untrusted]"
        print(f"{'  ' * indent}{row.id}  {row.name}  {row.amount}{marker}")
        _print_tree(node.children, indent + 1)


def main() -> int:
    args = _parse_args()

    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1

    from budget_config import get_engine_config, resolve_options
    from budget_engines import export_price_structure_csv, format_amount, format_totals
    from budget_ingestion.domain.errors import format_for_display
    from budget_kernel.exceptions import BudgetKernelError
    from budget_kernel.logging_config import configure_logging
    from budget_services import BudgetImportService, BudgetPipeline, result_to_dict

    configure_logging(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        config = get_engine_config(args.preset, args.config)
        overrides = {}
        if args.decimals is not None:
            overrides["decimals"] = args.decimals
        if args.currency_symbol is not None:
            overrides["currency_symbol"] = args.currency_symbol
        options = resolve_options(config.options, overrides)
    except BudgetKernelError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    pipeline = BudgetPipeline(options=options, limits=config.limits, price_buckets=config.price_buckets)
    service = BudgetImportService(pipeline=pipeline)

    try:
        if args.probe_only:
            probe = service.probe_file(source_path)
            print(f"Rows:      {probe.row_count}")
            print(f"Columns:   {', '.join(probe.columns)}")
            if probe.detected_delimiter:
                print(f"Delimiter: {probe.detected_delimiter!r}")
            for sample in probe.sample_rows:
                print("  " + " | ".join(sample))
            return 0
        result = service.import_file(source_path, options=options)
    except BudgetKernelError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    block_on_warnings = args.block_on_warnings or config.block_on_warnings
    saveable = pipeline.is_saveable(result, block_on_warnings)

    if args.json:
        payload = result_to_dict(result)
        payload["saveable"] = saveable
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0 if saveable else 1

    if args.export:
        print(export_price_structure_csv(result.rows, args.export), end="")
        return 0 if saveable else 1

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for line in format_for_display(result.errors):
            print(f"  {line}")
        print()

    if args.tree:
        _print_tree(pipeline.build_tree(result))
        print()

    if args.stats and not result.is_fatal:
        stats = pipeline.stats(result)
        print(f"Chapters:     {stats.chapter_count}")
        print(f"Subchapters:  {stats.subchapter_count}")
        print(f"Sections:     {stats.section_count}")
        print(f"Items:        {stats.item_count}")
        print(f"Max depth:    {stats.max_depth}")
        print(f"Average item: {format_amount(stats.average_item_amount, options)}")
        print(f"Zero items:   {stats.zero_amount_item_count}")
        for bucket, items in pipeline.price_groups(result).items():
            print(f"{bucket.value.capitalize() + ' priced:':<14}{len(items)}")
        report = pipeline.inconsistencies(result)
        for issue in report.containers:
            print(f"Inconsistent: {issue.container_id} stored {issue.stored_amount}, items sum {issue.recomputed_amount}")
        for item_issue in report.items:
            print(f"Inconsistent: {item_issue.item_id} {item_issue.issue.value} (expected {item_issue.expected})")
        print()

    for line in format_totals(result.totals, options, config.labels).lines():
        print(f"{line.label:<20} {line.value:>20}")

    print()
    print("Saveable" if saveable else "Not saveable")
    return 0 if saveable else 1


if __name__ == "__main__":
    sys.exit(main())
