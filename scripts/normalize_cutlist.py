#!/usr/bin/env python3
"""Normalize the service columns of a cut-list CSV into canonical shortcodes."""

from __future__ import annotations

import argparse
import csv
from pathlib import Path
from typing import Optional, Sequence

from panel_notation.core.config import get_settings
from panel_notation.core.services.dialect import ServiceDialect, load_dialect_partial, merge_with_default
from panel_notation.core.services.formatters import (
    format_cnc_codes,
    format_edgeband_code,
    format_grooves_code,
    format_holes_code,
    format_services_summary,
)
from panel_notation.core.services.normalizers import merge_part_services, normalize_from_columns, normalize_from_text
from panel_notation.core.services.types import PartServices
from panel_notation.core.services.validation import validate_services
from panel_notation.utils.logging import setup_logging

OUTPUT_COLUMNS = [
    "edgeband_code",
    "groove_codes",
    "hole_codes",
    "cnc_codes",
    "services_summary",
    "warnings",
]


def _load_rows(path: Path) -> tuple[list[str], list[dict[str, str]]]:
    with path.open("r", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        rows = [row for row in reader if row]
        return list(reader.fieldnames or []), rows


def _write_rows(path: Path, fieldnames: list[str], rows: list[dict[str, str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def normalize_row(
    row: dict[str, str],
    dialect: ServiceDialect,
    text_column: Optional[str] = None,
    heuristics: bool = True,
) -> dict[str, str]:
    columns = {k: v for k, v in row.items() if k is not None and k != text_column}
    bundles: list[PartServices] = [normalize_from_columns(columns, dialect, heuristics=heuristics)]
    text = (row.get(text_column) or "").strip() if text_column else ""
    if text:
        bundles.append(normalize_from_text(text, dialect, heuristics=heuristics))
    services = merge_part_services(*bundles)
    report = validate_services(services)
    return {
        "edgeband_code": format_edgeband_code(services.edgeband),
        "groove_codes": format_grooves_code(services.grooves),
        "hole_codes": format_holes_code(services.holes),
        "cnc_codes": format_cnc_codes(services.cnc),
        "services_summary": format_services_summary(services),
        "warnings": "; ".join(report.warnings),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Normalize cut-list service columns.")
    parser.add_argument("--input", required=True, help="Input cut-list CSV")
    parser.add_argument(
        "--output",
        default=None,
        help="Output CSV (default: <input>_normalized.csv)",
    )
    parser.add_argument(
        "--org-dialect",
        default=None,
        help="Organization dialect file (YAML/JSON) layered over the default",
    )
    parser.add_argument(
        "--text-column",
        default=None,
        help="Column holding free-text notation (e.g. Notes)",
    )
    parser.add_argument(
        "--no-heuristics",
        action="store_true",
        help="Disable free-text phrase recognition",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, json_format=False)

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(str(input_path))
    output_path = Path(args.output) if args.output else input_path.with_name(f"{input_path.stem}_normalized.csv")

    dialect = merge_with_default(load_dialect_partial(args.org_dialect)) if args.org_dialect else merge_with_default(None)

    fieldnames, rows = _load_rows(input_path)
    if not rows:
        raise SystemExit("No rows found in input CSV.")

    heuristics = not args.no_heuristics
    out_rows: list[dict[str, str]] = []
    with_services = 0
    with_warnings = 0
    for row in rows:
        result = normalize_row(row, dialect, args.text_column, heuristics)
        if result["services_summary"] != "-":
            with_services += 1
        if result["warnings"]:
            with_warnings += 1
        out_rows.append({**row, **result})

    out_fields = fieldnames + [c for c in OUTPUT_COLUMNS if c not in fieldnames]
    _write_rows(output_path, out_fields, out_rows)

    print(f"rows_in={len(rows)}")
    print(f"rows_with_services={with_services}")
    print(f"rows_with_warnings={with_warnings}")
    print(f"output={output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
