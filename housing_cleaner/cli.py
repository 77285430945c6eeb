"""Command line interface for the housing cleaner.

This module exposes an entry point that can be invoked via ``python -m housing_cleaner.cli``
or the ``housing-cleaner`` console script. It wraps :class:`HousingCleaner` and provides
options for the input dataset, a column map file, the output path and run behaviour.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click

from .cleaner import HousingCleaner
from .config import CleanerConfig, NASHVILLE_COLUMN_MAP, load_column_map
from .exceptions import SchemaError, StoreUnavailableError


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--input",
    "input_path",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
    required=True,
    help="Path to the CSV or JSON file of sale records.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, writable=True, path_type=str),
    default=None,
    help="Where to write the cleaned records (.csv or .json). Defaults to <input>_cleaned.<ext>.",
)
@click.option(
    "--column-map",
    "column_map_path",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
    default=None,
    help="Optional JSON file mapping source headers to field names, merged over the Nashville defaults.",
)
@click.option(
    "--keep-raw-date",
    is_flag=True,
    default=False,
    help="Keep the sale_date_raw column instead of dropping it at the end of the run.",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retry a phase this many times if the record store becomes unavailable.",
)
@click.option(
    "--preview",
    is_flag=True,
    default=False,
    help="If set, print a preview of the cleaned records (first five rows).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every anomaly.")
def main(
    input_path: str,
    output_path: Optional[str],
    column_map_path: Optional[str],
    keep_raw_date: bool,
    retries: int,
    preview: bool,
    verbose: bool,
) -> None:
    """Clean a dataset of real-estate sale records.

    The tool outputs a JSON report with per-phase counts and anomalies.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    try:
        column_map = load_column_map(column_map_path) if column_map_path else dict(NASHVILLE_COLUMN_MAP)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--column-map") from exc
    config = CleanerConfig(
        drop_raw_date=not keep_raw_date,
        phase_retries=retries,
        column_map=column_map,
    )
    out_path = output_path
    if not output_path:
        input_p = Path(input_path)
        out_path = str(input_p.with_name(f"{input_p.stem}_cleaned{input_p.suffix}"))

    try:
        df, report = HousingCleaner(config).clean_file(input_path, out_path)
    except (StoreUnavailableError, SchemaError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
    click.echo(json.dumps(report.to_dict(), indent=2, default=str))
    if preview:
        click.echo("\nPreview of cleaned records:")
        click.echo(df.head().to_string())


if __name__ == "__main__":  # pragma: no cover
    main()
