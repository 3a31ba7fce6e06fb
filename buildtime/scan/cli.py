# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
CLI implementation for the scan subcommand.

Provides command-line interface for extracting ranked compile timings
from a build log or an Xcode DerivedData folder.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import click

from buildtime.logging_config import setup_logging
from buildtime.measure.formatters import format_measures, select_top
from buildtime.measure.models import ScanResult
from buildtime.scan.config import load_scan_config, ScanConfig
from buildtime.scan.controller import ScanController
from buildtime.scan.supplier import DerivedDataSupplier, LogFileSupplier, TextSupplier

# Poll interval while waiting for a cancelled scan to wind down
_CANCEL_POLL_SECONDS = 0.1


def _write_output(
    output: str,
    output_file: Optional[Path],
    compress: bool = False,
    record_count: Optional[int] = None,
) -> None:
    """Write output to file or stdout."""
    if output_file:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        if compress:
            import zstandard as zstd

            cctx = zstd.ZstdCompressor()
            output_file.write_bytes(cctx.compress((output + "\n").encode("utf-8")))
        else:
            output_file.write_text(output + "\n")
        if record_count is not None:
            click.echo(f"{record_count} timings written to {output_file}", err=True)
        else:
            click.echo(f"Output written to {output_file}", err=True)
    else:
        click.echo(output)


def _make_supplier(source: Path, product: Optional[str]) -> tuple[TextSupplier, str]:
    """Pick a supplier for SOURCE and resolve the product name."""
    if source.is_dir():
        if not product:
            raise click.UsageError(
                "--product is required when SOURCE is a DerivedData directory"
            )
        return DerivedDataSupplier(source), product
    return LogFileSupplier(source), product or source.stem


def _load_config(
    config_file: Optional[Path], interval: Optional[float], threshold: Optional[float]
) -> ScanConfig:
    """Load the config file (if any) and apply command-line overrides."""
    scan_config = ScanConfig()
    if config_file:
        try:
            scan_config = load_scan_config(config_file)
        except ValueError as e:
            raise click.ClickException(str(e))
    return scan_config.with_overrides(interval=interval, threshold=threshold)


@click.command(name="scan")
@click.argument("source", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--product",
    "-p",
    type=str,
    default=None,
    help="Product name (required when SOURCE is a DerivedData directory).",
)
@click.option(
    "--since",
    type=click.DateTime(),
    default=None,
    help="Build completion time; older logs are ignored.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv", "ndjson"]),
    default="table",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--top",
    "-n",
    type=int,
    default=None,
    help="Show only the N slowest locations.",
)
@click.option(
    "--details",
    is_flag=True,
    default=False,
    help="Include path, filename, line and column (json/csv/ndjson).",
)
@click.option(
    "--no-header",
    is_flag=True,
    default=False,
    help="Hide the table/CSV header row.",
)
@click.option(
    "--threshold",
    type=click.FloatRange(min=0),
    default=None,
    help="Minimum cumulative time in ms per entry [default: 10].",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between progress snapshots [default: 1].",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="JSON scan config file.",
)
@click.option(
    "--progress",
    is_flag=True,
    default=False,
    help="Report progress snapshots on stderr.",
)
@click.option(
    "--output",
    "-o",
    "output_file",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file path (default: stdout).",
)
@click.option(
    "--compress",
    is_flag=True,
    default=False,
    help="Compress output with Zstd (requires --output).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
def scan_command(
    source: Path,
    product: Optional[str],
    since: Optional[datetime],
    output_format: str,
    top: Optional[int],
    details: bool,
    no_header: bool,
    threshold: Optional[float],
    interval: Optional[float],
    config_file: Optional[Path],
    progress: bool,
    output_file: Optional[Path],
    compress: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """
    Extract ranked compile timings from SOURCE.

    SOURCE is a build log (plain, gzip .xcactivitylog or Zstd) produced
    with -debug-time-function-bodies, or an Xcode DerivedData directory
    together with --product. Press Ctrl-C to stop early and report what
    has been collected so far.

    \b
    Examples:
      buildtime scan build.xcactivitylog
      buildtime scan build.log --top 20 --format json
      buildtime scan ~/Library/Developer/Xcode/DerivedData -p MyApp
      buildtime scan build.log --threshold 50 --progress -o slow.csv --format csv
    """
    if compress and not output_file:
        raise click.ClickException("--compress requires --output")

    setup_logging(verbose=verbose, quiet=quiet)

    supplier, product_name = _make_supplier(source, product)
    scan_config = _load_config(config_file, interval, threshold)
    controller = ScanController(supplier, config=scan_config)

    final: list[ScanResult] = []

    def on_update(result: ScanResult) -> None:
        if result.did_complete:
            final.append(result)
        elif progress:
            click.echo(
                f"Scanning... {len(result.results)} locations so far", err=True
            )

    controller.process(product_name, since, on_update)
    try:
        controller.wait()
    except KeyboardInterrupt:
        click.echo("Interrupted, reporting partial results...", err=True)
        controller.cancel()
        while not controller.wait(_CANCEL_POLL_SECONDS):
            controller.cancel()

    if controller.last_error is not None:
        raise click.ClickException(f"Scan failed: {controller.last_error}")

    measures = select_top(final[-1].results, top)
    output = format_measures(
        measures, output_format, show_header=not no_header, all_fields=details
    )
    _write_output(output, output_file, compress, record_count=len(measures))
