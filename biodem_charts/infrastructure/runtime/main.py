"""Main entrypoint: render a country's occurrence series to an SVG file."""

import argparse
import asyncio
import shutil
from pathlib import Path

import structlog

from biodem_charts.application.use_cases.export_chart import run as export_chart
from biodem_charts.application.use_cases.load_occurrence_counts import QueryState
from biodem_charts.application.use_cases.load_occurrence_counts import run as load_occurrence_counts
from biodem_charts.application.use_cases.render_country_series import run as render_country_series
from biodem_charts.domain.entities import Mount
from biodem_charts.infrastructure.config.settings import Settings
from biodem_charts.infrastructure.export.svg_export import SvgExporter
from biodem_charts.infrastructure.gbif.gbif_client import GbifClient
from biodem_charts.infrastructure.io.csv_reader import read_indicators
from biodem_charts.infrastructure.observability.logging import configure_logging
from biodem_charts.infrastructure.runtime.health import start_metrics_server

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="biodem-render")
    parser.add_argument("--country", help="ISO 3166 alpha-3 code")
    parser.add_argument("--indicator", help="V-Dem indicator column")
    parser.add_argument("--width", type=float, default=960.0)
    parser.add_argument("--output", type=Path, help="Target file; suggested name when omitted")
    parser.add_argument("--serve-metrics", action="store_true")
    return parser.parse_args(argv)


async def render(args: argparse.Namespace, settings: Settings) -> Path | None:
    """Query counts, render the series and copy the exported document."""
    country = args.country or settings.default_country
    indicator = args.indicator or settings.default_indicator
    indicators = read_indicators(settings.indicators_csv_path)

    client = GbifClient(settings)
    state = QueryState()
    try:
        counts = await load_occurrence_counts(country, client, state)
    finally:
        await client.aclose()

    if counts is None:
        logger.error("render_aborted", country=country, errors=state.errors)
        return None

    mount = Mount("series", measured_width=args.width)
    render_country_series(
        mount, counts, indicators, country, indicator, settings.year_min, settings.year_max
    )

    exporter = SvgExporter(settings.export_dir)
    handle = export_chart(mount, exporter)
    if handle is None:
        logger.error("export_failed", country=country)
        return None

    with handle:
        target = args.output or Path(handle.filename)
        shutil.copyfile(handle.path, target)
    logger.info("svg_written", path=str(target), country=country, indicator=indicator)
    return target


def main(argv: list[str] | None = None) -> int:
    """Entrypoint."""
    args = parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level, settings.log_json)
    logger.info("settings_loaded", gbif_api_url=settings.gbif_api_url, indicators=str(settings.indicators_csv_path))

    if args.serve_metrics:
        start_metrics_server(settings)

    target = asyncio.run(render(args, settings))
    return 0 if target is not None else 1


if __name__ == "__main__":
    raise SystemExit(main())
