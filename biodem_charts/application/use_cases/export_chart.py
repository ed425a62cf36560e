"""Export a rendered chart as a downloadable SVG document."""

from biodem_charts.domain.entities import Mount
from biodem_charts.infrastructure.export.svg_export import ExportHandle, SvgExporter


def run(mount: Mount, exporter: SvgExporter, filename: str | None = None) -> ExportHandle | None:
    """Export the mount; None means there was nothing to download."""
    return exporter.export(mount, filename)
