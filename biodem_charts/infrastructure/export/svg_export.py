"""Standalone SVG export of a rendered mount."""

from __future__ import annotations

import re
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path

import structlog

from biodem_charts.domain.entities import Mount
from biodem_charts.domain.errors import ExportError
from biodem_charts.infrastructure.observability.metrics import svg_exports

logger = structlog.get_logger()

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
MEDIA_TYPE = "image/svg+xml"
XML_DECLARATION = '<?xml version="1.0" standalone="no"?>\n'

CLOSING_TAG = "</svg>"

# Engine-generated prefixes standing in for xlink, e.g. NS1:href or ns0:href
_MANGLED_HREF = re.compile(r"\b(?:NS|ns)\d+:href\b")
_MANGLED_DECLARATION = re.compile(
    r'\s+xmlns:(?:NS|ns)\d+=(?:""|"' + re.escape(XLINK_NAMESPACE) + r'")'
)
_ROOT_TAG = re.compile(r"<svg\b[^>]*?(/?)>")


def repair_namespaces(source: str) -> str:
    """Rewrite mangled xlink prefixes back to ``xlink``."""
    source = _MANGLED_DECLARATION.sub("", source)
    return _MANGLED_HREF.sub("xlink:href", source)


def inject_namespaces(source: str) -> str:
    """Add the SVG and XLink declarations a freestanding document needs."""
    match = _ROOT_TAG.search(source)
    if match is None:
        raise ExportError("Document has no svg root element")
    tag = match.group(0)
    additions = ""
    if "xmlns=" not in tag:
        additions += f' xmlns="{SVG_NAMESPACE}"'
    if "xmlns:xlink=" not in tag:
        additions += f' xmlns:xlink="{XLINK_NAMESPACE}"'
    if not additions:
        return source
    cut = match.end() - len(match.group(1)) - 1
    return source[:cut] + additions + source[cut:]


def truncate_trailing(source: str) -> str:
    """Drop anything after the closing root tag."""
    end = source.rfind(CLOSING_TAG)
    if end == -1:
        return source
    return source[: end + len(CLOSING_TAG)]


def to_document(root: ET.Element) -> str:
    """Serialize a rendered subtree into a standalone SVG document."""
    source = ET.tostring(root, encoding="unicode")
    source = repair_namespaces(source)
    source = inject_namespaces(source)
    source = truncate_trailing(source)
    return XML_DECLARATION + source


def suggest_filename(mount: Mount) -> str:
    """Deterministic download name for a mount."""
    owner = mount.owner.value if mount.owner is not None else "chart"
    return f"{owner}-{mount.name}.svg"


class ExportHandle:
    """Transient file backing a download. Release exactly once."""

    def __init__(self, path: Path, filename: str, media_type: str = MEDIA_TYPE) -> None:
        self.path = path
        self.filename = filename
        self.media_type = media_type
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def read_bytes(self) -> bytes:
        if self._released:
            raise ExportError(f"Export handle {self.filename} already released")
        return self.path.read_bytes()

    def release(self) -> None:
        """Delete the backing file."""
        if self._released:
            raise ExportError(f"Export handle {self.filename} already released")
        self._released = True
        self.path.unlink(missing_ok=True)

    def __enter__(self) -> ExportHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self._released:
            self.release()


class SvgExporter:
    """Export adapter; a newer export releases the previous handle."""

    def __init__(self, export_dir: Path | None = None) -> None:
        """Initialize exporter."""
        self.export_dir = export_dir
        self.current: ExportHandle | None = None

    def export(self, mount: Mount, filename: str | None = None) -> ExportHandle | None:
        """Write the mount's graphic to a transient file.

        Returns None, and downloads nothing, when the mount has no graphic.
        """
        if mount.root is None or len(mount.root) == 0:
            logger.warning("export_skipped", mount=mount.name, reason="empty_graphic")
            return None

        try:
            document = to_document(mount.root).encode("utf-8")
        except (ExportError, TypeError, ValueError) as e:
            logger.error("export_skipped", mount=mount.name, reason="serialization_failed", error=str(e))
            return None

        if self.export_dir is not None:
            self.export_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            suffix=".svg",
            prefix="biodem-",
            dir=self.export_dir,
            delete=False,
        ) as f:
            f.write(document)

        self.release()
        self.current = ExportHandle(Path(f.name), filename or suggest_filename(mount))
        svg_exports.inc()
        logger.info(
            "svg_exported",
            mount=mount.name,
            filename=self.current.filename,
            size_bytes=len(document),
        )
        return self.current

    def release(self) -> None:
        """Release the current handle, if any."""
        if self.current is not None and not self.current.released:
            self.current.release()
        self.current = None
