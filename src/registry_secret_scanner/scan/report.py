"""JSON report output."""

import json
import logging
from pathlib import Path

import aiofiles

from ..models import ScanReport

logger = logging.getLogger(__name__)


def render_report(report: ScanReport) -> str:
    """Serialize a report to JSON text."""
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


async def write_report(report: ScanReport, path: str | Path) -> Path:
    """Write the report file.

    Args:
        report: Finished scan report
        path: Destination file

    Returns:
        Path written

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(path)
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(render_report(report) + "\n")
    logger.info(f"Results saved to {path}")
    return path
