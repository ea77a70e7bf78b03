"""Layer archive extraction."""

import asyncio
import logging
import os
import shutil
import tarfile
import zlib
from pathlib import Path

from ..exceptions import ExtractError
from .models import ExtractionResult

logger = logging.getLogger(__name__)

# Entry kinds written to disk. Symlinks, hard links, devices and fifos are
# skipped so nothing can point outside the layer directory.
HANDLED_ENTRY_KINDS = frozenset({"directory", "file"})


def entry_kind(member: tarfile.TarInfo) -> str:
    """Classify a tar member."""
    if member.isdir():
        return "directory"
    if member.isreg():
        return "file"
    if member.issym():
        return "symlink"
    if member.islnk():
        return "hardlink"
    if member.isdev():
        return "device"
    return "other"


def resolve_entry_path(output_dir: str, name: str) -> str | None:
    """Join an entry name with the output root.

    Args:
        output_dir: Absolute extraction root
        name: Entry name from the archive

    Returns:
        Target path, or None if the entry would land outside ``output_dir``
    """
    if os.path.isabs(name):
        return None
    target = os.path.normpath(os.path.join(output_dir, name))
    if os.path.commonpath([output_dir, target]) != output_dir:
        return None
    return target


def extract_archive(archive_path: str | Path, output_dir: str | Path) -> ExtractionResult:
    """Unpack a gzip-compressed tar archive entry by entry (sync).

    Args:
        archive_path: Path to the ``.tar.gz`` layer
        output_dir: Directory to unpack into; created if missing

    Returns:
        ExtractionResult describing what was written and what was left out

    Raises:
        ExtractError: If the archive cannot be opened or an entry cannot be
            read or written. Files written before the error stay on disk.
    """
    root = os.path.abspath(output_dir)
    result = ExtractionResult(output_dir=root)

    try:
        os.makedirs(root, exist_ok=True)
        with tarfile.open(archive_path, mode="r|gz") as tar:
            for member in tar:
                kind = entry_kind(member)
                if kind not in HANDLED_ENTRY_KINDS:
                    logger.debug(f"Skipping {kind} entry {member.name}")
                    result.skipped.append(member.name)
                    continue

                target = resolve_entry_path(root, member.name)
                if target is None:
                    logger.warning(f"Rejecting entry outside layer directory: {member.name}")
                    result.rejected.append(member.name)
                    continue

                if kind == "directory":
                    os.makedirs(target, exist_ok=True)
                    result.directories += 1
                    continue

                source = tar.extractfile(member)
                if source is None:
                    raise ExtractError(f"Could not read entry {member.name}")
                os.makedirs(os.path.dirname(target), exist_ok=True)
                with source, open(target, "wb") as out:
                    shutil.copyfileobj(source, out)
                result.files += 1

    except ExtractError:
        raise
    except (tarfile.TarError, zlib.error, EOFError, OSError) as e:
        raise ExtractError(f"Failed to extract {archive_path}: {e}") from e

    return result


async def extract_layer(
    archive_path: str | Path, output_dir: str | Path
) -> ExtractionResult:
    """Unpack a layer archive without blocking the event loop.

    See ``extract_archive`` for semantics.
    """
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, extract_archive, archive_path, output_dir)
