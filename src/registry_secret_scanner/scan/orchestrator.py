"""Repository scan orchestration.

A scan resolves the manifest of ``repository:tag`` and then handles each
layer in manifest order: download, extract, walk, match. Every layer yields
an immutable ``LayerFindings`` that is folded into the ``ScanReport``.
Layers are processed strictly one after another; the per-layer deltas are
the seam for scanning layers in parallel later.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

import aiofiles

from ..config import ScanSettings
from ..core.registry_client import RegistryClient
from ..core.types import Descriptor, Token
from ..exceptions import ExtractError, FetchError, ScanAbortedError, WorkspaceError
from ..models import (
    LayerFindings,
    ScanReport,
    fold_findings,
    freeze_matches,
    record_skipped_layer,
)
from ..operations.blobs import ProgressCallback
from ..tar.extractor import extract_layer
from ..utils.digest import split_digest
from .patterns import scan_content
from .walker import is_env_file, iter_regular_files, should_skip_file

logger = logging.getLogger(__name__)


def reset_output_dir(output_dir: Path) -> None:
    """Delete and recreate the working directory.

    Raises:
        WorkspaceError: If the path cannot be removed or created, e.g. it
            is a regular file or not writable
    """
    try:
        if output_dir.exists():
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True)
    except OSError as e:
        raise WorkspaceError(f"Cannot reset output directory {output_dir}: {e}") from e


class ScanOrchestrator:
    """Drives a full repository:tag scan."""

    def __init__(
        self,
        client: RegistryClient,
        settings: ScanSettings,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.progress_callback = progress_callback

    @property
    def output_dir(self) -> Path:
        return self.settings.output_dir

    async def scan(self, repository: str, tag: str) -> ScanReport:
        """Scan every layer of ``repository:tag`` for secrets.

        Args:
            repository: Repository name as the caller knows it
            tag: Image tag

        Returns:
            Report with all findings

        Raises:
            WorkspaceError: If the output directory cannot be reset
            AuthError: If no pull token can be obtained
            FetchError: If the manifest cannot be fetched
            ScanAbortedError: If a layer fails to download or extract; the
                error carries the report built from earlier layers
        """
        reset_output_dir(self.output_dir)

        logger.info(f"Scanning {repository}:{tag}")
        token = await self.client.get_token(repository)
        manifest = await self.client.get_manifest(repository, tag, token)
        logger.info(f"Manifest lists {len(manifest.layers)} layers")

        report = ScanReport(repository=repository, tag=tag)
        for descriptor in manifest.layers:
            parts = split_digest(descriptor.digest)
            if parts is None:
                logger.warning(f"Invalid digest format: {descriptor.digest!r}, skipping layer")
                report = record_skipped_layer(report, descriptor.digest)
                continue

            try:
                delta = await self.scan_layer(repository, token, descriptor, parts[1])
            except (FetchError, ExtractError) as e:
                raise ScanAbortedError(
                    f"Layer {descriptor.digest} failed: {e}",
                    digest=descriptor.digest,
                    partial_report=report,
                ) from e

            report = fold_findings(report, delta)

        logger.info(
            f"Scanned {len(report.layers_scanned)} layers, "
            f"{len(report.matches)} files with matches"
        )
        return report

    async def scan_layer(
        self, repository: str, token: Token, descriptor: Descriptor, encoded: str
    ) -> LayerFindings:
        """Download, extract and scan one layer.

        Raises:
            FetchError: If the blob download fails
            ExtractError: If the archive cannot be unpacked
        """
        archive_path = self.output_dir / f"{encoded}.tar.gz"
        extracted_dir = self.output_dir / encoded

        logger.info(f"Downloading layer: {descriptor.digest}")
        await self.client.download_blob(
            repository,
            token,
            descriptor.digest,
            archive_path,
            descriptor.size,
            progress_callback=self.progress_callback,
            chunk_size=self.settings.chunk_size,
        )

        logger.info(f"Extracting layer: {archive_path}")
        extraction = await extract_layer(archive_path, extracted_dir)
        if extraction.skipped:
            logger.debug(f"Skipped {len(extraction.skipped)} unsupported entries")

        return await self.scan_tree(descriptor.digest, str(extracted_dir))

    async def scan_tree(self, digest: str, root: str) -> LayerFindings:
        """Match every eligible file under ``root``.

        Unreadable files are logged and left out of the findings.
        """
        matches: dict[str, dict[str, list[str]]] = {}
        env_content = None
        scanned = skipped = unreadable = 0

        for path in iter_regular_files(root):
            if should_skip_file(path, self.settings.ignore_extensions):
                skipped += 1
                continue

            try:
                async with aiofiles.open(path, "rb") as f:
                    data = await f.read()
            except OSError as e:
                logger.warning(f"Error reading file {path}: {e}")
                unreadable += 1
                continue

            content = data.decode("utf-8", errors="replace")
            scanned += 1

            if is_env_file(path):
                logger.info(f"Found .env file: {path}")
                env_content = content

            found = scan_content(content, self.settings.patterns)
            if found:
                logger.info(f"Matches found in {path}: {', '.join(sorted(found))}")
                matches[path] = found

        return LayerFindings(
            digest=digest,
            matches=freeze_matches(matches),
            env_content=env_content,
            files_scanned=scanned,
            files_skipped=skipped,
            files_unreadable=unreadable,
        )
