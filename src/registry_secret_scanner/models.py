"""Data models for scan findings and reports."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

# file path -> pattern name -> matched substrings
FileMatches = Mapping[str, tuple[str, ...]]
MatchMap = Mapping[str, FileMatches]


def freeze_matches(matches: Mapping[str, Mapping[str, list[str]]]) -> MatchMap:
    """Turn a mutable findings map into a read-only one."""
    return MappingProxyType(
        {
            path: MappingProxyType(
                {name: tuple(found) for name, found in by_pattern.items()}
            )
            for path, by_pattern in matches.items()
        }
    )


@dataclass(frozen=True)
class LayerFindings:
    """Findings produced by scanning a single extracted layer."""

    digest: str
    matches: MatchMap = field(default_factory=lambda: MappingProxyType({}))
    env_content: str | None = None
    files_scanned: int = 0
    files_skipped: int = 0
    files_unreadable: int = 0


@dataclass(frozen=True)
class ScanReport:
    """Snapshot of one repository:tag scan."""

    repository: str
    tag: str
    env_content: str | None = None
    matches: MatchMap = field(default_factory=lambda: MappingProxyType({}))
    layers_scanned: tuple[str, ...] = ()
    layers_skipped: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON report layout."""
        return {
            "selectedRepo": self.repository,
            "selectedTag": self.tag,
            "envContent": self.env_content,
            "matches": {
                path: {name: list(found) for name, found in by_pattern.items()}
                for path, by_pattern in self.matches.items()
            },
        }


def fold_findings(report: ScanReport, delta: LayerFindings) -> ScanReport:
    """Fold one layer's findings into a report, returning a new report.

    Paths are unique per layer directory, so entries never collide. A later
    ``.env`` replaces an earlier one.
    """
    merged = dict(report.matches)
    merged.update(delta.matches)
    return replace(
        report,
        matches=MappingProxyType(merged),
        env_content=delta.env_content if delta.env_content is not None else report.env_content,
        layers_scanned=report.layers_scanned + (delta.digest,),
    )


def record_skipped_layer(report: ScanReport, digest: str) -> ScanReport:
    """Return a report noting that a layer was not scanned."""
    return replace(report, layers_skipped=report.layers_skipped + (digest,))
