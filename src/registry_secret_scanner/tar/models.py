"""Data models for layer extraction."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class ExtractionResult:
    """Outcome of unpacking one layer archive."""

    output_dir: str
    directories: int = 0
    files: int = 0
    skipped: List[str] = field(default_factory=list)  # unsupported entry kinds
    rejected: List[str] = field(default_factory=list)  # paths escaping output_dir
