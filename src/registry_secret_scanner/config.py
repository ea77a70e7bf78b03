"""Scan configuration loading.

Pattern rules and ignored extensions are JSON files. When no path is given,
the defaults bundled in ``registry_secret_scanner/configs`` are used.
"""

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Pattern

from .exceptions import ConfigError
from .operations.blobs import DEFAULT_CHUNK_SIZE
from .scan.patterns import compile_patterns

DEFAULT_OUTPUT_DIR = "docker_image"
DEFAULT_REPORT_PATH = "results.json"
PATTERNS_FILE = "regex_patterns.json"
IGNORE_FILE = "ignore_extensions.json"


@dataclass(frozen=True)
class ScanSettings:
    """Everything the orchestrator needs besides the registry client."""

    patterns: dict[str, Pattern[str]]
    ignore_extensions: tuple[str, ...] = ()
    output_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_DIR))
    chunk_size: int = DEFAULT_CHUNK_SIZE


def _read_json(path: str | Path | None, default_name: str) -> Any:
    try:
        if path is None:
            text = resources.files(__package__).joinpath("configs", default_name).read_text(
                encoding="utf-8"
            )
        else:
            text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path or default_name}: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path or default_name}: {e}") from e


def load_patterns(path: str | Path | None = None) -> dict[str, Pattern[str]]:
    """Load and compile the pattern rules.

    Raises:
        ConfigError: If the file is missing, not a JSON object, or a
            pattern does not compile
    """
    data = _read_json(path, PATTERNS_FILE)
    if not isinstance(data, dict):
        raise ConfigError("Pattern file must contain a JSON object of name -> regex")
    return compile_patterns(data)


def load_ignore_extensions(path: str | Path | None = None) -> tuple[str, ...]:
    """Load ignored file extensions from ``{"extensions": [...]}``.

    Raises:
        ConfigError: If the file is missing or malformed
    """
    data = _read_json(path, IGNORE_FILE)
    extensions = data.get("extensions") if isinstance(data, dict) else None
    if not isinstance(extensions, list) or not all(isinstance(ext, str) for ext in extensions):
        raise ConfigError("Ignore file must contain an 'extensions' list of strings")
    return tuple(extensions)


def load_settings(
    patterns_path: str | Path | None = None,
    ignore_path: str | Path | None = None,
    output_dir: str | Path = DEFAULT_OUTPUT_DIR,
) -> ScanSettings:
    """Load patterns and ignored extensions into ScanSettings.

    Raises:
        ConfigError: If either file is unusable
    """
    return ScanSettings(
        patterns=load_patterns(patterns_path),
        ignore_extensions=load_ignore_extensions(ignore_path),
        output_dir=Path(output_dir),
    )
