"""Registry Secret Scanner - find secrets embedded in public container images."""

__version__ = "0.1.0"

from .config import ScanSettings, load_settings
from .core.registry_client import RegistryClient
from .core.types import Descriptor, Manifest, RegistryConfig, Token
from .exceptions import (
    AuthError,
    ConfigError,
    ExtractError,
    FetchError,
    RegistryError,
    ScanAbortedError,
    ScannerError,
    WorkspaceError,
)
from .models import LayerFindings, ScanReport
from .scan.orchestrator import ScanOrchestrator
from .scan.patterns import compile_patterns, scan_content
from .scan.report import write_report
from .tar.extractor import extract_layer

__all__ = [
    "RegistryClient",
    "RegistryConfig",
    "ScanOrchestrator",
    "ScanSettings",
    "ScanReport",
    "LayerFindings",
    "Descriptor",
    "Manifest",
    "Token",
    "load_settings",
    "compile_patterns",
    "scan_content",
    "extract_layer",
    "write_report",
    "ScannerError",
    "RegistryError",
    "AuthError",
    "FetchError",
    "ExtractError",
    "ConfigError",
    "ScanAbortedError",
    "WorkspaceError",
]
