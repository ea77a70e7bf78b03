"""Custom exceptions for the registry secret scanner."""

from typing import Optional


class ScannerError(Exception):
    """Base exception for all scanner errors."""

    pass


class RegistryError(ScannerError):
    """Raised when a registry or Docker Hub request fails.

    Attributes:
        status: HTTP status code, if the registry answered
        reason: Decode or transport failure description
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason


class AuthError(RegistryError):
    """Raised when a pull token cannot be obtained."""

    pass


class FetchError(RegistryError):
    """Raised when a manifest, blob or Hub request fails."""

    pass


class ExtractError(ScannerError):
    """Raised when a layer archive cannot be unpacked."""

    pass


class ConfigError(ScannerError):
    """Raised when pattern or ignore-list configuration is unusable."""

    pass


class WorkspaceError(ScannerError):
    """Raised when the output directory cannot be reset."""

    pass


class ScanAbortedError(ScannerError):
    """Raised when a layer cannot be downloaded or extracted.

    The underlying FetchError or ExtractError is chained as ``__cause__``.

    Attributes:
        digest: Digest of the layer that failed
        partial_report: Report folded from the layers processed before it
    """

    def __init__(self, message: str, digest: str, partial_report=None) -> None:
        super().__init__(message)
        self.digest = digest
        self.partial_report = partial_report
