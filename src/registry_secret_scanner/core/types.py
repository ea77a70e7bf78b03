"""Core data types shared by registry operations."""

from dataclasses import dataclass, field
from typing import Any

MANIFEST_V2_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"


@dataclass(frozen=True)
class RegistryConfig:
    """Registry and Docker Hub endpoints used by every operation."""

    registry_url: str = "https://registry-1.docker.io"
    auth_url: str = "https://auth.docker.io/token"
    service: str = "registry.docker.io"
    hub_url: str = "https://hub.docker.com"
    timeout: int = 300
    default_namespace: str | None = "library"

    @property
    def base_url(self) -> str:
        """Registry URL without trailing slash."""
        return self.registry_url.rstrip("/")

    @property
    def hub_base_url(self) -> str:
        """Docker Hub URL without trailing slash."""
        return self.hub_url.rstrip("/")

    def registry_repository(self, repository: str) -> str:
        """Expand single-segment names into the default namespace.

        Args:
            repository: Repository name as supplied by the caller

        Returns:
            Repository path used on the registry (e.g. "library/nginx")
        """
        if self.default_namespace and "/" not in repository:
            return f"{self.default_namespace}/{repository}"
        return repository


@dataclass(frozen=True)
class Token:
    """Bearer token scoped to pulls from a single repository."""

    value: str = field(repr=False)
    repository: str

    @property
    def authorization(self) -> str:
        """Value for the Authorization header."""
        return f"Bearer {self.value}"


@dataclass(frozen=True)
class Descriptor:
    """Content-addressed blob reference from a manifest."""

    media_type: str
    size: int
    digest: str

    @classmethod
    def from_dict(cls, data: Any) -> "Descriptor":
        """Build a descriptor from its manifest JSON form.

        A missing or non-string digest becomes ``""``; digest shape is checked
        by whoever uses the descriptor.

        Raises:
            ValueError: If the descriptor is not an object, or size or
                mediaType are mistyped
        """
        if not isinstance(data, dict):
            raise ValueError("descriptor must be an object")

        digest = data.get("digest")
        size = data.get("size", 0)
        media_type = data.get("mediaType", "")
        if not isinstance(digest, str):
            digest = ""
        if not isinstance(size, int) or isinstance(size, bool):
            raise ValueError(f"descriptor size must be an integer: {size!r}")
        if not isinstance(media_type, str):
            raise ValueError("descriptor mediaType must be a string")

        return cls(media_type=media_type, size=size, digest=digest)


@dataclass(frozen=True)
class Manifest:
    """Image manifest: one config descriptor and ordered layer descriptors."""

    config: Descriptor | None
    layers: tuple[Descriptor, ...]
    media_type: str = MANIFEST_V2_MEDIA_TYPE
    schema_version: int = 2
