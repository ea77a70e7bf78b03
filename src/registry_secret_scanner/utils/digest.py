"""Digest parsing and validation utilities."""

import hashlib
import re
from typing import Union

# algorithm:encoded, where the encoded part is safe to use as a file name
DIGEST_PATTERN = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-zA-Z0-9=_-]+$")


def split_digest(digest: str) -> tuple[str, str] | None:
    """Split a digest into algorithm and encoded parts.

    Args:
        digest: Digest string (e.g. "sha256:abc123...")

    Returns:
        (algorithm, encoded) tuple, or None if the digest is malformed
    """
    if not isinstance(digest, str) or not DIGEST_PATTERN.match(digest):
        return None

    algorithm, encoded = digest.split(":", 1)
    return algorithm, encoded


def calculate_digest(data: Union[bytes, bytearray], algorithm: str = "sha256") -> str:
    """Calculate digest of data.

    Args:
        data: Data to hash
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Digest string in format "algorithm:hex"

    Raises:
        ValueError: If algorithm is not supported
        ValueError: If data is not bytes-like
    """
    if not isinstance(data, (bytes, bytearray)):
        raise ValueError("Data must be bytes or bytearray")

    if algorithm not in hashlib.algorithms_available:
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    hasher = hashlib.new(algorithm)
    hasher.update(data)
    return f"{algorithm}:{hasher.hexdigest()}"
