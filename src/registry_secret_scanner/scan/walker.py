"""Walking extracted layer trees."""

import os
from typing import Iterable, Iterator

ENV_FILE_NAME = ".env"


def should_skip_file(filename: str, ignore_extensions: Iterable[str]) -> bool:
    """Check whether a file name ends with an ignored extension.

    The comparison lowercases the file name; ignored extensions are
    expected in lowercase.
    """
    lowered = filename.lower()
    return any(lowered.endswith(ext) for ext in ignore_extensions)


def is_env_file(path: str) -> bool:
    """True when the base name is exactly ``.env``."""
    return os.path.basename(path) == ENV_FILE_NAME


def iter_regular_files(root: str) -> Iterator[str]:
    """Yield regular files under ``root`` in a stable order.

    Symlinks are never followed or yielded.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            path = os.path.join(dirpath, filename)
            if os.path.isfile(path) and not os.path.islink(path):
                yield path
