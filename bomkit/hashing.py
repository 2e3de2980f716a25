"""Hex digests of file contents."""

from __future__ import annotations

import hashlib
import os
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

_CHUNK_SIZE = 1 << 16


def _digest_file(path: PathLike, algorithm: str) -> str:
    hasher = hashlib.new(algorithm)
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def sha1_for_file(path: PathLike) -> str:
    """Return the SHA-1 hex digest of the file at ``path``."""
    return _digest_file(path, "sha1")


def sha256_for_file(path: PathLike) -> str:
    """Return the SHA-256 hex digest of the file at ``path``."""
    return _digest_file(path, "sha256")


def sha512_for_file(path: PathLike) -> str:
    """Return the SHA-512 hex digest of the file at ``path``."""
    return _digest_file(path, "sha512")