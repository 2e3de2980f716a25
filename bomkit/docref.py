"""References from an SPDX document to related external documents."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from bomkit.hashing import sha1_for_file

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class ExternalDocumentRef:
    """A pointer to an external, related SPDX document."""

    id: str = ""
    uri: str = ""
    checksums: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return the SPDX tag-value form, or an empty string if data is missing."""
        if not self.checksums or not self.id or not self.uri:
            return ""
        algorithm, value = next(iter(self.checksums.items()))
        return f"DocumentRef-{self.id} {self.uri} {algorithm}: {value}"

    def read_source_file(self, path: PathLike) -> None:
        """Record the SHA-1 checksum of the document stored at ``path``.

        SHA-1 is used because SPDX validators only accept that algorithm
        for external document references.
        """
        self.checksums["SHA1"] = sha1_for_file(path)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExternalDocumentRef":
        """Build a reference from a mapping with ``id``, ``uri`` and ``checksums`` keys."""
        if not isinstance(data, Mapping):
            raise ValueError("external document reference must be a mapping")
        checksums = data.get("checksums") or {}
        if not isinstance(checksums, Mapping):
            raise ValueError("external document checksums must be a mapping")
        return cls(
            id=str(data.get("id") or ""),
            uri=str(data.get("uri") or ""),
            checksums={str(algo): str(value) for algo, value in checksums.items()},
        )