"""In-toto statements carrying SLSA provenance predicates."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from bomkit.hashing import sha256_for_file, sha512_for_file

log = logging.getLogger(__name__)

STATEMENT_TYPE = "https://in-toto.io/Statement/v0.1"
PREDICATE_TYPE_SLSA_PROVENANCE = "https://slsa.dev/provenance/v0.2"


class ProvenanceError(Exception):
    """Raised when provenance data cannot be read, written or verified."""


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ProvenanceError(f"{what} must be a JSON object")
    return data


def _digest_from(data: Any) -> dict[str, str]:
    if not data:
        return {}
    return {str(algo): str(value) for algo, value in _require_mapping(data, "digest").items()}


def _default_metadata() -> dict[str, Any]:
    return {
        "completeness": {"parameters": False, "environment": False, "materials": False},
        "reproducible": False,
    }


@dataclass
class Subject:
    """An artifact that a statement is about."""

    name: str = ""
    digest: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "digest": dict(self.digest)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Subject":
        data = _require_mapping(data, "subject")
        return cls(name=str(data.get("name") or ""), digest=_digest_from(data.get("digest")))


@dataclass
class ProvenanceMaterial:
    """An input that went into a build."""

    uri: str = ""
    digest: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.uri:
            result["uri"] = self.uri
        if self.digest:
            result["digest"] = dict(self.digest)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProvenanceMaterial":
        data = _require_mapping(data, "material")
        return cls(uri=str(data.get("uri") or ""), digest=_digest_from(data.get("digest")))


@dataclass
class Predicate:
    """A SLSA provenance predicate."""

    builder_id: str = ""
    build_type: str = ""
    config_source_uri: str = ""
    config_source_digest: dict[str, str] = field(default_factory=dict)
    config_source_entry_point: str = ""
    parameters: Any = None
    environment: Any = None
    build_config: Any = None
    metadata: dict[str, Any] | None = None
    materials: list[ProvenanceMaterial] = field(default_factory=list)

    def add_material(self, uri: str, digest: Mapping[str, str]) -> None:
        """Append a material entry."""
        self.materials.append(ProvenanceMaterial(uri=uri, digest=dict(digest)))

    def to_dict(self) -> dict[str, Any]:
        config_source: dict[str, Any] = {}
        if self.config_source_uri:
            config_source["uri"] = self.config_source_uri
        if self.config_source_digest:
            config_source["digest"] = dict(self.config_source_digest)
        if self.config_source_entry_point:
            config_source["entryPoint"] = self.config_source_entry_point
        invocation: dict[str, Any] = {"configSource": config_source}
        if self.parameters is not None:
            invocation["parameters"] = self.parameters
        if self.environment is not None:
            invocation["environment"] = self.environment

        result: dict[str, Any] = {
            "builder": {"id": self.builder_id},
            "buildType": self.build_type,
            "invocation": invocation,
        }
        if self.build_config is not None:
            result["buildConfig"] = self.build_config
        if self.metadata is not None:
            result["metadata"] = self.metadata
        if self.materials:
            result["materials"] = [m.to_dict() for m in self.materials]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Predicate":
        data = _require_mapping(data, "predicate")
        builder = _require_mapping(data.get("builder") or {}, "builder")
        invocation = _require_mapping(data.get("invocation") or {}, "invocation")
        source = _require_mapping(invocation.get("configSource") or {}, "configSource")
        metadata = data.get("metadata")
        if metadata is not None:
            metadata = dict(_require_mapping(metadata, "metadata"))
        return cls(
            builder_id=str(builder.get("id") or ""),
            build_type=str(data.get("buildType") or ""),
            config_source_uri=str(source.get("uri") or ""),
            config_source_digest=_digest_from(source.get("digest")),
            config_source_entry_point=str(source.get("entryPoint") or ""),
            parameters=invocation.get("parameters"),
            environment=invocation.get("environment"),
            build_config=data.get("buildConfig"),
            metadata=metadata,
            materials=[ProvenanceMaterial.from_dict(m) for m in data.get("materials") or []],
        )

    def write(self, path: str | os.PathLike[str]) -> None:
        """Write the predicate as JSON to ``path``."""
        try:
            with open(path, "w", encoding="utf-8") as handle:
                json.dump(self.to_dict(), handle, separators=(",", ":"))
        except OSError as exc:
            raise ProvenanceError(f"writing predicate file: {exc}") from exc


def new_slsa_predicate() -> Predicate:
    """Return an empty SLSA provenance predicate with default metadata."""
    return Predicate(metadata=_default_metadata())


def subject_from_file(file_path: str | os.PathLike[str]) -> Subject:
    """Describe a file as a subject with its SHA-256 and SHA-512 digests."""
    name = os.fspath(file_path)
    try:
        h256 = sha256_for_file(file_path)
    except OSError as exc:
        raise ProvenanceError(f"getting sha256 for file {name}: {exc}") from exc
    try:
        h512 = sha512_for_file(file_path)
    except OSError as exc:
        raise ProvenanceError(f"getting sha512 for {name}: {exc}") from exc
    return Subject(name=name, digest={"sha256": h256, "sha512": h512})


def _walk_files(root: str, relative: str = "") -> Iterator[str]:
    """Yield regular files below ``root`` as slash-separated relative paths, in lexical order."""
    with os.scandir(os.path.join(root, relative) if relative else root) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        rel = f"{relative}/{entry.name}" if relative else entry.name
        if entry.is_symlink():
            continue
        if entry.is_dir():
            yield from _walk_files(root, rel)
        else:
            yield rel


_DIGESTERS = {"sha256": sha256_for_file, "sha512": sha512_for_file}


@dataclass
class Statement:
    """An in-toto statement binding a predicate to its subjects."""

    type: str = STATEMENT_TYPE
    predicate_type: str = PREDICATE_TYPE_SLSA_PROVENANCE
    subjects: list[Subject] = field(default_factory=list)
    predicate: Predicate = field(default_factory=new_slsa_predicate)

    def add_subject(self, name: str, digest: Mapping[str, str]) -> None:
        """Append a subject entry."""
        self.subjects.append(Subject(name=name, digest=dict(digest)))

    def read_subjects_from_dir(self, path: str | os.PathLike[str]) -> None:
        """Add every regular file below ``path`` as a subject with its SHA-256 digest."""
        root = os.fspath(path)
        try:
            for rel in _walk_files(root):
                try:
                    value = sha256_for_file(os.path.join(root, rel))
                except OSError as exc:
                    raise ProvenanceError(f"hashing file {rel}: {exc}") from exc
                self.add_subject(rel, {"sha256": value})
        except OSError as exc:
            raise ProvenanceError(f"building directory tree: {exc}") from exc

    def add_subject_from_file(self, file_path: str | os.PathLike[str]) -> None:
        """Add a subject describing the file at ``file_path``."""
        try:
            subject = subject_from_file(file_path)
        except ProvenanceError as exc:
            raise ProvenanceError(
                f"creating subject from file {os.fspath(file_path)}: {exc}"
            ) from exc
        self.add_subject(subject.name, subject.digest)

    def load_predicate(self, path: str | os.PathLike[str]) -> None:
        """Replace the predicate with one read from a JSON file."""
        try:
            with open(path, encoding="utf-8") as handle:
                raw = handle.read()
        except OSError as exc:
            raise ProvenanceError(f"opening predicate file: {exc}") from exc
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise ProvenanceError(f"unmarshalling predicate json: {exc}") from exc
        self.predicate = Predicate.from_dict(data)

    def clone_predicate(self, manifest_path: str | os.PathLike[str]) -> None:
        """Copy the predicate of the statement stored at ``manifest_path``."""
        try:
            other = load_statement(manifest_path)
        except ProvenanceError as exc:
            raise ProvenanceError(f"loading other manifest to clone data: {exc}") from exc
        self.predicate = other.predicate

    def verify_subjects(self, path: str | os.PathLike[str]) -> None:
        """Check that the files below ``path`` match the digests of the subjects."""
        errors = 0
        for subject in self.subjects:
            if not subject.name:
                log.error("found empty subject in provenance data")
                errors += 1
                continue
            if not subject.digest:
                log.error("%s has no hash information", subject.name)
                errors += 1
                continue
            file_path = os.path.join(os.fspath(path), subject.name)
            for algo, expected in subject.digest.items():
                digester = _DIGESTERS.get(algo)
                computed = ""
                if digester is not None:
                    try:
                        computed = digester(file_path)
                    except OSError as exc:
                        log.error("Error validating %s: %s", subject.name, exc)
                        errors += 1
                        continue
                if computed != expected:
                    errors += 1
                    log.error("Invalid hash in %s", subject.name)
        if errors:
            raise ProvenanceError(
                f"{errors} errors validating subjects in provenance metadata"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "_type": self.type,
            "predicateType": self.predicate_type,
            "subject": [s.to_dict() for s in self.subjects],
            "predicate": self.predicate.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Statement":
        data = _require_mapping(data, "statement")
        statement = new_slsa_statement()
        if "_type" in data:
            statement.type = str(data["_type"] or "")
        if "predicateType" in data:
            statement.predicate_type = str(data["predicateType"] or "")
        if "subject" in data:
            statement.subjects = [Subject.from_dict(s) for s in data["subject"] or []]
        if "predicate" in data and data["predicate"] is not None:
            statement.predicate = Predicate.from_dict(data["predicate"])
        return statement

    def to_json(self) -> str:
        """Serialise the statement to compact JSON."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def write(self, path: str | os.PathLike[str]) -> None:
        """Write the statement as JSON to ``path``."""
        try:
            with open(path, "w", encoding="utf-8") as handle:
                handle.write(self.to_json())
        except OSError as exc:
            raise ProvenanceError(f"writing statement file: {exc}") from exc


@dataclass
class Envelope:
    """The signed outer layer of an attestation."""

    payload_type: str = ""
    payload: str = ""
    signatures: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "payloadType": self.payload_type,
            "payload": self.payload,
            "signatures": list(self.signatures),
        }


def new_slsa_statement() -> Statement:
    """Return an empty in-toto statement with a SLSA provenance predicate."""
    return Statement()


def load_statement(path: str | os.PathLike[str]) -> Statement:
    """Read a statement from a JSON file."""
    try:
        with open(path, encoding="utf-8") as handle:
            raw = handle.read()
    except OSError as exc:
        raise ProvenanceError(f"opening statement JSON file: {exc}") from exc
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ProvenanceError(f"decoding attestation JSON data: {exc}") from exc
    return Statement.from_dict(data)