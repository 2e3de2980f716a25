"""Options for generating an SPDX document and the YAML file that can supply them."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlsplit

import yaml

from bomkit.docref import ExternalDocumentRef

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class ConfigError(Exception):
    """Raised when generation options or a configuration file are not usable."""


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{what} must be a mapping")
    return value


def _sequence(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{what} must be a list")
    return value


@dataclass
class DocGenerateOptions:
    """What to put into a generated SPDX document and where to write it."""

    analyse_layers: bool = False
    no_gitignore: bool = False
    process_go_modules: bool = False
    only_direct_deps: bool = False
    scan_licenses: bool = False
    scan_images: bool = False
    config_file: str = ""
    output_file: str = ""
    name: str = ""
    namespace: str = ""
    creator_person: str = ""
    license: str = ""
    tarballs: list[str] = field(default_factory=list)
    archives: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)
    ignore_patterns: list[str] = field(default_factory=list)
    external_document_refs: list[ExternalDocumentRef] = field(default_factory=list)

    def validate(self) -> None:
        """Raise ``ConfigError`` if the options cannot produce a document."""
        if not (
            self.tarballs or self.files or self.images or self.directories or self.archives
        ):
            raise ConfigError(
                "to build a document at least an image, tarball, directory "
                "or a file has to be specified"
            )
        if self.config_file and not os.path.exists(self.config_file):
            raise ConfigError("the specified configuration file was not found")
        try:
            urlsplit(self.namespace)
        except ValueError as exc:
            raise ConfigError(f"parsing the namespace URL: {exc}") from exc


@dataclass
class BuildArtifact:
    """An artifact listed in a configuration file."""

    type: str = ""
    source: str = ""
    license: str = ""
    gomodules: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildArtifact":
        data = _mapping(data, "artifact")
        gomodules = data.get("gomodules")
        if gomodules is not None and not isinstance(gomodules, bool):
            raise ConfigError("artifact gomodules must be a boolean")
        return cls(
            type=_text(data.get("type")),
            source=_text(data.get("source")),
            license=_text(data.get("license")),
            gomodules=gomodules,
        )


@dataclass
class BomConfiguration:
    """The contents of a YAML SBOM configuration file."""

    namespace: str = ""
    license: str = ""
    name: str = ""
    creator_person: str = ""
    creator_tool: str = ""
    external_doc_refs: list[ExternalDocumentRef] = field(default_factory=list)
    artifacts: list[BuildArtifact] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BomConfiguration":
        data = _mapping(data, "configuration")
        creator = _mapping(data.get("creator"), "creator")
        try:
            refs = [
                ExternalDocumentRef.from_dict(item)
                for item in _sequence(data.get("external-docs"), "external-docs")
            ]
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        return cls(
            namespace=_text(data.get("namespace")),
            license=_text(data.get("license")),
            name=_text(data.get("name")),
            creator_person=_text(creator.get("person")),
            creator_tool=_text(creator.get("tool")),
            external_doc_refs=refs,
            artifacts=[
                BuildArtifact.from_dict(item)
                for item in _sequence(data.get("artifacts"), "artifacts")
            ],
        )


def load_configuration(path: PathLike) -> BomConfiguration:
    """Read a YAML SBOM configuration file."""
    try:
        with open(path, encoding="utf-8") as handle:
            raw = handle.read()
    except OSError as exc:
        raise ConfigError(f"reading yaml SBOM configuration: {exc}") from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"unmarshalling SBOM configuration YAML: {exc}") from exc
    try:
        return BomConfiguration.from_dict(data)
    except ConfigError as exc:
        raise ConfigError(f"unmarshalling SBOM configuration YAML: {exc}") from exc


_ARTIFACT_TARGETS = {
    "directory": "directories",
    "image": "images",
    "docker-archive": "tarballs",
    "file": "files",
    "archive": "archives",
}


def read_yaml_configuration(path: PathLike, opts: DocGenerateOptions) -> None:
    """Apply the settings of a YAML configuration file to ``opts``."""
    conf = load_configuration(path)

    if conf.name:
        opts.name = conf.name
    if conf.namespace:
        opts.namespace = conf.namespace
    if conf.creator_person:
        opts.creator_person = conf.creator_person
    if conf.license:
        opts.license = conf.license

    opts.external_document_refs = list(conf.external_doc_refs)

    for artifact in conf.artifacts:
        log.info("Configuration has artifact of type %s: %s", artifact.type, artifact.source)
        target = _ARTIFACT_TARGETS.get(artifact.type)
        if target is not None:
            getattr(opts, target).append(artifact.source)