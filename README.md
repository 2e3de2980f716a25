# bomkit

Tools for describing what went into a build:

- **Provenance statements** in the in-toto / SLSA v0.2 format: collect
  subjects (files and their digests), attach materials to the predicate,
  write statements to JSON, load them back and check artifacts on disk
  against them.
- **SPDX helpers**: work out SPDX file types, keep checksums for external
  document references, and read YAML configurations that describe what an
  SBOM should cover.

## Installation

```
pip install bomkit
```

Install with the `test` extra to run the test suite:

```
pip install "bomkit[test]"
pytest
```

## Provenance statements

```python
from bomkit.provenance import new_slsa_statement, load_statement

statement = new_slsa_statement()
statement.predicate.builder_id = "ci@1.0"
statement.read_subjects_from_dir("dist")           # every file becomes a subject
statement.predicate.add_material(
    "git+https://git.example.com/project", {"sha1": "0123abcd"}
)
statement.write("provenance.json")

# Later, check that the artifacts still match
loaded = load_statement("provenance.json")
loaded.verify_subjects("dist")                     # raises ProvenanceError on mismatch
```

`subject_from_file(path)` gives a `Subject` with both `sha256` and `sha512`
digests; `Statement.add_subject_from_file` adds one to a statement.
`Statement.clone_predicate(path)` copies the predicate from another statement
file, and `Statement.load_predicate(path)` reads a bare predicate.
`Statement.to_json()` returns the compact JSON text, and `Envelope` holds a
payload type, payload and signatures for the signed outer layer.

The file digests are available directly from `bomkit.hashing`:
`sha1_for_file`, `sha256_for_file` and `sha512_for_file`.

## SPDX file types

```python
from bomkit.filetypes import get_file_types

get_file_types("main.go")      # ["SOURCE"]
get_file_types("run.bat")      # ["BINARY", "APPLICATION"]
```

Files without an extension are classified by sniffing their first bytes
(`file_content_type`, `detect_content_type`).

## External document references

`bomkit.docref.ExternalDocumentRef` holds an ID, a URI and the checksums of
a related SPDX document; `read_source_file(path)` records its SHA1, and
`str(ref)` gives the `DocumentRef-...` line used in an SPDX document.

## SBOM configuration

```yaml
name: my-project
namespace: https://spdx.example.com/my-project
license: Apache-2.0
creator:
  person: Build Team (team@example.com)
artifacts:
  - type: directory
    source: .
  - type: image
    source: registry.example.com/app:v1
```

```python
from bomkit.config import DocGenerateOptions, load_configuration, read_yaml_configuration

conf = load_configuration("sbom.yaml")   # a BomConfiguration
opts = DocGenerateOptions()
read_yaml_configuration("sbom.yaml", opts)
opts.validate()                # raises ConfigError when nothing is set to scan
```

Artifact types `directory`, `image`, `docker-archive`, `file` and `archive`
are added to the matching option lists; other types are ignored.

## What bomkit does not do

bomkit does not generate or render SPDX documents: `DocGenerateOptions`
describes what a document should contain, but nothing in the package scans
directories, images or archives into packages, or writes SPDX tag-value
output. It does not read Go module files or scan licenses, and it has no
command-line tool; everything is used from Python.