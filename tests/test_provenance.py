import json
import os

import pytest

from bomkit.provenance import (
    Envelope,
    Predicate,
    ProvenanceError,
    ProvenanceMaterial,
    Statement,
    Subject,
    load_statement,
    new_slsa_predicate,
    new_slsa_statement,
    subject_from_file,
)

HELLO_SHA256 = "64ec88ca00b268e5ba1a35678a1b5316d212f4f366b2477232534a8aeca37f3c"
HELLO_SHA512 = (
    "b7f783baed8297f0db917462184ff4f08e69c2d5e5f79a942600f9725f58ce1f"
    "29c18139bf80b06c0fff2bdd34738452ecf40c488c22a7e3d80cdf6f9c1c0d47"
)
BUILDER_ID = "pkg:github/puerco/release@provenance"


@pytest.fixture
def provenance_file(tmp_path):
    data = {
        "_type": "https://in-toto.io/Statement/v0.1",
        "predicateType": "https://slsa.dev/provenance/v0.2",
        "subject": [
            {"name": f"bin/file{n}", "digest": {"sha256": f"{n:064x}"}} for n in range(5)
        ],
        "predicate": {
            "builder": {"id": BUILDER_ID},
            "materials": [
                {
                    "uri": "git+https://github.com/kubernetes/kubernetes",
                    "digest": {"sha1": "94db9bed6b7c56420e722d1b15db4610c9cacd3f"},
                }
            ],
        },
    }
    path = tmp_path / "provenance.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_predicate_write(tmp_path):
    p = new_slsa_predicate()
    target = tmp_path / "predicate.json"
    p.write(target)
    assert target.stat().st_size > 0
    assert json.loads(target.read_text())["builder"] == {"id": ""}


def test_predicate_write_error(tmp_path):
    p = new_slsa_predicate()
    with pytest.raises(ProvenanceError):
        p.write(tmp_path / "missing" / "predicate.json")


def test_add_material():
    p = new_slsa_predicate()
    sha1 = "c91cc89922941ace4f79113227a0166f24b8a98b"
    p.add_material("https://www.example.com/", {"sha1": sha1})
    assert len(p.materials) == 1
    assert p.materials[0].digest["sha1"] == sha1
    assert p.materials[0].uri == "https://www.example.com/"


def test_predicate_round_trip():
    p = new_slsa_predicate()
    p.builder_id = "Test@1.0"
    p.config_source_uri = "git+https://example.com/repo"
    p.config_source_digest = {"sha1": "abc"}
    p.add_material("https://www.example.com/", {"sha256": "def"})
    assert Predicate.from_dict(p.to_dict()) == p


def test_material_round_trip():
    m = ProvenanceMaterial(uri="https://www.example.com/", digest={"sha1": "abc"})
    assert ProvenanceMaterial.from_dict(m.to_dict()) == m


def test_subject_round_trip():
    s = Subject(name="a.txt", digest={"sha256": "abc"})
    assert s.to_dict() == {"name": "a.txt", "digest": {"sha256": "abc"}}
    assert Subject.from_dict(s.to_dict()) == s


def test_read_statement(provenance_file):
    s = load_statement(provenance_file)
    assert len(s.subjects) == 5
    assert s.predicate.builder_id == BUILDER_ID
    assert s.predicate.materials[0].digest["sha1"] == "94db9bed6b7c56420e722d1b15db4610c9cacd3f"
    assert s.predicate.materials[0].uri == "git+https://github.com/kubernetes/kubernetes"


def test_load_statement_missing_file(tmp_path):
    with pytest.raises(ProvenanceError):
        load_statement(tmp_path / "nope.json")


def test_load_statement_bad_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ProvenanceError):
        load_statement(path)


def test_new_statement_defaults():
    s = new_slsa_statement()
    assert s.type == "https://in-toto.io/Statement/v0.1"
    assert s.predicate_type == "https://slsa.dev/provenance/v0.2"
    assert s.subjects == []
    assert s.predicate.metadata["completeness"]["materials"] is False


def test_read_subjects_from_dir(tmp_path):
    testdata = [
        ("en.txt", "Hello world", HELLO_SHA256),
        ("es.txt", "Hola mundo", "ca8f60b2cc7f05837d98b208b57fb6481553fc5f1219d59618fd025002a66f5c"),
        ("es/mx.txt", "Quiobos", "0ff2872124d43e90de9221ec849c94f3c797d8daf9254230055c8ebe41fc8b47"),
        ("de.txt", "Hallo Welt", "2d2da19605a34e037dbe82173f98a992a530a5fdd53dad882f570d4ba204ef30"),
        ("de/ch.txt", "Salü", "d64d0c924abb7b5bbc9352cab90676f69d36170deefc2f224b17fe3de71e6a53"),
    ]
    for name, content, _ in testdata:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))

    s = new_slsa_statement()
    s.read_subjects_from_dir(tmp_path)
    assert len(s.subjects) == len(testdata)
    expected = {name: digest for name, _, digest in testdata}
    for subject in s.subjects:
        assert subject.name in expected, subject.name
        assert subject.digest["sha256"] == expected[subject.name]


def test_read_subjects_from_missing_dir(tmp_path):
    s = new_slsa_statement()
    with pytest.raises(ProvenanceError):
        s.read_subjects_from_dir(tmp_path / "mock")


def test_add_subject():
    s = new_slsa_statement()
    sha1 = "cd7f2fdcbd859060732c8a9677d9e838babfa6b9"
    s.add_subject("https://www.example.com/", {"sha1": sha1})
    assert len(s.subjects) == 1
    assert s.subjects[0].digest["sha1"] == sha1


def test_load_predicate(tmp_path):
    pr_data = (
        '{"builder":{"id":"Test@1.0"},"metadata":{"buildInvocationId":"CICD1234",'
        '"completeness":{"arguments":false,"environment":false,"materials":false},'
        '"reproducible":false,"BuildStartedOn":null,"buildFinishedOn":null},'
        '"recipe":{"type":"","definedInMaterial":0,"entryPoint":"","arguments":null,'
        '"environment":null},"materials":[]}'
    )
    path = tmp_path / "predicate"
    path.write_text(pr_data, encoding="utf-8")
    s = new_slsa_statement()
    s.load_predicate(path)
    assert s.predicate.builder_id == "Test@1.0"


def test_load_predicate_missing(tmp_path):
    s = new_slsa_statement()
    with pytest.raises(ProvenanceError):
        s.load_predicate(tmp_path / "missing")


def test_subject_from_file(tmp_path):
    path = tmp_path / "hello"
    path.write_bytes(b"Hello world")
    subject = subject_from_file(str(path))
    assert subject.name == str(path)
    assert subject.digest["sha256"] == HELLO_SHA256
    assert subject.digest["sha512"] == HELLO_SHA512
    with pytest.raises(ProvenanceError):
        subject_from_file(str(tmp_path))


def test_add_subject_from_file(tmp_path):
    path = tmp_path / "hello"
    path.write_bytes(b"Hello world")
    s = new_slsa_statement()
    s.add_subject_from_file(str(path))
    assert len(s.subjects) == 1
    assert s.subjects[0].name == str(path)
    assert s.subjects[0].digest["sha256"] == HELLO_SHA256


def test_add_subject_from_file_error(tmp_path):
    s = new_slsa_statement()
    with pytest.raises(ProvenanceError):
        s.add_subject_from_file(str(tmp_path))
    assert s.subjects == []


def test_write_statement(tmp_path):
    s = new_slsa_statement()
    s.predicate.builder_id = "asd"
    target = tmp_path / "statement.json"
    s.write(target)
    assert target.stat().st_size > 0
    loaded = load_statement(target)
    assert loaded.predicate.builder_id == "asd"


def test_write_statement_error(tmp_path):
    s = new_slsa_statement()
    with pytest.raises(ProvenanceError):
        s.write(tmp_path / "missing" / "statement.json")


def test_to_json_round_trip():
    s = new_slsa_statement()
    s.add_subject("a.txt", {"sha256": "abc"})
    s.predicate.add_material("https://www.example.com/", {"sha1": "def"})
    data = json.loads(s.to_json())
    assert data["_type"] == s.type
    assert data["subject"] == [{"name": "a.txt", "digest": {"sha256": "abc"}}]
    assert Statement.from_dict(data) == s


def test_clone_predicate(provenance_file):
    s = new_slsa_statement()
    s.clone_predicate(provenance_file)
    assert s.predicate.builder_id == BUILDER_ID


def test_clone_predicate_missing(tmp_path):
    s = new_slsa_statement()
    with pytest.raises(ProvenanceError):
        s.clone_predicate(tmp_path / "missing.json")


def _make_nested_subjects(base):
    strs = [
        ("alpha", "a2be58c40358d08fa15cb5065a487f14e20dacc43d57ba0ee58dc247159d5ddf",
         "63bf294fdc9acafb474469457d8d6f1d08bbfd85b39f0259ccb92bccf2ef9fe8"),
        ("beta", "27059170711e52bf00591cf5f076b782ccb5311a57bb493f928646c8be03dd59",
         "a5456b3c74f34644abf12796b5eb00a43922f8699f02820b3ebef983dd013cfc"),
        ("gamma", "6a7e0dabf73072ef0812c16c040bf5cb3873fb0410417c75d33d1f5175a707b7",
         "3dbd86398d3a976b430d285d2bc245c494003c21e84b908e837b4f0596aa05ff"),
    ]
    s = new_slsa_statement()
    path = ""
    for letter, sha, data in strs:
        path = os.path.join(path, letter)
        os.mkdir(os.path.join(base, path))
        with open(os.path.join(base, path, letter + ".txt"), "wb") as handle:
            handle.write(data.encode())
        s.subjects.append(
            Subject(name=os.path.join(path, letter + ".txt"), digest={"sha256": sha})
        )
    return s


def test_verify_subjects(tmp_path):
    s = _make_nested_subjects(str(tmp_path))
    s.verify_subjects(str(tmp_path))
    assert len(s.subjects) == 3


def test_verify_subjects_mismatch(tmp_path):
    s = _make_nested_subjects(str(tmp_path))
    s.subjects[0].digest["sha256"] = "0" * 64
    with pytest.raises(ProvenanceError, match="1 errors"):
        s.verify_subjects(str(tmp_path))


def test_verify_subjects_empty_and_missing_digest(tmp_path):
    s = new_slsa_statement()
    s.subjects.append(Subject(name="", digest={"sha256": "abc"}))
    s.subjects.append(Subject(name="file.txt", digest={}))
    with pytest.raises(ProvenanceError, match="2 errors"):
        s.verify_subjects(str(tmp_path))


def test_verify_subjects_missing_file(tmp_path):
    s = new_slsa_statement()
    s.add_subject("nothere.txt", {"sha256": "abc", "sha512": "def"})
    with pytest.raises(ProvenanceError, match="2 errors"):
        s.verify_subjects(str(tmp_path))


def test_envelope_to_dict():
    env = Envelope(payload_type="application/vnd.in-toto+json", payload="e30=")
    assert env.to_dict() == {
        "payloadType": "application/vnd.in-toto+json",
        "payload": "e30=",
        "signatures": [],
    }