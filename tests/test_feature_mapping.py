import gzip
import io
from pathlib import Path

import pytest

from tagseq.binary_io import write_record, write_u64
from tagseq.errors import CorruptMappingError, MissingMappingError
from tagseq.feature_mapping import (
    COMPRESSED_FEATURE_MAPPING_FILE,
    FEATURE_MAPPING_FILE,
    FeatureMapping,
    load_feature_mapping,
    save_feature_mapping,
)


def _mapping(*names: str) -> FeatureMapping:
    m = FeatureMapping()
    for name in names:
        m.resolve_mutating(name)
    return m


def test_ids_are_assigned_in_first_seen_order() -> None:
    m = FeatureMapping()

    assert m.resolve_mutating("bias") == 0
    assert m.resolve_mutating("w[t]=the") == 1
    assert m.resolve_mutating("bias") == 0
    assert m.resolve_mutating("w[t]=dog") == 2
    assert m.size() == 3


def test_readonly_resolution_returns_size_for_unseen_names() -> None:
    m = _mapping("a", "b")

    assert m.resolve_readonly("b") == 1
    assert m.resolve_readonly("zzz") == 2
    assert m.size() == 2
    assert "zzz" not in m


@pytest.mark.parametrize("compress", [True, False])
def test_round_trip_preserves_ids(tmp_path: Path, compress: bool) -> None:
    names = [f"w[t]=word{i}" for i in range(50)] + ["bias", "w[t]=ça"]
    original = _mapping(*names)

    written = save_feature_mapping(original, tmp_path, compress=compress)
    loaded = load_feature_mapping(tmp_path)

    expected_name = COMPRESSED_FEATURE_MAPPING_FILE if compress else FEATURE_MAPPING_FILE
    assert written.name == expected_name
    assert loaded.size() == original.size()
    for name in names:
        assert loaded.resolve_readonly(name) == original.resolve_readonly(name)


def test_compressed_file_takes_precedence(tmp_path: Path) -> None:
    with open(tmp_path / FEATURE_MAPPING_FILE, "wb") as f:
        _mapping("plain").write(f)
    with gzip.open(tmp_path / COMPRESSED_FEATURE_MAPPING_FILE, "wb") as f:
        _mapping("zipped", "other").write(f)

    loaded = load_feature_mapping(tmp_path)

    assert "zipped" in loaded
    assert "plain" not in loaded


def test_uncompressed_save_removes_stale_compressed_file(tmp_path: Path) -> None:
    save_feature_mapping(_mapping("old"), tmp_path, compress=True)
    save_feature_mapping(_mapping("new"), tmp_path, compress=False)

    assert not (tmp_path / COMPRESSED_FEATURE_MAPPING_FILE).exists()
    assert "new" in load_feature_mapping(tmp_path)


def test_reader_ignores_header_count_and_reads_to_end(capsys) -> None:
    buf = io.BytesIO()
    write_u64(buf, 1)
    write_record(buf, "a", 0)
    write_record(buf, "b", 1)
    write_record(buf, "c", 2)
    buf.seek(0)

    loaded = FeatureMapping.read(buf)

    assert loaded.size() == 3
    assert loaded.resolve_readonly("c") == 2
    assert "Warning" in capsys.readouterr().out


def test_reader_handles_header_larger_than_records() -> None:
    buf = io.BytesIO()
    write_u64(buf, 10)
    write_record(buf, "only", 0)
    buf.seek(0)

    loaded = FeatureMapping.read(buf)

    assert loaded.size() == 1
    assert loaded.resolve_readonly("only") == 0
    assert loaded.resolve_mutating("next") == 1


def test_reader_rejects_missing_header() -> None:
    with pytest.raises(CorruptMappingError):
        FeatureMapping.read(io.BytesIO(b""))


def test_missing_files_raise(tmp_path: Path) -> None:
    with pytest.raises(MissingMappingError):
        load_feature_mapping(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_feature_mapping(tmp_path / "does-not-exist")


def _records(*pairs) -> io.BytesIO:
    buf = io.BytesIO()
    write_u64(buf, len(pairs))
    for name, fid in pairs:
        write_record(buf, name, fid)
    buf.seek(0)
    return buf


@pytest.mark.parametrize(
    "pairs",
    [
        [("a", 1), ("b", 2)],
        [("a", 0), ("b", 0)],
        [("a", 0), ("a", 1)],
        [("a", 0), ("b", 5), ("c", 1)],
    ],
    ids=["not-from-zero", "repeated-id", "repeated-name", "gap"],
)
def test_reader_rejects_ids_that_could_be_handed_out_again(pairs) -> None:
    with pytest.raises(CorruptMappingError):
        FeatureMapping.read(_records(*pairs))


def test_reader_accepts_ids_in_any_order() -> None:
    loaded = FeatureMapping.read(_records(("b", 1), ("a", 0)))

    assert loaded.resolve_mutating("c") == 2
    assert loaded.resolve_readonly("b") == 1


def test_reader_rejects_invalid_utf8_keys() -> None:
    buf = io.BytesIO()
    write_u64(buf, 1)
    write_u64(buf, 2)
    buf.write(b"\xff\xfe")
    write_u64(buf, 0)
    buf.seek(0)

    with pytest.raises(CorruptMappingError):
        FeatureMapping.read(buf)


def test_unopenable_compressed_file_is_a_missing_mapping(tmp_path: Path) -> None:
    (tmp_path / COMPRESSED_FEATURE_MAPPING_FILE).mkdir()

    with pytest.raises(MissingMappingError):
        load_feature_mapping(tmp_path)


def test_non_gzip_compressed_file_is_corrupt(tmp_path: Path) -> None:
    (tmp_path / COMPRESSED_FEATURE_MAPPING_FILE).write_bytes(b"not gzip data at all")

    with pytest.raises(CorruptMappingError):
        load_feature_mapping(tmp_path)


def test_truncated_gzip_file_is_corrupt(tmp_path: Path) -> None:
    path = save_feature_mapping(_mapping(*[f"f{i}" for i in range(100)]), tmp_path, compress=True)
    path.write_bytes(path.read_bytes()[:-12])

    with pytest.raises(CorruptMappingError):
        load_feature_mapping(tmp_path)
