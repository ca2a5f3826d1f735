"""Growable feature-name -> feature-id mapping and its on-disk format.

File layout (`<prefix>/feature.mapping`, or gzip-compressed as
`<prefix>/feature.mapping.gz`)::

    u64 advisory_count
    { u64 key_length, key bytes (UTF-8), u64 feature_id } ... until end of stream

The header is written as the mapping size at save time but is never used to
stop reading: records are consumed until the stream is exhausted. Existing
files depend on this, so the loader keeps that behaviour.
"""
from __future__ import annotations
import gzip
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, Tuple, Union

from .binary_io import read_record, read_u64, write_record, write_u64
from .errors import CorruptMappingError, MissingMappingError
from .progress import progress

__all__ = [
    "FeatureMapping",
    "FEATURE_MAPPING_FILE",
    "COMPRESSED_FEATURE_MAPPING_FILE",
    "load_feature_mapping",
    "save_feature_mapping",
]

FEATURE_MAPPING_FILE = "feature.mapping"
COMPRESSED_FEATURE_MAPPING_FILE = "feature.mapping.gz"


class FeatureMapping:
    """
    Maps feature names to dense ids assigned in first-seen order from 0.

    Only the forward direction is kept in memory; the model consuming the
    features works with ids alone.
    """

    def __init__(self) -> None:
        self._ids: Dict[str, int] = {}

    def resolve_mutating(self, name: str) -> int:
        """Returns the id of `name`, registering it with the next id if unseen."""
        fid = self._ids.get(name)
        if fid is None:
            fid = len(self._ids)
            self._ids[name] = fid
        return fid

    def resolve_readonly(self, name: str) -> int:
        """Returns the id of `name`, or `size()` if it has never been seen."""
        return self._ids.get(name, len(self._ids))

    def size(self) -> int:
        return len(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self._ids.items())

    def write(self, stream: BinaryIO, show_progress: bool = False) -> None:
        """Serializes the mapping to an open binary stream."""
        write_u64(stream, len(self._ids))
        items = progress(self._ids.items(), " > Saving feature mapping", len(self._ids), show_progress)
        for name, fid in items:
            write_record(stream, name, fid)

    @classmethod
    def read(cls, stream: BinaryIO, show_progress: bool = False) -> "FeatureMapping":
        """
        Builds a mapping from an open binary stream, reading to end of stream.

        The ids read must be exactly 0 .. n-1 for n records, each used once,
        so that `resolve_mutating` keeps handing out fresh ids.

        Raises:
            CorruptMappingError: If the header is missing, a record is
                truncated, or the ids are repeated or not contiguous.
        """
        advisory_count = read_u64(stream)
        if advisory_count is None:
            raise CorruptMappingError("Feature mapping stream has no count header.")

        mapping = cls()
        seen_ids = set()
        for record in progress(_iter_records(stream), " > Loading feature mapping",
                               advisory_count, show_progress):
            name, fid = record
            if name in mapping._ids:
                raise CorruptMappingError(f"Feature {name!r} appears twice in the feature mapping.")
            if fid in seen_ids:
                raise CorruptMappingError(f"Feature id {fid} is assigned to more than one feature.")
            seen_ids.add(fid)
            mapping._ids[name] = fid

        # unique ids all below the record count cover 0 .. n-1 without gaps
        if seen_ids and max(seen_ids) >= len(seen_ids):
            raise CorruptMappingError(
                f"Feature ids are not contiguous: largest id {max(seen_ids)} "
                f"for {len(seen_ids)} features."
            )

        if len(mapping._ids) != advisory_count:
            print(
                f"Warning: feature mapping header announced {advisory_count} entries "
                f"but {len(mapping._ids)} were read."
            )
        return mapping


def _iter_records(stream: BinaryIO) -> Iterator[Tuple[str, int]]:
    while True:
        record = read_record(stream)
        if record is None:
            return
        yield record


def load_feature_mapping(prefix: Union[str, Path], show_progress: bool = False) -> FeatureMapping:
    """
    Loads `<prefix>/feature.mapping.gz` if it exists, else `<prefix>/feature.mapping`.

    Raises:
        MissingMappingError: If the selected file cannot be opened.
        CorruptMappingError: If the compressed file is not valid gzip data or
            its contents are malformed.
    """
    prefix = Path(prefix)
    compressed = prefix / COMPRESSED_FEATURE_MAPPING_FILE
    if compressed.exists():
        try:
            f = gzip.open(compressed, "rb")
        except OSError as e:
            raise MissingMappingError(f"missing feature id mapping in {prefix}: {e}") from e
        with f:
            try:
                return FeatureMapping.read(f, show_progress)
            except (OSError, EOFError) as e:
                raise CorruptMappingError(f"Could not decompress {compressed}: {e}") from e

    try:
        f = open(prefix / FEATURE_MAPPING_FILE, "rb")
    except OSError as e:
        raise MissingMappingError(f"missing feature id mapping in {prefix}") from e
    with f:
        return FeatureMapping.read(f, show_progress)


def save_feature_mapping(
    mapping: FeatureMapping,
    prefix: Union[str, Path],
    compress: bool = True,
    show_progress: bool = False,
) -> Path:
    """Writes `mapping` under `prefix` and returns the path of the written file."""
    prefix = Path(prefix)
    if compress:
        path = prefix / COMPRESSED_FEATURE_MAPPING_FILE
        with gzip.open(path, "wb") as f:
            mapping.write(f, show_progress)
    else:
        path = prefix / FEATURE_MAPPING_FILE
        # a leftover .gz would shadow this file on the next load
        (prefix / COMPRESSED_FEATURE_MAPPING_FILE).unlink(missing_ok=True)
        with open(path, "wb") as f:
            mapping.write(f, show_progress)
    return path
