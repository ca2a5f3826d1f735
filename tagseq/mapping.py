"""Bidirectional mapping and its generic binary serializer.

`InvertibleMap` associates keys with values in both directions. It backs the
label mapping (tag <-> label id) of the sequence analyzer. The serializer
writes a u64 entry count followed by `{string key, u64 value}` records in
insertion order; unlike the feature mapping format, the count here is
authoritative.
"""
from __future__ import annotations
from pathlib import Path
from typing import Dict, Generic, Hashable, Iterator, Tuple, TypeVar, Union

from .binary_io import read_record, read_u64, write_record, write_u64
from .errors import CorruptMappingError, MissingMappingError, NotFoundError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V", bound=Hashable)

__all__ = ["InvertibleMap", "save_mapping", "load_mapping"]


class InvertibleMap(Generic[K, V]):
    """
    A one-to-one mapping queryable from either side.

    Callers are expected to check `contains_key` before `insert`; binding a
    key or value that is already bound to a different counterpart is an error.
    """

    def __init__(self) -> None:
        self._forward: Dict[K, V] = {}
        self._backward: Dict[V, K] = {}

    def insert(self, key: K, value: V) -> None:
        """
        Associates `key` with `value`.

        Raises:
            ValueError: If `key` or `value` is already bound elsewhere.
        """
        if key in self._forward:
            if self._forward[key] == value:
                return
            raise ValueError(f"Key {key!r} is already mapped to {self._forward[key]!r}.")
        if value in self._backward:
            raise ValueError(f"Value {value!r} is already mapped from {self._backward[value]!r}.")
        self._forward[key] = value
        self._backward[value] = key

    def get_value(self, key: K) -> V:
        try:
            return self._forward[key]
        except KeyError:
            raise NotFoundError(f"No value for key {key!r}") from None

    def get_key(self, value: V) -> K:
        try:
            return self._backward[value]
        except KeyError:
            raise NotFoundError(f"No key for value {value!r}") from None

    def contains_key(self, key: K) -> bool:
        return key in self._forward

    def contains_value(self, value: V) -> bool:
        return value in self._backward

    def size(self) -> int:
        return len(self._forward)

    def empty(self) -> bool:
        return not self._forward

    def clear(self) -> None:
        self._forward.clear()
        self._backward.clear()

    def __len__(self) -> int:
        return len(self._forward)

    def __contains__(self, key: object) -> bool:
        return key in self._forward

    def __iter__(self) -> Iterator[Tuple[K, V]]:
        return iter(self._forward.items())

    def __repr__(self) -> str:
        return f"InvertibleMap({self._forward!r})"


def save_mapping(mapping: InvertibleMap, path: Union[str, Path]) -> None:
    """
    Writes `mapping` to `path` as a count header followed by its records.

    Keys are written as strings and values as u64 integers. A failed write
    leaves an incomplete file behind; write to a temporary path and rename it
    if the previous file must survive.
    """
    with open(path, "wb") as f:
        write_u64(f, mapping.size())
        for key, value in mapping:
            write_record(f, key, value)


def load_mapping(mapping: InvertibleMap, path: Union[str, Path]) -> None:
    """
    Reads the records stored at `path` into `mapping`.

    Raises:
        MissingMappingError: If `path` does not exist or cannot be opened.
        CorruptMappingError: If fewer records than the header announces are found.
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise MissingMappingError(f"Could not open mapping file {path}: {e}") from e

    with f:
        count = read_u64(f)
        if count is None:
            raise CorruptMappingError(f"Mapping file {path} has no count header.")
        for i in range(count):
            record = read_record(f)
            if record is None:
                raise CorruptMappingError(
                    f"Mapping file {path} announced {count} entries but ended after {i}."
                )
            mapping.insert(*record)
