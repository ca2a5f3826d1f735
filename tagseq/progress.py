"""Progress reporting for long mapping and corpus loops."""
from __future__ import annotations
from typing import Iterable, Iterator, Optional, TypeVar

from tqdm import tqdm

T = TypeVar("T")


def progress(
    iterable: Iterable[T],
    desc: str,
    total: Optional[int] = None,
    enabled: bool = True,
) -> Iterator[T]:
    """
    Wraps `iterable` in a tqdm bar labelled `desc`.

    The reporter is purely observational: with `enabled=False` the items are
    yielded unchanged and nothing is printed.
    """
    if not enabled:
        return iter(iterable)
    return iter(tqdm(iterable, desc=desc, total=total, leave=False))
