from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

__all__ = ["Observation", "Sequence", "make_sequence"]


@dataclass
class Observation:
    """
    A single position in a sequence being labeled.

    Observations are mutated in place by the analyzer: the observation
    functions fill `features` through a collector, and the analyzer then
    assigns `label`.

    Attributes:
        symbol: The token text.
        tag: The ground-truth tag, or None for inference input.
        label: The integer label id assigned by the analyzer.
        features: Mapping of feature id to weight assigned by the pipeline.
    """
    symbol: str
    tag: Optional[str] = None
    label: Optional[int] = None
    features: Dict[int, float] = field(default_factory=dict)

    @property
    def tagged(self) -> bool:
        """True when the observation carries a ground-truth tag."""
        return self.tag is not None


Sequence = List[Observation]


def make_sequence(symbols: Iterable[str], tags: Optional[Iterable[Optional[str]]] = None) -> Sequence:
    """
    Builds a sequence from a list of symbols and an optional parallel list of tags.

    Raises:
        ValueError: If `tags` is given and its length differs from `symbols`.
    """
    symbols = list(symbols)
    if tags is None:
        return [Observation(symbol=s) for s in symbols]
    tags = list(tags)
    if len(tags) != len(symbols):
        raise ValueError(
            f"Got {len(symbols)} symbols but {len(tags)} tags; they must be parallel."
        )
    return [Observation(symbol=s, tag=t) for s, t in zip(symbols, tags)]
