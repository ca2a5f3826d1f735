"""Per-position feature sinks handed to observation functions.

An observation function never sees the feature mapping directly. It calls
`collector.add(name, weight)` and the collector resolves the name to an id
and writes the weight into the observation it was created for. The two
variants differ only in how names are resolved:

* `MutatingCollector` (training) registers unseen names.
* `ReadOnlyCollector` (inference) maps unseen names to the sentinel id
  `feature_mapping.size()` and leaves the mapping untouched.

When the same name is emitted more than once for a position, the weights are
summed. Out-of-vocabulary names in read-only mode all land on the sentinel id,
so their weights are summed as well.
"""
from __future__ import annotations
from abc import ABC, abstractmethod

from .feature_mapping import FeatureMapping
from .types import Observation

__all__ = ["Collector", "MutatingCollector", "ReadOnlyCollector"]


class Collector(ABC):
    """Sink scoped to one observation for the duration of one extraction."""

    def __init__(self, features: FeatureMapping, observation: Observation):
        self._features = features
        self._observation = observation

    @abstractmethod
    def resolve(self, name: str) -> int:
        """Returns the feature id for `name` under this collector's policy."""

    def add(self, name: str, weight: float) -> None:
        fid = self.resolve(name)
        feats = self._observation.features
        feats[fid] = feats.get(fid, 0.0) + weight


class MutatingCollector(Collector):
    def resolve(self, name: str) -> int:
        return self._features.resolve_mutating(name)


class ReadOnlyCollector(Collector):
    def resolve(self, name: str) -> int:
        return self._features.resolve_readonly(name)
