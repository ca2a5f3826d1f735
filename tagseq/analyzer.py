"""Runs observation functions over sequences and assigns feature and label ids.

The `SequenceAnalyzer` owns two mappings: feature names to feature ids, and
tags to label ids. Both grow monotonically while training and are frozen at
inference time. The same observation-function pipeline serves both modes; the
mode only decides which collector the pipeline writes into and whether new
tags may be registered.

An analyzer is not safe to share between threads while it is used in training
mode. Callers that parallelize analysis must synchronize externally.
"""
from __future__ import annotations
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .collector import Collector, MutatingCollector, ReadOnlyCollector
from .config import Config
from .errors import MissingMappingError
from .feature_mapping import FeatureMapping, load_feature_mapping, save_feature_mapping
from .mapping import InvertibleMap, load_mapping, save_mapping
from .types import Sequence

__all__ = ["ObservationFunction", "SequenceAnalyzer", "LABEL_MAPPING_FILE"]

LABEL_MAPPING_FILE = "label.mapping"

ObservationFunction = Callable[[Sequence, int, Collector], None]


class SequenceAnalyzer:
    """
    Extracts feature ids and label ids for every position of a sequence.

    Typical usage::

        analyzer = default_pos_analyzer()
        for seq in training_sequences:
            analyzer.analyze(seq)
        analyzer.save("model")

        # Later, at inference time:
        analyzer = default_pos_analyzer()
        analyzer.load("model")
        analyzer.analyze_readonly(seq)

    Attributes:
        config: Settings consulted for progress reporting and the default
                compression choice of `save`.
    """

    def __init__(
        self,
        prefix: Optional[Union[str, Path]] = None,
        observation_functions: Iterable[ObservationFunction] = (),
        config: Optional[Config] = None,
    ):
        self._obs_fns: List[ObservationFunction] = list(observation_functions)
        self._features = FeatureMapping()
        self._labels: InvertibleMap[str, int] = InvertibleMap()
        self.config = config if config is not None else Config()
        if prefix is not None:
            self.load(prefix)

    # --- Pipeline ---
    def add_observation_function(self, fn: ObservationFunction) -> None:
        """Appends `fn` to the pipeline; functions run in insertion order."""
        self._obs_fns.append(fn)

    @property
    def observation_functions(self) -> Tuple[ObservationFunction, ...]:
        return tuple(self._obs_fns)

    # --- Persistence ---
    def load(self, prefix: Union[str, Path]) -> None:
        """
        Replaces both mappings with the ones stored under `prefix`.

        The feature mapping is read first (`feature.mapping.gz`, falling back
        to `feature.mapping`), then `label.mapping`. The analyzer's mappings
        are only replaced once both have been read.

        Raises:
            MissingMappingError: If either mapping file is absent.
        """
        prefix = Path(prefix)
        features = load_feature_mapping(prefix, self.config.show_progress)

        label_path = prefix / LABEL_MAPPING_FILE
        if not label_path.exists():
            raise MissingMappingError(f"missing label mapping in {prefix}")
        labels: InvertibleMap[str, int] = InvertibleMap()
        load_mapping(labels, label_path)

        self._features = features
        self._labels = labels

    def save(self, prefix: Union[str, Path], compress: Optional[bool] = None) -> None:
        """
        Writes a full snapshot of both mappings under `prefix`.

        `compress` defaults to `config.compress_features`. The directory is
        created if needed. Files are written in place, so a failure part way
        leaves them incomplete; save to a temporary directory and rename it
        when the previous model must survive a failed save.
        """
        prefix = Path(prefix)
        if compress is None:
            compress = self.config.compress_features
        prefix.mkdir(parents=True, exist_ok=True)
        save_feature_mapping(self._features, prefix, compress, self.config.show_progress)
        save_mapping(self._labels, prefix / LABEL_MAPPING_FILE)

    # --- Training mode ---
    def analyze(self, sequence: Sequence) -> None:
        """Analyzes every position, growing the feature and label mappings."""
        for t in range(len(sequence)):
            self.analyze_position(sequence, t)

    def analyze_position(self, sequence: Sequence, t: int) -> None:
        """
        Runs the pipeline on position `t` with a mutating collector, then labels it.

        Raises:
            ValueError: If the position has no tag to learn a label from.
        """
        obs = sequence[t]
        obs.features = {}
        coll = MutatingCollector(self._features, obs)
        for fn in self._obs_fns:
            fn(sequence, t, coll)

        if not obs.tagged:
            raise ValueError(f"Cannot learn a label for untagged position {t} ({obs.symbol!r}).")
        if not self._labels.contains_key(obs.tag):
            self._labels.insert(obs.tag, self._labels.size())
        obs.label = self._labels.get_value(obs.tag)

    # --- Inference mode ---
    def analyze_readonly(self, sequence: Sequence) -> None:
        """Analyzes every position without modifying either mapping."""
        for t in range(len(sequence)):
            self.analyze_position_readonly(sequence, t)

    def analyze_position_readonly(self, sequence: Sequence, t: int) -> None:
        """
        Runs the pipeline on position `t` with a read-only collector, then labels it.

        Positions that are untagged, or whose tag was never seen in training,
        get the sentinel label `num_labels`.
        """
        obs = sequence[t]
        obs.features = {}
        coll = ReadOnlyCollector(self._features, obs)
        for fn in self._obs_fns:
            fn(sequence, t, coll)

        if not obs.tagged or not self._labels.contains_key(obs.tag):
            obs.label = self._labels.size()
        else:
            obs.label = self._labels.get_value(obs.tag)

    # --- Queries ---
    def feature(self, name: str) -> int:
        """Returns the id of `name`, registering it if unseen."""
        return self._features.resolve_mutating(name)

    def feature_readonly(self, name: str) -> int:
        """Returns the id of `name`, or `num_features` if unseen."""
        return self._features.resolve_readonly(name)

    @property
    def num_features(self) -> int:
        return self._features.size()

    @property
    def labels(self) -> InvertibleMap[str, int]:
        return self._labels

    def label(self, tag: str) -> int:
        return self._labels.get_value(tag)

    def tag(self, label_id: int) -> str:
        return self._labels.get_key(label_id)

    @property
    def num_labels(self) -> int:
        return self._labels.size()
