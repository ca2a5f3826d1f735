from tagseq.collector import MutatingCollector, ReadOnlyCollector
from tagseq.feature_mapping import FeatureMapping
from tagseq.types import Observation


def test_mutating_collector_registers_and_writes_features() -> None:
    features = FeatureMapping()
    obs = Observation("dog")
    coll = MutatingCollector(features, obs)

    coll.add("w[t]=dog", 1)
    coll.add("bias", 0.5)

    assert features.size() == 2
    assert obs.features == {0: 1.0, 1: 0.5}


def test_repeated_name_accumulates_weight() -> None:
    features = FeatureMapping()
    obs = Observation("dog")
    coll = MutatingCollector(features, obs)

    coll.add("bias", 1)
    coll.add("bias", 2.5)

    assert obs.features == {0: 3.5}
    assert features.size() == 1


def test_readonly_collector_uses_sentinel_for_unseen_names() -> None:
    features = FeatureMapping()
    features.resolve_mutating("bias")
    obs = Observation("dog")
    coll = ReadOnlyCollector(features, obs)

    coll.add("bias", 1)
    coll.add("w[t]=dog", 1)
    coll.add("w[t]=cat", 2)

    assert features.size() == 1
    # both unseen names collapse onto the sentinel id and their weights add up
    assert obs.features == {0: 1.0, 1: 3.0}


def test_collectors_only_touch_their_own_observation() -> None:
    features = FeatureMapping()
    first, second = Observation("a"), Observation("b")

    MutatingCollector(features, first).add("x", 1)

    assert second.features == {}
