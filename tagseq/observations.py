"""Default observation functions for part-of-speech style tagging.

Each observation function takes `(sequence, t, collector)` and emits named
features for position `t` with `collector.add`. They only read the sequence;
ids and labels are filled in by the collector and the analyzer.

Feature names follow a `w[<offset>]...=<value>` scheme so that models trained
on older mappings keep matching:

* current word: `w[t]=`, `w[t]_prefix_<n>=`, `w[t]_suffix_<n>=` and the binary
  shape flags `w[t]_has_digit=1`, `w[t]_has_hyphen=1`, `w[t]_has_upper=1`,
  `w[t]_has_upper_and_not_sentence_start=1`, `w[t]_all_upper=1`
* neighbours: `w[t-1]=`, `w[t-2]=`, `w[t+1]=`, `w[t+2]=`, padded with the
  boundary markers below
* `bias` at every position
"""
from __future__ import annotations
from typing import List, Optional

from .analyzer import ObservationFunction, SequenceAnalyzer
from .collector import Collector
from .config import DEFAULT_MAX_AFFIX_LENGTH, Config
from .types import Sequence

START = "<s>"
START_2 = "<s1>"
END = "</s>"
END_2 = "</s1>"


def foldcase(word: str) -> str:
    """Canonical case-folded form used in feature names."""
    return word.casefold()


def prefix(word: str, length: int) -> str:
    """First `length` characters, or the whole word if it is shorter."""
    return word[:length]


def suffix(word: str, length: int) -> str:
    """Last `length` characters, or the whole word if it is shorter."""
    if length >= len(word):
        return word
    return word[len(word) - length:]


# --- Observation function factories ---
def current_word_features(max_affix_length: int = DEFAULT_MAX_AFFIX_LENGTH) -> ObservationFunction:
    """
    Builds the observation function for the token at position `t`.

    Affixes of length 1 to `max_affix_length` are taken from the case-folded
    token; the shape flags look at the raw token.
    """
    def observe(seq: Sequence, t: int, coll: Collector) -> None:
        word = seq[t].symbol
        norm = foldcase(word)
        for i in range(1, max_affix_length + 1):
            coll.add(f"w[t]_suffix_{i}={suffix(norm, i)}", 1)
            coll.add(f"w[t]_prefix_{i}={prefix(norm, i)}", 1)
        coll.add(f"w[t]={norm}", 1)

        if any(c.isdigit() for c in word):
            coll.add("w[t]_has_digit=1", 1)
        if "-" in word:
            coll.add("w[t]_has_hyphen=1", 1)
        if any(c.isupper() for c in word):
            coll.add("w[t]_has_upper=1", 1)
            if t != 0:
                coll.add("w[t]_has_upper_and_not_sentence_start=1", 1)
        # every character, so "U.S." does not count
        if all(c.isupper() for c in word):
            coll.add("w[t]_all_upper=1", 1)

    return observe


def previous_word_features(seq: Sequence, t: int, coll: Collector) -> None:
    """Words at t-1 and t-2, or start markers before the sequence."""
    if t > 0:
        coll.add(f"w[t-1]={foldcase(seq[t - 1].symbol)}", 1)
        if t > 1:
            coll.add(f"w[t-2]={foldcase(seq[t - 2].symbol)}", 1)
        else:
            coll.add(f"w[t-2]={START}", 1)
    else:
        coll.add(f"w[t-1]={START}", 1)
        coll.add(f"w[t-2]={START_2}", 1)


def next_word_features(seq: Sequence, t: int, coll: Collector) -> None:
    """Words at t+1 and t+2, or end markers past the sequence."""
    if t + 1 < len(seq):
        coll.add(f"w[t+1]={foldcase(seq[t + 1].symbol)}", 1)
        if t + 2 < len(seq):
            coll.add(f"w[t+2]={foldcase(seq[t + 2].symbol)}", 1)
        else:
            coll.add(f"w[t+2]={END}", 1)
    else:
        coll.add(f"w[t+1]={END}", 1)
        coll.add(f"w[t+2]={END_2}", 1)


def bias(seq: Sequence, t: int, coll: Collector) -> None:
    coll.add("bias", 1)


def default_observation_functions(max_affix_length: int = DEFAULT_MAX_AFFIX_LENGTH) -> List[ObservationFunction]:
    """The reference pipeline: current word, previous words, next words, bias."""
    return [
        current_word_features(max_affix_length),
        previous_word_features,
        next_word_features,
        bias,
    ]


def default_pos_analyzer(config: Optional[Config] = None) -> SequenceAnalyzer:
    """Returns an empty analyzer wired with the default observation functions."""
    config = config if config is not None else Config()
    return SequenceAnalyzer(
        observation_functions=default_observation_functions(config.max_affix_length),
        config=config,
    )
