"""Provides utility functions for loading and saving token sequences.

Sequences are stored as JSON with the list of sequences under a "sequences"
key; each sequence is a list of token objects with a "symbol" and an optional
"tag". `load_sequences` ignores unknown per-token keys, and
`save_analyzed_sequences` adds the assigned "label" and the "features" as a
list of `[feature_id, weight]` pairs sorted by id.
"""
import json
from typing import List

from .types import Observation, Sequence


def load_sequences(path: str) -> List[Sequence]:
    """
    Loads token sequences from a JSON file.

    Args:
        path: The path to the input JSON file.

    Returns:
        A list of sequences of `Observation` objects, with empty features and
        no label.

    Raises:
        FileNotFoundError: If the file at the specified path does not exist.
        ValueError: If the file is not valid JSON.
        TypeError: If the JSON structure is incorrect (e.g., "sequences" is
                   missing or not a list, or a token is not an object with a
                   string "symbol").
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Sequence file not found at: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Error decoding JSON from {path}: {e}")

    items = data.get("sequences") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise TypeError(f"Expected a 'sequences' key with a list of sequences in {path}")

    out = []
    for i, seq in enumerate(items):
        if not isinstance(seq, list):
            raise TypeError(f"Sequence at index {i} in {path} is not a list.")
        observations = []
        for j, tok in enumerate(seq):
            if not isinstance(tok, dict) or not isinstance(tok.get("symbol"), str):
                raise TypeError(
                    f"Token {j} of sequence {i} in {path} must be an object with a string 'symbol'."
                )
            tag = tok.get("tag")
            observations.append(Observation(symbol=tok["symbol"], tag=None if tag is None else str(tag)))
        out.append(observations)
    return out


def save_analyzed_sequences(path: str, sequences: List[Sequence]) -> None:
    """
    Saves analyzed sequences, including labels and feature vectors, to JSON.

    Args:
        path: The destination path for the output JSON file.
        sequences: The analyzed sequences to save.
    """
    data = {
        "sequences": [
            [
                {
                    "symbol": obs.symbol,
                    "tag": obs.tag,
                    "label": obs.label,
                    "features": [[fid, w] for fid, w in sorted(obs.features.items())],
                }
                for obs in seq
            ]
            for seq in sequences
        ]
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
