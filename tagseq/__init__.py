"""Feature and label id extraction for sequence-labeling models."""

__version__ = "0.1.0"
