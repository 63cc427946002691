"""Manages the loading and validation of training and pipeline configuration.

This module defines the `Config` dataclass, a typed container for the
settings shared by the taggers and the chunker (number of training passes,
shuffling, tagset names, model paths). The `load_config` function reads
those settings from a `config.yaml` file, falling back to the dataclass
defaults for anything the file leaves out.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import yaml

__all__ = ["Config", "load_config"]


@dataclass
class Config:
    """
    A typed configuration object for training and loading models.

    Attributes:
        passes: Number of left-to-right passes over the training data.
        shuffle: Whether to shuffle the example order between passes.
        seed: Seed for the shuffling generator. The same seed always yields
              the same order, so training stays reproducible.
        unambiguous_min_count: Minimum number of occurrences before the
              unambiguous tagger trusts a word's single observed tag.
        show_progress: Show a tqdm progress bar over training passes.
        tagset: Name of the POS vocabulary (see `tagchunk.vocabulary`).
        chunk_tagset: Name of the chunk-type vocabulary.
        paths: Model file paths ("tagger", "chunker"), relative to the
               directory of the config file when loaded with `load_config`.
    """
    passes: int = 5
    shuffle: bool = True
    seed: int = 0
    unambiguous_min_count: int = 1
    show_progress: bool = False
    tagset: str = "brown"
    chunk_tagset: str = "conll-chunk"
    paths: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.passes < 0:
            raise ValueError(f"passes must be >= 0, got {self.passes}")
        if self.unambiguous_min_count < 1:
            raise ValueError(
                f"unambiguous_min_count must be >= 1, got {self.unambiguous_min_count}"
            )


def load_config(path: str = "config.yaml") -> Config:
    """
    Loads and validates a configuration file into a single Config object.

    Relative entries under `paths` are resolved against the directory that
    holds the config file, so a config can sit next to its model files.

    Args:
        path: The path to the `config.yaml` file.

    Returns:
        A fully populated and validated `Config` object.

    Raises:
        FileNotFoundError: If the specified file cannot be found.
        ValueError: If the YAML cannot be parsed or a value is out of range.
        TypeError: If the root of the YAML file is not a dictionary.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file at {path}: {e}")

    if y is None:
        y = {}
    if not isinstance(y, dict):
        raise TypeError(f"Configuration file {path} must be a dictionary.")

    training = y.get("training", {}) or {}
    if not isinstance(training, dict):
        raise TypeError(f"'training' in {path} must be a dictionary.")

    base_dir = Path(path).parent
    paths = {}
    for name, value in (y.get("paths", {}) or {}).items():
        p = Path(str(value))
        paths[str(name)] = str(p if p.is_absolute() else base_dir / p)

    defaults = Config()
    return Config(
        passes=int(training.get("passes", defaults.passes)),
        shuffle=bool(training.get("shuffle", defaults.shuffle)),
        seed=int(training.get("seed", defaults.seed)),
        unambiguous_min_count=int(
            training.get("unambiguous_min_count", defaults.unambiguous_min_count)
        ),
        show_progress=bool(training.get("show_progress", defaults.show_progress)),
        tagset=str(y.get("tagset", defaults.tagset)),
        chunk_tagset=str(y.get("chunk_tagset", defaults.chunk_tagset)),
        paths=paths,
    )


def resolve_config(cfg: Optional[Config]) -> Config:
    """Returns `cfg`, or the default configuration when it is None."""
    return cfg if cfg is not None else Config()
