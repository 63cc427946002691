"""Loads a trained tagger and chunker from a config file and runs them together."""
from __future__ import annotations
from dataclasses import dataclass
from logging import getLogger
from typing import Optional, Sequence

from .chunker import Chunker
from .config import load_config
from .io_utils import load_chunker, load_tagger
from .tagger import Tagger
from .types import ChunkedSentence, TaggedSentence
from .vocabulary import get_vocabulary

logger = getLogger(__name__)

__all__ = ["Pipeline", "load_pipeline"]


@dataclass
class Pipeline:
    """
    A tagger chain followed by an optional chunker.

    Attributes:
        tagger: The tagger chain producing POS tags.
        chunker: The chunker run over the tagger output, if one was loaded.
    """
    tagger: Tagger
    chunker: Optional[Chunker] = None

    def tag(self, tokens: Sequence[str]) -> TaggedSentence:
        return self.tagger.tag(tokens)

    def chunk(self, tokens: Sequence[str]) -> ChunkedSentence:
        """
        Tags the tokens and groups them into chunks.

        Raises:
            ValueError: If the pipeline has no chunker.
        """
        if self.chunker is None:
            raise ValueError("This pipeline was loaded without a chunker.")
        return self.chunker.chunk(self.tag(tokens))


def load_pipeline(config_path: str = "config.yaml") -> Pipeline:
    """
    Builds a pipeline from the models named in a config file.

    The `paths.tagger` entry is required; `paths.chunker` is optional.
    Tags and chunk types are resolved through the vocabularies named by
    `tagset` and `chunk_tagset`.

    Args:
        config_path: The path to the `config.yaml` file.

    Returns:
        The loaded `Pipeline`.

    Raises:
        ValueError: If the config names no tagger model.
        KeyError: If a tagset name is not a built-in vocabulary.
        FileNotFoundError: If a model file does not exist.
    """
    cfg = load_config(config_path)
    if "tagger" not in cfg.paths:
        raise ValueError(f"No 'paths.tagger' entry in {config_path}")

    tagger = load_tagger(cfg.paths["tagger"], get_vocabulary(cfg.tagset))
    chunker = None
    if "chunker" in cfg.paths:
        chunker = load_chunker(cfg.paths["chunker"], get_vocabulary(cfg.chunk_tagset))
    logger.info(
        "Loaded pipeline from %s (tagger: %s, chunker: %s)",
        config_path, cfg.paths["tagger"], cfg.paths.get("chunker", "none"),
    )
    return Pipeline(tagger, chunker)
