"""Provides utility functions for reading tagged text and storing models.

`parse_tagged` reads the common `word/TAG` plain-text format into a
`TaggedSentence`. The model helpers write serialized taggers and chunkers
to disk and read them back, resolving labels through the vocabulary the
caller supplies.
"""
from pathlib import Path
from typing import Optional, Union

from .chunker import Chunker
from .serialization import deserialize
from .tagger import Tagger
from .types import TaggedSentence, TaggedToken
from .vocabulary import TagVocabulary


def parse_tagged(text: str, vocabulary: Optional[TagVocabulary] = None) -> TaggedSentence:
    """
    Parses whitespace-separated `word/TAG` items into a tagged sentence.

    Each item is split on its last slash, so words that contain a slash
    themselves ("1/2/CD") survive. When a vocabulary is given, tags are
    resolved to their canonical form.

    Args:
        text: The tagged text, e.g. "The/AT dog/NN jumped/VBD ./.".
        vocabulary: Optional vocabulary to resolve the tags with.

    Returns:
        The parsed `TaggedSentence`.

    Raises:
        ValueError: If an item has no tag.
        UnknownLabel: If a tag does not resolve in `vocabulary`.
    """
    out = []
    for item in text.split():
        word, sep, tag = item.rpartition("/")
        if not sep or not word or not tag:
            raise ValueError(f"Expected a word/TAG item, got '{item}'")
        if vocabulary is not None:
            tag = vocabulary.resolve(tag)
        out.append(TaggedToken(word, tag))
    return TaggedSentence(tuple(out))


def save_model(path: Union[str, Path], model: Union[Tagger, Chunker]) -> None:
    """
    Writes a serialized tagger chain or chunker to `path`.

    The payload is written to a temporary sibling file first and then moved
    into place, so a failed write never leaves a truncated model behind.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_bytes(model.serialize())
    tmp_path.replace(path)


def _read_bytes(path: Union[str, Path]) -> bytes:
    try:
        return Path(path).read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"Model file not found at: {path}")


def load_tagger(path: Union[str, Path], vocabulary: TagVocabulary) -> Tagger:
    """
    Loads a tagger chain saved with `save_model`.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedModel: If the file does not hold a valid tagger payload.
        UnknownLabel: If a stored tag does not resolve in `vocabulary`.
    """
    return deserialize(_read_bytes(path), vocabulary)


def load_chunker(path: Union[str, Path], chunk_types: TagVocabulary) -> Chunker:
    """
    Loads a chunker saved with `save_model`.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedModel: If the file does not hold a valid chunker payload.
        UnknownLabel: If a stored label does not resolve in `chunk_types`.
    """
    return Chunker.deserialize(_read_bytes(path), chunk_types)
