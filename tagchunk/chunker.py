"""Phrase chunking with an averaged-perceptron boundary classifier.

The chunker labels every token of a tagged sentence with a boundary label,
greedily and left to right:

-   `B-<type>` opens a new chunk of `<type>`,
-   `I-<type>` continues the open chunk of `<type>`,
-   `O` marks a chink, a single token outside any chunk.

`decode` then rebuilds the chunk structure with a two-state machine
(outside / inside a chunk of some type). A B- label always starts a new
chunk, even right after a chunk of the same type, so adjacent chunks never
merge. An I- label that does not continue an open chunk of its own type
is read as a B- label instead of being rejected.
"""
from __future__ import annotations
from logging import getLogger
from typing import Iterable, List, Optional, Sequence, Union
import warnings

from .config import Config, resolve_config
from .data_validation import ChunkedInput, normalize_chunked
from .errors import EmptyCorpus, MalformedModel
from .features import chunker_context, chunker_features
from .perceptron import Perceptron
from .serialization import dump_envelope, load_envelope
from .types import (
    BEGIN,
    CHINK,
    CONTINUE,
    Chink,
    Chunk,
    ChunkedSentence,
    TaggedSentence,
    TaggedToken,
    begin,
    split_boundary,
)
from .vocabulary import TagVocabulary, boundary_vocabulary

logger = getLogger(__name__)

__all__ = ["Chunker", "decode", "normalize_boundaries"]


def decode(sentence: TaggedSentence, labels: Sequence[str]) -> ChunkedSentence:
    """
    Rebuilds chunks from a sequence of boundary labels.

    Every token ends up in exactly one chunk or chink, in the original
    order.

    Args:
        sentence: The tagged sentence.
        labels: One B-/I-/O boundary label per token.

    Returns:
        The chunked sentence.

    Raises:
        ValueError: If the lengths differ or a label is not a boundary label.
    """
    if len(sentence) != len(labels):
        raise ValueError(
            f"Got {len(labels)} boundary labels for a sentence of {len(sentence)} tokens."
        )
    parts: List[Union[Chunk, Chink]] = []
    open_type: Optional[str] = None
    members: List[TaggedToken] = []

    for item, label in zip(sentence, labels):
        kind, chunk_type = split_boundary(label)
        if kind == CONTINUE and chunk_type == open_type:
            members.append(item)
            continue
        if open_type is not None:
            parts.append(Chunk(open_type, tuple(members)))
            open_type, members = None, []
        if kind == CHINK:
            parts.append(Chink(item))
        else:
            # B-, or an I- with nothing of its type to continue
            open_type, members = chunk_type, [item]

    if open_type is not None:
        parts.append(Chunk(open_type, tuple(members)))
    return ChunkedSentence(tuple(parts))


def normalize_boundaries(labels: Sequence[str]) -> List[str]:
    """Rewrites every I- label that cannot continue an open chunk as a B- label."""
    out: List[str] = []
    open_type: Optional[str] = None
    for label in labels:
        kind, chunk_type = split_boundary(label)
        if kind == CHINK:
            open_type = None
            out.append(label)
        elif kind == CONTINUE and chunk_type == open_type:
            out.append(label)
        else:
            open_type = chunk_type
            out.append(begin(chunk_type) if kind != BEGIN else label)
    return out


class Chunker:
    """
    Groups tagged tokens into typed chunks.

    Attributes:
        chunk_types: The vocabulary of chunk types (NP, VP, ...).
        labels: The boundary-label vocabulary derived from `chunk_types`.
        perceptron: The boundary classifier.
    """
    def __init__(self, chunk_types: TagVocabulary, perceptron: Optional[Perceptron] = None):
        self.chunk_types = chunk_types
        self.labels = boundary_vocabulary(chunk_types)
        if perceptron is None:
            perceptron = Perceptron(self.labels)
        elif perceptron.vocabulary != self.labels:
            raise ValueError(
                f"Perceptron uses vocabulary '{perceptron.vocabulary.name}', "
                f"expected '{self.labels.name}'."
            )
        self.perceptron = perceptron

    def boundaries(self, sentence: TaggedSentence) -> List[str]:
        """Predicts the raw boundary label of every token."""
        context = chunker_context(sentence.tokens, sentence.tags)
        return self.perceptron.predict_sequence(context, len(sentence), chunker_features)

    def chunk(self, sentence: Union[TaggedSentence, Sequence[Sequence[str]]]) -> ChunkedSentence:
        """
        Chunks a tagged sentence.

        Args:
            sentence: A `TaggedSentence` or a sequence of (token, tag) pairs.

        Returns:
            The chunked sentence; a sentence without any recognized chunk
            comes back as chinks only.
        """
        if not isinstance(sentence, TaggedSentence):
            sentence = TaggedSentence.from_pairs(sentence)
        return decode(sentence, self.boundaries(sentence))

    def train(
        self,
        sentences: Iterable[ChunkedInput],
        cfg: Optional[Config] = None,
        pos_vocabulary: Optional[TagVocabulary] = None,
    ) -> "Chunker":
        """
        Trains the boundary classifier and returns a new chunker.

        The gold boundary labels come from the chunk structure: the first
        token of a chunk is B-, the rest are I-, chinks are O.

        Args:
            sentences: `ChunkedSentence` values or sequences of
                       (token, pos, chunk_label) triples.
            cfg: Training configuration; defaults to `Config()`.
            pos_vocabulary: Optional POS vocabulary the tags of the
                            training sentences must resolve in.

        Returns:
            A new chunker holding the averaged model.

        Raises:
            UnknownLabel: If a chunk type is not in `chunk_types`, or a POS
                          tag is not in `pos_vocabulary`.
        """
        cfg = resolve_config(cfg)
        corpus = normalize_chunked(sentences, self.chunk_types, pos_vocabulary)
        if not corpus:
            warnings.warn(
                EmptyCorpus("Training called with zero sentences; the chunker is unchanged."),
                stacklevel=2,
            )
            return Chunker(self.chunk_types, self.perceptron)

        examples = []
        for sentence in corpus:
            tagged = sentence.tagged()
            examples.append((chunker_context(tagged.tokens, tagged.tags), sentence.boundary_labels()))
        model = self.perceptron.train(examples, chunker_features, cfg).average()
        logger.info("Trained chunker on %d sentences", len(corpus))
        return Chunker(self.chunk_types, model)

    # --- Serialization ---
    def serialize(self) -> bytes:
        """Encodes the chunker in the versioned model format."""
        return dump_envelope(
            "chunker",
            {"chunk_types": list(self.chunk_types.labels), "model": self.perceptron.to_payload()},
        )

    @classmethod
    def deserialize(cls, payload: bytes, chunk_types: TagVocabulary) -> "Chunker":
        """
        Rebuilds a chunker from `serialize` output.

        Raises:
            UnknownLabel: If a stored chunk type or boundary label does not
                          resolve in `chunk_types`.
            MalformedModel: If the payload is structurally invalid.
        """
        data = load_envelope(payload, "chunker")
        stored_types = data.get("chunk_types")
        if not isinstance(stored_types, list) or not all(isinstance(t, str) for t in stored_types):
            raise MalformedModel("Chunker payload needs a 'chunk_types' list of strings.")
        for chunk_type in stored_types:
            chunk_types.resolve(chunk_type)
        model = data.get("model")
        if not isinstance(model, dict) or model.get("type") != "perceptron":
            raise MalformedModel("Chunker payload needs a perceptron 'model'.")
        return cls(chunk_types, Perceptron.from_payload(model, boundary_vocabulary(chunk_types)))
