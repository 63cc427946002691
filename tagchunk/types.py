from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, Literal, Optional, Sequence, Tuple, Union

__all__ = [
    "BoundaryKind",
    "FeatureVector",
    "TaggedToken",
    "TaggedSentence",
    "Chunk",
    "Chink",
    "ChunkedSentence",
    "BEGIN",
    "CONTINUE",
    "CHINK",
    "begin",
    "cont",
    "split_boundary",
]

BoundaryKind = Literal["B", "I", "O"]
FeatureVector = dict  # feature name -> count

BEGIN: BoundaryKind = "B"
CONTINUE: BoundaryKind = "I"
CHINK: BoundaryKind = "O"


def begin(chunk_type: str) -> str:
    """Boundary label opening a new chunk of `chunk_type`."""
    return f"{BEGIN}-{chunk_type}"


def cont(chunk_type: str) -> str:
    """Boundary label continuing an open chunk of `chunk_type`."""
    return f"{CONTINUE}-{chunk_type}"


def split_boundary(label: str) -> Tuple[BoundaryKind, Optional[str]]:
    """
    Splits a boundary label into its kind and chunk type.

    Args:
        label: A label such as "B-NP", "I-VP" or "O".

    Returns:
        A `(kind, chunk_type)` tuple; `chunk_type` is None for chinks.

    Raises:
        ValueError: If the label is not in B-/I-/O form.
    """
    if label == CHINK:
        return CHINK, None
    kind, sep, chunk_type = label.partition("-")
    if not sep or kind not in (BEGIN, CONTINUE) or not chunk_type:
        raise ValueError(f"Not a boundary label: '{label}'")
    return kind, chunk_type  # type: ignore[return-value]


@dataclass(frozen=True)
class TaggedToken:
    """
    A single token paired with its tag.

    Attributes:
        token: The surface text of the token.
        tag: The label assigned to it (a POS tag for tagged text).
    """
    token: str
    tag: str

    def __str__(self) -> str:
        return f"{self.token}/{self.tag}"


@dataclass(frozen=True)
class TaggedSentence:
    """
    An ordered sequence of tagged tokens.

    Order matters: the tagger and chunker features look at neighbouring
    tokens and tags, so the sentence is stored as an immutable tuple.
    """
    items: Tuple[TaggedToken, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[Union[TaggedToken, Sequence[str]]]) -> "TaggedSentence":
        out = []
        for pair in pairs:
            if isinstance(pair, TaggedToken):
                out.append(pair)
                continue
            if len(pair) != 2:
                raise ValueError(f"Expected a (token, tag) pair, got {pair!r}")
            out.append(TaggedToken(str(pair[0]), str(pair[1])))
        return cls(tuple(out))

    @property
    def tokens(self) -> Tuple[str, ...]:
        return tuple(t.token for t in self.items)

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(t.tag for t in self.items)

    def __iter__(self) -> Iterator[TaggedToken]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, idx: int) -> TaggedToken:
        return self.items[idx]

    def __str__(self) -> str:
        return " ".join(str(t) for t in self.items)


@dataclass(frozen=True)
class Chunk:
    """A labeled, contiguous group of tagged tokens, e.g. a noun phrase."""
    chunk_type: str
    members: Tuple[TaggedToken, ...]

    def __post_init__(self):
        if not self.members:
            raise ValueError("A chunk must contain at least one token.")

    def __str__(self) -> str:
        return f"[{self.chunk_type} " + " ".join(str(t) for t in self.members) + "]"


@dataclass(frozen=True)
class Chink:
    """A single token that is not part of any chunk."""
    member: TaggedToken

    @property
    def members(self) -> Tuple[TaggedToken, ...]:
        return (self.member,)

    def __str__(self) -> str:
        return str(self.member)


@dataclass(frozen=True)
class ChunkedSentence:
    """
    An ordered sequence of chunks and chinks.

    Together the parts cover every token of the source sentence exactly
    once, in the original order.
    """
    parts: Tuple[Union[Chunk, Chink], ...] = ()

    @classmethod
    def from_triples(cls, triples: Iterable[Sequence[str]]) -> "ChunkedSentence":
        """
        Builds a chunked sentence from `(token, pos, chunk_label)` triples.

        The chunk labels are B-/I-/O boundary labels. They go through the
        same state machine as the chunker's predictions, so an I- label that
        does not continue an open chunk of its type starts a new one.
        """
        from .chunker import decode

        tagged, labels = [], []
        for triple in triples:
            if len(triple) != 3:
                raise ValueError(f"Expected a (token, pos, chunk_label) triple, got {triple!r}")
            tagged.append(TaggedToken(str(triple[0]), str(triple[1])))
            labels.append(str(triple[2]))
        return decode(TaggedSentence(tuple(tagged)), labels)

    def tagged(self) -> TaggedSentence:
        """Flattens the chunks back into the underlying tagged sentence."""
        return TaggedSentence(tuple(t for part in self.parts for t in part.members))

    def boundary_labels(self) -> list[str]:
        """
        Derives the per-token boundary labels.

        The first token of each chunk gets B-<type>, subsequent tokens get
        I-<type>, and every chink gets O.
        """
        labels: list[str] = []
        for part in self.parts:
            if isinstance(part, Chink):
                labels.append(CHINK)
                continue
            labels.append(begin(part.chunk_type))
            labels.extend(cont(part.chunk_type) for _ in part.members[1:])
        return labels

    def __iter__(self) -> Iterator[Union[Chunk, Chink]]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __str__(self) -> str:
        return " ".join(str(p) for p in self.parts)
