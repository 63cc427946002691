from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import UnknownLabel
from .types import CHINK, Chink, Chunk, ChunkedSentence, TaggedSentence, TaggedToken, split_boundary
from .vocabulary import TagVocabulary

TaggedInput = Union[TaggedSentence, Sequence[Sequence[str]]]
ChunkedInput = Union[ChunkedSentence, Sequence[Sequence[str]]]


def iter_chunks(labels: Sequence[str]) -> Iterator[Tuple[int, int]]:
    """
    Yields the start and inclusive end index of every chunk in a label sequence.

    The labels are boundary labels that have already been normalized, i.e.
    every I- label continues an open chunk of its own type. Chinks (O) are
    not yielded.

    Args:
        labels: A list of B-/I-/O boundary labels.

    Yields:
        A tuple `(start_idx, end_idx)` for each chunk.
    """
    start_idx = None
    for i, label in enumerate(labels):
        kind, _ = split_boundary(label)
        if kind == CHINK:
            if start_idx is not None:
                yield (start_idx, i - 1)
                start_idx = None
        elif kind == "B":
            if start_idx is not None:
                yield (start_idx, i - 1)
            start_idx = i
    if start_idx is not None:
        yield (start_idx, len(labels) - 1)


def validate(sentences: Iterable[TaggedSentence], vocabulary: TagVocabulary) -> Dict[str, Any]:
    """
    Checks every tag of a tagged corpus against a vocabulary.

    Args:
        sentences: The tagged sentences to check.
        vocabulary: The vocabulary the tags must belong to.

    Returns:
        A dictionary with the total `issue_count` and a list of `issues`,
        each detailing the sentence, token and offending label.
    """
    issues = []
    for s_idx, sentence in enumerate(sentences):
        if len(sentence) == 0:
            issues.append({
                "type": "empty_sentence_warning",
                "sentence": s_idx,
                "message": f"Sentence {s_idx} has no tokens.",
            })
        for t_idx, item in enumerate(sentence):
            if item.tag not in vocabulary:
                issues.append({
                    "type": "unknown_label_error",
                    "sentence": s_idx,
                    "idx": t_idx,
                    "label": item.tag,
                    "message": f"Token '{item.token}' in sentence {s_idx} has tag '{item.tag}', "
                               f"which is not in vocabulary '{vocabulary.name}'.",
                })
    return {"issue_count": len(issues), "issues": issues}


def _raise_on_unknown(report: Dict[str, Any], vocabulary: TagVocabulary) -> None:
    errors = [i for i in report["issues"] if i["type"] == "unknown_label_error"]
    if errors:
        first = errors[0]
        err = UnknownLabel(first["label"], vocabulary.name)
        err.args = (f"{first['message']} ({len(errors)} unknown label(s) in corpus)",)
        raise err


def _resolve_tags(sentence: TaggedSentence, vocabulary: TagVocabulary) -> TaggedSentence:
    return TaggedSentence(tuple(TaggedToken(t.token, vocabulary.resolve(t.tag)) for t in sentence))


def normalize_tagged(sentences: Iterable[TaggedInput], vocabulary: TagVocabulary) -> List[TaggedSentence]:
    """
    Converts a tagged training corpus to canonical `TaggedSentence` values.

    Each sentence may be a `TaggedSentence` or a sequence of `(token, tag)`
    pairs. Tags are resolved to their canonical form.

    Raises:
        UnknownLabel: If any tag is not in `vocabulary`. The whole corpus is
                      rejected; nothing is skipped silently.
    """
    corpus = [s if isinstance(s, TaggedSentence) else TaggedSentence.from_pairs(s) for s in sentences]
    _raise_on_unknown(validate(corpus, vocabulary), vocabulary)
    return [_resolve_tags(s, vocabulary) for s in corpus]


def normalize_chunked(
    sentences: Iterable[ChunkedInput],
    chunk_types: TagVocabulary,
    pos_vocabulary: Optional[TagVocabulary] = None,
) -> List[ChunkedSentence]:
    """
    Converts a chunked training corpus to canonical `ChunkedSentence` values.

    Each sentence may be a `ChunkedSentence` or a sequence of
    `(token, pos, chunk_label)` triples with B-/I-/O chunk labels. When
    `pos_vocabulary` is given, the POS tags are checked and resolved too.

    Raises:
        UnknownLabel: If any chunk type is not in `chunk_types`, or any POS
                      tag is not in `pos_vocabulary`.
        ValueError: If a chunk label is not a boundary label.
    """
    corpus = [s if isinstance(s, ChunkedSentence) else ChunkedSentence.from_triples(s) for s in sentences]
    if pos_vocabulary is not None:
        _raise_on_unknown(validate([s.tagged() for s in corpus], pos_vocabulary), pos_vocabulary)

    out = []
    for s_idx, sentence in enumerate(corpus):
        parts = []
        for part in sentence.parts:
            if isinstance(part, Chink):
                member = part.member
                if pos_vocabulary is not None:
                    member = TaggedToken(member.token, pos_vocabulary.resolve(member.tag))
                parts.append(Chink(member))
                continue
            if part.chunk_type not in chunk_types:
                err = UnknownLabel(part.chunk_type, chunk_types.name)
                err.args = (
                    f"Chunk type '{part.chunk_type}' in sentence {s_idx} is not in "
                    f"vocabulary '{chunk_types.name}'.",
                )
                raise err
            members = part.members
            if pos_vocabulary is not None:
                members = _resolve_tags(TaggedSentence(members), pos_vocabulary).items
            parts.append(Chunk(chunk_types.resolve(part.chunk_type), members))
        out.append(ChunkedSentence(tuple(parts)))
    return out
