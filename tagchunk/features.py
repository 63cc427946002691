"""Feature extraction for the POS tagger and the chunker.

Both models are averaged perceptrons over sparse, string-valued features
computed from a token's local context. This module turns a position in a
sentence, plus the labels already predicted to its left, into a
`FeatureVector` (a dict of feature name to count).

The tagger features follow the usual greedy perceptron tagger recipe:
affixes of the normalized word, the words around it, and the two
previously predicted tags. The chunker sees the POS tags instead, plus
the previously predicted boundary labels and the word's shape.
"""
from __future__ import annotations
from typing import List, Sequence, Tuple

from .types import FeatureVector

START = ("-START-", "-START2-")
END = ("-END-", "-END2-")


# --- Helper Functions ---
def normalize_word(word: str) -> str:
    """Folds a word into the form used for lexical features."""
    if "-" in word and word[0] != "-":
        return "!HYPHEN"
    if word.isdigit() and len(word) == 4:
        return "!YEAR"
    if word and word[0].isdigit():
        return "!DIGITS"
    return word.lower()


def word_shape(word: str) -> str:
    """
    Describes the character classes of a word with runs collapsed.

    Upper-case letters map to "X", lower-case letters to "x" and digits to
    "d"; any other character is kept as is. "Dog" becomes "Xx", "1999"
    becomes "d" and "U.S." becomes "X.X.".
    """
    out = []
    for ch in word:
        if ch.isupper():
            cls = "X"
        elif ch.islower():
            cls = "x"
        elif ch.isdigit():
            cls = "d"
        else:
            cls = ch
        if not out or out[-1] != cls:
            out.append(cls)
    return "".join(out)


def _add(features: FeatureVector, name: str, *args: str) -> None:
    key = " ".join((name,) + args)
    features[key] = features.get(key, 0) + 1


def padded_context(words: Sequence[str]) -> list[str]:
    """Normalized words surrounded by the start and end padding markers."""
    return list(START) + [normalize_word(w) for w in words] + list(END)


# --- Tagger features ---
def tagger_features(context: Sequence[str], i: int, prev: str, prev2: str) -> FeatureVector:
    """
    Builds the feature vector for the token at position `i`.

    Args:
        context: The padded, normalized sentence from `padded_context`.
        i: Index of the token in the unpadded sentence.
        prev: The tag predicted for the previous token.
        prev2: The tag predicted for the token before that.

    Returns:
        A `FeatureVector` for the token.
    """
    j = i + len(START)
    word = context[j]
    features: FeatureVector = {}
    _add(features, "bias")
    _add(features, "i suffix", word[-3:])
    _add(features, "i pref1", word[:1])
    _add(features, "i-1 tag", prev)
    _add(features, "i-2 tag", prev2)
    _add(features, "i tag+i-2 tag", prev, prev2)
    _add(features, "i word", word)
    _add(features, "i-1 tag+i word", prev, word)
    _add(features, "i-1 word", context[j - 1])
    _add(features, "i-1 suffix", context[j - 1][-3:])
    _add(features, "i-2 word", context[j - 2])
    _add(features, "i+1 word", context[j + 1])
    _add(features, "i+1 suffix", context[j + 1][-3:])
    _add(features, "i+2 word", context[j + 2])
    return features


# --- Chunker features ---
ChunkerContext = Tuple[List[str], List[str], Sequence[str]]


def chunker_context(words: Sequence[str], tags: Sequence[str]) -> ChunkerContext:
    """Pads a tagged sentence once for `chunker_features`: (words, tags, raw words)."""
    return padded_context(words), list(START) + list(tags) + list(END), words


def chunker_features(context: ChunkerContext, i: int, prev: str, prev2: str) -> FeatureVector:
    """
    Builds the boundary-classifier feature vector for the token at `i`.

    Args:
        context: The padded sentence from `chunker_context`.
        i: Index of the token in the unpadded sentence.
        prev: The boundary label predicted for the previous token.
        prev2: The boundary label predicted for the token before that.

    Returns:
        A `FeatureVector` for the token.
    """
    pwords, ptags, words = context
    j = i + len(START)
    word = pwords[j]
    pos = ptags[j]

    features: FeatureVector = {}
    _add(features, "bias")
    _add(features, "i pos", pos)
    _add(features, "i word", word)
    _add(features, "i suffix", word[-3:])
    _add(features, "i shape", word_shape(words[i]))
    _add(features, "i-1 pos", ptags[j - 1])
    _add(features, "i-2 pos", ptags[j - 2])
    _add(features, "i+1 pos", ptags[j + 1])
    _add(features, "i+2 pos", ptags[j + 2])
    _add(features, "i-1 pos+i pos", ptags[j - 1], pos)
    _add(features, "i pos+i+1 pos", pos, ptags[j + 1])
    _add(features, "i-1 label", prev)
    _add(features, "i-2 label", prev2)
    _add(features, "i-1 label+i pos", prev, pos)
    _add(features, "i-1 word", pwords[j - 1])
    _add(features, "i+1 word", pwords[j + 1])
    return features
