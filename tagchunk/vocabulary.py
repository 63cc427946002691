"""Named label vocabularies and the built-in tagsets.

A `TagVocabulary` maps the textual form of a label to its canonical label
and fixes the label ordering used for deterministic tie-breaking. Lookups
are strict: a label the vocabulary does not know raises `UnknownLabel`
instead of being coerced to something else.
"""
from __future__ import annotations
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

from .errors import UnknownLabel
from .types import CHINK, begin, cont

__all__ = [
    "TagVocabulary",
    "BROWN",
    "CONLL_POS",
    "CONLL_CHUNK",
    "VOCABULARIES",
    "get_vocabulary",
    "boundary_vocabulary",
]


class TagVocabulary:
    """
    An ordered, closed set of labels for one tagging scheme.

    Attributes:
        name: The registry name of the vocabulary (e.g. "brown").
        labels: The ordered label alphabet. The reserved default label,
                when there is one, always comes first.
        default: The reserved "unknown" label, or None.
    """
    def __init__(
        self,
        name: str,
        labels: Iterable[str],
        default: Optional[str] = None,
        normalize: Optional[Callable[[str], str]] = None,
    ):
        ordered = list(dict.fromkeys(labels))
        if default is not None:
            ordered = [default] + [l for l in ordered if l != default]
        if not ordered:
            raise ValueError(f"Vocabulary '{name}' has no labels.")
        self.name = name
        self.default = default
        self.labels: Tuple[str, ...] = tuple(ordered)
        self._normalize = normalize
        self._ranks: Dict[str, int] = {label: i for i, label in enumerate(self.labels)}

    def resolve(self, text: str) -> str:
        """
        Resolves the textual form of a label to its canonical label.

        Args:
            text: The label as it appears in data or a model payload.

        Returns:
            The canonical label.

        Raises:
            UnknownLabel: If the label is not part of this vocabulary.
        """
        if text in self._ranks:
            return text
        if self._normalize is not None:
            folded = self._normalize(text)
            if folded in self._ranks:
                return folded
        raise UnknownLabel(text, self.name)

    def rank(self, label: str) -> int:
        """Position of a canonical label in the tie-break ordering."""
        try:
            return self._ranks[label]
        except KeyError:
            raise UnknownLabel(label, self.name) from None

    def __contains__(self, text: object) -> bool:
        if not isinstance(text, str):
            return False
        try:
            self.resolve(text)
        except UnknownLabel:
            return False
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self.labels)

    def __len__(self) -> int:
        return len(self.labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagVocabulary):
            return NotImplemented
        return (self.name, self.labels, self.default) == (other.name, other.labels, other.default)

    def __hash__(self) -> int:
        return hash((self.name, self.labels, self.default))

    def __repr__(self) -> str:
        return f"TagVocabulary({self.name!r}, {len(self.labels)} labels, default={self.default!r})"


# --- Brown corpus ---
BROWN_SUFFIXES = ("-TL", "-HL", "-NC")


def _normalize_brown(text: str) -> str:
    """Brown tags are case-insensitive and carry title/headline/cited suffixes."""
    tag = text.strip().upper()
    changed = True
    while changed:
        changed = False
        for suffix in BROWN_SUFFIXES:
            if tag.endswith(suffix) and len(tag) > len(suffix):
                tag = tag[: -len(suffix)]
                changed = True
    if tag.startswith("FW-"):
        tag = "FW"
    return tag


BROWN_TAGS = (
    "(", ")", "*", ",", "--", ".", ":", "''", "``", "'",
    "ABL", "ABN", "ABX", "AP", "AT",
    "BE", "BED", "BEDZ", "BEG", "BEM", "BEN", "BER", "BEZ",
    "CC", "CD", "CS",
    "DO", "DOD", "DOZ", "DT", "DTI", "DTS", "DTX",
    "EX", "FW",
    "HV", "HVD", "HVG", "HVN", "HVZ",
    "IN", "JJ", "JJR", "JJS", "JJT", "MD", "NC",
    "NN", "NN$", "NNS", "NNS$", "NP", "NP$", "NPS", "NPS$", "NR", "NRS",
    "OD", "PN", "PN$", "PP$", "PP$$", "PPL", "PPLS", "PPO", "PPS", "PPSS",
    "QL", "QLP", "RB", "RBR", "RBT", "RN", "RP", "TO", "UH",
    "VB", "VBD", "VBG", "VBN", "VBZ",
    "WDT", "WP$", "WPO", "WPS", "WQL", "WRB",
)

# Negated forms carry a trailing "*" ("isn't" is BEZ*).
BROWN_NEGATED = (
    "BED*", "BEDZ*", "BEM*", "BER*", "BEZ*",
    "DO*", "DOD*", "DOZ*", "HV*", "HVD*", "HVZ*", "MD*",
)

# Contractions join the tags of their parts with "+" ("he's" is PPS+BEZ).
BROWN_COMPOUNDS = (
    "DO+PPSS", "DT+BEZ", "DT+MD", "DTS+BEZ",
    "EX+BEZ", "EX+HVD", "EX+HVZ", "EX+MD",
    "HV+TO", "IN+IN", "IN+PPO", "JJ+JJ", "JJR+CS",
    "MD+HV", "MD+PPSS", "MD+TO",
    "NN+BEZ", "NN+HVD", "NN+HVZ", "NN+IN", "NN+MD", "NN+NN", "NNS+MD",
    "NP+BEZ", "NP+HVZ", "NP+MD", "NPS+MD", "NR+MD",
    "PN+BEZ", "PN+HVD", "PN+HVZ", "PN+MD",
    "PPS+BEZ", "PPS+HVD", "PPS+HVZ", "PPS+MD",
    "PPSS+BEM", "PPSS+BER", "PPSS+BEZ", "PPSS+HV", "PPSS+HVD", "PPSS+MD", "PPSS+VB",
    "RB+BEZ", "RB+CS", "RBR+CS", "RP+IN",
    "VB+AT", "VB+IN", "VB+JJ", "VB+PPO", "VB+RP", "VB+TO", "VB+VB",
    "VBG+TO", "VBN+TO",
    "WDT+BER", "WDT+BER+PP", "WDT+BEZ", "WDT+DO+PPS", "WDT+DOD", "WDT+HVZ",
    "WPS+BEZ", "WPS+HVD", "WPS+HVZ", "WPS+MD",
    "WRB+BER", "WRB+BEZ", "WRB+DO", "WRB+DOD", "WRB+DOD*", "WRB+DOZ", "WRB+IN", "WRB+MD",
)

BROWN = TagVocabulary(
    "brown",
    BROWN_TAGS + BROWN_NEGATED + BROWN_COMPOUNDS + ("NIL",),
    default="UNK",
    normalize=_normalize_brown,
)

# --- CoNLL-2000 (Penn Treebank POS tags and chunk types) ---
CONLL_POS_TAGS = (
    "#", "$", "''", "(", ")", ",", ".", ":", "``",
    "CC", "CD", "DT", "EX", "FW", "IN", "JJ", "JJR", "JJS", "LS", "MD",
    "NN", "NNP", "NNPS", "NNS", "PDT", "POS", "PRP", "PRP$",
    "RB", "RBR", "RBS", "RP", "SYM", "TO", "UH",
    "VB", "VBD", "VBG", "VBN", "VBP", "VBZ",
    "WDT", "WP", "WP$", "WRB",
)

CONLL_POS = TagVocabulary("conll-pos", CONLL_POS_TAGS, default="UNK")

CONLL_CHUNK_TYPES = ("ADJP", "ADVP", "CONJP", "INTJ", "LST", "NP", "PP", "PRT", "SBAR", "UCP", "VP")

CONLL_CHUNK = TagVocabulary("conll-chunk", CONLL_CHUNK_TYPES, normalize=str.upper)

VOCABULARIES: Dict[str, TagVocabulary] = {
    BROWN.name: BROWN,
    CONLL_POS.name: CONLL_POS,
    CONLL_CHUNK.name: CONLL_CHUNK,
}


def get_vocabulary(name: str) -> TagVocabulary:
    """
    Looks up a built-in vocabulary by name.

    Raises:
        KeyError: If no vocabulary is registered under `name`.
    """
    try:
        return VOCABULARIES[name]
    except KeyError:
        raise KeyError(f"No tag vocabulary named '{name}'. Known: {sorted(VOCABULARIES)}") from None


def boundary_vocabulary(chunk_types: TagVocabulary) -> TagVocabulary:
    """
    Derives the chunker's boundary-label alphabet from a chunk-type vocabulary.

    The alphabet is `O` (the chink label, also the default) followed by a
    `B-<type>` and `I-<type>` pair for each chunk type, in vocabulary order.
    """
    labels = []
    for chunk_type in chunk_types.labels:
        labels.append(begin(chunk_type))
        labels.append(cont(chunk_type))

    def _normalize(text: str) -> str:
        kind, sep, rest = text.partition("-")
        if not sep:
            return text.upper()
        return f"{kind.upper()}-{chunk_types.resolve(rest)}" if rest in chunk_types else text

    return TagVocabulary(f"{chunk_types.name}-boundary", labels, default=CHINK, normalize=_normalize)
