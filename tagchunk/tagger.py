"""Composable POS taggers.

A tagger is a chain of stages. Each stage either commits to a tag for a
token or abstains (returns None for it); the chain takes, token by token,
the first committed tag. Three stages are provided:

-   `LiteralTagger`: a fixed word -> tag dictionary.
-   `UnambiguousTagger`: learns the words that only ever occur with one tag.
-   `PerceptronTagger`: an averaged perceptron; it always commits, so it is
    the natural last stage of a chain.

Chains are singly linked through the `fallback` attribute and must stay
acyclic; linking a stage that would become its own fallback raises
`CyclicTaggerChain`. Training is value-based: `train` returns a new chain
and leaves the receiver untouched.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from collections import Counter
from logging import getLogger
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence
import warnings

from .config import Config, resolve_config
from .data_validation import TaggedInput, normalize_tagged
from .errors import CyclicTaggerChain, EmptyCorpus, MalformedModel
from .features import padded_context, tagger_features
from .perceptron import Perceptron
from .types import TaggedSentence, TaggedToken
from .vocabulary import TagVocabulary

logger = getLogger(__name__)

__all__ = ["Tagger", "LiteralTagger", "UnambiguousTagger", "PerceptronTagger", "chain", "tag_text"]


class Tagger(ABC):
    """
    The superclass of all tagger stages.

    Subclasses implement `tag_tokens` (the stage's own decisions),
    `_train_stage` and the payload conversion used by
    `tagchunk.serialization`.

    Attributes:
        TYPE: The stage type name written to model payloads.
        vocabulary: The tag vocabulary shared by the whole chain.
    """
    TYPE: str = ""

    def __init__(self, vocabulary: TagVocabulary, fallback: Optional["Tagger"] = None):
        self.vocabulary = vocabulary
        self._fallback: Optional[Tagger] = None
        self.fallback = fallback

    @property
    def fallback(self) -> Optional["Tagger"]:
        """The tagger consulted for the tokens this stage abstains on."""
        return self._fallback

    @fallback.setter
    def fallback(self, value: Optional["Tagger"]) -> None:
        if value is not None:
            if not isinstance(value, Tagger):
                raise TypeError(f"Fallback must be a Tagger, got {type(value).__name__}")
            if value.vocabulary != self.vocabulary:
                raise ValueError(
                    f"Fallback uses vocabulary '{value.vocabulary.name}', "
                    f"expected '{self.vocabulary.name}'."
                )
            node: Optional[Tagger] = value
            while node is not None:
                if node is self:
                    raise CyclicTaggerChain(
                        f"Linking {value!r} as fallback of {self!r} would create a cycle."
                    )
                node = node._fallback
        self._fallback = value

    def stages(self) -> Iterator["Tagger"]:
        """Yields the stages of the chain, starting with this one."""
        node: Optional[Tagger] = self
        while node is not None:
            yield node
            node = node._fallback

    @abstractmethod
    def tag_tokens(self, tokens: Sequence[str]) -> List[Optional[str]]:
        """Returns this stage's tag for each token, or None where it abstains."""
        raise NotImplementedError

    def tag(self, tokens: Sequence[str]) -> TaggedSentence:
        """
        Tags a tokenized sentence with the whole chain.

        Each token gets the tag of the first stage that commits to one.
        Tokens no stage resolves get the vocabulary's reserved default tag.

        Args:
            tokens: The tokens of one sentence.

        Returns:
            The tagged sentence.
        """
        if isinstance(tokens, str):
            raise TypeError("tag() expects a sequence of tokens, not a string.")
        tokens = list(tokens)
        tags: List[Optional[str]] = [None] * len(tokens)
        for stage in self.stages():
            pending = [i for i, t in enumerate(tags) if t is None]
            if not pending:
                break
            decided = stage.tag_tokens(tokens)
            for i in pending:
                tags[i] = decided[i]
        default = self.vocabulary.labels[0]
        return TaggedSentence(tuple(
            TaggedToken(tok, tag if tag is not None else default) for tok, tag in zip(tokens, tags)
        ))

    def train(self, sentences: Iterable[TaggedInput], cfg: Optional[Config] = None) -> "Tagger":
        """
        Trains every trainable stage and returns the new chain.

        Each stage is trained on the gold tags, never on the output of the
        stages before it, so upstream mistakes cannot leak into the
        perceptron's training signal.

        Args:
            sentences: `TaggedSentence` values or sequences of (token, tag) pairs.
            cfg: Training configuration; defaults to `Config()`.

        Returns:
            A new tagger chain with the same topology.

        Raises:
            UnknownLabel: If a gold tag is not in the vocabulary. No stage is
                          trained in that case.
        """
        cfg = resolve_config(cfg)
        corpus = normalize_tagged(sentences, self.vocabulary)
        if not corpus:
            warnings.warn(
                EmptyCorpus("Training called with zero sentences; the tagger is unchanged."),
                stacklevel=2,
            )
            return chain(*(stage._copy() for stage in self.stages()))
        trained = []
        for stage in self.stages():
            logger.debug("Training %s stage on %d sentences", stage.TYPE, len(corpus))
            trained.append(stage._train_stage(corpus, cfg))
        return chain(*trained)

    @abstractmethod
    def _train_stage(self, corpus: List[TaggedSentence], cfg: Config) -> "Tagger":
        """Returns a trained copy of this stage, without a fallback."""
        raise NotImplementedError

    @abstractmethod
    def _copy(self) -> "Tagger":
        """Returns an unchanged copy of this stage, without a fallback."""
        raise NotImplementedError

    @abstractmethod
    def to_payload(self) -> Dict[str, Any]:
        raise NotImplementedError

    @classmethod
    @abstractmethod
    def from_payload(cls, payload: Dict[str, Any], vocabulary: TagVocabulary) -> "Tagger":
        raise NotImplementedError

    def serialize(self) -> bytes:
        """Shortcut for `tagchunk.serialization.serialize(self)`."""
        from .serialization import serialize
        return serialize(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.vocabulary.name})"


def chain(*stages: Tagger) -> Tagger:
    """
    Links stages head to tail and returns the head.

    Either every link is made or none is: on failure the stages keep the
    fallbacks they had before the call.

    Raises:
        ValueError: If no stage is given, or vocabularies differ.
        TypeError: If a stage is not a Tagger.
        CyclicTaggerChain: If the links would form a cycle.
    """
    if not stages:
        raise ValueError("chain() needs at least one tagger.")
    previous = [getattr(stage, "_fallback", None) for stage in stages]
    try:
        for head, tail in zip(stages, stages[1:]):
            head.fallback = tail
    except (TypeError, ValueError):
        for stage, fallback in zip(stages, previous):
            if isinstance(stage, Tagger):
                stage._fallback = fallback
        raise
    return stages[0]


def tag_text(tagger: Tagger, tokens: Sequence[str]) -> str:
    """Tags the tokens and renders them as `word/TAG` text."""
    return str(tagger.tag(tokens))


def _read_table(payload: Dict[str, Any], vocabulary: TagVocabulary) -> Dict[str, str]:
    table = payload.get("table")
    if not isinstance(table, dict):
        raise MalformedModel(f"'{payload.get('type')}' payload needs a 'table' object.")
    for word, tag in table.items():
        if not isinstance(tag, str):
            raise MalformedModel(f"Tag for '{word}' must be a string, got {tag!r}")
    return {word: vocabulary.resolve(tag) for word, tag in table.items()}


class LiteralTagger(Tagger):
    """
    Tags words found in a fixed dictionary and abstains on everything else.

    The dictionary is given at construction; training leaves it unchanged.
    """
    TYPE = "literal"

    def __init__(
        self,
        vocabulary: TagVocabulary,
        table: Optional[Mapping[str, str]] = None,
        case_sensitive: bool = True,
        fallback: Optional[Tagger] = None,
    ):
        super().__init__(vocabulary, fallback)
        self.case_sensitive = case_sensitive
        self.table: Dict[str, str] = {
            self._key(word): vocabulary.resolve(tag) for word, tag in (table or {}).items()
        }

    def _key(self, word: str) -> str:
        return word if self.case_sensitive else word.lower()

    def tag_tokens(self, tokens: Sequence[str]) -> List[Optional[str]]:
        return [self.table.get(self._key(tok)) for tok in tokens]

    def _train_stage(self, corpus: List[TaggedSentence], cfg: Config) -> Tagger:
        return self._copy()

    def _copy(self) -> Tagger:
        return LiteralTagger(self.vocabulary, self.table, self.case_sensitive)

    def to_payload(self) -> Dict[str, Any]:
        return {"type": self.TYPE, "case_sensitive": self.case_sensitive, "table": dict(sorted(self.table.items()))}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], vocabulary: TagVocabulary) -> Tagger:
        case_sensitive = payload.get("case_sensitive")
        if not isinstance(case_sensitive, bool):
            raise MalformedModel("'literal' payload needs a boolean 'case_sensitive'.")
        return cls(vocabulary, _read_table(payload, vocabulary), case_sensitive)


class UnambiguousTagger(Tagger):
    """
    Tags the words that were only ever seen with a single tag.

    Training counts the tags of every word in the gold data. A word that
    occurred at least `cfg.unambiguous_min_count` times, always with the
    same tag, is added to the table; a word seen with several tags is
    removed from it.
    """
    TYPE = "unambiguous"

    def __init__(
        self,
        vocabulary: TagVocabulary,
        table: Optional[Mapping[str, str]] = None,
        fallback: Optional[Tagger] = None,
    ):
        super().__init__(vocabulary, fallback)
        self.table: Dict[str, str] = {w: vocabulary.resolve(t) for w, t in (table or {}).items()}

    def tag_tokens(self, tokens: Sequence[str]) -> List[Optional[str]]:
        return [self.table.get(tok) for tok in tokens]

    def _train_stage(self, corpus: List[TaggedSentence], cfg: Config) -> Tagger:
        counts: Dict[str, Counter] = {}
        for sentence in corpus:
            for item in sentence:
                counts.setdefault(item.token, Counter())[item.tag] += 1

        table = dict(self.table)
        for word, tags in counts.items():
            if len(tags) > 1:
                table.pop(word, None)
                continue
            tag, n = next(iter(tags.items()))
            if n >= cfg.unambiguous_min_count:
                table[word] = tag
        logger.debug("Unambiguous table has %d words", len(table))
        return UnambiguousTagger(self.vocabulary, table)

    def _copy(self) -> Tagger:
        return UnambiguousTagger(self.vocabulary, self.table)

    def to_payload(self) -> Dict[str, Any]:
        return {"type": self.TYPE, "table": dict(sorted(self.table.items()))}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], vocabulary: TagVocabulary) -> Tagger:
        return cls(vocabulary, _read_table(payload, vocabulary))


class PerceptronTagger(Tagger):
    """
    Tags every token with an averaged perceptron, greedily left to right.

    The perceptron stage never abstains: a token with no known features
    falls to the classifier's tie-break default.
    """
    TYPE = "perceptron"

    def __init__(
        self,
        vocabulary: TagVocabulary,
        perceptron: Optional[Perceptron] = None,
        fallback: Optional[Tagger] = None,
    ):
        super().__init__(vocabulary, fallback)
        if perceptron is None:
            perceptron = Perceptron(vocabulary)
        elif perceptron.vocabulary != vocabulary:
            raise ValueError(
                f"Perceptron uses vocabulary '{perceptron.vocabulary.name}', "
                f"expected '{vocabulary.name}'."
            )
        self.perceptron = perceptron

    def tag_tokens(self, tokens: Sequence[str]) -> List[Optional[str]]:
        context = padded_context(tokens)
        return list(self.perceptron.predict_sequence(context, len(tokens), tagger_features))

    def _train_stage(self, corpus: List[TaggedSentence], cfg: Config) -> Tagger:
        examples = [(padded_context(s.tokens), list(s.tags)) for s in corpus]
        model = self.perceptron.train(examples, tagger_features, cfg).average()
        return PerceptronTagger(self.vocabulary, model)

    def _copy(self) -> Tagger:
        return PerceptronTagger(self.vocabulary, self.perceptron)

    def to_payload(self) -> Dict[str, Any]:
        return self.perceptron.to_payload()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], vocabulary: TagVocabulary) -> Tagger:
        return cls(vocabulary, Perceptron.from_payload(payload, vocabulary))
