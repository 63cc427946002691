"""Typed failures raised by the tagging and chunking models.

Every error here is a deterministic function of its input, so none of them
is worth retrying. `EmptyCorpus` is a warning rather than an exception:
training on zero examples is accepted as a no-op, but the caller is told
that the resulting model only ever predicts its tie-break default.
"""
from __future__ import annotations
from typing import Optional

__all__ = ["TagChunkError", "UnknownLabel", "MalformedModel", "CyclicTaggerChain", "EmptyCorpus"]


class TagChunkError(Exception):
    """Base class for all tagchunk failures."""


class UnknownLabel(TagChunkError, KeyError):
    """A label string that does not resolve in the supplied vocabulary."""

    def __init__(self, label: str, vocabulary: Optional[str] = None):
        self.label = label
        self.vocabulary = vocabulary
        where = f" in vocabulary '{vocabulary}'" if vocabulary else ""
        super().__init__(f"Unknown label '{label}'{where}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return self.args[0]


class MalformedModel(TagChunkError, ValueError):
    """A serialized model payload that is structurally invalid."""


class CyclicTaggerChain(TagChunkError, ValueError):
    """Linking a fallback tagger would make a tagger its own fallback."""


class EmptyCorpus(UserWarning):
    """Training was called with zero examples."""
