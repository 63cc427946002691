"""Versioned serialization of tagger chains and chunkers.

Models are written as UTF-8 JSON with a small envelope:

    {"format": "tagchunk-model", "version": 1, "kind": "tagger",
     "stages": [<stage payload>, ...]}

The stage payloads are listed head first, so decoding rebuilds the same
chain topology. Each payload names its stage `type`; a perceptron payload
carries its label alphabet and `[feature, label, weight]` triples.

Decoding needs the caller's vocabulary: labels are stored by name and are
resolved again on the way in. Decoding either returns a complete model or
raises; a half-built chain is never handed out.
"""
from __future__ import annotations
import json
from logging import getLogger
from typing import Any, Dict, Mapping, Type

from .errors import MalformedModel
from .tagger import LiteralTagger, PerceptronTagger, Tagger, UnambiguousTagger, chain
from .vocabulary import TagVocabulary

logger = getLogger(__name__)

__all__ = ["FORMAT", "VERSION", "TAGGER_TABLE", "serialize", "deserialize", "dump_envelope", "load_envelope"]

FORMAT = "tagchunk-model"
VERSION = 1

TAGGER_TABLE: Dict[str, Type[Tagger]] = {
    LiteralTagger.TYPE: LiteralTagger,
    UnambiguousTagger.TYPE: UnambiguousTagger,
    PerceptronTagger.TYPE: PerceptronTagger,
}


def dump_envelope(kind: str, body: Dict[str, Any]) -> bytes:
    """Wraps a model body in the versioned envelope and encodes it."""
    envelope = {"format": FORMAT, "version": VERSION, "kind": kind}
    envelope.update(body)
    payload = json.dumps(envelope, ensure_ascii=False, sort_keys=True).encode("utf-8")
    logger.debug("Serialized %s model (%d bytes)", kind, len(payload))
    return payload


def load_envelope(payload: bytes, kind: str) -> Dict[str, Any]:
    """
    Decodes a payload and checks its envelope.

    Args:
        payload: The serialized model.
        kind: The expected model kind ("tagger" or "chunker").

    Returns:
        The decoded envelope dictionary.

    Raises:
        MalformedModel: If the bytes are not valid JSON, or the format
                        marker, version or kind do not match.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedModel(f"Model payload is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedModel("Model payload must be a JSON object.")
    if data.get("format") != FORMAT:
        raise MalformedModel(f"Unexpected format marker {data.get('format')!r}, expected '{FORMAT}'.")
    if data.get("version") != VERSION:
        raise MalformedModel(f"Unsupported format version {data.get('version')!r}, expected {VERSION}.")
    if data.get("kind") != kind:
        raise MalformedModel(f"Payload holds a {data.get('kind')!r} model, expected '{kind}'.")
    return data


def serialize(tagger: Tagger) -> bytes:
    """Encodes a tagger chain, head stage first."""
    return dump_envelope("tagger", {"stages": [stage.to_payload() for stage in tagger.stages()]})


def deserialize(
    payload: bytes,
    vocabulary: TagVocabulary,
    table: Mapping[str, Type[Tagger]] = TAGGER_TABLE,
) -> Tagger:
    """
    Rebuilds a tagger chain from `serialize` output.

    Args:
        payload: The serialized chain.
        vocabulary: The vocabulary every stored tag must resolve in.
        table: Maps stage type names to tagger classes.

    Returns:
        The head of the rebuilt chain.

    Raises:
        UnknownLabel: If a stored tag is not in `vocabulary`.
        MalformedModel: If the payload is structurally invalid.
        CyclicTaggerChain: Never for payloads written by `serialize`; the
                           chain is relinked through the usual checks.
    """
    data = load_envelope(payload, "tagger")
    stage_payloads = data.get("stages")
    if not isinstance(stage_payloads, list) or not stage_payloads:
        raise MalformedModel("Tagger payload needs a non-empty 'stages' list.")

    stages = []
    for stage_payload in stage_payloads:
        if not isinstance(stage_payload, dict):
            raise MalformedModel(f"Stage payload must be an object, got {stage_payload!r}")
        stage_type = stage_payload.get("type")
        cls = table.get(stage_type) if isinstance(stage_type, str) else None
        if cls is None:
            raise MalformedModel(f"Unknown tagger stage type {stage_type!r}")
        stages.append(cls.from_payload(stage_payload, vocabulary))
    return chain(*stages)
