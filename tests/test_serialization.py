import json

import pytest

from tagchunk.errors import MalformedModel, UnknownLabel
from tagchunk.serialization import FORMAT, VERSION, deserialize, serialize
from tagchunk.tagger import LiteralTagger, PerceptronTagger, UnambiguousTagger, chain
from tagchunk.vocabulary import BROWN, CONLL_POS

TOKENS = ["The", "dog", "jumped", "."]


def _round_trip(tagger):
    payload = serialize(tagger)
    restored = deserialize(payload, BROWN)
    assert serialize(restored) == payload
    return restored


def test_literal_round_trip() -> None:
    tagger = LiteralTagger(BROWN, {"Dog": "NN", "the": "AT"}, case_sensitive=False)
    restored = _round_trip(tagger)

    assert isinstance(restored, LiteralTagger)
    assert restored.case_sensitive is False
    assert restored.tag(TOKENS) == tagger.tag(TOKENS)


def test_unambiguous_round_trip(dog_tagged) -> None:
    tagger = UnambiguousTagger(BROWN).train([dog_tagged])
    restored = _round_trip(tagger)

    assert isinstance(restored, UnambiguousTagger)
    assert restored.table == tagger.table


def test_perceptron_round_trip(dog_tagged, one_pass) -> None:
    tagger = PerceptronTagger(BROWN).train([dog_tagged], one_pass)
    restored = _round_trip(tagger)

    assert restored.perceptron.weights == tagger.perceptron.weights
    assert restored.perceptron.finalized
    assert restored.tag(TOKENS).tags == ("AT", "NN", "VBD", ".")


def test_chain_round_trip_keeps_topology(dog_tagged, one_pass) -> None:
    tagger = chain(UnambiguousTagger(BROWN), PerceptronTagger(BROWN)).train([dog_tagged], one_pass)
    restored = _round_trip(tagger)

    assert [type(s) for s in restored.stages()] == [UnambiguousTagger, PerceptronTagger]
    for tokens in (TOKENS, ["A", "dog", "."], []):
        assert restored.tag(tokens) == tagger.tag(tokens)


def test_envelope_fields() -> None:
    data = json.loads(serialize(PerceptronTagger(BROWN)).decode("utf-8"))
    assert data["format"] == FORMAT
    assert data["version"] == VERSION
    assert data["kind"] == "tagger"
    assert [s["type"] for s in data["stages"]] == ["perceptron"]


def test_unknown_label_on_foreign_vocabulary() -> None:
    payload = serialize(LiteralTagger(BROWN, {"the": "AT"}))
    with pytest.raises(UnknownLabel) as exc:
        deserialize(payload, CONLL_POS)
    assert exc.value.label == "AT"


def _payload(**overrides) -> bytes:
    data = json.loads(serialize(LiteralTagger(BROWN, {"the": "AT"})).decode("utf-8"))
    data.update(overrides)
    return json.dumps(data).encode("utf-8")


@pytest.mark.parametrize(
    "payload",
    [
        b"not json at all",
        b"\xff\xfe",
        b"[1, 2, 3]",
        _payload(format="something-else"),
        _payload(version=2),
        _payload(kind="chunker"),
        _payload(stages=[]),
        _payload(stages=[{"type": "bogus"}]),
        _payload(stages=["literal"]),
        _payload(stages=[{"type": "literal", "table": {"the": "AT"}}]),
        _payload(stages=[{"type": "unambiguous", "table": {"the": 3}}]),
        _payload(stages=[{"type": "perceptron", "labels": ["UNK"], "weights": [["f", "UNK"]]}]),
        _payload(stages=[{"type": "perceptron", "labels": ["UNK", "NN"], "weights": [["bias", "NN", float("nan")]]}]),
        _payload(stages=[{"type": "perceptron", "labels": ["UNK", "NN"], "weights": [["bias", "NN", float("inf")]]}]),
        b'{"format": "tagchunk-model", "version": 1, "kind": "tagger", "stages": [{"type": "perceptron", "labels": ["NN"], "weights": [["bias", "NN", -Infinity]]}]}',
    ],
)
def test_malformed_payloads(payload: bytes) -> None:
    with pytest.raises(MalformedModel):
        deserialize(payload, BROWN)
