import pytest

from tagchunk.data_validation import iter_chunks, normalize_chunked, normalize_tagged, validate
from tagchunk.errors import UnknownLabel
from tagchunk.types import Chunk, ChunkedSentence, TaggedSentence
from tagchunk.vocabulary import BROWN, CONLL_CHUNK


def test_iter_chunks_spans() -> None:
    labels = ["B-NP", "I-NP", "B-NP", "O", "B-VP", "I-VP"]
    assert list(iter_chunks(labels)) == [(0, 1), (2, 2), (4, 5)]
    assert list(iter_chunks(["O", "O"])) == []
    assert list(iter_chunks([])) == []


def test_validate_reports_issues() -> None:
    corpus = [
        TaggedSentence.from_pairs([("dog", "NN"), ("barks", "VERB")]),
        TaggedSentence(()),
    ]
    report = validate(corpus, BROWN)

    assert report["issue_count"] == 2
    unknown, empty = report["issues"]
    assert unknown["type"] == "unknown_label_error"
    assert unknown["idx"] == 1
    assert unknown["label"] == "VERB"
    assert empty["type"] == "empty_sentence_warning"
    assert empty["sentence"] == 1


def test_normalize_tagged_counts_unknown_labels() -> None:
    corpus = [[("dog", "NOUN")], [("cat", "NOUN"), ("sat", "VBD")]]
    with pytest.raises(UnknownLabel) as exc:
        normalize_tagged(corpus, BROWN)
    assert exc.value.label == "NOUN"
    assert "2 unknown label(s)" in str(exc.value)


def test_normalize_tagged_resolves_tags(dog_tagged) -> None:
    corpus = normalize_tagged([[("Dog", "nn-tl")], dog_tagged], BROWN)
    assert corpus[0].tags == ("NN",)
    assert corpus[1].tokens == ("The", "dog", "jumped", ".")


def test_normalize_chunked_resolves_chunk_types() -> None:
    corpus = normalize_chunked([[("dog", "NN", "B-np")]], CONLL_CHUNK)
    assert corpus == [ChunkedSentence((Chunk("NP", TaggedSentence.from_pairs([("dog", "NN")]).items),))]


def test_normalize_chunked_rejects_unknown_type() -> None:
    with pytest.raises(UnknownLabel) as exc:
        normalize_chunked([[("dog", "NN", "B-NOUNPHRASE")]], CONLL_CHUNK)
    assert exc.value.label == "NOUNPHRASE"


def test_normalize_chunked_rejects_bad_triples() -> None:
    with pytest.raises(ValueError):
        normalize_chunked([[("dog", "NN")]], CONLL_CHUNK)
    with pytest.raises(ValueError):
        normalize_chunked([[("dog", "NN", "NP")]], CONLL_CHUNK)


def test_normalize_chunked_checks_pos_tags() -> None:
    corpus = [[("dog", "NN", "B-NP"), ("barks", "VERB", "B-VP"), (".", "PUNCT", "O")]]
    with pytest.raises(UnknownLabel) as exc:
        normalize_chunked(corpus, CONLL_CHUNK, BROWN)
    assert exc.value.label == "VERB"
    assert "2 unknown label(s)" in str(exc.value)

    # Without a POS vocabulary the tags pass through unchecked.
    assert len(normalize_chunked(corpus, CONLL_CHUNK)) == 1


def test_normalize_chunked_resolves_pos_tags_of_chunks_and_chinks() -> None:
    corpus = normalize_chunked([[("dog", "nn-tl", "B-NP"), (".", ".", "O")]], CONLL_CHUNK, BROWN)
    assert corpus[0].tagged().tags == ("NN", ".")
