import pytest

from tagchunk.errors import TagChunkError, UnknownLabel
from tagchunk.vocabulary import BROWN, CONLL_CHUNK, CONLL_POS, TagVocabulary, boundary_vocabulary, get_vocabulary


def test_default_label_ranks_first() -> None:
    assert BROWN.labels[0] == "UNK"
    assert BROWN.rank("UNK") == 0
    assert CONLL_POS.labels[0] == "UNK"
    vocab = TagVocabulary("v", ["B", "UNK", "A"], default="UNK")
    assert vocab.labels == ("UNK", "B", "A")


def test_brown_normalization() -> None:
    assert BROWN.resolve("nn") == "NN"
    assert BROWN.resolve("NN-TL") == "NN"
    assert BROWN.resolve("jj-tl-hl") == "JJ"
    assert BROWN.resolve("FW-IN") == "FW"
    assert "np$" in BROWN


def test_unknown_label_is_strict() -> None:
    with pytest.raises(UnknownLabel) as exc:
        BROWN.resolve("NOUN")
    assert exc.value.label == "NOUN"
    assert exc.value.vocabulary == "brown"
    assert isinstance(exc.value, KeyError)
    assert isinstance(exc.value, TagChunkError)
    assert "NOUN" in str(exc.value)
    assert "NOUN" not in BROWN


def test_conll_pos_is_case_sensitive() -> None:
    assert CONLL_POS.resolve("NNP") == "NNP"
    with pytest.raises(UnknownLabel):
        CONLL_POS.resolve("nnp")


def test_rank_of_unknown_label() -> None:
    with pytest.raises(UnknownLabel):
        BROWN.rank("NOUN")


def test_boundary_vocabulary() -> None:
    labels = boundary_vocabulary(CONLL_CHUNK)
    assert labels.name == "conll-chunk-boundary"
    assert labels.labels[:3] == ("O", "B-ADJP", "I-ADJP")
    assert len(labels) == 1 + 2 * len(CONLL_CHUNK)
    assert labels.resolve("b-np") == "B-NP"
    assert labels.resolve("o") == "O"
    with pytest.raises(UnknownLabel):
        labels.resolve("B-FOO")


def test_vocabulary_equality() -> None:
    assert TagVocabulary("v", ["A", "B"]) == TagVocabulary("v", ["A", "B"])
    assert TagVocabulary("v", ["A", "B"]) != TagVocabulary("v", ["B", "A"])
    assert boundary_vocabulary(CONLL_CHUNK) == boundary_vocabulary(CONLL_CHUNK)


def test_empty_vocabulary_is_rejected() -> None:
    with pytest.raises(ValueError):
        TagVocabulary("empty", [])


def test_get_vocabulary() -> None:
    assert get_vocabulary("brown") is BROWN
    with pytest.raises(KeyError):
        get_vocabulary("universal")


@pytest.mark.parametrize("tag", ["BEZ*", "DOD*", "HV*", "PPS+BEZ", "PPSS+MD", "NIL"])
def test_brown_negated_and_contracted_tags(tag: str) -> None:
    assert tag in BROWN
    assert BROWN.resolve(tag) == tag


def test_brown_compound_tags_keep_their_parts() -> None:
    assert BROWN.resolve("pps+bez-tl") == "PPS+BEZ"
    assert BROWN.resolve("bez*") == "BEZ*"
    assert BROWN.resolve("BEZ*") != BROWN.resolve("BEZ")
