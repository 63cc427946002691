from tagchunk.features import (
    START,
    chunker_context,
    chunker_features,
    normalize_word,
    padded_context,
    tagger_features,
    word_shape,
)


def test_normalize_word() -> None:
    assert normalize_word("Dog") == "dog"
    assert normalize_word("well-known") == "!HYPHEN"
    assert normalize_word("-") == "-"
    assert normalize_word("1999") == "!YEAR"
    assert normalize_word("42") == "!DIGITS"
    assert normalize_word("3rd") == "!DIGITS"


def test_word_shape() -> None:
    assert word_shape("Dog") == "Xx"
    assert word_shape("1999") == "d"
    assert word_shape("U.S.") == "X.X."
    assert word_shape("") == ""


def test_padded_context() -> None:
    assert padded_context(["The", "dog"]) == ["-START-", "-START2-", "the", "dog", "-END-", "-END2-"]


def test_tagger_features_use_context_and_history() -> None:
    context = padded_context(["The", "dog", "jumped"])
    features = tagger_features(context, 1, "AT", START[0])

    assert features["bias"] == 1
    assert features["i word dog"] == 1
    assert features["i-1 word the"] == 1
    assert features["i+1 word jumped"] == 1
    assert features["i-1 tag AT"] == 1
    assert features["i-1 tag+i word AT dog"] == 1
    assert features["i+2 word -END-"] == 1
    assert len(features) == 14


def test_chunker_features_use_tags_and_labels() -> None:
    context = chunker_context(["The", "Dog"], ["AT", "NN"])
    features = chunker_features(context, 1, "B-NP", START[0])

    assert features["i pos NN"] == 1
    assert features["i-1 pos AT"] == 1
    assert features["i-1 pos+i pos AT NN"] == 1
    assert features["i shape Xx"] == 1
    assert features["i-1 label B-NP"] == 1
    assert features["i+1 pos -END-"] == 1
    assert len(features) == 16


def test_chunker_context_pads_once() -> None:
    pwords, ptags, words = chunker_context(["The", "Dog"], ["AT", "NN"])
    assert pwords == ["-START-", "-START2-", "the", "dog", "-END-", "-END2-"]
    assert ptags == ["-START-", "-START2-", "AT", "NN", "-END-", "-END2-"]
    assert list(words) == ["The", "Dog"]
