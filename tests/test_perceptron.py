import pytest

from tagchunk.config import Config
from tagchunk.errors import EmptyCorpus, MalformedModel, UnknownLabel
from tagchunk.perceptron import Perceptron
from tagchunk.vocabulary import BROWN, TagVocabulary


def _ab() -> TagVocabulary:
    return TagVocabulary("ab", ["A", "B"])


def test_lazy_average_matches_mean_of_weight_tables() -> None:
    model = Perceptron(_ab())
    f = {"f": 1}
    model.update(f, predicted="B", correct="A")
    model.update(f, predicted="A", correct="A")
    model.update(f, predicted="A", correct="B")
    model.update(f, predicted="B", correct="B")

    # Live weights after each update: A = 1, 1, 0, 0 and B = -1, -1, 0, 0.
    assert model.instances == 4
    assert model.weights["f"] == {"A": 0.0, "B": 0.0}

    averaged = model.average()
    assert averaged.finalized
    assert averaged.weights["f"]["A"] == pytest.approx(0.5)
    assert averaged.weights["f"]["B"] == pytest.approx(-0.5)


def test_average_drops_zero_weights_and_keeps_live_model() -> None:
    model = Perceptron(_ab())
    model.update({"f": 1, "g": 1}, predicted="B", correct="A")
    averaged = model.average()

    assert averaged.weights == {"f": {"A": 1.0, "B": -1.0}, "g": {"A": 1.0, "B": -1.0}}
    assert not model.finalized
    assert averaged.average() is averaged


def test_explicit_timestamps_credit_idle_time() -> None:
    model = Perceptron(_ab())
    model.update({"f": 1}, predicted="B", correct="A", timestamp=0)
    model.update({"f": 1}, predicted="A", correct="B", timestamp=3)

    # A holds weight 1 for clock values 0..2 and 0 afterwards.
    averaged = model.average()
    assert model.instances == 4
    assert averaged.weights["f"]["A"] == pytest.approx(0.75)


def test_timestamp_cannot_go_backwards() -> None:
    model = Perceptron(_ab())
    model.update({"f": 1}, predicted="B", correct="A", timestamp=5)
    with pytest.raises(ValueError):
        model.update({"f": 1}, predicted="B", correct="A", timestamp=2)


def test_empty_model_predicts_default_every_time() -> None:
    model = Perceptron(BROWN)
    assert model.default_label == "UNK"
    for features in ({}, {"bias": 1}, {"i word dog": 1, "i suffix dog": 1}):
        assert model.predict(features) == "UNK"
        assert model.predict(features) == "UNK"


def test_ties_go_to_earliest_label() -> None:
    model = Perceptron(TagVocabulary("xyz", ["X", "Y", "Z"]))
    model.weights = {"f": {"Y": 2.0, "Z": 2.0}}
    assert model.predict({"f": 1}) == "Y"
    model.weights = {"f": {"X": -1.0}}
    assert model.predict({"f": 1}) == "Y"


def test_score_ignores_unknown_features() -> None:
    model = Perceptron(_ab(), weights={"f": {"A": 1.5}})
    scores = model.score({"f": 2, "unseen": 1})
    assert scores == {"A": 3.0, "B": 0.0}


def test_finalized_model_rejects_updates() -> None:
    averaged = Perceptron(_ab()).average()
    with pytest.raises(ValueError):
        averaged.update({"f": 1}, predicted="A", correct="B")


def test_update_rejects_labels_outside_alphabet() -> None:
    model = Perceptron(_ab())
    with pytest.raises(UnknownLabel) as exc:
        model.update({"f": 1}, predicted="A", correct="C")
    assert exc.value.label == "C"
    assert model.instances == 0


def _featurize(inputs, i, prev, prev2):
    return {f"w={inputs[i]}": 1, f"prev={prev}": 1}


def test_train_returns_new_model_and_leaves_receiver_untouched() -> None:
    model = Perceptron(_ab())
    trained = model.train([(["x", "y"], ["B", "A"])], _featurize, Config(passes=2))

    assert model.weights == {}
    assert model.instances == 0
    assert trained.instances == 4
    assert trained.average().predict_sequence(["x", "y"], 2, _featurize) == ["B", "A"]


def test_train_is_reproducible_with_same_seed() -> None:
    examples = [(["x", "y"], ["B", "A"]), (["y", "x"], ["A", "B"]), (["x"], ["B"])]
    cfg = Config(passes=3, shuffle=True, seed=7)
    first = Perceptron(_ab()).train(examples, _featurize, cfg).average()
    second = Perceptron(_ab()).train(examples, _featurize, cfg).average()
    assert first.weights == second.weights


def test_train_with_zero_examples_warns() -> None:
    with pytest.warns(EmptyCorpus):
        trained = Perceptron(BROWN).train([], _featurize)
    assert trained.average().predict({"w=x": 1}) == "UNK"


def test_train_rejects_unknown_gold_label_before_training() -> None:
    with pytest.raises(UnknownLabel):
        Perceptron(_ab()).train([(["x"], ["A"]), (["y"], ["Q"])], _featurize)


def test_payload_round_trip() -> None:
    model = Perceptron(_ab())
    model.update({"f": 1}, predicted="B", correct="A")
    averaged = model.average()

    payload = averaged.to_payload()
    assert payload["labels"] == ["A", "B"]
    assert payload["weights"] == [["f", "A", 1.0], ["f", "B", -1.0]]

    decoded = Perceptron.from_payload(payload, _ab())
    assert decoded.finalized
    assert decoded.weights == averaged.weights


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"labels": [], "weights": []},
        {"labels": ["A"], "weights": {}},
        {"labels": ["A", "A"], "weights": []},
        {"labels": ["A"], "weights": [["f", "A"]]},
        {"labels": ["A"], "weights": [["f", "A", "1.0"]]},
        {"labels": ["A"], "weights": [["f", "B", 1.0]]},
    ],
)
def test_from_payload_rejects_malformed_structures(payload) -> None:
    with pytest.raises(MalformedModel):
        Perceptron.from_payload(payload, _ab())


def test_from_payload_rejects_unknown_labels() -> None:
    with pytest.raises(UnknownLabel):
        Perceptron.from_payload({"labels": ["A", "C"], "weights": []}, _ab())
