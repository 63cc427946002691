"""Averaged perceptron: the learned scorer behind the tagger and the chunker.

The classifier keeps a sparse weight table `weights[feature][label]` and
scores a label as the sum of the weights of the active features. Training
is the classic online perceptron: predict greedily, and on a mistake move
the weights of the active features towards the correct label and away
from the predicted one.

Averaging is done lazily. Instead of summing the whole weight table after
every update, each (feature, label) entry remembers the timestamp of its
last change and a running total. When an entry changes, the old weight is
credited for the time it stayed in effect; `average()` closes every entry
out to the current clock and divides by the number of updates. The
result equals the mean of the weight table taken after every update.
"""
from __future__ import annotations
from logging import getLogger
import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import warnings

import numpy as np
from tqdm import tqdm

from .config import Config, resolve_config
from .errors import EmptyCorpus, MalformedModel, UnknownLabel
from .features import START
from .types import FeatureVector
from .vocabulary import TagVocabulary

logger = getLogger(__name__)

__all__ = ["Perceptron", "Featurizer"]

Featurizer = Callable[[Any, int, str, str], FeatureVector]


class Perceptron:
    """
    An averaged perceptron classifier bound to one label vocabulary.

    A model is created empty, mutated only by `update` / `train`, and turned
    into a read-only snapshot by `average()`. Snapshots are what taggers use
    for inference and what gets serialized.

    Attributes:
        vocabulary: The vocabulary the label alphabet is drawn from.
        labels: The label alphabet in tie-break order.
        weights: The weight table, `weights[feature][label] -> float`.
        instances: The global update clock (number of `update` calls).
        finalized: True for averaged, read-only snapshots.
    """
    def __init__(
        self,
        vocabulary: TagVocabulary,
        labels: Optional[Iterable[str]] = None,
        weights: Optional[Dict[str, Dict[str, float]]] = None,
        finalized: bool = False,
    ):
        self.vocabulary = vocabulary
        self.labels: Tuple[str, ...] = tuple(labels) if labels is not None else vocabulary.labels
        if not self.labels:
            raise ValueError("A perceptron needs at least one label.")
        self._ranks = {label: i for i, label in enumerate(self.labels)}
        self.weights: Dict[str, Dict[str, float]] = weights if weights is not None else {}
        self.instances = 0
        self.finalized = finalized
        self._totals: Dict[Tuple[str, str], float] = {}
        self._tstamps: Dict[Tuple[str, str], int] = {}

    @property
    def default_label(self) -> str:
        """The label that wins when every label scores the same."""
        return self.labels[0]

    def score(self, features: FeatureVector) -> Dict[str, float]:
        """
        Scores every label of the alphabet against a feature vector.

        Features without an entry in the weight table contribute nothing.

        Args:
            features: The active features and their counts.

        Returns:
            A dictionary mapping each label to its score.
        """
        scores = dict.fromkeys(self.labels, 0.0)
        for feature, value in features.items():
            if not value:
                continue
            row = self.weights.get(feature)
            if not row:
                continue
            for label, weight in row.items():
                if label in scores:
                    scores[label] += value * weight
        return scores

    def predict(self, features: FeatureVector) -> str:
        """Returns the best-scoring label; ties go to the earliest label in the alphabet."""
        scores = self.score(features)
        return min(self.labels, key=lambda label: (-scores[label], self._ranks[label]))

    def update(
        self,
        features: FeatureVector,
        predicted: str,
        correct: str,
        timestamp: Optional[int] = None,
    ) -> None:
        """
        Applies one perceptron update and advances the clock.

        Args:
            features: The features active for the example.
            predicted: The label the model predicted.
            correct: The gold label.
            timestamp: The clock value of this update. Defaults to the
                       current `instances` count; must not go backwards.

        Raises:
            ValueError: On a finalized snapshot, or if `timestamp` is older
                        than the clock.
            UnknownLabel: If either label is not in the alphabet.
        """
        if self.finalized:
            raise ValueError("Cannot update a finalized (averaged) perceptron.")
        now = self.instances if timestamp is None else timestamp
        if now < self.instances:
            raise ValueError(f"Timestamp {now} is older than the model clock {self.instances}.")
        for label in (predicted, correct):
            if label not in self._ranks:
                raise UnknownLabel(label, self.vocabulary.name)
        self.instances = now + 1
        if predicted == correct:
            return
        for feature in features:
            self._update_feature(feature, correct, 1.0, now)
            self._update_feature(feature, predicted, -1.0, now)

    def _update_feature(self, feature: str, label: str, delta: float, now: int) -> None:
        row = self.weights.setdefault(feature, {})
        weight = row.get(label, 0.0)
        key = (feature, label)
        self._totals[key] = self._totals.get(key, 0.0) + (now - self._tstamps.get(key, 0)) * weight
        self._tstamps[key] = now
        row[label] = weight + delta

    def average(self) -> "Perceptron":
        """
        Builds the averaged, read-only snapshot of the current weights.

        The live table and its bookkeeping are left untouched, so training
        could continue afterwards.

        Returns:
            A new finalized `Perceptron`.
        """
        if self.finalized:
            return self
        if self.instances == 0:
            averaged = self._copy_weights()
        else:
            averaged = {}
            for feature, row in self.weights.items():
                for label, weight in row.items():
                    key = (feature, label)
                    total = self._totals.get(key, 0.0)
                    total += (self.instances - self._tstamps.get(key, 0)) * weight
                    value = total / self.instances
                    if value:
                        averaged.setdefault(feature, {})[label] = value
        return Perceptron(self.vocabulary, self.labels, averaged, finalized=True)

    def _copy_weights(self) -> Dict[str, Dict[str, float]]:
        return {feature: dict(row) for feature, row in self.weights.items()}

    def live_copy(self) -> "Perceptron":
        """
        Returns a private, trainable copy of this model.

        A live model is copied with its bookkeeping so training can resume
        where it stopped. A finalized snapshot restarts from its averaged
        weights with a fresh clock.
        """
        model = Perceptron(self.vocabulary, self.labels, self._copy_weights())
        if not self.finalized:
            model.instances = self.instances
            model._totals = dict(self._totals)
            model._tstamps = dict(self._tstamps)
        return model

    def predict_sequence(self, inputs: Any, length: int, featurize: Featurizer) -> List[str]:
        """Labels a sequence greedily, left to right, feeding back the predicted history."""
        prev, prev2 = START
        out = []
        for i in range(length):
            guess = self.predict(featurize(inputs, i, prev, prev2))
            out.append(guess)
            prev2, prev = prev, guess
        return out

    def train(
        self,
        examples: Sequence[Tuple[Any, Sequence[str]]],
        featurize: Featurizer,
        cfg: Optional[Config] = None,
    ) -> "Perceptron":
        """
        Trains a copy of this model on labeled sequences.

        Each example is an `(inputs, gold_labels)` pair; `featurize(inputs,
        i, prev, prev2)` builds the features for position `i` given the two
        previously predicted labels. Every pass walks the examples in order,
        tagging greedily with the current (not averaged) weights and calling
        `update` after every position. With `cfg.shuffle` the example order
        is reshuffled between passes by a generator seeded with `cfg.seed`.

        Args:
            examples: The training sequences.
            featurize: The feature extraction function.
            cfg: Training configuration; defaults to `Config()`.

        Returns:
            The trained live model. Call `average()` on it to finalize.

        Raises:
            UnknownLabel: If a gold label is not in the alphabet. Nothing is
                          trained in that case.
        """
        cfg = resolve_config(cfg)
        examples = list(examples)
        for _, gold in examples:
            for label in gold:
                if label not in self._ranks:
                    raise UnknownLabel(label, self.vocabulary.name)

        model = self.live_copy()
        if not examples:
            warnings.warn(
                EmptyCorpus(
                    "Training called with zero examples; the model will only "
                    f"predict its default label '{model.default_label}'."
                ),
                stacklevel=2,
            )
            return model

        rng = np.random.default_rng(cfg.seed)
        order = np.arange(len(examples))
        n_tokens = sum(len(gold) for _, gold in examples)
        for pass_idx in tqdm(range(cfg.passes), desc="Training passes", disable=not cfg.show_progress):
            errors = 0
            for idx in order:
                inputs, gold = examples[int(idx)]
                prev, prev2 = START
                for i, truth in enumerate(gold):
                    features = featurize(inputs, i, prev, prev2)
                    guess = model.predict(features)
                    model.update(features, guess, truth)
                    if guess != truth:
                        errors += 1
                    prev2, prev = prev, guess
            logger.debug("Pass %d/%d: %d/%d errors", pass_idx + 1, cfg.passes, errors, n_tokens)
            if cfg.shuffle:
                order = rng.permutation(len(examples))

        logger.info(
            "Trained perceptron on %d sequences (%d passes, %d updates, %d features)",
            len(examples), cfg.passes, model.instances, len(model.weights),
        )
        return model

    # --- Serialization ---
    def to_payload(self) -> Dict[str, Any]:
        """
        Encodes the label alphabet and weight table as JSON-ready data.

        Training bookkeeping is not included: a decoded model is a
        read-only snapshot.
        """
        triples = [
            [feature, label, weight]
            for feature, row in sorted(self.weights.items())
            for label, weight in sorted(row.items())
        ]
        return {"type": "perceptron", "labels": list(self.labels), "weights": triples}

    @classmethod
    def from_payload(cls, payload: Any, vocabulary: TagVocabulary) -> "Perceptron":
        """
        Decodes a payload produced by `to_payload`.

        Raises:
            UnknownLabel: If a label does not resolve in `vocabulary`.
            MalformedModel: If the payload structure is invalid.
        """
        if not isinstance(payload, dict):
            raise MalformedModel("Perceptron payload must be an object.")
        raw_labels = payload.get("labels")
        raw_weights = payload.get("weights")
        if not isinstance(raw_labels, list) or not raw_labels:
            raise MalformedModel("Perceptron payload needs a non-empty 'labels' list.")
        if not isinstance(raw_weights, list):
            raise MalformedModel("Perceptron payload needs a 'weights' list.")

        labels = []
        for raw in raw_labels:
            if not isinstance(raw, str):
                raise MalformedModel(f"Label {raw!r} is not a string.")
            labels.append(vocabulary.resolve(raw))
        if len(set(labels)) != len(labels):
            raise MalformedModel("Duplicate labels in perceptron alphabet.")
        alphabet = set(labels)

        weights: Dict[str, Dict[str, float]] = {}
        for triple in raw_weights:
            if not isinstance(triple, list) or len(triple) != 3:
                raise MalformedModel(f"Expected a [feature, label, weight] triple, got {triple!r}")
            feature, raw_label, weight = triple
            if not isinstance(feature, str) or not isinstance(raw_label, str):
                raise MalformedModel(f"Feature and label must be strings in {triple!r}")
            if isinstance(weight, bool) or not isinstance(weight, (int, float)):
                raise MalformedModel(f"Weight must be a number in {triple!r}")
            try:
                value = float(weight)
            except OverflowError:
                value = math.inf
            if not math.isfinite(value):
                raise MalformedModel(f"Weight must be finite in {triple!r}")
            label = vocabulary.resolve(raw_label)
            if label not in alphabet:
                raise MalformedModel(f"Label '{label}' is not in the payload's alphabet.")
            weights.setdefault(feature, {})[label] = value
        return cls(vocabulary, labels, weights, finalized=True)
