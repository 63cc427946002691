"""Accuracy reports for trained taggers and chunkers.

Predictions and gold labels are collected into a pandas DataFrame, one row
per token, from which the overall and per-label accuracy are computed. The
chunker report also scores whole chunks (exact span and type match) with
precision, recall and F1, the usual CoNLL-2000 measure.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

import pandas as pd

from .chunker import Chunker, normalize_boundaries
from .data_validation import ChunkedInput, TaggedInput, iter_chunks, normalize_chunked, normalize_tagged
from .tagger import Tagger
from .types import split_boundary

__all__ = ["EvaluationReport", "evaluate_tagger", "evaluate_chunker"]


@dataclass
class EvaluationReport:
    """
    Summary of a model's predictions against gold data.

    Attributes:
        accuracy: Fraction of tokens labeled correctly.
        total: Number of tokens evaluated.
        per_label: For every gold label, its accuracy and support.
        chunk_precision: Chunk-level precision (chunker reports only).
        chunk_recall: Chunk-level recall (chunker reports only).
        chunk_f1: Chunk-level F1 (chunker reports only).
    """
    accuracy: float
    total: int
    per_label: Dict[str, Dict[str, float]] = field(default_factory=dict)
    chunk_precision: Optional[float] = None
    chunk_recall: Optional[float] = None
    chunk_f1: Optional[float] = None


def _token_report(rows: List[dict]) -> EvaluationReport:
    if not rows:
        return EvaluationReport(accuracy=0.0, total=0)
    df = pd.DataFrame(rows)
    df["correct"] = df["gold"] == df["predicted"]
    stats = df.groupby("gold")["correct"].agg(["mean", "count"])
    per_label = {
        str(label): {"accuracy": float(row["mean"]), "support": int(row["count"])}
        for label, row in stats.iterrows()
    }
    return EvaluationReport(accuracy=float(df["correct"].mean()), total=len(df), per_label=per_label)


def evaluate_tagger(tagger: Tagger, gold: Iterable[TaggedInput]) -> EvaluationReport:
    """
    Tags the tokens of every gold sentence and compares the tags.

    Args:
        tagger: The tagger chain to evaluate.
        gold: Gold tagged sentences.

    Returns:
        An `EvaluationReport`; empty gold data gives accuracy 0.0.
    """
    rows = []
    for sentence in normalize_tagged(gold, tagger.vocabulary):
        predicted = tagger.tag(sentence.tokens)
        for g, p in zip(sentence, predicted):
            rows.append({"token": g.token, "gold": g.tag, "predicted": p.tag})
    return _token_report(rows)


def _spans(labels: List[str], s_idx: int) -> Set[Tuple[int, int, int, str]]:
    spans = set()
    for start, end in iter_chunks(labels):
        _, chunk_type = split_boundary(labels[start])
        spans.add((s_idx, start, end, chunk_type))
    return spans


def evaluate_chunker(chunker: Chunker, gold: Iterable[ChunkedInput]) -> EvaluationReport:
    """
    Chunks the gold tagged sentences and compares boundaries and chunks.

    Token accuracy is measured on boundary labels, after illegal I- labels
    have been read as B- labels the way the chunker itself reads them.

    Args:
        chunker: The chunker to evaluate.
        gold: Gold chunked sentences.

    Returns:
        An `EvaluationReport` including chunk-level precision, recall and F1.
    """
    rows = []
    gold_spans: Set[Tuple[int, int, int, str]] = set()
    pred_spans: Set[Tuple[int, int, int, str]] = set()
    for s_idx, sentence in enumerate(normalize_chunked(gold, chunker.chunk_types)):
        tagged = sentence.tagged()
        gold_labels = sentence.boundary_labels()
        pred_labels = normalize_boundaries(chunker.boundaries(tagged))
        for item, g, p in zip(tagged, gold_labels, pred_labels):
            rows.append({"token": item.token, "gold": g, "predicted": p})
        gold_spans |= _spans(gold_labels, s_idx)
        pred_spans |= _spans(pred_labels, s_idx)

    report = _token_report(rows)
    hits = len(gold_spans & pred_spans)
    precision = hits / len(pred_spans) if pred_spans else 0.0
    recall = hits / len(gold_spans) if gold_spans else 0.0
    report.chunk_precision = precision
    report.chunk_recall = recall
    report.chunk_f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0
    return report
