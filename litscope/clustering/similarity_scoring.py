#!/usr/bin/env python3
"""
Similarity scoring module for records.
Distance and similarity primitives shared by every clustering algorithm.
"""
import logging
from typing import AbstractSet, Optional, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as pairwise_cosine
from sklearn.metrics.pairwise import euclidean_distances

from litscope.errors import InvalidInputError
from litscope.models import Document

logger = logging.getLogger(__name__)

# Composite text similarity weights
TFIDF_WEIGHT = 0.6
KEYWORD_WEIGHT = 0.3
TERM_WEIGHT = 0.1


def _as_pair(vec_a: Sequence[float], vec_b: Sequence[float]):
    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    if a.shape != b.shape:
        raise InvalidInputError(f"Vectors must have the same length, got {a.size} and {b.size}")
    return a, b


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0.0 when either vector is all zeros.

    Raises:
        InvalidInputError: If the vectors differ in length
    """
    a, b = _as_pair(vec_a, vec_b)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def euclidean_distance(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Euclidean distance between two vectors.

    Raises:
        InvalidInputError: If the vectors differ in length
    """
    a, b = _as_pair(vec_a, vec_b)
    return float(np.linalg.norm(a - b))


def jaccard_similarity(set_a: AbstractSet, set_b: AbstractSet) -> float:
    """Intersection over union; 0.0 when both sets are empty."""
    set_a, set_b = set(set_a), set(set_b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def text_similarity(doc_a: Document, doc_b: Document,
                    tfidf_a: Optional[Sequence[float]] = None,
                    tfidf_b: Optional[Sequence[float]] = None) -> float:
    """
    Weighted similarity of two documents.

    Combines TF-IDF cosine (only when both vectors are given), keyword Jaccard
    and controlled-term Jaccard.

    Args:
        doc_a: First document
        doc_b: Second document
        tfidf_a: Optional TF-IDF vector of doc_a
        tfidf_b: Optional TF-IDF vector of doc_b

    Returns:
        Similarity in [0, 1]
    """
    total = 0.0
    weights = 0.0

    if tfidf_a is not None and tfidf_b is not None:
        total += cosine_similarity(tfidf_a, tfidf_b) * TFIDF_WEIGHT
        weights += TFIDF_WEIGHT

    total += jaccard_similarity(set(doc_a.keywords), set(doc_b.keywords)) * KEYWORD_WEIGHT
    weights += KEYWORD_WEIGHT

    total += jaccard_similarity(set(doc_a.terms), set(doc_b.terms)) * TERM_WEIGHT
    weights += TERM_WEIGHT

    return total / weights if weights > 0 else 0.0


def calculate_similarity_matrix(vectors: np.ndarray, metric: str = 'cosine') -> np.ndarray:
    """
    Pairwise similarity matrix between row vectors.

    Args:
        vectors: (n, d) matrix
        metric: 'cosine', or 'euclidean' for 1 - distance / max_distance

    Returns:
        (n, n) similarity matrix
    """
    X = np.asarray(vectors, dtype=float)
    if X.size == 0:
        return np.zeros((X.shape[0], X.shape[0]))

    if metric == 'cosine':
        similarity_matrix = pairwise_cosine(X)
    elif metric == 'euclidean':
        distances = euclidean_distances(X)
        max_distance = np.max(distances)
        if max_distance > 0:
            similarity_matrix = 1 - (distances / max_distance)
        else:
            similarity_matrix = np.ones_like(distances)
    else:
        raise InvalidInputError(f"Unsupported metric: {metric}. Use 'cosine' or 'euclidean'")

    logger.debug(f"Similarity matrix calculated with shape: {similarity_matrix.shape}")
    return similarity_matrix


def pairwise_distances(vectors: np.ndarray) -> np.ndarray:
    """Full Euclidean distance matrix between row vectors."""
    X = np.asarray(vectors, dtype=float)
    if X.ndim != 2 or X.shape[0] == 0 or X.shape[1] == 0:
        return np.zeros((len(X), len(X)))
    distances = euclidean_distances(X)
    # euclidean_distances can leave tiny non-zero values on the diagonal
    np.fill_diagonal(distances, 0.0)
    return distances


__all__ = [
    'calculate_similarity_matrix',
    'cosine_similarity',
    'euclidean_distance',
    'jaccard_similarity',
    'pairwise_distances',
    'text_similarity',
]
