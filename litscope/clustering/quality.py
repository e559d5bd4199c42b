#!/usr/bin/env python3
"""
Cluster quality metrics and cluster utilities.
Inertia, sampled silhouette, modularity, palette colors and cluster ids.
"""
import itertools
import logging
import time
import uuid
from typing import Sequence, Union

import numpy as np

from litscope import config as settings

logger = logging.getLogger(__name__)

CLUSTER_COLORS = [
    "#3B82F6", "#EF4444", "#10B981", "#F59E0B", "#8B5CF6",
    "#EC4899", "#14B8A6", "#F97316", "#84CC16", "#6366F1",
    "#DC2626", "#059669", "#D97706", "#7C3AED", "#DB2777",
    "#0D9488", "#EA580C", "#65A30D", "#5B21B6", "#BE185D",
]

_id_sequence = itertools.count()

RandomState = Union[None, int, np.random.Generator]


def get_cluster_color(cluster_index: int) -> str:
    """Palette color for the n-th cluster, cycling past the end of the palette."""
    return CLUSTER_COLORS[cluster_index % len(CLUSTER_COLORS)]


def generate_cluster_id() -> str:
    """Timestamp + sequence + random suffix. Unique within a process, not cryptographically."""
    return f"cluster_{int(time.time() * 1000)}_{next(_id_sequence)}{uuid.uuid4().hex[:9]}"


def calculate_centroid(vectors: np.ndarray) -> np.ndarray:
    """Componentwise mean of row vectors; empty array for no rows."""
    X = np.asarray(vectors, dtype=float)
    if X.size == 0 or len(X) == 0:
        return np.array([])
    return X.mean(axis=0)


def calculate_wcss(vectors: np.ndarray, assignments: Sequence[int], centroids: np.ndarray) -> float:
    """
    Within-cluster sum of squares (inertia).

    Args:
        vectors: (n, d) points
        assignments: Centroid index per point
        centroids: (k, d) centroid positions

    Returns:
        Sum of squared Euclidean distances from each point to its centroid
    """
    X = np.asarray(vectors, dtype=float)
    if len(X) == 0:
        return 0.0
    labels = np.asarray(assignments, dtype=int)
    C = np.asarray(centroids, dtype=float)
    diffs = X - C[labels]
    return float(np.sum(diffs * diffs))


def calculate_silhouette_score(vectors: np.ndarray,
                               labels: Sequence,
                               sample_size: int = settings.MAX_SILHOUETTE_SAMPLES,
                               max_comparisons: int = settings.MAX_SILHOUETTE_COMPARISONS,
                               random_state: RandomState = None) -> float:
    """
    Approximate silhouette score over a random sample of points.

    Each sampled point is compared against a strided subset of at most
    ``max_comparisons`` points, so the estimate is biased for large inputs.
    Points in singleton clusters count as 0.

    Args:
        vectors: (n, d) points
        labels: Cluster label per point
        sample_size: Maximum number of points to score
        max_comparisons: Maximum comparisons per scored point
        random_state: Seed or numpy Generator for the sample

    Returns:
        Mean silhouette in [-1, 1]; 0.0 for one point or one cluster
    """
    X = np.asarray(vectors, dtype=float)
    labels = np.asarray(labels)
    n = len(X)
    if n <= 1 or len(np.unique(labels)) < 2:
        return 0.0

    rng = np.random.default_rng(random_state)
    if n > sample_size:
        sample_indices = rng.choice(n, size=sample_size, replace=False)
    else:
        sample_indices = np.arange(n)

    unique_labels, counts = np.unique(labels, return_counts=True)
    cluster_sizes = dict(zip(unique_labels.tolist(), counts.tolist()))

    step = max(1, n // min(n, max_comparisons))
    comparison_indices = np.arange(0, n, step)

    total = 0.0
    for i in sample_indices:
        own = labels[i]
        if cluster_sizes[own] == 1:
            continue

        others = comparison_indices[comparison_indices != i]
        distances = np.linalg.norm(X[others] - X[i], axis=1)
        other_labels = labels[others]

        same = other_labels == own
        a = float(distances[same].mean()) if same.any() else 0.0

        b = np.inf
        for label in np.unique(other_labels[~same]):
            b = min(b, float(distances[other_labels == label].mean()))
        if np.isinf(b):
            continue

        denominator = max(a, b)
        if denominator > 0:
            total += (b - a) / denominator

    return float(total / len(sample_indices))


def calculate_modularity(adjacency: np.ndarray, communities: Sequence[int]) -> float:
    """
    Newman modularity of a partition of a weighted undirected graph.

    Q = (1/2m) * sum_ij [A_ij - k_i k_j / 2m] * delta(c_i, c_j)

    Args:
        adjacency: Symmetric (n, n) weighted adjacency matrix
        communities: Community label per node

    Returns:
        Modularity in [-1, 1]; 0.0 for a graph without edges
    """
    A = np.asarray(adjacency, dtype=float)
    if A.size == 0:
        return 0.0
    total_weight = float(np.triu(A, k=1).sum())
    if total_weight == 0:
        return 0.0

    degrees = A.sum(axis=1)
    labels = np.asarray(communities)
    same_community = labels[:, None] == labels[None, :]
    two_m = 2.0 * total_weight
    expected = np.outer(degrees, degrees) / two_m
    return float(((A - expected) * same_community).sum() / two_m)


__all__ = [
    'CLUSTER_COLORS',
    'calculate_centroid',
    'calculate_modularity',
    'calculate_silhouette_score',
    'calculate_wcss',
    'generate_cluster_id',
    'get_cluster_color',
]
