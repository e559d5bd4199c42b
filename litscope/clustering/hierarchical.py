#!/usr/bin/env python3
"""
Agglomerative (bottom-up) hierarchical clustering.

The distance matrix is computed once up front: O(n^2) memory and a roughly
O(n^3) merge search, which limits practical input to low thousands of records.
"""
import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from litscope import config as settings
from litscope.clustering.similarity_scoring import pairwise_distances
from litscope.errors import InvalidInputError
from litscope.models import LINKAGES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeStep:
    """One dendrogram step: two merged member sets (point indices) and their linkage distance"""
    left: Tuple[int, ...]
    right: Tuple[int, ...]
    distance: float
    size: int


@dataclass(frozen=True, eq=False)
class HierarchicalResult:
    assignments: np.ndarray
    dendrogram: Tuple[MergeStep, ...]


class HierarchicalClusterer:
    """Merges the closest pair of clusters under single, complete or average linkage."""

    def __init__(self, linkage: str = settings.LINKAGE):
        if linkage not in LINKAGES:
            raise InvalidInputError(f"Unsupported linkage: {linkage}. Use one of {', '.join(LINKAGES)}")
        self.linkage = linkage

    def cluster_distance(self, cluster_a: List[int], cluster_b: List[int], distance_matrix: np.ndarray) -> float:
        cross = distance_matrix[np.ix_(cluster_a, cluster_b)]
        if self.linkage == 'single':
            return float(cross.min())
        if self.linkage == 'complete':
            return float(cross.max())
        return float(cross.mean())

    def cluster(self, vectors: np.ndarray, num_clusters: int) -> HierarchicalResult:
        """
        Merge singletons until ``num_clusters`` clusters remain.

        Args:
            vectors: (n, d) points
            num_clusters: Target cluster count, clamped to [1, n]

        Returns:
            HierarchicalResult with a cluster index per point and the merge history
        """
        X = np.asarray(vectors, dtype=float)
        n = len(X)
        if n == 0:
            return HierarchicalResult(np.zeros(0, dtype=int), ())

        target = min(max(1, int(num_clusters)), n)
        if X.ndim == 1:
            X = X.reshape(n, 1)
        distance_matrix = pairwise_distances(X)

        clusters: List[List[int]] = [[i] for i in range(n)]
        dendrogram: List[MergeStep] = []

        while len(clusters) > target:
            min_distance = np.inf
            merge_i, merge_j = 0, 1
            for i in range(len(clusters)):
                for j in range(i + 1, len(clusters)):
                    distance = self.cluster_distance(clusters[i], clusters[j], distance_matrix)
                    if distance < min_distance:
                        min_distance = distance
                        merge_i, merge_j = i, j

            merged = clusters[merge_i] + clusters[merge_j]
            dendrogram.append(MergeStep(
                left=tuple(clusters[merge_i]),
                right=tuple(clusters[merge_j]),
                distance=float(min_distance),
                size=len(merged),
            ))
            logger.debug(f"Merged clusters of size {len(clusters[merge_i])} and {len(clusters[merge_j])} "
                         f"at distance {min_distance:.4f}")

            # Remove the higher index first so the lower one stays valid
            del clusters[merge_j]
            del clusters[merge_i]
            clusters.append(merged)

        assignments = np.empty(n, dtype=int)
        for cluster_index, members in enumerate(clusters):
            assignments[members] = cluster_index

        return HierarchicalResult(assignments, tuple(dendrogram))


__all__ = ['HierarchicalClusterer', 'HierarchicalResult', 'MergeStep']
