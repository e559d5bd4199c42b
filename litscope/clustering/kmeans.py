#!/usr/bin/env python3
"""
K-means clustering with k-means++ seeding.
"""
import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from litscope import config as settings
from litscope.clustering.quality import RandomState, calculate_centroid

logger = logging.getLogger(__name__)


class KMeansState(Enum):
    INITIALIZING = 'initializing'
    ASSIGNING = 'assigning'
    UPDATING = 'updating'
    CONVERGED = 'converged'
    MAX_ITERATIONS_REACHED = 'max_iterations_reached'


@dataclass(frozen=True, eq=False)
class KMeansResult:
    assignments: np.ndarray
    centroids: np.ndarray
    iterations: int
    state: KMeansState

    @property
    def converged(self) -> bool:
        return self.state is KMeansState.CONVERGED


class KMeansClusterer:
    """
    Lloyd's k-means over dense row vectors.

    Stops when no point changes cluster, when the largest centroid shift drops
    below ``tolerance``, or after ``max_iterations``. A centroid that loses all
    its points keeps its previous position.
    """

    def __init__(self, k: int,
                 max_iterations: int = settings.KMEANS_MAX_ITERATIONS,
                 tolerance: float = settings.KMEANS_TOLERANCE,
                 random_state: RandomState = None):
        """
        Initialize the clusterer.

        Args:
            k: Number of clusters
            max_iterations: Iteration cap
            tolerance: Centroid shift below which the run counts as converged
            random_state: Seed or numpy Generator used for k-means++ seeding
        """
        self.k = k
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.rng = np.random.default_rng(random_state)
        self.state = KMeansState.INITIALIZING

    def initialize_centroids(self, X: np.ndarray, k: int) -> np.ndarray:
        """k-means++: uniform first seed, then seeds drawn proportional to squared distance."""
        n = len(X)
        centroids = [X[self.rng.integers(n)].copy()]

        closest_sq = np.sum((X - centroids[0]) ** 2, axis=1)
        for _ in range(1, k):
            total = closest_sq.sum()
            if total > 0:
                chosen = self.rng.choice(n, p=closest_sq / total)
            else:
                chosen = self.rng.integers(n)
            centroids.append(X[chosen].copy())
            closest_sq = np.minimum(closest_sq, np.sum((X - X[chosen]) ** 2, axis=1))

        return np.vstack(centroids)

    def _assign(self, X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        distances = np.linalg.norm(X[:, None, :] - centroids[None, :, :], axis=2)
        # argmin returns the first index on ties
        return np.argmin(distances, axis=1)

    def _update(self, X: np.ndarray, assignments: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        new_centroids = centroids.copy()
        for j in range(len(centroids)):
            members = X[assignments == j]
            if len(members) > 0:
                new_centroids[j] = calculate_centroid(members)
        return new_centroids

    def cluster(self, vectors: np.ndarray) -> KMeansResult:
        """
        Cluster row vectors.

        Args:
            vectors: (n, d) points

        Returns:
            KMeansResult with assignments in input order, centroids and iterations used
        """
        X = np.asarray(vectors, dtype=float)
        if len(X) == 0:
            self.state = KMeansState.CONVERGED
            return KMeansResult(np.zeros(0, dtype=int), np.zeros((0, 0)), 0, self.state)
        if X.ndim == 1:
            X = X.reshape(len(X), -1)

        self.state = KMeansState.INITIALIZING
        centroids = self.initialize_centroids(X, self.k)
        assignments = np.full(len(X), -1, dtype=int)
        iterations = 0
        self.state = KMeansState.MAX_ITERATIONS_REACHED

        for iteration in range(self.max_iterations):
            iterations = iteration + 1

            self.state = KMeansState.ASSIGNING
            new_assignments = self._assign(X, centroids)
            changed = int(np.sum(new_assignments != assignments))
            assignments = new_assignments
            if changed == 0:
                self.state = KMeansState.CONVERGED
                break

            self.state = KMeansState.UPDATING
            new_centroids = self._update(X, assignments, centroids)
            shift = float(np.max(np.linalg.norm(new_centroids - centroids, axis=1)))
            centroids = new_centroids
            logger.debug(f"k-means iteration {iterations}: {changed} reassigned, max shift {shift:.6f}")

            if shift < self.tolerance:
                self.state = KMeansState.CONVERGED
                break
        else:
            self.state = KMeansState.MAX_ITERATIONS_REACHED

        logger.debug(f"k-means finished after {iterations} iterations ({self.state.value})")
        return KMeansResult(assignments, centroids, iterations, self.state)


__all__ = ['KMeansClusterer', 'KMeansResult', 'KMeansState']
