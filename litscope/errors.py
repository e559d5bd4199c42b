"""Exceptions raised by the clustering core."""


class ClusteringError(Exception):
    """Base class for clustering failures."""


class InvalidInputError(ClusteringError, ValueError):
    """Malformed input: mismatched vector lengths, duplicate record ids, bad config values."""


class UnknownAlgorithmError(ClusteringError, ValueError):
    """The configured clustering algorithm is not one the engine knows."""

    def __init__(self, algorithm: str):
        super().__init__(f"Unknown clustering algorithm: {algorithm}")
        self.algorithm = algorithm


__all__ = [
    'ClusteringError',
    'InvalidInputError',
    'UnknownAlgorithmError',
]
