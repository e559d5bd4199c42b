"""
litscope clustering core.
Groups bibliographic records into labelled clusters from their text, citations and metadata.
"""

from .clustering.engine import ClusteringEngine, perform_clustering
from .config import setup_logging
from .errors import ClusteringError, InvalidInputError, UnknownAlgorithmError
from .models import (CitationEdge, CitationGraph, ClusterInfo, ClusteringConfig, ClusteringResult,
                     NetworkSignals, QualityMetrics, Record)

setup_logging()

__all__ = [
    'CitationEdge',
    'CitationGraph',
    'ClusterInfo',
    'ClusteringConfig',
    'ClusteringEngine',
    'ClusteringError',
    'ClusteringResult',
    'InvalidInputError',
    'NetworkSignals',
    'QualityMetrics',
    'Record',
    'UnknownAlgorithmError',
    'perform_clustering',
]
