"""
Clustering package for bibliographic records.
Provides feature extraction, k-means, hierarchical and community clustering, and quality metrics.
"""

from .community import CommunityDetector, build_adjacency_matrix
from .engine import ClusteringEngine, build_feature_matrix, perform_clustering
from .feature_extraction import FeatureExtractor
from .feature_scaling import FeatureScaler, scale_features
from .hierarchical import HierarchicalClusterer
from .kmeans import KMeansClusterer
from .metadata_extraction import assignments_frame, generate_cluster_summary, summarize_clusters
from .quality import calculate_modularity, calculate_silhouette_score, calculate_wcss
from .similarity_scoring import (calculate_similarity_matrix, cosine_similarity, euclidean_distance,
                                 jaccard_similarity, text_similarity)

__all__ = [
    'ClusteringEngine',
    'CommunityDetector',
    'FeatureExtractor',
    'FeatureScaler',
    'HierarchicalClusterer',
    'KMeansClusterer',
    'assignments_frame',
    'build_adjacency_matrix',
    'build_feature_matrix',
    'calculate_modularity',
    'calculate_silhouette_score',
    'calculate_similarity_matrix',
    'calculate_wcss',
    'cosine_similarity',
    'euclidean_distance',
    'generate_cluster_summary',
    'jaccard_similarity',
    'perform_clustering',
    'scale_features',
    'summarize_clusters',
    'text_similarity',
]
