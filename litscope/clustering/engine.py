#!/usr/bin/env python3
"""
Clustering engine for bibliographic records.
Combines feature extraction, the clustering algorithms and quality metrics into one run.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from litscope.clustering.community import CommunityDetector, CommunityResult
from litscope.clustering.feature_extraction import FeatureExtractor
from litscope.clustering.feature_scaling import FeatureScaler
from litscope.clustering.hierarchical import HierarchicalClusterer
from litscope.clustering.kmeans import KMeansClusterer
from litscope.clustering.metadata_extraction import build_cluster_info
from litscope.clustering.quality import (calculate_silhouette_score, calculate_wcss,
                                         generate_cluster_id)
from litscope.errors import InvalidInputError, UnknownAlgorithmError
from litscope.models import (ALGORITHMS, CitationGraph, ClusterInfo, ClusteringConfig,
                             ClusteringResult, FeatureVector, NetworkSignals, QualityMetrics,
                             Record)

logger = logging.getLogger(__name__)


def build_feature_matrix(features: Sequence[FeatureVector], config: ClusteringConfig) -> np.ndarray:
    """
    Combine feature groups into the clustering input matrix.

    Each enabled group is scaled on its own, multiplied by its weight and
    concatenated in the order text, network, temporal, categorical. Disabled
    groups contribute no columns.

    Args:
        features: Raw feature vectors, one per record
        config: Run configuration

    Returns:
        (n_records, n_columns) matrix
    """
    if not features:
        return np.zeros((0, 0))

    toggles = config.features
    weights = config.feature_weights
    method = config.text_processing.scaling_method

    groups = []
    if toggles.use_text:
        groups.append((np.vstack([f.text for f in features]), weights.text))
    if toggles.use_network:
        groups.append((np.vstack([f.network_features(config.network_weights) for f in features]), weights.network))
    if toggles.use_temporal:
        groups.append((np.vstack([f.temporal_features() for f in features]), weights.temporal))
    if toggles.use_categorical:
        groups.append((np.vstack([f.categorical_features() for f in features]), weights.categorical))

    if not groups:
        return np.zeros((len(features), 0))

    scaled = [FeatureScaler(method).fit_transform(matrix) * weight for matrix, weight in groups]
    return np.hstack(scaled)


class ClusteringEngine:
    """Runs one clustering configuration over records and their citation graph."""

    def __init__(self, feature_extractor: Optional[FeatureExtractor] = None):
        """
        Initialize the engine.

        Args:
            feature_extractor: Extractor to reuse across runs; built from the run config when omitted.
                A supplied extractor is always kept, even when its text settings differ from the config.
        """
        self.feature_extractor = feature_extractor
        self._owns_extractor = feature_extractor is None

    def _extractor_for(self, config: ClusteringConfig) -> FeatureExtractor:
        text = config.text_processing
        wanted = (text.min_word_length, text.remove_stopwords, text.max_features)
        if self.feature_extractor is not None and self.feature_extractor.settings_key == wanted:
            return self.feature_extractor

        if not self._owns_extractor:
            logger.warning(f"⚠️ Supplied feature extractor settings {self.feature_extractor.settings_key} "
                           f"differ from text_processing {wanted}; keeping the supplied extractor")
            return self.feature_extractor

        if self.feature_extractor is not None:
            logger.info("Text processing settings changed, rebuilding feature extractor")
        self.feature_extractor = FeatureExtractor(
            min_word_length=text.min_word_length,
            remove_stopwords=text.remove_stopwords,
            max_features=text.max_features,
        )
        return self.feature_extractor

    def perform_clustering(self,
                           records: Sequence[Record],
                           graph: Optional[CitationGraph] = None,
                           config: Optional[ClusteringConfig] = None,
                           network_signals: Optional[Mapping[str, NetworkSignals]] = None,
                           random_state: Union[None, int, np.random.Generator] = None) -> ClusteringResult:
        """
        Cluster records with the configured algorithm.

        Args:
            records: Records to cluster; ids must be unique
            graph: Citation graph for community detection
            config: Run configuration; defaults when omitted
            network_signals: Per-record network measures keyed by record id
            random_state: Seed or numpy Generator; overrides ``config.random_state``

        Returns:
            ClusteringResult covering every record exactly once

        Raises:
            UnknownAlgorithmError: If ``config.algorithm`` is not supported
            InvalidInputError: On duplicate record ids or invalid config values
        """
        start = time.perf_counter()
        config = config or ClusteringConfig()
        if config.algorithm not in ALGORITHMS:
            raise UnknownAlgorithmError(config.algorithm)
        config.validate()

        records = list(records)
        graph = graph or CitationGraph()
        network_signals = network_signals or {}

        if not records:
            logger.warning("⚠️ No records provided for clustering")
            return self._empty_result(config, start)

        record_ids = [record.id for record in records]
        if len(set(record_ids)) != len(record_ids):
            raise InvalidInputError("Record ids must be unique within a clustering run")

        seed = random_state if random_state is not None else config.random_state
        rng = np.random.default_rng(seed)

        logger.info(f"🚀 Starting {config.algorithm} clustering for {len(records)} records")

        extractor = self._extractor_for(config)
        extractor.fit(records)
        features = [extractor.extract_features(record, network_signals.get(record.id)) for record in records]
        vectors = build_feature_matrix(features, config)
        logger.info(f"📊 Feature matrix: {vectors.shape[0]} x {vectors.shape[1]}")

        num_clusters = self._effective_cluster_count(config, len(records))
        performance = config.performance
        community_assignments = None

        def silhouette(labels) -> float:
            return calculate_silhouette_score(
                vectors, labels,
                sample_size=performance.max_silhouette_samples,
                max_comparisons=performance.max_silhouette_comparisons,
                random_state=rng,
            )

        if config.algorithm == 'kmeans':
            kmeans_result = self._run_kmeans(vectors, num_clusters, config, rng)
            labels = kmeans_result.assignments.tolist()
            quality = QualityMetrics(
                silhouette_score=silhouette(labels),
                inertia=calculate_wcss(vectors, kmeans_result.assignments, kmeans_result.centroids),
            )

        elif config.algorithm == 'hierarchical':
            hierarchical_result = HierarchicalClusterer(config.hierarchical.linkage).cluster(vectors, num_clusters)
            labels = hierarchical_result.assignments.tolist()
            quality = QualityMetrics(silhouette_score=silhouette(labels))

        elif config.algorithm == 'community':
            community_result = self._run_community(graph, record_ids)
            labels = [community_result.assignments[record_id] for record_id in record_ids]
            quality = QualityMetrics(
                silhouette_score=silhouette(labels),
                modularity_score=community_result.modularity,
            )

        else:
            # hybrid: both partitions are reported, the k-means one is primary
            kmeans_result = self._run_kmeans(vectors, num_clusters, config, rng)
            community_result = self._run_community(graph, record_ids)
            labels = kmeans_result.assignments.tolist()
            community_assignments = {
                record_id: f"community_{community_result.assignments[record_id]}" for record_id in record_ids
            }
            quality = QualityMetrics(
                silhouette_score=silhouette(labels),
                modularity_score=community_result.modularity,
            )

        clusters, assignments = self._create_cluster_info(records, labels, extractor)

        processing_time = time.perf_counter() - start
        if processing_time > performance.timeout:
            logger.warning(f"⚠️ Clustering took {processing_time:.1f}s, over the {performance.timeout:.0f}s budget")

        logger.info(f"✅ Clustering complete: {len(clusters)} clusters in {processing_time:.2f}s")

        return ClusteringResult(
            id=generate_cluster_id(),
            algorithm=config.algorithm,
            config=config,
            clusters=tuple(clusters),
            assignments=assignments,
            quality=quality,
            created_at=datetime.now(timezone.utc),
            processing_time=processing_time,
            community_assignments=community_assignments,
        )

    def _effective_cluster_count(self, config: ClusteringConfig, n_records: int) -> int:
        if config.algorithm == 'community':
            return 0
        if config.num_clusters > n_records:
            logger.warning(f"Requested {config.num_clusters} clusters for {n_records} records, "
                           f"using {n_records}")
            return n_records
        return config.num_clusters

    def _run_kmeans(self, vectors: np.ndarray, k: int, config: ClusteringConfig, rng: np.random.Generator):
        clusterer = KMeansClusterer(
            k,
            max_iterations=config.kmeans.max_iterations,
            tolerance=config.kmeans.tolerance,
            random_state=rng,
        )
        return clusterer.cluster(vectors)

    def _run_community(self, graph: CitationGraph, record_ids: List[str]) -> CommunityResult:
        # Records missing from the graph become isolated nodes
        return CommunityDetector().detect_communities(graph, extra_nodes=record_ids)

    def _create_cluster_info(self, records: Sequence[Record], labels: Sequence,
                             extractor: FeatureExtractor):
        """Group records by label in order of first appearance and describe each group."""
        members: Dict[object, List[Record]] = {}
        for record, label in zip(records, labels):
            members.setdefault(label, []).append(record)

        clusters: List[ClusterInfo] = []
        assignments: Dict[str, str] = {}
        for cluster_index, (label, cluster_records) in enumerate(members.items()):
            cluster_id = f"cluster_{label}"
            clusters.append(build_cluster_info(cluster_id, cluster_index, cluster_records, extractor))
            for record in cluster_records:
                assignments[record.id] = cluster_id

        return clusters, assignments

    def _empty_result(self, config: ClusteringConfig, start: float) -> ClusteringResult:
        return ClusteringResult(
            id=generate_cluster_id(),
            algorithm=config.algorithm,
            config=config,
            clusters=(),
            assignments={},
            quality=QualityMetrics(),
            created_at=datetime.now(timezone.utc),
            processing_time=time.perf_counter() - start,
            community_assignments={} if config.algorithm == 'hybrid' else None,
        )


def perform_clustering(records: Sequence[Record],
                       graph: Optional[CitationGraph] = None,
                       config: Optional[ClusteringConfig] = None,
                       network_signals: Optional[Mapping[str, NetworkSignals]] = None,
                       random_state: Union[None, int, np.random.Generator] = None) -> ClusteringResult:
    """
    Cluster records with a fresh engine and feature extractor.

    Args:
        records: Records to cluster
        graph: Citation graph for community detection
        config: Run configuration
        network_signals: Per-record network measures keyed by record id
        random_state: Seed or numpy Generator for the randomized steps

    Returns:
        ClusteringResult
    """
    engine = ClusteringEngine()
    return engine.perform_clustering(records, graph, config, network_signals, random_state)


if __name__ == "__main__":
    # Example usage
    sample_records = [
        Record(id='1', title='Neural network pruning', abstract='Sparse neural network training.', citation_count=12),
        Record(id='2', title='Neural network inference', abstract='Fast neural network inference.', citation_count=3),
        Record(id='3', title='Climate policy pathways', abstract='Carbon policy and climate targets.', citation_count=7),
        Record(id='4', title='Climate policy costs', abstract='Economic cost of climate policy.', citation_count=1),
    ]
    sample_config = ClusteringConfig(num_clusters=2, random_state=42)
    sample_config.features.use_network = False

    result = perform_clustering(sample_records, config=sample_config)
    for cluster in result.clusters:
        print(f"{cluster.name}: {list(cluster.paper_ids)}")
    print(f"Quality: {result.quality.to_dict()}")
