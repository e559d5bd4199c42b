#!/usr/bin/env python3
"""
End-to-end tests for the clustering engine.
"""
import logging

import numpy as np
import pytest

from conftest import make_topic_records
from litscope.clustering.engine import ClusteringEngine, build_feature_matrix, perform_clustering
from litscope.clustering.feature_extraction import FeatureExtractor
from litscope.clustering.quality import CLUSTER_COLORS
from litscope.errors import InvalidInputError, UnknownAlgorithmError
from litscope.models import CitationGraph, ClusteringConfig, NetworkSignals, Record

VISION = {'v1', 'v2', 'v3'}
CLIMATE = {'c1', 'c2', 'c3'}


def _partition(result):
    groups = {}
    for record_id, cluster_id in result.assignments.items():
        groups.setdefault(cluster_id, set()).add(record_id)
    return sorted(groups.values(), key=sorted)


def _assert_partition(result, records):
    ids = [record.id for record in records]
    assert sorted(result.assignments) == sorted(ids)
    members = [paper_id for cluster in result.clusters for paper_id in cluster.paper_ids]
    assert sorted(members) == sorted(ids)
    assert sum(cluster.size for cluster in result.clusters) == len(ids)
    for cluster in result.clusters:
        assert cluster.size > 0
        assert all(result.assignments[paper_id] == cluster.id for paper_id in cluster.paper_ids)


def test_kmeans_separates_topics(topic_records, two_cluster_config):
    result = perform_clustering(topic_records, config=two_cluster_config)

    _assert_partition(result, topic_records)
    assert _partition(result) == [CLIMATE, VISION]
    assert result.algorithm == 'kmeans'
    assert result.quality.silhouette_score == pytest.approx(1.0)
    assert result.quality.inertia == pytest.approx(0.0, abs=1e-9)
    assert result.quality.modularity_score is None


def test_text_only_kmeans_finds_two_topics(topic_records):
    config = ClusteringConfig.from_dict({
        'num_clusters': 2,
        'random_state': 0,
        'features': {'use_network': False, 'use_temporal': False, 'use_categorical': False},
    })
    result = perform_clustering(topic_records, config=config)

    assert sorted(cluster.size for cluster in result.clusters) == [3, 3]
    assert result.quality.silhouette_score > 0.3


def test_clusters_ordered_by_first_record(topic_records, two_cluster_config):
    result = perform_clustering(topic_records, config=two_cluster_config)

    first, second = result.clusters
    assert first.paper_ids == ('v1', 'v2', 'v3')
    assert first.name == 'Neural & Network Research'
    assert first.color == CLUSTER_COLORS[0]
    assert first.representative_record.id == 'v2'
    assert second.name == 'Climate & Policy Research'
    assert second.color == CLUSTER_COLORS[1]
    assert result.cluster_by_id(first.id) is first


def test_hierarchical_separates_topics(topic_records):
    config = ClusteringConfig(algorithm='hierarchical', num_clusters=2)
    result = perform_clustering(topic_records, config=config)

    _assert_partition(result, topic_records)
    assert _partition(result) == [CLIMATE, VISION]
    assert result.quality.silhouette_score == pytest.approx(1.0)
    assert result.quality.inertia is None


def test_community_detection_uses_citation_graph(topic_records, two_triangle_graph):
    config = ClusteringConfig(algorithm='community', random_state=1)
    result = perform_clustering(topic_records, graph=two_triangle_graph, config=config)

    _assert_partition(result, topic_records)
    assert _partition(result) == [CLIMATE, VISION]
    assert result.quality.modularity_score == pytest.approx(0.5)
    assert result.quality.silhouette_score == pytest.approx(1.0)


def test_community_detection_includes_records_outside_graph(topic_records, two_triangle_graph):
    records = topic_records + [Record(id='lonely', title='Quantum error correction')]
    config = ClusteringConfig(algorithm='community', random_state=1)
    result = perform_clustering(records, graph=two_triangle_graph, config=config)

    _assert_partition(result, records)
    assert len(result.clusters) == 3
    assert {'lonely'} in _partition(result)


def test_hybrid_reports_both_partitions(topic_records, two_triangle_graph):
    config = ClusteringConfig(algorithm='hybrid', num_clusters=2, random_state=3)
    result = perform_clustering(topic_records, graph=two_triangle_graph, config=config)

    _assert_partition(result, topic_records)
    assert sorted(result.community_assignments) == sorted(r.id for r in topic_records)
    assert all(label.startswith('community_') for label in result.community_assignments.values())
    assert result.community_assignments['v1'] == result.community_assignments['v3']
    assert result.community_assignments['v1'] != result.community_assignments['c1']
    assert result.quality.silhouette_score is not None
    assert result.quality.modularity_score == pytest.approx(0.5)


def test_non_hybrid_results_have_no_community_partition(topic_records, two_cluster_config):
    assert perform_clustering(topic_records, config=two_cluster_config).community_assignments is None


def test_empty_input_returns_empty_result(caplog):
    with caplog.at_level(logging.WARNING):
        result = perform_clustering([])

    assert result.clusters == ()
    assert result.assignments == {}
    assert 'No records' in caplog.text


def test_unknown_algorithm_raises(topic_records):
    with pytest.raises(UnknownAlgorithmError):
        perform_clustering(topic_records, config=ClusteringConfig(algorithm='dbscan'))


def test_duplicate_record_ids_raise(topic_records):
    with pytest.raises(InvalidInputError):
        perform_clustering(topic_records + [topic_records[0]])


def test_invalid_config_raises(topic_records):
    with pytest.raises(InvalidInputError):
        perform_clustering(topic_records, config=ClusteringConfig(num_clusters=0))


def test_cluster_count_clamped_to_record_count(topic_records, caplog):
    config = ClusteringConfig(num_clusters=50, random_state=0)
    with caplog.at_level(logging.WARNING):
        result = perform_clustering(topic_records[:2], config=config)

    _assert_partition(result, topic_records[:2])
    assert len(result.clusters) <= 2
    assert 'using 2' in caplog.text


def test_same_seed_same_assignments():
    rng = np.random.default_rng(12)
    words = ['graph', 'kernel', 'neural', 'climate', 'carbon', 'protein', 'genome', 'policy']
    records = [
        Record(id=f'r{i}', title=' '.join(rng.choice(words, size=4)), citation_count=int(rng.integers(50)))
        for i in range(15)
    ]
    config = ClusteringConfig(num_clusters=3)

    first = perform_clustering(records, config=config, random_state=5)
    second = perform_clustering(records, config=config, random_state=5)
    assert first.assignments == second.assignments
    assert first.quality == second.quality


def test_random_state_accepts_generator(topic_records, two_cluster_config):
    result = perform_clustering(topic_records, config=two_cluster_config,
                                random_state=np.random.default_rng(0))
    assert _partition(result) == [CLIMATE, VISION]


def test_network_signals_change_features(topic_records):
    config = ClusteringConfig()
    config.features.use_text = False
    config.features.use_temporal = False
    config.features.use_categorical = False
    extractor = FeatureExtractor().fit(topic_records)

    signals = {'v1': NetworkSignals(degree=5)}
    features = [extractor.extract_features(r, signals.get(r.id)) for r in topic_records]
    matrix = build_feature_matrix(features, config)

    assert matrix.shape == (6, 4)
    assert matrix[0, 0] > matrix[1, 0]
    np.testing.assert_allclose(matrix[:, 1:], 0.0)


def test_feature_matrix_column_layout(topic_records):
    config = ClusteringConfig()
    extractor = FeatureExtractor().fit(topic_records)
    features = [extractor.extract_features(r) for r in topic_records]
    vocabulary_size = len(extractor.get_vocabulary())

    assert build_feature_matrix(features, config).shape == (6, vocabulary_size + 4 + 2 + 2)

    config.features.use_network = False
    assert build_feature_matrix(features, config).shape == (6, vocabulary_size + 2 + 2)


def test_feature_weights_scale_groups(topic_records):
    config = ClusteringConfig()
    config.features.use_network = False
    config.features.use_temporal = False
    config.features.use_categorical = False
    extractor = FeatureExtractor().fit(topic_records)
    features = [extractor.extract_features(r) for r in topic_records]

    unweighted = build_feature_matrix(features, config)
    config.feature_weights.text = 0.5
    np.testing.assert_allclose(build_feature_matrix(features, config), unweighted * 0.5)


def test_engine_rebuilds_extractor_when_text_settings_change(topic_records, two_cluster_config):
    engine = ClusteringEngine()
    engine.perform_clustering(topic_records, config=two_cluster_config)
    first_extractor = engine.feature_extractor

    engine.perform_clustering(topic_records, config=two_cluster_config)
    assert engine.feature_extractor is first_extractor

    two_cluster_config.text_processing.max_features = 5
    engine.perform_clustering(topic_records, config=two_cluster_config)
    assert engine.feature_extractor is not first_extractor
    assert len(engine.feature_extractor.get_vocabulary()) == 5


def test_result_serializes(topic_records, two_cluster_config):
    data = perform_clustering(topic_records, config=two_cluster_config).to_dict()

    assert data['algorithm'] == 'kmeans'
    assert len(data['clusters']) == 2
    assert set(data['quality']) == {'silhouette_score', 'inertia'}
    assert data['processing_time'] >= 0


def test_default_graph_is_empty_for_community(topic_records):
    result = perform_clustering(topic_records, graph=CitationGraph(),
                                config=ClusteringConfig(algorithm='community'))

    _assert_partition(result, topic_records)
    assert len(result.clusters) == len(topic_records)
    assert result.quality.modularity_score == 0.0


def test_result_is_isolated_from_caller_config(topic_records, two_cluster_config):
    result = perform_clustering(topic_records, config=two_cluster_config)

    two_cluster_config.num_clusters = 5
    two_cluster_config.algorithm = 'hierarchical'
    two_cluster_config.text_processing.max_features = 3

    assert result.config is not two_cluster_config
    assert result.config.num_clusters == 2
    assert result.config.algorithm == 'kmeans'
    assert result.config.text_processing.max_features != 3


def test_result_assignments_are_read_only(topic_records, two_triangle_graph):
    config = ClusteringConfig(algorithm='hybrid', num_clusters=2, random_state=3)
    result = perform_clustering(topic_records, graph=two_triangle_graph, config=config)

    with pytest.raises(TypeError):
        result.assignments['v1'] = 'cluster_x'
    with pytest.raises(TypeError):
        result.community_assignments['v1'] = 'community_x'

    data = result.to_dict()
    assert type(data['assignments']) is dict
    assert type(data['community_assignments']) is dict


def test_supplied_extractor_is_kept_when_settings_differ(topic_records, two_cluster_config, caplog):
    extractor = FeatureExtractor(max_features=5, reference_year=2000)
    engine = ClusteringEngine(extractor)

    with caplog.at_level(logging.WARNING):
        result = engine.perform_clustering(topic_records, config=two_cluster_config)

    _assert_partition(result, topic_records)
    assert engine.feature_extractor is extractor
    assert extractor.reference_year == 2000
    assert len(extractor.get_vocabulary()) == 5
    assert 'keeping the supplied extractor' in caplog.text
