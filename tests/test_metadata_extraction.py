#!/usr/bin/env python3
"""
Test script for cluster naming, representative selection and summaries.
"""
import unittest

import pandas as pd

from conftest import make_topic_records
from litscope.clustering.engine import perform_clustering
from litscope.clustering.feature_extraction import FeatureExtractor
from litscope.clustering.metadata_extraction import (assignments_frame, build_cluster_info,
                                                     calculate_cluster_coherence,
                                                     find_representative_record,
                                                     generate_cluster_description,
                                                     generate_cluster_name, generate_cluster_summary,
                                                     summarize_clusters)
from litscope.clustering.quality import CLUSTER_COLORS
from litscope.models import ClusteringConfig, Record


class TestClusterNaming(unittest.TestCase):
    """Test suite for cluster names and descriptions."""

    def test_name_from_top_two_themes(self):
        themes = [('neural', 0.5), ('network', 0.3), ('vision', 0.2)]
        self.assertEqual(generate_cluster_name(themes), 'Neural & Network Research')

    def test_name_from_single_theme(self):
        self.assertEqual(generate_cluster_name([('graphs', 1.0)]), 'Graphs Research')

    def test_name_without_themes(self):
        self.assertEqual(generate_cluster_name([]), 'Uncategorized')

    def test_description(self):
        themes = [('neural', 0.5), ('network', 0.3), ('vision', 0.1), ('deep', 0.1)]
        self.assertEqual(generate_cluster_description(3, themes),
                         'Cluster containing 3 papers related to neural, network, vision')


class TestRepresentativeAndCoherence(unittest.TestCase):
    """Test suite for representative records and coherence."""

    def test_most_cited_record_wins(self):
        records = [Record(id='a', citation_count=3), Record(id='b', citation_count=10),
                   Record(id='c', citation_count=None)]
        self.assertEqual(find_representative_record(records).id, 'b')

    def test_ties_go_to_first_record(self):
        records = [Record(id='a', citation_count=5), Record(id='b', citation_count=5)]
        self.assertEqual(find_representative_record(records).id, 'a')

    def test_missing_counts_count_as_zero(self):
        records = [Record(id='a'), Record(id='b', citation_count=0)]
        self.assertEqual(find_representative_record(records).id, 'a')

    def test_singleton_coherence(self):
        self.assertEqual(calculate_cluster_coherence([Record(id='a', title='Anything')]), 1.0)

    def test_identical_titles_are_fully_coherent(self):
        records = [Record(id='a', title='Graph kernels'), Record(id='b', title='graph, KERNELS!')]
        self.assertAlmostEqual(calculate_cluster_coherence(records), 1.0)

    def test_disjoint_titles(self):
        records = [Record(id='a', title='alpha beta'), Record(id='b', title='gamma delta')]
        self.assertEqual(calculate_cluster_coherence(records), 0.0)

    def test_coherence_is_mean_pairwise_jaccard(self):
        records = [Record(id='a', title='a b'), Record(id='b', title='a c'), Record(id='c', title='a b')]
        # pairs: 1/3, 1, 1/3
        self.assertAlmostEqual(calculate_cluster_coherence(records), (1 / 3 + 1 + 1 / 3) / 3)


class TestClusterInfo(unittest.TestCase):
    """Test suite for cluster descriptions built from records."""

    def setUp(self):
        self.records = make_topic_records()
        self.extractor = FeatureExtractor().fit(self.records)

    def test_build_cluster_info(self):
        info = build_cluster_info('cluster_0', 0, self.records[:3], self.extractor)

        self.assertEqual(info.id, 'cluster_0')
        self.assertEqual(info.name, 'Neural & Network Research')
        self.assertEqual(info.color, CLUSTER_COLORS[0])
        self.assertEqual(info.paper_ids, ('v1', 'v2', 'v3'))
        self.assertEqual(info.size, 3)
        self.assertEqual(info.representative_record.id, 'v2')
        self.assertEqual(info.keywords[:3], ('neural', 'network', 'learning'))
        self.assertTrue(info.description.startswith('Cluster containing 3 papers related to neural'))

    def test_cluster_summary_text(self):
        info = build_cluster_info('cluster_1', 1, self.records[3:], self.extractor)
        summary = generate_cluster_summary(info)

        self.assertIn('Climate & Policy Research (3 papers)', summary)
        self.assertIn('Representative paper: Climate policy for carbon emissions', summary)


class TestSummaryFrames(unittest.TestCase):
    """Test suite for the pandas summaries of a result."""

    def setUp(self):
        config = ClusteringConfig(num_clusters=2, random_state=42)
        self.result = perform_clustering(make_topic_records(), config=config)

    def test_summarize_clusters(self):
        frame = summarize_clusters(self.result)

        self.assertIsInstance(frame, pd.DataFrame)
        self.assertEqual(len(frame), 2)
        self.assertEqual(frame['size'].sum(), 6)
        self.assertIn('representative_paper_id', frame.columns)

    def test_assignments_frame(self):
        frame = assignments_frame(self.result)

        self.assertEqual(sorted(frame['paper_id']), ['c1', 'c2', 'c3', 'v1', 'v2', 'v3'])
        self.assertEqual(frame['cluster_id'].nunique(), 2)
        self.assertFalse(frame['color'].isna().any())


if __name__ == "__main__":
    unittest.main()
