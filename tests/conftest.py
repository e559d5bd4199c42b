"""
Shared fixtures for the clustering tests.
"""
import os
import sys

import pytest

# Add project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from litscope.models import CitationGraph, ClusteringConfig, Record

VISION_ABSTRACT = "Deep neural network models improve visual learning benchmarks."
CLIMATE_ABSTRACT = "Global climate policy targets carbon emissions reduction pathways."


def make_topic_records():
    """Two topics of three records each; records within a topic share the same tokens."""
    vision = [
        Record(id='v1', title='Neural network learning for vision', abstract=VISION_ABSTRACT,
               authors=['Ada Lovelace'], citation_count=4),
        Record(id='v2', title='Neural network learning in vision', abstract=VISION_ABSTRACT,
               authors=['Ada Lovelace'], citation_count=9),
        Record(id='v3', title='Vision with neural network learning', abstract=VISION_ABSTRACT,
               authors=['Ada Lovelace'], citation_count=1),
    ]
    climate = [
        Record(id='c1', title='Climate policy and carbon emissions', abstract=CLIMATE_ABSTRACT,
               authors=['Grace Hopper'], citation_count=2),
        Record(id='c2', title='Carbon emissions and climate policy', abstract=CLIMATE_ABSTRACT,
               authors=['Grace Hopper'], citation_count=2),
        Record(id='c3', title='Climate policy for carbon emissions', abstract=CLIMATE_ABSTRACT,
               authors=['Grace Hopper'], citation_count=7),
    ]
    return vision + climate


def make_two_triangle_graph():
    return CitationGraph.from_edges([
        ('v1', 'v2'), ('v2', 'v3'), ('v3', 'v1'),
        ('c1', 'c2'), ('c2', 'c3'), ('c3', 'c1'),
    ])


@pytest.fixture
def topic_records():
    return make_topic_records()


@pytest.fixture
def two_triangle_graph():
    return make_two_triangle_graph()


@pytest.fixture
def two_cluster_config():
    return ClusteringConfig(num_clusters=2, random_state=42)
