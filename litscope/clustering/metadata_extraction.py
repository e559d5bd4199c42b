#!/usr/bin/env python3
"""
Metadata extraction module for cluster analysis.
Names, describes and scores clusters, and summarizes results for the export layer.
"""
import logging
import re
from typing import Sequence, Set, Tuple

import pandas as pd

from litscope.clustering.feature_extraction import FeatureExtractor
from litscope.clustering.quality import get_cluster_color
from litscope.clustering.similarity_scoring import jaccard_similarity
from litscope.models import ClusterInfo, ClusteringResult, Record

logger = logging.getLogger(__name__)

THEME_KEYWORDS = 5
NAME_SUFFIX = "Research"
UNCATEGORIZED = "Uncategorized"


def generate_cluster_name(themes: Sequence[Tuple[str, float]]) -> str:
    """Title-cased top two themes joined by '&' plus a suffix, e.g. 'Neural & Network Research'."""
    if not themes:
        return UNCATEGORIZED
    top_words = [word[:1].upper() + word[1:] for word, _ in themes[:2]]
    return f"{' & '.join(top_words)} {NAME_SUFFIX}"


def generate_cluster_description(size: int, themes: Sequence[Tuple[str, float]]) -> str:
    related = ', '.join(word for word, _ in themes[:3])
    return f"Cluster containing {size} papers related to {related}"


def find_representative_record(records: Sequence[Record]) -> Record:
    """
    Record with the highest citation count.

    Ties go to the earliest record in input order, so the choice is only
    stable when the input order is.
    """
    best = records[0]
    for record in records[1:]:
        if (record.citation_count or 0) > (best.citation_count or 0):
            best = record
    return best


def _title_words(title: str) -> Set[str]:
    return {word for word in re.split(r'\W+', (title or '').lower()) if word}


def calculate_cluster_coherence(records: Sequence[Record]) -> float:
    """Mean pairwise Jaccard similarity of title word sets; 1.0 for singletons."""
    if len(records) <= 1:
        return 1.0

    word_sets = [_title_words(record.title) for record in records]
    similarities = []
    for i in range(len(word_sets)):
        for j in range(i + 1, len(word_sets)):
            similarities.append(jaccard_similarity(word_sets[i], word_sets[j]))

    return sum(similarities) / len(similarities)


def build_cluster_info(cluster_id: str,
                       cluster_index: int,
                       records: Sequence[Record],
                       feature_extractor: FeatureExtractor) -> ClusterInfo:
    """
    Build the labelled, scored description of one cluster.

    Args:
        cluster_id: Identifier used in the assignment mapping
        cluster_index: Creation order, used for the palette color
        records: Member records in input order
        feature_extractor: Fitted extractor used for theme keywords

    Returns:
        ClusterInfo for the cluster
    """
    themes = feature_extractor.extract_themes(records, THEME_KEYWORDS)

    return ClusterInfo(
        id=cluster_id,
        name=generate_cluster_name(themes),
        description=generate_cluster_description(len(records), themes),
        color=get_cluster_color(cluster_index),
        paper_ids=tuple(record.id for record in records),
        size=len(records),
        keywords=tuple(word for word, _ in themes),
        representative_record=find_representative_record(records),
        coherence_score=calculate_cluster_coherence(records),
    )


def summarize_clusters(result: ClusteringResult) -> pd.DataFrame:
    """One row per cluster: id, name, size, color, keywords, representative paper and coherence."""
    rows = []
    for cluster in result.clusters:
        rows.append({
            'cluster_id': cluster.id,
            'name': cluster.name,
            'size': cluster.size,
            'color': cluster.color,
            'keywords': ', '.join(cluster.keywords),
            'representative_paper_id': cluster.representative_record.id,
            'representative_title': cluster.representative_record.title,
            'coherence_score': cluster.coherence_score,
        })
    columns = ['cluster_id', 'name', 'size', 'color', 'keywords',
               'representative_paper_id', 'representative_title', 'coherence_score']
    return pd.DataFrame(rows, columns=columns)


def assignments_frame(result: ClusteringResult) -> pd.DataFrame:
    """One row per record with its cluster id, name and color."""
    clusters = {cluster.id: cluster for cluster in result.clusters}
    rows = []
    for paper_id, cluster_id in result.assignments.items():
        cluster = clusters.get(cluster_id)
        rows.append({
            'paper_id': paper_id,
            'cluster_id': cluster_id,
            'cluster_name': cluster.name if cluster else None,
            'color': cluster.color if cluster else None,
        })
    return pd.DataFrame(rows, columns=['paper_id', 'cluster_id', 'cluster_name', 'color'])


def generate_cluster_summary(cluster: ClusterInfo) -> str:
    """
    Generate a human-readable summary of a cluster.

    Args:
        cluster: Cluster to describe

    Returns:
        Multi-line summary text
    """
    summary = f"{cluster.name} ({cluster.size} papers)\n"
    summary += "=" * 40 + "\n"

    if cluster.keywords:
        summary += f"Key terms: {', '.join(cluster.keywords[:5])}\n"

    summary += f"Representative paper: {cluster.representative_record.title or cluster.representative_record.id}\n"
    summary += f"Coherence: {cluster.coherence_score:.2f}\n"
    return summary


__all__ = [
    'assignments_frame',
    'build_cluster_info',
    'calculate_cluster_coherence',
    'find_representative_record',
    'generate_cluster_description',
    'generate_cluster_name',
    'generate_cluster_summary',
    'summarize_clusters',
]
