"""
Data models for the clustering core.
Records and graphs come in from the caller; everything else is produced per run.
"""

import copy
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from litscope import config as settings
from litscope.errors import InvalidInputError

ALGORITHMS = ('kmeans', 'hierarchical', 'community', 'hybrid')
LINKAGES = ('single', 'complete', 'average')
SCALING_METHODS = ('zscore', 'minmax')


@dataclass(frozen=True)
class Record:
    """Bibliographic record supplied by the caller"""
    id: str
    title: str = ''
    abstract: str = ''
    authors: Tuple[str, ...] = ()
    venue: str = ''
    publish_date: Any = None
    citation_count: Optional[int] = None
    terms: Tuple[str, ...] = ()

    def __post_init__(self):
        # Accept lists from callers but keep the record hashable
        object.__setattr__(self, 'authors', tuple(self.authors or ()))
        object.__setattr__(self, 'terms', tuple(self.terms or ()))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Record':
        """Build a record from a paper dictionary (camelCase or snake_case keys)."""
        return cls(
            id=str(data['id']),
            title=data.get('title') or '',
            abstract=data.get('abstract') or '',
            authors=data.get('authors') or (),
            venue=data.get('venue', data.get('journal')) or '',
            publish_date=data.get('publish_date', data.get('publishDate')),
            citation_count=data.get('citation_count', data.get('citationCount')),
            terms=data.get('terms', data.get('meshTerms')) or (),
        )


@dataclass(frozen=True)
class Document:
    """Text representation of a record"""
    id: str
    title: str
    abstract: str
    keywords: Tuple[str, ...]
    terms: Tuple[str, ...]
    combined_text: str


@dataclass(frozen=True)
class NetworkSignals:
    """Per-record citation network measures computed outside the core"""
    degree: float = 0.0
    betweenness: float = 0.0
    closeness: float = 0.0
    clustering: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'NetworkSignals':
        data = data or {}
        return cls(
            degree=float(data.get('degree') or 0.0),
            betweenness=float(data.get('betweenness') or 0.0),
            closeness=float(data.get('closeness') or 0.0),
            clustering=float(data.get('clustering') or 0.0),
        )


@dataclass(frozen=True)
class CitationEdge:
    source: str
    target: str
    weight: Optional[float] = None


@dataclass(frozen=True)
class CitationGraph:
    """Node ids plus undirected citation edges"""
    nodes: Tuple[str, ...] = ()
    edges: Tuple[CitationEdge, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'nodes', tuple(self.nodes or ()))
        object.__setattr__(self, 'edges', tuple(self.edges or ()))

    @classmethod
    def from_edges(cls, edges: Iterable[Tuple]) -> 'CitationGraph':
        """Build a graph from (source, target[, weight]) tuples, nodes in first-seen order."""
        nodes: Dict[str, None] = {}
        parsed = []
        for edge in edges:
            source, target = str(edge[0]), str(edge[1])
            weight = edge[2] if len(edge) > 2 else None
            nodes.setdefault(source)
            nodes.setdefault(target)
            parsed.append(CitationEdge(source, target, weight))
        return cls(nodes=tuple(nodes), edges=tuple(parsed))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CitationGraph':
        """Build a graph from a ``{"nodes": [...], "edges": [...]}`` network payload."""
        nodes = []
        for node in data.get('nodes', []):
            nodes.append(str(node['id']) if isinstance(node, dict) else str(node))
        edges = [
            CitationEdge(str(edge['source']), str(edge['target']), edge.get('weight'))
            for edge in data.get('edges', [])
        ]
        return cls(nodes=tuple(nodes), edges=tuple(edges))


@dataclass(frozen=True, eq=False)
class FeatureVector:
    """Raw (unscaled) features for one record, grouped text/network/temporal/categorical"""
    record_id: str
    text: np.ndarray
    network: NetworkSignals
    publication_year: int
    citation_age: int
    author_count: int
    term_count: int

    def network_features(self, weights: Optional['NetworkWeights'] = None) -> np.ndarray:
        weights = weights or NetworkWeights()
        return np.array([
            self.network.degree * weights.degree,
            self.network.betweenness * weights.betweenness,
            self.network.closeness * weights.closeness,
            self.network.clustering * weights.clustering,
        ], dtype=float)

    def temporal_features(self) -> np.ndarray:
        return np.array([self.publication_year, self.citation_age], dtype=float)

    def categorical_features(self) -> np.ndarray:
        return np.array([self.author_count, self.term_count], dtype=float)


# Configuration ---------------------------------------------------------------

@dataclass
class FeatureToggles:
    use_text: bool = True
    use_network: bool = True
    use_temporal: bool = True
    use_categorical: bool = True


@dataclass
class FeatureWeights:
    text: float = 1.0
    network: float = 0.8
    temporal: float = 0.3
    categorical: float = 0.2


@dataclass
class NetworkWeights:
    degree: float = 1.0
    betweenness: float = 1.0
    closeness: float = 1.0
    clustering: float = 1.0


@dataclass
class TextProcessingConfig:
    min_word_length: int = settings.MIN_WORD_LENGTH
    max_features: int = settings.MAX_FEATURES
    remove_stopwords: bool = True
    scaling_method: str = settings.SCALING_METHOD


@dataclass
class KMeansConfig:
    max_iterations: int = settings.KMEANS_MAX_ITERATIONS
    tolerance: float = settings.KMEANS_TOLERANCE


@dataclass
class HierarchicalConfig:
    linkage: str = settings.LINKAGE


@dataclass
class PerformanceConfig:
    max_silhouette_samples: int = settings.MAX_SILHOUETTE_SAMPLES
    max_silhouette_comparisons: int = settings.MAX_SILHOUETTE_COMPARISONS
    timeout: float = settings.TIMEOUT_SECONDS


_NESTED_SECTIONS = {
    'features': FeatureToggles,
    'feature_weights': FeatureWeights,
    'network_weights': NetworkWeights,
    'text_processing': TextProcessingConfig,
    'kmeans': KMeansConfig,
    'hierarchical': HierarchicalConfig,
    'performance': PerformanceConfig,
}


@dataclass
class ClusteringConfig:
    """Everything that parameterizes one clustering run."""
    algorithm: str = settings.DEFAULT_ALGORITHM
    num_clusters: int = settings.DEFAULT_NUM_CLUSTERS
    random_state: Optional[int] = settings.RANDOM_STATE
    features: FeatureToggles = field(default_factory=FeatureToggles)
    feature_weights: FeatureWeights = field(default_factory=FeatureWeights)
    network_weights: NetworkWeights = field(default_factory=NetworkWeights)
    text_processing: TextProcessingConfig = field(default_factory=TextProcessingConfig)
    kmeans: KMeansConfig = field(default_factory=KMeansConfig)
    hierarchical: HierarchicalConfig = field(default_factory=HierarchicalConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ClusteringConfig':
        """
        Build a config from a plain, possibly partial, nested mapping.

        Args:
            data: Mapping such as a stored JSON configuration blob

        Returns:
            ClusteringConfig with defaults for every missing key
        """
        data = dict(data or {})
        kwargs = {}
        for key, value in data.items():
            section = _NESTED_SECTIONS.get(key)
            if section is not None:
                if isinstance(value, section):
                    kwargs[key] = value
                    continue
                allowed = {f.name for f in dataclasses.fields(section)}
                unknown = set(value or {}) - allowed
                if unknown:
                    raise InvalidInputError(f"Unknown {key} option(s): {sorted(unknown)}")
                kwargs[key] = section(**(value or {}))
            elif key in ('algorithm', 'num_clusters', 'random_state'):
                kwargs[key] = value
            else:
                raise InvalidInputError(f"Unknown clustering config option: {key}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    def validate(self) -> None:
        """Raise InvalidInputError for out-of-range values. The algorithm name is checked at dispatch."""
        if self.num_clusters is None or int(self.num_clusters) < 1:
            raise InvalidInputError(f"num_clusters must be >= 1, got {self.num_clusters}")
        if self.hierarchical.linkage not in LINKAGES:
            raise InvalidInputError(
                f"Unsupported linkage: {self.hierarchical.linkage}. Use one of {', '.join(LINKAGES)}"
            )
        if self.text_processing.scaling_method not in SCALING_METHODS:
            raise InvalidInputError(
                f"Unsupported scaling method: {self.text_processing.scaling_method}. "
                f"Use one of {', '.join(SCALING_METHODS)}"
            )
        if self.text_processing.max_features < 1:
            raise InvalidInputError("text_processing.max_features must be >= 1")
        if self.kmeans.max_iterations < 1:
            raise InvalidInputError("kmeans.max_iterations must be >= 1")
        if self.performance.max_silhouette_samples < 1 or self.performance.max_silhouette_comparisons < 1:
            raise InvalidInputError("silhouette sample limits must be >= 1")


# Results ---------------------------------------------------------------------

@dataclass(frozen=True)
class ClusterInfo:
    """Labelled, scored cluster"""
    id: str
    name: str
    description: str
    color: str
    paper_ids: Tuple[str, ...]
    size: int
    keywords: Tuple[str, ...]
    representative_record: Record
    coherence_score: float


@dataclass(frozen=True)
class QualityMetrics:
    """Only the metrics that apply to the algorithm used are set"""
    silhouette_score: Optional[float] = None
    inertia: Optional[float] = None
    modularity_score: Optional[float] = None

    def to_dict(self) -> Dict[str, float]:
        return {k: v for k, v in dataclasses.asdict(self).items() if v is not None}


@dataclass(frozen=True)
class ClusteringResult:
    id: str
    algorithm: str
    config: ClusteringConfig
    clusters: Tuple[ClusterInfo, ...]
    assignments: Mapping[str, str]
    quality: QualityMetrics
    created_at: datetime
    processing_time: float
    # Hybrid runs only: the community partition reported alongside the k-means one
    community_assignments: Optional[Mapping[str, str]] = None

    def __post_init__(self):
        # Snapshot caller-owned state so the result cannot change after construction
        object.__setattr__(self, 'config', copy.deepcopy(self.config))
        object.__setattr__(self, 'assignments', MappingProxyType(dict(self.assignments)))
        if self.community_assignments is not None:
            object.__setattr__(self, 'community_assignments',
                               MappingProxyType(dict(self.community_assignments)))

    def cluster_by_id(self, cluster_id: str) -> Optional[ClusterInfo]:
        for cluster in self.clusters:
            if cluster.id == cluster_id:
                return cluster
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested dictionary for the presentation and export layers."""
        clusters: List[Dict[str, Any]] = []
        for cluster in self.clusters:
            clusters.append({
                'id': cluster.id,
                'name': cluster.name,
                'description': cluster.description,
                'color': cluster.color,
                'paper_ids': list(cluster.paper_ids),
                'size': cluster.size,
                'keywords': list(cluster.keywords),
                'representative_paper_id': cluster.representative_record.id,
                'coherence_score': cluster.coherence_score,
            })
        return {
            'id': self.id,
            'algorithm': self.algorithm,
            'config': self.config.to_dict(),
            'clusters': clusters,
            'assignments': dict(self.assignments),
            'community_assignments': (
                dict(self.community_assignments) if self.community_assignments is not None else None
            ),
            'quality': self.quality.to_dict(),
            'created_at': self.created_at.isoformat(),
            'processing_time': self.processing_time,
        }
