#!/usr/bin/env python3
"""
Feature extraction for bibliographic records.
Turns records into text, network, temporal and categorical feature groups.
"""
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from litscope import config as settings
from litscope.clustering.similarity_scoring import text_similarity
from litscope.models import Document, FeatureVector, NetworkSignals, Record
from litscope.text.processing import TextProcessor
from litscope.text.tfidf import TfidfVocabulary

logger = logging.getLogger(__name__)


def _publication_year(publish_date, fallback_year: int) -> int:
    """Year of a date, datetime, bare year or date string; ``fallback_year`` when missing or unparseable."""
    if isinstance(publish_date, (date, datetime)):
        return publish_date.year
    if publish_date is None or publish_date == '' or isinstance(publish_date, bool):
        return fallback_year
    # pandas reads a bare integer as nanoseconds since the epoch
    if isinstance(publish_date, (int, np.integer)):
        return int(publish_date)
    parsed = pd.to_datetime(publish_date, errors='coerce')
    if pd.isna(parsed):
        logger.debug(f"Could not parse publication date {publish_date!r}, using {fallback_year}")
        return fallback_year
    return int(parsed.year)


class FeatureExtractor:
    """
    Fits a TF-IDF vocabulary over records and extracts per-record feature groups.

    Documents are cached by record id until the next ``fit``. The vocabulary and
    cache are instance state: callers sharing an extractor between runs must not
    overlap ``fit`` with ``extract_features``.
    """

    def __init__(self,
                 min_word_length: int = settings.MIN_WORD_LENGTH,
                 remove_stopwords: bool = True,
                 max_features: int = settings.MAX_FEATURES,
                 reference_year: Optional[int] = None):
        """
        Initialize the feature extractor.

        Args:
            min_word_length: Minimum token length
            remove_stopwords: Whether to drop stopwords
            max_features: Maximum vocabulary size
            reference_year: Year used for citation age; defaults to the current year
        """
        self.text_processor = TextProcessor(min_word_length, remove_stopwords)
        self.tfidf_vocabulary = TfidfVocabulary(self.text_processor, max_features)
        self.reference_year = reference_year
        self._document_cache: Dict[str, Document] = {}

    @property
    def settings_key(self) -> Tuple[int, bool, int]:
        return (self.text_processor.min_word_length,
                self.text_processor.remove_stopwords,
                self.tfidf_vocabulary.max_features)

    def _current_year(self) -> int:
        return self.reference_year or datetime.now().year

    def prepare_documents(self, records: Sequence[Record]) -> List[Document]:
        """Documents for ``records``, built once per record id."""
        documents = []
        for record in records:
            document = self._document_cache.get(record.id)
            if document is None:
                document = self.text_processor.create_text_document(record)
                self._document_cache[record.id] = document
            documents.append(document)
        return documents

    def fit(self, records: Sequence[Record]) -> 'FeatureExtractor':
        """Rebuild the document cache and refit the vocabulary over ``records``."""
        self._document_cache = {}
        documents = self.prepare_documents(records)
        self.tfidf_vocabulary.fit(documents)
        logger.info(f"Fitted feature extractor on {len(documents)} records "
                    f"(vocabulary size {self.tfidf_vocabulary.vocabulary_size})")
        return self

    def extract_features(self, record: Record, network_signals: Optional[NetworkSignals] = None) -> FeatureVector:
        """
        Extract the four raw feature groups for one record.

        Args:
            record: Record to featurize
            network_signals: Citation network measures; zeros when the record is outside the graph

        Returns:
            Unscaled FeatureVector
        """
        document = self.prepare_documents([record])[0]
        text_features = self.tfidf_vocabulary.transform(document)

        current_year = self._current_year()
        publication_year = _publication_year(record.publish_date, current_year)

        return FeatureVector(
            record_id=record.id,
            text=text_features,
            network=network_signals or NetworkSignals(),
            publication_year=publication_year,
            citation_age=current_year - publication_year,
            author_count=len(record.authors),
            term_count=len(record.terms),
        )

    def extract_themes(self, records: Sequence[Record], top_k: int = 10) -> List[Tuple[str, float]]:
        """Top keywords over the title, abstract and terms of a group of records."""
        all_text = ' '.join(
            f"{record.title} {record.abstract} {' '.join(record.terms)}" for record in records
        )
        return self.text_processor.extract_keywords(all_text, top_k)

    def get_similarity_matrix(self, records: Sequence[Record]) -> np.ndarray:
        """Composite text similarity between every pair of records, 1.0 on the diagonal."""
        documents = self.prepare_documents(records)
        vectors = [self.tfidf_vocabulary.transform(doc) for doc in documents]

        n = len(documents)
        matrix = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                similarity = text_similarity(documents[i], documents[j], vectors[i], vectors[j])
                matrix[i, j] = similarity
                matrix[j, i] = similarity
        return matrix

    def get_vocabulary(self) -> List[str]:
        return self.tfidf_vocabulary.get_vocabulary()


__all__ = ['FeatureExtractor']
