#!/usr/bin/env python3
"""
TF-IDF vocabulary for record documents.
Fits a bounded vocabulary with inverse document frequencies and turns documents into dense vectors.
"""
import logging
import math
from collections import Counter
from typing import Dict, List, Sequence

import numpy as np
from sklearn.exceptions import NotFittedError

from litscope import config as settings
from litscope.models import Document
from litscope.text.processing import TextProcessor

logger = logging.getLogger(__name__)


class TfidfVocabulary:
    """
    Term-frequency x inverse-document-frequency vectorizer.

    The vocabulary keeps the ``max_features`` most document-frequent terms.
    ``fit`` replaces any previous vocabulary; there is no incremental update.
    Not safe for concurrent ``fit``/``transform`` on one instance.
    """

    def __init__(self, text_processor: TextProcessor = None, max_features: int = settings.MAX_FEATURES):
        self.text_processor = text_processor or TextProcessor()
        self.max_features = max_features
        self.vocabulary_: Dict[str, int] = {}
        self.idf_: Dict[str, float] = {}
        self._fitted = False

    def fit(self, documents: Sequence[Document]) -> 'TfidfVocabulary':
        """
        Fit vocabulary and IDF scores over a corpus.

        Args:
            documents: Corpus documents

        Returns:
            self
        """
        document_frequency: Counter = Counter()
        for doc in documents:
            # Unique tokens in first-seen order
            document_frequency.update(list(dict.fromkeys(self.text_processor.tokenize(doc.combined_text))))

        total_documents = len(documents)
        # Stable sort: equal document frequencies keep first-seen order
        top_terms = sorted(document_frequency.items(), key=lambda item: -item[1])[:self.max_features]

        self.vocabulary_ = {}
        self.idf_ = {}
        for index, (term, doc_freq) in enumerate(top_terms):
            self.vocabulary_[term] = index
            self.idf_[term] = math.log(total_documents / doc_freq)

        self._fitted = True
        logger.debug(f"Fitted TF-IDF vocabulary: {len(self.vocabulary_)} terms from {total_documents} documents "
                     f"({len(document_frequency)} candidates)")
        return self

    def transform(self, document: Document) -> np.ndarray:
        """Vector of length ``vocabulary_size``: (count / document length) x IDF per retained term."""
        if not self._fitted:
            raise NotFittedError("TfidfVocabulary is not fitted yet. Call 'fit' with a document corpus first.")

        vector = np.zeros(len(self.vocabulary_), dtype=float)
        tokens = self.text_processor.tokenize(document.combined_text)
        if not tokens:
            return vector

        total_terms = len(tokens)
        for term, count in Counter(tokens).items():
            index = self.vocabulary_.get(term)
            if index is not None:
                vector[index] = (count / total_terms) * self.idf_[term]
        return vector

    def transform_many(self, documents: Sequence[Document]) -> np.ndarray:
        """Stack transformed documents into an (n_documents, vocabulary_size) matrix."""
        if not documents:
            return np.zeros((0, len(self.vocabulary_)), dtype=float)
        return np.vstack([self.transform(doc) for doc in documents])

    def get_vocabulary(self) -> List[str]:
        """Vocabulary terms in index order."""
        vocab = [''] * len(self.vocabulary_)
        for term, index in self.vocabulary_.items():
            vocab[index] = term
        return vocab

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary_)

    @property
    def is_fitted(self) -> bool:
        return self._fitted
