"""
Text package for record documents.
Provides tokenization, keyword extraction and TF-IDF vectorization.
"""

from .processing import TextProcessor, extract_keywords, tokenize
from .tfidf import TfidfVocabulary

__all__ = [
    'TextProcessor',
    'TfidfVocabulary',
    'extract_keywords',
    'tokenize',
]
