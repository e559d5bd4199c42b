#!/usr/bin/env python3
"""
Text processing for bibliographic records.
Cleans and tokenizes free text, ranks keywords by frequency and builds documents.
"""
import logging
import re
from collections import Counter
from typing import List, Tuple

from litscope import config as settings
from litscope.models import Document, Record

logger = logging.getLogger(__name__)

# Common English stopwords
STOP_WORDS = frozenset({
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'by', 'for', 'from',
    'has', 'he', 'in', 'is', 'it', 'its', 'of', 'on', 'that', 'the',
    'to', 'was', 'were', 'will', 'with', 'this', 'but', 'they',
    'have', 'had', 'what', 'said', 'each', 'which', 'their', 'time',
    'if', 'up', 'out', 'many', 'then', 'them', 'these', 'so', 'some',
    'her', 'would', 'make', 'like', 'into', 'him', 'two', 'more',
    'go', 'no', 'way', 'could', 'my', 'than', 'first', 'been', 'call',
    'who', 'oil', 'sit', 'now', 'find', 'down', 'day', 'did', 'get',
    'come', 'made', 'may', 'part'
})

# Boilerplate vocabulary of abstracts and clinical papers
RESEARCH_STOP_WORDS = frozenset({
    'study', 'analysis', 'result', 'conclusion', 'method', 'background',
    'objective', 'purpose', 'finding', 'research', 'data', 'patient',
    'patients', 'group', 'groups', 'clinical', 'trial', 'test', 'treatment',
    'therapy', 'drug', 'showed', 'demonstrate', 'observed', 'measured',
    'significant', 'significantly', 'compared', 'control', 'controls',
    'versus', 'between', 'among', 'within', 'results', 'conclusions',
    'methods', 'findings', 'studies', 'trials', 'treatments', 'therapies'
})

ALL_STOP_WORDS = STOP_WORDS | RESEARCH_STOP_WORDS

DOCUMENT_KEYWORDS = 15


class TextProcessor:
    """Tokenizer and frequency-based keyword extractor"""

    def __init__(self, min_word_length: int = settings.MIN_WORD_LENGTH, remove_stopwords: bool = True):
        """
        Initialize the text processor.

        Args:
            min_word_length: Tokens shorter than this are dropped
            remove_stopwords: Whether to drop general and research stopwords
        """
        self.min_word_length = min_word_length
        self.remove_stopwords = remove_stopwords

    def preprocess_text(self, text: str) -> str:
        """Lowercase, strip punctuation and collapse whitespace."""
        if not text:
            return ""
        text = text.lower()
        text = re.sub(r'[^\w\s]', ' ', text)
        text = re.sub(r'\s+', ' ', text)
        return text.strip()

    def tokenize(self, text: str) -> List[str]:
        """Split cleaned text into tokens, applying length and stopword filters."""
        tokens = []
        for token in self.preprocess_text(text).split():
            if len(token) < self.min_word_length:
                continue
            if self.remove_stopwords and token in ALL_STOP_WORDS:
                continue
            tokens.append(token)
        return tokens

    def extract_keywords(self, text: str, top_k: int = 10) -> List[Tuple[str, float]]:
        """
        Rank keywords by normalized term frequency.

        Args:
            text: Free text to analyse
            top_k: Number of keywords to return

        Returns:
            List of (term, score) tuples, highest score first; ties keep first-seen order
        """
        tokens = self.tokenize(text)
        if not tokens:
            return []

        total = len(tokens)
        # most_common sorts stably, so equal counts stay in first-seen order
        return [(word, count / total) for word, count in Counter(tokens).most_common(top_k)]

    def create_text_document(self, record: Record) -> Document:
        """Build the document representation of a record."""
        parts = [record.title or '', record.abstract or '', ' '.join(record.terms), ' '.join(record.authors)]
        combined_text = ' '.join(part for part in parts if part)

        return Document(
            id=record.id,
            title=record.title or '',
            abstract=record.abstract or '',
            keywords=tuple(word for word, _ in self.extract_keywords(combined_text, DOCUMENT_KEYWORDS)),
            terms=tuple(record.terms),
            combined_text=combined_text,
        )


def tokenize(text: str, min_word_length: int = settings.MIN_WORD_LENGTH, remove_stopwords: bool = True) -> List[str]:
    return TextProcessor(min_word_length, remove_stopwords).tokenize(text)


def extract_keywords(text: str, top_k: int = 10, min_word_length: int = settings.MIN_WORD_LENGTH,
                     remove_stopwords: bool = True) -> List[Tuple[str, float]]:
    return TextProcessor(min_word_length, remove_stopwords).extract_keywords(text, top_k)


__all__ = [
    'ALL_STOP_WORDS',
    'RESEARCH_STOP_WORDS',
    'STOP_WORDS',
    'TextProcessor',
    'extract_keywords',
    'tokenize',
]
