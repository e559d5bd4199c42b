#!/usr/bin/env python3
"""Runtime configuration for the litscope clustering core"""

import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# Clustering defaults
DEFAULT_ALGORITHM = os.getenv("LITSCOPE_DEFAULT_ALGORITHM", "kmeans")
DEFAULT_NUM_CLUSTERS = int(os.getenv("LITSCOPE_NUM_CLUSTERS", "5"))

# Text processing
MAX_FEATURES = int(os.getenv("LITSCOPE_MAX_FEATURES", "1000"))
MIN_WORD_LENGTH = int(os.getenv("LITSCOPE_MIN_WORD_LENGTH", "3"))
SCALING_METHOD = os.getenv("LITSCOPE_SCALING_METHOD", "zscore")

# Algorithm parameters
KMEANS_MAX_ITERATIONS = int(os.getenv("LITSCOPE_KMEANS_MAX_ITERATIONS", "100"))
KMEANS_TOLERANCE = float(os.getenv("LITSCOPE_KMEANS_TOLERANCE", "1e-4"))
LINKAGE = os.getenv("LITSCOPE_LINKAGE", "average")

# Quality computation limits
MAX_SILHOUETTE_SAMPLES = int(os.getenv("LITSCOPE_MAX_SILHOUETTE_SAMPLES", "800"))
MAX_SILHOUETTE_COMPARISONS = int(os.getenv("LITSCOPE_MAX_SILHOUETTE_COMPARISONS", "200"))
TIMEOUT_SECONDS = float(os.getenv("LITSCOPE_TIMEOUT_SECONDS", "300"))

# Unset means every run draws fresh entropy
_random_state = os.getenv("LITSCOPE_RANDOM_STATE")
RANDOM_STATE = int(_random_state) if _random_state else None


def setup_logging(level: str = None) -> None:
    """
    Configure root logging with the project format.

    Does nothing when the host application has already installed handlers.
    """
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
