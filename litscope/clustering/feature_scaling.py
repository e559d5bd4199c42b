"""Per-dimension feature scaling, fitted separately for each feature group."""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np
from sklearn.exceptions import NotFittedError
from sklearn.preprocessing import MinMaxScaler, StandardScaler

from litscope.errors import InvalidInputError
from litscope.models import SCALING_METHODS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScalingParams:
    """z-score uses (center=mean, spread=std); min-max uses (center=min, spread=max - min)"""
    method: str
    center: float
    spread: float


class FeatureScaler:
    """
    z-score or min-max scaling of a feature group.

    A zero standard deviation is treated as 1, and min == max as max = min + 1,
    so constant dimensions scale to 0 instead of dividing by zero.
    """

    def __init__(self, method: str = 'zscore'):
        if method not in SCALING_METHODS:
            raise InvalidInputError(f"Unsupported scaling method: {method}. Use one of {', '.join(SCALING_METHODS)}")
        self.method = method
        self._scaler = None
        self._n_features = None

    def fit(self, vectors: np.ndarray) -> 'FeatureScaler':
        X = np.asarray(vectors, dtype=float)
        if X.ndim != 2 or X.shape[0] == 0:
            raise InvalidInputError("FeatureScaler.fit needs a non-empty 2D matrix")

        self._n_features = X.shape[1]
        if self._n_features == 0:
            self._scaler = None
            return self

        # Both sklearn scalers replace a zero range with 1
        self._scaler = StandardScaler() if self.method == 'zscore' else MinMaxScaler()
        self._scaler.fit(X)
        return self

    def transform(self, vectors: np.ndarray) -> np.ndarray:
        if self._n_features is None:
            raise NotFittedError("FeatureScaler is not fitted yet. Call 'fit' first.")
        X = np.asarray(vectors, dtype=float)
        if X.ndim != 2 or X.shape[1] != self._n_features:
            raise InvalidInputError(f"Expected {self._n_features} feature columns, got shape {X.shape}")
        if self._scaler is None:
            return X.copy()
        return self._scaler.transform(X)

    def fit_transform(self, vectors: np.ndarray) -> np.ndarray:
        return self.fit(vectors).transform(vectors)

    @property
    def params(self) -> List[ScalingParams]:
        """Fitted parameters, one entry per dimension."""
        if self._n_features is None:
            raise NotFittedError("FeatureScaler is not fitted yet. Call 'fit' first.")
        if self._scaler is None:
            return []
        if self.method == 'zscore':
            return [ScalingParams('zscore', float(mean), float(scale))
                    for mean, scale in zip(self._scaler.mean_, self._scaler.scale_)]
        # MinMaxScaler.scale_ is 1 / range, with constant columns already mapped to range 1
        return [ScalingParams('minmax', float(low), float(1.0 / scale))
                for low, scale in zip(self._scaler.data_min_, self._scaler.scale_)]

    @staticmethod
    def apply(value: float, params: ScalingParams) -> float:
        """Scale one value with one dimension's parameters."""
        return (value - params.center) / params.spread


def scale_features(vectors: np.ndarray, method: str = 'zscore') -> np.ndarray:
    """Fit a scaler on ``vectors`` and return the scaled copy."""
    return FeatureScaler(method).fit_transform(vectors)


__all__ = ['FeatureScaler', 'ScalingParams', 'scale_features']
