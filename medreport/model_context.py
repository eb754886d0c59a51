"""
Module 4: Request-scoped model context
The placeholder classifier is inert: it holds weights but is never trained or used to score.
"""
import logging
from typing import Callable, Optional

import numpy as np

from medreport.extraction_rules import BUCKETS

logger = logging.getLogger("medreport.model_context")


class PlaceholderModel:
    def __init__(self, labels=BUCKETS, n_features: int = 64):
        self.labels = tuple(labels)
        self.weights = np.zeros((n_features, len(self.labels)), dtype=np.float32)
        self.is_trained = False

    @property
    def is_loaded(self) -> bool:
        return self.weights is not None

    def cleanup(self):
        self.weights = None


class ProcessingContext:
    """Owns per-request processing resources; use as a context manager."""

    def __init__(self, enable_model: bool = False,
                 model_factory: Callable[[], PlaceholderModel] = PlaceholderModel):
        self.enable_model = enable_model
        self.model_factory = model_factory
        self.model: Optional[PlaceholderModel] = None

    def ensure_model(self) -> Optional[PlaceholderModel]:
        if not self.enable_model:
            return None
        if self.model is None:
            self.model = self.model_factory()
            logger.debug("Placeholder model created (%d labels)", len(self.model.labels))
        return self.model

    def release(self):
        if self.model is None:
            return
        self.model.cleanup()
        self.model = None
        logger.debug("Placeholder model released")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
