# fasttext_facade/domain/interfaces.py

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple
import numpy as np

from .models import HyperparameterSnapshot


class EmbeddingEnginePort(ABC):
    """
    Port for the embedding engine that does the actual training and math.
    The facade only ever talks to the engine through these calls.
    """

    @abstractmethod
    def run_command(self, argv: Sequence[str]) -> None:
        """Run a training command. argv[0] is the program name."""
        ...

    @abstractmethod
    def check_format(self, path: str) -> bool: ...

    @abstractmethod
    def load(self, path: str) -> None: ...

    @abstractmethod
    def is_ready(self) -> bool: ...

    @abstractmethod
    def unload(self) -> None: ...

    @abstractmethod
    def test(self, path: str, k: int) -> None:
        """Evaluate on a labeled file; metrics are reported by the engine."""
        ...

    @abstractmethod
    def predict(self, text: str, k: int, threshold: float) -> List[Tuple[str, float]]:
        """
        Return up to k (label, log_prob) pairs, most probable first.
        """
        ...

    @abstractmethod
    def word_vector(self, word: str) -> np.ndarray: ...

    @abstractmethod
    def sentence_vector(self, sentence: str) -> np.ndarray: ...

    @abstractmethod
    def subword_vector(self, subword: str) -> np.ndarray: ...

    @abstractmethod
    def hyperparameters(self) -> HyperparameterSnapshot: ...

    @abstractmethod
    def words(self) -> List[str]: ...

    @abstractmethod
    def labels(self) -> List[str]: ...
