# fasttext_facade/application/model_facade.py

import math
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from fasttext_facade.domain.errors import (
    IncompatibleFormatError,
    InitializationFailureError,
    InvalidArgumentError,
    ModelFileNotFoundError,
    ModelNotLoadedError,
)
from fasttext_facade.domain.interfaces import EmbeddingEnginePort
from fasttext_facade.domain.models import FacadeState, HyperparameterSnapshot, ProbLabel
from fasttext_facade.infrastructure.bundled_model import (
    DEFAULT_MODEL_RESOURCE,
    materialize_bundled_model,
)


# Prepended to training argv so engines with a C-style main() see argv[0].
PROGRAM_NAME = "fasttext"

# Returned when a prediction yields no candidate at all.
UNDETERMINED_LABEL = "und"


class FastTextFacade:
    """
    Single-session facade over one embedding engine.

    Lifecycle:
    - UNLOADED → load_model() / load_bundled_default() → LOADED
    - LOADED   → unload_model() → UNLOADED (safe to repeat)
    - Loading while LOADED unloads the current model once the new file has
      passed the existence and format checks.

    Every inference and introspection call requires LOADED and raises
    ModelNotLoadedError otherwise. The facade does no locking: callers that
    share one instance between threads must serialize all calls themselves.

    Use it as a context manager to guarantee the native model is released:

        with FastTextFacade(FastTextEngine()) as facade:
            facade.load_model("model.bin")
            facade.predict_label("I like soccer")
    """

    def __init__(self, engine: EmbeddingEnginePort):
        self._engine = engine
        self._state = FacadeState.UNLOADED
        self._model_path: Optional[str] = None
        self._hyperparameters: Optional[HyperparameterSnapshot] = None
        # Temp copy of the bundled model, deleted on unload.
        self._temp_model_path: Optional[str] = None

    def __enter__(self) -> "FastTextFacade":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.unload_model()

    def close(self) -> None:
        self.unload_model()

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    @property
    def state(self) -> FacadeState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is FacadeState.LOADED

    @property
    def model_path(self) -> Optional[str]:
        return self._model_path

    def check_format(self, path: str) -> bool:
        return self._engine.check_format(path)

    def load_model(self, path: str) -> None:
        """
        Validate and load a model file.

        Raises:
            ModelFileNotFoundError:     path does not name an existing file.
            IncompatibleFormatError:    header not understood by the engine.
            InitializationFailureError: engine could not initialize the model.
        """
        if not Path(path).is_file():
            raise ModelFileNotFoundError(f"Model file doesn't exist: '{path}'")

        if not self._engine.check_format(path):
            raise IncompatibleFormatError(
                f"Model file '{path}' has a format this engine does not support."
            )

        if self.is_loaded:
            print(f"[FastTextFacade] Replacing loaded model '{self._model_path}'.")
            self._release()

        try:
            self._engine.load(path)
        except (ValueError, RuntimeError, OSError, MemoryError) as error:
            self._engine.unload()
            raise InitializationFailureError(
                f"Engine failed to initialize model '{path}': {error}"
            ) from error

        if not self._engine.is_ready():
            self._engine.unload()
            raise InitializationFailureError(
                f"Engine reports model '{path}' is not ready after loading. "
                f"The payload is probably corrupt."
            )

        self._hyperparameters = self._engine.hyperparameters()
        self._model_path = path
        self._state = FacadeState.LOADED
        print(
            f"[FastTextFacade] Loaded '{path}' "
            f"({self._hyperparameters.model_name}, dim={self._hyperparameters.dim})."
        )

    def load_bundled_default(self, resource_name: str = DEFAULT_MODEL_RESOURCE) -> None:
        """
        Load the language identification model shipped with the package.

        The resource is copied to a private temp file first; that file is
        removed again on unload_model() or if loading fails.
        """
        temp_path = materialize_bundled_model(resource_name)
        try:
            self.load_model(temp_path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise
        self._temp_model_path = temp_path

    def unload_model(self) -> None:
        if not self.is_loaded:
            return
        print(f"[FastTextFacade] Unloading model '{self._model_path}'.")
        self._release()

    def _release(self) -> None:
        self._engine.unload()
        if self._temp_model_path is not None:
            Path(self._temp_model_path).unlink(missing_ok=True)
            self._temp_model_path = None
        self._hyperparameters = None
        self._model_path = None
        self._state = FacadeState.UNLOADED

    def _require_loaded(self) -> None:
        if not self.is_loaded:
            raise ModelNotLoadedError("No model loaded. Call load_model() first.")

    # ─── Training ────────────────────────────────────────────────────────────

    def run_training_command(self, args: Sequence[str]) -> None:
        """
        Forward a training argv to the engine, e.g.
        ["supervised", "-input", "train.txt", "-output", "model"].

        Does not load the resulting model.
        """
        self._engine.run_command([PROGRAM_NAME, *args])

    # ─── Inference ───────────────────────────────────────────────────────────

    def test(self, test_file: str, k: int = 1) -> None:
        self._require_loaded()
        _require_positive_k(k)
        self._engine.test(test_file, k)

    def predict_top_k(self, text: str, k: int = 1, threshold: float = 0.0) -> List[ProbLabel]:
        """
        Up to k labels with probability >= threshold, most probable first.
        """
        self._require_loaded()
        _require_positive_k(k)

        candidates = [
            ProbLabel(label=label, log_prob=log_prob)
            for label, log_prob in self._engine.predict(text, k, threshold)
        ]
        # Compare in log space: exp(log(p)) can round just below p.
        if threshold > 0:
            floor = math.log(threshold)
            candidates = [c for c in candidates if c.log_prob >= floor]
        # sorted() is stable, so equal probabilities keep the engine's order.
        survivors = sorted(candidates, key=lambda c: c.log_prob, reverse=True)
        return survivors[:k]

    def predict_labels(self, text: str, k: int = 1, threshold: float = 0.0) -> List[str]:
        return [c.label for c in self.predict_top_k(text, k, threshold)]

    def predict_label(self, text: str) -> str:
        labels = self.predict_labels(text, k=1)
        return labels[0] if labels else UNDETERMINED_LABEL

    def predict_with_probability(self, text: str) -> ProbLabel:
        predictions = self.predict_top_k(text, k=1)
        if predictions:
            return predictions[0]
        return ProbLabel(label=UNDETERMINED_LABEL, log_prob=0.0)

    def word_vector(self, word: str) -> np.ndarray:
        self._require_loaded()
        return self._engine.word_vector(word)

    def sentence_vector(self, sentence: str) -> np.ndarray:
        self._require_loaded()
        return self._engine.sentence_vector(sentence)

    def subword_vector(self, fragment: str) -> np.ndarray:
        self._require_loaded()
        return self._engine.subword_vector(fragment)

    # ─── Introspection ───────────────────────────────────────────────────────

    @property
    def hyperparameters(self) -> HyperparameterSnapshot:
        self._require_loaded()
        return self._hyperparameters

    @property
    def dim(self) -> int:
        return self.hyperparameters.dim

    def words(self) -> List[str]:
        self._require_loaded()
        return self._engine.words()

    @property
    def n_words(self) -> int:
        return len(self.words())

    def labels(self) -> List[str]:
        self._require_loaded()
        return self._engine.labels()

    @property
    def n_labels(self) -> int:
        return len(self.labels())


def _require_positive_k(k: int) -> None:
    if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
        raise InvalidArgumentError(f"k must be a positive integer, got {k!r}.")
