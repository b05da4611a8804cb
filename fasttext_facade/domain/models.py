# fasttext_facade/domain/models.py

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class FacadeState(Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"


@dataclass(frozen=True)
class ProbLabel:
    """
    A single prediction: a label and its natural-log probability.
    """
    label: str
    log_prob: float

    @property
    def probability(self) -> float:
        return math.exp(self.log_prob)

    def __repr__(self) -> str:
        return f"ProbLabel(label='{self.label}', log_prob={self.log_prob:.4f})"


@dataclass(frozen=True)
class HyperparameterSnapshot:
    """
    Training arguments stored in a model file.
    Captured once at load time; never changes while the model stays loaded.
    """
    lr: float
    lr_update_rate: int
    dim: int
    context_window_size: int
    epoch: int
    min_count: int
    min_count_label: int
    n_sampled_negatives: int
    word_ngrams: int
    loss_name: str
    model_name: str
    bucket: int
    minn: int
    maxn: int
    sampling_threshold: float
    label_prefix: str
    pretrained_vectors_file_name: str


@dataclass(frozen=True)
class TrainingCommand:
    """
    Typed form of a training argv: mode, input/output paths and the
    remaining flags already converted to engine keyword arguments.
    """
    mode: str
    input_path: str
    output_path: str
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_supervised(self) -> bool:
        return self.mode == "supervised"
