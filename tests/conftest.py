# tests/conftest.py

import numpy as np
import pytest
from unittest.mock import MagicMock

from fasttext_facade.application.model_facade import FastTextFacade
from fasttext_facade.domain.models import HyperparameterSnapshot


TEST_DIM = 8


def make_snapshot(dim: int = TEST_DIM, **overrides) -> HyperparameterSnapshot:
    values = dict(
        lr=0.1,
        lr_update_rate=100,
        dim=dim,
        context_window_size=5,
        epoch=5,
        min_count=1,
        min_count_label=0,
        n_sampled_negatives=5,
        word_ngrams=1,
        loss_name="softmax",
        model_name="supervised",
        bucket=0,
        minn=0,
        maxn=0,
        sampling_threshold=1e-4,
        label_prefix="__label__",
        pretrained_vectors_file_name="",
    )
    values.update(overrides)
    return HyperparameterSnapshot(**values)


@pytest.fixture
def mock_engine() -> MagicMock:
    """Engine double that accepts any file and answers with dim-sized vectors."""
    engine = MagicMock()
    engine.check_format.return_value = True
    engine.is_ready.return_value = True
    engine.predict.return_value = []
    engine.word_vector.return_value = np.zeros(TEST_DIM, dtype=np.float32)
    engine.sentence_vector.return_value = np.zeros(TEST_DIM, dtype=np.float32)
    engine.subword_vector.return_value = np.zeros(TEST_DIM, dtype=np.float32)
    engine.hyperparameters.return_value = make_snapshot()
    engine.words.return_value = ["i", "like", "soccer"]
    engine.labels.return_value = ["__label__sports", "__label__food"]
    return engine


@pytest.fixture
def model_file(tmp_path) -> str:
    path = tmp_path / "model.bin"
    path.write_bytes(b"\x00" * 16)
    return str(path)


@pytest.fixture
def facade(mock_engine) -> FastTextFacade:
    return FastTextFacade(mock_engine)


@pytest.fixture
def loaded_facade(facade, model_file) -> FastTextFacade:
    facade.load_model(model_file)
    return facade
