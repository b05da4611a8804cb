# tests/test_fasttext_engine.py
#
# Exercises the real fasttext binding: trains tiny models in a temp
# directory, then drives them through the facade.

import struct

import numpy as np
import pytest

from fasttext_facade.application.model_facade import FastTextFacade, UNDETERMINED_LABEL
from fasttext_facade.domain.errors import (
    IncompatibleFormatError,
    InitializationFailureError,
    ModelNotLoadedError,
)
from fasttext_facade.infrastructure.fasttext_engine import (
    FASTTEXT_FILEFORMAT_MAGIC,
    FASTTEXT_VERSION,
    FastTextEngine,
)


LABELED_LINES = [
    "__label__sports I like soccer",
    "__label__sports Soccer is the most popular sport in the world",
    "__label__sports Do you like football ?",
    "__label__sports The team won the soccer match",
    "__label__sports Basketball players train every day",
    "__label__sports What is the most popular sport in the US ?",
    "__label__food I like pizza and pasta",
    "__label__food This restaurant serves great sushi",
    "__label__food Do you like chocolate cake ?",
    "__label__food The soup was too salty",
    "__label__food We cooked rice and beans for dinner",
    "__label__food Fresh bread from the bakery",
]

UNLABELED_LINES = [
    "soccer is the word in american english",
    "football is the word used across the world",
    "players kick the ball across the field",
    "the match ended with a late goal",
] * 5


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture(scope="module")
def model_dir(tmp_path_factory):
    return tmp_path_factory.mktemp("models")


@pytest.fixture(scope="module")
def supervised_model(model_dir) -> str:
    """Train once per module; returns the output prefix."""
    train_path = model_dir / "labeled_data.txt"
    train_path.write_text("\n".join(LABELED_LINES * 5) + "\n", encoding="utf-8")
    output = str(model_dir / "supervised.model")

    FastTextFacade(FastTextEngine()).run_training_command([
        "supervised",
        "-input", str(train_path),
        "-output", output,
        "-epoch", "25",
        "-thread", "1",
    ])
    return output


@pytest.fixture(scope="module")
def skipgram_model(model_dir) -> str:
    train_path = model_dir / "unlabeled_data.txt"
    train_path.write_text("\n".join(UNLABELED_LINES) + "\n", encoding="utf-8")
    output = str(model_dir / "skipgram.model")

    FastTextFacade(FastTextEngine()).run_training_command([
        "skipgram",
        "-input", str(train_path),
        "-output", output,
        "-bucket", "100",
        "-minCount", "1",
        "-dim", "10",
        "-thread", "1",
    ])
    return output


@pytest.fixture
def supervised(supervised_model):
    with FastTextFacade(FastTextEngine()) as facade:
        facade.load_model(supervised_model + ".bin")
        yield facade


# ── check_format ──────────────────────────────────────────────────────────────

def test_check_format_missing_file(tmp_path):
    assert FastTextEngine().check_format(str(tmp_path / "nope.bin")) is False


def test_check_format_rejects_foreign_file(tmp_path):
    path = tmp_path / "notes.bin"
    path.write_bytes(b"hello world, not a model")
    assert FastTextEngine().check_format(str(path)) is False


def test_check_format_rejects_truncated_header(tmp_path):
    path = tmp_path / "short.bin"
    path.write_bytes(b"\xba\x16")
    assert FastTextEngine().check_format(str(path)) is False


def test_check_format_rejects_newer_version(tmp_path):
    path = tmp_path / "future.bin"
    path.write_bytes(struct.pack("<ii", FASTTEXT_FILEFORMAT_MAGIC, FASTTEXT_VERSION + 1))
    assert FastTextEngine().check_format(str(path)) is False


def test_check_format_accepts_trained_model(supervised_model):
    assert FastTextEngine().check_format(supervised_model + ".bin") is True


def test_loading_foreign_file_is_incompatible_not_missing(tmp_path):
    path = tmp_path / "notes.bin"
    path.write_text("just text", encoding="utf-8")

    with pytest.raises(IncompatibleFormatError):
        FastTextFacade(FastTextEngine()).load_model(str(path))


def _oversized_matrix_body() -> bytes:
    """Valid args and an empty dictionary, then an input matrix too large to allocate."""
    args = struct.pack(
        "<12id",
        10,      # dim
        5,       # ws
        5,       # epoch
        1,       # minCount
        5,       # neg
        1,       # wordNgrams
        3,       # loss: softmax
        3,       # model: supervised
        0,       # bucket
        0,       # minn
        0,       # maxn
        100,     # lrUpdateRate
        1e-4,    # t
    )
    dictionary = struct.pack("<iiiqq", 0, 0, 0, 0, -1)
    quant_input = b"\x00"
    matrix_shape = struct.pack("<qq", 2 ** 36, 2 ** 20)
    return args + dictionary + quant_input + matrix_shape


@pytest.mark.parametrize(
    "body",
    [b"", b"\x00" * 8, _oversized_matrix_body()],
    ids=["header-only", "zero-filled", "oversized-matrix"],
)
def test_corrupt_payload_fails_initialization(tmp_path, body):
    path = tmp_path / "corrupt.bin"
    path.write_bytes(struct.pack("<ii", FASTTEXT_FILEFORMAT_MAGIC, FASTTEXT_VERSION) + body)
    facade = FastTextFacade(FastTextEngine())

    assert facade.check_format(str(path)) is True
    with pytest.raises(InitializationFailureError):
        facade.load_model(str(path))

    assert facade.is_loaded is False
    with pytest.raises(ModelNotLoadedError):
        facade.word_vector("soccer")


def test_engine_is_ready_after_loading_trained_model(supervised_model):
    engine = FastTextEngine()
    engine.load(supervised_model + ".bin")
    assert engine.is_ready() is True

    engine.unload()
    assert engine.is_ready() is False


# ── Training ──────────────────────────────────────────────────────────────────

def test_training_writes_bin_and_vec(supervised_model):
    with open(supervised_model + ".vec", encoding="utf-8") as f:
        n_words, dim = (int(v) for v in f.readline().split())
        first_row = f.readline().split()

    assert n_words > 0
    assert len(first_row) == dim + 1


def test_engine_without_model_refuses_queries():
    engine = FastTextEngine()
    assert engine.is_ready() is False
    with pytest.raises(ModelNotLoadedError):
        engine.word_vector("soccer")


# ── Supervised model through the facade ───────────────────────────────────────

def test_predict_label_from_training_labels(supervised):
    label = supervised.predict_label("I like soccer")

    assert label != UNDETERMINED_LABEL
    assert label in supervised.labels()


def test_predict_top_k_invariants(supervised):
    predictions = supervised.predict_top_k("Do you like soccer ?", k=2, threshold=0.01)

    assert len(predictions) <= 2
    assert all(p.probability >= 0.01 for p in predictions)
    probabilities = [p.probability for p in predictions]
    assert probabilities == sorted(probabilities, reverse=True)
    assert all(p.log_prob <= 0.0 for p in predictions)


def test_predict_with_probability(supervised):
    best = supervised.predict_with_probability("What is the most popular sport in the US ?")
    assert best.label in supervised.labels()
    assert 0.0 < best.probability <= 1.0


def test_predict_accepts_multiline_text(supervised):
    assert supervised.predict_labels("I like\nsoccer", k=1)


@pytest.mark.parametrize("word", ["soccer", "qwertyuiop", ""])
def test_word_vector_length_is_dim(supervised, word):
    assert len(supervised.word_vector(word)) == supervised.dim


def test_sentence_vector_length_is_dim(supervised):
    sentence = (
        "Soccer is the word in American English.\n"
        "Football is the word used across the world."
    )
    vector = supervised.sentence_vector(sentence)
    assert vector.shape == (supervised.dim,)


def test_subword_vector_without_buckets_is_zero(supervised):
    assert supervised.hyperparameters.bucket == 0
    vector = supervised.subword_vector("socc")
    assert vector.shape == (supervised.dim,)
    assert not vector.any()


def test_supervised_hyperparameters(supervised):
    params = supervised.hyperparameters

    assert params.model_name == "supervised"
    assert params.loss_name == "softmax"
    assert params.label_prefix == "__label__"
    assert params.epoch == 25
    assert params.dim == 100
    assert supervised.n_labels == 2
    assert supervised.n_words == len(supervised.words()) > 0


def test_evaluation_reports_metrics(supervised, supervised_model, model_dir, capsys):
    test_path = model_dir / "labeled_data.txt"
    supervised.test(str(test_path), 1)

    output = capsys.readouterr().out
    assert "P@1" in output
    assert "R@1" in output


def test_unload_twice_then_query_fails(supervised):
    supervised.unload_model()
    supervised.unload_model()
    with pytest.raises(ModelNotLoadedError):
        supervised.predict_label("I like soccer")


# ── Unsupervised model ────────────────────────────────────────────────────────

def test_skipgram_vectors(skipgram_model):
    with FastTextFacade(FastTextEngine()) as facade:
        facade.load_model(skipgram_model + ".bin")

        assert facade.hyperparameters.model_name == "skipgram"
        assert facade.hyperparameters.bucket == 100
        assert facade.dim == 10

        subword = facade.subword_vector("socc")
        assert subword.shape == (10,)
        assert subword.dtype == np.float32
        assert len(facade.word_vector("unseenword")) == 10


def test_subword_vector_treats_newline_as_space(skipgram_model):
    with FastTextFacade(FastTextEngine()) as facade:
        facade.load_model(skipgram_model + ".bin")

        assert np.array_equal(
            facade.subword_vector("so\ncc"), facade.subword_vector("so cc")
        )
