# fasttext_facade/infrastructure/fasttext_engine.py
# Only this module imports the fasttext binding. Everything above it goes
# through EmbeddingEnginePort.

import math
import struct
from typing import List, Sequence, Tuple

import fasttext
import numpy as np

from fasttext_facade.domain.errors import ModelNotLoadedError
from fasttext_facade.domain.interfaces import EmbeddingEnginePort
from fasttext_facade.domain.models import HyperparameterSnapshot
from fasttext_facade.infrastructure.training_command import parse_training_command


# ── Constants ─────────────────────────────────────────────────────────────────

# Header of every .bin / .ftz file: int32 magic, int32 format version.
FASTTEXT_FILEFORMAT_MAGIC = 793712314
FASTTEXT_VERSION = 12
HEADER_FORMAT = "<ii"

# fastText floors probabilities at 1e-5 before taking the log.
LOG_PROB_FLOOR = 1e-5

ON_UNICODE_ERROR = "strict"


def _single_line(text: str) -> str:
    # fastText processes one line at a time and rejects embedded newlines.
    return text.replace("\n", " ")


def _enum_name(value) -> str:
    # pybind enums print as "loss_name.softmax"
    return str(value).rsplit(".", 1)[-1]


class FastTextEngine(EmbeddingEnginePort):
    """
    Adapter over the `fasttext` Python binding.

    Holds at most one loaded model. The model's memory lives in the native
    library, so it is released only when unload() drops the reference.
    """

    def __init__(self):
        self._model = None

    # ─── Training ────────────────────────────────────────────────────────────

    def run_command(self, argv: Sequence[str]) -> None:
        command = parse_training_command(argv)
        print(
            f"[FastTextEngine] Training {command.mode} model on "
            f"'{command.input_path}' ..."
        )

        if command.is_supervised:
            model = fasttext.train_supervised(
                input=command.input_path, **command.options
            )
        else:
            model = fasttext.train_unsupervised(
                input=command.input_path, model=command.mode, **command.options
            )

        model.save_model(f"{command.output_path}.bin")
        self._write_vectors(model, f"{command.output_path}.vec")
        print(f"[FastTextEngine] Saved '{command.output_path}.bin' and '.vec'.")

    @staticmethod
    def _write_vectors(model, path: str) -> None:
        """Write the text vectors file: header line, then one word per line."""
        words = model.get_words()
        with open(path, "w", encoding="utf-8") as f:
            f.write(f"{len(words)} {model.get_dimension()}\n")
            for word in words:
                values = " ".join(f"{v:.5g}" for v in model.get_word_vector(word))
                f.write(f"{word} {values}\n")

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def check_format(self, path: str) -> bool:
        try:
            with open(path, "rb") as f:
                header = f.read(struct.calcsize(HEADER_FORMAT))
        except OSError:
            return False

        if len(header) < struct.calcsize(HEADER_FORMAT):
            return False

        magic, version = struct.unpack(HEADER_FORMAT, header)
        return magic == FASTTEXT_FILEFORMAT_MAGIC and version <= FASTTEXT_VERSION

    def load(self, path: str) -> None:
        print(f"[FastTextEngine] Loading model: {path} ...")
        self._model = fasttext.load_model(path)
        print("[FastTextEngine] Model ready.")

    def is_ready(self) -> bool:
        """
        True only for an internally consistent model. A file with a valid
        header can still deserialize into an empty or mis-sized model
        without the native loader raising.
        """
        if self._model is None:
            return False

        args = self._model.f.getArgs()
        n_words = len(self._model.get_words())
        if args.dim <= 0 or n_words == 0:
            return False
        if self._model.is_quantized():
            return True

        with memoryview(self._model.f.getInputMatrix()) as input_matrix:
            return tuple(input_matrix.shape) == (n_words + args.bucket, args.dim)

    def unload(self) -> None:
        self._model = None

    def _require_model(self):
        if self._model is None:
            raise ModelNotLoadedError("No model is loaded in the engine.")
        return self._model

    # ─── Inference ───────────────────────────────────────────────────────────

    def test(self, path: str, k: int) -> None:
        n_examples, precision, recall = self._require_model().test(path, k)
        print(f"N\t{n_examples}")
        print(f"P@{k}\t{precision:.3f}")
        print(f"R@{k}\t{recall:.3f}")

    def predict(self, text: str, k: int, threshold: float) -> List[Tuple[str, float]]:
        # Calls the native predict directly: it already yields (prob, label)
        # pairs, and the Python wrapper's array conversion breaks on numpy 2.
        predictions = self._require_model().f.predict(
            _single_line(text), k, threshold, ON_UNICODE_ERROR
        )
        return [
            (label, math.log(max(probability, LOG_PROB_FLOOR)))
            for probability, label in predictions
        ]

    def word_vector(self, word: str) -> np.ndarray:
        vector = self._require_model().get_word_vector(_single_line(word))
        return np.asarray(vector, dtype=np.float32)

    def sentence_vector(self, sentence: str) -> np.ndarray:
        vector = self._require_model().get_sentence_vector(_single_line(sentence))
        return np.asarray(vector, dtype=np.float32)

    def subword_vector(self, subword: str) -> np.ndarray:
        model = self._require_model()
        args = model.f.getArgs()
        if args.bucket == 0:
            # No subword table (e.g. supervised model without n-grams).
            return np.zeros(args.dim, dtype=np.float32)

        vector = model.get_input_vector(model.get_subword_id(_single_line(subword)))
        return np.asarray(vector, dtype=np.float32)

    # ─── Introspection ───────────────────────────────────────────────────────

    def hyperparameters(self) -> HyperparameterSnapshot:
        args = self._require_model().f.getArgs()
        return HyperparameterSnapshot(
            lr=float(args.lr),
            lr_update_rate=int(args.lrUpdateRate),
            dim=int(args.dim),
            context_window_size=int(args.ws),
            epoch=int(args.epoch),
            min_count=int(args.minCount),
            min_count_label=int(args.minCountLabel),
            n_sampled_negatives=int(args.neg),
            word_ngrams=int(args.wordNgrams),
            loss_name=_enum_name(args.loss),
            model_name=_enum_name(args.model),
            bucket=int(args.bucket),
            minn=int(args.minn),
            maxn=int(args.maxn),
            sampling_threshold=float(args.t),
            label_prefix=args.label,
            pretrained_vectors_file_name=args.pretrainedVectors,
        )

    def words(self) -> List[str]:
        return list(self._require_model().get_words())

    def labels(self) -> List[str]:
        words_and_counts = self._require_model().f.getLabels(ON_UNICODE_ERROR)
        return list(words_and_counts[0])
