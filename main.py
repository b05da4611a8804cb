# main.py

import sys
from typing import List

from fasttext_facade.application.model_facade import FastTextFacade
from fasttext_facade.domain.errors import FastTextFacadeError
from fasttext_facade.infrastructure.fasttext_engine import FastTextEngine
from fasttext_facade.infrastructure.training_command import TRAINING_MODES
from fasttext_facade.interface.cli import (
    display_welcome_banner,
    prompt_for_text,
    display_predictions,
    display_model_info,
    display_info,
    display_error,
    ask_continue,
)


DEFAULT_K = 1
DEFAULT_THRESHOLD = 0.0
BUNDLED_MODEL_FLAG = "--default"

USAGE = (
    "usage: python main.py <command> [args]\n\n"
    "  supervised|skipgram|cbow -input <file> -output <prefix> [flags]\n"
    "  predict <model.bin|--default> [k] [threshold]\n"
    "  info <model.bin|--default>\n"
    "  test <model.bin> <test_file> [k]\n"
)


def main(argv: List[str]) -> int:
    if not argv:
        print(USAGE)
        return 1

    command, args = argv[0], argv[1:]

    with FastTextFacade(FastTextEngine()) as facade:
        try:
            if command in TRAINING_MODES:
                facade.run_training_command(argv)
            elif command == "predict" and args:
                _load(facade, args[0])
                k = int(args[1]) if len(args) > 1 else DEFAULT_K
                threshold = float(args[2]) if len(args) > 2 else DEFAULT_THRESHOLD
                _prediction_loop(facade, k, threshold)
            elif command == "info" and args:
                _load(facade, args[0])
                display_model_info(
                    facade.model_path,
                    facade.hyperparameters,
                    facade.n_words,
                    facade.n_labels,
                )
            elif command == "test" and len(args) >= 2:
                _load(facade, args[0])
                k = int(args[2]) if len(args) > 2 else DEFAULT_K
                facade.test(args[1], k)
            else:
                print(USAGE)
                return 1
        except (FastTextFacadeError, ValueError) as error:
            display_error(str(error))
            return 1

    return 0


def _load(facade: FastTextFacade, target: str) -> None:
    if target == BUNDLED_MODEL_FLAG:
        facade.load_bundled_default()
    else:
        facade.load_model(target)
    display_info(f"Model loaded: {facade.n_labels} labels, dim={facade.dim}.")


def _prediction_loop(facade: FastTextFacade, k: int, threshold: float) -> None:
    display_welcome_banner(facade.model_path)
    while True:
        text = prompt_for_text()
        predictions = facade.predict_top_k(text, k, threshold)
        display_predictions(text, predictions)

        if not ask_continue():
            break


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
