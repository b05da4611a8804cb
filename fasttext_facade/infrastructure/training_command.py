# fasttext_facade/infrastructure/training_command.py

from typing import Any, Callable, Dict, Sequence, Tuple

from fasttext_facade.domain.errors import TrainingCommandError
from fasttext_facade.domain.models import TrainingCommand


TRAINING_MODES = ("supervised", "skipgram", "cbow")
LOSS_NAMES = ("ns", "hs", "softmax", "ova")

# ── Flag grammar ──────────────────────────────────────────────────────────────
# Command-line flag → (keyword accepted by fasttext.train_*, value parser)
FLAG_SPECS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "-lr":                ("lr", float),
    "-lrUpdateRate":      ("lrUpdateRate", int),
    "-dim":               ("dim", int),
    "-ws":                ("ws", int),
    "-epoch":             ("epoch", int),
    "-minCount":          ("minCount", int),
    "-minCountLabel":     ("minCountLabel", int),
    "-neg":               ("neg", int),
    "-wordNgrams":        ("wordNgrams", int),
    "-loss":              ("loss", str),
    "-bucket":            ("bucket", int),
    "-minn":              ("minn", int),
    "-maxn":              ("maxn", int),
    "-thread":            ("thread", int),
    "-t":                 ("t", float),
    "-label":             ("label", str),
    "-verbose":           ("verbose", int),
    "-pretrainedVectors": ("pretrainedVectors", str),
    "-seed":              ("seed", int),
}


def parse_training_command(argv: Sequence[str]) -> TrainingCommand:
    """
    Turn a C-style training argv into a TrainingCommand.

    argv[0] is the program name and is ignored, argv[1] selects the mode,
    everything after it must be `-flag value` pairs.
    """
    if len(argv) < 2:
        raise TrainingCommandError(
            f"Missing training mode. Expected one of: {', '.join(TRAINING_MODES)}."
        )

    mode = argv[1]
    if mode not in TRAINING_MODES:
        raise TrainingCommandError(
            f"Unknown training mode '{mode}'. Expected one of: {', '.join(TRAINING_MODES)}."
        )

    input_path = None
    output_path = None
    options: Dict[str, Any] = {}

    tokens = list(argv[2:])
    if len(tokens) % 2 != 0:
        raise TrainingCommandError(f"Flag '{tokens[-1]}' is missing a value.")

    for flag, raw_value in zip(tokens[::2], tokens[1::2]):
        if flag == "-input":
            input_path = raw_value
            continue
        if flag == "-output":
            output_path = raw_value
            continue
        if flag not in FLAG_SPECS:
            raise TrainingCommandError(f"Unknown flag '{flag}'.")

        keyword, parser = FLAG_SPECS[flag]
        try:
            value = parser(raw_value)
        except ValueError as error:
            raise TrainingCommandError(
                f"Invalid value '{raw_value}' for flag '{flag}'."
            ) from error

        if keyword == "loss" and value not in LOSS_NAMES:
            raise TrainingCommandError(
                f"Unknown loss '{value}'. Expected one of: {', '.join(LOSS_NAMES)}."
            )
        options[keyword] = value

    if not input_path:
        raise TrainingCommandError("Missing required flag '-input'.")
    if not output_path:
        raise TrainingCommandError("Missing required flag '-output'.")

    return TrainingCommand(
        mode=mode,
        input_path=input_path,
        output_path=output_path,
        options=options,
    )
