# fasttext_facade/interface/cli.py

from dataclasses import asdict
from typing import List
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt
from rich import box

from fasttext_facade.domain.models import HyperparameterSnapshot, ProbLabel


console = Console()


def display_welcome_banner(model_path: str) -> None:
    console.print(Panel.fit(
        "[bold cyan]🏷  fastText Prediction[/bold cyan]\n"
        f"[dim]Model: {model_path}[/dim]",
        box=box.DOUBLE,
        border_style="cyan",
    ))


def prompt_for_text() -> str:
    return Prompt.ask("\n[bold yellow]✎ Text to classify[/bold yellow]")


def display_predictions(text: str, predictions: List[ProbLabel]) -> None:
    console.print(f"\n[bold]Predictions for:[/bold] [italic]\"{text}\"[/italic]\n")

    if not predictions:
        console.print("[dim]No label above the threshold.[/dim]")
        return

    table = Table(box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Label", style="bold white")
    table.add_column("Probability", justify="right")
    table.add_column("Log prob", justify="right", style="dim")

    for rank, prediction in enumerate(predictions, start=1):
        color = _probability_to_color(prediction.probability)
        table.add_row(
            str(rank),
            prediction.label,
            f"[{color}]{prediction.probability:.4f}[/{color}]",
            f"{prediction.log_prob:.4f}",
        )

    console.print(table)


def display_model_info(
    model_path: str,
    hyperparameters: HyperparameterSnapshot,
    n_words: int,
    n_labels: int,
) -> None:
    table = Table(title=f"Model: {model_path}", box=box.SIMPLE_HEAVY)
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="bold white")

    table.add_row("number of words", str(n_words))
    table.add_row("number of labels", str(n_labels))
    for name, value in asdict(hyperparameters).items():
        table.add_row(name.replace("_", " "), str(value))

    console.print(table)


def display_info(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def display_error(message: str) -> None:
    console.print(f"\n[bold red]✗ Error:[/bold red] {message}\n")


def ask_continue() -> bool:
    answer = Prompt.ask(
        "\n[dim]Classify another text?[/dim]",
        choices=["y", "n"],
        default="y",
    )
    return answer.lower() == "y"


def _probability_to_color(probability: float) -> str:
    if probability >= 0.75:
        return "green"
    elif probability >= 0.40:
        return "yellow"
    else:
        return "red"
