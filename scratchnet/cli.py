import logging
import random
import sys
from pathlib import Path
from typing import Any, Optional

import click
from yaspin import yaspin
from yaspin.spinners import Spinners

from . import __version__
from .config import TrainingConfig
from .dataset import count_labels, load_dataset, read_idx_header, read_idx_labels
from .errors import ScratchNetError
from .models import TrainingReport
from .network import Network, UpdateRule
from .sampling import SampleOrder

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("scratchnet")


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """scratchnet - train a feed-forward digit classifier in pure Python.

    Reads IDX image and label files, builds a fully-connected sigmoid
    network and trains it one sample at a time by backpropagation.
    """


@cli.command(name="train")
@click.option("--images", "-i", required=True, type=click.Path(exists=True, dir_okay=False), help="IDX image file")
@click.option("--labels", "-l", required=True, type=click.Path(exists=True, dir_okay=False), help="IDX label file")
@click.option("--structure", "-s", type=str, help="Comma-separated layer sizes [default: 784,512,256,128,10]")
@click.option("--iterations", "-n", type=int, help="Number of training iterations [default: 1000]")
@click.option("--learning-rate", "-r", type=float, help="Learning rate [default: 0.01]")
@click.option(
    "--sampling",
    type=click.Choice([order.value for order in SampleOrder]),
    help="Sample selection strategy [default: sequential]",
)
@click.option("--index", type=int, help="Sample index used with --sampling fixed [default: 0]")
@click.option(
    "--update-rule",
    type=click.Choice([rule.value for rule in UpdateRule]),
    help="Parameter update convention [default: standard]",
)
@click.option("--seed", type=int, help="Seed for weight initialisation and shuffling")
@click.option("--limit", type=int, help="Only load the first N samples")
@click.option("--log-interval", type=int, help="Record the cost every N iterations [default: 100]")
@click.option(
    "--evaluate/--no-evaluate",
    default=False,
    help="Measure classification accuracy on the loaded samples after training [default: no-evaluate]",
)
@click.option(
    "--eval-limit",
    type=click.IntRange(min=1),
    help="Only evaluate the first N samples (implies --evaluate)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="TOML configuration file",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format [default: text]",
)
@click.option("--output", "-o", type=str, help="Output file path for the report")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def train_command(
    images: str,
    labels: str,
    structure: Optional[str],
    iterations: Optional[int],
    learning_rate: Optional[float],
    sampling: Optional[str],
    index: Optional[int],
    update_rule: Optional[str],
    seed: Optional[int],
    limit: Optional[int],
    log_interval: Optional[int],
    evaluate: bool,
    eval_limit: Optional[int],
    config_path: Optional[str],
    output_format: str,
    output: Optional[str],
    verbose: bool,
) -> None:
    """Train a network on an IDX dataset and report the result."""
    if verbose:
        logger.setLevel(logging.DEBUG)

    try:
        config = TrainingConfig.from_cli_args(
            Path(config_path) if config_path else None,
            structure=structure,
            iterations=iterations,
            learning_rate=learning_rate,
            sampling=sampling,
            index=index,
            update_rule=update_rule,
            seed=seed,
            limit=limit,
            log_interval=log_interval,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    spinner = None
    try:
        dataset = load_dataset(images, labels, limit=config.limit)

        network = Network(
            config.structure,
            learning_rate=config.learning_rate,
            update_rule=config.update_rule,
            rng=random.Random(config.seed) if config.seed is not None else None,
        )

        progress_callback = None
        if output_format == "text" and not output:
            spinner = yaspin(Spinners.dots, text=f"Training {click.style(str(config.structure), fg='cyan')}")
            spinner.start()

            def update_progress(message, percentage, spinner=spinner):
                spinner.text = f"{message} ({percentage:.1f}%)"

            progress_callback = update_progress

        report = network.train(
            dataset,
            config.iterations,
            sampling=config.sampling,
            index=config.index,
            seed=config.seed,
            log_interval=config.log_interval,
            progress_callback=progress_callback,
        )
        if evaluate or eval_limit is not None:
            report.accuracy = network.evaluate(dataset, limit=eval_limit, progress_callback=progress_callback)
            report.evaluated_samples = len(dataset) if eval_limit is None else min(eval_limit, len(dataset))

        if spinner:
            spinner.ok(click.style("✅ Done", fg="green", bold=True))
    except (ScratchNetError, OSError) as e:
        if spinner:
            spinner.fail(click.style("❌ Error", fg="red", bold=True))
        logger.error(f"Training failed: {e!s}", exc_info=verbose)
        click.echo(f"Error: {e!s}", err=True)
        sys.exit(1)

    if output_format == "json":
        rendered = report.model_dump_json(indent=2)
    else:
        rendered = format_text_output(report)

    if output:
        Path(output).write_text(rendered + "\n", encoding="utf-8")
        click.echo(f"Report written to {output}")
    else:
        click.echo(rendered)


@cli.command(name="inspect")
@click.option("--images", "-i", required=True, type=click.Path(exists=True, dir_okay=False), help="IDX image file")
@click.option("--labels", "-l", required=True, type=click.Path(exists=True, dir_okay=False), help="IDX label file")
def inspect_command(images: str, labels: str) -> None:
    """Show the headers and label distribution of an IDX dataset."""
    try:
        image_header = read_idx_header(images)
        label_header = read_idx_header(labels)
        counts = count_labels(read_idx_labels(labels))
    except (ScratchNetError, OSError) as e:
        click.echo(f"Error: {e!s}", err=True)
        sys.exit(1)

    click.echo(
        f"Images: {image_header['count']} records of {image_header.get('rows')}x{image_header.get('columns')}"
    )
    click.echo(f"Labels: {label_header['count']} records")
    click.echo("Label counts:")
    for label, count in counts.items():
        click.echo(f"  {label}: {count}")


def _format_cost(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.6f}"


def format_text_output(report: TrainingReport) -> str:
    """Format a training report as human-readable text"""
    lines: list[str] = []
    lines.append(click.style("\nTRAINING SUMMARY", fg="white", bold=True))
    lines.append("─" * 60)

    metrics: list[tuple[str, Any, str]] = [
        ("Structure", " -> ".join(str(size) for size in report.structure), "blue"),
        ("Update rule", report.update_rule, "blue"),
        ("Sampling", report.sampling, "blue"),
        ("Learning rate", report.learning_rate, "cyan"),
        ("Iterations", report.iterations, "cyan"),
        ("Duration", f"{report.duration:.2f}s", "cyan"),
        ("Final cost", _format_cost(report.final_cost), "yellow"),
        ("Mean cost", _format_cost(report.mean_cost), "yellow"),
    ]
    if report.accuracy is not None:
        metrics.append(("Accuracy", f"{report.accuracy:.2%} of {report.evaluated_samples} samples", "green"))

    for label, value, color in metrics:
        lines.append(f"  {label:<14} {click.style(str(value), fg=color)}")

    if report.cost_history:
        lines.append("")
        lines.append(click.style("Cost history", bold=True))
        for sample in report.cost_history:
            lines.append(f"  {sample.iteration:>8}  sample {sample.sample_index:>6}  cost {sample.cost:.6f}")

    return "\n".join(lines)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
