"""CLI interface for rulekit using Typer framework."""

import importlib
import json as jsonlib
import logging
import sys
from pathlib import Path
from typing import Annotated, Any, List, Optional

import anyio
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from rulekit import __description__, __version__
from rulekit.config import LogLevel, load_config, set_global_config
from rulekit.results import ValidationResult
from rulekit.validator import AbstractValidator

app = typer.Typer(
    name="rulekit",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

logger = logging.getLogger(__name__)

VALID_FORMATS = ["table", "json"]


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"rulekit version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """rulekit - Declarative, fluent validation rules for Python objects."""


def _setup_logging(level: LogLevel, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.to_logging_level(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_validator(target: str) -> AbstractValidator:
    """Import ``package.module:ValidatorClass`` and instantiate it.

    Raises:
        typer.BadParameter: If the target cannot be imported or is not a validator
    """
    module_name, sep, class_name = target.partition(":")
    if not sep or not module_name or not class_name:
        raise typer.BadParameter(f"Target '{target}' must have the form 'package.module:ValidatorClass'")

    # Allow targets living next to the invocation directory
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import module '{module_name}': {e}")

    validator_class = getattr(module, class_name, None)
    if validator_class is None:
        raise typer.BadParameter(f"Module '{module_name}' has no attribute '{class_name}'")
    if not (isinstance(validator_class, type) and issubclass(validator_class, AbstractValidator)):
        raise typer.BadParameter(f"'{target}' is not an AbstractValidator subclass")

    logger.debug(f"Loaded validator {validator_class.__name__} from {module_name}")
    return validator_class()


def _build_instance(validator: AbstractValidator, data: Any) -> Any:
    """Turn decoded JSON into the validator's model, or leave it raw."""
    model = validator.model
    if model is None:
        return data
    if hasattr(model, "model_validate"):
        return model.model_validate(data)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object for {getattr(model, '__name__', model)}, got {type(data).__name__}")
    return model(**data)


def _read_data(data_path: Path) -> Any:
    if str(data_path) == "-":
        return jsonlib.load(sys.stdin)
    with open(data_path, encoding="utf-8") as f:
        return jsonlib.load(f)


def _output_result_table(result: ValidationResult) -> None:
    status_color = "green" if result.is_valid else "red"
    status = "VALID" if result.is_valid else "INVALID"
    console.print(f"[{status_color}]Validation Status: {status}[/{status_color}]")
    console.print(f"Rule sets: {', '.join(result.rule_sets_executed)}")

    if not result.errors:
        console.print("\n[green]No failures found![/green]")
        return

    console.print("\n[blue]Failures:[/blue]")
    table = Table()
    table.add_column("Property", style="cyan")
    table.add_column("Severity", style="white")
    table.add_column("Code", style="dim")
    table.add_column("Message", style="white")

    for failure in result.errors:
        severity = failure.severity.value
        severity_color = "red" if severity == "error" else "yellow" if severity == "warning" else "green"
        table.add_row(
            failure.property_name,
            f"[{severity_color}]{severity.upper()}[/{severity_color}]",
            failure.error_code or "",
            failure.error_message,
        )

    console.print(table)


@app.command()
def validate(
    target: Annotated[
        str,
        typer.Argument(help="Validator to run, as 'package.module:ValidatorClass'")
    ],
    data: Annotated[
        Path,
        typer.Argument(help="JSON file holding the object to validate ('-' reads stdin)")
    ],
    rule_set: Annotated[
        Optional[List[str]],
        typer.Option("--rule-set", "-r", help="Rule set to run; repeatable, '*' runs all (default: default)")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    use_async: Annotated[
        bool,
        typer.Option("--async", help="Run validation on the asynchronous path")
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .rulekit.json)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Validate a JSON object with a declared validator."""
    if format not in VALID_FORMATS:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(VALID_FORMATS)}")
        raise typer.Exit(1)

    try:
        rulekit_config = load_config(config)
        set_global_config(rulekit_config)
        _setup_logging(rulekit_config.logging.level, verbose)

        validator = _load_validator(target)
        instance = _build_instance(validator, _read_data(data))

        if use_async or validator.has_async_parts:
            logger.debug("Running validation on the asynchronous path")
            result = anyio.run(validator.validate_async, instance, rule_set)
        else:
            result = validator.validate(instance, rule_set)

        if format == "json":
            typer.echo(jsonlib.dumps(result.to_dict(), indent=2))
        else:
            _output_result_table(result)

        raise typer.Exit(result.exit_code)

    except typer.Exit:
        raise
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def describe(
    target: Annotated[
        str,
        typer.Argument(help="Validator to describe, as 'package.module:ValidatorClass'")
    ],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
) -> None:
    """List the rules a validator declares."""
    if format not in VALID_FORMATS:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(VALID_FORMATS)}")
        raise typer.Exit(1)

    try:
        validator = _load_validator(target)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    rules = validator.describe()
    if format == "json":
        typer.echo(jsonlib.dumps(rules, indent=2))
        return

    table = Table(title=f"{type(validator).__name__} rules")
    table.add_column("Property", style="cyan")
    table.add_column("Display Name", style="white")
    table.add_column("Validators", style="white")
    table.add_column("Rule Sets", style="dim")
    table.add_column("Cascade", style="dim")
    table.add_column("Dependents", style="white", justify="right")

    for rule in rules:
        table.add_row(
            rule["property"] or "<model>",
            rule["display_name"],
            ", ".join(rule["validators"]),
            ", ".join(rule["rule_sets"]) or "default",
            rule["cascade_mode"],
            str(len(rule["dependent_rules"])),
        )

    console.print(table)


if __name__ == "__main__":
    app()
