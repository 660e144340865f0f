"""exprcalc CLI entry point."""

import logging
import re
from pathlib import Path
from typing import Optional

import click
import yaml

from exprcalc.expression import Expression
from exprcalc.lexical import is_valid_identifier
from exprcalc.runtime import EvalError
from exprcalc.validator import InvalidSyntaxError

ASSIGNMENT_PATT = re.compile(r"^\s*(?P<name>\w+)\s*=(?P<formula>.*)$")


def _parse_var(ctx, param, values: tuple[str, ...]) -> dict[str, float]:
    binding: dict[str, float] = dict()
    for item in values:
        name, sep, raw_value = item.partition("=")
        name = name.strip()
        if not sep or not is_valid_identifier(name):
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}")
        try:
            binding[name] = float(raw_value)
        except ValueError:
            raise click.BadParameter(f"value of {name!r} is not a number: {raw_value!r}")
    return binding


def load_bindings(path: Path) -> dict[str, float]:
    """Load a YAML mapping of variable names to numbers."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a mapping of names to numbers")
    binding: dict[str, float] = dict()
    for name, value in data.items():
        if not isinstance(name, str) or not is_valid_identifier(name):
            raise click.BadParameter(f"{path}: invalid variable name {name!r}")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise click.BadParameter(f"{path}: value of {name!r} is not a number")
        binding[name] = float(value)
    return binding


def _read_formula(formula: str) -> str:
    if formula == "-":
        return click.get_text_stream("stdin").read()
    return formula


def _build_expression(formula: str) -> Expression:
    try:
        return Expression(formula)
    except InvalidSyntaxError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    envvar="EXPRCALC_LOG_LEVEL",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level.",
)
def cli(log_level: str):
    """exprcalc: infix arithmetic expression calculator."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command("eval")
@click.argument("formula")
@click.option(
    "--var",
    "variables",
    multiple=True,
    callback=_parse_var,
    metavar="NAME=VALUE",
    help="Bind a variable, may be repeated.",
)
@click.option(
    "--bindings",
    "bindings_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file mapping variable names to numbers.",
)
def eval_cmd(formula: str, variables: dict[str, float], bindings_path: Optional[Path]):
    """Evaluate FORMULA and print the result. Use '-' to read it from stdin."""
    expression = _build_expression(_read_formula(formula))

    binding = load_bindings(bindings_path) if bindings_path is not None else {}
    binding.update(variables)

    try:
        result = expression.evaluate(binding)
    except EvalError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    click.echo(result)


@cli.command("vars")
@click.argument("formula")
def vars_cmd(formula: str):
    """List the variables FORMULA needs, in order of first appearance."""
    expression = _build_expression(_read_formula(formula))
    for name in expression.variables():
        click.echo(name)


@cli.command()
def repl():
    """Interactive loop; 'name = formula' binds the result to name."""
    binding: dict[str, float] = dict()

    while True:
        try:
            code = input("> ")
        except EOFError:
            break
        if not code.strip():
            continue

        target = None
        match = ASSIGNMENT_PATT.match(code)
        if match:
            target = match.group("name")
            if not is_valid_identifier(target):
                click.echo(f"Cannot assign to {target!r}")
                continue
            code = match.group("formula")

        try:
            expression = Expression(code)
        except InvalidSyntaxError as e:
            click.echo(e)
            continue

        outcome = expression.try_evaluate(binding)
        if not outcome.ok:
            click.echo(outcome.message)
            continue

        if target is not None:
            binding[target] = outcome.value
        click.echo(outcome.value)


if __name__ == "__main__":
    cli()
