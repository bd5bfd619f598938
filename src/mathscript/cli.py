"""MathScript command-line interface."""

from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from typing import IO

import click

from mathscript import __version__
from mathscript.ast_nodes import Literal
from mathscript.builtins import global_scope
from mathscript.config import MathScriptConfig, discover_config
from mathscript.errors import DiagnosticRenderer, MathScriptError
from mathscript.interpreter import run
from mathscript.lexer import Lexer
from mathscript.parser import parse
from mathscript.symbols import Scope
from mathscript.values import format_value


def _report(error: MathScriptError, filename: str, source: str,
            config: MathScriptConfig) -> None:
    renderer = DiagnosticRenderer(color=config.output.color)
    renderer.register(filename, source)
    click.echo(renderer.render(error.to_diagnostic()), err=True)


def _evaluate(source: str, filename: str, config: MathScriptConfig,
              scope: Scope | None = None) -> bool:
    """Run a program and print each result. Returns True if OK."""
    try:
        result = run(source, scope, filename)
    except MathScriptError as e:
        _report(e, filename, source, config)
        return False
    except RecursionError:
        click.echo("error: maximum recursion depth exceeded", err=True)
        return False

    for value in result.values:
        click.echo(format_value(value, config.output.precision))
    return True


@click.group()
@click.version_option(__version__, prog_name="mathscript")
@click.option("--verbose", is_flag=True, help="Log evaluation details to stderr.")
@click.option("--no-color", is_flag=True, help="Render errors without ANSI colors.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, no_color: bool) -> None:
    """The MathScript calculator language."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    config = discover_config()
    if no_color:
        config.output.color = False
    ctx.obj = config


@main.command(name="run")
@click.argument("file", type=click.File("r"))
@click.pass_obj
def run_cmd(config: MathScriptConfig, file: IO[str]) -> None:
    """Evaluate a MathScript file ('-' reads stdin)."""
    source = file.read()
    if not _evaluate(source, file.name, config):
        raise SystemExit(1)


@main.command(name="eval")
@click.argument("expression")
@click.pass_obj
def eval_cmd(config: MathScriptConfig, expression: str) -> None:
    """Evaluate a MathScript expression given on the command line."""
    if not _evaluate(expression, "<eval>", config):
        raise SystemExit(1)


@main.command()
@click.pass_obj
def repl(config: MathScriptConfig) -> None:
    """Read programs from stdin, each ended by a sentinel line.

    Variables and functions persist from one program to the next.
    """
    stream = click.get_text_stream("stdin")
    interactive = stream.isatty()
    sentinels = set(config.repl.sentinels)
    scope = global_scope()
    buffer: list[str] = []

    if interactive:
        click.echo(config.repl.prompt, nl=False)
    for line in stream:
        if line.strip() in sentinels:
            _evaluate("\n".join(buffer), "<repl>", config, scope)
            buffer = []
        else:
            buffer.append(line.rstrip("\n"))
        if interactive:
            click.echo(config.repl.prompt, nl=False)

    if any(line.strip() for line in buffer):
        _evaluate("\n".join(buffer), "<repl>", config, scope)


@main.command()
@click.argument("file", type=click.File("r"))
@click.pass_obj
def tokens(config: MathScriptConfig, file: IO[str]) -> None:
    """Dump the token stream of a MathScript file."""
    source = file.read()
    try:
        toks = Lexer(source, file.name).lex()
    except MathScriptError as e:
        _report(e, file.name, source, config)
        raise SystemExit(1)

    for tok in toks:
        click.echo(f"{tok.span.start_line}:{tok.span.start_col}\t"
                   f"{tok.kind.name}\t{tok.value!r}")


@main.command()
@click.argument("file", type=click.File("r"))
@click.pass_obj
def view(config: MathScriptConfig, file: IO[str]) -> None:
    """View the AST of a MathScript file."""
    source = file.read()
    try:
        tree = parse(source, file.name)
    except MathScriptError as e:
        _report(e, file.name, source, config)
        raise SystemExit(1)

    _dump_ast(tree, 0)


def _dump_ast(node: object, depth: int) -> None:
    """Print a readable AST dump, one node per line."""
    indent = "  " * depth

    if isinstance(node, Literal):
        click.echo(f"{indent}Literal {format_value(node.value)}")
        return
    if isinstance(node, list):
        click.echo(f"{indent}-")
        for item in node:
            _dump_ast(item, depth + 1)
        return
    if not is_dataclass(node):
        click.echo(f"{indent}{node!r}")
        return

    click.echo(f"{indent}{type(node).__name__}")
    for f in fields(node):
        if f.name == "span":
            continue
        value = getattr(node, f.name)
        if isinstance(value, list) or is_dataclass(value):
            click.echo(f"{indent}  {f.name}:")
            if isinstance(value, list):
                for item in value:
                    _dump_ast(item, depth + 2)
            else:
                _dump_ast(value, depth + 2)
        elif value is not None:
            shown = value.value if hasattr(value, "value") else value
            click.echo(f"{indent}  {f.name}: {shown!r}")
