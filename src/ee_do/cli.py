#!/usr/bin/env python3
"""
ee-do CLI

Inspect the algorithm catalog of a server.

Usage:
    ee-do algorithms          - List the algorithms (--all includes hidden ones)
    ee-do classes             - List the proxy classes, hand-written and generated
    ee-do describe NAME       - Show the signature of one algorithm
"""

from __future__ import annotations

import logging
import sys

import click

from .classes import ProxyKind
from .config import configure_from_env
from .context import Context
from .errors import EEError


# Color codes for terminal output
class Colors:
    RESET = "\x1b[0m"
    BRIGHT = "\x1b[1m"
    DIM = "\x1b[2m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    RED = "\x1b[31m"
    CYAN = "\x1b[36m"


def print_error(message: str, error: Exception | None = None) -> None:
    """Print error message."""
    click.echo(f"{Colors.RED}Error:{Colors.RESET} {message}", err=True)
    if error and str(error):
        click.echo(str(error), err=True)


def _bootstrap(ctx: click.Context) -> Context:
    """Initialize the context stored on the click context, exiting on failure."""
    context: Context = ctx.obj["context"]
    try:
        context.bootstrap(ctx.obj["base_url"], ctx.obj["tile_url"])
    except EEError as e:
        print_error("Failed to load the algorithm catalog", e)
        sys.exit(1)
    return context


@click.group()
@click.option("--base-url", envvar="EE_API_URL", default=None, help="REST API endpoint")
@click.option("--tile-url", envvar="EE_TILE_URL", default=None, help="Tile endpoint")
@click.option("--debug", is_flag=True, help="Show debug information")
@click.pass_context
def cli(ctx: click.Context, base_url: str | None, tile_url: str | None, debug: bool) -> None:
    """ee-do CLI - inspect a server's algorithm catalog"""
    if debug:
        logging.basicConfig(level=logging.DEBUG)

    configure_from_env()
    ctx.ensure_object(dict)
    ctx.obj.setdefault("context", Context.create())
    ctx.obj["base_url"] = base_url
    ctx.obj["tile_url"] = tile_url


@cli.command()
@click.option("--all", "show_all", is_flag=True, help="Include hidden algorithms")
@click.pass_context
def algorithms(ctx: click.Context, show_all: bool) -> None:
    """List the algorithms in the catalog."""
    context = _bootstrap(ctx)
    for name, signature in sorted(context.functions.all_signatures().items()):
        if signature.hidden and not show_all:
            continue
        marker = f" {Colors.DIM}(hidden){Colors.RESET}" if signature.hidden else ""
        click.echo(f"{name} -> {Colors.CYAN}{signature.returns}{Colors.RESET}{marker}")


@cli.command()
@click.pass_context
def classes(ctx: click.Context) -> None:
    """List the proxy classes."""
    context = _bootstrap(ctx)
    for name in context.classes:
        descriptor = context.classes.descriptor(name)
        if descriptor is None:
            continue
        if descriptor.kind is ProxyKind.GENERATED:
            kind = f"{Colors.GREEN}generated{Colors.RESET}"
        else:
            kind = f"{Colors.DIM}hand-written{Colors.RESET}"
        click.echo(f"{name} ({kind})")


@cli.command()
@click.argument("name")
@click.pass_context
def describe(ctx: click.Context, name: str) -> None:
    """Show the signature of one algorithm."""
    context = _bootstrap(ctx)
    try:
        func = context.functions.lookup(name)
    except EEError as e:
        print_error(f"No algorithm named {name}", e)
        sys.exit(1)
    click.echo(func.describe())


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
