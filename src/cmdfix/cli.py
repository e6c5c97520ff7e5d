"""Command-line interface for cmdfix."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cmdfix.config import get_rules_dir, load_settings
from cmdfix.core import Command, Corrector, init_catalog
from cmdfix.errors import ConfigurationError
from cmdfix.selection import RichPicker, SelectionMachine

logger = logging.getLogger(__name__)

console = Console(stderr=True)


def configure_logging(debug: bool) -> None:
    """Send cmdfix logs to stderr through rich."""
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    root = logging.getLogger("cmdfix")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if debug else logging.WARNING)
    root.propagate = False


def _startup(ctx: click.Context, debug: bool):
    try:
        settings = load_settings(environ=ctx.obj.get("environ"))
        settings.debug = settings.debug or debug
        configure_logging(settings.debug)
        catalog = init_catalog(settings, rule_dirs=[get_rules_dir(ctx.obj.get("environ"))])
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        ctx.exit(2)
    return settings, catalog


@click.group()
@click.version_option(package_name="cmdfix")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """cmdfix - suggest a fix for the command that just failed."""
    ctx.ensure_object(dict)


@cli.command()
@click.option("--output", "-o", "output", help="Captured output of the failed command (default: stdin)")
@click.option("--yes", "-y", is_flag=True, help="Pick the best correction without asking")
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging")
@click.argument("script", nargs=-1, required=True)
@click.pass_context
def fix(ctx: click.Context, output: str | None, yes: bool, debug: bool, script: tuple[str, ...]) -> None:
    """Suggest corrections for SCRIPT and print the chosen one."""
    settings, catalog = _startup(ctx, debug)

    if output is None:
        stdin = click.get_text_stream("stdin")
        output = "" if stdin.isatty() else stdin.read()
    command = Command(" ".join(script), output)

    result = Corrector(catalog, settings).evaluate(command)
    for diagnostic in result.diagnostics:
        logger.debug("%s rule %s: %s", diagnostic.kind, diagnostic.rule_name, diagnostic.message)

    machine = SelectionMachine(
        command,
        result.corrections,
        side_effect_timeout=settings.side_effect_timeout,
    )
    if machine.finished:
        console.print("[yellow]No corrections found.[/yellow]")
        ctx.exit(1)

    auto_execute = yes or not settings.require_confirmation
    chosen = machine.run(picker=RichPicker(console), auto_execute=auto_execute)

    for warning in machine.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    if chosen is None:
        console.print("[dim]Aborted[/dim]")
        ctx.exit(1)
    click.echo(chosen)


@cli.command()
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging")
@click.pass_context
def rules(ctx: click.Context, debug: bool) -> None:
    """List the rules in the catalog, in evaluation order."""
    settings, catalog = _startup(ctx, debug)

    table = Table(title="Rules")
    table.add_column("Name", style="cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Enabled")
    table.add_column("Needs output")
    table.add_column("Side effect")

    for rule in catalog:
        enabled = settings.is_rule_enabled(rule)
        table.add_row(
            rule.name,
            str(settings.get_rule_priority(rule)),
            "[green]yes[/green]" if enabled else "[red]no[/red]",
            "yes" if rule.requires_output else "no",
            "yes" if rule.has_side_effect else "no",
        )

    Console().print(table)


def main() -> None:
    """Entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
