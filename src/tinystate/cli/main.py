"""CLI entry point for tinystate.

Invoked as::

    tinystate [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m tinystate.cli.main
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tinystate import __version__

console = Console()
error_console = Console(stderr=True, style="bold red")

_EXAMPLE_DEFINITION = """\
# tinystate machine definition
initial_state: started
states: [running, stopped]
transitions:
  started: running
  running: stopped
  stopped: started
transition_policy: atomic
"""


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="tinystate")
def cli() -> None:
    """Validate tinystate machine definitions and replay flows."""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]tinystate[/bold] v{__version__}")
    console.print(f"Python {sys.version}")


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option(
    "--directory",
    "-d",
    default=".",
    show_default=True,
    help="Directory in which to create the definition file.",
)
def init_command(directory: str) -> None:
    """Write an example machine definition into DIRECTORY."""
    target_dir = Path(directory).resolve()
    definition_path = target_dir / "tinystate.yaml"

    if definition_path.exists():
        console.print(
            f"[yellow]Definition already exists at {definition_path}. Skipping.[/yellow]"
        )
        return

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        definition_path.write_text(_EXAMPLE_DEFINITION, encoding="utf-8")
        console.print(f"[green]Created machine definition at {definition_path}[/green]")
    except OSError as exc:
        error_console.print(f"Failed to create definition: {exc}")
        raise SystemExit(1) from exc


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("definition_file", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "output_format",
    default="table",
    type=click.Choice(["table", "json"]),
    show_default=True,
    help="Output format.",
)
def check_command(definition_file: str, output_format: str) -> None:
    """Validate DEFINITION_FILE and list its states and transitions."""
    from tinystate.config.loader import DefinitionLoader
    from tinystate.schema.errors import TinyStateError

    try:
        definition = DefinitionLoader().load(definition_file)
    except TinyStateError as exc:
        error_console.print(f"Invalid definition: {exc}")
        raise SystemExit(1) from exc

    if output_format == "json":
        click.echo(definition.model_dump_json(indent=2))
        return

    console.print(f"[green]Definition is valid.[/green] Initial state: [bold]{definition.initial_state}[/bold]")

    unreachable = definition.unreachable_states()

    states_table = Table(title="States", show_header=True, header_style="bold cyan")
    states_table.add_column("State")
    states_table.add_column("Next states", style="dim")
    states_table.add_column("Reachable")
    for state in definition.all_states:
        states_table.add_row(
            state,
            ", ".join(definition.transitions.get(state, [])) or "-",
            "no" if state in unreachable else "yes",
        )
    console.print(states_table)

    table = Table(title="Transitions", show_header=True, header_style="bold cyan")
    table.add_column("From", style="dim")
    table.add_column("To")
    for source, destination in definition.pairs():
        table.add_row(source, destination)
    console.print(table)

    if unreachable:
        console.print(f"[yellow]Unreachable states: {', '.join(unreachable)}[/yellow]")


# ---------------------------------------------------------------------------
# walk
# ---------------------------------------------------------------------------


@cli.command(name="walk")
@click.argument("definition_file", type=click.Path(dir_okay=False))
@click.argument("states", nargs=-1, required=True)
@click.option(
    "--maintain",
    is_flag=True,
    help="Stay put instead of failing when already in the requested state.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the flow as JSON.")
def walk_command(definition_file: str, states: tuple[str, ...], maintain: bool, as_json: bool) -> None:
    """Build the machine from DEFINITION_FILE and transition through STATES."""
    from tinystate.config.loader import DefinitionLoader
    from tinystate.schema.errors import TinyStateError

    try:
        machine = DefinitionLoader().load(definition_file).build()
        for state in states:
            if maintain:
                machine.transition_or_maintain(state)
            else:
                machine.transition(state)
    except TinyStateError as exc:
        error_console.print(f"{type(exc).__name__}: {exc}")
        raise SystemExit(1) from exc

    flow = machine.flow_so_far()
    if as_json:
        click.echo(json.dumps({"state": machine.state, "flow": flow}, indent=2))
        return
    console.print(" > ".join(flow))


if __name__ == "__main__":
    cli()
