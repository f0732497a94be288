"""CLI entry point for node-arrange."""

import json
import logging
import sys

import click

from node_arrange.api import apply_positions, arrange, result_to_dicts
from node_arrange.config import STRATEGIES
from node_arrange.errors import LayoutContractError


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--gap-x", "gap_x", type=float, default=None, help="Gap between layers on the x axis")
@click.option("--gap-y", "gap_y", type=float, default=None, help="Gap between nodes on the y axis")
@click.option("--direction", "-d", "direction", type=str, default=None, help="Flow direction (horizontal, vertical)")
@click.option("--strategy", "-s", "strategy", type=click.Choice(STRATEGIES), default=None, help="Layout strategy")
@click.option("--apply", "apply", is_flag=True, help="Print the input nodes with updated positions")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log layout decisions to stderr")
def main(
    input: str | None,
    gap_x: float | None,
    gap_y: float | None,
    direction: str | None,
    strategy: str | None,
    apply: bool,
    output: str | None,
    verbose: bool,
) -> None:
    """Arrange a node graph ({"nodes": [...], "edges": [...]} JSON) into layers."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    try:
        document = json.loads(text) if text.strip() else {}
    except json.JSONDecodeError as e:
        click.echo(f"error: invalid JSON: {e}", err=True)
        sys.exit(1)
    if not isinstance(document, dict):
        click.echo("error: expected a JSON object with 'nodes' and 'edges'", err=True)
        sys.exit(1)

    raw_options = document.get("options") or {}
    if not isinstance(raw_options, dict):
        click.echo("error: 'options' must be a JSON object", err=True)
        sys.exit(1)
    options = dict(raw_options)
    for key, value in (("gapX", gap_x), ("gapY", gap_y), ("direction", direction), ("strategy", strategy)):
        if value is not None:
            options[key] = value

    nodes = document.get("nodes", [])
    try:
        positions = arrange(nodes, document.get("edges", []), options)
    except (LayoutContractError, ValueError) as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    placed = result_to_dicts(positions)
    payload = apply_positions(nodes, placed) if apply else placed
    rendered = json.dumps(payload, indent=2) + "\n"

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
