"""Click CLI with analyze, cycles, and serve subcommands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from wiregraph.models import AnalysisConfig, GraphLevel
from wiregraph.analysis.coupling import rank_by_coupling
from wiregraph.analysis.registry import DependencyOptions, analyze
from wiregraph.loader import FactFileError, load_facts

_LEVEL_CHOICES = [level.value for level in GraphLevel]

_CLASS_COLORS = {
    "stable": "green",
    "moderate": "yellow",
    "unstable": "red",
}


def _build_config(excludes: tuple[str, ...], replace_excludes: bool) -> AnalysisConfig:
    config = AnalysisConfig()
    if replace_excludes:
        config.excluded_prefixes = list(excludes)
    else:
        config.excluded_prefixes.extend(excludes)
    return config


def _load(facts_file: Path):
    try:
        return load_facts(facts_file)
    except FactFileError as e:
        raise click.ClickException(str(e))


def _echo_cycles(title: str, cycles: list[list[str]]) -> None:
    if not cycles:
        click.echo(f"{title}: none")
        return
    click.echo(click.style(f"{title}: {len(cycles)}", fg="red", bold=True))
    for cycle in cycles:
        click.echo("  " + " -> ".join(cycle + [cycle[0]]))


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """wiregraph: dependency graphs, cycles and coupling for DI codebases."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="analyze")
@click.argument("facts_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--level", "-l", type=click.Choice(_LEVEL_CHOICES), default="namespace", help="Graph granularity")
@click.option("--no-cycles", is_flag=True, help="Skip cycle detection")
@click.option("--no-metrics", is_flag=True, help="Skip coupling metrics")
@click.option("--diagrams/--no-diagrams", default=False, help="Print Mermaid diagrams")
@click.option("--exclude", "-x", "excludes", multiple=True, help="Extra excluded reference prefix")
@click.option("--only-excludes", is_flag=True, help="Use only the --exclude prefixes, dropping the defaults")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
def analyze_cmd(
    facts_file: Path,
    level: str,
    no_cycles: bool,
    no_metrics: bool,
    diagrams: bool,
    excludes: tuple[str, ...],
    only_excludes: bool,
    as_json: bool,
):
    """Build dependency graphs from a fact file and report on them."""
    source_units, components = _load(facts_file)
    options = DependencyOptions(
        detect_circular=not no_cycles,
        calculate_metrics=not no_metrics,
        generate_diagrams=diagrams or as_json,
        level=GraphLevel(level),
    )
    result = analyze(source_units, components, options, _build_config(excludes, only_excludes))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo("Summary:")
    for key, value in result.summary().items():
        click.echo(f"  {key}: {value}")
    click.echo()

    if options.detect_circular:
        _echo_cycles("Circular dependencies", result.structural_cycles)
        if result.components is not None:
            _echo_cycles("Circular component dependencies", result.component_cycles)
        click.echo()

    if result.coupling:
        click.echo("Coupling (Ca = afferent, Ce = efferent, I = instability):")
        for metric in rank_by_coupling(result.coupling):
            label = metric.classification
            click.echo(
                f"  {metric.node:<50} Ca={metric.afferent:<3} Ce={metric.efferent:<3} "
                f"I={metric.instability:.2f} {click.style(label, fg=_CLASS_COLORS[label])}"
            )
        click.echo()

    if diagrams:
        for diagram in (result.dependency_diagram, result.component_diagram, result.cycle_diagram):
            if diagram:
                click.echo(diagram)


@cli.command()
@click.argument("facts_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--level", "-l", type=click.Choice(_LEVEL_CHOICES), default="namespace", help="Graph granularity")
@click.option("--exclude", "-x", "excludes", multiple=True, help="Extra excluded reference prefix")
@click.option("--only-excludes", is_flag=True, help="Use only the --exclude prefixes, dropping the defaults")
def cycles(facts_file: Path, level: str, excludes: tuple[str, ...], only_excludes: bool):
    """Report circular dependencies; exits with status 1 when any exist."""
    source_units, components = _load(facts_file)
    options = DependencyOptions(
        calculate_metrics=False,
        generate_diagrams=False,
        level=GraphLevel(level),
    )
    result = analyze(source_units, components, options, _build_config(excludes, only_excludes))

    _echo_cycles("Circular dependencies", result.structural_cycles)
    _echo_cycles("Circular component dependencies", result.component_cycles)

    if result.structural_cycles or result.component_cycles:
        click.get_current_context().exit(1)


@cli.command()
@click.option("--port", "-p", default=8430, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(port: int, host: str):
    """Start the analysis web API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the web API. "
            "Install with: pip install 'wiregraph[web]'"
        )

    from wiregraph.web import create_app

    click.echo(f"Starting wiregraph API at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
