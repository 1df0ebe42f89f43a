"""
Main CLI entry point for scope-chain.

Provides the command-line interface using Click.
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import click as _click
import pydantic as _pydantic

import scope_chain
import scope_chain.chain as chain
import scope_chain.cli.script as script
import scope_chain.config as config
import scope_chain.config.sources as config_sources

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _configure_logging(level: str) -> None:
    """Send library logs to stderr at the given level."""
    _logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _render_table(scopes: chain.ScopeChain[_typing.Any, _typing.Any]) -> None:
    """Print every scope of a chain as a rich table, root first."""
    import rich.console as _rich_console
    import rich.table as _rich_table
    import rich.text as _rich_text

    table = _rich_table.Table(title=f"Scopes (depth {scopes.depth})")
    table.add_column("Scope", justify="right")
    table.add_column("Key")
    table.add_column("Value")
    table.add_column("Visible")

    for index, scope in enumerate(scopes.scopes):
        if not scope:
            table.add_row(str(index), "", "", "")
        for key, value in scope.items():
            visible = "yes" if scopes.find(key) == index else "shadowed"
            table.add_row(
                str(index),
                _rich_text.Text(str(key)),
                _rich_text.Text(script.format_value(value)),
                visible,
            )

    _rich_console.Console().print(table)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(scope_chain.__version__, "-v", "--version", prog_name="scope-chain")
@_click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """scope-chain - drive a scoped key-value stack from the terminal.

    Lookups resolve to the nearest scope defining a key; writes land in the
    current scope only.
    """
    try:
        settings = config.Settings()
    except config.ConfigFileError as e:
        _click.echo(str(e), err=True)
        raise SystemExit(1) from None
    except _pydantic.ValidationError as e:
        _click.echo(f"Invalid configuration: {e}", err=True)
        raise SystemExit(1) from None

    _configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command(name="run")
@_click.argument("script_file", metavar="SCRIPT", type=_click.File("r"))
@_click.option(
    "--bindings",
    type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path),
    default=None,
    help="YAML file whose documents become the initial scopes (first = root)",
)
@_click.option("--plain", is_flag=True, help="Print `dump` output without tables")
@_click.pass_context
def run_cmd(
    ctx: _click.Context,
    script_file: _typing.TextIO,
    bindings: _pathlib.Path | None,
    plain: bool,
) -> None:
    """Run a script of scope commands. Use - to read from stdin.

    \b
    Commands (one per line, # starts a comment):
        push | pop | depth | dump
        set KEY VALUE | assign KEY VALUE
        get KEY | has KEY | where KEY | del KEY

    \b
    Examples:
        scope-chain run session.txt
        echo "set a 1" | scope-chain run -
        scope-chain run session.txt --bindings defaults.yaml
    """
    settings: config.Settings = ctx.obj["settings"]

    if bindings is not None:
        try:
            scopes = script.load_bindings(bindings, on_underflow=settings.underflow)
        except script.BindingsFileError as e:
            _click.echo(str(e), err=True)
            raise SystemExit(1) from None
    else:
        scopes = settings.new_chain()

    runner = script.ScriptRunner(
        scopes,
        echo=_click.echo,
        dump=None if plain else _render_table,
    )
    try:
        runner.run(script_file)
    except script.ScriptError as e:
        _click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None


@cli.command(name="resolve")
@_click.argument(
    "bindings",
    type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path),
)
@_click.argument("keys", nargs=-1, required=True)
@_click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def resolve_cmd(bindings: _pathlib.Path, keys: tuple[str, ...], json_output: bool) -> None:
    """Resolve KEYS against a multi-document YAML file.

    The first document is the root scope; each later document is a nested
    scope that shadows the ones before it. Exits with status 1 if any key
    is unbound.
    """
    try:
        scopes = script.load_bindings(bindings)
    except script.BindingsFileError as e:
        _click.echo(str(e), err=True)
        raise SystemExit(1) from None

    results: dict[str, dict[str, _typing.Any] | None] = {}
    missing = False
    for key in keys:
        try:
            value, index = scopes.get_with_provenance(key)
        except KeyError:
            results[key] = None
            missing = True
            continue
        results[key] = {"value": value, "scope": index}

    if json_output:
        _click.echo(_json.dumps(results, indent=2, default=str))
    else:
        for key, result in results.items():
            if result is None:
                _click.echo(f"{key}: {script.UNBOUND}")
            else:
                _click.echo(
                    f"{key} = {script.format_value(result['value'])}  (scope {result['scope']})"
                )

    if missing:
        raise SystemExit(1)


@cli.command(name="config")
@_click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@_click.pass_context
def config_cmd(ctx: _click.Context, json_output: bool) -> None:
    """Show the effective configuration."""
    settings: config.Settings = ctx.obj["settings"]

    if json_output:
        _click.echo(_json.dumps(settings.model_dump(), indent=2))
        return

    _click.echo("scope-chain Configuration:")
    _click.echo(f"  Underflow: {settings.underflow}")
    _click.echo(f"  Log Level: {settings.log_level}")
    _click.echo(f"  User Config: {config_sources.get_user_config_path()}")
    _click.echo(f"  Project Config: {_pathlib.Path.cwd() / config_sources.PROJECT_CONFIG_NAME}")


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="scope-chain")


if __name__ == "__main__":
    main()
