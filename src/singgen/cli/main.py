import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.table import Table

from singgen import __version__
from singgen.cli.config import CLIConfig
from singgen.cli.output import echo, get_console, print_error, print_json
from singgen.config_loader import example_config, load_config_file, save_config_file
from singgen.exceptions import SinggenError
from singgen.generator import Generator
from singgen.logging_config import logger, setup_logging
from singgen.platforms import AdapterFactory
from singgen.renderer import list_formats, render
from singgen.settings import GenerateOptions
from singgen.template import list_template_versions

app = typer.Typer(help="Generate sing-box configurations from proxy subscriptions.")
console = get_console()

LOG_LEVELS = {"debug": "DEBUG", "info": "INFO", "warn": "WARNING", "warning": "WARNING", "error": "ERROR"}


@app.callback()
def global_options(
    machine: bool = typer.Option(
        False,
        "--machine",
        "-M",
        help="Machine mode: plain output, JSON errors (also via SINGGEN_MACHINE_MODE env var)",
    ),
):
    """
    singgen: subscription to sing-box configuration generator.
    """
    if machine:
        CLIConfig.set_machine_mode(True)
        setup_logging(suppress_console=True, force=True)


def _fail(error: Exception) -> None:
    print_error(str(error), code=type(error).__name__)
    raise typer.Exit(code=1)


def _write_output(data: bytes, out: str) -> None:
    if out == CLIConfig.STDOUT:
        sys.stdout.write(data.decode("utf-8"))
        return
    path = Path(out)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


@app.command()
def generate(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Subscription URL or file path"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Multi-subscription config file (yaml/json)"),
    out: str = typer.Option(CLIConfig.DEFAULT_OUTPUT, "--out", "-o", help="Output file path ('-' for stdout)"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Output format (json, yaml)"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Template version"),
    platform: Optional[str] = typer.Option(None, "--platform", "-p", help="Target platform (linux, darwin, ios)"),
    mirror: Optional[str] = typer.Option(None, "--mirror", help="Mirror URL prefix for rule-set downloads"),
    dns: Optional[str] = typer.Option(None, "--dns", help="Local DNS server address"),
    external_controller: Optional[str] = typer.Option(
        None, "--external-controller", help="Clash API external controller address"
    ),
    subnet: Optional[str] = typer.Option(None, "--subnet", help="Client subnet for DNS queries (e.g. 202.101.170.1/24)"),
    emoji: Optional[bool] = typer.Option(None, "--emoji/--no-emoji", help="Remove emoji from node tags"),
    skip_tls_verify: Optional[bool] = typer.Option(
        None, "--skip-tls-verify/--verify-tls", help="Disable certificate checks for fetching and for nodes"
    ),
    log: str = typer.Option("warn", "--log", "-l", help="Log level (debug, info, warn, error)"),
):
    """
    Generate a configuration from one subscription (--url) or a config file (--config).
    """
    if log.lower() not in LOG_LEVELS:
        _fail(SinggenError(f"Invalid log level: {log}. Valid levels: debug, info, warn, error"))
    setup_logging(level=LOG_LEVELS[log.lower()], force=True)

    if bool(url) == bool(config):
        _fail(SinggenError("Specify exactly one of --url or --config"))

    overrides: Dict[str, Any] = {
        key: value
        for key, value in {
            "format": fmt,
            "template_version": template,
            "platform": platform,
            "mirror_url": mirror,
            "dns_server": dns,
            "external_controller": external_controller,
            "client_subnet": subnet,
            "remove_emoji": emoji,
            "skip_tls_verify": skip_tls_verify,
        }.items()
        if value is not None
    }

    if fmt is not None and fmt.lower() not in list_formats() + ["yml"]:
        _fail(SinggenError(f"Unsupported output format: {fmt}. Valid formats: {', '.join(list_formats())}"))

    try:
        if config:
            multi = load_config_file(str(config))
            generator = Generator()
            data = generator.generate_bytes_from_multi(multi, overrides)
            source = str(config)
        else:
            options = replace(GenerateOptions(), **overrides)
            generator = Generator(options)
            data = render(generator.generate(url), options.format)
            source = url
    except SinggenError as e:
        logger.debug(f"Generation failed: {e}")
        _fail(e)

    _write_output(data, out)
    if out != CLIConfig.STDOUT:
        console.print(f"[green]Configuration generated from {source} -> {out}[/green]")


@app.command()
def templates(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List available template versions and platforms."""
    versions = list_template_versions()
    platforms = AdapterFactory().platforms()

    if json_output or CLIConfig.is_machine_mode():
        print_json({"templates": versions, "platforms": platforms})
        return

    table = Table(title="Templates")
    table.add_column("Version", style="cyan")
    for version in versions:
        table.add_row(version)
    console.print(table)
    console.print(f"Platforms: {', '.join(platforms)}")


@app.command("example-config")
def example_config_cmd(
    out: str = typer.Option("singgen.yaml", "--out", "-o", help="Where to write the example ('-' for stdout)"),
    fmt: str = typer.Option("yaml", "--format", "-f", help="File format (yaml, json)"),
):
    """Write an example multi-subscription configuration file."""
    config = example_config()

    if out == CLIConfig.STDOUT:
        data = config.model_dump(by_alias=True, exclude_none=True)
        if fmt.lower() == "json":
            print_json(data, minified=False)
        else:
            sys.stdout.write(render(data, "yaml").decode("utf-8"))
        return

    try:
        path = save_config_file(config, out, fmt)
    except SinggenError as e:
        _fail(e)
    console.print(f"[green]Example configuration written to {path}[/green]")


@app.command()
def version():
    """Show the singgen version."""
    echo(f"singgen {__version__}")


if __name__ == "__main__":
    app()
