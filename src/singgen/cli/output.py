"""
CLI Output Utilities

Machine-aware output functions that adapt based on machine mode.
"""

import json
import re
from typing import Any, Optional

import typer
from rich.console import Console as RichConsole
from rich.table import Table

from singgen.cli.config import CLIConfig
from singgen.emoji import remove_emoji

_MARKUP = re.compile(r"\[/?[a-z ]+\]")


class MachineAwareConsole:
    """
    A Console wrapper that automatically adapts output based on machine mode.
    Acts as a drop-in replacement for rich.console.Console.
    """

    def __init__(self):
        self._rich_console = RichConsole()

    def print(self, *args, **kwargs):
        if CLIConfig.is_machine_mode():
            for arg in args:
                if isinstance(arg, str):
                    plain = remove_emoji(_MARKUP.sub("", arg))
                    if plain:
                        typer.echo(plain)
                elif isinstance(arg, Table) or hasattr(arg, "__rich__"):
                    # Use --json for structured output in machine mode
                    pass
                elif arg:
                    typer.echo(arg)
        else:
            self._rich_console.print(*args, **kwargs)

    def __getattr__(self, name):
        return getattr(self._rich_console, name)


_console = MachineAwareConsole()


def echo(message: str = "", **kwargs) -> None:
    typer.echo(message, **kwargs)


def print_json(data: Any, minified: Optional[bool] = None) -> None:
    """Minified in machine mode, indented otherwise."""
    if minified is None:
        minified = CLIConfig.is_machine_mode()

    if minified:
        echo(json.dumps(data, separators=(",", ":"), ensure_ascii=False))
    else:
        echo(json.dumps(data, indent=2, ensure_ascii=False))


def print_error(message: str, code: Optional[str] = None, input_value: Optional[str] = None) -> None:
    """
    Print an error. In machine mode this is a JSON object on stdout;
    otherwise a plain line on stderr.
    """
    if CLIConfig.is_machine_mode():
        error_obj = {"status": "error", "message": message}
        if code:
            error_obj["code"] = code
        if input_value:
            error_obj["input"] = input_value
        print_json(error_obj, minified=True)
    else:
        typer.echo(f"Error: {message}", err=True)


def get_console() -> MachineAwareConsole:
    return _console
