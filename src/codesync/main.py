"""main.py - Umbrella CLI entry point for codesync.

Command modules expose a Typer ``app`` with a single ``main`` command;
those functions are registered here as flat commands.
"""

import importlib

import typer

from codesync import __version__

app = typer.Typer(
    help="Keep related code in sync with CODESYNC(label[, count]) annotations.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# (command name, module, help)
_COMMANDS: list[tuple[str, str, str]] = [
    ("check", "codesync.check", "Check annotation consistency across a source tree."),
]


def _version_callback(value: bool) -> None:
    if value:
        print(f"codesync {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
) -> None:
    """codesync command-line interface."""


for _name, _module, _help in _COMMANDS:
    _mod = importlib.import_module(_module)
    _epilog = getattr(_mod.app.info, "epilog", None)
    if not isinstance(_epilog, str):
        _epilog = None
    app.command(name=_name, help=_help, epilog=_epilog)(_mod.main)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
