# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Silos CLI entrypoint.

Commands are registered and lazy-loaded from here.
"""

from __future__ import annotations

import sys

from cyclopts import App, Parameter

from silos import __version__
from silos.cli.utils import SILOS_PREFIX, console


app = App(
    "silos",
    help="Silos: retrieval-backed snippet generation and structural refactoring.",
    default_parameter=Parameter(negative=()),
    version=__version__,
    console=console,
)
app.command("silos.cli.commands.serve:app", name="serve")
app.command("silos.cli.commands.query:generate_app", name="generate")
app.command("silos.cli.commands.query:refactor_app", name="refactor")
app.command("silos.cli.commands.inspect:dump_expression_app", name="dump-expression")
app.command("silos.cli.commands.inspect:show_captures_app", name="show-captures")
app.command("silos.cli.commands.check:app", name="check")


def main() -> None:
    """Main CLI entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print(f"\n{SILOS_PREFIX} [yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"{SILOS_PREFIX} [bold red]Fatal error: {e}[/bold red]")
        console.print("\n[red]Traceback:[/red]")
        console.print_exception(max_frames=10)
        sys.exit(1)


if __name__ == "__main__":
    main()


__all__ = ("app", "main")
