"""Click base classes: commands carry sample invocations behind ``--examples``."""

from __future__ import annotations

import textwrap
from typing import Any

import click

EXAMPLES_HINT = "Run with --examples for sample invocations."


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    command = ctx.command
    if not isinstance(command, MeetCommand) or not command.examples:
        return
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(textwrap.indent(command.examples, "  "))
    ctx.exit(0)


class MeetCommand(click.Command):
    """Command with an optional block of usage examples.

    The examples are kept out of ``--help``; an eager ``--examples`` flag
    prints them and exits before any argument is validated.
    """

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        if examples:
            kwargs.setdefault("epilog", EXAMPLES_HINT)
        super().__init__(*args, **kwargs)
        self.examples = textwrap.dedent(examples).strip("\n") if examples else None
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_print_examples,
                    help="Show usage examples.",
                )
            )


class MeetGroup(click.Group):
    """Root group; subcommands are :class:`MeetCommand` by default."""

    command_class = MeetCommand
