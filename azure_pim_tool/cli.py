#!/usr/bin/env python
"""
Azure PIM Tool CLI

List subscriptions and eligible roles, and self-activate a role for a limited time.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .azure_client import PimSession
from .config import Settings
from .credentials import signed_in_principal_id
from .durations import DEFAULT_DURATION, parse_duration
from .exceptions import PimError

term = Console()
status_term = Console(stderr=True)
log_handler = RichHandler(console=status_term, show_path=False, rich_tracebacks=True)

LOGGER_NAME = "azure_pim_tool"


# ============================================================================
# HELPER FUNCTIONS - Output Formatting & Logging
# ============================================================================


def error(message: str, exit_code: int = 1):
    """Print error message and exit."""
    term.print(f"[red]✗ Error:[/red] {escape(message)}")
    sys.exit(exit_code)


def success(message: str):
    """Print success message."""
    term.print(f"[green]✓[/green] {message}")


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Send package log records to stderr through rich."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if log_handler not in logger.handlers:
        logger.addHandler(log_handler)
    return logger


@dataclass
class AppContext:
    """State shared by commands of one invocation."""

    settings: Settings
    _session: Optional[PimSession] = field(default=None, repr=False)

    def session(self) -> PimSession:
        """Construct the session on first use."""
        if self._session is None:
            self._session = PimSession(
                self.settings.principal_id, timeout=self.settings.timeout
            )
        return self._session


def _app(ctx: click.Context) -> AppContext:
    return ctx.find_object(AppContext)


# ============================================================================
# COMMANDS
# ============================================================================


@click.command("subscriptions")
@click.pass_context
def subscriptions(ctx):
    """List enabled subscriptions."""
    try:
        with status_term.status("[bold blue]Fetching subscriptions...[/bold blue]"):
            subs = _app(ctx).session().subscriptions()

        for name in subs:
            click.echo(name)

    except PimError as e:
        error(str(e))


@click.command("roles")
@click.argument("subscription")
@click.pass_context
def roles(ctx, subscription: str):
    """List roles you are eligible to activate in SUBSCRIPTION."""
    try:
        with status_term.status("[bold blue]Fetching eligible roles...[/bold blue]"):
            names = _app(ctx).session().roles_for_subscription(subscription)

        for name in names:
            click.echo(name)

    except PimError as e:
        error(str(e))


@click.command("activate")
@click.argument("subscription")
@click.argument("role")
@click.argument("justification")
@click.argument("duration", required=False, default=None)
@click.pass_context
def activate(
    ctx, subscription: str, role: str, justification: str, duration: Optional[str]
):
    """Activate ROLE on SUBSCRIPTION for DURATION (default 60m).

    DURATION accepts values such as 90m, 1h30m, 2h or a number of minutes.
    """
    app = _app(ctx)
    if not app.settings.principal_id:
        error("userid flag not set (use --userid or AZURE_PIM_USERID; see 'whoami')")

    try:
        if duration:
            effective_duration = parse_duration(duration)
        elif app.settings.default_duration:
            effective_duration = parse_duration(app.settings.default_duration)
        else:
            effective_duration = DEFAULT_DURATION

        with status_term.status("[bold blue]Requesting activation...[/bold blue]"):
            app.session().activate_role(subscription, role, justification, effective_duration)

        success(
            f"Activated [bold]{escape(role)}[/bold] on [bold]{escape(subscription)}[/bold] "
            f"for {effective_duration}"
        )

    except PimError as e:
        error(str(e))


@click.command("whoami")
def whoami():
    """Print the object id of the signed-in identity (use it as --userid)."""
    try:
        click.echo(signed_in_principal_id())
    except PimError as e:
        error(str(e))


# ============================================================================
# COMMAND REGISTRY
# ============================================================================


@dataclass(frozen=True)
class CommandEntry:
    """A registered command and the short names that resolve to it."""

    command: click.Command
    aliases: Tuple[str, ...] = ()


COMMANDS: Tuple[CommandEntry, ...] = (
    CommandEntry(subscriptions, ("s",)),
    CommandEntry(roles, ("r",)),
    CommandEntry(activate, ("a",)),
    CommandEntry(whoami, ("w",)),
)


class AliasedGroup(click.Group):
    """Group that resolves registered aliases to their commands."""

    def __init__(self, *args, entries: Tuple[CommandEntry, ...] = (), **kwargs):
        super().__init__(*args, **kwargs)
        self.aliases = {}
        for entry in entries:
            self.add_command(entry.command)
            for alias in entry.aliases:
                self.aliases[alias] = entry.command.name

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args

    def format_commands(self, ctx, formatter):
        rows = []
        for name in self.list_commands(ctx):
            cmd = self.get_command(ctx, name)
            if cmd is None or cmd.hidden:
                continue
            short = [a for a, target in self.aliases.items() if target == name]
            label = f"{name}, {', '.join(short)}" if short else name
            rows.append((label, cmd.get_short_help_str(limit=formatter.width - 6)))
        if rows:
            with formatter.section("Commands"):
                formatter.write_dl(rows)


@click.group(cls=AliasedGroup, entries=COMMANDS, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="azure-pim-tool")
@click.option("--userid", default=None, help="Your principal object id (see 'whoami')")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Seconds allowed per Azure call or listing (default 30)",
)
@click.option("-v", "--verbose", is_flag=True, help="Log request and response details")
@click.pass_context
def cli(ctx, userid: Optional[str], timeout: Optional[float], verbose: bool):
    """Azure PIM Tool - Activate eligible Azure roles from the command line."""
    configure_logging(verbose)

    try:
        settings = Settings.from_env()
        overrides = {}
        if userid:
            overrides["principal_id"] = userid
        if timeout is not None:
            overrides["timeout"] = timeout
        if overrides:
            settings = Settings(**{**settings.model_dump(), **overrides})
    except ValidationError as e:
        error(f"Invalid configuration: {e}")

    ctx.obj = AppContext(settings=settings)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
