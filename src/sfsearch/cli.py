from __future__ import annotations

import json
import logging
from typing import Callable, Optional

import click

from . import __version__
from .api import SessionManager
from .display import (
    format_account,
    format_contact,
    format_counts,
    format_summary,
    format_task,
    format_tenant,
    token_preview,
)
from .env_loader import load_env_files
from .exceptions import ConfigError, MissingCredentialsError, SalesforceError
from .interactive import InteractiveSession, report_error
from .logging_config import configure_logging
from .search import count_records, search_accounts, search_contacts, search_tasks
from .tenants import TenantRegistry

_logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 1


def _missing_vars_message(e: MissingCredentialsError) -> str:
    lines = ["Error: Missing required environment variables:", ""]
    lines += [f"  - {name}" for name in e.missing]
    lines += [
        "",
        "Set these in the environment (or a .env file in the current directory).",
    ]
    return "\n".join(lines)


def _open_session(ctx: click.Context) -> tuple[TenantRegistry, SessionManager]:
    """Build the registry and session manager, exiting 1 on bad configuration."""
    state = ctx.find_root().obj
    if "registry" in state:
        return state["registry"], state["manager"]

    try:
        registry = TenantRegistry.from_env()
        manager = SessionManager.from_env()
    except MissingCredentialsError as e:
        click.echo(_missing_vars_message(e), err=True)
        ctx.exit(EXIT_CONFIG_ERROR)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_CONFIG_ERROR)

    if state.get("secondary"):
        registry.select_other()

    ctx.find_root().call_on_close(manager.close)
    state["registry"] = registry
    state["manager"] = manager
    return registry, manager


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.version_option(__version__, "--version", prog_name="sfsearch")
@click.option(
    "-v",
    "--verbose",
    "loglevel",
    flag_value=logging.INFO,
    default=None,
    help="Enable INFO logs.",
)
@click.option(
    "-vv",
    "--very-verbose",
    "loglevel",
    flag_value=logging.DEBUG,
    help="Enable DEBUG logs.",
)
@click.option(
    "--secondary",
    is_flag=True,
    help="Start on the secondary tenant (SALESFORCE_*_2).",
)
@click.pass_context
def cli(ctx: click.Context, loglevel: Optional[int], secondary: bool) -> None:
    """Search Salesforce Accounts, Contacts and Tasks across two tenants.

    Without a subcommand, starts the interactive menu.
    """
    configure_logging(loglevel)
    load_env_files()
    _logger.debug("CLI start, version=%s", __version__)
    ctx.obj = {"secondary": secondary}

    if ctx.invoked_subcommand is not None:
        return

    click.echo("\n\nSalesforce CLI")
    click.echo("--------------\n")

    registry, manager = _open_session(ctx)
    try:
        manager.acquire_token(registry.current)
    except SalesforceError as e:
        report_error("getting access token", e)
        ctx.exit(1)

    session = InteractiveSession(registry, manager)
    session.show_tenant()
    ctx.exit(session.run())


@cli.command("login")
@click.pass_context
def cmd_login(ctx: click.Context) -> None:
    """Fetch a new token for the selected tenant."""
    registry, manager = _open_session(ctx)
    try:
        token = manager.acquire_token(registry.current)
    except SalesforceError as e:
        click.echo(f"❌  Login failed: {e.kind}: {e}", err=True)
        raise click.Abort() from None
    click.echo(f"✅  Obtained access token for {registry.current.base_url}")
    click.echo(f"Token preview: {token_preview(token)}")


def _search_command(name: str, search: Callable, formatter: Callable[..., str], help_text: str) -> click.Command:
    @click.command(name, help=help_text)
    @click.argument("text", required=False, default="")
    @click.pass_context
    def _cmd(ctx: click.Context, text: str) -> None:
        registry, manager = _open_session(ctx)
        try:
            envelope = search(manager, registry.current, text)
        except SalesforceError as e:
            raise click.ClickException(f"retrieving {name}: {e.kind}: {e}") from e
        for rec in envelope.records:
            click.echo(formatter(rec))
        click.echo(format_summary(len(envelope.records), envelope.total_size))

    return _cmd


cli.add_command(
    _search_command(
        "accounts",
        search_accounts,
        format_account,
        "Search Accounts whose Name contains TEXT.",
    )
)
cli.add_command(
    _search_command(
        "contacts",
        search_contacts,
        format_contact,
        "Search Contacts by first/last name, email or account name.",
    )
)
cli.add_command(
    _search_command(
        "tasks",
        search_tasks,
        format_task,
        "Search Tasks by subject, contact name or account name.",
    )
)


@cli.command("counts")
@click.pass_context
def cmd_counts(ctx: click.Context) -> None:
    """Show Account, Contact, Opportunity and Task counts."""
    registry, manager = _open_session(ctx)
    results = count_records(manager, registry.current)
    click.echo(format_tenant(registry.current))
    click.echo(format_counts(results))


@cli.command("query")
@click.argument("soql")
@click.option("--pretty", is_flag=True, help="Pretty-print JSON.")
@click.pass_context
def cmd_query(ctx: click.Context, soql: str, pretty: bool) -> None:
    """Run a raw SOQL query (first result page only)."""
    registry, manager = _open_session(ctx)
    try:
        res = manager.query(registry.current, soql)
    except SalesforceError as e:
        raise click.ClickException(f"{e.kind}: {e}") from e
    click.echo(json.dumps(res, indent=2 if pretty else None))
