"""
Interactive Session Module

Numbered main menu: search Accounts / Contacts / Tasks, switch tenant, exit.
"""

from __future__ import annotations

import logging
from typing import Callable, List

import click

from .api import SessionManager
from .display import (
    format_account,
    format_contact,
    format_counts,
    format_summary,
    format_task,
    format_tenant,
)
from .exceptions import SalesforceError
from .search import count_records, search_accounts, search_contacts, search_tasks
from .tenants import TenantRegistry

_logger = logging.getLogger(__name__)

MENU_OPTIONS = [
    "Search accounts",
    "Search contacts",
    "Search tasks",
    "Switch tenant",
    "Exit",
]


def report_error(context: str, err: SalesforceError) -> None:
    click.echo(f"Error {context}: {err.kind}: {err}", err=True)


class InteractiveSession:
    """Menu loop over a tenant registry. Query errors never end the session."""

    def __init__(self, registry: TenantRegistry, manager: SessionManager) -> None:
        self.registry = registry
        self.manager = manager

    def run(self) -> int:
        while True:
            self._show_menu()
            try:
                option = click.prompt("Enter your option", default="", show_default=False)
            except click.Abort:
                break

            option = option.strip()
            try:
                if option == "1":
                    self._search_accounts()
                elif option == "2":
                    self._search_contacts()
                elif option == "3":
                    self._search_tasks()
                elif option == "4":
                    self.switch_tenant()
                elif option == "5":
                    break
                else:
                    click.echo("\nInvalid option")
            except click.Abort:
                break

        click.echo("\nExiting...")
        return 0

    def _show_menu(self) -> None:
        click.echo(f"\nMain Menu ({self.registry.current.label}: {self.registry.current.base_url}):\n")
        for idx, label in enumerate(MENU_OPTIONS, 1):
            click.echo(f"{idx}. {label}")
        click.echo()

    # ------------------------------------------------------------------
    # Tenant
    # ------------------------------------------------------------------
    def show_tenant(self) -> None:
        click.echo(format_tenant(self.registry.current))
        click.echo()
        click.echo(format_counts(count_records(self.manager, self.registry.current)))

    def switch_tenant(self) -> None:
        before = self.registry.current
        tenant = self.registry.select_other()
        if tenant is before:
            click.echo("\nNo secondary tenant configured; still using " + tenant.base_url)
            return

        click.echo(f"\nSwitched to {tenant.label} tenant {tenant.base_url}")
        if not tenant.access_token:
            try:
                self.manager.acquire_token(tenant)
            except SalesforceError as e:
                report_error("getting access token", e)
                return
        self.show_tenant()

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------
    def _run_search(
        self,
        prompt_text: str,
        context: str,
        search: Callable,
        formatter: Callable[..., str],
    ) -> None:
        text = click.prompt(f"\n{prompt_text}", default="", show_default=False)
        try:
            envelope = search(self.manager, self.registry.current, text)
        except SalesforceError as e:
            _logger.debug("Search failed", exc_info=True)
            report_error(context, e)
            return

        rendered: List[str] = [formatter(rec) for rec in envelope.records]
        for block in rendered:
            click.echo(block)
        click.echo(format_summary(len(envelope.records), envelope.total_size))

    def _search_accounts(self) -> None:
        self._run_search("Enter account name filter", "retrieving accounts", search_accounts, format_account)

    def _search_contacts(self) -> None:
        self._run_search(
            "Enter contact first, last name, email or account name filter",
            "retrieving contacts",
            search_contacts,
            format_contact,
        )

    def _search_tasks(self) -> None:
        self._run_search(
            "Enter task subject, contact name or account name filter",
            "retrieving tasks",
            search_tasks,
            format_task,
        )
