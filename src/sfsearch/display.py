"""
Display helpers: plain-text renderings of tenants, records and counts.

Everything here returns strings; callers decide where to click.echo() them.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import click

from .records import Account, Contact, Task, parse_sf_datetime
from .search import CountResult
from .tenants import Tenant

DISPLAY_DATETIME_FORMAT = "%Y-%m-%d %H:%M"


def _v(value: Optional[str]) -> str:
    return value or ""


def token_preview(token: Optional[str]) -> str:
    """First 10 and last 6 characters of a token, never the whole thing."""
    if not token:
        return "(none)"
    if len(token) <= 16:
        return token[:4] + "..."
    return f"{token[:10]}...{token[-6:]}"


def format_timestamp(value: Optional[str]) -> str:
    """Render a Salesforce timestamp as 'YYYY-MM-DD HH:MM'; unparsable values pass through."""
    if not value:
        return ""
    try:
        return parse_sf_datetime(value).strftime(DISPLAY_DATETIME_FORMAT)
    except ValueError:
        return value


def _person(first: Optional[str], last: Optional[str]) -> str:
    return " ".join(p for p in (first, last) if p)


def format_tenant(tenant: Tenant) -> str:
    lines = [
        click.style(f"Salesforce tenant ({tenant.label})", bold=True),
        f"  URL:          {tenant.base_url}",
        f"  Consumer key: {token_preview(tenant.consumer_key)}",
        f"  Token:        {token_preview(tenant.access_token)}",
    ]
    return "\n".join(lines)


def format_account(account: Account) -> str:
    return (
        f"\nName: {_v(account.name)}\n"
        f"Industry: {_v(account.industry)}\n"
        f"Type: {_v(account.type)}\n"
        f"Website: {_v(account.website)}\n"
        f"Description:\n\n{_v(account.description)}\n"
    )


def format_contact(contact: Contact) -> str:
    return (
        f"\nContact Name: {_v(contact.last_name)}, {_v(contact.first_name)}\n"
        f"Account: {_v(contact.account_name)}\n"
        f"Email: {_v(contact.email)}\n"
        f"Phone: {_v(contact.phone)}\n"
        f"Description:\n\n{_v(contact.description)}\n"
    )


def format_task(task: Task) -> str:
    return (
        f"\nSubject: {_v(task.subject)}\n"
        f"Created: {format_timestamp(task.created_date)}"
        f" by {_person(task.created_by_first_name, task.created_by_last_name)}\n"
        f"Contact: {_person(task.who_first_name, task.who_last_name)}\n"
        f"Account: {_v(task.account_name)}\n"
        f"Description:\n\n{_v(task.description)}\n"
    )


def format_counts(results: Iterable[CountResult]) -> str:
    lines: List[str] = ["Record counts:"]
    for res in results:
        if res.ok:
            lines.append(f"  {res.object_name:<12} {res.total:>10,}")
        else:
            lines.append(f"  {res.object_name:<12} {'error':>10}  ({res.error.kind}: {res.error})")
    return "\n".join(lines)


def format_summary(shown: int, total: int) -> str:
    if total > shown:
        return f"Showing {shown} of {total:,} matching records"
    return f"Found {shown} record(s)"
