from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .api import SessionManager
from .exceptions import SalesforceError
from .records import Account, Contact, CountOnly, QueryEnvelope, Task
from .tenants import Tenant

_logger = logging.getLogger(__name__)

# Objects summarised by count_records(), in display order.
COUNT_OBJECTS = ("Account", "Contact", "Opportunity", "Task")


# ----------------------------------------------------------------------
# SOQL builders
# ----------------------------------------------------------------------
# The filter is inserted verbatim between the % wildcards. A quote in the
# filter produces invalid SOQL and the platform answers 400.


def accounts_soql(name_filter: str) -> str:
    return (
        "SELECT Id, Name, Type, Description, Website, Industry FROM Account "
        f"WHERE Name LIKE '%{name_filter}%' ORDER BY Name"
    )


def contacts_soql(contact_filter: str) -> str:
    f = contact_filter
    return (
        "SELECT Id, FirstName, LastName, Email, Account.Name, Phone, Description FROM Contact "
        f"WHERE LastName LIKE '%{f}%' OR FirstName LIKE '%{f}%' "
        f"OR Account.Name LIKE '%{f}%' OR Email LIKE '%{f}%' ORDER BY LastName"
    )


def tasks_soql(task_filter: str) -> str:
    f = task_filter
    return (
        "SELECT Id, Subject, Description, Who.FirstName, Who.LastName, "
        "CreatedBy.FirstName, CreatedBy.LastName, Account.Name, CreatedDate FROM Task "
        f"WHERE Subject LIKE '%{f}%' OR Who.LastName LIKE '%{f}%' "
        f"OR Who.FirstName LIKE '%{f}%' OR Account.Name LIKE '%{f}%' "
        "ORDER BY CreatedDate ASC"
    )


def count_soql(object_name: str) -> str:
    return f"SELECT COUNT() FROM {object_name}"


# ----------------------------------------------------------------------
# Typed searches
# ----------------------------------------------------------------------
def search_accounts(manager: SessionManager, tenant: Tenant, name_filter: str) -> QueryEnvelope[Account]:
    """Accounts whose Name contains `name_filter`, ordered by Name."""
    return manager.execute(tenant, accounts_soql(name_filter), Account)


def search_contacts(manager: SessionManager, tenant: Tenant, contact_filter: str) -> QueryEnvelope[Contact]:
    """Contacts matching on first/last name, email or account name, ordered by LastName."""
    return manager.execute(tenant, contacts_soql(contact_filter), Contact)


def search_tasks(manager: SessionManager, tenant: Tenant, task_filter: str) -> QueryEnvelope[Task]:
    """Tasks matching on subject, contact name or account name, oldest first."""
    return manager.execute(tenant, tasks_soql(task_filter), Task)


# ----------------------------------------------------------------------
# Counts
# ----------------------------------------------------------------------
@dataclass
class CountResult:
    object_name: str
    total: Optional[int] = None
    error: Optional[SalesforceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def count_records(manager: SessionManager, tenant: Tenant) -> List[CountResult]:
    """Run SELECT COUNT() for each of COUNT_OBJECTS.

    A failing object is reported in its CountResult; the others still run.
    """
    results: List[CountResult] = []
    for name in COUNT_OBJECTS:
        try:
            envelope = manager.execute(tenant, count_soql(name), CountOnly)
        except SalesforceError as e:
            _logger.warning("Count of %s failed: %s", name, e)
            results.append(CountResult(name, error=e))
            continue
        results.append(CountResult(name, total=envelope.total_size))
    return results
