from urllib.parse import parse_qs, urlsplit

import pytest
from fake_http import FakeResponse, envelope

from sfsearch.exceptions import AuthRejected, QueryRejected
from sfsearch.search import (
    COUNT_OBJECTS,
    accounts_soql,
    contacts_soql,
    count_records,
    count_soql,
    search_accounts,
    search_contacts,
    search_tasks,
    tasks_soql,
)


def _soql_of(call) -> str:
    return parse_qs(urlsplit(call.url).query)["q"][0]


@pytest.mark.parametrize("f", ["Ac", "", "O'Brien", "50%"])
def test_accounts_template(f):
    assert accounts_soql(f) == (
        "SELECT Id, Name, Type, Description, Website, Industry FROM Account "
        "WHERE Name LIKE '%" + f + "%' ORDER BY Name"
    )


@pytest.mark.parametrize("f", ["smith", ""])
def test_contacts_template(f):
    assert contacts_soql(f) == (
        "SELECT Id, FirstName, LastName, Email, Account.Name, Phone, Description FROM Contact "
        f"WHERE LastName LIKE '%{f}%' OR FirstName LIKE '%{f}%' OR Account.Name LIKE '%{f}%' "
        f"OR Email LIKE '%{f}%' ORDER BY LastName"
    )


@pytest.mark.parametrize("f", ["renewal", ""])
def test_tasks_template(f):
    assert tasks_soql(f) == (
        "SELECT Id, Subject, Description, Who.FirstName, Who.LastName, CreatedBy.FirstName, "
        "CreatedBy.LastName, Account.Name, CreatedDate FROM Task "
        f"WHERE Subject LIKE '%{f}%' OR Who.LastName LIKE '%{f}%' OR Who.FirstName LIKE '%{f}%' "
        f"OR Account.Name LIKE '%{f}%' ORDER BY CreatedDate ASC"
    )


def test_empty_filter_is_wildcard_only():
    assert "LIKE '%%'" in accounts_soql("")


def test_search_accounts_sends_template(manager, fake_session, tenant):
    tenant.access_token = "T1"
    fake_session.query("/query", envelope([{"Id": "001", "Name": "Acme"}]))

    result = search_accounts(manager, tenant, "Ac")

    assert result.records[0].name == "Acme"
    assert _soql_of(fake_session.gets[0]) == accounts_soql("Ac")


def test_search_contacts_and_tasks_keep_platform_order(manager, fake_session, tenant):
    tenant.access_token = "T1"
    fake_session.query(
        "FROM%20Contact",
        envelope([{"Id": "1", "LastName": "Adams"}, {"Id": "2", "LastName": "Zhu"}]),
    )
    fake_session.query(
        "FROM%20Task",
        envelope(
            [
                {"Id": "a", "Subject": "first", "CreatedDate": "2024-01-01T00:00:00.000+0000"},
                {"Id": "b", "Subject": "second", "CreatedDate": "2024-02-01T00:00:00.000+0000"},
            ]
        ),
    )

    contacts = search_contacts(manager, tenant, "")
    tasks = search_tasks(manager, tenant, "")

    assert [c.last_name for c in contacts.records] == ["Adams", "Zhu"]
    assert [t.subject for t in tasks.records] == ["first", "second"]
    assert _soql_of(fake_session.gets[1]) == tasks_soql("")


def test_quote_in_filter_surfaces_platform_400(manager, fake_session, tenant):
    tenant.access_token = "T1"
    fake_session.query("/query", FakeResponse(400, text='[{"errorCode":"MALFORMED_QUERY"}]'))

    with pytest.raises(QueryRejected) as excinfo:
        search_accounts(manager, tenant, "O'Brien")

    assert excinfo.value.status_code == 400
    assert _soql_of(fake_session.gets[0]) == accounts_soql("O'Brien")


def test_count_records(manager, fake_session, tenant):
    tenant.access_token = "T1"
    for idx, name in enumerate(COUNT_OBJECTS):
        fake_session.query(f"FROM%20{name}", FakeResponse(200, {"totalSize": 10 * (idx + 1), "records": []}))

    results = count_records(manager, tenant)

    assert [(r.object_name, r.total) for r in results] == [
        ("Account", 10),
        ("Contact", 20),
        ("Opportunity", 30),
        ("Task", 40),
    ]
    assert all(r.ok for r in results)
    assert [_soql_of(c) for c in fake_session.gets] == [count_soql(n) for n in COUNT_OBJECTS]


def test_count_failure_does_not_abort_others(manager, fake_session, tenant):
    tenant.access_token = "T1"
    fake_session.query("FROM%20Opportunity", FakeResponse(403, text="insufficient access"))
    fake_session.query("COUNT", FakeResponse(200, {"totalSize": 5, "records": []}))

    results = count_records(manager, tenant)

    assert [r.ok for r in results] == [True, True, False, True]
    failed = results[2]
    assert failed.total is None
    assert isinstance(failed.error, QueryRejected)
    assert len(fake_session.gets) == 4


def test_count_records_reports_auth_failure(manager, fake_session, tenant):
    fake_session.token(tenant.base_url, FakeResponse(401, text="invalid_client"))

    results = count_records(manager, tenant)

    assert all(isinstance(r.error, AuthRejected) for r in results)
