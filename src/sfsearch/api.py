from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
from urllib.parse import quote

import requests

from .exceptions import (
    AuthRejected,
    ConfigError,
    DecodeError,
    MalformedAuthResponse,
    QueryRejected,
    TransportError,
)
from .records import QueryEnvelope
from .tenants import Tenant

_logger = logging.getLogger(__name__)

API_VERSION = "v54.0"
DEFAULT_TIMEOUT = 30.0
TIMEOUT_ENV = "SALESFORCE_HTTP_TIMEOUT"

T = TypeVar("T")


def token_url(tenant: Tenant) -> str:
    return f"{tenant.base_url}/services/oauth2/token"


def query_url(tenant: Tenant, soql: str) -> str:
    # quote() rather than urlencode(): spaces must go out as %20, not '+'
    return f"{tenant.base_url}/services/data/{API_VERSION}/query?q={quote(soql, safe='')}"


# ----------------------------------------------------------------------
# Session manager
# ----------------------------------------------------------------------
class SessionManager:
    """Client-credentials login plus authenticated SOQL queries for a tenant.

    The bearer token lives on the Tenant itself; this class only replaces it.
    Expiry is not tracked: a 401 from /query triggers one re-login and one
    retry of the same query.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls) -> SessionManager:
        raw = os.getenv(TIMEOUT_ENV)
        if not raw:
            return cls()
        try:
            timeout = float(raw)
        except ValueError:
            raise ConfigError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}") from None
        if timeout <= 0:
            raise ConfigError(f"{TIMEOUT_ENV} must be positive, got {raw!r}")
        return cls(timeout=timeout)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> SessionManager:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --------------------------- Token acquirer ----------------------

    def acquire_token(self, tenant: Tenant) -> str:
        """Perform the OAuth2 client-credentials flow and store the token on `tenant`."""
        url = token_url(tenant)
        data = {
            "grant_type": "client_credentials",
            "client_id": tenant.consumer_key,
            "client_secret": tenant.consumer_secret,
        }

        _logger.debug("Requesting access token from %s", url)
        r = self._send(
            "POST",
            url,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        try:
            if r.status_code != 200:
                _logger.error("Token request to %s failed with HTTP %s", url, r.status_code)
                raise AuthRejected(r.status_code, r.text)

            try:
                payload = r.json()
            except ValueError:
                raise MalformedAuthResponse(r.text) from None

            token = payload.get("access_token") if isinstance(payload, dict) else None
            if not isinstance(token, str) or not token:
                raise MalformedAuthResponse(r.text)
        finally:
            r.close()

        tenant.access_token = token
        _logger.info("Obtained access token for %s tenant %s", tenant.label, tenant.base_url)
        return token

    # --------------------------- Query executor ----------------------

    def execute(self, tenant: Tenant, soql: str, record_type: Type[T]) -> QueryEnvelope[T]:
        """Run `soql` and decode the first result page into `record_type` rows."""
        payload, raw = self._fetch(tenant, soql)
        try:
            return QueryEnvelope.decode(payload, record_type)
        except DecodeError as e:
            raise DecodeError(e.reason, raw, 200) from e

    def query(self, tenant: Tenant, soql: str) -> Dict[str, Any]:
        """Run `soql` and return the raw JSON object of the first result page.

        401 -> re-acquire the token and retry once. Anything else that is not
        200, on either attempt, raises QueryRejected.
        """
        return self._fetch(tenant, soql)[0]

    def _fetch(self, tenant: Tenant, soql: str) -> Tuple[Dict[str, Any], str]:
        if not tenant.access_token:
            _logger.debug("No token held for %s tenant; acquiring one", tenant.label)
            self.acquire_token(tenant)

        url = query_url(tenant, soql)
        _logger.debug("SOQL: %s", soql)

        r = self._get_authorized(tenant, url)
        if r.status_code == 401:
            r.close()
            _logger.info("Access token for %s tenant rejected (401); refreshing", tenant.label)
            self.acquire_token(tenant)
            r = self._get_authorized(tenant, url)

        try:
            if r.status_code != 200:
                _logger.error("Query failed with HTTP %s for %s", r.status_code, tenant.base_url)
                raise QueryRejected(r.status_code, r.text)
            raw = r.text
            try:
                payload = r.json()
            except ValueError as e:
                raise DecodeError(f"response is not valid JSON: {e}", raw, r.status_code) from e
        finally:
            r.close()

        if not isinstance(payload, dict):
            raise DecodeError(f"expected a JSON object, got {type(payload).__name__}", raw, 200)
        return payload, raw

    # --------------------------- HTTP wrappers -----------------------

    def _get_authorized(self, tenant: Tenant, url: str) -> requests.Response:
        headers = {"Authorization": f"Bearer {tenant.access_token}"}
        return self._send("GET", url, headers=headers)

    def _send(
        self,
        method: str,
        url: str,
        *,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """Single request, no retries; transport failures become TransportError."""
        # Log the endpoint only; the query string carries the SOQL
        endpoint = url.split("?", 1)[0]
        try:
            r = self.session.request(
                method,
                url,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            _logger.warning("%s %s failed: %s", method, endpoint, e)
            raise TransportError(endpoint, e) from e
        _logger.debug("%s %s -> HTTP %s", method, endpoint, r.status_code)
        return r
