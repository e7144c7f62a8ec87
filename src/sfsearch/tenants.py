from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional

from .exceptions import MissingCredentialsError

_logger = logging.getLogger(__name__)

PRIMARY = "primary"
SECONDARY = "secondary"


def env_names(slot: int) -> tuple[str, str, str]:
    """Environment variable names (url, key, secret) for tenant slot 1 or 2."""
    return (
        f"SALESFORCE_URL_{slot}",
        f"SALESFORCE_CONSUMER_KEY_{slot}",
        f"SALESFORCE_CONSUMER_SECRET_{slot}",
    )


# ----------------------------------------------------------------------
# Tenant
# ----------------------------------------------------------------------
@dataclass
class Tenant:
    """One Salesforce org reachable with a Connected App credential pair."""

    label: str
    base_url: str
    consumer_key: str
    consumer_secret: str = field(repr=False)

    # Filled in by SessionManager.acquire_token(); never persisted.
    access_token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.base_url = (self.base_url or "").rstrip("/")

    @property
    def is_valid(self) -> bool:
        return bool(self.base_url and self.consumer_key and self.consumer_secret)

    @classmethod
    def from_env(cls, slot: int, label: str, environ: Mapping[str, str]) -> tuple[Tenant, list[str]]:
        """Build the tenant for `slot`; also return the names of unset variables."""
        names = env_names(slot)
        values = [environ.get(name, "") for name in names]
        missing = [name for name, value in zip(names, values) if not value]
        url, key, secret = values
        return cls(label=label, base_url=url, consumer_key=key, consumer_secret=secret), missing


# ----------------------------------------------------------------------
# Registry
# ----------------------------------------------------------------------
class TenantRegistry:
    """The primary tenant, an optional secondary, and which one is selected."""

    def __init__(self, primary: Tenant, secondary: Optional[Tenant] = None) -> None:
        if not primary.is_valid:
            raise ValueError("primary tenant must have a URL, consumer key and consumer secret")
        if secondary is not None and not secondary.is_valid:
            secondary = None
        self.primary = primary
        self.secondary = secondary
        self._index = 0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> TenantRegistry:
        """Load both tenants from SALESFORCE_* variables.

        Raises MissingCredentialsError listing every unset primary variable.
        An incomplete secondary triple just means there is no secondary.
        """
        env = os.environ if environ is None else environ

        primary, missing = Tenant.from_env(1, PRIMARY, env)
        if missing:
            raise MissingCredentialsError(missing)

        secondary: Optional[Tenant]
        secondary, missing2 = Tenant.from_env(2, SECONDARY, env)
        if missing2:
            _logger.debug("Secondary tenant not configured (unset: %s)", ", ".join(missing2))
            secondary = None

        _logger.info(
            "Loaded tenants: primary=%s secondary=%s",
            primary.base_url,
            secondary.base_url if secondary else "-",
        )
        return cls(primary, secondary)

    @property
    def current(self) -> Tenant:
        """The selected tenant; always a valid one."""
        if self._index == 1 and self.secondary is not None:
            return self.secondary
        return self.primary

    @property
    def has_secondary(self) -> bool:
        return self.secondary is not None

    def select_other(self) -> Tenant:
        """Switch between primary and secondary and return the new selection.

        Without a secondary this leaves the selection alone and logs a warning.
        """
        if self.secondary is None:
            _logger.warning(
                "No secondary tenant configured (set %s); staying on %s",
                ", ".join(env_names(2)),
                self.current.base_url,
            )
            return self.current

        self._index = 1 - self._index
        _logger.info("Switched to %s tenant %s", self.current.label, self.current.base_url)
        return self.current

    def tenants(self) -> Iterator[Tenant]:
        yield self.primary
        if self.secondary is not None:
            yield self.secondary
