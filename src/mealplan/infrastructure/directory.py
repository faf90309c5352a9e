"""DirectoryClient — one-shot LDAP lookups of group records.

Each call opens a fresh LDAPS connection, verifies the server certificate,
runs a single subtree search for ``(cn=<group>)``, and closes the
connection.  There is no pooling or caching; callers that need low latency
should cache in front of the authorization gateway.
"""

from __future__ import annotations

import logging
import ssl
from typing import TYPE_CHECKING, Any

import ldap3
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from mealplan.domain.errors import DirectoryError

if TYPE_CHECKING:
    from mealplan.config.models import DirectoryConfig

logger = logging.getLogger(__name__)


class DirectoryClient:
    """Queries the configured directory server for group member entries."""

    def __init__(self, config: DirectoryConfig) -> None:
        self._config = config

    @property
    def config(self) -> DirectoryConfig:
        return self._config

    def _server(self) -> ldap3.Server:
        tls = ldap3.Tls(
            validate=ssl.CERT_REQUIRED,
            ca_certs_file=self._config.ca_certs_file,
            valid_names=[self._config.host],
        )
        return ldap3.Server(
            self._config.host,
            port=self._config.port,
            use_ssl=True,
            tls=tls,
            get_info=ldap3.NONE,
            connect_timeout=self._config.timeout,
        )

    def search_groups(self, group: str) -> list[list[str]]:
        """Return the raw member entries of every record named *group*.

        One inner list per matching record, so the caller can tell "no such
        group" and "ambiguous group" apart from "group with no members".

        Raises:
            DirectoryError: connection, TLS, timeout, or protocol failure.
        """
        cfg = self._config
        search_filter = f"(cn={escape_filter_chars(group)})"
        logger.debug("Directory search %s under %s", search_filter, cfg.search_base)
        try:
            with ldap3.Connection(
                self._server(),
                auto_bind=True,
                read_only=True,
                receive_timeout=cfg.timeout,
                raise_exceptions=True,
            ) as conn:
                conn.search(
                    search_base=cfg.search_base,
                    search_filter=search_filter,
                    search_scope=ldap3.SUBTREE,
                    dereference_aliases=ldap3.DEREF_NEVER,
                    attributes=[cfg.member_attribute],
                    time_limit=max(int(cfg.timeout), 1),
                )
                response: list[dict[str, Any]] = list(conn.response or [])
        except LDAPException as exc:
            msg = f"Directory query for {group!r} failed: {exc}"
            raise DirectoryError(msg, group=group, server=cfg.host) from exc

        records: list[list[str]] = []
        for entry in response:
            if entry.get("type") != "searchResEntry":
                continue
            values = entry.get("attributes", {}).get(cfg.member_attribute, [])
            if isinstance(values, str):
                values = [values]
            records.append([str(v) for v in values])
        return records
