"""AuthorizationGateway — group membership checks against the directory.

The caller's address is assumed to be already verified by the fronting
proxy (client certificate or SSO).  The gateway only answers "is this
person on that list?" and turns a verified address into the canonical
identity stored on the board.

INVARIANT: Group names are validated against ``[a-z0-9-]+`` before any
query; anything else is rejected without touching the directory.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from mealplan.domain.errors import AuthError, DirectoryError, MealplanError
from mealplan.services.result import ServiceResult

if TYPE_CHECKING:
    from mealplan.config.models import DirectoryConfig
    from mealplan.domain.identity import IdentityNormalizer
    from mealplan.infrastructure.directory import DirectoryClient

logger = logging.getLogger(__name__)

GROUP_NAME_RE = re.compile(r"^[a-z0-9-]+$")


def extract_part(prefix: str, suffix: str, value: str) -> str | None:
    """Return the middle of *value* if it is ``prefix + X + suffix``."""
    if len(value) < len(prefix) + len(suffix):
        return None
    if not (value.startswith(prefix) and value.endswith(suffix)):
        return None
    return value[len(prefix) : len(value) - len(suffix)]


class AuthorizationGateway:
    """Resolves group membership through a :class:`DirectoryClient`."""

    def __init__(self, client: DirectoryClient, normalizer: IdentityNormalizer) -> None:
        self._client = client
        self._normalizer = normalizer

    @property
    def normalizer(self) -> IdentityNormalizer:
        return self._normalizer

    @property
    def _config(self) -> DirectoryConfig:
        return self._client.config

    def members_of(self, group: str) -> set[str]:
        """Canonical identities of every member of *group*.

        Member entries that match neither the user shape nor the string
        shape (nested lists, kerberos principals) are skipped.

        Raises:
            DirectoryError: bad group name, directory failure, or not
                exactly one matching record.
        """
        if not GROUP_NAME_RE.match(group):
            msg = f"Invalid group name: {group!r}"
            raise DirectoryError(msg, group=group)

        records = self._client.search_groups(group)
        if len(records) != 1:
            msg = f"expected exactly one list, found {len(records)}"
            raise DirectoryError(msg, group=group, found=len(records))

        cfg = self._config
        members: set[str] = set()
        for entry in records[0]:
            name = extract_part(cfg.user_prefix, cfg.user_suffix, entry)
            if name is None:
                name = extract_part(cfg.string_prefix, cfg.string_suffix, entry)
            if name is None:
                logger.debug("Skipping member entry %s of %s", entry, group)
                continue
            members.add(self._normalizer.to_local(name))
        return members

    def is_authorized(self, group: str, identity: str) -> None:
        """Raise :class:`AuthError` unless *identity* is a member of *group*."""
        if self._normalizer.to_local(identity) not in self.members_of(group):
            address = self._normalizer.to_address(identity)
            msg = f"authenticated as {address!r}, but not authorized because not on list {group!r}"
            raise AuthError(msg, identity=identity, group=group)

    def identify(self, caller_address: str | None) -> str:
        """Canonical identity for a verified address.

        Raises:
            AuthError: no address was presented.
        """
        if caller_address is None or not caller_address.strip():
            msg = "no authenticated identity"
            raise AuthError(msg)
        return self._normalizer.to_local(caller_address)

    def authorize(self, caller_address: str | None, group: str) -> str:
        """Return the caller's identity if they belong to *group*."""
        identity = self.identify(caller_address)
        self.is_authorized(group, identity)
        return identity

    def authorize_any(self, caller_address: str | None, groups: Iterable[str]) -> str:
        """Return the caller's identity if they belong to any of *groups*.

        Groups are tried in order; directory failures propagate immediately.
        """
        identity = self.identify(caller_address)
        groups = tuple(groups)
        for group in groups:
            if identity in self.members_of(group):
                return identity
        msg = f"{self._normalizer.to_address(identity)!r} is not on any of {', '.join(groups)}"
        raise AuthError(msg, identity=identity, group=",".join(groups))


class MembershipService:
    """ServiceResult wrappers over the gateway for the request surfaces."""

    def __init__(self, gateway: AuthorizationGateway) -> None:
        self._gateway = gateway

    def members(self, group: str) -> ServiceResult:
        try:
            members = sorted(self._gateway.members_of(group))
        except MealplanError as exc:
            return ServiceResult.failure("members", exc)
        return ServiceResult(
            ok=True,
            op="members",
            data={"group": group, "count": len(members), "members": members},
        )

    def authorize(self, caller_address: str, groups: Iterable[str]) -> ServiceResult:
        groups = tuple(groups)
        try:
            identity = self._gateway.authorize_any(caller_address, groups)
        except MealplanError as exc:
            return ServiceResult.failure("authorize", exc)
        return ServiceResult(
            ok=True,
            op="authorize",
            data={"identity": identity, "groups": list(groups)},
        )
