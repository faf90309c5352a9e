"""Identity canonicalization between local names and qualified addresses.

A person is either a local name (``dmz``) or an address outside the home
domain (``someone@example.org``).  Addresses inside the home domain
(``dmz@mit.edu``) canonicalize to the local name, so both forms compare
equal once passed through :meth:`IdentityNormalizer.to_local`.

INVARIANT: ``to_local(to_address(x)) == x`` for every local-form ``x``.
"""

from __future__ import annotations

DEFAULT_DOMAIN = "mit.edu"


class IdentityNormalizer:
    """Maps identities between local and address form for one fixed domain."""

    def __init__(self, domain: str = DEFAULT_DOMAIN) -> None:
        self.domain = domain.lower().lstrip("@")

    @property
    def suffix(self) -> str:
        return f"@{self.domain}"

    def to_local(self, address: str) -> str:
        """Lowercase *address* and strip the home-domain suffix if present."""
        lowered = address.strip().lower()
        if lowered.endswith(self.suffix):
            return lowered[: -len(self.suffix)]
        return lowered

    @staticmethod
    def is_local_form(identity: str) -> bool:
        return "@" not in identity

    def to_address(self, identity: str) -> str:
        """Return the qualified address for *identity*."""
        if self.is_local_form(identity):
            return f"{identity}{self.suffix}"
        return identity
