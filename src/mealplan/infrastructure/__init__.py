"""Infrastructure layer — snapshot storage, transactions, directory, mail.

This layer depends on stdlib, pydantic, and third-party clients (ldap3).
It may import from domain but never from commands, output, or web.
The Kitchen wires plugins and the authorization gateway with deferred
imports; nothing else here reaches into services.
"""
