"""Domain layer — the board document, slot rules, identities, and errors.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""
