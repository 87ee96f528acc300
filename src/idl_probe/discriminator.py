"""Account discriminators: the 8-byte tag that starts every account's data."""

from __future__ import annotations

import hashlib

DISCRIMINATOR_SIZE = 8


def account_discriminator(account_name: str) -> bytes:
    """Return the first 8 bytes of ``sha256("account:" + account_name)``."""
    digest = hashlib.sha256(f"account:{account_name}".encode("utf-8")).digest()
    return digest[:DISCRIMINATOR_SIZE]
