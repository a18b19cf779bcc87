# =============================================================================
# Credential Service — API Key Lifecycle
# =============================================================================
#
# generate → hash → store → validate → revoke → enumerate
#
# The service holds the signing secret and a KeyStore. It never stores
# or logs plaintext keys; log lines identify keys by kid only.
#
# DESIGN DECISION: Revoked and unknown keys both validate as
# `valid=False`. A caller cannot tell whether a key was ever issued.
#
# DESIGN DECISION: Revoke is permissive. Revoking an unknown or already
# revoked kid succeeds without an existence check.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.errors import ClientInputError
from app.services.keys import GeneratedKey, generate_api_key, hash_api_key, parse_kid
from app.services.keystore import KeyStore, KeySummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a presented key."""

    valid: bool
    kid: str | None = None
    name: str | None = None
    email: str | None = None


def _blank_to_none(value: str | None) -> str | None:
    return value if value else None


class CredentialService:
    """Issues, validates, revokes and lists API keys."""

    def __init__(self, store: KeyStore, secret: str):
        self._store = store
        self._secret = secret

    async def generate(
        self,
        name: str | None = None,
        email: str | None = None,
        notes: str | None = None,
    ) -> GeneratedKey:
        """
        Create a key and persist its hash.

        The returned GeneratedKey holds the only copy of the plaintext.
        A StorageError from the insert propagates; the plaintext is then
        simply dropped and no record exists.
        """
        generated = generate_api_key()
        await self._store.insert_key(
            kid=generated.kid,
            key_hash=hash_api_key(generated.key, self._secret),
            name=_blank_to_none(name),
            email=_blank_to_none(email),
            notes=_blank_to_none(notes),
        )
        logger.info("API key generated: kid=%s", generated.kid)
        return generated

    async def validate(self, raw_key: str | None) -> ValidationResult:
        """
        Check a presented key against active records.

        Raises:
            ClientInputError: `raw_key` is missing or empty.
        """
        if not raw_key:
            raise ClientInputError("apiKey required")

        match = await self._store.find_active(hash_api_key(raw_key, self._secret))
        if match is None:
            logger.info(
                "API key rejected: claimed kid=%s", parse_kid(raw_key) or "-",
            )
            return ValidationResult(valid=False)

        return ValidationResult(
            valid=True, kid=match.kid, name=match.name, email=match.email,
        )

    async def revoke(self, kid: str | None) -> str:
        """
        Mark the key `kid` as revoked. Idempotent.

        Raises:
            ClientInputError: `kid` is missing or empty.
        """
        if not kid:
            raise ClientInputError("kid required")

        await self._store.revoke(kid)
        logger.info("API key revoked: kid=%s", kid)
        return kid

    async def list_keys(self) -> list[KeySummary]:
        """All keys' non-secret fields, newest first."""
        return await self._store.list_keys()
