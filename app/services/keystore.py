# =============================================================================
# Key Store — Relational Storage for Hashed Credentials
# =============================================================================
#
# DESIGN DECISION: A small `KeyStore` protocol in front of the database.
# The credential service only depends on the protocol, so tests can pass
# a mock and deployments can swap the database URL without code changes.
#
# SqlKeyStore executes exactly one parameterized statement per call:
#   insert_key  → INSERT
#   find_active → SELECT ... WHERE hash = ? AND revoked = false
#   revoke      → UPDATE ... SET revoked = true WHERE kid = ?
#   list_keys   → SELECT (non-secret columns only)
#
# Each call opens its own session, so connections go back to the pool as
# soon as the statement finishes. Single-statement atomicity comes from
# the database; there is no in-process locking.
#
# Any driver or SQLAlchemy failure is logged here and re-raised as
# StorageError. Callers never see driver details.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.models import ApiKeyRecord
from app.errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveKey:
    """The identity fields of a matched, non-revoked key."""

    kid: str
    name: str | None
    email: str | None


@dataclass(frozen=True)
class KeySummary:
    """Non-secret view of a stored key. Never carries the hash."""

    kid: str
    name: str | None
    email: str | None
    notes: str | None
    created_at: datetime
    revoked: bool


class KeyStore(Protocol):
    """Storage operations used by the credential service."""

    async def insert_key(
        self,
        kid: str,
        key_hash: str,
        name: str | None,
        email: str | None,
        notes: str | None,
    ) -> None: ...

    async def find_active(self, key_hash: str) -> ActiveKey | None: ...

    async def revoke(self, kid: str) -> None: ...

    async def list_keys(self) -> list[KeySummary]: ...


class SqlKeyStore:
    """KeyStore backed by the api_keys table through async SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert_key(
        self,
        kid: str,
        key_hash: str,
        name: str | None,
        email: str | None,
        notes: str | None,
    ) -> None:
        stmt = insert(ApiKeyRecord).values(
            kid=kid,
            name=name,
            email=email,
            notes=notes,
            hash=key_hash,
            revoked=False,
        )
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.exception("Failed to insert key kid=%s", kid)
            raise StorageError(f"insert failed: {e}") from e

    async def find_active(self, key_hash: str) -> ActiveKey | None:
        stmt = (
            select(ApiKeyRecord.kid, ApiKeyRecord.name, ApiKeyRecord.email)
            .where(
                ApiKeyRecord.hash == key_hash,
                ApiKeyRecord.revoked.is_(False),
            )
            .limit(1)
        )
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).first()
        except (SQLAlchemyError, OSError) as e:
            logger.exception("Failed to look up key by hash")
            raise StorageError(f"lookup failed: {e}") from e

        if row is None:
            return None
        return ActiveKey(kid=row.kid, name=row.name, email=row.email)

    async def revoke(self, kid: str) -> None:
        stmt = (
            update(ApiKeyRecord)
            .where(ApiKeyRecord.kid == kid)
            .values(revoked=True)
        )
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.exception("Failed to revoke key kid=%s", kid)
            raise StorageError(f"revoke failed: {e}") from e

    async def list_keys(self) -> list[KeySummary]:
        stmt = select(
            ApiKeyRecord.kid,
            ApiKeyRecord.name,
            ApiKeyRecord.email,
            ApiKeyRecord.notes,
            ApiKeyRecord.created_at,
            ApiKeyRecord.revoked,
        ).order_by(ApiKeyRecord.created_at.desc(), ApiKeyRecord.id.desc())
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        except (SQLAlchemyError, OSError) as e:
            logger.exception("Failed to list keys")
            raise StorageError(f"list failed: {e}") from e

        return [
            KeySummary(
                kid=row.kid,
                name=row.name,
                email=row.email,
                notes=row.notes,
                created_at=row.created_at,
                revoked=bool(row.revoked),
            )
            for row in rows
        ]
