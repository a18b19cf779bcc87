# =============================================================================
# Database Models — SQLAlchemy ORM
# =============================================================================
#
# SCHEMA OVERVIEW:
#
# ┌──────────────────────────────────────────────┐
# │  api_keys                                    │
# ├──────────────────────────────────────────────┤
# │ id (PK)                                      │
# │ kid          (unique, public identifier)     │
# │ name, email, notes (caller metadata)         │
# │ hash         (HMAC-SHA256 hex, indexed)      │
# │ revoked      (bool, false → true only)       │
# │ created_at   (server default now())          │
# └──────────────────────────────────────────────┘
#
# DESIGN DECISIONS:
#
# 1. Only the keyed hash of a key is stored. The plaintext is returned
#    once at generation and then discarded.
#
# 2. `hash` is indexed but not unique. Collisions are not expected from
#    256-bit random keys, so no constraint is enforced.
#
# 3. The mapped class is used to build single Core statements
#    (insert/select/update) in app/services/keystore.py. There is no
#    session-level object tracking.
# =============================================================================

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text, false, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class. Holds the table metadata."""

    pass


class ApiKeyRecord(Base):
    """
    A hashed API key credential.

    Created only by generation, mutated only by revocation, never deleted.
    """

    __tablename__ = "api_keys"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )

    # Public, non-secret lookup handle: 12 hex chars
    kid: Mapped[str] = mapped_column(
        String(32), nullable=False, unique=True,
    )

    # Caller-supplied metadata, stored as-is
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # HMAC-SHA256 hex digest of the full key, never the plaintext
    hash: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True,
    )

    revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<ApiKeyRecord(id={self.id}, kid='{self.kid}', "
            f"revoked={self.revoked})>"
        )
