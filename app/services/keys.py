# =============================================================================
# Key Generation & Hashing
# =============================================================================
#
# Pure functions for API key material. No FastAPI or database dependency;
# used by the credential service and the tests.
#
# KEY FORMAT:
#   sk-<kid>-<payload>
#   kid     = 6 random bytes, hex (12 chars), public lookup handle
#   payload = 32 random bytes, URL-safe base64 without padding (43 chars)
#
# DESIGN DECISION: HMAC-SHA256 keyed by a server-side secret (not bare
# SHA-256, not bcrypt). Keys carry 256 bits of entropy, so a fast
# deterministic digest allows an equality lookup on the hash column.
# The secret means a leaked table cannot be checked offline against
# candidate keys.
# =============================================================================

from __future__ import annotations

import base64
import hashlib
import hmac
import re
import secrets
from dataclasses import dataclass

KEY_PREFIX = "sk"
PAYLOAD_BYTES = 32
KID_BYTES = 6

_KEY_PATTERN = re.compile(r"^sk-([0-9a-f]{12})-[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class GeneratedKey:
    """A freshly generated credential. `key` is the only plaintext copy."""

    kid: str
    key: str

    def __repr__(self) -> str:
        return f"GeneratedKey(kid='{self.kid}', key='***')"


def _urlsafe_b64(raw: bytes) -> str:
    """Base64 with `-`/`_` in place of `+`/`/` and trailing `=` stripped."""
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_api_key() -> GeneratedKey:
    """
    Generate a new API key and its public kid.

    Draws from the OS secure random source. If that source is unavailable
    the underlying error propagates; it is not retried.
    """
    payload = _urlsafe_b64(secrets.token_bytes(PAYLOAD_BYTES))
    kid = secrets.token_hex(KID_BYTES)
    return GeneratedKey(kid=kid, key=f"{KEY_PREFIX}-{kid}-{payload}")


def hash_api_key(raw_key: str, secret: str) -> str:
    """
    HMAC-SHA256 of the key under `secret`. Returns 64-char hex digest.

    Any str is accepted: lone surrogates (valid in escaped JSON) are
    encoded with surrogatepass, so they hash instead of raising.
    """
    return hmac.new(
        secret.encode("utf-8", "surrogatepass"),
        raw_key.encode("utf-8", "surrogatepass"),
        hashlib.sha256,
    ).hexdigest()


def parse_kid(raw_key: str) -> str | None:
    """
    Recover the kid embedded in a key string, for diagnostics only.

    Returns None when the string is not in `sk-<kid>-<payload>` form.
    Validation always looks keys up by hash, never by this value.
    """
    match = _KEY_PATTERN.match(raw_key)
    return match.group(1) if match else None
