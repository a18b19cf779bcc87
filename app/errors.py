"""Exception hierarchy for the API key service.

    KeyServiceError
    ├── ClientInputError    missing or malformed caller input (HTTP 400)
    ├── StorageError        key store unreachable or statement failed (HTTP 500)
    └── FatalStartupError   the process must not serve traffic
"""

from __future__ import annotations


class KeyServiceError(Exception):
    """Base exception for all key service errors."""


class ClientInputError(KeyServiceError):
    """A required field is missing or invalid. The message is shown to the caller."""


class StorageError(KeyServiceError):
    """The key store failed. The message is logged, never returned to the caller."""


class FatalStartupError(KeyServiceError):
    """Startup precondition failed (secret, random source, or store)."""
