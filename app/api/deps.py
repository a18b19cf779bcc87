# =============================================================================
# API Dependencies — FastAPI Dependency Injection
# =============================================================================
#
# The credential service is built once by the application lifespan and
# stored on `app.state`. Route handlers receive it through
# Depends(get_credential_service) rather than importing a global, so
# tests can substitute it with app.dependency_overrides.
# =============================================================================

from __future__ import annotations

from fastapi import Request

from app.services.credentials import CredentialService


def get_credential_service(request: Request) -> CredentialService:
    """Return the CredentialService created at startup."""
    return request.app.state.credential_service
