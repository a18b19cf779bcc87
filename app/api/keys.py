# =============================================================================
# Keys API — Generate, Validate, List, Revoke
# =============================================================================
#
# Thin HTTP layer over CredentialService. Errors are not caught here:
# ClientInputError and StorageError propagate to the exception handlers
# registered in app/main.py, which render the {success, message} envelope.
#
# DESIGN DECISION: The raw API key is only returned ONCE, by
# POST /generate. Listings expose kid and metadata, never the hash.
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_credential_service
from app.models.requests import (
    GenerateKeyRequest,
    RevokeKeyRequest,
    ValidateKeyRequest,
)
from app.models.responses import (
    ErrorResponse,
    GenerateKeyResponse,
    KeyListResponse,
    KeySummaryResponse,
    RevokeKeyResponse,
    ValidateKeyResponse,
)
from app.services.credentials import CredentialService

router = APIRouter(tags=["Keys"])

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Missing or invalid input"},
    500: {"model": ErrorResponse, "description": "Key store error"},
}


# ---------------------------------------------------------------------------
# POST /generate — Create API Key
# ---------------------------------------------------------------------------


@router.post(
    "/generate",
    response_model=GenerateKeyResponse,
    responses=_ERRORS,
    summary="Generate a new API key",
    description=(
        "Generate a new API key. The raw key is only returned in "
        "this response. Store it securely."
    ),
)
async def generate_key(
    request: GenerateKeyRequest | None = None,
    service: CredentialService = Depends(get_credential_service),
) -> GenerateKeyResponse:
    request = request or GenerateKeyRequest()
    generated = await service.generate(
        name=request.name, email=request.email, notes=request.notes,
    )
    return GenerateKeyResponse(api_key=generated.key, kid=generated.kid)


# ---------------------------------------------------------------------------
# POST /validate — Check API Key
# ---------------------------------------------------------------------------


@router.post(
    "/validate",
    response_model=ValidateKeyResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
    summary="Validate an API key",
    description=(
        "Returns valid=true with the key's kid, name and email when the "
        "key is active. Unknown and revoked keys both return valid=false."
    ),
)
async def validate_key(
    request: ValidateKeyRequest | None = None,
    service: CredentialService = Depends(get_credential_service),
) -> ValidateKeyResponse:
    raw_key = request.api_key if request else None
    result = await service.validate(raw_key)
    return ValidateKeyResponse(
        valid=result.valid,
        kid=result.kid,
        name=result.name,
        email=result.email,
    )


# ---------------------------------------------------------------------------
# GET /keys — List API Keys
# ---------------------------------------------------------------------------


@router.get(
    "/keys",
    response_model=KeyListResponse,
    responses={500: _ERRORS[500]},
    summary="List all API keys",
)
async def list_keys(
    service: CredentialService = Depends(get_credential_service),
) -> KeyListResponse:
    """List all API keys (never includes raw key or hash)."""
    keys = await service.list_keys()
    return KeyListResponse(
        keys=[KeySummaryResponse.model_validate(k) for k in keys],
    )


# ---------------------------------------------------------------------------
# POST /revoke — Revoke API Key
# ---------------------------------------------------------------------------


@router.post(
    "/revoke",
    response_model=RevokeKeyResponse,
    responses=_ERRORS,
    summary="Revoke an API key",
    description=(
        "Permanently disable the key identified by kid. Revoking an "
        "unknown or already revoked kid also succeeds."
    ),
)
async def revoke_key(
    request: RevokeKeyRequest | None = None,
    service: CredentialService = Depends(get_credential_service),
) -> RevokeKeyResponse:
    kid = await service.revoke(request.kid if request else None)
    return RevokeKeyResponse(kid=kid)
