# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API. Every body
# carries a `success` flag. Key listings expose only non-secret columns:
# there is no field for the hash or the plaintext key anywhere except
# the one-time GenerateKeyResponse.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response for GET /health. Confirms the API is running."""

    status: str = "ok"
    version: str
    service: str


class ErrorResponse(BaseModel):
    """Envelope for every error response (400 and 500)."""

    success: bool = False
    message: str


class GenerateKeyResponse(BaseModel):
    """
    Response for POST /generate, returned once at key creation.

    WARNING: `apiKey` is only returned in this response.
    It is never stored or retrievable after creation.
    """

    success: bool = True
    api_key: str = Field(
        alias="apiKey",
        description=(
            "The full API key. Store it securely. "
            "It will NOT be shown again."
        ),
    )
    kid: str

    model_config = ConfigDict(populate_by_name=True)

    def __repr__(self) -> str:
        return f"GenerateKeyResponse(kid='{self.kid}', apiKey='***')"


class ValidateKeyResponse(BaseModel):
    """
    Response for POST /validate.

    An unknown key and a revoked key both yield `valid: false` with no
    identity fields.
    """

    success: bool = True
    valid: bool
    kid: str | None = None
    name: str | None = None
    email: str | None = None


class KeySummaryResponse(BaseModel):
    """Non-secret view of a stored key."""

    kid: str
    name: str | None = None
    email: str | None = None
    notes: str | None = None
    created_at: datetime
    revoked: bool

    model_config = ConfigDict(from_attributes=True)


class KeyListResponse(BaseModel):
    """Response for GET /keys."""

    success: bool = True
    keys: list[KeySummaryResponse]


class RevokeKeyResponse(BaseModel):
    """Response for POST /revoke."""

    success: bool = True
    message: str = "Key revoked"
    kid: str
