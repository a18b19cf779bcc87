# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming INTO the API. Field names
# on the wire follow the existing JSON contract (`apiKey` in camelCase);
# Python attributes are snake_case via aliases.
#
# DESIGN DECISION: Required-by-contract fields (`apiKey`, `kid`) are
# Optional in the schema. A missing value is reported by the credential
# service as a 400 "apiKey required" / "kid required", matching the
# public error messages, instead of a schema-level validation error.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class GenerateKeyRequest(BaseModel):
    """
    Request body for POST /generate.

    Example:
        {"name": "frontend-app", "email": "ops@example.com"}
    """

    name: str | None = Field(
        default=None,
        description="Label for the key owner",
        examples=["frontend-app"],
    )
    email: str | None = Field(
        default=None,
        description="Contact email for the key owner",
        examples=["ops@example.com"],
    )
    notes: str | None = Field(
        default=None,
        description="Free-text notes, stored with the key",
    )


class ValidateKeyRequest(BaseModel):
    """Request body for POST /validate."""

    api_key: str | None = Field(
        default=None,
        alias="apiKey",
        description="The full plaintext API key to check",
        examples=["sk-0123456789ab-..."],
    )

    model_config = ConfigDict(populate_by_name=True)


class RevokeKeyRequest(BaseModel):
    """Request body for POST /revoke."""

    kid: str | None = Field(
        default=None,
        description="Public identifier of the key to revoke",
        examples=["0123456789ab"],
    )
